# producoes/usecases/registrar_producao.py
"""
UC: Registrar, editar, excluir e duplicar PRODUÇÕES.

Cada operação grava a produção (fase 1) e recalcula o total do período
dono (fase 2) dentro da mesma transação: quem chama já enxerga o total
atualizado e uma falha do banco desfaz as duas fases.

Obs.:
- O período é atribuído uma única vez, na criação. Editar a data NÃO
  move a produção de período, a menos que ``reagrupar=True``.
- Edição, exclusão e duplicação seguem a política de mesmo dia
  (producoes.domain.policies).
"""

from __future__ import annotations

import sqlite3
import uuid
from datetime import date
from typing import Any, Dict, Optional

from producoes.config import DB_PATH, DEFAULTS
from producoes.domain.erros import (
    EdicaoBloqueada, ErroValidacao, NaoEncontrado, PeriodoFechado
)
from producoes.domain.models import STATUS_ABERTO, Producao, ProducaoForm
from producoes.domain.policies import BLOQUEIO_FECHADO, mensagem_bloqueio, motivo_bloqueio
from producoes.domain.validacao import validar_formulario
from producoes.infra.db import transacao
from producoes.infra.repositories import ClienteRepo, ProducaoRepo, ProjetoRepo
from producoes.infra.logger import (
    log_transaction, log_producao, log_database_operation, log_system_event
)
from producoes.usecases.periodos import find_or_create_periodo, recalcular_total


def _validar(form: ProducaoForm, db_path: str, conn: sqlite3.Connection) -> Dict[str, Any]:
    """Valida o formulário e as referências (cliente/projeto)."""
    res = validar_formulario(form)
    if not res.valid:
        raise ErroValidacao(res.errors)
    dados = res.dados

    if ClienteRepo(db_path, conn).get(dados["cliente_id"]) is None:
        raise NaoEncontrado("Cliente não encontrado")
    if dados["projeto_id"]:
        projeto = ProjetoRepo(db_path, conn).get(dados["projeto_id"])
        if projeto is None:
            raise NaoEncontrado("Projeto não encontrado")
        if projeto["cliente_id"] != dados["cliente_id"]:
            raise ErroValidacao("Projeto não pertence ao cliente informado")
    return dados


def _carregar(producao_id: str, db_path: str, conn: sqlite3.Connection) -> Producao:
    row = ProducaoRepo(db_path, conn).get(producao_id)
    if row is None:
        raise NaoEncontrado("Produção não encontrada")
    return Producao.from_row(row)


def _inserir(form: ProducaoForm, agora: str, db_path: str, conn: sqlite3.Connection) -> Producao:
    dados = _validar(form, db_path, conn)

    periodo = find_or_create_periodo(dados["cliente_id"], dados["data"], agora, db_path=db_path, conn=conn)
    if periodo.fechado:
        raise PeriodoFechado("Não é possível adicionar produções a um período fechado")

    producao = Producao(
        id=str(uuid.uuid4()),
        periodo_id=periodo.id,
        status=STATUS_ABERTO,
        created_at=agora,
        updated_at=agora,
        **dados,
    )
    ProducaoRepo(db_path, conn).insert(producao)
    log_database_operation("producoes", "INSERT", 1, producao_id=producao.id)

    recalcular_total(periodo.id, agora, db_path=db_path, conn=conn)
    return producao


def criar_producao(form: ProducaoForm, agora: str, db_path: str = DB_PATH) -> Producao:
    """Valida e grava uma nova produção no período correspondente à sua data."""
    log_system_event("criar_producao_start", {"cliente_id": form.cliente_id, "data": str(form.data)})

    try:
        with transacao(db_path) as c:
            producao = _inserir(form, agora, db_path, c)

        log_producao("insert", producao.id, producao.periodo_id, total=str(producao.total))
        log_transaction("criar_producao", {"id": producao.id, "nome": producao.nome_producao}, result="success")
        return producao
    except Exception as e:
        log_transaction("criar_producao", {"cliente_id": form.cliente_id}, error=str(e))
        log_system_event("criar_producao_error", {"error": str(e)}, level="error")
        raise


def atualizar_producao(
    producao_id: str,
    form: ProducaoForm,
    agora: str,
    hoje: date,
    db_path: str = DB_PATH,
    reagrupar: Optional[bool] = None,
) -> Producao:
    """Regrava os campos editáveis de uma produção ainda desbloqueada.

    Por padrão o ``periodo_id`` original é mantido mesmo que a data mude
    de intervalo. Com ``reagrupar=True`` (ou ``DEFAULTS.reagrupar_ao_editar_data``)
    a produção passa para o período da nova data/cliente e os dois
    totais são recalculados.
    """
    if reagrupar is None:
        reagrupar = DEFAULTS.reagrupar_ao_editar_data
    log_system_event("atualizar_producao_start", {"producao_id": producao_id})

    try:
        with transacao(db_path) as c:
            existente = _carregar(producao_id, db_path, c)

            motivo = motivo_bloqueio(existente, hoje)
            if motivo:
                raise EdicaoBloqueada(mensagem_bloqueio(motivo, "editadas"))

            dados = _validar(form, db_path, c)

            periodo_id = existente.periodo_id
            if reagrupar:
                destino = find_or_create_periodo(dados["cliente_id"], dados["data"], agora, db_path=db_path, conn=c)
                if destino.id != periodo_id and destino.fechado:
                    raise PeriodoFechado("Não é possível mover a produção para um período fechado")
                periodo_id = destino.id

            atualizada = Producao(
                id=existente.id,
                periodo_id=periodo_id,
                status=existente.status,
                created_at=existente.created_at,
                updated_at=agora,
                **dados,
            )
            ProducaoRepo(db_path, c).update(atualizada)
            log_database_operation("producoes", "UPDATE", 1, producao_id=producao_id)

            recalcular_total(existente.periodo_id, agora, db_path=db_path, conn=c)
            if periodo_id != existente.periodo_id:
                recalcular_total(periodo_id, agora, db_path=db_path, conn=c)

        log_producao("update", producao_id, periodo_id, total=str(atualizada.total))
        log_transaction("atualizar_producao", {"id": producao_id}, result="success")
        return atualizada
    except Exception as e:
        log_transaction("atualizar_producao", {"id": producao_id}, error=str(e))
        log_system_event("atualizar_producao_error", {"error": str(e)}, level="error")
        raise


def excluir_producao(producao_id: str, agora: str, hoje: date, db_path: str = DB_PATH) -> Producao:
    """Exclui uma produção desbloqueada e recalcula o total do período."""
    log_system_event("excluir_producao_start", {"producao_id": producao_id})

    try:
        with transacao(db_path) as c:
            existente = _carregar(producao_id, db_path, c)

            motivo = motivo_bloqueio(existente, hoje)
            if motivo == BLOQUEIO_FECHADO:
                raise PeriodoFechado("Não é possível excluir produções de um período fechado")
            if motivo:
                raise EdicaoBloqueada(mensagem_bloqueio(motivo, "excluídas"))

            ProducaoRepo(db_path, c).delete(producao_id)
            log_database_operation("producoes", "DELETE", 1, producao_id=producao_id)

            recalcular_total(existente.periodo_id, agora, db_path=db_path, conn=c)

        log_producao("delete", producao_id, existente.periodo_id)
        log_transaction("excluir_producao", {"id": producao_id}, result="success")
        return existente
    except Exception as e:
        log_transaction("excluir_producao", {"id": producao_id}, error=str(e))
        log_system_event("excluir_producao_error", {"error": str(e)}, level="error")
        raise


def duplicar_producao(producao_id: str, agora: str, hoje: date, db_path: str = DB_PATH) -> Producao:
    """Cria uma cópia da produção datada de hoje.

    A origem não pode estar fechada (checado primeiro) e precisa passar
    na regra do mesmo dia. A cópia passa por todas as validações de uma
    criação normal, inclusive período fechado.
    """
    log_system_event("duplicar_producao_start", {"producao_id": producao_id})

    try:
        with transacao(db_path) as c:
            origem = _carregar(producao_id, db_path, c)

            motivo = motivo_bloqueio(origem, hoje)
            if motivo == BLOQUEIO_FECHADO:
                raise PeriodoFechado("Não é possível duplicar produções de um período fechado")
            if motivo:
                raise EdicaoBloqueada(mensagem_bloqueio(motivo, "duplicadas"))

            form = ProducaoForm.from_producao(origem, data=hoje.isoformat())
            copia = _inserir(form, agora, db_path, c)

        log_producao("duplicate", copia.id, copia.periodo_id, origem=producao_id)
        log_transaction("duplicar_producao", {"origem": producao_id}, result={"id": copia.id})
        return copia
    except Exception as e:
        log_transaction("duplicar_producao", {"origem": producao_id}, error=str(e))
        log_system_event("duplicar_producao_error", {"error": str(e)}, level="error")
        raise
