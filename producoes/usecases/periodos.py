# producoes/usecases/periodos.py
"""
UC: Ciclo de vida dos períodos 21 → 20.

- find_or_create_periodo(): resolve (cria se preciso) o período de uma data
- recalcular_total(): total_periodo = soma dos totais das produções
- fechar_periodo():   Aberto -> Fechado, em cascata nas produções
- reabrir_periodo():  Fechado -> Aberto, em cascata nas produções

Obs.:
- Fechar/reabrir gravam período e produções na mesma transação.
- Reabrir não mexe no created_at das produções: as de dias anteriores
  continuam bloqueadas pela regra do mesmo dia.
"""

from __future__ import annotations

import sqlite3
import uuid
from decimal import Decimal
from typing import Optional

from producoes.config import DB_PATH, DEFAULTS
from producoes.domain.erros import NaoEncontrado, PeriodoJaAberto, PeriodoJaFechado
from producoes.domain.models import STATUS_ABERTO, STATUS_FECHADO, Periodo
from producoes.domain.periodos import DataLike, calcular_periodo
from producoes.infra.db import transacao
from producoes.infra.repositories import PeriodoRepo, ProducaoRepo
from producoes.infra.logger import (
    log_transaction, log_periodo, log_database_operation, log_system_event
)


def find_or_create_periodo(
    cliente_id: str,
    data: DataLike,
    agora: str,
    db_path: str = DB_PATH,
    conn: Optional[sqlite3.Connection] = None,
) -> Periodo:
    """Retorna o período do cliente que contém ``data``, criando-o Aberto e zerado se não existir.

    Idempotente: duas chamadas com datas do mesmo intervalo devolvem o
    mesmo id.
    """
    calc = calcular_periodo(data, DEFAULTS.formato_data)
    repo = PeriodoRepo(db_path, conn)

    existente = repo.find(cliente_id, calc.data_inicio, calc.data_fim)
    if existente:
        return Periodo.from_row(existente)

    novo_id = str(uuid.uuid4())
    row = repo.insert_if_absent(
        {
            "id": novo_id,
            "cliente_id": cliente_id,
            "data_inicio": calc.data_inicio,
            "data_fim": calc.data_fim,
            "nome_periodo": calc.nome_periodo,
            "status": STATUS_ABERTO,
            "total_periodo": Decimal("0.00"),
            "created_at": agora,
            "updated_at": agora,
        }
    )
    if row["id"] == novo_id:
        log_database_operation("periodos", "INSERT", 1, periodo_id=novo_id)
        log_periodo("create", novo_id, STATUS_ABERTO, cliente_id=cliente_id, nome=calc.nome_periodo)
    return Periodo.from_row(row)


def recalcular_total(
    periodo_id: str,
    agora: str,
    db_path: str = DB_PATH,
    conn: Optional[sqlite3.Connection] = None,
) -> Decimal:
    """Recalcula e grava ``total_periodo`` como a soma exata dos totais das produções."""
    with transacao(db_path, conn) as c:
        if PeriodoRepo(db_path, c).get(periodo_id) is None:
            raise NaoEncontrado("Período não encontrado")
        totais = ProducaoRepo(db_path, c).totais_do_periodo(periodo_id)
        total = sum(totais, Decimal("0.00"))
        PeriodoRepo(db_path, c).set_total(periodo_id, total, agora)

    log_periodo("recalc", periodo_id, total=str(total), producoes=len(totais))
    return total


def _mudar_status(periodo_id: str, novo_status: str, agora: str, db_path: str) -> Periodo:
    operacao = "fechar_periodo" if novo_status == STATUS_FECHADO else "reabrir_periodo"
    log_system_event(f"{operacao}_start", {"periodo_id": periodo_id})

    try:
        with transacao(db_path) as c:
            per_repo = PeriodoRepo(db_path, c)
            row = per_repo.get(periodo_id)
            if row is None:
                raise NaoEncontrado("Período não encontrado")
            if row["status"] == novo_status:
                if novo_status == STATUS_FECHADO:
                    raise PeriodoJaFechado("Período já está fechado")
                raise PeriodoJaAberto("Período já está aberto")

            per_repo.set_status(periodo_id, novo_status, agora)
            afetadas = ProducaoRepo(db_path, c).set_status_por_periodo(periodo_id, novo_status, agora)
            periodo = Periodo.from_row(per_repo.get(periodo_id))

        log_database_operation("producoes", "UPDATE_STATUS", afetadas, periodo_id=periodo_id, status=novo_status)
        log_periodo(operacao, periodo_id, novo_status, producoes=afetadas)
        log_transaction(operacao, {"periodo_id": periodo_id}, result={"producoes": afetadas})
        return periodo
    except Exception as e:
        log_transaction(operacao, {"periodo_id": periodo_id}, error=str(e))
        log_system_event(f"{operacao}_error", {"periodo_id": periodo_id, "error": str(e)}, level="error")
        raise


def fechar_periodo(periodo_id: str, agora: str, db_path: str = DB_PATH) -> Periodo:
    """Fecha o período e todas as suas produções (uma transação)."""
    return _mudar_status(periodo_id, STATUS_FECHADO, agora, db_path)


def reabrir_periodo(periodo_id: str, agora: str, db_path: str = DB_PATH) -> Periodo:
    """Reabre o período e devolve as produções ao status Aberto."""
    return _mudar_status(periodo_id, STATUS_ABERTO, agora, db_path)
