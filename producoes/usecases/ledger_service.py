# producoes/usecases/ledger_service.py
"""
Fachada do ledger de produções.

``LedgerService`` é o único ponto de entrada para interface, CLI e
relatórios. Ela:

- verifica o papel do ator antes de qualquer escrita (só ``admin`` grava);
- chama os casos de uso e converte exceções de negócio e falhas do banco
  em ``Resultado`` (nada é lançado através desta fronteira);
- mantém uma visão materializada (``EstadoLedger``) recarregada por
  inteiro após cada escrita bem-sucedida. Se a escrita falhar, a visão
  não é tocada: pode ficar desatualizada, mas nunca pela metade.
"""

from __future__ import annotations

import sqlite3
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

from producoes.config import DB_PATH, DEFAULTS, DefaultConfig
from producoes.domain.agregacao import agrupar_por_tipo, soma_totais
from producoes.domain.parsers import parse_data
from producoes.domain.erros import ErroLedger, ErroValidacao, Motivo, NaoEncontrado, PermissaoNegada, Resultado
from producoes.domain.models import (
    STATUS_ABERTO, Cliente, EstadoLedger, FiltroProducoes, Periodo, Producao, ProducaoForm, Projeto, TipoProducao
)
from producoes.domain.policies import pode_editar, pode_escrever
from producoes.infra.migrations import apply_migrations
from producoes.infra.views import create_views
from producoes.infra.repositories import (
    ClienteRepo, PeriodoRepo, ProducaoRepo, ProjetoRepo, TipoProducaoRepo
)
from producoes.infra.logger import log_system_event, log_transaction
from producoes.usecases import cadastros, relatorios
from producoes.usecases.periodos import (
    fechar_periodo, find_or_create_periodo, reabrir_periodo, recalcular_total
)
from producoes.usecases.registrar_producao import (
    atualizar_producao, criar_producao, duplicar_producao, excluir_producao
)

FormLike = Union[ProducaoForm, Mapping[str, Any]]


def _form(dados: FormLike) -> ProducaoForm:
    if isinstance(dados, ProducaoForm):
        return dados
    campos = ProducaoForm.__dataclass_fields__
    return ProducaoForm(**{k: v for k, v in dict(dados).items() if k in campos})


def _ordenar_producoes(producoes: List[Producao]) -> List[Producao]:
    return sorted(producoes, key=lambda p: (p.data, p.created_at), reverse=True)


class LedgerService:
    """Operações do ledger expostas aos colaboradores externos."""

    def __init__(
        self,
        db_path: str = DB_PATH,
        relogio: Optional[Callable[[], datetime]] = None,
        config: Optional[DefaultConfig] = None,
        migrar: bool = True,
    ):
        self.db_path = db_path
        self.relogio = relogio or datetime.now
        self.config = config or DEFAULTS
        if migrar:
            apply_migrations(db_path)
            create_views(db_path)
        self.estado = EstadoLedger()
        self.recarregar()

    # -----------------------
    # relógio
    # -----------------------

    def hoje(self) -> date:
        return self.relogio().date()

    def agora(self) -> str:
        return self.relogio().isoformat(timespec="seconds")

    # -----------------------
    # visão materializada
    # -----------------------

    def recarregar(self) -> EstadoLedger:
        """Relê todas as coleções do banco e substitui a visão local."""
        self.estado = EstadoLedger(
            clientes=[Cliente.from_row(r) for r in ClienteRepo(self.db_path).get_all()],
            projetos=[Projeto.from_row(r) for r in ProjetoRepo(self.db_path).get_all()],
            tipos=[TipoProducao.from_row(r) for r in TipoProducaoRepo(self.db_path).get_all()],
            periodos=[Periodo.from_row(r) for r in PeriodoRepo(self.db_path).get_all()],
            producoes=[Producao.from_row(r) for r in ProducaoRepo(self.db_path).get_all()],
        )
        return self.estado

    def _executar(self, operacao: str, papel: Optional[str], acao: Callable[[], Any], chave: Optional[str] = None) -> Resultado:
        if not pode_escrever(papel):
            log_system_event("permissao_negada", {"operacao": operacao, "papel": papel}, level="warning")
            return Resultado.de_erro(PermissaoNegada("Permissão negada: somente administradores podem alterar dados"))

        try:
            valor = acao()
        except ErroLedger as e:
            return Resultado.de_erro(e)
        except (InvalidOperation, OverflowError) as e:
            log_transaction(operacao, {"papel": papel}, error=str(e))
            log_system_event(f"{operacao}_numerico", {"error": str(e)}, level="error")
            return Resultado.falha(Motivo.VALIDACAO, f"Valor numérico fora do intervalo aceito: {e}")
        except sqlite3.Error as e:
            log_transaction(operacao, {"papel": papel}, error=str(e))
            log_system_event(f"{operacao}_persistencia", {"error": str(e)}, level="error")
            return Resultado.falha(Motivo.PERSISTENCIA, f"Falha ao gravar no banco de dados: {e}")

        try:
            self.recarregar()
        except sqlite3.Error as e:
            # a escrita já foi confirmada; a visão fica como estava até o próximo recarregar()
            log_system_event("recarregar_error", {"operacao": operacao, "error": str(e)}, level="error")

        if chave is None:
            return Resultado.ok()
        return Resultado.ok(**{chave: valor})

    # -----------------------
    # produções
    # -----------------------

    def criar_producao(self, dados: FormLike, papel: str) -> Resultado:
        return self._executar(
            "criar_producao", papel,
            lambda: criar_producao(_form(dados), self.agora(), db_path=self.db_path),
            chave="producao",
        )

    def atualizar_producao(self, producao_id: str, dados: FormLike, papel: str) -> Resultado:
        return self._executar(
            "atualizar_producao", papel,
            lambda: atualizar_producao(
                producao_id, _form(dados), self.agora(), self.hoje(),
                db_path=self.db_path, reagrupar=self.config.reagrupar_ao_editar_data,
            ),
            chave="producao",
        )

    def excluir_producao(self, producao_id: str, papel: str) -> Resultado:
        return self._executar(
            "excluir_producao", papel,
            lambda: excluir_producao(producao_id, self.agora(), self.hoje(), db_path=self.db_path),
            chave="producao",
        )

    def duplicar_producao(self, producao_id: str, papel: str) -> Resultado:
        return self._executar(
            "duplicar_producao", papel,
            lambda: duplicar_producao(producao_id, self.agora(), self.hoje(), db_path=self.db_path),
            chave="producao",
        )

    def pode_editar_producao(self, producao: Union[Producao, str]) -> bool:
        if isinstance(producao, str):
            producao = self.get_producao(producao)
            if producao is None:
                return False
        return pode_editar(producao, self.hoje())

    # -----------------------
    # períodos
    # -----------------------

    def find_or_create_periodo(self, cliente_id: str, data: Union[date, str], papel: str) -> Resultado:
        def _acao():
            iso = parse_data(data)
            if iso is None:
                raise ErroValidacao("Data inválida")
            if ClienteRepo(self.db_path).get(cliente_id) is None:
                raise NaoEncontrado("Cliente não encontrado")
            return find_or_create_periodo(cliente_id, iso, self.agora(), db_path=self.db_path)
        return self._executar("find_or_create_periodo", papel, _acao, chave="periodo")

    def recalcular_total(self, periodo_id: str, papel: str) -> Resultado:
        def _acao():
            recalcular_total(periodo_id, self.agora(), db_path=self.db_path)
            return Periodo.from_row(PeriodoRepo(self.db_path).get(periodo_id))
        return self._executar("recalcular_total", papel, _acao, chave="periodo")

    def fechar_periodo(self, periodo_id: str, papel: str) -> Resultado:
        return self._executar(
            "fechar_periodo", papel,
            lambda: fechar_periodo(periodo_id, self.agora(), db_path=self.db_path),
            chave="periodo",
        )

    def reabrir_periodo(self, periodo_id: str, papel: str) -> Resultado:
        return self._executar(
            "reabrir_periodo", papel,
            lambda: reabrir_periodo(periodo_id, self.agora(), db_path=self.db_path),
            chave="periodo",
        )

    # -----------------------
    # cadastros
    # -----------------------

    def adicionar_cliente(self, nome: str, papel: str) -> Resultado:
        return self._executar(
            "adicionar_cliente", papel,
            lambda: cadastros.adicionar_cliente(nome, self.agora(), db_path=self.db_path),
            chave="registro",
        )

    def atualizar_cliente(self, cliente_id: str, nome: str, ativo: bool, papel: str) -> Resultado:
        return self._executar(
            "atualizar_cliente", papel,
            lambda: cadastros.atualizar_cliente(cliente_id, nome, ativo, self.agora(), db_path=self.db_path),
            chave="registro",
        )

    def excluir_cliente(self, cliente_id: str, papel: str) -> Resultado:
        return self._executar(
            "excluir_cliente", papel,
            lambda: cadastros.excluir_cliente(cliente_id, db_path=self.db_path),
        )

    def adicionar_projeto(self, nome: str, cliente_id: str, papel: str) -> Resultado:
        return self._executar(
            "adicionar_projeto", papel,
            lambda: cadastros.adicionar_projeto(nome, cliente_id, self.agora(), db_path=self.db_path),
            chave="registro",
        )

    def atualizar_projeto(self, projeto_id: str, nome: str, ativo: bool, papel: str) -> Resultado:
        return self._executar(
            "atualizar_projeto", papel,
            lambda: cadastros.atualizar_projeto(projeto_id, nome, ativo, self.agora(), db_path=self.db_path),
            chave="registro",
        )

    def excluir_projeto(self, projeto_id: str, papel: str) -> Resultado:
        return self._executar(
            "excluir_projeto", papel,
            lambda: cadastros.excluir_projeto(projeto_id, db_path=self.db_path),
        )

    def adicionar_tipo(self, nome: str, papel: str) -> Resultado:
        return self._executar(
            "adicionar_tipo", papel,
            lambda: cadastros.adicionar_tipo(nome, db_path=self.db_path),
            chave="registro",
        )

    def atualizar_tipo(self, tipo_id: str, nome: str, ativo: bool, papel: str) -> Resultado:
        return self._executar(
            "atualizar_tipo", papel,
            lambda: cadastros.atualizar_tipo(tipo_id, nome, ativo, db_path=self.db_path),
            chave="registro",
        )

    def excluir_tipo(self, tipo_id: str, papel: str) -> Resultado:
        return self._executar(
            "excluir_tipo", papel,
            lambda: cadastros.excluir_tipo(tipo_id, db_path=self.db_path),
        )

    # -----------------------
    # leituras (sobre a visão materializada)
    # -----------------------

    def get_cliente(self, cliente_id: str) -> Optional[Cliente]:
        return next((c for c in self.estado.clientes if c.id == cliente_id), None)

    def get_projeto(self, projeto_id: str) -> Optional[Projeto]:
        return next((p for p in self.estado.projetos if p.id == projeto_id), None)

    def get_periodo(self, periodo_id: str) -> Optional[Periodo]:
        return next((p for p in self.estado.periodos if p.id == periodo_id), None)

    def get_producao(self, producao_id: str) -> Optional[Producao]:
        return next((p for p in self.estado.producoes if p.id == producao_id), None)

    def clientes_ativos(self) -> List[Cliente]:
        return [c for c in self.estado.clientes if c.ativo]

    def projetos_do_cliente(self, cliente_id: str) -> List[Projeto]:
        return [p for p in self.estado.projetos if p.cliente_id == cliente_id and p.ativo]

    def tipos_ativos(self) -> List[TipoProducao]:
        return [t for t in self.estado.tipos if t.ativo]

    def periodos_do_cliente(self, cliente_id: str) -> List[Periodo]:
        periodos = [p for p in self.estado.periodos if p.cliente_id == cliente_id]
        return sorted(periodos, key=lambda p: p.data_inicio, reverse=True)

    def periodos_abertos_do_cliente(self, cliente_id: str) -> List[Periodo]:
        return [p for p in self.periodos_do_cliente(cliente_id) if p.status == STATUS_ABERTO]

    def producoes_do_periodo(self, periodo_id: str) -> List[Producao]:
        return _ordenar_producoes([p for p in self.estado.producoes if p.periodo_id == periodo_id])

    def producoes_do_cliente(self, cliente_id: str) -> List[Producao]:
        return _ordenar_producoes([p for p in self.estado.producoes if p.cliente_id == cliente_id])

    def resumo_por_tipo(self, periodo_id: str) -> Dict[str, Dict[str, object]]:
        tipos = [t.nome for t in self.tipos_ativos()]
        return agrupar_por_tipo(self.producoes_do_periodo(periodo_id), tipos)

    def producoes(self, filtros: Optional[FiltroProducoes] = None) -> Tuple[List[Producao], Decimal]:
        """Produções que passam em ``filtros`` e a soma dos seus totais."""
        filtros = filtros or FiltroProducoes()
        lista = _ordenar_producoes([p for p in self.estado.producoes if filtros.aceita(p)])
        return lista, soma_totais(lista)

    def painel(self) -> Dict[str, Any]:
        """Indicadores do dia corrente do relógio (ver ``relatorios.painel``)."""
        return relatorios.painel(self.hoje(), db_path=self.db_path)
