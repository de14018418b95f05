# producoes/usecases/relatorios.py
"""
Relatórios de produção:
- resumo de um período (por tipo de produção)
- detalhe de produções (com nomes de cliente/projeto), com filtros
- painel com os indicadores do dia e dos períodos abertos
- conferência de totais gravados x soma das produções
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Optional

from producoes.config import DB_PATH, DEFAULTS
from producoes.domain.agregacao import agrupar_por_tipo, linhas_resumo, soma_totais
from producoes.domain.erros import NaoEncontrado
from producoes.domain.models import FiltroProducoes, Periodo, Producao
from producoes.domain.periodos import DataLike, calcular_periodo, para_data
from producoes.infra.repositories import ClienteRepo, PeriodoRepo, ProducaoRepo, TipoProducaoRepo
from producoes.infra.logger import log_database_operation, log_system_event


def resumo_periodo(periodo_id: str, db_path: str = DB_PATH) -> Dict[str, Any]:
    """Resumo por tipo de um período.

    Todos os tipos ativos aparecem, mesmo zerados.
    """
    row = PeriodoRepo(db_path).get(periodo_id)
    if row is None:
        raise NaoEncontrado("Período não encontrado")
    periodo = Periodo.from_row(row)
    producoes = [Producao.from_row(r) for r in ProducaoRepo(db_path).por_periodo(periodo_id)]
    tipos = [t["nome"] for t in TipoProducaoRepo(db_path).get_all() if t["ativo"]]
    log_database_operation("producoes", "SELECT_PERIODO", len(producoes), periodo_id=periodo_id)

    grupos = agrupar_por_tipo(producoes, tipos)
    return {
        "periodo": periodo.nome_periodo,
        "status": periodo.status,
        "total_periodo": periodo.total_periodo,
        "soma_producoes": soma_totais(producoes),
        "qtd_producoes": len(producoes),
        "por_tipo": linhas_resumo(grupos),
    }


def listar_producoes_detalhe(
    filtros: Optional[FiltroProducoes] = None, db_path: str = DB_PATH
) -> List[Dict[str, Any]]:
    """Produções com nomes de cliente/projeto, restritas por ``filtros``."""
    ativos = filtros.ativos() if filtros else {}
    rows = ProducaoRepo(db_path).detalhe(ativos)
    log_database_operation("vw_producoes_detalhe", "SELECT", len(rows), **ativos)
    return rows


def painel(hoje: DataLike, db_path: str = DB_PATH) -> Dict[str, Any]:
    """Indicadores gerais do ledger.

    - clientes ativos
    - produções datadas de hoje (registros e valor)
    - períodos abertos e a soma dos seus totais
    - participação de cada tipo no valor lançado (só tipos com valor)
    """
    dia = para_data(hoje)
    producoes = [Producao.from_row(r) for r in ProducaoRepo(db_path).get_all()]
    periodos = [Periodo.from_row(r) for r in PeriodoRepo(db_path).get_all()]
    tipos = [t["nome"] for t in TipoProducaoRepo(db_path).get_all() if t["ativo"]]
    clientes_ativos = sum(1 for c in ClienteRepo(db_path).get_all() if c["ativo"])

    de_hoje = [p for p in producoes if p.data == dia.isoformat()]
    abertos = [pe for pe in periodos if not pe.fechado]
    total_geral = soma_totais(producoes)

    participacao: List[Dict[str, Any]] = []
    for tipo, g in agrupar_por_tipo(producoes, tipos).items():
        if g["total"] <= 0:
            continue
        percentual = (g["total"] * 100 / total_geral).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
        participacao.append({"tipo": tipo, "total": g["total"], "percentual": percentual})

    log_database_operation("producoes", "SELECT_PAINEL", len(producoes), dia=dia.isoformat())
    return {
        "periodo_atual": calcular_periodo(dia, DEFAULTS.formato_data).nome_periodo,
        "clientes_ativos": clientes_ativos,
        "producoes_hoje": len(de_hoje),
        "valor_hoje": soma_totais(de_hoje),
        "periodos_abertos": len(abertos),
        "total_periodos_abertos": sum((pe.total_periodo for pe in abertos), Decimal("0.00")),
        "total_producoes": len(producoes),
        "por_tipo": participacao,
    }


def conferencia_totais(db_path: str = DB_PATH) -> List[Dict[str, Any]]:
    """Lista períodos cujo ``total_periodo`` difere da soma das produções.

    Em operação normal a lista é vazia; um resultado não vazio indica
    gravação interrompida fora do fluxo dos casos de uso.
    """
    prod_repo = ProducaoRepo(db_path)
    divergentes: List[Dict[str, Any]] = []
    for r in PeriodoRepo(db_path).resumo():
        gravado = Decimal(str(r["total_periodo"]))
        soma = sum(prod_repo.totais_do_periodo(r["id"]), Decimal("0.00"))
        if gravado != soma:
            log_system_event("conferencia_divergente",
                             {"periodo_id": r["id"], "gravado": str(gravado), "soma": str(soma)}, level="warning")
            divergentes.append(
                {
                    "periodo_id": r["id"],
                    "nome_periodo": r["nome_periodo"],
                    "total_gravado": gravado,
                    "soma_producoes": soma,
                    "qtd_producoes": r["qtd_producoes"],
                }
            )
    return divergentes
