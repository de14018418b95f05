# producoes/adapters/exportacao.py
"""
Exportação de um período para planilha XLSX.

Gera duas abas com pandas (engine openpyxl):
- ``Produções``: uma linha por produção do período;
- ``Resumo``: itens/quantidade/total por tipo e a linha de total do período.

Só lê a visão materializada (``EstadoLedger``); não toca no banco.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Dict, List

import pandas as pd

from producoes.domain.agregacao import agrupar_por_tipo, linhas_resumo
from producoes.domain.erros import NaoEncontrado
from producoes.domain.models import EstadoLedger
from producoes.infra.logger import log_file_operation


ABA_PRODUCOES = "Produções"
ABA_RESUMO = "Resumo"

COLUNAS_PRODUCOES = [
    "Data", "Cliente", "Projeto", "Tipo", "Produção",
    "Quantidade", "Valor unitário", "Total", "Status", "Observações",
]


def _float(v: Decimal) -> float:
    # planilhas não têm decimal; o valor já vem arredondado em centavos
    return float(v)


def _data_br(iso: str) -> str:
    ano, mes, dia = iso[:10].split("-")
    return f"{dia}/{mes}/{ano}"


def exportar_periodo_xlsx(estado: EstadoLedger, periodo_id: str, path: str) -> str:
    """Grava a planilha do período em ``path`` e devolve o caminho."""
    periodo = next((p for p in estado.periodos if p.id == periodo_id), None)
    if periodo is None:
        raise NaoEncontrado("Período não encontrado")

    clientes = {c.id: c.nome for c in estado.clientes}
    projetos = {p.id: p.nome for p in estado.projetos}
    producoes = sorted(
        (p for p in estado.producoes if p.periodo_id == periodo_id),
        key=lambda p: (p.data, p.created_at),
    )

    linhas: List[Dict[str, object]] = [
        {
            "Data": _data_br(p.data),
            "Cliente": clientes.get(p.cliente_id, ""),
            "Projeto": projetos.get(p.projeto_id, "") if p.projeto_id else "",
            "Tipo": p.tipo,
            "Produção": p.nome_producao,
            "Quantidade": p.quantidade,
            "Valor unitário": _float(p.valor_unitario),
            "Total": _float(p.total),
            "Status": p.status,
            "Observações": p.observacoes or "",
        }
        for p in producoes
    ]
    df_producoes = pd.DataFrame(linhas, columns=COLUNAS_PRODUCOES)

    tipos = [t.nome for t in estado.tipos if t.ativo]
    resumo = linhas_resumo(agrupar_por_tipo(producoes, tipos))
    df_resumo = pd.DataFrame(
        [
            {"Tipo": r["tipo"], "Itens": r["itens"], "Quantidade": r["quantidade"], "Total": _float(r["total"])}
            for r in resumo
        ],
        columns=["Tipo", "Itens", "Quantidade", "Total"],
    )
    df_resumo.loc[len(df_resumo)] = [
        "Total do período", len(producoes), sum(p.quantidade for p in producoes), _float(periodo.total_periodo),
    ]

    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        df_producoes.to_excel(writer, sheet_name=ABA_PRODUCOES, index=False)
        df_resumo.to_excel(writer, sheet_name=ABA_RESUMO, index=False)

    log_file_operation("export", path, rows_processed=len(linhas), periodo_id=periodo_id,
                       periodo=periodo.nome_periodo)
    return path
