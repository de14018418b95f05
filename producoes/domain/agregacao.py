"""
Agregações sobre listas de produções.

O total de um período é sempre a soma exata dos totais das produções que
apontam para ele; nada aqui é armazenado, apenas calculado.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Dict, Iterable, List, Sequence

from producoes.domain.models import Producao


def soma_totais(producoes: Iterable[Producao]) -> Decimal:
    return sum((p.total for p in producoes), Decimal("0.00"))


def agrupar_por_tipo(producoes: Sequence[Producao], tipos: Sequence[str]) -> Dict[str, Dict[str, object]]:
    """Particiona as produções por tipo.

    Todo tipo de ``tipos`` aparece na saída, mesmo zerado, na ordem
    recebida, para que as colunas da interface fiquem estáveis. Tipos
    encontrados nas produções e ausentes de ``tipos`` (ex.: um tipo
    desativado) entram no final.

    Returns:
        ``{tipo: {"itens": n_registros, "quantidade": soma_qtd, "total": Decimal}}``
    """
    grupos: Dict[str, Dict[str, object]] = {
        t: {"itens": 0, "quantidade": 0, "total": Decimal("0.00")} for t in tipos
    }
    for p in producoes:
        g = grupos.setdefault(p.tipo, {"itens": 0, "quantidade": 0, "total": Decimal("0.00")})
        g["itens"] += 1
        g["quantidade"] += p.quantidade
        g["total"] += p.total
    return grupos


def linhas_resumo(grupos: Dict[str, Dict[str, object]]) -> List[Dict[str, object]]:
    """Achata o agrupamento em linhas (útil para tabelas e planilhas)."""
    return [{"tipo": tipo, **valores} for tipo, valores in grupos.items()]
