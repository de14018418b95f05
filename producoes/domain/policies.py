"""
Políticas de bloqueio de edição e de permissão.

Este módulo contém as regras que decidem se uma produção ainda pode ser
alterada, excluída ou duplicada, e quais papéis podem executar operações
de escrita. As funções são usadas pelos casos de uso antes de qualquer
gravação no banco.
"""

from __future__ import annotations

from typing import Optional

from producoes.domain.models import PAPEL_ADMIN, STATUS_FECHADO, Producao
from producoes.domain.periodos import DataLike, para_data

BLOQUEIO_FECHADO = "FECHADO"
BLOQUEIO_OUTRO_DIA = "OUTRO_DIA"

PAPEIS_ESCRITA = frozenset({PAPEL_ADMIN})


def data_criacao(producao: Producao) -> str:
    """Parte de data (``YYYY-MM-DD``) do ``created_at`` da produção."""
    return (producao.created_at or "")[:10]


def motivo_bloqueio(producao: Producao, hoje: DataLike) -> Optional[str]:
    """Explica por que a produção não pode ser alterada.

    Regras:
        - status ``Fechado`` → ``'FECHADO'`` (independe da data)
        - criada em outro dia → ``'OUTRO_DIA'``
        - caso contrário → ``None`` (edição liberada)

    Args:
        producao: Produção a avaliar.
        hoje: Data corrente, na mesma convenção das datas gravadas.

    Returns:
        ``'FECHADO'``, ``'OUTRO_DIA'`` ou ``None``.
    """
    if producao.status == STATUS_FECHADO:
        return BLOQUEIO_FECHADO
    if data_criacao(producao) != para_data(hoje).isoformat():
        return BLOQUEIO_OUTRO_DIA
    return None


def pode_editar(producao: Producao, hoje: DataLike) -> bool:
    """Edição só no mesmo dia da criação e com a produção aberta.

    A mesma regra vale para exclusão e para a produção de origem de uma
    duplicação.
    """
    return motivo_bloqueio(producao, hoje) is None


def mensagem_bloqueio(motivo: str, acao: str = "editadas") -> str:
    """Mensagem para o usuário a partir de ``motivo_bloqueio``; ``acao`` completa a frase."""
    if motivo == BLOQUEIO_FECHADO:
        return f"Bloqueado: produções de um período fechado não podem ser {acao}."
    return f"Bloqueado: produções só podem ser {acao} no mesmo dia da criação."


def pode_escrever(papel: Optional[str]) -> bool:
    """Somente administradores executam operações de escrita."""
    return (papel or "").strip().lower() in PAPEIS_ESCRITA
