"""
Cálculo dos períodos de faturamento 21 → 20.

Um período vai sempre do dia 21 de um mês até o dia 20 do mês seguinte.
As fronteiras são derivadas exclusivamente da data da produção; nunca são
escolhidas pelo usuário.

Todas as funções são puras: dependem apenas das entradas e não alteram
estado externo.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Union

DIA_INICIO = 21
DIA_FIM = 20

DataLike = Union[date, datetime, str]


@dataclass(frozen=True)
class PeriodoCalculado:
    """Fronteiras canônicas de um período (datas ISO) e seu rótulo."""
    data_inicio: str
    data_fim: str
    nome_periodo: str


def para_data(valor: Optional[DataLike]) -> date:
    """Converte ``date``, ``datetime`` ou string ISO em ``date``.

    A parte de horário é descartada: ``2026-01-20T23:59`` e ``2026-01-20``
    pertencem ao mesmo dia.
    """
    if valor is None:
        raise ValueError("data não informada")
    if isinstance(valor, datetime):
        return valor.date()
    if isinstance(valor, date):
        return valor
    return date.fromisoformat(str(valor).strip()[:10])


def _mes_anterior(ano: int, mes: int) -> tuple[int, int]:
    return (ano - 1, 12) if mes == 1 else (ano, mes - 1)


def _mes_seguinte(ano: int, mes: int) -> tuple[int, int]:
    return (ano + 1, 1) if mes == 12 else (ano, mes + 1)


def fronteiras(valor: DataLike) -> tuple[date, date]:
    """Retorna ``(inicio, fim)`` do período que contém ``valor``.

    Regras:
        - dia >= 21 → de 21 do mês corrente a 20 do mês seguinte
        - dia <= 20 → de 21 do mês anterior a 20 do mês corrente

    A virada de ano (dezembro/janeiro) é tratada nos dois sentidos.
    """
    d = para_data(valor)
    if d.day >= DIA_INICIO:
        ano_fim, mes_fim = _mes_seguinte(d.year, d.month)
        return date(d.year, d.month, DIA_INICIO), date(ano_fim, mes_fim, DIA_FIM)
    ano_ini, mes_ini = _mes_anterior(d.year, d.month)
    return date(ano_ini, mes_ini, DIA_INICIO), date(d.year, d.month, DIA_FIM)


def rotulo_periodo(inicio: date, fim: date, formato: str = "%d/%m/%Y") -> str:
    """Rótulo legível, ex.: ``21/01/2026 a 20/02/2026``."""
    return f"{inicio.strftime(formato)} a {fim.strftime(formato)}"


def calcular_periodo(valor: DataLike, formato: str = "%d/%m/%Y") -> PeriodoCalculado:
    """Mapeia uma data para o período 21 → 20 correspondente.

    Parameters
    ----------
    valor:
        Data da produção (``date``, ``datetime`` ou ``YYYY-MM-DD``).
    formato:
        Formato ``strftime`` usado no rótulo.

    Returns
    -------
    PeriodoCalculado
        ``data_inicio`` e ``data_fim`` em ISO (ordenáveis) e
        ``nome_periodo`` no formato local.
    """
    inicio, fim = fronteiras(valor)
    return PeriodoCalculado(
        data_inicio=inicio.isoformat(),
        data_fim=fim.isoformat(),
        nome_periodo=rotulo_periodo(inicio, fim, formato),
    )
