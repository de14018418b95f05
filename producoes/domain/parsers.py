"""
Utilidades de parsing para os valores digitados nos formulários.

Este módulo interpreta datas, quantidades inteiras e valores monetários
no formato em que chegam da linha de comando ou de planilhas (por
exemplo, "R$ 1.234,56" ou "21/01/2026"). Valores que não puderem ser
interpretados (inclusive NaN e infinito) retornam ``None``; cabe à
validação transformar isso em mensagem para o usuário.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

_MOEDA_RE = re.compile(r"[^\d,.\-+]")
_INT_RE = re.compile(r"^[-+]?\d+$")


def parse_valor(txt: Any) -> Optional[Decimal]:
    """Interpreta um valor monetário.

    Aceita ponto ou vírgula como separador decimal. Quando os dois
    aparecem, o último é o decimal e o outro é separador de milhar.

    Exemplos:
        "150"          → Decimal("150")
        "150,50"       → Decimal("150.50")
        "R$ 1.234,56"  → Decimal("1234.56")
        "1,234.56"     → Decimal("1234.56")

    Args:
        txt: Texto, número ou ``Decimal``.

    Returns:
        ``Decimal`` ou ``None`` se o valor não puder ser lido.
    """
    if txt is None or isinstance(txt, bool):
        return None
    if isinstance(txt, int):
        return Decimal(txt)
    if isinstance(txt, (float, Decimal)):
        val = Decimal(str(txt))
        return val if val.is_finite() else None
    s = _MOEDA_RE.sub("", str(txt).strip())
    if not s:
        return None
    if "," in s and "." in s:
        if s.rfind(",") > s.rfind("."):
            s = s.replace(".", "").replace(",", ".")
        else:
            s = s.replace(",", "")
    else:
        s = s.replace(",", ".")
    try:
        val = Decimal(s)
    except InvalidOperation:
        return None
    if not val.is_finite():
        return None
    return val


def parse_inteiro(txt: Any) -> Optional[int]:
    """Interpreta uma quantidade inteira; ``"2.5"`` não é inteiro."""
    if txt is None or isinstance(txt, bool):
        return None
    if isinstance(txt, int):
        return txt
    if isinstance(txt, (float, Decimal)):
        val = Decimal(str(txt))
        if not val.is_finite() or val != val.to_integral_value():
            return None
        return int(val)
    s = str(txt).strip()
    if not _INT_RE.match(s):
        return None
    return int(s)


def parse_data(txt: Any) -> Optional[str]:
    """Converte ``YYYY-MM-DD``, ``DD/MM/AAAA`` ou ``date`` em data ISO."""
    if txt is None:
        return None
    if isinstance(txt, datetime):
        return txt.date().isoformat()
    if isinstance(txt, date):
        return txt.isoformat()
    s = str(txt).strip()
    if not s:
        return None
    try:
        # ISO, com ou sem horário
        return date.fromisoformat(s[:10]).isoformat()
    except ValueError:
        pass
    for fmt in ("%d/%m/%Y", "%d-%m-%Y", "%d/%m/%y"):
        try:
            return datetime.strptime(s, fmt).date().isoformat()
        except ValueError:
            continue
    return None
