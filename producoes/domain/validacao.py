"""
Validação do formulário de produção e cálculo do total.

Todas as mensagens de erro são coletadas antes de retornar (não para no
primeiro campo inválido), para que a interface possa mostrar tudo de uma
vez.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List

from producoes.domain.parsers import parse_data, parse_inteiro, parse_valor
from producoes.domain.models import ProducaoForm

CENTAVO = Decimal("0.01")

# Limites para que quantidade caiba em INTEGER do SQLite e o total em 28 dígitos
QUANTIDADE_MAXIMA = 2 ** 63 - 1
VALOR_MAXIMO = Decimal("999999999999999.99")


@dataclass
class ResultadoValidacao:
    valid: bool
    errors: List[str] = field(default_factory=list)
    # Valores já convertidos (data ISO, int, Decimal, strings aparadas)
    dados: Dict[str, Any] = field(default_factory=dict)


def _texto(v: Any) -> str:
    return "" if v is None else str(v).strip()


def validar_formulario(form: ProducaoForm) -> ResultadoValidacao:
    """Valida os campos obrigatórios de uma produção.

    Regras:
        - data presente e válida
        - cliente presente
        - tipo presente
        - nome não vazio
        - quantidade inteira >= 1 e <= QUANTIDADE_MAXIMA
        - valor unitário > 0
        - valor unitário e total <= VALOR_MAXIMO
    """
    errors: List[str] = []

    data = parse_data(form.data)
    if not _texto(form.data):
        errors.append("Data é obrigatória")
    elif data is None:
        errors.append("Data inválida")

    cliente_id = _texto(form.cliente_id)
    if not cliente_id:
        errors.append("Cliente é obrigatório")

    tipo = _texto(form.tipo)
    if not tipo:
        errors.append("Tipo de produção é obrigatório")

    nome = _texto(form.nome_producao)
    if not nome:
        errors.append("Nome da produção é obrigatório")

    quantidade = parse_inteiro(form.quantidade)
    if quantidade is None or quantidade < 1:
        errors.append("Quantidade deve ser pelo menos 1")
        quantidade = None
    elif quantidade > QUANTIDADE_MAXIMA:
        errors.append("Quantidade excede o limite permitido")
        quantidade = None

    valor = parse_valor(form.valor_unitario)
    if valor is None or valor <= 0:
        errors.append("Valor unitário deve ser maior que zero")
        valor = None
    elif valor > VALOR_MAXIMO:
        errors.append("Valor unitário excede o limite permitido")
        valor = None

    if quantidade is not None and valor is not None and Decimal(quantidade) * valor > VALOR_MAXIMO:
        errors.append("Total excede o limite permitido")

    if errors:
        return ResultadoValidacao(valid=False, errors=errors)

    return ResultadoValidacao(
        valid=True,
        dados={
            "data": data,
            "cliente_id": cliente_id,
            "projeto_id": _texto(form.projeto_id) or None,
            "tipo": tipo,
            "nome_producao": nome,
            "quantidade": quantidade,
            "valor_unitario": valor,
            "total": calcular_total(quantidade, valor),
            "observacoes": _texto(form.observacoes) or None,
        },
    )


def calcular_total(quantidade: int, valor_unitario: Decimal) -> Decimal:
    """``quantidade × valor_unitario`` arredondado ao centavo."""
    return (Decimal(quantidade) * Decimal(valor_unitario)).quantize(CENTAVO, rounding=ROUND_HALF_UP)
