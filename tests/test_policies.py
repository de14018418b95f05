from datetime import date
from decimal import Decimal

import pytest

from producoes.domain.models import Producao
from producoes.domain.policies import (
    BLOQUEIO_FECHADO, BLOQUEIO_OUTRO_DIA, mensagem_bloqueio, motivo_bloqueio, pode_editar, pode_escrever
)


def _producao(status="Aberto", created_at="2026-01-22T09:15:00"):
    return Producao(
        id="p1", data="2026-01-22", cliente_id="c1", tipo="Feed", nome_producao="Post",
        quantidade=1, valor_unitario=Decimal("10"), total=Decimal("10.00"),
        periodo_id="pe1", status=status, created_at=created_at, updated_at=created_at,
    )


def test_mesmo_dia_e_aberta_pode_editar():
    assert pode_editar(_producao(), date(2026, 1, 22))
    assert motivo_bloqueio(_producao(), "2026-01-22") is None


def test_outro_dia_bloqueia():
    assert not pode_editar(_producao(), date(2026, 1, 23))
    assert motivo_bloqueio(_producao(), date(2026, 1, 23)) == BLOQUEIO_OUTRO_DIA


def test_fechada_bloqueia_mesmo_no_dia():
    p = _producao(status="Fechado")
    assert not pode_editar(p, date(2026, 1, 22))
    assert motivo_bloqueio(p, date(2026, 1, 22)) == BLOQUEIO_FECHADO


def test_mensagens_distinguem_motivo():
    assert "período fechado" in mensagem_bloqueio(BLOQUEIO_FECHADO)
    assert "mesmo dia" in mensagem_bloqueio(BLOQUEIO_OUTRO_DIA, "excluídas")


@pytest.mark.parametrize(
    "papel,esperado",
    [("admin", True), ("ADMIN", True), ("viewer", False), ("", False), (None, False)],
)
def test_pode_escrever(papel, esperado):
    assert pode_escrever(papel) is esperado
