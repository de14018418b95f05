from decimal import Decimal

from producoes.domain.models import TIPOS_PADRAO
from producoes.infra.db import connect
from producoes.infra.migrations import apply_migrations
from producoes.infra.views import create_views
from producoes.infra.repositories import ClienteRepo, PeriodoRepo, TipoProducaoRepo

AGORA = "2026-01-22T10:00:00"


def _db(tmp_path):
    db_path = str(tmp_path / "migr.sqlite")
    apply_migrations(db_path)
    create_views(db_path)
    return db_path


def test_migracoes_idempotentes(tmp_path):
    db_path = _db(tmp_path)
    apply_migrations(db_path)
    create_views(db_path)

    with connect(db_path) as c:
        assert c.execute("PRAGMA user_version;").fetchone()[0] == 2
        views = {r[0] for r in c.execute("SELECT name FROM sqlite_master WHERE type = 'view'")}
    assert {"vw_periodos_resumo", "vw_producoes_detalhe"} <= views
    assert [t["nome"] for t in TipoProducaoRepo(db_path).get_all()] == TIPOS_PADRAO


def test_periodo_unico_por_cliente_e_intervalo(tmp_path):
    db_path = _db(tmp_path)
    ClienteRepo(db_path).insert({"id": "c1", "nome": "A", "ativo": True, "created_at": AGORA, "updated_at": AGORA})
    base = {
        "cliente_id": "c1", "data_inicio": "2026-01-21", "data_fim": "2026-02-20",
        "nome_periodo": "21/01/2026 a 20/02/2026", "status": "Aberto",
        "total_periodo": Decimal("0.00"), "created_at": AGORA, "updated_at": AGORA,
    }
    primeiro = PeriodoRepo(db_path).insert_if_absent({"id": "pe1", **base})
    segundo = PeriodoRepo(db_path).insert_if_absent({"id": "pe2", **base})
    assert primeiro["id"] == segundo["id"] == "pe1"
    assert len(PeriodoRepo(db_path).get_all()) == 1

    resumo = PeriodoRepo(db_path).resumo()
    assert resumo[0]["qtd_producoes"] == 0
    assert resumo[0]["total_periodo"] == "0.00"
