import sqlite3
from datetime import datetime
from decimal import Decimal

import pytest

from producoes.config import DefaultConfig
from producoes.domain.erros import Motivo
from producoes.domain.models import PAPEL_VIEWER, STATUS_FECHADO, FiltroProducoes, ProducaoForm
from producoes.infra.repositories import PeriodoRepo, ProducaoRepo
from producoes.usecases.ledger_service import LedgerService
from producoes.usecases.relatorios import conferencia_totais


class Relogio:
    """Relógio controlável para os testes da regra do mesmo dia."""

    def __init__(self, agora: datetime):
        self.agora = agora

    def __call__(self) -> datetime:
        return self.agora


@pytest.fixture
def relogio():
    return Relogio(datetime(2026, 1, 22, 10, 0, 0))


@pytest.fixture
def svc(tmp_path, relogio):
    return LedgerService(db_path=str(tmp_path / "ledger.sqlite"), relogio=relogio)


@pytest.fixture
def cliente_id(svc):
    return svc.adicionar_cliente("Padaria Central", papel="admin").registro.id


def _form(cliente_id, **kw):
    base = dict(
        data="2026-01-22",
        cliente_id=cliente_id,
        tipo="Feed",
        nome_producao="Post promo",
        quantidade=3,
        valor_unitario="150.00",
    )
    base.update(kw)
    return ProducaoForm(**base)


def _total(svc, periodo_id):
    return svc.get_periodo(periodo_id).total_periodo


# ---------------------------
# criação
# ---------------------------

def test_criar_producao_calcula_total_e_periodo(svc, cliente_id):
    res = svc.criar_producao(_form(cliente_id), papel="admin")
    assert res.success, res.errors
    p = res.producao
    assert p.total == Decimal("450.00")
    assert p.status == "Aberto"

    periodo = svc.get_periodo(p.periodo_id)
    assert periodo.data_inicio == "2026-01-21"
    assert periodo.data_fim == "2026-02-20"
    assert periodo.nome_periodo == "21/01/2026 a 20/02/2026"
    assert periodo.total_periodo == Decimal("450.00")
    # visão materializada já recarregada
    assert svc.get_producao(p.id) is not None


def test_criar_aceita_dicionario(svc, cliente_id):
    res = svc.criar_producao(
        {"data": "22/01/2026", "cliente_id": cliente_id, "tipo": "Story",
         "nome_producao": "Story", "quantidade": "2", "valor_unitario": "R$ 80,00"},
        papel="admin",
    )
    assert res.success, res.errors
    assert res.producao.total == Decimal("160.00")


def test_total_do_periodo_acompanha_cada_mutacao(svc, cliente_id):
    a = svc.criar_producao(_form(cliente_id), papel="admin").producao
    b = svc.criar_producao(_form(cliente_id, quantidade=1, valor_unitario="99.90"), papel="admin").producao
    assert a.periodo_id == b.periodo_id
    assert _total(svc, a.periodo_id) == Decimal("549.90")

    res = svc.atualizar_producao(a.id, _form(cliente_id, quantidade=2), papel="admin")
    assert res.success, res.errors
    assert _total(svc, a.periodo_id) == Decimal("399.90")

    assert svc.excluir_producao(b.id, papel="admin").success
    assert _total(svc, a.periodo_id) == Decimal("300.00")

    dup = svc.duplicar_producao(a.id, papel="admin")
    assert dup.success, dup.errors
    assert _total(svc, a.periodo_id) == Decimal("600.00")
    assert conferencia_totais(db_path=svc.db_path) == []


def test_quantidade_zero_nao_grava_nada(svc, cliente_id):
    res = svc.criar_producao(_form(cliente_id, quantidade=0), papel="admin")
    assert not res.success
    assert res.motivo == Motivo.VALIDACAO
    assert "Quantidade deve ser pelo menos 1" in res.errors
    assert svc.estado.producoes == []
    assert svc.estado.periodos == []


def test_cliente_inexistente(svc):
    res = svc.criar_producao(_form("nao-existe"), papel="admin")
    assert not res.success
    assert res.motivo == Motivo.NAO_ENCONTRADO


def test_projeto_de_outro_cliente_e_rejeitado(svc, cliente_id):
    outro = svc.adicionar_cliente("Outro", papel="admin").registro.id
    projeto = svc.adicionar_projeto("Campanha", outro, papel="admin").registro.id
    res = svc.criar_producao(_form(cliente_id, projeto_id=projeto), papel="admin")
    assert not res.success
    assert res.errors == ["Projeto não pertence ao cliente informado"]


def test_criar_em_periodo_fechado_e_rejeitado(svc, cliente_id):
    p = svc.criar_producao(_form(cliente_id), papel="admin").producao
    assert svc.fechar_periodo(p.periodo_id, papel="admin").success

    res = svc.criar_producao(_form(cliente_id, data="2026-02-01"), papel="admin")
    assert not res.success
    assert res.motivo == Motivo.PERIODO_FECHADO
    assert len(svc.producoes_do_periodo(p.periodo_id)) == 1
    assert _total(svc, p.periodo_id) == Decimal("450.00")


# ---------------------------
# trava de mesmo dia
# ---------------------------

def test_edicao_bloqueada_no_dia_seguinte(svc, cliente_id, relogio):
    p = svc.criar_producao(_form(cliente_id), papel="admin").producao
    assert svc.pode_editar_producao(p)

    relogio.agora = datetime(2026, 1, 23, 8, 0, 0)
    assert not svc.pode_editar_producao(p.id)

    res = svc.atualizar_producao(p.id, _form(cliente_id, quantidade=5), papel="admin")
    assert not res.success
    assert res.motivo == Motivo.EDICAO_BLOQUEADA
    assert "mesmo dia" in res.error

    res = svc.excluir_producao(p.id, papel="admin")
    assert res.motivo == Motivo.EDICAO_BLOQUEADA
    res = svc.duplicar_producao(p.id, papel="admin")
    assert res.motivo == Motivo.EDICAO_BLOQUEADA
    assert len(svc.estado.producoes) == 1


def test_edicao_de_producao_inexistente(svc):
    res = svc.atualizar_producao("nao-existe", ProducaoForm(), papel="admin")
    assert res.motivo == Motivo.NAO_ENCONTRADO


# ---------------------------
# ciclo de vida do período
# ---------------------------

def test_fechar_periodo_fecha_todas_as_producoes(svc, cliente_id):
    ids = [svc.criar_producao(_form(cliente_id, nome_producao=f"P{i}"), papel="admin").producao.id
           for i in range(3)]
    periodo_id = svc.get_producao(ids[0]).periodo_id

    res = svc.fechar_periodo(periodo_id, papel="admin")
    assert res.success
    assert res.periodo.status == "Fechado"
    assert [svc.get_producao(i).status for i in ids] == ["Fechado"] * 3
    assert all(not svc.pode_editar_producao(i) for i in ids)

    again = svc.fechar_periodo(periodo_id, papel="admin")
    assert not again.success
    assert again.motivo == Motivo.JA_FECHADO


def test_reabrir_periodo(svc, cliente_id):
    p = svc.criar_producao(_form(cliente_id), papel="admin").producao
    svc.fechar_periodo(p.periodo_id, papel="admin")

    res = svc.reabrir_periodo(p.periodo_id, papel="admin")
    assert res.success
    assert svc.get_periodo(p.periodo_id).status == "Aberto"
    assert svc.get_producao(p.id).status == "Aberto"
    assert svc.pode_editar_producao(p.id)

    assert svc.reabrir_periodo(p.periodo_id, papel="admin").motivo == Motivo.JA_ABERTO


def test_reabrir_nao_libera_producoes_de_outros_dias(svc, cliente_id, relogio):
    p = svc.criar_producao(_form(cliente_id), papel="admin").producao
    svc.fechar_periodo(p.periodo_id, papel="admin")
    relogio.agora = datetime(2026, 1, 25, 9, 0, 0)
    svc.reabrir_periodo(p.periodo_id, papel="admin")
    assert not svc.pode_editar_producao(p.id)


def test_duplicar_origem_fechada_nao_cria_nada(svc, cliente_id):
    p = svc.criar_producao(_form(cliente_id), papel="admin").producao
    svc.fechar_periodo(p.periodo_id, papel="admin")

    res = svc.duplicar_producao(p.id, papel="admin")
    assert not res.success
    assert res.motivo == Motivo.PERIODO_FECHADO
    assert len(svc.estado.producoes) == 1
    assert len(ProducaoRepo(svc.db_path).get_all()) == 1


def test_duplicar_usa_data_de_hoje(svc, cliente_id):
    p = svc.criar_producao(_form(cliente_id, data="2026-01-21"), papel="admin").producao
    copia = svc.duplicar_producao(p.id, papel="admin").producao
    assert copia.id != p.id
    assert copia.data == "2026-01-22"
    assert copia.nome_producao == p.nome_producao
    assert copia.total == p.total


def test_excluir_em_periodo_fechado(svc, cliente_id):
    p = svc.criar_producao(_form(cliente_id), papel="admin").producao
    svc.fechar_periodo(p.periodo_id, papel="admin")
    res = svc.excluir_producao(p.id, papel="admin")
    assert res.motivo == Motivo.PERIODO_FECHADO
    assert svc.get_producao(p.id) is not None


# ---------------------------
# mudança de data
# ---------------------------

def test_editar_data_mantem_periodo_original(svc, cliente_id):
    p = svc.criar_producao(_form(cliente_id), papel="admin").producao
    res = svc.atualizar_producao(p.id, _form(cliente_id, data="2026-03-05"), papel="admin")
    assert res.success
    assert res.producao.data == "2026-03-05"
    assert res.producao.periodo_id == p.periodo_id
    assert len(svc.estado.periodos) == 1


def test_editar_data_com_reagrupamento(tmp_path, relogio):
    svc = LedgerService(
        db_path=str(tmp_path / "ledger.sqlite"),
        relogio=relogio,
        config=DefaultConfig(reagrupar_ao_editar_data=True),
    )
    cliente_id = svc.adicionar_cliente("Padaria Central", papel="admin").registro.id
    p = svc.criar_producao(_form(cliente_id), papel="admin").producao

    res = svc.atualizar_producao(p.id, _form(cliente_id, data="2026-03-05"), papel="admin")
    assert res.success, res.errors
    novo = svc.get_periodo(res.producao.periodo_id)
    assert novo.id != p.periodo_id
    assert novo.nome_periodo == "21/02/2026 a 20/03/2026"
    assert novo.total_periodo == Decimal("450.00")
    assert _total(svc, p.periodo_id) == Decimal("0.00")


# ---------------------------
# permissões e consultas
# ---------------------------

def test_viewer_nao_grava(svc, cliente_id):
    antes = svc.estado
    res = svc.criar_producao(_form(cliente_id), papel=PAPEL_VIEWER)
    assert not res.success
    assert res.motivo == Motivo.PERMISSAO_NEGADA
    assert svc.estado is antes
    assert ProducaoRepo(svc.db_path).get_all() == []

    assert svc.adicionar_cliente("X", papel=PAPEL_VIEWER).motivo == Motivo.PERMISSAO_NEGADA


def test_find_or_create_pela_fachada(svc, cliente_id):
    a = svc.find_or_create_periodo(cliente_id, "2026-01-25", papel="admin")
    b = svc.find_or_create_periodo(cliente_id, "05/02/2026", papel="admin")
    assert a.success and b.success
    assert a.periodo.id == b.periodo.id
    assert len(PeriodoRepo(svc.db_path).get_all()) == 1

    assert svc.find_or_create_periodo(cliente_id, "xx", papel="admin").motivo == Motivo.VALIDACAO


def test_recalcular_total_pela_fachada(svc, cliente_id):
    p = svc.criar_producao(_form(cliente_id), papel="admin").producao
    PeriodoRepo(svc.db_path).set_total(p.periodo_id, Decimal("1.00"), "2026-01-22T10:00:00")
    assert len(conferencia_totais(db_path=svc.db_path)) == 1

    res = svc.recalcular_total(p.periodo_id, papel="admin")
    assert res.success
    assert res.periodo.total_periodo == Decimal("450.00")
    assert conferencia_totais(db_path=svc.db_path) == []


def test_consultas_por_cliente_e_resumo(svc, cliente_id):
    svc.criar_producao(_form(cliente_id), papel="admin")
    svc.criar_producao(_form(cliente_id, data="2026-01-10", tipo="Reels", quantidade=1), papel="admin")

    periodos = svc.periodos_do_cliente(cliente_id)
    assert [p.data_inicio for p in periodos] == ["2026-01-21", "2025-12-21"]
    svc.fechar_periodo(periodos[1].id, papel="admin")
    assert [p.id for p in svc.periodos_abertos_do_cliente(cliente_id)] == [periodos[0].id]

    assert [p.data for p in svc.producoes_do_cliente(cliente_id)] == ["2026-01-22", "2026-01-10"]

    resumo = svc.resumo_por_tipo(periodos[0].id)
    assert list(resumo)[:3] == ["Feed", "Story", "Reels"]
    assert resumo["Feed"]["total"] == Decimal("450.00")
    assert resumo["Reels"]["itens"] == 0


# ---------------------------
# entradas numéricas fora do intervalo
# ---------------------------

@pytest.mark.parametrize(
    "quantidade,valor",
    [
        (3, float("nan")),
        (3, float("inf")),
        (3, Decimal("NaN")),
        (3, Decimal("-Infinity")),
        (float("inf"), "10"),
        (10 ** 30, "1"),
        (2 ** 70, "1"),
        ("99999999999999999999999", "1,00"),
        (2 ** 63 - 1, "1"),
        (1, "1" + "0" * 40),
    ],
)
def test_numeros_fora_do_intervalo_viram_erro_de_validacao(svc, cliente_id, quantidade, valor):
    res = svc.criar_producao(_form(cliente_id, quantidade=quantidade, valor_unitario=valor), papel="admin")
    assert not res.success
    assert res.motivo == Motivo.VALIDACAO
    assert svc.estado.producoes == []
    assert ProducaoRepo(svc.db_path).get_all() == []


def test_erro_numerico_do_caso_de_uso_nao_atravessa_a_fachada(svc, cliente_id, monkeypatch):
    def estoura(*args, **kwargs):
        raise OverflowError("Python int too large to convert to SQLite INTEGER")

    monkeypatch.setattr("producoes.usecases.ledger_service.criar_producao", estoura)
    res = svc.criar_producao(_form(cliente_id), papel="admin")
    assert not res.success
    assert res.motivo == Motivo.VALIDACAO


# ---------------------------
# falha do banco
# ---------------------------

def test_falha_do_banco_vira_persistencia_e_desfaz_a_escrita(svc, cliente_id):
    p = svc.criar_producao(_form(cliente_id), papel="admin").producao
    estado_antes = svc.estado

    conn = sqlite3.connect(svc.db_path)
    conn.execute(
        """
        CREATE TRIGGER falha_total BEFORE UPDATE OF total_periodo ON periodos
        BEGIN SELECT RAISE(ABORT, 'disco cheio'); END
        """
    )
    conn.commit()
    conn.close()

    res = svc.criar_producao(_form(cliente_id, nome_producao="Outra"), papel="admin")
    assert not res.success
    assert res.motivo == Motivo.PERSISTENCIA
    assert "disco cheio" in res.error
    assert svc.estado is estado_antes

    # a produção inserida antes do recálculo foi desfeita junto
    assert [r["id"] for r in ProducaoRepo(svc.db_path).get_all()] == [p.id]
    assert Decimal(PeriodoRepo(svc.db_path).get(p.periodo_id)["total_periodo"]) == Decimal("450.00")


# ---------------------------
# listagem filtrada e painel
# ---------------------------

def test_producoes_filtradas_com_total(svc, cliente_id):
    outro = svc.adicionar_cliente("Outro", papel="admin").registro.id
    projeto = svc.adicionar_projeto("Campanha", cliente_id, papel="admin").registro.id
    feed = svc.criar_producao(_form(cliente_id, projeto_id=projeto), papel="admin").producao
    story = svc.criar_producao(_form(cliente_id, tipo="Story", quantidade=1, valor_unitario="80"), papel="admin").producao
    svc.criar_producao(_form(outro, quantidade=1, valor_unitario="10"), papel="admin")

    todas, total = svc.producoes()
    assert len(todas) == 3
    assert total == Decimal("540.00")

    lista, total = svc.producoes(FiltroProducoes(cliente_id=cliente_id))
    assert {p.id for p in lista} == {feed.id, story.id}
    assert total == Decimal("530.00")

    lista, total = svc.producoes(FiltroProducoes(cliente_id=cliente_id, tipo="Story"))
    assert [p.id for p in lista] == [story.id]
    assert total == Decimal("80.00")

    lista, _ = svc.producoes(FiltroProducoes(projeto_id=projeto))
    assert [p.id for p in lista] == [feed.id]

    lista, _ = svc.producoes(FiltroProducoes(periodo_id=feed.periodo_id))
    assert {p.id for p in lista} == {feed.id, story.id}

    svc.fechar_periodo(feed.periodo_id, papel="admin")
    lista, total = svc.producoes(FiltroProducoes(status=STATUS_FECHADO))
    assert {p.id for p in lista} == {feed.id, story.id}
    assert total == Decimal("530.00")


def test_painel(svc, cliente_id, relogio):
    inativo = svc.adicionar_cliente("Inativo", papel="admin").registro
    svc.atualizar_cliente(inativo.id, inativo.nome, False, papel="admin")

    svc.criar_producao(_form(cliente_id), papel="admin")
    svc.criar_producao(_form(cliente_id, tipo="Story", quantidade=1, valor_unitario="150"), papel="admin")
    antiga = svc.criar_producao(_form(cliente_id, data="2026-01-10", quantidade=1, valor_unitario="100"),
                                papel="admin").producao
    svc.fechar_periodo(antiga.periodo_id, papel="admin")

    dados = svc.painel()
    assert dados["periodo_atual"] == "21/01/2026 a 20/02/2026"
    assert dados["clientes_ativos"] == 1
    assert dados["producoes_hoje"] == 2
    assert dados["valor_hoje"] == Decimal("600.00")
    assert dados["periodos_abertos"] == 1
    assert dados["total_periodos_abertos"] == Decimal("600.00")
    assert dados["total_producoes"] == 3

    por_tipo = {r["tipo"]: r["percentual"] for r in dados["por_tipo"]}
    assert por_tipo == {"Feed": Decimal("78.6"), "Story": Decimal("21.4")}
