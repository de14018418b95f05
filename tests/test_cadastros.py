from datetime import datetime

import pytest

from producoes.domain.erros import Motivo
from producoes.domain.models import TIPOS_PADRAO, ProducaoForm
from producoes.usecases.ledger_service import LedgerService


@pytest.fixture
def svc(tmp_path):
    return LedgerService(
        db_path=str(tmp_path / "cadastros.sqlite"),
        relogio=lambda: datetime(2026, 1, 22, 10, 0, 0),
    )


def _producao(svc, cliente_id, **kw):
    form = ProducaoForm(data="2026-01-22", cliente_id=cliente_id, tipo="Feed",
                        nome_producao="Post", quantidade=1, valor_unitario="100")
    for k, v in kw.items():
        setattr(form, k, v)
    res = svc.criar_producao(form, papel="admin")
    assert res.success, res.errors
    return res.producao


def test_tipos_padrao_semeados(svc):
    assert [t.nome for t in svc.tipos_ativos()] == TIPOS_PADRAO


def test_cliente_nome_obrigatorio_e_aparado(svc):
    assert svc.adicionar_cliente("   ", papel="admin").motivo == Motivo.VALIDACAO
    res = svc.adicionar_cliente("  Padaria Central ", papel="admin")
    assert res.registro.nome == "Padaria Central"
    assert [c.nome for c in svc.clientes_ativos()] == ["Padaria Central"]


def test_desativar_cliente_some_da_lista_de_ativos(svc):
    c = svc.adicionar_cliente("Padaria", papel="admin").registro
    res = svc.atualizar_cliente(c.id, "Padaria Nova", False, papel="admin")
    assert res.success
    assert svc.clientes_ativos() == []
    assert svc.get_cliente(c.id).nome == "Padaria Nova"


def test_excluir_cliente_em_uso_e_recusado(svc):
    c = svc.adicionar_cliente("Padaria", papel="admin").registro
    _producao(svc, c.id)
    res = svc.excluir_cliente(c.id, papel="admin")
    assert res.motivo == Motivo.EM_USO
    assert svc.get_cliente(c.id) is not None


def test_excluir_cliente_leva_projetos_sem_uso(svc):
    c = svc.adicionar_cliente("Padaria", papel="admin").registro
    svc.adicionar_projeto("Campanha", c.id, papel="admin")
    assert svc.excluir_cliente(c.id, papel="admin").success
    assert svc.estado.clientes == []
    assert svc.estado.projetos == []


def test_projetos_do_cliente(svc):
    a = svc.adicionar_cliente("A", papel="admin").registro
    b = svc.adicionar_cliente("B", papel="admin").registro
    pa = svc.adicionar_projeto("Campanha A", a.id, papel="admin").registro
    svc.adicionar_projeto("Campanha B", b.id, papel="admin")
    assert [p.nome for p in svc.projetos_do_cliente(a.id)] == ["Campanha A"]

    svc.atualizar_projeto(pa.id, "Campanha A", False, papel="admin")
    assert svc.projetos_do_cliente(a.id) == []

    assert svc.adicionar_projeto("X", "nao-existe", papel="admin").motivo == Motivo.NAO_ENCONTRADO


def test_excluir_projeto_em_uso(svc):
    c = svc.adicionar_cliente("Padaria", papel="admin").registro
    pj = svc.adicionar_projeto("Campanha", c.id, papel="admin").registro
    _producao(svc, c.id, projeto_id=pj.id)
    assert svc.excluir_projeto(pj.id, papel="admin").motivo == Motivo.EM_USO


def test_tipo_duplicado_e_recusado(svc):
    assert svc.adicionar_tipo("feed", papel="admin").motivo == Motivo.VALIDACAO
    res = svc.adicionar_tipo("Carrossel", papel="admin")
    assert res.success
    assert svc.tipos_ativos()[-1].nome == "Carrossel"


def test_tipo_em_uso_nao_pode_ser_renomeado_nem_excluido(svc):
    c = svc.adicionar_cliente("Padaria", papel="admin").registro
    _producao(svc, c.id)
    feed = next(t for t in svc.tipos_ativos() if t.nome == "Feed")

    assert svc.atualizar_tipo(feed.id, "Post", True, papel="admin").motivo == Motivo.EM_USO
    assert svc.excluir_tipo(feed.id, papel="admin").motivo == Motivo.EM_USO

    res = svc.atualizar_tipo(feed.id, "Feed", False, papel="admin")
    assert res.success
    assert "Feed" not in [t.nome for t in svc.tipos_ativos()]


def test_excluir_tipo_sem_uso(svc):
    logo = next(t for t in svc.tipos_ativos() if t.nome == "Logo")
    assert svc.excluir_tipo(logo.id, papel="admin").success
    assert "Logo" not in [t.nome for t in svc.estado.tipos]
