from producoes.infra import logger as log


def test_setup_logger_grava_em_arquivo(tmp_path):
    arquivo = tmp_path / "logs" / "teste.log"
    lg = log.setup_logger("producoes.teste", str(arquivo))
    lg.info("mensagem de teste")
    for h in lg.handlers:
        h.flush()
    assert "mensagem de teste" in arquivo.read_text(encoding="utf-8")
    assert lg.propagate is False


def test_log_transaction_respeita_flag(tmp_path, monkeypatch):
    arquivo = tmp_path / "transactions.log"
    lg = log.setup_logger("producoes.teste_transacoes", str(arquivo))
    monkeypatch.setattr(log, "transaction_logger", lg)

    monkeypatch.setattr(log, "ENABLE_LOGGING", False)
    monkeypatch.setattr(log, "ENABLE_OUTPUT", False)
    log.log_transaction("criar_producao", {"id": "p1"}, result="success")
    assert not arquivo.exists()

    monkeypatch.setattr(log, "ENABLE_LOGGING", True)
    log.log_transaction("criar_producao", {"id": "p1"}, result="success")
    log.log_transaction("fechar_periodo", {"id": "pe1"}, error="Período já está fechado")
    for h in lg.handlers:
        h.flush()
    conteudo = arquivo.read_text(encoding="utf-8")
    assert "TRANSACTION_SUCCESS: criar_producao" in conteudo
    assert "TRANSACTION_FAILED: fechar_periodo - Período já está fechado" in conteudo


def test_get_log_summary_inexistente(monkeypatch, tmp_path):
    monkeypatch.setitem(log.LOG_FILES, "transactions", tmp_path / "nada.log")
    assert "não encontrado" in log.get_log_summary("transactions")
