"""
Tests for the per-concern file loggers.
"""

import logging

import pytest

from orcamentos.infra import logger as lg


@pytest.fixture
def logs(tmp_path, monkeypatch):
    """Liga o logging gravando em arquivos temporários."""
    monkeypatch.setattr(lg, "ENABLE_LOGGING", True)
    arquivos = {
        "transactions": ("orcamentos.transactions", tmp_path / "transactions.log"),
        "orcamentos": ("orcamentos.orcamentos", tmp_path / "orcamentos.log"),
        "database": ("orcamentos.database", tmp_path / "database.log"),
        "system": ("orcamentos.system", tmp_path / "system.log"),
    }
    for tipo, (nome, path) in arquivos.items():
        lg.setup_logger(nome, str(path))
        monkeypatch.setitem(lg._LOG_FILES, tipo, path)
    yield tmp_path
    for nome, _ in arquivos.values():
        for h in logging.getLogger(nome).handlers:
            h.close()


def test_logging_desligado_nao_grava(tmp_path):
    assert lg.ENABLE_LOGGING is False
    lg.log_system_event("teste")
    assert lg.get_log_summary("system") is None


def test_log_orcamento(logs):
    lg.log_orcamento("save", "MA-2025-0001", 3300.0, status="Enviado")
    texto = lg.get_log_summary("orcamentos")
    assert "ORCAMENTO_SAVE" in texto
    assert "MA-2025-0001" in texto
    assert "Enviado" in texto


def test_log_transaction_sucesso_e_falha(logs):
    lg.log_transaction("salvar_orcamento", {"numero": "MA-2025-0001"}, result="success")
    lg.log_transaction("salvar_orcamento", {"numero": "MA-2025-0002"}, error="disco cheio")
    linhas = lg.get_log_summary("transactions").splitlines()
    assert "TRANSACTION_SUCCESS" in linhas[0]
    assert "TRANSACTION_FAILED" in linhas[1]
    assert "disco cheio" in linhas[1]


def test_log_database_file_e_system(logs):
    lg.log_database_operation("cliente", "UPSERT", 1, id="c1")
    lg.log_file_operation("pdf", "Orcamento_MA-2025-0001.pdf", rows_processed=2)
    lg.log_system_event("login_falhou", {"email": "x@y"}, level="warning")
    assert "DB_UPSERT" in lg.get_log_summary("database")
    system = lg.get_log_summary("system")
    assert "FILE_PDF" in system
    assert "WARNING" in system


def test_get_log_summary_limita_linhas(logs):
    for n in range(10):
        lg.log_system_event(f"evento_{n}")
    ultimas = lg.get_log_summary("system", lines=3).splitlines()
    assert len(ultimas) == 3
    assert "evento_9" in ultimas[-1]


def test_get_log_summary_tipo_desconhecido(logs):
    assert lg.get_log_summary("inexistente") == "Log inexistente não encontrado."


def test_log_operacao_do_editor(logs, store, orcamento):
    from orcamentos.usecases.editar_orcamento import salvar_orcamento

    salvar_orcamento(store, orcamento)
    assert "ORCAMENTO_SAVE" in lg.get_log_summary("orcamentos")
    assert "DB_UPSERT" in lg.get_log_summary("database")
