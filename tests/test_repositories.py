import json
import sqlite3

import pytest

from orcamentos.domain.models import Cliente, Endereco, StatusOrcamento
from orcamentos.infra.db import connect
from orcamentos.infra.errors import FalhaPersistencia
from orcamentos.infra.json_store import ARQ_ORCAMENTOS, JsonArmazenamento
from orcamentos.infra.migrations import apply_migrations
from orcamentos.infra.store import abrir_armazenamento
from orcamentos.infra.repositories import SqliteArmazenamento
from conftest import make_orcamento


# -------------------------
# SQLite
# -------------------------

def test_migrations_criam_tabelas(tmp_path):
    db = str(tmp_path / "m.sqlite")
    apply_migrations(db)
    apply_migrations(db)  # idempotente
    with connect(db) as c:
        nomes = {r[0] for r in c.execute("SELECT name FROM sqlite_master WHERE type='table'")}
    assert {"cliente", "servico", "usuario", "orcamento"} <= nomes


def test_sqlite_cliente_com_endereco(store):
    c = Cliente("c9", "Maria Souza", "123.456.789-00", "(41) 9999-0000", "maria@x.com",
                Endereco("Rua A", "10", "Centro", "Curitiba", "PR", "80000-000"), "VIP")
    store.salvar_cliente(c)
    lido = next(x for x in store.listar_clientes() if x.id == "c9")
    assert lido == c
    assert store.excluir_cliente("c9") is True
    assert store.excluir_cliente("c9") is False


def test_sqlite_servicos_do_seed(store):
    nomes = [s.nome for s in store.listar_servicos()]
    assert nomes == sorted(nomes)
    assert store.obter_servico("2").preco_base == 380.0
    assert store.obter_servico("99") is None


def test_sqlite_orcamento_ida_e_volta(store, orcamento):
    store.salvar_orcamento(orcamento)
    lido = store.obter_orcamento("o1")
    assert lido == orcamento
    assert [it.id for it in lido.itens] == ["i1", "i2"]
    assert store.obter_orcamento("MA-2025-0001") == orcamento
    assert store.obter_orcamento("nada") is None


def test_sqlite_ultima_gravacao_prevalece(store, orcamento):
    store.salvar_orcamento(orcamento)
    store.salvar_orcamento(make_orcamento(status=StatusOrcamento.FECHADO, frete=100))
    todos = store.listar_orcamentos()
    assert len(todos) == 1
    assert todos[0].status == StatusOrcamento.FECHADO
    assert todos[0].total == pytest.approx(3400.0)


def test_sqlite_total_gravado_e_recalculado(store, orcamento):
    store.salvar_orcamento(orcamento)
    with connect(store.db_path) as c:
        c.execute("UPDATE orcamento SET total = 1, subtotal = 1 WHERE id = 'o1'")
    lido = store.obter_orcamento("o1")
    assert lido.subtotal == pytest.approx(3300.0)
    assert lido.total == pytest.approx(3300.0)


def test_sqlite_numeros_e_resumo(store):
    store.salvar_orcamento(make_orcamento(id="a", numero="MA-2025-0001", status="Enviado"))
    store.salvar_orcamento(make_orcamento(id="b", numero="MA-2025-0002", status="Enviado"))
    store.salvar_orcamento(make_orcamento(id="c", numero="MA-2024-0001", status="Pedido Fechado"))
    assert sorted(store.numeros_do_ano(2025)) == ["MA-2025-0001", "MA-2025-0002"]
    resumo = {r["status"]: r for r in store.resumo_por_status()}
    assert resumo["Enviado"]["quantidade"] == 2
    assert resumo["Enviado"]["valor_total"] == pytest.approx(6600.0)
    assert resumo["Pedido Fechado"]["quantidade"] == 1


def test_sqlite_usuarios_do_seed(store):
    emails = {u.email for u in store.listar_usuarios()}
    assert emails == {"admin@metalapex.com.br", "vendedor@metalapex.com.br"}


# -------------------------
# JSON (camelCase)
# -------------------------

def test_json_dados_iniciais(json_store):
    assert [c.id for c in json_store.listar_clientes()] == ["1"]
    assert len(json_store.listar_servicos()) == 4
    assert len(json_store.listar_usuarios()) == 2
    assert json_store.listar_orcamentos() == []


def test_json_sem_dados_iniciais(tmp_path):
    s = JsonArmazenamento(str(tmp_path / "vazio"), seed=False)
    assert s.listar_clientes() == []
    assert s.listar_servicos() == []


def test_json_grava_chaves_camel(json_store, orcamento):
    json_store.salvar_orcamento(orcamento)
    with open(json_store.pasta / ARQ_ORCAMENTOS, encoding="utf-8") as f:
        bruto = json.load(f)
    reg = bruto[0]
    assert reg["clienteNome"] == "Construtora Exemplo Ltda"
    assert "criadoEm" in reg and "validoAte" in reg
    assert reg["itens"][0]["precoUnitario"] == 450
    assert reg["itens"][0]["tipoCalculo"] == "M2"
    assert reg["itens"][1]["tipoCalculo"] == "UNIT"
    assert json_store.obter_orcamento("MA-2025-0001") == orcamento


def test_json_total_gravado_e_recalculado(json_store, orcamento):
    json_store.salvar_orcamento(orcamento)
    path = json_store.pasta / ARQ_ORCAMENTOS
    bruto = json.loads(path.read_text(encoding="utf-8"))
    bruto[0]["total"] = 999999
    bruto[0]["itens"][0]["total"] = 1
    path.write_text(json.dumps(bruto), encoding="utf-8")
    lido = json_store.obter_orcamento("o1")
    assert lido.itens[0].total == pytest.approx(2700.0)
    assert lido.total == pytest.approx(3300.0)


def test_json_le_data_iso_com_z(json_store):
    registro = {
        "id": "web1", "numero": "MA-2025-0005", "clienteId": "1", "clienteNome": "Web",
        "criadoEm": "2025-05-01T12:00:00.000Z", "validoAte": "2025-05-21T12:00:00.000Z",
        "status": "Follow-up", "itens": [], "frete": 0, "instalacao": 0, "desconto": 0,
    }
    (json_store.pasta / ARQ_ORCAMENTOS).write_text(json.dumps([registro]), encoding="utf-8")
    o = json_store.obter_orcamento("web1")
    assert o.status == StatusOrcamento.FOLLOW_UP
    assert o.criado_em.day == 1


def test_json_ordem_clientes_novos_primeiro(json_store):
    json_store.salvar_cliente(Cliente("n1", "Novo"))
    assert json_store.listar_clientes()[0].id == "n1"


def test_abrir_armazenamento(tmp_path):
    assert abrir_armazenamento("sqlite", str(tmp_path / "x.sqlite")).backend == "sqlite"
    assert abrir_armazenamento("JSON", str(tmp_path / "j")).backend == "json"
    with pytest.raises(ValueError):
        abrir_armazenamento("mongo", str(tmp_path))


def test_mesma_interface_nos_dois_backends(store, json_store):
    for nome in ("listar_clientes", "salvar_cliente", "excluir_cliente", "listar_servicos",
                 "obter_servico", "salvar_servico", "excluir_servico", "listar_orcamentos",
                 "obter_orcamento", "salvar_orcamento", "numeros_do_ano", "resumo_por_status",
                 "listar_usuarios", "salvar_usuario", "excluir_usuario"):
        assert callable(getattr(store, nome))
        assert callable(getattr(json_store, nome))


def test_sqlite_erro_de_gravacao_vira_falha_persistencia(tmp_path, orcamento):
    s = SqliteArmazenamento(str(tmp_path / "ro.sqlite"))
    with connect(s.db_path) as c:
        c.executescript("DROP VIEW IF EXISTS vw_orcamentos_por_status; DROP TABLE orcamento;")
    with pytest.raises(FalhaPersistencia) as exc:
        s.salvar_orcamento(orcamento)
    assert isinstance(exc.value.__cause__, sqlite3.Error)
    assert isinstance(exc.value, IOError)


def test_connect_em_pasta_vira_falha_persistencia(tmp_path):
    with pytest.raises(FalhaPersistencia, match="abrir o banco"):
        with connect(str(tmp_path)):
            pass


def test_abrir_armazenamento_sqlite_em_pasta(tmp_path):
    with pytest.raises(FalhaPersistencia):
        abrir_armazenamento("sqlite", str(tmp_path))


def test_excluir_usuario_nos_dois_backends(store, json_store):
    for s in (store, json_store):
        assert s.excluir_usuario("2") is True
        assert s.excluir_usuario("2") is False
        assert [u.id for u in s.listar_usuarios()] == ["1"]
