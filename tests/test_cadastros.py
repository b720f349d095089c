"""
Tests for clients, services and users registration, including XLSX import.
"""

import sqlite3
from unittest.mock import patch

import pandas as pd
import pytest

from orcamentos.adapters.planilhas import (
    _normalize_columns,
    load_clientes_from_xlsx,
    load_servicos_from_xlsx,
)
from orcamentos.domain.models import PapelUsuario, TipoCalculo, Usuario
from orcamentos.domain.policies import PermissaoNegada
from orcamentos.infra.errors import FalhaPersistencia
from orcamentos.infra.seed import SENHA_DEMO
from orcamentos.infra.senhas import verificar_senha
from orcamentos.usecases import cadastros

ADMIN = Usuario("1", "Administrador Metal Apex", "admin@metalapex.com.br", PapelUsuario.ADMIN)
VENDEDOR = Usuario("2", "Vendedor Exemplo", "vendedor@metalapex.com.br", PapelUsuario.VENDEDOR)


# -------------------------
# Clientes e serviços
# -------------------------

def test_criar_e_excluir_cliente(store):
    c = cadastros.criar_cliente(store, "  Maria Souza ", telefone="(41) 9999-0000")
    assert c.nome == "Maria Souza"
    assert any(x.id == c.id for x in cadastros.listar_clientes(store))
    assert cadastros.excluir_cliente(store, c.id) is True
    assert cadastros.excluir_cliente(store, c.id) is False


def test_cliente_sem_nome(store):
    with pytest.raises(ValueError, match="Informe o nome do cliente"):
        cadastros.criar_cliente(store, "   ")


def test_criar_servico_aceita_preco_com_virgula(store):
    s = cadastros.criar_servico(store, "Escada Caracol", "UNIT", "3.500,00", categoria="Escadas")
    lido = store.obter_servico(s.id)
    assert lido.tipo_calculo == TipoCalculo.UNIDADE
    assert lido.preco_base == 3500.0


def test_criar_servico_tipo_invalido(store):
    with pytest.raises(ValueError):
        cadastros.criar_servico(store, "X", "KG", 1)


def test_excluir_servico_nao_afeta_orcamento(store, orcamento):
    store.salvar_orcamento(orcamento)
    assert cadastros.excluir_servico(store, "1") is True
    item = store.obter_orcamento("o1").itens[0]
    assert item.nome == "Portão Basculante"
    assert item.preco_unitario == 450.0


def test_atualizar_cliente_troca_so_o_informado(store):
    c = cadastros.atualizar_cliente(store, "1", telefone=" (41) 3333-4444 ", cidade="Londrina", email=None)
    assert c.telefone == "(41) 3333-4444"
    assert c.endereco.cidade == "Londrina"
    lido = cadastros.obter_cliente(store, "1")
    assert lido == c
    assert lido.nome == "Construtora Exemplo Ltda"


def test_atualizar_cliente_observacao_vazia_limpa(store):
    cadastros.atualizar_cliente(store, "1", observacoes="pagar no boleto")
    assert cadastros.obter_cliente(store, "1").observacoes == "pagar no boleto"
    assert cadastros.atualizar_cliente(store, "1", observacoes="").observacoes is None


def test_atualizar_cliente_erros(store):
    with pytest.raises(KeyError):
        cadastros.atualizar_cliente(store, "99", nome="X")
    with pytest.raises(ValueError, match="campos desconhecidos: cor"):
        cadastros.atualizar_cliente(store, "1", cor="azul")
    with pytest.raises(ValueError, match="Informe o nome do cliente"):
        cadastros.atualizar_cliente(store, "1", nome="  ")


def test_atualizar_servico(store):
    s = cadastros.atualizar_servico(store, "1", preco_base="480,50", tipo_calculo="linear")
    assert s.preco_base == 480.5
    assert s.tipo_calculo == TipoCalculo.LINEAR
    assert store.obter_servico("1").preco_base == 480.5
    with pytest.raises(KeyError):
        cadastros.atualizar_servico(store, "99", nome="X")
    with pytest.raises(ValueError):
        cadastros.atualizar_servico(store, "1", tipo_calculo="KG")


def test_falha_do_banco_vira_falha_persistencia(store):
    with patch.object(store, "salvar_cliente", side_effect=sqlite3.OperationalError("database is locked")):
        with pytest.raises(FalhaPersistencia) as exc:
            cadastros.criar_cliente(store, "Maria")
    assert "salvar cliente" in str(exc.value)
    assert isinstance(exc.value.__cause__, sqlite3.OperationalError)
    with patch.object(store, "listar_servicos", side_effect=sqlite3.DatabaseError("malformed")):
        with pytest.raises(FalhaPersistencia):
            cadastros.listar_servicos(store)


# -------------------------
# Usuários
# -------------------------

def test_listar_usuarios_somente_admin(store):
    assert len(cadastros.listar_usuarios(store, ADMIN)) == 2
    with pytest.raises(PermissaoNegada):
        cadastros.listar_usuarios(store, VENDEDOR)
    with pytest.raises(PermissaoNegada):
        cadastros.listar_usuarios(store, None)


def test_criar_usuario(store):
    u = cadastros.criar_usuario(store, ADMIN, "Novo Vendedor", "Novo@MetalApex.com.br", "abc", "Vendedor")
    assert u.email == "novo@metalapex.com.br"
    assert u.papel == PapelUsuario.VENDEDOR
    assert u.ativo
    assert u.senha_hash and "abc" not in u.senha_hash


def test_criar_usuario_email_duplicado(store):
    with pytest.raises(ValueError, match="E-mail já cadastrado"):
        cadastros.criar_usuario(store, ADMIN, "Outro", "ADMIN@metalapex.com.br", "x")


def test_criar_usuario_exige_admin(store):
    with pytest.raises(PermissionError):
        cadastros.criar_usuario(store, VENDEDOR, "Outro", "outro@x.com", "x")


def test_definir_usuario_ativo(store):
    u = cadastros.definir_usuario_ativo(store, ADMIN, "2", False)
    assert u.ativo is False
    assert next(x for x in store.listar_usuarios() if x.id == "2").ativo is False
    with pytest.raises(KeyError):
        cadastros.definir_usuario_ativo(store, ADMIN, "99", True)


def test_atualizar_usuario_senha_vazia_mantem(store):
    antes = next(u for u in store.listar_usuarios() if u.id == "2")
    u = cadastros.atualizar_usuario(store, ADMIN, "2", nome="Vendedor Sênior", papel="administrador", senha="")
    assert u.nome == "Vendedor Sênior"
    assert u.papel == PapelUsuario.ADMIN
    assert u.senha_hash == antes.senha_hash

    u = cadastros.atualizar_usuario(store, ADMIN, "2", senha="nova123")
    assert verificar_senha("nova123", u.senha_hash)
    assert not verificar_senha(SENHA_DEMO, u.senha_hash)


def test_atualizar_usuario_email(store):
    # o próprio e-mail, em outra caixa, não conta como duplicado
    u = cadastros.atualizar_usuario(store, ADMIN, "2", email="VENDEDOR@metalapex.com.br")
    assert u.email == "vendedor@metalapex.com.br"
    with pytest.raises(ValueError, match="E-mail já cadastrado"):
        cadastros.atualizar_usuario(store, ADMIN, "2", email="admin@metalapex.com.br")
    with pytest.raises(PermissaoNegada):
        cadastros.atualizar_usuario(store, VENDEDOR, "2", nome="Eu Mesmo")


def test_excluir_usuario(store):
    with pytest.raises(ValueError, match="excluir a si mesmo"):
        cadastros.excluir_usuario(store, ADMIN, "1")
    with pytest.raises(PermissaoNegada):
        cadastros.excluir_usuario(store, VENDEDOR, "1")
    assert cadastros.excluir_usuario(store, ADMIN, "2") is True
    assert cadastros.excluir_usuario(store, ADMIN, "2") is False
    assert [u.id for u in store.listar_usuarios()] == ["1"]


# -------------------------
# Importação XLSX
# -------------------------

def test_normalize_columns_sinonimos():
    df = pd.DataFrame(columns=["Código", "Razão Social", "CPF/CNPJ", "E-mail", "UF", "Preço Base", "Tipo de Cálculo"])
    cols = list(_normalize_columns(df).columns)
    assert cols == ["id", "nome", "documento", "email", "estado", "preco_base", "tipo_calculo"]


def test_load_clientes_from_xlsx(tmp_path):
    path = tmp_path / "clientes.xlsx"
    pd.DataFrame({
        "Nome": ["Maria Souza", None, "Serralheria Boa Vista"],
        "CPF/CNPJ": ["123.456.789-00", None, "11.222.333/0001-44"],
        "Telefone": ["(41) 9999-0000", None, None],
        "Endereço": ["Rua A", None, "Rua B"],
        "Número": ["10", None, "200"],
        "Cidade": ["Curitiba", None, "Londrina"],
        "UF": ["PR", None, "PR"],
    }).to_excel(path, index=False)

    rows = load_clientes_from_xlsx(str(path))
    assert [r["nome"] for r in rows] == ["Maria Souza", "Serralheria Boa Vista"]
    assert rows[0]["documento"] == "123.456.789-00"
    assert rows[0]["endereco"]["rua"] == "Rua A"
    assert rows[0]["endereco"]["cidade"] == "Curitiba"
    assert rows[1]["telefone"] == ""
    assert rows[0]["id"] is None


def test_load_servicos_from_xlsx(tmp_path):
    path = tmp_path / "servicos.xlsx"
    pd.DataFrame({
        "Serviço": ["Portão de Correr", "Corrimão", "Fechadura"],
        "Tipo": ["m²", "Linear", "un"],
        "Preço": ["R$ 520,00", "310", "85,5"],
        "Categoria": ["Portões", "Serralheria", None],
    }).to_excel(path, index=False)

    rows = load_servicos_from_xlsx(str(path))
    assert [r["tipo_calculo"] for r in rows] == ["M2", "LINEAR", "UNIT"]
    assert rows[0]["preco_base"] == "R$ 520,00"
    assert rows[2]["categoria"] == ""


def test_importar_servicos_xlsx(store, tmp_path):
    path = tmp_path / "servicos.xlsx"
    pd.DataFrame({
        "Código": ["10", "1"],
        "Nome": ["Portão de Correr", "Portão Basculante Reforçado"],
        "Tipo": ["M2", "M2"],
        "Valor": ["R$ 520,00", "500"],
    }).to_excel(path, index=False)

    info = cadastros.importar_servicos_xlsx(store, str(path))
    assert info["linhas_importadas"] == 2
    assert store.obter_servico("10").preco_base == 520.0
    # mesmo id substitui o registro
    assert store.obter_servico("1").nome == "Portão Basculante Reforçado"
    assert len(store.listar_servicos()) == 5


def test_importar_clientes_xlsx(store, tmp_path):
    path = tmp_path / "clientes.xlsx"
    pd.DataFrame({"Cliente": ["Oficina Central"], "E-mail": ["oficina@x.com"]}).to_excel(path, index=False)
    info = cadastros.importar_clientes_xlsx(store, str(path))
    assert info == {"arquivo": str(path), "linhas_importadas": 1}
    assert any(c.email == "oficina@x.com" for c in store.listar_clientes())


def test_importar_arquivo_inexistente(store, tmp_path):
    with pytest.raises(FileNotFoundError):
        cadastros.importar_clientes_xlsx(store, str(tmp_path / "nao_existe.xlsx"))
