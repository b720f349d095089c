"""
Tests for the Rich menu TUI (prompts are patched).
"""

import io
from unittest.mock import patch

import pytest
from rich.console import Console
from rich.prompt import Confirm, Prompt

from orcamentos.adapters.tui import OrcamentosTUI
from orcamentos.domain.models import ItemOrcamento, PapelUsuario, TipoCalculo, Usuario
from orcamentos.usecases.editar_orcamento import novo_orcamento
from conftest import make_orcamento

ADMIN = Usuario("1", "Administrador Metal Apex", "admin@metalapex.com.br", PapelUsuario.ADMIN)
VENDEDOR = Usuario("2", "Vendedor Exemplo", "vendedor@metalapex.com.br", PapelUsuario.VENDEDOR)


@pytest.fixture
def tui(store, tmp_path):
    console = Console(file=io.StringIO(), width=140)
    return OrcamentosTUI(store, session_path=str(tmp_path / "sessao.json"), console=console)


def _saida(tui):
    return tui.console.file.getvalue()


def _digitar(*respostas):
    """Respostas em ordem; None = Enter (aceita o valor padrão)."""
    fila = list(respostas)

    def ask(*args, **kwargs):
        r = fila.pop(0)
        return kwargs.get("default", "") if r is None else r
    return ask


def test_tui_creation(tui):
    assert tui.usuario is None
    assert tui.store is not None


def test_editor_monta_e_salva_orcamento(tui, store):
    respostas = [
        "1", "1",                        # cliente
        "2", "1", "4",                   # itens: adicionar, Portão Basculante
        "2", "1,5", "1", "450", "1",     # largura, altura, qtd, preço, fator
        "0",                             # volta ao editor
        "4",                             # salvar
        "0",                             # sair do editor
    ]
    with patch.object(Prompt, "ask", side_effect=respostas):
        orc = tui.editor(novo_orcamento(store))

    assert orc.cliente_nome == "Construtora Exemplo Ltda"
    assert orc.itens[0].nome == "Portão Basculante"
    assert orc.total == pytest.approx(1350.0)
    assert store.obter_orcamento(orc.numero).total == pytest.approx(1350.0)
    assert "salvo" in _saida(tui)


def test_editor_mostra_erro_ao_salvar_sem_itens(tui, store):
    with patch.object(Prompt, "ask", side_effect=["4", "0"]):
        tui.editor(novo_orcamento(store))
    assert "Selecione um cliente" in _saida(tui)
    assert store.listar_orcamentos() == []


def test_etapa_condicoes(tui, store):
    orc = novo_orcamento(store)
    respostas = ["100", "0", "50", "À vista", "10 dias", "Pintura inclusa", "Enviado"]
    with patch.object(Prompt, "ask", side_effect=respostas):
        orc = tui.etapa_condicoes(orc)
    assert orc.frete == 100.0
    assert orc.desconto == 50.0
    assert orc.condicoes_pagamento == "À vista"
    assert orc.observacoes == "Pintura inclusa"
    assert orc.status.value == "Enviado"
    assert orc.total == pytest.approx(50.0)


def test_run_com_login(tui):
    respostas = ["admin@metalapex.com.br", "123", "4", "0"]
    with patch.object(Prompt, "ask", side_effect=respostas):
        tui.run()
    saida = _saida(tui)
    assert "Bem-vindo, Administrador Metal Apex" in saida
    assert "Usuários" in saida
    assert "Painel" in saida


def test_run_login_invalido_desiste(tui):
    with patch.object(Prompt, "ask", side_effect=["admin@metalapex.com.br", "errada"]), \
         patch.object(Confirm, "ask", return_value=False):
        tui.run()
    assert "E-mail ou senha inválidos" in _saida(tui)
    assert tui.usuario is None


def test_menu_usuarios_exige_admin(tui):
    tui.usuario = VENDEDOR
    with pytest.raises(PermissionError):
        tui.menu_usuarios()


def test_lista_orcamentos(tui, store, orcamento):
    store.salvar_orcamento(orcamento)
    with patch.object(Prompt, "ask", return_value="construtora"):
        tui.lista_orcamentos()
    assert "MA-2025-0001" in _saida(tui)

    with patch.object(Prompt, "ask", return_value="ninguem"):
        tui.lista_orcamentos()
    assert "Nenhum orçamento encontrado." in _saida(tui)


def test_tabela_itens_e_resumo(tui, orcamento):
    tui.console.print(tui.tabela_itens(orcamento))
    tui.console.print(tui.resumo(orcamento))
    saida = _saida(tui)
    assert "3 x 2 m" in saida
    assert "Unid." in saida
    assert "R$ 3.300,00" in saida


def test_editar_item_enter_mantem_valores_exatos(tui):
    item = ItemOrcamento("i1", nome="Grade", tipo_calculo=TipoCalculo.M2, largura=1.234, altura=2.005,
                         quantidade=1, preco_unitario=99.999, fator_dificuldade=1.25)
    orc = make_orcamento(itens=(item,))
    with patch.object(Prompt, "ask", side_effect=_digitar(*[None] * 7)):
        editado = tui.editar_item(orc, "i1")
    assert editado.itens[0].largura == 1.234
    assert editado.itens[0].altura == 2.005
    assert editado.itens[0].preco_unitario == 99.999
    assert editado.total == orc.total


def test_etapa_condicoes_enter_mantem_ajustes(tui):
    orc = make_orcamento(frete=120.75, instalacao=0.5, desconto=33.333)
    with patch.object(Prompt, "ask", side_effect=_digitar(*[None] * 7)):
        editado = tui.etapa_condicoes(orc)
    assert (editado.frete, editado.instalacao, editado.desconto) == (120.75, 0.5, 33.333)
    assert editado.total == orc.total


def test_menu_cadastros_editar_cliente(tui, store):
    respostas = _digitar("3", "1", None, None, "(41) 3333-4444", None, "Londrina", None, "0")
    with patch.object(Prompt, "ask", side_effect=respostas):
        tui.menu_cadastros()
    c = next(x for x in store.listar_clientes() if x.id == "1")
    assert c.nome == "Construtora Exemplo Ltda"
    assert c.telefone == "(41) 3333-4444"
    assert c.endereco.cidade == "Londrina"
    assert "Cliente Construtora Exemplo Ltda atualizado" in _saida(tui)


def test_menu_cadastros_editar_servico(tui, store):
    primeiro = store.listar_servicos()[0]
    respostas = _digitar("6", "1", None, None, "999,90", None, None, "0")
    with patch.object(Prompt, "ask", side_effect=respostas):
        tui.menu_cadastros()
    s = store.obter_servico(primeiro.id)
    assert s.nome == primeiro.nome
    assert s.tipo_calculo == primeiro.tipo_calculo
    assert s.preco_base == 999.9


def test_menu_usuarios_editar_mantem_senha(tui, store):
    tui.usuario = ADMIN
    antes = next(u for u in store.listar_usuarios() if u.id == "2")
    with patch.object(Prompt, "ask", side_effect=_digitar("2", "2", None, None, "Administrador", None, "0")):
        tui.menu_usuarios()
    depois = next(u for u in store.listar_usuarios() if u.id == "2")
    assert depois.papel == PapelUsuario.ADMIN
    assert depois.senha_hash == antes.senha_hash


def test_menu_usuarios_ativar_e_excluir(tui, store):
    tui.usuario = ADMIN
    respostas = _digitar(
        "3", "2",        # desativa o vendedor
        "4", "1",        # tenta excluir a si mesmo
        "4", "2",        # exclui o vendedor
        "0",
    )
    with patch.object(Prompt, "ask", side_effect=respostas), patch.object(Confirm, "ask", return_value=True):
        tui.menu_usuarios()
    saida = _saida(tui)
    assert "vendedor@metalapex.com.br: inativo" in saida
    assert "Você não pode excluir a si mesmo." in saida
    assert [u.id for u in store.listar_usuarios()] == ["1"]
