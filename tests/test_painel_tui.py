"""
Tests for the Textual dashboard.
"""

import asyncio
from unittest.mock import Mock

import pytest
from textual.widgets import DataTable, Input

from orcamentos.adapters.painel_tui import OutputScreen, PainelApp, proximo_status
from orcamentos.domain.models import StatusOrcamento
from conftest import make_orcamento


class TestProximoStatus:
    """Status cycle used by the 's' binding."""

    def test_segue_ordem(self):
        assert proximo_status(StatusOrcamento.RASCUNHO) == StatusOrcamento.ENVIADO
        assert proximo_status(StatusOrcamento.VISITA) == StatusOrcamento.FECHADO

    def test_volta_ao_inicio(self):
        assert proximo_status(StatusOrcamento.PERDIDO) == StatusOrcamento.RASCUNHO


class TestPainelApp:
    """Test the dashboard application."""

    def test_app_creation(self, store):
        app = PainelApp(store)
        assert app.TITLE == "METAL APEX - Painel de Orçamentos"
        assert {b[0] for b in app.BINDINGS} >= {"q", "r", "s", "l"}

    def test_action_logs_desligado(self, store):
        app = PainelApp(store)
        app.push_screen = Mock()
        app.action_logs()
        tela = app.push_screen.call_args[0][0]
        assert isinstance(tela, OutputScreen)
        assert "Logging desligado" in tela.content

    def test_ciclar_status_grava(self, store):
        store.salvar_orcamento(make_orcamento())

        async def rodar():
            app = PainelApp(store)
            async with app.run_test() as pilot:
                await pilot.pause()
                linhas = app.query_one(DataTable).row_count
                await pilot.press("s")
                await pilot.pause()
                return linhas

        assert asyncio.run(rodar()) == 1
        assert store.obter_orcamento("o1").status == StatusOrcamento.ENVIADO

    def test_busca_filtra_tabela(self, store):
        store.salvar_orcamento(make_orcamento(id="a", numero="MA-2025-0001"))
        store.salvar_orcamento(make_orcamento(id="b", numero="MA-2025-0002", cliente_nome="Maria Souza"))

        async def rodar():
            app = PainelApp(store)
            async with app.run_test() as pilot:
                await pilot.pause()
                antes = app.query_one(DataTable).row_count
                app.query_one(Input).value = "maria"
                await pilot.pause()
                return antes, app.query_one(DataTable).row_count, app.selecionado()

        antes, depois, selecionado = asyncio.run(rodar())
        assert antes == 2
        assert depois == 1
        assert selecionado.numero == "MA-2025-0002"

    def test_sem_orcamentos(self, store):
        async def rodar():
            app = PainelApp(store)
            async with app.run_test() as pilot:
                await pilot.press("s")
                await pilot.pause()
                return app.selecionado()

        assert asyncio.run(rodar()) is None
        assert store.listar_orcamentos() == []


@pytest.mark.parametrize("status", list(StatusOrcamento))
def test_proximo_status_sempre_diferente(status):
    assert proximo_status(status) != status
