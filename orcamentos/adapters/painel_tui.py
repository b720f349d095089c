from __future__ import annotations

from typing import Dict, List, Optional

from textual.app import App, ComposeResult
from textual.containers import Horizontal, ScrollableContainer
from textual.screen import Screen
from textual.widgets import DataTable, Footer, Header, Input, Static

from orcamentos.adapters.parsers import formatar_moeda
from orcamentos.domain.editor import DefinirStatus
from orcamentos.domain.models import Orcamento, StatusOrcamento
from orcamentos.infra.logger import get_log_summary, log_system_event
from orcamentos.usecases.editar_orcamento import aplicar_edicao, salvar_orcamento
from orcamentos.usecases.relatorios import filtrar_orcamentos, resumo_painel, tabela_orcamentos


def proximo_status(atual: StatusOrcamento) -> StatusOrcamento:
    """Próximo status na ordem de declaração (volta ao início no fim)."""
    ordem = list(StatusOrcamento)
    return ordem[(ordem.index(atual) + 1) % len(ordem)]


class OutputScreen(Screen):
    """Screen com texto simples (logs)."""
    BINDINGS = [
        ("escape", "app.pop_screen", "Voltar"),
        ("q", "app.pop_screen", "Voltar"),
    ]

    def __init__(self, title: str, content: str) -> None:
        super().__init__()
        self.title = title
        self.content = content

    def compose(self) -> ComposeResult:
        yield Header()
        with ScrollableContainer():
            yield Static(self.title, classes="output-title")
            yield Static(self.content, markup=False)
        yield Footer()


class CartaoResumo(Static):
    """Cartão com um indicador do painel."""

    def __init__(self, titulo: str, id: Optional[str] = None) -> None:
        super().__init__(id=id, classes="cartao")
        self.titulo = titulo

    def atualizar(self, valor: str, detalhe: str = "") -> None:
        self.update(f"[b]{self.titulo}[/b]\n{valor}\n[dim]{detalhe}[/dim]")


class PainelApp(App):
    """Painel de orçamentos: indicadores e lista com troca rápida de status."""

    CSS = """
    Screen {
        background: #1e2226;
    }

    .output-title {
        background: #54595F;
        color: #ffffff;
        text-align: center;
        padding: 1;
        margin-bottom: 1;
    }

    Horizontal#cartoes {
        height: 6;
    }

    .cartao {
        background: #54595F;
        color: #ffffff;
        border: solid #F08736;
        width: 1fr;
        padding: 0 1;
        margin: 0 1;
    }

    Input {
        margin: 1 1 0 1;
    }
    """

    TITLE = "METAL APEX - Painel de Orçamentos"
    BINDINGS = [
        ("q", "quit", "Sair"),
        ("r", "recarregar", "Recarregar"),
        ("s", "proximo_status", "Próximo status"),
        ("l", "logs", "Logs"),
    ]

    def __init__(self, store) -> None:
        super().__init__()
        self.store = store
        self.orcamentos: Dict[str, Orcamento] = {}
        self.termo = ""

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="cartoes"):
            yield CartaoResumo("Em negociação", id="cartao-pendente")
            yield CartaoResumo("Pedidos fechados", id="cartao-fechado")
            yield CartaoResumo("Orçamentos", id="cartao-total")
        yield DataTable(zebra_stripes=True, cursor_type="row", id="tabela")
        yield Input(placeholder="Buscar por cliente ou número", id="busca")
        yield Footer()

    def on_mount(self) -> None:
        self.recarregar()
        self.query_one(DataTable).focus()

    # --------- dados ---------
    def recarregar(self) -> None:
        todos: List[Orcamento] = self.store.listar_orcamentos()
        self.orcamentos = {o.id: o for o in todos}

        res = resumo_painel(todos)
        self.query_one("#cartao-pendente", CartaoResumo).atualizar(
            formatar_moeda(res["valor_em_negociacao"]), f"{res['qtd_em_negociacao']} orçamentos")
        self.query_one("#cartao-fechado", CartaoResumo).atualizar(
            formatar_moeda(res["valor_fechado"]), f"{res['qtd_fechados']} pedidos")
        self.query_one("#cartao-total", CartaoResumo).atualizar(str(res["total_orcamentos"]))

        visiveis = filtrar_orcamentos(todos, self.termo)
        columns, rows, _ = tabela_orcamentos(visiveis)
        table = self.query_one(DataTable)
        table.clear(columns=True)
        table.add_columns(*columns)
        for o, row in zip(visiveis, rows):
            table.add_row(*row, key=o.id)

    def selecionado(self) -> Optional[Orcamento]:
        table = self.query_one(DataTable)
        if table.row_count == 0:
            return None
        row_key = table.coordinate_to_cell_key(table.cursor_coordinate).row_key
        return self.orcamentos.get(row_key.value)

    # --------- eventos ---------
    def on_input_changed(self, event: Input.Changed) -> None:
        self.termo = event.value
        self.recarregar()

    def action_recarregar(self) -> None:
        self.recarregar()
        self.notify("Lista atualizada", timeout=2)

    def action_proximo_status(self) -> None:
        orc = self.selecionado()
        if orc is None:
            return
        linha = self.query_one(DataTable).cursor_row
        novo = aplicar_edicao(self.store, orc, DefinirStatus(proximo_status(orc.status)))
        try:
            salvar_orcamento(self.store, novo)
        except (ValueError, OSError) as e:
            self.notify(f"Erro: {e}", severity="error")
            return
        log_system_event("painel_status", {"numero": novo.numero, "status": novo.status.value})
        self.recarregar()
        self.query_one(DataTable).move_cursor(row=linha)
        self.notify(f"{novo.numero}: {novo.status.value}", timeout=2)

    def action_logs(self) -> None:
        conteudo = get_log_summary("orcamentos", lines=200)
        if conteudo is None:
            conteudo = "Logging desligado (ENABLE_LOGGING = False)."
        self.push_screen(OutputScreen("Logs de Orçamentos", conteudo))


def main(store) -> None:
    """Run the dashboard application."""
    PainelApp(store).run()
