# orcamentos/adapters/tui.py
"""
TUI (Text User Interface) do sistema de orçamentos usando Rich.

Interface interativa baseada em menus:
- Editor de orçamento em três etapas (cliente, itens, condições) com
  totais atualizados a cada alteração
- Lista de orçamentos com busca
- Painel (em negociação / fechados)
- Cadastros de clientes e serviços; usuários para administradores
"""

from __future__ import annotations

from typing import List, Optional

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from orcamentos.adapters.parsers import formatar_data, formatar_editavel, formatar_moeda, formatar_numero
from orcamentos.config import SESSION_PATH
from orcamentos.domain.editor import (
    AdicionarItem,
    AtualizarItem,
    DefinirAjustes,
    DefinirCondicoes,
    DefinirStatus,
    RemoverItem,
    SelecionarCliente,
    novo_item,
)
from orcamentos.domain.models import Orcamento, StatusOrcamento, TipoCalculo
from orcamentos.domain.policies import pode_gerenciar_usuarios
from orcamentos.usecases import cadastros, sessao
from orcamentos.usecases.editar_orcamento import (
    aplicar_edicao,
    carregar_orcamento,
    exportar_pdf,
    novo_orcamento,
    salvar_orcamento,
)
from orcamentos.usecases.relatorios import filtrar_orcamentos, resumo_painel, tabela_orcamentos

# erros exibidos ao usuário sem encerrar a TUI
ERROS_USUARIO = (ValueError, PermissionError, LookupError, OSError)


class OrcamentosTUI:
    """Text User Interface para orçamentos."""

    def __init__(self, store, session_path: str = SESSION_PATH, console: Optional[Console] = None):
        self.console = console or Console()
        self.store = store
        self.session_path = session_path
        self.usuario = sessao.usuario_atual(session_path)

    def run(self) -> None:
        """Inicia a interface principal."""
        self.show_banner()
        if self.usuario is None and not self.tela_login():
            return

        while True:
            try:
                choice = self.show_main_menu()
                if choice == "1":
                    self.editor(novo_orcamento(self.store, self.usuario))
                elif choice == "2":
                    self.abrir_orcamento()
                elif choice == "3":
                    self.lista_orcamentos()
                elif choice == "4":
                    self.painel()
                elif choice == "5":
                    self.menu_cadastros()
                elif choice == "6" and pode_gerenciar_usuarios(self.usuario):
                    self.menu_usuarios()
                elif choice == "0":
                    self.console.print("\n[green]Saindo do sistema...[/green]")
                    break
            except KeyboardInterrupt:
                self.console.print("\n[red]Saindo...[/red]")
                break
            except ERROS_USUARIO as e:
                self.console.print(f"[red]Erro: {e}[/red]")

    def show_banner(self) -> None:
        banner = Panel.fit(
            "[bold #F08736]METAL APEX[/bold #F08736]\n"
            "[cyan]Orçamentos - Interface Terminal[/cyan]",
            border_style="blue",
        )
        self.console.print("\n")
        self.console.print(Align.center(banner))
        self.console.print("\n")

    def tela_login(self) -> bool:
        """Pede e-mail e senha até entrar (ou desistir)."""
        while True:
            email = Prompt.ask("E-mail", console=self.console)
            senha = Prompt.ask("Senha", password=True, console=self.console)
            try:
                self.usuario = sessao.login(self.store, email, senha, session_path=self.session_path)
                self.console.print(f"[green]✓ Bem-vindo, {self.usuario.nome}![/green]")
                return True
            except sessao.LoginInvalido as e:
                self.console.print(f"[red]{e}[/red]")
                if not Confirm.ask("Tentar novamente?", default=True, console=self.console):
                    return False

    def show_main_menu(self) -> str:
        opcoes = ["0", "1", "2", "3", "4", "5"]
        linhas = (
            "[bold]MENU PRINCIPAL[/bold]\n\n"
            "[yellow]1.[/yellow] Novo Orçamento\n"
            "[yellow]2.[/yellow] Abrir Orçamento\n"
            "[yellow]3.[/yellow] Lista de Orçamentos\n"
            "[yellow]4.[/yellow] Painel\n"
            "[yellow]5.[/yellow] Clientes e Serviços\n"
        )
        if pode_gerenciar_usuarios(self.usuario):
            linhas += "[yellow]6.[/yellow] Usuários\n"
            opcoes.append("6")
        linhas += "[yellow]0.[/yellow] Sair\n"
        titulo = f"Opções - {self.usuario.nome}" if self.usuario else "Opções"
        self.console.print(Panel(linhas, title=titulo, border_style="green"))
        return Prompt.ask("Escolha uma opção", choices=opcoes, console=self.console)

    # -----------------------
    # exibição
    # -----------------------

    def tabela_itens(self, orc: Orcamento) -> Table:
        table = Table(title="Itens", show_header=True, header_style="bold #F08736")
        for col in ("#", "Item", "Medidas", "Qtd", "Fator", "Vl. Unit", "Total"):
            table.add_column(col, justify="right" if col in ("Qtd", "Fator", "Vl. Unit", "Total") else "left")
        for i, it in enumerate(orc.itens, start=1):
            if it.tipo_calculo == TipoCalculo.M2:
                medidas = f"{formatar_numero(it.largura)} x {formatar_numero(it.altura)} m"
            elif it.tipo_calculo == TipoCalculo.LINEAR:
                medidas = f"{formatar_numero(it.largura)} m"
            else:
                medidas = "Unid."
            table.add_row(
                str(i), it.nome or "-", medidas, formatar_numero(it.quantidade),
                formatar_numero(it.fator_dificuldade), formatar_moeda(it.preco_unitario),
                formatar_moeda(it.total),
            )
        return table

    def resumo(self, orc: Orcamento) -> Panel:
        """Cabeçalho e totais do orçamento em edição."""
        cor = "red" if orc.total < 0 else "green"
        texto = (
            f"[bold]{orc.numero}[/bold]  •  {orc.status.value}\n"
            f"Cliente: {orc.cliente_nome or '[red](não selecionado)[/red]'}\n"
            f"Validade: {formatar_data(orc.valido_ate)}\n\n"
            f"Subtotal:   {formatar_moeda(orc.subtotal)}\n"
            f"Frete:      {formatar_moeda(orc.frete)}\n"
            f"Instalação: {formatar_moeda(orc.instalacao)}\n"
            f"Desconto:   -{formatar_moeda(orc.desconto)}\n"
            f"[bold {cor}]TOTAL:      {formatar_moeda(orc.total)}[/]"
        )
        return Panel(texto, title="Orçamento", border_style="cyan")

    # -----------------------
    # editor
    # -----------------------

    def editor(self, orc: Orcamento) -> Orcamento:
        """Editor em etapas. Retorna o último estado (salvo ou não)."""
        while True:
            self.console.print(self.resumo(orc))
            if orc.itens:
                self.console.print(self.tabela_itens(orc))
            menu = Panel(
                "[bold]EDITOR[/bold]\n\n"
                "[yellow]1.[/yellow] Cliente\n"
                "[yellow]2.[/yellow] Itens\n"
                "[yellow]3.[/yellow] Condições, ajustes e status\n"
                "[yellow]4.[/yellow] Salvar\n"
                "[yellow]5.[/yellow] Gerar PDF\n"
                "[yellow]0.[/yellow] Voltar\n",
                title="Editor",
                border_style="cyan",
            )
            self.console.print(menu)
            choice = Prompt.ask("Escolha uma opção", choices=["0", "1", "2", "3", "4", "5"], console=self.console)
            try:
                if choice == "0":
                    return orc
                elif choice == "1":
                    orc = self.etapa_cliente(orc)
                elif choice == "2":
                    orc = self.etapa_itens(orc)
                elif choice == "3":
                    orc = self.etapa_condicoes(orc)
                elif choice == "4":
                    salvar_orcamento(self.store, orc)
                    self.console.print(f"[green]✓ Orçamento {orc.numero} salvo![/green]")
                elif choice == "5":
                    destino = exportar_pdf(self.store, orc)
                    self.console.print(f"[green]✓ PDF gerado: {destino}[/green]")
            except ERROS_USUARIO as e:
                self.console.print(f"[red]Erro: {e}[/red]")

    def etapa_cliente(self, orc: Orcamento) -> Orcamento:
        clientes = self.store.listar_clientes()
        if not clientes:
            self.console.print("[yellow]Nenhum cliente cadastrado.[/yellow]")
            return orc
        table = Table(title="Clientes")
        table.add_column("#", justify="right")
        table.add_column("Nome")
        table.add_column("Documento")
        for i, c in enumerate(clientes, start=1):
            table.add_row(str(i), c.nome, c.documento)
        self.console.print(table)
        n = Prompt.ask("Cliente", choices=[str(i) for i in range(1, len(clientes) + 1)], console=self.console)
        c = clientes[int(n) - 1]
        return aplicar_edicao(self.store, orc, SelecionarCliente(c.id, c.nome))

    def etapa_itens(self, orc: Orcamento) -> Orcamento:
        while True:
            if orc.itens:
                self.console.print(self.tabela_itens(orc))
            self.console.print(f"Subtotal: [bold]{formatar_moeda(orc.subtotal)}[/bold]")
            choice = Prompt.ask(
                "[yellow]1[/yellow] adicionar  [yellow]2[/yellow] editar  [yellow]3[/yellow] remover  [yellow]0[/yellow] voltar",
                choices=["0", "1", "2", "3"],
                console=self.console,
            )
            if choice == "0":
                return orc
            if choice == "1":
                item = novo_item()
                orc = aplicar_edicao(self.store, orc, AdicionarItem(item))
                orc = self.editar_item(orc, item.id, escolher_servico=True)
            elif orc.itens:
                n = Prompt.ask("Item nº", choices=[str(i) for i in range(1, len(orc.itens) + 1)], console=self.console)
                item_id = orc.itens[int(n) - 1].id
                if choice == "2":
                    orc = self.editar_item(orc, item_id)
                else:
                    orc = aplicar_edicao(self.store, orc, RemoverItem(item_id))

    def editar_item(self, orc: Orcamento, item_id: str, escolher_servico: bool = False) -> Orcamento:
        """Pergunta os campos do item; Enter mantém o valor atual."""
        if escolher_servico:
            servicos = self.store.listar_servicos()
            for i, s in enumerate(servicos, start=1):
                self.console.print(f"[yellow]{i}.[/yellow] {s.nome} ({s.tipo_calculo.value}) {formatar_moeda(s.preco_base)}")
            n = Prompt.ask("Serviço (Enter = item livre)", default="", console=self.console)
            if n.isdigit() and 1 <= int(n) <= len(servicos):
                orc = aplicar_edicao(self.store, orc, AtualizarItem(item_id, {"servico_id": servicos[int(n) - 1].id}))

        it = orc.item(item_id)
        campos = {}
        if not it.servico_id:
            campos["nome"] = Prompt.ask("Nome", default=it.nome, console=self.console)
            campos["tipo_calculo"] = Prompt.ask(
                "Tipo de cálculo", choices=[t.value for t in TipoCalculo],
                default=it.tipo_calculo.value, console=self.console,
            )
        tipo = TipoCalculo(campos.get("tipo_calculo", it.tipo_calculo))
        if tipo != TipoCalculo.UNIDADE:
            campos["largura"] = Prompt.ask("Largura (m)", default=formatar_editavel(it.largura), console=self.console)
        if tipo == TipoCalculo.M2:
            campos["altura"] = Prompt.ask("Altura (m)", default=formatar_editavel(it.altura), console=self.console)
        campos["quantidade"] = Prompt.ask("Quantidade", default=formatar_editavel(it.quantidade), console=self.console)
        campos["preco_unitario"] = Prompt.ask("Preço unitário", default=formatar_editavel(it.preco_unitario), console=self.console)
        campos["fator_dificuldade"] = Prompt.ask(
            "Fator de dificuldade", default=formatar_editavel(it.fator_dificuldade), console=self.console,
        )
        return aplicar_edicao(self.store, orc, AtualizarItem(item_id, campos))

    def etapa_condicoes(self, orc: Orcamento) -> Orcamento:
        orc = aplicar_edicao(
            self.store, orc,
            DefinirAjustes(
                Prompt.ask("Frete", default=formatar_editavel(orc.frete), console=self.console),
                Prompt.ask("Instalação", default=formatar_editavel(orc.instalacao), console=self.console),
                Prompt.ask("Desconto", default=formatar_editavel(orc.desconto), console=self.console),
            ),
            DefinirCondicoes(
                Prompt.ask("Forma de pagamento", default=orc.condicoes_pagamento, console=self.console),
                Prompt.ask("Prazo de execução", default=orc.prazo_execucao, console=self.console),
                Prompt.ask("Observações", default=orc.observacoes or "", console=self.console),
            ),
        )
        status = Prompt.ask(
            "Status", choices=[s.value for s in StatusOrcamento], default=orc.status.value, console=self.console,
        )
        return aplicar_edicao(self.store, orc, DefinirStatus(status))

    # -----------------------
    # listas e painel
    # -----------------------

    def abrir_orcamento(self) -> None:
        ref = Prompt.ask("Número do orçamento (MA-AAAA-NNNN)", console=self.console)
        self.editor(carregar_orcamento(self.store, ref.strip()))

    def lista_orcamentos(self) -> None:
        termo = Prompt.ask("Buscar (cliente ou número)", default="", console=self.console)
        columns, rows, msg = tabela_orcamentos(filtrar_orcamentos(self.store.listar_orcamentos(), termo))
        if msg:
            self.console.print(f"[yellow]{msg}[/yellow]")
            return
        table = Table(title="Orçamentos", show_header=True, header_style="bold magenta")
        for col in columns:
            table.add_column(col, style="cyan")
        for row in rows:
            table.add_row(*row)
        self.console.print(table)

    def painel(self) -> None:
        res = resumo_painel(self.store.listar_orcamentos())
        self.console.print(Panel(
            f"Em negociação: [bold]{formatar_moeda(res['valor_em_negociacao'])}[/bold] ({res['qtd_em_negociacao']})\n"
            f"Pedidos fechados: [bold green]{formatar_moeda(res['valor_fechado'])}[/bold green] ({res['qtd_fechados']})\n"
            f"Total de orçamentos: {res['total_orcamentos']}",
            title="Painel",
            border_style="blue",
        ))

    # -----------------------
    # cadastros
    # -----------------------

    def menu_cadastros(self) -> None:
        while True:
            menu = Panel(
                "[bold]CADASTROS[/bold]\n\n"
                "[yellow]1.[/yellow] Ver Clientes\n"
                "[yellow]2.[/yellow] Novo Cliente\n"
                "[yellow]3.[/yellow] Editar Cliente\n"
                "[yellow]4.[/yellow] Ver Serviços\n"
                "[yellow]5.[/yellow] Novo Serviço\n"
                "[yellow]6.[/yellow] Editar Serviço\n"
                "[yellow]0.[/yellow] Voltar\n",
                title="Cadastros",
                border_style="magenta",
            )
            self.console.print(menu)
            choice = Prompt.ask("Escolha uma opção", choices=["0", "1", "2", "3", "4", "5", "6"], console=self.console)
            if choice == "0":
                break
            elif choice == "1":
                self.mostrar_tabela("Clientes", ["Nome", "Documento", "Telefone", "E-mail"],
                                    [[c.nome, c.documento, c.telefone, c.email] for c in cadastros.listar_clientes(self.store)])
            elif choice == "2":
                c = cadastros.criar_cliente(
                    self.store,
                    Prompt.ask("Nome", console=self.console),
                    Prompt.ask("CPF/CNPJ", default="", console=self.console),
                    Prompt.ask("Telefone", default="", console=self.console),
                    Prompt.ask("E-mail", default="", console=self.console),
                )
                self.console.print(f"[green]✓ Cliente {c.nome} cadastrado![/green]")
            elif choice == "3":
                self.editar_cliente()
            elif choice == "4":
                self.mostrar_tabela("Serviços", ["Nome", "Tipo", "Preço base", "Categoria"],
                                    [[s.nome, s.tipo_calculo.value, formatar_moeda(s.preco_base), s.categoria]
                                     for s in cadastros.listar_servicos(self.store)])
            elif choice == "5":
                s = cadastros.criar_servico(
                    self.store,
                    Prompt.ask("Nome", console=self.console),
                    Prompt.ask("Tipo de cálculo", choices=[t.value for t in TipoCalculo], default="M2", console=self.console),
                    Prompt.ask("Preço base", default="0", console=self.console),
                    Prompt.ask("Descrição", default="", console=self.console),
                    Prompt.ask("Categoria", default="", console=self.console),
                )
                self.console.print(f"[green]✓ Serviço {s.nome} cadastrado![/green]")
            elif choice == "6":
                self.editar_servico()

    def escolher(self, titulo: str, opcoes: List[str]) -> Optional[int]:
        """Lista numerada; devolve o índice escolhido (None se vazia)."""
        if not opcoes:
            self.console.print(f"[yellow]Nenhum dado encontrado em {titulo}[/yellow]")
            return None
        for i, texto in enumerate(opcoes, start=1):
            self.console.print(f"[yellow]{i}.[/yellow] {texto}")
        n = Prompt.ask(titulo, choices=[str(i) for i in range(1, len(opcoes) + 1)], console=self.console)
        return int(n) - 1

    def editar_cliente(self) -> None:
        """Enter mantém o valor atual de cada campo."""
        clientes = cadastros.listar_clientes(self.store)
        i = self.escolher("Cliente", [f"{c.nome} {c.documento}".strip() for c in clientes])
        if i is None:
            return
        c = clientes[i]
        c = cadastros.atualizar_cliente(
            self.store, c.id,
            nome=Prompt.ask("Nome", default=c.nome, console=self.console),
            documento=Prompt.ask("CPF/CNPJ", default=c.documento, console=self.console),
            telefone=Prompt.ask("Telefone", default=c.telefone, console=self.console),
            email=Prompt.ask("E-mail", default=c.email, console=self.console),
            cidade=Prompt.ask("Cidade", default=c.endereco.cidade, console=self.console),
            observacoes=Prompt.ask("Observações", default=c.observacoes or "", console=self.console),
        )
        self.console.print(f"[green]✓ Cliente {c.nome} atualizado![/green]")

    def editar_servico(self) -> None:
        servicos = cadastros.listar_servicos(self.store)
        i = self.escolher("Serviço", [f"{s.nome} ({s.tipo_calculo.value}) {formatar_moeda(s.preco_base)}" for s in servicos])
        if i is None:
            return
        s = servicos[i]
        s = cadastros.atualizar_servico(
            self.store, s.id,
            nome=Prompt.ask("Nome", default=s.nome, console=self.console),
            tipo_calculo=Prompt.ask("Tipo de cálculo", choices=[t.value for t in TipoCalculo],
                                    default=s.tipo_calculo.value, console=self.console),
            preco_base=Prompt.ask("Preço base", default=formatar_editavel(s.preco_base), console=self.console),
            descricao=Prompt.ask("Descrição", default=s.descricao, console=self.console),
            categoria=Prompt.ask("Categoria", default=s.categoria, console=self.console),
        )
        self.console.print(f"[green]✓ Serviço {s.nome} atualizado: {formatar_moeda(s.preco_base)}[/green]")

    def menu_usuarios(self) -> None:
        while True:
            usuarios = cadastros.listar_usuarios(self.store, self.usuario)
            self.mostrar_tabela("Usuários", ["Nome", "E-mail", "Papel", "Ativo"],
                                [[u.nome, u.email, u.papel.value, "sim" if u.ativo else "não"] for u in usuarios])
            choice = Prompt.ask(
                "[yellow]1[/yellow] novo  [yellow]2[/yellow] editar  [yellow]3[/yellow] ativar/desativar  "
                "[yellow]4[/yellow] excluir  [yellow]0[/yellow] voltar",
                choices=["0", "1", "2", "3", "4"],
                console=self.console,
            )
            if choice == "0":
                return
            if choice == "1":
                u = cadastros.criar_usuario(
                    self.store, self.usuario,
                    Prompt.ask("Nome", console=self.console),
                    Prompt.ask("E-mail", console=self.console),
                    Prompt.ask("Senha", password=True, console=self.console),
                    Prompt.ask("Papel", choices=["Vendedor", "Administrador"], default="Vendedor", console=self.console),
                )
                self.console.print(f"[green]✓ Usuário {u.email} criado![/green]")
                continue

            i = self.escolher("Usuário", [f"{u.nome} <{u.email}>" for u in usuarios])
            if i is None:
                continue
            alvo = usuarios[i]
            if choice == "2":
                u = cadastros.atualizar_usuario(
                    self.store, self.usuario, alvo.id,
                    nome=Prompt.ask("Nome", default=alvo.nome, console=self.console),
                    email=Prompt.ask("E-mail", default=alvo.email, console=self.console),
                    papel=Prompt.ask("Papel", choices=["Vendedor", "Administrador"],
                                     default=alvo.papel.value, console=self.console),
                    senha=Prompt.ask("Nova senha (Enter mantém a atual)", password=True, default="",
                                     show_default=False, console=self.console),
                )
                self.console.print(f"[green]✓ Usuário {u.email} atualizado![/green]")
            elif choice == "3":
                u = cadastros.definir_usuario_ativo(self.store, self.usuario, alvo.id, not alvo.ativo)
                self.console.print(f"[green]✓ {u.email}: {'ativo' if u.ativo else 'inativo'}[/green]")
            elif choice == "4":
                if alvo.id == self.usuario.id:
                    self.console.print("[red]Você não pode excluir a si mesmo.[/red]")
                elif Confirm.ask(f"Remover {alvo.email}?", default=False, console=self.console):
                    cadastros.excluir_usuario(self.store, self.usuario, alvo.id)
                    self.console.print(f"[green]✓ Usuário {alvo.email} removido![/green]")

    def mostrar_tabela(self, titulo: str, colunas: List[str], linhas: List[List[str]]) -> None:
        if not linhas:
            self.console.print(f"[yellow]Nenhum dado encontrado em {titulo}[/yellow]")
            return
        table = Table(title=titulo, show_header=True, header_style="bold magenta")
        for coluna in colunas:
            table.add_column(coluna, style="cyan")
        for row in linhas:
            table.add_row(*[str(cell) if cell is not None else "" for cell in row])
        self.console.print(table)


def main_tui(store, session_path: str = SESSION_PATH):
    """Ponto de entrada principal da TUI."""
    OrcamentosTUI(store, session_path).run()
