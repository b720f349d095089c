# orcamentos/adapters/cli.py
"""
CLI do sistema de orçamentos Metal Apex (Typer).

Comandos principais:
- migrate                  -> aplica migrações e cria views (SQLite)
- seed                     -> grava usuários, catálogo e cliente iniciais
- login / logout / whoami  -> sessão do usuário
- clientes ...             -> list, add, set, rm, import <xlsx>
- servicos ...             -> list, add, set, rm, import <xlsx>
- usuarios ...             -> list, add, set, ativar, desativar, rm (somente administrador)
- orcamento ...            -> criar, list, show, item-add, item-rm, item-set,
                              ajustes, condicoes, status, pdf, export
- painel                   -> indicadores (em negociação, fechados)
- tui / painel-tui         -> interfaces interativas (Rich / Textual)

Números aceitam vírgula decimal ("2,5"). Erros de validação ou de
gravação são exibidos em vermelho e o comando termina com código 1.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from typing import Optional

import typer
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from orcamentos.adapters.parsers import formatar_data, formatar_moeda, formatar_numero
from orcamentos.config import DB_PATH, SESSION_PATH
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
from orcamentos.domain.models import Endereco, Orcamento, StatusOrcamento
from orcamentos.infra.migrations import apply_migrations
from orcamentos.infra.seed import popular
from orcamentos.infra.store import abrir_armazenamento
from orcamentos.infra.views import create_views
from orcamentos.usecases import cadastros, sessao
from orcamentos.usecases.editar_orcamento import (
    aplicar_edicao,
    carregar_orcamento,
    exportar_pdf,
    novo_orcamento,
    salvar_orcamento,
)
from orcamentos.usecases.relatorios import (
    exportar_orcamentos_xlsx,
    filtrar_orcamentos,
    resumo_painel,
    tabela_orcamentos,
)


app = typer.Typer(help="Orçamentos Metal Apex: CLI")
console = Console()

# erros que viram aviso ao usuário (validação, permissão, busca, gravação)
ERROS_USUARIO = (ValueError, PermissionError, LookupError, OSError, sqlite3.Error)


# -----------------------
# util
# -----------------------

def _opt_db():
    return typer.Option(None, "--db", help="Arquivo SQLite ou pasta JSON")


def _opt_backend():
    return typer.Option(None, "--backend", help="sqlite | json")


def _opt_sessao():
    return typer.Option(SESSION_PATH, "--sessao", help="Arquivo da sessão")


def _mensagem(e: BaseException) -> str:
    if isinstance(e, KeyError) and e.args:
        return f"não encontrado: {e.args[0]}"
    return str(e)


@contextmanager
def _tratando_erros():
    try:
        yield
    except ERROS_USUARIO as e:
        console.print(f"[bold red]Erro:[/bold red] {_mensagem(e)}")
        raise typer.Exit(code=1)


def _store(backend: Optional[str], db_path: Optional[str]):
    with _tratando_erros():
        return abrir_armazenamento(backend, db_path)


def _resolver_item(orc: Orcamento, ref: str, exigir: bool = True) -> str:
    """Aceita a posição (1, 2, ...) ou o id do item.

    Com ``exigir=False`` uma referência desconhecida volta como está
    (remover item inexistente não é erro).
    """
    ref = ref.strip()
    if ref.isdigit() and 1 <= int(ref) <= len(orc.itens):
        return orc.itens[int(ref) - 1].id
    if exigir and orc.item(ref) is None:
        raise KeyError(f"item {ref}")
    return ref


def _status(valor: str) -> StatusOrcamento:
    for st in StatusOrcamento:
        if valor.strip().lower() in (st.value.lower(), st.name.lower()):
            return st
    opcoes = ", ".join(st.value for st in StatusOrcamento)
    raise ValueError(f"status inválido: {valor!r} (opções: {opcoes})")


def _checar_servico(store, servico_id: Optional[str]) -> None:
    if servico_id and store.obter_servico(servico_id) is None:
        raise LookupError(f"Serviço não encontrado: {servico_id}")


def _campos_item(**valores) -> dict:
    """Descarta as opções não informadas."""
    return {k: v for k, v in valores.items() if v is not None}


def _mostrar_orcamento(orc: Orcamento) -> None:
    console.print(Panel(
        f"[bold]{orc.numero}[/bold]  •  {orc.status.value}\n"
        f"Cliente: {orc.cliente_nome or '-'}\n"
        f"Emissão: {formatar_data(orc.criado_em)}  Validade: {formatar_data(orc.valido_ate)}\n"
        f"Responsável: {orc.responsavel_nome or '-'}",
        title="Orçamento",
        border_style="cyan",
    ))
    table = Table(title="Itens", box=box.ROUNDED)
    for col in ("#", "Item", "Tipo", "Larg.", "Alt.", "Qtd", "Fator", "Vl. Unit", "Total"):
        table.add_column(col, justify="right" if col not in ("Item", "Tipo") else "left")
    for i, it in enumerate(orc.itens, start=1):
        table.add_row(
            str(i),
            it.nome or "-",
            it.tipo_calculo.value,
            formatar_numero(it.largura),
            formatar_numero(it.altura),
            formatar_numero(it.quantidade),
            formatar_numero(it.fator_dificuldade),
            formatar_moeda(it.preco_unitario),
            formatar_moeda(it.total),
        )
    console.print(table)
    linhas = [f"Subtotal: {formatar_moeda(orc.subtotal)}"]
    if orc.frete:
        linhas.append(f"Frete: {formatar_moeda(orc.frete)}")
    if orc.instalacao:
        linhas.append(f"Instalação: {formatar_moeda(orc.instalacao)}")
    if orc.desconto:
        linhas.append(f"Desconto: -{formatar_moeda(orc.desconto)}")
    cor = "red" if orc.total < 0 else "green"
    linhas.append(f"[bold {cor}]TOTAL: {formatar_moeda(orc.total)}[/]")
    console.print(Panel("\n".join(linhas), border_style="yellow"))


def _editar_e_salvar(store, ref: str, *acoes_fn) -> Orcamento:
    """Carrega o orçamento, aplica as ações e grava.

    ``acoes_fn`` recebe o orçamento carregado e devolve as ações, o que
    permite resolver posições de itens antes de montar cada ação.
    """
    with _tratando_erros():
        orc = carregar_orcamento(store, ref)
        for fn in acoes_fn:
            orc = aplicar_edicao(store, orc, *fn(orc))
        salvar_orcamento(store, orc)
    return orc


# -----------------------
# comandos de infra
# -----------------------

@app.command("migrate")
def cmd_migrate(db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite")):
    """Aplica migrações e recria as views auxiliares."""
    with _tratando_erros():
        apply_migrations(db_path)
        create_views(db_path)
    typer.echo(f">> Migrações aplicadas e views criadas em: {db_path}")


@app.command("seed")
def cmd_seed(db_path: Optional[str] = _opt_db(), backend: Optional[str] = _opt_backend()):
    """Grava os usuários de demonstração, o catálogo básico e um cliente."""
    store = _store(backend, db_path)
    with _tratando_erros():
        qtd = popular(store)
    typer.echo(f">> Dados iniciais gravados: {qtd['usuarios']} usuários, "
               f"{qtd['servicos']} serviços, {qtd['clientes']} clientes.")


# -----------------------
# sessão
# -----------------------

@app.command("login")
def cmd_login(
    email: str = typer.Argument(..., help="E-mail do usuário"),
    senha: str = typer.Option(..., "--senha", prompt=True, hide_input=True),
    db_path: Optional[str] = _opt_db(),
    backend: Optional[str] = _opt_backend(),
    session_path: str = _opt_sessao(),
):
    """Autentica e grava a sessão local."""
    store = _store(backend, db_path)
    with _tratando_erros():
        u = sessao.login(store, email, senha, session_path=session_path)
    typer.echo(f">> Bem-vindo, {u.nome} ({u.papel.value}).")


@app.command("logout")
def cmd_logout(session_path: str = _opt_sessao()):
    """Encerra a sessão local."""
    sessao.logout(session_path)
    typer.echo(">> Sessão encerrada.")


@app.command("whoami")
def cmd_whoami(session_path: str = _opt_sessao()):
    """Mostra o usuário da sessão."""
    u = sessao.usuario_atual(session_path)
    if u is None:
        typer.echo("(sem sessão)")
        raise typer.Exit(code=1)
    typer.echo(f"{u.nome} <{u.email}> - {u.papel.value}")


# -----------------------
# clientes
# -----------------------

clientes_app = typer.Typer(help="Cadastro de clientes")
app.add_typer(clientes_app, name="clientes")


@clientes_app.command("list")
def cmd_clientes_list(db_path: Optional[str] = _opt_db(), backend: Optional[str] = _opt_backend()):
    """Lista os clientes cadastrados."""
    store = _store(backend, db_path)
    with _tratando_erros():
        clientes = cadastros.listar_clientes(store)
    if not clientes:
        console.print(Panel("Nenhum cliente cadastrado", title="Clientes", border_style="yellow"))
        return
    table = Table(title="Clientes", box=box.ROUNDED)
    for col in ("ID", "Nome", "Documento", "Telefone", "E-mail", "Cidade"):
        table.add_column(col)
    for c in clientes:
        table.add_row(c.id, c.nome, c.documento, c.telefone, c.email, c.endereco.cidade)
    console.print(table)


@clientes_app.command("add")
def cmd_clientes_add(
    nome: str = typer.Argument(...),
    documento: str = typer.Option("", help="CPF/CNPJ"),
    telefone: str = typer.Option(""),
    email: str = typer.Option(""),
    rua: str = typer.Option(""),
    numero: str = typer.Option(""),
    bairro: str = typer.Option(""),
    cidade: str = typer.Option(""),
    estado: str = typer.Option(""),
    cep: str = typer.Option(""),
    observacoes: Optional[str] = typer.Option(None),
    db_path: Optional[str] = _opt_db(),
    backend: Optional[str] = _opt_backend(),
):
    """Cadastra um cliente."""
    store = _store(backend, db_path)
    with _tratando_erros():
        c = cadastros.criar_cliente(
            store, nome, documento, telefone, email,
            Endereco(rua, numero, bairro, cidade, estado, cep), observacoes,
        )
    typer.echo(f">> Cliente cadastrado: {c.id}")


@clientes_app.command("rm")
def cmd_clientes_rm(
    cliente_id: str = typer.Argument(...),
    db_path: Optional[str] = _opt_db(),
    backend: Optional[str] = _opt_backend(),
):
    """Remove um cliente."""
    store = _store(backend, db_path)
    with _tratando_erros():
        if not cadastros.excluir_cliente(store, cliente_id):
            raise KeyError(f"cliente {cliente_id}")
    typer.echo(">> Cliente removido.")


@clientes_app.command("set")
def cmd_clientes_set(
    cliente_id: str = typer.Argument(...),
    nome: Optional[str] = typer.Option(None),
    documento: Optional[str] = typer.Option(None, help="CPF/CNPJ"),
    telefone: Optional[str] = typer.Option(None),
    email: Optional[str] = typer.Option(None),
    rua: Optional[str] = typer.Option(None),
    numero: Optional[str] = typer.Option(None),
    bairro: Optional[str] = typer.Option(None),
    cidade: Optional[str] = typer.Option(None),
    estado: Optional[str] = typer.Option(None),
    cep: Optional[str] = typer.Option(None),
    observacoes: Optional[str] = typer.Option(None),
    db_path: Optional[str] = _opt_db(),
    backend: Optional[str] = _opt_backend(),
):
    """Altera dados de um cliente (apenas os informados)."""
    campos = _campos_item(
        nome=nome, documento=documento, telefone=telefone, email=email, rua=rua, numero=numero,
        bairro=bairro, cidade=cidade, estado=estado, cep=cep, observacoes=observacoes,
    )
    if not campos:
        typer.echo("Nada a alterar. Informe pelo menos um campo.")
        raise typer.Exit(code=1)
    store = _store(backend, db_path)
    with _tratando_erros():
        c = cadastros.atualizar_cliente(store, cliente_id, **campos)
    typer.echo(f">> Cliente atualizado: {c.nome}")


@clientes_app.command("import")
def cmd_clientes_import(
    path: str = typer.Argument(..., help="Caminho do XLSX de CLIENTES"),
    db_path: Optional[str] = _opt_db(),
    backend: Optional[str] = _opt_backend(),
):
    """Importa clientes de um XLSX."""
    store = _store(backend, db_path)
    with _tratando_erros():
        info = cadastros.importar_clientes_xlsx(store, path)
    typer.echo(f">> {info['linhas_importadas']} clientes importados de {path}")


# -----------------------
# serviços
# -----------------------

servicos_app = typer.Typer(help="Catálogo de serviços/produtos")
app.add_typer(servicos_app, name="servicos")


@servicos_app.command("list")
def cmd_servicos_list(db_path: Optional[str] = _opt_db(), backend: Optional[str] = _opt_backend()):
    """Lista o catálogo."""
    store = _store(backend, db_path)
    with _tratando_erros():
        servicos = cadastros.listar_servicos(store)
    if not servicos:
        console.print(Panel("Catálogo vazio", title="Serviços", border_style="yellow"))
        return
    table = Table(title="Serviços", box=box.ROUNDED)
    for col in ("ID", "Nome", "Tipo", "Preço base", "Categoria"):
        table.add_column(col, justify="right" if col == "Preço base" else "left")
    for s in servicos:
        table.add_row(s.id, s.nome, s.tipo_calculo.value, formatar_moeda(s.preco_base), s.categoria)
    console.print(table)


@servicos_app.command("add")
def cmd_servicos_add(
    nome: str = typer.Argument(...),
    tipo: str = typer.Option("M2", help="M2 | LINEAR | UNIT"),
    preco: str = typer.Option("0", help="Preço base (ex.: 450 ou 450,00)"),
    descricao: str = typer.Option(""),
    categoria: str = typer.Option(""),
    db_path: Optional[str] = _opt_db(),
    backend: Optional[str] = _opt_backend(),
):
    """Cadastra um serviço no catálogo."""
    store = _store(backend, db_path)
    with _tratando_erros():
        s = cadastros.criar_servico(store, nome, tipo.upper(), preco, descricao, categoria)
    typer.echo(f">> Serviço cadastrado: {s.id}")


@servicos_app.command("rm")
def cmd_servicos_rm(
    servico_id: str = typer.Argument(...),
    db_path: Optional[str] = _opt_db(),
    backend: Optional[str] = _opt_backend(),
):
    """Remove um serviço do catálogo."""
    store = _store(backend, db_path)
    with _tratando_erros():
        if not cadastros.excluir_servico(store, servico_id):
            raise KeyError(f"serviço {servico_id}")
    typer.echo(">> Serviço removido.")


@servicos_app.command("set")
def cmd_servicos_set(
    servico_id: str = typer.Argument(...),
    nome: Optional[str] = typer.Option(None),
    tipo: Optional[str] = typer.Option(None, help="M2 | LINEAR | UNIT"),
    preco: Optional[str] = typer.Option(None, help="Preço base (ex.: 450 ou 450,00)"),
    descricao: Optional[str] = typer.Option(None),
    categoria: Optional[str] = typer.Option(None),
    db_path: Optional[str] = _opt_db(),
    backend: Optional[str] = _opt_backend(),
):
    """Altera um serviço do catálogo. Itens já orçados mantêm os valores copiados."""
    campos = _campos_item(
        nome=nome, tipo_calculo=tipo.upper() if tipo else None, preco_base=preco,
        descricao=descricao, categoria=categoria,
    )
    if not campos:
        typer.echo("Nada a alterar. Informe pelo menos um campo.")
        raise typer.Exit(code=1)
    store = _store(backend, db_path)
    with _tratando_erros():
        s = cadastros.atualizar_servico(store, servico_id, **campos)
    typer.echo(f">> Serviço atualizado: {s.nome} - {formatar_moeda(s.preco_base)}")


@servicos_app.command("import")
def cmd_servicos_import(
    path: str = typer.Argument(..., help="Caminho do XLSX de SERVIÇOS"),
    db_path: Optional[str] = _opt_db(),
    backend: Optional[str] = _opt_backend(),
):
    """Importa serviços de um XLSX."""
    store = _store(backend, db_path)
    with _tratando_erros():
        info = cadastros.importar_servicos_xlsx(store, path)
    typer.echo(f">> {info['linhas_importadas']} serviços importados de {path}")


# -----------------------
# usuários
# -----------------------

usuarios_app = typer.Typer(help="Gestão de usuários (administrador)")
app.add_typer(usuarios_app, name="usuarios")


@usuarios_app.command("list")
def cmd_usuarios_list(
    db_path: Optional[str] = _opt_db(),
    backend: Optional[str] = _opt_backend(),
    session_path: str = _opt_sessao(),
):
    """Lista os usuários."""
    store = _store(backend, db_path)
    with _tratando_erros():
        usuarios = cadastros.listar_usuarios(store, sessao.usuario_atual(session_path))
    table = Table(title="Usuários", box=box.ROUNDED)
    for col in ("ID", "Nome", "E-mail", "Papel", "Ativo"):
        table.add_column(col)
    for u in usuarios:
        table.add_row(u.id, u.nome, u.email, u.papel.value, "sim" if u.ativo else "não")
    console.print(table)


@usuarios_app.command("add")
def cmd_usuarios_add(
    nome: str = typer.Argument(...),
    email: str = typer.Argument(...),
    senha: str = typer.Option(..., "--senha", prompt=True, hide_input=True, confirmation_prompt=True),
    admin: bool = typer.Option(False, "--admin", help="Cria como Administrador"),
    db_path: Optional[str] = _opt_db(),
    backend: Optional[str] = _opt_backend(),
    session_path: str = _opt_sessao(),
):
    """Cria um usuário (Vendedor, ou Administrador com --admin)."""
    store = _store(backend, db_path)
    papel = "ADMIN" if admin else "VENDEDOR"
    with _tratando_erros():
        u = cadastros.criar_usuario(store, sessao.usuario_atual(session_path), nome, email, senha, papel)
    typer.echo(f">> Usuário criado: {u.email} ({u.papel.value})")


@usuarios_app.command("set")
def cmd_usuarios_set(
    usuario_id: str = typer.Argument(...),
    nome: Optional[str] = typer.Option(None),
    email: Optional[str] = typer.Option(None),
    papel: Optional[str] = typer.Option(None, help="ADMIN | VENDEDOR"),
    ativo: Optional[bool] = typer.Option(None, "--ativo/--inativo"),
    senha: Optional[str] = typer.Option(None, "--senha", help="Nova senha (omitida: mantém a atual)"),
    db_path: Optional[str] = _opt_db(),
    backend: Optional[str] = _opt_backend(),
    session_path: str = _opt_sessao(),
):
    """Edita um usuário (apenas os campos informados)."""
    store = _store(backend, db_path)
    with _tratando_erros():
        u = cadastros.atualizar_usuario(
            store, sessao.usuario_atual(session_path), usuario_id,
            nome=nome, email=email, papel=papel, ativo=ativo, senha=senha,
        )
    typer.echo(f">> Usuário atualizado: {u.email} ({u.papel.value}, {'ativo' if u.ativo else 'inativo'})")


@usuarios_app.command("ativar")
def cmd_usuarios_ativar(
    usuario_id: str = typer.Argument(...),
    db_path: Optional[str] = _opt_db(),
    backend: Optional[str] = _opt_backend(),
    session_path: str = _opt_sessao(),
):
    """Reativa o acesso de um usuário."""
    store = _store(backend, db_path)
    with _tratando_erros():
        u = cadastros.definir_usuario_ativo(store, sessao.usuario_atual(session_path), usuario_id, True)
    typer.echo(f">> Usuário ativado: {u.email}")


@usuarios_app.command("desativar")
def cmd_usuarios_desativar(
    usuario_id: str = typer.Argument(...),
    db_path: Optional[str] = _opt_db(),
    backend: Optional[str] = _opt_backend(),
    session_path: str = _opt_sessao(),
):
    """Bloqueia o login de um usuário sem excluí-lo."""
    store = _store(backend, db_path)
    with _tratando_erros():
        u = cadastros.definir_usuario_ativo(store, sessao.usuario_atual(session_path), usuario_id, False)
    typer.echo(f">> Usuário desativado: {u.email}")


@usuarios_app.command("rm")
def cmd_usuarios_rm(
    usuario_id: str = typer.Argument(...),
    db_path: Optional[str] = _opt_db(),
    backend: Optional[str] = _opt_backend(),
    session_path: str = _opt_sessao(),
):
    """Remove um usuário (não é possível remover o próprio)."""
    store = _store(backend, db_path)
    with _tratando_erros():
        if not cadastros.excluir_usuario(store, sessao.usuario_atual(session_path), usuario_id):
            raise KeyError(f"usuário {usuario_id}")
    typer.echo(">> Usuário removido.")


# -----------------------
# orçamentos
# -----------------------

orc_app = typer.Typer(help="Orçamentos")
app.add_typer(orc_app, name="orcamento")


@orc_app.command("criar")
def cmd_orc_criar(
    cliente: str = typer.Option(..., "--cliente", help="ID do cliente"),
    servico: Optional[str] = typer.Option(None, "--servico", help="ID do serviço do primeiro item"),
    largura: Optional[str] = typer.Option(None),
    altura: Optional[str] = typer.Option(None),
    quantidade: Optional[str] = typer.Option(None),
    fator: Optional[str] = typer.Option(None, help="Fator de dificuldade (1 = normal)"),
    preco: Optional[str] = typer.Option(None, help="Preço unitário (padrão: preço do catálogo)"),
    nome: Optional[str] = typer.Option(None, help="Nome do item (sem serviço)"),
    db_path: Optional[str] = _opt_db(),
    backend: Optional[str] = _opt_backend(),
    session_path: str = _opt_sessao(),
):
    """Cria e grava um orçamento com o primeiro item."""
    store = _store(backend, db_path)
    with _tratando_erros():
        c = next((c for c in store.listar_clientes() if c.id == cliente), None)
        if c is None:
            raise LookupError(f"Cliente não encontrado: {cliente}")
        _checar_servico(store, servico)
        orc = novo_orcamento(store, sessao.usuario_atual(session_path))
        item = novo_item()
        orc = aplicar_edicao(
            store, orc,
            SelecionarCliente(c.id, c.nome),
            AdicionarItem(item),
            AtualizarItem(item.id, _campos_item(
                servico_id=servico, nome=nome, largura=largura, altura=altura,
                quantidade=quantidade, fator_dificuldade=fator, preco_unitario=preco,
            )),
        )
        salvar_orcamento(store, orc)
    typer.echo(f">> Orçamento criado: {orc.numero} - total {formatar_moeda(orc.total)}")


@orc_app.command("list")
def cmd_orc_list(
    busca: str = typer.Option("", "--busca", help="Nome do cliente ou número"),
    status: Optional[str] = typer.Option(None, "--status"),
    db_path: Optional[str] = _opt_db(),
    backend: Optional[str] = _opt_backend(),
):
    """Lista os orçamentos (mais recentes primeiro)."""
    store = _store(backend, db_path)
    with _tratando_erros():
        st = _status(status) if status else None
        orcs = filtrar_orcamentos(store.listar_orcamentos(), busca, st)
    columns, rows, msg = tabela_orcamentos(orcs)
    if msg:
        console.print(Panel(msg, title="Orçamentos", border_style="yellow"))
        return
    table = Table(title="Orçamentos", box=box.ROUNDED)
    for col in columns:
        table.add_column(col, justify="right" if col in ("Itens", "Total") else "left")
    for row in rows:
        table.add_row(*row)
    console.print(table)


@orc_app.command("show")
def cmd_orc_show(
    ref: str = typer.Argument(..., help="Número (MA-AAAA-NNNN) ou id"),
    db_path: Optional[str] = _opt_db(),
    backend: Optional[str] = _opt_backend(),
):
    """Mostra o orçamento com itens e totais."""
    store = _store(backend, db_path)
    with _tratando_erros():
        orc = carregar_orcamento(store, ref)
    _mostrar_orcamento(orc)


@orc_app.command("item-add")
def cmd_orc_item_add(
    ref: str = typer.Argument(...),
    servico: Optional[str] = typer.Option(None, "--servico"),
    largura: Optional[str] = typer.Option(None),
    altura: Optional[str] = typer.Option(None),
    quantidade: Optional[str] = typer.Option(None),
    fator: Optional[str] = typer.Option(None),
    preco: Optional[str] = typer.Option(None),
    nome: Optional[str] = typer.Option(None),
    descricao: Optional[str] = typer.Option(None),
    tipo: Optional[str] = typer.Option(None, help="M2 | LINEAR | UNIT"),
    db_path: Optional[str] = _opt_db(),
    backend: Optional[str] = _opt_backend(),
):
    """Adiciona um item ao final do orçamento."""
    item = novo_item()
    campos = _campos_item(
        servico_id=servico, nome=nome, descricao=descricao, tipo_calculo=tipo.upper() if tipo else None,
        largura=largura, altura=altura, quantidade=quantidade,
        fator_dificuldade=fator, preco_unitario=preco,
    )
    store = _store(backend, db_path)
    with _tratando_erros():
        _checar_servico(store, servico)
    orc = _editar_e_salvar(
        store, ref,
        lambda o: [AdicionarItem(item), AtualizarItem(item.id, campos)],
    )
    typer.echo(f">> Item {len(orc.itens)} adicionado - total {formatar_moeda(orc.total)}")


@orc_app.command("item-rm")
def cmd_orc_item_rm(
    ref: str = typer.Argument(...),
    item: str = typer.Argument(..., help="Posição (1, 2, ...) ou id do item"),
    db_path: Optional[str] = _opt_db(),
    backend: Optional[str] = _opt_backend(),
):
    """Remove um item do orçamento (item inexistente: nada muda)."""
    store = _store(backend, db_path)
    with _tratando_erros():
        antes = len(carregar_orcamento(store, ref).itens)
    orc = _editar_e_salvar(store, ref, lambda o: [RemoverItem(_resolver_item(o, item, exigir=False))])
    if len(orc.itens) == antes:
        typer.echo(f">> Nenhum item {item} no orçamento - total {formatar_moeda(orc.total)}")
    else:
        typer.echo(f">> Item removido - total {formatar_moeda(orc.total)}")


@orc_app.command("item-set")
def cmd_orc_item_set(
    ref: str = typer.Argument(...),
    item: str = typer.Argument(..., help="Posição (1, 2, ...) ou id do item"),
    servico: Optional[str] = typer.Option(None, "--servico"),
    largura: Optional[str] = typer.Option(None),
    altura: Optional[str] = typer.Option(None),
    quantidade: Optional[str] = typer.Option(None),
    fator: Optional[str] = typer.Option(None),
    preco: Optional[str] = typer.Option(None),
    nome: Optional[str] = typer.Option(None),
    descricao: Optional[str] = typer.Option(None),
    tipo: Optional[str] = typer.Option(None, help="M2 | LINEAR | UNIT"),
    db_path: Optional[str] = _opt_db(),
    backend: Optional[str] = _opt_backend(),
):
    """Altera campos de um item (apenas os informados)."""
    campos = _campos_item(
        servico_id=servico, nome=nome, descricao=descricao, tipo_calculo=tipo.upper() if tipo else None,
        largura=largura, altura=altura, quantidade=quantidade,
        fator_dificuldade=fator, preco_unitario=preco,
    )
    if not campos:
        typer.echo("Nada a alterar. Informe pelo menos um campo.")
        raise typer.Exit(code=1)
    store = _store(backend, db_path)
    with _tratando_erros():
        _checar_servico(store, servico)
    orc = _editar_e_salvar(
        store, ref,
        lambda o: [AtualizarItem(_resolver_item(o, item), campos)],
    )
    typer.echo(f">> Item atualizado - total {formatar_moeda(orc.total)}")


@orc_app.command("ajustes")
def cmd_orc_ajustes(
    ref: str = typer.Argument(...),
    frete: Optional[str] = typer.Option(None),
    instalacao: Optional[str] = typer.Option(None),
    desconto: Optional[str] = typer.Option(None),
    db_path: Optional[str] = _opt_db(),
    backend: Optional[str] = _opt_backend(),
):
    """Define frete, instalação e desconto (apenas os informados)."""
    orc = _editar_e_salvar(_store(backend, db_path), ref, lambda o: [DefinirAjustes(frete, instalacao, desconto)])
    typer.echo(f">> Ajustes aplicados - total {formatar_moeda(orc.total)}")


@orc_app.command("condicoes")
def cmd_orc_condicoes(
    ref: str = typer.Argument(...),
    pagamento: Optional[str] = typer.Option(None, "--pagamento"),
    prazo: Optional[str] = typer.Option(None, "--prazo"),
    observacoes: Optional[str] = typer.Option(None, "--obs"),
    db_path: Optional[str] = _opt_db(),
    backend: Optional[str] = _opt_backend(),
):
    """Define forma de pagamento, prazo de execução e observações."""
    _editar_e_salvar(_store(backend, db_path), ref, lambda o: [DefinirCondicoes(pagamento, prazo, observacoes)])
    typer.echo(">> Condições atualizadas.")


@orc_app.command("status")
def cmd_orc_status(
    ref: str = typer.Argument(...),
    status: str = typer.Argument(..., help="Ex.: Enviado, Follow-up, 'Pedido Fechado'"),
    db_path: Optional[str] = _opt_db(),
    backend: Optional[str] = _opt_backend(),
):
    """Altera o status (qualquer status pode ir para qualquer outro)."""
    orc = _editar_e_salvar(_store(backend, db_path), ref, lambda o: [DefinirStatus(_status(status))])
    typer.echo(f">> {orc.numero}: {orc.status.value}")


@orc_app.command("pdf")
def cmd_orc_pdf(
    ref: str = typer.Argument(...),
    saida: Optional[str] = typer.Option(None, "--saida", "-o", help="Arquivo PDF de saída"),
    db_path: Optional[str] = _opt_db(),
    backend: Optional[str] = _opt_backend(),
):
    """Gera o PDF do orçamento (padrão: Orcamento_<numero>.pdf)."""
    store = _store(backend, db_path)
    with _tratando_erros():
        destino = exportar_pdf(store, carregar_orcamento(store, ref), saida)
    typer.echo(f">> PDF gerado: {destino}")


@orc_app.command("export")
def cmd_orc_export(
    path: str = typer.Argument(..., help="Arquivo XLSX de saída"),
    busca: str = typer.Option("", "--busca"),
    db_path: Optional[str] = _opt_db(),
    backend: Optional[str] = _opt_backend(),
):
    """Exporta a lista de orçamentos para XLSX."""
    store = _store(backend, db_path)
    with _tratando_erros():
        orcs = filtrar_orcamentos(store.listar_orcamentos(), busca)
        destino = exportar_orcamentos_xlsx(orcs, path)
    typer.echo(f">> {len(orcs)} orçamentos exportados para {destino}")


# -----------------------
# painel e interfaces
# -----------------------

@app.command("painel")
def cmd_painel(db_path: Optional[str] = _opt_db(), backend: Optional[str] = _opt_backend()):
    """Indicadores: valor em negociação, pedidos fechados e total de orçamentos."""
    store = _store(backend, db_path)
    with _tratando_erros():
        res = resumo_painel(store.listar_orcamentos())
    console.print(Panel(
        f"Em negociação: [bold]{formatar_moeda(res['valor_em_negociacao'])}[/bold] "
        f"({res['qtd_em_negociacao']} orçamentos)\n"
        f"Pedidos fechados: [bold green]{formatar_moeda(res['valor_fechado'])}[/bold green] "
        f"({res['qtd_fechados']})\n"
        f"Total de orçamentos: {res['total_orcamentos']}",
        title="Painel",
        border_style="blue",
    ))
    if res["por_status"]:
        table = Table(title="Por status", box=box.ROUNDED)
        table.add_column("Status")
        table.add_column("Qtd", justify="right")
        table.add_column("Valor", justify="right")
        for st, v in res["por_status"].items():
            table.add_row(st, str(v["quantidade"]), formatar_moeda(v["valor_total"]))
        console.print(table)


@app.command("tui")
def cmd_tui(db_path: Optional[str] = _opt_db(), backend: Optional[str] = _opt_backend()):
    """Inicia o editor interativo de orçamentos (menus Rich)."""
    from orcamentos.adapters.tui import main_tui
    main_tui(_store(backend, db_path))


@app.command("painel-tui")
def cmd_painel_tui(db_path: Optional[str] = _opt_db(), backend: Optional[str] = _opt_backend()):
    """Inicia o painel de orçamentos em tela cheia (Textual)."""
    from orcamentos.adapters.painel_tui import main as painel_main
    try:
        painel_main(_store(backend, db_path))
    except KeyboardInterrupt:
        typer.echo("\nSaindo do painel...")
        raise typer.Exit(0)


def main():
    app()


if __name__ == "__main__":
    main()
