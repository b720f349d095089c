# orcamentos/usecases/cadastros.py
"""
UC: Cadastros de clientes, serviços (catálogo) e usuários.

Obs.:
- Gravações substituem o registro inteiro (upsert por id); edições
  carregam o registro, trocam só os campos informados e gravam de novo.
- A gestão de usuários exige um solicitante com papel de administrador,
  e ninguém pode excluir o próprio usuário.
- Falhas do armazenamento saem como ``FalhaPersistencia``.
- Importações em lote leem XLSX via ``orcamentos.adapters.planilhas``.
"""
from __future__ import annotations

import uuid
from dataclasses import replace
from typing import Any, Dict, List, Optional

from orcamentos.adapters.parsers import parse_numero
from orcamentos.adapters.planilhas import load_clientes_from_xlsx, load_servicos_from_xlsx
from orcamentos.domain.models import Cliente, Endereco, PapelUsuario, Servico, TipoCalculo, Usuario
from orcamentos.domain.policies import exigir_admin
from orcamentos.infra.errors import persistencia
from orcamentos.infra.logger import (
    log_database_operation,
    log_file_operation,
    log_system_event,
    log_transaction,
)
from orcamentos.infra.senhas import hash_senha

CAMPOS_CLIENTE = ("nome", "documento", "telefone", "email", "observacoes")
CAMPOS_ENDERECO = ("rua", "numero", "bairro", "cidade", "estado", "cep")
CAMPOS_SERVICO = ("nome", "descricao", "tipo_calculo", "preco_base", "categoria")


def _novo_id() -> str:
    return uuid.uuid4().hex


def _texto(x: Any) -> str:
    return str(x).strip() if x is not None else ""


def _informados(campos: Dict[str, Any], permitidos) -> Dict[str, Any]:
    """Só os campos conhecidos e informados (None = não alterar)."""
    desconhecidos = set(campos) - set(permitidos)
    if desconhecidos:
        raise ValueError(f"campos desconhecidos: {', '.join(sorted(desconhecidos))}")
    return {k: v for k, v in campos.items() if v is not None}


# -------------------------
# Clientes
# -------------------------

def listar_clientes(store) -> List[Cliente]:
    with persistencia("listar clientes"):
        return store.listar_clientes()


def obter_cliente(store, cliente_id: str) -> Cliente:
    cliente = next((c for c in listar_clientes(store) if c.id == cliente_id), None)
    if cliente is None:
        raise KeyError(f"cliente {cliente_id}")
    return cliente


def salvar_cliente(store, cliente: Cliente) -> Cliente:
    """Grava o cliente. O nome é obrigatório."""
    if not _texto(cliente.nome):
        raise ValueError("Informe o nome do cliente")
    with persistencia("salvar cliente"):
        store.salvar_cliente(cliente)
    log_database_operation("cliente", "UPSERT", 1, id=cliente.id)
    log_transaction("salvar_cliente", {"id": cliente.id, "nome": cliente.nome}, result="success")
    return cliente


def criar_cliente(
    store,
    nome: str,
    documento: str = "",
    telefone: str = "",
    email: str = "",
    endereco: Optional[Endereco] = None,
    observacoes: Optional[str] = None,
) -> Cliente:
    cliente = Cliente(
        id=_novo_id(),
        nome=_texto(nome),
        documento=_texto(documento),
        telefone=_texto(telefone),
        email=_texto(email),
        endereco=endereco or Endereco(),
        observacoes=observacoes or None,
    )
    return salvar_cliente(store, cliente)


def atualizar_cliente(store, cliente_id: str, **campos: Any) -> Cliente:
    """Altera os campos informados do cliente (inclusive os do endereço).

    Orçamentos já gravados mantêm o nome copiado na criação.
    """
    atual = obter_cliente(store, cliente_id)
    novos = _informados(campos, CAMPOS_CLIENTE + CAMPOS_ENDERECO)
    endereco = replace(atual.endereco, **{k: _texto(novos.pop(k)) for k in CAMPOS_ENDERECO if k in novos})
    novos = {k: _texto(v) for k, v in novos.items()}
    if "observacoes" in novos:
        novos["observacoes"] = novos["observacoes"] or None
    return salvar_cliente(store, replace(atual, endereco=endereco, **novos))


def excluir_cliente(store, cliente_id: str) -> bool:
    """Remove o cliente. Orçamentos existentes mantêm o nome copiado."""
    with persistencia("excluir cliente"):
        removido = store.excluir_cliente(cliente_id)
    log_database_operation("cliente", "DELETE", 1 if removido else 0, id=cliente_id)
    return removido


# -------------------------
# Serviços
# -------------------------

def listar_servicos(store) -> List[Servico]:
    with persistencia("listar serviços"):
        return store.listar_servicos()


def salvar_servico(store, servico: Servico) -> Servico:
    if not _texto(servico.nome):
        raise ValueError("Informe o nome do serviço")
    with persistencia("salvar serviço"):
        store.salvar_servico(servico)
    log_database_operation("servico", "UPSERT", 1, id=servico.id)
    log_transaction("salvar_servico", {"id": servico.id, "nome": servico.nome}, result="success")
    return servico


def criar_servico(
    store,
    nome: str,
    tipo_calculo: Any = TipoCalculo.M2,
    preco_base: Any = 0.0,
    descricao: str = "",
    categoria: str = "",
) -> Servico:
    servico = Servico(
        id=_novo_id(),
        nome=_texto(nome),
        descricao=_texto(descricao),
        tipo_calculo=tipo_calculo,
        preco_base=preco_base,
        categoria=_texto(categoria),
    )
    return salvar_servico(store, servico)


def atualizar_servico(store, servico_id: str, **campos: Any) -> Servico:
    """Altera os campos informados do serviço. Itens já orçados não mudam."""
    with persistencia("carregar serviço"):
        atual = store.obter_servico(servico_id)
    if atual is None:
        raise KeyError(f"serviço {servico_id}")
    novos = _informados(campos, CAMPOS_SERVICO)
    for k in ("nome", "descricao", "categoria"):
        if k in novos:
            novos[k] = _texto(novos[k])
    return salvar_servico(store, replace(atual, **novos))


def excluir_servico(store, servico_id: str) -> bool:
    """Remove o serviço do catálogo. Itens já orçados não são afetados."""
    with persistencia("excluir serviço"):
        removido = store.excluir_servico(servico_id)
    log_database_operation("servico", "DELETE", 1 if removido else 0, id=servico_id)
    return removido


# -------------------------
# Usuários (somente administrador)
# -------------------------

def listar_usuarios(store, solicitante: Optional[Usuario]) -> List[Usuario]:
    exigir_admin(solicitante)
    with persistencia("listar usuários"):
        return store.listar_usuarios()


def _obter_usuario(usuarios: List[Usuario], usuario_id: str) -> Usuario:
    alvo = next((u for u in usuarios if u.id == usuario_id), None)
    if alvo is None:
        raise KeyError(f"usuário {usuario_id}")
    return alvo


def _checar_email_livre(usuarios: List[Usuario], email_norm: str, exceto: Optional[str] = None) -> None:
    if any(u.email.lower() == email_norm and u.id != exceto for u in usuarios):
        raise ValueError(f"E-mail já cadastrado: {email_norm}")


def criar_usuario(
    store,
    solicitante: Optional[Usuario],
    nome: str,
    email: str,
    senha: str,
    papel: Any = PapelUsuario.VENDEDOR,
) -> Usuario:
    """Cria um usuário ativo. O e-mail é único (sem diferenciar maiúsculas)."""
    usuarios = listar_usuarios(store, solicitante)
    email_norm = _texto(email).lower()
    if not _texto(nome) or not email_norm:
        raise ValueError("Informe nome e e-mail")
    if not senha:
        raise ValueError("Informe a senha")
    _checar_email_livre(usuarios, email_norm)

    usuario = Usuario(
        id=_novo_id(),
        nome=_texto(nome),
        email=email_norm,
        papel=papel,
        ativo=True,
        senha_hash=hash_senha(senha),
    )
    with persistencia("salvar usuário"):
        store.salvar_usuario(usuario)
    log_database_operation("usuario", "UPSERT", 1, id=usuario.id)
    log_system_event("usuario_criado", {"id": usuario.id, "papel": usuario.papel.value, "por": solicitante.id})
    return usuario


def atualizar_usuario(
    store,
    solicitante: Optional[Usuario],
    usuario_id: str,
    nome: Optional[str] = None,
    email: Optional[str] = None,
    papel: Any = None,
    ativo: Optional[bool] = None,
    senha: Optional[str] = None,
) -> Usuario:
    """Edita um usuário. Senha vazia ou ausente mantém a senha atual."""
    usuarios = listar_usuarios(store, solicitante)
    alvo = _obter_usuario(usuarios, usuario_id)
    novos: Dict[str, Any] = {}
    if nome is not None:
        if not _texto(nome):
            raise ValueError("Informe o nome")
        novos["nome"] = _texto(nome)
    if email is not None:
        email_norm = _texto(email).lower()
        if not email_norm:
            raise ValueError("Informe o e-mail")
        _checar_email_livre(usuarios, email_norm, exceto=usuario_id)
        novos["email"] = email_norm
    if papel is not None:
        novos["papel"] = papel
    if ativo is not None:
        novos["ativo"] = bool(ativo)
    if senha:
        novos["senha_hash"] = hash_senha(senha)

    alvo = replace(alvo, **novos)
    with persistencia("salvar usuário"):
        store.salvar_usuario(alvo)
    log_database_operation("usuario", "UPSERT", 1, id=alvo.id)
    log_system_event("usuario_editado", {"id": alvo.id, "campos": sorted(novos), "por": solicitante.id})
    return alvo


def definir_usuario_ativo(store, solicitante: Optional[Usuario], usuario_id: str, ativo: bool) -> Usuario:
    return atualizar_usuario(store, solicitante, usuario_id, ativo=ativo)


def excluir_usuario(store, solicitante: Optional[Usuario], usuario_id: str) -> bool:
    """Remove um usuário. O administrador não pode excluir a si mesmo."""
    exigir_admin(solicitante)
    if usuario_id == solicitante.id:
        raise ValueError("Você não pode excluir a si mesmo.")
    with persistencia("excluir usuário"):
        removido = store.excluir_usuario(usuario_id)
    log_database_operation("usuario", "DELETE", 1 if removido else 0, id=usuario_id)
    if removido:
        log_system_event("usuario_excluido", {"id": usuario_id, "por": solicitante.id})
    return removido


# -------------------------
# Importação em lote (XLSX)
# -------------------------

def importar_clientes_xlsx(store, path: str) -> Dict[str, Any]:
    """Lê um XLSX de CLIENTES e grava todas as linhas (upsert por id)."""
    log_system_event("importar_clientes_start", {"file_path": path})
    try:
        rows = load_clientes_from_xlsx(path)
        log_file_operation("import", path, rows_processed=len(rows))
        with persistencia("gravar clientes importados"):
            for row in rows:
                store.salvar_cliente(Cliente(
                    id=row["id"] or _novo_id(),
                    nome=row["nome"],
                    documento=row["documento"],
                    telefone=row["telefone"],
                    email=row["email"],
                    endereco=Endereco(**row["endereco"]),
                    observacoes=row["observacoes"],
                ))
        log_database_operation("cliente", "UPSERT_MANY", len(rows), file_path=path)

        result = {"arquivo": path, "linhas_importadas": len(rows)}
        log_transaction("importar_clientes", {"file": path, "rows_count": len(rows)}, result=result)
        return result
    except Exception as e:
        log_transaction("importar_clientes", {"file": path}, error=str(e))
        log_system_event("importar_clientes_error", {"file_path": path, "error": str(e)}, level="error")
        raise


def importar_servicos_xlsx(store, path: str) -> Dict[str, Any]:
    """Lê um XLSX de SERVIÇOS e grava todas as linhas (upsert por id)."""
    log_system_event("importar_servicos_start", {"file_path": path})
    try:
        rows = load_servicos_from_xlsx(path)
        log_file_operation("import", path, rows_processed=len(rows))
        with persistencia("gravar serviços importados"):
            for row in rows:
                store.salvar_servico(Servico(
                    id=row["id"] or _novo_id(),
                    nome=row["nome"],
                    descricao=row["descricao"],
                    tipo_calculo=row["tipo_calculo"],
                    preco_base=parse_numero(row["preco_base"]),
                    categoria=row["categoria"],
                ))
        log_database_operation("servico", "UPSERT_MANY", len(rows), file_path=path)

        result = {"arquivo": path, "linhas_importadas": len(rows)}
        log_transaction("importar_servicos", {"file": path, "rows_count": len(rows)}, result=result)
        return result
    except Exception as e:
        log_transaction("importar_servicos", {"file": path}, error=str(e))
        log_system_event("importar_servicos_error", {"file_path": path, "error": str(e)}, level="error")
        raise
