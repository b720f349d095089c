# orcamentos/infra/repositories.py
"""
Repositórios (DAO) para acesso e manipulação de dados no SQLite.

Classes:
- ClienteRepo
- ServicoRepo
- UsuarioRepo
- OrcamentoRepo
- SqliteArmazenamento (fachada usada pelos casos de uso)

Todas as gravações substituem o registro inteiro (upsert por id); não há
atualização parcial nem transação envolvendo mais de um agregado. A
última gravação prevalece.
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Dict, List, Optional

from .db import connect
from .mapeamento import (
    cliente_de_registro,
    cliente_para_registro,
    orcamento_de_registro,
    orcamento_para_registro,
    servico_de_registro,
    servico_para_registro,
    usuario_de_registro,
    usuario_para_registro,
)
from .migrations import apply_migrations
from .views import create_views
from orcamentos.domain.models import Cliente, Orcamento, Servico, Usuario


# -------------------------
# Helpers
# -------------------------

def _rows(cur) -> List[Dict[str, Any]]:
    cols = [d[0] for d in cur.description]
    return [dict(zip(cols, row)) for row in cur.fetchall()]


# -------------------------
# Cliente
# -------------------------

class ClienteRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def upsert(self, cliente: Cliente) -> None:
        r = cliente_para_registro(cliente)
        r["endereco"] = json.dumps(r["endereco"], ensure_ascii=False)
        with connect(self.db_path) as c:
            c.execute(
                """
                INSERT INTO cliente
                    (id, nome, documento, telefone, email, endereco, observacoes)
                VALUES
                    (:id, :nome, :documento, :telefone, :email, :endereco, :observacoes)
                ON CONFLICT(id) DO UPDATE SET
                    nome=excluded.nome,
                    documento=excluded.documento,
                    telefone=excluded.telefone,
                    email=excluded.email,
                    endereco=excluded.endereco,
                    observacoes=excluded.observacoes
                """,
                r,
            )

    def delete(self, cliente_id: str) -> int:
        with connect(self.db_path) as c:
            return c.execute("DELETE FROM cliente WHERE id = ?", (cliente_id,)).rowcount

    def get_all(self) -> List[Cliente]:
        with connect(self.db_path) as c:
            cur = c.execute(
                """SELECT id, nome, documento, telefone, email, endereco, observacoes
                   FROM cliente
                   ORDER BY criado_em DESC, nome"""
            )
            rows = _rows(cur)
        for r in rows:
            r["endereco"] = json.loads(r["endereco"]) if r["endereco"] else {}
        return [cliente_de_registro(r) for r in rows]


# -------------------------
# Serviço (catálogo)
# -------------------------

class ServicoRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def upsert(self, servico: Servico) -> None:
        with connect(self.db_path) as c:
            c.execute(
                """
                INSERT INTO servico
                    (id, nome, descricao, tipo_calculo, preco_base, categoria)
                VALUES
                    (:id, :nome, :descricao, :tipo_calculo, :preco_base, :categoria)
                ON CONFLICT(id) DO UPDATE SET
                    nome=excluded.nome,
                    descricao=excluded.descricao,
                    tipo_calculo=excluded.tipo_calculo,
                    preco_base=excluded.preco_base,
                    categoria=excluded.categoria
                """,
                servico_para_registro(servico),
            )

    def delete(self, servico_id: str) -> int:
        with connect(self.db_path) as c:
            return c.execute("DELETE FROM servico WHERE id = ?", (servico_id,)).rowcount

    def get(self, servico_id: str) -> Optional[Servico]:
        with connect(self.db_path) as c:
            cur = c.execute(
                """SELECT id, nome, descricao, tipo_calculo, preco_base, categoria
                   FROM servico WHERE id = ?""",
                (servico_id,),
            )
            rows = _rows(cur)
        return servico_de_registro(rows[0]) if rows else None

    def get_all(self) -> List[Servico]:
        with connect(self.db_path) as c:
            cur = c.execute(
                """SELECT id, nome, descricao, tipo_calculo, preco_base, categoria
                   FROM servico ORDER BY nome"""
            )
            return [servico_de_registro(r) for r in _rows(cur)]


# -------------------------
# Usuário
# -------------------------

class UsuarioRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def upsert(self, usuario: Usuario) -> None:
        r = usuario_para_registro(usuario)
        r["ativo"] = 1 if usuario.ativo else 0
        with connect(self.db_path) as c:
            c.execute(
                """
                INSERT INTO usuario (id, nome, email, papel, ativo, senha_hash)
                VALUES (:id, :nome, :email, :papel, :ativo, :senha_hash)
                ON CONFLICT(id) DO UPDATE SET
                    nome=excluded.nome,
                    email=excluded.email,
                    papel=excluded.papel,
                    ativo=excluded.ativo,
                    senha_hash=excluded.senha_hash
                """,
                r,
            )

    def get_all(self) -> List[Usuario]:
        with connect(self.db_path) as c:
            cur = c.execute("SELECT id, nome, email, papel, ativo, senha_hash FROM usuario ORDER BY nome")
            return [usuario_de_registro(r) for r in _rows(cur)]

    def delete(self, usuario_id: str) -> int:
        with connect(self.db_path) as c:
            return c.execute("DELETE FROM usuario WHERE id = ?", (usuario_id,)).rowcount


# -------------------------
# Orçamento
# -------------------------

_COLS_ORCAMENTO = (
    "id", "numero", "cliente_id", "cliente_nome", "criado_em", "valido_ate", "status",
    "itens", "subtotal", "frete", "instalacao", "desconto", "total",
    "condicoes_pagamento", "prazo_execucao", "observacoes",
    "responsavel_id", "responsavel_nome",
)


class OrcamentoRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def upsert(self, orcamento: Orcamento) -> None:
        r = orcamento_para_registro(orcamento)
        r["itens"] = json.dumps(r["itens"], ensure_ascii=False)
        r["atualizado_em"] = datetime.now().isoformat(timespec="seconds")
        cols = _COLS_ORCAMENTO + ("atualizado_em",)
        updates = ",\n".join(f"{k}=excluded.{k}" for k in cols if k != "id")
        with connect(self.db_path) as c:
            c.execute(
                f"""
                INSERT INTO orcamento ({", ".join(cols)})
                VALUES ({", ".join(":" + k for k in cols)})
                ON CONFLICT(id) DO UPDATE SET
                {updates}
                """,
                r,
            )

    def _select(self, where: str = "", params: tuple = ()) -> List[Orcamento]:
        with connect(self.db_path) as c:
            cur = c.execute(
                f"SELECT {', '.join(_COLS_ORCAMENTO)} FROM orcamento {where} ORDER BY criado_em DESC",
                params,
            )
            rows = _rows(cur)
        for r in rows:
            r["itens"] = json.loads(r["itens"] or "[]")
        return [orcamento_de_registro(r) for r in rows]

    def get_all(self) -> List[Orcamento]:
        return self._select()

    def get(self, orcamento_id: str) -> Optional[Orcamento]:
        found = self._select("WHERE id = ?", (orcamento_id,))
        return found[0] if found else None

    def get_by_numero(self, numero: str) -> Optional[Orcamento]:
        found = self._select("WHERE numero = ?", (numero,))
        return found[0] if found else None

    def numeros_do_ano(self, ano: int, prefixo: str = "MA") -> List[str]:
        with connect(self.db_path) as c:
            cur = c.execute("SELECT numero FROM orcamento WHERE numero LIKE ?", (f"{prefixo}-{ano:04d}-%",))
            return [row[0] for row in cur.fetchall()]

    def resumo_por_status(self) -> List[Dict[str, Any]]:
        with connect(self.db_path) as c:
            cur = c.execute("SELECT status, quantidade, valor_total FROM vw_orcamentos_por_status ORDER BY status")
            return _rows(cur)


# -------------------------
# Fachada
# -------------------------

class SqliteArmazenamento:
    """Armazenamento relacional (SQLite) com a interface comum dos casos de uso."""

    backend = "sqlite"

    def __init__(self, db_path: str, migrate: bool = True):
        self.db_path = db_path
        if migrate:
            apply_migrations(db_path)
            create_views(db_path)
        self.clientes = ClienteRepo(db_path)
        self.servicos = ServicoRepo(db_path)
        self.usuarios = UsuarioRepo(db_path)
        self.orcamentos = OrcamentoRepo(db_path)

    # clientes
    def listar_clientes(self) -> List[Cliente]:
        return self.clientes.get_all()

    def salvar_cliente(self, cliente: Cliente) -> Cliente:
        self.clientes.upsert(cliente)
        return cliente

    def excluir_cliente(self, cliente_id: str) -> bool:
        return self.clientes.delete(cliente_id) > 0

    # serviços
    def listar_servicos(self) -> List[Servico]:
        return self.servicos.get_all()

    def obter_servico(self, servico_id: str) -> Optional[Servico]:
        return self.servicos.get(servico_id)

    def salvar_servico(self, servico: Servico) -> Servico:
        self.servicos.upsert(servico)
        return servico

    def excluir_servico(self, servico_id: str) -> bool:
        return self.servicos.delete(servico_id) > 0

    # orçamentos
    def listar_orcamentos(self) -> List[Orcamento]:
        return self.orcamentos.get_all()

    def obter_orcamento(self, orcamento_id: str) -> Optional[Orcamento]:
        return self.orcamentos.get(orcamento_id) or self.orcamentos.get_by_numero(orcamento_id)

    def salvar_orcamento(self, orcamento: Orcamento) -> Orcamento:
        self.orcamentos.upsert(orcamento)
        return orcamento

    def numeros_do_ano(self, ano: int, prefixo: str = "MA") -> List[str]:
        return self.orcamentos.numeros_do_ano(ano, prefixo)

    def resumo_por_status(self) -> List[Dict[str, Any]]:
        return self.orcamentos.resumo_por_status()

    # usuários
    def listar_usuarios(self) -> List[Usuario]:
        return self.usuarios.get_all()

    def salvar_usuario(self, usuario: Usuario) -> Usuario:
        self.usuarios.upsert(usuario)
        return usuario

    def excluir_usuario(self, usuario_id: str) -> bool:
        return self.usuarios.delete(usuario_id) > 0
