# orcamentos/infra/migrations.py
"""
Migrações de schema usando PRAGMA user_version.

V1: tabelas base (cliente, servico, usuario, orcamento)
V2: adiciona `atualizado_em` ao orçamento (carimbo do último salvamento)

Colunas em snake_case. Os itens do orçamento ficam embutidos na coluna
`itens` como JSON ordenado (o agregado é sempre gravado inteiro).
"""

from __future__ import annotations

from typing import List
from .db import connect


SCHEMA_V1: List[str] = [
    # Clientes (endereço embutido como JSON)
    """
    CREATE TABLE IF NOT EXISTS cliente (
        id TEXT PRIMARY KEY,
        nome TEXT NOT NULL,
        documento TEXT,
        telefone TEXT,
        email TEXT,
        endereco TEXT,
        observacoes TEXT,
        criado_em TEXT DEFAULT (datetime('now'))
    );
    """,
    # Catálogo de serviços/produtos
    """
    CREATE TABLE IF NOT EXISTS servico (
        id TEXT PRIMARY KEY,
        nome TEXT NOT NULL,
        descricao TEXT,
        tipo_calculo TEXT NOT NULL DEFAULT 'M2', -- 'M2' | 'LINEAR' | 'UNIT'
        preco_base REAL DEFAULT 0,
        categoria TEXT
    );
    """,
    # Usuários (papel: 'Administrador' | 'Vendedor')
    """
    CREATE TABLE IF NOT EXISTS usuario (
        id TEXT PRIMARY KEY,
        nome TEXT NOT NULL,
        email TEXT NOT NULL UNIQUE,
        papel TEXT NOT NULL,
        ativo INTEGER DEFAULT 1,
        senha_hash TEXT
    );
    """,
    # Orçamentos (snapshots de cliente/responsável desnormalizados)
    """
    CREATE TABLE IF NOT EXISTS orcamento (
        id TEXT PRIMARY KEY,
        numero TEXT NOT NULL,
        cliente_id TEXT,
        cliente_nome TEXT,
        criado_em TEXT NOT NULL,
        valido_ate TEXT NOT NULL,
        status TEXT NOT NULL,
        itens TEXT NOT NULL DEFAULT '[]',
        subtotal REAL,
        frete REAL DEFAULT 0,
        instalacao REAL DEFAULT 0,
        desconto REAL DEFAULT 0,
        total REAL,
        condicoes_pagamento TEXT,
        prazo_execucao TEXT,
        observacoes TEXT,
        responsavel_id TEXT,
        responsavel_nome TEXT
    );
    """,
]


def _ensure_column(conn, table: str, column: str, ddl: str) -> None:
    """Adiciona coluna se não existir."""
    cur = conn.execute(f"PRAGMA table_info({table});")
    cols = [r[1] for r in cur.fetchall()]  # r[1] é o nome da coluna
    if column not in cols:
        conn.execute(f"ALTER TABLE {table} ADD COLUMN {ddl};")


def _apply_v1(conn) -> None:
    for sql in SCHEMA_V1:
        conn.executescript(sql)


def _apply_v2(conn) -> None:
    _ensure_column(conn, "orcamento", "atualizado_em", "atualizado_em TEXT")


def apply_migrations(db_path: str) -> None:
    """Aplica migrações incrementais de acordo com PRAGMA user_version."""
    with connect(db_path) as conn:
        ver = conn.execute("PRAGMA user_version;").fetchone()[0] or 0

        if ver < 1:
            _apply_v1(conn)
            conn.execute("PRAGMA user_version = 1;")
            ver = 1

        if ver < 2:
            _apply_v2(conn)
            conn.execute("PRAGMA user_version = 2;")
            ver = 2
