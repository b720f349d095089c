# orcamentos/infra/store.py
"""
Escolha do armazenamento (SQLite ou JSON local) conforme a configuração.
"""

from __future__ import annotations

from typing import Optional, Union

from orcamentos.config import BACKEND, DB_PATH, JSON_DIR
from .errors import persistencia
from .json_store import JsonArmazenamento
from .repositories import SqliteArmazenamento

Armazenamento = Union[SqliteArmazenamento, JsonArmazenamento]


def abrir_armazenamento(backend: Optional[str] = None, caminho: Optional[str] = None) -> Armazenamento:
    """
    Abre o armazenamento configurado.

    Args:
        backend: 'sqlite' ou 'json' (padrão: ORCAMENTOS_BACKEND)
        caminho: arquivo SQLite ou pasta JSON (padrão conforme o backend)
    """
    backend = (backend or BACKEND).strip().lower()
    if backend == "sqlite":
        with persistencia("abrir o banco SQLite"):
            return SqliteArmazenamento(caminho or DB_PATH)
    if backend == "json":
        with persistencia("abrir a pasta JSON"):
            return JsonArmazenamento(caminho or JSON_DIR)
    raise ValueError(f"backend desconhecido: {backend!r} (use 'sqlite' ou 'json')")
