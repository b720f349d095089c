"""
Conexão SQLite do armazenamento relacional.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from typing import Iterator

from .errors import FalhaPersistencia
from .logger import log_system_event


@contextmanager
def connect(db_path: str) -> Iterator[sqlite3.Connection]:
    """
    Abre o banco de orçamentos e entrega a conexão configurada:
    - foreign_keys ON, row_factory = sqlite3.Row
    - commit ao sair; rollback se algo falhar
    - erros do SQLite (abrir, consultar, gravar) saem como FalhaPersistencia,
      com o erro original em ``__cause__``
    """
    try:
        conn = sqlite3.connect(db_path)
    except sqlite3.Error as e:
        log_system_event("db_open_error", {"db_path": db_path, "error": str(e)}, level="error")
        raise FalhaPersistencia(f"abrir o banco {db_path}", e) from e

    try:
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON;")
        yield conn
        conn.commit()
    except sqlite3.Error as e:
        conn.rollback()
        log_system_event("db_error", {"db_path": db_path, "error": str(e)}, level="error")
        raise FalhaPersistencia("acessar o banco", e) from e
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()
