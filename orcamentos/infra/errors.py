"""
Erros da camada de persistência.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from typing import Iterator


class FalhaPersistencia(IOError):
    """Falha ao ler ou gravar no armazenamento (SQLite ou JSON).

    O erro original fica em ``__cause__``; o orçamento em memória não é
    alterado, então o usuário pode tentar de novo sem redigitar.
    """

    def __init__(self, operacao: str, erro: BaseException):
        super().__init__(f"Falha ao {operacao}: {erro}")
        self.operacao = operacao


@contextmanager
def persistencia(operacao: str) -> Iterator[None]:
    """Converte erros do SQLite ou do sistema de arquivos em ``FalhaPersistencia``.

    Uma ``FalhaPersistencia`` já levantada por camada inferior passa sem
    ser embrulhada de novo.
    """
    try:
        yield
    except FalhaPersistencia:
        raise
    except (sqlite3.Error, OSError) as e:
        raise FalhaPersistencia(operacao, e) from e
