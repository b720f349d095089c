# orcamentos/infra/senhas.py
"""
Hash de senhas dos usuários via werkzeug.security (sal aleatório embutido
no próprio hash, formato ``metodo$sal$hash``).
"""

from __future__ import annotations

from typing import Optional

from werkzeug.security import check_password_hash, generate_password_hash


def hash_senha(senha: str) -> str:
    return generate_password_hash(senha)


def verificar_senha(senha: str, armazenado: Optional[str]) -> bool:
    if not armazenado:
        return False
    return check_password_hash(armazenado, senha)
