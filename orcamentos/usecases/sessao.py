"""
UC: Sessão do usuário (login, usuário atual, logout).

A sessão é gravada em um arquivo JSON sem a senha. O papel gravado na
sessão define o acesso às telas de gestão de usuários.
"""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Optional

from orcamentos.config import SESSION_PATH
from orcamentos.domain.models import Usuario
from orcamentos.infra.mapeamento import usuario_de_registro, usuario_para_registro
from orcamentos.infra.senhas import verificar_senha
from orcamentos.infra.logger import log_system_event


class LoginInvalido(ValueError):
    """E-mail ou senha incorretos, ou usuário inativo."""


def login(store, email: str, senha: str, session_path: str = SESSION_PATH) -> Usuario:
    """Autentica e grava a sessão. Levanta ``LoginInvalido`` em caso de falha."""
    email_norm = (email or "").strip().lower()
    for u in store.listar_usuarios():
        if u.email.lower() == email_norm and u.ativo and verificar_senha(senha, u.senha_hash):
            registro = usuario_para_registro(u, com_senha=False)
            Path(session_path).parent.mkdir(parents=True, exist_ok=True)
            with open(session_path, "w", encoding="utf-8") as f:
                json.dump(registro, f, ensure_ascii=False)
            log_system_event("login", {"usuario_id": u.id, "papel": u.papel.value})
            return usuario_de_registro(registro)

    log_system_event("login_falhou", {"email": email_norm}, level="warning")
    raise LoginInvalido("E-mail ou senha inválidos")


def usuario_atual(session_path: str = SESSION_PATH) -> Optional[Usuario]:
    if not os.path.exists(session_path):
        return None
    with open(session_path, "r", encoding="utf-8") as f:
        return usuario_de_registro(json.load(f))


def logout(session_path: str = SESSION_PATH) -> None:
    if os.path.exists(session_path):
        os.remove(session_path)
        log_system_event("logout")
