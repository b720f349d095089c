# orcamentos/infra/seed.py
"""
Dados iniciais: usuários de demonstração, catálogo básico e um cliente.

Usados pelo comando ``seed`` e pelo armazenamento JSON na primeira leitura.
"""

from __future__ import annotations

from typing import List

from orcamentos.domain.models import (
    Cliente,
    Endereco,
    PapelUsuario,
    Servico,
    TipoCalculo,
    Usuario,
)
from .senhas import hash_senha

# senha de demonstração dos usuários iniciais
SENHA_DEMO = "123"


def usuarios_iniciais() -> List[Usuario]:
    return [
        Usuario(
            id="1",
            nome="Administrador Metal Apex",
            email="admin@metalapex.com.br",
            papel=PapelUsuario.ADMIN,
            ativo=True,
            senha_hash=hash_senha(SENHA_DEMO),
        ),
        Usuario(
            id="2",
            nome="Vendedor Exemplo",
            email="vendedor@metalapex.com.br",
            papel=PapelUsuario.VENDEDOR,
            ativo=True,
            senha_hash=hash_senha(SENHA_DEMO),
        ),
    ]


def servicos_iniciais() -> List[Servico]:
    return [
        Servico("1", "Portão Basculante", "Estrutura em metalon, fechamento em chapa.", TipoCalculo.M2, 450.0, "Portões"),
        Servico("2", "Guarda-corpo Inox", "Tubular redondo com acabamento polido.", TipoCalculo.LINEAR, 380.0, "Serralheria"),
        Servico("3", "Grade de Proteção", "Ferro chato e redondo maciço.", TipoCalculo.M2, 280.0, "Serralheria"),
        Servico("4", "Motor de Portão", "Kit motor deslizante rápido.", TipoCalculo.UNIDADE, 600.0, "Automação"),
    ]


def clientes_iniciais() -> List[Cliente]:
    return [
        Cliente(
            id="1",
            nome="Construtora Exemplo Ltda",
            documento="12.345.678/0001-90",
            telefone="(11) 99999-8888",
            email="contato@construtoraexemplo.com.br",
            endereco=Endereco("Av. Industrial", "1000", "Centro", "São Paulo", "SP", "01000-000"),
            observacoes="Cliente recorrente",
        )
    ]


def popular(store) -> dict:
    """Grava os dados iniciais no armazenamento (upsert por id)."""
    usuarios = usuarios_iniciais()
    servicos = servicos_iniciais()
    clientes = clientes_iniciais()
    for u in usuarios:
        store.salvar_usuario(u)
    for s in servicos:
        store.salvar_servico(s)
    for c in clientes:
        store.salvar_cliente(c)
    return {"usuarios": len(usuarios), "servicos": len(servicos), "clientes": len(clientes)}
