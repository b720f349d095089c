# orcamentos/config.py
"""
Configurações globais e valores padrão do sistema de orçamentos.
"""

import os
from dataclasses import dataclass


# Caminho padrão do banco de dados SQLite
DB_PATH = os.environ.get("ORCAMENTOS_DB", os.path.join(os.getcwd(), "orcamentos.db"))

# Pasta do armazenamento local em JSON (equivalente ao localStorage)
JSON_DIR = os.environ.get("ORCAMENTOS_JSON_DIR", os.path.join(os.getcwd(), "dados"))

# Arquivo da sessão do usuário logado
SESSION_PATH = os.environ.get("ORCAMENTOS_SESSION", os.path.join(os.getcwd(), ".sessao.json"))

# Backend de persistência: 'sqlite' | 'json'
BACKEND = os.environ.get("ORCAMENTOS_BACKEND", "sqlite")


@dataclass
class DefaultConfig:
    """Valores padrão para novos orçamentos e para o documento PDF."""
    validade_dias: int = 20
    prefixo_numero: str = "MA"
    condicoes_pagamento: str = "50% de entrada + 50% na entrega"
    prazo_execucao: str = "15 dias úteis"
    empresa_nome: str = "METAL APEX"
    empresa_razao: str = "Metal Apex - Uma divisão Projemix Sistemas Ltda"
    empresa_contato: str = "CNPJ: 53.210.488/0001-48  |  Tel/WhatsApp: (41) 99617-0545"
    empresa_site: str = "www.metalapex.com.br"


# Instância global dos valores padrão
DEFAULTS = DefaultConfig()
