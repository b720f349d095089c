"""
Políticas e regras de negócio do sistema de orçamentos.

Este módulo contém a numeração sequencial dos orçamentos, a validade
padrão, a validação exigida antes de salvar e a checagem de permissão
de administrador. As funções são usadas pela camada de aplicação e
pelos adaptadores (CLI/TUI).
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta
from typing import Iterable, Optional

from orcamentos.domain.models import Orcamento, PapelUsuario, StatusOrcamento, Usuario


# Orçamentos ainda em negociação (contam como "pendentes" no painel)
STATUS_EM_NEGOCIACAO = frozenset({
    StatusOrcamento.ENVIADO,
    StatusOrcamento.FOLLOW_UP,
    StatusOrcamento.VISITA,
})


class OrcamentoInvalido(ValueError):
    """Orçamento sem os dados mínimos para ser salvo."""


class PermissaoNegada(PermissionError):
    """Usuário sem papel de administrador."""


def gerar_numero_orcamento(
    numeros_existentes: Iterable[str],
    ano: Optional[int] = None,
    prefixo: str = "MA",
) -> str:
    """Gera o próximo número legível do orçamento.

    Formato ``<prefixo>-AAAA-NNNN``. A sequência é a quantidade de
    números já existentes com o prefixo do ano, mais um.

    Atenção: não é seguro contra concorrência. Duas criações a partir da
    mesma lista de existentes recebem o mesmo número; a unicidade do
    registro é garantida pelo ``id``, não por este número.

    Args:
        numeros_existentes: Números dos orçamentos já registrados.
        ano: Ano de referência (padrão: ano corrente).
        prefixo: Prefixo da empresa.

    Returns:
        O número formatado, ex.: ``MA-2025-0007``.
    """
    ano = ano if ano is not None else datetime.now().year
    padrao = re.compile(rf"^{re.escape(prefixo)}-{ano:04d}-")
    qtd = sum(1 for n in numeros_existentes if n and padrao.match(str(n)))
    return f"{prefixo}-{ano:04d}-{qtd + 1:04d}"


def validade_padrao(criado_em: datetime, dias: int = 20) -> datetime:
    """Data de validade: ``dias`` corridos após a criação."""
    return criado_em + timedelta(days=dias)


def validar_para_salvar(orcamento: Orcamento) -> None:
    """Bloqueia o salvamento de orçamento sem cliente ou sem itens.

    Raises:
        OrcamentoInvalido: com a mensagem a ser exibida ao usuário.
    """
    if not orcamento.cliente_id:
        raise OrcamentoInvalido("Selecione um cliente")
    if not orcamento.itens:
        raise OrcamentoInvalido("Adicione pelo menos um item")


def pode_gerenciar_usuarios(usuario: Optional[Usuario]) -> bool:
    return usuario is not None and usuario.ativo and usuario.papel == PapelUsuario.ADMIN


def exigir_admin(usuario: Optional[Usuario]) -> None:
    if not pode_gerenciar_usuarios(usuario):
        raise PermissaoNegada("Acesso restrito a administradores")
