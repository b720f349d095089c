"""
Transições do orçamento (motor de precificação).

Cada operação recebe um ``Orcamento`` imutável e devolve um novo valor
com os campos derivados já recalculados. O editor (CLI/TUI) compõe as
edições via ``reduzir(orcamento, acao)``.

Regras:
- ``adicionar_item`` anexa ao final; a ordem de inserção é preservada.
- ``remover_item`` com id inexistente não faz nada.
- Trocar o serviço de um item copia nome, descrição, tipo de cálculo e
  preço base do catálogo uma única vez (snapshot); alterações futuras no
  catálogo não afetam itens existentes.
- ``status`` é escolha livre: qualquer valor pode substituir qualquer outro.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, Mapping, Optional, Union

from orcamentos.domain.models import (
    ItemOrcamento,
    Orcamento,
    Servico,
    TipoCalculo,
)

Catalogo = Union[Mapping[str, Servico], Callable[[str], Optional[Servico]]]

# Campos editáveis de um item (o total é sempre derivado)
CAMPOS_ITEM = {
    "servico_id", "nome", "descricao", "tipo_calculo", "largura", "altura",
    "quantidade", "preco_unitario", "fator_dificuldade", "observacoes",
}


def _novo_id() -> str:
    return uuid.uuid4().hex


def _buscar_servico(catalogo: Optional[Catalogo], servico_id: Optional[str]) -> Optional[Servico]:
    if catalogo is None or not servico_id:
        return None
    if callable(catalogo):
        return catalogo(servico_id)
    return catalogo.get(servico_id)


# -------------------------
# Itens
# -------------------------

def novo_item(item_id: Optional[str] = None) -> ItemOrcamento:
    """Item com valores neutros: quantidade 1, fator 1, valores 0, tipo M2."""
    return ItemOrcamento(
        id=item_id or _novo_id(),
        tipo_calculo=TipoCalculo.M2,
        largura=0.0,
        altura=0.0,
        quantidade=1.0,
        preco_unitario=0.0,
        fator_dificuldade=1.0,
    )


def recalcular_item(item: ItemOrcamento) -> ItemOrcamento:
    """Devolve o item com o total recalculado a partir dos demais campos."""
    return replace(item)


def selecionar_servico(item: ItemOrcamento, servico: Servico) -> ItemOrcamento:
    """Vincula o item a um serviço do catálogo e copia os dados dele."""
    return replace(
        item,
        servico_id=servico.id,
        nome=servico.nome,
        descricao=servico.descricao,
        tipo_calculo=servico.tipo_calculo,
        preco_unitario=servico.preco_base,
    )


def _editar_item(item: ItemOrcamento, campos: Mapping[str, Any], catalogo: Optional[Catalogo]) -> ItemOrcamento:
    desconhecidos = set(campos) - CAMPOS_ITEM
    if desconhecidos:
        raise ValueError(f"campos de item inválidos: {', '.join(sorted(desconhecidos))}")

    novo_servico = campos.get("servico_id")
    atualizado = replace(item, **campos)
    if "servico_id" in campos and novo_servico and novo_servico != item.servico_id:
        servico = _buscar_servico(catalogo, novo_servico)
        if servico is not None:
            # campos informados na mesma edição prevalecem sobre o catálogo
            outros = {k: v for k, v in campos.items() if k != "servico_id"}
            atualizado = replace(selecionar_servico(atualizado, servico), **outros)
    return atualizado


# -------------------------
# Orçamento
# -------------------------

def recalcular_totais(orcamento: Orcamento) -> Orcamento:
    """Recalcula subtotal e total (idempotente)."""
    return replace(orcamento, itens=tuple(recalcular_item(it) for it in orcamento.itens))


def adicionar_item(orcamento: Orcamento, item: Optional[ItemOrcamento] = None) -> Orcamento:
    """Anexa um item ao final (um item neutro novo quando ``item`` é None)."""
    novo = item if item is not None else novo_item()
    if orcamento.item(novo.id) is not None:
        raise ValueError(f"item já existe no orçamento: {novo.id}")
    return replace(orcamento, itens=orcamento.itens + (novo,))


def remover_item(orcamento: Orcamento, item_id: str) -> Orcamento:
    """Remove o item com ``item_id``; id ausente devolve o orçamento inalterado."""
    if orcamento.item(item_id) is None:
        return orcamento
    return replace(orcamento, itens=tuple(it for it in orcamento.itens if it.id != item_id))


def atualizar_item(
    orcamento: Orcamento,
    item_id: str,
    catalogo: Optional[Catalogo] = None,
    **campos: Any,
) -> Orcamento:
    """Altera campos de um item mantendo sua posição na lista."""
    if orcamento.item(item_id) is None:
        raise KeyError(item_id)
    itens = tuple(
        _editar_item(it, campos, catalogo) if it.id == item_id else it
        for it in orcamento.itens
    )
    return replace(orcamento, itens=itens)


def definir_ajustes(
    orcamento: Orcamento,
    frete: Any = None,
    instalacao: Any = None,
    desconto: Any = None,
) -> Orcamento:
    """Altera frete, instalação e/ou desconto (apenas os informados)."""
    mudancas: Dict[str, Any] = {}
    if frete is not None:
        mudancas["frete"] = frete
    if instalacao is not None:
        mudancas["instalacao"] = instalacao
    if desconto is not None:
        mudancas["desconto"] = desconto
    if not mudancas:
        return orcamento
    return replace(orcamento, **mudancas)


def definir_status(orcamento: Orcamento, status: Any) -> Orcamento:
    return replace(orcamento, status=status)


def selecionar_cliente(orcamento: Orcamento, cliente_id: str, cliente_nome: str) -> Orcamento:
    return replace(orcamento, cliente_id=cliente_id, cliente_nome=cliente_nome)


def definir_condicoes(
    orcamento: Orcamento,
    condicoes_pagamento: Optional[str] = None,
    prazo_execucao: Optional[str] = None,
    observacoes: Optional[str] = None,
) -> Orcamento:
    mudancas: Dict[str, Any] = {}
    if condicoes_pagamento is not None:
        mudancas["condicoes_pagamento"] = condicoes_pagamento
    if prazo_execucao is not None:
        mudancas["prazo_execucao"] = prazo_execucao
    if observacoes is not None:
        mudancas["observacoes"] = observacoes or None
    return replace(orcamento, **mudancas) if mudancas else orcamento


# -------------------------
# Ações (reducer)
# -------------------------

@dataclass(frozen=True)
class AdicionarItem:
    item: Optional[ItemOrcamento] = None


@dataclass(frozen=True)
class RemoverItem:
    item_id: str


@dataclass(frozen=True)
class AtualizarItem:
    item_id: str
    campos: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class DefinirAjustes:
    frete: Any = None
    instalacao: Any = None
    desconto: Any = None


@dataclass(frozen=True)
class DefinirStatus:
    status: Any


@dataclass(frozen=True)
class SelecionarCliente:
    cliente_id: str
    cliente_nome: str


@dataclass(frozen=True)
class DefinirCondicoes:
    condicoes_pagamento: Optional[str] = None
    prazo_execucao: Optional[str] = None
    observacoes: Optional[str] = None


def reduzir(orcamento: Orcamento, acao: Any, catalogo: Optional[Catalogo] = None) -> Orcamento:
    """Aplica uma ação ao orçamento e devolve o novo valor."""
    if isinstance(acao, AdicionarItem):
        return adicionar_item(orcamento, acao.item)
    if isinstance(acao, RemoverItem):
        return remover_item(orcamento, acao.item_id)
    if isinstance(acao, AtualizarItem):
        return atualizar_item(orcamento, acao.item_id, catalogo, **acao.campos)
    if isinstance(acao, DefinirAjustes):
        return definir_ajustes(orcamento, acao.frete, acao.instalacao, acao.desconto)
    if isinstance(acao, DefinirStatus):
        return definir_status(orcamento, acao.status)
    if isinstance(acao, SelecionarCliente):
        return selecionar_cliente(orcamento, acao.cliente_id, acao.cliente_nome)
    if isinstance(acao, DefinirCondicoes):
        return definir_condicoes(orcamento, acao.condicoes_pagamento, acao.prazo_execucao, acao.observacoes)
    raise TypeError(f"ação desconhecida: {type(acao).__name__}")
