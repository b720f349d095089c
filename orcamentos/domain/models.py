# orcamentos/domain/models.py
"""
Modelos (dataclasses) do domínio.

Observações importantes:
- As dataclasses são imutáveis (frozen). Toda edição gera um novo valor
  via ``dataclasses.replace``.
- Campos derivados (``ItemOrcamento.total``, ``Orcamento.subtotal`` e
  ``Orcamento.total``) não entram no construtor: são recalculados em
  ``__post_init__``, então nunca ficam defasados em relação às entradas.
- Nomes de cliente, serviço e responsável copiados para o orçamento são
  snapshots tirados no momento da seleção, não referências vivas.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple

from orcamentos.domain.precificacao import (
    coagir_fator,
    coagir_numero,
    calcular_total_item,
    calcular_subtotal,
    calcular_total,
)


class TipoCalculo(str, Enum):
    """Base de cobrança de um item."""
    M2 = "M2"            # área: largura × altura
    LINEAR = "LINEAR"    # comprimento: largura
    UNIDADE = "UNIT"     # por unidade


class StatusOrcamento(str, Enum):
    """Situação comercial do orçamento (escolha livre, sem transições)."""
    RASCUNHO = "Rascunho"
    ENVIADO = "Enviado"
    FOLLOW_UP = "Follow-up"
    VISITA = "Visita Agendada"
    FECHADO = "Pedido Fechado"
    PERDIDO = "Pedido Perdido"


class PapelUsuario(str, Enum):
    ADMIN = "Administrador"
    VENDEDOR = "Vendedor"


def _enum(cls, valor, padrao):
    """Aceita o membro, o valor (``"Enviado"``, ``"unit"``) ou o nome (``"ENVIADO"``)."""
    if isinstance(valor, cls):
        return valor
    if valor is None or valor == "":
        return padrao
    texto = str(valor).strip()
    for membro in cls:
        if texto.lower() in (membro.value.lower(), membro.name.lower()):
            return membro
    raise ValueError(f"valor inválido para {cls.__name__}: {valor!r}")


@dataclass(frozen=True)
class Endereco:
    rua: str = ""
    numero: str = ""
    bairro: str = ""
    cidade: str = ""
    estado: str = ""
    cep: str = ""


@dataclass(frozen=True)
class Cliente:
    """Cadastro de cliente."""
    id: str
    nome: str
    documento: str = ""          # CPF/CNPJ
    telefone: str = ""
    email: str = ""
    endereco: Endereco = field(default_factory=Endereco)
    observacoes: Optional[str] = None


@dataclass(frozen=True)
class Servico:
    """Entrada do catálogo de serviços/produtos."""
    id: str
    nome: str
    descricao: str = ""
    tipo_calculo: TipoCalculo = TipoCalculo.M2
    preco_base: float = 0.0
    categoria: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "tipo_calculo", _enum(TipoCalculo, self.tipo_calculo, TipoCalculo.M2))
        object.__setattr__(self, "preco_base", coagir_numero(self.preco_base, 0.0))


@dataclass(frozen=True)
class Usuario:
    id: str
    nome: str
    email: str
    papel: PapelUsuario = PapelUsuario.VENDEDOR
    ativo: bool = True
    senha_hash: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "papel", _enum(PapelUsuario, self.papel, PapelUsuario.VENDEDOR))


@dataclass(frozen=True)
class ItemOrcamento:
    """Uma linha precificada do orçamento.

    Valores numéricos vindos de digitação são coagidos na construção:
    quantidade, preço e dimensões viram 0 quando inválidos; o fator de
    dificuldade inválido ou zero vira 1 (dificuldade normal).
    """
    id: str
    servico_id: Optional[str] = None
    nome: str = ""
    descricao: str = ""
    tipo_calculo: TipoCalculo = TipoCalculo.M2
    largura: float = 0.0         # metros
    altura: float = 0.0          # metros (só vale para M2)
    quantidade: float = 1.0
    preco_unitario: float = 0.0
    fator_dificuldade: float = 1.0
    observacoes: Optional[str] = None
    total: float = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "tipo_calculo", _enum(TipoCalculo, self.tipo_calculo, TipoCalculo.M2))
        object.__setattr__(self, "largura", coagir_numero(self.largura, 0.0))
        object.__setattr__(self, "altura", coagir_numero(self.altura, 0.0))
        object.__setattr__(self, "quantidade", coagir_numero(self.quantidade, 0.0))
        object.__setattr__(self, "preco_unitario", coagir_numero(self.preco_unitario, 0.0))
        object.__setattr__(self, "fator_dificuldade", coagir_fator(self.fator_dificuldade))
        object.__setattr__(
            self,
            "total",
            calcular_total_item(
                self.tipo_calculo,
                self.largura,
                self.altura,
                self.quantidade,
                self.preco_unitario,
                self.fator_dificuldade,
            ),
        )


@dataclass(frozen=True)
class Orcamento:
    """Agregado do orçamento (documento em edição ou finalizado)."""
    id: str
    numero: str
    criado_em: datetime
    valido_ate: datetime
    cliente_id: Optional[str] = None
    cliente_nome: str = ""
    status: StatusOrcamento = StatusOrcamento.RASCUNHO
    itens: Tuple[ItemOrcamento, ...] = ()
    frete: float = 0.0
    instalacao: float = 0.0
    desconto: float = 0.0
    condicoes_pagamento: str = ""
    prazo_execucao: str = ""
    observacoes: Optional[str] = None
    responsavel_id: Optional[str] = None
    responsavel_nome: str = ""
    subtotal: float = field(init=False)
    total: float = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "status", _enum(StatusOrcamento, self.status, StatusOrcamento.RASCUNHO))
        object.__setattr__(self, "itens", tuple(self.itens))
        object.__setattr__(self, "frete", coagir_numero(self.frete, 0.0))
        object.__setattr__(self, "instalacao", coagir_numero(self.instalacao, 0.0))
        object.__setattr__(self, "desconto", coagir_numero(self.desconto, 0.0))
        subtotal = calcular_subtotal(item.total for item in self.itens)
        object.__setattr__(self, "subtotal", subtotal)
        object.__setattr__(self, "total", calcular_total(subtotal, self.frete, self.instalacao, self.desconto))

    def item(self, item_id: str) -> Optional[ItemOrcamento]:
        for it in self.itens:
            if it.id == item_id:
                return it
        return None
