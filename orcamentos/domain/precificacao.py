"""
Fórmulas de precificação dos itens de orçamento.

Estas funções implementam o cálculo de cada linha do orçamento
(medida × quantidade × preço unitário × fator de dificuldade) e a
consolidação do orçamento (subtotal, frete, instalação e desconto).

Todas as funções são puras: dependem apenas das entradas e não
alteram estado externo. Nenhum arredondamento é feito aqui; a
formatação monetária acontece apenas na exibição.
"""

from __future__ import annotations

import math
import re
from typing import Any, Iterable, Union

Numero = Union[int, float]

_MILHAR_RE = re.compile(r"^[-+]?\d{1,3}(\.\d{3})+(,\d+)?$")


def coagir_numero(valor: Any, padrao: float) -> float:
    """Converte um valor digitado em número, ou devolve ``padrao``.

    Entradas malformadas nunca geram erro: ``None``, texto vazio,
    texto não numérico, NaN e infinitos viram ``padrao``. Aceita
    vírgula decimal (``"2,5"``) e separador de milhar brasileiro
    (``"1.234,56"``).

    Parameters
    ----------
    valor: Any
        Valor bruto (número ou texto).
    padrao: float
        Valor neutro usado quando ``valor`` não é um número válido.

    Returns
    -------
    float
        O número interpretado ou ``padrao``.
    """
    if valor is None or isinstance(valor, bool):
        return float(padrao)
    if isinstance(valor, (int, float)):
        num = float(valor)
    else:
        s = str(valor).strip().replace(" ", "")
        if not s:
            return float(padrao)
        if _MILHAR_RE.match(s):
            s = s.replace(".", "").replace(",", ".")
        elif "," in s and "." not in s:
            s = s.replace(",", ".")
        try:
            num = float(s)
        except ValueError:
            return float(padrao)
    if math.isnan(num) or math.isinf(num):
        return float(padrao)
    return num


def coagir_fator(valor: Any) -> float:
    """Fator de dificuldade: zero, vazio ou inválido valem o fator neutro 1."""
    return coagir_numero(valor, 1.0) or 1.0


def medida(tipo: Any, largura: Numero, altura: Numero) -> float:
    """Retorna a medida de cobrança de um item conforme o tipo de cálculo.

    - ``M2``: largura × altura
    - ``LINEAR``: largura (altura ignorada)
    - ``UNIT``: 1 (dimensões ignoradas)

    Não valida sinal nem finitude; o chamador fornece números já coagidos.
    """
    tipo_valor = getattr(tipo, "value", tipo)
    if tipo_valor == "M2":
        return float(largura) * float(altura)
    if tipo_valor == "LINEAR":
        return float(largura)
    if tipo_valor == "UNIT":
        return 1.0
    raise ValueError(f"tipo de cálculo desconhecido: {tipo!r}")


def calcular_total_item(
    tipo: Any,
    largura: Numero,
    altura: Numero,
    quantidade: Numero,
    preco_unitario: Numero,
    fator_dificuldade: Numero,
) -> float:
    """Total de uma linha: medida × quantidade × preço unitário × fator."""
    return (
        medida(tipo, largura, altura)
        * float(quantidade)
        * float(preco_unitario)
        * float(fator_dificuldade)
    )


def calcular_subtotal(totais_itens: Iterable[Numero]) -> float:
    """Soma dos totais das linhas (0.0 para orçamento sem itens)."""
    return float(sum(float(t) for t in totais_itens))


def calcular_total(subtotal: Numero, frete: Numero, instalacao: Numero, desconto: Numero) -> float:
    """Total geral: subtotal + frete + instalação − desconto.

    Pode ser negativo quando o desconto supera os demais componentes;
    isso não é tratado como erro.
    """
    return float(subtotal) + float(frete) + float(instalacao) - float(desconto)
