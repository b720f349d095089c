"""
Utilidades de parsing e formatação para valores digitados e exibidos.

Este módulo interpreta números no formato brasileiro (vírgula decimal,
ponto de milhar) e formata valores monetários em Real (``R$``) e datas
no padrão ``dd/mm/aaaa``. A formatação é usada apenas na exibição
(CLI, TUI e PDF); os valores armazenados nunca são arredondados.
"""

from __future__ import annotations

import math
import re
from datetime import date, datetime
from typing import Any, Optional, Union

from orcamentos.domain.precificacao import coagir_numero

_NUM_RE = re.compile(r"[-+]?\d[\d.,]*")


def parse_numero(txt: Any) -> Optional[float]:
    """Interpreta um número digitado, possivelmente com unidade ou ``R$``.

    Exemplos:
        "2,5"         → 2.5
        "R$ 1.234,56" → 1234.56
        "3 m"         → 3.0
        "abc"         → None

    Args:
        txt: Texto (ou número) a ser interpretado.

    Returns:
        O número, ou None quando não há número reconhecível.
    """
    if txt is None:
        return None
    if isinstance(txt, (int, float)) and not isinstance(txt, bool):
        return float(txt)
    s = str(txt).strip()
    if not s:
        return None
    m = _NUM_RE.search(s.replace(" ", ""))
    if not m:
        return None
    num = coagir_numero(m.group(0), math.nan)
    return None if math.isnan(num) else num


def _agrupa_milhar(valor: float) -> str:
    # 1234.5 -> "1.234,50"
    return f"{valor:,.2f}".replace(",", "X").replace(".", ",").replace("X", ".")


def formatar_moeda(valor: Union[int, float, None]) -> str:
    """Formata valor em Real: ``R$ 1.234,56`` (negativos como ``-R$ 20,00``)."""
    if valor is None:
        return ""
    v = float(valor)
    if v < 0 and round(v, 2) != 0:
        return f"-R$ {_agrupa_milhar(-v)}"
    return f"R$ {_agrupa_milhar(abs(v))}"


def formatar_numero(valor: Union[int, float, None], casas: int = 2) -> str:
    """Formata número com vírgula decimal, sem zeros supérfluos (``2,5``)."""
    if valor is None:
        return ""
    s = f"{float(valor):.{casas}f}".rstrip("0").rstrip(".")
    return s.replace(".", ",") if s not in ("", "-0") else "0"


def formatar_editavel(valor: Union[int, float, None]) -> str:
    """Valor completo para edição: vírgula decimal, sem milhar e sem arredondar.

    Ao ser digitado de volta (Enter no valor padrão) o número não muda.
    """
    if valor is None:
        return ""
    v = float(valor)
    if v.is_integer():
        return str(int(v))
    return repr(v).replace(".", ",")


def formatar_data(valor: Union[date, datetime, str, None]) -> str:
    """Data no padrão brasileiro ``dd/mm/aaaa``."""
    if valor is None or valor == "":
        return ""
    if isinstance(valor, str):
        valor = datetime.fromisoformat(valor)
    return valor.strftime("%d/%m/%Y")
