# orcamentos/adapters/planilhas.py
"""
Loaders para planilhas (XLSX) de CLIENTES e SERVIÇOS.

Essas funções:
- leem planilhas XLSX usando pandas;
- normalizam cabeçalhos (acentos, variações, sinônimos);
- retornam listas de dicionários com as chaves esperadas pelos cadastros.

Observações:
- Não convertem preços: o campo é preservado como texto em ``preco_base``
  e interpretado no domínio (vírgula decimal, ``R$``).
- Linhas sem nome são descartadas.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional

import pandas as pd


# ---------------------------
# utilitários de normalização
# ---------------------------

def _slug(s: str) -> str:
    """Normaliza cabeçalhos: minúsculas, sem acentos, sem não-alfanumérico."""
    if s is None:
        return ""
    s = str(s).strip().lower()
    acentos = dict(zip("áàâãäéèêëíìîïóòôõöúùûüç", "aaaaaeeeeiiiiooooouuuuc"))
    s = "".join(acentos.get(ch, ch) for ch in s)
    s = re.sub(r"[^a-z0-9]+", " ", s)
    return re.sub(r"\s+", " ", s).strip()


def _safe_get(row, key) -> Optional[str]:
    """Lê o valor da linha tratando NA/vazio como None."""
    val = row.get(key)
    if val is None or pd.isna(val):
        return None
    val = str(val).strip()
    return val or None


_ALIASES = {
    # comuns
    "id": "id",
    "codigo": "id",
    "cod": "id",
    "nome": "nome",
    "razao social": "nome",
    "cliente": "nome",
    "servico": "nome",
    "produto": "nome",
    "observacoes": "observacoes",
    "obs": "observacoes",

    # clientes
    "documento": "documento",
    "cpf": "documento",
    "cnpj": "documento",
    "cpf cnpj": "documento",
    "telefone": "telefone",
    "tel": "telefone",
    "celular": "telefone",
    "whatsapp": "telefone",
    "email": "email",
    "e mail": "email",
    "rua": "rua",
    "endereco": "rua",
    "logradouro": "rua",
    "numero": "numero",
    "n": "numero",
    "bairro": "bairro",
    "cidade": "cidade",
    "municipio": "cidade",
    "estado": "estado",
    "uf": "estado",
    "cep": "cep",

    # serviços
    "descricao": "descricao",
    "tipo": "tipo_calculo",
    "tipo calculo": "tipo_calculo",
    "tipo de calculo": "tipo_calculo",
    "unidade": "tipo_calculo",
    "preco": "preco_base",
    "preco base": "preco_base",
    "valor": "preco_base",
    "valor unitario": "preco_base",
    "categoria": "categoria",
}

# variações aceitas para o tipo de cálculo
_TIPOS = {
    "m2": "M2",
    "m": "M2",
    "area": "M2",
    "metro quadrado": "M2",
    "linear": "LINEAR",
    "ml": "LINEAR",
    "metro linear": "LINEAR",
    "unit": "UNIT",
    "un": "UNIT",
    "unid": "UNIT",
    "unidade": "UNIT",
}


def _normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Renomeia colunas com base em sinônimos/variações."""
    new_cols = {}
    for col in df.columns:
        key = _slug(col)
        new_cols[col] = _ALIASES.get(key, key)
    return df.rename(columns=new_cols)


def _tipo_calculo(val: Optional[str]) -> Optional[str]:
    if val is None:
        return None
    return _TIPOS.get(_slug(val), val.strip().upper())


def _ler(path: str) -> pd.DataFrame:
    df = pd.read_excel(path, dtype="string")
    return _normalize_columns(df)


# ---------------------------
# loaders públicos (XLSX)
# ---------------------------

def load_clientes_from_xlsx(path: str) -> List[Dict[str, Any]]:
    """Lê XLSX de CLIENTES.

    Chaves de saída: id, nome, documento, telefone, email, observacoes e
    endereco (dict com rua, numero, bairro, cidade, estado, cep).
    """
    out: List[Dict[str, Any]] = []
    for _, row in _ler(path).iterrows():
        nome = _safe_get(row, "nome")
        if not nome:
            continue
        out.append({
            "id": _safe_get(row, "id"),
            "nome": nome,
            "documento": _safe_get(row, "documento") or "",
            "telefone": _safe_get(row, "telefone") or "",
            "email": _safe_get(row, "email") or "",
            "observacoes": _safe_get(row, "observacoes"),
            "endereco": {
                k: _safe_get(row, k) or ""
                for k in ("rua", "numero", "bairro", "cidade", "estado", "cep")
            },
        })
    return out


def load_servicos_from_xlsx(path: str) -> List[Dict[str, Any]]:
    """Lê XLSX de SERVIÇOS (catálogo).

    Chaves de saída: id, nome, descricao, tipo_calculo (M2/LINEAR/UNIT),
    preco_base (texto, sem conversão) e categoria.
    """
    out: List[Dict[str, Any]] = []
    for _, row in _ler(path).iterrows():
        nome = _safe_get(row, "nome")
        if not nome:
            continue
        out.append({
            "id": _safe_get(row, "id"),
            "nome": nome,
            "descricao": _safe_get(row, "descricao") or "",
            "tipo_calculo": _tipo_calculo(_safe_get(row, "tipo_calculo")),
            "preco_base": _safe_get(row, "preco_base"),
            "categoria": _safe_get(row, "categoria") or "",
        })
    return out
