# orcamentos/infra/mapeamento.py
"""
Conversão entre objetos do domínio e registros persistidos.

- Estilo ``snake``: colunas do banco relacional (``cliente_nome``).
- Estilo ``camel``: arquivos JSON locais (``clienteNome``), no mesmo
  formato do armazenamento do navegador.

A leitura aceita os dois estilos. Totais gravados (``total``,
``subtotal``) são descartados na leitura: o domínio recalcula tudo a
partir dos itens e ajustes.
"""

from __future__ import annotations

import re
from dataclasses import asdict
from datetime import datetime
from typing import Any, Callable, Dict

from orcamentos.domain.models import (
    Cliente,
    Endereco,
    ItemOrcamento,
    Orcamento,
    Servico,
    Usuario,
)

_CAMEL_RE = re.compile(r"_([a-z0-9])")
_SNAKE_RE = re.compile(r"(?<=[a-z0-9])([A-Z])")

# campos derivados: gravados para consulta, ignorados na leitura
_DERIVADOS = {"total", "subtotal"}


def camel(nome: str) -> str:
    return _CAMEL_RE.sub(lambda m: m.group(1).upper(), nome)


def snake(nome: str) -> str:
    return _SNAKE_RE.sub(lambda m: "_" + m.group(1).lower(), nome)


def _converter_chaves(obj: Any, fn: Callable[[str], str]) -> Any:
    if isinstance(obj, dict):
        return {fn(k): _converter_chaves(v, fn) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_converter_chaves(v, fn) for v in obj]
    return obj


def _estilizar(d: Dict[str, Any], estilo: str) -> Dict[str, Any]:
    if estilo == "snake":
        return d
    if estilo == "camel":
        return _converter_chaves(d, camel)
    raise ValueError(f"estilo inválido: {estilo!r}")


def _normalizar(d: Dict[str, Any]) -> Dict[str, Any]:
    return _converter_chaves(dict(d), snake)


def _data(valor: Any) -> datetime:
    if isinstance(valor, datetime):
        return valor
    s = str(valor).strip()
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    return datetime.fromisoformat(s)


def _valor_enum(v: Any) -> Any:
    return getattr(v, "value", v)


# -------------------------
# Cliente
# -------------------------

def cliente_para_registro(cliente: Cliente, estilo: str = "snake") -> Dict[str, Any]:
    return _estilizar(asdict(cliente), estilo)


def cliente_de_registro(registro: Dict[str, Any]) -> Cliente:
    d = _normalizar(registro)
    end = d.get("endereco") or {}
    return Cliente(
        id=str(d["id"]),
        nome=d.get("nome") or "",
        documento=d.get("documento") or "",
        telefone=d.get("telefone") or "",
        email=d.get("email") or "",
        endereco=Endereco(**{k: str(v or "") for k, v in end.items() if k in Endereco.__dataclass_fields__}),
        observacoes=d.get("observacoes"),
    )


# -------------------------
# Serviço
# -------------------------

def servico_para_registro(servico: Servico, estilo: str = "snake") -> Dict[str, Any]:
    d = asdict(servico)
    d["tipo_calculo"] = _valor_enum(servico.tipo_calculo)
    return _estilizar(d, estilo)


def servico_de_registro(registro: Dict[str, Any]) -> Servico:
    d = _normalizar(registro)
    return Servico(
        id=str(d["id"]),
        nome=d.get("nome") or "",
        descricao=d.get("descricao") or "",
        tipo_calculo=d.get("tipo_calculo"),
        preco_base=d.get("preco_base"),
        categoria=d.get("categoria") or "",
    )


# -------------------------
# Usuário
# -------------------------

def usuario_para_registro(usuario: Usuario, estilo: str = "snake", com_senha: bool = True) -> Dict[str, Any]:
    d = asdict(usuario)
    d["papel"] = _valor_enum(usuario.papel)
    if not com_senha:
        d.pop("senha_hash", None)
    return _estilizar(d, estilo)


def usuario_de_registro(registro: Dict[str, Any]) -> Usuario:
    d = _normalizar(registro)
    return Usuario(
        id=str(d["id"]),
        nome=d.get("nome") or "",
        email=d.get("email") or "",
        papel=d.get("papel"),
        ativo=bool(d.get("ativo", True)),
        senha_hash=d.get("senha_hash"),
    )


# -------------------------
# Orçamento
# -------------------------

def item_para_registro(item: ItemOrcamento, estilo: str = "snake") -> Dict[str, Any]:
    d = asdict(item)
    d["tipo_calculo"] = _valor_enum(item.tipo_calculo)
    return _estilizar(d, estilo)


def item_de_registro(registro: Dict[str, Any]) -> ItemOrcamento:
    d = {k: v for k, v in _normalizar(registro).items() if k not in _DERIVADOS}
    campos = ItemOrcamento.__dataclass_fields__
    return ItemOrcamento(**{k: v for k, v in d.items() if k in campos and campos[k].init})


def orcamento_para_registro(orcamento: Orcamento, estilo: str = "snake") -> Dict[str, Any]:
    d = {
        "id": orcamento.id,
        "numero": orcamento.numero,
        "cliente_id": orcamento.cliente_id,
        "cliente_nome": orcamento.cliente_nome,
        "criado_em": orcamento.criado_em.isoformat(),
        "valido_ate": orcamento.valido_ate.isoformat(),
        "status": _valor_enum(orcamento.status),
        "itens": [item_para_registro(it) for it in orcamento.itens],
        "subtotal": orcamento.subtotal,
        "frete": orcamento.frete,
        "instalacao": orcamento.instalacao,
        "desconto": orcamento.desconto,
        "total": orcamento.total,
        "condicoes_pagamento": orcamento.condicoes_pagamento,
        "prazo_execucao": orcamento.prazo_execucao,
        "observacoes": orcamento.observacoes,
        "responsavel_id": orcamento.responsavel_id,
        "responsavel_nome": orcamento.responsavel_nome,
    }
    return _estilizar(d, estilo)


def orcamento_de_registro(registro: Dict[str, Any]) -> Orcamento:
    d = _normalizar(registro)
    return Orcamento(
        id=str(d["id"]),
        numero=d.get("numero") or "",
        criado_em=_data(d["criado_em"]),
        valido_ate=_data(d["valido_ate"]),
        cliente_id=d.get("cliente_id"),
        cliente_nome=d.get("cliente_nome") or "",
        status=d.get("status"),
        itens=tuple(item_de_registro(it) for it in (d.get("itens") or [])),
        frete=d.get("frete"),
        instalacao=d.get("instalacao"),
        desconto=d.get("desconto"),
        condicoes_pagamento=d.get("condicoes_pagamento") or "",
        prazo_execucao=d.get("prazo_execucao") or "",
        observacoes=d.get("observacoes"),
        responsavel_id=d.get("responsavel_id"),
        responsavel_nome=d.get("responsavel_nome") or "",
    )
