# orcamentos/infra/json_store.py
"""
Armazenamento local em arquivos JSON (chaves em camelCase).

Espelha o armazenamento do navegador: uma coleção por arquivo
(``ma_users.json``, ``ma_clients.json``, ``ma_services.json``,
``ma_budgets.json``). Coleções inexistentes são criadas com os dados
iniciais na primeira leitura (orçamentos começam vazios).
"""

from __future__ import annotations

import json
import os
from collections import Counter
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from .mapeamento import (
    cliente_de_registro,
    cliente_para_registro,
    orcamento_de_registro,
    orcamento_para_registro,
    servico_de_registro,
    servico_para_registro,
    usuario_de_registro,
    usuario_para_registro,
)
from .seed import clientes_iniciais, servicos_iniciais, usuarios_iniciais
from orcamentos.domain.models import Cliente, Orcamento, Servico, Usuario

ARQ_USUARIOS = "ma_users.json"
ARQ_CLIENTES = "ma_clients.json"
ARQ_SERVICOS = "ma_services.json"
ARQ_ORCAMENTOS = "ma_budgets.json"


class JsonArmazenamento:
    """Armazenamento em JSON com a mesma interface do ``SqliteArmazenamento``."""

    backend = "json"

    def __init__(self, pasta: str, seed: bool = True):
        self.pasta = Path(pasta)
        self.pasta.mkdir(parents=True, exist_ok=True)
        self.seed = seed

    # --------- util interno ---------
    def _get(self, arquivo: str, inicial: Callable[[], List[Dict[str, Any]]]) -> List[Dict[str, Any]]:
        path = self.pasta / arquivo
        if not path.exists():
            dados = inicial() if self.seed else []
            self._set(arquivo, dados)
            return dados
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)

    def _set(self, arquivo: str, dados: List[Dict[str, Any]]) -> None:
        path = self.pasta / arquivo
        tmp = path.with_suffix(".tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(dados, f, ensure_ascii=False, indent=2)
        os.replace(tmp, path)

    @staticmethod
    def _upsert(dados: List[Dict[str, Any]], registro: Dict[str, Any], no_inicio: bool = False) -> List[Dict[str, Any]]:
        for i, r in enumerate(dados):
            if str(r.get("id")) == str(registro["id"]):
                dados[i] = registro
                return dados
        if no_inicio:
            return [registro] + dados
        dados.append(registro)
        return dados

    # clientes
    def _clientes(self) -> List[Dict[str, Any]]:
        return self._get(ARQ_CLIENTES, lambda: [cliente_para_registro(c, "camel") for c in clientes_iniciais()])

    def listar_clientes(self) -> List[Cliente]:
        return [cliente_de_registro(r) for r in self._clientes()]

    def salvar_cliente(self, cliente: Cliente) -> Cliente:
        self._set(ARQ_CLIENTES, self._upsert(self._clientes(), cliente_para_registro(cliente, "camel"), no_inicio=True))
        return cliente

    def excluir_cliente(self, cliente_id: str) -> bool:
        dados = self._clientes()
        restantes = [r for r in dados if str(r.get("id")) != str(cliente_id)]
        self._set(ARQ_CLIENTES, restantes)
        return len(restantes) != len(dados)

    # serviços
    def _servicos(self) -> List[Dict[str, Any]]:
        return self._get(ARQ_SERVICOS, lambda: [servico_para_registro(s, "camel") for s in servicos_iniciais()])

    def listar_servicos(self) -> List[Servico]:
        return sorted((servico_de_registro(r) for r in self._servicos()), key=lambda s: s.nome)

    def obter_servico(self, servico_id: str) -> Optional[Servico]:
        for r in self._servicos():
            if str(r.get("id")) == str(servico_id):
                return servico_de_registro(r)
        return None

    def salvar_servico(self, servico: Servico) -> Servico:
        self._set(ARQ_SERVICOS, self._upsert(self._servicos(), servico_para_registro(servico, "camel")))
        return servico

    def excluir_servico(self, servico_id: str) -> bool:
        dados = self._servicos()
        restantes = [r for r in dados if str(r.get("id")) != str(servico_id)]
        self._set(ARQ_SERVICOS, restantes)
        return len(restantes) != len(dados)

    # orçamentos
    def _orcamentos(self) -> List[Dict[str, Any]]:
        return self._get(ARQ_ORCAMENTOS, list)

    def listar_orcamentos(self) -> List[Orcamento]:
        orcs = [orcamento_de_registro(r) for r in self._orcamentos()]
        return sorted(orcs, key=lambda o: o.criado_em, reverse=True)

    def obter_orcamento(self, orcamento_id: str) -> Optional[Orcamento]:
        for r in self._orcamentos():
            if str(r.get("id")) == str(orcamento_id) or r.get("numero") == orcamento_id:
                return orcamento_de_registro(r)
        return None

    def salvar_orcamento(self, orcamento: Orcamento) -> Orcamento:
        self._set(ARQ_ORCAMENTOS, self._upsert(self._orcamentos(), orcamento_para_registro(orcamento, "camel")))
        return orcamento

    def numeros_do_ano(self, ano: int, prefixo: str = "MA") -> List[str]:
        marca = f"{prefixo}-{ano:04d}-"
        return [r.get("numero") for r in self._orcamentos() if str(r.get("numero", "")).startswith(marca)]

    def resumo_por_status(self) -> List[Dict[str, Any]]:
        qtd: Counter = Counter()
        valor: Dict[str, float] = {}
        for o in self.listar_orcamentos():
            st = o.status.value
            qtd[st] += 1
            valor[st] = valor.get(st, 0.0) + o.total
        return [{"status": st, "quantidade": qtd[st], "valor_total": valor[st]} for st in sorted(qtd)]

    # usuários
    def _usuarios(self) -> List[Dict[str, Any]]:
        return self._get(ARQ_USUARIOS, lambda: [usuario_para_registro(u, "camel") for u in usuarios_iniciais()])

    def listar_usuarios(self) -> List[Usuario]:
        return sorted((usuario_de_registro(r) for r in self._usuarios()), key=lambda u: u.nome)

    def salvar_usuario(self, usuario: Usuario) -> Usuario:
        self._set(ARQ_USUARIOS, self._upsert(self._usuarios(), usuario_para_registro(usuario, "camel")))
        return usuario

    def excluir_usuario(self, usuario_id: str) -> bool:
        dados = self._usuarios()
        restantes = [r for r in dados if str(r.get("id")) != str(usuario_id)]
        self._set(ARQ_USUARIOS, restantes)
        return len(restantes) != len(dados)
