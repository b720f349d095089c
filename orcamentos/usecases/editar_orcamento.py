"""
UC: Criar, editar, salvar e exportar orçamentos.

Fluxo do editor:
1) ``novo_orcamento`` cria um RASCUNHO sem itens, com número sequencial,
   validade padrão e o responsável da sessão.
2) Edições são aplicadas com ``aplicar_edicao`` (ações do domínio); os
   totais são recalculados a cada ação.
3) ``salvar_orcamento`` valida (cliente e itens obrigatórios) e grava o
   agregado inteiro. Em caso de falha o orçamento em memória não muda.
4) ``exportar_pdf`` gera o documento a partir do orçamento e do cliente.
"""
from __future__ import annotations

import uuid
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from orcamentos.config import DEFAULTS
from orcamentos.domain.editor import reduzir
from orcamentos.domain.models import Orcamento, StatusOrcamento, Usuario
from orcamentos.domain.policies import (
    OrcamentoInvalido,
    gerar_numero_orcamento,
    validade_padrao,
    validar_para_salvar,
)
from orcamentos.infra.errors import FalhaPersistencia, persistencia
from orcamentos.infra.logger import (
    log_database_operation,
    log_file_operation,
    log_orcamento,
    log_system_event,
    log_transaction,
)


class OrcamentoNaoEncontrado(LookupError):
    pass


def novo_orcamento(store, usuario: Optional[Usuario] = None, agora: Optional[datetime] = None) -> Orcamento:
    """Cria um orçamento em RASCUNHO (ainda não gravado)."""
    agora = agora or datetime.now()
    with persistencia("consultar numeração"):
        existentes = store.numeros_do_ano(agora.year, DEFAULTS.prefixo_numero)

    orc = Orcamento(
        id=uuid.uuid4().hex,
        numero=gerar_numero_orcamento(existentes, ano=agora.year, prefixo=DEFAULTS.prefixo_numero),
        criado_em=agora,
        valido_ate=validade_padrao(agora, DEFAULTS.validade_dias),
        status=StatusOrcamento.RASCUNHO,
        condicoes_pagamento=DEFAULTS.condicoes_pagamento,
        prazo_execucao=DEFAULTS.prazo_execucao,
        responsavel_id=usuario.id if usuario else None,
        responsavel_nome=usuario.nome if usuario else "",
    )
    log_orcamento("create", orc.numero, orc.total, responsavel=orc.responsavel_nome)
    return orc


def carregar_orcamento(store, referencia: str) -> Orcamento:
    """Busca por id ou número (``MA-AAAA-NNNN``)."""
    with persistencia("carregar orçamento"):
        orc = store.obter_orcamento(referencia)
    if orc is None:
        raise OrcamentoNaoEncontrado(f"Orçamento não encontrado: {referencia}")
    return orc


def aplicar_edicao(store, orcamento: Orcamento, *acoes: Any) -> Orcamento:
    """Aplica ações em sequência usando o catálogo do armazenamento."""
    for acao in acoes:
        orcamento = reduzir(orcamento, acao, catalogo=store.obter_servico)
        log_orcamento("edit", orcamento.numero, orcamento.total, acao=type(acao).__name__)
    return orcamento


def salvar_orcamento(store, orcamento: Orcamento) -> Orcamento:
    """Valida e grava o orçamento inteiro (a última gravação prevalece)."""
    validar_para_salvar(orcamento)
    dados = {"numero": orcamento.numero, "cliente": orcamento.cliente_nome, "itens": len(orcamento.itens)}
    try:
        with persistencia("salvar orçamento"):
            store.salvar_orcamento(orcamento)
    except FalhaPersistencia as e:
        log_transaction("salvar_orcamento", dados, error=str(e))
        log_system_event("salvar_orcamento_error", {"error": str(e)}, level="error")
        raise

    log_database_operation("orcamento", "UPSERT", 1, numero=orcamento.numero)
    log_orcamento("save", orcamento.numero, orcamento.total, status=orcamento.status.value)
    log_transaction("salvar_orcamento", dados, result="success")
    return orcamento


def exportar_pdf(store, orcamento: Orcamento, destino: Optional[str] = None) -> Path:
    """Gera o PDF do orçamento. Exige cliente cadastrado."""
    from orcamentos.adapters.pdf import gerar_pdf_orcamento

    if not orcamento.cliente_id:
        raise OrcamentoInvalido("Selecione um cliente")
    with persistencia("carregar cliente"):
        cliente = next((c for c in store.listar_clientes() if c.id == orcamento.cliente_id), None)
    if cliente is None:
        raise OrcamentoInvalido(f"Cliente não encontrado: {orcamento.cliente_nome or orcamento.cliente_id}")

    destino_path = Path(destino) if destino else Path(f"Orcamento_{orcamento.numero}.pdf")
    try:
        gerar_pdf_orcamento(orcamento, cliente, destino_path)
    except OSError as e:
        log_system_event("pdf_error", {"numero": orcamento.numero, "error": str(e)}, level="error")
        raise FalhaPersistencia("gerar PDF", e) from e

    log_file_operation("pdf", str(destino_path), rows_processed=len(orcamento.itens))
    log_orcamento("pdf", orcamento.numero, orcamento.total, arquivo=str(destino_path))
    return destino_path
