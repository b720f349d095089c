# orcamentos/usecases/relatorios.py
"""
Relatórios de orçamentos:
- resumo do painel (em negociação, fechados, total de orçamentos)
- filtro da lista (nome do cliente ou número)
- tabela de orçamentos (colunas/linhas para DataTable)
- exportação da lista para XLSX
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd

from orcamentos.adapters.parsers import formatar_data, formatar_moeda
from orcamentos.domain.models import Orcamento, StatusOrcamento
from orcamentos.domain.policies import STATUS_EM_NEGOCIACAO
from orcamentos.infra.logger import log_file_operation, log_system_event, system_logger


# ----------------------
# 1) Resumo do painel
# ----------------------

def resumo_painel(orcamentos: Iterable[Orcamento]) -> Dict[str, Any]:
    """Indicadores do painel.

    - ``valor_em_negociacao``/``qtd_em_negociacao``: Enviado, Follow-up e
      Visita Agendada.
    - ``valor_fechado``/``qtd_fechados``: Pedido Fechado.
    - ``por_status``: quantidade e valor por situação.
    """
    orcs = list(orcamentos)
    pendentes = [o for o in orcs if o.status in STATUS_EM_NEGOCIACAO]
    fechados = [o for o in orcs if o.status == StatusOrcamento.FECHADO]

    por_status: Dict[str, Dict[str, Any]] = {}
    for o in orcs:
        st = por_status.setdefault(o.status.value, {"quantidade": 0, "valor_total": 0.0})
        st["quantidade"] += 1
        st["valor_total"] += o.total

    out = {
        "total_orcamentos": len(orcs),
        "valor_em_negociacao": sum(o.total for o in pendentes),
        "qtd_em_negociacao": len(pendentes),
        "valor_fechado": sum(o.total for o in fechados),
        "qtd_fechados": len(fechados),
        "por_status": por_status,
    }
    system_logger.debug(f"REPORT_PAINEL: {len(orcs)} orçamentos resumidos")
    return out


# ----------------------
# 2) Lista filtrada
# ----------------------

def filtrar_orcamentos(
    orcamentos: Iterable[Orcamento],
    termo: str = "",
    status: Optional[StatusOrcamento] = None,
) -> List[Orcamento]:
    """Filtra por nome do cliente ou número (sem diferenciar maiúsculas)."""
    termo = (termo or "").strip().lower()
    out = []
    for o in orcamentos:
        if status is not None and o.status != status:
            continue
        if termo and termo not in o.cliente_nome.lower() and termo not in o.numero.lower():
            continue
        out.append(o)
    return out


COLUNAS_ORCAMENTOS = ["Número", "Cliente", "Data", "Validade", "Status", "Itens", "Total"]


def tabela_orcamentos(orcamentos: Iterable[Orcamento]) -> tuple[list[str], list[list], str | None]:
    """
    Retorna colunas, linhas e mensagem para exibição tabular (DataTable do
    Textual ou tabela do Rich). Valores já formatados para exibição.
    """
    rows = [
        [
            o.numero,
            o.cliente_nome or "-",
            formatar_data(o.criado_em),
            formatar_data(o.valido_ate),
            o.status.value,
            str(len(o.itens)),
            formatar_moeda(o.total),
        ]
        for o in orcamentos
    ]
    msg = None
    if not rows:
        msg = "Nenhum orçamento encontrado."
    return list(COLUNAS_ORCAMENTOS), rows, msg


# ----------------------
# 3) Exportação XLSX
# ----------------------

def orcamentos_para_dataframe(orcamentos: Iterable[Orcamento]) -> pd.DataFrame:
    """Uma linha por orçamento, valores numéricos sem arredondamento."""
    dados = [
        {
            "numero": o.numero,
            "cliente": o.cliente_nome,
            "criado_em": o.criado_em.date(),
            "valido_ate": o.valido_ate.date(),
            "status": o.status.value,
            "itens": len(o.itens),
            "subtotal": o.subtotal,
            "frete": o.frete,
            "instalacao": o.instalacao,
            "desconto": o.desconto,
            "total": o.total,
            "responsavel": o.responsavel_nome,
        }
        for o in orcamentos
    ]
    colunas = [
        "numero", "cliente", "criado_em", "valido_ate", "status", "itens",
        "subtotal", "frete", "instalacao", "desconto", "total", "responsavel",
    ]
    return pd.DataFrame(dados, columns=colunas)


def exportar_orcamentos_xlsx(orcamentos: Iterable[Orcamento], path: str) -> Path:
    """Grava a lista de orçamentos em uma planilha XLSX (aba ``Orcamentos``)."""
    log_system_event("exportar_orcamentos_start", {"file_path": path})
    try:
        df = orcamentos_para_dataframe(orcamentos)
        destino = Path(path)
        destino.parent.mkdir(parents=True, exist_ok=True)
        df.to_excel(destino, sheet_name="Orcamentos", index=False)
        log_file_operation("export", str(destino), rows_processed=len(df))
        return destino
    except Exception as e:
        log_system_event("exportar_orcamentos_error", {"file_path": path, "error": str(e)}, level="error")
        raise
