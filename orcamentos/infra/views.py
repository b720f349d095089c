# orcamentos/infra/views.py
"""
Criação de views auxiliares para consultas frequentes.

Views criadas:
- vw_orcamentos_por_status: quantidade e soma dos totais por status.

Obs.:
- As views assumem que as migrações V1→V2 já foram aplicadas.
- Um conjunto de índices úteis também é criado, caso não existam.
"""

from __future__ import annotations

from .db import connect


def create_views(db_path: str) -> None:
    with connect(db_path) as c:
        c.executescript(
            """
            DROP VIEW IF EXISTS vw_orcamentos_por_status;
            CREATE VIEW vw_orcamentos_por_status AS
            SELECT
                status,
                COUNT(*)                   AS quantidade,
                COALESCE(SUM(total), 0.0)  AS valor_total
            FROM orcamento
            GROUP BY status;
            """
        )

        c.executescript(
            """
            CREATE INDEX IF NOT EXISTS idx_orcamento_numero  ON orcamento(numero);
            CREATE INDEX IF NOT EXISTS idx_orcamento_cliente ON orcamento(cliente_id);
            CREATE INDEX IF NOT EXISTS idx_orcamento_status  ON orcamento(status);
            CREATE INDEX IF NOT EXISTS idx_servico_nome      ON servico(nome);
            CREATE INDEX IF NOT EXISTS idx_cliente_nome      ON cliente(nome);
            """
        )
