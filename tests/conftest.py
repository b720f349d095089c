from datetime import datetime

import pytest

from orcamentos.domain.models import ItemOrcamento, Orcamento, TipoCalculo
from orcamentos.infra.json_store import JsonArmazenamento
from orcamentos.infra.repositories import SqliteArmazenamento
from orcamentos.infra.seed import popular


@pytest.fixture
def store(tmp_path):
    """SQLite com usuários, catálogo e cliente de demonstração."""
    s = SqliteArmazenamento(str(tmp_path / "orcamentos_test.sqlite"))
    popular(s)
    return s


@pytest.fixture
def json_store(tmp_path):
    return JsonArmazenamento(str(tmp_path / "dados"))


def make_orcamento(**kw) -> Orcamento:
    base = dict(
        id="o1",
        numero="MA-2025-0001",
        criado_em=datetime(2025, 3, 10, 9, 30),
        valido_ate=datetime(2025, 3, 30, 9, 30),
        cliente_id="1",
        cliente_nome="Construtora Exemplo Ltda",
        itens=(
            ItemOrcamento("i1", servico_id="1", nome="Portão Basculante", tipo_calculo=TipoCalculo.M2,
                          largura=3, altura=2, quantidade=1, preco_unitario=450),
            ItemOrcamento("i2", servico_id="4", nome="Motor de Portão", tipo_calculo=TipoCalculo.UNIDADE,
                          quantidade=1, preco_unitario=600),
        ),
        condicoes_pagamento="50% de entrada + 50% na entrega",
        prazo_execucao="15 dias úteis",
    )
    base.update(kw)
    return Orcamento(**base)


@pytest.fixture
def orcamento():
    return make_orcamento()
