from datetime import datetime

import pytest

from orcamentos.domain.models import PapelUsuario, Usuario
from orcamentos.domain.policies import (
    OrcamentoInvalido,
    PermissaoNegada,
    exigir_admin,
    gerar_numero_orcamento,
    pode_gerenciar_usuarios,
    validade_padrao,
    validar_para_salvar,
)
from conftest import make_orcamento


def test_primeiro_numero_do_ano():
    assert gerar_numero_orcamento([], ano=2025) == "MA-2025-0001"


def test_numero_conta_apenas_ano_e_prefixo():
    existentes = ["MA-2025-0001", "MA-2025-0002", "MA-2024-0009", "XX-2025-0001", ""]
    assert gerar_numero_orcamento(existentes, ano=2025) == "MA-2025-0003"
    assert gerar_numero_orcamento(existentes, ano=2024) == "MA-2024-0002"
    assert gerar_numero_orcamento(existentes, ano=2025, prefixo="XX") == "XX-2025-0002"


def test_numero_repetido_sem_concorrencia_controlada():
    # duas criações a partir da mesma lista recebem o mesmo número
    existentes = ["MA-2025-0001"]
    assert gerar_numero_orcamento(existentes, ano=2025) == gerar_numero_orcamento(existentes, ano=2025)


def test_validade_padrao_vinte_dias():
    criado = datetime(2025, 1, 25, 14, 0)
    assert validade_padrao(criado) == datetime(2025, 2, 14, 14, 0)
    assert validade_padrao(criado, 5) == datetime(2025, 1, 30, 14, 0)


def test_validar_exige_cliente():
    with pytest.raises(OrcamentoInvalido, match="Selecione um cliente"):
        validar_para_salvar(make_orcamento(cliente_id=None))


def test_validar_exige_itens():
    with pytest.raises(OrcamentoInvalido, match="Adicione pelo menos um item"):
        validar_para_salvar(make_orcamento(itens=()))


def test_validar_aceita_total_negativo():
    validar_para_salvar(make_orcamento(desconto=1_000_000))


@pytest.mark.parametrize(
    "usuario,esperado",
    [
        (Usuario("1", "Admin", "a@x", PapelUsuario.ADMIN), True),
        (Usuario("1", "Admin", "a@x", PapelUsuario.ADMIN, ativo=False), False),
        (Usuario("2", "Vend", "v@x", PapelUsuario.VENDEDOR), False),
        (None, False),
    ],
)
def test_pode_gerenciar_usuarios(usuario, esperado):
    assert pode_gerenciar_usuarios(usuario) is esperado


def test_exigir_admin():
    exigir_admin(Usuario("1", "Admin", "a@x", "Administrador"))
    with pytest.raises(PermissaoNegada):
        exigir_admin(Usuario("2", "Vend", "v@x", "Vendedor"))
    with pytest.raises(PermissionError):
        exigir_admin(None)


def test_decimo_orcamento_do_ano():
    existentes = [f"MA-2025-{n:04d}" for n in range(1, 10)]
    assert gerar_numero_orcamento(existentes, ano=2025) == "MA-2025-0010"


def test_ano_corrente_por_padrao():
    assert gerar_numero_orcamento([]) == f"MA-{datetime.now().year}-0001"
