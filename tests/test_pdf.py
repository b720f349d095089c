"""
Tests for the quote PDF document (fpdf2), checked with pdfplumber.
"""

from datetime import datetime

import pdfplumber

from orcamentos.adapters.pdf import (
    gerar_pdf_orcamento,
    montar_documento,
    nome_arquivo,
    texto_endereco,
    texto_medidas,
)
from orcamentos.domain.models import Cliente, Endereco, ItemOrcamento, TipoCalculo
from conftest import make_orcamento

CLIENTE = Cliente(
    "1", "Construtora Exemplo Ltda", "12.345.678/0001-90", "(11) 99999-8888",
    "contato@construtoraexemplo.com.br",
    Endereco("Av. Industrial", "1000", "Centro", "São Paulo", "SP", "01000-000"),
)
GERADO_EM = datetime(2025, 3, 10, 15, 45)


def _texto(path):
    with pdfplumber.open(path) as pdf:
        return [page.extract_text() or "" for page in pdf.pages]


def test_texto_medidas():
    m2 = ItemOrcamento("a", tipo_calculo=TipoCalculo.M2, largura=3, altura=2.5)
    assert texto_medidas(m2) == "3m x 2,5m (7,50m²)"
    linear = ItemOrcamento("b", tipo_calculo=TipoCalculo.LINEAR, largura=4.2, altura=9)
    assert texto_medidas(linear) == "4,2m (Linear)"
    assert texto_medidas(ItemOrcamento("c", tipo_calculo=TipoCalculo.UNIDADE)) == "Unid."


def test_texto_endereco():
    assert texto_endereco(CLIENTE) == "Av. Industrial, 1000 - Centro - São Paulo/SP"
    assert texto_endereco(Cliente("2", "Sem endereço")) == "N/A"


def test_nome_arquivo(orcamento):
    assert nome_arquivo(orcamento) == "Orcamento_MA-2025-0001.pdf"


def test_pdf_conteudo_principal(tmp_path, orcamento):
    destino = gerar_pdf_orcamento(orcamento, CLIENTE, tmp_path / "orc.pdf", gerado_em=GERADO_EM)
    assert destino.exists()
    paginas = _texto(destino)
    assert len(paginas) == 1
    texto = paginas[0]
    assert "METAL APEX" in texto
    assert "MA-2025-0001" in texto
    assert "DADOS DO CLIENTE" in texto
    assert "Construtora Exemplo Ltda" in texto
    assert "Portão Basculante" in texto
    assert "TOTAL:" in texto
    assert "R$ 3.300,00" in texto
    assert "10/03/2025" in texto
    assert "Gerado em: 10/03/2025 15:45" in texto
    assert "50% de entrada + 50% na entrega" in texto


def test_pdf_ajustes_so_quando_positivos(tmp_path):
    sem = gerar_pdf_orcamento(make_orcamento(), CLIENTE, tmp_path / "sem.pdf", gerado_em=GERADO_EM)
    assert "Frete:" not in _texto(sem)[0]
    assert "Desconto:" not in _texto(sem)[0]

    com = gerar_pdf_orcamento(
        make_orcamento(frete=150, desconto=300), CLIENTE, tmp_path / "com.pdf", gerado_em=GERADO_EM,
    )
    texto = _texto(com)[0]
    assert "Frete:" in texto
    assert "Desconto:" in texto
    assert "- R$ 300,00" in texto
    assert "Instalação:" not in texto
    assert "R$ 3.150,00" in texto


def test_pdf_muitos_itens_quebra_pagina(tmp_path):
    itens = tuple(
        ItemOrcamento(f"i{n}", nome=f"Grade {n}", descricao="Ferro chato e redondo maciço",
                      tipo_calculo=TipoCalculo.M2, largura=1, altura=1, quantidade=1, preco_unitario=100)
        for n in range(60)
    )
    orc = make_orcamento(itens=itens, observacoes="Pintura eletrostática inclusa")
    paginas = _texto(gerar_pdf_orcamento(orc, CLIENTE, tmp_path / "longo.pdf", gerado_em=GERADO_EM))
    assert len(paginas) >= 2
    assert "Página 2" in paginas[1]
    # o cabeçalho da tabela é repetido na página seguinte
    assert "Vl. Unit" in paginas[1]
    assert "Grade 59" in "".join(paginas)
    assert "R$ 6.000,00" in "".join(paginas)


def test_montar_documento_em_memoria(orcamento):
    doc = montar_documento(orcamento, CLIENTE, GERADO_EM)
    assert doc.page_no() == 1
    assert bytes(doc.output())[:4] == b"%PDF"


def test_pdf_total_negativo(tmp_path):
    orc = make_orcamento(desconto=5000)
    texto = _texto(gerar_pdf_orcamento(orc, CLIENTE, tmp_path / "neg.pdf", gerado_em=GERADO_EM))[0]
    assert "-R$ 1.700,00" in texto
