# orcamentos/adapters/pdf.py
"""
Geração do documento PDF de um orçamento (fpdf2).

Layout (A4, milímetros):
- faixa escura de 40 mm no topo com a identificação da empresa à esquerda
  e número/emissão/validade à direita;
- bloco "DADOS DO CLIENTE";
- tabela de itens (cabeçalho laranja, linhas alternadas), com quebra de
  página e repetição do cabeçalho da tabela;
- frete, instalação e desconto apenas quando maiores que zero, seguidos
  da caixa laranja do TOTAL;
- caixa "CONDIÇÕES E PRAZOS";
- rodapé em todas as páginas com site, data de geração e página.

O renderizador só lê os campos derivados do orçamento; nada é recalculado
ou arredondado aqui além da formatação de exibição.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from fpdf import FPDF

from orcamentos.adapters.parsers import formatar_data, formatar_moeda, formatar_numero
from orcamentos.config import DEFAULTS
from orcamentos.domain.models import Cliente, ItemOrcamento, Orcamento, TipoCalculo

Cor = Tuple[int, int, int]

ESCURO: Cor = (84, 89, 95)
LARANJA: Cor = (240, 135, 54)
CINZA_CLARO: Cor = (245, 245, 245)
CINZA_LINHA: Cor = (230, 230, 230)
TEXTO: Cor = (60, 60, 60)
VERMELHO: Cor = (220, 50, 50)
BRANCO: Cor = (255, 255, 255)

MARGEM_ESQ = 14.0
MARGEM_DIR = 196.0
LARGURA_UTIL = MARGEM_DIR - MARGEM_ESQ

# (título, largura, alinhamento)
COLUNAS_ITENS: Sequence[Tuple[str, float, str]] = (
    ("Item / Descrição", 80.0, "L"),
    ("Medidas", 40.0, "C"),
    ("Qtd", 14.0, "C"),
    ("Vl. Unit", 24.0, "R"),
    ("Total", 24.0, "R"),
)

ALTURA_LINHA = 4.5
PADDING = 2.5
ALTURA_CABECALHO_TABELA = 8.0


def _latin1(txt) -> str:
    """As fontes padrão do PDF só cobrem latin-1."""
    return str(txt if txt is not None else "").encode("latin-1", "replace").decode("latin-1")


def texto_medidas(item: ItemOrcamento) -> str:
    """Descrição das medidas conforme o tipo de cálculo."""
    if item.tipo_calculo == TipoCalculo.M2:
        area = f"{item.largura * item.altura:.2f}".replace(".", ",")
        return f"{formatar_numero(item.largura)}m x {formatar_numero(item.altura)}m ({area}m²)"
    if item.tipo_calculo == TipoCalculo.LINEAR:
        return f"{formatar_numero(item.largura)}m (Linear)"
    return "Unid."


def texto_endereco(cliente: Cliente) -> str:
    e = cliente.endereco
    rua = ", ".join(p for p in (e.rua, e.numero) if p)
    cidade = "/".join(p for p in (e.cidade, e.estado) if p)
    return " - ".join(p for p in (rua, e.bairro, cidade) if p) or "N/A"


class DocumentoOrcamento(FPDF):
    """FPDF com rodapé padrão e utilitários de texto."""

    def __init__(self, gerado_em: Optional[datetime] = None):
        super().__init__(orientation="P", unit="mm", format="A4")
        self.gerado_em = gerado_em or datetime.now()
        self.set_auto_page_break(False)
        self.set_margins(MARGEM_ESQ, 15, 210 - MARGEM_DIR)

    @property
    def limite_inferior(self) -> float:
        return self.h - 20

    def footer(self) -> None:
        self.set_font("helvetica", "", 8)
        self.set_text_color(150, 150, 150)
        y = self.h - 10
        self.set_draw_color(*CINZA_LINHA)
        self.line(MARGEM_ESQ, y - 4, MARGEM_DIR, y - 4)
        self.texto(MARGEM_ESQ, y, f"Página {self.page_no()}")
        self.texto_centro(self.w / 2, y, DEFAULTS.empresa_site)
        self.texto_direita(MARGEM_DIR, y, f"Gerado em: {self.gerado_em:%d/%m/%Y %H:%M}")

    # --------- texto ---------
    def fonte(self, estilo: str = "", tamanho: float = 10, cor: Cor = TEXTO) -> None:
        self.set_font("helvetica", estilo, tamanho)
        self.set_text_color(*cor)

    def texto(self, x: float, y: float, txt) -> None:
        s = _latin1(txt)
        if s:
            self.text(x, y, s)

    def texto_direita(self, x_dir: float, y: float, txt) -> None:
        s = _latin1(txt)
        self.text(x_dir - self.get_string_width(s), y, s)

    def texto_centro(self, x_centro: float, y: float, txt) -> None:
        s = _latin1(txt)
        self.text(x_centro - self.get_string_width(s) / 2, y, s)

    def quebrar(self, txt, largura: float) -> List[str]:
        """Quebra o texto em linhas que cabem em ``largura`` (fonte atual)."""
        linhas: List[str] = []
        for paragrafo in _latin1(txt).split("\n"):
            atual = ""
            for palavra in paragrafo.split():
                tentativa = f"{atual} {palavra}" if atual else palavra
                if not atual or self.get_string_width(tentativa) <= largura:
                    atual = tentativa
                else:
                    linhas.append(atual)
                    atual = palavra
            linhas.append(atual)
        return linhas


# -------------------------
# Seções
# -------------------------

def _cabecalho(pdf: DocumentoOrcamento, orc: Orcamento) -> None:
    pdf.set_fill_color(*ESCURO)
    pdf.rect(0, 0, 210, 40, style="F")

    pdf.fonte("B", 22, BRANCO)
    pdf.texto(MARGEM_ESQ, 17, DEFAULTS.empresa_nome)
    pdf.fonte("", 8, BRANCO)
    pdf.texto(MARGEM_ESQ, 28, DEFAULTS.empresa_razao)
    pdf.texto(MARGEM_ESQ, 33, DEFAULTS.empresa_contato)

    pdf.fonte("", 10, BRANCO)
    pdf.texto_direita(MARGEM_DIR, 15, "ORÇAMENTO Nº")
    pdf.fonte("B", 16, BRANCO)
    pdf.texto_direita(MARGEM_DIR, 22, orc.numero)
    pdf.fonte("", 9, BRANCO)
    pdf.texto_direita(MARGEM_DIR, 30, f"Emissão: {formatar_data(orc.criado_em)}")
    pdf.texto_direita(MARGEM_DIR, 35, f"Validade: {formatar_data(orc.valido_ate)}")


def _dados_cliente(pdf: DocumentoOrcamento, cliente: Cliente, y: float = 55) -> float:
    """Desenha o bloco do cliente e devolve o y livre abaixo dele."""
    pdf.fonte("B", 11, LARANJA)
    pdf.texto(MARGEM_ESQ, y, "DADOS DO CLIENTE")
    pdf.set_draw_color(200, 200, 200)
    pdf.set_line_width(0.5)
    pdf.line(MARGEM_ESQ, y + 2, MARGEM_DIR, y + 2)
    pdf.set_line_width(0.2)

    col2, largura_col2 = 110.0, MARGEM_DIR - 128.0

    pdf.fonte("", 10)
    pdf.texto(MARGEM_ESQ, y + 8, "Cliente:")
    pdf.texto(MARGEM_ESQ, y + 13, "Doc:")
    pdf.texto(col2, y + 8, "Tel:")
    pdf.texto(col2, y + 13, "Email:")
    pdf.texto(MARGEM_ESQ + 16, y + 13, cliente.documento or "N/A")
    pdf.texto(col2 + 18, y + 8, cliente.telefone or "N/A")

    emails = pdf.quebrar(cliente.email or "N/A", largura_col2)
    for i, linha in enumerate(emails):
        pdf.texto(col2 + 18, y + 13 + i * 4, linha)

    y_end = y + 13 + len(emails) * 4 + 1
    pdf.texto(col2, y_end, "Endereço:")
    enderecos = pdf.quebrar(texto_endereco(cliente), largura_col2)
    for i, linha in enumerate(enderecos):
        pdf.texto(col2 + 18, y_end + i * 5, linha)

    pdf.fonte("B", 10)
    for i, linha in enumerate(pdf.quebrar(cliente.nome, col2 - MARGEM_ESQ - 20)):
        pdf.texto(MARGEM_ESQ + 16, y + 8 + i * 5, linha)

    return y_end + len(enderecos) * 5 + 6


def _cabecalho_tabela(pdf: DocumentoOrcamento, y: float) -> float:
    pdf.set_fill_color(*LARANJA)
    pdf.rect(MARGEM_ESQ, y, LARGURA_UTIL, ALTURA_CABECALHO_TABELA, style="F")
    pdf.fonte("B", 9, BRANCO)
    x = MARGEM_ESQ
    for titulo, largura, _ in COLUNAS_ITENS:
        pdf.texto(x + PADDING, y + 5.5, titulo)
        x += largura
    return y + ALTURA_CABECALHO_TABELA


def _celulas_item(pdf: DocumentoOrcamento, item: ItemOrcamento) -> List[List[Tuple[str, str]]]:
    """Linhas de texto de cada coluna, como pares (estilo, texto)."""
    larguras = [c[1] - 2 * PADDING for c in COLUNAS_ITENS]

    pdf.fonte("B", 9)
    nome = [("B", s) for s in pdf.quebrar(item.nome or "-", larguras[0])]
    pdf.fonte("", 9)
    desc = [("", s) for s in pdf.quebrar(item.descricao, larguras[0])] if item.descricao else []
    medidas = [("", s) for s in pdf.quebrar(texto_medidas(item), larguras[1])]
    return [
        nome + desc,
        medidas,
        [("", formatar_numero(item.quantidade))],
        [("", formatar_moeda(item.preco_unitario))],
        [("B", formatar_moeda(item.total))],
    ]


def _linha_item(pdf: DocumentoOrcamento, celulas, y: float, altura: float, alternada: bool) -> None:
    pdf.set_draw_color(*CINZA_LINHA)
    pdf.set_fill_color(*CINZA_CLARO)
    x = MARGEM_ESQ
    for (_, largura, alinhamento), linhas in zip(COLUNAS_ITENS, celulas):
        pdf.rect(x, y, largura, altura, style="FD" if alternada else "D")
        for i, (estilo, txt) in enumerate(linhas):
            pdf.fonte(estilo, 9)
            base = y + PADDING + 3.2 + i * ALTURA_LINHA
            if alinhamento == "R":
                pdf.texto_direita(x + largura - PADDING, base, txt)
            elif alinhamento == "C":
                pdf.texto_centro(x + largura / 2, base, txt)
            else:
                pdf.texto(x + PADDING, base, txt)
        x += largura


def _tabela_itens(pdf: DocumentoOrcamento, orc: Orcamento, y: float) -> float:
    y = _cabecalho_tabela(pdf, y)
    for n, item in enumerate(orc.itens):
        celulas = _celulas_item(pdf, item)
        altura = max(len(c) for c in celulas) * ALTURA_LINHA + 2 * PADDING
        if y + altura > pdf.limite_inferior:
            pdf.add_page()
            y = _cabecalho_tabela(pdf, 15)
        _linha_item(pdf, celulas, y, altura, alternada=n % 2 == 1)
        y += altura
    return y


def _totais(pdf: DocumentoOrcamento, orc: Orcamento, y: float) -> float:
    ajustes = []
    if orc.frete > 0:
        ajustes.append(("Frete:", formatar_moeda(orc.frete), TEXTO))
    if orc.instalacao > 0:
        ajustes.append(("Instalação:", formatar_moeda(orc.instalacao), TEXTO))
    if orc.desconto > 0:
        ajustes.append(("Desconto:", f"- {formatar_moeda(orc.desconto)}", VERMELHO))

    y += 10
    if y + len(ajustes) * 5 + 17 > pdf.limite_inferior:
        pdf.add_page()
        y = 20

    for rotulo, valor, cor in ajustes:
        pdf.fonte("", 10, cor)
        pdf.texto(140, y, rotulo)
        pdf.texto_direita(MARGEM_DIR, y, valor)
        y += 5

    y_total = y + 5 if ajustes else y - 5
    pdf.set_fill_color(*LARANJA)
    pdf.rect(130, y_total, 66, 12, style="F")
    pdf.fonte("B", 12, BRANCO)
    pdf.texto(135, y_total + 8, "TOTAL:")
    pdf.texto_direita(193, y_total + 8, formatar_moeda(orc.total))
    return y_total + 12


def _condicoes(pdf: DocumentoOrcamento, orc: Orcamento, y: float) -> float:
    x_valor, largura_valor = 60.0, 130.0

    pdf.fonte("", 9)
    pagamento = pdf.quebrar(orc.condicoes_pagamento or "-", largura_valor)
    prazo = pdf.quebrar(orc.prazo_execucao or "-", largura_valor)
    notas = pdf.quebrar(orc.observacoes, largura_valor) if orc.observacoes else []

    altura = 8 + 6 + (len(pagamento) + len(prazo)) * 4 + 16 + (len(notas) * 4 + 6 if notas else 0)
    y += 8
    if y + altura > pdf.limite_inferior:
        pdf.add_page()
        y = 20

    pdf.set_fill_color(250, 250, 250)
    pdf.set_draw_color(220, 220, 220)
    pdf.rect(MARGEM_ESQ, y, LARGURA_UTIL, altura, style="FD")
    pdf.set_fill_color(*ESCURO)
    pdf.rect(MARGEM_ESQ, y, LARGURA_UTIL, 8, style="F")
    pdf.fonte("B", 9, BRANCO)
    pdf.texto(18, y + 5.5, "CONDIÇÕES E PRAZOS")

    cursor = y + 14
    secoes = [("Forma de Pagamento:", pagamento), ("Prazo de Execução:", prazo)]
    if notas:
        secoes.append(("Observações:", notas))
    pdf.set_draw_color(*CINZA_LINHA)
    for i, (rotulo, linhas) in enumerate(secoes):
        if i:
            pdf.line(18, cursor, 190, cursor)
            cursor += 6
        pdf.fonte("B", 9)
        pdf.texto(18, cursor, rotulo)
        pdf.fonte("", 9)
        for j, linha in enumerate(linhas):
            pdf.texto(x_valor, cursor + j * 4, linha)
        cursor += (len(linhas) - 1) * 4 + 4
    return y + altura


# -------------------------
# API pública
# -------------------------

def montar_documento(orc: Orcamento, cliente: Cliente, gerado_em: Optional[datetime] = None) -> DocumentoOrcamento:
    """Monta o documento em memória (sem gravar)."""
    pdf = DocumentoOrcamento(gerado_em)
    pdf.set_title(_latin1(f"Orçamento {orc.numero}"))
    pdf.set_author(_latin1(DEFAULTS.empresa_razao))
    pdf.add_page()

    _cabecalho(pdf, orc)
    y = _dados_cliente(pdf, cliente)
    y = _tabela_itens(pdf, orc, y)
    y = _totais(pdf, orc, y)
    _condicoes(pdf, orc, y)
    return pdf


def nome_arquivo(orc: Orcamento) -> str:
    return f"Orcamento_{orc.numero}.pdf"


def gerar_pdf_orcamento(
    orc: Orcamento,
    cliente: Cliente,
    destino: Optional[Path] = None,
    gerado_em: Optional[datetime] = None,
) -> Path:
    """Gera e grava o PDF. Padrão: ``Orcamento_<numero>.pdf`` na pasta atual."""
    destino = Path(destino) if destino else Path(nome_arquivo(orc))
    destino.parent.mkdir(parents=True, exist_ok=True)
    montar_documento(orc, cliente, gerado_em).output(str(destino))
    return destino
