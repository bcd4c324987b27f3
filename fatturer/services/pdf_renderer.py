"""
Generazione del PDF a partire da un `ExportDocument`.

Il renderer non conosce il modello `Invoice`: impagina solo sezioni, tabella
righe e tabella riepilogo già proiettate. La tabella righe viene spezzata su
più pagine ripetendo l'intestazione.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from fpdf import FPDF, XPos, YPos

from fatturer.errors import PdfRenderError
from fatturer.services.export_projection import ExportDocument, ExportTable

PAGE_MARGIN = 20
LINE_HEIGHT = 7
FONT_FAMILY = "helvetica"
CORE_FONTS_ENCODING = "cp1252"

LINE_TABLE_WIDTHS = (10, 64, 16, 14, 22, 16, 28)
SUMMARY_TABLE_WIDTHS = (40, 65, 65)


class BasePdfRenderer(ABC):
    """Interfaccia del collaboratore che trasforma un ExportDocument in PDF."""

    @abstractmethod
    def render(self, document: ExportDocument) -> bytes:
        """
        Returns:
            bytes: contenuto del PDF

        Raises:
            PdfRenderError: se la generazione fallisce
        """


class _InvoicePDF(FPDF):
    def footer(self) -> None:
        bottom = self.h - 20
        self.set_draw_color(0, 0, 0)
        self.set_line_width(0.5)
        self.line(self.l_margin, bottom, self.w - self.r_margin, bottom)

        self.set_y(-15)
        self.set_font(FONT_FAMILY, "", 8)
        self.set_text_color(100, 100, 100)
        self.cell(
            0,
            10,
            f"Documento generato automaticamente - Pagina {self.page_no()} di {{nb}}",
            align="C",
        )
        self.set_text_color(0, 0, 0)


class InvoicePdfRenderer(BasePdfRenderer):
    """Renderer A4 verticale basato su fpdf2 (font core)."""

    def render(self, document: ExportDocument) -> bytes:
        try:
            pdf = self.create_pdf()
            self.add_document_title(pdf, document.title)

            for section in document.sections:
                self.add_section(pdf, section.title)
                for entry in section.fields:
                    self.add_key_value_pair(pdf, f"{entry.label}:", entry.value)

            if document.line_table.rows:
                self.add_section(pdf, "Dettaglio Voci")
                self.add_table(pdf, document.line_table, LINE_TABLE_WIDTHS)

            if document.summary_table.rows:
                self.add_section(pdf, "Riepilogo IVA")
                self.add_table(pdf, document.summary_table, SUMMARY_TABLE_WIDTHS)

            return bytes(pdf.output())
        except PdfRenderError:
            raise
        except Exception as exc:
            raise PdfRenderError(f"Errore durante la generazione del PDF: {exc}") from exc

    # Metodi helper

    @staticmethod
    def create_pdf() -> FPDF:
        """Crea e inizializza un'istanza FPDF"""
        pdf = _InvoicePDF(orientation="portrait", unit="mm", format="A4")
        # Font core in windows-1252: include il simbolo €
        pdf.core_fonts_encoding = CORE_FONTS_ENCODING
        pdf.set_margins(PAGE_MARGIN, PAGE_MARGIN, PAGE_MARGIN)
        pdf.set_auto_page_break(auto=True, margin=PAGE_MARGIN + 5)
        pdf.add_page()
        return pdf

    @staticmethod
    def add_document_title(pdf: FPDF, title: str) -> None:
        pdf.set_fill_color(240, 240, 255)
        pdf.set_font(FONT_FAMILY, "B", 16)
        pdf.cell(0, 12, _pdf_text(title), fill=True, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.ln(5)

    @staticmethod
    def add_section(pdf: FPDF, title: str) -> None:
        pdf.ln(5)
        pdf.set_font(FONT_FAMILY, "B", 14)
        pdf.cell(0, LINE_HEIGHT, _pdf_text(title), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.set_draw_color(0, 0, 0)
        pdf.set_line_width(0.5)
        y = pdf.get_y()
        pdf.line(pdf.l_margin, y, pdf.w - pdf.r_margin, y)
        pdf.ln(3)

    @staticmethod
    def add_key_value_pair(pdf: FPDF, label: str, value: str, label_width: float = 50) -> None:
        pdf.set_font(FONT_FAMILY, "B", 10)
        pdf.cell(label_width, LINE_HEIGHT, _pdf_text(label), new_x=XPos.RIGHT, new_y=YPos.TOP)
        pdf.set_font(FONT_FAMILY, "", 10)
        pdf.multi_cell(0, LINE_HEIGHT, _pdf_text(value or "N/A"), new_x=XPos.LMARGIN, new_y=YPos.NEXT)

    @classmethod
    def add_table(cls, pdf: FPDF, table: ExportTable, widths: Sequence[float]) -> None:
        """Tabella con intestazione ripetuta a ogni cambio pagina e righe alternate."""
        cls.add_table_header(pdf, table.headers, widths)
        pdf.set_font(FONT_FAMILY, "", 9)
        for index, row in enumerate(table.rows):
            if pdf.will_page_break(LINE_HEIGHT):
                pdf.add_page()
                cls.add_table_header(pdf, table.headers, widths)
                pdf.set_font(FONT_FAMILY, "", 9)

            fill = index % 2 == 0
            pdf.set_fill_color(248, 248, 248)
            for width, value in zip(widths, row):
                pdf.cell(
                    width,
                    LINE_HEIGHT,
                    _fit(pdf, value, width),
                    border="B",
                    fill=fill,
                    new_x=XPos.RIGHT,
                    new_y=YPos.TOP,
                )
            pdf.ln(LINE_HEIGHT)

    @staticmethod
    def add_table_header(pdf: FPDF, headers: Sequence[str], widths: Sequence[float]) -> None:
        pdf.set_font(FONT_FAMILY, "B", 9)
        pdf.set_fill_color(240, 240, 240)
        for width, header in zip(widths, headers):
            pdf.cell(width, LINE_HEIGHT, _pdf_text(header), border="B", fill=True, new_x=XPos.RIGHT, new_y=YPos.TOP)
        pdf.ln(LINE_HEIGHT)


def _pdf_text(text: str) -> str:
    """Caratteri fuori da windows-1252 diventano "?"."""
    return (text or "").encode(CORE_FONTS_ENCODING, errors="replace").decode(CORE_FONTS_ENCODING)


def _fit(pdf: FPDF, text: str, width: float, padding: float = 2) -> str:
    """Tronca il testo con "..." perché stia nella colonna."""
    text = _pdf_text(text)
    if pdf.get_string_width(text) <= width - padding:
        return text
    while text and pdf.get_string_width(text + "...") > width - padding:
        text = text[:-1]
    return text + "..."
