"""
Proiezione della fattura nel documento di export.

`project(invoice)` è una funzione pura: produce un `ExportDocument` con
sezioni (titolo + coppie etichetta/valore) nell'ordine del registro campi,
più la tabella righe e la tabella riepilogo IVA nell'ordine del documento.
Il renderer PDF consuma solo questa struttura.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from fatturer.errors import NoDataToExport
from fatturer.models import Invoice, Party
from fatturer.services.field_registry import (
    SECTIONS,
    FieldDefinition,
    FieldKind,
    fields_for_section,
    resolve_path,
)

DEFAULT_CURRENCY_SYMBOL = "€"
DEFAULT_FILE_NAME = "Invoice.pdf"
DOCUMENT_TITLE = "FATTURA ELETTRONICA"

LINE_TABLE_HEADERS: Tuple[str, ...] = ("N.", "Descrizione", "Q.tà", "U.M.", "Prezzo", "IVA %", "Totale")
SUMMARY_TABLE_HEADERS: Tuple[str, ...] = ("IVA %", "Imponibile", "Imposta")

# Caratteri non ammessi nei nomi file
_UNSAFE_FILE_CHARS = re.compile(r'[/\\?%*:|"<>]')


@dataclass(frozen=True)
class ExportField:
    label: str
    value: str


@dataclass(frozen=True)
class ExportSection:
    title: str
    fields: Tuple[ExportField, ...]


@dataclass(frozen=True)
class ExportTable:
    headers: Tuple[str, ...]
    rows: Tuple[Tuple[str, ...], ...] = ()


@dataclass(frozen=True)
class ExportDocument:
    title: str
    sections: Tuple[ExportSection, ...]
    line_table: ExportTable
    summary_table: ExportTable
    file_name: str = DEFAULT_FILE_NAME
    currency: str = ""

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "file_name": self.file_name,
            "sections": [
                {"title": s.title, "fields": [[f.label, f.value] for f in s.fields]}
                for s in self.sections
            ],
            "line_table": {
                "headers": list(self.line_table.headers),
                "rows": [list(r) for r in self.line_table.rows],
            },
            "summary_table": {
                "headers": list(self.summary_table.headers),
                "rows": [list(r) for r in self.summary_table.rows],
            },
        }


def project(invoice: Optional[Invoice], *, default_file_name: str = DEFAULT_FILE_NAME) -> ExportDocument:
    if invoice is None:
        raise NoDataToExport("Nessun dato disponibile per l'esportazione")

    sections = tuple(
        ExportSection(
            title=section.title,
            fields=tuple(
                ExportField(definition.label, _project_value(invoice, definition))
                for definition in fields_for_section(section.key)
                if definition.kind is not FieldKind.ADDRESS_PART
            ),
        )
        for section in SECTIONS
    )

    line_table = ExportTable(
        headers=LINE_TABLE_HEADERS,
        rows=tuple(
            (
                line.line_number,
                line.description,
                line.quantity,
                line.unit,
                line.unit_price,
                line.vat_rate,
                line.total_price,
            )
            for line in invoice.lines
        ),
    )
    summary_table = ExportTable(
        headers=SUMMARY_TABLE_HEADERS,
        rows=tuple((s.vat_rate, s.taxable_amount, s.vat_amount) for s in invoice.summary),
    )

    return ExportDocument(
        title=DOCUMENT_TITLE,
        sections=sections,
        line_table=line_table,
        summary_table=summary_table,
        file_name=suggested_file_name(invoice.header.number, default=default_file_name),
        currency=invoice.currency,
    )


# --- Formattazione ---


def format_money(amount: str, currency: str) -> str:
    """Importo grezzo seguito dal codice valuta (o "€" se la valuta è vuota)."""
    if not amount:
        return ""
    return f"{amount} {currency or DEFAULT_CURRENCY_SYMBOL}"


def compose_address(address: str, zip_code: str, city: str, province: str) -> str:
    """Indirizzo su una riga: ogni componente è aggiunto solo se presente."""
    composed = address or ""
    if zip_code:
        composed += f" - {zip_code}"
    if city:
        composed += f" {city}"
    if province:
        composed += f" ({province})"
    return composed


def compose_party_address(party: Party) -> str:
    return compose_address(party.address, party.zip, party.city, party.province)


def suggested_file_name(number: str, *, default: str = DEFAULT_FILE_NAME) -> str:
    if not number:
        return default
    return f"Invoice_{_UNSAFE_FILE_CHARS.sub('_', number)}.pdf"


def _project_value(invoice: Invoice, definition: FieldDefinition) -> str:
    if definition.kind is FieldKind.ADDRESS:
        owner_path = definition.path.rsplit(".", 1)[0]
        party = resolve_path(invoice, owner_path)
        return compose_party_address(party) if isinstance(party, Party) else ""

    raw = resolve_path(invoice, definition.path)
    if not isinstance(raw, str):
        raw = ""
    if definition.kind is FieldKind.MONEY:
        return format_money(raw, invoice.currency)
    return raw

