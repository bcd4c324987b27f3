from __future__ import annotations

import pytest

from fatturer.errors import NoDataToExport
from fatturer.models import Invoice, InvoiceLine
from fatturer.services.edit_session import EditSession
from fatturer.services.export_projection import (
    compose_address,
    format_money,
    project,
    suggested_file_name,
)


def _section(document, title):
    return {f.label: f.value for f in next(s for s in document.sections if s.title == title).fields}


def test_sections_follow_registry_order(sample_invoice):
    document = project(sample_invoice)
    assert [s.title for s in document.sections] == [
        "Intestazione Fattura",
        "Dati Fornitore",
        "Dati Cliente",
        "Dati Pagamento",
    ]
    assert [f.label for f in document.sections[2].fields] == [
        "Denominazione",
        "Partita IVA",
        "Codice Fiscale",
        "Indirizzo",
    ]


def test_money_and_address_formatting(sample_invoice):
    document = project(sample_invoice)
    header = _section(document, "Intestazione Fattura")
    assert header["Importo Totale"] == "183.00 EUR"
    assert _section(document, "Dati Pagamento")["Importo"] == "183.00 EUR"
    assert _section(document, "Dati Cliente")["Indirizzo"] == "Via Garibaldi 5 - 00100 Roma (RM)"


def test_tables_keep_raw_values_in_document_order(sample_invoice):
    document = project(sample_invoice)
    assert document.line_table.headers == ("N.", "Descrizione", "Q.tà", "U.M.", "Prezzo", "IVA %", "Totale")
    assert document.line_table.rows == (
        ("1", "Consulenza tecnica", "2.00", "ore", "50.00", "22.00", "100.00"),
        ("2", "Materiale di consumo", "1.00", "", "50.00", "22.00", "50.00"),
    )
    assert document.summary_table.rows == (("22.00", "150.00", "33.00"),)


def test_projection_reflects_edits(sample_invoice):
    session = EditSession.load(sample_invoice)
    session.set("customer.city", "Napoli")
    session.set("customer.province", "")

    document = project(session.current_invoice())

    assert _section(document, "Dati Cliente")["Indirizzo"] == "Via Garibaldi 5 - 00100 Napoli"


def test_projection_is_deterministic(sample_invoice):
    assert project(sample_invoice) == project(sample_invoice)


def test_file_name_from_invoice_number(sample_invoice):
    assert project(sample_invoice).file_name == "Invoice_FT_2024_001.pdf"
    assert project(Invoice()).file_name == "Invoice.pdf"
    assert project(Invoice(), default_file_name="Fattura.pdf").file_name == "Fattura.pdf"


def test_none_invoice_raises():
    with pytest.raises(NoDataToExport):
        project(None)


def test_empty_invoice_projects_empty_values():
    document = project(Invoice(lines=[InvoiceLine(description="Solo descrizione")]))
    assert _section(document, "Intestazione Fattura")["Importo Totale"] == ""
    assert document.line_table.rows == (("", "Solo descrizione", "", "", "", "", ""),)
    assert document.summary_table.rows == ()


@pytest.mark.parametrize(
    "amount, currency, expected",
    [("10.00", "EUR", "10.00 EUR"), ("10.00", "", "10.00 €"), ("", "EUR", "")],
)
def test_format_money(amount, currency, expected):
    assert format_money(amount, currency) == expected


@pytest.mark.parametrize(
    "parts, expected",
    [
        (("Via Roma 1", "00100", "Roma", "RM"), "Via Roma 1 - 00100 Roma (RM)"),
        (("Via Roma 1", "", "Roma", ""), "Via Roma 1 Roma"),
        (("Via Roma 1", "", "Roma", "RM"), "Via Roma 1 Roma (RM)"),
        (("", "", "", "RM"), " (RM)"),
        (("", "", "", ""), ""),
    ],
)
def test_compose_address(parts, expected):
    assert compose_address(*parts) == expected


def test_suggested_file_name_replaces_unsafe_characters():
    assert suggested_file_name('A/B\\C?D%E*F:G|H"I<J>K') == "Invoice_A_B_C_D_E_F_G_H_I_J_K.pdf"
    assert suggested_file_name("") == "Invoice.pdf"


def test_to_dict_is_serializable(sample_invoice):
    data = project(sample_invoice).to_dict()
    assert data["file_name"] == "Invoice_FT_2024_001.pdf"
    assert data["line_table"]["rows"][0][1] == "Consulenza tecnica"
    assert data["sections"][0]["fields"][0] == ["Numero Fattura", "FT/2024/001"]
