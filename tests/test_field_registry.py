from __future__ import annotations

import pytest

from fatturer.errors import UnknownFieldPath
from fatturer.services.field_registry import (
    EDITABLE_PATHS,
    FIELD_REGISTRY,
    SECTIONS,
    FieldDefinition,
    FieldKind,
    build_registry,
    describe_registry,
    field_values,
    fields_for_section,
    is_editable,
    resolve_path,
)


def test_editable_paths_are_the_customer_and_payment_fields():
    assert EDITABLE_PATHS == {
        "customer.name",
        "customer.vat_number",
        "customer.tax_code",
        "customer.address",
        "customer.zip",
        "customer.city",
        "customer.province",
        "payment.method",
        "payment.due_date",
        "payment.iban",
    }


@pytest.mark.parametrize(
    "path",
    ["header.number", "supplier.name", "payment.amount", "total_amount", "currency", "nope.nope"],
)
def test_read_only_and_unknown_paths_are_not_editable(path):
    assert not is_editable(path)


def test_sections_keep_declaration_order():
    assert [section.key for section in SECTIONS] == ["header", "supplier", "customer", "payment"]
    assert [d.path for d in fields_for_section("payment")] == [
        "payment.method",
        "payment.due_date",
        "payment.amount",
        "payment.iban",
    ]


def test_money_and_address_kinds():
    assert FIELD_REGISTRY["total_amount"].kind is FieldKind.MONEY
    assert FIELD_REGISTRY["payment.amount"].kind is FieldKind.MONEY
    assert FIELD_REGISTRY["customer.address"].kind is FieldKind.ADDRESS
    assert FIELD_REGISTRY["customer.city"].kind is FieldKind.ADDRESS_PART


@pytest.mark.parametrize(
    "definition",
    [
        FieldDefinition("customer.adress", "Indirizzo", True, "customer"),
        FieldDefinition("customer", "Cliente", False, "customer"),
        FieldDefinition("lines", "Righe", False, "header"),
        FieldDefinition("header..number", "Numero", False, "header"),
        FieldDefinition("header.number", "Numero", False, "sezione_inesistente"),
    ],
)
def test_build_registry_rejects_bad_declarations(definition):
    with pytest.raises(UnknownFieldPath):
        build_registry((definition,))


def test_build_registry_rejects_duplicates():
    definition = FieldDefinition("header.number", "Numero", False, "header")
    with pytest.raises(UnknownFieldPath):
        build_registry((definition, definition))


def test_resolve_path_on_dataclasses_and_dicts(sample_invoice):
    assert resolve_path(sample_invoice, "customer.city") == "Roma"
    assert resolve_path({"a": {"b": "c"}}, "a.b") == "c"
    assert resolve_path(sample_invoice, "customer.missing") is None


def test_field_values_cover_the_whole_registry(sample_invoice):
    values = field_values(sample_invoice)
    assert list(values) == list(FIELD_REGISTRY)
    assert values["customer.name"] == "Mario Bianchi"
    assert values["payment.iban"] == "IT60X0542811101000000123456"


def test_describe_registry_is_json_friendly():
    described = describe_registry()
    assert described[0]["title"] == "Intestazione Fattura"
    customer = next(s for s in described if s["key"] == "customer")
    address = next(f for f in customer["fields"] if f["path"] == "customer.address")
    assert address == {"path": "customer.address", "label": "Indirizzo", "editable": True, "kind": "address"}
