"""
Registro statico dei campi della fattura.

Ogni FieldPath (es. "customer.address") è dichiarato una sola volta con
etichetta, flag di modificabilità, sezione e tipo. Il registro è l'unica
autorità su cosa viene mostrato, modificato ed esportato.

Il registro viene validato all'import del modulo: un percorso che non risolve
una foglia scalare di `Invoice` (o dichiarato due volte) solleva subito
`UnknownFieldPath`.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, is_dataclass
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Tuple

from fatturer.errors import UnknownFieldPath
from fatturer.models import Invoice


class FieldKind(str, Enum):
    TEXT = "text"
    MONEY = "money"
    # Riga indirizzo composta (indirizzo, CAP, comune, provincia)
    ADDRESS = "address"
    # Componente dell'indirizzo: modificabile ma esportato solo tramite ADDRESS
    ADDRESS_PART = "address_part"


@dataclass(frozen=True)
class Section:
    key: str
    title: str


@dataclass(frozen=True)
class FieldDefinition:
    path: str
    label: str
    editable: bool
    section: str
    kind: FieldKind = FieldKind.TEXT


SECTIONS: Tuple[Section, ...] = (
    Section("header", "Intestazione Fattura"),
    Section("supplier", "Dati Fornitore"),
    Section("customer", "Dati Cliente"),
    Section("payment", "Dati Pagamento"),
)

_DECLARED_FIELDS: Tuple[FieldDefinition, ...] = (
    # --- Intestazione
    FieldDefinition("header.number", "Numero Fattura", False, "header"),
    FieldDefinition("header.date", "Data Fattura", False, "header"),
    FieldDefinition("header.document_type_version", "Tipo Documento", False, "header"),
    FieldDefinition("currency", "Valuta", False, "header"),
    FieldDefinition("total_amount", "Importo Totale", False, "header", FieldKind.MONEY),
    # --- Fornitore
    FieldDefinition("supplier.name", "Denominazione", False, "supplier"),
    FieldDefinition("supplier.vat_number", "Partita IVA", False, "supplier"),
    FieldDefinition("supplier.tax_code", "Codice Fiscale", False, "supplier"),
    FieldDefinition("supplier.fiscal_regime", "Regime Fiscale", False, "supplier"),
    # --- Cliente
    FieldDefinition("customer.name", "Denominazione", True, "customer"),
    FieldDefinition("customer.vat_number", "Partita IVA", True, "customer"),
    FieldDefinition("customer.tax_code", "Codice Fiscale", True, "customer"),
    FieldDefinition("customer.address", "Indirizzo", True, "customer", FieldKind.ADDRESS),
    FieldDefinition("customer.zip", "CAP", True, "customer", FieldKind.ADDRESS_PART),
    FieldDefinition("customer.city", "Comune", True, "customer", FieldKind.ADDRESS_PART),
    FieldDefinition("customer.province", "Provincia", True, "customer", FieldKind.ADDRESS_PART),
    # --- Pagamento
    FieldDefinition("payment.method", "Modalità", True, "payment"),
    FieldDefinition("payment.due_date", "Data Scadenza", True, "payment"),
    FieldDefinition("payment.amount", "Importo", False, "payment", FieldKind.MONEY),
    FieldDefinition("payment.iban", "IBAN", True, "payment"),
)


def _resolve_leaf(path: str) -> None:
    """Verifica che `path` indichi una foglia stringa di un Invoice vuoto."""
    if not path or any(not part for part in path.split(".")):
        raise UnknownFieldPath(f"FieldPath non valido: {path!r}")

    current = Invoice()
    for part in path.split("."):
        if not is_dataclass(current) or part not in {f.name for f in fields(current)}:
            raise UnknownFieldPath(f"FieldPath sconosciuto: {path!r} (segmento {part!r})")
        current = getattr(current, part)

    if not isinstance(current, str):
        raise UnknownFieldPath(f"FieldPath non scalare: {path!r}")


def build_registry(declared: Tuple[FieldDefinition, ...]) -> Dict[str, FieldDefinition]:
    section_keys = {section.key for section in SECTIONS}
    registry: Dict[str, FieldDefinition] = {}
    for definition in declared:
        if definition.path in registry:
            raise UnknownFieldPath(f"FieldPath dichiarato due volte: {definition.path!r}")
        if definition.section not in section_keys:
            raise UnknownFieldPath(
                f"Sezione sconosciuta {definition.section!r} per {definition.path!r}"
            )
        _resolve_leaf(definition.path)
        registry[definition.path] = definition
    return registry


FIELD_REGISTRY: Dict[str, FieldDefinition] = build_registry(_DECLARED_FIELDS)

EDITABLE_PATHS: FrozenSet[str] = frozenset(
    path for path, definition in FIELD_REGISTRY.items() if definition.editable
)


def get_field(path: str) -> FieldDefinition | None:
    return FIELD_REGISTRY.get(path)


def is_editable(path: str) -> bool:
    return path in EDITABLE_PATHS


def fields_for_section(section_key: str) -> List[FieldDefinition]:
    """Campi della sezione nell'ordine di dichiarazione."""
    return [d for d in FIELD_REGISTRY.values() if d.section == section_key]


def describe_registry() -> List[dict]:
    """Rappresentazione serializzabile (JSON) del registro, per la vista."""
    return [
        {
            "key": section.key,
            "title": section.title,
            "fields": [
                {
                    "path": d.path,
                    "label": d.label,
                    "editable": d.editable,
                    "kind": d.kind.value,
                }
                for d in fields_for_section(section.key)
            ],
        }
        for section in SECTIONS
    ]


def resolve_path(obj: Any, path: str) -> Any:
    """Segue il percorso puntato su dataclass/dict; None se un livello manca."""
    current = obj
    for key in path.split("."):
        if current is None:
            return None
        if isinstance(current, dict):
            current = current.get(key)
        else:
            current = getattr(current, key, None)
    return current


def field_values(invoice: Any) -> Dict[str, str]:
    """Valori di tutti i campi del registro, nell'ordine di dichiarazione."""
    values: Dict[str, str] = {}
    for path in FIELD_REGISTRY:
        value = resolve_path(invoice, path)
        values[path] = value if isinstance(value, str) else ""
    return values
