"""
Modello di dominio della fattura visualizzata/modificata.

Tutti i valori scalari sono stringhe: un nodo assente nell'XML diventa "".
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List


@dataclass
class InvoiceHeader:
    """Dati generali del documento (non modificabili)."""

    number: str = ""
    date: str = ""
    document_type_version: str = ""
    currency: str = ""


@dataclass
class Party:
    """Anagrafica di fornitore (CedentePrestatore) o cliente (CessionarioCommittente)."""

    name: str = ""
    vat_number: str = ""
    tax_code: str = ""
    address: str = ""
    zip: str = ""
    city: str = ""
    province: str = ""
    country: str = ""
    # Valorizzato solo per il fornitore
    fiscal_regime: str = ""


@dataclass
class PaymentInfo:
    """Primo DettaglioPagamento del documento."""

    method: str = ""
    due_date: str = ""
    amount: str = ""
    iban: str = ""


@dataclass
class InvoiceLine:
    line_number: str = ""
    description: str = ""
    quantity: str = ""
    unit: str = ""
    unit_price: str = ""
    total_price: str = ""
    vat_rate: str = ""


@dataclass
class SummaryLine:
    taxable_amount: str = ""
    vat_amount: str = ""
    vat_rate: str = ""


@dataclass
class Invoice:
    """
    Aggregato radice.

    L'ordine di `lines` e `summary` è quello del documento sorgente.
    """

    header: InvoiceHeader = field(default_factory=InvoiceHeader)
    supplier: Party = field(default_factory=Party)
    customer: Party = field(default_factory=Party)
    payment: PaymentInfo = field(default_factory=PaymentInfo)
    lines: List[InvoiceLine] = field(default_factory=list)
    summary: List[SummaryLine] = field(default_factory=list)
    total_amount: str = ""
    currency: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
