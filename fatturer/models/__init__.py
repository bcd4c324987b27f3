"""
Pacchetto per i modelli di dominio (dataclass in memoria, nessuna persistenza).
"""

from .invoice import Invoice, InvoiceHeader, InvoiceLine, Party, PaymentInfo, SummaryLine

__all__ = [
    "Invoice",
    "InvoiceHeader",
    "InvoiceLine",
    "Party",
    "PaymentInfo",
    "SummaryLine",
]
