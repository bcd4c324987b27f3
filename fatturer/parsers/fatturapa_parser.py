"""
Parser per file XML FatturaPA.

Questo modulo fornisce:
- `parse_xml_document(content)`: carica il root XML (unico punto che può fallire,
  con `MalformedDocument`)
- `map_invoice(root)`: funzione pura che mappa l'albero XML sul modello `Invoice`
- `parse_invoice_xml(content)`: le due operazioni in sequenza

Il mapper è pensato per essere:
- tollerante ai campi mancanti (ogni foglia assente diventa "")
- indipendente dai namespace (uso di local-name() negli XPath)
- fedele all'ordine del documento per DettaglioLinee e DatiRiepilogo
  (nessun ordinamento, filtro o deduplica)
"""

from __future__ import annotations

import logging
from typing import List, Optional, Union

from lxml import etree

from fatturer.errors import MalformedDocument
from fatturer.models import (
    Invoice,
    InvoiceHeader,
    InvoiceLine,
    Party,
    PaymentInfo,
    SummaryLine,
)

logger = logging.getLogger(__name__)


# =========================
#  Caricamento XML
# =========================


def parse_xml_document(content: Union[str, bytes]) -> etree._Element:
    """
    Carica il root XML dal contenuto del file.

    - Il testo (già decodificato dal collaboratore di upload) viene sempre
      letto come UTF-8, ignorando l'encoding dichiarato nel prologo.
    - In caso di errore si riprova una sola volta rimuovendo i control char
      non ammessi in XML; se fallisce ancora solleva `MalformedDocument`.
    """
    if isinstance(content, str):
        data = content.encode("utf-8")
        encoding: Optional[str] = "utf-8"
    else:
        data = content or b""
        encoding = None

    try:
        return _fromstring(data, encoding)
    except (etree.XMLSyntaxError, ValueError) as exc:
        clean = _clean_xml_bytes(data)
        removed = len(data) - len(clean)
        if removed:
            try:
                root = _fromstring(clean, encoding)
                logger.warning(
                    "XML ripulito da control chars",
                    extra={"removed_bytes": removed},
                )
                return root
            except (etree.XMLSyntaxError, ValueError):
                pass
        raise MalformedDocument(
            f"XML non parsabile: size={len(data)} parse_error={exc} head_bytes={data[:64]!r}"
        ) from exc


def _fromstring(data: bytes, encoding: Optional[str]) -> etree._Element:
    parser = etree.XMLParser(
        recover=False,
        encoding=encoding,
        resolve_entities=False,
        no_network=True,
    )
    root = etree.fromstring(data, parser=parser)
    if root is None:
        raise ValueError("documento vuoto")
    return root


def _clean_xml_bytes(data: bytes) -> bytes:
    """
    Rimuove byte NUL e control < 0x20 esclusi \\t, \\n, \\r.
    Non decodifica/re-encoda il contenuto.
    """
    allowed_ctrl = {9, 10, 13}
    return bytes(b for b in data if b >= 0x20 or b in allowed_ctrl)


def parse_invoice_xml(content: Union[str, bytes]) -> Invoice:
    """Parsing completo: contenuto grezzo -> Invoice."""
    return map_invoice(parse_xml_document(content))


# =========================
#  Funzioni di supporto (private)
# =========================


def _localname(tag: str | None) -> str:
    """Restituisce il local-name di un tag con/without namespace."""
    if not tag:
        return ""
    if "}" in tag:
        return tag.split("}", 1)[1]
    if ":" in tag:
        return tag.split(":", 1)[1]
    return tag


def _first(node, tag: str):
    """Primo discendente con il local-name indicato (ordine documento), oppure None."""
    if node is None:
        return None
    res = node.xpath(f".//*[local-name()='{tag}']")
    return res[0] if res else None


def _find(node, *tags: str):
    """Risolve un percorso annidato: trova A, poi dentro A trova B, ecc."""
    for tag in tags:
        node = _first(node, tag)
        if node is None:
            return None
    return node


def _get_text(node, *tags: str) -> str:
    """Testo ripulito del nodo indicato dal percorso, "" se assente."""
    target = _find(node, *tags)
    if target is None:
        return ""
    return target.xpath("string()").strip()


# =========================
#  Mapper
# =========================


def map_invoice(root) -> Invoice:
    """
    Mappa il root XML su un `Invoice`.

    Funzione pura: non solleva eccezioni per XML ben formato, anche se
    mancano i nodi attesi.
    """
    header = _map_header(root)
    return Invoice(
        header=header,
        supplier=_map_party(_first(root, "CedentePrestatore"), with_fiscal_regime=True),
        customer=_map_party(_first(root, "CessionarioCommittente")),
        payment=_map_payment(root),
        lines=_map_lines(root),
        summary=_map_summary(root),
        total_amount=_get_text(root, "DatiGeneraliDocumento", "ImportoTotaleDocumento"),
        currency=header.currency,
    )


# ---------- Testata fattura ----------


def _map_header(root) -> InvoiceHeader:
    """
    Estrae i dati principali del documento:

    - Numero, Data, Divisa (DatiGeneraliDocumento)
    - FormatoTrasmissione (DatiTrasmissione), mostrato come tipo documento
    """
    return InvoiceHeader(
        number=_get_text(root, "DatiGeneraliDocumento", "Numero"),
        date=_get_text(root, "DatiGeneraliDocumento", "Data"),
        document_type_version=_get_text(root, "FormatoTrasmissione"),
        currency=_get_text(root, "DatiGeneraliDocumento", "Divisa"),
    )


# ---------- Anagrafiche ----------


def _map_party(party_node, *, with_fiscal_regime: bool = False) -> Party:
    """
    Estrae i dati di CedentePrestatore o CessionarioCommittente.

    Denominazione ha precedenza; in sua assenza si usa "Nome Cognome".
    """
    if party_node is None:
        return Party()

    name = _get_text(party_node, "Denominazione")
    if not name:
        name = " ".join(
            part for part in (_get_text(party_node, "Nome"), _get_text(party_node, "Cognome")) if part
        )

    return Party(
        name=name,
        vat_number=_get_text(party_node, "IdFiscaleIVA", "IdCodice"),
        tax_code=_get_text(party_node, "CodiceFiscale"),
        address=_get_text(party_node, "Sede", "Indirizzo"),
        zip=_get_text(party_node, "Sede", "CAP"),
        city=_get_text(party_node, "Sede", "Comune"),
        province=_get_text(party_node, "Sede", "Provincia"),
        country=_get_text(party_node, "Sede", "Nazione"),
        fiscal_regime=_get_text(party_node, "RegimeFiscale") if with_fiscal_regime else "",
    )


# ---------- DatiPagamento ----------


def _map_payment(root) -> PaymentInfo:
    detail = _find(root, "DatiPagamento", "DettaglioPagamento")
    if detail is None:
        return PaymentInfo()
    return PaymentInfo(
        method=_get_text(detail, "ModalitaPagamento"),
        due_date=_get_text(detail, "DataScadenzaPagamento"),
        amount=_get_text(detail, "ImportoPagamento"),
        iban=_get_text(detail, "IBAN"),
    )


# ---------- DettaglioLinee ----------


def _map_lines(root) -> List[InvoiceLine]:
    return [
        InvoiceLine(
            line_number=_get_text(node, "NumeroLinea"),
            description=_get_text(node, "Descrizione"),
            quantity=_get_text(node, "Quantita"),
            unit=_get_text(node, "UnitaMisura"),
            unit_price=_get_text(node, "PrezzoUnitario"),
            total_price=_get_text(node, "PrezzoTotale"),
            vat_rate=_get_text(node, "AliquotaIVA"),
        )
        for node in root.xpath(".//*[local-name()='DettaglioLinee']")
    ]


# ---------- DatiRiepilogo ----------


def _map_summary(root) -> List[SummaryLine]:
    return [
        SummaryLine(
            taxable_amount=_get_text(node, "ImponibileImporto"),
            vat_amount=_get_text(node, "Imposta"),
            vat_rate=_get_text(node, "AliquotaIVA"),
        )
        for node in root.xpath(".//*[local-name()='DatiRiepilogo']")
    ]
