"""Stato della vista ricostruito dagli eventi del bus (testo di stato, pulsanti, ultimo errore)."""

from __future__ import annotations

from typing import Dict, Optional

from fatturer.services.events import Event, EventBus, EventType
from fatturer.services.field_registry import field_values

STATUS_EMPTY = "Nessun file caricato"
STATUS_LOADING = "Caricamento in corso..."
STATUS_LOADED = "Fattura caricata"
STATUS_ERROR = "Errore"


class SessionViewState:
    def __init__(self, bus: EventBus) -> None:
        self._reset_view()
        bus.subscribe(EventType.STATE_CHANGED, self._on_state_changed)
        bus.subscribe(EventType.INVOICE_LOADED, self._on_invoice_loaded)
        bus.subscribe(EventType.DATA_CHANGED, self._on_data_changed)
        bus.subscribe(EventType.FIELDS_RESET, self._on_fields_reset)
        bus.subscribe(EventType.ERROR_OCCURRED, self._on_error)
        bus.subscribe(EventType.EXPORT_ENABLED, self._on_export_enabled)

    def _reset_view(self) -> None:
        self.state = "empty"
        self.status_text = STATUS_EMPTY
        self.status_detail = ""
        self.export_enabled = False
        self.reset_enabled = False
        self.last_error: Optional[str] = None
        self.values: Dict[str, str] = {}

    def _on_state_changed(self, event: Event) -> None:
        self.state = event.data.get("state", self.state)
        if self.state == "empty":
            self._reset_view()
        elif self.state == "loading":
            self.status_text = STATUS_LOADING
            self.status_detail = ""
        elif self.state == "error":
            self.status_text = STATUS_ERROR
            self.reset_enabled = False

    def _on_invoice_loaded(self, event: Event) -> None:
        invoice = event.data["invoice"]
        self.status_text = STATUS_LOADED
        self.status_detail = (
            f"Numero: {invoice.header.number or 'N/A'} - Data: {invoice.header.date or 'N/A'}"
        )
        self.values = field_values(invoice)
        self.reset_enabled = False
        self.last_error = None

    def _on_data_changed(self, event: Event) -> None:
        self.values = field_values(event.data["invoice"])
        self.reset_enabled = bool(event.data.get("modified_paths"))

    def _on_fields_reset(self, event: Event) -> None:
        self.values = dict(event.data.get("values") or field_values(event.data["invoice"]))
        self.reset_enabled = False

    def _on_error(self, event: Event) -> None:
        self.last_error = event.data.get("message")
        if self.state == "error":
            self.status_detail = self.last_error or ""

    def _on_export_enabled(self, event: Event) -> None:
        self.export_enabled = bool(event.data.get("enabled"))

    def to_dict(self) -> dict:
        return {
            "state": self.state,
            "status_text": self.status_text,
            "status_detail": self.status_detail,
            "export_enabled": self.export_enabled,
            "reset_enabled": self.reset_enabled,
            "last_error": self.last_error,
            "values": dict(self.values),
        }
