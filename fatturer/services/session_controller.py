"""
Controller della sessione di lavoro sulla fattura.

Macchina a stati EMPTY -> LOADING -> LOADED (la modifica è un sotto-stato di
LOADED), con ERROR raggiungibile da qualsiasi caricamento fallito. È l'unico
punto che trasforma un errore in un messaggio per l'utente; parser, sessione
e proiezione si limitano a sollevare eccezioni.

Il modello è single-thread (asyncio): gli unici punti di sospensione sono la
lettura dell'upload e il rendering del PDF. Ogni caricamento riceve un numero
di sequenza e solo l'ultimo richiesto può completare.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Optional

from fatturer.errors import (
    FieldNotEditable,
    MalformedDocument,
    NoDataToExport,
    UnsupportedFileKind,
)
from fatturer.models import Invoice
from fatturer.parsers.fatturapa_parser import parse_invoice_xml
from fatturer.services.dto import FileUpload, format_file_size
from fatturer.services.edit_session import EditSession
from fatturer.services.events import EventBus, EventType
from fatturer.services.export_projection import DEFAULT_FILE_NAME, ExportDocument, project
from fatturer.services.field_registry import field_values
from fatturer.services.logging import log_structured_event
from fatturer.services.pdf_renderer import BasePdfRenderer, InvoicePdfRenderer


class SessionState(str, Enum):
    EMPTY = "empty"
    LOADING = "loading"
    LOADED = "loaded"
    ERROR = "error"


@dataclass(frozen=True)
class ExportResult:
    success: bool
    file_name: str = ""
    content: bytes = b""
    error: Optional[str] = None


UploadReader = Callable[[], Awaitable[FileUpload]]


class SessionController:
    def __init__(
        self,
        bus: Optional[EventBus] = None,
        renderer: Optional[BasePdfRenderer] = None,
        *,
        default_file_name: str = DEFAULT_FILE_NAME,
        render_in_thread: bool = True,
    ) -> None:
        self.bus = bus or EventBus()
        self.renderer = renderer or InvoicePdfRenderer()
        self.default_file_name = default_file_name
        self.render_in_thread = render_in_thread

        self._state = SessionState.EMPTY
        self._session: Optional[EditSession] = None
        self._file_name = ""
        self._last_error: Optional[str] = None
        self._load_seq = 0

    # ------------------------------------------------------------------
    # Stato
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def file_name(self) -> str:
        return self._file_name

    @property
    def last_error(self) -> Optional[str]:
        return self._last_error

    @property
    def export_enabled(self) -> bool:
        return self._state is SessionState.LOADED and self._session is not None

    @property
    def is_modified(self) -> bool:
        return self.export_enabled and self._session.is_modified

    def current_invoice(self) -> Optional[Invoice]:
        """Copia della fattura in lavorazione; None se non c'è una sessione attiva."""
        if not self.export_enabled:
            return None
        return self._session.current_invoice()

    def get_field(self, path: str) -> str:
        if not self.export_enabled:
            return ""
        return self._session.get(path)

    def to_dict(self) -> dict:
        invoice = self.current_invoice()
        return {
            "state": self._state.value,
            "file_name": self._file_name,
            "export_enabled": self.export_enabled,
            "is_modified": self.is_modified,
            "modified_paths": sorted(self._session.modified_paths) if self.export_enabled else [],
            "last_error": self._last_error,
            "fields": field_values(invoice) if invoice is not None else {},
            "invoice": invoice.to_dict() if invoice is not None else None,
        }

    # ------------------------------------------------------------------
    # Caricamento
    # ------------------------------------------------------------------

    def begin_load(self) -> int:
        """Apre un nuovo caricamento e restituisce il suo numero di sequenza."""
        self._load_seq += 1
        self._set_state(SessionState.LOADING)
        self.bus.publish(EventType.EXPORT_ENABLED, enabled=False)
        return self._load_seq

    def on_file_loaded(self, upload: FileUpload) -> bool:
        """Caricamento sincrono di un file già letto dal collaboratore di upload."""
        token = self.begin_load()
        return self.complete_load(token, upload)

    async def load_file(self, read: UploadReader) -> bool:
        """
        Caricamento asincrono: attende la lettura dell'upload.

        Se nel frattempo è partito un altro caricamento (o `clear`), il
        risultato di questa lettura viene scartato.
        """
        token = self.begin_load()
        try:
            upload = await read()
        except Exception as exc:  # noqa: BLE001 - errore del collaboratore di upload
            if self._is_stale(token):
                self._log_discarded(token)
                return False
            self._fail(f"Errore di caricamento: {str(exc) or 'Errore sconosciuto'}", exc)
            return False
        return self.complete_load(token, upload)

    def complete_load(self, token: int, upload: FileUpload) -> bool:
        if self._is_stale(token):
            self._log_discarded(token, file_name=upload.file_name)
            return False

        try:
            if upload.file_kind != "xml":
                raise UnsupportedFileKind(upload.file_kind, upload.file_name)
            invoice = parse_invoice_xml(upload.content)
        except UnsupportedFileKind as exc:
            self._fail("Formato file non supportato. Carica un file XML.", exc)
            return False
        except MalformedDocument as exc:
            self._fail("Errore durante l'elaborazione del file: formato non valido", exc)
            return False

        # Nessuna fattura parziale: la sessione precedente viene sostituita solo qui
        self._session = EditSession.load(invoice, bus=self.bus)
        self._file_name = upload.file_name
        self._last_error = None
        self._set_state(SessionState.LOADED)

        log_structured_event(
            "invoice_loaded",
            message="Fattura caricata",
            file_name=upload.file_name,
            file_size=format_file_size(upload.size),
            invoice_number=invoice.header.number,
            lines=len(invoice.lines),
        )
        self.bus.publish(
            EventType.INVOICE_LOADED,
            invoice=self._session.current_invoice(),
            file_name=upload.file_name,
        )
        self.bus.publish(EventType.EXPORT_ENABLED, enabled=True)
        return True

    def on_error(self, message: Optional[str]) -> None:
        """Errore segnalato dal collaboratore di upload: annulla i caricamenti in corso."""
        self._load_seq += 1
        self._fail(f"Errore di caricamento: {message or 'Errore sconosciuto'}")

    def clear(self) -> None:
        self._load_seq += 1
        self._session = None
        self._file_name = ""
        self._last_error = None
        self._set_state(SessionState.EMPTY)
        self.bus.publish(EventType.EXPORT_ENABLED, enabled=False)
        log_structured_event("session_cleared", message="Sessione svuotata")

    # ------------------------------------------------------------------
    # Modifica
    # ------------------------------------------------------------------

    def edit_field(self, path: str, value: str) -> bool:
        """Modifica un campo; campi non modificabili e stati diversi da LOADED sono ignorati."""
        if not self.export_enabled:
            log_structured_event(
                "edit_ignored", level="debug", path=path, state=self._state.value
            )
            return False
        try:
            self._session.set(path, value)
        except FieldNotEditable:
            log_structured_event("edit_rejected", level="debug", path=path)
            return False
        return True

    def reset_changes(self) -> bool:
        if not self.export_enabled:
            return False
        self._session.reset_to_original()
        invoice = self._session.current_invoice()
        self.bus.publish(EventType.FIELDS_RESET, invoice=invoice, values=field_values(invoice))
        log_structured_event("fields_reset", message="Modifiche annullate")
        return True

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def prepare_export(self) -> ExportDocument:
        """Proiezione su uno snapshot preso ora; solleva NoDataToExport senza sessione attiva."""
        invoice = self._session.snapshot() if self.export_enabled else None
        return project(invoice, default_file_name=self.default_file_name)

    def export(self) -> ExportResult:
        try:
            document = self.prepare_export()
        except NoDataToExport as exc:
            return self._export_failed(str(exc), exc)
        try:
            content = self.renderer.render(document)
        except Exception as exc:  # noqa: BLE001 - qualsiasi errore del renderer va mostrato
            return self._export_failed(f"Errore durante l'esportazione in PDF: {exc}", exc)
        return self._export_done(document, content)

    async def export_async(self) -> ExportResult:
        """Come `export`, con il rendering eventualmente spostato in un thread worker."""
        try:
            document = self.prepare_export()
        except NoDataToExport as exc:
            return self._export_failed(str(exc), exc)
        try:
            if self.render_in_thread:
                content = await asyncio.to_thread(self.renderer.render, document)
            else:
                content = self.renderer.render(document)
        except Exception as exc:  # noqa: BLE001 - qualsiasi errore del renderer va mostrato
            return self._export_failed(f"Errore durante l'esportazione in PDF: {exc}", exc)
        return self._export_done(document, content)

    # ------------------------------------------------------------------
    # Helper
    # ------------------------------------------------------------------

    def _is_stale(self, token: int) -> bool:
        return token != self._load_seq

    def _log_discarded(self, token: int, **fields) -> None:
        log_structured_event(
            "load_discarded",
            level="debug",
            message="Caricamento superato da una richiesta successiva",
            token=token,
            latest=self._load_seq,
            **fields,
        )

    def _set_state(self, state: SessionState) -> None:
        previous = self._state
        self._state = state
        if previous is not state:
            self.bus.publish(EventType.STATE_CHANGED, state=state.value, previous=previous.value)

    def _fail(self, message: str, exc: Optional[BaseException] = None) -> None:
        # La sessione precedente resta intatta ma inattiva
        self._last_error = message
        self._set_state(SessionState.ERROR)
        log_structured_event(
            "load_failed",
            message=message,
            level="error",
            error=str(exc) if exc is not None else None,
            error_type=type(exc).__name__ if exc is not None else None,
        )
        self.bus.publish(EventType.ERROR_OCCURRED, message=message)
        self.bus.publish(EventType.EXPORT_ENABLED, enabled=False)

    def _export_failed(self, message: str, exc: BaseException) -> ExportResult:
        log_structured_event(
            "export_failed",
            message=message,
            level="error",
            error_type=type(exc).__name__,
            state=self._state.value,
        )
        self.bus.publish(EventType.ERROR_OCCURRED, message=message)
        return ExportResult(success=False, error=message)

    def _export_done(self, document: ExportDocument, content: bytes) -> ExportResult:
        log_structured_event(
            "invoice_exported",
            message="PDF generato",
            file_name=document.file_name,
            file_size=format_file_size(len(content)),
        )
        return ExportResult(success=True, file_name=document.file_name, content=content)
