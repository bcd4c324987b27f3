"""
Pacchetto per i servizi (logica di business) dell'applicazione.

I servizi orchestrano:
- parser (FatturaPA XML)
- sessione di modifica e registro campi
- proiezione export e rendering PDF
- logging strutturato
"""

from .dto import FileUpload, detect_file_kind, format_file_size
from .edit_session import EditSession
from .events import Event, EventBus, EventType
from .export_projection import ExportDocument, project, suggested_file_name
from .field_registry import (
    EDITABLE_PATHS,
    FIELD_REGISTRY,
    describe_registry,
    field_values,
    is_editable,
)
from .pdf_renderer import BasePdfRenderer, InvoicePdfRenderer
from .session_controller import ExportResult, SessionController, SessionState
from .view_state import SessionViewState

__all__ = [
    # Upload
    "FileUpload",
    "detect_file_kind",
    "format_file_size",
    # Sessione
    "EditSession",
    "SessionController",
    "SessionState",
    "ExportResult",
    "SessionViewState",
    # Eventi
    "Event",
    "EventBus",
    "EventType",
    # Registro campi
    "EDITABLE_PATHS",
    "FIELD_REGISTRY",
    "describe_registry",
    "field_values",
    "is_editable",
    # Export
    "ExportDocument",
    "project",
    "suggested_file_name",
    "BasePdfRenderer",
    "InvoicePdfRenderer",
]
