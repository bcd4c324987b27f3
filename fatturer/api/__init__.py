"""
Pacchetto per le API JSON usate dal frontend.

Contiene:
- api_session_bp -> sessione di lavoro sulla fattura (upload, modifica, reset, export)
"""

from .api_session import api_session_bp, SESSION_EXTENSION, VIEW_STATE_EXTENSION

__all__ = [
    "api_session_bp",
    "SESSION_EXTENSION",
    "VIEW_STATE_EXTENSION",
]
