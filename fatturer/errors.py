"""
Eccezioni applicative.

Solo il SessionController trasforma queste eccezioni in messaggi per l'utente:
parser e proiezione export si limitano a sollevarle.
"""

from __future__ import annotations


class FatturerError(Exception):
    """Errore generico dell'applicazione."""


class MalformedDocument(FatturerError):
    """Il contenuto caricato non è XML parsabile."""


class UnsupportedFileKind(FatturerError):
    """Il file caricato non è un XML."""

    def __init__(self, file_kind: str, file_name: str = "") -> None:
        self.file_kind = file_kind
        self.file_name = file_name
        super().__init__(f"Tipo di file non supportato: {file_kind or 'sconosciuto'}")


class NoDataToExport(FatturerError):
    """Export richiesto senza una fattura caricata."""


class FieldNotEditable(FatturerError):
    """Tentativo di modifica di un campo non modificabile (mai mostrato all'utente)."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Campo non modificabile: {path}")


class UnknownFieldPath(FatturerError):
    """Percorso di campo non risolvibile nel modello Invoice."""


class PdfRenderError(FatturerError):
    """Errore durante la generazione del PDF."""
