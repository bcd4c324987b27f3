"""DTO e helper per i file consegnati dal collaboratore di upload."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import PurePath
from typing import Optional, Union

XML_MIMETYPES = {"application/xml", "text/xml"}
PDF_MIMETYPES = {"application/pdf"}


@dataclass(frozen=True)
class FileUpload:
    file_name: str
    file_kind: str
    content: Union[str, bytes]

    @property
    def size(self) -> int:
        if isinstance(self.content, str):
            return len(self.content.encode("utf-8"))
        return len(self.content or b"")

    @classmethod
    def from_upload(
        cls, file_name: str, content: Union[str, bytes], mimetype: Optional[str] = None
    ) -> "FileUpload":
        return cls(
            file_name=file_name or "",
            file_kind=detect_file_kind(file_name, mimetype),
            content=content,
        )


def detect_file_kind(file_name: Optional[str], mimetype: Optional[str] = None) -> str:
    """
    Tipo di file: prima l'estensione, poi il MIME type.

    Restituisce "xml", "pdf" oppure "unknown".
    """
    suffix = PurePath(file_name or "").suffix.lower()
    if suffix == ".xml":
        return "xml"
    if suffix == ".pdf":
        return "pdf"

    normalized = (mimetype or "").split(";", 1)[0].strip().lower()
    if normalized in XML_MIMETYPES:
        return "xml"
    if normalized in PDF_MIMETYPES:
        return "pdf"
    return "unknown"


def format_file_size(size: int) -> str:
    """Dimensione leggibile (B, KB, MB) per messaggi e log."""
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"
