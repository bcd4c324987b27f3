"""DTO condivisi tra API e servizi."""

from .file_upload import FileUpload, detect_file_kind, format_file_size

__all__ = ["FileUpload", "detect_file_kind", "format_file_size"]
