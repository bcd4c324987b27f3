from __future__ import annotations

import pytest

from fatturer.services.dto import FileUpload, detect_file_kind, format_file_size


@pytest.mark.parametrize(
    "file_name, mimetype, expected",
    [
        ("fattura.xml", None, "xml"),
        ("FATTURA.XML", "application/octet-stream", "xml"),
        ("scansione.pdf", None, "pdf"),
        ("senza_estensione", "text/xml; charset=utf-8", "xml"),
        ("senza_estensione", "application/pdf", "pdf"),
        ("note.txt", "text/plain", "unknown"),
        (None, None, "unknown"),
    ],
)
def test_detect_file_kind(file_name, mimetype, expected):
    assert detect_file_kind(file_name, mimetype) == expected


def test_from_upload_detects_kind_and_size():
    upload = FileUpload.from_upload("fattura.xml", "<a>è</a>")
    assert upload.file_kind == "xml"
    assert upload.size == len("<a>è</a>".encode("utf-8"))


@pytest.mark.parametrize(
    "size, expected",
    [(512, "512 B"), (2048, "2.0 KB"), (5 * 1024 * 1024, "5.0 MB")],
)
def test_format_file_size(size, expected):
    assert format_file_size(size) == expected
