from __future__ import annotations

import manage


def test_parse_debug_prints_summary(tmp_path, sample_xml, capsys):
    xml_path = tmp_path / "fattura.xml"
    xml_path.write_text(sample_xml, encoding="utf-8")

    assert manage.main(["parse-debug", str(xml_path)]) == 0

    output = capsys.readouterr().out
    assert "localname=FatturaElettronica" in output
    assert "numero=FT/2024/001" in output
    assert "righe=2 riepiloghi=1" in output


def test_parse_debug_reports_parse_errors(tmp_path, capsys):
    xml_path = tmp_path / "rotto.xml"
    xml_path.write_bytes(b"<FatturaElettronica>")

    assert manage.main(["parse-debug", str(xml_path)]) == 1
    assert "PARSE ERROR" in capsys.readouterr().out


def test_export_pdf_writes_file(app, tmp_path, sample_xml):
    xml_path = tmp_path / "fattura.xml"
    xml_path.write_text(sample_xml, encoding="utf-8")
    output = tmp_path / "out.pdf"

    assert manage.export_pdf(app, xml_path, output) == 0
    assert output.read_bytes().startswith(b"%PDF")


def test_export_pdf_default_name(app, tmp_path, sample_xml):
    xml_path = tmp_path / "fattura.xml"
    xml_path.write_text(sample_xml, encoding="utf-8")

    assert manage.export_pdf(app, xml_path, None) == 0
    assert (tmp_path / "Invoice_FT_2024_001.pdf").is_file()


def test_export_pdf_missing_file(app, tmp_path):
    assert manage.export_pdf(app, tmp_path / "assente.xml", None) == 1
