#!/usr/bin/env python3
"""
Script di avvio e utilità per l'applicazione Fatturer.

Uso:
    python manage.py runserver                       # Avvia il server di sviluppo
    python manage.py export-pdf fattura.xml -o out.pdf
    python manage.py parse-debug fattura.xml         # Diagnostica del parsing
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path

from fatturer import create_app
from fatturer.api import SESSION_EXTENSION
from fatturer.errors import MalformedDocument
from fatturer.parsers.fatturapa_parser import _localname, map_invoice, parse_xml_document
from fatturer.services import FileUpload, format_file_size
from config import DevConfig

# ---------------------------------------------------------------------
# Logger CLI (fuori dal contesto Flask)
# ---------------------------------------------------------------------
cli_logger = logging.getLogger("manage_cli")
cli_logger.setLevel(logging.INFO)

if not cli_logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter("%(levelname)s: %(name)s: %(message)s")
    )
    cli_logger.addHandler(handler)


# ---------------------------------------------------------------------
# Comandi
# ---------------------------------------------------------------------
def run_server(app) -> None:
    """Avvia il server di sviluppo Flask (una sessione, un utente locale)."""
    host = os.environ.get("FLASK_RUN_HOST", "127.0.0.1")
    port = int(os.environ.get("FLASK_RUN_PORT", "5000"))
    debug = app.config.get("DEBUG", False)

    app.logger.info("Avvio del server su http://%s:%s", host, port)
    # Il controller di sessione è single-thread
    app.run(host=host, port=port, debug=debug, threaded=False)


def export_pdf(app, xml_path: Path, output: Path | None) -> int:
    """Carica un XML nella sessione dell'app ed esporta il PDF su disco."""
    if not xml_path.is_file():
        cli_logger.error("File non trovato: %s", xml_path)
        return 1

    controller = app.extensions[SESSION_EXTENSION]

    async def read() -> FileUpload:
        return FileUpload.from_upload(xml_path.name, xml_path.read_bytes())

    async def run():
        if not await controller.load_file(read):
            return None
        return await controller.export_async()

    result = asyncio.run(run())
    if result is None:
        cli_logger.error("Caricamento fallito: %s", controller.last_error)
        return 1
    if not result.success:
        cli_logger.error("Export fallito: %s", result.error)
        return 1

    target = output or xml_path.with_name(result.file_name)
    target.write_bytes(result.content)
    cli_logger.info("PDF scritto in %s (%s)", target, format_file_size(len(result.content)))
    return 0


def parse_debug(xml_path: Path) -> int:
    """Stampa una diagnostica del parsing FatturaPA del file indicato."""
    if not xml_path.is_file():
        print(f"File non trovato: {xml_path}")
        return 1

    data = xml_path.read_bytes()
    print(f"file={xml_path.name}")
    print(f"size={len(data)} bytes")
    print(f"head_bytes={data[:64]!r}")

    try:
        root = parse_xml_document(data)
    except MalformedDocument as exc:
        print(f"PARSE ERROR: {exc}")
        return 1

    print(f"root_tag={root.tag}")
    print(f"localname={_localname(root.tag)}")

    invoice = map_invoice(root)
    print(f"numero={invoice.header.number or '-'}")
    print(f"data={invoice.header.date or '-'}")
    print(f"fornitore={invoice.supplier.name or '-'}")
    print(f"cliente={invoice.customer.name or '-'}")
    print(f"totale={invoice.total_amount or '-'} {invoice.currency}".rstrip())
    print(f"righe={len(invoice.lines)} riepiloghi={len(invoice.summary)}")
    return 0


# ---------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------
def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="Gestione dell'applicazione Fatturer (FatturaPA -> PDF)."
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("runserver", help="Avvia il server di sviluppo.")

    export_parser = subparsers.add_parser("export-pdf", help="Esporta in PDF un file XML.")
    export_parser.add_argument("xml", type=Path, help="File FatturaPA XML.")
    export_parser.add_argument("-o", "--output", type=Path, default=None, help="PDF di destinazione.")

    debug_parser = subparsers.add_parser("parse-debug", help="Diagnostica del parsing XML.")
    debug_parser.add_argument("xml", type=Path, help="File FatturaPA XML.")

    args = parser.parse_args(argv)

    if args.command == "parse-debug":
        return parse_debug(args.xml)

    # Crea l'app con configurazione di sviluppo
    app = create_app(DevConfig)

    if args.command == "runserver":
        run_server(app)
        return 0
    return export_pdf(app, args.xml, args.output)


if __name__ == "__main__":
    sys.exit(main())
