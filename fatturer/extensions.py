"""
Modulo che contiene le estensioni condivise dell'applicazione (logging JSON).
"""

import json
import logging
import os
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from typing import Any, Dict

from flask import Flask


class JsonFormatter(logging.Formatter):
    """
    Formatter personalizzato che produce log in formato JSON.

    Campi principali:
    - timestamp: ISO 8601 (UTC)
    - level: livello di log (INFO, ERROR, ecc.)
    - logger: nome del logger
    - module: modulo sorgente
    - message: messaggio di log
    - extra: eventuali campi extra passati come extra={...}
    """

    # Attributi standard del LogRecord, esclusi da "extra"
    STANDARD_ATTRS = {
        "name", "msg", "args", "levelname", "levelno", "pathname", "filename",
        "module", "exc_info", "exc_text", "stack_info", "lineno", "funcName",
        "created", "msecs", "relativeCreated", "thread", "threadName",
        "processName", "process", "taskName", "message", "asctime",
    }

    def format(self, record: logging.LogRecord) -> str:
        log_record: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc)
            .isoformat()
            .replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "module": record.module,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_record["exc_info"] = self.formatException(record.exc_info)

        extra_fields = {
            key: value
            for key, value in record.__dict__.items()
            if key not in self.STANDARD_ATTRS
        }
        if extra_fields:
            log_record["extra"] = extra_fields

        return json.dumps(log_record, ensure_ascii=False, default=str)


def init_extensions(app: Flask) -> None:
    """
    Inizializza tutte le estensioni collegate all'app Flask.

    Questa funzione viene chiamata da create_app().
    """
    _init_logging(app)


def _init_logging(app: Flask) -> None:
    """
    Configura il logging applicativo:

    - handler su file con RotatingFileHandler (se LOG_TO_FILE)
    - handler su console (stream)
    - formatter JSON strutturato

    Gli eventi dei servizi (caricamento, errori di parsing, export PDF)
    arrivano qui tramite `log_structured_event`.
    """
    log_level_name = app.config.get("LOG_LEVEL", "INFO")
    log_level = getattr(logging, log_level_name.upper(), logging.INFO)
    json_formatter = JsonFormatter()

    handlers = []
    log_path = None
    if app.config.get("LOG_TO_FILE", True):
        log_dir = app.config.get("LOG_DIR")
        log_file_name = app.config.get("LOG_FILE_NAME", "app.log")
        os.makedirs(log_dir, exist_ok=True)
        log_path = os.path.join(log_dir, log_file_name)

        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=5 * 1024 * 1024,  # 5 MB
            backupCount=3,
            encoding="utf-8",
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(json_formatter)
        handlers.append(file_handler)

    # Handler su console (utile in dev / container)
    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(json_formatter)
    handlers.append(console_handler)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Evita handler duplicati se create_app viene chiamata più volte (es. in test)
    if not getattr(root_logger, "_json_logging_configured", False):
        for handler in list(root_logger.handlers):
            root_logger.removeHandler(handler)

        for handler in handlers:
            root_logger.addHandler(handler)
        root_logger._json_logging_configured = True  # type: ignore[attr-defined]

    app.logger.setLevel(log_level)

    app.logger.info(
        "Logging JSON inizializzato.",
        extra={
            "component": "logging",
            "log_path": log_path,
            "level": log_level_name,
        },
    )
