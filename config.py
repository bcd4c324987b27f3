"""
Modulo di configurazione per l'applicazione Flask.
"""

import os
from pathlib import Path


BASE_DIR = Path(__file__).resolve().parent


def _env_flag(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    """Configurazione base, comune a tutti gli ambienti."""

    # Chiave segreta: in produzione deve essere sovrascritta da variabile d'ambiente
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # --- UPLOAD ----------------------------------------------------------------
    # Limite massimo dimensione file upload (5 MB, come il componente di upload)
    MAX_CONTENT_LENGTH = int(os.environ.get("MAX_CONTENT_LENGTH", 5 * 1024 * 1024))

    # Tipi accettati dal componente di upload; il controller carica solo XML
    ALLOWED_UPLOAD_EXTENSIONS = {"xml", "pdf"}

    # --- EXPORT PDF ----------------------------------------------------------
    EXPORT_DEFAULT_FILE_NAME = os.environ.get("EXPORT_DEFAULT_FILE_NAME", "Invoice.pdf")
    PDF_RENDER_IN_THREAD = _env_flag("PDF_RENDER_IN_THREAD", True)

    # --- LOGGING -------------------------------------------------------------
    LOG_DIR = os.environ.get("LOG_DIR", str(BASE_DIR / "logs"))
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    LOG_FILE_NAME = os.environ.get("LOG_FILE_NAME", "app.log")
    LOG_TO_FILE = _env_flag("LOG_TO_FILE", True)


class DevConfig(Config):
    """Configurazione per ambiente di sviluppo."""
    DEBUG = True
    ENV = "development"
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "DEBUG")


class ProdConfig(Config):
    """Configurazione per ambiente di produzione."""
    DEBUG = False
    ENV = "production"
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")


class TestConfig(Config):
    """Configurazione per i test: niente file di log, rendering nel thread chiamante."""
    TESTING = True
    DEBUG = False
    LOG_LEVEL = "DEBUG"
    LOG_TO_FILE = False
    PDF_RENDER_IN_THREAD = False
