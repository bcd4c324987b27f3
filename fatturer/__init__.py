"""
Pacchetto principale dell'applicazione Flask.
"""

from flask import Flask, jsonify
from config import DevConfig
from .extensions import init_extensions


def create_app(config_class=DevConfig) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config_class)
    init_extensions(app)

    _init_session(app)
    _register_blueprints(app)

    app.logger.info("Applicazione Flask inizializzata.")

    @app.route("/health")
    def healthcheck():
        return jsonify({"status": "ok"}), 200

    return app


def _init_session(app: Flask) -> None:
    """Una sessione di lavoro per applicazione: bus, controller e stato vista condividono il bus."""
    from .api import SESSION_EXTENSION, VIEW_STATE_EXTENSION
    from .services import EventBus, InvoicePdfRenderer, SessionController, SessionViewState

    bus = EventBus()
    app.extensions[VIEW_STATE_EXTENSION] = SessionViewState(bus)
    app.extensions[SESSION_EXTENSION] = SessionController(
        bus,
        InvoicePdfRenderer(),
        default_file_name=app.config.get("EXPORT_DEFAULT_FILE_NAME", "Invoice.pdf"),
        render_in_thread=app.config.get("PDF_RENDER_IN_THREAD", True),
    )


def _register_blueprints(app: Flask) -> None:
    from .api import api_session_bp

    app.register_blueprint(api_session_bp, url_prefix="/api/session")
