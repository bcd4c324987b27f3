"""
API JSON per la sessione di lavoro sulla fattura.

Endpoint principali:

GET    /api/session/          Stato della sessione e della vista.
POST   /api/session/upload    Caricamento file (multipart, campo "file").
GET    /api/session/fields    Registro dei campi (sezioni, etichette, modificabilità).
POST   /api/session/fields    Modifica di un campo: {"path": "...", "value": "..."}.
POST   /api/session/reset     Annulla le modifiche.
POST   /api/session/export    Download del PDF.
DELETE /api/session/          Svuota la sessione.
"""

from __future__ import annotations

from io import BytesIO
from pathlib import PurePath

from flask import Blueprint, current_app, jsonify, request, send_file
from werkzeug.exceptions import RequestEntityTooLarge

from fatturer.services import (
    FileUpload,
    SessionController,
    SessionViewState,
    describe_registry,
    format_file_size,
)

api_session_bp = Blueprint("api_session", __name__)

SESSION_EXTENSION = "fatturer.session"
VIEW_STATE_EXTENSION = "fatturer.view_state"


def _controller() -> SessionController:
    return current_app.extensions[SESSION_EXTENSION]


def _view_state() -> SessionViewState:
    return current_app.extensions[VIEW_STATE_EXTENSION]


def _envelope(success: bool, message: str, payload=None, status: int = 200):
    return jsonify({"success": success, "message": message, "payload": payload}), status


def _state_payload() -> dict:
    return {"session": _controller().to_dict(), "view": _view_state().to_dict()}


@api_session_bp.route("/", methods=["GET"])
def api_get_session():
    return _envelope(True, "Stato sessione.", _state_payload())


@api_session_bp.route("/upload", methods=["POST"])
def api_upload_file():
    """
    Carica un file FatturaPA.

    I controlli di base (file presente, tipo riconosciuto) sono quelli del
    componente di upload: un loro fallimento arriva al controller come errore
    di caricamento. Un PDF supera questi controlli ma viene rifiutato dal
    controller, che accetta solo XML.
    """
    controller = _controller()
    file = request.files.get("file")
    if file is None or not file.filename:
        controller.on_error("Nessun file selezionato")
        return _envelope(False, controller.last_error, _state_payload(), 400)

    allowed = current_app.config.get("ALLOWED_UPLOAD_EXTENSIONS", {"xml", "pdf"})
    upload = FileUpload.from_upload(file.filename, file.read(), file.mimetype)
    if upload.file_kind not in allowed:
        extensions = ", ".join(sorted(ext.upper() for ext in allowed))
        controller.on_error(f"Tipo di file non supportato. Carica un file {extensions}.")
        return _envelope(False, controller.last_error, _state_payload(), 400)

    current_app.logger.info(
        "File ricevuto",
        extra={
            "component": "api_session",
            "upload_name": PurePath(upload.file_name).name,
            "upload_size": format_file_size(upload.size),
            "file_kind": upload.file_kind,
        },
    )

    if not controller.on_file_loaded(upload):
        return _envelope(False, controller.last_error or "Caricamento non riuscito.", _state_payload(), 422)

    return _envelope(True, "Fattura caricata con successo.", _state_payload())


@api_session_bp.route("/fields", methods=["GET"])
def api_list_fields():
    return _envelope(True, "Registro campi.", {"sections": describe_registry()})


@api_session_bp.route("/fields", methods=["POST"])
def api_edit_field():
    """
    Modifica un campo della fattura caricata.

    Body JSON atteso:
    {
      "path": "customer.address",
      "value": "Via Nuova 1"
    }

    Un campo non modificabile non è un errore: la richiesta viene ignorata e
    `payload.applied` vale false.
    """
    data = request.get_json(silent=True) or {}
    path = data.get("path")
    if not path or not isinstance(path, str):
        return _envelope(False, "Parametro 'path' mancante.", None, 400)

    value = data.get("value")
    applied = _controller().edit_field(path, "" if value is None else str(value))
    message = "Campo aggiornato." if applied else "Nessuna modifica applicata."
    payload = _state_payload()
    payload["applied"] = applied
    return _envelope(True, message, payload)


@api_session_bp.route("/reset", methods=["POST"])
def api_reset_changes():
    if not _controller().reset_changes():
        return _envelope(False, "Nessuna fattura caricata.", _state_payload(), 409)
    return _envelope(True, "Modifiche annullate.", _state_payload())


@api_session_bp.route("/export", methods=["POST"])
def api_export_pdf():
    result = _controller().export()
    if not result.success:
        return _envelope(False, result.error, _state_payload(), 409)

    return send_file(
        BytesIO(result.content),
        mimetype="application/pdf",
        as_attachment=True,
        download_name=result.file_name,
    )


@api_session_bp.route("/", methods=["DELETE"])
def api_clear_session():
    _controller().clear()
    return _envelope(True, "Sessione svuotata.", _state_payload())


@api_session_bp.errorhandler(RequestEntityTooLarge)
def handle_file_too_large(error):
    limit = current_app.config.get("MAX_CONTENT_LENGTH") or 0
    _controller().on_error(f"Il file è troppo grande. La dimensione massima è {format_file_size(limit)}.")
    return _envelope(False, _controller().last_error, _state_payload(), 413)
