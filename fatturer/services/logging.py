"""Helper per logging strutturato JSON nei servizi applicativi."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

_logger = logging.getLogger("fatturer")


def log_structured_event(
    action: str,
    *,
    message: Optional[str] = None,
    level: str = "info",
    **fields: Any,
) -> None:
    """Registra un evento strutturato sfruttando il logger configurato in ``extensions``.

    Il formatter JSON è installato sul root logger da ``fatturer.extensions``;
    i campi passati come keyword finiscono nella chiave ``extra`` del record.
    Eventuali problemi di serializzazione non interrompono il flusso applicativo.
    """

    log_method = getattr(_logger, level.lower(), _logger.info)

    payload: Dict[str, Any] = {"action": action}
    payload.update(fields)

    try:
        log_method(message or "Structured service event", extra=payload)
    except Exception:
        # Il logging non deve mai interrompere il flusso di business
        _logger.debug("Logging strutturato fallito", exc_info=True)
