"""
Event bus sincrono per le notifiche di sessione.

Il modello è single-thread: `publish` invoca gli handler registrati nell'ordine
di sottoscrizione, nello stesso "thread logico" del chiamante. Un handler che
fallisce viene loggato e non impedisce l'esecuzione degli altri.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)


class EventType(str, Enum):
    """Tipi di evento emessi da EditSession e SessionController."""

    DATA_CHANGED = "data_changed"
    INVOICE_LOADED = "invoice_loaded"
    FIELDS_RESET = "fields_reset"
    ERROR_OCCURRED = "error_occurred"
    EXPORT_ENABLED = "export_enabled"
    STATE_CHANGED = "state_changed"


@dataclass(frozen=True)
class Event:
    event_type: str
    data: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


EventHandler = Callable[[Event], None]


def _key(event_type) -> str:
    return event_type.value if isinstance(event_type, Enum) else str(event_type)


class EventBus:
    def __init__(self) -> None:
        self._handlers: Dict[str, List[EventHandler]] = defaultdict(list)

    def subscribe(self, event_type: str, handler: EventHandler) -> None:
        """Registra un handler per il tipo di evento indicato."""
        event_type = _key(event_type)
        if handler not in self._handlers[event_type]:
            self._handlers[event_type].append(handler)
            logger.debug("Handler %s subscribed to event '%s'", handler, event_type)

    def unsubscribe(self, event_type: str, handler: EventHandler) -> None:
        event_type = _key(event_type)
        handlers = self._handlers.get(event_type)
        if handlers and handler in handlers:
            handlers.remove(handler)
        if not handlers:
            self._handlers.pop(event_type, None)

    def publish(self, event_type: str, **data: Any) -> Event:
        event = Event(event_type=_key(event_type), data=data)
        handlers = tuple(self._handlers.get(event.event_type, ()))
        if not handlers:
            logger.debug("No handlers registered for event '%s'", event.event_type)
            return event

        for handler in handlers:
            try:
                handler(event)
            except Exception:  # noqa: BLE001 - un observer non deve bloccare gli altri
                logger.exception(
                    "Error while executing handler %s for event '%s'",
                    handler,
                    event.event_type,
                )
        return event
