"""
Stato di modifica della fattura caricata.

`EditSession` conserva:
- `original`: copia profonda congelata della fattura mappata
- `working`: copia modificabile, scritta solo tramite `set`
- `modified_paths`: percorsi toccati dall'utente

Ogni `set`/`reset_to_original` riuscito pubblica `data_changed` sul bus, così
vista ed export reagiscono alla modifica senza che la sessione li conosca.
"""

from __future__ import annotations

import copy
from typing import Any, Optional, Set

from fatturer.errors import FieldNotEditable
from fatturer.models import Invoice
from fatturer.services.events import EventBus, EventType
from fatturer.services.field_registry import is_editable, resolve_path


class EditSession:
    def __init__(self, invoice: Invoice, *, bus: Optional[EventBus] = None) -> None:
        self._original = copy.deepcopy(invoice)
        self._working = copy.deepcopy(invoice)
        self._modified_paths: Set[str] = set()
        self._bus = bus

    @classmethod
    def load(cls, invoice: Invoice, *, bus: Optional[EventBus] = None) -> "EditSession":
        return cls(invoice, bus=bus)

    # ------------------------------------------------------------------
    # Lettura
    # ------------------------------------------------------------------

    @property
    def original(self) -> Invoice:
        """Copia della fattura al caricamento (l'originale interno non è esposto)."""
        return copy.deepcopy(self._original)

    @property
    def modified_paths(self) -> frozenset:
        return frozenset(self._modified_paths)

    @property
    def is_modified(self) -> bool:
        return bool(self._modified_paths)

    def get(self, path: str) -> str:
        """Valore corrente di `path`; "" se il percorso non risolve una foglia."""
        value = resolve_path(self._working, path)
        return value if isinstance(value, str) else ""

    def current_invoice(self) -> Invoice:
        """Copia difensiva di `working`: le modifiche passano solo da `set`."""
        return copy.deepcopy(self._working)

    snapshot = current_invoice

    # ------------------------------------------------------------------
    # Scrittura
    # ------------------------------------------------------------------

    def set(self, path: str, value: str) -> None:
        """
        Scrive `value` in `working`.

        Solleva `FieldNotEditable` se il registro non marca `path` come
        modificabile; in quel caso stato e `modified_paths` restano invariati.
        """
        if not is_editable(path):
            raise FieldNotEditable(path)

        _assign(self._working, path, "" if value is None else str(value))
        self._modified_paths.add(path)
        self._notify()

    def reset_to_original(self) -> None:
        self._working = copy.deepcopy(self._original)
        self._modified_paths.clear()
        self._notify()

    def _notify(self) -> None:
        if self._bus is None:
            return
        self._bus.publish(
            EventType.DATA_CHANGED,
            invoice=self.current_invoice(),
            modified_paths=sorted(self._modified_paths),
        )


# --- Funzioni Helper ---


def _assign(obj: Any, path: str, value: str) -> None:
    """Imposta il valore seguendo il percorso, creando i livelli intermedi assenti."""
    keys = path.split(".")
    last_key = keys.pop()
    current = obj
    for key in keys:
        if isinstance(current, dict):
            current = current.setdefault(key, {})
            continue
        child = getattr(current, key, None)
        if child is None:
            child = {}
            setattr(current, key, child)
        current = child

    if isinstance(current, dict):
        current[last_key] = value
    else:
        setattr(current, last_key, value)
