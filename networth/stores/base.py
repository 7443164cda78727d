"""
Slot-Backed Store Base

A store owns one slot: it loads it on construction, writes it through
after every mutation and replaces its in-memory state whenever the slot
is changed from outside (another tab or process).

Re-hydration is always a full replacement, never a merge. Anything
changed locally since the last external write is lost; the last external
write wins.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Optional
from uuid import UUID

import structlog

from networth.audit import AuditLogger
from networth.services.storage import SlotStorageInterface


ChangeListener = Callable[[], None]


class SlotBackedStore(ABC):
    """
    Shared load / persist / re-hydrate plumbing.

    Subclasses implement `_hydrate` (raw slot value -> state) and
    `_serialize` (state -> JSON-compatible value).
    """

    def __init__(
        self,
        storage: SlotStorageInterface,
        slot_key: str,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._slot_key = slot_key
        self._audit = audit_logger or AuditLogger()
        self._logger = structlog.get_logger().bind(slot=slot_key)
        self._listeners: list[ChangeListener] = []

        self._load(self._storage.load(slot_key, None))
        self._unsubscribe = self._storage.subscribe(slot_key, self._on_external_change)

    @property
    def slot_key(self) -> str:
        return self._slot_key

    @abstractmethod
    def _hydrate(self, value: Any) -> bool:
        """
        Replace in-memory state with the decoded slot value (None when absent).

        Returns:
            True if loading assigned ids, so the state must be written back
        """
        pass

    @abstractmethod
    def _serialize(self) -> Any:
        pass

    @abstractmethod
    def _size(self) -> int:
        """Number of entries, for re-hydration audit events."""
        pass

    def add_listener(self, listener: ChangeListener) -> Callable[[], None]:
        """
        Be called after every state change, local or external.

        Returns:
            A callable that removes the listener
        """
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def _changed(self) -> None:
        for listener in list(self._listeners):
            listener()

    def _persist(self, correlation_id: Optional[UUID] = None) -> bool:
        """Write the current state through. Failures are audited, never raised."""
        persisted = self._storage.save(self._slot_key, self._serialize())
        if not persisted:
            self._audit.log_storage_write_failed(self._slot_key, correlation_id)
        self._changed()
        return persisted

    def _load(self, value: Any) -> None:
        # Ids assigned while loading must reach the slot before anyone else loads it
        if self._hydrate(value) and not self._storage.save(self._slot_key, self._serialize()):
            self._audit.log_storage_write_failed(self._slot_key)

    def _on_external_change(self, value: Any) -> None:
        previous = self._size()
        self._load(value)
        self._audit.log_state_rehydrated(self._slot_key, previous, self._size())
        self._changed()

    def close(self) -> None:
        """Stop following external changes."""
        self._unsubscribe()
