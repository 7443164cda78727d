"""
Abstract Slot Storage Interface

DESIGN DECISION: Persistence is a generic keyed blob store with change
notification. It knows nothing about accounts. This allows us to:
1. Reuse it for the account collection, the user profile and the chat
   transcript
2. Use a shared in-memory area for tests and for several "tabs" in one
   process
3. Swap in file-backed storage without touching the stores

Only implementations of this interface touch the physical storage.
Everything else goes through a store.

FAILURE POLICY:
- Corrupt or absent values load as the caller's fallback
- Write failures are logged and reported as False, never raised
"""

import json
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

import structlog


# Receives the decoded new value, or None when the slot was removed or
# the external write could not be decoded.
ExternalChangeCallback = Callable[[Any], None]

Unsubscribe = Callable[[], None]


class SlotStorageInterface(ABC):
    """
    Abstract interface for keyed, JSON-serialized slot storage.

    Any storage implementation (shared memory area, JSON files, ...)
    must implement these methods.
    """

    @abstractmethod
    def load(self, key: str, fallback: Any = None) -> Any:
        """
        Read and decode the value stored under a key.

        Args:
            key: Slot key
            fallback: Returned when the slot is absent or corrupt

        Returns:
            The decoded value or the fallback
        """
        pass

    @abstractmethod
    def save(self, key: str, value: Any) -> bool:
        """
        Encode and write a value.

        Args:
            key: Slot key
            value: JSON-serializable value

        Returns:
            True if written, False if the write failed (the failure is logged)
        """
        pass

    @abstractmethod
    def remove(self, key: str) -> bool:
        """
        Delete a slot.

        Returns:
            True if the slot existed
        """
        pass

    @abstractmethod
    def subscribe(self, key: str, on_external_change: ExternalChangeCallback) -> Unsubscribe:
        """
        Be notified when the slot is changed from outside this storage instance.

        Writes made through this instance never notify its own subscribers.

        Args:
            key: Slot key
            on_external_change: Called with the decoded new value (or None)

        Returns:
            A callable that removes the subscription
        """
        pass


class BaseSlotStorage(SlotStorageInterface):
    """
    Shared encode/decode, failure handling and subscriber bookkeeping.

    Implementations only provide raw string reads and writes.
    """

    def __init__(self):
        self._subscribers: dict[str, list[ExternalChangeCallback]] = {}
        self._logger = structlog.get_logger()

    @abstractmethod
    def _read_raw(self, key: str) -> Optional[str]:
        """Raw stored string, or None if the slot is absent."""
        pass

    @abstractmethod
    def _write_raw(self, key: str, raw: str) -> None:
        """
        Store a raw string.

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def _delete_raw(self, key: str) -> bool:
        pass

    def _encode(self, value: Any) -> str:
        try:
            return json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise SerializationError(f"Value is not JSON-serializable: {e}") from e

    def _decode(self, key: str, raw: Optional[str], fallback: Any) -> Any:
        if raw is None:
            return fallback
        try:
            return json.loads(raw)
        except ValueError as e:
            self._logger.warning("slot_corrupt", key=key, error=str(e))
            return fallback

    def load(self, key: str, fallback: Any = None) -> Any:
        try:
            raw = self._read_raw(key)
        except StorageError as e:
            self._logger.error("slot_read_failed", key=key, error=str(e))
            return fallback
        return self._decode(key, raw, fallback)

    def save(self, key: str, value: Any) -> bool:
        try:
            self._write_raw(key, self._encode(value))
        except StorageError as e:
            # Never raise: the caller's mutation has already happened
            self._logger.error("slot_write_failed", key=key, error=str(e))
            return False
        return True

    def remove(self, key: str) -> bool:
        try:
            return self._delete_raw(key)
        except StorageError as e:
            self._logger.error("slot_remove_failed", key=key, error=str(e))
            return False

    def subscribe(self, key: str, on_external_change: ExternalChangeCallback) -> Unsubscribe:
        callbacks = self._subscribers.setdefault(key, [])
        callbacks.append(on_external_change)

        def unsubscribe() -> None:
            if on_external_change in callbacks:
                callbacks.remove(on_external_change)

        return unsubscribe

    def _notify(self, key: str, raw: Optional[str]) -> None:
        """Deliver an external change to this instance's subscribers."""
        callbacks = list(self._subscribers.get(key, ()))
        if not callbacks:
            return
        value = self._decode(key, raw, None)
        self._logger.debug("slot_changed_externally", key=key, subscribers=len(callbacks))
        for callback in callbacks:
            try:
                callback(value)
            except Exception:
                # Delivery continues to the remaining subscribers
                self._logger.exception("slot_subscriber_failed", key=key)


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class StorageQuotaExceededError(StorageError):
    """The write would exceed the storage area's quota."""
    pass


class SerializationError(StorageError):
    """The value could not be encoded as JSON."""
    pass
