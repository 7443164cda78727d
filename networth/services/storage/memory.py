"""
In-Memory Slot Storage

A SharedStorageArea models one browser session's storage: it lives as
long as the process and is shared by every execution context attached
to it. Each InMemorySlotStorage is one such context (one "tab").

When one context writes a key, every OTHER attached context is told,
like a browser `storage` event. The writer is never notified of its own
writes.
"""

from typing import Optional

from networth.services.storage.interface import (
    BaseSlotStorage,
    StorageQuotaExceededError,
)


class SharedStorageArea:
    """
    Key/value strings shared by several storage contexts.

    Args:
        quota_bytes: Maximum total size of keys and values (UTF-8).
                     None means unlimited.
    """

    def __init__(self, quota_bytes: Optional[int] = None):
        self._items: dict[str, str] = {}
        self._contexts: list["InMemorySlotStorage"] = []
        self._quota_bytes = quota_bytes

    def attach(self, context: "InMemorySlotStorage") -> None:
        if context not in self._contexts:
            self._contexts.append(context)

    def detach(self, context: "InMemorySlotStorage") -> None:
        if context in self._contexts:
            self._contexts.remove(context)

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def _size_with(self, key: str, raw: str) -> int:
        items = dict(self._items)
        items[key] = raw
        return sum(len(k.encode("utf-8")) + len(v.encode("utf-8")) for k, v in items.items())

    def set_item(
        self,
        key: str,
        raw: str,
        origin: Optional["InMemorySlotStorage"] = None,
    ) -> None:
        """
        Store a value and notify every context except the origin.

        Raises:
            StorageQuotaExceededError: The area would exceed its quota
        """
        if self._quota_bytes is not None and self._size_with(key, raw) > self._quota_bytes:
            raise StorageQuotaExceededError(
                f"Writing {key!r} would exceed the {self._quota_bytes} byte quota"
            )
        self._items[key] = raw
        self._broadcast(key, raw, origin)

    def remove_item(
        self,
        key: str,
        origin: Optional["InMemorySlotStorage"] = None,
    ) -> bool:
        if key not in self._items:
            return False
        del self._items[key]
        self._broadcast(key, None, origin)
        return True

    def _broadcast(
        self,
        key: str,
        raw: Optional[str],
        origin: Optional["InMemorySlotStorage"],
    ) -> None:
        for context in list(self._contexts):
            if context is not origin:
                context._notify(key, raw)


class InMemorySlotStorage(BaseSlotStorage):
    """
    One execution context's view of a SharedStorageArea.

    Without an explicit area the storage gets a private one, which
    behaves like a single open tab.
    """

    def __init__(self, area: Optional[SharedStorageArea] = None):
        super().__init__()
        self._area = area if area is not None else SharedStorageArea()
        self._area.attach(self)

    @property
    def area(self) -> SharedStorageArea:
        return self._area

    def close(self) -> None:
        """Detach from the area; no further external changes are delivered."""
        self._area.detach(self)

    def _read_raw(self, key: str) -> Optional[str]:
        return self._area.get_item(key)

    def _write_raw(self, key: str, raw: str) -> None:
        self._area.set_item(key, raw, origin=self)

    def _delete_raw(self, key: str) -> bool:
        return self._area.remove_item(key, origin=self)
