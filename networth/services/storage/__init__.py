"""
Storage Services Package

Provides the abstract slot storage interface and two implementations:
a shared in-memory area (tab-lifetime, multi-context) and JSON files.
"""

from networth.services.storage.interface import (
    BaseSlotStorage,
    ExternalChangeCallback,
    SerializationError,
    SlotStorageInterface,
    StorageError,
    StorageQuotaExceededError,
    Unsubscribe,
)
from networth.services.storage.file_store import FileSlotStorage
from networth.services.storage.memory import InMemorySlotStorage, SharedStorageArea

__all__ = [
    # Interfaces
    "BaseSlotStorage",
    "ExternalChangeCallback",
    "SlotStorageInterface",
    "Unsubscribe",
    # Exceptions
    "SerializationError",
    "StorageError",
    "StorageQuotaExceededError",
    # Implementations
    "FileSlotStorage",
    "InMemorySlotStorage",
    "SharedStorageArea",
]
