"""Services package."""

from networth.services.chat import ChatBackendClient, RemoteServiceError
from networth.services.storage import (
    BaseSlotStorage,
    FileSlotStorage,
    InMemorySlotStorage,
    SerializationError,
    SharedStorageArea,
    SlotStorageInterface,
    StorageError,
    StorageQuotaExceededError,
)

__all__ = [
    # Chat backend
    "ChatBackendClient",
    "RemoteServiceError",
    # Storage services
    "BaseSlotStorage",
    "FileSlotStorage",
    "InMemorySlotStorage",
    "SerializationError",
    "SharedStorageArea",
    "SlotStorageInterface",
    "StorageError",
    "StorageQuotaExceededError",
]
