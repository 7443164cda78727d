"""Chat backend service."""

from networth.services.chat.client import ChatBackendClient, RemoteServiceError

__all__ = ["ChatBackendClient", "RemoteServiceError"]
