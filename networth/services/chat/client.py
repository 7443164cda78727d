"""
Chat Backend Client

The assistant runs behind a small HTTP service. Each request carries the
whole context: the user profile, every account and the transcript so
far. The service keeps no state between requests.

    POST {base_url}/chat
    {"user_details": {...} | null, "accounts": [...], "chatMessages": [...]}
    -> {"response": "..."}

Any failure (connection, non-2xx status, malformed body) is raised as
RemoteServiceError. Callers turn it into a user-visible apology.
"""

from typing import Any, Optional, Sequence

import requests
import structlog

from networth.models.account import BaseAccount
from networth.models.chat import ChatMessage
from networth.models.user import UserDetails


class RemoteServiceError(Exception):
    """The chat backend could not produce a response."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ChatBackendClient:
    """
    Thin wrapper around the chat endpoint.

    Args:
        base_url: Service root, without the /chat path
        timeout: Seconds before giving up; None waits indefinitely
        session: requests.Session to reuse (injected in tests)
    """

    def __init__(
        self,
        base_url: str,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self._url = f"{base_url.rstrip('/')}/chat"
        self._timeout = timeout
        self._session = session or requests.Session()
        self._logger = structlog.get_logger()

    @property
    def url(self) -> str:
        return self._url

    @staticmethod
    def build_payload(
        user_details: Optional[UserDetails],
        accounts: Sequence[BaseAccount],
        chat_messages: Sequence[ChatMessage],
    ) -> dict[str, Any]:
        """Request body for one chat turn."""
        return {
            "user_details": user_details.model_dump(mode="json") if user_details else None,
            "accounts": [
                account.model_dump(mode="json", by_alias=True) for account in accounts
            ],
            "chatMessages": [
                message.model_dump(mode="json", by_alias=True, exclude_none=True)
                for message in chat_messages
            ],
        }

    def send(
        self,
        user_details: Optional[UserDetails],
        accounts: Sequence[BaseAccount],
        chat_messages: Sequence[ChatMessage],
    ) -> str:
        """
        Ask the backend for the next bot reply.

        Returns:
            The reply text

        Raises:
            RemoteServiceError: On any transport or protocol failure
        """
        payload = self.build_payload(user_details, accounts, chat_messages)
        self._logger.debug(
            "chat_request",
            url=self._url,
            accounts=len(payload["accounts"]),
            messages=len(payload["chatMessages"]),
        )

        try:
            resp = self._session.post(self._url, json=payload, timeout=self._timeout)
        except requests.RequestException as e:
            raise RemoteServiceError(f"Chat backend unreachable: {e}") from e

        if not resp.ok:
            raise RemoteServiceError(
                f"Chat backend returned HTTP {resp.status_code}",
                status_code=resp.status_code,
            )

        try:
            data = resp.json()
        except ValueError as e:
            raise RemoteServiceError("Chat backend returned a non-JSON body") from e

        reply = data.get("response") if isinstance(data, dict) else None
        if not isinstance(reply, str):
            raise RemoteServiceError("Chat backend response has no 'response' text")

        return reply

    def close(self) -> None:
        self._session.close()
