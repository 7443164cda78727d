"""
Chat Transcript Store

The conversation so far, persisted in its own slot so it survives a
reload and follows other tabs.
"""

from typing import Any, Optional

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from networth.audit import AuditLogger
from networth.models.chat import ChatMessage, ChatSender
from networth.services.storage import SlotStorageInterface
from networth.stores.base import SlotBackedStore


_TRANSCRIPT = TypeAdapter(list[ChatMessage])


class ChatHistoryStore(SlotBackedStore):
    """Ordered, persisted list of chat messages."""

    def __init__(
        self,
        storage: SlotStorageInterface,
        slot_key: str = "chat_messages",
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._messages: list[ChatMessage] = []
        super().__init__(storage, slot_key, audit_logger)

    def _hydrate(self, value: Any) -> bool:
        if value is None:
            self._messages = []
            return False
        try:
            self._messages = _TRANSCRIPT.validate_python(value)
        except PydanticValidationError as e:
            self._logger.warning("stored_transcript_invalid", error_count=e.error_count())
            self._messages = []
            return False
        # Messages stored without an id were just given one
        return any(isinstance(item, dict) and "id" not in item for item in value)

    def _serialize(self) -> list[dict]:
        return [
            message.model_dump(mode="json", by_alias=True, exclude_none=True)
            for message in self._messages
        ]

    def _size(self) -> int:
        return len(self._messages)

    @property
    def messages(self) -> list[ChatMessage]:
        return list(self._messages)

    def add_message(
        self,
        sender: ChatSender,
        text: str,
        is_loading: Optional[bool] = None,
    ) -> ChatMessage:
        """Append a message with a fresh id and timestamp."""
        message = ChatMessage(sender=sender, text=text, is_loading=is_loading)
        self._messages.append(message)
        self._persist()
        return message

    def update_message(
        self,
        message_id: str,
        is_loading: bool,
        text: Optional[str] = None,
    ) -> Optional[ChatMessage]:
        """
        Change a message's loading flag and, if given, its text.

        Returns:
            The updated message, or None if it is no longer in the
            transcript (e.g. another tab cleared it)
        """
        for index, message in enumerate(self._messages):
            if message.id == message_id:
                update = {"is_loading": is_loading}
                if text:
                    update["text"] = text
                updated = message.model_copy(update=update)
                self._messages[index] = updated
                self._persist()
                return updated
        return None

    def clear(self) -> None:
        self._messages = []
        self._persist()
