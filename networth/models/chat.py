"""Chat transcript models."""

import time
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ChatSender(str, Enum):
    USER = "user"
    BOT = "bot"


def _now_ms() -> int:
    return int(time.time() * 1000)


class ChatMessage(BaseModel):
    """
    One turn of the conversation.

    `is_loading` marks the bot placeholder shown while a reply is pending.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(default_factory=lambda: str(uuid4()))
    sender: ChatSender
    text: str
    timestamp: int = Field(
        default_factory=_now_ms,
        description="Unix timestamp in milliseconds"
    )
    is_loading: Optional[bool] = None
