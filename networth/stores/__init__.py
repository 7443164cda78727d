"""Slot-backed stores: accounts, user profile and chat transcript."""

from networth.stores.accounts import (
    DUPLICATE_ID_MESSAGE,
    AccountStore,
    MutationOutcome,
    MutationResult,
)
from networth.stores.base import SlotBackedStore
from networth.stores.chat_history import ChatHistoryStore
from networth.stores.user_details import UserDetailsStore

__all__ = [
    "DUPLICATE_ID_MESSAGE",
    "AccountStore",
    "ChatHistoryStore",
    "MutationOutcome",
    "MutationResult",
    "SlotBackedStore",
    "UserDetailsStore",
]
