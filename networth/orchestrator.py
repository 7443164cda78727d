"""
Main Orchestrator for Net Worth Dashboard

This module ties together all the components and defines the
end-to-end flows for:
1. Chat (user message → placeholder → backend → answer or apology)
2. Advice (account projection → prompt flow → structured answer)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Only stores touch persisted slots
- Only one chat request is in flight at a time
- A failed remote call never breaks the chat; it becomes one apology
- Every step is audited

Account mutations need no orchestration: the AccountStore already runs
validate → derive → mutate → persist synchronously.
"""

import asyncio
import logging
from typing import NamedTuple, Optional

import structlog
from pydantic import ValidationError as PydanticValidationError

from networth.accounts import to_financial_data
from networth.agents import FinancialAdvisorAgent, FinancialSummary, InvestmentAdvice
from networth.audit import AuditLogger, create_correlation_id
from networth.config import Settings, get_settings
from networth.models.chat import ChatMessage, ChatSender
from networth.services.chat import ChatBackendClient, RemoteServiceError
from networth.services.storage import (
    FileSlotStorage,
    InMemorySlotStorage,
    SharedStorageArea,
    SlotStorageInterface,
)
from networth.stores import AccountStore, ChatHistoryStore, UserDetailsStore
from networth.validation import AccountValidator


THINKING_TEXT = "Thinking..."
APOLOGY_TEXT = "Sorry, I couldn't get a response. Please try again."


class ChatFlow:
    """
    Orchestrates one chat turn.

    Flow:
    1. Append the user's message to the transcript
    2. Append a "Thinking..." bot placeholder (is_loading=True)
    3. Send profile, accounts and transcript to the chat backend
    4. Replace the placeholder with the answer, or with an apology

    While a turn is in flight further sends are rejected, not queued.
    """

    def __init__(
        self,
        chat_store: ChatHistoryStore,
        account_store: AccountStore,
        user_details_store: UserDetailsStore,
        client: ChatBackendClient,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._chat_store = chat_store
        self._account_store = account_store
        self._user_details_store = user_details_store
        self._client = client
        self._audit_logger = audit_logger or AuditLogger()
        self._logger = structlog.get_logger()
        self._sending = False

    @property
    def is_sending(self) -> bool:
        return self._sending

    async def send_message(self, text: str) -> Optional[ChatMessage]:
        """
        Run one chat turn.

        Returns:
            The final bot message, or None if nothing was sent (blank
            text, or a turn already in flight)
        """
        if not text.strip():
            return None
        if self._sending:
            self._logger.info("chat_send_rejected", reason="request_in_flight")
            return None

        self._sending = True
        try:
            self._chat_store.add_message(ChatSender.USER, text)
            # The placeholder is UI state, not conversation
            history = [m for m in self._chat_store.messages if not m.is_loading]
            placeholder = self._chat_store.add_message(
                ChatSender.BOT, THINKING_TEXT, is_loading=True
            )

            accounts = self._account_store.list()
            correlation_id = create_correlation_id()
            self._audit_logger.log_chat_message_sent(
                message_id=placeholder.id,
                account_count=len(accounts),
                correlation_id=correlation_id,
            )

            try:
                reply = await asyncio.to_thread(
                    self._client.send,
                    self._user_details_store.get(),
                    accounts,
                    history,
                )
                self._audit_logger.log_chat_response_received(
                    message_id=placeholder.id,
                    response_length=len(reply),
                    correlation_id=correlation_id,
                )
            except RemoteServiceError as e:
                self._audit_logger.log_external_service_error(
                    service="chat_backend",
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
                reply = APOLOGY_TEXT

            updated = self._chat_store.update_message(placeholder.id, False, reply)
            if updated is None:
                # Transcript was replaced by another tab meanwhile
                return placeholder.model_copy(update={"is_loading": False, "text": reply})
            return updated
        finally:
            self._sending = False

    def clear(self) -> None:
        self._chat_store.clear()


class AdviceFlow:
    """
    Runs the advisor's prompt flows over the current accounts.

    The only thing the core contributes is the financial-data projection;
    goals, risk tolerance and the prompt come from the user.
    """

    def __init__(
        self,
        account_store: AccountStore,
        agent: FinancialAdvisorAgent,
    ):
        self._account_store = account_store
        self._agent = agent

    def financial_data(self) -> str:
        return to_financial_data(self._account_store.list())

    async def summarize(self, goal: str, user_prompt: str) -> FinancialSummary:
        return await self._agent.summarize(
            financial_data=self.financial_data(),
            goal=goal,
            user_prompt=user_prompt,
        )

    async def investment_advice(
        self,
        risk_tolerance: str,
        investment_goals: str,
        user_prompt: str,
    ) -> InvestmentAdvice:
        return await self._agent.investment_advice(
            financial_data=self.financial_data(),
            risk_tolerance=risk_tolerance,
            investment_goals=investment_goals,
            user_prompt=user_prompt,
        )


class AppComponents(NamedTuple):
    storage: SlotStorageInterface
    audit_logger: AuditLogger
    account_store: AccountStore
    user_details_store: UserDetailsStore
    chat_store: ChatHistoryStore
    chat_flow: ChatFlow
    advice_flow: Optional[AdviceFlow]


def create_storage(settings: Settings) -> SlotStorageInterface:
    """Build the configured slot storage backend."""
    storage_settings = settings.storage
    if storage_settings.backend == "file":
        return FileSlotStorage(storage_settings.directory)
    return InMemorySlotStorage(SharedStorageArea(storage_settings.quota_bytes))


def create_app_components(
    settings: Optional[Settings] = None,
    storage: Optional[SlotStorageInterface] = None,
    agent: Optional[FinancialAdvisorAgent] = None,
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        settings: Settings to use. Defaults to the cached settings.
        storage: Slot storage to use instead of the configured backend
                 (e.g. a second context on a shared memory area)
        agent: Advisor agent to use. Built from the Gemini settings if
               omitted; without a Gemini key the advice flow is None.

    Returns:
        AppComponents with every store and flow wired together
    """
    settings = settings or get_settings()
    app_settings = settings.app

    logging.basicConfig(
        level=logging.DEBUG if app_settings.debug_mode else logging.INFO,
        format="%(message)s",
    )
    logger = structlog.get_logger()

    storage_settings = settings.storage
    storage = storage or create_storage(settings)
    audit_logger = AuditLogger()

    account_store = AccountStore(
        storage,
        slot_key=storage_settings.accounts_key,
        validator=AccountValidator(app_settings),
        audit_logger=audit_logger,
    )
    user_details_store = UserDetailsStore(
        storage,
        slot_key=storage_settings.user_details_key,
        audit_logger=audit_logger,
    )
    chat_store = ChatHistoryStore(
        storage,
        slot_key=storage_settings.chat_key,
        audit_logger=audit_logger,
    )

    backend_settings = settings.chat_backend
    chat_flow = ChatFlow(
        chat_store=chat_store,
        account_store=account_store,
        user_details_store=user_details_store,
        client=ChatBackendClient(
            backend_settings.base_url,
            timeout=backend_settings.timeout_seconds,
        ),
        audit_logger=audit_logger,
    )

    advice_flow = None
    if agent is None:
        try:
            agent = FinancialAdvisorAgent(settings.gemini)
        except PydanticValidationError as e:
            # Gemini not configured - continue without advice
            logger.warning("advisor_not_configured", error_count=e.error_count())
    if agent is not None:
        advice_flow = AdviceFlow(account_store, agent)

    return AppComponents(
        storage=storage,
        audit_logger=audit_logger,
        account_store=account_store,
        user_details_store=user_details_store,
        chat_store=chat_store,
        chat_flow=chat_flow,
        advice_flow=advice_flow,
    )
