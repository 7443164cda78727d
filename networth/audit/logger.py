"""
Audit Logger

DESIGN DECISION: Every significant action in the system is logged.
This provides:
1. Traceability of account mutations
2. Debugging capability when storage or a remote service fails
3. A visible record of cross-tab re-hydrations

The audit logger:
- Is synchronous, since stores mutate state synchronously
- Only logs locally (structured JSON through structlog)
- Gracefully handles failures (doesn't crash the app if logging fails)
- Supports correlation IDs to trace related events
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from networth.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Keeps the most recent events in memory so the UI (or a test) can
    show what happened without parsing the log.
    """

    def __init__(self, history_size: int = 200):
        """
        Initialize audit logger.

        Args:
            history_size: How many recent events to keep in memory
        """
        self._logger = structlog.get_logger()
        self._history: list[AuditEvent] = []
        self._history_size = history_size

    @property
    def recent_events(self) -> list[AuditEvent]:
        return list(self._history)

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns True if the event was written to the local log.
        """
        self._history.append(event)
        if len(self._history) > self._history_size:
            del self._history[: len(self._history) - self._history_size]

        log_dict = event.to_log_dict()
        try:
            if event.severity == AuditSeverity.ERROR:
                self._logger.error("audit_event", **log_dict)
            elif event.severity == AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except (TypeError, ValueError) as e:
            # Unserializable details; logging must not break the mutation
            self._logger.error(
                "audit_log_failed",
                error=str(e),
                event_id=str(event.event_id),
            )
            return False
        return True

    def log_account_added(
        self,
        account_id: str,
        account_type: str,
        name: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a new account."""
        self.log(AuditEventBuilder.account_added(
            account_id=account_id,
            account_type=account_type,
            name=name,
            correlation_id=correlation_id,
        ))

    def log_account_updated(
        self,
        account_id: str,
        account_type: str,
        name: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an account replacement."""
        self.log(AuditEventBuilder.account_updated(
            account_id=account_id,
            account_type=account_type,
            name=name,
            correlation_id=correlation_id,
        ))

    def log_account_deleted(
        self,
        account_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an account removal."""
        self.log(AuditEventBuilder.account_deleted(
            account_id=account_id,
            correlation_id=correlation_id,
        ))

    def log_validation_failed(
        self,
        account_type: Optional[str],
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a rejected account payload."""
        self.log(AuditEventBuilder.validation_failed(
            account_type=account_type,
            issues=issues,
            correlation_id=correlation_id,
        ))

    def log_duplicate_rejected(
        self,
        account_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an add rejected for a duplicate id."""
        self.log(AuditEventBuilder.duplicate_rejected(
            account_id=account_id,
            correlation_id=correlation_id,
        ))

    def log_account_not_found(
        self,
        account_id: Optional[str],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an edit of a missing account."""
        self.log(AuditEventBuilder.account_not_found(
            account_id=account_id,
            correlation_id=correlation_id,
        ))

    def log_state_rehydrated(self, slot: str, previous_count: int, new_count: int) -> None:
        """Log local state replaced by an external write."""
        self.log(AuditEventBuilder.state_rehydrated(
            slot=slot,
            previous_count=previous_count,
            new_count=new_count,
        ))

    def log_storage_write_failed(
        self,
        slot: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a failed persistence write."""
        self.log(AuditEventBuilder.storage_write_failed(
            slot=slot,
            correlation_id=correlation_id,
        ))

    def log_user_details_updated(self, name: str) -> None:
        self.log(AuditEventBuilder.user_details_updated(name=name))

    def log_chat_message_sent(
        self,
        message_id: str,
        account_count: int,
        correlation_id: UUID,
    ) -> None:
        """Log a chat request."""
        self.log(AuditEventBuilder.chat_message_sent(
            message_id=message_id,
            account_count=account_count,
            correlation_id=correlation_id,
        ))

    def log_chat_response_received(
        self,
        message_id: str,
        response_length: int,
        correlation_id: UUID,
    ) -> None:
        """Log a chat reply."""
        self.log(AuditEventBuilder.chat_response_received(
            message_id=message_id,
            response_length=response_length,
            correlation_id=correlation_id,
        ))

    def log_external_service_error(
        self,
        service: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log external service error."""
        self.log(AuditEventBuilder.external_service_error(
            service=service,
            error_message=error_message,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., sending a chat message).
    Pass it through all subsequent operations.
    """
    return uuid4()
