"""
Audit Models for Net Worth Dashboard

Every mutation of the account collection, every storage failure and
every chat round trip produces an audit event. This provides:
1. Traceability of what happened to each account
2. Debugging information when a write or a remote call fails
3. A record of cross-tab re-hydrations, which discard local state

DESIGN DECISION: Audit events are append-only. We never modify them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Account lifecycle
    ACCOUNT_ADDED = "account_added"
    ACCOUNT_UPDATED = "account_updated"
    ACCOUNT_DELETED = "account_deleted"

    # Rejections
    VALIDATION_FAILED = "validation_failed"
    DUPLICATE_REJECTED = "duplicate_rejected"
    ACCOUNT_NOT_FOUND = "account_not_found"

    # Persistence
    STATE_REHYDRATED = "state_rehydrated"
    STORAGE_WRITE_FAILED = "storage_write_failed"

    # Profile
    USER_DETAILS_UPDATED = "user_details_updated"

    # Chat
    CHAT_MESSAGE_SENT = "chat_message_sent"
    CHAT_RESPONSE_RECEIVED = "chat_response_received"

    # System events
    EXTERNAL_SERVICE_ERROR = "external_service_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'account', 'chat', 'slot')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one chat send)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )

    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.account_added(account_id, "Investment", "Brokerage")
        event = AuditEventBuilder.storage_write_failed("financial_accounts")
    """

    @staticmethod
    def account_added(
        account_id: str,
        account_type: str,
        name: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACCOUNT_ADDED,
            entity_type="account",
            entity_id=account_id,
            correlation_id=correlation_id,
            description=f"Account added: {name}",
            details={"account_type": account_type},
            is_user_action=True,
        )

    @staticmethod
    def account_updated(
        account_id: str,
        account_type: str,
        name: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACCOUNT_UPDATED,
            entity_type="account",
            entity_id=account_id,
            correlation_id=correlation_id,
            description=f"Account updated: {name}",
            details={"account_type": account_type},
            is_user_action=True,
        )

    @staticmethod
    def account_deleted(
        account_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACCOUNT_DELETED,
            entity_type="account",
            entity_id=account_id,
            correlation_id=correlation_id,
            description=f"Account deleted: {account_id}",
            is_user_action=True,
        )

    @staticmethod
    def validation_failed(
        account_type: Optional[str],
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="account",
            correlation_id=correlation_id,
            description=f"Account payload rejected ({len(issues)} issue(s))",
            details={
                "account_type": account_type,
                "issues": issues,
            },
            is_user_action=True,
        )

    @staticmethod
    def duplicate_rejected(
        account_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DUPLICATE_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="account",
            entity_id=account_id,
            correlation_id=correlation_id,
            description=f"Account with id {account_id} already exists",
            is_user_action=True,
        )

    @staticmethod
    def account_not_found(
        account_id: Optional[str],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACCOUNT_NOT_FOUND,
            severity=AuditSeverity.WARNING,
            entity_type="account",
            entity_id=account_id,
            correlation_id=correlation_id,
            description=f"No account with id {account_id} to edit",
            is_user_action=True,
        )

    @staticmethod
    def state_rehydrated(
        slot: str,
        previous_count: int,
        new_count: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATE_REHYDRATED,
            entity_type="slot",
            entity_id=slot,
            description=f"Slot {slot} replaced by an external write",
            details={
                "previous_count": previous_count,
                "new_count": new_count,
            },
        )

    @staticmethod
    def storage_write_failed(
        slot: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_WRITE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="slot",
            entity_id=slot,
            correlation_id=correlation_id,
            description=f"Write to slot {slot} failed; changes may not persist",
        )

    @staticmethod
    def user_details_updated(name: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_DETAILS_UPDATED,
            entity_type="user_details",
            description=f"User details updated for {name}",
            is_user_action=True,
        )

    @staticmethod
    def chat_message_sent(
        message_id: str,
        account_count: int,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CHAT_MESSAGE_SENT,
            entity_type="chat",
            entity_id=message_id,
            correlation_id=correlation_id,
            description="Chat message sent to backend",
            details={"account_count": account_count},
            is_user_action=True,
        )

    @staticmethod
    def chat_response_received(
        message_id: str,
        response_length: int,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CHAT_RESPONSE_RECEIVED,
            entity_type="chat",
            entity_id=message_id,
            correlation_id=correlation_id,
            description="Chat response received",
            details={"response_length": response_length},
        )

    @staticmethod
    def external_service_error(
        service: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTERNAL_SERVICE_ERROR,
            severity=AuditSeverity.ERROR,
            entity_type="external_service",
            correlation_id=correlation_id,
            description=f"{service} service error",
            details={"service": service},
            error_message=error_message,
        )
