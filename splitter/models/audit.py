"""
Audit Models for the Expense Splitter

Every mutation of the roster or expense list, and every failure at an
I/O boundary, is recorded as an audit event.
This provides:
1. Traceability of who was added, removed and what was cascaded away
2. Debugging information when a share token or storage write fails
3. Ability to reconstruct how a group's ledger evolved

DESIGN DECISION: Events are append-only log records. They never feed back
into balance or settlement computation.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


# User text quoted in a description is cut to this many characters
DESCRIPTION_QUOTE_LIMIT = 120


def _quote(text: str, limit: int = DESCRIPTION_QUOTE_LIMIT) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 3] + "..."


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Roster
    PARTICIPANT_ADDED = "participant_added"
    PARTICIPANT_REMOVED = "participant_removed"

    # Expenses
    EXPENSE_ADDED = "expense_added"
    EXPENSE_REMOVED = "expense_removed"
    INPUT_REJECTED = "input_rejected"

    # Whole-state operations
    DATA_CLEARED = "data_cleared"
    STATE_LOADED = "state_loaded"
    STORED_STATE_CORRUPT = "stored_state_corrupt"

    # Sharing
    SHARE_LINK_GENERATED = "share_link_generated"
    SHARE_LINK_COPIED = "share_link_copied"
    SHARE_TOKEN_LOADED = "share_token_loaded"
    SHARE_TOKEN_REJECTED = "share_token_rejected"
    CLIPBOARD_WRITE_FAILED = "clipboard_write_failed"

    # Persistence
    SAVE_FAILED = "save_failed"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
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
        description="Type of entity (e.g., 'participant', 'expense', 'token')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - all events of one session share this
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events"
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

    # Error information (if applicable)
    error_code: Optional[str] = None
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
            "error_code": self.error_code,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.participant_added(participant_id, name, correlation_id)
        event = AuditEventBuilder.save_failed(key, error, correlation_id)
    """

    @staticmethod
    def participant_added(
        participant_id: str,
        name: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PARTICIPANT_ADDED,
            entity_type="participant",
            entity_id=participant_id,
            correlation_id=correlation_id,
            description=f"Participant added: {_quote(name)}",
            details={"name": name},
            is_user_action=True,
        )

    @staticmethod
    def participant_removed(
        participant_id: str,
        found: bool,
        cascaded_expense_ids: list[str],
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PARTICIPANT_REMOVED,
            entity_type="participant",
            entity_id=participant_id,
            correlation_id=correlation_id,
            description=(
                f"Participant removed, {len(cascaded_expense_ids)} expenses deleted"
                if found else "Participant not on roster, nothing removed"
            ),
            details={
                "found": found,
                "deleted_expense_ids": cascaded_expense_ids,
            },
            is_user_action=True,
        )

    @staticmethod
    def expense_added(
        expense_id: str,
        amount: str,
        currency: str,
        participant_count: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_ADDED,
            entity_type="expense",
            entity_id=expense_id,
            correlation_id=correlation_id,
            description=f"Expense added: {_quote(amount, 40)} {currency} split {participant_count} ways",
            details={
                "amount": amount,
                "currency": currency,
                "participant_count": participant_count,
            },
            is_user_action=True,
        )

    @staticmethod
    def expense_removed(
        expense_id: str,
        found: bool,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_REMOVED,
            entity_type="expense",
            entity_id=expense_id,
            correlation_id=correlation_id,
            description="Expense removed" if found else "Expense not found, nothing removed",
            details={"found": found},
            is_user_action=True,
        )

    @staticmethod
    def input_rejected(
        operation: str,
        reason: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INPUT_REJECTED,
            severity=AuditSeverity.WARNING,
            correlation_id=correlation_id,
            description=f"Rejected {operation}: {_quote(reason)}",
            details={"operation": operation},
            error_message=reason,
            is_user_action=True,
        )

    @staticmethod
    def data_cleared(
        participant_count: int,
        expense_count: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DATA_CLEARED,
            severity=AuditSeverity.WARNING,
            correlation_id=correlation_id,
            description="All participants and expenses cleared",
            details={
                "participant_count": participant_count,
                "expense_count": expense_count,
            },
            is_user_action=True,
        )

    @staticmethod
    def state_loaded(
        source: str,
        participant_count: int,
        expense_count: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        event_type = (
            AuditEventType.SHARE_TOKEN_LOADED
            if source == "token"
            else AuditEventType.STATE_LOADED
        )
        return AuditEvent(
            event_type=event_type,
            correlation_id=correlation_id,
            description=(
                f"Loaded {participant_count} participants and "
                f"{expense_count} expenses from {source}"
            ),
            details={
                "source": source,
                "participant_count": participant_count,
                "expense_count": expense_count,
            },
        )

    @staticmethod
    def stored_state_corrupt(
        key: str,
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORED_STATE_CORRUPT,
            severity=AuditSeverity.WARNING,
            entity_type="storage_key",
            entity_id=key,
            correlation_id=correlation_id,
            description=f"Stored data under '{key}' is unreadable, starting empty",
            error_message=error_message,
        )

    @staticmethod
    def share_token_rejected(
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SHARE_TOKEN_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="token",
            correlation_id=correlation_id,
            description="Share token could not be decoded, state unchanged",
            error_message=error_message,
        )

    @staticmethod
    def share_link_generated(
        token_length: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SHARE_LINK_GENERATED,
            entity_type="token",
            correlation_id=correlation_id,
            description="Shareable link generated",
            details={"token_length": token_length},
            is_user_action=True,
        )

    @staticmethod
    def share_link_copied(
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SHARE_LINK_COPIED,
            entity_type="token",
            correlation_id=correlation_id,
            description="Shareable link copied to clipboard",
            is_user_action=True,
        )

    @staticmethod
    def clipboard_write_failed(
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CLIPBOARD_WRITE_FAILED,
            severity=AuditSeverity.WARNING,
            correlation_id=correlation_id,
            description="Failed to copy link to clipboard",
            error_message=error_message,
        )

    @staticmethod
    def save_failed(
        key: str,
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="storage_key",
            entity_id=key,
            correlation_id=correlation_id,
            description=f"Failed to persist '{key}', in-memory state kept",
            error_message=error_message,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
