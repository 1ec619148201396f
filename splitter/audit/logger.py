"""
Audit Logger

DESIGN DECISION: Every roster or expense mutation, every state load and
every I/O failure is logged.
This provides:
1. Traceability of cascading deletes
2. Debugging capability for bad share tokens and failed writes
3. A recent-history view the UI can show

The audit logger:
- Never raises: a logging failure must not break a ledger operation
- Keeps a bounded in-memory history of recent events
- Supports correlation IDs to trace events of one session
"""

from collections import deque
from typing import Any, Callable, Optional
from uuid import UUID, uuid4

import structlog

from splitter.models.audit import AuditEvent, AuditEventBuilder


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

    Logs events both to:
    1. Structured local log (JSON lines via structlog)
    2. A bounded in-memory history, newest last
    """

    def __init__(
        self,
        correlation_id: Optional[UUID] = None,
        history_size: int = 200,
    ):
        """
        Initialize audit logger.

        Args:
            correlation_id: Attached to events built by the helper methods.
                           A fresh one is created if not given.
            history_size: How many recent events to keep in memory.
        """
        self._correlation_id = correlation_id or create_correlation_id()
        self._history: deque[AuditEvent] = deque(maxlen=history_size)
        self._logger = structlog.get_logger("splitter.audit")

    @property
    def correlation_id(self) -> UUID:
        return self._correlation_id

    def log(self, event: AuditEvent) -> None:
        """Log an audit event locally and remember it."""
        self._history.append(event)

        try:
            log_dict = event.to_log_dict()
            if event.severity.value in ("error", "critical"):
                self._logger.error("audit_event", **log_dict)
            elif event.severity.value == "warning":
                self._logger.warning("audit_event", **log_dict)
            elif event.severity.value == "debug":
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception as e:
            # Log failure but don't raise
            self._record_failure(e)

    def _emit(self, build: Callable[..., AuditEvent], **fields: Any) -> None:
        """Build an event with this logger's correlation ID and log it."""
        try:
            event = build(correlation_id=self._correlation_id, **fields)
        except Exception as e:
            self._record_failure(e)
            return
        self.log(event)

    def _record_failure(self, error: Exception) -> None:
        self._history.append(
            AuditEventBuilder.system_error(
                error_type="audit_log_failed",
                error_message=str(error),
                correlation_id=self._correlation_id,
            )
        )

    def recent_events(self, limit: int = 50) -> list[AuditEvent]:
        """Most recent events, newest first."""
        events = list(self._history)[-limit:] if limit > 0 else []
        return list(reversed(events))

    def log_participant_added(self, participant_id: str, name: str) -> None:
        """Log a roster addition."""
        self._emit(
            AuditEventBuilder.participant_added,
            participant_id=participant_id,
            name=name,
        )

    def log_participant_removed(
        self,
        participant_id: str,
        found: bool,
        cascaded_expense_ids: list[str],
    ) -> None:
        """Log a roster removal and the expenses it cascaded away."""
        self._emit(
            AuditEventBuilder.participant_removed,
            participant_id=participant_id,
            found=found,
            cascaded_expense_ids=cascaded_expense_ids,
        )

    def log_expense_added(
        self,
        expense_id: str,
        amount: str,
        currency: str,
        participant_count: int,
    ) -> None:
        """Log a new expense."""
        self._emit(
            AuditEventBuilder.expense_added,
            expense_id=expense_id,
            amount=amount,
            currency=currency,
            participant_count=participant_count,
        )

    def log_expense_removed(self, expense_id: str, found: bool) -> None:
        """Log an expense removal."""
        self._emit(
            AuditEventBuilder.expense_removed,
            expense_id=expense_id,
            found=found,
        )

    def log_input_rejected(self, operation: str, reason: str) -> None:
        """Log an add operation refused for invalid input."""
        self._emit(
            AuditEventBuilder.input_rejected,
            operation=operation,
            reason=reason,
        )

    def log_data_cleared(self, participant_count: int, expense_count: int) -> None:
        """Log a full reset."""
        self._emit(
            AuditEventBuilder.data_cleared,
            participant_count=participant_count,
            expense_count=expense_count,
        )

    def log_state_loaded(
        self,
        source: str,
        participant_count: int,
        expense_count: int,
    ) -> None:
        """Log state restored from storage or a share token."""
        self._emit(
            AuditEventBuilder.state_loaded,
            source=source,
            participant_count=participant_count,
            expense_count=expense_count,
        )

    def log_stored_state_corrupt(self, key: str, error_message: str) -> None:
        """Log unreadable stored data."""
        self._emit(
            AuditEventBuilder.stored_state_corrupt,
            key=key,
            error_message=error_message,
        )

    def log_share_token_rejected(self, error_message: str) -> None:
        """Log a share token that failed to decode."""
        self._emit(
            AuditEventBuilder.share_token_rejected,
            error_message=error_message,
        )

    def log_share_link_generated(self, token_length: int) -> None:
        """Log share link generation."""
        self._emit(
            AuditEventBuilder.share_link_generated,
            token_length=token_length,
        )

    def log_share_link_copied(self) -> None:
        """Log a successful clipboard copy."""
        self._emit(AuditEventBuilder.share_link_copied)

    def log_clipboard_failed(self, error_message: str) -> None:
        """Log a failed clipboard copy."""
        self._emit(
            AuditEventBuilder.clipboard_write_failed,
            error_message=error_message,
        )

    def log_save_failed(self, key: str, error_message: str) -> None:
        """Log a persistence write failure."""
        self._emit(
            AuditEventBuilder.save_failed,
            key=key,
            error_message=error_message,
        )


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this once per session and pass it to the AuditLogger.
    """
    return uuid4()
