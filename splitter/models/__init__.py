"""
Data Models Package

This package contains all Pydantic models used in the Expense Splitter.
All data flowing through the system must conform to these schemas.
"""

from splitter.models.ledger import (
    Expense,
    LedgerModel,
    Participant,
    SharePayload,
    Settlement,
    duplicate_ids,
    new_entity_id,
    utc_now,
)
from splitter.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "Expense",
    "LedgerModel",
    "Participant",
    "SharePayload",
    "Settlement",
    "duplicate_ids",
    "new_entity_id",
    "utc_now",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
