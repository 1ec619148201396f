"""
Tests for the Expense Splitter models

Test strategy:
1. Unit tests for models and pure calculations
2. Session tests with in-memory storage and fake clipboards
3. No real network or clipboard access in tests
"""

import pytest
from datetime import datetime, timezone
from decimal import Decimal

from splitter.models.ledger import (
    Expense,
    Participant,
    SharePayload,
    Settlement,
    duplicate_ids,
    money_to_json,
)
from splitter.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)


class TestLedgerModels:
    """Tests for ledger Pydantic models."""

    def test_participant_creation(self):
        """Test Participant gets an id and an aware timestamp."""
        participant = Participant(name="Alice")
        assert participant.name == "Alice"
        assert participant.id
        assert participant.created_at.tzinfo is not None

    def test_participant_ids_are_unique(self):
        """Test two participants never share a generated id."""
        assert Participant(name="A").id != Participant(name="A").id

    def test_participant_strips_whitespace(self):
        """Test that whitespace is stripped from names."""
        assert Participant(name="  Alice  ").name == "Alice"

    def test_expense_creation(self):
        """Test Expense model creation."""
        expense = Expense(
            description="Dinner",
            amount=Decimal("90"),
            currency="USD",
            paid_by="a",
            participants=["a", "b", "c"],
        )
        assert expense.amount == Decimal("90")
        assert expense.share == Decimal("30")

    def test_expense_rejects_non_positive_amount(self):
        """Test that zero and negative amounts are rejected."""
        for amount in (Decimal("0"), Decimal("-5")):
            with pytest.raises(ValueError):
                Expense(
                    description="Bad",
                    amount=amount,
                    currency="USD",
                    paid_by="a",
                    participants=["a"],
                )

    def test_expense_requires_participants(self):
        """Test that an expense needs at least one participant."""
        with pytest.raises(ValueError):
            Expense(
                description="Nobody",
                amount=Decimal("10"),
                currency="USD",
                paid_by="a",
                participants=[],
            )

    def test_expense_dumps_camel_case(self):
        """Test the wire format matches the browser client."""
        expense = Expense(
            description="Taxi",
            amount=Decimal("12.5"),
            currency="EUR",
            paid_by="a",
            participants=["a", "b"],
        )
        data = expense.model_dump(mode="json", by_alias=True)
        assert data["paidBy"] == "a"
        assert "createdAt" in data
        assert data["amount"] == 12.5

    def test_expense_accepts_camel_case(self):
        """Test records written by the browser client validate."""
        expense = Expense.model_validate({
            "id": "1700000000000",
            "description": "Taxi",
            "amount": 12.5,
            "currency": "EUR",
            "paidBy": "a",
            "participants": ["a", "b"],
            "createdAt": "2024-05-01T10:00:00.000Z",
        })
        assert expense.paid_by == "a"
        assert expense.amount == Decimal("12.5")
        assert expense.created_at == datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)

    def test_settlement_aliases(self):
        """Test Settlement serializes as from/to."""
        settlement = Settlement(from_id="b", to_id="a", amount=Decimal("30.00"))
        data = settlement.model_dump(by_alias=True)
        assert data["from"] == "b"
        assert data["to"] == "a"

    def test_share_payload_requires_both_lists(self):
        """Test a payload missing expenses is rejected."""
        with pytest.raises(ValueError):
            SharePayload.model_validate({"friends": []})

    def test_share_payload_rejects_repeated_participant(self):
        """Test a roster with the same id twice is rejected."""
        alice = Participant(id="a", name="Alice")
        with pytest.raises(ValueError, match="Repeated friend ids: a"):
            SharePayload(friends=[alice, alice], expenses=[])

    def test_duplicate_ids(self):
        roster = [Participant(id=i, name=i) for i in ["a", "b", "a", "c", "a", "b"]]
        assert duplicate_ids(roster) == ["a", "b"]
        assert duplicate_ids([]) == []

    def test_money_json_form(self):
        """Test amounts are numbers when exact and strings otherwise."""
        assert money_to_json(Decimal("24.5")) == 24.5
        assert money_to_json(Decimal("0.1")) == 0.1
        assert money_to_json(Decimal("12345678901234567.89")) == "12345678901234567.89"


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.PARTICIPANT_ADDED,
            description="Participant added",
        )
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEventBuilder.expense_added(
            expense_id="e1",
            amount="90",
            currency="USD",
            participant_count=3,
        )
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "expense_added"
        assert log_dict["entity_id"] == "e1"
        assert log_dict["details"]["participant_count"] == 3

    def test_participant_removed_records_cascade(self):
        """Test AuditEventBuilder.participant_removed."""
        event = AuditEventBuilder.participant_removed(
            participant_id="p1",
            found=True,
            cascaded_expense_ids=["e1", "e2"],
        )
        assert event.event_type == AuditEventType.PARTICIPANT_REMOVED
        assert event.details["deleted_expense_ids"] == ["e1", "e2"]
        assert "2 expenses" in event.description
        assert event.is_user_action is True

    def test_save_failed_is_error(self):
        """Test AuditEventBuilder.save_failed severity."""
        event = AuditEventBuilder.save_failed(key="friends", error_message="disk full")
        assert event.severity == AuditSeverity.ERROR
        assert event.error_message == "disk full"

    def test_state_loaded_from_token(self):
        """Test token loads get their own event type."""
        event = AuditEventBuilder.state_loaded("token", 2, 1)
        assert event.event_type == AuditEventType.SHARE_TOKEN_LOADED
        event = AuditEventBuilder.state_loaded("storage", 2, 1)
        assert event.event_type == AuditEventType.STATE_LOADED

    def test_long_user_text_is_cut_in_description(self):
        """Test long names and reasons fit the description limit."""
        event = AuditEventBuilder.participant_added("p1", "n" * 600)
        assert len(event.description) < 200
        assert event.details["name"] == "n" * 600

        reason = ", ".join(f"ghost-{n}" for n in range(200))
        event = AuditEventBuilder.input_rejected("add_expense", reason)
        assert event.description.endswith("...")
        assert event.error_message == reason


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
