"""
Splitter Session

This module ties together the ledger, storage, sharing and audit
components behind one explicit session object. It owns:
1. Roster management (add / remove participants, name lookup)
2. Expense management (add / remove expenses)
3. Derived values (balances, settlements)
4. Persistence and share-token hooks

DESIGN DECISION: State is an explicit object owned by the caller, not a
process-wide global. Every mutation updates memory first, then calls
persist() explicitly. A failed write is logged and reported, never raised:
the in-memory state remains the source of truth.

All reads return copies; nothing the caller holds aliases session state.
"""

from decimal import Decimal, InvalidOperation
from typing import Iterable, NoReturn, Optional, Union

from pydantic import TypeAdapter, ValidationError

from splitter.audit import AuditLogger
from splitter.config import get_settings
from splitter.ledger import calculate_balances, calculate_settlements
from splitter.models.ledger import (
    Expense,
    Participant,
    Settlement,
    duplicate_ids,
    new_entity_id,
)
from splitter.services.sharing import (
    ClipboardError,
    ClipboardWriter,
    CommandClipboard,
    DecodeError,
    build_share_link,
    decode,
    encode,
)
from splitter.services.storage import (
    CorruptStateError,
    JsonFileStateStorage,
    StateStorageInterface,
    StorageError,
)


_ROSTER_ADAPTER = TypeAdapter(list[Participant])
_EXPENSES_ADAPTER = TypeAdapter(list[Expense])


class InvalidInputError(ValueError):
    """Arguments to an add operation are malformed."""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(message)


class SplitterSession:
    """
    In-memory splitter state with explicit persistence.

    Usage:
        session = create_session()
        session.initialize(token=query_token)
        alice = session.add_participant("Alice")
        ...
        session.calculate_settlements()
    """

    def __init__(
        self,
        storage: Optional[StateStorageInterface] = None,
        audit_logger: Optional[AuditLogger] = None,
        clipboard: Optional[ClipboardWriter] = None,
        base_url: Optional[str] = None,
    ):
        settings = get_settings()
        self._storage_settings = settings.storage
        self._sharing_settings = settings.sharing
        self._app_settings = settings.app

        self._storage = storage
        self._audit_logger = audit_logger or AuditLogger()
        self._clipboard = clipboard
        self._base_url = base_url or self._sharing_settings.base_url

        self._participants: list[Participant] = []
        self._expenses: list[Expense] = []

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def participants(self) -> list[Participant]:
        """Copy of the roster, in insertion order."""
        return [p.model_copy(deep=True) for p in self._participants]

    @property
    def expenses(self) -> list[Expense]:
        """Copy of the expense list, in insertion order."""
        return [e.model_copy(deep=True) for e in self._expenses]

    @property
    def audit_logger(self) -> AuditLogger:
        return self._audit_logger

    def get_name(self, participant_id: str) -> str:
        """Display name for an id, or the 'Unknown' sentinel. Never raises."""
        for participant in self._participants:
            if participant.id == participant_id:
                return participant.name
        return self._app_settings.unknown_participant_name

    def has_participant(self, participant_id: str) -> bool:
        return any(p.id == participant_id for p in self._participants)

    # ------------------------------------------------------------------
    # Roster management
    # ------------------------------------------------------------------

    def add_participant(self, name: str) -> Participant:
        """
        Add a participant to the end of the roster.

        Raises:
            InvalidInputError: If the name is empty after trimming
        """
        cleaned = (name or "").strip()
        if not cleaned:
            self._reject("add_participant", "name", "Participant name cannot be empty")

        participant = Participant(id=self._unused_id(), name=cleaned)
        self._participants.append(participant)

        self._audit_logger.log_participant_added(participant.id, participant.name)
        self.persist()
        return participant.model_copy(deep=True)

    def remove_participant(self, participant_id: str) -> list[str]:
        """
        Remove a participant and cascade into the expense list.

        The id is stripped from every expense's participants, and cleared
        as payer where it paid. Expenses left with no participants or no
        payer are deleted, since they can no longer be resolved.

        Returns:
            IDs of the expenses deleted by the cascade
        """
        found = self.has_participant(participant_id)
        self._participants = [p for p in self._participants if p.id != participant_id]

        kept, deleted = [], []
        for expense in self._expenses:
            stripped = expense.model_copy(update={
                "participants": [pid for pid in expense.participants if pid != participant_id],
                "paid_by": "" if expense.paid_by == participant_id else expense.paid_by,
            })
            if stripped.participants and stripped.paid_by:
                kept.append(stripped)
            else:
                deleted.append(expense.id)
        self._expenses = kept

        self._audit_logger.log_participant_removed(participant_id, found, deleted)
        self.persist()
        return deleted

    # ------------------------------------------------------------------
    # Expense management
    # ------------------------------------------------------------------

    def add_expense(
        self,
        description: str,
        amount: Union[Decimal, int, float, str],
        currency: Optional[str],
        paid_by: str,
        participants: Iterable[str],
    ) -> Expense:
        """
        Record a shared expense.

        The participant collection is copied; later changes to the
        caller's list do not affect stored state.

        Raises:
            InvalidInputError: If the description is empty, the amount is
                               not positive, no participants are given, or
                               any referenced id is not on the roster
        """
        participant_ids = list(dict.fromkeys(participants or []))
        cleaned_description = (description or "").strip()
        currency = (currency or self._app_settings.default_currency).strip()

        if not cleaned_description:
            self._reject("add_expense", "description", "Expense description cannot be empty")

        value = self._parse_amount(amount)

        if not participant_ids:
            self._reject("add_expense", "participants", "An expense needs at least one participant")
        if not self.has_participant(paid_by):
            self._reject("add_expense", "paid_by", f"Payer {paid_by!r} is not on the roster")
        unknown = [pid for pid in participant_ids if not self.has_participant(pid)]
        if unknown:
            self._reject(
                "add_expense",
                "participants",
                f"Participants not on the roster: {', '.join(unknown)}",
            )

        try:
            expense = Expense(
                id=self._unused_id(),
                description=cleaned_description,
                amount=value,
                currency=currency,
                paid_by=paid_by,
                participants=participant_ids,
            )
        except ValidationError as e:
            self._reject("add_expense", "expense", f"Invalid expense: {e.error_count()} problems")

        self._expenses.append(expense)

        self._audit_logger.log_expense_added(
            expense.id, str(expense.amount), expense.currency, len(expense.participants)
        )
        self.persist()
        return expense.model_copy(deep=True)

    def remove_expense(self, expense_id: str) -> bool:
        """Remove an expense by id. Returns False if it was not present."""
        before = len(self._expenses)
        self._expenses = [e for e in self._expenses if e.id != expense_id]
        found = len(self._expenses) < before

        self._audit_logger.log_expense_removed(expense_id, found)
        self.persist()
        return found

    def clear_all(self) -> None:
        """Empty both collections and persist the empty state."""
        self._audit_logger.log_data_cleared(len(self._participants), len(self._expenses))
        self._participants = []
        self._expenses = []
        self.persist()

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    def calculate_balances(self) -> dict[str, Decimal]:
        """Net balance per participant id (positive = should receive)."""
        return calculate_balances(self._participants, self._expenses)

    def calculate_settlements(self) -> list[Settlement]:
        """Pairwise-netted settlements, largest first."""
        return calculate_settlements(
            self._participants,
            self._expenses,
            epsilon=self._app_settings.settlement_epsilon,
        )

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def persist(self) -> bool:
        """
        Mirror current state to storage.

        Returns True if both keys were written (or no storage is
        configured). Failures are logged, never raised.
        """
        if self._storage is None:
            return True

        records = {
            self._storage_settings.friends_key: [
                p.model_dump(mode="json", by_alias=True) for p in self._participants
            ],
            self._storage_settings.expenses_key: [
                e.model_dump(mode="json", by_alias=True) for e in self._expenses
            ],
        }

        ok = True
        for key, data in records.items():
            try:
                self._storage.save(key, data)
            except StorageError as e:
                self._audit_logger.log_save_failed(key, str(e))
                ok = False
        return ok

    def load_from_storage(self) -> None:
        """
        Replace state with what storage holds.

        Unreadable or invalid stored lists are logged and treated as empty.
        """
        if self._storage is None:
            return

        self._participants = self._load_list(
            self._storage_settings.friends_key, _ROSTER_ADAPTER
        )
        self._expenses = self._load_list(
            self._storage_settings.expenses_key, _EXPENSES_ADAPTER
        )
        self._audit_logger.log_state_loaded(
            "storage", len(self._participants), len(self._expenses)
        )

    def initialize(self, token: Optional[str] = None) -> bool:
        """
        Startup hook: prefer a share token, fall back to storage.

        Returns:
            True if state came from the token
        """
        if token and self.load_from_token(token):
            return True
        self.load_from_storage()
        return False

    # ------------------------------------------------------------------
    # Sharing
    # ------------------------------------------------------------------

    def load_from_token(self, token: str) -> bool:
        """
        Replace state with the contents of a share token.

        State is only touched once the token has fully decoded.
        Returns False (state unchanged) if it does not.
        """
        try:
            payload = decode(token)
        except DecodeError as e:
            self._audit_logger.log_share_token_rejected(str(e))
            return False

        self._participants = payload.friends
        self._expenses = payload.expenses
        self._audit_logger.log_state_loaded(
            "token", len(self._participants), len(self._expenses)
        )
        self.persist()
        return True

    def generate_share_token(self) -> str:
        return encode(self._participants, self._expenses)

    def generate_shareable_link(self) -> str:
        """Link to the app carrying the full state as a token."""
        token = self.generate_share_token()
        self._audit_logger.log_share_link_generated(len(token))
        return build_share_link(
            self._base_url, token, self._sharing_settings.token_param
        )

    async def copy_shareable_link(self) -> bool:
        """
        Copy the shareable link to the clipboard.

        Returns False if no clipboard is configured or the write fails.
        No retry; state is never affected.
        """
        if self._clipboard is None:
            self._audit_logger.log_clipboard_failed("No clipboard configured")
            return False

        link = self.generate_shareable_link()
        try:
            await self._clipboard.write_text(link)
        except ClipboardError as e:
            self._audit_logger.log_clipboard_failed(str(e))
            return False

        self._audit_logger.log_share_link_copied()
        return True

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _reject(self, operation: str, field: str, message: str) -> NoReturn:
        self._audit_logger.log_input_rejected(operation, message)
        raise InvalidInputError(field, message)

    def _parse_amount(self, amount: Union[Decimal, int, float, str]) -> Decimal:
        if isinstance(amount, bool):
            self._reject("add_expense", "amount", "Amount must be a number")
        try:
            # str() keeps 12.3 as 12.3 rather than its binary expansion
            value = amount if isinstance(amount, Decimal) else Decimal(str(amount).strip())
        except (InvalidOperation, ValueError):
            self._reject("add_expense", "amount", f"Amount is not a number: {amount!r}")
        if not value.is_finite() or value <= 0:
            self._reject("add_expense", "amount", "Amount must be a positive number")
        return value

    def _unused_id(self) -> str:
        taken = {p.id for p in self._participants} | {e.id for e in self._expenses}
        while True:
            candidate = new_entity_id()
            if candidate not in taken:
                return candidate

    def _load_list(self, key: str, adapter: TypeAdapter) -> list:
        try:
            records = self._storage.load(key)
        except CorruptStateError as e:
            self._audit_logger.log_stored_state_corrupt(key, str(e))
            return []
        if not records:
            return []
        try:
            items = adapter.validate_python(records)
        except ValidationError as e:
            self._audit_logger.log_stored_state_corrupt(
                key, f"{e.error_count()} validation problems"
            )
            return []
        repeated = duplicate_ids(items)
        if repeated:
            self._audit_logger.log_stored_state_corrupt(
                key, f"Repeated ids: {', '.join(repeated)}"
            )
            return []
        return items


def create_session(
    use_storage: bool = True,
    storage: Optional[StateStorageInterface] = None,
    clipboard: Optional[ClipboardWriter] = None,
    base_url: Optional[str] = None,
) -> SplitterSession:
    """
    Factory function to create a wired-up session.

    Args:
        use_storage: Whether to mirror state to local JSON files.
                    Set to False for a throwaway session.
        storage: Explicit storage backend (overrides use_storage).
        clipboard: Explicit clipboard writer. Defaults to the configured
                   clipboard command, if any.
        base_url: Overrides the configured public URL for share links.

    Returns:
        A session that has not been initialized yet
    """
    settings = get_settings()

    if storage is None and use_storage:
        storage = JsonFileStateStorage()

    if clipboard is None and settings.sharing.clipboard_command:
        clipboard = CommandClipboard(settings.sharing.clipboard_command)

    return SplitterSession(
        storage=storage,
        audit_logger=AuditLogger(),
        clipboard=clipboard,
        base_url=base_url,
    )
