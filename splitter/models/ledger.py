"""
Core Data Models for the Expense Splitter

These models define the strict schemas for everything the splitter keeps
in memory, writes to storage and packs into share tokens.
They are designed to:
1. Enforce type safety at runtime
2. Keep money as Decimal, never float
3. Serialize with the camelCase names used by the browser client
   (paidBy, createdAt, from, to) so stored data and tokens stay compatible

DESIGN DECISION: Settlements are derived values. They are never persisted
and never shared; they are recomputed from the expense list on demand.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Annotated, Iterable, Optional, Union
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    model_validator,
)
from pydantic.alias_generators import to_camel


def new_entity_id() -> str:
    """Opaque unique identifier for participants and expenses."""
    return uuid4().hex


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def money_to_json(value: Decimal) -> Union[float, str]:
    """
    JSON form of an amount.

    A number when a double holds the value exactly, like the browser
    client writes it. Otherwise the decimal string, which reads back
    without loss.
    """
    as_float = float(value)
    if value.is_finite() and Decimal(repr(as_float)) == value:
        return as_float
    return str(value)


Money = Annotated[
    Decimal,
    PlainSerializer(money_to_json, return_type=Union[float, str], when_used="json"),
]


class LedgerModel(BaseModel):
    """Base for all ledger models: camelCase on the wire, snake_case in Python."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


class Participant(LedgerModel):
    """
    A person on the roster.

    Ids are unique for the lifetime of a session and are what expenses
    and settlements refer to. The name is only for display.
    """

    id: str = Field(
        default_factory=new_entity_id,
        min_length=1,
        description="Opaque unique participant ID"
    )
    name: str = Field(
        ...,
        description="Display name"
    )
    created_at: datetime = Field(
        default_factory=utc_now,
        description="When the participant was added"
    )


class Expense(LedgerModel):
    """
    A single shared expense.

    The payer is credited the full amount; every id in `participants`
    owes an equal share. The payer may or may not be a participant.

    CRITICAL: `participants` must never be empty. A share is
    amount / len(participants), so an empty list cannot be resolved.
    """

    id: str = Field(
        default_factory=new_entity_id,
        min_length=1,
        description="Opaque unique expense ID"
    )
    description: str = Field(
        default="",
        max_length=500,
        description="What the money was spent on"
    )
    amount: Annotated[
        Money,
        Field(gt=0, description="Amount paid, in `currency` units")
    ]
    currency: str = Field(
        ...,
        max_length=10,
        description="Currency tag (display only, never converted)"
    )
    paid_by: str = Field(
        ...,
        min_length=1,
        description="ID of the participant who paid"
    )
    participants: list[str] = Field(
        ...,
        min_length=1,
        description="IDs of the participants sharing this expense"
    )
    created_at: datetime = Field(
        default_factory=utc_now,
        description="When the expense was recorded"
    )

    @property
    def share(self) -> Decimal:
        """Equal share owed by each participant."""
        return self.amount / len(self.participants)


class Settlement(LedgerModel):
    """
    A single payment that settles debt between two participants.

    Derived from expenses by the settlement resolver. `amount` is
    always positive and rounded to cents.
    """

    from_id: str = Field(
        ...,
        alias="from",
        description="Debtor participant ID"
    )
    to_id: str = Field(
        ...,
        alias="to",
        description="Creditor participant ID"
    )
    amount: Annotated[
        Money,
        Field(gt=0, description="Amount to transfer")
    ]


class SharePayload(LedgerModel):
    """
    Full splitter state as carried inside a share token.

    Both collections are required: a token without them is malformed
    and must be rejected rather than half-applied.
    """

    friends: list[Participant] = Field(
        ...,
        description="Roster at the time the link was generated"
    )
    expenses: list[Expense] = Field(
        ...,
        description="Expense list at the time the link was generated"
    )
    timestamp: Optional[datetime] = Field(
        default=None,
        description="When the token was generated"
    )

    @model_validator(mode="after")
    def check_unique_ids(self) -> "SharePayload":
        """Ids must be unique within each collection."""
        for label, items in (("friend", self.friends), ("expense", self.expenses)):
            repeated = duplicate_ids(items)
            if repeated:
                raise ValueError(f"Repeated {label} ids: {', '.join(repeated)}")
        return self


def duplicate_ids(items: Iterable[Union[Participant, Expense]]) -> list[str]:
    """Ids that occur more than once, in first-seen order."""
    seen: set[str] = set()
    repeated: list[str] = []
    for item in items:
        if item.id in seen and item.id not in repeated:
            repeated.append(item.id)
        seen.add(item.id)
    return repeated
