"""
Balance and Settlement Calculations

Both functions are pure: they take the roster and expense list and
return derived values without touching either.

DESIGN DECISION: Settlements are netted PAIRWISE only.
If A owes B and B owes C, the result is A -> B and B -> C, never A -> C.
Each settlement corresponds to real expenses between exactly those two
people, which keeps every payment explainable. This is deliberately NOT
a fewest-transactions algorithm and must not be "optimized" into one.

All arithmetic is Decimal. Shares are exact to the context precision and
only the final values are rounded to cents (ROUND_HALF_UP).
"""

from collections import defaultdict
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Sequence

from splitter.models.ledger import Expense, Participant, Settlement


CENT = Decimal("0.01")
DEFAULT_SETTLEMENT_EPSILON = Decimal("0.01")


def round_money(value: Decimal) -> Decimal:
    """Round to cents, half up."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def calculate_balances(
    roster: Sequence[Participant],
    expenses: Iterable[Expense],
) -> dict[str, Decimal]:
    """
    Net balance per participant.

    Positive means the participant should receive money, negative means
    they owe. Every roster participant appears, at 0 if they have no
    expenses. The payer is credited the full amount, including their own
    share, which nets out when they are also a participant.

    Ids referenced by expenses but missing from the roster still get an
    entry, so the balances always sum to zero.
    """
    balances: dict[str, Decimal] = {p.id: Decimal(0) for p in roster}

    for expense in expenses:
        share = expense.share
        for participant_id in expense.participants:
            balances[participant_id] = balances.get(participant_id, Decimal(0)) - share
        balances[expense.paid_by] = balances.get(expense.paid_by, Decimal(0)) + expense.amount

    return {pid: round_money(amount) for pid, amount in balances.items()}


def calculate_settlements(
    roster: Sequence[Participant],
    expenses: Iterable[Expense],
    epsilon: Decimal = DEFAULT_SETTLEMENT_EPSILON,
) -> list[Settlement]:
    """
    Pairwise-netted payments, largest first.

    1. owes[A][B] accumulates A's share of every expense B paid for.
    2. For each ordered pair, net = owes[A][B] - owes[B][A]; a positive net
       above `epsilon` becomes a settlement A -> B.
    3. Sorted by amount descending; ties keep roster-pair order.

    Only roster participants take part. Debts involving ids that are no
    longer on the roster are ignored.
    """
    owes: dict[str, dict[str, Decimal]] = defaultdict(lambda: defaultdict(Decimal))

    for expense in expenses:
        share = expense.share
        for participant_id in expense.participants:
            if participant_id != expense.paid_by:
                owes[participant_id][expense.paid_by] += share

    settlements = []
    for debtor in roster:
        for creditor in roster:
            if debtor.id == creditor.id:
                continue
            net = owes[debtor.id][creditor.id] - owes[creditor.id][debtor.id]
            amount = round_money(net)
            if net > epsilon and amount > 0:
                settlements.append(
                    Settlement(from_id=debtor.id, to_id=creditor.id, amount=amount)
                )

    # sorted() is stable
    return sorted(settlements, key=lambda s: s.amount, reverse=True)


def total_spent(expenses: Iterable[Expense]) -> Decimal:
    """Sum of all expense amounts, ignoring currency tags."""
    return sum((e.amount for e in expenses), Decimal(0))
