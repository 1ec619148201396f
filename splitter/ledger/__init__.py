"""Balance and settlement calculations."""

from splitter.ledger.calculator import (
    calculate_balances,
    calculate_settlements,
    round_money,
    total_spent,
)

__all__ = [
    "calculate_balances",
    "calculate_settlements",
    "round_money",
    "total_spent",
]
