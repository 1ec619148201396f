"""
Expense Splitter - Source Package

Tracks shared expenses for a small group and works out who owes whom.

DESIGN PRINCIPLES:
1. Balances and settlements are pure functions of roster + expenses
2. Settlements are netted pairwise, never across chains of people
3. Money is Decimal end to end
4. In-memory state is the truth; storage is a best-effort mirror
5. A malformed share token never touches existing state
"""

__version__ = "1.0.0"
__author__ = "Expense Splitter Team"
