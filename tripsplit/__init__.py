"""
tripsplit - Shared Expense Settlement Package

Settlement logic for a shared-expense (trip) tracker: works out who owes
whom from recorded expenses and tracks which of those debts are settled.

DESIGN PRINCIPLES:
1. Balances are recomputed from expenses, never stored
2. The balance engine and ledger are pure functions
3. No silent corrections - bad input is reported, not fixed
4. Every settlement is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "tripsplit Team"
