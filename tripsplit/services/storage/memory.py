"""
In-Memory Storage Implementation

Keeps every record as the plain JSON-compatible dict an application
shell would write to its key-value store, and parses it back on read.
That keeps the wire field names (paidBy, splitBetween, from, to,
isSettled, settledAt) exercised even without a real backend.

Used by the tests and by create_app_components. Nothing is written to disk.
"""

from typing import Any, Optional

from tripsplit.models.audit import AuditEvent
from tripsplit.models.expense import (
    Debt,
    Expense,
    SettlementHistoryEntry,
    Trip,
)
from tripsplit.services.storage.interface import (
    AuditStorageInterface,
    DuplicateError,
    SettlementStorageInterface,
    TripStorageInterface,
)


class InMemoryTripStorage(TripStorageInterface, SettlementStorageInterface):
    """
    Trip, expense and settlement storage held in process memory.

    Records are stored under the same collections the application uses:
    trips, expenses, settled balances and settlement history.
    """

    def __init__(self):
        self._trips: dict[str, dict[str, Any]] = {}
        self._expenses: list[dict[str, Any]] = []
        self._settled_balances: list[dict[str, Any]] = []
        self._history: list[dict[str, Any]] = []

    # -------------------------------------------------------------------------
    # Trips and expenses
    # -------------------------------------------------------------------------

    async def get_trip(self, trip_id: str) -> Optional[Trip]:
        record = self._trips.get(trip_id)
        return Trip.model_validate(record) if record is not None else None

    async def save_trip(self, trip: Trip) -> bool:
        self._trips[trip.id] = trip.to_record()
        return True

    async def load_expenses(self, trip_id: str) -> list[Expense]:
        return [
            Expense.model_validate(record)
            for record in self._expenses
            if record.get("tripId") == trip_id
        ]

    async def add_expense(self, expense: Expense) -> bool:
        if any(record["id"] == expense.id for record in self._expenses):
            raise DuplicateError(f"Expense {expense.id} already exists")
        self._expenses.append(expense.to_record())
        return True

    # -------------------------------------------------------------------------
    # Settled balances
    # -------------------------------------------------------------------------

    async def load_settled_balances(self) -> list[Debt]:
        return [Debt.model_validate(record) for record in self._settled_balances]

    async def save_settled_balances(self, balances: list[Debt]) -> None:
        self._settled_balances = [balance.to_record() for balance in balances]

    async def add_settled_balance(self, balance: Debt) -> None:
        await self.delete_settled_balance(balance.debtor, balance.creditor)
        self._settled_balances.append(balance.to_record())

    async def delete_settled_balance(self, debtor: str, creditor: str) -> bool:
        remaining = [
            record for record in self._settled_balances
            if not (record["from"] == debtor and record["to"] == creditor)
        ]
        removed = len(remaining) != len(self._settled_balances)
        self._settled_balances = remaining
        return removed

    # -------------------------------------------------------------------------
    # Settlement history
    # -------------------------------------------------------------------------

    async def get_settlement_history(
        self,
        trip_id: Optional[str] = None,
    ) -> list[SettlementHistoryEntry]:
        return [
            SettlementHistoryEntry.model_validate(record)
            for record in self._history
            if trip_id is None or record["tripId"] == trip_id
        ]

    async def add_settlement_history(self, entry: SettlementHistoryEntry) -> None:
        self._history.append(entry.to_record())

    async def clear_settlement_history(self) -> int:
        count = len(self._history)
        self._history = []
        return count


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only audit log held in process memory."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    async def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    async def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        return list(reversed(self._events))[:limit]
