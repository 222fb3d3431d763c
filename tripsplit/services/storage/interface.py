"""
Abstract Storage Interface

DESIGN DECISION: The settlement flow never talks to a concrete store.
It receives storage objects implementing these interfaces. This allows us to:
1. Keep the balance engine free of persistence concerns
2. Use in-memory storage for testing
3. Plug in whatever key-value or database backend the application shell uses

The interface is intentionally small - only the load/save operations
the settlement flow needs.
"""

from abc import ABC, abstractmethod
from typing import Optional

from tripsplit.models.audit import AuditEvent
from tripsplit.models.expense import (
    Debt,
    Expense,
    SettlementHistoryEntry,
    Trip,
)


class TripStorageInterface(ABC):
    """
    Abstract interface for trips and their expenses.
    """

    @abstractmethod
    async def get_trip(self, trip_id: str) -> Optional[Trip]:
        """
        Retrieve a trip by its ID.

        Returns:
            The trip if found, None otherwise
        """
        pass

    @abstractmethod
    async def save_trip(self, trip: Trip) -> bool:
        """
        Insert or replace a trip.

        Returns:
            True if saved successfully

        Raises:
            StorageError: If save fails
        """
        pass

    @abstractmethod
    async def load_expenses(self, trip_id: str) -> list[Expense]:
        """
        Load every expense recorded for a trip.

        Args:
            trip_id: The trip's identifier

        Returns:
            Expenses in the order they were recorded (empty if none)
        """
        pass

    @abstractmethod
    async def add_expense(self, expense: Expense) -> bool:
        """
        Record a new expense.

        Raises:
            DuplicateError: If an expense with the same id exists
        """
        pass


class SettlementStorageInterface(ABC):
    """
    Abstract interface for settled balances and settlement history.

    Settled balances are keyed by the (from, to) pair, with at most one
    record per pair. Settlement history is append-only.
    """

    @abstractmethod
    async def load_settled_balances(self) -> list[Debt]:
        """Load all stored settled balance records."""
        pass

    @abstractmethod
    async def save_settled_balances(self, balances: list[Debt]) -> None:
        """Replace all stored settled balance records."""
        pass

    @abstractmethod
    async def add_settled_balance(self, balance: Debt) -> None:
        """
        Store a settled balance.

        Replaces any existing record with the same (from, to) pair.
        """
        pass

    @abstractmethod
    async def delete_settled_balance(self, debtor: str, creditor: str) -> bool:
        """
        Remove the settled record for a (from, to) pair.

        Returns:
            True if a record was removed
        """
        pass

    @abstractmethod
    async def get_settlement_history(
        self,
        trip_id: Optional[str] = None,
    ) -> list[SettlementHistoryEntry]:
        """
        Get settlement history entries, oldest first.

        Args:
            trip_id: Only return entries for this trip if given
        """
        pass

    @abstractmethod
    async def add_settlement_history(self, entry: SettlementHistoryEntry) -> None:
        """Append a settlement history entry."""
        pass

    @abstractmethod
    async def clear_settlement_history(self) -> int:
        """
        Delete all settlement history.

        Returns:
            Number of entries removed
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass
