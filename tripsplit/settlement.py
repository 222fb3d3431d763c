"""
Settlement Flow for tripsplit

This module ties the pure balance engine and settlement ledger to the
storage collaborators, and defines the flows an application shell calls:
1. Balances (load expenses -> validate -> compute debts -> apply settled state)
2. Settle (mark a debt settled -> store it -> record history)
3. Revert (remove a stored settlement -> recompute)

DESIGN DECISION: The flow is the only place that performs I/O or raises
errors of its own. The engine and ledger stay pure and never see storage.

Every state change is audited.
"""

from typing import Optional
from uuid import UUID

import structlog

from tripsplit.audit import AuditLogger, create_correlation_id
from tripsplit.balances import (
    apply_settled_state,
    compute_balances,
    compute_participant_summary,
    compute_trip_summary,
    find_debt,
    mark_settled,
    summarize_settlements,
)
from tripsplit.config import get_settings
from tripsplit.models.expense import (
    Debt,
    Expense,
    ParticipantSummary,
    SettlementHistoryEntry,
    SettlementOverview,
    TripSummary,
    ValidationResult,
)
from tripsplit.services.storage import (
    InMemoryAuditStorage,
    InMemoryTripStorage,
    SettlementStorageInterface,
    StorageError,
    TripStorageInterface,
)
from tripsplit.validation import ExpenseValidator


logger = structlog.get_logger(__name__)


class SettlementError(Exception):
    """Base exception for settlement flow errors."""
    pass


class DebtNotFoundError(SettlementError):
    """No computed debt exists for the requested (from, to) pair."""

    def __init__(self, trip_id: str, debtor: str, creditor: str):
        self.trip_id = trip_id
        self.debtor = debtor
        self.creditor = creditor
        super().__init__(f"No debt from {debtor} to {creditor} in trip {trip_id}")


class InvalidExpenseError(SettlementError):
    """The trip's expenses have error-level validation issues."""

    def __init__(self, trip_id: str, result: ValidationResult):
        self.trip_id = trip_id
        self.result = result
        super().__init__(
            f"Trip {trip_id} has {result.error_count} invalid expense issue(s)"
        )


class SettlementFlow:
    """
    Orchestrates balance and settlement operations for trips.

    Flow for settling:
    1. Recompute debts from the trip's expenses
    2. Re-apply stored settled state by (from, to)
    3. Mark the requested debt settled
    4. Store the settled record and append a history entry
    5. Audit

    Settling a debt that is already settled changes nothing.
    """

    def __init__(
        self,
        trip_storage: TripStorageInterface,
        settlement_storage: SettlementStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
        validator: Optional[ExpenseValidator] = None,
    ):
        self._trips = trip_storage
        self._settlements = settlement_storage
        self._audit = audit_logger or AuditLogger()
        self._validator = validator or ExpenseValidator()
        self._settings = get_settings().app

    async def _load_expenses(self, trip_id: str, correlation_id: UUID) -> list[Expense]:
        """Load a trip's expenses, rejecting them if validation finds errors."""
        expenses = await self._trips.load_expenses(trip_id)

        if self._settings.validate_expenses:
            result = self._validator.validate(expenses)
            if result.has_errors:
                await self._audit.log_validation_failed(
                    trip_id=trip_id,
                    issues=[issue.model_dump(mode="json") for issue in result.issues],
                    correlation_id=correlation_id,
                )
                raise InvalidExpenseError(trip_id, result)

        return expenses

    async def _compute(
        self,
        trip_id: str,
        correlation_id: UUID,
        expenses: Optional[list[Expense]] = None,
    ) -> list[Debt]:
        if expenses is None:
            expenses = await self._load_expenses(trip_id, correlation_id)
        debts = compute_balances(expenses)
        settled = await self._settlements.load_settled_balances()
        debts = apply_settled_state(debts, settled)

        await self._audit.log_balances_computed(
            trip_id=trip_id,
            expense_count=len(expenses),
            debt_count=len(debts),
            correlation_id=correlation_id,
        )
        return debts

    async def get_balances(self, trip_id: str) -> list[Debt]:
        """
        Current debts for a trip, with stored settlement state applied.

        Raises:
            InvalidExpenseError: If validation is enabled and fails
        """
        return await self._compute(trip_id, create_correlation_id())

    async def get_overview(self, trip_id: str) -> SettlementOverview:
        """Debts for a trip split into settled and unsettled, with totals."""
        debts = await self.get_balances(trip_id)
        return summarize_settlements(debts)

    async def get_trip_summary(self, trip_id: str) -> TripSummary:
        expenses = await self._load_expenses(trip_id, create_correlation_id())
        return compute_trip_summary(expenses)

    async def get_participant_summary(
        self,
        trip_id: str,
        name: str,
    ) -> ParticipantSummary:
        expenses = await self._load_expenses(trip_id, create_correlation_id())
        return compute_participant_summary(expenses, name)

    async def settle_debt(
        self,
        trip_id: str,
        debtor: str,
        creditor: str,
    ) -> list[Debt]:
        """
        Mark the debt from `debtor` to `creditor` as settled.

        Returns:
            The trip's debts after the change

        Raises:
            DebtNotFoundError: If the trip has no such debt
            StorageError: If the settlement could not be stored. The
                          failure is audited before it is re-raised.
        """
        correlation_id = create_correlation_id()
        debts = await self._compute(trip_id, correlation_id)

        existing = find_debt(debts, debtor, creditor)
        if existing is None:
            raise DebtNotFoundError(trip_id, debtor, creditor)

        if existing.is_settled:
            logger.info(
                "debt_already_settled",
                trip_id=trip_id,
                debtor=debtor,
                creditor=creditor,
            )
            return debts

        updated = mark_settled(debts, debtor, creditor)
        settled = find_debt(updated, debtor, creditor)

        trip = await self._trips.get_trip(trip_id)

        try:
            await self._settlements.add_settled_balance(settled)
            await self._settlements.add_settlement_history(
                SettlementHistoryEntry(
                    debtor=settled.debtor,
                    creditor=settled.creditor,
                    amount=settled.amount,
                    settled_at=settled.settled_at,
                    trip_id=trip_id,
                    trip_name=trip.name if trip else "",
                )
            )
        except StorageError as e:
            await self._audit.log_error(
                error_type="settlement_storage_failed",
                error_message=str(e),
                details={
                    "trip_id": trip_id,
                    "from": debtor,
                    "to": creditor,
                },
                correlation_id=correlation_id,
            )
            raise

        await self._audit.log_debt_settled(
            trip_id=trip_id,
            debtor=debtor,
            creditor=creditor,
            amount=settled.amount,
            correlation_id=correlation_id,
        )

        return updated

    async def unsettle_debt(
        self,
        trip_id: str,
        debtor: str,
        creditor: str,
    ) -> list[Debt]:
        """
        Remove the stored settlement for a (from, to) pair.

        History entries are kept. Returns the recomputed debts.

        The trip's expenses are validated before anything is deleted, so
        an InvalidExpenseError leaves the stored settlement in place.
        """
        correlation_id = create_correlation_id()
        expenses = await self._load_expenses(trip_id, correlation_id)
        removed = await self._settlements.delete_settled_balance(debtor, creditor)

        if removed:
            await self._audit.log_settlement_reverted(
                trip_id=trip_id,
                debtor=debtor,
                creditor=creditor,
                correlation_id=correlation_id,
            )
        else:
            logger.info(
                "settlement_not_found",
                trip_id=trip_id,
                debtor=debtor,
                creditor=creditor,
            )

        return await self._compute(trip_id, correlation_id, expenses)

    async def get_settlement_history(
        self,
        trip_id: Optional[str] = None,
    ) -> list[SettlementHistoryEntry]:
        return await self._settlements.get_settlement_history(trip_id)

    async def clear_settlement_history(self) -> int:
        """Delete all settlement history. Settled balances are not touched."""
        count = await self._settlements.clear_settlement_history()
        await self._audit.log_history_cleared(
            entry_count=count,
            correlation_id=create_correlation_id(),
        )
        return count


def create_app_components(
    storage: Optional[InMemoryTripStorage] = None,
    persist_audit: bool = True,
) -> tuple[SettlementFlow, InMemoryTripStorage]:
    """
    Factory function to create the settlement flow and its storage.

    Args:
        storage: Storage to use. A fresh in-memory store if None.
        persist_audit: Keep audit events in an in-memory audit store.
                      Set to False for local-only audit logging.

    Returns:
        (settlement_flow, storage)
    """
    storage = storage or InMemoryTripStorage()
    audit_logger = AuditLogger(InMemoryAuditStorage() if persist_audit else None)

    flow = SettlementFlow(
        trip_storage=storage,
        settlement_storage=storage,
        audit_logger=audit_logger,
    )

    return flow, storage
