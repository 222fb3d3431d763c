"""
Settlement Ledger

Pure operations over a list of computed debts.

A debt moves one way only: Unsettled -> Settled. Reverting a settlement
is done at the storage layer by deleting the stored settled record and
recomputing.

Since debts are rebuilt from expenses on every call, stored settlement
state is matched back onto them by the (from, to) pair.
"""

from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional

from tripsplit.models.expense import Debt, SettlementOverview, utc_now


def mark_settled(
    debts: list[Debt],
    debtor: str,
    creditor: str,
    settled_at: Optional[datetime] = None,
) -> list[Debt]:
    """
    Return a new list with the matching unsettled debt marked settled.

    Every unsettled debt from `debtor` to `creditor` is replaced by a
    settled copy. Already settled debts keep their original timestamp,
    so calling this twice changes nothing the second time.

    Args:
        debts: Debts to update (not modified)
        debtor: Name of the paying participant
        creditor: Name of the receiving participant
        settled_at: Timestamp to record; defaults to now (UTC)
    """
    timestamp = settled_at or utc_now()

    return [
        debt.model_copy(update={"is_settled": True, "settled_at": timestamp})
        if debt.debtor == debtor and debt.creditor == creditor and not debt.is_settled
        else debt
        for debt in debts
    ]


def apply_settled_state(
    debts: list[Debt],
    settled_records: Iterable[Debt],
) -> list[Debt]:
    """
    Carry stored settlement state over to freshly computed debts.

    A debt is marked settled when a stored settled record has the same
    (from, to) pair. The record's settled_at is kept. Amounts are not
    compared: if expenses changed after settling, the pair stays settled
    until the stored record is removed.
    """
    settled_by_pair = {
        record.pair: record for record in settled_records if record.is_settled
    }

    updated = []
    for debt in debts:
        record = settled_by_pair.get(debt.pair)
        if record is not None and not debt.is_settled:
            debt = debt.model_copy(
                update={"is_settled": True, "settled_at": record.settled_at}
            )
        updated.append(debt)
    return updated


def find_debt(debts: list[Debt], debtor: str, creditor: str) -> Optional[Debt]:
    """First debt from `debtor` to `creditor`, or None."""
    for debt in debts:
        if debt.debtor == debtor and debt.creditor == creditor:
            return debt
    return None


def get_settled(debts: list[Debt]) -> list[Debt]:
    return [debt for debt in debts if debt.is_settled]


def get_unsettled(debts: list[Debt]) -> list[Debt]:
    return [debt for debt in debts if not debt.is_settled]


def get_total_settled_amount(debts: list[Debt]) -> Decimal:
    return sum((debt.amount for debt in get_settled(debts)), Decimal("0"))


def get_total_unsettled_amount(debts: list[Debt]) -> Decimal:
    return sum((debt.amount for debt in get_unsettled(debts)), Decimal("0"))


def summarize_settlements(debts: list[Debt]) -> SettlementOverview:
    """Split debts by settlement state and total each side."""
    return SettlementOverview(
        debts=debts,
        settled=get_settled(debts),
        unsettled=get_unsettled(debts),
        total_settled_amount=get_total_settled_amount(debts),
        total_unsettled_amount=get_total_unsettled_amount(debts),
    )
