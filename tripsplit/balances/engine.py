"""
Balance Engine

Turns a list of expenses into the debts that settle everyone up.

ALGORITHM:
1. Net position per participant = amount paid - equal shares owed
2. Participants with a negative net are debtors, positive are creditors,
   exactly zero are left out
3. Largest debtor pays largest creditor min(debt, credit), repeat

The greedy match keeps the number of debts at most
debtors + creditors - 1. It is not a formally minimal edge count.

DESIGN DECISION: Remainders keep full Decimal precision during matching.
Amounts are rounded (2 places, half-up) only when a debt is emitted, so
rounding error does not build up across several matches for one person.

The engine is stateless, never raises and does NOT validate its input.
An expense with an empty split list credits its payers and charges no
one, so the group's positions no longer sum to zero. Negative amounts
flow through the arithmetic unchanged. Use ExpenseValidator to report
such problems before calling the engine.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from tripsplit.models.expense import (
    Debt,
    Expense,
    ParticipantSummary,
    TripSummary,
)


CENT = Decimal("0.01")
ZERO = Decimal("0")


def round_money(value: Decimal) -> Decimal:
    """Round to 2 decimal places, halves rounded away from zero."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def split_share(expense: Expense) -> Decimal:
    """Equal share owed by each member of the expense's split. The split must not be empty."""
    return expense.amount / len(expense.split_between)


def collect_participants(expenses: Iterable[Expense]) -> list[str]:
    """
    Every name that appears as a payer or split member.

    Order is discovery order: for each expense, payers first, then split
    members. This order decides ties later on.
    """
    seen: dict[str, None] = {}
    for expense in expenses:
        for payer in expense.paid_by:
            seen.setdefault(payer.name, None)
        for member in expense.split_between:
            seen.setdefault(member, None)
    return list(seen)


def compute_net_positions(expenses: list[Expense]) -> dict[str, Decimal]:
    """
    Net amount per participant: positive is owed money, negative owes money.

    A name can be both payer and split member of the same expense; the
    two effects simply add up.
    """
    net = {name: ZERO for name in collect_participants(expenses)}

    for expense in expenses:
        for payer in expense.paid_by:
            net[payer.name] += payer.amount
        # An empty split charges nobody; the payer is still credited
        if expense.split_between:
            share = split_share(expense)
            for member in expense.split_between:
                net[member] -= share

    return net


def match_debts(
    debtors: list[tuple[str, Decimal]],
    creditors: list[tuple[str, Decimal]],
) -> list[Debt]:
    """
    Greedily pair debtors with creditors.

    Args:
        debtors: (name, amount owed) pairs, amounts positive
        creditors: (name, amount due) pairs, amounts positive

    Both lists are sorted largest first. The sort is stable, so equal
    amounts keep their input order. That tie order is incidental and is
    not part of the result's correctness.

    A debtor who is also the current creditor is skipped without moving
    the creditor on. That only happens with inconsistent input.
    """
    debtor_queue = [
        [name, amount] for name, amount in sorted(debtors, key=lambda d: d[1], reverse=True)
    ]
    creditor_queue = [
        [name, amount] for name, amount in sorted(creditors, key=lambda c: c[1], reverse=True)
    ]

    debts: list[Debt] = []
    d = c = 0

    while d < len(debtor_queue) and c < len(creditor_queue):
        debtor = debtor_queue[d]
        creditor = creditor_queue[c]

        if debtor[0] == creditor[0]:
            d += 1
            continue

        amount = min(debtor[1], creditor[1])
        rounded = round_money(amount)

        # Sub-cent leftovers from the share division are absorbed silently
        if rounded > ZERO:
            debts.append(Debt(debtor=debtor[0], creditor=creditor[0], amount=rounded))

        debtor[1] -= amount
        creditor[1] -= amount

        if debtor[1] == ZERO:
            d += 1
        if creditor[1] == ZERO:
            c += 1

    return debts


def compute_balances(expenses: list[Expense]) -> list[Debt]:
    """
    Compute the debts that settle a list of expenses.

    Returns a fresh list of unsettled Debt records on every call.
    An empty expense list gives an empty result.
    """
    if not expenses:
        return []

    debtors: list[tuple[str, Decimal]] = []
    creditors: list[tuple[str, Decimal]] = []

    for name, amount in compute_net_positions(expenses).items():
        if amount < ZERO:
            debtors.append((name, -amount))
        elif amount > ZERO:
            creditors.append((name, amount))

    return match_debts(debtors, creditors)


def compute_trip_summary(expenses: list[Expense]) -> TripSummary:
    """
    Totals for a list of expenses.

    The total uses absolute amounts, so a stray negative expense does not
    reduce it.
    """
    total = sum((abs(expense.amount) for expense in expenses), ZERO)
    count = len(expenses)

    return TripSummary(
        total_expenses=total,
        expense_count=count,
        participant_count=len(collect_participants(expenses)),
        average_per_expense=total / count if count > 0 else ZERO,
    )


def compute_participant_summary(
    expenses: list[Expense],
    name: str,
) -> ParticipantSummary:
    """
    Paid, owed and net figures for one participant.

    expense_count counts appearances as a payer, not every expense the
    participant is involved in. A name that never appears gets all zeros
    and is reported as settled.
    """
    total_paid = ZERO
    total_owed = ZERO
    expense_count = 0

    for expense in expenses:
        for payer in expense.paid_by:
            if payer.name == name:
                total_paid += payer.amount
                expense_count += 1
        if name in expense.split_between:
            total_owed += split_share(expense)

    net_amount = total_paid - total_owed

    return ParticipantSummary(
        name=name,
        total_paid=total_paid,
        total_owed=total_owed,
        net_amount=net_amount,
        expense_count=expense_count,
        is_creditor=net_amount > ZERO,
        is_debtor=net_amount < ZERO,
        is_settled=net_amount == ZERO,
    )
