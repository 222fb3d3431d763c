"""
Tests for the balance engine.

No storage involved - the engine is a set of pure functions.
"""

from decimal import Decimal

from tripsplit.balances.engine import (
    collect_participants,
    compute_balances,
    compute_net_positions,
    compute_participant_summary,
    compute_trip_summary,
    match_debts,
    round_money,
)
from tripsplit.models.expense import Debt, Expense, PayerShare


def expense(amount, paid_by, split_between) -> Expense:
    """Build an expense; paid_by is a payer name or a list of (name, amount)."""
    if isinstance(paid_by, str):
        return Expense.single_payer(paid_by, amount, split_between)
    return Expense(
        amount=amount,
        paid_by=[PayerShare(name=name, amount=paid) for name, paid in paid_by],
        split_between=split_between,
    )


def as_set(debts: list[Debt]) -> set[tuple[str, str, Decimal]]:
    return {(d.debtor, d.creditor, d.amount) for d in debts}


def assert_reconciles(expenses: list[Expense], debts: list[Debt]) -> None:
    """Every net position is cleared to within half a cent per debt touching it."""
    # Each debt is rounded on its own, so a party with several debts can
    # drift by up to 0.005 per debt. With one or two debts this is the
    # plain 0.01 bound.
    net = compute_net_positions(expenses)
    for name, amount in net.items():
        touching = sum(1 for d in debts if name in d.pair)
        tolerance = max(Decimal("0.01"), Decimal("0.005") * touching)
        paid_out = sum((d.amount for d in debts if d.debtor == name), Decimal("0"))
        received = sum((d.amount for d in debts if d.creditor == name), Decimal("0"))
        assert abs(amount + paid_out - received) <= tolerance, name


class TestRoundMoney:
    """Tests for 2-place half-up rounding."""

    def test_rounds_half_up(self):
        assert round_money(Decimal("2.675")) == Decimal("2.68")
        assert round_money(Decimal("2.665")) == Decimal("2.67")

    def test_rounds_down_below_half(self):
        assert round_money(Decimal("33.333333")) == Decimal("33.33")

    def test_keeps_two_places(self):
        assert str(round_money(Decimal("100"))) == "100.00"


class TestParticipants:
    """Tests for participant discovery and net positions."""

    def test_collects_payers_then_split_members(self):
        """Test discovery order is payers first, per expense."""
        expenses = [
            expense(30, "Carol", ["Alice", "Bob", "Carol"]),
            expense(10, "Dave", ["Alice"]),
        ]
        assert collect_participants(expenses) == ["Carol", "Alice", "Bob", "Dave"]

    def test_payer_outside_split_is_a_participant(self):
        """Test someone who paid but shares nothing still appears."""
        expenses = [expense(20, "Alice", ["Bob", "Carol"])]
        assert set(collect_participants(expenses)) == {"Alice", "Bob", "Carol"}

    def test_net_positions_single_expense(self):
        """Test A pays 300 split three ways."""
        net = compute_net_positions([expense(300, "A", ["A", "B", "C"])])
        assert net == {"A": Decimal("200"), "B": Decimal("-100"), "C": Decimal("-100")}

    def test_net_positions_sum_to_zero(self):
        """Test net positions balance out when payers cover each amount."""
        expenses = [
            expense(90, [("A", 60), ("B", 30)], ["A", "B", "C"]),
            expense(45, "C", ["B", "C"]),
        ]
        net = compute_net_positions(expenses)
        assert sum(net.values()) == Decimal("0")
        assert net["A"] == Decimal("30")
        assert net["B"] == Decimal("-22.5")
        assert net["C"] == Decimal("-7.5")


class TestComputeBalances:
    """Tests for compute_balances."""

    def test_empty_expenses_gives_no_debts(self):
        assert compute_balances([]) == []

    def test_three_way_split(self):
        """Test A pays 300 for A, B and C."""
        debts = compute_balances([expense(300, "A", ["A", "B", "C"])])
        assert as_set(debts) == {
            ("B", "A", Decimal("100.00")),
            ("C", "A", Decimal("100.00")),
        }
        assert all(d.is_settled is False for d in debts)
        assert all(d.settled_at is None for d in debts)

    def test_mirrored_expenses_cancel_out(self):
        """Test two equal expenses paid by each side produce no debts."""
        expenses = [
            expense(100, "A", ["A", "B"]),
            expense(100, "B", ["A", "B"]),
        ]
        assert compute_balances(expenses) == []

    def test_sole_payer_and_sole_member(self):
        """Test paying for yourself alone nets to zero."""
        assert compute_balances([expense(75, "A", ["A"])]) == []

    def test_payer_not_in_split(self):
        """Test a payer who does not share the cost is owed all of it."""
        debts = compute_balances([expense(50, "A", ["B", "C"])])
        assert as_set(debts) == {
            ("B", "A", Decimal("25.00")),
            ("C", "A", Decimal("25.00")),
        }

    def test_multiple_payers(self):
        """Test an expense paid by two people."""
        expenses = [expense(90, [("A", 60), ("B", 30)], ["A", "B", "C"])]
        debts = compute_balances(expenses)
        assert as_set(debts) == {("C", "A", Decimal("30.00"))}

    def test_largest_debtor_meets_largest_creditor(self):
        """Test greedy matching order."""
        expenses = [
            expense(100, "A", ["A", "B", "C", "D"]),
            expense(60, "B", ["B", "C", "D"]),
        ]
        # A +75, B +15, C -45, D -45
        debts = compute_balances(expenses)
        assert debts[0] == Debt(debtor="C", creditor="A", amount=Decimal("45.00"))
        assert len(debts) == 3
        assert_reconciles(expenses, debts)

    def test_debt_count_is_bounded(self):
        """Test at most debtors + creditors - 1 debts are produced."""
        expenses = [
            expense(120, "A", ["A", "B", "C", "D", "E"]),
            expense(80, "B", ["C", "D"]),
            expense(35, "E", ["A", "E"]),
        ]
        net = compute_net_positions(expenses)
        parties = sum(1 for amount in net.values() if amount != 0)
        debts = compute_balances(expenses)
        assert len(debts) <= parties - 1
        assert_reconciles(expenses, debts)

    def test_thirds_round_at_emission(self):
        """Test a 100 split three ways rounds each debt to 33.33."""
        expenses = [expense(100, "A", ["A", "B", "C"])]
        debts = compute_balances(expenses)
        assert as_set(debts) == {
            ("B", "A", Decimal("33.33")),
            ("C", "A", Decimal("33.33")),
        }
        assert_reconciles(expenses, debts)

    def test_reconciles_uneven_group(self):
        """Test debts clear every net position within rounding tolerance."""
        expenses = [
            expense("47.35", "A", ["A", "B", "C"]),
            expense("19.99", "B", ["A", "B", "C", "D", "E", "F", "G"]),
            expense("120", [("C", "100"), ("D", "20")], ["A", "D", "E"]),
            expense("8.10", "G", ["F"]),
        ]
        debts = compute_balances(expenses)
        assert all(d.amount > 0 for d in debts)
        assert_reconciles(expenses, debts)

    def test_equal_amounts_keep_discovery_order(self):
        """Test ties are broken by participant discovery order."""
        debts = compute_balances([expense(300, "A", ["A", "B", "C"])])
        assert [d.debtor for d in debts] == ["B", "C"]

    def test_recomputation_gives_fresh_equal_results(self):
        """Test the engine is stateless."""
        expenses = [expense(300, "A", ["A", "B", "C"])]
        assert compute_balances(expenses) == compute_balances(expenses)

    def test_empty_split_credits_payer_without_raising(self):
        """Test an expense split between nobody only credits its payer."""
        expenses = [
            expense(100, "A", []),
            expense(30, "B", ["B", "C"]),
        ]
        # A +100, B +15, C -15: the largest creditor is paid first
        assert compute_net_positions(expenses) == {
            "A": Decimal("100"),
            "B": Decimal("15"),
            "C": Decimal("-15"),
        }
        assert as_set(compute_balances(expenses)) == {("C", "A", Decimal("15.00"))}

    def test_only_empty_splits_give_no_debts(self):
        assert compute_balances([expense(10, "A", [])]) == []


class TestMatchDebts:
    """Tests for the greedy matcher on raw positions."""

    def test_skips_debtor_equal_to_creditor(self):
        """Test inconsistent input where a name is on both sides."""
        debts = match_debts(
            debtors=[("A", Decimal("50")), ("B", Decimal("20"))],
            creditors=[("A", Decimal("20"))],
        )
        assert debts == [Debt(debtor="B", creditor="A", amount=Decimal("20.00"))]

    def test_stops_when_one_side_runs_out(self):
        debts = match_debts(
            debtors=[("B", Decimal("10"))],
            creditors=[("A", Decimal("5")), ("C", Decimal("5")), ("D", Decimal("5"))],
        )
        assert as_set(debts) == {
            ("B", "A", Decimal("5.00")),
            ("B", "C", Decimal("5.00")),
        }

    def test_sub_cent_remainder_emits_nothing(self):
        """Test a leftover that rounds to 0.00 does not become a debt."""
        debts = match_debts(
            debtors=[("B", Decimal("0.004"))],
            creditors=[("A", Decimal("0.004"))],
        )
        assert debts == []


class TestTripSummary:
    """Tests for compute_trip_summary."""

    def test_summary(self):
        expenses = [
            expense(300, "A", ["A", "B", "C"]),
            expense(100, "D", ["A"]),
        ]
        summary = compute_trip_summary(expenses)
        assert summary.total_expenses == Decimal("400")
        assert summary.expense_count == 2
        assert summary.participant_count == 4
        assert summary.average_per_expense == Decimal("200")

    def test_empty_summary_has_zero_average(self):
        summary = compute_trip_summary([])
        assert summary.total_expenses == Decimal("0")
        assert summary.expense_count == 0
        assert summary.participant_count == 0
        assert summary.average_per_expense == Decimal("0")

    def test_negative_amounts_count_as_absolute(self):
        summary = compute_trip_summary([expense(-50, "A", ["A"]), expense(30, "B", ["B"])])
        assert summary.total_expenses == Decimal("80")


class TestParticipantSummary:
    """Tests for compute_participant_summary."""

    def test_creditor_summary(self):
        summary = compute_participant_summary([expense(300, "A", ["A", "B", "C"])], "A")
        assert summary.total_paid == Decimal("300")
        assert summary.total_owed == Decimal("100")
        assert summary.net_amount == Decimal("200")
        assert summary.expense_count == 1
        assert summary.is_creditor is True
        assert summary.is_debtor is False
        assert summary.is_settled is False

    def test_debtor_summary(self):
        summary = compute_participant_summary([expense(300, "A", ["A", "B", "C"])], "B")
        assert summary.total_paid == Decimal("0")
        assert summary.net_amount == Decimal("-100")
        assert summary.expense_count == 0
        assert summary.is_debtor is True

    def test_unknown_participant_is_settled(self):
        summary = compute_participant_summary([expense(300, "A", ["A", "B", "C"])], "Zoe")
        assert summary.total_paid == 0
        assert summary.total_owed == 0
        assert summary.net_amount == 0
        assert summary.expense_count == 0
        assert summary.is_settled is True
        assert summary.is_creditor is False
        assert summary.is_debtor is False

    def test_empty_split_only_adds_to_paid(self):
        expenses = [expense(40, "A", []), expense(30, "B", ["A", "B"])]
        summary = compute_participant_summary(expenses, "A")
        assert summary.total_paid == Decimal("40")
        assert summary.total_owed == Decimal("15")
        assert summary.net_amount == Decimal("25")

    def test_expense_count_counts_payer_appearances(self):
        """Test being in a split does not count; each payer entry does."""
        expenses = [
            expense(60, [("A", 30), ("B", 30)], ["A", "B"]),
            expense(20, "A", ["A", "B"]),
            expense(10, "B", ["A"]),
        ]
        assert compute_participant_summary(expenses, "A").expense_count == 2

    def test_settled_uses_exact_zero(self):
        """Test a sub-cent net from thirds is not treated as settled."""
        expenses = [
            expense(1, "A", ["A", "B", "C"]),
            expense(1, "B", ["A", "B", "C"]),
            expense(1, "C", ["A", "B", "C"]),
        ]
        summary = compute_participant_summary(expenses, "A")
        assert summary.net_amount != 0
        assert abs(summary.net_amount) < Decimal("0.01")
        assert summary.is_settled is False
        # the engine itself emits nothing for such dust
        assert compute_balances(expenses) == []
