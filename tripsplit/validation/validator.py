"""
Expense Validation

The balance engine assumes well-formed expenses and does not check them.
Malformed input quietly produces meaningless debts: an empty split list
credits the payer without charging anyone, negative amounts flow
through, and payers may not add up to the total.

This validator finds those problems BEFORE the engine runs.

IMPORTANT: Validation NEVER silently fixes issues.
It reports them; the caller decides what to do.
"""

from collections import Counter
from decimal import Decimal
from typing import Optional

from tripsplit.config import get_settings
from tripsplit.models.expense import Expense, ValidationIssue, ValidationResult


class ExpenseValidator:
    """
    Checks expense records for problems the engine would not catch.

    Errors (the engine result would be wrong):
    - empty split list
    - no payers
    - blank payer or split member names
    - negative amounts

    Warnings:
    - payer amounts not adding up to the expense amount
    - the same name listed twice in a split
    """

    def __init__(self, payer_sum_tolerance: Optional[Decimal] = None):
        """
        Args:
            payer_sum_tolerance: Allowed payer total difference.
                                Defaults to the configured tolerance.
        """
        if payer_sum_tolerance is None:
            payer_sum_tolerance = Decimal(str(get_settings().app.payer_sum_tolerance))
        self._tolerance = payer_sum_tolerance

    def validate(self, expenses: list[Expense]) -> ValidationResult:
        issues: list[ValidationIssue] = []
        for expense in expenses:
            issues.extend(self._validate_expense(expense))

        return ValidationResult(
            expense_count=len(expenses),
            issues=issues,
        )

    def _validate_expense(self, expense: Expense) -> list[ValidationIssue]:
        issues = []

        def issue(field: str, issue_type: str, message: str, severity: str = "error"):
            issues.append(ValidationIssue(
                expense_id=expense.id,
                field=field,
                issue_type=issue_type,
                message=message,
                severity=severity,
            ))

        if expense.amount < 0:
            issue(
                "amount", "negative_amount",
                f"Expense amount ({expense.amount}) is negative",
            )

        if not expense.split_between:
            issue(
                "splitBetween", "empty_split",
                "Expense is not split between anyone",
            )
        else:
            if any(not name for name in expense.split_between):
                issue("splitBetween", "blank_name", "Split contains a blank name")

            duplicates = [
                name for name, count in Counter(expense.split_between).items()
                if count > 1
            ]
            if duplicates:
                issue(
                    "splitBetween", "duplicate_member",
                    f"Listed more than once in the split: {', '.join(duplicates)}",
                    severity="warning",
                )

        if not expense.paid_by:
            issue("paidBy", "no_payers", "Expense has no payers")
            return issues

        if any(not payer.name for payer in expense.paid_by):
            issue("paidBy", "blank_name", "A payer has a blank name")

        if any(payer.amount < 0 for payer in expense.paid_by):
            issue("paidBy", "negative_amount", "A payer has a negative amount")

        paid = sum((payer.amount for payer in expense.paid_by), Decimal("0"))
        if abs(paid - expense.amount) > self._tolerance:
            issue(
                "paidBy", "payer_mismatch",
                f"Payers cover {paid} of an expense of {expense.amount}",
                severity="warning",
            )

        return issues
