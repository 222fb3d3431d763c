"""
Core Data Models for tripsplit

These models define the record schemas shared by the balance engine,
the settlement ledger and the storage collaborators.

They are designed to:
1. Match the stored JSON record field names (camelCase) exactly
2. Accept snake_case names from Python callers
3. Keep money as Decimal in Python and write it as JSON numbers

DESIGN DECISION: Expense amounts are NOT range-checked here. The engine
assumes well-formed input, and problems are reported by the
ExpenseValidator instead of being rejected at construction time.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Annotated, Any, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, model_validator
from pydantic.alias_generators import to_camel


# Decimal in Python, a plain JSON number in stored records
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def new_record_id() -> str:
    return uuid4().hex


class RecordModel(BaseModel):
    """Base for stored records: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    def to_record(self) -> dict[str, Any]:
        """Serialize to a plain JSON-compatible record using wire names."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# =============================================================================
# EXPENSES
# =============================================================================

class PayerShare(RecordModel):
    """One payer of an expense and how much they paid."""

    name: str
    amount: Money


class Expense(RecordModel):
    """
    A recorded expense.

    `paid_by` is always a list after construction. Older records that
    stored a single payer name as a plain string are normalized at
    ingestion: the named payer is credited with the full amount.

    Each member of `split_between` owes `amount / len(split_between)`.
    """

    id: str = Field(default_factory=new_record_id)
    trip_id: Optional[str] = None
    description: str = ""

    amount: Money
    paid_by: list[PayerShare] = Field(default_factory=list)
    split_between: list[str] = Field(default_factory=list)

    date: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @model_validator(mode="before")
    @classmethod
    def normalize_paid_by(cls, data: Any) -> Any:
        """Convert a bare payer name into a single full-amount PayerShare."""
        if not isinstance(data, dict):
            return data

        key = "paidBy" if "paidBy" in data else "paid_by"
        payers = data.get(key)

        if isinstance(payers, str):
            data = dict(data)
            data[key] = [{"name": payers, "amount": data.get("amount")}]
        elif payers is None and key in data:
            data = dict(data)
            data[key] = []

        return data

    @classmethod
    def single_payer(
        cls,
        payer: str,
        amount: Decimal | int | float | str,
        split_between: list[str],
        **kwargs: Any,
    ) -> "Expense":
        """Build an expense paid in full by one participant."""
        return cls(
            amount=amount,
            paid_by=[PayerShare(name=payer, amount=amount)],
            split_between=split_between,
            **kwargs,
        )

    @property
    def payer_names(self) -> list[str]:
        return [payer.name for payer in self.paid_by]


class Trip(RecordModel):
    """A group of participants sharing expenses."""

    id: str = Field(default_factory=new_record_id)
    name: str
    participants: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


# =============================================================================
# DEBTS
# =============================================================================

class Debt(RecordModel):
    """
    A directed debt produced by the balance engine.

    Debts have no identity of their own. They are recomputed from the
    expenses on every call, so settlement state is matched back to them
    by the (debtor, creditor) pair.

    Immutable: ledger operations return modified copies.
    """

    model_config = ConfigDict(frozen=True)

    debtor: str = Field(..., alias="from", description="Participant who pays")
    creditor: str = Field(..., alias="to", description="Participant who is paid")
    amount: Money = Field(..., description="Amount rounded to 2 decimal places")
    is_settled: bool = False
    settled_at: Optional[datetime] = Field(
        default=None,
        description="When the debt was marked settled (only set when settled)",
    )

    @property
    def pair(self) -> tuple[str, str]:
        return (self.debtor, self.creditor)


class SettlementHistoryEntry(RecordModel):
    """
    Append-only record of one settle action.

    Unlike settled balances, history entries keep the trip they belong to
    and are never rewritten when balances are recomputed.
    """

    id: str = Field(default_factory=new_record_id)
    debtor: str = Field(..., alias="from")
    creditor: str = Field(..., alias="to")
    amount: Money
    settled_at: datetime
    trip_id: str
    trip_name: str = ""


# =============================================================================
# SUMMARIES
# =============================================================================

class TripSummary(RecordModel):
    """Aggregate figures for a list of expenses."""

    total_expenses: Money
    expense_count: int
    participant_count: int
    average_per_expense: Money


class ParticipantSummary(RecordModel):
    """
    One participant's position across a list of expenses.

    NOTE: is_settled uses an exact zero check on net_amount, with no
    rounding tolerance.
    """

    name: str
    total_paid: Money
    total_owed: Money
    net_amount: Money
    expense_count: int = Field(
        ...,
        description="Number of times the participant appears as a payer",
    )
    is_creditor: bool
    is_debtor: bool
    is_settled: bool


class SettlementOverview(RecordModel):
    """Debts of a trip split into settled and unsettled, with totals."""

    debts: list[Debt] = Field(default_factory=list)
    settled: list[Debt] = Field(default_factory=list)
    unsettled: list[Debt] = Field(default_factory=list)
    total_settled_amount: Money = Decimal("0")
    total_unsettled_amount: Money = Decimal("0")


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single problem found in an expense."""

    expense_id: Optional[str] = Field(
        default=None,
        description="Expense with the issue"
    )
    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'empty_split', 'payer_mismatch')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )


class ValidationResult(BaseModel):
    """Result of validating a list of expenses."""

    validated_at: datetime = Field(default_factory=utc_now)
    expense_count: int = Field(ge=0)
    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def is_valid(self) -> bool:
        return not self.has_errors
