"""
Audit Models for tripsplit

Every settlement action is logged for audit purposes.
Debts themselves are recomputed on every call, so the audit trail is
the only place that shows when balances were looked at and when a debt
changed state.

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from tripsplit.models.expense import utc_now


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Balance computation
    BALANCES_COMPUTED = "balances_computed"
    EXPENSE_VALIDATION_FAILED = "expense_validation_failed"

    # Settlement state
    DEBT_SETTLED = "debt_settled"
    SETTLEMENT_REVERTED = "settlement_reverted"
    SETTLEMENT_HISTORY_CLEARED = "settlement_history_cleared"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every settlement action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=utc_now,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'trip', 'debt')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., all events in one settle call)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


def debt_entity_id(debtor: str, creditor: str) -> str:
    """Debts have no stored id; the pair is the identity."""
    return f"{debtor}->{creditor}"


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.balances_computed(trip_id, 3, 2, correlation_id)
        event = AuditEventBuilder.debt_settled(trip_id, "Bob", "Alice", amount, "Rs.", correlation_id)
    """

    @staticmethod
    def balances_computed(
        trip_id: str,
        expense_count: int,
        debt_count: int,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BALANCES_COMPUTED,
            severity=AuditSeverity.DEBUG,
            entity_type="trip",
            entity_id=trip_id,
            correlation_id=correlation_id,
            description=f"Computed {debt_count} debts from {expense_count} expenses",
            details={
                "expense_count": expense_count,
                "debt_count": debt_count,
            },
        )

    @staticmethod
    def expense_validation_failed(
        trip_id: str,
        issues: list[dict],
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="trip",
            entity_id=trip_id,
            correlation_id=correlation_id,
            description=f"Expense validation failed with {len(issues)} issues",
            details={
                "issues": issues,
            },
        )

    @staticmethod
    def debt_settled(
        trip_id: str,
        debtor: str,
        creditor: str,
        amount: Decimal,
        currency: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DEBT_SETTLED,
            entity_type="debt",
            entity_id=debt_entity_id(debtor, creditor),
            correlation_id=correlation_id,
            description=f"{debtor} settled {currency}{amount:.2f} with {creditor}",
            details={
                "trip_id": trip_id,
                "from": debtor,
                "to": creditor,
                "amount": str(amount),
            },
            is_user_action=True,
        )

    @staticmethod
    def settlement_reverted(
        trip_id: str,
        debtor: str,
        creditor: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SETTLEMENT_REVERTED,
            severity=AuditSeverity.WARNING,
            entity_type="debt",
            entity_id=debt_entity_id(debtor, creditor),
            correlation_id=correlation_id,
            description=f"Settlement of {debtor} -> {creditor} reverted",
            details={
                "trip_id": trip_id,
                "from": debtor,
                "to": creditor,
            },
            is_user_action=True,
        )

    @staticmethod
    def settlement_history_cleared(
        entry_count: int,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SETTLEMENT_HISTORY_CLEARED,
            severity=AuditSeverity.WARNING,
            correlation_id=correlation_id,
            description=f"Settlement history cleared ({entry_count} entries)",
            details={
                "entry_count": entry_count,
            },
            is_user_action=True,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
