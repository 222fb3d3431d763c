"""
Data Models Package

This package contains all Pydantic models used in tripsplit.
All data flowing through the engine, ledger and storage must conform to these schemas.
"""

from tripsplit.models.expense import (
    Debt,
    Expense,
    ParticipantSummary,
    PayerShare,
    SettlementHistoryEntry,
    SettlementOverview,
    Trip,
    TripSummary,
    ValidationIssue,
    ValidationResult,
)
from tripsplit.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Expense and debt models
    "Debt",
    "Expense",
    "ParticipantSummary",
    "PayerShare",
    "SettlementHistoryEntry",
    "SettlementOverview",
    "Trip",
    "TripSummary",
    "ValidationIssue",
    "ValidationResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
