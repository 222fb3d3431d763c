"""
Audit Logger

DESIGN DECISION: Every settlement action is logged.
This provides:
1. Traceability of who settled what, and when
2. Debugging capability when balances look wrong
3. A record of reverted settlements, which the ledger itself cannot show

The audit logger:
- Is async to match the storage interfaces
- Gracefully handles failures (doesn't crash the flow if logging fails)
- Supports correlation IDs to trace related events
"""

import logging
import sys
from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4

import structlog

from tripsplit.config import get_settings
from tripsplit.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from tripsplit.services.storage import AuditStorageInterface


def configure_logging() -> None:
    """Configure structlog on top of stdlib logging from LoggingSettings."""
    settings = get_settings().logging

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.level),
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if settings.json_logs
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


configure_logging()


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage (for persistence), when one is configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger(__name__)
        self._currency = get_settings().app.currency_symbol

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_balances_computed(
        self,
        trip_id: str,
        expense_count: int,
        debt_count: int,
        correlation_id: UUID,
    ) -> None:
        """Log a balance computation."""
        event = AuditEventBuilder.balances_computed(
            trip_id=trip_id,
            expense_count=expense_count,
            debt_count=debt_count,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_validation_failed(
        self,
        trip_id: str,
        issues: list[dict],
        correlation_id: UUID,
    ) -> None:
        """Log expense validation failure."""
        event = AuditEventBuilder.expense_validation_failed(
            trip_id=trip_id,
            issues=issues,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_debt_settled(
        self,
        trip_id: str,
        debtor: str,
        creditor: str,
        amount: Decimal,
        correlation_id: UUID,
    ) -> None:
        """Log a debt being marked settled."""
        event = AuditEventBuilder.debt_settled(
            trip_id=trip_id,
            debtor=debtor,
            creditor=creditor,
            amount=amount,
            currency=self._currency,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_settlement_reverted(
        self,
        trip_id: str,
        debtor: str,
        creditor: str,
        correlation_id: UUID,
    ) -> None:
        """Log a settlement being reverted."""
        event = AuditEventBuilder.settlement_reverted(
            trip_id=trip_id,
            debtor=debtor,
            creditor=creditor,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_history_cleared(
        self,
        entry_count: int,
        correlation_id: UUID,
    ) -> None:
        """Log settlement history being cleared."""
        event = AuditEventBuilder.settlement_history_cleared(
            entry_count=entry_count,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        event = AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        )
        await self.log(event)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a flow call (e.g., settling a debt).
    Pass it through all subsequent operations.
    """
    return uuid4()
