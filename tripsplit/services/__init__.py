"""Services package."""

from tripsplit.services.storage import (
    AuditStorageInterface,
    DuplicateError,
    InMemoryAuditStorage,
    InMemoryTripStorage,
    SettlementStorageInterface,
    StorageError,
    TripStorageInterface,
)

__all__ = [
    # Storage services
    "AuditStorageInterface",
    "DuplicateError",
    "InMemoryAuditStorage",
    "InMemoryTripStorage",
    "SettlementStorageInterface",
    "StorageError",
    "TripStorageInterface",
]
