"""
Storage Services Package

Provides abstract interfaces for the persistence collaborator and an
in-memory implementation. Real backends live in the application shell.
"""

from tripsplit.services.storage.interface import (
    AuditStorageInterface,
    DuplicateError,
    SettlementStorageInterface,
    StorageError,
    TripStorageInterface,
)
from tripsplit.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryTripStorage,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "SettlementStorageInterface",
    "TripStorageInterface",
    # Exceptions
    "DuplicateError",
    "StorageError",
    # In-memory implementation
    "InMemoryAuditStorage",
    "InMemoryTripStorage",
]
