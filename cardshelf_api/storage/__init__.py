"""Storage layer for users, cards and categories."""

from .database import (
    Database,
    DuplicateCardName,
    HandleTaken,
    StoreUnavailable,
    create_database,
    get_db,
)

__all__ = [
    "Database",
    "DuplicateCardName",
    "HandleTaken",
    "StoreUnavailable",
    "create_database",
    "get_db",
]
