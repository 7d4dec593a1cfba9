"""Storage infrastructure implementations."""

from src.infrastructure.storage.sqlite import (
    SQLiteCredentialStore,
    SQLiteLedgerStore,
    SQLiteListingStore,
    SQLiteOrderStore,
    close_pool,
    get_connection,
    get_pool,
    get_transaction,
)

__all__ = [
    # SQLite stores
    "SQLiteOrderStore",
    "SQLiteLedgerStore",
    "SQLiteListingStore",
    "SQLiteCredentialStore",
    # Connection pool
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
]
