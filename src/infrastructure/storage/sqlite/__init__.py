"""SQLite storage implementations."""

from src.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    close_pool,
    get_connection,
    get_immediate_transaction,
    get_pool,
    get_transaction,
)
from src.infrastructure.storage.sqlite.credential_store import SQLiteCredentialStore
from src.infrastructure.storage.sqlite.ledger_store import SQLiteLedgerStore
from src.infrastructure.storage.sqlite.listing_store import SQLiteListingStore
from src.infrastructure.storage.sqlite.order_store import SQLiteOrderStore

# Singleton instances
_order_store: SQLiteOrderStore | None = None
_ledger_store: SQLiteLedgerStore | None = None
_listing_store: SQLiteListingStore | None = None
_credential_store: SQLiteCredentialStore | None = None


async def get_order_store() -> SQLiteOrderStore:
    """Get singleton order store instance."""
    global _order_store
    if _order_store is None:
        _order_store = SQLiteOrderStore()
    return _order_store


async def get_ledger_store() -> SQLiteLedgerStore:
    """Get singleton ledger store instance."""
    global _ledger_store
    if _ledger_store is None:
        _ledger_store = SQLiteLedgerStore()
    return _ledger_store


async def get_listing_store() -> SQLiteListingStore:
    """Get singleton listing store instance."""
    global _listing_store
    if _listing_store is None:
        _listing_store = SQLiteListingStore()
    return _listing_store


async def get_credential_store() -> SQLiteCredentialStore:
    """Get singleton credential store instance."""
    global _credential_store
    if _credential_store is None:
        _credential_store = SQLiteCredentialStore()
    return _credential_store


__all__ = [
    # Connection
    "ConnectionPool",
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
    "get_immediate_transaction",
    # Store classes
    "SQLiteOrderStore",
    "SQLiteLedgerStore",
    "SQLiteListingStore",
    "SQLiteCredentialStore",
    # Factory functions
    "get_order_store",
    "get_ledger_store",
    "get_listing_store",
    "get_credential_store",
]
