"""Core interfaces (ports) for dependency injection."""

from src.core.interfaces.channel import IChannelClient, ListingSnapshot, TokenGrant
from src.core.interfaces.credential_store import ICredentialStore
from src.core.interfaces.ledger_store import ILedgerStore
from src.core.interfaces.listing_store import IListingStore
from src.core.interfaces.order_store import IOrderStore

__all__ = [
    # Storage interfaces
    "IOrderStore",
    "ILedgerStore",
    "IListingStore",
    "ICredentialStore",
    # Channel interfaces
    "IChannelClient",
    "TokenGrant",
    "ListingSnapshot",
]
