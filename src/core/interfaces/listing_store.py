"""Abstract interface for channel listing storage."""

from abc import ABC, abstractmethod
from datetime import datetime

from src.core.entities.channel import ChannelListing, StockMapping, SyncError


class IListingStore(ABC):
    """Interface for channel listings, stock mappings and sync status."""

    @abstractmethod
    async def create_listing(self, listing: ChannelListing) -> ChannelListing:
        """Create listing together with its mappings."""
        pass

    @abstractmethod
    async def update_listing(self, listing: ChannelListing) -> ChannelListing:
        """Update listing snapshot fields (title, price, status, attributes)."""
        pass

    @abstractmethod
    async def get_listing(self, listing_id: int) -> ChannelListing | None:
        """Get listing by ID with mappings and product stock joined."""
        pass

    @abstractmethod
    async def get_by_channel_item(self, channel_item_id: str) -> ChannelListing | None:
        """Get listing by external channel item ID."""
        pass

    @abstractmethod
    async def list_listings(self, limit: int = 100, offset: int = 0) -> list[ChannelListing]:
        """List listings with mappings, newest first."""
        pass

    @abstractmethod
    async def list_syncable_ids(self, statuses: tuple[str, ...]) -> list[int]:
        """IDs of sync-enabled listings in the given statuses."""
        pass

    @abstractmethod
    async def replace_mappings(
        self, listing_id: int, mappings: list[StockMapping]
    ) -> list[StockMapping]:
        """Replace all mappings of a listing atomically."""
        pass

    @abstractmethod
    async def claim_sync(
        self,
        listing_id: int,
        now: datetime,
        stale_before: datetime,
        require_error: bool = False,
    ) -> bool:
        """
        Take the in-flight sync claim on a listing.

        Succeeds only when no claim is held or the held claim started before
        stale_before. With require_error, the listing must also carry a
        sync error.
        """
        pass

    @abstractmethod
    async def mark_synced(self, listing_id: int, synced_at: datetime) -> None:
        """Record a successful push, clear sync_error and release the claim."""
        pass

    @abstractmethod
    async def mark_sync_error(
        self,
        listing_id: int,
        error: SyncError,
        synced_at: datetime | None = None,
    ) -> None:
        """Persist a sync error, optionally stamping last_sync_at, and release the claim."""
        pass

    @abstractmethod
    async def release_claim(self, listing_id: int) -> None:
        """Drop the in-flight claim without touching sync status."""
        pass
