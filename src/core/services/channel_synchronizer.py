"""
Channel stock synchronizer.

Pushes each listing's sellable quantity to the marketplace and records the
outcome on the listing:

- success: ``last_sync_at`` stamped, ``sync_error`` cleared
- recoverable refusal: ``sync_error`` stored as a warning
- any other failure: ``sync_error`` stored as an error, ``last_sync_at`` stamped

A listing is pushed only while holding its in-flight claim
(``sync_started_at``), so concurrent syncs and retries of the same listing
push at most once.
"""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum

from src.config import get_logger
from src.core.clock import utc_now
from src.core.entities.channel import SYNCABLE_STATUSES, SyncError
from src.core.exceptions import (
    ChannelError,
    ListingNotFoundError,
    RecoverableChannelError,
    StockEngineError,
)
from src.core.interfaces.channel import IChannelClient
from src.core.interfaces.listing_store import IListingStore
from src.core.services.credential_manager import CredentialManager
from src.core.services.stock_allocation import calculate_available

logger = get_logger(__name__)


class SyncStatus(str, Enum):
    """Outcome of one listing synchronization."""

    SYNCED = "synced"
    WARNING = "warning"
    FAILED = "failed"
    UNMAPPED = "unmapped"
    IN_PROGRESS = "in_progress"
    NOTHING_TO_RETRY = "nothing_to_retry"


@dataclass
class ListingSyncResult:
    """Result of synchronizing one listing."""

    listing_id: int
    status: SyncStatus
    channel_item_id: str | None = None
    available: int | None = None
    message: str | None = None

    @property
    def success(self) -> bool:
        return self.status == SyncStatus.SYNCED


@dataclass
class BulkSyncResult:
    """Tally of a bulk synchronization."""

    total: int = 0
    successful: int = 0
    failed: int = 0
    results: list[ListingSyncResult] = field(default_factory=list)


class ChannelSynchronizer:
    """Pushes computed availability to the channel and persists sync status."""

    def __init__(
        self,
        listing_store: IListingStore,
        credentials: CredentialManager,
        client: IChannelClient,
        max_concurrency: int = 5,
        claim_timeout_seconds: int = 120,
        max_available_quantity: int = 99999,
        identity: str | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._store = listing_store
        self._credentials = credentials
        self._client = client
        self._max_concurrency = max(1, max_concurrency)
        self._claim_timeout = timedelta(seconds=claim_timeout_seconds)
        self._max_quantity = max_available_quantity
        self._identity = identity
        self._clock = clock

    async def sync(self, listing_id: int) -> ListingSyncResult:
        """
        Push one listing's available quantity.

        Raises:
            NoCredentialError: Channel not connected; listing untouched
            ListingNotFoundError: Listing does not exist
        """
        token = await self._credentials.require_token(self._identity)
        return await self._sync_with_token(listing_id, token)

    async def retry_sync(self, listing_id: int) -> ListingSyncResult:
        """
        Re-push a listing whose last sync left an error or warning.

        Idempotent: a listing without a pending error is not pushed, and
        concurrent retries push at most once.
        """
        token = await self._credentials.require_token(self._identity)

        listing = await self._store.get_listing(listing_id)
        if listing is None:
            raise ListingNotFoundError(listing_id)
        if not listing.sync_error:
            return ListingSyncResult(
                listing_id=listing_id,
                status=SyncStatus.NOTHING_TO_RETRY,
                channel_item_id=listing.channel_item_id,
                message="Listing has no pending sync error",
            )

        return await self._sync_with_token(listing_id, token, require_error=True)

    async def sync_all(self) -> BulkSyncResult:
        """
        Push every sync-enabled active or paused listing concurrently.

        Each listing is isolated: a failure is tallied, never propagated.

        Raises:
            NoCredentialError: Channel not connected; nothing is pushed
        """
        token = await self._credentials.require_token(self._identity)
        listing_ids = await self._store.list_syncable_ids(SYNCABLE_STATUSES)

        logger.info("bulk_sync_started", listings=len(listing_ids))
        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def run(listing_id: int) -> ListingSyncResult:
            async with semaphore:
                try:
                    return await self._sync_with_token(listing_id, token)
                except StockEngineError as e:
                    return ListingSyncResult(
                        listing_id=listing_id,
                        status=SyncStatus.FAILED,
                        message=e.message,
                    )
                except Exception as e:
                    logger.exception("listing_sync_crashed", listing_id=listing_id)
                    return ListingSyncResult(
                        listing_id=listing_id,
                        status=SyncStatus.FAILED,
                        message=str(e),
                    )

        results = await asyncio.gather(*(run(listing_id) for listing_id in listing_ids))

        summary = BulkSyncResult(total=len(results), results=list(results))
        summary.successful = sum(1 for result in results if result.success)
        summary.failed = summary.total - summary.successful

        logger.info(
            "bulk_sync_complete",
            total=summary.total,
            successful=summary.successful,
            failed=summary.failed,
        )
        return summary

    async def _sync_with_token(
        self,
        listing_id: int,
        token: str,
        require_error: bool = False,
    ) -> ListingSyncResult:
        listing = await self._store.get_listing(listing_id)
        if listing is None:
            raise ListingNotFoundError(listing_id)

        allocation = calculate_available(listing.mappings)
        if allocation.unmapped:
            logger.info("listing_sync_skipped_unmapped", listing_id=listing_id)
            return ListingSyncResult(
                listing_id=listing_id,
                status=SyncStatus.UNMAPPED,
                channel_item_id=listing.channel_item_id,
                available=0,
                message="Listing has no enabled product mappings",
            )

        now = self._clock()
        claimed = await self._store.claim_sync(
            listing_id,
            now=now,
            stale_before=now - self._claim_timeout,
            require_error=require_error,
        )
        if not claimed:
            return await self._unclaimed_result(listing_id, listing.channel_item_id, require_error)

        quantity = allocation.capped(self._max_quantity)
        logger.info(
            "listing_sync_started",
            listing_id=listing_id,
            channel_item_id=listing.channel_item_id,
            quantity=quantity,
        )

        try:
            await self._client.update_listing_stock(token, listing.channel_item_id, quantity)
        except RecoverableChannelError as e:
            await self._store.mark_sync_error(listing_id, SyncError.warning(e.message))
            logger.warning(
                "listing_sync_warning",
                listing_id=listing_id,
                channel_item_id=listing.channel_item_id,
                reason=e.message,
            )
            return ListingSyncResult(
                listing_id=listing_id,
                status=SyncStatus.WARNING,
                channel_item_id=listing.channel_item_id,
                available=quantity,
                message=e.message,
            )
        except ChannelError as e:
            await self._store.mark_sync_error(
                listing_id, SyncError.error(e.message), synced_at=self._clock()
            )
            logger.error(
                "listing_sync_failed",
                listing_id=listing_id,
                channel_item_id=listing.channel_item_id,
                error=e.message,
            )
            return ListingSyncResult(
                listing_id=listing_id,
                status=SyncStatus.FAILED,
                channel_item_id=listing.channel_item_id,
                available=quantity,
                message=e.message,
            )
        except Exception:
            await self._store.release_claim(listing_id)
            raise

        await self._store.mark_synced(listing_id, self._clock())
        logger.info(
            "listing_synced",
            listing_id=listing_id,
            channel_item_id=listing.channel_item_id,
            quantity=quantity,
        )
        return ListingSyncResult(
            listing_id=listing_id,
            status=SyncStatus.SYNCED,
            channel_item_id=listing.channel_item_id,
            available=quantity,
            message=f"Stock updated to {quantity}",
        )

    async def _unclaimed_result(
        self, listing_id: int, channel_item_id: str, require_error: bool
    ) -> ListingSyncResult:
        if require_error:
            # A concurrent retry may already have cleared the error
            current = await self._store.get_listing(listing_id)
            if current is not None and not current.sync_error:
                return ListingSyncResult(
                    listing_id=listing_id,
                    status=SyncStatus.NOTHING_TO_RETRY,
                    channel_item_id=channel_item_id,
                    message="Listing has no pending sync error",
                )

        logger.info("listing_sync_in_progress", listing_id=listing_id)
        return ListingSyncResult(
            listing_id=listing_id,
            status=SyncStatus.IN_PROGRESS,
            channel_item_id=channel_item_id,
            message="Another sync of this listing is in progress",
        )
