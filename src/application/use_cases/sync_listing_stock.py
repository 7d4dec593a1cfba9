"""Stock synchronization use cases: single, retry, bulk and preview."""

from src.application.dto.converters import sync_result_to_response
from src.application.dto.responses import (
    AvailabilityResponse,
    BulkSyncResponse,
    ListingSyncResponse,
)
from src.core.exceptions import ListingNotFoundError
from src.core.interfaces.listing_store import IListingStore
from src.core.services.channel_synchronizer import (
    BulkSyncResult,
    ChannelSynchronizer,
    ListingSyncResult,
)
from src.core.services.stock_allocation import StockAllocation, calculate_available


class _SynchronizerUseCase:
    def __init__(self, synchronizer: ChannelSynchronizer | None = None):
        self._synchronizer = synchronizer

    async def _get_synchronizer(self) -> ChannelSynchronizer:
        if self._synchronizer is None:
            from src.application.services import get_channel_synchronizer

            self._synchronizer = await get_channel_synchronizer()
        return self._synchronizer


class SyncListingStockUseCase(_SynchronizerUseCase):
    """Push one listing's available quantity to the channel."""

    async def execute(self, listing_id: int) -> ListingSyncResult:
        synchronizer = await self._get_synchronizer()
        return await synchronizer.sync(listing_id)

    def to_response(self, result: ListingSyncResult) -> ListingSyncResponse:
        return sync_result_to_response(result)


class RetrySyncUseCase(_SynchronizerUseCase):
    """Re-push a listing whose last sync left an error or warning."""

    async def execute(self, listing_id: int) -> ListingSyncResult:
        synchronizer = await self._get_synchronizer()
        return await synchronizer.retry_sync(listing_id)

    def to_response(self, result: ListingSyncResult) -> ListingSyncResponse:
        return sync_result_to_response(result)


class SyncAllListingsUseCase(_SynchronizerUseCase):
    """Push every syncable listing; one listing's failure never aborts the rest."""

    async def execute(self) -> BulkSyncResult:
        synchronizer = await self._get_synchronizer()
        return await synchronizer.sync_all()

    def to_response(self, result: BulkSyncResult) -> BulkSyncResponse:
        if result.failed == 0:
            status = "success"
        elif result.successful == 0:
            status = "failure"
        else:
            status = "warning"
        return BulkSyncResponse(
            status=status,
            message=f"{result.successful} of {result.total} listings synced",
            total=result.total,
            successful=result.successful,
            failed=result.failed,
            results=[sync_result_to_response(r) for r in result.results],
        )


class GetListingAvailabilityUseCase:
    """Compute a listing's sellable quantity without pushing it."""

    def __init__(self, listing_store: IListingStore | None = None):
        self._listing_store = listing_store

    async def _get_listing_store(self) -> IListingStore:
        if self._listing_store is None:
            from src.infrastructure.storage.sqlite import get_listing_store

            self._listing_store = await get_listing_store()
        return self._listing_store

    async def execute(self, listing_id: int) -> tuple[int, StockAllocation]:
        store = await self._get_listing_store()
        listing = await store.get_listing(listing_id)
        if listing is None:
            raise ListingNotFoundError(listing_id)
        return listing_id, calculate_available(listing.mappings)

    def to_response(self, result: tuple[int, StockAllocation]) -> AvailabilityResponse:
        listing_id, allocation = result
        return AvailabilityResponse(
            listing_id=listing_id,
            available=allocation.available,
            unmapped=allocation.unmapped,
            limiting_product_id=allocation.limiting_product_id,
        )
