"""
Connect Listing Use Case.

Replaces a listing's product mappings and immediately pushes the new
availability. The mappings are saved even when the push does not go
through; the response says whether it was a warning, an error or a
missing channel connection.
"""

from dataclasses import dataclass

from src.application.dto.converters import listing_to_response, sync_result_to_response
from src.application.dto.requests import StockMappingRequest
from src.application.dto.responses import ConnectListingResponse
from src.config import get_logger
from src.core.entities.channel import ChannelListing, StockMapping
from src.core.exceptions import (
    ListingNotFoundError,
    NoCredentialError,
    ProductNotFoundError,
    ValidationError,
)
from src.core.interfaces.ledger_store import ILedgerStore
from src.core.interfaces.listing_store import IListingStore
from src.core.services.channel_synchronizer import (
    ChannelSynchronizer,
    ListingSyncResult,
    SyncStatus,
)

logger = get_logger(__name__)


@dataclass
class ConnectListingResult:
    listing: ChannelListing
    sync: ListingSyncResult | None = None
    not_connected: bool = False


class ConnectListingUseCase:
    """Save product mappings for a listing and push its stock."""

    def __init__(
        self,
        listing_store: IListingStore | None = None,
        ledger_store: ILedgerStore | None = None,
        synchronizer: ChannelSynchronizer | None = None,
    ):
        self._listing_store = listing_store
        self._ledger_store = ledger_store
        self._synchronizer = synchronizer

    async def _get_listing_store(self) -> IListingStore:
        if self._listing_store is None:
            from src.infrastructure.storage.sqlite import get_listing_store

            self._listing_store = await get_listing_store()
        return self._listing_store

    async def _get_ledger_store(self) -> ILedgerStore:
        if self._ledger_store is None:
            from src.infrastructure.storage.sqlite import get_ledger_store

            self._ledger_store = await get_ledger_store()
        return self._ledger_store

    async def _get_synchronizer(self) -> ChannelSynchronizer:
        if self._synchronizer is None:
            from src.application.services import get_channel_synchronizer

            self._synchronizer = await get_channel_synchronizer()
        return self._synchronizer

    async def _validate(self, mappings: list[StockMappingRequest]) -> None:
        ledger = await self._get_ledger_store()
        seen: set[int] = set()
        for index, mapping in enumerate(mappings):
            if mapping.quantity_per_sale <= 0:
                raise ValidationError(
                    f"mappings[{index}].quantity_per_sale",
                    "must be a positive integer",
                    mapping.quantity_per_sale,
                )
            if mapping.product_id in seen:
                raise ValidationError(
                    f"mappings[{index}].product_id",
                    "product is mapped more than once",
                    mapping.product_id,
                )
            seen.add(mapping.product_id)
            if await ledger.get_product(mapping.product_id) is None:
                raise ProductNotFoundError(mapping.product_id)

    async def execute(
        self, listing_id: int, mappings: list[StockMappingRequest]
    ) -> ConnectListingResult:
        """
        Replace mappings, then sync.

        Raises:
            ListingNotFoundError: Listing does not exist
            ProductNotFoundError: A mapping names an unknown product
            ValidationError: Non-positive ratio or duplicate product
        """
        store = await self._get_listing_store()
        if await store.get_listing(listing_id) is None:
            raise ListingNotFoundError(listing_id)

        await self._validate(mappings)
        await store.replace_mappings(
            listing_id,
            [
                StockMapping(
                    listing_id=listing_id,
                    product_id=mapping.product_id,
                    quantity_per_sale=mapping.quantity_per_sale,
                    priority=mapping.priority,
                    enabled=mapping.enabled,
                )
                for mapping in mappings
            ],
        )
        logger.info("listing_mappings_saved", listing_id=listing_id, mappings=len(mappings))

        result = ConnectListingResult(listing=await self._reload(listing_id))
        synchronizer = await self._get_synchronizer()
        try:
            result.sync = await synchronizer.sync(listing_id)
        except NoCredentialError:
            logger.warning("listing_sync_skipped_not_connected", listing_id=listing_id)
            result.not_connected = True
            return result

        # Sync outcome is persisted on the listing; show it
        result.listing = await self._reload(listing_id)
        return result

    async def _reload(self, listing_id: int) -> ChannelListing:
        store = await self._get_listing_store()
        listing = await store.get_listing(listing_id)
        if listing is None:
            raise ListingNotFoundError(listing_id)
        return listing

    def to_response(self, result: ConnectListingResult) -> ConnectListingResponse:
        listing = listing_to_response(result.listing)

        if result.not_connected:
            return ConnectListingResponse(
                status="warning",
                message="Mappings saved; channel is not connected so stock was not pushed",
                listing=listing,
            )

        sync = sync_result_to_response(result.sync)  # type: ignore[arg-type]
        status = result.sync.status  # type: ignore[union-attr]
        if status == SyncStatus.SYNCED:
            return ConnectListingResponse(
                status="success",
                message=f"Mappings saved. {sync.message}",
                listing=listing,
                sync=sync,
            )
        if status == SyncStatus.FAILED:
            message = f"Mappings saved, but the stock push failed: {sync.message}"
        else:
            message = f"Mappings saved with a warning: {sync.message}"
        return ConnectListingResponse(
            status="warning", message=message, listing=listing, sync=sync
        )
