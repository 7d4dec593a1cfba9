"""
Publish Listing Use Case.

Creates a marketplace listing for an inventory product, or republishes an
existing one. Attribute values are validated against the category's
definitions before anything is sent to the channel.
"""

from dataclasses import dataclass
from typing import Any, Literal

from src.application.dto.converters import listing_to_response
from src.application.dto.requests import PublishListingRequest
from src.application.dto.responses import PublishListingResponse
from src.config import get_logger
from src.core.clock import utc_now
from src.core.entities.channel import AttributeSet, ChannelListing, StockMapping
from src.core.entities.product import Product
from src.core.exceptions import (
    ListingNotFoundError,
    ProductNotFoundError,
    ValidationError,
)
from src.core.interfaces.channel import IChannelClient
from src.core.interfaces.ledger_store import ILedgerStore
from src.core.interfaces.listing_store import IListingStore
from src.core.services.credential_manager import CredentialManager

logger = get_logger(__name__)

TITLE_MAX_LENGTH = 60


@dataclass
class PublishListingResult:
    operation: Literal["created", "updated"]
    listing: ChannelListing


class PublishListingUseCase:
    """Publish a product to the channel with validated attributes."""

    def __init__(
        self,
        listing_store: IListingStore | None = None,
        ledger_store: ILedgerStore | None = None,
        credentials: CredentialManager | None = None,
        client: IChannelClient | None = None,
        max_available_quantity: int | None = None,
    ):
        self._listing_store = listing_store
        self._ledger_store = ledger_store
        self._credentials = credentials
        self._client = client
        self._max_quantity = max_available_quantity

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

    async def _get_credentials(self) -> CredentialManager:
        if self._credentials is None:
            from src.application.services import get_credential_manager

            self._credentials = await get_credential_manager()
        return self._credentials

    def _get_client(self) -> IChannelClient:
        if self._client is None:
            from src.infrastructure.channel import get_channel_client

            self._client = get_channel_client()
        return self._client

    def _get_max_quantity(self) -> int:
        if self._max_quantity is None:
            from src.config import get_settings

            self._max_quantity = get_settings().channel.max_available_quantity
        return self._max_quantity

    async def execute(self, request: PublishListingRequest) -> PublishListingResult:
        """
        Execute publish listing use case.

        Raises:
            ProductNotFoundError: Product does not exist
            ListingNotFoundError: listing_id given but unknown
            ValidationError: Unknown or missing required attributes
            NoCredentialError: Channel not connected
            ChannelError: Channel rejected the listing
        """
        ledger = await self._get_ledger_store()
        product = await ledger.get_product(request.product_id)
        if product is None:
            raise ProductNotFoundError(request.product_id)

        store = await self._get_listing_store()
        existing: ChannelListing | None = None
        if request.listing_id is not None:
            existing = await store.get_listing(request.listing_id)
            if existing is None:
                raise ListingNotFoundError(request.listing_id)

        credentials = await self._get_credentials()
        token = await credentials.require_token()
        client = self._get_client()

        definitions = await client.fetch_category_attributes(token, request.category_id)
        attribute_set = AttributeSet.from_definitions(
            request.category_id, definitions, request.attributes
        )
        missing = attribute_set.missing_required()
        if missing:
            raise ValidationError(
                "attributes",
                f"Missing required attributes: {', '.join(missing)}",
                missing,
            )

        payload = self._build_payload(product, request, attribute_set)

        if existing is not None:
            snapshot = await client.update_listing(token, existing.channel_item_id, payload)
            existing.title = snapshot.title
            existing.category_id = snapshot.category_id
            existing.price = snapshot.price
            existing.status = snapshot.status
            existing.permalink = snapshot.permalink or existing.permalink
            existing.attributes = attribute_set.values()
            existing.last_sync_at = utc_now()
            listing = await store.update_listing(existing)
            operation: Literal["created", "updated"] = "updated"
        else:
            snapshot = await client.create_listing(token, payload)
            listing = await store.create_listing(
                ChannelListing(
                    channel_item_id=snapshot.channel_item_id,
                    title=snapshot.title,
                    category_id=snapshot.category_id,
                    price=snapshot.price,
                    currency=snapshot.currency,
                    status=snapshot.status,
                    permalink=snapshot.permalink,
                    thumbnail=snapshot.thumbnail,
                    attributes=attribute_set.values(),
                    last_sync_at=utc_now(),
                    mappings=[StockMapping(product_id=product.id, quantity_per_sale=1)],  # type: ignore[arg-type]
                )
            )
            operation = "created"

        logger.info(
            "listing_published",
            operation=operation,
            listing_id=listing.id,
            channel_item_id=listing.channel_item_id,
            product_id=product.id,
        )
        return PublishListingResult(operation=operation, listing=listing)

    def _build_payload(
        self,
        product: Product,
        request: PublishListingRequest,
        attribute_set: AttributeSet,
    ) -> dict[str, Any]:
        title = (request.title or product.name).strip()[:TITLE_MAX_LENGTH]
        return {
            "title": title,
            "category_id": request.category_id,
            "price": round(product.final_price_ars, 2),
            "currency_id": "ARS",
            "available_quantity": min(product.stock, self._get_max_quantity()),
            "buying_mode": "buy_it_now",
            "listing_type_id": "bronze",
            "condition": "new",
            "attributes": attribute_set.to_payload(),
        }

    def to_response(self, result: PublishListingResult) -> PublishListingResponse:
        return PublishListingResponse(
            status="success",
            message=f"Listing {result.listing.channel_item_id} {result.operation}",
            operation=result.operation,
            listing=listing_to_response(result.listing),
        )
