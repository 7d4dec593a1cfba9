"""Import Listing Use Case: start tracking an existing marketplace listing."""

from src.application.dto.converters import listing_to_response
from src.application.dto.responses import ImportListingResponse
from src.config import get_logger
from src.core.clock import utc_now
from src.core.entities.channel import ChannelListing
from src.core.exceptions import ListingAlreadyImportedError
from src.core.interfaces.channel import IChannelClient
from src.core.interfaces.listing_store import IListingStore
from src.core.services.credential_manager import CredentialManager

logger = get_logger(__name__)


class ImportListingUseCase:
    """Fetch a listing from the channel and persist it without mappings."""

    def __init__(
        self,
        listing_store: IListingStore | None = None,
        credentials: CredentialManager | None = None,
        client: IChannelClient | None = None,
    ):
        self._listing_store = listing_store
        self._credentials = credentials
        self._client = client

    async def _get_listing_store(self) -> IListingStore:
        if self._listing_store is None:
            from src.infrastructure.storage.sqlite import get_listing_store

            self._listing_store = await get_listing_store()
        return self._listing_store

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

    async def execute(self, channel_item_id: str) -> ChannelListing:
        """
        Import a listing by its marketplace item ID.

        Raises:
            ListingAlreadyImportedError: Item is already tracked
            NoCredentialError: Channel not connected
            ChannelError: Channel lookup failed
        """
        channel_item_id = channel_item_id.strip()
        store = await self._get_listing_store()

        existing = await store.get_by_channel_item(channel_item_id)
        if existing is not None:
            raise ListingAlreadyImportedError(channel_item_id, existing.id)  # type: ignore[arg-type]

        credentials = await self._get_credentials()
        token = await credentials.require_token()
        snapshot = await self._get_client().fetch_listing(token, channel_item_id)

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
                attributes=snapshot.attributes,
                last_sync_at=utc_now(),
            )
        )
        logger.info(
            "listing_imported",
            listing_id=listing.id,
            channel_item_id=listing.channel_item_id,
            status=listing.status,
        )
        return listing

    def to_response(self, listing: ChannelListing) -> ImportListingResponse:
        return ImportListingResponse(
            status="success",
            message=f"Listing {listing.channel_item_id} imported",
            listing=listing_to_response(listing),
        )
