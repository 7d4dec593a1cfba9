"""Channel listing endpoints: import, mappings, publishing and stock sync."""

from fastapi import APIRouter, Depends, Query, status

from src.api.dependencies import (
    get_availability_use_case,
    get_connect_listing_use_case,
    get_import_listing_use_case,
    get_listings,
    get_publish_listing_use_case,
    get_retry_sync_use_case,
    get_sync_all_use_case,
    get_sync_listing_use_case,
)
from src.application.dto.converters import listing_to_response
from src.application.dto.requests import (
    ConnectListingRequest,
    ImportListingRequest,
    PublishListingRequest,
)
from src.application.dto.responses import (
    AvailabilityResponse,
    BulkSyncResponse,
    ConnectListingResponse,
    ErrorResponse,
    ImportListingResponse,
    ListingListResponse,
    ListingResponse,
    ListingSyncResponse,
    PublishListingResponse,
)
from src.application.use_cases import (
    ConnectListingUseCase,
    GetListingAvailabilityUseCase,
    ImportListingUseCase,
    PublishListingUseCase,
    RetrySyncUseCase,
    SyncAllListingsUseCase,
    SyncListingStockUseCase,
)
from src.core.exceptions import ListingNotFoundError
from src.core.interfaces import IListingStore

router = APIRouter(prefix="/api/listings", tags=["listings"])

_CHANNEL_ERRORS = {
    401: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
}


@router.get("", response_model=ListingListResponse)
async def list_listings(
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    store: IListingStore = Depends(get_listings),
) -> ListingListResponse:
    """Tracked listings with mappings and last sync outcome."""
    listings = await store.list_listings(limit=limit, offset=offset)
    return ListingListResponse(
        listings=[listing_to_response(listing) for listing in listings],
        total=len(listings),
    )


@router.post(
    "/import",
    response_model=ImportListingResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**_CHANNEL_ERRORS, 409: {"model": ErrorResponse}},
)
async def import_listing(
    request: ImportListingRequest,
    use_case: ImportListingUseCase = Depends(get_import_listing_use_case),
) -> ImportListingResponse:
    """Start tracking an existing marketplace listing."""
    result = await use_case.execute(request.channel_item_id)
    return use_case.to_response(result)


@router.post(
    "/publish",
    response_model=PublishListingResponse,
    responses={**_CHANNEL_ERRORS, 400: {"model": ErrorResponse}},
)
async def publish_listing(
    request: PublishListingRequest,
    use_case: PublishListingUseCase = Depends(get_publish_listing_use_case),
) -> PublishListingResponse:
    """Publish a product, or republish it when listing_id is given."""
    result = await use_case.execute(request)
    return use_case.to_response(result)


@router.post(
    "/sync-all",
    response_model=BulkSyncResponse,
    responses={401: {"model": ErrorResponse}},
)
async def sync_all(
    use_case: SyncAllListingsUseCase = Depends(get_sync_all_use_case),
) -> BulkSyncResponse:
    """Push stock of every active or paused sync-enabled listing."""
    result = await use_case.execute()
    return use_case.to_response(result)


@router.get(
    "/{listing_id}",
    response_model=ListingResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_listing(
    listing_id: int,
    store: IListingStore = Depends(get_listings),
) -> ListingResponse:
    listing = await store.get_listing(listing_id)
    if listing is None:
        raise ListingNotFoundError(listing_id)
    return listing_to_response(listing)


@router.put(
    "/{listing_id}/mappings",
    response_model=ConnectListingResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def connect_listing(
    listing_id: int,
    request: ConnectListingRequest,
    use_case: ConnectListingUseCase = Depends(get_connect_listing_use_case),
) -> ConnectListingResponse:
    """Replace the listing's product mappings and push its stock."""
    result = await use_case.execute(listing_id, request.mappings)
    return use_case.to_response(result)


@router.get(
    "/{listing_id}/availability",
    response_model=AvailabilityResponse,
    responses={404: {"model": ErrorResponse}},
)
async def availability(
    listing_id: int,
    use_case: GetListingAvailabilityUseCase = Depends(get_availability_use_case),
) -> AvailabilityResponse:
    """Sellable quantity computed from current stock, without pushing it."""
    result = await use_case.execute(listing_id)
    return use_case.to_response(result)


@router.post(
    "/{listing_id}/sync",
    response_model=ListingSyncResponse,
    responses=_CHANNEL_ERRORS,
)
async def sync_listing(
    listing_id: int,
    use_case: SyncListingStockUseCase = Depends(get_sync_listing_use_case),
) -> ListingSyncResponse:
    result = await use_case.execute(listing_id)
    return use_case.to_response(result)


@router.post(
    "/{listing_id}/retry",
    response_model=ListingSyncResponse,
    responses=_CHANNEL_ERRORS,
)
async def retry_sync(
    listing_id: int,
    use_case: RetrySyncUseCase = Depends(get_retry_sync_use_case),
) -> ListingSyncResponse:
    """Re-push a listing whose last sync left an error or warning."""
    result = await use_case.execute(listing_id)
    return use_case.to_response(result)
