"""
Dependency injection container for FastAPI.

Provides use cases and stores to route handlers. Tests replace these
through ``app.dependency_overrides``.
"""

from src.application.use_cases import (
    AddImportCostUseCase,
    AddOrderItemUseCase,
    ChannelConnectionUseCase,
    ConnectListingUseCase,
    CreateOrderUseCase,
    CreateProductLeadUseCase,
    FinalizeOrderUseCase,
    GetCostBreakdownUseCase,
    GetListingAvailabilityUseCase,
    ImportListingUseCase,
    PublishListingUseCase,
    ReceiveBatchUseCase,
    RetrySyncUseCase,
    SyncAllListingsUseCase,
    SyncListingStockUseCase,
    UpdateOrderStatusUseCase,
)
from src.core.interfaces import ILedgerStore, IListingStore, IOrderStore
from src.infrastructure.storage.sqlite import (
    get_ledger_store,
    get_listing_store,
    get_order_store,
)


# Store dependencies
async def get_orders() -> IOrderStore:
    """Get order store."""
    return await get_order_store()


async def get_ledger() -> ILedgerStore:
    """Get inventory ledger store."""
    return await get_ledger_store()


async def get_listings() -> IListingStore:
    """Get listing store."""
    return await get_listing_store()


# Order use case dependencies
def get_create_lead_use_case() -> CreateProductLeadUseCase:
    return CreateProductLeadUseCase()


def get_create_order_use_case() -> CreateOrderUseCase:
    return CreateOrderUseCase()


def get_add_item_use_case() -> AddOrderItemUseCase:
    return AddOrderItemUseCase()


def get_add_import_cost_use_case() -> AddImportCostUseCase:
    return AddImportCostUseCase()


def get_update_status_use_case() -> UpdateOrderStatusUseCase:
    return UpdateOrderStatusUseCase()


def get_cost_breakdown_use_case() -> GetCostBreakdownUseCase:
    return GetCostBreakdownUseCase()


def get_finalize_order_use_case() -> FinalizeOrderUseCase:
    """Get finalize order use case."""
    return FinalizeOrderUseCase()


# Inventory use case dependencies
def get_receive_batch_use_case() -> ReceiveBatchUseCase:
    """Get receive batch use case."""
    return ReceiveBatchUseCase()


# Channel use case dependencies
def get_channel_connection_use_case() -> ChannelConnectionUseCase:
    return ChannelConnectionUseCase()


def get_import_listing_use_case() -> ImportListingUseCase:
    return ImportListingUseCase()


def get_connect_listing_use_case() -> ConnectListingUseCase:
    return ConnectListingUseCase()


def get_publish_listing_use_case() -> PublishListingUseCase:
    return PublishListingUseCase()


def get_sync_listing_use_case() -> SyncListingStockUseCase:
    return SyncListingStockUseCase()


def get_retry_sync_use_case() -> RetrySyncUseCase:
    return RetrySyncUseCase()


def get_sync_all_use_case() -> SyncAllListingsUseCase:
    return SyncAllListingsUseCase()


def get_availability_use_case() -> GetListingAvailabilityUseCase:
    return GetListingAvailabilityUseCase()
