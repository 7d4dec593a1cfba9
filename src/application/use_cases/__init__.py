"""Application use cases."""

from src.application.use_cases.channel_connection import ChannelConnectionUseCase
from src.application.use_cases.connect_listing import (
    ConnectListingResult,
    ConnectListingUseCase,
)
from src.application.use_cases.finalize_order import (
    FinalizeOrderResult,
    FinalizeOrderUseCase,
)
from src.application.use_cases.import_listing import ImportListingUseCase
from src.application.use_cases.manage_orders import (
    AddImportCostUseCase,
    AddOrderItemUseCase,
    CreateOrderUseCase,
    CreateProductLeadUseCase,
    GetCostBreakdownUseCase,
    UpdateOrderStatusUseCase,
)
from src.application.use_cases.publish_listing import (
    PublishListingResult,
    PublishListingUseCase,
)
from src.application.use_cases.receive_batch import ReceiveBatchResult, ReceiveBatchUseCase
from src.application.use_cases.sync_listing_stock import (
    GetListingAvailabilityUseCase,
    RetrySyncUseCase,
    SyncAllListingsUseCase,
    SyncListingStockUseCase,
)

__all__ = [
    # Orders
    "CreateProductLeadUseCase",
    "CreateOrderUseCase",
    "AddOrderItemUseCase",
    "AddImportCostUseCase",
    "UpdateOrderStatusUseCase",
    "GetCostBreakdownUseCase",
    "FinalizeOrderUseCase",
    "FinalizeOrderResult",
    # Inventory
    "ReceiveBatchUseCase",
    "ReceiveBatchResult",
    # Channel
    "ChannelConnectionUseCase",
    "ImportListingUseCase",
    "ConnectListingUseCase",
    "ConnectListingResult",
    "PublishListingUseCase",
    "PublishListingResult",
    "SyncListingStockUseCase",
    "RetrySyncUseCase",
    "SyncAllListingsUseCase",
    "GetListingAvailabilityUseCase",
]
