"""Data Transfer Objects for API layer.

Request DTOs: Validate and parse incoming API requests.
Response DTOs: Structure and serialize API responses.

These are the ONLY contracts between API handlers and use cases.
"""

from src.application.dto.requests import (
    ConnectListingRequest,
    CreateOrderRequest,
    CreateProductLeadRequest,
    ImportCostRequest,
    ImportListingRequest,
    OrderItemRequest,
    PublishListingRequest,
    ReceiveBatchRequest,
    StockMappingRequest,
    UpdateOrderStatusRequest,
)
from src.application.dto.responses import (
    ActionResponse,
    AuthorizationUrlResponse,
    AvailabilityResponse,
    BulkSyncResponse,
    ConnectionStatusResponse,
    ConnectListingResponse,
    CostBreakdownResponse,
    ErrorResponse,
    FinalizeOrderResponse,
    HealthResponse,
    ImportListingResponse,
    ListingListResponse,
    ListingResponse,
    ListingSyncResponse,
    OrderListResponse,
    OrderResponse,
    ProductBatchResponse,
    ProductLeadResponse,
    ProductListResponse,
    ProductResponse,
    PublishListingResponse,
    ReceiveBatchResponse,
)

__all__ = [
    # Requests
    "CreateProductLeadRequest",
    "CreateOrderRequest",
    "OrderItemRequest",
    "ImportCostRequest",
    "UpdateOrderStatusRequest",
    "ReceiveBatchRequest",
    "ImportListingRequest",
    "StockMappingRequest",
    "ConnectListingRequest",
    "PublishListingRequest",
    # Responses
    "ActionResponse",
    "ProductLeadResponse",
    "OrderResponse",
    "OrderListResponse",
    "CostBreakdownResponse",
    "ProductResponse",
    "ProductListResponse",
    "ProductBatchResponse",
    "ReceiveBatchResponse",
    "FinalizeOrderResponse",
    "ListingResponse",
    "ListingListResponse",
    "AvailabilityResponse",
    "ListingSyncResponse",
    "BulkSyncResponse",
    "ImportListingResponse",
    "ConnectListingResponse",
    "PublishListingResponse",
    "AuthorizationUrlResponse",
    "ConnectionStatusResponse",
    "HealthResponse",
    "ErrorResponse",
]
