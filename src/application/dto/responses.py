"""Response DTOs for API endpoints.

Pydantic v2 models for API response serialization.
Operator actions return an ActionResponse subclass whose ``status``
distinguishes success, success with a warning, and failure.
"""

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field

ActionStatus = Literal["success", "warning", "failure"]


class ActionResponse(BaseModel):
    """Outcome of an operator action."""

    status: ActionStatus = Field(..., description="success, warning or failure")
    message: str = Field(..., description="Human-readable outcome")


# Orders


class ProductLeadResponse(BaseModel):
    id: int
    name: str
    category: str | None = None
    created_at: datetime


class OrderItemResponse(BaseModel):
    """Order line."""

    id: int
    product_lead_id: int
    product_name: str | None = None
    quantity: int
    unit_price_usd: float
    discount_percent: float
    net_unit_price_usd: float


class ImportCostResponse(BaseModel):
    id: int
    category: str
    amount_usd: float
    description: str | None = None


class OrderResponse(BaseModel):
    """Purchase order with lines and import charges."""

    id: int
    order_number: str
    status: str
    stocked: bool
    stocked_at: datetime | None = None
    order_date: date | None = None
    items: list[OrderItemResponse] = Field(default=[])
    import_costs: list[ImportCostResponse] = Field(default=[])
    total_import_costs_usd: float = 0.0
    created_at: datetime
    updated_at: datetime


class OrderListResponse(BaseModel):
    orders: list[OrderResponse]
    total: int


class ItemCostAllocationResponse(BaseModel):
    """Landed cost of one order line."""

    product_lead_id: int
    product_name: str | None = None
    quantity: int
    net_unit_price_usd: float
    fob_value_usd: float
    allocated_import_cost_usd: float
    import_cost_per_unit_usd: float
    final_unit_cost_usd: float
    total_final_cost_usd: float
    cost_breakdown: dict[str, float] = Field(
        default={}, description="Allocated import cost per charge category"
    )


class CostBreakdownResponse(BaseModel):
    """Landed cost preview of an order."""

    order_id: int
    method: str = Field(..., description="Proration basis: value or quantity")
    total_fob_usd: float
    total_import_costs_usd: float
    total_landed_cost_usd: float
    items: list[ItemCostAllocationResponse] = Field(default=[])


# Inventory


class ProductResponse(BaseModel):
    """Inventory product with weighted-average cost."""

    id: int
    product_lead_id: int
    name: str
    stock: int
    average_unit_cost_usd: float
    markup_percentage: float
    final_unit_cost_ars: float
    final_price_ars: float
    inventory_value_usd: float
    updated_at: datetime


class ProductBatchResponse(BaseModel):
    id: int
    product_id: int
    order_id: int | None = None
    batch_number: str
    quantity: int
    unit_cost_usd: float
    total_cost_usd: float
    notes: str | None = None
    created_at: datetime


class ProductListResponse(BaseModel):
    products: list[ProductResponse]
    total: int


class ReceiveBatchResponse(ActionResponse):
    product: ProductResponse
    batch: ProductBatchResponse


class FinalizeOrderResponse(ActionResponse):
    """Outcome of moving a received order into stock."""

    order_id: int
    batches: list[ProductBatchResponse] = Field(default=[])
    total_landed_cost_usd: float = 0.0


# Channel listings


class StockMappingResponse(BaseModel):
    id: int | None = None
    product_id: int
    product_name: str | None = None
    product_stock: int = 0
    quantity_per_sale: int
    priority: int
    enabled: bool


class ListingResponse(BaseModel):
    """Channel listing with mappings and last sync outcome."""

    id: int
    channel_item_id: str
    title: str
    category_id: str | None = None
    price: float
    currency: str
    status: str
    permalink: str | None = None
    sync_enabled: bool
    last_sync_at: datetime | None = None
    sync_error: str | None = Field(default=None, description="Raw prefixed sync error")
    sync_error_kind: str | None = Field(default=None, description="WARNING or ERROR")
    sync_error_message: str | None = None
    attributes: dict = Field(default={})
    mappings: list[StockMappingResponse] = Field(default=[])


class ListingListResponse(BaseModel):
    listings: list[ListingResponse]
    total: int


class AvailabilityResponse(BaseModel):
    """Sellable quantity of a listing computed from current stock."""

    listing_id: int
    available: int
    unmapped: bool
    limiting_product_id: int | None = None


class ListingSyncResponse(ActionResponse):
    listing_id: int
    sync_status: str
    available: int | None = None


class BulkSyncResponse(ActionResponse):
    total: int
    successful: int
    failed: int
    results: list[ListingSyncResponse] = Field(default=[])


class ImportListingResponse(ActionResponse):
    listing: ListingResponse


class ConnectListingResponse(ActionResponse):
    """Mappings are saved even when the stock push that follows fails."""

    listing: ListingResponse
    sync: ListingSyncResponse | None = None


class PublishListingResponse(ActionResponse):
    operation: Literal["created", "updated"]
    listing: ListingResponse


# Channel connection


class AuthorizationUrlResponse(BaseModel):
    url: str


class ConnectionStatusResponse(BaseModel):
    identity: str
    connected: bool
    expires_at: datetime | None = None
    hours_until_expiry: float | None = None
    user_id: str | None = None


# Health / errors


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str = "1.0.0"
    uptime_seconds: float
    database: bool = False
    pending_migrations: list[str] = Field(default=[])


class ErrorResponse(BaseModel):
    """Standardized error response DTO.

    Every error response includes:
    - error_code: machine-readable code (e.g. ORDER_NOT_FOUND)
    - message: human-readable description
    - hint: suggested recovery action
    - path: request path that triggered the error
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error description")
    hint: str | None = Field(default=None, description="Suggested recovery action")
    detail: str | None = Field(default=None, description="Additional details")
    path: str | None = Field(default=None, description="Request path")
    timestamp: datetime = Field(default_factory=datetime.now)
