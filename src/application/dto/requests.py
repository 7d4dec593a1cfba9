"""Request DTOs for API endpoints.

Pydantic v2 models for API request validation.
These are the ONLY contracts between API and use cases.
"""

from datetime import date

from pydantic import BaseModel, Field

from src.core.entities.order import ImportCostCategory, OrderStatus


class CreateProductLeadRequest(BaseModel):
    """Request to register a sourced product in the catalog."""

    name: str = Field(..., min_length=1, max_length=200, description="Product name")
    category: str | None = Field(default=None, description="Free-form catalog category")


class OrderItemRequest(BaseModel):
    """One purchase order line, priced FOB in USD."""

    product_lead_id: int = Field(..., description="Catalog product lead ID")
    quantity: int = Field(..., gt=0, description="Units ordered")
    unit_price_usd: float = Field(..., gt=0, description="FOB unit price before discount")
    discount_percent: float = Field(
        default=0.0, ge=0, le=100, description="Line discount percentage"
    )


class ImportCostRequest(BaseModel):
    """Shared import charge to distribute across the order's items."""

    category: ImportCostCategory = Field(
        default=ImportCostCategory.OTHER, description="Charge category"
    )
    amount_usd: float = Field(..., ge=0, description="Charge amount in USD")
    description: str | None = Field(default=None, max_length=500)


class CreateOrderRequest(BaseModel):
    """Request to create a purchase order."""

    order_number: str = Field(
        ..., min_length=1, max_length=50, description="Unique order number", examples=["PO-2024-001"]
    )
    order_date: date | None = Field(default=None, description="Order date")
    items: list[OrderItemRequest] = Field(default_factory=list)
    import_costs: list[ImportCostRequest] = Field(default_factory=list)


class UpdateOrderStatusRequest(BaseModel):
    """Move an order one step forward or cancel it."""

    status: OrderStatus = Field(..., description="Target status")


class ReceiveBatchRequest(BaseModel):
    """Receive a batch of a product lead outside of an order."""

    product_lead_id: int = Field(..., description="Catalog product lead ID")
    quantity: int = Field(..., gt=0, description="Units received")
    unit_cost_usd: float = Field(..., ge=0, description="Landed cost per unit in USD")
    batch_number: str | None = Field(default=None, max_length=100)
    notes: str | None = Field(default=None, max_length=500)


class ImportListingRequest(BaseModel):
    """Start tracking an existing marketplace listing."""

    channel_item_id: str = Field(
        ..., min_length=1, description="Marketplace item ID", examples=["MLA1234567890"]
    )


class StockMappingRequest(BaseModel):
    """Units of a product consumed by one sale of the listing."""

    product_id: int = Field(..., description="Inventory product ID")
    quantity_per_sale: int = Field(default=1, description="Units consumed per sale")
    priority: int = Field(default=0, description="Display ordering only")
    enabled: bool = Field(default=True)


class ConnectListingRequest(BaseModel):
    """Replace a listing's product mappings."""

    mappings: list[StockMappingRequest] = Field(default_factory=list)


class PublishListingRequest(BaseModel):
    """Publish a product as a marketplace listing, or republish it."""

    product_id: int = Field(..., description="Inventory product ID")
    category_id: str = Field(..., min_length=1, description="Marketplace category ID")
    attributes: dict[str, str] = Field(
        default_factory=dict,
        description="Attribute ID to value, validated against the category definitions",
        examples=[{"BRAND": "Genérico", "MODEL": "X-100"}],
    )
    title: str | None = Field(default=None, max_length=60)
    listing_id: int | None = Field(
        default=None, description="Existing listing to update instead of creating one"
    )
