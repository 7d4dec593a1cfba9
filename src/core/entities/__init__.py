"""Core domain entities."""

from src.core.entities.channel import (
    SYNCABLE_STATUSES,
    AttributeSet,
    CategoryAttribute,
    ChannelListing,
    ListingAttribute,
    ListingStatus,
    StockMapping,
    SyncError,
    SyncErrorKind,
)
from src.core.entities.credential import Credential
from src.core.entities.order import (
    ImportCost,
    ImportCostCategory,
    OrderItem,
    OrderStatus,
    ProductLead,
    PurchaseOrder,
)
from src.core.entities.product import (
    BatchReceipt,
    PricingPolicy,
    Product,
    ProductBatch,
)

__all__ = [
    # Order entities
    "PurchaseOrder",
    "OrderItem",
    "ImportCost",
    "ImportCostCategory",
    "OrderStatus",
    "ProductLead",
    # Inventory entities
    "Product",
    "ProductBatch",
    "BatchReceipt",
    "PricingPolicy",
    # Channel entities
    "ChannelListing",
    "StockMapping",
    "ListingStatus",
    "SyncError",
    "SyncErrorKind",
    "CategoryAttribute",
    "ListingAttribute",
    "AttributeSet",
    "SYNCABLE_STATUSES",
    # Credential entities
    "Credential",
]
