"""Purchase order domain entities."""

from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, Field

from src.core.clock import utc_now


class OrderStatus(str, Enum):
    """Lifecycle of an import purchase order.

    Being in stock is not a status: a received order carries a separate
    ``stocked`` latch because it can stay received indefinitely.
    """

    DRAFT = "draft"
    PENDING_PAYMENT = "pending_payment"
    PAID = "paid"
    SHIPPED = "shipped"
    IN_TRANSIT = "in_transit"
    RECEIVED = "received"
    CANCELLED = "cancelled"

    @property
    def next_status(self) -> "OrderStatus | None":
        """The single forward step from this status, if any."""
        try:
            index = _FORWARD_SEQUENCE.index(self)
        except ValueError:
            return None
        if index + 1 < len(_FORWARD_SEQUENCE):
            return _FORWARD_SEQUENCE[index + 1]
        return None

    @property
    def accepts_line_changes(self) -> bool:
        """Items and import costs are fixed once the goods are received."""
        return self != OrderStatus.RECEIVED

    def can_transition_to(self, target: "OrderStatus") -> bool:
        """Forward one step, or cancel anything not yet received."""
        if target == OrderStatus.CANCELLED:
            return self not in (OrderStatus.RECEIVED, OrderStatus.CANCELLED)
        return self.next_status == target


_FORWARD_SEQUENCE: tuple[OrderStatus, ...] = (
    OrderStatus.DRAFT,
    OrderStatus.PENDING_PAYMENT,
    OrderStatus.PAID,
    OrderStatus.SHIPPED,
    OrderStatus.IN_TRANSIT,
    OrderStatus.RECEIVED,
)

# Reported as the required status when a frozen order is edited
LINES_EDITABLE_UNTIL = "in_transit or earlier"


class ImportCostCategory(str, Enum):
    """Kinds of shared import charges."""

    FREIGHT = "freight"
    LOCAL_FREIGHT = "local_freight"
    CUSTOMS = "customs"
    INSURANCE = "insurance"
    STORAGE = "storage"
    CUSTOMS_BROKER = "customs_broker"
    BANK_FEES = "bank_fees"
    OTHER = "other"


class ProductLead(BaseModel):
    """Catalog entry for a sourced product that is not in inventory yet."""

    id: int | None = None
    name: str
    category: str | None = None
    created_at: datetime = Field(default_factory=utc_now)


class OrderItem(BaseModel):
    """One line of a purchase order, priced FOB in USD."""

    id: int | None = None
    order_id: int | None = None
    product_lead_id: int
    product_name: str | None = None  # joined from product_leads
    quantity: int
    unit_price_usd: float
    discount_percent: float = 0.0
    created_at: datetime = Field(default_factory=utc_now)

    @property
    def net_unit_price_usd(self) -> float:
        """Unit price after the line discount."""
        return self.unit_price_usd * (1 - self.discount_percent / 100)


class ImportCost(BaseModel):
    """A shared charge spread across every item of its order."""

    id: int | None = None
    order_id: int | None = None
    category: ImportCostCategory = ImportCostCategory.OTHER
    amount_usd: float
    description: str | None = None
    created_at: datetime = Field(default_factory=utc_now)


class PurchaseOrder(BaseModel):
    """Import purchase order with its lines and import charges."""

    id: int | None = None
    order_number: str
    status: OrderStatus = OrderStatus.DRAFT
    stocked: bool = False
    stocked_at: datetime | None = None
    order_date: date | None = None
    items: list[OrderItem] = Field(default_factory=list)
    import_costs: list[ImportCost] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def total_import_costs_usd(self) -> float:
        return sum(cost.amount_usd for cost in self.import_costs)
