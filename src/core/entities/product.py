"""Inventory product and receipt batch entities."""

from datetime import datetime

from pydantic import BaseModel, Field

from src.core.clock import utc_now


class PricingPolicy(BaseModel):
    """FX rate and default markup used to derive ARS prices."""

    usd_to_ars_rate: float = 1000.0
    default_markup_percentage: float = 30.0


class Product(BaseModel):
    """Inventory aggregate keyed by product lead.

    ``stock`` is always the sum of the product's batch quantities and
    ``average_unit_cost_usd`` their quantity-weighted mean unit cost.
    """

    id: int | None = None
    product_lead_id: int
    name: str
    stock: int = 0
    average_unit_cost_usd: float = 0.0
    markup_percentage: float = 30.0
    final_unit_cost_ars: float = 0.0
    final_price_ars: float = 0.0
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def inventory_value_usd(self) -> float:
        return self.stock * self.average_unit_cost_usd

    def apply_receipt(self, quantity: int, unit_cost_usd: float) -> None:
        """Fold one receipt batch into the running weighted average."""
        new_stock = self.stock + quantity
        if new_stock > 0:
            self.average_unit_cost_usd = (
                self.stock * self.average_unit_cost_usd + quantity * unit_cost_usd
            ) / new_stock
        self.stock = new_stock
        self.updated_at = utc_now()

    def reprice(self, usd_to_ars_rate: float) -> None:
        """Re-derive ARS cost and sale price from the average cost."""
        self.final_unit_cost_ars = round(self.average_unit_cost_usd * usd_to_ars_rate, 2)
        self.final_price_ars = round(
            self.average_unit_cost_usd
            * usd_to_ars_rate
            * (1 + self.markup_percentage / 100),
            2,
        )


class ProductBatch(BaseModel):
    """Immutable receipt record: one per order line moved into stock."""

    id: int | None = None
    product_id: int
    order_id: int | None = None
    order_item_id: int | None = None
    batch_number: str
    quantity: int
    unit_cost_usd: float
    total_cost_usd: float
    notes: str | None = None
    created_at: datetime = Field(default_factory=utc_now)


class BatchReceipt(BaseModel):
    """Request to receive one batch of a product lead into stock."""

    product_lead_id: int
    product_name: str
    quantity: int
    unit_cost_usd: float
    order_id: int | None = None
    order_item_id: int | None = None
    batch_number: str | None = None
    notes: str | None = None

    @property
    def total_cost_usd(self) -> float:
        return round(self.quantity * self.unit_cost_usd, 2)
