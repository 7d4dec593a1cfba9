"""
Sellable quantity of a channel listing.

A single sale of a listing consumes ``quantity_per_sale`` units of every
mapped product, so the listing can support as many sales as its scarcest
product allows.
"""

from dataclasses import dataclass

from src.core.entities.channel import StockMapping
from src.core.exceptions import ValidationError


@dataclass
class StockAllocation:
    """Result of an availability computation."""

    available: int
    unmapped: bool = False
    limiting_product_id: int | None = None

    def capped(self, maximum: int) -> int:
        """Available quantity bounded by the channel's publishable maximum."""
        return min(self.available, maximum)


def calculate_available(mappings: list[StockMapping]) -> StockAllocation:
    """
    Compute how many sales the listing can currently fulfil.

    Disabled mappings are ignored. Priority is not consulted.

    Returns:
        StockAllocation; ``unmapped`` is set when no mapping is enabled

    Raises:
        ValidationError: A mapping has a non-positive quantity_per_sale
    """
    enabled = [mapping for mapping in mappings if mapping.enabled]
    if not enabled:
        return StockAllocation(available=0, unmapped=True)

    available: int | None = None
    limiting: int | None = None
    for mapping in enabled:
        if mapping.quantity_per_sale <= 0:
            raise ValidationError(
                "quantity_per_sale", "must be a positive integer", mapping.quantity_per_sale
            )
        supported = max(mapping.product_stock, 0) // mapping.quantity_per_sale
        if available is None or supported < available:
            available = supported
            limiting = mapping.product_id

    return StockAllocation(available=available or 0, limiting_product_id=limiting)
