"""
Landed cost allocation.

Distributes an order's shared import charges across its line items and
derives the per-unit landed cost of each. Pure: no state, no I/O.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

from src.core.entities.order import ImportCost, OrderItem
from src.core.exceptions import ValidationError

CENT = Decimal("0.01")
HUNDRED = Decimal("100")


class ProrationMethod(str, Enum):
    """Basis used to weight each item's share of the import cost pool."""

    VALUE = "value"  # share of FOB value (quantity x net price)
    QUANTITY = "quantity"  # share of units


@dataclass
class ItemCostAllocation:
    """Landed cost of one order line."""

    product_lead_id: int
    quantity: int
    unit_price_usd: float
    discount_percent: float
    net_unit_price_usd: float
    fob_value_usd: float
    allocated_import_cost_usd: float
    import_cost_per_unit_usd: float
    final_unit_cost_usd: float
    total_final_cost_usd: float
    order_item_id: int | None = None
    product_name: str | None = None
    cost_breakdown: dict[str, float] = field(default_factory=dict)


@dataclass
class OrderCostCalculation:
    """Allocation result for a whole order."""

    method: ProrationMethod
    total_fob_usd: float = 0.0
    total_import_costs_usd: float = 0.0
    total_landed_cost_usd: float = 0.0
    items: list[ItemCostAllocation] = field(default_factory=list)


def _to_decimal(value: float | int) -> Decimal:
    return Decimal(str(value))


def _validate(items: list[OrderItem], import_costs: list[ImportCost]) -> None:
    for index, item in enumerate(items):
        if item.quantity <= 0:
            raise ValidationError(
                f"items[{index}].quantity", "must be a positive integer", item.quantity
            )
        if item.unit_price_usd <= 0:
            raise ValidationError(
                f"items[{index}].unit_price_usd", "must be positive", item.unit_price_usd
            )
        if not 0 <= item.discount_percent <= 100:
            raise ValidationError(
                f"items[{index}].discount_percent",
                "must be between 0 and 100",
                item.discount_percent,
            )
    for index, cost in enumerate(import_costs):
        if cost.amount_usd < 0:
            raise ValidationError(
                f"import_costs[{index}].amount_usd", "must not be negative", cost.amount_usd
            )


def allocate_import_costs(
    items: list[OrderItem],
    import_costs: list[ImportCost],
    method: ProrationMethod = ProrationMethod.VALUE,
) -> OrderCostCalculation:
    """
    Allocate import costs across order items.

    Each item's share of the pool is rounded to cents; the rounding
    remainder goes to the item with the highest FOB value so the shares
    add up to the pool exactly.

    Args:
        items: Order lines (quantity, unit price, discount)
        import_costs: Shared charges of the order
        method: Proration basis

    Returns:
        OrderCostCalculation with one allocation per item, in input order

    Raises:
        ValidationError: Malformed input or a zero total FOB value
    """
    method = ProrationMethod(method)
    _validate(items, import_costs)

    pool = sum((_to_decimal(cost.amount_usd) for cost in import_costs), Decimal("0"))
    if not items:
        return OrderCostCalculation(method=method, total_import_costs_usd=float(pool))

    by_category: dict[str, Decimal] = defaultdict(Decimal)
    for cost in import_costs:
        by_category[cost.category.value] += _to_decimal(cost.amount_usd)

    net_prices = [
        _to_decimal(item.unit_price_usd)
        * (1 - _to_decimal(item.discount_percent) / HUNDRED)
        for item in items
    ]
    fob_values = [net * item.quantity for net, item in zip(net_prices, items)]
    total_fob = sum(fob_values, Decimal("0"))
    if total_fob == 0:
        raise ValidationError("items", "total FOB value of the order is zero", 0)

    if method == ProrationMethod.QUANTITY:
        weights = [Decimal(item.quantity) for item in items]
    else:
        weights = fob_values
    total_weight = sum(weights, Decimal("0"))

    shares = [
        (pool * weight / total_weight).quantize(CENT, rounding=ROUND_HALF_UP)
        for weight in weights
    ]
    remainder = pool - sum(shares, Decimal("0"))
    if remainder:
        largest = max(range(len(items)), key=lambda i: fob_values[i])
        shares[largest] += remainder

    calculation = OrderCostCalculation(
        method=method,
        total_fob_usd=float(total_fob),
        total_import_costs_usd=float(pool),
    )
    landed_total = Decimal("0")

    for item, net, fob, weight, share in zip(items, net_prices, fob_values, weights, shares):
        per_unit = share / item.quantity
        final_unit = net + per_unit
        total_final = net * item.quantity + share
        landed_total += total_final

        breakdown = {
            category: float(
                (amount * weight / total_weight).quantize(CENT, rounding=ROUND_HALF_UP)
            )
            for category, amount in by_category.items()
        }

        calculation.items.append(
            ItemCostAllocation(
                order_item_id=item.id,
                product_lead_id=item.product_lead_id,
                product_name=item.product_name,
                quantity=item.quantity,
                unit_price_usd=item.unit_price_usd,
                discount_percent=item.discount_percent,
                net_unit_price_usd=float(net),
                fob_value_usd=float(fob),
                allocated_import_cost_usd=float(share),
                import_cost_per_unit_usd=float(per_unit),
                final_unit_cost_usd=float(final_unit),
                total_final_cost_usd=float(total_final),
                cost_breakdown=breakdown,
            )
        )

    calculation.total_landed_cost_usd = float(landed_total)
    return calculation
