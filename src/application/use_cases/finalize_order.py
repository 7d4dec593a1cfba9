"""
Finalize Order Use Case.

Moves a received purchase order into stock exactly once: allocates its
import costs, appends one batch per line at the landed unit cost and sets
the order's stocked latch, all in a single transaction.
"""

from dataclasses import dataclass, field

from src.application.dto.converters import batch_to_response
from src.application.dto.responses import FinalizeOrderResponse
from src.config import get_logger
from src.core.entities.order import OrderStatus, PurchaseOrder
from src.core.entities.product import BatchReceipt, PricingPolicy, ProductBatch
from src.core.exceptions import (
    InvalidOrderStateError,
    OrderAlreadyProcessedError,
    OrderNotFoundError,
    ValidationError,
)
from src.core.interfaces.ledger_store import ILedgerStore
from src.core.interfaces.order_store import IOrderStore
from src.core.services.cost_allocator import (
    OrderCostCalculation,
    ProrationMethod,
    allocate_import_costs,
)

logger = get_logger(__name__)


@dataclass
class FinalizeOrderResult:
    """Result of finalizing an order."""

    order_id: int
    order_number: str
    calculation: OrderCostCalculation
    batches: list[ProductBatch] = field(default_factory=list)


class FinalizeOrderUseCase:
    """Finalize a received order into inventory."""

    def __init__(
        self,
        order_store: IOrderStore | None = None,
        ledger_store: ILedgerStore | None = None,
        pricing: PricingPolicy | None = None,
        method: ProrationMethod | None = None,
    ):
        self._order_store = order_store
        self._ledger_store = ledger_store
        self._pricing = pricing
        self._method = method

    async def _get_order_store(self) -> IOrderStore:
        if self._order_store is None:
            from src.infrastructure.storage.sqlite import get_order_store

            self._order_store = await get_order_store()
        return self._order_store

    async def _get_ledger_store(self) -> ILedgerStore:
        if self._ledger_store is None:
            from src.infrastructure.storage.sqlite import get_ledger_store

            self._ledger_store = await get_ledger_store()
        return self._ledger_store

    def _get_pricing(self) -> PricingPolicy:
        if self._pricing is None:
            from src.application.services import get_pricing_policy

            self._pricing = get_pricing_policy()
        return self._pricing

    def _get_method(self) -> ProrationMethod:
        if self._method is None:
            from src.application.services import get_proration_method

            self._method = get_proration_method()
        return self._method

    async def execute(self, order_id: int) -> FinalizeOrderResult:
        """
        Execute finalize order use case.

        Raises:
            OrderNotFoundError: Order does not exist
            InvalidOrderStateError: Order is not received
            OrderAlreadyProcessedError: Order was already stocked
            ValidationError: Order has no items or malformed lines
        """
        logger.info("finalize_order_started", order_id=order_id)

        store = await self._get_order_store()
        order = await store.get_order(order_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        if order.status != OrderStatus.RECEIVED:
            raise InvalidOrderStateError(
                order_id, order.status.value, OrderStatus.RECEIVED.value
            )
        if order.stocked:
            raise OrderAlreadyProcessedError(order_id)
        if not order.items:
            raise ValidationError("items", "order has no items to receive", order_id)

        calculation = allocate_import_costs(
            order.items, order.import_costs, self._get_method()
        )
        receipts = self._build_receipts(order, calculation)

        # Guard is re-checked and the latch set inside the ledger transaction
        ledger = await self._get_ledger_store()
        batches = await ledger.stock_order(order_id, receipts, self._get_pricing())

        logger.info(
            "finalize_order_complete",
            order_id=order_id,
            batches=len(batches),
            total_landed_cost_usd=round(calculation.total_landed_cost_usd, 2),
        )
        return FinalizeOrderResult(
            order_id=order_id,
            order_number=order.order_number,
            calculation=calculation,
            batches=batches,
        )

    @staticmethod
    def _build_receipts(
        order: PurchaseOrder, calculation: OrderCostCalculation
    ) -> list[BatchReceipt]:
        receipts = []
        for allocation in calculation.items:
            lead_id = allocation.product_lead_id
            receipts.append(
                BatchReceipt(
                    product_lead_id=lead_id,
                    product_name=allocation.product_name or f"Product {lead_id}",
                    quantity=allocation.quantity,
                    unit_cost_usd=allocation.final_unit_cost_usd,
                    order_id=order.id,
                    order_item_id=allocation.order_item_id,
                    batch_number=f"{order.order_number}-{lead_id}",
                    notes=f"Received from order {order.order_number}",
                )
            )
        return receipts

    def to_response(self, result: FinalizeOrderResult) -> FinalizeOrderResponse:
        """Convert result to API response."""
        return FinalizeOrderResponse(
            status="success",
            message=(
                f"Order {result.order_number} processed into stock: "
                f"{len(result.batches)} batches created"
            ),
            order_id=result.order_id,
            batches=[batch_to_response(batch) for batch in result.batches],
            total_landed_cost_usd=round(result.calculation.total_landed_cost_usd, 2),
        )
