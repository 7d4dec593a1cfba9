"""
Purchase order management use cases.

Product leads, order creation, line items, import charges and the status
workflow. Lines and charges are frozen once the goods are received, and
the status is frozen once the order is stocked.
"""

from src.application.dto.converters import order_to_response
from src.application.dto.requests import (
    CreateOrderRequest,
    CreateProductLeadRequest,
    ImportCostRequest,
    OrderItemRequest,
    UpdateOrderStatusRequest,
)
from src.application.dto.responses import (
    CostBreakdownResponse,
    ItemCostAllocationResponse,
    OrderResponse,
    ProductLeadResponse,
)
from src.config import get_logger
from src.core.entities.order import (
    LINES_EDITABLE_UNTIL,
    ImportCost,
    OrderItem,
    OrderStatus,
    ProductLead,
    PurchaseOrder,
)
from src.core.exceptions import (
    InvalidOrderStateError,
    InvalidStatusTransitionError,
    OrderAlreadyProcessedError,
    OrderNotFoundError,
    ProductLeadNotFoundError,
)
from src.core.interfaces.order_store import IOrderStore
from src.core.services.cost_allocator import (
    OrderCostCalculation,
    ProrationMethod,
    allocate_import_costs,
)

logger = get_logger(__name__)


class _OrderUseCase:
    """Shared store access for the order use cases."""

    def __init__(self, order_store: IOrderStore | None = None):
        self._order_store = order_store

    async def _get_order_store(self) -> IOrderStore:
        if self._order_store is None:
            from src.infrastructure.storage.sqlite import get_order_store

            self._order_store = await get_order_store()
        return self._order_store

    async def _get_order(self, order_id: int) -> PurchaseOrder:
        store = await self._get_order_store()
        order = await store.get_order(order_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        return order

    async def _get_open_order(self, order_id: int) -> PurchaseOrder:
        order = await self._get_order(order_id)
        if order.stocked:
            raise OrderAlreadyProcessedError(order_id)
        return order

    async def _get_editable_order(self, order_id: int) -> PurchaseOrder:
        order = await self._get_open_order(order_id)
        if not order.status.accepts_line_changes:
            raise InvalidOrderStateError(order_id, order.status.value, LINES_EDITABLE_UNTIL)
        return order

    async def _require_lead(self, lead_id: int) -> ProductLead:
        store = await self._get_order_store()
        lead = await store.get_lead(lead_id)
        if lead is None:
            raise ProductLeadNotFoundError(lead_id)
        return lead


class CreateProductLeadUseCase(_OrderUseCase):
    """Register a sourced product in the catalog."""

    async def execute(self, request: CreateProductLeadRequest) -> ProductLead:
        store = await self._get_order_store()
        return await store.create_lead(
            ProductLead(name=request.name.strip(), category=request.category)
        )

    def to_response(self, lead: ProductLead) -> ProductLeadResponse:
        return ProductLeadResponse(
            id=lead.id,  # type: ignore[arg-type]
            name=lead.name,
            category=lead.category,
            created_at=lead.created_at,
        )


class CreateOrderUseCase(_OrderUseCase):
    """Create a draft purchase order with its lines and charges."""

    async def execute(self, request: CreateOrderRequest) -> PurchaseOrder:
        for item in request.items:
            await self._require_lead(item.product_lead_id)

        order = PurchaseOrder(
            order_number=request.order_number.strip(),
            order_date=request.order_date,
            items=[_item_from_request(item) for item in request.items],
            import_costs=[_cost_from_request(cost) for cost in request.import_costs],
        )
        store = await self._get_order_store()
        created = await store.create_order(order)
        # Reload to pick up product names joined from the catalog
        return await self._get_order(created.id)  # type: ignore[arg-type]

    def to_response(self, order: PurchaseOrder) -> OrderResponse:
        return order_to_response(order)


class AddOrderItemUseCase(_OrderUseCase):
    """Append a line to an order whose goods have not arrived yet."""

    async def execute(self, order_id: int, request: OrderItemRequest) -> PurchaseOrder:
        await self._get_editable_order(order_id)
        await self._require_lead(request.product_lead_id)

        store = await self._get_order_store()
        await store.add_item(order_id, _item_from_request(request))
        return await self._get_order(order_id)

    def to_response(self, order: PurchaseOrder) -> OrderResponse:
        return order_to_response(order)


class AddImportCostUseCase(_OrderUseCase):
    """Append an import charge to an order whose goods have not arrived yet."""

    async def execute(self, order_id: int, request: ImportCostRequest) -> PurchaseOrder:
        await self._get_editable_order(order_id)

        store = await self._get_order_store()
        await store.add_import_cost(order_id, _cost_from_request(request))
        return await self._get_order(order_id)

    def to_response(self, order: PurchaseOrder) -> OrderResponse:
        return order_to_response(order)


class UpdateOrderStatusUseCase(_OrderUseCase):
    """
    Advance an order one step along its workflow, or cancel it.

    The write is conditional on the status read here, so two concurrent
    transitions from the same state cannot both succeed.
    """

    async def execute(
        self, order_id: int, request: UpdateOrderStatusRequest
    ) -> PurchaseOrder:
        order = await self._get_open_order(order_id)
        current = order.status
        target = OrderStatus(request.status)

        if not current.can_transition_to(target):
            raise InvalidStatusTransitionError(order_id, current.value, target.value)

        store = await self._get_order_store()
        if not await store.update_status(order_id, target, expected_status=current):
            latest = await self._get_order(order_id)
            if latest.stocked:
                raise OrderAlreadyProcessedError(order_id)
            raise InvalidStatusTransitionError(
                order_id, latest.status.value, target.value
            )

        logger.info(
            "order_status_changed",
            order_id=order_id,
            from_status=current.value,
            to_status=target.value,
        )
        return await self._get_order(order_id)

    def to_response(self, order: PurchaseOrder) -> OrderResponse:
        return order_to_response(order)


class GetCostBreakdownUseCase(_OrderUseCase):
    """Preview the landed cost of an order without touching inventory."""

    def __init__(
        self,
        order_store: IOrderStore | None = None,
        method: ProrationMethod | None = None,
    ):
        super().__init__(order_store)
        self._method = method

    async def execute(self, order_id: int) -> tuple[int, OrderCostCalculation]:
        order = await self._get_order(order_id)
        method = self._method
        if method is None:
            from src.application.services import get_proration_method

            method = get_proration_method()
        return order_id, allocate_import_costs(order.items, order.import_costs, method)

    def to_response(
        self, result: tuple[int, OrderCostCalculation]
    ) -> CostBreakdownResponse:
        order_id, calculation = result
        return CostBreakdownResponse(
            order_id=order_id,
            method=calculation.method.value,
            total_fob_usd=round(calculation.total_fob_usd, 2),
            total_import_costs_usd=round(calculation.total_import_costs_usd, 2),
            total_landed_cost_usd=round(calculation.total_landed_cost_usd, 2),
            items=[
                ItemCostAllocationResponse(
                    product_lead_id=item.product_lead_id,
                    product_name=item.product_name,
                    quantity=item.quantity,
                    net_unit_price_usd=round(item.net_unit_price_usd, 4),
                    fob_value_usd=round(item.fob_value_usd, 2),
                    allocated_import_cost_usd=round(item.allocated_import_cost_usd, 2),
                    import_cost_per_unit_usd=round(item.import_cost_per_unit_usd, 4),
                    final_unit_cost_usd=round(item.final_unit_cost_usd, 4),
                    total_final_cost_usd=round(item.total_final_cost_usd, 2),
                    cost_breakdown=item.cost_breakdown,
                )
                for item in calculation.items
            ],
        )


def _item_from_request(request: OrderItemRequest) -> OrderItem:
    return OrderItem(
        product_lead_id=request.product_lead_id,
        quantity=request.quantity,
        unit_price_usd=request.unit_price_usd,
        discount_percent=request.discount_percent,
    )


def _cost_from_request(request: ImportCostRequest) -> ImportCost:
    return ImportCost(
        category=request.category,
        amount_usd=request.amount_usd,
        description=request.description,
    )
