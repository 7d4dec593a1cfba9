"""Unit tests for the purchase order use cases."""

from unittest.mock import AsyncMock

import pytest

from src.application.dto.requests import (
    CreateOrderRequest,
    CreateProductLeadRequest,
    ImportCostRequest,
    OrderItemRequest,
    UpdateOrderStatusRequest,
)
from src.application.use_cases.manage_orders import (
    AddImportCostUseCase,
    AddOrderItemUseCase,
    CreateOrderUseCase,
    CreateProductLeadUseCase,
    GetCostBreakdownUseCase,
    UpdateOrderStatusUseCase,
)
from src.core.entities.order import (
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
from src.core.services.cost_allocator import ProrationMethod


@pytest.fixture
def order_store():
    store = AsyncMock()
    store.get_lead.return_value = ProductLead(id=1, name="Widget")
    store.get_order.return_value = PurchaseOrder(id=1, order_number="PO-1")
    store.update_status.return_value = True
    return store


class TestCreateProductLead:
    async def test_strips_name(self, order_store):
        order_store.create_lead.side_effect = lambda lead: lead.model_copy(update={"id": 3})
        use_case = CreateProductLeadUseCase(order_store)

        lead = await use_case.execute(CreateProductLeadRequest(name="  Widget  "))

        assert lead.name == "Widget"
        assert use_case.to_response(lead).id == 3


class TestCreateOrder:
    async def test_creates_and_reloads(self, order_store):
        order_store.create_order.side_effect = lambda order: order.model_copy(update={"id": 1})
        use_case = CreateOrderUseCase(order_store)

        order = await use_case.execute(
            CreateOrderRequest(
                order_number="PO-1",
                items=[OrderItemRequest(product_lead_id=1, quantity=5, unit_price_usd=2.0)],
                import_costs=[ImportCostRequest(amount_usd=10)],
            )
        )

        created = order_store.create_order.call_args.args[0]
        assert created.status == OrderStatus.DRAFT
        assert len(created.items) == 1
        assert len(created.import_costs) == 1
        order_store.get_order.assert_awaited_with(1)
        assert order.order_number == "PO-1"

    async def test_unknown_lead_rejected(self, order_store):
        order_store.get_lead.return_value = None
        use_case = CreateOrderUseCase(order_store)

        with pytest.raises(ProductLeadNotFoundError):
            await use_case.execute(
                CreateOrderRequest(
                    order_number="PO-1",
                    items=[OrderItemRequest(product_lead_id=7, quantity=1, unit_price_usd=1.0)],
                )
            )
        order_store.create_order.assert_not_called()


class TestAddToOrder:
    async def test_add_item(self, order_store):
        use_case = AddOrderItemUseCase(order_store)

        await use_case.execute(1, OrderItemRequest(product_lead_id=1, quantity=3, unit_price_usd=4.0))

        order_id, item = order_store.add_item.call_args.args
        assert order_id == 1
        assert item.quantity == 3

    async def test_add_item_to_stocked_order_rejected(self, order_store):
        order_store.get_order.return_value = PurchaseOrder(id=1, order_number="PO-1", stocked=True)

        with pytest.raises(OrderAlreadyProcessedError):
            await AddOrderItemUseCase(order_store).execute(
                1, OrderItemRequest(product_lead_id=1, quantity=3, unit_price_usd=4.0)
            )
        order_store.add_item.assert_not_called()

    async def test_received_order_lines_frozen(self, order_store):
        order_store.get_order.return_value = PurchaseOrder(
            id=1, order_number="PO-1", status=OrderStatus.RECEIVED
        )

        with pytest.raises(InvalidOrderStateError) as exc_info:
            await AddOrderItemUseCase(order_store).execute(
                1, OrderItemRequest(product_lead_id=1, quantity=3, unit_price_usd=4.0)
            )
        with pytest.raises(InvalidOrderStateError):
            await AddImportCostUseCase(order_store).execute(1, ImportCostRequest(amount_usd=50))

        assert exc_info.value.details["status"] == "received"
        order_store.add_item.assert_not_called()
        order_store.add_import_cost.assert_not_called()

    async def test_add_import_cost(self, order_store):
        await AddImportCostUseCase(order_store).execute(1, ImportCostRequest(amount_usd=50))

        cost = order_store.add_import_cost.call_args.args[1]
        assert cost.amount_usd == 50

    async def test_missing_order(self, order_store):
        order_store.get_order.return_value = None

        with pytest.raises(OrderNotFoundError):
            await AddImportCostUseCase(order_store).execute(1, ImportCostRequest(amount_usd=50))


class TestUpdateOrderStatus:
    async def test_forward_step(self, order_store):
        use_case = UpdateOrderStatusUseCase(order_store)

        await use_case.execute(1, UpdateOrderStatusRequest(status=OrderStatus.PENDING_PAYMENT))

        order_store.update_status.assert_awaited_once_with(
            1, OrderStatus.PENDING_PAYMENT, expected_status=OrderStatus.DRAFT
        )

    async def test_skip_rejected(self, order_store):
        with pytest.raises(InvalidStatusTransitionError):
            await UpdateOrderStatusUseCase(order_store).execute(
                1, UpdateOrderStatusRequest(status=OrderStatus.SHIPPED)
            )
        order_store.update_status.assert_not_called()

    async def test_lost_race_reports_current_status(self, order_store):
        order_store.update_status.return_value = False
        order_store.get_order.side_effect = [
            PurchaseOrder(id=1, order_number="PO-1"),
            PurchaseOrder(id=1, order_number="PO-1", status=OrderStatus.CANCELLED),
        ]

        with pytest.raises(InvalidStatusTransitionError) as exc_info:
            await UpdateOrderStatusUseCase(order_store).execute(
                1, UpdateOrderStatusRequest(status=OrderStatus.PENDING_PAYMENT)
            )
        assert exc_info.value.details["current"] == "cancelled"

    async def test_stocked_order_frozen(self, order_store):
        order_store.get_order.return_value = PurchaseOrder(
            id=1, order_number="PO-1", status=OrderStatus.RECEIVED, stocked=True
        )

        with pytest.raises(OrderAlreadyProcessedError):
            await UpdateOrderStatusUseCase(order_store).execute(
                1, UpdateOrderStatusRequest(status=OrderStatus.CANCELLED)
            )


class TestCostBreakdown:
    async def test_preview(self, order_store):
        order_store.get_order.return_value = PurchaseOrder(
            id=1,
            order_number="PO-1",
            items=[
                OrderItem(product_lead_id=1, quantity=100, unit_price_usd=2.0),
                OrderItem(product_lead_id=2, quantity=50, unit_price_usd=4.0),
            ],
            import_costs=[ImportCost(amount_usd=300)],
        )
        use_case = GetCostBreakdownUseCase(order_store, method=ProrationMethod.VALUE)

        response = use_case.to_response(await use_case.execute(1))

        assert response.method == "value"
        assert response.total_landed_cost_usd == 700.0
        assert [i.final_unit_cost_usd for i in response.items] == [3.5, 7.0]
