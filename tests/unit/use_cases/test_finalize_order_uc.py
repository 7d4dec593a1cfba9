"""Unit tests for FinalizeOrderUseCase."""

from unittest.mock import AsyncMock

import pytest

from src.application.use_cases.finalize_order import FinalizeOrderUseCase
from src.core.entities.order import (
    ImportCost,
    ImportCostCategory,
    OrderItem,
    OrderStatus,
    PurchaseOrder,
)
from src.core.entities.product import PricingPolicy, ProductBatch
from src.core.exceptions import (
    InvalidOrderStateError,
    OrderAlreadyProcessedError,
    OrderNotFoundError,
    ValidationError,
)
from src.core.services.cost_allocator import ProrationMethod

PRICING = PricingPolicy(usd_to_ars_rate=1000.0, default_markup_percentage=30.0)


def make_order(**overrides) -> PurchaseOrder:
    defaults = dict(
        id=1,
        order_number="PO-1",
        status=OrderStatus.RECEIVED,
        items=[
            OrderItem(id=11, product_lead_id=1, product_name="Widget", quantity=100, unit_price_usd=2.0),
            OrderItem(id=12, product_lead_id=2, product_name="Gadget", quantity=50, unit_price_usd=4.0),
        ],
        import_costs=[ImportCost(category=ImportCostCategory.FREIGHT, amount_usd=300)],
    )
    defaults.update(overrides)
    return PurchaseOrder(**defaults)


def batches_for(order_id, receipts, pricing):
    return [
        ProductBatch(
            id=index + 1,
            product_id=receipt.product_lead_id,
            order_id=order_id,
            order_item_id=receipt.order_item_id,
            batch_number=receipt.batch_number,
            quantity=receipt.quantity,
            unit_cost_usd=receipt.unit_cost_usd,
            total_cost_usd=receipt.total_cost_usd,
        )
        for index, receipt in enumerate(receipts)
    ]


@pytest.fixture
def order_store():
    store = AsyncMock()
    store.get_order.return_value = make_order()
    return store


@pytest.fixture
def ledger_store():
    store = AsyncMock()
    store.stock_order.side_effect = batches_for
    return store


@pytest.fixture
def use_case(order_store, ledger_store):
    return FinalizeOrderUseCase(
        order_store=order_store,
        ledger_store=ledger_store,
        pricing=PRICING,
        method=ProrationMethod.VALUE,
    )


class TestFinalizeOrderUseCase:
    async def test_creates_batch_per_item_at_landed_cost(self, use_case, ledger_store):
        result = await use_case.execute(1)

        order_id, receipts, pricing = ledger_store.stock_order.call_args.args
        assert order_id == 1
        assert pricing is PRICING
        assert [r.unit_cost_usd for r in receipts] == pytest.approx([3.5, 7.0])
        assert [r.batch_number for r in receipts] == ["PO-1-1", "PO-1-2"]
        assert [r.order_item_id for r in receipts] == [11, 12]
        assert receipts[0].notes == "Received from order PO-1"
        assert len(result.batches) == 2
        assert result.calculation.total_landed_cost_usd == pytest.approx(700.0)

    async def test_missing_order(self, use_case, order_store):
        order_store.get_order.return_value = None

        with pytest.raises(OrderNotFoundError):
            await use_case.execute(99)

    async def test_order_not_received(self, use_case, order_store, ledger_store):
        order_store.get_order.return_value = make_order(status=OrderStatus.IN_TRANSIT)

        with pytest.raises(InvalidOrderStateError):
            await use_case.execute(1)
        ledger_store.stock_order.assert_not_called()

    async def test_already_stocked(self, use_case, order_store, ledger_store):
        order_store.get_order.return_value = make_order(stocked=True)

        with pytest.raises(OrderAlreadyProcessedError):
            await use_case.execute(1)
        ledger_store.stock_order.assert_not_called()

    async def test_order_without_items(self, use_case, order_store):
        order_store.get_order.return_value = make_order(items=[])

        with pytest.raises(ValidationError):
            await use_case.execute(1)

    async def test_ledger_guard_propagates(self, use_case, ledger_store):
        ledger_store.stock_order.side_effect = OrderAlreadyProcessedError(1)

        with pytest.raises(OrderAlreadyProcessedError):
            await use_case.execute(1)

    async def test_to_response(self, use_case):
        result = await use_case.execute(1)
        response = use_case.to_response(result)

        assert response.status == "success"
        assert response.message == "Order PO-1 processed into stock: 2 batches created"
        assert response.total_landed_cost_usd == 700.0
        assert len(response.batches) == 2
