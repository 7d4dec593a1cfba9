"""Tests for SQLiteLedgerStore."""

import asyncio

import pytest

from src.core.entities import BatchReceipt, OrderStatus, PurchaseOrder
from src.core.exceptions import (
    InvalidOrderStateError,
    OrderAlreadyProcessedError,
    OrderNotFoundError,
    ValidationError,
)


def receipt(lead, quantity: int, unit_cost: float, **extra) -> BatchReceipt:
    return BatchReceipt(
        product_lead_id=lead.id,
        product_name=lead.name,
        quantity=quantity,
        unit_cost_usd=unit_cost,
        **extra,
    )


def order_receipts(order) -> list[BatchReceipt]:
    costs = {order.items[0].id: 3.5, order.items[1].id: 7.0}
    return [
        BatchReceipt(
            product_lead_id=item.product_lead_id,
            product_name=item.product_name,
            quantity=item.quantity,
            unit_cost_usd=costs[item.id],
            order_id=order.id,
            order_item_id=item.id,
            batch_number=f"{order.order_number}-{item.product_lead_id}",
        )
        for item in order.items
    ]


class TestReceive:
    async def test_first_receipt_creates_product(self, ledger_store, leads, pricing):
        product, batch = await ledger_store.receive(receipt(leads[0], 10, 5.0), pricing)

        assert product.id is not None
        assert product.stock == 10
        assert product.average_unit_cost_usd == pytest.approx(5.0)
        assert product.final_unit_cost_ars == pytest.approx(5000.0)
        assert product.final_price_ars == pytest.approx(6500.0)
        assert batch.product_id == product.id
        assert batch.batch_number.startswith("RCV-")

    async def test_weighted_average_persisted(self, ledger_store, leads, pricing):
        await ledger_store.receive(receipt(leads[0], 10, 5.0), pricing)
        product, _ = await ledger_store.receive(receipt(leads[0], 10, 7.0), pricing)

        stored = await ledger_store.get_product(product.id)
        assert stored.stock == 20
        assert stored.average_unit_cost_usd == pytest.approx(6.0)
        assert (await ledger_store.get_product_by_lead(leads[0].id)).id == product.id

    async def test_batches_oldest_first(self, ledger_store, leads, pricing):
        product, _ = await ledger_store.receive(receipt(leads[0], 1, 1.0, batch_number="A"), pricing)
        await ledger_store.receive(receipt(leads[0], 2, 1.0, batch_number="B"), pricing)

        batches = await ledger_store.list_batches(product.id)

        assert [b.batch_number for b in batches] == ["A", "B"]
        assert sum(b.quantity for b in batches) == 3

    async def test_concurrent_receipts_keep_stock_consistent(self, ledger_store, leads, pricing):
        await asyncio.gather(
            *(ledger_store.receive(receipt(leads[0], 5, 2.0), pricing) for _ in range(4))
        )

        product = await ledger_store.get_product_by_lead(leads[0].id)
        batches = await ledger_store.list_batches(product.id)
        assert product.stock == 20 == sum(b.quantity for b in batches)

    async def test_list_products(self, ledger_store, leads, pricing):
        await ledger_store.receive(receipt(leads[0], 1, 1.0), pricing)
        await ledger_store.receive(receipt(leads[1], 1, 1.0), pricing)

        names = [p.name for p in await ledger_store.list_products()]
        assert names == ["Gadget", "Widget"]


class TestStockOrder:
    async def test_stocks_every_line_and_sets_latch(
        self, ledger_store, order_store, received_order, pricing
    ):
        batches = await ledger_store.stock_order(
            received_order.id, order_receipts(received_order), pricing
        )

        assert len(batches) == 2
        assert {b.order_item_id for b in batches} == {i.id for i in received_order.items}
        order = await order_store.get_order(received_order.id)
        assert order.stocked
        assert order.stocked_at is not None
        assert order.status == OrderStatus.RECEIVED

        widget = await ledger_store.get_product_by_lead(received_order.items[0].product_lead_id)
        assert widget.stock == 100
        assert widget.average_unit_cost_usd == pytest.approx(3.5)

    async def test_second_call_rejected(self, ledger_store, received_order, pricing):
        receipts = order_receipts(received_order)
        await ledger_store.stock_order(received_order.id, receipts, pricing)

        with pytest.raises(OrderAlreadyProcessedError):
            await ledger_store.stock_order(received_order.id, receipts, pricing)

        product = await ledger_store.get_product_by_lead(received_order.items[0].product_lead_id)
        assert product.stock == 100

    async def test_concurrent_calls_stock_once(self, ledger_store, received_order, pricing):
        receipts = order_receipts(received_order)

        results = await asyncio.gather(
            ledger_store.stock_order(received_order.id, receipts, pricing),
            ledger_store.stock_order(received_order.id, receipts, pricing),
            return_exceptions=True,
        )

        assert sum(isinstance(r, list) for r in results) == 1
        assert sum(isinstance(r, OrderAlreadyProcessedError) for r in results) == 1
        product = await ledger_store.get_product_by_lead(received_order.items[1].product_lead_id)
        assert product.stock == 50

    async def test_order_not_received(self, ledger_store, order_store, pricing):
        order = await order_store.create_order(
            PurchaseOrder(order_number="PO-PAID", status=OrderStatus.PAID)
        )

        with pytest.raises(InvalidOrderStateError):
            await ledger_store.stock_order(order.id, [], pricing)

    async def test_missing_order(self, ledger_store, pricing):
        with pytest.raises(OrderNotFoundError):
            await ledger_store.stock_order(404, [], pricing)

    async def test_failure_rolls_back_everything(self, ledger_store, order_store, received_order, pricing):
        receipts = order_receipts(received_order)
        # Same order line twice violates the one-batch-per-line index
        receipts[1] = receipts[1].model_copy(update={"order_item_id": receipts[0].order_item_id})

        with pytest.raises(ValidationError):
            await ledger_store.stock_order(received_order.id, receipts, pricing)

        order = await order_store.get_order(received_order.id)
        assert not order.stocked
        assert await ledger_store.list_products() == []
