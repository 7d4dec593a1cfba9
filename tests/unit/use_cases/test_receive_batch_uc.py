"""Unit tests for ReceiveBatchUseCase."""

from unittest.mock import AsyncMock

import pytest

from src.application.dto.requests import ReceiveBatchRequest
from src.application.use_cases.receive_batch import ReceiveBatchUseCase
from src.core.entities.order import ProductLead
from src.core.entities.product import PricingPolicy, Product, ProductBatch
from src.core.exceptions import ProductLeadNotFoundError


@pytest.fixture
def order_store():
    store = AsyncMock()
    store.get_lead.return_value = ProductLead(id=5, name="Widget")
    return store


@pytest.fixture
def ledger_store():
    store = AsyncMock()
    store.get_product_by_lead.return_value = None
    store.receive.return_value = (
        Product(id=1, product_lead_id=5, name="Widget", stock=10, average_unit_cost_usd=5.0),
        ProductBatch(
            id=1, product_id=1, batch_number="B-1", quantity=10, unit_cost_usd=5.0, total_cost_usd=50.0
        ),
    )
    return store


@pytest.fixture
def use_case(order_store, ledger_store):
    return ReceiveBatchUseCase(
        ledger_store=ledger_store, order_store=order_store, pricing=PricingPolicy()
    )


class TestReceiveBatchUseCase:
    async def test_receives_into_new_product(self, use_case, ledger_store):
        result = await use_case.execute(
            ReceiveBatchRequest(product_lead_id=5, quantity=10, unit_cost_usd=5.0, batch_number="B-1")
        )

        receipt = ledger_store.receive.call_args.args[0]
        assert receipt.product_lead_id == 5
        assert receipt.product_name == "Widget"
        assert receipt.quantity == 10
        assert receipt.order_id is None
        assert result.created is True

    async def test_existing_product_not_created(self, use_case, ledger_store):
        ledger_store.get_product_by_lead.return_value = Product(id=1, product_lead_id=5, name="Widget")

        result = await use_case.execute(
            ReceiveBatchRequest(product_lead_id=5, quantity=10, unit_cost_usd=5.0)
        )

        assert result.created is False

    async def test_unknown_lead(self, use_case, order_store, ledger_store):
        order_store.get_lead.return_value = None

        with pytest.raises(ProductLeadNotFoundError):
            await use_case.execute(ReceiveBatchRequest(product_lead_id=9, quantity=1, unit_cost_usd=1.0))
        ledger_store.receive.assert_not_called()

    async def test_to_response(self, use_case):
        result = await use_case.execute(
            ReceiveBatchRequest(product_lead_id=5, quantity=10, unit_cost_usd=5.0)
        )
        response = use_case.to_response(result)

        assert response.message == "Received 10 units; stock is now 10"
        assert response.product.stock == 10
        assert response.batch.batch_number == "B-1"
