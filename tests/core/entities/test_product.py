"""Tests for product aggregate arithmetic."""

import pytest

from src.core.entities.product import BatchReceipt, Product


class TestApplyReceipt:
    def test_first_receipt_sets_cost(self):
        product = Product(product_lead_id=1, name="Widget")
        product.apply_receipt(10, 5.0)
        assert product.stock == 10
        assert product.average_unit_cost_usd == pytest.approx(5.0)

    def test_weighted_average(self):
        product = Product(product_lead_id=1, name="Widget")
        product.apply_receipt(10, 5.0)
        product.apply_receipt(10, 7.0)
        assert product.stock == 20
        assert product.average_unit_cost_usd == pytest.approx(6.0)

    def test_uneven_quantities(self):
        product = Product(product_lead_id=1, name="Widget")
        product.apply_receipt(30, 2.0)
        product.apply_receipt(10, 6.0)
        assert product.average_unit_cost_usd == pytest.approx(3.0)
        assert product.inventory_value_usd == pytest.approx(120.0)


class TestReprice:
    def test_derives_ars_cost_and_price(self):
        product = Product(
            product_lead_id=1,
            name="Widget",
            stock=20,
            average_unit_cost_usd=6.0,
            markup_percentage=30.0,
        )
        product.reprice(1000.0)
        assert product.final_unit_cost_ars == pytest.approx(6000.0)
        assert product.final_price_ars == pytest.approx(7800.0)

    def test_rounds_to_cents(self):
        product = Product(product_lead_id=1, name="Widget", average_unit_cost_usd=1 / 3)
        product.reprice(1.0)
        assert product.final_unit_cost_ars == 0.33


class TestBatchReceipt:
    def test_total_cost(self):
        receipt = BatchReceipt(product_lead_id=1, product_name="W", quantity=3, unit_cost_usd=1.115)
        assert receipt.total_cost_usd == pytest.approx(3.35, abs=0.01)
