"""Pytest fixtures for SQLite storage tests."""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest

from src.core.entities import (
    ImportCost,
    ImportCostCategory,
    OrderItem,
    OrderStatus,
    PricingPolicy,
    ProductLead,
    PurchaseOrder,
)
from src.infrastructure.storage.sqlite.credential_store import SQLiteCredentialStore
from src.infrastructure.storage.sqlite.ledger_store import SQLiteLedgerStore
from src.infrastructure.storage.sqlite.listing_store import SQLiteListingStore
from src.infrastructure.storage.sqlite.order_store import SQLiteOrderStore


@pytest.fixture
async def db(sqlite_db: Path) -> AsyncGenerator[Path, None]:
    """Migrated database wired into the global pool."""
    yield sqlite_db


@pytest.fixture
def order_store(db) -> SQLiteOrderStore:
    return SQLiteOrderStore()


@pytest.fixture
def ledger_store(db) -> SQLiteLedgerStore:
    return SQLiteLedgerStore()


@pytest.fixture
def listing_store(db) -> SQLiteListingStore:
    return SQLiteListingStore()


@pytest.fixture
def credential_store(db) -> SQLiteCredentialStore:
    return SQLiteCredentialStore()


@pytest.fixture
def pricing() -> PricingPolicy:
    return PricingPolicy(usd_to_ars_rate=1000.0, default_markup_percentage=30.0)


@pytest.fixture
async def leads(order_store: SQLiteOrderStore) -> list[ProductLead]:
    """Two catalog product leads."""
    return [
        await order_store.create_lead(ProductLead(name="Widget", category="tools")),
        await order_store.create_lead(ProductLead(name="Gadget")),
    ]


@pytest.fixture
async def received_order(order_store: SQLiteOrderStore, leads) -> PurchaseOrder:
    """An order that has reached the received status."""
    order = await order_store.create_order(
        PurchaseOrder(
            order_number="PO-2026-001",
            status=OrderStatus.RECEIVED,
            items=[
                OrderItem(product_lead_id=leads[0].id, quantity=100, unit_price_usd=2.0),
                OrderItem(product_lead_id=leads[1].id, quantity=50, unit_price_usd=4.0),
            ],
            import_costs=[ImportCost(category=ImportCostCategory.FREIGHT, amount_usd=300)],
        )
    )
    return await order_store.get_order(order.id)
