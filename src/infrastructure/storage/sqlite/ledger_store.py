"""SQLite implementation of the product batch ledger."""

from datetime import datetime

import aiosqlite

from src.config import get_logger
from src.core.clock import utc_now
from src.core.entities.order import OrderStatus
from src.core.entities.product import (
    BatchReceipt,
    PricingPolicy,
    Product,
    ProductBatch,
)
from src.core.exceptions import (
    InvalidOrderStateError,
    OrderAlreadyProcessedError,
    OrderNotFoundError,
)
from src.core.interfaces.ledger_store import ILedgerStore
from src.infrastructure.storage.sqlite.connection import (
    get_connection,
    get_immediate_transaction,
)
from src.infrastructure.storage.sqlite.helpers import db_operation, parse_datetime, to_iso

logger = get_logger(__name__)


class SQLiteLedgerStore(ILedgerStore):
    """
    SQLite implementation of products and receipt batches.

    Writes run in BEGIN IMMEDIATE transactions: the product row is read
    and rewritten under the database write lock, so concurrent receipts
    never fold into the same stale average.
    """

    @db_operation("get_product")
    async def get_product(self, product_id: int) -> Product | None:
        async with get_connection() as conn:
            cursor = await conn.execute("SELECT * FROM products WHERE id = ?", (product_id,))
            row = await cursor.fetchone()
        return self._row_to_product(row) if row else None

    @db_operation("get_product_by_lead")
    async def get_product_by_lead(self, product_lead_id: int) -> Product | None:
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM products WHERE product_lead_id = ?", (product_lead_id,)
            )
            row = await cursor.fetchone()
        return self._row_to_product(row) if row else None

    @db_operation("list_products")
    async def list_products(self, limit: int = 100, offset: int = 0) -> list[Product]:
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM products ORDER BY name LIMIT ? OFFSET ?",
                (limit, offset),
            )
            rows = await cursor.fetchall()
        return [self._row_to_product(row) for row in rows]

    @db_operation("list_batches")
    async def list_batches(
        self, product_id: int, limit: int = 100, offset: int = 0
    ) -> list[ProductBatch]:
        async with get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT * FROM product_batches
                WHERE product_id = ?
                ORDER BY created_at, id
                LIMIT ? OFFSET ?
                """,
                (product_id, limit, offset),
            )
            rows = await cursor.fetchall()
        return [self._row_to_batch(row) for row in rows]

    @db_operation("receive_batch")
    async def receive(
        self, receipt: BatchReceipt, pricing: PricingPolicy
    ) -> tuple[Product, ProductBatch]:
        async with get_immediate_transaction() as conn:
            product, batch = await self._apply_receipt(conn, receipt, pricing, utc_now())

        logger.info(
            "batch_received",
            product_id=product.id,
            batch_id=batch.id,
            quantity=batch.quantity,
            unit_cost_usd=batch.unit_cost_usd,
            stock=product.stock,
            average_unit_cost_usd=product.average_unit_cost_usd,
        )
        return product, batch

    @db_operation("stock_order")
    async def stock_order(
        self,
        order_id: int,
        receipts: list[BatchReceipt],
        pricing: PricingPolicy,
    ) -> list[ProductBatch]:
        now = utc_now()
        batches: list[ProductBatch] = []

        async with get_immediate_transaction() as conn:
            # Guard re-checked under the write lock
            cursor = await conn.execute(
                "SELECT status, stocked FROM purchase_orders WHERE id = ?", (order_id,)
            )
            row = await cursor.fetchone()
            if row is None:
                raise OrderNotFoundError(order_id)
            if row["stocked"]:
                raise OrderAlreadyProcessedError(order_id)
            if row["status"] != OrderStatus.RECEIVED.value:
                raise InvalidOrderStateError(
                    order_id, row["status"], OrderStatus.RECEIVED.value
                )

            for receipt in receipts:
                _, batch = await self._apply_receipt(conn, receipt, pricing, now)
                batches.append(batch)

            # Latch is the last write of the transaction
            cursor = await conn.execute(
                """
                UPDATE purchase_orders SET stocked = 1, stocked_at = ?, updated_at = ?
                WHERE id = ? AND stocked = 0 AND status = ?
                """,
                (to_iso(now), to_iso(now), order_id, OrderStatus.RECEIVED.value),
            )
            if cursor.rowcount != 1:
                raise OrderAlreadyProcessedError(order_id)

        logger.info("order_stocked", order_id=order_id, batches=len(batches))
        return batches

    async def _apply_receipt(
        self,
        conn: aiosqlite.Connection,
        receipt: BatchReceipt,
        pricing: PricingPolicy,
        now: datetime,
    ) -> tuple[Product, ProductBatch]:
        """Insert one batch and rewrite its product; caller owns the transaction."""
        cursor = await conn.execute(
            "SELECT * FROM products WHERE product_lead_id = ?", (receipt.product_lead_id,)
        )
        row = await cursor.fetchone()

        if row is None:
            product = Product(
                product_lead_id=receipt.product_lead_id,
                name=receipt.product_name,
                markup_percentage=pricing.default_markup_percentage,
                created_at=now,
                updated_at=now,
            )
            cursor = await conn.execute(
                """
                INSERT INTO products (
                    product_lead_id, name, stock, average_unit_cost_usd,
                    markup_percentage, final_unit_cost_ars, final_price_ars,
                    created_at, updated_at
                ) VALUES (?, ?, 0, 0, ?, 0, 0, ?, ?)
                """,
                (
                    product.product_lead_id,
                    product.name,
                    product.markup_percentage,
                    to_iso(now),
                    to_iso(now),
                ),
            )
            product.id = cursor.lastrowid
            logger.info(
                "product_created",
                product_id=product.id,
                product_lead_id=product.product_lead_id,
            )
        else:
            product = self._row_to_product(row)

        product.apply_receipt(receipt.quantity, receipt.unit_cost_usd)
        product.reprice(pricing.usd_to_ars_rate)

        batch = ProductBatch(
            product_id=product.id,
            order_id=receipt.order_id,
            order_item_id=receipt.order_item_id,
            batch_number=receipt.batch_number or f"RCV-{now:%Y%m%d%H%M%S}",
            quantity=receipt.quantity,
            unit_cost_usd=receipt.unit_cost_usd,
            total_cost_usd=receipt.total_cost_usd,
            notes=receipt.notes,
            created_at=now,
        )
        cursor = await conn.execute(
            """
            INSERT INTO product_batches (
                product_id, order_id, order_item_id, batch_number, quantity,
                unit_cost_usd, total_cost_usd, notes, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                batch.product_id,
                batch.order_id,
                batch.order_item_id,
                batch.batch_number,
                batch.quantity,
                batch.unit_cost_usd,
                batch.total_cost_usd,
                batch.notes,
                to_iso(batch.created_at),
            ),
        )
        batch.id = cursor.lastrowid

        await conn.execute(
            """
            UPDATE products SET
                stock = ?,
                average_unit_cost_usd = ?,
                final_unit_cost_ars = ?,
                final_price_ars = ?,
                updated_at = ?
            WHERE id = ?
            """,
            (
                product.stock,
                product.average_unit_cost_usd,
                product.final_unit_cost_ars,
                product.final_price_ars,
                to_iso(now),
                product.id,
            ),
        )
        return product, batch

    @staticmethod
    def _row_to_product(row: aiosqlite.Row) -> Product:
        """Convert a database row to a Product entity."""
        return Product(
            id=row["id"],
            product_lead_id=row["product_lead_id"],
            name=row["name"],
            stock=row["stock"],
            average_unit_cost_usd=float(row["average_unit_cost_usd"]),
            markup_percentage=float(row["markup_percentage"]),
            final_unit_cost_ars=float(row["final_unit_cost_ars"]),
            final_price_ars=float(row["final_price_ars"]),
            created_at=parse_datetime(row["created_at"]) or utc_now(),
            updated_at=parse_datetime(row["updated_at"]) or utc_now(),
        )

    @staticmethod
    def _row_to_batch(row: aiosqlite.Row) -> ProductBatch:
        """Convert a database row to a ProductBatch entity."""
        return ProductBatch(
            id=row["id"],
            product_id=row["product_id"],
            order_id=row["order_id"],
            order_item_id=row["order_item_id"],
            batch_number=row["batch_number"],
            quantity=row["quantity"],
            unit_cost_usd=float(row["unit_cost_usd"]),
            total_cost_usd=float(row["total_cost_usd"]),
            notes=row["notes"],
            created_at=parse_datetime(row["created_at"]) or utc_now(),
        )
