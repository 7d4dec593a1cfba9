"""SQLite implementation of purchase order storage."""

import aiosqlite

from src.config import get_logger
from src.core.clock import utc_now
from src.core.entities.order import (
    LINES_EDITABLE_UNTIL,
    ImportCost,
    ImportCostCategory,
    OrderItem,
    OrderStatus,
    ProductLead,
    PurchaseOrder,
)
from src.core.exceptions import (
    InvalidOrderStateError,
    OrderAlreadyProcessedError,
    OrderNotFoundError,
)
from src.core.interfaces.order_store import IOrderStore
from src.infrastructure.storage.sqlite.connection import (
    get_connection,
    get_immediate_transaction,
    get_transaction,
)
from src.infrastructure.storage.sqlite.helpers import (
    db_operation,
    parse_date,
    parse_datetime,
    to_iso,
)

logger = get_logger(__name__)

_ITEM_SELECT = """
    SELECT oi.*, pl.name AS product_name
    FROM order_items oi
    LEFT JOIN product_leads pl ON pl.id = oi.product_lead_id
"""


class SQLiteOrderStore(IOrderStore):
    """SQLite implementation of product lead and purchase order storage."""

    @db_operation("create_lead")
    async def create_lead(self, lead: ProductLead) -> ProductLead:
        async with get_transaction() as conn:
            cursor = await conn.execute(
                "INSERT INTO product_leads (name, category, created_at) VALUES (?, ?, ?)",
                (lead.name, lead.category, to_iso(lead.created_at)),
            )
            lead.id = cursor.lastrowid
        logger.info("product_lead_created", lead_id=lead.id, name=lead.name)
        return lead

    @db_operation("get_lead")
    async def get_lead(self, lead_id: int) -> ProductLead | None:
        async with get_connection() as conn:
            cursor = await conn.execute("SELECT * FROM product_leads WHERE id = ?", (lead_id,))
            row = await cursor.fetchone()
        if row is None:
            return None
        return ProductLead(
            id=row["id"],
            name=row["name"],
            category=row["category"],
            created_at=parse_datetime(row["created_at"]) or utc_now(),
        )

    @db_operation("create_order")
    async def create_order(self, order: PurchaseOrder) -> PurchaseOrder:
        """Create an order together with its items and import costs."""
        now = utc_now()
        order.created_at = now
        order.updated_at = now
        async with get_transaction() as conn:
            cursor = await conn.execute(
                """
                INSERT INTO purchase_orders (
                    order_number, status, stocked, stocked_at,
                    order_date, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    order.order_number,
                    order.status.value,
                    int(order.stocked),
                    to_iso(order.stocked_at),
                    to_iso(order.order_date),
                    to_iso(order.created_at),
                    to_iso(order.updated_at),
                ),
            )
            order.id = cursor.lastrowid

            for item in order.items:
                await self._insert_item(conn, order.id, item)
            for cost in order.import_costs:
                await self._insert_cost(conn, order.id, cost)

        logger.info(
            "purchase_order_created",
            order_id=order.id,
            order_number=order.order_number,
            items=len(order.items),
            import_costs=len(order.import_costs),
        )
        return order

    @db_operation("get_order")
    async def get_order(self, order_id: int) -> PurchaseOrder | None:
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM purchase_orders WHERE id = ?", (order_id,)
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            order = self._row_to_order(row)

            cursor = await conn.execute(
                f"{_ITEM_SELECT} WHERE oi.order_id = ? ORDER BY oi.id", (order_id,)
            )
            order.items = [self._row_to_item(r) for r in await cursor.fetchall()]

            cursor = await conn.execute(
                "SELECT * FROM import_costs WHERE order_id = ? ORDER BY id", (order_id,)
            )
            order.import_costs = [self._row_to_cost(r) for r in await cursor.fetchall()]

        return order

    @db_operation("list_orders")
    async def list_orders(
        self,
        status: OrderStatus | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[PurchaseOrder]:
        query = "SELECT * FROM purchase_orders"
        params: list = []
        if status is not None:
            query += " WHERE status = ?"
            params.append(status.value)
        query += " ORDER BY created_at DESC, id DESC LIMIT ? OFFSET ?"
        params.extend([limit, offset])

        async with get_connection() as conn:
            cursor = await conn.execute(query, params)
            rows = await cursor.fetchall()
        return [self._row_to_order(row) for row in rows]

    @db_operation("add_order_item")
    async def add_item(self, order_id: int, item: OrderItem) -> OrderItem:
        async with get_immediate_transaction() as conn:
            await self._require_editable(conn, order_id)
            await self._insert_item(conn, order_id, item)
            await self._touch(conn, order_id)
        logger.info("order_item_added", order_id=order_id, item_id=item.id)
        return item

    @db_operation("add_import_cost")
    async def add_import_cost(self, order_id: int, cost: ImportCost) -> ImportCost:
        async with get_immediate_transaction() as conn:
            await self._require_editable(conn, order_id)
            await self._insert_cost(conn, order_id, cost)
            await self._touch(conn, order_id)
        logger.info(
            "import_cost_added",
            order_id=order_id,
            category=cost.category.value,
            amount_usd=cost.amount_usd,
        )
        return cost

    @db_operation("update_order_status")
    async def update_status(
        self,
        order_id: int,
        new_status: OrderStatus,
        expected_status: OrderStatus,
    ) -> bool:
        async with get_transaction() as conn:
            cursor = await conn.execute(
                """
                UPDATE purchase_orders SET status = ?, updated_at = ?
                WHERE id = ? AND status = ? AND stocked = 0
                """,
                (new_status.value, to_iso(utc_now()), order_id, expected_status.value),
            )
            updated = cursor.rowcount == 1
        if updated:
            logger.info(
                "order_status_updated",
                order_id=order_id,
                from_status=expected_status.value,
                to_status=new_status.value,
            )
        return updated

    @staticmethod
    async def _insert_item(conn: aiosqlite.Connection, order_id: int, item: OrderItem) -> None:
        cursor = await conn.execute(
            """
            INSERT INTO order_items (
                order_id, product_lead_id, quantity,
                unit_price_usd, discount_percent, created_at
            ) VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                order_id,
                item.product_lead_id,
                item.quantity,
                item.unit_price_usd,
                item.discount_percent,
                to_iso(item.created_at),
            ),
        )
        item.id = cursor.lastrowid
        item.order_id = order_id

    @staticmethod
    async def _insert_cost(conn: aiosqlite.Connection, order_id: int, cost: ImportCost) -> None:
        cursor = await conn.execute(
            """
            INSERT INTO import_costs (order_id, category, amount_usd, description, created_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (
                order_id,
                cost.category.value,
                cost.amount_usd,
                cost.description,
                to_iso(cost.created_at),
            ),
        )
        cost.id = cursor.lastrowid
        cost.order_id = order_id

    @staticmethod
    async def _require_editable(conn: aiosqlite.Connection, order_id: int) -> None:
        """Lines and charges are frozen from the received status on."""
        cursor = await conn.execute(
            "SELECT status, stocked FROM purchase_orders WHERE id = ?", (order_id,)
        )
        row = await cursor.fetchone()
        if row is None:
            raise OrderNotFoundError(order_id)
        if row["stocked"]:
            raise OrderAlreadyProcessedError(order_id)
        if not OrderStatus(row["status"]).accepts_line_changes:
            raise InvalidOrderStateError(order_id, row["status"], LINES_EDITABLE_UNTIL)

    @staticmethod
    async def _touch(conn: aiosqlite.Connection, order_id: int) -> None:
        await conn.execute(
            "UPDATE purchase_orders SET updated_at = ? WHERE id = ?",
            (to_iso(utc_now()), order_id),
        )

    @staticmethod
    def _row_to_order(row: aiosqlite.Row) -> PurchaseOrder:
        """Convert a database row to a PurchaseOrder (without lines)."""
        return PurchaseOrder(
            id=row["id"],
            order_number=row["order_number"],
            status=OrderStatus(row["status"]),
            stocked=bool(row["stocked"]),
            stocked_at=parse_datetime(row["stocked_at"]),
            order_date=parse_date(row["order_date"]),
            created_at=parse_datetime(row["created_at"]) or utc_now(),
            updated_at=parse_datetime(row["updated_at"]) or utc_now(),
        )

    @staticmethod
    def _row_to_item(row: aiosqlite.Row) -> OrderItem:
        return OrderItem(
            id=row["id"],
            order_id=row["order_id"],
            product_lead_id=row["product_lead_id"],
            product_name=row["product_name"],
            quantity=row["quantity"],
            unit_price_usd=float(row["unit_price_usd"]),
            discount_percent=float(row["discount_percent"] or 0),
            created_at=parse_datetime(row["created_at"]) or utc_now(),
        )

    @staticmethod
    def _row_to_cost(row: aiosqlite.Row) -> ImportCost:
        try:
            category = ImportCostCategory(row["category"])
        except ValueError:
            category = ImportCostCategory.OTHER
        return ImportCost(
            id=row["id"],
            order_id=row["order_id"],
            category=category,
            amount_usd=float(row["amount_usd"]),
            description=row["description"],
            created_at=parse_datetime(row["created_at"]) or utc_now(),
        )
