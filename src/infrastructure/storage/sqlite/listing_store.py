"""SQLite implementation of channel listing storage."""

import json
from datetime import datetime

import aiosqlite

from src.config import get_logger
from src.core.clock import utc_now
from src.core.entities.channel import ChannelListing, StockMapping, SyncError
from src.core.interfaces.listing_store import IListingStore
from src.infrastructure.storage.sqlite.connection import get_connection, get_transaction
from src.infrastructure.storage.sqlite.helpers import db_operation, parse_datetime, to_iso

logger = get_logger(__name__)

_MAPPING_SELECT = """
    SELECT sm.*, p.name AS product_name, p.stock AS product_stock
    FROM stock_mappings sm
    JOIN products p ON p.id = sm.product_id
"""


class SQLiteListingStore(IListingStore):
    """SQLite implementation of listings, stock mappings and sync status."""

    @db_operation("create_listing")
    async def create_listing(self, listing: ChannelListing) -> ChannelListing:
        now = utc_now()
        listing.created_at = now
        listing.updated_at = now
        async with get_transaction() as conn:
            cursor = await conn.execute(
                """
                INSERT INTO channel_listings (
                    channel_item_id, title, category_id, price, currency, status,
                    permalink, thumbnail, sync_enabled, last_sync_at, sync_error,
                    attributes_json, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    listing.channel_item_id,
                    listing.title,
                    listing.category_id,
                    listing.price,
                    listing.currency,
                    listing.status,
                    listing.permalink,
                    listing.thumbnail,
                    int(listing.sync_enabled),
                    to_iso(listing.last_sync_at),
                    listing.sync_error,
                    json.dumps(listing.attributes),
                    to_iso(now),
                    to_iso(now),
                ),
            )
            listing.id = cursor.lastrowid
            await self._insert_mappings(conn, listing.id, listing.mappings)

        logger.info(
            "listing_created",
            listing_id=listing.id,
            channel_item_id=listing.channel_item_id,
        )
        return listing

    @db_operation("update_listing")
    async def update_listing(self, listing: ChannelListing) -> ChannelListing:
        listing.updated_at = utc_now()
        async with get_transaction() as conn:
            await conn.execute(
                """
                UPDATE channel_listings SET
                    title = ?, category_id = ?, price = ?, currency = ?,
                    status = ?, permalink = ?, thumbnail = ?, sync_enabled = ?,
                    last_sync_at = ?, attributes_json = ?, updated_at = ?
                WHERE id = ?
                """,
                (
                    listing.title,
                    listing.category_id,
                    listing.price,
                    listing.currency,
                    listing.status,
                    listing.permalink,
                    listing.thumbnail,
                    int(listing.sync_enabled),
                    to_iso(listing.last_sync_at),
                    json.dumps(listing.attributes),
                    to_iso(listing.updated_at),
                    listing.id,
                ),
            )
        logger.info("listing_updated", listing_id=listing.id)
        return listing

    @db_operation("get_listing")
    async def get_listing(self, listing_id: int) -> ChannelListing | None:
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM channel_listings WHERE id = ?", (listing_id,)
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            listing = self._row_to_listing(row)
            listing.mappings = await self._load_mappings(conn, listing_id)
        return listing

    @db_operation("get_listing_by_channel_item")
    async def get_by_channel_item(self, channel_item_id: str) -> ChannelListing | None:
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM channel_listings WHERE channel_item_id = ?",
                (channel_item_id,),
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            listing = self._row_to_listing(row)
            listing.mappings = await self._load_mappings(conn, listing.id)
        return listing

    @db_operation("list_listings")
    async def list_listings(self, limit: int = 100, offset: int = 0) -> list[ChannelListing]:
        async with get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT * FROM channel_listings
                ORDER BY created_at DESC, id DESC
                LIMIT ? OFFSET ?
                """,
                (limit, offset),
            )
            listings = [self._row_to_listing(row) for row in await cursor.fetchall()]
            for listing in listings:
                listing.mappings = await self._load_mappings(conn, listing.id)
        return listings

    @db_operation("list_syncable_listings")
    async def list_syncable_ids(self, statuses: tuple[str, ...]) -> list[int]:
        if not statuses:
            return []
        placeholders = ", ".join("?" for _ in statuses)
        async with get_connection() as conn:
            cursor = await conn.execute(
                f"""
                SELECT id FROM channel_listings
                WHERE sync_enabled = 1 AND status IN ({placeholders})
                ORDER BY id
                """,
                statuses,
            )
            rows = await cursor.fetchall()
        return [row["id"] for row in rows]

    @db_operation("replace_mappings")
    async def replace_mappings(
        self, listing_id: int, mappings: list[StockMapping]
    ) -> list[StockMapping]:
        async with get_transaction() as conn:
            await conn.execute("DELETE FROM stock_mappings WHERE listing_id = ?", (listing_id,))
            await self._insert_mappings(conn, listing_id, mappings)
            await conn.execute(
                "UPDATE channel_listings SET updated_at = ? WHERE id = ?",
                (to_iso(utc_now()), listing_id),
            )
        logger.info("stock_mappings_replaced", listing_id=listing_id, mappings=len(mappings))
        return mappings

    @db_operation("claim_sync")
    async def claim_sync(
        self,
        listing_id: int,
        now: datetime,
        stale_before: datetime,
        require_error: bool = False,
    ) -> bool:
        query = """
            UPDATE channel_listings SET sync_started_at = ?
            WHERE id = ?
              AND (sync_started_at IS NULL OR sync_started_at < ?)
        """
        if require_error:
            query += " AND sync_error IS NOT NULL"

        async with get_transaction() as conn:
            cursor = await conn.execute(
                query, (to_iso(now), listing_id, to_iso(stale_before))
            )
            return cursor.rowcount == 1

    @db_operation("mark_synced")
    async def mark_synced(self, listing_id: int, synced_at: datetime) -> None:
        async with get_transaction() as conn:
            await conn.execute(
                """
                UPDATE channel_listings SET
                    last_sync_at = ?, sync_error = NULL, sync_started_at = NULL
                WHERE id = ?
                """,
                (to_iso(synced_at), listing_id),
            )

    @db_operation("mark_sync_error")
    async def mark_sync_error(
        self,
        listing_id: int,
        error: SyncError,
        synced_at: datetime | None = None,
    ) -> None:
        async with get_transaction() as conn:
            if synced_at is None:
                await conn.execute(
                    """
                    UPDATE channel_listings SET sync_error = ?, sync_started_at = NULL
                    WHERE id = ?
                    """,
                    (error.serialize(), listing_id),
                )
            else:
                await conn.execute(
                    """
                    UPDATE channel_listings SET
                        sync_error = ?, last_sync_at = ?, sync_started_at = NULL
                    WHERE id = ?
                    """,
                    (error.serialize(), to_iso(synced_at), listing_id),
                )

    @db_operation("release_sync_claim")
    async def release_claim(self, listing_id: int) -> None:
        async with get_transaction() as conn:
            await conn.execute(
                "UPDATE channel_listings SET sync_started_at = NULL WHERE id = ?",
                (listing_id,),
            )

    @staticmethod
    async def _insert_mappings(
        conn: aiosqlite.Connection, listing_id: int, mappings: list[StockMapping]
    ) -> None:
        for mapping in mappings:
            cursor = await conn.execute(
                """
                INSERT INTO stock_mappings (
                    listing_id, product_id, quantity_per_sale, priority, enabled
                ) VALUES (?, ?, ?, ?, ?)
                """,
                (
                    listing_id,
                    mapping.product_id,
                    mapping.quantity_per_sale,
                    mapping.priority,
                    int(mapping.enabled),
                ),
            )
            mapping.id = cursor.lastrowid
            mapping.listing_id = listing_id

    async def _load_mappings(
        self, conn: aiosqlite.Connection, listing_id: int
    ) -> list[StockMapping]:
        cursor = await conn.execute(
            f"{_MAPPING_SELECT} WHERE sm.listing_id = ? ORDER BY sm.priority, sm.id",
            (listing_id,),
        )
        return [self._row_to_mapping(row) for row in await cursor.fetchall()]

    @staticmethod
    def _row_to_mapping(row: aiosqlite.Row) -> StockMapping:
        return StockMapping(
            id=row["id"],
            listing_id=row["listing_id"],
            product_id=row["product_id"],
            quantity_per_sale=row["quantity_per_sale"],
            priority=row["priority"],
            enabled=bool(row["enabled"]),
            product_name=row["product_name"],
            product_stock=row["product_stock"],
        )

    @staticmethod
    def _row_to_listing(row: aiosqlite.Row) -> ChannelListing:
        """Convert a database row to a ChannelListing (without mappings)."""
        try:
            attributes = json.loads(row["attributes_json"] or "{}")
        except json.JSONDecodeError:
            attributes = {}

        return ChannelListing(
            id=row["id"],
            channel_item_id=row["channel_item_id"],
            title=row["title"],
            category_id=row["category_id"],
            price=float(row["price"] or 0),
            currency=row["currency"],
            status=row["status"],
            permalink=row["permalink"],
            thumbnail=row["thumbnail"],
            sync_enabled=bool(row["sync_enabled"]),
            last_sync_at=parse_datetime(row["last_sync_at"]),
            sync_error=row["sync_error"],
            sync_started_at=parse_datetime(row["sync_started_at"]),
            attributes=attributes,
            created_at=parse_datetime(row["created_at"]) or utc_now(),
            updated_at=parse_datetime(row["updated_at"]) or utc_now(),
        )
