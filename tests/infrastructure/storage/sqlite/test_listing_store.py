"""Tests for SQLiteListingStore."""

from datetime import timedelta

import pytest

from src.core.clock import utc_now
from src.core.entities import (
    SYNCABLE_STATUSES,
    BatchReceipt,
    ChannelListing,
    StockMapping,
    SyncError,
)
from src.core.exceptions import ValidationError


@pytest.fixture
async def products(ledger_store, leads, pricing):
    stocked = []
    for lead, quantity in zip(leads, (10, 3)):
        product, _ = await ledger_store.receive(
            BatchReceipt(
                product_lead_id=lead.id, product_name=lead.name, quantity=quantity, unit_cost_usd=2.0
            ),
            pricing,
        )
        stocked.append(product)
    return stocked


@pytest.fixture
async def listing(listing_store, products):
    return await listing_store.create_listing(
        ChannelListing(
            channel_item_id="MLA100",
            title="Widget kit",
            attributes={"BRAND": "Acme"},
            mappings=[StockMapping(product_id=products[0].id, quantity_per_sale=2)],
        )
    )


class TestListings:
    async def test_create_and_get_with_joined_stock(self, listing_store, listing):
        loaded = await listing_store.get_listing(listing.id)

        assert loaded.channel_item_id == "MLA100"
        assert loaded.attributes == {"BRAND": "Acme"}
        assert len(loaded.mappings) == 1
        assert loaded.mappings[0].product_name == "Widget"
        assert loaded.mappings[0].product_stock == 10

    async def test_get_by_channel_item(self, listing_store, listing):
        assert (await listing_store.get_by_channel_item("MLA100")).id == listing.id
        assert await listing_store.get_by_channel_item("MLA404") is None

    async def test_duplicate_channel_item(self, listing_store, listing):
        with pytest.raises(ValidationError):
            await listing_store.create_listing(ChannelListing(channel_item_id="MLA100", title="Dup"))

    async def test_update_snapshot(self, listing_store, listing):
        listing.title = "Widget kit v2"
        listing.status = "paused"
        await listing_store.update_listing(listing)

        loaded = await listing_store.get_listing(listing.id)
        assert loaded.title == "Widget kit v2"
        assert loaded.status == "paused"

    async def test_replace_mappings(self, listing_store, listing, products):
        await listing_store.replace_mappings(
            listing.id,
            [
                StockMapping(product_id=products[0].id),
                StockMapping(product_id=products[1].id, quantity_per_sale=1, enabled=False),
            ],
        )

        loaded = await listing_store.get_listing(listing.id)
        assert [(m.product_id, m.quantity_per_sale, m.enabled) for m in loaded.mappings] == [
            (products[0].id, 1, True),
            (products[1].id, 1, False),
        ]

        await listing_store.replace_mappings(listing.id, [])
        assert (await listing_store.get_listing(listing.id)).mappings == []

    async def test_syncable_ids(self, listing_store, listing):
        await listing_store.create_listing(
            ChannelListing(channel_item_id="MLA200", title="Closed", status="closed")
        )
        await listing_store.create_listing(
            ChannelListing(channel_item_id="MLA300", title="Off", sync_enabled=False)
        )
        paused = await listing_store.create_listing(
            ChannelListing(channel_item_id="MLA400", title="Paused", status="paused")
        )

        ids = await listing_store.list_syncable_ids(SYNCABLE_STATUSES)

        assert ids == [listing.id, paused.id]

    async def test_list_newest_first(self, listing_store, listing):
        other = await listing_store.create_listing(ChannelListing(channel_item_id="MLA200", title="B"))

        assert [l.id for l in await listing_store.list_listings()] == [other.id, listing.id]


class TestSyncClaim:
    async def test_claim_is_exclusive(self, listing_store, listing):
        now = utc_now()
        stale = now - timedelta(seconds=120)

        assert await listing_store.claim_sync(listing.id, now=now, stale_before=stale)
        assert not await listing_store.claim_sync(listing.id, now=now, stale_before=stale)

    async def test_stale_claim_can_be_taken(self, listing_store, listing):
        old = utc_now() - timedelta(minutes=10)
        await listing_store.claim_sync(listing.id, now=old, stale_before=old - timedelta(seconds=120))

        now = utc_now()
        assert await listing_store.claim_sync(
            listing.id, now=now, stale_before=now - timedelta(seconds=120)
        )

    async def test_mark_synced_clears_error_and_claim(self, listing_store, listing):
        now = utc_now()
        await listing_store.mark_sync_error(listing.id, SyncError.error("HTTP 500"), synced_at=now)
        await listing_store.claim_sync(listing.id, now=now, stale_before=now - timedelta(seconds=1))

        await listing_store.mark_synced(listing.id, now)

        loaded = await listing_store.get_listing(listing.id)
        assert loaded.sync_error is None
        assert loaded.last_sync_at == now
        assert await listing_store.claim_sync(listing.id, now=now, stale_before=now)

    async def test_warning_keeps_last_sync(self, listing_store, listing):
        await listing_store.mark_sync_error(listing.id, SyncError.warning("paused"))

        loaded = await listing_store.get_listing(listing.id)
        assert loaded.sync_error == "WARNING: paused"
        assert loaded.last_sync_at is None

    async def test_require_error(self, listing_store, listing):
        now = utc_now()
        stale = now - timedelta(seconds=120)

        assert not await listing_store.claim_sync(
            listing.id, now=now, stale_before=stale, require_error=True
        )

        await listing_store.mark_sync_error(listing.id, SyncError.error("HTTP 500"))
        assert await listing_store.claim_sync(
            listing.id, now=now, stale_before=stale, require_error=True
        )

    async def test_release_claim(self, listing_store, listing):
        now = utc_now()
        stale = now - timedelta(seconds=120)
        await listing_store.claim_sync(listing.id, now=now, stale_before=stale)

        await listing_store.release_claim(listing.id)

        assert await listing_store.claim_sync(listing.id, now=now, stale_before=stale)
