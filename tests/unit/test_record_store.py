"""Tests for the record store against a real SQLite database."""

import pytest

from warranty_renewal.errors import StoreError
from warranty_renewal.models import OFFER_INDEX, USER_INDEX

FULL_PATCH = {
    "ttl": 1900000000,
    "expired": None,
    "warranty_expiry": 1900000000000,
    "sk": "2030-03-17T17:46:40.000+00:00",
}


class TestWriteAndGet:
    @pytest.mark.asyncio
    async def test_write_returns_item_and_persists(self, sqlite_store, table, item_factory):
        item = item_factory("o-1")

        returned = await sqlite_store.write(table, item)
        stored = await sqlite_store.get(table, {"order_id": "o-1"})

        assert returned is item
        assert stored == item

    @pytest.mark.asyncio
    async def test_get_missing_returns_empty(self, sqlite_store, table):
        assert await sqlite_store.get(table, {"order_id": "nope"}) == {}

    @pytest.mark.asyncio
    async def test_write_overwrites_whole_item(self, sqlite_store, table, item_factory):
        await sqlite_store.write(table, item_factory("o-1", expired=True, renews_order_id="o-0"))

        replacement = item_factory("o-1", car_name="X5")
        del replacement["expired"]
        del replacement["renews_order_id"]
        await sqlite_store.write(table, replacement)

        stored = await sqlite_store.get(table, {"order_id": "o-1"})
        assert stored["car_name"] == "X5"
        assert stored["expired"] is None
        assert stored["renews_order_id"] is None

    @pytest.mark.asyncio
    async def test_unknown_table(self, sqlite_store, item_factory):
        with pytest.raises(StoreError, match="Unknown table"):
            await sqlite_store.write("no_such_table", item_factory("o-1"))

    @pytest.mark.asyncio
    async def test_constraint_violation_is_store_error(self, sqlite_store, table, item_factory):
        with pytest.raises(StoreError):
            await sqlite_store.write(table, item_factory("o-1", company_name=None))


class TestUpdate:
    @pytest.mark.asyncio
    async def test_sets_all_four_fields(self, sqlite_store, table, item_factory):
        await sqlite_store.write(table, item_factory("o-1", expired=True))

        returned = await sqlite_store.update(table, {"order_id": "o-1"}, FULL_PATCH)
        stored = await sqlite_store.get(table, {"order_id": "o-1"})

        assert returned == FULL_PATCH
        assert stored["ttl"] == FULL_PATCH["ttl"]
        assert stored["warranty_expiry"] == FULL_PATCH["warranty_expiry"]
        assert stored["sk"] == FULL_PATCH["sk"]
        assert stored["expired"] is None
        assert stored["company_name"] == "Acme"

    @pytest.mark.asyncio
    async def test_partial_patch_rejected(self, sqlite_store, table):
        with pytest.raises(ValueError):
            await sqlite_store.update(table, {"order_id": "o-1"}, {"ttl": 1})

    @pytest.mark.asyncio
    async def test_missing_key_is_noop(self, sqlite_store, table):
        returned = await sqlite_store.update(table, {"order_id": "ghost"}, FULL_PATCH)

        assert returned == {}
        assert await sqlite_store.get(table, {"order_id": "ghost"}) == {}


class TestQuery:
    @pytest.mark.asyncio
    async def test_partition_sorted_by_sort_key(self, sqlite_store, table, item_factory):
        await sqlite_store.write(table, item_factory("o-late", sk="2028-12-01T00:00:00.000+00:00"))
        await sqlite_store.write(table, item_factory("o-early", sk="2026-11-17T12:00:00.000+00:00"))
        await sqlite_store.write(table, item_factory("o-other", pk="c@d.com"))

        ascending = await sqlite_store.query(table, USER_INDEX, pk_value="a@b.com")
        descending = await sqlite_store.query(table, USER_INDEX, pk_value="a@b.com", ascending=False)

        assert [row["order_id"] for row in ascending] == ["o-early", "o-late"]
        assert [row["order_id"] for row in descending] == ["o-late", "o-early"]

    @pytest.mark.asyncio
    async def test_exact_sort_key(self, sqlite_store, table, item_factory):
        await sqlite_store.write(table, item_factory("o-1", sk="2027-01-01T00:00:00.000+00:00"))
        await sqlite_store.write(table, item_factory("o-2", sk="2028-01-01T00:00:00.000+00:00"))

        rows = await sqlite_store.query(
            table, USER_INDEX, pk_value="a@b.com", sk_value="2028-01-01T00:00:00.000+00:00"
        )
        assert [row["order_id"] for row in rows] == ["o-2"]

    @pytest.mark.asyncio
    async def test_alternate_partition_key(self, sqlite_store, table, item_factory):
        await sqlite_store.write(table, item_factory("offer-1", expired=True, renews_order_id="o-1"))
        await sqlite_store.write(table, item_factory("offer-2", expired=True, renews_order_id="o-2"))

        rows = await sqlite_store.query(
            table, OFFER_INDEX, pk_value="o-1", pk_key="renews_order_id"
        )
        assert [row["order_id"] for row in rows] == ["offer-1"]

    @pytest.mark.asyncio
    async def test_empty_partition(self, sqlite_store, table):
        assert await sqlite_store.query(table, USER_INDEX, pk_value="nobody") == []

    @pytest.mark.asyncio
    async def test_unknown_index(self, sqlite_store, table):
        with pytest.raises(StoreError, match="Unknown index"):
            await sqlite_store.query(table, "by_colour", pk_value="a@b.com")


class TestRemoveExpired:
    @pytest.mark.asyncio
    async def test_removes_only_expired_rows(self, sqlite_store, table, item_factory):
        await sqlite_store.write(table, item_factory("o-old", ttl=100))
        await sqlite_store.write(table, item_factory("o-due", ttl=200))
        await sqlite_store.write(table, item_factory("o-live", ttl=300))

        removed = await sqlite_store.remove_expired(table, now_epoch_seconds=200, limit=10)

        assert [row["order_id"] for row in removed] == ["o-old", "o-due"]
        assert removed[0]["company_name"] == "Acme"
        assert await sqlite_store.get(table, {"order_id": "o-old"}) == {}
        assert await sqlite_store.get(table, {"order_id": "o-live"}) != {}

    @pytest.mark.asyncio
    async def test_respects_limit(self, sqlite_store, table, item_factory):
        for i in range(3):
            await sqlite_store.write(table, item_factory(f"o-{i}", ttl=100 + i))

        removed = await sqlite_store.remove_expired(table, now_epoch_seconds=1000, limit=2)

        assert [row["order_id"] for row in removed] == ["o-0", "o-1"]
        assert await sqlite_store.get(table, {"order_id": "o-2"}) != {}
