"""Test fixtures and configuration."""

from datetime import datetime, timezone

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from warranty_renewal.config import settings
from warranty_renewal.errors import DeliveryError, StoreError
from warranty_renewal.models import OFFER_INDEX, USER_INDEX, Base
from warranty_renewal.repositories.record_store import UPDATE_FIELDS, RecordStore

FIXED_NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


class InMemoryRecordStore:
    """Dict-backed stand-in for RecordStore with the same call surface."""

    INDEXES = {USER_INDEX, OFFER_INDEX}

    def __init__(self):
        self.items: dict[str, dict] = {}
        self.writes: list[dict] = []
        self.updates: list[tuple[dict, dict]] = []
        self.fail_with: str | None = None

    def _check(self):
        if self.fail_with:
            raise StoreError(self.fail_with)

    async def write(self, table, item):
        self._check()
        self.items[item["order_id"]] = dict(item)
        self.writes.append(dict(item))
        return item

    async def update(self, table, key, patch):
        self._check()
        assert set(patch) == UPDATE_FIELDS
        self.updates.append((dict(key), dict(patch)))
        if key["order_id"] not in self.items:
            return {}
        self.items[key["order_id"]].update(patch)
        return patch

    async def get(self, table, key):
        self._check()
        return dict(self.items.get(key["order_id"], {}))

    async def query(self, table, index, pk_value, pk_key="pk", sk_value=None, sk_key="sk", ascending=True):
        self._check()
        assert index in self.INDEXES
        rows = [
            dict(item)
            for item in self.items.values()
            if item.get(pk_key) == pk_value and (not sk_value or item.get(sk_key) == sk_value)
        ]
        return sorted(rows, key=lambda row: row[sk_key], reverse=not ascending)

    async def remove_expired(self, table, now_epoch_seconds, limit, ttl_key="ttl"):
        self._check()
        expired = sorted(
            (item for item in self.items.values() if item[ttl_key] <= now_epoch_seconds),
            key=lambda item: item[ttl_key],
        )[:limit]
        for item in expired:
            del self.items[item["order_id"]]
        return expired


class RecordingEmailClient:
    """Email client that records messages instead of sending them."""

    def __init__(self):
        self.sent: list[dict] = []
        self.fail_for: set[str] = set()

    async def send_email(self, to_email, subject, body):
        if to_email in self.fail_for:
            raise DeliveryError(f"Email to {to_email} failed: mailbox unavailable")
        self.sent.append({"to": to_email, "subject": subject, "body": body})
        return f"email-{len(self.sent)}"


class RecordingSmsClient:
    """SMS client that records messages instead of sending them."""

    def __init__(self):
        self.sent: list[dict] = []
        self.fail_for: set[str] = set()

    async def send_sms(self, to_phone, text):
        if to_phone in self.fail_for:
            raise DeliveryError(f"SMS to {to_phone} failed: unreachable number")
        self.sent.append({"to": to_phone, "body": text})
        return f"SM{len(self.sent):032d}"


@pytest.fixture
def table():
    return settings.order_table


@pytest.fixture
def clock():
    """Clock frozen at FIXED_NOW."""
    return lambda: FIXED_NOW


@pytest.fixture
def memory_store():
    return InMemoryRecordStore()


@pytest.fixture
def email_client():
    return RecordingEmailClient()


@pytest.fixture
def sms_client():
    return RecordingSmsClient()


@pytest_asyncio.fixture
async def sqlite_store(tmp_path):
    """RecordStore backed by a throwaway SQLite database file."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'orders.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield RecordStore(async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False))

    await engine.dispose()


def make_item(
    order_id: str,
    pk: str = "a@b.com",
    sk: str = "2028-10-18T12:00:00.000+00:00",
    ttl: int = 1855483200,
    **overrides,
) -> dict:
    """A complete order row for store-level tests."""
    item = {
        "order_id": order_id,
        "company_name": "Acme",
        "car_name": "X1",
        "email": pk if "@" in pk else None,
        "phone_number": None if "@" in pk else pk,
        "pk": pk,
        "sk": sk,
        "ttl": ttl,
        "warranty_expiry": ttl * 1000,
        "expired": None,
        "renews_order_id": None,
    }
    item.update(overrides)
    return item


@pytest.fixture
def item_factory():
    return make_item
