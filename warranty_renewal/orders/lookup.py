"""Order lookup — single orders by id, or everything held by one user."""

from __future__ import annotations

from typing import Optional

from warranty_renewal.errors import ValidationError
from warranty_renewal.models import USER_INDEX
from warranty_renewal.repositories.record_store import RecordStore
from warranty_renewal.schemas.order import OrderRecord


class OrderLookupService:
    def __init__(self, store: RecordStore, table: str):
        self.store = store
        self.table = table

    async def get_order(self, order_id: Optional[str]) -> Optional[OrderRecord]:
        """Fetch one record by orderId; None when there is no such record."""
        if not order_id:
            raise ValidationError("Missing orderId in path of URL")

        item = await self.store.get(self.table, {"order_id": order_id})
        if not item:
            return None
        return OrderRecord.model_validate(item)

    async def list_user_orders(self, user_id: Optional[str]) -> list[OrderRecord]:
        """All orders and offers of one contact, ordered by expiry (oldest first)."""
        if not user_id:
            raise ValidationError("Missing userId in path of URL")

        items = await self.store.query(self.table, USER_INDEX, pk_value=user_id)
        return [OrderRecord.model_validate(item) for item in items]
