"""Renewal redemption — extends a lapsed warranty by another two years."""

from __future__ import annotations

from typing import Optional

import structlog

from warranty_renewal.errors import OrderNotFoundError, ValidationError
from warranty_renewal.models import OFFER_INDEX
from warranty_renewal.orders.expiry import Clock, ExpiryHorizon, utc_now, warranty_horizon
from warranty_renewal.orders.records import build_record
from warranty_renewal.repositories.record_store import RecordStore
from warranty_renewal.schemas.order import OrderRecord, OrderRenewal

logger = structlog.get_logger()


class RenewalService:
    """Clears the expired flag and moves the expiry horizon forward."""

    def __init__(self, store: RecordStore, table: str, clock: Clock = utc_now):
        self.store = store
        self.table = table
        self.clock = clock

    async def renew(self, order_id: Optional[str]) -> OrderRenewal:
        """Renew the record identified by `order_id`.

        A record that still exists gets ttl, expired, warranty_expiry and sk
        overwritten in place; if it disappears before the update lands it is
        written back whole. An order already removed at expiry is restored
        under the same orderId from the offers that renew it.

        Raises:
            ValidationError: orderId is missing
            OrderNotFoundError: no record has this orderId and no offer renews it
        """
        if not order_id:
            raise ValidationError("Missing orderId query parameter in url")

        horizon = warranty_horizon(self.clock())
        key = {"order_id": order_id}

        current = await self.store.get(self.table, key)
        if current:
            # Offer ids are accepted as well; nothing tells them apart from order ids here.
            if current.get("expired") is True:
                logger.warning(
                    "renewal_target_is_offer",
                    order_id=order_id,
                    user_id=current.get("pk"),
                )
            patch = self._patch(horizon)
            if not await self.store.update(self.table, key, patch):
                # Removed at expiry between the read and the update.
                logger.info("renewal_target_removed", order_id=order_id)
                await self.store.write(self.table, {**current, **patch})
        else:
            await self._restore(order_id, horizon)

        logger.info("order_renewed", order_id=order_id, warranty_expiry=horizon.sk)

        return OrderRenewal(
            order_id=order_id,
            message=f"Your order is renewed. The warranty will expire on {horizon.display_date}",
        )

    def _patch(self, horizon: ExpiryHorizon) -> dict:
        return {
            "ttl": horizon.ttl,
            "expired": None,
            "warranty_expiry": horizon.warranty_expiry,
            "sk": horizon.sk,
        }

    async def _restore(self, order_id: str, horizon: ExpiryHorizon) -> OrderRecord:
        """Rebuild a removed order from the offers that renew it.

        Each offer carries one contact, so contacts are gathered across all of
        them, newest first. Company and car come from the newest offer.
        """
        items = await self.store.query(
            self.table,
            OFFER_INDEX,
            pk_value=order_id,
            pk_key="renews_order_id",
            ascending=False,
        )
        if not items:
            raise OrderNotFoundError(order_id)

        offers = [OrderRecord.model_validate(item) for item in items]
        latest = offers[0]
        record = build_record(
            order_id=order_id,
            company_name=latest.company_name,
            car_name=latest.car_name,
            email=next((o.email for o in offers if o.email), None),
            phone_number=next((o.phone_number for o in offers if o.phone_number), None),
            horizon=horizon,
        )
        await self.store.write(self.table, record.to_item())

        logger.info(
            "order_restored_from_offer",
            order_id=order_id,
            offer_ids=[o.order_id for o in offers],
            user_id=record.pk,
        )
        return record
