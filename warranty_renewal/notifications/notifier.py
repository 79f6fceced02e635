"""Warranty expiry notifier — turns removed orders into renewal offers.

For every removed record that is not itself an expired offer, each contact
channel on the record gets its own renewal offer and its own message. All
branches of a batch run concurrently and each reports its own outcome.
"""

from __future__ import annotations

import asyncio
from typing import Optional, Protocol

import pydantic
import structlog

from warranty_renewal.errors import DeliveryError
from warranty_renewal.notifications.templates import (
    ExpiryMessage,
    render_email,
    render_sms,
    renewal_link,
)
from warranty_renewal.orders.expiry import Clock, offer_horizon, utc_now
from warranty_renewal.orders.records import build_record
from warranty_renewal.repositories.record_store import RecordStore
from warranty_renewal.schemas.order import (
    BranchFailure,
    Channel,
    NotificationOutcome,
    OrderRecord,
    RemovalEvent,
)

logger = structlog.get_logger()


class EmailSender(Protocol):
    async def send_email(self, to_email: str, subject: str, body: str) -> str: ...


class SmsSender(Protocol):
    async def send_sms(self, to_phone: str, text: str) -> str: ...


class WarrantyExpiryNotifier:
    """Creates renewal offers and notifies customers of lapsed warranties."""

    def __init__(
        self,
        store: RecordStore,
        table: str,
        email_client: Optional[EmailSender],
        sms_client: Optional[SmsSender],
        renewal_base_url: str,
        concurrency: int = 10,
        clock: Clock = utc_now,
    ):
        self.store = store
        self.table = table
        self.email_client = email_client
        self.sms_client = sms_client
        self.renewal_base_url = renewal_base_url
        self.concurrency = concurrency
        self.clock = clock

    async def handle_batch(self, events: list[RemovalEvent]) -> NotificationOutcome:
        """Process one change-stream batch.

        Args:
            events: Removal events with the prior image of each record

        Returns:
            Counts of succeeded and skipped branches, plus every failure
        """
        outcome = NotificationOutcome()
        branches: list[tuple[OrderRecord, Channel]] = []

        for event in events:
            if event.event_name != "REMOVE":
                logger.debug("stream_event_ignored", event_name=event.event_name)
                outcome.skipped += 1
                continue

            try:
                record = OrderRecord.model_validate(event.old_image)
            except pydantic.ValidationError as e:
                logger.error(
                    "stream_image_invalid",
                    event_id=event.event_id,
                    error=str(e),
                )
                raw_id = event.old_image.get("orderId") or event.old_image.get("order_id")
                outcome.failures.append(
                    BranchFailure(
                        order_id=str(raw_id) if raw_id else None,
                        reason=f"Invalid record image: {e.error_count()} error(s)",
                    )
                )
                continue

            if record.is_offer:
                logger.info("expired_offer_removed", order_id=record.order_id)
                outcome.skipped += 1
                continue

            if record.email:
                branches.append((record, Channel.EMAIL))
            if record.phone_number:
                branches.append((record, Channel.SMS))
            if not record.email and not record.phone_number:
                logger.warning("removed_order_without_contact", order_id=record.order_id)
                outcome.skipped += 1

        limit = asyncio.Semaphore(self.concurrency) if self.concurrency > 0 else None
        results = await asyncio.gather(
            *(self._run_branch(record, channel, limit) for record, channel in branches),
            return_exceptions=True,
        )

        for (record, channel), result in zip(branches, results):
            if isinstance(result, BaseException):
                logger.error(
                    "notification_branch_failed",
                    order_id=record.order_id,
                    channel=channel.value,
                    error=str(result),
                )
                outcome.failures.append(
                    BranchFailure(order_id=record.order_id, channel=channel, reason=str(result))
                )
            else:
                outcome.succeeded += 1

        logger.info(
            "stream_batch_processed",
            events=len(events),
            succeeded=outcome.succeeded,
            skipped=outcome.skipped,
            failed=outcome.failed,
        )
        return outcome

    async def _run_branch(
        self,
        source: OrderRecord,
        channel: Channel,
        limit: Optional[asyncio.Semaphore],
    ) -> OrderRecord:
        if limit is None:
            return await self._notify(source, channel)
        async with limit:
            return await self._notify(source, channel)

    async def _notify(self, source: OrderRecord, channel: Channel) -> OrderRecord:
        offer = await self.create_offer(source, channel)
        link = renewal_link(self.renewal_base_url, offer.order_id)

        if channel is Channel.EMAIL:
            await self._send_email(source.email, render_email(source, link))
        else:
            await self._send_sms(source.phone_number, render_sms(source, link))

        logger.info(
            "expiry_notification_sent",
            order_id=source.order_id,
            offer_id=offer.order_id,
            channel=channel.value,
        )
        return offer

    async def create_offer(self, source: OrderRecord, channel: Channel) -> OrderRecord:
        """Write a 30-day renewal offer keyed to one contact of `source`."""
        offer = build_record(
            company_name=source.company_name,
            car_name=source.car_name,
            email=source.email if channel is Channel.EMAIL else None,
            phone_number=source.phone_number if channel is Channel.SMS else None,
            horizon=offer_horizon(self.clock()),
            expired=True,
            renews_order_id=source.order_id,
        )
        await self.store.write(self.table, offer.to_item())

        logger.info(
            "renewal_offer_created",
            order_id=source.order_id,
            offer_id=offer.order_id,
            user_id=offer.pk,
            expires=offer.sk,
        )
        return offer

    async def _send_email(self, to_email: str, message: ExpiryMessage) -> None:
        if self.email_client is None:
            raise DeliveryError("Email channel is not configured")
        await self.email_client.send_email(to_email, message.subject, message.body)

    async def _send_sms(self, to_phone: str, message: ExpiryMessage) -> None:
        if self.sms_client is None:
            raise DeliveryError("SMS channel is not configured")
        await self.sms_client.send_sms(to_phone, message.body)
