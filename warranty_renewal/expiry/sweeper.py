"""Expiry sweeper — deletes orders whose TTL has passed and streams their images.

This plays the part of time-to-live deletion plus the change stream: every
removed row becomes a REMOVE event for the warranty expiry notifier.
"""

from __future__ import annotations

import asyncio
from typing import Optional

import structlog

from warranty_renewal.errors import StoreError
from warranty_renewal.notifications.notifier import WarrantyExpiryNotifier
from warranty_renewal.orders.expiry import Clock, utc_now
from warranty_renewal.repositories.record_store import RecordStore
from warranty_renewal.schemas.order import NotificationOutcome, RemovalEvent

logger = structlog.get_logger()


class ExpirySweeper:
    def __init__(
        self,
        store: RecordStore,
        notifier: WarrantyExpiryNotifier,
        table: str,
        interval_seconds: int,
        batch_size: int,
        clock: Clock = utc_now,
    ):
        self.store = store
        self.notifier = notifier
        self.table = table
        self.interval_seconds = interval_seconds
        self.batch_size = batch_size
        self.clock = clock

    async def sweep_once(self) -> Optional[NotificationOutcome]:
        """Remove one batch of expired rows and notify on them.

        Returns:
            The notifier outcome, or None when nothing had expired
        """
        now = int(self.clock().timestamp())
        images = await self.store.remove_expired(self.table, now, self.batch_size)
        if not images:
            return None

        events = [
            RemovalEvent(event_name="REMOVE", old_image=image)
            for image in images
        ]
        return await self.notifier.handle_batch(events)

    async def run(self) -> None:
        """Sweep forever, sleeping `interval_seconds` between passes."""
        logger.info(
            "expiry_sweeper_started",
            table=self.table,
            interval=self.interval_seconds,
            batch_size=self.batch_size,
        )
        while True:
            try:
                await self.sweep_once()
            except StoreError as e:
                logger.error("expiry_sweep_failed", error=e.message)
            await asyncio.sleep(self.interval_seconds)
