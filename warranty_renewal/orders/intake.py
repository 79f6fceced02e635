"""Order intake — validates a purchase and stores it with a two-year warranty."""

from __future__ import annotations

import structlog

from warranty_renewal.errors import ValidationError
from warranty_renewal.orders.expiry import Clock, utc_now, warranty_horizon
from warranty_renewal.orders.records import build_record
from warranty_renewal.repositories.record_store import RecordStore
from warranty_renewal.schemas.order import OrderCreate, OrderCreated

logger = structlog.get_logger()


def validate_order_input(payload: OrderCreate) -> None:
    """Raise ValidationError for the first missing field.

    Order: contact, then companyName, then carName.
    """
    if not payload.email and not payload.phone_number:
        raise ValidationError("email or phoneNumber is required to make the order")

    if not payload.company_name:
        raise ValidationError("companyName is missing to make the order")

    if not payload.car_name:
        raise ValidationError("carName is missing to make the order")


class OrderIntakeService:
    """Creates active orders."""

    def __init__(self, store: RecordStore, table: str, clock: Clock = utc_now):
        self.store = store
        self.table = table
        self.clock = clock

    async def create_order(self, payload: OrderCreate) -> OrderCreated:
        """Validate and persist a new order.

        Args:
            payload: Intake request body

        Returns:
            The new orderId and a confirmation message naming the expiry date
        """
        validate_order_input(payload)

        horizon = warranty_horizon(self.clock())
        record = build_record(
            company_name=payload.company_name,
            car_name=payload.car_name,
            email=payload.email,
            phone_number=payload.phone_number,
            horizon=horizon,
        )

        await self.store.write(self.table, record.to_item())

        logger.info(
            "order_created",
            order_id=record.order_id,
            user_id=record.pk,
            car=record.car_name,
            warranty_expiry=record.sk,
        )

        return OrderCreated(
            order_id=record.order_id,
            message=(
                "The order is being made and the warranty will expire on "
                f"{horizon.display_date}"
            ),
        )
