"""Construction of order and renewal-offer records."""

from __future__ import annotations

import uuid
from typing import Optional

from warranty_renewal.orders.expiry import ExpiryHorizon
from warranty_renewal.schemas.order import OrderRecord


def new_order_id() -> str:
    return str(uuid.uuid4())


def build_record(
    *,
    company_name: str,
    car_name: str,
    email: Optional[str],
    phone_number: Optional[str],
    horizon: ExpiryHorizon,
    expired: Optional[bool] = None,
    order_id: Optional[str] = None,
    renews_order_id: Optional[str] = None,
) -> OrderRecord:
    """Build a fresh record keyed to the email, or the phone number if absent.

    Every generated field is set here from named values; nothing from the
    caller's payload can replace them.
    """
    contact = email or phone_number
    if not contact:
        raise ValueError("a record needs an email or a phone number")

    return OrderRecord(
        order_id=order_id or new_order_id(),
        company_name=company_name,
        car_name=car_name,
        email=email or None,
        phone_number=phone_number or None,
        pk=contact,
        sk=horizon.sk,
        ttl=horizon.ttl,
        warranty_expiry=horizon.warranty_expiry,
        expired=expired,
        renews_order_id=renews_order_id,
    )
