"""Warranty expiry message templates."""

from __future__ import annotations

from dataclasses import dataclass

from warranty_renewal.schemas.order import OrderRecord

EMAIL_SUBJECT = "Your {car_name} warranty has expired"

EMAIL_TEMPLATE = """Hello,

The warranty on your {car_name} from {company_name} (order {order_id}) has expired.

You can extend it for another two years within the next 30 days:
{renewal_link}

Thank you for choosing {company_name}."""

SMS_TEMPLATE = (
    "Your {company_name} {car_name} warranty (order {order_id}) has expired. "
    "Renew within 30 days: {renewal_link}"
)


@dataclass(frozen=True)
class ExpiryMessage:
    subject: str
    body: str


def renewal_link(base_url: str, offer_id: str) -> str:
    return f"{base_url.rstrip('/')}/renew?orderId={offer_id}"


def _fields(source: OrderRecord, link: str) -> dict[str, str]:
    return {
        "company_name": source.company_name,
        "car_name": source.car_name,
        "order_id": source.order_id,
        "renewal_link": link,
    }


def render_email(source: OrderRecord, link: str) -> ExpiryMessage:
    fields = _fields(source, link)
    return ExpiryMessage(
        subject=EMAIL_SUBJECT.format(**fields),
        body=EMAIL_TEMPLATE.format(**fields),
    )


def render_sms(source: OrderRecord, link: str) -> ExpiryMessage:
    return ExpiryMessage(subject="", body=SMS_TEMPLATE.format(**_fields(source, link)))
