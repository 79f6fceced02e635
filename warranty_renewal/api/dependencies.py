"""FastAPI dependencies wiring services to their collaborators."""

from __future__ import annotations

from typing import Optional

from fastapi import Depends

from warranty_renewal.config import settings
from warranty_renewal.database import get_session_factory
from warranty_renewal.notifications.email import EmailClient, get_email_client
from warranty_renewal.notifications.notifier import WarrantyExpiryNotifier
from warranty_renewal.notifications.sms import SmsClient, get_sms_client
from warranty_renewal.orders.intake import OrderIntakeService
from warranty_renewal.orders.lookup import OrderLookupService
from warranty_renewal.orders.renewal import RenewalService
from warranty_renewal.repositories.record_store import RecordStore


def get_record_store() -> RecordStore:
    return RecordStore(get_session_factory())


def get_email_sender() -> Optional[EmailClient]:
    return get_email_client()


def get_sms_sender() -> Optional[SmsClient]:
    return get_sms_client()


def get_intake_service(
    store: RecordStore = Depends(get_record_store),
) -> OrderIntakeService:
    return OrderIntakeService(store, settings.order_table)


def get_lookup_service(
    store: RecordStore = Depends(get_record_store),
) -> OrderLookupService:
    return OrderLookupService(store, settings.order_table)


def get_renewal_service(
    store: RecordStore = Depends(get_record_store),
) -> RenewalService:
    return RenewalService(store, settings.order_table)


def get_notifier(
    store: RecordStore = Depends(get_record_store),
    email_client: Optional[EmailClient] = Depends(get_email_sender),
    sms_client: Optional[SmsClient] = Depends(get_sms_sender),
) -> WarrantyExpiryNotifier:
    return build_notifier(store, email_client, sms_client)


def build_notifier(
    store: RecordStore,
    email_client: Optional[EmailClient],
    sms_client: Optional[SmsClient],
) -> WarrantyExpiryNotifier:
    return WarrantyExpiryNotifier(
        store,
        settings.order_table,
        email_client=email_client,
        sms_client=sms_client,
        renewal_base_url=settings.renewal_base_url,
        concurrency=settings.notifier_concurrency,
    )
