"""Twilio SMS client — sends text messages via Twilio API."""

from __future__ import annotations

import asyncio
from typing import Optional

import structlog

from warranty_renewal.config import settings
from warranty_renewal.errors import DeliveryError

logger = structlog.get_logger()

# Lazy singleton
_client: Optional["SmsClient"] = None


class SmsClient:
    """Async wrapper around Twilio's synchronous SDK for SMS."""

    def __init__(self, account_sid: str, auth_token: str, from_number: str):
        from twilio.rest import Client as TwilioClient

        self.twilio = TwilioClient(account_sid, auth_token)
        self.from_number = from_number

    async def send_sms(self, to_phone: str, text: str) -> str:
        """Send an SMS.

        Args:
            to_phone: Recipient phone number (e.g. "+14155550123")
            text: Message body

        Returns:
            Twilio message SID
        """
        from twilio.base.exceptions import TwilioException

        # Twilio SDK is synchronous, run in thread pool
        try:
            msg = await asyncio.to_thread(
                self.twilio.messages.create,
                body=text,
                from_=self.from_number,
                to=to_phone,
            )
        except TwilioException as e:
            raise DeliveryError(f"SMS to {to_phone} failed: {e}") from e

        logger.info(
            "sms_sent",
            to=to_phone,
            sid=msg.sid,
            text_len=len(text),
        )
        return msg.sid


def get_sms_client() -> Optional[SmsClient]:
    """Get or create the singleton SMS client.

    Returns None if Twilio credentials are not configured.
    """
    global _client

    if _client is not None:
        return _client

    if not settings.twilio_account_sid or not settings.twilio_auth_token:
        logger.debug("sms_client_not_configured")
        return None

    _client = SmsClient(
        account_sid=settings.twilio_account_sid,
        auth_token=settings.twilio_auth_token,
        from_number=settings.twilio_sms_number,
    )

    logger.info("sms_client_initialized", from_number=settings.twilio_sms_number)
    return _client
