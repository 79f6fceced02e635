"""SendGrid email client."""

from __future__ import annotations

import asyncio
from typing import Optional

import structlog

from warranty_renewal.config import settings
from warranty_renewal.errors import DeliveryError

logger = structlog.get_logger()

_client: Optional["EmailClient"] = None


class EmailClient:
    """Async wrapper around the synchronous SendGrid SDK."""

    def __init__(self, api_key: str, sender: str):
        from sendgrid import SendGridAPIClient

        self.sendgrid = SendGridAPIClient(api_key)
        self.sender = sender

    async def send_email(self, to_email: str, subject: str, body: str) -> str:
        """Send a plain-text email.

        Returns:
            SendGrid message id ("" when the API does not report one)
        """
        from python_http_client.exceptions import HTTPError
        from sendgrid.helpers.mail import Mail

        message = Mail(
            from_email=self.sender,
            to_emails=to_email,
            subject=subject,
            plain_text_content=body,
        )

        try:
            response = await asyncio.to_thread(self.sendgrid.send, message)
        except HTTPError as e:
            raise DeliveryError(f"Email to {to_email} failed: {e}") from e

        if response.status_code >= 400:
            raise DeliveryError(
                f"Email to {to_email} failed with status {response.status_code}"
            )

        message_id = response.headers.get("X-Message-Id", "") if response.headers else ""
        logger.info(
            "email_sent",
            to=to_email,
            message_id=message_id,
            status=response.status_code,
        )
        return message_id


def get_email_client() -> Optional[EmailClient]:
    """Get or create the singleton email client.

    Returns None if SendGrid is not configured.
    """
    global _client

    if _client is not None:
        return _client

    if not settings.sendgrid_api_key:
        logger.debug("email_client_not_configured")
        return None

    _client = EmailClient(api_key=settings.sendgrid_api_key, sender=settings.email_sender)
    logger.info("email_client_initialized", sender=settings.email_sender)
    return _client
