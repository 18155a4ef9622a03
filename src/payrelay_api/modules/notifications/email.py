"""Payment confirmation emails over SMTP."""

from __future__ import annotations

import logging
from email.message import EmailMessage

import aiosmtplib

from ...core.config import Settings

logger = logging.getLogger(__name__)

SMTPS_PORT = 465


class EmailNotifier:
    """Sends transactional mail through the configured SMTP relay.

    When ``SMTP_HOST`` is unset the notifier is disabled and every send is
    a logged no-op.
    """

    def __init__(self, settings: Settings):
        self.settings = settings

    @property
    def enabled(self) -> bool:
        return bool(self.settings.SMTP_HOST)

    def build_payment_confirmation(
        self,
        to: str,
        order_id: str,
        amount: float | str,
        currency: str,
        customer_name: str | None = None,
    ) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.settings.SMTP_FROM or self.settings.SMTP_USERNAME or "no-reply@localhost"
        message["To"] = to
        message["Subject"] = f"Payment received for order {order_id}"
        greeting = f"Hi {customer_name}," if customer_name else "Hi,"
        message.set_content(
            f"{greeting}\n\n"
            f"We received your payment of {amount} {currency} for order {order_id}.\n\n"
            f"Thank you for your purchase.\n"
        )
        return message

    async def send(self, message: EmailMessage) -> bool:
        """Deliver ``message``. Returns False when email is not configured."""
        if not self.enabled:
            logger.info("SMTP not configured; skipping email to %s", message["To"])
            return False

        port = self.settings.SMTP_PORT
        implicit_tls = port == SMTPS_PORT
        await aiosmtplib.send(
            message,
            hostname=self.settings.SMTP_HOST,
            port=port,
            username=self.settings.SMTP_USERNAME,
            password=self.settings.SMTP_PASSWORD,
            use_tls=implicit_tls,
            start_tls=self.settings.SMTP_USE_TLS and not implicit_tls,
            timeout=self.settings.HTTP_TIMEOUT,
        )
        logger.info("Email sent to %s subject=%r", message["To"], message["Subject"])
        return True

    async def send_payment_confirmation(
        self,
        to: str,
        order_id: str,
        amount: float | str,
        currency: str,
        customer_name: str | None = None,
    ) -> bool:
        message = self.build_payment_confirmation(to, order_id, amount, currency, customer_name)
        return await self.send(message)
