"""Cashfree webhook handler."""

from __future__ import annotations

import logging
import time
from typing import Any

from ...notifications import EmailNotifier
from ..providers.cashfree import CashfreeProvider
from .dedupe import ProcessedEvents

logger = logging.getLogger(__name__)

SUCCESS_EVENT = "PAYMENT_SUCCESS_WEBHOOK"
FAILURE_EVENTS = ("PAYMENT_FAILED_WEBHOOK", "PAYMENT_USER_DROPPED_WEBHOOK")


class CashfreeWebhookHandler:
    """Handler for Cashfree payment webhooks.

    Signature problems raise ``WebhookVerificationError`` so the route can
    answer 400. Anything that fails after verification comes back as
    ``{"status": "error"}``, which the route turns into a 500 so Cashfree
    retries the delivery.
    """

    def __init__(
        self,
        provider: CashfreeProvider,
        notifier: EmailNotifier,
        processed: ProcessedEvents,
    ):
        self.provider = provider
        self.notifier = notifier
        self.processed = processed

    async def handle(
        self,
        payload: bytes,
        signature: str | None,
        timestamp: str | None,
    ) -> dict[str, str]:
        """Handle a Cashfree webhook.

        Args:
            payload: Raw request body, as signed
            signature: ``x-webhook-signature`` header
            timestamp: ``x-webhook-timestamp`` header

        Returns:
            Processing outcome
        """
        start_time = time.time()
        event = self.provider.verify_webhook(payload, signature, timestamp)
        event_type = event.get("type")
        data = event.get("data") or {}
        order = data.get("order") or {}
        payment = data.get("payment") or {}
        order_id = order.get("order_id")

        try:
            if event_type == SUCCESS_EVENT:
                key = _dedupe_key(payment, order_id)
                if key is None:
                    logger.warning("Cashfree success webhook without payment or order id")
                elif not self.processed.claim(key):
                    logger.info("Duplicate Cashfree webhook ignored order_id=%s", order_id)
                    return {"status": "duplicate"}
                try:
                    await self._on_success(order, data.get("customer_details") or {})
                except Exception:
                    if key is not None:
                        self.processed.release(key)
                    raise
                return {"status": "success"}

            if event_type in FAILURE_EVENTS:
                logger.warning(
                    "Cashfree payment not completed order_id=%s event=%s status=%s message=%s",
                    order_id,
                    event_type,
                    payment.get("payment_status"),
                    payment.get("payment_message"),
                )
                return {"status": "success"}

            logger.info("Cashfree webhook ignored type=%s order_id=%s", event_type, order_id)
            return {"status": "ignored"}

        except Exception as e:
            logger.exception("Cashfree webhook processing failed order_id=%s", order_id)
            return {"status": "error", "message": str(e)}

        finally:
            logger.debug(
                "Cashfree webhook type=%s processed in %dms",
                event_type,
                int((time.time() - start_time) * 1000),
            )

    async def _on_success(self, order: dict[str, Any], customer: dict[str, Any]) -> None:
        order_id = order.get("order_id")
        logger.info(
            "Cashfree payment succeeded order_id=%s amount=%s %s",
            order_id,
            order.get("order_amount"),
            order.get("order_currency"),
        )
        email = customer.get("customer_email")
        if not email:
            return
        await self.notifier.send_payment_confirmation(
            to=email,
            order_id=order_id,
            amount=order.get("order_amount"),
            currency=order.get("order_currency") or "INR",
            customer_name=customer.get("customer_name"),
        )


def _dedupe_key(payment: dict[str, Any], order_id: str | None) -> str | None:
    identifier = payment.get("cf_payment_id") or order_id
    if not identifier:
        return None
    return f"cashfree:{identifier}"
