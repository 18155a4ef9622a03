"""Cashfree Hosted Checkout provider implementation."""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import logging
from typing import Any

from .base import (
    BasePaymentProvider,
    CustomerDetails,
    PaymentOrderResult,
    WebhookVerificationError,
    signatures_match,
)

logger = logging.getLogger(__name__)


class CashfreeProvider(BasePaymentProvider):
    """Cashfree Payment Gateway (PG) Orders API.

    The order call returns a ``payment_session_id`` which the frontend hands
    to the Cashfree JS SDK to open the hosted checkout page.
    """

    API_VERSION = "2023-08-01"

    @property
    def provider_name(self) -> str:
        return "cashfree"

    def _get_base_url(self) -> str:
        if self.is_test_mode():
            return "https://sandbox.cashfree.com"
        return "https://api.cashfree.com"

    def _headers(self) -> dict[str, str]:
        client_id, client_secret = self.require_credentials("client_id", "client_secret")
        return {
            "x-client-id": client_id,
            "x-client-secret": client_secret,
            "x-api-version": self.get_config("api_version", self.API_VERSION),
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    async def create_order(
        self,
        amount: float,
        currency: str,
        order_id: str,
        customer: CustomerDetails | None = None,
        return_url: str | None = None,
        notify_url: str | None = None,
    ) -> PaymentOrderResult:
        """Create a Cashfree order and obtain its payment session id.

        Args:
            amount: Order amount, forwarded as-is
            currency: Currency code, forwarded as-is
            order_id: Merchant order id
            customer: Customer contact details (required by Cashfree)
            return_url: Page the hosted checkout returns to
            notify_url: Webhook URL for this order

        Returns:
            PaymentOrderResult carrying ``payment_session_id``
        """
        if customer is None:
            raise ValueError("Cashfree orders require customer details")

        customer_details: dict[str, Any] = {
            "customer_id": customer.id,
            "customer_email": customer.email,
            "customer_phone": customer.phone,
        }
        if customer.name:
            customer_details["customer_name"] = customer.name

        order_data: dict[str, Any] = {
            "order_id": order_id,
            "order_amount": amount,
            "order_currency": currency,
            "customer_details": customer_details,
        }
        order_meta = {}
        if return_url:
            order_meta["return_url"] = return_url
        if notify_url:
            order_meta["notify_url"] = notify_url
        if order_meta:
            order_data["order_meta"] = order_meta

        result = await self._send("POST", "/pg/orders", headers=self._headers(), json=order_data)
        logger.info("Cashfree order created order_id=%s status=%s", result.get("order_id"), result.get("order_status"))

        return PaymentOrderResult(
            order_id=result.get("order_id", order_id),
            session_id=result.get("payment_session_id"),
            status=result.get("order_status"),
            amount=amount,
            currency=currency,
            raw=result,
        )

    async def get_order(self, order_id: str) -> dict[str, Any]:
        return await self._send("GET", f"/pg/orders/{order_id}", headers=self._headers())

    def compute_webhook_signature(self, timestamp: str, raw_body: bytes) -> str:
        """Signature Cashfree sends in ``x-webhook-signature``.

        base64(HMAC-SHA256(client_secret, timestamp + raw body))
        """
        (client_secret,) = self.require_credentials("client_secret")
        message = timestamp.encode() + raw_body
        digest = hmac.new(client_secret.encode(), message, hashlib.sha256).digest()
        return base64.b64encode(digest).decode()

    def verify_webhook(
        self,
        payload: bytes,
        signature: str | None,
        timestamp: str | None,
    ) -> dict[str, Any]:
        """Verify and parse a Cashfree webhook.

        Raises:
            WebhookVerificationError: If the signature is missing or wrong
        """
        if not signature or not timestamp:
            raise WebhookVerificationError("Missing Cashfree webhook signature headers")

        expected = self.compute_webhook_signature(timestamp, payload)
        if not signatures_match(expected, signature):
            raise WebhookVerificationError("Cashfree webhook signature verification failed")

        try:
            event = json.loads(payload.decode())
        except ValueError as exc:
            raise WebhookVerificationError("Cashfree webhook body is not valid JSON") from exc
        if not isinstance(event, dict):
            raise WebhookVerificationError("Cashfree webhook body is not a JSON object")
        return event
