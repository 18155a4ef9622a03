"""PhonePe Standard Checkout (PG v1) provider implementation."""

from __future__ import annotations

import base64
import hashlib
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

PAY_ENDPOINT = "/pg/v1/pay"


def encode_payload(data: dict[str, Any]) -> str:
    return base64.b64encode(json.dumps(data).encode()).decode()


def decode_payload(encoded: str) -> dict[str, Any]:
    return json.loads(base64.b64decode(encoded).decode())


class PhonePeProvider(BasePaymentProvider):
    """PhonePe pay-page checkout.

    Requests are base64 JSON signed with an ``X-VERIFY`` checksum:
    ``sha256(body + path + salt_key) + "###" + salt_index``.
    Amounts travel in paise.
    """

    @property
    def provider_name(self) -> str:
        return "phonepe"

    def _get_base_url(self) -> str:
        base_url = self.get_config("base_url")
        if base_url:
            return base_url.rstrip("/")
        if self.is_test_mode():
            return "https://api-preprod.phonepe.com/apis/pg-sandbox"
        return "https://api.phonepe.com/apis/hermes"

    def checksum(self, message: str) -> str:
        """X-VERIFY header value for ``message``."""
        (salt_key,) = self.require_credentials("salt_key")
        salt_index = self.get_credential("salt_index", 1)
        digest = hashlib.sha256((message + salt_key).encode()).hexdigest()
        return f"{digest}###{salt_index}"

    async def create_order(
        self,
        amount: float,
        currency: str,
        order_id: str,
        customer: CustomerDetails | None = None,
        return_url: str | None = None,
        notify_url: str | None = None,
    ) -> PaymentOrderResult:
        """Initiate a PhonePe pay-page transaction.

        ``order_id`` becomes the merchantTransactionId. The currency is
        always INR on PhonePe and is not sent.
        """
        (merchant_id,) = self.require_credentials("merchant_id")

        request_data: dict[str, Any] = {
            "merchantId": merchant_id,
            "merchantTransactionId": order_id,
            "merchantUserId": customer.id if customer else f"MUID_{order_id}",
            "amount": int(round(amount * 100)),
            "redirectMode": "REDIRECT",
            "paymentInstrument": {"type": "PAY_PAGE"},
        }
        if return_url:
            request_data["redirectUrl"] = return_url
        if notify_url:
            request_data["callbackUrl"] = notify_url
        if customer and customer.phone:
            request_data["mobileNumber"] = customer.phone

        encoded = encode_payload(request_data)
        headers = {
            "Content-Type": "application/json",
            "X-VERIFY": self.checksum(encoded + PAY_ENDPOINT),
        }
        result = await self._send("POST", PAY_ENDPOINT, headers=headers, json={"request": encoded})

        redirect_url = (
            result.get("data", {})
            .get("instrumentResponse", {})
            .get("redirectInfo", {})
            .get("url")
        )
        logger.info("PhonePe payment initiated txn=%s code=%s", order_id, result.get("code"))

        return PaymentOrderResult(
            order_id=order_id,
            redirect_url=redirect_url,
            status=result.get("code"),
            amount=amount,
            currency="INR",
            raw=result,
        )

    async def get_order(self, order_id: str) -> dict[str, Any]:
        (merchant_id,) = self.require_credentials("merchant_id")
        path = f"/pg/v1/status/{merchant_id}/{order_id}"
        headers = {
            "Content-Type": "application/json",
            "X-VERIFY": self.checksum(path),
            "X-MERCHANT-ID": merchant_id,
        }
        return await self._send("GET", path, headers=headers)

    def verify_callback(self, encoded_response: Any, x_verify: str | None) -> dict[str, Any]:
        """Verify a server-to-server callback and decode its payload.

        ``encoded_response`` is the ``response`` field of the callback body,
        taken as-is from the JSON, so it is type-checked here.

        Raises:
            WebhookVerificationError: If the payload or checksum is missing or wrong
        """
        if not encoded_response or not x_verify:
            raise WebhookVerificationError("Missing PhonePe callback payload or X-VERIFY header")
        if not isinstance(encoded_response, str):
            raise WebhookVerificationError("PhonePe callback payload must be a base64 string")

        if not signatures_match(self.checksum(encoded_response), x_verify):
            raise WebhookVerificationError("PhonePe callback checksum verification failed")

        try:
            event = decode_payload(encoded_response)
        except ValueError as exc:
            raise WebhookVerificationError("PhonePe callback payload is not valid base64 JSON") from exc
        if not isinstance(event, dict):
            raise WebhookVerificationError("PhonePe callback payload is not a JSON object")
        return event
