"""PayPal payment provider implementation."""

from __future__ import annotations

import base64
import logging
from typing import Any

from .base import BasePaymentProvider, CustomerDetails, PaymentOrderResult

logger = logging.getLogger(__name__)


class PayPalProvider(BasePaymentProvider):
    """PayPal Orders API v2.

    The buyer approves the order on PayPal's page (``approve`` link), then
    the backend captures it.
    """

    @property
    def provider_name(self) -> str:
        return "paypal"

    def _get_base_url(self) -> str:
        if self.is_test_mode():
            return "https://api-m.sandbox.paypal.com"
        return "https://api-m.paypal.com"

    def _get_auth_header(self) -> str:
        client_id, client_secret = self.require_credentials("client_id", "client_secret")
        encoded = base64.b64encode(f"{client_id}:{client_secret}".encode()).decode()
        return f"Basic {encoded}"

    async def _get_access_token(self) -> str:
        headers = {
            "Authorization": self._get_auth_header(),
            "Content-Type": "application/x-www-form-urlencoded",
        }
        result = await self._send(
            "POST",
            "/v1/oauth2/token",
            headers=headers,
            content="grant_type=client_credentials",
        )
        return result["access_token"]

    async def _api_request(
        self,
        method: str,
        endpoint: str,
        data: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        access_token = await self._get_access_token()
        headers = {
            "Authorization": f"Bearer {access_token}",
            "Content-Type": "application/json",
        }
        return await self._send(method, endpoint, headers=headers, json=data)

    async def create_order(
        self,
        amount: float,
        currency: str,
        order_id: str,
        customer: CustomerDetails | None = None,
        return_url: str | None = None,
        notify_url: str | None = None,
        cancel_url: str | None = None,
    ) -> PaymentOrderResult:
        """Create a PayPal order with intent CAPTURE.

        Args:
            amount: Payment amount
            currency: Currency code (e.g. 'USD')
            order_id: Merchant reference, stored as reference_id/custom_id
            customer: Unused, PayPal collects payer details itself
            return_url: Return URL after approval
            notify_url: Unused, PayPal webhooks are registered per app
            cancel_url: URL the buyer lands on after cancelling

        Returns:
            PaymentOrderResult with the approve link as ``redirect_url``
        """
        order_data = {
            "intent": "CAPTURE",
            "purchase_units": [
                {
                    "reference_id": order_id,
                    "custom_id": order_id,
                    "amount": {
                        "currency_code": currency.upper(),
                        "value": f"{amount:.2f}",
                    },
                }
            ],
            "application_context": {
                "brand_name": self.get_config("brand_name", "payrelay"),
                "landing_page": "NO_PREFERENCE",
                "user_action": "PAY_NOW",
                "return_url": return_url or self.get_config("default_return_url", ""),
                "cancel_url": cancel_url or self.get_config("default_cancel_url", ""),
            },
        }

        result = await self._api_request("POST", "/v2/checkout/orders", order_data)

        approve_link = None
        for link in result.get("links", []):
            if link.get("rel") == "approve":
                approve_link = link.get("href")
                break

        logger.info("PayPal order created id=%s status=%s", result.get("id"), result.get("status"))
        return PaymentOrderResult(
            order_id=result["id"],
            redirect_url=approve_link,
            status=result.get("status"),
            amount=amount,
            currency=currency.upper(),
            raw=result,
        )

    async def capture_order(self, order_id: str) -> dict[str, Any]:
        return await self._api_request("POST", f"/v2/checkout/orders/{order_id}/capture", {})

    async def get_order(self, order_id: str) -> dict[str, Any]:
        return await self._api_request("GET", f"/v2/checkout/orders/{order_id}")
