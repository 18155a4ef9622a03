"""Payment service layer: maps API requests onto provider calls."""

from __future__ import annotations

import logging
from typing import Any
from uuid import uuid4

import httpx

from ...core.config import Settings
from .providers import (
    CashfreeProvider,
    CustomerDetails,
    PayPalProvider,
    PhonePeProvider,
)
from .schemas import (
    CreateOrderRequest,
    CreateOrderResponse,
    Customer,
    PayPalOrderRequest,
    PayPalOrderResponse,
    PhonePePaymentResponse,
)

logger = logging.getLogger(__name__)


def new_order_id(prefix: str = "order") -> str:
    return f"{prefix}_{uuid4().hex[:20]}"


def _join_url(base: str, path: str) -> str:
    return f"{base.rstrip('/')}/{path.lstrip('/')}"


class PaymentService:
    """Service layer for hosted-checkout operations.

    Providers are built from settings on first use. ``transport`` is handed
    to every provider's httpx client.
    """

    def __init__(self, settings: Settings, transport: httpx.AsyncBaseTransport | None = None):
        self.settings = settings
        self.transport = transport
        self._cashfree: CashfreeProvider | None = None
        self._phonepe: PhonePeProvider | None = None
        self._paypal: PayPalProvider | None = None

    # === Providers ===

    @property
    def cashfree(self) -> CashfreeProvider:
        if self._cashfree is None:
            self._cashfree = CashfreeProvider(
                credentials={
                    "client_id": self.settings.CASHFREE_CLIENT_ID,
                    "client_secret": self.settings.CASHFREE_CLIENT_SECRET,
                },
                mode=self.settings.cashfree_mode,
                config={"api_version": self.settings.CASHFREE_API_VERSION},
                transport=self.transport,
                timeout=self.settings.HTTP_TIMEOUT,
            )
        return self._cashfree

    @property
    def phonepe(self) -> PhonePeProvider:
        if self._phonepe is None:
            self._phonepe = PhonePeProvider(
                credentials={
                    "merchant_id": self.settings.PHONEPE_MERCHANT_ID,
                    "salt_key": self.settings.PHONEPE_SALT_KEY,
                    "salt_index": self.settings.PHONEPE_SALT_INDEX,
                },
                config={"base_url": self.settings.PHONEPE_BASE_URL},
                transport=self.transport,
                timeout=self.settings.HTTP_TIMEOUT,
            )
        return self._phonepe

    @property
    def paypal(self) -> PayPalProvider:
        if self._paypal is None:
            self._paypal = PayPalProvider(
                credentials={
                    "client_id": self.settings.PAYPAL_CLIENT_ID,
                    "client_secret": self.settings.PAYPAL_CLIENT_SECRET,
                },
                mode=self.settings.paypal_mode,
                config={
                    "brand_name": self.settings.PAYPAL_BRAND_NAME,
                    "default_return_url": self.settings.frontend_base_url,
                    "default_cancel_url": self.settings.frontend_base_url,
                },
                transport=self.transport,
                timeout=self.settings.HTTP_TIMEOUT,
            )
        return self._paypal

    # === URL helpers ===

    def _frontend_url(self, path_template: str, **params: str) -> str | None:
        base = self.settings.frontend_base_url
        if not base:
            return None
        return _join_url(base, path_template.format(**params))

    def _webhook_url(self, provider: str) -> str | None:
        base = self.settings.PUBLIC_BASE_URL
        if not base:
            return None
        return _join_url(base, f"{self.settings.API_PREFIX}/webhooks/{provider}")

    @staticmethod
    def _customer_details(customer: Customer) -> CustomerDetails:
        return CustomerDetails(
            id=customer.id or f"cust_{uuid4().hex[:12]}",
            email=customer.email,
            phone=customer.phone,
            name=customer.name,
        )

    # === Cashfree ===

    async def create_order(self, request: CreateOrderRequest) -> CreateOrderResponse:
        """Create a Cashfree order and return its payment session id.

        Raises:
            ProviderError: If Cashfree rejects the order
        """
        order_id = new_order_id()
        result = await self.cashfree.create_order(
            amount=request.amount,
            currency=request.currency,
            order_id=order_id,
            customer=self._customer_details(request.customer),
            return_url=self._frontend_url(self.settings.CASHFREE_RETURN_PATH, order_id=order_id),
            notify_url=self._webhook_url("cashfree"),
        )
        return CreateOrderResponse(order_id=result.order_id, payment_session_id=result.session_id)

    async def get_order_status(self, order_id: str) -> dict[str, Any]:
        """Return Cashfree's order object unmodified."""
        return await self.cashfree.get_order(order_id)

    # === PhonePe ===

    async def create_phonepe_payment(self, request: CreateOrderRequest) -> PhonePePaymentResponse:
        transaction_id = new_order_id("MT")
        result = await self.phonepe.create_order(
            amount=request.amount,
            currency=request.currency,
            order_id=transaction_id,
            customer=self._customer_details(request.customer),
            return_url=self._frontend_url(
                self.settings.PHONEPE_REDIRECT_PATH, transaction_id=transaction_id
            ),
            notify_url=self._webhook_url("phonepe"),
        )
        return PhonePePaymentResponse(
            merchant_transaction_id=result.order_id,
            redirect_url=result.redirect_url,
        )

    async def get_phonepe_status(self, merchant_transaction_id: str) -> dict[str, Any]:
        return await self.phonepe.get_order(merchant_transaction_id)

    # === PayPal ===

    async def create_paypal_order(self, request: PayPalOrderRequest) -> PayPalOrderResponse:
        result = await self.paypal.create_order(
            amount=request.amount,
            currency=request.currency,
            order_id=new_order_id(),
            return_url=request.return_url,
            cancel_url=request.cancel_url,
        )
        return PayPalOrderResponse(
            order_id=result.order_id,
            approve_url=result.redirect_url,
            status=result.status,
        )

    async def capture_paypal_order(self, order_id: str) -> dict[str, Any]:
        result = await self.paypal.capture_order(order_id)
        logger.info("PayPal order captured id=%s status=%s", order_id, result.get("status"))
        return result
