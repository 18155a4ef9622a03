"""Base payment provider abstract class.

Every hosted-checkout provider inherits from BasePaymentProvider. Adapters
do no business logic of their own: they shape the vendor request, perform
one HTTP exchange and hand the vendor's answer back.
"""

from __future__ import annotations

import hmac
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

import httpx


class ProviderError(Exception):
    """A vendor call failed.

    Attributes:
        provider: Provider name (e.g. 'cashfree')
        status_code: Vendor HTTP status, None for transport failures
        payload: Vendor error body, relayed to the caller as-is
    """

    def __init__(
        self,
        provider: str,
        message: str,
        status_code: int | None = None,
        payload: Any = None,
    ) -> None:
        super().__init__(message)
        self.provider = provider
        self.message = message
        self.status_code = status_code
        self.payload = payload if payload is not None else {"message": message}


class ProviderConfigurationError(ProviderError):
    """Credentials for a provider are not configured."""

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(provider, message)


class WebhookVerificationError(ValueError):
    """Webhook signature or checksum does not match."""


def signatures_match(expected: str, received: str) -> bool:
    """Constant-time comparison of a computed signature with a header value.

    Header values may carry any byte, and ``hmac.compare_digest`` refuses
    non-ASCII ``str`` arguments, so both sides are compared as bytes.
    """
    return hmac.compare_digest(
        expected.encode("utf-8"),
        received.encode("utf-8", "surrogateescape"),
    )


@dataclass
class CustomerDetails:
    """Customer contact fields forwarded to the provider."""

    id: str
    email: str
    phone: str
    name: str | None = None


@dataclass
class PaymentOrderResult:
    """Result from creating an order/session with a provider.

    Attributes:
        order_id: Provider-side (or merchant) order reference
        session_id: Token the frontend SDK uses to open hosted checkout
        redirect_url: Hosted page URL, for redirect based providers
        status: Raw provider status
        amount: Order amount as sent
        currency: Order currency as sent
        raw: Full provider response
    """

    order_id: str
    session_id: str | None = None
    redirect_url: str | None = None
    status: str | None = None
    amount: float = 0.0
    currency: str = "INR"
    raw: dict[str, Any] = field(default_factory=dict)


class BasePaymentProvider(ABC):
    """Abstract base class for payment providers."""

    def __init__(
        self,
        credentials: dict[str, Any],
        mode: str = "test",
        config: dict[str, Any] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 15.0,
    ):
        """Initialize the payment provider.

        Args:
            credentials: Provider credentials (client ids, secrets, salts)
            mode: "test" or "live" mode
            config: Additional provider-specific configuration
            transport: Optional httpx transport, used to stub the vendor in tests
            timeout: Per-request timeout in seconds
        """
        self.credentials = credentials
        self.mode = mode
        self.config = config or {}
        self.transport = transport
        self.timeout = timeout

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name (e.g., 'cashfree', 'paypal')."""

    @abstractmethod
    def _get_base_url(self) -> str:
        """Return the vendor API base URL for the current mode."""

    @abstractmethod
    async def create_order(
        self,
        amount: float,
        currency: str,
        order_id: str,
        customer: CustomerDetails | None = None,
        return_url: str | None = None,
        notify_url: str | None = None,
    ) -> PaymentOrderResult:
        """Create an order/payment session with the provider.

        Raises:
            ProviderError: If the vendor rejects the request or is unreachable
        """

    @abstractmethod
    async def get_order(self, order_id: str) -> dict[str, Any]:
        """Fetch the provider's order object, unmodified.

        Raises:
            ProviderError: If the vendor call fails
        """

    def is_test_mode(self) -> bool:
        return self.mode == "test"

    def get_credential(self, key: str, default: Any = None) -> Any:
        return self.credentials.get(key, default)

    def get_config(self, key: str, default: Any = None) -> Any:
        return self.config.get(key, default)

    def require_credentials(self, *keys: str) -> list[Any]:
        """Return the named credentials, failing when any is missing."""
        values = [self.get_credential(key) for key in keys]
        missing = [key for key, value in zip(keys, values) if not value]
        if missing:
            raise ProviderConfigurationError(
                self.provider_name,
                f"{self.provider_name} credentials not configured: {', '.join(missing)}",
            )
        return values

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._get_base_url(),
            timeout=self.timeout,
            transport=self.transport,
        )

    async def _send(
        self,
        method: str,
        endpoint: str,
        *,
        headers: dict[str, str] | None = None,
        json: Any = None,
        content: str | bytes | None = None,
    ) -> dict[str, Any]:
        """Perform one vendor request and decode its JSON body.

        Raises:
            ProviderError: On non-2xx responses (vendor body kept) and
                transport failures
        """
        async with self._client() as client:
            try:
                response = await client.request(
                    method, endpoint, headers=headers, json=json, content=content
                )
                response.raise_for_status()
            except httpx.HTTPStatusError as exc:
                raise ProviderError(
                    self.provider_name,
                    f"{self.provider_name} API error: HTTP {exc.response.status_code}",
                    status_code=exc.response.status_code,
                    payload=_decode_body(exc.response),
                ) from exc
            except httpx.HTTPError as exc:
                raise ProviderError(
                    self.provider_name,
                    f"{self.provider_name} API unreachable: {exc}",
                ) from exc
        return _decode_body(response) if response.content else {}


def _decode_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return {"message": response.text}
