"""Payment provider implementations."""

from .base import (
    BasePaymentProvider,
    CustomerDetails,
    PaymentOrderResult,
    ProviderConfigurationError,
    ProviderError,
    WebhookVerificationError,
)
from .cashfree import CashfreeProvider
from .paypal import PayPalProvider
from .phonepe import PhonePeProvider

__all__ = [
    "BasePaymentProvider",
    "CustomerDetails",
    "PaymentOrderResult",
    "ProviderError",
    "ProviderConfigurationError",
    "WebhookVerificationError",
    "CashfreeProvider",
    "PayPalProvider",
    "PhonePeProvider",
]
