"""Webhook handlers for payment providers."""

from .cashfree import CashfreeWebhookHandler
from .dedupe import ProcessedEvents
from .phonepe import PhonePeCallbackHandler

__all__ = [
    "CashfreeWebhookHandler",
    "PhonePeCallbackHandler",
    "ProcessedEvents",
]
