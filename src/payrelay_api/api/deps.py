from fastapi import Depends, Request

from ..core.config import Settings
from ..modules.notifications import EmailNotifier
from ..modules.payments.service import PaymentService
from ..modules.payments.webhooks import (
    CashfreeWebhookHandler,
    PhonePeCallbackHandler,
    ProcessedEvents,
)


def get_settings_dep(request: Request) -> Settings:
    # Settings the app was built with, so tests can inject their own
    return request.app.state.settings


def get_processed_events(request: Request) -> ProcessedEvents:
    return request.app.state.processed_events


def get_payment_service(settings: Settings = Depends(get_settings_dep)) -> PaymentService:
    return PaymentService(settings)


def get_email_notifier(settings: Settings = Depends(get_settings_dep)) -> EmailNotifier:
    return EmailNotifier(settings)


def get_cashfree_webhook_handler(
    service: PaymentService = Depends(get_payment_service),
    notifier: EmailNotifier = Depends(get_email_notifier),
    processed: ProcessedEvents = Depends(get_processed_events),
) -> CashfreeWebhookHandler:
    return CashfreeWebhookHandler(service.cashfree, notifier, processed)


def get_phonepe_callback_handler(
    service: PaymentService = Depends(get_payment_service),
    processed: ProcessedEvents = Depends(get_processed_events),
) -> PhonePeCallbackHandler:
    return PhonePeCallbackHandler(service.phonepe, processed)
