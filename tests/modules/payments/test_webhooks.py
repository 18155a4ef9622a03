"""Tests for payment webhook handlers."""

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from payrelay_api.modules.payments.providers import (
    CashfreeProvider,
    PhonePeProvider,
    WebhookVerificationError,
)
from payrelay_api.modules.payments.providers.phonepe import encode_payload
from payrelay_api.modules.payments.webhooks import (
    CashfreeWebhookHandler,
    PhonePeCallbackHandler,
    ProcessedEvents,
)

TIMESTAMP = "1700000000"


@pytest.fixture
def cashfree_provider():
    return CashfreeProvider(credentials={"client_id": "cf_id", "client_secret": "cf_secret"})


@pytest.fixture
def notifier():
    mock = MagicMock()
    mock.send_payment_confirmation = AsyncMock(return_value=True)
    return mock


@pytest.fixture
def processed():
    return ProcessedEvents(maxsize=16)


def _signed(provider: CashfreeProvider, event: dict) -> tuple[bytes, str]:
    body = json.dumps(event).encode()
    return body, provider.compute_webhook_signature(TIMESTAMP, body)


class TestCashfreeWebhookHandler:
    """Test suite for Cashfree webhook handler."""

    @pytest.fixture
    def success_event(self):
        return {
            "type": "PAYMENT_SUCCESS_WEBHOOK",
            "event_time": "2024-01-01T10:00:00+05:30",
            "data": {
                "order": {"order_id": "order_1", "order_amount": 499.0, "order_currency": "INR"},
                "payment": {"cf_payment_id": 12376123, "payment_status": "SUCCESS"},
                "customer_details": {
                    "customer_name": "Asha",
                    "customer_email": "asha@example.com",
                    "customer_phone": "9999999999",
                },
            },
        }

    @pytest.mark.asyncio
    async def test_handle_payment_success(self, cashfree_provider, notifier, processed, success_event):
        handler = CashfreeWebhookHandler(cashfree_provider, notifier, processed)
        body, signature = _signed(cashfree_provider, success_event)

        result = await handler.handle(body, signature, TIMESTAMP)

        assert result["status"] == "success"
        notifier.send_payment_confirmation.assert_awaited_once_with(
            to="asha@example.com",
            order_id="order_1",
            amount=499.0,
            currency="INR",
            customer_name="Asha",
        )

    @pytest.mark.asyncio
    async def test_handle_duplicate_webhook(self, cashfree_provider, notifier, processed, success_event):
        handler = CashfreeWebhookHandler(cashfree_provider, notifier, processed)
        body, signature = _signed(cashfree_provider, success_event)

        first = await handler.handle(body, signature, TIMESTAMP)
        second = await handler.handle(body, signature, TIMESTAMP)

        assert first["status"] == "success"
        assert second["status"] == "duplicate"
        assert notifier.send_payment_confirmation.await_count == 1

    @pytest.mark.asyncio
    async def test_handle_failed_payment(self, cashfree_provider, notifier, processed):
        handler = CashfreeWebhookHandler(cashfree_provider, notifier, processed)
        body, signature = _signed(
            cashfree_provider,
            {
                "type": "PAYMENT_FAILED_WEBHOOK",
                "data": {
                    "order": {"order_id": "order_2"},
                    "payment": {"payment_status": "FAILED", "payment_message": "Insufficient funds"},
                },
            },
        )

        result = await handler.handle(body, signature, TIMESTAMP)

        assert result["status"] == "success"
        notifier.send_payment_confirmation.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_event_is_ignored(self, cashfree_provider, notifier, processed):
        handler = CashfreeWebhookHandler(cashfree_provider, notifier, processed)
        body, signature = _signed(cashfree_provider, {"type": "REFUND_STATUS_WEBHOOK", "data": {}})

        result = await handler.handle(body, signature, TIMESTAMP)

        assert result["status"] == "ignored"

    @pytest.mark.asyncio
    async def test_notifier_failure_is_reported(self, cashfree_provider, notifier, processed, success_event):
        notifier.send_payment_confirmation.side_effect = OSError("smtp down")
        handler = CashfreeWebhookHandler(cashfree_provider, notifier, processed)
        body, signature = _signed(cashfree_provider, success_event)

        result = await handler.handle(body, signature, TIMESTAMP)

        assert result == {"status": "error", "message": "smtp down"}
        # Released, so the redelivery that follows the 500 is processed again
        assert not processed.seen("cashfree:12376123")

        notifier.send_payment_confirmation.side_effect = None
        retried = await handler.handle(body, signature, TIMESTAMP)
        assert retried["status"] == "success"

    @pytest.mark.asyncio
    async def test_concurrent_duplicates_send_one_email(self, cashfree_provider, processed, success_event):
        async def slow_send(**kwargs):
            await asyncio.sleep(0.05)
            return True

        notifier = MagicMock()
        notifier.send_payment_confirmation = AsyncMock(side_effect=slow_send)
        handler = CashfreeWebhookHandler(cashfree_provider, notifier, processed)
        body, signature = _signed(cashfree_provider, success_event)

        results = await asyncio.gather(
            handler.handle(body, signature, TIMESTAMP),
            handler.handle(body, signature, TIMESTAMP),
        )

        assert sorted(r["status"] for r in results) == ["duplicate", "success"]
        assert notifier.send_payment_confirmation.await_count == 1

    @pytest.mark.asyncio
    async def test_event_without_identifiers_is_not_deduplicated(self, cashfree_provider, notifier, processed):
        handler = CashfreeWebhookHandler(cashfree_provider, notifier, processed)
        body, signature = _signed(
            cashfree_provider,
            {
                "type": "PAYMENT_SUCCESS_WEBHOOK",
                "data": {"customer_details": {"customer_email": "asha@example.com"}},
            },
        )

        first = await handler.handle(body, signature, TIMESTAMP)
        second = await handler.handle(body, signature, TIMESTAMP)

        assert first["status"] == "success"
        assert second["status"] == "success"
        assert notifier.send_payment_confirmation.await_count == 2
        assert not processed.seen("cashfree:None")

    @pytest.mark.asyncio
    async def test_invalid_signature_rejected(self, cashfree_provider, notifier, processed, success_event):
        handler = CashfreeWebhookHandler(cashfree_provider, notifier, processed)
        body, _ = _signed(cashfree_provider, success_event)

        with pytest.raises(WebhookVerificationError):
            await handler.handle(body, "forged", TIMESTAMP)
        notifier.send_payment_confirmation.assert_not_awaited()


class TestPhonePeCallbackHandler:
    """Test suite for PhonePe callback handler."""

    @pytest.fixture
    def phonepe_provider(self):
        return PhonePeProvider(credentials={"merchant_id": "M1", "salt_key": "salt", "salt_index": 2})

    @pytest.mark.asyncio
    async def test_handle_payment_success(self, phonepe_provider, processed):
        handler = PhonePeCallbackHandler(phonepe_provider, processed)
        encoded = encode_payload(
            {"code": "PAYMENT_SUCCESS", "data": {"merchantTransactionId": "MT_1", "amount": 49900}}
        )

        result = await handler.handle(encoded, phonepe_provider.checksum(encoded))
        duplicate = await handler.handle(encoded, phonepe_provider.checksum(encoded))

        assert result["status"] == "success"
        assert duplicate["status"] == "duplicate"

    @pytest.mark.asyncio
    async def test_checksum_uses_salt_index(self, phonepe_provider, processed):
        handler = PhonePeCallbackHandler(phonepe_provider, processed)
        encoded = encode_payload({"code": "PAYMENT_ERROR", "data": {"merchantTransactionId": "MT_2"}})
        checksum = phonepe_provider.checksum(encoded)
        assert checksum.endswith("###2")

        with pytest.raises(WebhookVerificationError):
            await handler.handle(encoded, checksum.replace("###2", "###1"))

    @pytest.mark.asyncio
    async def test_missing_payload_rejected(self, phonepe_provider, processed):
        handler = PhonePeCallbackHandler(phonepe_provider, processed)

        with pytest.raises(WebhookVerificationError):
            await handler.handle(None, "abc###2")


class TestProcessedEvents:
    def test_oldest_keys_are_evicted(self):
        processed = ProcessedEvents(maxsize=2)
        processed.claim("a")
        processed.claim("b")
        processed.claim("c")

        assert not processed.seen("a")
        assert processed.seen("b")
        assert processed.seen("c")

    def test_claim_is_granted_once(self):
        processed = ProcessedEvents()

        assert processed.claim("a") is True
        assert processed.claim("a") is False

    def test_release_allows_new_claim(self):
        processed = ProcessedEvents()
        processed.claim("a")
        processed.release("a")

        assert processed.claim("a") is True
        processed.release("missing")

    def test_clear(self):
        processed = ProcessedEvents()
        processed.claim("a")
        processed.clear()
        assert not processed.seen("a")
