"""PhonePe server-to-server callback handler."""

from __future__ import annotations

import logging

from ..providers.phonepe import PhonePeProvider
from .dedupe import ProcessedEvents

logger = logging.getLogger(__name__)


class PhonePeCallbackHandler:
    """Verifies PhonePe callbacks and records the payment outcome.

    PhonePe carries no customer email, so nothing is mailed from here.
    """

    def __init__(self, provider: PhonePeProvider, processed: ProcessedEvents):
        self.provider = provider
        self.processed = processed

    async def handle(self, encoded_response: str | None, x_verify: str | None) -> dict[str, str]:
        event = self.provider.verify_callback(encoded_response, x_verify)
        code = event.get("code")
        data = event.get("data") or {}
        transaction_id = data.get("merchantTransactionId")

        if transaction_id:
            if not self.processed.claim(f"phonepe:{transaction_id}:{code}"):
                return {"status": "duplicate"}
        else:
            logger.warning("PhonePe callback without merchantTransactionId code=%s", code)

        if code == "PAYMENT_SUCCESS":
            logger.info(
                "PhonePe payment succeeded txn=%s amount_paise=%s",
                transaction_id,
                data.get("amount"),
            )
        else:
            logger.warning("PhonePe payment not completed txn=%s code=%s", transaction_id, code)

        return {"status": "success"}
