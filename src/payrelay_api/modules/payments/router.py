"""Payment API router."""

from typing import Any

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

from ...api.deps import (
    get_cashfree_webhook_handler,
    get_payment_service,
    get_phonepe_callback_handler,
)
from ...api.errors import provider_http_error
from .providers import ProviderError, WebhookVerificationError
from .schemas import (
    CreateOrderRequest,
    CreateOrderResponse,
    PayPalOrderRequest,
    PayPalOrderResponse,
    PhonePePaymentResponse,
    WebhookAck,
)
from .service import PaymentService
from .webhooks import CashfreeWebhookHandler, PhonePeCallbackHandler

router = APIRouter(tags=["payments"])


# ==== CASHFREE HOSTED CHECKOUT ====


@router.post(
    "/create-order",
    response_model=CreateOrderResponse,
    summary="Create Cashfree order",
    description="Create an order and return the payment session id for hosted checkout",
)
async def create_order(
    request: CreateOrderRequest,
    service: PaymentService = Depends(get_payment_service),
) -> CreateOrderResponse:
    """Create a Cashfree order.

    The frontend passes ``paymentSessionId`` to the Cashfree JS SDK, which
    opens the hosted checkout page.

    Raises:
        HTTPException: 500 with Cashfree's error body when the order fails
    """
    try:
        return await service.create_order(request)
    except ProviderError as e:
        raise provider_http_error(e, "Failed to create order") from e


@router.get(
    "/order/{order_id}",
    summary="Get Cashfree order status",
    description="Return Cashfree's order object unmodified",
)
async def get_order_status(
    order_id: str,
    service: PaymentService = Depends(get_payment_service),
) -> dict[str, Any]:
    try:
        return await service.get_order_status(order_id)
    except ProviderError as e:
        raise provider_http_error(e, "Failed to fetch order status") from e


# ==== PHONEPE ====


@router.post(
    "/phonepe/pay",
    response_model=PhonePePaymentResponse,
    summary="Initiate PhonePe payment",
)
async def create_phonepe_payment(
    request: CreateOrderRequest,
    service: PaymentService = Depends(get_payment_service),
) -> PhonePePaymentResponse:
    try:
        return await service.create_phonepe_payment(request)
    except ProviderError as e:
        raise provider_http_error(e, "Failed to initiate PhonePe payment") from e


@router.get(
    "/phonepe/status/{merchant_transaction_id}",
    summary="Get PhonePe payment status",
)
async def get_phonepe_status(
    merchant_transaction_id: str,
    service: PaymentService = Depends(get_payment_service),
) -> dict[str, Any]:
    try:
        return await service.get_phonepe_status(merchant_transaction_id)
    except ProviderError as e:
        raise provider_http_error(e, "Failed to fetch PhonePe status") from e


# ==== PAYPAL ====


@router.post(
    "/paypal/create-order",
    response_model=PayPalOrderResponse,
    summary="Create PayPal order",
)
async def create_paypal_order(
    request: PayPalOrderRequest,
    service: PaymentService = Depends(get_payment_service),
) -> PayPalOrderResponse:
    try:
        return await service.create_paypal_order(request)
    except ProviderError as e:
        raise provider_http_error(e, "Failed to create PayPal order") from e


@router.post(
    "/paypal/capture/{order_id}",
    summary="Capture PayPal order",
)
async def capture_paypal_order(
    order_id: str,
    service: PaymentService = Depends(get_payment_service),
) -> dict[str, Any]:
    try:
        return await service.capture_paypal_order(order_id)
    except ProviderError as e:
        raise provider_http_error(e, "Failed to capture PayPal order") from e


# ==== WEBHOOK ENDPOINTS ====
# Authenticated by provider signatures, not by caller identity


@router.post(
    "/webhooks/cashfree",
    response_model=WebhookAck,
    summary="Cashfree webhook",
    include_in_schema=False,
)
async def cashfree_webhook(
    request: Request,
    x_webhook_signature: str | None = Header(None, alias="x-webhook-signature"),
    x_webhook_timestamp: str | None = Header(None, alias="x-webhook-timestamp"),
    handler: CashfreeWebhookHandler = Depends(get_cashfree_webhook_handler),
) -> dict[str, str]:
    """Handle Cashfree payment webhooks.

    Raises:
        HTTPException: 400 when the signature does not verify, 500 when
            processing fails after verification
    """
    body = await request.body()
    try:
        result = await handler.handle(body, x_webhook_signature, x_webhook_timestamp)
    except WebhookVerificationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    if result["status"] == "error":
        # Non-2xx makes Cashfree redeliver the event
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=result.get("message", "Webhook processing failed"),
        )
    return result


@router.post(
    "/webhooks/phonepe",
    response_model=WebhookAck,
    summary="PhonePe callback",
    include_in_schema=False,
)
async def phonepe_webhook(
    request: Request,
    x_verify: str | None = Header(None, alias="X-VERIFY"),
    handler: PhonePeCallbackHandler = Depends(get_phonepe_callback_handler),
) -> dict[str, str]:
    """Handle PhonePe server-to-server callbacks.

    Raises:
        HTTPException: 400 when the body is malformed or the checksum fails
    """
    try:
        body = await request.json()
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid JSON body") from e

    encoded = body.get("response") if isinstance(body, dict) else None
    if not isinstance(encoded, str):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="PhonePe callback body must carry a base64 'response' string",
        )
    try:
        return await handler.handle(encoded, x_verify)
    except WebhookVerificationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
