"""Payment Pydantic schemas for request/response validation."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Accepts and emits the camelCase keys the frontend uses."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Request Schemas


class Customer(CamelModel):
    """Customer contact details forwarded to the provider."""

    id: str | None = Field(default=None, description="Merchant customer id, generated when absent")
    name: str | None = None
    email: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)


class CreateOrderRequest(CamelModel):
    """Request to create a hosted-checkout order."""

    amount: float = Field(..., gt=0, description="Order amount")
    currency: str = Field(default="INR", min_length=3, max_length=3)
    customer: Customer


class PayPalOrderRequest(CamelModel):
    """Request to create a PayPal order."""

    amount: float = Field(..., gt=0)
    currency: str = Field(default="USD", min_length=3, max_length=3)
    return_url: str | None = Field(default=None, description="URL to return to after approval")
    cancel_url: str | None = Field(default=None, description="URL to return to if cancelled")


# Response Schemas


class CreateOrderResponse(CamelModel):
    """Cashfree order created; the frontend opens checkout with the session id."""

    order_id: str
    payment_session_id: str | None = None


class PhonePePaymentResponse(CamelModel):
    merchant_transaction_id: str
    redirect_url: str | None = None


class PayPalOrderResponse(CamelModel):
    order_id: str
    approve_url: str | None = None
    status: str | None = None


class WebhookAck(BaseModel):
    """Webhook processing outcome."""

    status: str
    message: str | None = None
