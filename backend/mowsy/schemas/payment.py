"""Payment schemas."""

from decimal import Decimal

from pydantic import Field

from mowsy.models.enums import PaymentStatus, PaymentType
from mowsy.schemas.base import BaseSchema, IDMixin, TimestampMixin


class CreateIntentRequest(BaseSchema):
    amount: Decimal
    currency: str = Field(default="usd", min_length=3, max_length=3)
    type: str
    related_id: int


class PaymentResponse(BaseSchema, IDMixin, TimestampMixin):
    user_id: int
    stripe_payment_intent_id: str
    amount: float
    currency: str
    type: PaymentType
    related_id: int
    status: PaymentStatus


class CreateIntentResponse(BaseSchema):
    """Client secret for the browser to confirm the intent with Stripe."""

    client_secret: str
    payment_intent_id: str
    payment: PaymentResponse


class ConfirmPaymentRequest(BaseSchema):
    payment_id: int


class PaymentStatusResponse(BaseSchema):
    payment: PaymentResponse
    external_status: str
    rental_activated: bool = False
