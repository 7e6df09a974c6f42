"""Payments router - Stripe payment intents and reconciliation."""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from mowsy.core.database import get_db
from mowsy.core.security import AuthenticatedUser, get_current_user
from mowsy.schemas.base import PageParams
from mowsy.schemas.payment import (
    ConfirmPaymentRequest,
    CreateIntentRequest,
    CreateIntentResponse,
    PaymentResponse,
    PaymentStatusResponse,
)
from mowsy.services.payments import PaymentProcessor, PaymentService, get_payment_processor

router = APIRouter(prefix="/payments", tags=["payments"])


def get_payment_service(
    db: AsyncSession = Depends(get_db),
    processor: PaymentProcessor = Depends(get_payment_processor),
) -> PaymentService:
    return PaymentService(db, processor)


@router.post(
    "/create-intent",
    response_model=CreateIntentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_payment_intent(
    data: CreateIntentRequest,
    service: PaymentService = Depends(get_payment_service),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    """Create a payment intent for a completed job or an approved rental."""
    payment, client_secret = await service.create_intent(current_user.user_id, data)
    return CreateIntentResponse(
        client_secret=client_secret,
        payment_intent_id=payment.stripe_payment_intent_id,
        payment=PaymentResponse.model_validate(payment),
    )


@router.post("/confirm", response_model=PaymentStatusResponse)
async def confirm_payment(
    data: ConfirmPaymentRequest,
    service: PaymentService = Depends(get_payment_service),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    """
    Reconcile a payment with its Stripe intent.

    A succeeded rental payment activates the approved rental.
    """
    payment, external_status, activated = await service.confirm(
        current_user.user_id, data.payment_id
    )
    return PaymentStatusResponse(
        payment=PaymentResponse.model_validate(payment),
        external_status=external_status,
        rental_activated=activated,
    )


@router.get("/history", response_model=List[PaymentResponse])
async def payment_history(
    page: int = 1,
    limit: int = 20,
    service: PaymentService = Depends(get_payment_service),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    payments = await service.history(current_user.user_id, PageParams(page=page, limit=limit))
    return [PaymentResponse.model_validate(p) for p in payments]


@router.get("/{payment_id}", response_model=PaymentResponse)
async def get_payment(
    payment_id: int,
    service: PaymentService = Depends(get_payment_service),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    payment = await service.get_payment(current_user.user_id, payment_id)
    return PaymentResponse.model_validate(payment)
