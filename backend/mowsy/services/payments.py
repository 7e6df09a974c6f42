"""Payment intents and reconciliation with the payment processor.

A payment points at either a completed job or an approved rental. When the
processor reports a rental payment as succeeded, the rental becomes active.
Job payments have no such follow-up; completing a job is a separate owner
action.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

import stripe
from fastapi.concurrency import run_in_threadpool
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from mowsy.core.config import get_settings
from mowsy.models.enums import JobStatus, PaymentStatus, PaymentType, RentalStatus
from mowsy.models.equipment import EquipmentRental
from mowsy.models.job import Job
from mowsy.models.payment import Payment
from mowsy.models.user import User
from mowsy.schemas.base import PageParams
from mowsy.schemas.payment import CreateIntentRequest
from mowsy.services.errors import NotFound, UpstreamError, ValidationFailed
from mowsy.services.state_machine import can_transition

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class JobPayment:
    job_id: int

    @property
    def type(self) -> PaymentType:
        return PaymentType.JOB_PAYMENT

    @property
    def related_id(self) -> int:
        return self.job_id


@dataclass(frozen=True)
class RentalPayment:
    rental_id: int

    @property
    def type(self) -> PaymentType:
        return PaymentType.EQUIPMENT_RENTAL

    @property
    def related_id(self) -> int:
        return self.rental_id


PaymentTarget = Union[JobPayment, RentalPayment]


def payment_target(payment_type: Union[str, PaymentType], related_id: int) -> PaymentTarget:
    """Build the typed target from a stored or requested (type, related_id) pair."""
    try:
        kind = PaymentType(payment_type)
    except ValueError:
        raise ValidationFailed("invalid payment type")
    if kind == PaymentType.JOB_PAYMENT:
        return JobPayment(job_id=related_id)
    return RentalPayment(rental_id=related_id)


_EXTERNAL_STATUS_MAP = {
    "succeeded": PaymentStatus.SUCCEEDED,
    "canceled": PaymentStatus.CANCELLED,
    "processing": PaymentStatus.PENDING,
    "requires_payment_method": PaymentStatus.PENDING,
    "requires_confirmation": PaymentStatus.PENDING,
}


def map_intent_status(external_status: str) -> PaymentStatus:
    """Map a processor intent status onto ours. Unknown statuses count as failed."""
    return _EXTERNAL_STATUS_MAP.get(external_status, PaymentStatus.FAILED)


def to_cents(amount: Decimal) -> int:
    return int((Decimal(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


@dataclass
class IntentResult:
    id: str
    status: str
    client_secret: Optional[str] = None


class PaymentProcessor(ABC):
    """Abstract interface for payment processors."""

    @abstractmethod
    async def create_customer(self, email: str, name: str, user_id: int) -> str:
        """Create a billing customer and return its id."""

    @abstractmethod
    async def create_intent(
        self,
        amount_cents: int,
        currency: str,
        customer_id: str,
        metadata: dict[str, str],
    ) -> IntentResult:
        """Create a payment intent."""

    @abstractmethod
    async def retrieve_intent(self, intent_id: str) -> IntentResult:
        """Fetch the current state of a payment intent."""


class StripePaymentProcessor(PaymentProcessor):
    """Stripe implementation. SDK calls are blocking, so they run in the threadpool."""

    def __init__(self, api_key: Optional[str]):
        self.api_key = api_key

    def _require_key(self) -> str:
        if not self.api_key:
            raise UpstreamError("payment processor not configured")
        return self.api_key

    async def create_customer(self, email: str, name: str, user_id: int) -> str:
        api_key = self._require_key()
        try:
            customer = await run_in_threadpool(
                stripe.Customer.create,
                api_key=api_key,
                email=email,
                name=name,
                metadata={"user_id": str(user_id)},
            )
        except stripe.StripeError as e:
            logger.error(f"[PAYMENTS] Customer creation failed for user {user_id}: {e}")
            raise UpstreamError("failed to create payment customer")
        return customer.id

    async def create_intent(
        self,
        amount_cents: int,
        currency: str,
        customer_id: str,
        metadata: dict[str, str],
    ) -> IntentResult:
        api_key = self._require_key()
        try:
            intent = await run_in_threadpool(
                stripe.PaymentIntent.create,
                api_key=api_key,
                amount=amount_cents,
                currency=currency,
                customer=customer_id,
                automatic_payment_methods={"enabled": True},
                metadata=metadata,
            )
        except stripe.StripeError as e:
            logger.error(f"[PAYMENTS] Intent creation failed: {e}")
            raise UpstreamError("failed to create payment intent")
        return IntentResult(id=intent.id, status=intent.status, client_secret=intent.client_secret)

    async def retrieve_intent(self, intent_id: str) -> IntentResult:
        api_key = self._require_key()
        try:
            intent = await run_in_threadpool(stripe.PaymentIntent.retrieve, intent_id, api_key=api_key)
        except stripe.StripeError as e:
            logger.error(f"[PAYMENTS] Intent retrieval failed for {intent_id}: {e}")
            raise UpstreamError("failed to retrieve payment intent")
        return IntentResult(id=intent.id, status=intent.status, client_secret=intent.client_secret)


class PaymentService:
    """Service for creating, confirming and listing payments."""

    def __init__(self, db: AsyncSession, processor: PaymentProcessor):
        self.db = db
        self.processor = processor

    async def create_intent(self, user_id: int, data: CreateIntentRequest) -> tuple[Payment, str]:
        """Validate the target, then open a processor intent and record it as pending."""
        if data.amount <= 0:
            raise ValidationFailed("amount must be greater than 0")
        target = payment_target(data.type, data.related_id)

        user = await self.db.get(User, user_id)
        if user is None or not user.is_active:
            raise NotFound("user not found")

        await self._validate_target(user_id, target)

        if not user.stripe_customer_id:
            user.stripe_customer_id = await self.processor.create_customer(
                email=user.email,
                name=f"{user.first_name} {user.last_name}",
                user_id=user.id,
            )
            await self.db.commit()

        currency = (data.currency or "usd").lower()
        intent = await self.processor.create_intent(
            amount_cents=to_cents(data.amount),
            currency=currency,
            customer_id=user.stripe_customer_id,
            metadata={
                "user_id": str(user_id),
                "type": target.type.value,
                "related_id": str(target.related_id),
            },
        )

        payment = Payment(
            user_id=user_id,
            stripe_payment_intent_id=intent.id,
            amount=data.amount,
            currency=currency,
            type=target.type,
            related_id=target.related_id,
            status=PaymentStatus.PENDING,
        )
        self.db.add(payment)
        await self.db.commit()
        await self.db.refresh(payment)

        logger.info(f"[PAYMENTS] Created intent {intent.id} for {target}")
        return payment, intent.client_secret or ""

    async def _validate_target(self, user_id: int, target: PaymentTarget) -> None:
        if isinstance(target, JobPayment):
            job = await self.db.get(Job, target.job_id)
            if job is None or job.user_id != user_id or job.status != JobStatus.COMPLETED:
                raise ValidationFailed("job not found, not owned by user, or not completed")
        else:
            rental = await self.db.get(EquipmentRental, target.rental_id)
            if (
                rental is None
                or rental.renter_user_id != user_id
                or rental.status != RentalStatus.APPROVED
            ):
                raise ValidationFailed("rental not found, not owned by user, or not approved")

    async def confirm(self, user_id: int, payment_id: int) -> tuple[Payment, str, bool]:
        """Pull the intent status from the processor and reconcile it."""
        payment = await self.get_payment(user_id, payment_id)
        intent = await self.processor.retrieve_intent(payment.stripe_payment_intent_id)
        activated = await self.reconcile(payment, intent.status)
        return payment, intent.status, activated

    async def reconcile(self, payment: Payment, external_status: str) -> bool:
        """Store the mapped status; activate an approved rental on success.

        Returns whether a rental was activated. A failed activation is only
        logged: the payment status is already committed by then.
        """
        payment.status = map_intent_status(external_status)
        await self.db.commit()
        await self.db.refresh(payment)

        if payment.status != PaymentStatus.SUCCEEDED:
            return False

        target = payment_target(payment.type, payment.related_id)
        if not isinstance(target, RentalPayment):
            return False

        try:
            return await self._activate_rental(target.rental_id)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.warning(f"[PAYMENTS] Failed to activate rental {target.rental_id}: {e}")
            # Rollback expires the already-committed payment
            await self.db.refresh(payment)
            return False

    async def _activate_rental(self, rental_id: int) -> bool:
        rental = await self.db.get(EquipmentRental, rental_id)
        if rental is None:
            logger.warning(f"[PAYMENTS] Paid rental {rental_id} no longer exists")
            return False
        if not can_transition("rental", rental.status, RentalStatus.ACTIVE):
            logger.warning(
                f"[PAYMENTS] Rental {rental_id} is {rental.status.value}; not activating"
            )
            return False

        rental.status = RentalStatus.ACTIVE
        await self.db.commit()
        logger.info(f"[PAYMENTS] Rental {rental_id} activated by payment")
        return True

    async def history(self, user_id: int, page: PageParams) -> list[Payment]:
        page = page.normalized()
        result = await self.db.execute(
            select(Payment)
            .where(Payment.user_id == user_id)
            .order_by(Payment.created_at.desc(), Payment.id.desc())
            .offset(page.offset)
            .limit(page.limit)
        )
        return list(result.scalars().all())

    async def get_payment(self, user_id: int, payment_id: int) -> Payment:
        result = await self.db.execute(
            select(Payment).where(Payment.id == payment_id, Payment.user_id == user_id)
        )
        payment = result.scalar_one_or_none()
        if payment is None:
            raise NotFound("payment not found")
        return payment


def get_payment_processor() -> PaymentProcessor:
    return StripePaymentProcessor(get_settings().stripe_secret_key)
