"""Rental window validation, pricing and conflict detection."""

import logging
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from mowsy.models.enums import RentalStatus
from mowsy.models.equipment import EquipmentRental
from mowsy.services.errors import StateConflict, ValidationFailed

logger = logging.getLogger(__name__)

# Statuses that hold the equipment for their date range
BLOCKING_STATUSES = frozenset({RentalStatus.APPROVED, RentalStatus.ACTIVE})

CONFLICT_MESSAGE = "equipment is not available for the selected dates"

_CENTS = Decimal("0.01")


def ranges_overlap(start1: datetime, end1: datetime, start2: datetime, end2: datetime) -> bool:
    """Inclusive overlap: ranges sharing a boundary day conflict."""
    return start1 <= end2 and end1 >= start2


def validate_rental_window(start: datetime, end: datetime, now: Optional[datetime] = None) -> None:
    now = now or datetime.utcnow()
    if start < now:
        raise ValidationFailed("start date cannot be in the past")
    if end < start:
        raise ValidationFailed("end date cannot be before start date")


def rental_day_count(start: datetime, end: datetime) -> int:
    """Days billed for a rental, counting both boundary days."""
    hours = (end - start).total_seconds() / 3600
    return int(hours // 24) + 1


def rental_total_price(start: datetime, end: datetime, daily_rate: Decimal) -> Decimal:
    total = Decimal(rental_day_count(start, end)) * Decimal(daily_rate)
    return total.quantize(_CENTS, rounding=ROUND_HALF_UP)


async def has_conflict(
    db: AsyncSession,
    equipment_id: int,
    start: datetime,
    end: datetime,
    statuses: Iterable[RentalStatus] = BLOCKING_STATUSES,
    exclude_rental_id: Optional[int] = None,
) -> bool:
    """True when a persisted rental in ``statuses`` overlaps [start, end]."""
    query = select(EquipmentRental.id).where(
        EquipmentRental.equipment_id == equipment_id,
        EquipmentRental.status.in_(list(statuses)),
        EquipmentRental.start_date <= end,
        EquipmentRental.end_date >= start,
    )
    if exclude_rental_id is not None:
        query = query.where(EquipmentRental.id != exclude_rental_id)

    result = await db.execute(query.limit(1))
    return result.scalar_one_or_none() is not None


async def ensure_available(
    db: AsyncSession,
    equipment_id: int,
    start: datetime,
    end: datetime,
    exclude_rental_id: Optional[int] = None,
) -> None:
    if await has_conflict(db, equipment_id, start, end, exclude_rental_id=exclude_rental_id):
        logger.info(
            "[RENTALS] Conflict on equipment %s for %s..%s",
            equipment_id,
            start.date(),
            end.date(),
        )
        raise StateConflict(CONFLICT_MESSAGE)
