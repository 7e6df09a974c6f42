"""Admin operations: platform stats, user moderation and listing removal."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from mowsy.models.enums import JobStatus, PaymentStatus, RentalStatus
from mowsy.models.equipment import Equipment, EquipmentRental
from mowsy.models.job import Job
from mowsy.models.payment import Payment
from mowsy.models.user import User
from mowsy.schemas.admin import AdminStats
from mowsy.schemas.base import PageParams
from mowsy.services.errors import NotFound, StateConflict, ValidationFailed
from mowsy.services.rentals import BLOCKING_STATUSES

logger = logging.getLogger(__name__)


@dataclass
class UserFilters:
    is_active: Optional[bool] = None
    insurance_verified: Optional[bool] = None
    zip_code: Optional[str] = None
    school_district: Optional[str] = None


class AdminService:
    """Service behind the shared-secret admin routes."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _count(self, model, *conditions) -> int:
        query = select(func.count()).select_from(model)
        if conditions:
            query = query.where(*conditions)
        result = await self.db.execute(query)
        return int(result.scalar_one())

    async def get_stats(self) -> AdminStats:
        return AdminStats(
            total_users=await self._count(User),
            active_users=await self._count(User, User.is_active.is_(True)),
            verified_insurance_users=await self._count(User, User.insurance_verified.is_(True)),
            total_jobs=await self._count(Job),
            open_jobs=await self._count(Job, Job.status == JobStatus.OPEN),
            completed_jobs=await self._count(Job, Job.status == JobStatus.COMPLETED),
            total_equipment=await self._count(Equipment),
            available_equipment=await self._count(Equipment, Equipment.is_available.is_(True)),
            total_rentals=await self._count(EquipmentRental),
            active_rentals=await self._count(EquipmentRental, EquipmentRental.status == RentalStatus.ACTIVE),
            completed_rentals=await self._count(
                EquipmentRental, EquipmentRental.status == RentalStatus.COMPLETED
            ),
            total_payments=await self._count(Payment),
            successful_payments=await self._count(Payment, Payment.status == PaymentStatus.SUCCEEDED),
        )

    async def list_users(self, filters: UserFilters, page: PageParams) -> list[User]:
        page = page.normalized()
        query = select(User)

        if filters.is_active is not None:
            query = query.where(User.is_active.is_(filters.is_active))
        if filters.insurance_verified is not None:
            query = query.where(User.insurance_verified.is_(filters.insurance_verified))
        if filters.zip_code:
            query = query.where(User.zip_code == filters.zip_code)
        if filters.school_district:
            query = query.where(User.elementary_school_district_name == filters.school_district)

        query = query.order_by(User.created_at.desc(), User.id.desc())
        result = await self.db.execute(query.offset(page.offset).limit(page.limit))
        return list(result.scalars().all())

    async def _get_user(self, user_id: int) -> User:
        user = await self.db.get(User, user_id)
        if user is None:
            raise NotFound("user not found")
        return user

    async def set_user_active(self, user_id: int, is_active: bool) -> User:
        user = await self._get_user(user_id)
        user.is_active = is_active
        await self.db.commit()
        await self.db.refresh(user)
        logger.info(f"Admin set user {user_id} is_active={is_active}")
        return user

    async def verify_insurance(self, user_id: int) -> User:
        user = await self._get_user(user_id)
        if not user.insurance_document_url:
            raise ValidationFailed("user has not uploaded insurance document")

        user.insurance_verified = True
        user.insurance_verified_at = datetime.utcnow()
        await self.db.commit()
        await self.db.refresh(user)
        logger.info(f"Admin verified insurance for user {user_id}")
        return user

    async def remove_job(self, job_id: int) -> None:
        job = await self.db.get(Job, job_id)
        if job is None:
            raise NotFound("job not found")
        await self.db.delete(job)
        await self.db.commit()
        logger.info(f"Admin removed job {job_id}")

    async def remove_equipment(self, equipment_id: int) -> None:
        equipment = await self.db.get(Equipment, equipment_id)
        if equipment is None:
            raise NotFound("equipment not found")

        result = await self.db.execute(
            select(EquipmentRental.id)
            .where(
                EquipmentRental.equipment_id == equipment_id,
                EquipmentRental.status.in_(list(BLOCKING_STATUSES)),
            )
            .limit(1)
        )
        if result.scalar_one_or_none() is not None:
            raise StateConflict("cannot remove equipment with active rentals")

        await self.db.delete(equipment)
        await self.db.commit()
        logger.info(f"Admin removed equipment {equipment_id}")
