"""Job postings, applications and the job lifecycle."""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from mowsy.models.enums import ApplicationStatus, JobCategory, JobStatus, Visibility
from mowsy.models.job import Job, JobApplication
from mowsy.models.user import User
from mowsy.schemas.base import PageParams
from mowsy.schemas.job import JobCreate, JobUpdate
from mowsy.services.errors import (
    NotFound,
    PermissionDenied,
    ServiceError,
    StateConflict,
    ValidationFailed,
)
from mowsy.services.geocoding import GeocodioService, apply_location, copy_owner_location
from mowsy.services.listings import fetch_listings, load_viewer
from mowsy.services.state_machine import ensure_transition
from mowsy.services.validation import sanitize

logger = logging.getLogger(__name__)


@dataclass
class JobFilters:
    visibility: Optional[Visibility] = None
    zip_code: Optional[str] = None
    district: Optional[str] = None
    category: Optional[JobCategory] = None
    status: Optional[JobStatus] = None
    min_price: Optional[Decimal] = None
    max_price: Optional[Decimal] = None


def _validate_pricing(fixed_price: Optional[Decimal], estimated_hours: Optional[float]) -> None:
    if fixed_price is not None and fixed_price <= 0:
        raise ValidationFailed("fixed price must be greater than 0")
    if estimated_hours is not None and estimated_hours < 0:
        raise ValidationFailed("estimated hours cannot be negative")


class JobService:
    """Service for jobs and job applications."""

    def __init__(self, db: AsyncSession, geocoder: Optional[GeocodioService] = None):
        self.db = db
        self.geocoder = geocoder

    async def create_job(self, owner_id: int, data: JobCreate) -> Job:
        owner = await self.db.get(User, owner_id)
        if owner is None or not owner.is_active:
            raise NotFound("user not found")
        _validate_pricing(data.fixed_price, data.estimated_hours)

        job = Job(
            user_id=owner_id,
            title=data.title,
            description=sanitize(data.description),
            special_notes=sanitize(data.special_notes),
            category=data.category,
            fixed_price=data.fixed_price,
            estimated_hours=data.estimated_hours,
            address=sanitize(data.address),
            visibility=data.visibility,
            status=JobStatus.OPEN,
            scheduled_date=data.scheduled_date,
            completion_image_urls=[],
        )
        copy_owner_location(job, owner)
        await self._geocode(job)

        self.db.add(job)
        await self.db.commit()
        await self.db.refresh(job)
        return job

    async def list_jobs(
        self,
        filters: JobFilters,
        page: PageParams,
        viewer_id: Optional[int] = None,
        apply_filter: bool = False,
    ) -> list[Job]:
        """Browse jobs, open ones unless a status is asked for, newest first."""
        query = select(Job).where(Job.status == (filters.status or JobStatus.OPEN))

        if filters.visibility:
            query = query.where(Job.visibility == filters.visibility)
        if filters.zip_code:
            query = query.where(Job.zip_code == filters.zip_code)
        if filters.district:
            query = query.where(Job.elementary_school_district_name == filters.district)
        if filters.category:
            query = query.where(Job.category == filters.category)
        if filters.min_price is not None:
            query = query.where(Job.fixed_price >= filters.min_price)
        if filters.max_price is not None:
            query = query.where(Job.fixed_price <= filters.max_price)

        query = query.order_by(Job.created_at.desc(), Job.id.desc())

        viewer = await load_viewer(self.db, viewer_id) if apply_filter else None
        return await fetch_listings(self.db, query, viewer, apply_filter, page)

    async def list_user_jobs(self, user_id: int) -> list[Job]:
        result = await self.db.execute(
            select(Job)
            .where(Job.user_id == user_id)
            .order_by(Job.created_at.desc(), Job.id.desc())
        )
        return list(result.scalars().all())

    async def get_job(self, job_id: int) -> Job:
        job = await self.db.get(Job, job_id)
        if job is None:
            raise NotFound("job not found")
        return job

    async def _get_owned_job(self, job_id: int, user_id: int, action: str) -> Job:
        job = await self.get_job(job_id)
        if job.user_id != user_id:
            raise PermissionDenied(f"you don't have permission to {action} this job")
        return job

    async def update_job(self, job_id: int, user_id: int, data: JobUpdate) -> Job:
        job = await self._get_owned_job(job_id, user_id, "update")
        if job.status != JobStatus.OPEN:
            raise StateConflict("cannot update job that is not open")

        updates = data.model_dump(exclude_unset=True, exclude_none=True)
        _validate_pricing(updates.get("fixed_price"), updates.get("estimated_hours"))

        for field in ("description", "special_notes", "address"):
            if field in updates:
                updates[field] = sanitize(updates[field])
        for field, value in updates.items():
            if value is not None:
                setattr(job, field, value)

        if updates.get("address"):
            await self._geocode(job)

        await self.db.commit()
        await self.db.refresh(job)
        return job

    async def delete_job(self, job_id: int, user_id: int) -> None:
        job = await self._get_owned_job(job_id, user_id, "delete")
        if job.status != JobStatus.OPEN:
            raise StateConflict("cannot delete job that is not open")

        await self.db.delete(job)
        await self.db.commit()

    async def cancel_job(self, job_id: int, user_id: int) -> Job:
        job = await self._get_owned_job(job_id, user_id, "cancel")
        ensure_transition("job", job.status, JobStatus.CANCELLED)

        job.status = JobStatus.CANCELLED
        await self.db.commit()
        await self.db.refresh(job)
        return job

    async def apply(self, job_id: int, user_id: int, message: Optional[str]) -> JobApplication:
        job = await self.db.get(Job, job_id)
        if job is None:
            raise NotFound("job not found or not accepting applications")
        if job.user_id == user_id:
            raise PermissionDenied("cannot apply for your own job")
        if job.status != JobStatus.OPEN:
            raise StateConflict("job not found or not accepting applications")

        existing = await self.db.execute(
            select(JobApplication.id).where(
                JobApplication.job_id == job_id,
                JobApplication.user_id == user_id,
            )
        )
        if existing.scalar_one_or_none() is not None:
            raise StateConflict("you have already applied for this job")

        application = JobApplication(
            job_id=job_id,
            user_id=user_id,
            message=sanitize(message),
            status=ApplicationStatus.PENDING,
        )
        self.db.add(application)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise StateConflict("you have already applied for this job")

        await self.db.refresh(application)
        return application

    async def list_applications(self, job_id: int, user_id: int) -> list[JobApplication]:
        await self._get_owned_job(job_id, user_id, "view applications for")
        result = await self.db.execute(
            select(JobApplication)
            .where(JobApplication.job_id == job_id)
            .order_by(JobApplication.applied_at.desc(), JobApplication.id.desc())
        )
        return list(result.scalars().all())

    async def update_application_status(
        self,
        job_id: int,
        application_id: int,
        user_id: int,
        status: ApplicationStatus,
    ) -> JobApplication:
        """Accept or reject a pending application.

        Accepting moves an open job to in_progress. A job already in progress
        is left as is, so accepting a second applicant does not fail. Other
        pending applications are not touched.
        """
        job = await self._get_owned_job(job_id, user_id, "update applications for")

        result = await self.db.execute(
            select(JobApplication).where(
                JobApplication.id == application_id,
                JobApplication.job_id == job_id,
            )
        )
        application = result.scalar_one_or_none()
        if application is None:
            raise NotFound("application not found")

        ensure_transition(
            "application",
            application.status,
            status,
            f"cannot change application from {application.status.value} to {status.value}",
        )

        if status == ApplicationStatus.ACCEPTED:
            if job.status == JobStatus.OPEN:
                job.status = JobStatus.IN_PROGRESS
            elif job.status != JobStatus.IN_PROGRESS:
                raise StateConflict(f"cannot accept applications for a job that is {job.status.value}")

        application.status = status
        await self.db.commit()
        await self.db.refresh(application)
        return application

    async def complete_job(self, job_id: int, user_id: int, image_urls: list[str]) -> Job:
        job = await self._get_owned_job(job_id, user_id, "complete")
        if job.status != JobStatus.IN_PROGRESS:
            raise StateConflict("job must be in progress to complete")

        job.status = JobStatus.COMPLETED
        job.completion_image_urls = [url.strip() for url in image_urls if url.strip()]
        await self.db.commit()
        await self.db.refresh(job)
        return job

    async def _geocode(self, job: Job) -> None:
        if not job.address or self.geocoder is None:
            return
        try:
            result = await self.geocoder.geocode(job.address)
        except ServiceError as e:
            logger.warning(f"[GEOCODE] Failed to geocode job address: {e.message}")
            return
        apply_location(job, result)
