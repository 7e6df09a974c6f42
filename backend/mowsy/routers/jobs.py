"""Jobs router."""

from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from mowsy.core.config import Settings, get_settings
from mowsy.core.database import get_db
from mowsy.core.security import (
    AuthenticatedUser,
    get_current_user,
    get_optional_user,
    require_insurance_verified,
)
from mowsy.models.enums import JobCategory, JobStatus, Visibility
from mowsy.schemas.base import MessageResponse, PageParams
from mowsy.schemas.job import (
    ApplicationStatusUpdate,
    JobApplicationCreate,
    JobApplicationResponse,
    JobCompleteRequest,
    JobCreate,
    JobResponse,
    JobUpdate,
)
from mowsy.services.geocoding import GeocodioService, get_geocoding_service
from mowsy.services.jobs import JobFilters, JobService

router = APIRouter(prefix="/jobs", tags=["jobs"])


def get_job_service(
    db: AsyncSession = Depends(get_db),
    geocoder: GeocodioService = Depends(get_geocoding_service),
) -> JobService:
    return JobService(db, geocoder)


@router.get("", response_model=List[JobResponse])
async def list_jobs(
    visibility: Optional[Visibility] = None,
    zip_code: Optional[str] = None,
    school_district: Optional[str] = None,
    category: Optional[JobCategory] = None,
    status_filter: Optional[JobStatus] = Query(default=None, alias="status"),
    min_price: Optional[Decimal] = None,
    max_price: Optional[Decimal] = None,
    filter: Optional[bool] = None,
    page: int = 1,
    limit: int = 20,
    service: JobService = Depends(get_job_service),
    current_user: Optional[AuthenticatedUser] = Depends(get_optional_user),
    settings: Settings = Depends(get_settings),
):
    """
    Browse jobs, newest first.

    With ``filter=true`` and a signed-in caller, only jobs matching the
    caller's zip code or school district are returned, excluding their own.
    """
    filters = JobFilters(
        visibility=visibility,
        zip_code=zip_code,
        district=school_district,
        category=category,
        status=status_filter,
        min_price=min_price,
        max_price=max_price,
    )
    apply_filter = settings.listing_filter_default if filter is None else filter
    jobs = await service.list_jobs(
        filters,
        PageParams(page=page, limit=limit),
        viewer_id=current_user.user_id if current_user else None,
        apply_filter=apply_filter,
    )
    return [JobResponse.model_validate(j) for j in jobs]


@router.get("/my", response_model=List[JobResponse])
async def list_my_jobs(
    service: JobService = Depends(get_job_service),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    jobs = await service.list_user_jobs(current_user.user_id)
    return [JobResponse.model_validate(j) for j in jobs]


@router.post("", response_model=JobResponse, status_code=status.HTTP_201_CREATED)
async def create_job(
    data: JobCreate,
    service: JobService = Depends(get_job_service),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    """Post a job. Location defaults to the owner's, refined by geocoding the job address."""
    job = await service.create_job(current_user.user_id, data)
    return JobResponse.model_validate(job)


@router.get("/{job_id}", response_model=JobResponse)
async def get_job(
    job_id: int,
    service: JobService = Depends(get_job_service),
):
    job = await service.get_job(job_id)
    return JobResponse.model_validate(job)


@router.put("/{job_id}", response_model=JobResponse)
async def update_job(
    job_id: int,
    data: JobUpdate,
    service: JobService = Depends(get_job_service),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    job = await service.update_job(job_id, current_user.user_id, data)
    return JobResponse.model_validate(job)


@router.delete("/{job_id}", response_model=MessageResponse)
async def delete_job(
    job_id: int,
    service: JobService = Depends(get_job_service),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    await service.delete_job(job_id, current_user.user_id)
    return MessageResponse(message="Job deleted successfully")


@router.post("/{job_id}/cancel", response_model=JobResponse)
async def cancel_job(
    job_id: int,
    service: JobService = Depends(get_job_service),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    job = await service.cancel_job(job_id, current_user.user_id)
    return JobResponse.model_validate(job)


@router.post(
    "/{job_id}/apply",
    response_model=JobApplicationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def apply_for_job(
    job_id: int,
    data: JobApplicationCreate,
    service: JobService = Depends(get_job_service),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    application = await service.apply(job_id, current_user.user_id, data.message)
    return JobApplicationResponse.model_validate(application)


@router.get("/{job_id}/applications", response_model=List[JobApplicationResponse])
async def list_applications(
    job_id: int,
    service: JobService = Depends(get_job_service),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    """List applications for a job (owner only)."""
    applications = await service.list_applications(job_id, current_user.user_id)
    return [JobApplicationResponse.model_validate(a) for a in applications]


@router.put("/{job_id}/applications/{application_id}", response_model=JobApplicationResponse)
async def update_application_status(
    job_id: int,
    application_id: int,
    data: ApplicationStatusUpdate,
    service: JobService = Depends(get_job_service),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    """Accept or reject an application. Accepting starts the job."""
    application = await service.update_application_status(
        job_id, application_id, current_user.user_id, data.status
    )
    return JobApplicationResponse.model_validate(application)


@router.post("/{job_id}/complete", response_model=JobResponse)
async def complete_job(
    job_id: int,
    data: JobCompleteRequest,
    service: JobService = Depends(get_job_service),
    current_user: AuthenticatedUser = Depends(require_insurance_verified),
):
    """Mark an in-progress job completed (requires verified insurance)."""
    job = await service.complete_job(job_id, current_user.user_id, data.image_urls)
    return JobResponse.model_validate(job)
