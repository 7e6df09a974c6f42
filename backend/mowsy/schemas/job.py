"""Job and job application schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import Field, field_validator

from mowsy.models.enums import ApplicationStatus, JobCategory, JobStatus, Visibility
from mowsy.schemas.base import BaseSchema, IDMixin, TimestampMixin, to_naive_utc
from mowsy.schemas.user import UserPublicProfile


class JobCreate(BaseSchema):
    """Create a job. Price rules are checked by the job service."""

    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    special_notes: Optional[str] = None
    category: JobCategory
    fixed_price: Decimal
    estimated_hours: Optional[float] = None
    address: Optional[str] = Field(default=None, max_length=255)
    visibility: Visibility
    scheduled_date: Optional[datetime] = None

    @field_validator("scheduled_date")
    @classmethod
    def normalize_scheduled_date(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(v) if v else v


class JobUpdate(BaseSchema):
    """Partial update; only allowed while the job is open."""

    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    special_notes: Optional[str] = None
    category: Optional[JobCategory] = None
    fixed_price: Optional[Decimal] = None
    estimated_hours: Optional[float] = None
    address: Optional[str] = Field(default=None, max_length=255)
    visibility: Optional[Visibility] = None
    scheduled_date: Optional[datetime] = None

    @field_validator("scheduled_date")
    @classmethod
    def normalize_scheduled_date(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(v) if v else v


class JobResponse(BaseSchema, IDMixin, TimestampMixin):
    user_id: int
    title: str
    description: Optional[str] = None
    special_notes: Optional[str] = None
    category: JobCategory
    fixed_price: float
    estimated_hours: Optional[float] = None
    address: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    zip_code: Optional[str] = None
    elementary_school_district_name: Optional[str] = None
    visibility: Visibility
    status: JobStatus
    scheduled_date: Optional[datetime] = None
    completion_image_urls: list[str] = Field(default_factory=list)
    user: Optional[UserPublicProfile] = Field(default=None, validation_alias="owner")


class JobApplicationCreate(BaseSchema):
    message: Optional[str] = Field(default=None, max_length=2000)


class ApplicationStatusUpdate(BaseSchema):
    status: ApplicationStatus


class JobApplicationResponse(BaseSchema, IDMixin):
    job_id: int
    user_id: int
    message: Optional[str] = None
    status: ApplicationStatus
    applied_at: datetime
    user: Optional[UserPublicProfile] = Field(default=None, validation_alias="applicant")


class JobCompleteRequest(BaseSchema):
    image_urls: list[str] = Field(default_factory=list)
