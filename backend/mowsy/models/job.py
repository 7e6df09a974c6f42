"""Job and JobApplication models."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    DateTime,
    Float,
    ForeignKey,
    Integer,
    JSON,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mowsy.core.database import Base
from mowsy.models.enums import ApplicationStatus, JobCategory, JobStatus, Visibility, db_enum
from mowsy.models.user import User


class Job(Base):
    """A lawn-care task posted by a property owner."""

    __tablename__ = "jobs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    special_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category: Mapped[JobCategory] = mapped_column(db_enum(JobCategory), nullable=False)
    fixed_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    estimated_hours: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    # Location (geocoded from address, else copied from the owner)
    address: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    latitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    longitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    zip_code: Mapped[Optional[str]] = mapped_column(String(10), nullable=True, index=True)
    elementary_school_district_name: Mapped[Optional[str]] = mapped_column(
        String(255), nullable=True, index=True
    )
    visibility: Mapped[Visibility] = mapped_column(db_enum(Visibility), nullable=False)

    status: Mapped[JobStatus] = mapped_column(
        db_enum(JobStatus),
        default=JobStatus.OPEN,
        nullable=False,
        index=True,
    )
    scheduled_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    completion_image_urls: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    owner: Mapped[User] = relationship(User, lazy="selectin")

    @property
    def district(self) -> Optional[str]:
        return self.elementary_school_district_name


class JobApplication(Base):
    """A worker's bid on a job. One per (job, applicant)."""

    __tablename__ = "job_applications"
    __table_args__ = (
        UniqueConstraint("job_id", "user_id", name="uq_job_applications_job_user"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    job_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("jobs.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[ApplicationStatus] = mapped_column(
        db_enum(ApplicationStatus),
        default=ApplicationStatus.PENDING,
        nullable=False,
    )
    applied_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    applicant: Mapped[User] = relationship(User, lazy="selectin")
