"""User schemas."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from mowsy.schemas.base import BaseSchema, IDMixin, TimestampMixin


class UserResponse(BaseSchema, IDMixin, TimestampMixin):
    """Full profile, returned to the user themselves and to admins."""

    email: str
    first_name: str
    last_name: str
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    elementary_school_district_name: Optional[str] = None
    elementary_school_district_code: Optional[str] = None
    is_active: bool
    insurance_document_url: Optional[str] = None
    insurance_verified: bool
    insurance_verified_at: Optional[datetime] = None


class UserPublicProfile(BaseSchema, IDMixin):
    """What other marketplace users may see."""

    first_name: str
    last_name: str
    elementary_school_district_name: Optional[str] = None
    insurance_verified: bool
    created_at: datetime


class UserUpdate(BaseSchema):
    """Profile update. Omitted or empty fields are left unchanged."""

    first_name: Optional[str] = Field(default=None, max_length=100)
    last_name: Optional[str] = Field(default=None, max_length=100)
    phone: Optional[str] = None
    address: Optional[str] = Field(default=None, max_length=255)
    city: Optional[str] = Field(default=None, max_length=100)
    state: Optional[str] = Field(default=None, max_length=50)
    zip_code: Optional[str] = None


class InsuranceUpload(BaseSchema):
    document_url: str = Field(..., min_length=1, max_length=500)
