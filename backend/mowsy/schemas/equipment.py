"""Equipment and rental schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import Field, field_validator

from mowsy.models.enums import EquipmentCategory, FuelType, PowerType, RentalStatus, Visibility
from mowsy.schemas.base import BaseSchema, IDMixin, TimestampMixin, to_naive_utc
from mowsy.schemas.user import UserPublicProfile


class EquipmentCreate(BaseSchema):
    name: str = Field(..., min_length=1, max_length=255)
    make: Optional[str] = Field(default=None, max_length=100)
    model: Optional[str] = Field(default=None, max_length=100)
    category: EquipmentCategory
    fuel_type: Optional[FuelType] = None
    power_type: Optional[PowerType] = None
    daily_rental_price: Decimal
    description: Optional[str] = None
    image_urls: list[str] = Field(default_factory=list)
    address: Optional[str] = Field(default=None, max_length=255)
    visibility: Visibility


class EquipmentUpdate(BaseSchema):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    make: Optional[str] = Field(default=None, max_length=100)
    model: Optional[str] = Field(default=None, max_length=100)
    category: Optional[EquipmentCategory] = None
    fuel_type: Optional[FuelType] = None
    power_type: Optional[PowerType] = None
    daily_rental_price: Optional[Decimal] = None
    description: Optional[str] = None
    image_urls: Optional[list[str]] = None
    address: Optional[str] = Field(default=None, max_length=255)
    visibility: Optional[Visibility] = None
    is_available: Optional[bool] = None


class EquipmentResponse(BaseSchema, IDMixin, TimestampMixin):
    user_id: int
    name: str
    make: Optional[str] = None
    model: Optional[str] = None
    category: EquipmentCategory
    fuel_type: Optional[FuelType] = None
    power_type: Optional[PowerType] = None
    daily_rental_price: float
    description: Optional[str] = None
    image_urls: list[str] = Field(default_factory=list)
    is_available: bool
    address: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    zip_code: Optional[str] = None
    elementary_school_district_name: Optional[str] = None
    visibility: Visibility
    user: Optional[UserPublicProfile] = Field(default=None, validation_alias="owner")


class RentalCreate(BaseSchema):
    """Inclusive date range for a rental request."""

    start_date: datetime
    end_date: datetime
    pickup_notes: Optional[str] = None

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_dates(cls, v: datetime) -> datetime:
        return to_naive_utc(v)


class RentalStatusUpdate(BaseSchema):
    """Owner decision on a rental request."""

    status: RentalStatus


class RentalCompleteRequest(BaseSchema):
    return_notes: Optional[str] = None


class RentalResponse(BaseSchema, IDMixin, TimestampMixin):
    equipment_id: int
    renter_user_id: int
    start_date: datetime
    end_date: datetime
    total_price: float
    status: RentalStatus
    pickup_notes: Optional[str] = None
    return_notes: Optional[str] = None
    equipment: Optional[EquipmentResponse] = None
    renter: Optional[UserPublicProfile] = None
