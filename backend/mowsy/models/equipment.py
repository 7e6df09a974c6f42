"""Equipment and EquipmentRental models."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Index, Integer, JSON, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mowsy.core.database import Base
from mowsy.models.enums import (
    EquipmentCategory,
    FuelType,
    PowerType,
    RentalStatus,
    Visibility,
    db_enum,
)
from mowsy.models.user import User


class Equipment(Base):
    """A rentable tool owned by a user."""

    __tablename__ = "equipment"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    make: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    model: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    category: Mapped[EquipmentCategory] = mapped_column(db_enum(EquipmentCategory), nullable=False)
    fuel_type: Mapped[Optional[FuelType]] = mapped_column(db_enum(FuelType), nullable=True)
    power_type: Mapped[Optional[PowerType]] = mapped_column(db_enum(PowerType), nullable=True)
    daily_rental_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    image_urls: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    is_available: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    address: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    latitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    longitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    zip_code: Mapped[Optional[str]] = mapped_column(String(10), nullable=True, index=True)
    elementary_school_district_name: Mapped[Optional[str]] = mapped_column(
        String(255), nullable=True, index=True
    )
    visibility: Mapped[Visibility] = mapped_column(db_enum(Visibility), nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    owner: Mapped[User] = relationship(User, lazy="selectin")

    @property
    def district(self) -> Optional[str]:
        return self.elementary_school_district_name


class EquipmentRental(Base):
    """A date-ranged reservation of one piece of equipment.

    Start and end dates are inclusive days.
    """

    __tablename__ = "equipment_rentals"
    __table_args__ = (
        Index("ix_equipment_rentals_equipment_dates", "equipment_id", "start_date", "end_date"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    equipment_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("equipment.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    renter_user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    start_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    end_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    total_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    status: Mapped[RentalStatus] = mapped_column(
        db_enum(RentalStatus),
        default=RentalStatus.REQUESTED,
        nullable=False,
        index=True,
    )
    pickup_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    return_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    equipment: Mapped[Equipment] = relationship(Equipment, lazy="selectin")
    renter: Mapped[User] = relationship(User, lazy="selectin")
