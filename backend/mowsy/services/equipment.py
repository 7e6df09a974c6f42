"""Equipment listings and the rental lifecycle."""

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from mowsy.models.enums import EquipmentCategory, FuelType, PowerType, RentalStatus, Visibility
from mowsy.models.equipment import Equipment, EquipmentRental
from mowsy.models.user import User
from mowsy.schemas.base import PageParams
from mowsy.schemas.equipment import EquipmentCreate, EquipmentUpdate, RentalCreate
from mowsy.services.errors import (
    NotFound,
    PermissionDenied,
    ServiceError,
    StateConflict,
    ValidationFailed,
)
from mowsy.services.geocoding import GeocodioService, apply_location, copy_owner_location
from mowsy.services.listings import fetch_listings, load_viewer
from mowsy.services.rentals import (
    BLOCKING_STATUSES,
    ensure_available,
    rental_total_price,
    validate_rental_window,
)
from mowsy.services.state_machine import ensure_transition
from mowsy.services.validation import sanitize

logger = logging.getLogger(__name__)

# Statuses an owner may set directly; activation comes from payment and
# completion from the complete endpoint.
OWNER_SETTABLE_STATUSES = frozenset({RentalStatus.APPROVED, RentalStatus.CANCELLED})


@dataclass
class EquipmentFilters:
    visibility: Optional[Visibility] = None
    zip_code: Optional[str] = None
    district: Optional[str] = None
    category: Optional[EquipmentCategory] = None
    fuel_type: Optional[FuelType] = None
    power_type: Optional[PowerType] = None
    min_price: Optional[Decimal] = None
    max_price: Optional[Decimal] = None
    is_available: Optional[bool] = None


class EquipmentService:
    """Service for equipment listings and rentals."""

    def __init__(self, db: AsyncSession, geocoder: Optional[GeocodioService] = None):
        self.db = db
        self.geocoder = geocoder

    async def create_equipment(self, owner_id: int, data: EquipmentCreate) -> Equipment:
        owner = await self.db.get(User, owner_id)
        if owner is None or not owner.is_active:
            raise NotFound("user not found")
        if data.daily_rental_price <= 0:
            raise ValidationFailed("daily rental price must be greater than 0")

        equipment = Equipment(
            user_id=owner_id,
            name=data.name,
            make=sanitize(data.make),
            model=sanitize(data.model),
            category=data.category,
            fuel_type=data.fuel_type,
            power_type=data.power_type,
            daily_rental_price=data.daily_rental_price,
            description=sanitize(data.description),
            image_urls=list(data.image_urls),
            address=sanitize(data.address),
            visibility=data.visibility,
            is_available=True,
        )
        copy_owner_location(equipment, owner)
        await self._geocode(equipment)

        self.db.add(equipment)
        await self.db.commit()
        await self.db.refresh(equipment)
        return equipment

    async def list_equipment(
        self,
        filters: EquipmentFilters,
        page: PageParams,
        viewer_id: Optional[int] = None,
        apply_filter: bool = False,
    ) -> list[Equipment]:
        """Browse equipment, available items unless asked otherwise, newest first."""
        is_available = True if filters.is_available is None else filters.is_available
        query = select(Equipment).where(Equipment.is_available.is_(is_available))

        if filters.visibility:
            query = query.where(Equipment.visibility == filters.visibility)
        if filters.zip_code:
            query = query.where(Equipment.zip_code == filters.zip_code)
        if filters.district:
            query = query.where(Equipment.elementary_school_district_name == filters.district)
        if filters.category:
            query = query.where(Equipment.category == filters.category)
        if filters.fuel_type:
            query = query.where(Equipment.fuel_type == filters.fuel_type)
        if filters.power_type:
            query = query.where(Equipment.power_type == filters.power_type)
        if filters.min_price is not None:
            query = query.where(Equipment.daily_rental_price >= filters.min_price)
        if filters.max_price is not None:
            query = query.where(Equipment.daily_rental_price <= filters.max_price)

        query = query.order_by(Equipment.created_at.desc(), Equipment.id.desc())

        viewer = await load_viewer(self.db, viewer_id) if apply_filter else None
        return await fetch_listings(self.db, query, viewer, apply_filter, page)

    async def list_user_equipment(self, user_id: int) -> list[Equipment]:
        result = await self.db.execute(
            select(Equipment)
            .where(Equipment.user_id == user_id)
            .order_by(Equipment.created_at.desc(), Equipment.id.desc())
        )
        return list(result.scalars().all())

    async def get_equipment(self, equipment_id: int) -> Equipment:
        equipment = await self.db.get(Equipment, equipment_id)
        if equipment is None:
            raise NotFound("equipment not found")
        return equipment

    async def _get_owned_equipment(self, equipment_id: int, user_id: int, action: str) -> Equipment:
        equipment = await self.get_equipment(equipment_id)
        if equipment.user_id != user_id:
            raise PermissionDenied(f"you don't have permission to {action} this equipment")
        return equipment

    async def update_equipment(self, equipment_id: int, user_id: int, data: EquipmentUpdate) -> Equipment:
        equipment = await self._get_owned_equipment(equipment_id, user_id, "update")

        updates = data.model_dump(exclude_unset=True, exclude_none=True)
        if "daily_rental_price" in updates and updates["daily_rental_price"] <= 0:
            raise ValidationFailed("daily rental price must be greater than 0")

        for field in ("make", "model", "description", "address"):
            if field in updates:
                updates[field] = sanitize(updates[field])
        for field, value in updates.items():
            if value is not None:
                setattr(equipment, field, value)

        if updates.get("address"):
            await self._geocode(equipment)

        await self.db.commit()
        await self.db.refresh(equipment)
        return equipment

    async def has_blocking_rentals(self, equipment_id: int) -> bool:
        result = await self.db.execute(
            select(EquipmentRental.id)
            .where(
                EquipmentRental.equipment_id == equipment_id,
                EquipmentRental.status.in_(list(BLOCKING_STATUSES)),
            )
            .limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def delete_equipment(self, equipment_id: int, user_id: int) -> None:
        equipment = await self._get_owned_equipment(equipment_id, user_id, "delete")
        if await self.has_blocking_rentals(equipment_id):
            raise StateConflict("cannot delete equipment with active rentals")

        await self.db.delete(equipment)
        await self.db.commit()

    async def _lock_equipment(self, equipment_id: int) -> Optional[Equipment]:
        """Row-lock the equipment so concurrent rental checks on it serialize."""
        result = await self.db.execute(
            select(Equipment)
            .where(Equipment.id == equipment_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def request_rental(
        self,
        equipment_id: int,
        renter_id: int,
        data: RentalCreate,
        now: Optional[datetime] = None,
    ) -> EquipmentRental:
        """Create a rental request priced at daily rate times inclusive days."""
        equipment = await self._lock_equipment(equipment_id)
        if equipment is None or not equipment.is_available:
            await self.db.rollback()
            raise NotFound("equipment not found or not available")
        if equipment.user_id == renter_id:
            await self.db.rollback()
            raise PermissionDenied("cannot rent your own equipment")

        try:
            validate_rental_window(data.start_date, data.end_date, now)
            await ensure_available(self.db, equipment_id, data.start_date, data.end_date)
        except ServiceError:
            await self.db.rollback()
            raise

        rental = EquipmentRental(
            equipment_id=equipment_id,
            renter_user_id=renter_id,
            start_date=data.start_date,
            end_date=data.end_date,
            total_price=rental_total_price(data.start_date, data.end_date, equipment.daily_rental_price),
            status=RentalStatus.REQUESTED,
            pickup_notes=sanitize(data.pickup_notes),
        )
        self.db.add(rental)
        await self.db.commit()
        await self.db.refresh(rental)

        logger.info(
            f"[RENTALS] Rental {rental.id} requested on equipment {equipment_id} "
            f"by user {renter_id} for {rental.total_price}"
        )
        return rental

    async def list_rentals(self, equipment_id: int, user_id: int) -> list[EquipmentRental]:
        await self._get_owned_equipment(equipment_id, user_id, "view rentals for")
        result = await self.db.execute(
            select(EquipmentRental)
            .where(EquipmentRental.equipment_id == equipment_id)
            .order_by(EquipmentRental.created_at.desc(), EquipmentRental.id.desc())
        )
        return list(result.scalars().all())

    async def update_rental_status(
        self,
        equipment_id: int,
        rental_id: int,
        user_id: int,
        status: RentalStatus,
    ) -> EquipmentRental:
        """Owner approves or cancels a rental.

        Approval is only possible from requested and re-checks the dates
        against the equipment's other approved and active rentals.
        """
        await self._get_owned_equipment(equipment_id, user_id, "update rentals for")

        if status not in OWNER_SETTABLE_STATUSES:
            raise ValidationFailed("rental status can only be set to approved or cancelled")

        await self._lock_equipment(equipment_id)
        result = await self.db.execute(
            select(EquipmentRental).where(
                EquipmentRental.id == rental_id,
                EquipmentRental.equipment_id == equipment_id,
            )
        )
        rental = result.scalar_one_or_none()

        try:
            if rental is None:
                raise NotFound("rental not found")
            if status == RentalStatus.APPROVED:
                ensure_transition("rental", rental.status, status, "can only approve requested rentals")
                await ensure_available(
                    self.db,
                    equipment_id,
                    rental.start_date,
                    rental.end_date,
                    exclude_rental_id=rental.id,
                )
            else:
                ensure_transition("rental", rental.status, status)
        except ServiceError:
            await self.db.rollback()
            raise

        rental.status = status
        await self.db.commit()
        await self.db.refresh(rental)
        return rental

    async def complete_rental(self, rental_id: int, user_id: int, return_notes: Optional[str]) -> EquipmentRental:
        """Owner or renter closes out an active rental."""
        rental = await self.db.get(EquipmentRental, rental_id)
        if rental is None:
            raise NotFound("rental not found")
        equipment = await self.db.get(Equipment, rental.equipment_id)
        owner_id = equipment.user_id if equipment is not None else None
        if user_id not in (rental.renter_user_id, owner_id):
            raise PermissionDenied("you don't have permission to complete this rental")
        if rental.status != RentalStatus.ACTIVE:
            raise StateConflict("rental must be active to complete")

        rental.status = RentalStatus.COMPLETED
        rental.return_notes = sanitize(return_notes)
        await self.db.commit()
        await self.db.refresh(rental)
        return rental

    async def _geocode(self, equipment: Equipment) -> None:
        if not equipment.address or self.geocoder is None:
            return
        try:
            result = await self.geocoder.geocode(equipment.address)
        except ServiceError as e:
            logger.warning(f"[GEOCODE] Failed to geocode equipment address: {e.message}")
            return
        apply_location(equipment, result)
