"""Tests for rental windows, pricing and conflict detection."""

from datetime import datetime, timedelta
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from mowsy.models.enums import EquipmentCategory, RentalStatus, Visibility
from mowsy.models.equipment import Equipment, EquipmentRental
from mowsy.models.user import User
from mowsy.schemas.equipment import RentalCreate
from mowsy.services.equipment import EquipmentService
from mowsy.services.errors import NotFound, PermissionDenied, StateConflict, ValidationFailed
from mowsy.services.rentals import (
    CONFLICT_MESSAGE,
    has_conflict,
    ranges_overlap,
    rental_day_count,
    rental_total_price,
    validate_rental_window,
)

NOW = datetime(2026, 5, 1, 9, 0, 0)
DAY = timedelta(days=1)


def day(n: int) -> datetime:
    return datetime(2026, 6, 1) + n * DAY


async def add_user(db, email: str) -> User:
    user = User(email=email, password_hash="x", first_name="Test", last_name="User")
    db.add(user)
    await db.commit()
    return user


async def add_equipment(db, owner: User, price: str = "30.00", available: bool = True) -> Equipment:
    equipment = Equipment(
        user_id=owner.id,
        name="Push Mower",
        category=EquipmentCategory.MOWER,
        daily_rental_price=Decimal(price),
        visibility=Visibility.ZIP_CODE,
        image_urls=[],
        is_available=available,
    )
    db.add(equipment)
    await db.commit()
    return equipment


async def add_rental(db, equipment: Equipment, renter: User, start, end, status) -> EquipmentRental:
    rental = EquipmentRental(
        equipment_id=equipment.id,
        renter_user_id=renter.id,
        start_date=start,
        end_date=end,
        total_price=Decimal("0.00"),
        status=status,
    )
    db.add(rental)
    await db.commit()
    return rental


async def rental_count(db) -> int:
    result = await db.execute(select(func.count()).select_from(EquipmentRental))
    return result.scalar_one()


class TestRangesOverlap:
    def test_disjoint(self):
        assert not ranges_overlap(day(1), day(3), day(4), day(6))

    def test_shared_boundary_day_overlaps(self):
        assert ranges_overlap(day(1), day(3), day(3), day(5))

    def test_containment(self):
        assert ranges_overlap(day(1), day(10), day(4), day(5))
        assert ranges_overlap(day(4), day(5), day(1), day(10))


class TestValidateRentalWindow:
    def test_start_in_past_rejected(self):
        with pytest.raises(ValidationFailed, match="start date cannot be in the past"):
            validate_rental_window(NOW - timedelta(hours=1), NOW + DAY, now=NOW)

    def test_end_before_start_rejected(self):
        with pytest.raises(ValidationFailed, match="end date cannot be before start date"):
            validate_rental_window(day(3), day(1), now=NOW)

    def test_single_day_accepted(self):
        validate_rental_window(day(1), day(1), now=NOW)


class TestPricing:
    def test_inclusive_days(self):
        assert rental_day_count(day(0), day(0)) == 1
        assert rental_day_count(day(0), day(2)) == 3

    def test_partial_day_rounds_down_then_adds_one(self):
        assert rental_day_count(day(0), day(1) + timedelta(hours=23)) == 2

    def test_thirty_per_day_for_three_days(self):
        assert rental_total_price(day(0), day(2), Decimal("30.00")) == Decimal("90.00")

    def test_total_is_two_decimal(self):
        assert rental_total_price(day(0), day(0), Decimal("12.5")) == Decimal("12.50")


class TestHasConflict:
    async def test_only_blocking_statuses_conflict(self, db):
        owner = await add_user(db, "owner@example.com")
        renter = await add_user(db, "renter@example.com")
        equipment = await add_equipment(db, owner)
        await add_rental(db, equipment, renter, day(1), day(3), RentalStatus.REQUESTED)
        await add_rental(db, equipment, renter, day(1), day(3), RentalStatus.CANCELLED)
        await add_rental(db, equipment, renter, day(1), day(3), RentalStatus.COMPLETED)

        assert not await has_conflict(db, equipment.id, day(2), day(4))

    async def test_approved_and_active_conflict(self, db):
        owner = await add_user(db, "owner@example.com")
        renter = await add_user(db, "renter@example.com")
        equipment = await add_equipment(db, owner)
        await add_rental(db, equipment, renter, day(1), day(3), RentalStatus.APPROVED)
        await add_rental(db, equipment, renter, day(10), day(12), RentalStatus.ACTIVE)

        assert await has_conflict(db, equipment.id, day(3), day(5))
        assert await has_conflict(db, equipment.id, day(8), day(10))
        assert not await has_conflict(db, equipment.id, day(4), day(9))

    async def test_exclude_rental_id(self, db):
        owner = await add_user(db, "owner@example.com")
        renter = await add_user(db, "renter@example.com")
        equipment = await add_equipment(db, owner)
        rental = await add_rental(db, equipment, renter, day(1), day(3), RentalStatus.APPROVED)

        assert not await has_conflict(db, equipment.id, day(1), day(3), exclude_rental_id=rental.id)

    async def test_other_equipment_does_not_conflict(self, db):
        owner = await add_user(db, "owner@example.com")
        renter = await add_user(db, "renter@example.com")
        first = await add_equipment(db, owner)
        second = await add_equipment(db, owner)
        await add_rental(db, first, renter, day(1), day(3), RentalStatus.APPROVED)

        assert not await has_conflict(db, second.id, day(1), day(3))


class TestRequestRental:
    async def test_prices_and_creates_requested_rental(self, db):
        owner = await add_user(db, "owner@example.com")
        renter = await add_user(db, "renter@example.com")
        equipment = await add_equipment(db, owner, price="30.00")

        rental = await EquipmentService(db).request_rental(
            equipment.id,
            renter.id,
            RentalCreate(start_date=day(0), end_date=day(2), pickup_notes="  side gate  "),
            now=NOW,
        )

        assert rental.status == RentalStatus.REQUESTED
        assert rental.total_price == Decimal("90.00")
        assert rental.pickup_notes == "side gate"

    async def test_overlap_with_approved_rental_is_rejected(self, db):
        owner = await add_user(db, "owner@example.com")
        first_renter = await add_user(db, "first@example.com")
        second_renter = await add_user(db, "second@example.com")
        equipment = await add_equipment(db, owner)
        await add_rental(db, equipment, first_renter, day(1), day(3), RentalStatus.APPROVED)

        with pytest.raises(StateConflict, match=CONFLICT_MESSAGE):
            await EquipmentService(db).request_rental(
                equipment.id,
                second_renter.id,
                RentalCreate(start_date=day(2), end_date=day(4)),
                now=NOW,
            )
        assert await rental_count(db) == 1

    async def test_invalid_window_creates_no_row(self, db):
        owner = await add_user(db, "owner@example.com")
        renter = await add_user(db, "renter@example.com")
        equipment = await add_equipment(db, owner)
        service = EquipmentService(db)
        equipment_id, renter_id = equipment.id, renter.id

        with pytest.raises(ValidationFailed):
            await service.request_rental(
                equipment_id, renter_id, RentalCreate(start_date=day(4), end_date=day(2)), now=NOW
            )
        with pytest.raises(ValidationFailed):
            await service.request_rental(
                equipment_id,
                renter_id,
                RentalCreate(start_date=NOW - DAY, end_date=NOW + DAY),
                now=NOW,
            )
        assert await rental_count(db) == 0

    async def test_cannot_rent_own_equipment(self, db):
        owner = await add_user(db, "owner@example.com")
        equipment = await add_equipment(db, owner)

        with pytest.raises(PermissionDenied, match="cannot rent your own equipment"):
            await EquipmentService(db).request_rental(
                equipment.id, owner.id, RentalCreate(start_date=day(1), end_date=day(2)), now=NOW
            )

    async def test_unavailable_equipment(self, db):
        owner = await add_user(db, "owner@example.com")
        renter = await add_user(db, "renter@example.com")
        equipment = await add_equipment(db, owner, available=False)

        with pytest.raises(NotFound, match="equipment not found or not available"):
            await EquipmentService(db).request_rental(
                equipment.id, renter.id, RentalCreate(start_date=day(1), end_date=day(2)), now=NOW
            )

    async def test_approval_rechecks_conflicts(self, db):
        owner = await add_user(db, "owner@example.com")
        first_renter = await add_user(db, "first@example.com")
        second_renter = await add_user(db, "second@example.com")
        equipment = await add_equipment(db, owner)
        service = EquipmentService(db)

        first = await service.request_rental(
            equipment.id, first_renter.id, RentalCreate(start_date=day(1), end_date=day(3)), now=NOW
        )
        second = await service.request_rental(
            equipment.id, second_renter.id, RentalCreate(start_date=day(2), end_date=day(4)), now=NOW
        )

        equipment_id, owner_id, second_id = equipment.id, owner.id, second.id

        approved = await service.update_rental_status(equipment_id, first.id, owner_id, RentalStatus.APPROVED)
        assert approved.status == RentalStatus.APPROVED

        with pytest.raises(StateConflict, match=CONFLICT_MESSAGE):
            await service.update_rental_status(equipment_id, second_id, owner_id, RentalStatus.APPROVED)

        result = await db.execute(select(EquipmentRental.status).where(EquipmentRental.id == second_id))
        assert result.scalar_one() == RentalStatus.REQUESTED


class TestCompleteRental:
    @pytest.mark.parametrize("status", [RentalStatus.REQUESTED, RentalStatus.APPROVED])
    async def test_only_active_rentals_complete(self, db, status):
        owner = await add_user(db, "owner@example.com")
        renter = await add_user(db, "renter@example.com")
        equipment = await add_equipment(db, owner)
        rental = await add_rental(db, equipment, renter, day(1), day(2), status)
        rental_id, renter_id = rental.id, renter.id

        with pytest.raises(StateConflict, match="rental must be active to complete"):
            await EquipmentService(db).complete_rental(rental_id, renter_id, "Returned clean")

        result = await db.execute(
            select(EquipmentRental.status, EquipmentRental.return_notes).where(
                EquipmentRental.id == rental_id
            )
        )
        assert tuple(result.one()) == (status, None)

    async def test_active_rental_completes(self, db):
        owner = await add_user(db, "owner@example.com")
        renter = await add_user(db, "renter@example.com")
        equipment = await add_equipment(db, owner)
        rental = await add_rental(db, equipment, renter, day(1), day(2), RentalStatus.ACTIVE)

        completed = await EquipmentService(db).complete_rental(rental.id, owner.id, "  Blade dull ")
        assert completed.status == RentalStatus.COMPLETED
        assert completed.return_notes == "Blade dull"

    async def test_stranger_cannot_complete(self, db):
        owner = await add_user(db, "owner@example.com")
        renter = await add_user(db, "renter@example.com")
        stranger = await add_user(db, "stranger@example.com")
        equipment = await add_equipment(db, owner)
        rental = await add_rental(db, equipment, renter, day(1), day(2), RentalStatus.ACTIVE)

        with pytest.raises(PermissionDenied):
            await EquipmentService(db).complete_rental(rental.id, stranger.id, None)
