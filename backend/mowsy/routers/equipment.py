"""Equipment router - listings and rentals."""

from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from mowsy.core.config import Settings, get_settings
from mowsy.core.database import get_db
from mowsy.core.security import (
    AuthenticatedUser,
    get_current_user,
    get_optional_user,
    require_insurance_verified,
)
from mowsy.models.enums import EquipmentCategory, FuelType, PowerType, Visibility
from mowsy.schemas.base import MessageResponse, PageParams
from mowsy.schemas.equipment import (
    EquipmentCreate,
    EquipmentResponse,
    EquipmentUpdate,
    RentalCompleteRequest,
    RentalCreate,
    RentalResponse,
    RentalStatusUpdate,
)
from mowsy.services.equipment import EquipmentFilters, EquipmentService
from mowsy.services.geocoding import GeocodioService, get_geocoding_service

router = APIRouter(prefix="/equipment", tags=["equipment"])


def get_equipment_service(
    db: AsyncSession = Depends(get_db),
    geocoder: GeocodioService = Depends(get_geocoding_service),
) -> EquipmentService:
    return EquipmentService(db, geocoder)


@router.get("", response_model=List[EquipmentResponse])
async def list_equipment(
    visibility: Optional[Visibility] = None,
    zip_code: Optional[str] = None,
    school_district: Optional[str] = None,
    category: Optional[EquipmentCategory] = None,
    fuel_type: Optional[FuelType] = None,
    power_type: Optional[PowerType] = None,
    min_price: Optional[Decimal] = None,
    max_price: Optional[Decimal] = None,
    is_available: Optional[bool] = None,
    filter: Optional[bool] = None,
    page: int = 1,
    limit: int = 20,
    service: EquipmentService = Depends(get_equipment_service),
    current_user: Optional[AuthenticatedUser] = Depends(get_optional_user),
    settings: Settings = Depends(get_settings),
):
    """Browse equipment, newest first. ``filter=true`` applies the visibility rules."""
    filters = EquipmentFilters(
        visibility=visibility,
        zip_code=zip_code,
        district=school_district,
        category=category,
        fuel_type=fuel_type,
        power_type=power_type,
        min_price=min_price,
        max_price=max_price,
        is_available=is_available,
    )
    apply_filter = settings.listing_filter_default if filter is None else filter
    items = await service.list_equipment(
        filters,
        PageParams(page=page, limit=limit),
        viewer_id=current_user.user_id if current_user else None,
        apply_filter=apply_filter,
    )
    return [EquipmentResponse.model_validate(e) for e in items]


@router.get("/my", response_model=List[EquipmentResponse])
async def list_my_equipment(
    service: EquipmentService = Depends(get_equipment_service),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    items = await service.list_user_equipment(current_user.user_id)
    return [EquipmentResponse.model_validate(e) for e in items]


@router.post("", response_model=EquipmentResponse, status_code=status.HTTP_201_CREATED)
async def create_equipment(
    data: EquipmentCreate,
    service: EquipmentService = Depends(get_equipment_service),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    equipment = await service.create_equipment(current_user.user_id, data)
    return EquipmentResponse.model_validate(equipment)


@router.post("/rentals/{rental_id}/complete", response_model=RentalResponse)
async def complete_rental(
    rental_id: int,
    data: RentalCompleteRequest,
    service: EquipmentService = Depends(get_equipment_service),
    current_user: AuthenticatedUser = Depends(require_insurance_verified),
):
    """Close out an active rental (owner or renter, verified insurance required)."""
    rental = await service.complete_rental(rental_id, current_user.user_id, data.return_notes)
    return RentalResponse.model_validate(rental)


@router.get("/{equipment_id}", response_model=EquipmentResponse)
async def get_equipment(
    equipment_id: int,
    service: EquipmentService = Depends(get_equipment_service),
):
    equipment = await service.get_equipment(equipment_id)
    return EquipmentResponse.model_validate(equipment)


@router.put("/{equipment_id}", response_model=EquipmentResponse)
async def update_equipment(
    equipment_id: int,
    data: EquipmentUpdate,
    service: EquipmentService = Depends(get_equipment_service),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    equipment = await service.update_equipment(equipment_id, current_user.user_id, data)
    return EquipmentResponse.model_validate(equipment)


@router.delete("/{equipment_id}", response_model=MessageResponse)
async def delete_equipment(
    equipment_id: int,
    service: EquipmentService = Depends(get_equipment_service),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    await service.delete_equipment(equipment_id, current_user.user_id)
    return MessageResponse(message="Equipment deleted successfully")


@router.post(
    "/{equipment_id}/rent",
    response_model=RentalResponse,
    status_code=status.HTTP_201_CREATED,
)
async def request_rental(
    equipment_id: int,
    data: RentalCreate,
    service: EquipmentService = Depends(get_equipment_service),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    """Request a rental for an inclusive date range."""
    rental = await service.request_rental(equipment_id, current_user.user_id, data)
    return RentalResponse.model_validate(rental)


@router.get("/{equipment_id}/rentals", response_model=List[RentalResponse])
async def list_rentals(
    equipment_id: int,
    service: EquipmentService = Depends(get_equipment_service),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    rentals = await service.list_rentals(equipment_id, current_user.user_id)
    return [RentalResponse.model_validate(r) for r in rentals]


@router.put("/{equipment_id}/rentals/{rental_id}", response_model=RentalResponse)
async def update_rental_status(
    equipment_id: int,
    rental_id: int,
    data: RentalStatusUpdate,
    service: EquipmentService = Depends(get_equipment_service),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    """Approve or cancel a rental request (equipment owner only)."""
    rental = await service.update_rental_status(
        equipment_id, rental_id, current_user.user_id, data.status
    )
    return RentalResponse.model_validate(rental)
