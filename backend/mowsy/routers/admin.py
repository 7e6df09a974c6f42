"""Admin router. Every route requires the ``X-Admin-Key`` header."""

from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from mowsy.core.database import get_db
from mowsy.core.security import require_admin
from mowsy.schemas.admin import AdminStats
from mowsy.schemas.base import MessageResponse, PageParams
from mowsy.schemas.user import UserResponse
from mowsy.services.admin import AdminService, UserFilters

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


def get_admin_service(db: AsyncSession = Depends(get_db)) -> AdminService:
    return AdminService(db)


@router.get("/stats", response_model=AdminStats)
async def get_stats(service: AdminService = Depends(get_admin_service)):
    """Platform-wide counts of users, listings, rentals and payments."""
    return await service.get_stats()


@router.get("/users", response_model=List[UserResponse])
async def list_users(
    is_active: Optional[bool] = None,
    insurance_verified: Optional[bool] = None,
    zip_code: Optional[str] = None,
    school_district: Optional[str] = None,
    page: int = 1,
    limit: int = 20,
    service: AdminService = Depends(get_admin_service),
):
    filters = UserFilters(
        is_active=is_active,
        insurance_verified=insurance_verified,
        zip_code=zip_code,
        school_district=school_district,
    )
    users = await service.list_users(filters, PageParams(page=page, limit=limit))
    return [UserResponse.model_validate(u) for u in users]


@router.put("/users/{user_id}/deactivate", response_model=UserResponse)
async def deactivate_user(user_id: int, service: AdminService = Depends(get_admin_service)):
    user = await service.set_user_active(user_id, False)
    return UserResponse.model_validate(user)


@router.put("/users/{user_id}/activate", response_model=UserResponse)
async def activate_user(user_id: int, service: AdminService = Depends(get_admin_service)):
    user = await service.set_user_active(user_id, True)
    return UserResponse.model_validate(user)


@router.put("/users/{user_id}/verify-insurance", response_model=UserResponse)
async def verify_insurance(user_id: int, service: AdminService = Depends(get_admin_service)):
    """Mark a user's uploaded insurance document as verified."""
    user = await service.verify_insurance(user_id)
    return UserResponse.model_validate(user)


@router.delete("/jobs/{job_id}", response_model=MessageResponse)
async def remove_job(job_id: int, service: AdminService = Depends(get_admin_service)):
    await service.remove_job(job_id)
    return MessageResponse(message="Job removed successfully")


@router.delete("/equipment/{equipment_id}", response_model=MessageResponse)
async def remove_equipment(equipment_id: int, service: AdminService = Depends(get_admin_service)):
    await service.remove_equipment(equipment_id)
    return MessageResponse(message="Equipment removed successfully")
