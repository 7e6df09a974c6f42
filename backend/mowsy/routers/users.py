"""Users router - own profile, insurance document, public profiles and reviews."""

from typing import List

from fastapi import APIRouter, Depends

from mowsy.core.security import AuthenticatedUser, get_current_user
from mowsy.routers.auth import get_user_service
from mowsy.schemas.review import ReviewResponse
from mowsy.schemas.user import InsuranceUpload, UserPublicProfile, UserResponse, UserUpdate
from mowsy.services.users import UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=UserResponse)
async def get_me(
    current_user: AuthenticatedUser = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    user = await service.get_active_user(current_user.user_id)
    return UserResponse.model_validate(user)


@router.put("/me", response_model=UserResponse)
async def update_me(
    data: UserUpdate,
    current_user: AuthenticatedUser = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    """Update own profile; a new address is re-geocoded."""
    user = await service.update_profile(current_user.user_id, data)
    return UserResponse.model_validate(user)


@router.post("/me/insurance", response_model=UserResponse)
async def upload_insurance(
    data: InsuranceUpload,
    current_user: AuthenticatedUser = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    """Attach an insurance document URL. Resets verification until an admin approves it."""
    user = await service.upload_insurance_document(current_user.user_id, data.document_url)
    return UserResponse.model_validate(user)


@router.get("/{user_id}/profile", response_model=UserPublicProfile)
async def get_public_profile(
    user_id: int,
    service: UserService = Depends(get_user_service),
):
    user = await service.get_active_user(user_id)
    return UserPublicProfile.model_validate(user)


@router.get("/{user_id}/reviews", response_model=List[ReviewResponse])
async def get_user_reviews(
    user_id: int,
    service: UserService = Depends(get_user_service),
):
    reviews = await service.list_reviews(user_id)
    return [ReviewResponse.model_validate(r) for r in reviews]
