"""Auth router - registration, login and token refresh."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from mowsy.core.database import get_db
from mowsy.core.security import AuthenticatedUser, get_current_user
from mowsy.schemas.auth import LoginRequest, RefreshRequest, RegisterRequest, TokenResponse
from mowsy.schemas.base import MessageResponse
from mowsy.services.geocoding import GeocodioService, get_geocoding_service
from mowsy.services.users import UserService

router = APIRouter(prefix="/auth", tags=["auth"])


def get_user_service(
    db: AsyncSession = Depends(get_db),
    geocoder: GeocodioService = Depends(get_geocoding_service),
) -> UserService:
    return UserService(db, geocoder)


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(
    data: RegisterRequest,
    service: UserService = Depends(get_user_service),
):
    """Create an account and return a token pair."""
    return await service.register(data)


@router.post("/login", response_model=TokenResponse)
async def login(
    data: LoginRequest,
    service: UserService = Depends(get_user_service),
):
    return await service.login(data)


@router.post("/refresh", response_model=TokenResponse)
async def refresh(
    data: RefreshRequest,
    service: UserService = Depends(get_user_service),
):
    """Exchange a refresh token for a new token pair."""
    return await service.refresh(data.refresh_token)


@router.post("/logout", response_model=MessageResponse)
async def logout(current_user: AuthenticatedUser = Depends(get_current_user)):
    """Tokens are stateless; clients discard them."""
    return MessageResponse(message="Logged out successfully")
