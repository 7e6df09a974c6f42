"""User accounts: registration, login, token refresh, profile and reviews."""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from mowsy.core.config import Settings, get_settings
from mowsy.core.security import (
    REFRESH_TOKEN,
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_password,
    verify_password,
)
from mowsy.models.review import Review
from mowsy.models.user import User
from mowsy.schemas.auth import LoginRequest, RegisterRequest, TokenResponse
from mowsy.schemas.user import UserResponse, UserUpdate
from mowsy.services.errors import AuthenticationFailed, NotFound, ServiceError, ValidationFailed
from mowsy.services.geocoding import GeocodioService, apply_location, user_geocode_query
from mowsy.services.validation import (
    sanitize,
    validate_password,
    validate_phone,
    validate_zip_code,
)

logger = logging.getLogger(__name__)


class UserService:
    """Service for user accounts."""

    def __init__(
        self,
        db: AsyncSession,
        geocoder: Optional[GeocodioService] = None,
        settings: Optional[Settings] = None,
    ):
        self.db = db
        self.geocoder = geocoder
        self.settings = settings or get_settings()

    async def register(self, data: RegisterRequest) -> TokenResponse:
        email = str(data.email)
        validate_password(data.password)
        validate_phone(sanitize(data.phone))
        validate_zip_code(sanitize(data.zip_code))

        if await self._email_taken(email):
            raise ValidationFailed("user with this email already exists")

        user = User(
            email=email,
            password_hash=hash_password(data.password),
            first_name=data.first_name.strip(),
            last_name=data.last_name.strip(),
            phone=sanitize(data.phone),
            address=sanitize(data.address),
            city=sanitize(data.city),
            state=sanitize(data.state),
            zip_code=sanitize(data.zip_code),
            is_active=True,
            insurance_verified=False,
        )
        await self._geocode(user)

        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ValidationFailed("user with this email already exists")
        await self.db.refresh(user)

        logger.info(f"Registered user {user.id}")
        return self.issue_tokens(user)

    async def _email_taken(self, email: str) -> bool:
        result = await self.db.execute(select(User.id).where(User.email == email))
        return result.scalar_one_or_none() is not None

    async def login(self, data: LoginRequest) -> TokenResponse:
        email = str(data.email)

        result = await self.db.execute(
            select(User).where(User.email == email, User.is_active.is_(True))
        )
        user = result.scalar_one_or_none()
        if user is None or not verify_password(data.password, user.password_hash):
            raise AuthenticationFailed("invalid credentials")

        return self.issue_tokens(user)

    async def refresh(self, refresh_token: str) -> TokenResponse:
        """Exchange a refresh token for a fresh token pair."""
        try:
            payload = decode_token(refresh_token, self.settings, expected_type=REFRESH_TOKEN)
        except HTTPException:
            raise AuthenticationFailed("invalid refresh token")

        user = await self.get_active_user(payload["user_id"])
        return self.issue_tokens(user)

    def issue_tokens(self, user: User) -> TokenResponse:
        return TokenResponse(
            access_token=create_access_token(self.settings, user.id, user.email),
            refresh_token=create_refresh_token(self.settings, user.id, user.email),
            user=UserResponse.model_validate(user),
        )

    async def get_active_user(self, user_id: int) -> User:
        result = await self.db.execute(
            select(User).where(User.id == user_id, User.is_active.is_(True))
        )
        user = result.scalar_one_or_none()
        if user is None:
            raise NotFound("user not found")
        return user

    async def update_profile(self, user_id: int, data: UserUpdate) -> User:
        """Apply non-empty fields; re-geocode when the address changes."""
        user = await self.get_active_user(user_id)

        updates = {
            field: sanitize(value)
            for field, value in data.model_dump(exclude_unset=True).items()
        }
        updates = {field: value for field, value in updates.items() if value is not None}
        validate_phone(updates.get("phone"))
        validate_zip_code(updates.get("zip_code"))

        for field, value in updates.items():
            setattr(user, field, value)

        if "address" in updates:
            await self._geocode(user)

        await self.db.commit()
        await self.db.refresh(user)
        return user

    async def upload_insurance_document(self, user_id: int, document_url: str) -> User:
        """Attach a new insurance document. Verification resets until an admin re-checks it."""
        user = await self.get_active_user(user_id)
        user.insurance_document_url = document_url
        user.insurance_verified = False
        user.insurance_verified_at = None
        await self.db.commit()
        await self.db.refresh(user)
        return user

    async def list_reviews(self, user_id: int) -> list[Review]:
        result = await self.db.execute(
            select(Review)
            .where(Review.reviewed_user_id == user_id)
            .order_by(Review.created_at.desc())
        )
        return list(result.scalars().all())

    async def _geocode(self, user: User) -> None:
        if not user.address or self.geocoder is None:
            return
        query = user_geocode_query(user.address, user.city, user.state, user.zip_code)
        try:
            result = await self.geocoder.geocode(query)
        except ServiceError as e:
            logger.warning(f"[GEOCODE] Failed to geocode user address: {e.message}")
            return
        apply_location(user, result, include_code=True)
