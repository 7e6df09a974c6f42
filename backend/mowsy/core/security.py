"""JWT issuance/verification, password hashing and auth dependencies."""

import hmac
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import bcrypt
from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from mowsy.core.config import Settings, get_settings
from mowsy.core.database import get_db

ACCESS_TOKEN = "access"
REFRESH_TOKEN = "refresh"

security = HTTPBearer()
optional_security = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(plain.encode(), hashed.encode())
    except ValueError:
        return False


def _create_token(
    settings: Settings,
    user_id: int,
    email: str,
    token_type: str,
    expires_delta: timedelta,
) -> str:
    now = datetime.now(timezone.utc)
    to_encode = {
        "sub": str(user_id),
        "user_id": user_id,
        "email": email,
        "type": token_type,
        "iss": settings.jwt_issuer,
        "iat": now,
        "exp": now + expires_delta,
    }
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def create_access_token(settings: Settings, user_id: int, email: str) -> str:
    """Short-lived token sent as ``Authorization: Bearer``."""
    return _create_token(
        settings,
        user_id,
        email,
        ACCESS_TOKEN,
        timedelta(minutes=settings.access_token_expire_minutes),
    )


def create_refresh_token(settings: Settings, user_id: int, email: str) -> str:
    return _create_token(
        settings,
        user_id,
        email,
        REFRESH_TOKEN,
        timedelta(days=settings.refresh_token_expire_days),
    )


def decode_token(token: str, settings: Settings, expected_type: str = ACCESS_TOKEN) -> dict[str, Any]:
    """Decode and validate a JWT token of the given type."""
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            issuer=settings.jwt_issuer,
        )
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if payload.get("type") != expected_type or not isinstance(payload.get("user_id"), int):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token type",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return payload


class AuthenticatedUser:
    """Caller identity taken from a verified access token."""

    def __init__(self, user_id: int, email: Optional[str] = None):
        self.user_id = user_id
        self.email = email


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    settings: Settings = Depends(get_settings),
) -> AuthenticatedUser:
    """Require a valid access token."""
    payload = decode_token(credentials.credentials, settings)
    return AuthenticatedUser(user_id=payload["user_id"], email=payload.get("email"))


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_security),
    settings: Settings = Depends(get_settings),
) -> Optional[AuthenticatedUser]:
    """Resolve the caller when a valid token is present; anonymous otherwise."""
    if credentials is None:
        return None
    try:
        payload = decode_token(credentials.credentials, settings)
    except HTTPException:
        return None
    return AuthenticatedUser(user_id=payload["user_id"], email=payload.get("email"))


async def require_insurance_verified(
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> AuthenticatedUser:
    """Require the caller to have admin-verified insurance."""
    from mowsy.models.user import User

    user = await db.get(User, current_user.user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )
    if not user.insurance_verified:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Insurance verification required for this action",
        )
    return current_user


async def require_admin(
    x_admin_key: Optional[str] = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> None:
    """Gate admin routes behind the shared ``X-Admin-Key`` secret."""
    if not settings.admin_api_key:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Admin functionality not configured",
        )
    if not x_admin_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Admin API key required",
        )
    if not hmac.compare_digest(x_admin_key.lower().encode(), settings.admin_api_key.lower().encode()):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid admin API key",
        )
