"""Auth schemas."""

from typing import Optional

from pydantic import ConfigDict, EmailStr, Field, field_validator

from mowsy.schemas.base import BaseSchema
from mowsy.schemas.user import UserResponse


class _EmailLogin(BaseSchema):
    # Passwords are taken verbatim; only the email is trimmed.
    model_config = ConfigDict(str_strip_whitespace=False)

    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("email", mode="before")
    @classmethod
    def strip_email(cls, v):
        return v.strip() if isinstance(v, str) else v


class RegisterRequest(_EmailLogin):
    """New account. Password, phone and zip rules are enforced by the user service."""

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None


class LoginRequest(_EmailLogin):
    pass


class RefreshRequest(BaseSchema):
    refresh_token: str = Field(..., min_length=1)


class TokenResponse(BaseSchema):
    """Token pair plus the authenticated user's profile."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    user: UserResponse
