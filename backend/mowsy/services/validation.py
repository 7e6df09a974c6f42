"""Phone, zip code and password rules shared by registration and profile updates."""

import re
from typing import Optional

from mowsy.services.errors import ValidationFailed

PHONE_RE = re.compile(r"^\+?1?[-.\s]?\(?[0-9]{3}\)?[-.\s]?[0-9]{3}[-.\s]?[0-9]{4}$")

MIN_PASSWORD_LENGTH = 8


def is_valid_phone(phone: str) -> bool:
    return bool(PHONE_RE.match(phone))


def is_valid_zip_code(zip_code: str) -> bool:
    return len(zip_code) == 5 and zip_code.isascii() and zip_code.isdigit()


def sanitize(value: Optional[str]) -> Optional[str]:
    """Trim surrounding whitespace; empty strings become None."""
    if value is None:
        return None
    value = value.strip()
    return value or None


def validate_password(password: str) -> None:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationFailed(f"password must be at least {MIN_PASSWORD_LENGTH} characters long")


def validate_phone(phone: Optional[str]) -> None:
    if phone and not is_valid_phone(phone):
        raise ValidationFailed("invalid phone number format")


def validate_zip_code(zip_code: Optional[str]) -> None:
    if zip_code and not is_valid_zip_code(zip_code):
        raise ValidationFailed("invalid zip code format")
