"""Base schema utilities."""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """Base schema with common configuration."""

    model_config = ConfigDict(
        from_attributes=True,
        str_strip_whitespace=True,
        validate_assignment=True,
        populate_by_name=True,
    )


class TimestampMixin(BaseModel):
    """Mixin for created_at/updated_at timestamps."""

    created_at: datetime
    updated_at: Optional[datetime] = None


class IDMixin(BaseModel):
    """Mixin for integer id field."""

    id: int


class MessageResponse(BaseSchema):
    message: str


class PageParams(BaseSchema):
    """Pagination query parameters. Out-of-range values fall back to defaults."""

    page: int = 1
    limit: int = 20

    def normalized(self) -> "PageParams":
        page = self.page if self.page > 0 else 1
        limit = self.limit if 0 < self.limit <= 100 else 20
        return PageParams(page=page, limit=limit)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def to_naive_utc(value: datetime) -> datetime:
    """Store datetimes as naive UTC, converting aware inputs."""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value
