"""Upload schemas."""

from datetime import datetime

from pydantic import Field

from mowsy.schemas.base import BaseSchema


class UploadResponse(BaseSchema):
    url: str
    key: str
    size: int
    mime_type: str


class PresignedUploadRequest(BaseSchema):
    """Request presigned upload URL."""

    file_name: str = Field(..., min_length=1, max_length=255)
    mime_type: str = Field(..., min_length=1)


class PresignedUploadResponse(BaseSchema):
    """Response with presigned upload URL."""

    upload_url: str
    key: str
    expires_at: datetime


class DeleteFileRequest(BaseSchema):
    key: str = Field(..., min_length=1)
