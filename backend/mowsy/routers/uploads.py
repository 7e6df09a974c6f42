"""Upload router - listing photos, completion photos and insurance documents."""

import io

from fastapi import APIRouter, Depends, File, UploadFile, status

from mowsy.core.security import AuthenticatedUser, get_current_user
from mowsy.schemas.base import MessageResponse
from mowsy.schemas.upload import (
    DeleteFileRequest,
    PresignedUploadRequest,
    PresignedUploadResponse,
    UploadResponse,
)
from mowsy.services.storage import UploadService, get_upload_service

router = APIRouter(prefix="/upload", tags=["upload"])


@router.post("/image", response_model=UploadResponse, status_code=status.HTTP_201_CREATED)
async def upload_image(
    file: UploadFile = File(...),
    service: UploadService = Depends(get_upload_service),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    """Upload a file (max 10MB; jpeg, png, gif, webp or pdf)."""
    contents = await file.read()
    mime_type = file.content_type or "application/octet-stream"
    url, key = await service.upload(
        user_id=current_user.user_id,
        file_name=file.filename or "",
        mime_type=mime_type,
        body=io.BytesIO(contents),
        size=len(contents),
    )
    return UploadResponse(url=url, key=key, size=len(contents), mime_type=mime_type)


@router.post("/presigned-url", response_model=PresignedUploadResponse)
async def create_presigned_url(
    data: PresignedUploadRequest,
    service: UploadService = Depends(get_upload_service),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    """Get a presigned PUT URL for uploading directly to S3."""
    upload_url, key, expires_at = await service.create_presigned_upload(
        user_id=current_user.user_id,
        file_name=data.file_name,
        mime_type=data.mime_type,
    )
    return PresignedUploadResponse(upload_url=upload_url, key=key, expires_at=expires_at)


@router.delete("/file", response_model=MessageResponse)
async def delete_file(
    data: DeleteFileRequest,
    service: UploadService = Depends(get_upload_service),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    await service.delete(current_user.user_id, data.key)
    return MessageResponse(message="File deleted successfully")
