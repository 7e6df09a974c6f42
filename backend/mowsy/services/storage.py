"""Upload storage with a provider interface (S3)."""

import logging
import os
import time
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import BinaryIO, Optional
from urllib.parse import quote_plus

from botocore.exceptions import BotoCoreError, ClientError
from fastapi.concurrency import run_in_threadpool

from mowsy.core.config import get_settings
from mowsy.services.errors import PermissionDenied, UpstreamError, ValidationFailed

logger = logging.getLogger(__name__)


class StorageProviderInterface(ABC):
    """Abstract interface for storage providers."""

    @abstractmethod
    async def upload_object(self, object_path: str, body: BinaryIO, mime_type: str) -> str:
        """Store an object and return its public URL."""

    @abstractmethod
    async def generate_presigned_upload_url(
        self,
        object_path: str,
        mime_type: str,
        ttl_seconds: int,
    ) -> tuple[str, datetime]:
        """Generate a presigned PUT URL for direct upload.

        Returns:
            Tuple of (presigned_url, expires_at)
        """

    @abstractmethod
    async def delete_object(self, object_path: str) -> None:
        """Delete an object from storage."""


class S3StorageProvider(StorageProviderInterface):
    """AWS S3 storage provider. Uploaded objects are public-read."""

    def __init__(
        self,
        bucket_name: str,
        region: str,
        access_key_id: Optional[str] = None,
        secret_access_key: Optional[str] = None,
    ):
        self.bucket_name = bucket_name
        self.region = region
        self._client = None
        self.access_key_id = access_key_id
        self.secret_access_key = secret_access_key

    @property
    def client(self):
        if self._client is None:
            import boto3
            self._client = boto3.client(
                "s3",
                region_name=self.region,
                aws_access_key_id=self.access_key_id,
                aws_secret_access_key=self.secret_access_key,
            )
        return self._client

    def public_url(self, object_path: str) -> str:
        return f"https://{self.bucket_name}.s3.{self.region}.amazonaws.com/{object_path}"

    async def upload_object(self, object_path: str, body: BinaryIO, mime_type: str) -> str:
        try:
            await run_in_threadpool(
                self.client.upload_fileobj,
                body,
                self.bucket_name,
                object_path,
                ExtraArgs={"ContentType": mime_type, "ACL": "public-read"},
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"[STORAGE] Upload failed for {object_path}: {e}")
            raise UpstreamError("failed to upload file")
        return self.public_url(object_path)

    async def generate_presigned_upload_url(
        self,
        object_path: str,
        mime_type: str,
        ttl_seconds: int,
    ) -> tuple[str, datetime]:
        expires_at = datetime.utcnow() + timedelta(seconds=ttl_seconds)

        try:
            url = self.client.generate_presigned_url(
                "put_object",
                Params={
                    "Bucket": self.bucket_name,
                    "Key": object_path,
                    "ContentType": mime_type,
                    "ACL": "public-read",
                },
                ExpiresIn=ttl_seconds,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"[STORAGE] Presign failed for {object_path}: {e}")
            raise UpstreamError("failed to generate presigned upload URL")

        return url, expires_at

    async def delete_object(self, object_path: str) -> None:
        try:
            await run_in_threadpool(
                self.client.delete_object,
                Bucket=self.bucket_name,
                Key=object_path,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"[STORAGE] Delete failed for {object_path}: {e}")
            raise UpstreamError("failed to delete file")


class UploadService:
    """User uploads: listing photos, completion photos and insurance documents."""

    ALLOWED_MIME_TYPES = {
        "image/jpeg",
        "image/jpg",
        "image/png",
        "image/gif",
        "image/webp",
        "application/pdf",
    }
    ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp", ".pdf"}

    def __init__(self, provider: StorageProviderInterface):
        self.provider = provider
        self.settings = get_settings()

    @staticmethod
    def user_prefix(user_id: int) -> str:
        return f"uploads/{user_id}/"

    def generate_object_path(self, user_id: int, file_name: str, now: Optional[float] = None) -> str:
        """``uploads/{user_id}/{unix_ts}_{escaped base name}{ext}``"""
        timestamp = int(now if now is not None else time.time())
        base = os.path.basename(file_name)
        stem, ext = os.path.splitext(base)
        return f"{self.user_prefix(user_id)}{timestamp}_{quote_plus(stem)}{ext}"

    def validate_file(self, file_name: str, mime_type: str) -> None:
        if mime_type not in self.ALLOWED_MIME_TYPES:
            raise ValidationFailed(f"unsupported file type: {mime_type}")
        ext = os.path.splitext(file_name)[1].lower()
        if ext not in self.ALLOWED_EXTENSIONS:
            raise ValidationFailed(f"unsupported file extension: {ext}")

    async def upload(
        self,
        user_id: int,
        file_name: str,
        mime_type: str,
        body: BinaryIO,
        size: int,
    ) -> tuple[str, str]:
        """Validate and store a file. Returns (url, object_path)."""
        if size > self.settings.max_upload_size_bytes:
            raise ValidationFailed(f"file size exceeds {self.settings.max_upload_size_mb}MB limit")
        self.validate_file(file_name, mime_type)

        object_path = self.generate_object_path(user_id, file_name)
        url = await self.provider.upload_object(object_path, body, mime_type)
        logger.info(f"[STORAGE] User {user_id} uploaded {object_path} ({size} bytes)")
        return url, object_path

    async def create_presigned_upload(
        self,
        user_id: int,
        file_name: str,
        mime_type: str,
    ) -> tuple[str, str, datetime]:
        """Create presigned upload URL with validation.

        Returns:
            Tuple of (upload_url, object_path, expires_at)
        """
        self.validate_file(file_name, mime_type)
        object_path = self.generate_object_path(user_id, file_name)

        url, expires_at = await self.provider.generate_presigned_upload_url(
            object_path=object_path,
            mime_type=mime_type,
            ttl_seconds=self.settings.presign_ttl_seconds,
        )
        return url, object_path, expires_at

    async def delete(self, user_id: int, object_path: str) -> None:
        """Delete one of the caller's own uploads."""
        if not object_path.startswith(self.user_prefix(user_id)) or ".." in object_path:
            raise PermissionDenied("you can only delete your own uploads")
        await self.provider.delete_object(object_path)


def get_upload_service() -> UploadService:
    """Factory function to get the upload service based on config."""
    settings = get_settings()
    if not settings.aws_s3_bucket_name:
        raise UpstreamError("file storage not configured")

    provider = S3StorageProvider(
        bucket_name=settings.aws_s3_bucket_name,
        region=settings.aws_region,
        access_key_id=settings.aws_access_key_id,
        secret_access_key=settings.aws_secret_access_key,
    )
    return UploadService(provider)
