"""Tests for the upload routes and the upload service."""

import re

import pytest

from mowsy.services.errors import PermissionDenied, ValidationFailed
from mowsy.services.storage import UploadService

from conftest import FakeStorageProvider


class TestUploadService:
    def test_object_path(self):
        service = UploadService(FakeStorageProvider())
        path = service.generate_object_path(7, "../../My Lawn.JPG", now=1750000000)
        assert path == "uploads/7/1750000000_My+Lawn.JPG"

    @pytest.mark.parametrize(
        "file_name,mime_type",
        [("notes.txt", "text/plain"), ("photo.exe", "image/png"), ("photo", "image/png")],
    )
    def test_rejects_unsupported_files(self, file_name, mime_type):
        with pytest.raises(ValidationFailed):
            UploadService(FakeStorageProvider()).validate_file(file_name, mime_type)

    async def test_cannot_delete_other_users_files(self):
        service = UploadService(FakeStorageProvider())
        with pytest.raises(PermissionDenied):
            await service.delete(7, "uploads/8/1750000000_lawn.jpg")
        with pytest.raises(PermissionDenied):
            await service.delete(7, "uploads/7/../8/1750000000_lawn.jpg")


class TestUploadRoutes:
    def test_upload_image(self, client, api, register, storage_provider):
        user, headers = register("pat@example.com")

        response = client.post(
            f"{api}/upload/image",
            files={"file": ("lawn.png", b"\x89PNG fake image", "image/png")},
            headers=headers,
        )
        assert response.status_code == 201
        body = response.json()
        assert re.fullmatch(rf"uploads/{user['id']}/\d+_lawn\.png", body["key"])
        assert body["url"].endswith(body["key"])
        assert body["size"] == len(b"\x89PNG fake image")
        assert storage_provider.objects[body["key"]] == b"\x89PNG fake image"

    def test_upload_rejects_type(self, client, api, register):
        _, headers = register("pat@example.com")
        response = client.post(
            f"{api}/upload/image",
            files={"file": ("notes.txt", b"hello", "text/plain")},
            headers=headers,
        )
        assert response.status_code == 400

    def test_upload_rejects_oversized_file(self, client, api, register):
        _, headers = register("pat@example.com")
        big = b"0" * (10 * 1024 * 1024 + 1)
        response = client.post(
            f"{api}/upload/image",
            files={"file": ("big.jpg", big, "image/jpeg")},
            headers=headers,
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "file size exceeds 10MB limit"

    def test_upload_requires_auth(self, client, api):
        response = client.post(
            f"{api}/upload/image",
            files={"file": ("lawn.png", b"x", "image/png")},
        )
        assert response.status_code in (401, 403)

    def test_presigned_url(self, client, api, register):
        user, headers = register("pat@example.com")
        response = client.post(
            f"{api}/upload/presigned-url",
            json={"file_name": "policy.pdf", "mime_type": "application/pdf"},
            headers=headers,
        )
        assert response.status_code == 200
        body = response.json()
        assert body["key"].startswith(f"uploads/{user['id']}/")
        assert "signature=test" in body["upload_url"]

    def test_delete_file(self, client, api, register, storage_provider):
        user, headers = register("pat@example.com")
        key = client.post(
            f"{api}/upload/image",
            files={"file": ("lawn.png", b"png", "image/png")},
            headers=headers,
        ).json()["key"]

        _, other_headers = register("rex@example.com")
        response = client.request("DELETE", f"{api}/upload/file", json={"key": key}, headers=other_headers)
        assert response.status_code == 403

        response = client.request("DELETE", f"{api}/upload/file", json={"key": key}, headers=headers)
        assert response.status_code == 200
        assert key not in storage_provider.objects
