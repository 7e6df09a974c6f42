"""Pydantic schemas for request/response validation."""

from mowsy.schemas.base import BaseSchema, MessageResponse, PageParams
from mowsy.schemas.auth import LoginRequest, RefreshRequest, RegisterRequest, TokenResponse
from mowsy.schemas.user import InsuranceUpload, UserPublicProfile, UserResponse, UserUpdate
from mowsy.schemas.job import (
    ApplicationStatusUpdate,
    JobApplicationCreate,
    JobApplicationResponse,
    JobCompleteRequest,
    JobCreate,
    JobResponse,
    JobUpdate,
)
from mowsy.schemas.equipment import (
    EquipmentCreate,
    EquipmentResponse,
    EquipmentUpdate,
    RentalCompleteRequest,
    RentalCreate,
    RentalResponse,
    RentalStatusUpdate,
)
from mowsy.schemas.payment import (
    ConfirmPaymentRequest,
    CreateIntentRequest,
    CreateIntentResponse,
    PaymentResponse,
    PaymentStatusResponse,
)
from mowsy.schemas.review import ReviewResponse
from mowsy.schemas.upload import (
    DeleteFileRequest,
    PresignedUploadRequest,
    PresignedUploadResponse,
    UploadResponse,
)
from mowsy.schemas.admin import AdminStats

__all__ = [
    "BaseSchema",
    "MessageResponse",
    "PageParams",
    "LoginRequest",
    "RefreshRequest",
    "RegisterRequest",
    "TokenResponse",
    "InsuranceUpload",
    "UserPublicProfile",
    "UserResponse",
    "UserUpdate",
    "ApplicationStatusUpdate",
    "JobApplicationCreate",
    "JobApplicationResponse",
    "JobCompleteRequest",
    "JobCreate",
    "JobResponse",
    "JobUpdate",
    "EquipmentCreate",
    "EquipmentResponse",
    "EquipmentUpdate",
    "RentalCompleteRequest",
    "RentalCreate",
    "RentalResponse",
    "RentalStatusUpdate",
    "ConfirmPaymentRequest",
    "CreateIntentRequest",
    "CreateIntentResponse",
    "PaymentResponse",
    "PaymentStatusResponse",
    "ReviewResponse",
    "DeleteFileRequest",
    "PresignedUploadRequest",
    "PresignedUploadResponse",
    "UploadResponse",
    "AdminStats",
]
