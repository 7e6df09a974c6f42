"""Services for the Mowsy marketplace."""

from mowsy.services.admin import AdminService
from mowsy.services.equipment import EquipmentService
from mowsy.services.geocoding import GeocodioService, get_geocoding_service
from mowsy.services.jobs import JobService
from mowsy.services.payments import PaymentService, get_payment_processor
from mowsy.services.storage import UploadService, get_upload_service
from mowsy.services.users import UserService

__all__ = [
    "AdminService",
    "EquipmentService",
    "GeocodioService",
    "get_geocoding_service",
    "JobService",
    "PaymentService",
    "get_payment_processor",
    "UploadService",
    "get_upload_service",
    "UserService",
]
