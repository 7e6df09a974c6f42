"""API Routers for Mowsy."""

from mowsy.routers.auth import router as auth_router
from mowsy.routers.users import router as users_router
from mowsy.routers.jobs import router as jobs_router
from mowsy.routers.equipment import router as equipment_router
from mowsy.routers.payments import router as payments_router
from mowsy.routers.uploads import router as uploads_router
from mowsy.routers.admin import router as admin_router

__all__ = [
    "auth_router",
    "users_router",
    "jobs_router",
    "equipment_router",
    "payments_router",
    "uploads_router",
    "admin_router",
]
