"""SQLAlchemy models for the Mowsy marketplace."""

from mowsy.models.user import User
from mowsy.models.job import Job, JobApplication
from mowsy.models.equipment import Equipment, EquipmentRental
from mowsy.models.payment import Payment
from mowsy.models.review import Review

__all__ = [
    "User",
    "Job",
    "JobApplication",
    "Equipment",
    "EquipmentRental",
    "Payment",
    "Review",
]
