"""Admin schemas."""

from mowsy.schemas.base import BaseSchema


class AdminStats(BaseSchema):
    total_users: int
    active_users: int
    verified_insurance_users: int
    total_jobs: int
    open_jobs: int
    completed_jobs: int
    total_equipment: int
    available_equipment: int
    total_rentals: int
    active_rentals: int
    completed_rentals: int
    total_payments: int
    successful_payments: int
