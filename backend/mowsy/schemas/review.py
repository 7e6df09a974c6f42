"""Review schemas."""

from datetime import datetime
from typing import Optional

from mowsy.models.enums import ReviewType
from mowsy.schemas.base import BaseSchema, IDMixin
from mowsy.schemas.user import UserPublicProfile


class ReviewResponse(BaseSchema, IDMixin):
    reviewer_user_id: int
    reviewed_user_id: int
    job_id: Optional[int] = None
    equipment_rental_id: Optional[int] = None
    rating: int
    comment: Optional[str] = None
    type: ReviewType
    created_at: datetime
    reviewer: Optional[UserPublicProfile] = None
