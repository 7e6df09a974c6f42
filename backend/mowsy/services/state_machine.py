"""Legal status transitions for jobs, rentals and job applications.

Callers check ownership first and only then ask whether the transition is
legal, so a stranger poking at someone else's listing gets a permission
error regardless of its state.
"""

from enum import Enum
from typing import Mapping, Optional, TypeVar

from mowsy.models.enums import ApplicationStatus, JobStatus, RentalStatus
from mowsy.services.errors import StateConflict

S = TypeVar("S", bound=Enum)

JOB_TRANSITIONS: Mapping[JobStatus, frozenset[JobStatus]] = {
    JobStatus.OPEN: frozenset({JobStatus.IN_PROGRESS, JobStatus.CANCELLED}),
    JobStatus.IN_PROGRESS: frozenset({JobStatus.COMPLETED, JobStatus.CANCELLED}),
    JobStatus.COMPLETED: frozenset(),
    JobStatus.CANCELLED: frozenset(),
}

RENTAL_TRANSITIONS: Mapping[RentalStatus, frozenset[RentalStatus]] = {
    RentalStatus.REQUESTED: frozenset({RentalStatus.APPROVED, RentalStatus.CANCELLED}),
    RentalStatus.APPROVED: frozenset({RentalStatus.ACTIVE, RentalStatus.CANCELLED}),
    RentalStatus.ACTIVE: frozenset({RentalStatus.COMPLETED, RentalStatus.CANCELLED}),
    RentalStatus.COMPLETED: frozenset(),
    RentalStatus.CANCELLED: frozenset(),
}

APPLICATION_TRANSITIONS: Mapping[ApplicationStatus, frozenset[ApplicationStatus]] = {
    ApplicationStatus.PENDING: frozenset({ApplicationStatus.ACCEPTED, ApplicationStatus.REJECTED}),
    ApplicationStatus.ACCEPTED: frozenset(),
    ApplicationStatus.REJECTED: frozenset(),
}

_TABLES: dict[str, Mapping] = {
    "job": JOB_TRANSITIONS,
    "rental": RENTAL_TRANSITIONS,
    "application": APPLICATION_TRANSITIONS,
}


def can_transition(kind: str, current: S, target: S) -> bool:
    return target in _TABLES[kind].get(current, frozenset())


def ensure_transition(kind: str, current: S, target: S, message: Optional[str] = None) -> None:
    """Raise ``StateConflict`` unless ``current -> target`` is legal for ``kind``."""
    if not can_transition(kind, current, target):
        raise StateConflict(
            message or f"cannot move {kind} from {current.value} to {target.value}"
        )
