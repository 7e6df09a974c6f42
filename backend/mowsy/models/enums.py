"""Enumeration types for the Mowsy domain model."""

from enum import Enum

from sqlalchemy import Enum as SQLEnum


class Visibility(str, Enum):
    """Who may see a listing when the visibility filter is on."""
    ZIP_CODE = "zip_code"
    SCHOOL_DISTRICT = "school_district"


class JobCategory(str, Enum):
    MOWING = "mowing"
    WEEDING = "weeding"
    LEAF_REMOVAL = "leaf_removal"
    TRIMMING = "trimming"
    CLEANUP = "cleanup"
    OTHER = "other"


class JobStatus(str, Enum):
    """Status of a posted job."""
    OPEN = "open"
    IN_PROGRESS = "in_progress"  # An application was accepted
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ApplicationStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class EquipmentCategory(str, Enum):
    MOWER = "mower"
    WEED_WHACKER = "weed_whacker"
    EDGER = "edger"


class FuelType(str, Enum):
    GAS = "gas"
    ELECTRIC = "electric"
    BATTERY = "battery"


class PowerType(str, Enum):
    CORDED = "corded"
    CORDLESS = "cordless"
    GAS = "gas"
    PUSH = "push"


class RentalStatus(str, Enum):
    """Status of an equipment rental."""
    REQUESTED = "requested"
    APPROVED = "approved"    # Owner accepted; awaiting payment
    ACTIVE = "active"        # Paid
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PaymentType(str, Enum):
    JOB_PAYMENT = "job_payment"
    EQUIPMENT_RENTAL = "equipment_rental"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"


class ReviewType(str, Enum):
    JOB_COMPLETION = "job_completion"
    EQUIPMENT_RENTAL = "equipment_rental"


def db_enum(enum_cls: type[Enum]) -> SQLEnum:
    """Column type storing the enum's values rather than member names."""
    return SQLEnum(
        enum_cls,
        name=enum_cls.__name__.lower(),
        values_callable=lambda members: [m.value for m in members],
    )
