"""
Domain layer - Pure scheduling logic without external dependencies.
"""

from .availability import AvailabilityResolver, check_conflict, resolve_day_slots
from .exceptions import (
    BookingDataError,
    InvalidInterval,
    InvalidScheduleConfig,
    SchedulingError,
    UnknownServiceError,
)
from .models import (
    BlackoutPeriod,
    BusinessHours,
    CandidateSlot,
    ConflictReport,
    ExistingBooking,
    ResolvedSlot,
    ServiceScheduleConfig,
    TimeInterval,
    overlaps,
)
from .slot_generator import SlotGenerator, generate_slots

__all__ = [
    "AvailabilityResolver",
    "BlackoutPeriod",
    "BookingDataError",
    "BusinessHours",
    "CandidateSlot",
    "ConflictReport",
    "ExistingBooking",
    "InvalidInterval",
    "InvalidScheduleConfig",
    "ResolvedSlot",
    "SchedulingError",
    "ServiceScheduleConfig",
    "SlotGenerator",
    "TimeInterval",
    "UnknownServiceError",
    "check_conflict",
    "generate_slots",
    "overlaps",
    "resolve_day_slots",
]
