"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .availability_service import (
    AvailabilityService,
    BookingRepositoryProtocol,
    ScheduleConfigProviderProtocol,
)

__all__ = [
    "AvailabilityService",
    "BookingRepositoryProtocol",
    "ScheduleConfigProviderProtocol",
]
