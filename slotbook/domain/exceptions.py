"""
Domain-specific exception hierarchy for the slot engine.
"""


class SchedulingError(Exception):
    """Base class for all application-level errors."""


class InvalidScheduleConfig(SchedulingError, ValueError):
    """Raised when a service schedule configuration cannot produce a grid."""


class InvalidInterval(SchedulingError, ValueError):
    """Raised when a time interval does not start before it ends."""


class UnknownServiceError(SchedulingError):
    """Raised when no schedule is configured for a service id."""


class BookingDataError(SchedulingError):
    """Raised when booking data cannot be read or parsed."""
