"""
Shared fixtures and helpers for the test suite.
"""

from datetime import time

import pendulum
import pytest

from slotbook.domain.models import (
    BusinessHours,
    ExistingBooking,
    ServiceScheduleConfig,
    TimeInterval,
)

TZ = "Europe/Berlin"


def at(value: str) -> pendulum.DateTime:
    """Parse a local timestamp in the test timezone."""
    return pendulum.parse(value, tz=TZ)


def interval(start: str, end: str) -> TimeInterval:
    return TimeInterval(start=at(start), end=at(end))


def booking(booking_id: str, start: str, end: str) -> ExistingBooking:
    return ExistingBooking(id=booking_id, interval=interval(start, end))


@pytest.fixture
def morning_hours() -> BusinessHours:
    """09:00-12:00, Monday to Friday."""
    return BusinessHours(
        start_time=time(9, 0),
        end_time=time(12, 0),
        working_days=frozenset({1, 2, 3, 4, 5}),
        timezone=TZ,
    )


@pytest.fixture
def hourly_config(morning_hours) -> ServiceScheduleConfig:
    """60-minute service on a 30-minute grid."""
    return ServiceScheduleConfig(
        duration_minutes=60,
        slot_interval_minutes=30,
        business_hours=morning_hours,
    )
