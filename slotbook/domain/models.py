"""
Domain models for slot generation and availability resolution.
"""

from dataclasses import dataclass, field
from datetime import date, time
from typing import FrozenSet, Tuple

import pendulum
from pendulum import DateTime

from .exceptions import InvalidInterval, InvalidScheduleConfig

WEEKDAY_NAMES = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")


def weekday_index(day: date) -> int:
    """Return the weekday of ``day`` with 0=Sunday, 6=Saturday."""
    return day.isoweekday() % 7


@dataclass(frozen=True)
class TimeInterval:
    """
    Represents an immutable half-open time range ``[start, end)``.

    Invariant: start must be before end. The offset of ``start`` and ``end``
    is kept for display; comparisons use the absolute instant.
    """
    start: DateTime
    end: DateTime

    def __post_init__(self):
        for name in ("start", "end"):
            value = getattr(self, name)
            if getattr(value, "tzinfo", None) is None:
                raise InvalidInterval(f"{name} must be a timezone-aware datetime, got {value!r}")
            if not isinstance(value, DateTime):
                object.__setattr__(self, name, pendulum.instance(value))
        if not self.start < self.end:
            raise InvalidInterval(
                f"Start time {self.start} must be before end time {self.end}"
            )

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return int((self.end - self.start).total_seconds() / 60)

    def overlaps(self, other: "TimeInterval") -> bool:
        """Check if this interval overlaps with another."""
        return overlaps(self, other)

    def shifted_end(self, minutes: int) -> "TimeInterval":
        """Return a copy whose end is moved by ``minutes``."""
        if not minutes:
            return self
        return TimeInterval(start=self.start, end=self.end.add(minutes=minutes))

    def format_display(self) -> str:
        """
        Format the interval for display.
        Format: Weekday, DD.MM.YYYY | HH:mm - HH:mm
        """
        weekday = WEEKDAY_NAMES[weekday_index(self.start)]
        return (
            f"{weekday}, {self.start.format('DD.MM.YYYY')} | "
            f"{self.start.format('HH:mm')} - {self.end.format('HH:mm')}"
        )

    def __str__(self) -> str:
        return f"{self.start.format('DD.MM.YYYY HH:mm')} - {self.end.format('HH:mm')}"


def overlaps(a: TimeInterval, b: TimeInterval) -> bool:
    """
    Half-open overlap test: ``[a.start, a.end)`` and ``[b.start, b.end)``
    overlap iff ``a.start < b.end and b.start < a.end``.

    Touching endpoints are not an overlap.
    """
    return a.start < b.end and b.start < a.end


@dataclass(frozen=True)
class BusinessHours:
    """
    Daily window and weekday set during which slots may be generated.

    ``working_days`` uses 0=Sunday ... 6=Saturday. Overnight windows are not
    supported.
    """
    start_time: time
    end_time: time
    working_days: FrozenSet[int]
    timezone: str = "UTC"

    def __post_init__(self):
        object.__setattr__(self, "working_days", frozenset(self.working_days))
        if self.start_time >= self.end_time:
            raise InvalidScheduleConfig(
                f"Business hours must open before they close, "
                f"got {self.start_time:%H:%M}-{self.end_time:%H:%M}"
            )
        invalid_days = sorted(day for day in self.working_days if day not in range(7))
        if invalid_days:
            raise InvalidScheduleConfig(
                f"working_days must be between 0 and 6, got {invalid_days}"
            )

    def is_working_day(self, day: date) -> bool:
        """Check if a given date falls on a working day."""
        return weekday_index(day) in self.working_days

    def window_for(self, day: date) -> TimeInterval | None:
        """
        Get the business-hours interval for a specific day.
        Returns None if it's not a working day.
        """
        if not self.is_working_day(day):
            return None

        start = pendulum.datetime(
            day.year, day.month, day.day,
            self.start_time.hour, self.start_time.minute,
            tz=self.timezone,
        )
        end = pendulum.datetime(
            day.year, day.month, day.day,
            self.end_time.hour, self.end_time.minute,
            tz=self.timezone,
        )
        return TimeInterval(start=start, end=end)


@dataclass(frozen=True)
class ServiceScheduleConfig:
    """Scheduling parameters of one bookable service."""
    duration_minutes: int
    slot_interval_minutes: int
    business_hours: BusinessHours
    buffer_minutes: int = 0

    def __post_init__(self):
        if self.duration_minutes <= 0:
            raise InvalidScheduleConfig(
                f"duration_minutes must be greater than zero, got {self.duration_minutes}"
            )
        if self.slot_interval_minutes <= 0:
            raise InvalidScheduleConfig(
                f"slot_interval_minutes must be greater than zero, got {self.slot_interval_minutes}"
            )
        if self.buffer_minutes < 0:
            raise InvalidScheduleConfig(
                f"buffer_minutes must not be negative, got {self.buffer_minutes}"
            )


@dataclass(frozen=True)
class CandidateSlot:
    """A slot of the raw grid, before bookings are taken into account."""
    interval: TimeInterval
    is_past: bool
    is_within_business_hours: bool = True


@dataclass(frozen=True)
class ExistingBooking:
    """A booking owned by the booking store. Read-only input."""
    id: str
    interval: TimeInterval
    status: str = "confirmed"


@dataclass(frozen=True)
class BlackoutPeriod:
    """A period in which nothing may be booked (holiday, absence)."""
    interval: TimeInterval
    reason: str = ""


@dataclass(frozen=True)
class ResolvedSlot:
    """A candidate slot annotated with its availability."""
    interval: TimeInterval
    is_past: bool
    is_within_business_hours: bool
    available: bool
    conflicting_booking_ids: Tuple[str, ...] = ()
    blocked_by_blackout: bool = False

    @classmethod
    def from_candidate(
        cls,
        candidate: CandidateSlot,
        conflicting_booking_ids: Tuple[str, ...] = (),
        blocked_by_blackout: bool = False,
    ) -> "ResolvedSlot":
        available = (
            not candidate.is_past
            and not conflicting_booking_ids
            and not blocked_by_blackout
        )
        return cls(
            interval=candidate.interval,
            is_past=candidate.is_past,
            is_within_business_hours=candidate.is_within_business_hours,
            available=available,
            conflicting_booking_ids=tuple(conflicting_booking_ids),
            blocked_by_blackout=blocked_by_blackout,
        )


@dataclass(frozen=True)
class ConflictReport:
    """Result of checking one candidate interval against existing bookings."""
    candidate: TimeInterval
    conflicts: Tuple[ExistingBooking, ...] = field(default_factory=tuple)

    @property
    def available(self) -> bool:
        return not self.conflicts

    @property
    def conflicting_booking_ids(self) -> Tuple[str, ...]:
        return tuple(booking.id for booking in self.conflicts)
