"""
Availability annotation and conflict detection.

Both operations rely on a single predicate: half-open interval overlap.
A booking ending exactly when a slot starts is not a conflict.
"""

from typing import Iterable, List, Sequence

from .exceptions import InvalidInterval, InvalidScheduleConfig
from .models import (
    BlackoutPeriod,
    CandidateSlot,
    ConflictReport,
    ExistingBooking,
    ResolvedSlot,
    TimeInterval,
    overlaps,
)


class AvailabilityResolver:
    """
    Resolves candidate slots and ad-hoc intervals against existing bookings.

    Args:
        blackouts: Periods in which day slots are never available
        buffer_minutes: Dead time appended to every booking before overlap
            checks; 0 applies bookings exactly as stored
    """

    def __init__(
        self,
        blackouts: Iterable[BlackoutPeriod] = (),
        buffer_minutes: int = 0,
    ):
        if buffer_minutes < 0:
            raise InvalidScheduleConfig(
                f"buffer_minutes must not be negative, got {buffer_minutes}"
            )
        self.blackouts = tuple(blackouts)
        self.buffer_minutes = buffer_minutes

    def resolve_day_slots(
        self,
        candidates: Iterable[CandidateSlot],
        existing_bookings: Iterable[ExistingBooking],
    ) -> List[ResolvedSlot]:
        """
        Annotate each candidate with availability.

        A slot is available iff it is not past, no booking overlaps it and no
        blackout overlaps it. Conflicting booking ids are listed in ascending
        booking start order.
        """
        occupied = self._occupied_intervals(existing_bookings)
        resolved: List[ResolvedSlot] = []

        for candidate in candidates:
            interval = _require_interval(candidate.interval)

            conflicting_ids = tuple(
                booking.id
                for booking, span in occupied
                if overlaps(interval, span)
            )
            blocked = any(
                overlaps(interval, blackout.interval) for blackout in self.blackouts
            )

            resolved.append(
                ResolvedSlot.from_candidate(
                    candidate,
                    conflicting_booking_ids=conflicting_ids,
                    blocked_by_blackout=blocked,
                )
            )

        return resolved

    def check_conflict(
        self,
        candidate_interval: TimeInterval,
        existing_bookings: Iterable[ExistingBooking],
    ) -> ConflictReport:
        """
        Check one arbitrary interval for conflicting bookings.

        Past times, business hours and blackouts are not consulted: callers
        decide whether to allow those.
        """
        interval = _require_interval(candidate_interval)
        conflicts = tuple(
            booking
            for booking, span in self._occupied_intervals(existing_bookings)
            if overlaps(interval, span)
        )
        return ConflictReport(candidate=interval, conflicts=conflicts)

    def _occupied_intervals(
        self,
        existing_bookings: Iterable[ExistingBooking],
    ) -> List[tuple[ExistingBooking, TimeInterval]]:
        """Pair each booking with the span it blocks, sorted by booking start."""
        bookings = list(existing_bookings)
        for booking in bookings:
            _require_interval(booking.interval)

        ordered = sorted(bookings, key=lambda booking: booking.interval.start)
        return [
            (booking, booking.interval.shifted_end(self.buffer_minutes))
            for booking in ordered
        ]


def _require_interval(value: object) -> TimeInterval:
    if not isinstance(value, TimeInterval):
        raise InvalidInterval(f"Expected a TimeInterval, got {type(value).__name__}")
    return value


def resolve_day_slots(
    candidates: Sequence[CandidateSlot],
    existing_bookings: Sequence[ExistingBooking],
) -> List[ResolvedSlot]:
    """Resolve slots against bookings only, without blackouts or buffer."""
    return AvailabilityResolver().resolve_day_slots(candidates, existing_bookings)


def check_conflict(
    candidate_interval: TimeInterval,
    existing_bookings: Sequence[ExistingBooking],
) -> ConflictReport:
    """Check an interval against bookings, without buffer."""
    return AvailabilityResolver().check_conflict(candidate_interval, existing_bookings)
