"""
Application service for slot grids and conflict checks.

The service fetches existing bookings through a repository adapter, reads the
schedule of a service from a configuration provider and delegates the actual
computation to the domain-level ``SlotGenerator`` and ``AvailabilityResolver``.
Results are snapshots: nothing is locked or cached between calls.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, List, Protocol

from pendulum import DateTime

from ..domain.availability import AvailabilityResolver
from ..domain.exceptions import InvalidScheduleConfig
from ..domain.models import (
    BlackoutPeriod,
    ConflictReport,
    ExistingBooking,
    ResolvedSlot,
    ServiceScheduleConfig,
    TimeInterval,
)
from ..domain.slot_generator import SlotGenerator

logger = logging.getLogger(__name__)


class BookingRepositoryProtocol(Protocol):
    """Read access to the booking store."""

    async def list_bookings_for_service_on_date(
        self,
        service_id: str,
        day: date,
    ) -> List[ExistingBooking]:
        """Return the bookings of a service on a date."""


class ScheduleConfigProviderProtocol(Protocol):
    """Read access to service schedule configuration."""

    def get_schedule_config(self, service_id: str) -> ServiceScheduleConfig:
        """Return the schedule configuration of a service."""


class AvailabilityService:
    """
    Orchestrates booking retrieval, slot generation and availability resolution.

    Dependency inversion toward protocols makes it easy to plug in the JSON
    repository, a real backend, or a stub in tests.
    """

    def __init__(
        self,
        booking_repository: BookingRepositoryProtocol,
        config_provider: ScheduleConfigProviderProtocol,
        blackouts: Iterable[BlackoutPeriod] = (),
        enforce_buffer: bool = False,
    ) -> None:
        self._booking_repository = booking_repository
        self._config_provider = config_provider
        self._blackouts = tuple(blackouts)
        self._enforce_buffer = enforce_buffer

    async def get_day_slots(
        self,
        service_id: str,
        day: date,
        now: DateTime,
    ) -> List[ResolvedSlot]:
        """Generate the slot grid of a day and resolve it against bookings."""
        config = self._config_provider.get_schedule_config(service_id)
        candidates = SlotGenerator(config).generate_slots(day, now)

        if not candidates:
            logger.debug("No candidate slots for %s on %s", service_id, day)
            return []

        bookings = await self._booking_repository.list_bookings_for_service_on_date(
            service_id, day
        )
        logger.debug(
            "Resolving %d slots for %s on %s against %d bookings",
            len(candidates), service_id, day, len(bookings),
        )
        return self._resolver_for(config).resolve_day_slots(candidates, bookings)

    async def check_candidate(
        self,
        service_id: str,
        start: DateTime,
        duration_minutes: int | None = None,
    ) -> ConflictReport:
        """
        Check a proposed start time for conflicts.

        The candidate does not need to lie on the slot grid. Past times are
        not rejected; that decision belongs to the caller.
        """
        config = self._config_provider.get_schedule_config(service_id)
        duration = config.duration_minutes if duration_minutes is None else duration_minutes
        if duration <= 0:
            raise InvalidScheduleConfig(f"duration_minutes must be greater than zero, got {duration}")

        candidate = TimeInterval(start=start, end=start.add(minutes=duration))
        tz = config.business_hours.timezone
        first_day = candidate.start.in_timezone(tz).date()
        last_day = candidate.end.in_timezone(tz).date()

        # A candidate crossing midnight needs the bookings of both days.
        bookings: dict[str, ExistingBooking] = {}
        day = first_day
        while day <= last_day:
            for booking in await self._booking_repository.list_bookings_for_service_on_date(
                service_id, day
            ):
                bookings.setdefault(booking.id, booking)
            day = day.add(days=1)

        return self._resolver_for(config, with_blackouts=False).check_conflict(
            candidate, bookings.values()
        )

    def bookable_dates(
        self,
        service_id: str,
        start_date: date,
        days: int,
        now: DateTime,
    ) -> List[date]:
        """List the upcoming working days of a service."""
        config = self._config_provider.get_schedule_config(service_id)
        return SlotGenerator(config).bookable_dates(start_date, days=days, now=now)

    async def next_available_slots(
        self,
        service_id: str,
        now: DateTime,
        limit: int = 5,
        days: int = 30,
    ) -> List[ResolvedSlot]:
        """
        Collect the next ``limit`` available slots, starting with today.

        Walks the bookable dates of the next ``days`` days in order and stops
        as soon as enough slots are found.
        """
        if limit <= 0:
            raise InvalidScheduleConfig(f"limit must be greater than zero, got {limit}")

        config = self._config_provider.get_schedule_config(service_id)
        today = now.in_timezone(config.business_hours.timezone).date()

        found: List[ResolvedSlot] = []
        for day in self.bookable_dates(service_id, today, days=days, now=now):
            slots = await self.get_day_slots(service_id, day, now)
            found.extend(slot for slot in slots if slot.available)
            if len(found) >= limit:
                break

        logger.debug("Found %d available slots for %s", len(found), service_id)
        return found[:limit]

    def _resolver_for(
        self,
        config: ServiceScheduleConfig,
        with_blackouts: bool = True,
    ) -> AvailabilityResolver:
        return AvailabilityResolver(
            blackouts=self._blackouts if with_blackouts else (),
            buffer_minutes=config.buffer_minutes if self._enforce_buffer else 0,
        )
