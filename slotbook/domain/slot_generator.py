"""
Generation of the candidate slot grid for a calendar day.

Pure domain logic without any external dependencies (no API calls, no
database, no I/O).
"""

from datetime import date
from typing import List

import pendulum
from pendulum import DateTime

from .exceptions import InvalidScheduleConfig
from .models import CandidateSlot, ServiceScheduleConfig, TimeInterval


class SlotGenerator:
    """
    Produces the ordered candidate slots of one day for a service.

    Algorithm:
    1. Resolve the business-hours window for the date (none on closed days)
    2. Starting at opening time, step forward by ``slot_interval_minutes``
    3. Emit a slot of ``duration_minutes`` while it ends within the window
    4. Mark slots starting before ``now`` as past

    The step is the slot interval, not duration plus buffer, so slots of the
    raw grid may overlap each other. Pruning is left to the resolver.
    """

    def __init__(self, config: ServiceScheduleConfig):
        if not isinstance(config, ServiceScheduleConfig):
            raise InvalidScheduleConfig(
                f"Expected a ServiceScheduleConfig, got {type(config).__name__}"
            )
        self.config = config

    def generate_slots(self, day: date, now: DateTime) -> List[CandidateSlot]:
        """
        Generate the candidate grid for ``day``.

        Args:
            day: Calendar date, interpreted in the business-hours timezone
            now: Reference instant for past detection

        Returns:
            CandidateSlot list in ascending start order; empty on non-working
            days or when the duration does not fit the window
        """
        window = self.config.business_hours.window_for(day)
        if window is None:
            return []

        slots: List[CandidateSlot] = []
        start = window.start

        while True:
            end = start.add(minutes=self.config.duration_minutes)
            if end > window.end:
                break

            slots.append(
                CandidateSlot(
                    interval=TimeInterval(start=start, end=end),
                    is_past=start < now,
                    is_within_business_hours=True,
                )
            )
            start = start.add(minutes=self.config.slot_interval_minutes)

        return slots

    def bookable_dates(
        self,
        start_date: date,
        days: int = 30,
        now: DateTime | None = None,
    ) -> List[date]:
        """
        List the working days in ``[start_date, start_date + days)``.

        Days before the date of ``now`` (in the business-hours timezone) are
        skipped.
        """
        if days <= 0:
            raise InvalidScheduleConfig(f"days must be greater than zero, got {days}")

        business_hours = self.config.business_hours
        today = None
        if now is not None:
            today = now.in_timezone(business_hours.timezone).date()

        first = pendulum.date(start_date.year, start_date.month, start_date.day)
        dates: List[date] = []

        for offset in range(days):
            current = first.add(days=offset)
            if today is not None and current < today:
                continue
            if business_hours.is_working_day(current):
                dates.append(current)

        return dates


def generate_slots(
    day: date,
    config: ServiceScheduleConfig,
    now: DateTime,
) -> List[CandidateSlot]:
    """Functional form of ``SlotGenerator(config).generate_slots(day, now)``."""
    return SlotGenerator(config).generate_slots(day, now)
