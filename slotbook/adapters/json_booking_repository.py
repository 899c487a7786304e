"""
Booking repository backed by a JSON file.
"""

import json
import logging
from datetime import date
from pathlib import Path
from typing import Any, Dict, List

import pendulum

from ..domain.exceptions import BookingDataError, InvalidInterval
from ..domain.models import ExistingBooking, TimeInterval

logger = logging.getLogger(__name__)

# Statuses of bookings that no longer occupy their time.
INACTIVE_STATUSES = frozenset({"cancelled", "refunded", "no_show"})


class JsonBookingRepository:
    """
    Reads existing bookings from a JSON file.

    The file holds a list of booking records as exported by the booking
    front end::

        [{"id": "b1", "serviceId": "haircut",
          "scheduledAt": "2024-11-26T09:00:00+01:00",
          "duration": 60, "status": "confirmed"}]

    The file is read on every call, so results always reflect the current
    file content. Inactive bookings and malformed records are skipped.
    """

    def __init__(self, data_file: Path, timezone: str = "UTC"):
        """
        Initialize the repository.

        Args:
            data_file: Path of the JSON booking file
            timezone: Timezone for timestamps without offset and for day boundaries
        """
        self.data_file = Path(data_file)
        self.timezone = timezone

    async def list_bookings_for_service_on_date(
        self,
        service_id: str,
        day: date,
    ) -> List[ExistingBooking]:
        """
        Return the active bookings of a service that touch the given day.

        Raises:
            BookingDataError: If the file cannot be read or is not a JSON list
        """
        day_start = pendulum.datetime(day.year, day.month, day.day, tz=self.timezone)
        day_window = TimeInterval(start=day_start, end=day_start.add(days=1))

        # Service ids are case-insensitive, as in the configuration lookup.
        wanted = service_id.lower()
        bookings: List[ExistingBooking] = []
        for record in self._load_records():
            if str(record.get("serviceId")).lower() != wanted:
                continue

            booking = self._parse_record(record)
            if booking is None:
                continue

            if booking.interval.overlaps(day_window):
                bookings.append(booking)

        bookings.sort(key=lambda booking: booking.interval.start)
        return bookings

    def _load_records(self) -> List[Dict[str, Any]]:
        if not self.data_file.exists():
            raise BookingDataError(f"Booking file not found: {self.data_file}")

        try:
            with open(self.data_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            raise BookingDataError(f"Could not read bookings from {self.data_file}: {exc}") from exc

        if not isinstance(data, list):
            raise BookingDataError(f"Booking file {self.data_file} must contain a JSON list.")

        return [record for record in data if isinstance(record, dict)]

    def _parse_record(self, record: Dict[str, Any]) -> ExistingBooking | None:
        status = str(record.get("status", "confirmed")).lower()
        if status in INACTIVE_STATUSES:
            return None

        try:
            start = pendulum.parse(record["scheduledAt"], tz=self.timezone)
            end = start.add(minutes=int(record["duration"]))
            return ExistingBooking(
                id=str(record["id"]),
                interval=TimeInterval(start=start, end=end),
                status=status,
            )
        except (KeyError, TypeError, ValueError, InvalidInterval) as exc:
            logger.warning("Skipping malformed booking record %r: %s", record.get("id"), exc)
            return None
