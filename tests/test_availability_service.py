"""
Tests for the AvailabilityService orchestration layer.
"""

import asyncio
from datetime import date
from typing import Dict, List

import pendulum
import pytest

from slotbook.domain.exceptions import InvalidScheduleConfig, UnknownServiceError
from slotbook.domain.models import BlackoutPeriod, ExistingBooking, ServiceScheduleConfig
from slotbook.services.availability_service import AvailabilityService

from conftest import at, booking, interval

TUESDAY = pendulum.date(2024, 11, 26)


class StubBookingRepository:
    """Minimal stub matching BookingRepositoryProtocol."""

    def __init__(self, bookings: Dict[date, List[ExistingBooking]]):
        self._bookings = bookings
        self.calls: List[tuple] = []

    async def list_bookings_for_service_on_date(self, service_id, day):
        self.calls.append((service_id, day.isoformat()))
        return list(self._bookings.get(day, []))


class StubConfigProvider:
    def __init__(self, configs: Dict[str, ServiceScheduleConfig]):
        self._configs = configs

    def get_schedule_config(self, service_id):
        try:
            return self._configs[service_id]
        except KeyError:
            raise UnknownServiceError(service_id) from None


def _build_service(config, bookings=None, **kwargs):
    repository = StubBookingRepository(bookings or {})
    service = AvailabilityService(
        booking_repository=repository,
        config_provider=StubConfigProvider({"massage": config}),
        **kwargs,
    )
    return service, repository


def test_get_day_slots_resolves_against_repository(hourly_config):
    """End-to-end call should yield resolved slots for the day."""
    service, repository = _build_service(
        hourly_config,
        {TUESDAY: [booking("b1", "2024-11-26 09:00", "2024-11-26 10:00")]},
    )

    slots = asyncio.run(service.get_day_slots("massage", TUESDAY, now=at("2024-11-25 12:00")))

    assert [slot.available for slot in slots] == [False, False, True, True, True]
    assert repository.calls == [("massage", "2024-11-26")]


def test_closed_day_skips_repository(hourly_config):
    service, repository = _build_service(hourly_config)

    slots = asyncio.run(service.get_day_slots("massage", pendulum.date(2024, 11, 30), now=at("2024-11-25 12:00")))

    assert slots == []
    assert repository.calls == []


def test_unknown_service_propagates(hourly_config):
    service, _ = _build_service(hourly_config)

    with pytest.raises(UnknownServiceError):
        asyncio.run(service.get_day_slots("yoga", TUESDAY, now=at("2024-11-25 12:00")))


def test_blackouts_are_applied_to_day_slots(hourly_config):
    service, _ = _build_service(
        hourly_config,
        blackouts=[BlackoutPeriod(interval("2024-11-26 00:00", "2024-11-27 00:00"), "Closed")],
    )

    slots = asyncio.run(service.get_day_slots("massage", TUESDAY, now=at("2024-11-25 12:00")))

    assert slots
    assert not any(slot.available for slot in slots)


def test_buffer_only_applied_when_enforced(morning_hours):
    config = ServiceScheduleConfig(
        duration_minutes=60,
        slot_interval_minutes=30,
        business_hours=morning_hours,
        buffer_minutes=30,
    )
    bookings = {TUESDAY: [booking("b1", "2024-11-26 09:00", "2024-11-26 10:00")]}
    now = at("2024-11-25 12:00")

    relaxed, _ = _build_service(config, bookings)
    strict, _ = _build_service(config, bookings, enforce_buffer=True)

    relaxed_slots = asyncio.run(relaxed.get_day_slots("massage", TUESDAY, now=now))
    strict_slots = asyncio.run(strict.get_day_slots("massage", TUESDAY, now=now))

    assert relaxed_slots[2].available  # 10:00
    assert not strict_slots[2].available


def test_check_candidate_uses_service_duration(hourly_config):
    service, _ = _build_service(
        hourly_config,
        {TUESDAY: [
            booking("b1", "2024-11-26 09:00", "2024-11-26 10:00"),
            booking("b2", "2024-11-26 11:00", "2024-11-26 12:00"),
        ]},
    )

    report = asyncio.run(service.check_candidate("massage", at("2024-11-26 10:15")))

    assert report.candidate == interval("2024-11-26 10:15", "2024-11-26 11:15")
    assert report.conflicting_booking_ids == ("b2",)
    assert not report.available


def test_check_candidate_with_explicit_duration(hourly_config):
    service, _ = _build_service(
        hourly_config,
        {TUESDAY: [booking("b2", "2024-11-26 11:00", "2024-11-26 12:00")]},
    )

    report = asyncio.run(service.check_candidate("massage", at("2024-11-26 10:15"), duration_minutes=45))

    assert report.available


def test_check_candidate_across_midnight_reads_both_days(hourly_config):
    wednesday = pendulum.date(2024, 11, 27)
    service, repository = _build_service(
        hourly_config,
        {wednesday: [booking("early", "2024-11-27 00:15", "2024-11-27 01:00")]},
    )

    report = asyncio.run(service.check_candidate("massage", at("2024-11-26 23:30")))

    assert report.conflicting_booking_ids == ("early",)
    assert repository.calls == [("massage", "2024-11-26"), ("massage", "2024-11-27")]


def test_check_candidate_rejects_non_positive_duration(hourly_config):
    service, _ = _build_service(hourly_config)

    with pytest.raises(InvalidScheduleConfig):
        asyncio.run(service.check_candidate("massage", at("2024-11-26 10:00"), duration_minutes=0))


def test_bookable_dates(hourly_config):
    service, _ = _build_service(hourly_config)

    dates = service.bookable_dates("massage", TUESDAY, days=7, now=at("2024-11-26 08:00"))

    assert [d.isoformat() for d in dates] == [
        "2024-11-26", "2024-11-27", "2024-11-28", "2024-11-29", "2024-12-02",
    ]


def test_next_available_slots_skips_past_and_booked(hourly_config):
    """Today's remaining slots are past or booked, so the search moves on to tomorrow."""
    service, repository = _build_service(
        hourly_config,
        {TUESDAY: [booking("b1", "2024-11-26 10:30", "2024-11-26 12:00")]},
    )

    slots = asyncio.run(service.next_available_slots("massage", now=at("2024-11-26 10:15"), limit=3))

    assert [slot.interval.start for slot in slots] == [
        at("2024-11-27 09:00"),
        at("2024-11-27 09:30"),
        at("2024-11-27 10:00"),
    ]
    assert all(slot.available for slot in slots)
    assert repository.calls == [("massage", "2024-11-26"), ("massage", "2024-11-27")]


def test_next_available_slots_includes_rest_of_today(hourly_config):
    service, _ = _build_service(hourly_config)

    slots = asyncio.run(service.next_available_slots("massage", now=at("2024-11-26 10:15"), limit=3))

    assert [slot.interval.start for slot in slots] == [
        at("2024-11-26 10:30"),
        at("2024-11-26 11:00"),
        at("2024-11-27 09:00"),
    ]


def test_next_available_slots_within_horizon(hourly_config):
    """Only the days inside the horizon are searched."""
    service, _ = _build_service(hourly_config)

    slots = asyncio.run(
        service.next_available_slots("massage", now=at("2024-11-29 11:30"), limit=5, days=2)
    )

    assert slots == []


def test_next_available_slots_rejects_non_positive_limit(hourly_config):
    service, _ = _build_service(hourly_config)

    with pytest.raises(InvalidScheduleConfig, match="limit"):
        asyncio.run(service.next_available_slots("massage", now=at("2024-11-26 10:15"), limit=0))
