"""
Tests for YAML configuration loading.
"""

from datetime import time
from pathlib import Path

import pytest
from pydantic import ValidationError

from slotbook.config import AppConfig
from slotbook.domain.exceptions import UnknownServiceError

from conftest import at

CONFIG_YAML = """
timezone: Europe/Berlin
bookings_file: data/bookings.json
enforce_buffer: true
defaults:
  duration_minutes: 60
  slot_interval_minutes: 30
  start_time: "09:00"
  end_time: "18:00"
  working_days: [1, 2, 3, 4, 5]
services:
  - id: haircut
    name: Haircut
    duration_minutes: 45
    buffer_minutes: 15
  - id: consultation
    start_time: "10:00"
    end_time: 16:00
blackouts:
  - start: "2024-12-24T00:00:00"
    end: "2024-12-27T00:00:00"
    reason: Holidays
"""


def _write(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(content, encoding="utf-8")
    return path


class TestLoadFromYaml:
    """Tests for AppConfig.load_from_yaml."""

    def test_load_full_config(self, tmp_path):
        config = AppConfig.load_from_yaml(_write(tmp_path, CONFIG_YAML))

        assert config.timezone == "Europe/Berlin"
        assert config.enforce_buffer is True
        assert [s.id for s in config.services] == ["haircut", "consultation"]
        assert config.get_bookings_path() == tmp_path.resolve() / "data" / "bookings.json"

    def test_missing_file_raises_error(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="Config file not found"):
            AppConfig.load_from_yaml(tmp_path / "missing.yaml")

    def test_invalid_yaml_raises_error(self, tmp_path):
        with pytest.raises(ValueError, match="Invalid YAML"):
            AppConfig.load_from_yaml(_write(tmp_path, "services: [unclosed"))

    def test_non_mapping_root_raises_error(self, tmp_path):
        with pytest.raises(ValueError, match="mapping at the root"):
            AppConfig.load_from_yaml(_write(tmp_path, "- a\n- b\n"))

    def test_empty_file_uses_defaults(self, tmp_path):
        config = AppConfig.load_from_yaml(_write(tmp_path, ""))

        assert config.services == []
        assert config.get_bookings_path() is None
        assert config.defaults.working_days == [1, 2, 3, 4, 5, 6]


class TestScheduleConfig:
    """Tests for building ServiceScheduleConfig values."""

    def test_service_overrides_defaults(self, tmp_path):
        config = AppConfig.load_from_yaml(_write(tmp_path, CONFIG_YAML))

        schedule = config.get_schedule_config("haircut")

        assert schedule.duration_minutes == 45
        assert schedule.slot_interval_minutes == 30
        assert schedule.buffer_minutes == 15
        assert schedule.business_hours.start_time == time(9, 0)
        assert schedule.business_hours.working_days == frozenset({1, 2, 3, 4, 5})
        assert schedule.business_hours.timezone == "Europe/Berlin"

    def test_unquoted_yaml_time_is_read_as_minutes(self, tmp_path):
        """YAML reads 16:00 as the base-60 integer 960."""
        config = AppConfig.load_from_yaml(_write(tmp_path, CONFIG_YAML))

        hours = config.get_schedule_config("consultation").business_hours

        assert hours.start_time == time(10, 0)
        assert hours.end_time == time(16, 0)

    def test_lookup_is_case_insensitive(self, tmp_path):
        config = AppConfig.load_from_yaml(_write(tmp_path, CONFIG_YAML))

        assert config.get_schedule_config("HairCut").duration_minutes == 45

    def test_unknown_service_raises_error(self, tmp_path):
        config = AppConfig.load_from_yaml(_write(tmp_path, CONFIG_YAML))

        with pytest.raises(UnknownServiceError, match="yoga"):
            config.get_schedule_config("yoga")

    def test_blackouts_use_config_timezone(self, tmp_path):
        config = AppConfig.load_from_yaml(_write(tmp_path, CONFIG_YAML))

        (holidays,) = config.get_blackouts()

        assert holidays.reason == "Holidays"
        assert holidays.interval.start == at("2024-12-24 00:00")


class TestValidation:
    """Invalid configurations fail at load time."""

    @pytest.mark.parametrize(
        "data",
        [
            {"defaults": {"duration_minutes": 0}},
            {"defaults": {"slot_interval_minutes": -15}},
            {"defaults": {"buffer_minutes": -1}},
            {"defaults": {"start_time": "18:00", "end_time": "09:00"}},
            {"defaults": {"start_time": "25:00"}},
            {"defaults": {"working_days": [1, 9]}},
            {"services": [{"id": "a", "duration_minutes": 0}]},
            {"services": [{"id": "a", "start_time": "12:00", "end_time": "11:00"}]},
            {"services": [{"id": "a"}, {"id": "A"}]},
            {"blackouts": [{"start": "2024-12-27T00:00:00", "end": "2024-12-24T00:00:00"}]},
            {"timezone": "Mars/Olympus"},
        ],
    )
    def test_invalid_config_raises_validation_error(self, data):
        with pytest.raises(ValidationError):
            AppConfig(**data)

    def test_working_days_are_deduplicated(self):
        config = AppConfig(defaults={"working_days": [1, 1, 2]})

        assert config.defaults.working_days == [1, 2]
