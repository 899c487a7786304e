"""
Configuration management using Pydantic models loaded from YAML.
"""

from datetime import time
from pathlib import Path
from typing import List, Optional

import pendulum
import yaml
from pydantic import BaseModel, Field, PrivateAttr, field_validator, model_validator

from .domain.exceptions import UnknownServiceError
from .domain.models import BlackoutPeriod, BusinessHours, ServiceScheduleConfig, TimeInterval


def _parse_time_of_day(value):
    """
    Accept ``"HH:MM"`` strings and ``time`` objects.

    Unquoted ``09:00`` is read by YAML 1.1 as a base-60 integer (540), so
    integers are taken as minutes since midnight.
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid time of day: {value!r}")
    if isinstance(value, int):
        if not 0 <= value < 24 * 60:
            raise ValueError(f"Time of day out of range: {value}")
        return time(hour=value // 60, minute=value % 60)
    if isinstance(value, str):
        try:
            hour, minute = (int(part) for part in value.strip().split(":"))
        except ValueError as exc:
            raise ValueError(f"Time of day must use HH:MM, got {value!r}") from exc
        if not (0 <= hour <= 23 and 0 <= minute <= 59):
            raise ValueError(f"Time of day out of range: {value!r}")
        return time(hour=hour, minute=minute)
    return value


def _validate_weekdays(value: List[int]) -> List[int]:
    invalid_days = [day for day in value if day not in range(7)]
    if invalid_days:
        raise ValueError(f"working_days must be between 0 and 6, got {invalid_days}")
    # Preserve order while removing duplicates
    seen: set[int] = set()
    deduped: List[int] = []
    for day in value:
        if day not in seen:
            deduped.append(day)
            seen.add(day)
    return deduped


class DefaultsConfig(BaseModel):
    """Schedule defaults shared by all services."""
    duration_minutes: int = 60
    slot_interval_minutes: int = 30
    buffer_minutes: int = 0
    start_time: time = time(9, 0)
    end_time: time = time(18, 0)
    working_days: List[int] = Field(default_factory=lambda: [1, 2, 3, 4, 5, 6])  # Monday to Saturday

    @field_validator("duration_minutes", "slot_interval_minutes")
    @classmethod
    def validate_positive(cls, value: int) -> int:
        """Ensure durations and steps are positive."""
        if value <= 0:
            raise ValueError("value must be greater than zero")
        return value

    @field_validator("buffer_minutes")
    @classmethod
    def validate_buffer(cls, value: int) -> int:
        if value < 0:
            raise ValueError("buffer_minutes must not be negative")
        return value

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def parse_time(cls, value):
        return _parse_time_of_day(value)

    @field_validator("working_days")
    @classmethod
    def validate_working_days(cls, value: List[int]) -> List[int]:
        """Ensure weekdays are in valid range and deduplicated."""
        return _validate_weekdays(value)

    @model_validator(mode="after")
    def validate_hours_order(self) -> "DefaultsConfig":
        """Ensure the configured window opens before it closes."""
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be later than start_time")
        return self


class ServiceDefinition(BaseModel):
    """A bookable service. Unset fields fall back to the defaults."""
    id: str
    name: str = ""
    duration_minutes: Optional[int] = None
    slot_interval_minutes: Optional[int] = None
    buffer_minutes: Optional[int] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    working_days: Optional[List[int]] = None

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def parse_time(cls, value):
        if value is None:
            return value
        return _parse_time_of_day(value)

    @field_validator("working_days")
    @classmethod
    def validate_working_days(cls, value: Optional[List[int]]) -> Optional[List[int]]:
        if value is None:
            return value
        return _validate_weekdays(value)

    def display_name(self) -> str:
        """Get display name."""
        return self.name or self.id


class BlackoutConfig(BaseModel):
    """A configured period in which no slot is available."""
    start: str
    end: str
    reason: str = ""

    def to_period(self, timezone: str) -> BlackoutPeriod:
        """Build the domain blackout, reading naive timestamps in ``timezone``."""
        return BlackoutPeriod(
            interval=TimeInterval(
                start=pendulum.parse(self.start, tz=timezone),
                end=pendulum.parse(self.end, tz=timezone),
            ),
            reason=self.reason,
        )


class AppConfig(BaseModel):
    """Application configuration."""
    timezone: str = "Europe/Berlin"
    bookings_file: Optional[str] = None
    enforce_buffer: bool = False
    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig)
    services: List[ServiceDefinition] = Field(default_factory=list)
    blackouts: List[BlackoutConfig] = Field(default_factory=list)

    _base_dir: Path = PrivateAttr(default_factory=Path.cwd)

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        try:
            pendulum.timezone(value)
        except Exception as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @field_validator("services")
    @classmethod
    def validate_services(cls, value: List[ServiceDefinition]) -> List[ServiceDefinition]:
        """Ensure service ids are unique."""
        seen_ids: set[str] = set()
        for service in value:
            key = service.id.lower()
            if key in seen_ids:
                raise ValueError(f"Duplicate service id detected: {service.id}")
            seen_ids.add(key)
        return value

    @model_validator(mode="after")
    def validate_schedules(self) -> "AppConfig":
        """Build every service schedule and blackout once so bad values fail at load time."""
        for service in self.services:
            self._build_schedule(service)
        self.get_blackouts()
        return self

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        config = cls(**data)
        config._base_dir = config_path.resolve().parent
        return config

    def find_service(self, service_id: str) -> ServiceDefinition | None:
        """Find a service by its id (case-insensitive)."""
        for service in self.services:
            if service.id.lower() == service_id.lower():
                return service
        return None

    def get_schedule_config(self, service_id: str) -> ServiceScheduleConfig:
        """
        Build the schedule configuration of a service.

        Raises:
            UnknownServiceError: If the service is not configured
        """
        service = self.find_service(service_id)
        if service is None:
            raise UnknownServiceError(
                f"Unknown service: '{service_id}'. "
                f"Configured services: {', '.join(s.id for s in self.services) or 'none'}"
            )
        return self._build_schedule(service)

    def get_blackouts(self) -> List[BlackoutPeriod]:
        """Get the configured blackout periods."""
        return [blackout.to_period(self.timezone) for blackout in self.blackouts]

    def get_bookings_path(self) -> Path | None:
        """Resolve the bookings file relative to the config file."""
        if not self.bookings_file:
            return None
        path = Path(self.bookings_file)
        if not path.is_absolute():
            path = self._base_dir / path
        return path

    def _build_schedule(self, service: ServiceDefinition) -> ServiceScheduleConfig:
        defaults = self.defaults

        def pick(value, fallback):
            return fallback if value is None else value

        business_hours = BusinessHours(
            start_time=pick(service.start_time, defaults.start_time),
            end_time=pick(service.end_time, defaults.end_time),
            working_days=frozenset(pick(service.working_days, defaults.working_days)),
            timezone=self.timezone,
        )
        return ServiceScheduleConfig(
            duration_minutes=pick(service.duration_minutes, defaults.duration_minutes),
            slot_interval_minutes=pick(service.slot_interval_minutes, defaults.slot_interval_minutes),
            business_hours=business_hours,
            buffer_minutes=pick(service.buffer_minutes, defaults.buffer_minutes),
        )


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of slotbook/)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
