"""
Configuration management using Pydantic models loaded from YAML.
"""

from pathlib import Path
from typing import Dict, List

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.exceptions import InvalidTimeError
from .domain.models import BusinessHours, parse_time
from .domain.service_catalog import (
    DEFAULT_SERVICE_DURATION_HOURS,
    DEFAULT_SERVICE_DURATIONS,
    ServiceCatalog,
)
from .domain.slot_enumerator import DEFAULT_GRANULARITY_MINUTES, TimeSlotEnumerator


class BusinessHoursConfig(BaseModel):
    """Opening hours and booking duration bounds."""
    start: str = "07:00"
    end: str = "23:00"
    min_duration_hours: float = 1
    max_duration_hours: float = 8

    @field_validator("start", "end")
    @classmethod
    def validate_time(cls, v: str) -> str:
        """Validate HH:MM format."""
        try:
            parse_time(v)
        except InvalidTimeError as exc:
            raise ValueError(str(exc)) from exc
        return v

    @field_validator("min_duration_hours", "max_duration_hours")
    @classmethod
    def validate_duration(cls, value: float) -> float:
        """Ensure booking durations are positive."""
        if value <= 0:
            raise ValueError("booking durations must be greater than zero")
        return value

    @model_validator(mode="after")
    def validate_order(self) -> "BusinessHoursConfig":
        """Ensure the window opens before it closes and min <= max."""
        if parse_time(self.end) <= parse_time(self.start):
            raise ValueError("business hours end must be later than start")
        if self.max_duration_hours < self.min_duration_hours:
            raise ValueError("max_duration_hours must not be below min_duration_hours")
        return self

    def to_domain(self) -> BusinessHours:
        """Convert to the domain representation."""
        return BusinessHours(
            start=parse_time(self.start),
            end=parse_time(self.end),
            min_duration_minutes=int(round(self.min_duration_hours * 60)),
            max_duration_minutes=int(round(self.max_duration_hours * 60)),
        )


class Provider(BaseModel):
    """Provider alias configuration."""
    name: str  # Used as alias
    provider_id: str


class AppConfig(BaseModel):
    """Application configuration."""
    api_base_url: str = "http://localhost:3000/api"
    request_timeout_seconds: float = 30
    timezone: str = "Europe/Stockholm"
    slot_granularity_minutes: int = DEFAULT_GRANULARITY_MINUTES
    booking_horizon_days: int = 30
    business_hours: BusinessHoursConfig = Field(default_factory=BusinessHoursConfig)
    default_service_duration_hours: float = DEFAULT_SERVICE_DURATION_HOURS
    service_durations: Dict[str, float] = Field(
        default_factory=lambda: dict(DEFAULT_SERVICE_DURATIONS)
    )
    providers: List[Provider] = Field(default_factory=list)

    @field_validator("slot_granularity_minutes")
    @classmethod
    def validate_granularity(cls, value: int) -> int:
        """Ensure the step is positive and lines up with whole hours."""
        if value <= 0 or 60 % value != 0:
            raise ValueError(f"slot_granularity_minutes must divide 60, got {value}")
        return value

    @field_validator("default_service_duration_hours", "request_timeout_seconds")
    @classmethod
    def validate_positive(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("value must be greater than zero")
        return value

    @field_validator("booking_horizon_days")
    @classmethod
    def validate_horizon(cls, value: int) -> int:
        if value < 0:
            raise ValueError("booking_horizon_days must not be negative")
        return value

    @field_validator("service_durations")
    @classmethod
    def validate_service_durations(cls, value: Dict[str, float]) -> Dict[str, float]:
        """Every service needs a positive duration."""
        invalid = sorted(name for name, hours in value.items() if hours <= 0)
        if invalid:
            raise ValueError(f"service durations must be positive: {', '.join(invalid)}")
        return value

    @field_validator("providers")
    @classmethod
    def validate_providers(cls, value: List[Provider]) -> List[Provider]:
        """Ensure provider aliases and ids are unique."""
        seen_names: set[str] = set()
        seen_ids: set[str] = set()
        for provider in value:
            name_key = provider.name.lower()
            if name_key in seen_names:
                raise ValueError(f"Duplicate provider name detected: {provider.name}")
            if provider.provider_id in seen_ids:
                raise ValueError(f"Duplicate provider id detected: {provider.provider_id}")
            seen_names.add(name_key)
            seen_ids.add(provider.provider_id)
        return value

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

        return cls(**data)

    def find_provider_by_name(self, name: str) -> Provider | None:
        """Find a provider by their name (alias)."""
        for provider in self.providers:
            if provider.name.lower() == name.lower():
                return provider
        return None

    def resolve_provider(self, identifier: str) -> str:
        """
        Resolve a provider alias to a provider id.

        Identifiers that match no alias are taken to be provider ids already.
        """
        provider = self.find_provider_by_name(identifier)
        if provider:
            return provider.provider_id
        return identifier

    def build_catalog(self) -> ServiceCatalog:
        return ServiceCatalog(
            durations=self.service_durations,
            default_hours=self.default_service_duration_hours,
        )

    def build_enumerator(self) -> TimeSlotEnumerator:
        return TimeSlotEnumerator(
            granularity_minutes=self.slot_granularity_minutes,
            business_hours=self.business_hours.to_domain(),
        )


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
