"""
Configuration management using Pydantic models loaded from YAML.
"""

from pathlib import Path
from typing import List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import pendulum
import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.models import ShippingMethod, ShippingSlotConfig


def _validate_timezone(value: str) -> str:
    try:
        ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Unknown timezone '{value}'") from exc
    return value


class SlotConfigSettings(BaseModel):
    """Slot schedule of one shipping method."""
    name: str = "Default"
    timezone: str = "Europe/Paris"
    rrule: str
    starts_at: str  # Local wall-clock time, e.g. "2024-01-02 09:00"
    duration_range: int = 120  # Minutes
    pickup_delay: int = 0  # Minutes
    preparation_delay: int = 0  # Minutes
    available_spots: int = 1

    @field_validator("starts_at", mode="before")
    @classmethod
    def coerce_starts_at(cls, value):
        """YAML reads bare dates and datetimes as objects, keep them as text."""
        if not isinstance(value, str):
            return str(value)
        return value

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        return _validate_timezone(value)

    @field_validator("available_spots", "duration_range")
    @classmethod
    def validate_positive(cls, value: int) -> int:
        """Capacity and duration must be at least one."""
        if value < 1:
            raise ValueError(f"Value must be greater than zero, got {value}")
        return value

    @field_validator("pickup_delay", "preparation_delay")
    @classmethod
    def validate_delay(cls, value: int) -> int:
        if value < 0:
            raise ValueError(f"Delay cannot be negative, got {value}")
        return value

    @model_validator(mode="after")
    def validate_starts_at(self) -> "SlotConfigSettings":
        """Ensure the anchor parses in the configured timezone."""
        try:
            pendulum.parse(self.starts_at, tz=self.timezone)
        except ValueError as exc:
            raise ValueError(f"Invalid starts_at '{self.starts_at}': {exc}") from exc
        return self

    def to_domain(self) -> ShippingSlotConfig:
        return ShippingSlotConfig(
            name=self.name,
            rrule=self.rrule,
            starts_at=pendulum.parse(self.starts_at, tz=self.timezone),
            duration_range=self.duration_range,
            available_spots=self.available_spots,
            pickup_delay=self.pickup_delay,
            preparation_delay=self.preparation_delay,
            timezone=self.timezone,
        )


class ShippingMethodSettings(BaseModel):
    """Shipping method with an optional slot schedule."""
    code: str
    name: str = ""
    slot_config: Optional[SlotConfigSettings] = None

    def to_domain(self) -> ShippingMethod:
        return ShippingMethod(
            code=self.code,
            name=self.name or self.code,
            slot_config=self.slot_config.to_domain() if self.slot_config else None,
        )


class AppConfig(BaseModel):
    """Application configuration."""
    timezone: str = "Europe/Paris"
    calendar_days: int = 14
    state_file: Path = Path("checkout_state.json")
    log_level: str = "WARNING"
    enforce_capacity: bool = True
    shipping_methods: List[ShippingMethodSettings] = Field(default_factory=list)

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        return _validate_timezone(value)

    @field_validator("calendar_days")
    @classmethod
    def validate_calendar_days(cls, value: int) -> int:
        if value < 1:
            raise ValueError("calendar_days must be greater than zero")
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level '{value}'")
        return level

    @field_validator("shipping_methods")
    @classmethod
    def validate_unique_codes(cls, value: List[ShippingMethodSettings]) -> List[ShippingMethodSettings]:
        seen: set[str] = set()
        for method in value:
            if method.code in seen:
                raise ValueError(f"Duplicate shipping method code '{method.code}'")
            seen.add(method.code)
        return value

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Relative ``state_file`` paths are resolved against the config file's directory.

        Raises:
            FileNotFoundError: If config file doesn't exist
            pydantic.ValidationError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        config = cls(**data)
        if not config.state_file.is_absolute():
            config.state_file = config_path.parent / config.state_file
        return config

    def build_methods(self) -> List[ShippingMethod]:
        return [method.to_domain() for method in self.shipping_methods]


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    config_path = Path.cwd() / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
