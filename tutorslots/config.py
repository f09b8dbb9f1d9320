"""
Configuration management using Pydantic models loaded from YAML.
"""

from pathlib import Path
from typing import List, Tuple

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.models import DEFAULT_WEEK, DisplayMode, ViewFilter, Weekday


class ApiConfig(BaseModel):
    """Where the marketplace API lives."""
    base_url: str = "http://localhost:3000/api"
    timeout_seconds: float = 30

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, value: str) -> str:
        """Require an http(s) URL and drop the trailing slash."""
        if not value.startswith(("http://", "https://")):
            raise ValueError(f"base_url must start with http:// or https://, got {value}")
        return value.rstrip("/")

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeout_seconds must be greater than zero")
        return value


class ViewConfig(BaseModel):
    """Default view filter for editing sessions."""
    start_hour: int = 0
    end_hour: int = 24
    display_mode: DisplayMode = DisplayMode.HALF_HOUR

    @field_validator("start_hour")
    @classmethod
    def validate_start_hour(cls, v: int) -> int:
        """Validate hour is between 0 and 23."""
        if not 0 <= v <= 23:
            raise ValueError(f"start_hour must be between 0 and 23, got {v}")
        return v

    @field_validator("end_hour")
    @classmethod
    def validate_end_hour(cls, v: int) -> int:
        """Validate hour is between 1 and 24 (exclusive end)."""
        if not 1 <= v <= 24:
            raise ValueError(f"end_hour must be between 1 and 24, got {v}")
        return v

    @model_validator(mode="after")
    def validate_hours_order(self) -> "ViewConfig":
        """Ensure the configured window opens before it closes."""
        if self.end_hour <= self.start_hour:
            raise ValueError("end_hour must be later than start_hour")
        return self

    def to_filter(self) -> ViewFilter:
        return ViewFilter(
            start_hour=self.start_hour,
            end_hour=self.end_hour,
            display_mode=self.display_mode,
        )


class AppConfig(BaseModel):
    """Application configuration."""
    tutor_id: int
    api: ApiConfig = Field(default_factory=ApiConfig)
    view: ViewConfig = Field(default_factory=ViewConfig)
    week_days: List[str] = Field(default_factory=lambda: [day.value for day in DEFAULT_WEEK])
    data_file: Path = Path("availability.json")

    @field_validator("tutor_id")
    @classmethod
    def validate_tutor_id(cls, value: int) -> int:
        if value <= 0:
            raise ValueError(f"tutor_id must be positive, got {value}")
        return value

    @field_validator("week_days")
    @classmethod
    def validate_week_days(cls, value: List[str]) -> List[str]:
        """Ensure day names are known and deduplicated."""
        known = {day.value for day in Weekday}
        invalid_days = [day for day in value if day not in known]
        if invalid_days:
            raise ValueError(
                f"week_days must be capitalised English day names, got {invalid_days}"
            )
        if not value:
            raise ValueError("week_days must name at least one day")
        # Preserve order while removing duplicates
        seen: set[str] = set()
        deduped: List[str] = []
        for day in value:
            if day not in seen:
                deduped.append(day)
                seen.add(day)
        return deduped

    @property
    def week(self) -> Tuple[Weekday, ...]:
        return tuple(Weekday(day) for day in self.week_days)

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
        if not config.data_file.is_absolute():
            config.data_file = config_path.parent / config.data_file
        return config


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
