"""
Configuration management using Pydantic models loaded from YAML.
"""

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator

from .domain.slot_finder import SLOT_QUANTUM_MINUTES
from .limits import DEFAULT_MAX_PARTICIPANTS, MAX_WINDOW_DAYS, SLOW_REQUEST_THRESHOLD_MS


class DefaultsConfig(BaseModel):
    """Default settings for search."""
    duration_minutes: int = 60
    window_days: int = 7

    @field_validator("duration_minutes")
    @classmethod
    def validate_duration(cls, value: int) -> int:
        """Ensure meeting duration is positive and quantum aligned."""
        if value <= 0:
            raise ValueError("duration_minutes must be greater than zero")
        if value % SLOT_QUANTUM_MINUTES != 0:
            raise ValueError(f"duration_minutes must be a multiple of {SLOT_QUANTUM_MINUTES}")
        return value

    @field_validator("window_days")
    @classmethod
    def validate_window_days(cls, value: int) -> int:
        if not 1 <= value <= MAX_WINDOW_DAYS:
            raise ValueError(f"window_days must be between 1 and {MAX_WINDOW_DAYS}, got {value}")
        return value


class LimitsConfig(BaseModel):
    """Request limits and observability thresholds."""
    max_participants: int = DEFAULT_MAX_PARTICIPANTS
    slow_request_ms: int = SLOW_REQUEST_THRESHOLD_MS

    @field_validator("max_participants", "slow_request_ms")
    @classmethod
    def validate_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError(f"Value must be greater than zero, got {value}")
        return value


class AppConfig(BaseModel):
    """Application configuration."""
    data_file: Path = Path("meetings.json")
    log_level: str = "WARNING"
    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig)
    limits: LimitsConfig = Field(default_factory=LimitsConfig)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Accept standard logging level names in any case."""
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level

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

        # Relative data files live next to the config file
        if not config.data_file.is_absolute():
            config = config.model_copy(update={"data_file": config_path.parent / config.data_file})
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


def load_config(config_file: Path | None = None) -> AppConfig:
    """
    Load an explicit config file, or the default one when it exists.

    Falls back to built-in defaults only when no explicit file was requested.
    """
    if config_file is not None:
        return AppConfig.load_from_yaml(config_file)

    default_path = get_default_config_path()
    if default_path.exists():
        return AppConfig.load_from_yaml(default_path)
    return AppConfig()
