"""
Configuration management with environment variables.

This module provides centralized configuration management
with validation and type safety. Controller defaults for the queue
core are read from CLASSBOARD_* variables (or a .env file).
"""

import os
from pathlib import Path
from typing import Dict, Any, List
from dotenv import load_dotenv

from ..models.settings import ControllerSettings, DEFAULT_LOCATION_OPTIONS
from .time_utils import time_to_minutes


class Config:
    """
    Application configuration manager.

    Loads configuration from environment variables and provides
    validated access to configuration values.

    Attributes:
        gap_minutes: Required minutes between consecutive events
        step_duration: Granularity of time and duration edits
        min_duration: Shortest allowed event in minutes
        max_duration: Longest allowed event in minutes
        submit_time: Default start-of-day anchor (HH:MM)
        location: Default event location
        location_options: Locations offered for selection
        currency: Currency code shown next to money values
        output_dir: Output directory for logs, reports and ledgers
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Examples:
        >>> config = Config()
        >>> if config.validate():
        ...     settings = config.controller_settings()
        ...     print(f"Gap between lessons: {settings.gap_minutes}min")
    """

    def __init__(self):
        """Initialize configuration by loading environment variables."""
        # Load .env file if it exists
        load_dotenv()

        # Controller settings
        self._gap_minutes = int(os.getenv("CLASSBOARD_GAP_MINUTES", "0"))
        self._step_duration = int(os.getenv("CLASSBOARD_STEP_DURATION", "30"))
        self._min_duration = int(os.getenv("CLASSBOARD_MIN_DURATION", "60"))
        self._max_duration = int(os.getenv("CLASSBOARD_MAX_DURATION", "180"))
        self._submit_time = os.getenv("CLASSBOARD_SUBMIT_TIME", "09:00")
        self._location = os.getenv("CLASSBOARD_LOCATION", "Beach")

        options = os.getenv("CLASSBOARD_LOCATION_OPTIONS")
        self._location_options = (
            [option.strip() for option in options.split(",") if option.strip()]
            if options else list(DEFAULT_LOCATION_OPTIONS)
        )

        # Finance settings
        self._currency = os.getenv("CLASSBOARD_CURRENCY", "EUR").upper()

        # Output settings
        self._output_dir = Path(os.getenv("OUTPUT_DIR", "output"))
        self._log_level = os.getenv("LOG_LEVEL", "INFO").upper()

    @property
    def gap_minutes(self) -> int:
        """Get required gap between events in minutes."""
        return self._gap_minutes

    @property
    def step_duration(self) -> int:
        """Get edit step in minutes."""
        return self._step_duration

    @property
    def min_duration(self) -> int:
        """Get shortest allowed event in minutes."""
        return self._min_duration

    @property
    def max_duration(self) -> int:
        """Get longest allowed event in minutes."""
        return self._max_duration

    @property
    def submit_time(self) -> str:
        """Get default start-of-day anchor."""
        return self._submit_time

    @property
    def location(self) -> str:
        """Get default event location."""
        return self._location

    @property
    def location_options(self) -> List[str]:
        """Get selectable locations."""
        return list(self._location_options)

    @property
    def currency(self) -> str:
        """Get currency code for money values."""
        return self._currency

    @property
    def output_dir(self) -> Path:
        """Get output directory path."""
        return self._output_dir

    @property
    def log_level(self) -> str:
        """Get logging level."""
        return self._log_level

    def validate(self) -> bool:
        """
        Validate configuration values.

        Returns:
            True if all configuration is valid

        Raises:
            ValueError: If validation fails
        """
        errors = []

        if self._gap_minutes < 0:
            errors.append("CLASSBOARD_GAP_MINUTES must not be negative")

        if self._step_duration <= 0:
            errors.append("CLASSBOARD_STEP_DURATION must be positive")

        if self._min_duration <= 0:
            errors.append("CLASSBOARD_MIN_DURATION must be positive")

        if self._max_duration < self._min_duration:
            errors.append("CLASSBOARD_MAX_DURATION must be at least CLASSBOARD_MIN_DURATION")

        try:
            time_to_minutes(self._submit_time)
        except ValueError:
            errors.append("CLASSBOARD_SUBMIT_TIME must be a time in HH:MM format")

        if not self._location_options:
            errors.append("CLASSBOARD_LOCATION_OPTIONS must name at least one location")

        if len(self._currency) != 3 or not self._currency.isalpha():
            errors.append("CLASSBOARD_CURRENCY must be a three letter currency code")

        # Validate log level
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if self._log_level not in valid_levels:
            errors.append(
                f"LOG_LEVEL must be one of: {', '.join(valid_levels)}"
            )

        if errors:
            error_msg = "Configuration validation failed:\n  - " + "\n  - ".join(errors)
            raise ValueError(error_msg)

        return True

    def controller_settings(self) -> ControllerSettings:
        """
        Build the controller settings handed to the queue core.

        Returns:
            ControllerSettings from the environment over the defaults

        Raises:
            ValueError: If the values do not form valid settings
        """
        return ControllerSettings(
            gap_minutes=self._gap_minutes,
            step_duration=self._step_duration,
            min_duration=self._min_duration,
            max_duration=self._max_duration,
            submit_time=self._submit_time,
            location=self._location,
            location_options=tuple(self._location_options),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Configuration as a dictionary (for report headers)."""
        return {
            "controller": self.controller_settings().to_dict(),
            "currency": self._currency,
            "output_dir": str(self._output_dir),
            "log_level": self._log_level,
        }

    def create_output_directories(self):
        """Create output directories if they don't exist."""
        directories = [
            self.output_dir / "logs",
            self.output_dir / "reports",
            self.output_dir / "ledgers",
        ]

        for directory in directories:
            directory.mkdir(parents=True, exist_ok=True)


# Singleton instance
config = Config()
