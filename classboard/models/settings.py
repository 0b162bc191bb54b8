"""
Controller settings dataclass.

This module provides the read-only configuration handed to every
validator, mutator and optimizer call. Settings are loaded once per
school session and never mutated by the core.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Tuple

from ..utils.time_utils import MINUTES_PER_DAY, time_to_minutes


DEFAULT_LOCATION_OPTIONS = ("Beach", "Bay", "Lake", "River", "Pool", "Indoor")


@dataclass(frozen=True)
class ControllerSettings:
    """
    Queue controller settings.

    Attributes:
        gap_minutes: Required minutes between consecutive events
        step_duration: Granularity of interactive time and duration edits
        duration_cap_one: First duration preset
        duration_cap_two: Second duration preset
        duration_cap_three: Third duration preset
        min_duration: Shortest allowed event
        max_duration: Longest allowed event
        submit_time: Default start-of-day anchor (HH:MM)
        location: Default location for new events
        location_options: Locations offered for selection
        min_time_minutes: Earliest allowed start (minutes after midnight)
        max_time_minutes: Latest allowed start (minutes after midnight)

    Examples:
        >>> # Default configuration
        >>> settings = ControllerSettings()

        >>> # Fifteen minute changeover between lessons
        >>> settings = ControllerSettings(gap_minutes=15)

        >>> # Adjust one value on an existing configuration
        >>> wider = settings.with_updates(max_duration=240)
    """

    gap_minutes: int = 0
    step_duration: int = 30
    duration_cap_one: int = 60
    duration_cap_two: int = 90
    duration_cap_three: int = 120
    min_duration: int = 60
    max_duration: int = 180
    submit_time: str = "09:00"
    location: str = "Beach"
    location_options: Tuple[str, ...] = field(default=DEFAULT_LOCATION_OPTIONS)
    min_time_minutes: int = 0
    max_time_minutes: int = 1380

    def __post_init__(self):
        """Validate configuration after initialization."""
        if self.gap_minutes < 0:
            raise ValueError(f"gap_minutes must not be negative, got: {self.gap_minutes}")

        if self.step_duration <= 0:
            raise ValueError(f"step_duration must be positive, got: {self.step_duration}")

        if self.min_duration <= 0:
            raise ValueError(f"min_duration must be positive, got: {self.min_duration}")

        if self.max_duration < self.min_duration:
            raise ValueError(
                f"max_duration must be at least min_duration, "
                f"got: {self.max_duration} < {self.min_duration}"
            )

        caps = (self.duration_cap_one, self.duration_cap_two, self.duration_cap_three)
        if any(cap <= 0 for cap in caps):
            raise ValueError(f"duration caps must be positive, got: {caps}")

        if not (0 <= self.min_time_minutes <= self.max_time_minutes < MINUTES_PER_DAY):
            raise ValueError(
                f"time window must satisfy 0 <= min <= max < {MINUTES_PER_DAY}, "
                f"got: ({self.min_time_minutes}, {self.max_time_minutes})"
            )

        # Raises ValueError on a malformed time
        time_to_minutes(self.submit_time)

        if isinstance(self.location_options, list):
            object.__setattr__(self, "location_options", tuple(self.location_options))

    @property
    def submit_time_minutes(self) -> int:
        """Default anchor in minutes after midnight."""
        return time_to_minutes(self.submit_time)

    @property
    def duration_caps(self) -> Tuple[int, int, int]:
        """The three duration presets."""
        return (self.duration_cap_one, self.duration_cap_two, self.duration_cap_three)

    def with_updates(self, **updates: Any) -> 'ControllerSettings':
        """
        Copy with some values replaced (validated again).

        Examples:
            >>> ControllerSettings().with_updates(gap_minutes=10).gap_minutes
            10
        """
        return replace(self, **updates)

    @classmethod
    def default(cls) -> 'ControllerSettings':
        """
        Out-of-the-box configuration (no gap, 60 to 180 minute events).

        Examples:
            >>> ControllerSettings.default().gap_minutes
            0
        """
        return cls()

    @classmethod
    def for_testing(cls) -> 'ControllerSettings':
        """
        Configuration used by the test-suite.

        Returns:
            Settings with a 15 minute gap and a 30 to 180 minute duration range

        Examples:
            >>> settings = ControllerSettings.for_testing()
            >>> assert settings.gap_minutes == 15
        """
        return cls(
            gap_minutes=15,
            step_duration=15,
            min_duration=30,
            max_duration=180,
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ControllerSettings':
        """
        Create settings from a stored dictionary, ignoring unknown keys.

        Args:
            data: Stored settings (for example a tenant's saved controller)

        Returns:
            ControllerSettings with stored values over the defaults
        """
        known = {name for name in cls.__dataclass_fields__}
        values = {key: value for key, value in data.items() if key in known}
        if "location_options" in values:
            values["location_options"] = tuple(values["location_options"])
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert configuration to dictionary.

        Examples:
            >>> settings = ControllerSettings(gap_minutes=5)
            >>> assert settings.to_dict()["gap_minutes"] == 5
        """
        return {
            "gap_minutes": self.gap_minutes,
            "step_duration": self.step_duration,
            "duration_cap_one": self.duration_cap_one,
            "duration_cap_two": self.duration_cap_two,
            "duration_cap_three": self.duration_cap_three,
            "min_duration": self.min_duration,
            "max_duration": self.max_duration,
            "submit_time": self.submit_time,
            "location": self.location,
            "location_options": list(self.location_options),
            "min_time_minutes": self.min_time_minutes,
            "max_time_minutes": self.max_time_minutes,
        }
