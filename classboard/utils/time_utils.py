"""
Time helpers for classboard queues.

Queue arithmetic is done in whole minutes after midnight. These helpers
convert between that representation, "HH:MM" strings and the ISO
date-time strings ("YYYY-MM-DDTHH:MM:00") stored on event rows.
"""

from datetime import datetime
from typing import Optional


MINUTES_PER_DAY = 1440

# Latest start accepted by the next-available-slot search (23:55)
LAST_SLOT_START = 1435


def time_to_minutes(time_str: str) -> int:
    """
    Convert "HH:MM" to minutes after midnight.

    Args:
        time_str: Time string in HH:MM (seconds are ignored if present)

    Returns:
        Minutes after midnight

    Raises:
        ValueError: If the string is not a valid time

    Examples:
        >>> time_to_minutes("09:30")
        570
    """
    try:
        parts = time_str.strip().split(":")
        hours, minutes = int(parts[0]), int(parts[1])
    except (AttributeError, IndexError, ValueError) as e:
        raise ValueError(f"Invalid time format '{time_str}' (expected HH:MM)") from e

    if not (0 <= hours <= 24 and 0 <= minutes < 60):
        raise ValueError(f"Invalid time format '{time_str}' (expected HH:MM)")

    return hours * 60 + minutes


def minutes_to_time(minutes: int) -> str:
    """
    Convert minutes after midnight to "HH:MM".

    Examples:
        >>> minutes_to_time(570)
        '09:30'
        >>> minutes_to_time(1440)
        '24:00'
    """
    hours, mins = divmod(int(minutes), 60)
    return f"{hours:02d}:{mins:02d}"


def parse_iso_datetime(value: str) -> datetime:
    """
    Parse an event date-time string.

    Accepts "YYYY-MM-DDTHH:MM[:SS]" with an optional trailing "Z" or offset.
    The wall-clock time is kept as written; no timezone conversion happens.
    """
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1]
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as e:
        raise ValueError(f"Invalid event date-time: {value}") from e
    return parsed.replace(tzinfo=None)


def get_minutes_from_iso(value: str) -> int:
    """Minutes after midnight of an ISO date-time string."""
    parsed = parse_iso_datetime(value)
    return parsed.hour * 60 + parsed.minute


def get_date_part(value: str) -> str:
    """The YYYY-MM-DD part of an ISO date-time string."""
    return parse_iso_datetime(value).strftime("%Y-%m-%d")


def create_iso_datetime(date_part: str, time_str: str) -> str:
    """
    Build the ISO string stored on event rows.

    Examples:
        >>> create_iso_datetime("2025-06-01", "10:00")
        '2025-06-01T10:00:00'
    """
    return f"{date_part}T{time_str}:00"


def format_hours(minutes: int) -> str:
    """
    Human readable duration ("1h 30m").

    Examples:
        >>> format_hours(90)
        '1h 30m'
        >>> format_hours(45)
        '45m'
    """
    hours, mins = divmod(int(minutes), 60)
    if hours and mins:
        return f"{hours}h {mins}m"
    if hours:
        return f"{hours}h"
    return f"{mins}m"


def parse_optional_time(time_str: Optional[str]) -> Optional[int]:
    """Like time_to_minutes but passes None through."""
    if time_str is None:
        return None
    return time_to_minutes(time_str)
