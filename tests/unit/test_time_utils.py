"""
Unit tests for time helpers.
"""

import pytest

from classboard.utils.time_utils import (
    create_iso_datetime,
    format_hours,
    get_date_part,
    get_minutes_from_iso,
    minutes_to_time,
    parse_optional_time,
    time_to_minutes,
)


class TestTimeConversion:
    """HH:MM and minutes."""

    def test_time_to_minutes(self):
        """Test HH:MM strings convert to minutes after midnight."""
        assert time_to_minutes("00:00") == 0
        assert time_to_minutes("09:30") == 570
        assert time_to_minutes("24:00") == 1440
        assert time_to_minutes("10:15:00") == 615

    @pytest.mark.parametrize("value", ["25:00", "10:60", "abc", "9", None])
    def test_invalid_times(self, value):
        """Test malformed times raise ValueError."""
        with pytest.raises(ValueError):
            time_to_minutes(value)

    def test_minutes_to_time(self):
        """Test minutes convert back to zero-padded HH:MM."""
        assert minutes_to_time(0) == "00:00"
        assert minutes_to_time(615) == "10:15"
        assert minutes_to_time(1440) == "24:00"

    def test_optional_time(self):
        """Test None passes through."""
        assert parse_optional_time(None) is None
        assert parse_optional_time("01:00") == 60


class TestIsoDates:
    """Event date-time strings."""

    def test_minutes_from_iso(self):
        """Test the wall-clock time is read as written."""
        assert get_minutes_from_iso("2025-06-01T10:15:00") == 615
        assert get_minutes_from_iso("2025-06-01T10:15:00Z") == 615
        assert get_minutes_from_iso("2025-06-01T10:15:00+02:00") == 615

    def test_date_part(self):
        """Test the calendar day is extracted."""
        assert get_date_part("2025-06-01T23:30:00") == "2025-06-01"

    def test_invalid_iso(self):
        """Test a malformed date-time raises ValueError."""
        with pytest.raises(ValueError, match="Invalid event date-time"):
            get_minutes_from_iso("June 1st")

    def test_create_iso_datetime(self):
        """Test the stored row format."""
        assert create_iso_datetime("2025-06-01", "09:05") == "2025-06-01T09:05:00"

    def test_format_hours(self):
        """Test human readable durations."""
        assert format_hours(90) == "1h 30m"
        assert format_hours(120) == "2h"
        assert format_hours(45) == "45m"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
