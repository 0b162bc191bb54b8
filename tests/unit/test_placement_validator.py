"""
Unit tests for PlacementValidator.
"""

import pytest

from classboard.models.policy import CascadePolicy
from classboard.models.settings import ControllerSettings
from classboard.validation.placement_validator import PlacementValidator
from classboard.validation.validators import ValidationReason


@pytest.fixture
def validator(settings):
    return PlacementValidator(settings)


class TestValidate:
    """Single placements."""

    def test_valid_placement(self, validator, make_node):
        """Test a placement with room on both sides passes."""
        result = validator.validate(
            make_node("new", "11:15"),
            previous=make_node("e1", "10:00"),
            next_node=make_node("e2", "12:30"),
        )

        assert result.is_valid
        assert result.reason is None

    def test_duration_limits(self, validator, make_node):
        """Test durations outside the configured range are refused."""
        assert validator.validate(make_node("a", "10:00", 30)).is_valid
        assert validator.validate(make_node("b", "10:00", 180)).is_valid

        too_short = validator.validate(make_node("c", "10:00", 20))
        too_long = validator.validate(make_node("d", "10:00", 200))

        assert too_short.reason == ValidationReason.DURATION_OUT_OF_RANGE
        assert too_long.reason == ValidationReason.DURATION_OUT_OF_RANGE
        assert "outside [30, 180]" in too_long.message

    def test_overlaps_previous_respecting(self, validator, make_node):
        """Test the gap after the previous event is required."""
        result = validator.validate(
            make_node("new", "11:10"),
            previous=make_node("e1", "10:00"),
            policy=CascadePolicy.RESPECTING,
        )

        assert result.reason == ValidationReason.OVERLAPS_PREVIOUS
        assert "earliest start 11:15" in result.message

    def test_locked_allows_touching(self, validator, make_node):
        """Test Locked mode only forbids real overlap."""
        result = validator.validate(
            make_node("new", "11:10"),
            previous=make_node("e1", "10:00"),
            policy=CascadePolicy.LOCKED,
        )

        assert result.is_valid

    def test_overlaps_next(self, validator, make_node):
        """Test the gap before the next event is required."""
        candidate = make_node("new", "10:00")
        following = make_node("e2", "11:10")

        respecting = validator.validate(candidate, next_node=following)
        locked = validator.validate(candidate, next_node=following, policy=CascadePolicy.LOCKED)

        assert respecting.reason == ValidationReason.OVERLAPS_NEXT
        assert locked.is_valid

    def test_latest_start(self, validator, make_node):
        """Test a start after the latest allowed start is refused."""
        result = validator.validate(make_node("late", "23:15", 30))

        assert result.reason == ValidationReason.OUT_OF_DAY_BOUNDS

    def test_end_of_day(self, validator, make_node):
        """Test an event may end at midnight but not after."""
        assert validator.validate(make_node("a", "23:00", 60)).is_valid
        assert validator.validate(make_node("b", "23:00", 90)).reason == ValidationReason.OUT_OF_DAY_BOUNDS

    def test_earliest_start(self, make_node):
        """Test a start before the day window opens is refused."""
        validator = PlacementValidator(ControllerSettings(min_time_minutes=360))

        result = validator.validate(make_node("early", "05:00"))

        assert result.reason == ValidationReason.OUT_OF_DAY_BOUNDS
        assert "before 06:00" in result.message

    def test_duration_checked_first(self, validator, make_node):
        """Test the first failing check decides the reason."""
        result = validator.validate(
            make_node("new", "10:30", 200),
            previous=make_node("e1", "10:00"),
        )

        assert result.reason == ValidationReason.DURATION_OUT_OF_RANGE

    def test_required_gap(self, validator):
        """Test the gap depends on the policy."""
        assert validator.required_gap(CascadePolicy.RESPECTING) == 15
        assert validator.required_gap(CascadePolicy.LOCKED) == 0


class TestValidateChain:
    """Whole chains."""

    def test_packed_chain(self, validator, packed_queue):
        """Test a packed chain is valid in both modes."""
        assert validator.validate_chain(packed_queue.nodes).is_valid
        assert validator.validate_chain(packed_queue.nodes, CascadePolicy.LOCKED).is_valid

    def test_touching_chain(self, validator, make_node):
        """Test events without the gap are only valid when locked."""
        nodes = [make_node("e1", "10:00"), make_node("e2", "11:00")]

        assert validator.validate_chain(nodes).reason == ValidationReason.OVERLAPS_NEXT
        assert validator.validate_chain(nodes, CascadePolicy.LOCKED).is_valid


class TestValidateChanges:
    """Only what a mutation touched is judged."""

    def test_untouched_tight_spacing_is_not_judged(self, validator, make_node):
        """Test an existing short gap does not block an unrelated edit."""
        before = [make_node("e1", "10:00"), make_node("e2", "11:00")]
        after = [before[0], make_node("e2", "11:00", 90)]

        assert validator.validate_changes(before, after).is_valid

    def test_shrunk_gap_is_judged(self, validator, make_node):
        """Test moving an event closer than the gap is refused."""
        before = [make_node("e1", "10:00"), make_node("e2", "11:30")]
        after = [before[0], make_node("e2", "11:05")]

        result = validator.validate_changes(before, after)

        assert result.reason == ValidationReason.OVERLAPS_PREVIOUS

    def test_new_event_duration(self, validator, make_node):
        """Test a new event gets the duration check."""
        before = [make_node("e1", "10:00")]
        after = [before[0], make_node("new", "12:00", 10)]

        result = validator.validate_changes(before, after)

        assert result.reason == ValidationReason.DURATION_OUT_OF_RANGE

    def test_unmoved_late_event_is_not_judged(self, validator, make_node):
        """Test an untouched event past the latest start does not block edits."""
        late = make_node("late", "23:30", 30)
        before = [make_node("e1", "10:00"), late]
        after = [make_node("e1", "10:00", 90), late]

        assert validator.validate_changes(before, after).is_valid

    def test_moved_event_gets_bounds_check(self, validator, make_node):
        """Test a moved event must still fit in the day."""
        before = [make_node("e1", "22:00")]
        after = [make_node("e1", "23:30")]

        result = validator.validate_changes(before, after)

        assert result.reason == ValidationReason.OUT_OF_DAY_BOUNDS


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
