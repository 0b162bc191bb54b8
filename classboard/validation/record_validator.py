"""
Snapshot record validators.

Validates raw event, lesson and commission rows before the builder turns them into
queue nodes.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Dict

from .validators import Validator, ValidationResult


class EventRecordValidator(Validator):
    """
    Validator for event rows.

    Validates:
    - Required fields
    - Date-time format
    - Business rules (positive duration, known status)

    Examples:
        >>> validator = EventRecordValidator()
        >>> event = {
        ...     "id": "evt_1",
        ...     "lesson_id": "lesson_1",
        ...     "date": "2025-06-01T10:00:00",
        ...     "duration": 60,
        ...     "location": "Beach",
        ...     "status": "planned"
        ... }
        >>> result = validator.validate(event)
        >>> if result.is_valid:
        ...     print("Event row is valid")
    """

    # Valid status values
    VALID_STATUSES = ["planned", "tbc", "completed", "uncompleted"]

    # Business rule constraints
    MAX_DURATION = 24 * 60  # minutes

    def validate(self, data: Dict[str, Any]) -> ValidationResult:
        """
        Validate event row.

        Args:
            data: Event row dictionary

        Returns:
            ValidationResult with errors and warnings
        """
        result = ValidationResult(is_valid=True)

        errors = self.validate_required_fields(data, ["id", "lesson_id", "date", "duration"])
        for error in errors:
            result.add_error(error)

        if not result.is_valid:
            return result

        error = self.validate_date_format(data["date"], "date")
        if error:
            result.add_error(error)

        error = self.validate_positive_number(data["duration"], "duration")
        if error:
            result.add_error(error)
        elif data["duration"] > self.MAX_DURATION:
            result.add_error(
                f"Duration too long: {data['duration']} minutes "
                f"(maximum: {self.MAX_DURATION})"
            )
        elif int(data["duration"]) <= 0:
            result.add_error(f"Duration under one minute: {data['duration']}")
        elif int(data["duration"]) != data["duration"]:
            result.add_warning(
                f"Duration {data['duration']} is not whole minutes, it will be truncated"
            )

        status = data.get("status") or "planned"
        error = self.validate_choice(status, "status", self.VALID_STATUSES)
        if error:
            result.add_error(error)

        if not data.get("location"):
            result.add_warning(f"Event {data['id']} has no location")

        return result


class LessonRecordValidator(Validator):
    """Validator for lesson rows."""

    VALID_STATUSES = ["active", "rest"]

    def validate(self, data: Dict[str, Any]) -> ValidationResult:
        """
        Validate lesson row.

        Args:
            data: Lesson row dictionary

        Returns:
            ValidationResult with errors
        """
        result = ValidationResult(is_valid=True)

        errors = self.validate_required_fields(data, ["id", "teacher_id", "booking_id"])
        for error in errors:
            result.add_error(error)

        if not result.is_valid:
            return result

        error = self.validate_choice(data.get("status", "active"), "status", self.VALID_STATUSES)
        if error:
            result.add_error(error)

        if not data.get("commission_id"):
            result.add_warning(f"Lesson {data['id']} has no commission")

        return result


class CommissionRecordValidator(Validator):
    """
    Validator for commission rows.

    The rate (cph) may be a number or a numeric string; it must not be
    negative.
    """

    VALID_TYPES = ["fixed", "percentage"]

    def validate(self, data: Dict[str, Any]) -> ValidationResult:
        """
        Validate commission row.

        Args:
            data: Commission row dictionary

        Returns:
            ValidationResult with errors
        """
        result = ValidationResult(is_valid=True)

        errors = self.validate_required_fields(data, ["id", "type", "cph"])
        for error in errors:
            result.add_error(error)

        if not result.is_valid:
            return result

        error = self.validate_choice(data["type"], "type", self.VALID_TYPES)
        if error:
            result.add_error(error)

        rate = data["cph"]
        if isinstance(rate, bool):
            result.add_error(f"cph must be a number, got {type(rate).__name__}")
            return result
        try:
            rate = Decimal(str(rate))
        except InvalidOperation:
            result.add_error(f"cph must be a number, got {data['cph']!r}")
            return result

        if not rate.is_finite() or rate < 0:
            result.add_error(f"cph must be a non-negative number, got {data['cph']}")

        return result
