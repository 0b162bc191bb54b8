"""
Validation framework with Strategy pattern.

This module provides:
- ValidationReason, the typed failure codes surfaced to callers
- ValidationResult for consistent validation reporting
- Abstract Validator interface with reusable field checks
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional


class ValidationReason(Enum):
    """Why a placement was refused."""
    DURATION_OUT_OF_RANGE = "duration_out_of_range"
    OVERLAPS_PREVIOUS = "overlaps_previous"
    OVERLAPS_NEXT = "overlaps_next"
    OUT_OF_DAY_BOUNDS = "out_of_day_bounds"
    INVALID_RECORD = "invalid_record"


@dataclass
class ValidationResult:
    """
    Result of a validation.

    Attributes:
        is_valid: Whether validation passed
        reason: Failure code of the first error (None when valid)
        errors: List of error messages
        warnings: List of warning messages (non-fatal)

    Examples:
        >>> result = ValidationResult.valid()
        >>> result.is_valid
        True
        >>> result = ValidationResult.invalid(
        ...     ValidationReason.OVERLAPS_PREVIOUS,
        ...     "Starts 15 minutes too early"
        ... )
        >>> result.reason.value
        'overlaps_previous'
    """

    is_valid: bool
    reason: Optional[ValidationReason] = None
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @classmethod
    def valid(cls) -> 'ValidationResult':
        """Create a passing result."""
        return cls(is_valid=True)

    @classmethod
    def invalid(cls, reason: ValidationReason, message: str) -> 'ValidationResult':
        """Create a failing result with one error."""
        return cls(is_valid=True).add_error(message, reason)

    def add_error(
        self,
        message: str,
        reason: ValidationReason = ValidationReason.INVALID_RECORD
    ) -> 'ValidationResult':
        """
        Add an error message.

        The first error decides the reason; later errors only add messages.

        Args:
            message: Error message to add
            reason: Failure code for the error

        Returns:
            Self for method chaining
        """
        self.errors.append(message)
        if self.is_valid:
            self.reason = reason
        self.is_valid = False
        return self

    def add_warning(self, message: str) -> 'ValidationResult':
        """
        Add a warning message.

        Args:
            message: Warning message to add

        Returns:
            Self for method chaining
        """
        self.warnings.append(message)
        return self

    @property
    def has_errors(self) -> bool:
        """Check if there are errors."""
        return len(self.errors) > 0

    @property
    def has_warnings(self) -> bool:
        """Check if there are warnings."""
        return len(self.warnings) > 0

    @property
    def message(self) -> Optional[str]:
        """First error message, if any."""
        return self.errors[0] if self.errors else None

    def get_summary(self) -> str:
        """
        Get validation summary.

        Returns:
            Human-readable summary of validation results
        """
        if self.is_valid and not self.has_warnings:
            return "Validation passed"

        parts = []

        if self.has_errors:
            parts.append(f"Errors ({len(self.errors)}):")
            for error in self.errors:
                parts.append(f"  - {error}")

        if self.has_warnings:
            parts.append(f"Warnings ({len(self.warnings)}):")
            for warning in self.warnings:
                parts.append(f"  - {warning}")

        return "\n".join(parts)


class Validator(ABC):
    """
    Abstract base class for validators.

    Subclasses implement validate(); the helpers below return an error
    message or None so subclasses can collect several problems at once.
    """

    @abstractmethod
    def validate(self, data: Any) -> ValidationResult:
        """
        Validate data.

        Args:
            data: Data to validate

        Returns:
            ValidationResult with errors and warnings
        """
        pass

    def validate_required_fields(
        self,
        data: dict,
        required_fields: List[str]
    ) -> List[str]:
        """
        Validate that required fields exist.

        Args:
            data: Dictionary to check
            required_fields: List of required field names

        Returns:
            List of error messages for missing fields
        """
        errors = []
        for name in required_fields:
            if name not in data or data[name] is None:
                errors.append(f"Missing required field: {name}")
        return errors

    def validate_date_format(
        self,
        date_str: str,
        field_name: str = "date"
    ) -> Optional[str]:
        """
        Validate an event date-time (YYYY-MM-DDTHH:MM with optional seconds).

        Args:
            date_str: Date-time string to validate
            field_name: Name of the field (for error message)

        Returns:
            Error message if invalid, None if valid
        """
        pattern = r'^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}(:\d{2}(\.\d+)?)?(Z|[+-]\d{2}:\d{2})?$'
        if not isinstance(date_str, str) or not re.match(pattern, date_str):
            return f"Invalid {field_name} format: {date_str} (expected YYYY-MM-DDTHH:MM:SS)"
        return None

    def validate_positive_number(
        self,
        value: Any,
        field_name: str
    ) -> Optional[str]:
        """
        Validate that value is a positive number.

        Args:
            value: Value to validate
            field_name: Name of the field (for error message)

        Returns:
            Error message if invalid, None if valid
        """
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return f"{field_name} must be a number, got {type(value).__name__}"

        if value <= 0:
            return f"{field_name} must be positive, got {value}"

        return None

    def validate_choice(
        self,
        value: Any,
        field_name: str,
        choices: List[str]
    ) -> Optional[str]:
        """
        Validate that value is one of the allowed labels.

        Returns:
            Error message if invalid, None if valid
        """
        if value not in choices:
            return f"Invalid {field_name}: {value} (must be one of: {', '.join(choices)})"
        return None
