"""
Placement and snapshot record validation.

Usage:
    >>> from classboard.validation import PlacementValidator, ValidationReason
    >>> result = PlacementValidator(settings).validate(candidate, previous=head)
"""

from .placement_validator import PlacementValidator
from .record_validator import (
    CommissionRecordValidator,
    EventRecordValidator,
    LessonRecordValidator,
)
from .validators import ValidationReason, ValidationResult, Validator

__all__ = [
    "PlacementValidator",
    "CommissionRecordValidator",
    "EventRecordValidator",
    "LessonRecordValidator",
    "ValidationReason",
    "ValidationResult",
    "Validator",
]
