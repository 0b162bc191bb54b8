"""
Classboard data models.

Usage:
    >>> from classboard.models import EventNode, ControllerSettings, CascadePolicy
"""

from .errors import (
    ChainIntegrityError,
    ClassboardError,
    EventNotFoundError,
    LockPreconditionError,
    StatusRequirementError,
)
from .event import (
    CommissionSnapshot,
    CommissionType,
    EventNode,
    EventStatus,
    PackageSnapshot,
    StudentSnapshot,
)
from .policy import CascadePolicy
from .settings import ControllerSettings

__all__ = [
    "ChainIntegrityError",
    "ClassboardError",
    "EventNotFoundError",
    "LockPreconditionError",
    "StatusRequirementError",
    "CommissionSnapshot",
    "CommissionType",
    "EventNode",
    "EventStatus",
    "PackageSnapshot",
    "StudentSnapshot",
    "CascadePolicy",
    "ControllerSettings",
]
