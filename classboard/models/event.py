"""
Event node models.

An EventNode is one scheduled block of instruction inside a teacher's
day. Nodes are immutable; every queue operation produces new nodes with
dataclasses.replace() so an earlier queue value is never disturbed.
"""

from dataclasses import dataclass, field, replace
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from ..utils.time_utils import create_iso_datetime, minutes_to_time


class EventStatus(Enum):
    """Event status label (free-form, no enforced transitions)."""
    PLANNED = "planned"
    TBC = "tbc"
    COMPLETED = "completed"
    UNCOMPLETED = "uncompleted"

    @property
    def is_settled(self) -> bool:
        """Completed and uncompleted events count as settled for stats."""
        return self in (EventStatus.COMPLETED, EventStatus.UNCOMPLETED)


class CommissionType(Enum):
    """How a teacher is paid for an event."""
    FIXED = "fixed"            # rate is per hour
    PERCENTAGE = "percentage"  # rate is a percentage of lesson revenue


@dataclass(frozen=True)
class StudentSnapshot:
    """
    Students attached to the booking behind an event.

    Attributes:
        leader_name: Name of the booking leader
        roster: Student ids on the booking
        capacity: Student capacity of the booking
    """

    leader_name: str = ""
    roster: Tuple[str, ...] = ()
    capacity: int = 0

    @property
    def student_count(self) -> int:
        """Students billed for the event (roster size, falling back to capacity)."""
        return len(self.roster) if self.roster else self.capacity


@dataclass(frozen=True)
class PackageSnapshot:
    """
    School package fields needed for revenue math.

    Attributes:
        price_per_student: Package price per student
        duration_minutes: Total instruction minutes the package covers
        capacity_students: Student capacity of the package
        category_equipment: Equipment category (e.g. "kite")
        capacity_equipment: Equipment units consumed per event
        description: Package description
    """

    price_per_student: Decimal = Decimal("0")
    duration_minutes: int = 0
    capacity_students: int = 0
    category_equipment: str = ""
    capacity_equipment: int = 0
    description: str = ""


@dataclass(frozen=True)
class CommissionSnapshot:
    """Commission attached to the lesson of an event."""

    type: CommissionType = CommissionType.FIXED
    rate: Decimal = Decimal("0")


@dataclass(frozen=True)
class EventNode:
    """
    One event in a teacher-day chain.

    Attributes:
        id: Event identifier
        lesson_id: Parent lesson
        booking_id: Booking the lesson belongs to
        date: Calendar day (YYYY-MM-DD)
        start_time: Minutes after midnight
        duration: Length in minutes
        location: Where the event takes place
        status: Status label
        student: Student snapshot
        package: Package snapshot
        commission: Commission snapshot
        successor_id: Id of the next node in the chain, None for the tail

    Examples:
        >>> node = EventNode(
        ...     id="evt_1",
        ...     lesson_id="lesson_1",
        ...     booking_id="booking_1",
        ...     date="2025-06-01",
        ...     start_time=600,
        ...     duration=60,
        ... )
        >>> node.end_time
        660
        >>> node.starts_at
        '2025-06-01T10:00:00'
    """

    id: str
    lesson_id: str
    booking_id: str
    date: str
    start_time: int
    duration: int
    location: str = ""
    status: EventStatus = EventStatus.PLANNED
    student: StudentSnapshot = field(default_factory=StudentSnapshot)
    package: PackageSnapshot = field(default_factory=PackageSnapshot)
    commission: CommissionSnapshot = field(default_factory=CommissionSnapshot)
    successor_id: Optional[str] = None

    @property
    def end_time(self) -> int:
        """Minutes after midnight at which the event ends."""
        return self.start_time + self.duration

    @property
    def starts_at(self) -> str:
        """ISO date-time of the start, as stored on event rows."""
        return create_iso_datetime(self.date, minutes_to_time(self.start_time))

    def shifted(self, delta_minutes: int) -> 'EventNode':
        """Copy moved by delta_minutes."""
        return replace(self, start_time=self.start_time + delta_minutes)

    def at(self, start_time: int) -> 'EventNode':
        """Copy starting at start_time."""
        return replace(self, start_time=start_time)

    def gap_after(self, other: 'EventNode') -> int:
        """Minutes between the end of this event and the start of other."""
        return other.start_time - self.end_time

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to the row format handed to the persistence layer.

        Returns:
            Dictionary with id, lesson, date-time, duration, location, status
        """
        return {
            "id": self.id,
            "lesson_id": self.lesson_id,
            "booking_id": self.booking_id,
            "date": self.starts_at,
            "duration": self.duration,
            "location": self.location,
            "status": self.status.value,
        }
