"""
Snapshot record types with type safety.

This module provides TypedDict definitions for the raw rows handed to
the queue core by the persistence layer for one school-day. The builder
turns them into EventNode chains.
"""

from typing import List, Literal, TypedDict


# Type aliases for status values
LessonStatus = Literal["active", "rest"]
EventStatusValue = Literal["planned", "tbc", "completed", "uncompleted"]
CommissionTypeValue = Literal["fixed", "percentage"]


class TeacherRecord(TypedDict):
    """
    Teacher row.

    Attributes:
        id: Teacher identifier
        username: Teacher username
    """

    id: str
    username: str


class PackageRecord(TypedDict):
    """
    School package row.

    Attributes:
        price_per_student: Price per student for the whole package
        duration_minutes: Total minutes the package covers
        capacity_students: Student capacity
        category_equipment: Equipment category
        capacity_equipment: Equipment units per event
        description: Package description
    """

    price_per_student: float
    duration_minutes: int
    capacity_students: int
    category_equipment: str
    capacity_equipment: int
    description: str


class BookingRecord(TypedDict):
    """
    Booking row with its package and students.

    Examples:
        >>> booking: BookingRecord = {
        ...     "id": "booking_1",
        ...     "leader_student_name": "Ana Lopez",
        ...     "students": ["student_1", "student_2"],
        ...     "package": {
        ...         "price_per_student": 100,
        ...         "duration_minutes": 120,
        ...         "capacity_students": 2,
        ...         "category_equipment": "kite",
        ...         "capacity_equipment": 1,
        ...         "description": "Beginner duo",
        ...     },
        ... }
    """

    id: str
    leader_student_name: str
    students: List[str]
    package: PackageRecord


class CommissionRecord(TypedDict):
    """Commission row (rate is per hour for fixed, percent for percentage)."""

    id: str
    type: CommissionTypeValue
    cph: float


class LessonRecord(TypedDict):
    """Lesson row: a teacher + booking + commission triple."""

    id: str
    teacher_id: str
    booking_id: str
    commission_id: str
    status: LessonStatus


class EventRecord(TypedDict):
    """
    Event row.

    Attributes:
        id: Event identifier
        lesson_id: Parent lesson
        date: ISO date-time of the start (YYYY-MM-DDTHH:MM:SS)
        duration: Duration in minutes
        location: Location label
        status: Status label
    """

    id: str
    lesson_id: str
    date: str
    duration: int
    location: str
    status: EventStatusValue


class DaySnapshot(TypedDict):
    """Everything the core needs for one school-day."""

    date: str
    teachers: List[TeacherRecord]
    bookings: List[BookingRecord]
    commissions: List[CommissionRecord]
    lessons: List[LessonRecord]
    events: List[EventRecord]
