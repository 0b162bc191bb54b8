"""
Queue builder.

Turns a DaySnapshot (raw rows for one school-day) into one
TeacherDayQueue per teacher. A change notification from the persistence
layer is answered by running the builder again on the fresh snapshot.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..finance.commission import to_decimal
from ..models.errors import ChainIntegrityError
from ..models.event import (
    CommissionSnapshot,
    CommissionType,
    EventNode,
    EventStatus,
    PackageSnapshot,
    StudentSnapshot,
)
from ..models.records import BookingRecord, CommissionRecord, DaySnapshot, EventRecord
from ..validation.record_validator import (
    CommissionRecordValidator,
    EventRecordValidator,
    LessonRecordValidator,
)
from ..utils.time_utils import get_date_part, get_minutes_from_iso
from .teacher_queue import LessonRef, TeacherDayQueue, TeacherInfo


logger = logging.getLogger(__name__)


@dataclass
class BuildResult:
    """
    Outcome of building the queues of one day.

    Attributes:
        date: Day the queues belong to
        queues: One queue per teacher, in the order teachers are listed
        failures: Teacher id to error message for queues that were refused
        warnings: Rows that were skipped and why
    """

    date: str
    queues: List[TeacherDayQueue] = field(default_factory=list)
    failures: Dict[str, str] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)

    @property
    def has_failures(self) -> bool:
        return bool(self.failures)

    def by_teacher(self) -> Dict[str, TeacherDayQueue]:
        """Queues keyed by teacher id."""
        return {queue.teacher.id: queue for queue in self.queues}

    def get(self, teacher_id: str) -> Optional[TeacherDayQueue]:
        return self.by_teacher().get(teacher_id)


def _event_node(
    row: EventRecord,
    lesson: LessonRef,
    booking: BookingRecord,
    commission: CommissionRecord
) -> EventNode:
    package = booking.get("package") or {}
    students = tuple(booking.get("students") or ())
    return EventNode(
        id=row["id"],
        lesson_id=lesson.id,
        booking_id=lesson.booking_id,
        date=get_date_part(row["date"]),
        start_time=get_minutes_from_iso(row["date"]),
        duration=int(row["duration"]),
        location=row.get("location") or "",
        status=EventStatus(row.get("status") or "planned"),
        student=StudentSnapshot(
            leader_name=booking.get("leader_student_name", ""),
            roster=students,
            capacity=int(package.get("capacity_students", 0) or 0),
        ),
        package=PackageSnapshot(
            price_per_student=to_decimal(package.get("price_per_student", 0) or 0),
            duration_minutes=int(package.get("duration_minutes", 0) or 0),
            capacity_students=int(package.get("capacity_students", 0) or 0),
            category_equipment=package.get("category_equipment", ""),
            capacity_equipment=int(package.get("capacity_equipment", 0) or 0),
            description=package.get("description", ""),
        ),
        commission=CommissionSnapshot(
            type=CommissionType(commission["type"]),
            rate=to_decimal(commission["cph"]),
        ),
    )


def build_teacher_queues(snapshot: DaySnapshot) -> BuildResult:
    """
    Build every teacher's queue for the snapshot day.

    Rest lessons keep their LessonRef but none of their events are
    placed. Lessons without a known booking or commission are skipped.
    Events dated on another day are skipped. A teacher whose events
    cannot form a valid chain is reported in failures; the other teachers
    are built regardless.

    Args:
        snapshot: Raw rows for one school-day

    Returns:
        BuildResult with queues, failures and warnings

    Examples:
        >>> result = build_teacher_queues(snapshot)
        >>> for queue in result.queues:
        ...     print(queue.teacher.username, queue.event_ids)
    """
    date = snapshot["date"]
    result = BuildResult(date=date)

    bookings = {booking["id"]: booking for booking in snapshot.get("bookings", [])}
    commissions = {row["id"]: row for row in snapshot.get("commissions", [])}
    teachers = {row["id"]: row for row in snapshot.get("teachers", [])}

    lesson_validator = LessonRecordValidator()
    commission_validator = CommissionRecordValidator()
    lessons: Dict[str, LessonRef] = {}
    lessons_by_teacher: Dict[str, List[LessonRef]] = {teacher_id: [] for teacher_id in teachers}

    for row in snapshot.get("lessons", []):
        validation = lesson_validator.validate(row)
        if not validation.is_valid:
            result.warnings.append(f"Lesson {row.get('id')} skipped: {validation.message}")
            continue

        lesson = LessonRef(
            id=row["id"],
            teacher_id=row["teacher_id"],
            booking_id=row["booking_id"],
            commission_id=row.get("commission_id"),
            status=row.get("status", "active"),
        )
        if lesson.teacher_id not in teachers:
            result.warnings.append(f"Lesson {lesson.id} skipped: unknown teacher {lesson.teacher_id}")
            continue
        if lesson.booking_id not in bookings:
            result.warnings.append(f"Lesson {lesson.id} skipped: unknown booking {lesson.booking_id}")
            continue

        commission = commissions.get(lesson.commission_id) if lesson.commission_id else None
        if commission is None:
            result.warnings.append(f"Lesson {lesson.id} skipped: no commission")
            continue
        commission_check = commission_validator.validate(commission)
        if not commission_check.is_valid:
            result.warnings.append(
                f"Lesson {lesson.id} skipped: commission {lesson.commission_id} "
                f"{commission_check.message}"
            )
            continue

        lessons[lesson.id] = lesson
        lessons_by_teacher[lesson.teacher_id].append(lesson)

    event_validator = EventRecordValidator()
    nodes_by_teacher: Dict[str, List[EventNode]] = {teacher_id: [] for teacher_id in teachers}

    for row in snapshot.get("events", []):
        validation = event_validator.validate(row)
        if not validation.is_valid:
            result.warnings.append(f"Event {row.get('id')} skipped: {validation.message}")
            continue

        lesson = lessons.get(row["lesson_id"])
        if lesson is None:
            result.warnings.append(f"Event {row['id']} skipped: lesson {row['lesson_id']} not loaded")
            continue
        if lesson.is_rest:
            continue
        if get_date_part(row["date"]) != date:
            result.warnings.append(f"Event {row['id']} skipped: dated {row['date']}, not {date}")
            continue

        node = _event_node(
            row, lesson, bookings[lesson.booking_id], commissions[lesson.commission_id]
        )
        nodes_by_teacher[lesson.teacher_id].append(node)

    for teacher_id, teacher_row in teachers.items():
        teacher = TeacherInfo(id=teacher_id, username=teacher_row.get("username", ""))
        try:
            queue = TeacherDayQueue.from_events(
                teacher,
                date,
                nodes_by_teacher[teacher_id],
                lessons_by_teacher[teacher_id],
            )
        except ChainIntegrityError as e:
            logger.error(f"Refusing queue for teacher {teacher_id} on {date}: {e}")
            result.failures[teacher_id] = str(e)
            continue
        result.queues.append(queue)

    for warning in result.warnings:
        logger.warning(warning)

    logger.info(
        f"Built {len(result.queues)} queues for {date} "
        f"({len(result.failures)} refused, {len(result.warnings)} rows skipped)"
    )
    return result
