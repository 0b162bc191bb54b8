"""
Classboard statistics.

Rolls teacher queues up into per-teacher and day-wide figures: lesson
count against event count (day completion), instruction time, students
and the teacher/school earnings split. Sums are kept exact; rounding
happens only when a figure is read for display.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, FrozenSet, Iterable, List

import pandas as pd

from ..finance.commission import Earnings, calculate_for_event, round_money
from ..models.event import EventNode
from ..queue.teacher_queue import TeacherDayQueue


logger = logging.getLogger(__name__)

TENTH = Decimal("0.1")


def completion_percentage(event_count: int, lesson_count: int) -> int:
    """
    Events as a whole-number percentage of lessons (half-up, 0 without lessons).

    Examples:
        >>> completion_percentage(1, 3)
        33
        >>> completion_percentage(1, 8)
        13
    """
    if lesson_count <= 0:
        return 0
    ratio = Decimal(event_count) * 100 / Decimal(lesson_count)
    return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def hours(total_minutes: int) -> float:
    """Minutes as hours rounded to one decimal."""
    return float((Decimal(total_minutes) / 60).quantize(TENTH, rounding=ROUND_HALF_UP))


def _counts(node: EventNode, count_all_events: bool) -> bool:
    return count_all_events or node.status.is_settled


@dataclass
class TeacherStats:
    """
    Figures of one teacher's day.

    Attributes:
        teacher_id: Teacher
        username: Teacher username
        lesson_count: Non-rest lessons with at least one event that day
        event_count: Events in the queue
        total_minutes: Instruction minutes (raw)
        earnings: Earnings split (raw)
        students: Unique students taught
    """

    teacher_id: str
    username: str
    lesson_count: int = 0
    event_count: int = 0
    total_minutes: int = 0
    earnings: Earnings = field(default_factory=Earnings)
    students: FrozenSet[str] = frozenset()

    @property
    def is_complete(self) -> bool:
        return self.lesson_count > 0 and self.event_count == self.lesson_count

    @property
    def completion_percentage(self) -> int:
        return completion_percentage(self.event_count, self.lesson_count)

    @property
    def total_hours(self) -> float:
        return hours(self.total_minutes)

    @property
    def student_count(self) -> int:
        return len(self.students)

    def to_dict(self) -> Dict[str, Any]:
        """Display values (rounded at this boundary)."""
        return {
            "teacher_id": self.teacher_id,
            "username": self.username,
            "lesson_count": self.lesson_count,
            "event_count": self.event_count,
            "is_complete": self.is_complete,
            "completion_percentage": self.completion_percentage,
            "total_hours": self.total_hours,
            "student_count": self.student_count,
            "earnings": self.earnings.to_dict(),
        }


@dataclass
class GlobalStats:
    """Day-wide sums across every teacher."""

    teacher_count: int = 0
    lesson_count: int = 0
    event_count: int = 0
    total_minutes: int = 0
    student_count: int = 0
    earnings: Earnings = field(default_factory=Earnings)

    @property
    def is_complete(self) -> bool:
        return self.lesson_count > 0 and self.event_count == self.lesson_count

    @property
    def completion_percentage(self) -> int:
        return completion_percentage(self.event_count, self.lesson_count)

    @property
    def total_hours(self) -> float:
        return hours(self.total_minutes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "teacher_count": self.teacher_count,
            "lesson_count": self.lesson_count,
            "event_count": self.event_count,
            "is_complete": self.is_complete,
            "completion_percentage": self.completion_percentage,
            "total_hours": self.total_hours,
            "student_count": self.student_count,
            "earnings": self.earnings.to_dict(),
        }


@dataclass
class ClassboardStats:
    """Per-teacher and global statistics of a day."""

    per_teacher: List[TeacherStats] = field(default_factory=list)
    global_stats: GlobalStats = field(default_factory=GlobalStats)

    def for_teacher(self, teacher_id: str) -> TeacherStats:
        for stats in self.per_teacher:
            if stats.teacher_id == teacher_id:
                return stats
        raise KeyError(f"No stats for teacher {teacher_id}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "per_teacher": [stats.to_dict() for stats in self.per_teacher],
            "global": self.global_stats.to_dict(),
        }


def teacher_stats(queue: TeacherDayQueue, count_all_events: bool = True) -> TeacherStats:
    """
    Figures for one queue.

    Args:
        queue: Teacher queue
        count_all_events: When False only completed and uncompleted events
            count towards time, earnings and students

    Returns:
        TeacherStats with raw sums
    """
    stats = TeacherStats(
        teacher_id=queue.teacher.id,
        username=queue.teacher.username,
        lesson_count=queue.active_lesson_count,
        event_count=len(queue),
    )

    students = set()
    for node in queue.nodes:
        if not _counts(node, count_all_events):
            continue
        stats.total_minutes += node.duration
        stats.earnings = stats.earnings + calculate_for_event(node)
        students.update(node.student.roster)
    stats.students = frozenset(students)
    return stats


def aggregate(queues: Iterable[TeacherDayQueue], count_all_events: bool = True) -> ClassboardStats:
    """
    Statistics for every queue of a day.

    Global figures are sums of the raw per-teacher figures; students are
    counted once across teachers and teacher_count only counts teachers
    with events.

    Examples:
        >>> stats = aggregate(build_result.queues)
        >>> stats.global_stats.completion_percentage
        100
    """
    result = ClassboardStats()
    students = set()

    for queue in queues:
        stats = teacher_stats(queue, count_all_events)
        result.per_teacher.append(stats)

        total = result.global_stats
        total.lesson_count += stats.lesson_count
        total.event_count += stats.event_count
        total.total_minutes += stats.total_minutes
        total.earnings = total.earnings + stats.earnings
        if stats.event_count > 0:
            total.teacher_count += 1
        students.update(stats.students)

    result.global_stats.student_count = len(students)
    logger.debug(
        f"Aggregated {len(result.per_teacher)} teachers, "
        f"{result.global_stats.event_count} events"
    )
    return result


def event_financials(
    queues: Iterable[TeacherDayQueue],
    currency: str,
    count_all_events: bool = True
) -> List[Dict[str, Any]]:
    """
    Ledger rows: one per event with its earnings split, ordered by start.

    Args:
        queues: Teacher queues
        currency: Currency code written on every row
        count_all_events: When False only completed and uncompleted events are listed

    Returns:
        List of flat dictionaries (money as rounded Decimal)
    """
    rows = []
    for queue in queues:
        for node in queue.nodes:
            if not _counts(node, count_all_events):
                continue
            earnings = calculate_for_event(node)
            rows.append({
                "event_id": node.id,
                "lesson_id": node.lesson_id,
                "teacher_id": queue.teacher.id,
                "teacher_username": queue.teacher.username,
                "date": node.starts_at,
                "duration": node.duration,
                "location": node.location,
                "status": node.status.value,
                "leader_student_name": node.student.leader_name,
                "student_count": node.student.student_count,
                "package_description": node.package.description,
                "commission_type": node.commission.type.value,
                "commission_value": node.commission.rate,
                "teacher_earnings": round_money(earnings.teacher_earn),
                "lesson_revenue": round_money(earnings.lesson_revenue),
                "school_revenue": round_money(earnings.school_revenue),
                "currency": currency,
            })
    return sorted(rows, key=lambda row: row["date"])


def financials_frame(rows: List[Dict[str, Any]]) -> pd.DataFrame:
    """
    Ledger rows as a DataFrame with a totals row appended.

    Money columns are written as strings so the CSV keeps exact cents.
    """
    money_columns = ["teacher_earnings", "lesson_revenue", "school_revenue"]
    df = pd.DataFrame(rows)
    if df.empty:
        return df

    totals = {column: sum((row[column] for row in rows), Decimal("0")) for column in money_columns}
    totals.update({"event_id": "TOTAL", "duration": int(df["duration"].sum())})
    df = pd.concat([df, pd.DataFrame([totals])], ignore_index=True)

    for column in money_columns + ["commission_value"]:
        df[column] = df[column].map(lambda value: "" if pd.isna(value) else str(value))
    return df
