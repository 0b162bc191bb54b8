"""
Shared fixtures for classboard tests.
"""

from decimal import Decimal

import pytest

from classboard.models.event import (
    CommissionSnapshot,
    CommissionType,
    EventNode,
    EventStatus,
    PackageSnapshot,
    StudentSnapshot,
)
from classboard.models.settings import ControllerSettings
from classboard.queue.teacher_queue import LessonRef, TeacherDayQueue, TeacherInfo
from classboard.utils.time_utils import time_to_minutes


DAY = "2025-06-01"


@pytest.fixture
def day():
    return DAY


@pytest.fixture
def settings():
    """Settings with a 15 minute gap and a 30 to 180 minute range."""
    return ControllerSettings.for_testing()


@pytest.fixture
def teacher():
    return TeacherInfo(id="t1", username="maria")


@pytest.fixture
def make_node():
    """Factory for event nodes; start accepts "HH:MM" or minutes."""

    def _make(
        event_id,
        start,
        duration=60,
        lesson_id=None,
        status=EventStatus.PLANNED,
        location="Beach",
        roster=("s1",),
        commission=None,
        package=None,
    ):
        start_time = time_to_minutes(start) if isinstance(start, str) else start
        return EventNode(
            id=event_id,
            lesson_id=lesson_id or f"lesson_{event_id}",
            booking_id=f"booking_{event_id}",
            date=DAY,
            start_time=start_time,
            duration=duration,
            location=location,
            status=status,
            student=StudentSnapshot(leader_name="Ana", roster=tuple(roster), capacity=len(roster)),
            package=package or PackageSnapshot(
                price_per_student=Decimal("100"),
                duration_minutes=120,
                capacity_students=2,
                category_equipment="kite",
                capacity_equipment=1,
                description="Beginner",
            ),
            commission=commission or CommissionSnapshot(CommissionType.FIXED, Decimal("20")),
        )

    return _make


@pytest.fixture
def make_queue(teacher):
    """Factory for queues; one active lesson per event unless lessons are given."""

    def _make(nodes, lessons=None):
        if lessons is None:
            lessons = [
                LessonRef(id=node.lesson_id, teacher_id=teacher.id, booking_id=node.booking_id)
                for node in nodes
            ]
        return TeacherDayQueue.from_events(teacher, DAY, nodes, lessons)

    return _make


@pytest.fixture
def packed_queue(make_node, make_queue):
    """Three 60 minute events at 10:00, 11:15 and 12:30 (packed for a 15 minute gap)."""
    return make_queue([
        make_node("e1", "10:00"),
        make_node("e2", "11:15"),
        make_node("e3", "12:30"),
    ])


@pytest.fixture
def loose_queue(make_node, make_queue):
    """Three 60 minute events at 10:00, 11:30 and 14:00 (not packed)."""
    return make_queue([
        make_node("e1", "10:00"),
        make_node("e2", "11:30"),
        make_node("e3", "14:00"),
    ])


@pytest.fixture
def event_row():
    """Factory for raw event rows on the test day."""

    def _make(event_id, lesson_id, time, duration=60, **extra):
        row = {
            "id": event_id,
            "lesson_id": lesson_id,
            "date": f"{DAY}T{time}:00",
            "duration": duration,
            "location": "Beach",
            "status": "planned",
        }
        row.update(extra)
        return row

    return _make


@pytest.fixture
def snapshot(event_row):
    """Three teachers; t2 only has a rest lesson and one without commission."""
    package = {
        "price_per_student": 100,
        "duration_minutes": 120,
        "capacity_students": 2,
        "category_equipment": "kite",
        "capacity_equipment": 1,
        "description": "Beginner duo",
    }
    return {
        "date": DAY,
        "teachers": [
            {"id": "t1", "username": "maria"},
            {"id": "t2", "username": "joao"},
            {"id": "t3", "username": "lena"},
        ],
        "bookings": [
            {"id": "b1", "leader_student_name": "Ana", "students": ["s1", "s2"], "package": package},
            {"id": "b2", "leader_student_name": "Rui", "students": ["s3"], "package": package},
        ],
        "commissions": [
            {"id": "c1", "type": "fixed", "cph": 20},
            {"id": "c2", "type": "percentage", "cph": 10},
            {"id": "c3", "type": "hourly", "cph": 5},
        ],
        "lessons": [
            {"id": "l1", "teacher_id": "t1", "booking_id": "b1", "commission_id": "c1", "status": "active"},
            {"id": "l2", "teacher_id": "t1", "booking_id": "b2", "commission_id": "c2", "status": "active"},
            {"id": "l3", "teacher_id": "t2", "booking_id": "b1", "commission_id": "c1", "status": "rest"},
            {"id": "l4", "teacher_id": "t2", "booking_id": "b2", "status": "active"},
        ],
        "events": [
            event_row("e2", "l2", "11:15", 90, location="Bay", status="completed"),
            event_row("e1", "l1", "10:00"),
            event_row("e3", "l3", "09:00"),
        ],
    }
