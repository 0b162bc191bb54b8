"""
Unit tests for TeacherDayQueue and queue diffs.
"""

from dataclasses import replace

import pytest

from classboard.models.errors import ChainIntegrityError, EventNotFoundError
from classboard.models.event import EventStatus
from classboard.queue.teacher_queue import (
    LessonRef,
    TeacherDayQueue,
    diff_queues,
    link_nodes,
)


class TestConstruction:
    """Building queues from rows and from linked nodes."""

    def test_from_events_sorts_and_links(self, make_node, make_queue):
        """Test unordered rows come out chronological and linked."""
        queue = make_queue([
            make_node("e3", "14:00"),
            make_node("e1", "10:00"),
            make_node("e2", "12:00"),
        ])

        assert queue.event_ids == ["e1", "e2", "e3"]
        assert [node.successor_id for node in queue] == ["e2", "e3", None]
        assert queue.first.id == "e1"
        assert queue.last.id == "e3"

    def test_from_events_rejects_overlap(self, make_node, make_queue):
        """Test overlapping rows are refused as a whole."""
        with pytest.raises(ChainIntegrityError, match="overlaps"):
            make_queue([make_node("e1", "10:00", 90), make_node("e2", "11:00")])

    def test_from_events_rejects_same_start(self, make_node, make_queue):
        """Test two events at the same time are refused."""
        with pytest.raises(ChainIntegrityError, match="is not after"):
            make_queue([make_node("e1", "10:00"), make_node("e2", "10:00")])

    def test_from_events_rejects_duplicate_ids(self, make_node, make_queue):
        """Test repeated ids are refused."""
        with pytest.raises(ChainIntegrityError, match="Duplicate"):
            make_queue([make_node("e1", "10:00"), make_node("e1", "12:00")])

    def test_integrity_error_names_teacher(self, make_node, make_queue):
        """Test the error message carries the teacher id."""
        with pytest.raises(ChainIntegrityError) as exc_info:
            make_queue([make_node("e1", "10:00"), make_node("e2", "10:00")])

        assert exc_info.value.teacher_id == "t1"
        assert str(exc_info.value).startswith("[t1]")

    def test_from_linked_follows_successors(self, teacher, day, make_node):
        """Test a linked chain is read from its head."""
        nodes = link_nodes([make_node("e1", "10:00"), make_node("e2", "11:15")])

        queue = TeacherDayQueue.from_linked(teacher, day, reversed(nodes))

        assert queue.event_ids == ["e1", "e2"]

    def test_from_linked_detects_cycle(self, teacher, day, make_node):
        """Test a cycle leaves no head and is refused."""
        first = replace(make_node("e1", "10:00"), successor_id="e2")
        second = replace(make_node("e2", "11:15"), successor_id="e1")

        with pytest.raises(ChainIntegrityError, match="head"):
            TeacherDayQueue.from_linked(teacher, day, [first, second])

    def test_from_linked_detects_dangling(self, teacher, day, make_node):
        """Test a successor that is not in the chain is refused."""
        node = replace(make_node("e1", "10:00"), successor_id="ghost")

        with pytest.raises(ChainIntegrityError, match="missing successor"):
            TeacherDayQueue.from_linked(teacher, day, [node])

    def test_from_linked_detects_two_heads(self, teacher, day, make_node):
        """Test two unlinked nodes make two heads."""
        with pytest.raises(ChainIntegrityError, match="exactly one head"):
            TeacherDayQueue.from_linked(
                teacher, day, [make_node("e1", "10:00"), make_node("e2", "12:00")]
            )

    def test_from_linked_detects_shared_successor(self, teacher, day, make_node):
        """Test two nodes pointing at the same successor are refused."""
        first = replace(make_node("e1", "10:00"), successor_id="e3")
        second = replace(make_node("e2", "11:15"), successor_id="e3")
        third = make_node("e3", "12:30")

        with pytest.raises(ChainIntegrityError, match="more than one predecessor"):
            TeacherDayQueue.from_linked(teacher, day, [first, second, third])

    def test_from_linked_detects_unordered_chain(self, teacher, day, make_node):
        """Test links that run against start times are refused."""
        nodes = [
            replace(make_node("e2", "12:00"), successor_id="e1"),
            make_node("e1", "10:00"),
        ]

        with pytest.raises(ChainIntegrityError, match="is not after"):
            TeacherDayQueue.from_linked(teacher, day, nodes)

    def test_empty_from_linked(self, teacher, day):
        """Test no nodes gives an empty queue."""
        queue = TeacherDayQueue.from_linked(teacher, day, [])

        assert queue.is_empty
        assert queue.first is None
        assert queue.earliest_time() is None


class TestAccessors:
    """Read accessors."""

    def test_index_and_get(self, loose_queue):
        """Test lookup by id."""
        assert loose_queue.index_of("e2") == 1
        assert loose_queue.get("e3").start_time == 840
        assert loose_queue.contains("e1")
        assert not loose_queue.contains("missing")

    def test_get_missing(self, loose_queue):
        """Test lookup of a missing id raises."""
        with pytest.raises(EventNotFoundError):
            loose_queue.get("missing")

    def test_neighbours_and_gaps(self, loose_queue):
        """Test predecessor, successor and gap lookups."""
        assert loose_queue.predecessor(0) is None
        assert loose_queue.predecessor(1).id == "e1"
        assert loose_queue.successor(2) is None
        assert loose_queue.gap_before(0) is None
        assert loose_queue.gap_before(1) == 30
        assert loose_queue.gaps() == [30, 90]

    def test_earliest_time_and_totals(self, loose_queue):
        """Test day start and total minutes."""
        assert loose_queue.earliest_time() == "10:00"
        assert loose_queue.total_minutes == 180
        assert loose_queue.key == ("t1", "2025-06-01")

    def test_completion_ignores_rest_and_empty_lessons(self, teacher, day, make_node):
        """Test rest lessons and lessons without events are not counted."""
        nodes = [make_node("e1", "10:00", lesson_id="l1"), make_node("e2", "12:00", lesson_id="l1")]
        lessons = [
            LessonRef(id="l1", teacher_id="t1", booking_id="b1"),
            LessonRef(id="l2", teacher_id="t1", booking_id="b2"),
            LessonRef(id="l3", teacher_id="t1", booking_id="b3", status="rest"),
        ]

        queue = TeacherDayQueue.from_events(teacher, day, nodes, lessons)

        assert queue.active_lesson_count == 1
        assert not queue.is_complete

    def test_is_settled(self, make_node, make_queue):
        """Test settled means every event is completed or uncompleted."""
        queue = make_queue([
            make_node("e1", "10:00", status=EventStatus.COMPLETED),
            make_node("e2", "12:00", status=EventStatus.UNCOMPLETED),
        ])

        assert queue.is_settled()

    def test_to_dict(self, loose_queue):
        """Test the report rows carry the gap before each event."""
        data = loose_queue.to_dict()

        assert data["teacher_id"] == "t1"
        assert data["events"][0]["gap_before"] is None
        assert data["events"][1]["gap_before"] == 30
        assert data["events"][1]["date"] == "2025-06-01T11:30:00"


class TestSlots:
    """Next free slot and step checks."""

    def test_submit_time_when_free(self, loose_queue, settings):
        """Test the submit time is used when nothing conflicts."""
        assert loose_queue.next_available_slot("16:00", 60, settings) == "16:00"

    def test_after_last_event_when_taken(self, loose_queue, settings):
        """Test a conflicting submit time falls back to after the last event."""
        assert loose_queue.next_available_slot("10:30", 60, settings) == "15:15"

    def test_submit_time_inside_gap_conflicts(self, loose_queue, settings):
        """Test a start inside the gap after an event is a conflict."""
        assert loose_queue.next_available_slot("11:05", 30, settings) == "15:15"

    def test_pending_events_are_considered(self, loose_queue, settings, make_node):
        """Test events about to be added block their slot."""
        pending = [make_node("p1", "16:00", 60)]

        assert loose_queue.next_available_slot("16:00", 60, settings, pending) == "17:15"

    def test_no_slot_left(self, make_node, make_queue, settings):
        """Test None when nothing starts before 23:55."""
        queue = make_queue([make_node("e1", "22:00", 120)])

        assert queue.next_available_slot("22:30", 60, settings) is None

    def test_empty_queue_late_submit(self, make_queue, settings):
        """Test a submit time after 23:55 in an empty queue gives None."""
        assert make_queue([]).next_available_slot("23:58", 30, settings) is None

    def test_can_move_earlier(self, loose_queue, packed_queue, settings):
        """Test a step earlier is possible only with room before."""
        assert loose_queue.can_move_earlier("e2", settings)
        assert packed_queue.can_move_earlier("e1", settings)
        assert packed_queue.can_move_earlier("e2", settings)

    def test_cannot_move_earlier_into_previous(self, make_node, make_queue, settings):
        """Test an event touching its predecessor cannot step earlier."""
        queue = make_queue([make_node("e1", "10:00"), make_node("e2", "11:00")])

        assert not queue.can_move_earlier("e2", settings)

    def test_can_move_later(self, make_node, make_queue, settings):
        """Test the latest start limits a step later."""
        queue = make_queue([make_node("e1", "22:30", 30), make_node("e2", "23:00", 30)])

        assert queue.can_move_later("e1", settings)
        assert not queue.can_move_later("e2", settings)


class TestDiff:
    """Queue diffs for persistence."""

    def test_updates_and_deletions(self, loose_queue, make_node):
        """Test moved, resized, relocated and removed events are reported."""
        nodes = list(loose_queue.nodes)
        nodes[0] = replace(nodes[0].at(615), location="Bay")
        nodes[1] = replace(nodes[1], duration=90)
        after = loose_queue.with_nodes(nodes[:2] + [make_node("new", "18:00")])

        changes = diff_queues(loose_queue, after)

        assert changes.updates[0] == {"id": "e1", "date": "2025-06-01T10:15:00", "location": "Bay"}
        assert changes.updates[1] == {"id": "e2", "duration": 90}
        assert changes.updates[2]["id"] == "new"
        assert changes.updates[2]["duration"] == 60
        assert changes.deletions == ["e3"]
        assert changes.count == 4

    def test_no_changes(self, loose_queue):
        """Test an identical queue has no changes."""
        changes = diff_queues(loose_queue, loose_queue)

        assert not changes.has_changes


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
