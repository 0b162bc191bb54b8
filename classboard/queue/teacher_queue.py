"""
Teacher-day queue model.

A TeacherDayQueue is the ordered chain of one teacher's events for one
calendar day. It is an immutable value: the chain is held as an ordered
tuple indexed by position, and each node's successor_id is kept in step
with that order. Operations that change a queue return a new one.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from ..models.errors import ChainIntegrityError, EventNotFoundError
from ..models.event import EventNode
from ..models.settings import ControllerSettings
from ..utils.time_utils import LAST_SLOT_START, minutes_to_time, time_to_minutes


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TeacherInfo:
    """Teacher owning a queue."""

    id: str
    username: str = ""


@dataclass(frozen=True)
class LessonRef:
    """
    Lesson of the teacher on the queue's day.

    Attributes:
        id: Lesson identifier
        teacher_id: Teacher giving the lesson
        booking_id: Booking the lesson belongs to
        commission_id: Commission applied to the lesson
        status: "active" or "rest"
    """

    id: str
    teacher_id: str
    booking_id: str
    commission_id: Optional[str] = None
    status: str = "active"

    @property
    def is_rest(self) -> bool:
        return self.status == "rest"


def link_nodes(nodes: Iterable[EventNode]) -> Tuple[EventNode, ...]:
    """Return nodes with successor_id pointing at the next node in sequence."""
    ordered = list(nodes)
    linked = []
    for index, node in enumerate(ordered):
        successor = ordered[index + 1].id if index + 1 < len(ordered) else None
        linked.append(node if node.successor_id == successor else replace(node, successor_id=successor))
    return tuple(linked)


@dataclass(frozen=True)
class TeacherDayQueue:
    """
    Ordered chain of a teacher's events for one day.

    Attributes:
        teacher: Teacher owning the queue
        date: Calendar day (YYYY-MM-DD)
        nodes: Events in chain order (ascending start time)
        lessons: The teacher's lessons on that day

    Examples:
        >>> queue = TeacherDayQueue.from_events(TeacherInfo("t1", "maria"), "2025-06-01", events)
        >>> queue.first.starts_at
        '2025-06-01T10:00:00'
        >>> queue.gap_before(1)
        15
    """

    teacher: TeacherInfo
    date: str
    nodes: Tuple[EventNode, ...] = ()
    lessons: Tuple[LessonRef, ...] = field(default=())

    # ============ CONSTRUCTION ============

    @classmethod
    def empty(
        cls,
        teacher: TeacherInfo,
        date: str,
        lessons: Sequence[LessonRef] = ()
    ) -> 'TeacherDayQueue':
        """Queue without events."""
        return cls(teacher=teacher, date=date, nodes=(), lessons=tuple(lessons))

    @classmethod
    def from_events(
        cls,
        teacher: TeacherInfo,
        date: str,
        events: Iterable[EventNode],
        lessons: Sequence[LessonRef] = ()
    ) -> 'TeacherDayQueue':
        """
        Build a queue from unordered events (database rows).

        Events are placed in chronological order and linked.

        Raises:
            ChainIntegrityError: On duplicate ids or overlapping events
        """
        ordered = sorted(events, key=lambda node: node.start_time)
        queue = cls(teacher=teacher, date=date, nodes=link_nodes(ordered), lessons=tuple(lessons))
        queue.check_integrity()
        return queue

    @classmethod
    def from_linked(
        cls,
        teacher: TeacherInfo,
        date: str,
        nodes: Iterable[EventNode],
        lessons: Sequence[LessonRef] = ()
    ) -> 'TeacherDayQueue':
        """
        Build a queue by following successor references.

        Args:
            teacher: Teacher owning the chain
            date: Calendar day
            nodes: Nodes in any order, linked through successor_id
            lessons: The teacher's lessons on that day

        Raises:
            ChainIntegrityError: On several heads, a cycle, a dangling
                successor, unreachable nodes or an unordered chain
        """
        by_id: Dict[str, EventNode] = {}
        for node in nodes:
            if node.id in by_id:
                raise ChainIntegrityError(f"Duplicate event id {node.id}", teacher.id)
            by_id[node.id] = node

        if not by_id:
            return cls.empty(teacher, date, lessons)

        referenced = set()
        for node in by_id.values():
            if node.successor_id is None:
                continue
            if node.successor_id not in by_id:
                raise ChainIntegrityError(
                    f"Event {node.id} points to missing successor {node.successor_id}",
                    teacher.id
                )
            if node.successor_id in referenced:
                raise ChainIntegrityError(
                    f"Event {node.successor_id} has more than one predecessor",
                    teacher.id
                )
            referenced.add(node.successor_id)

        heads = [node for node in by_id.values() if node.id not in referenced]
        if len(heads) != 1:
            raise ChainIntegrityError(
                f"Chain must have exactly one head, found {len(heads)}",
                teacher.id
            )

        ordered: List[EventNode] = []
        seen = set()
        current: Optional[EventNode] = heads[0]
        while current is not None:
            if current.id in seen:
                raise ChainIntegrityError(f"Cycle detected at event {current.id}", teacher.id)
            seen.add(current.id)
            ordered.append(current)
            current = by_id[current.successor_id] if current.successor_id else None

        if len(ordered) != len(by_id):
            raise ChainIntegrityError(
                f"{len(by_id) - len(ordered)} events are not reachable from the head",
                teacher.id
            )

        queue = cls(teacher=teacher, date=date, nodes=tuple(ordered), lessons=tuple(lessons))
        queue.check_integrity()
        return queue

    def with_nodes(self, nodes: Iterable[EventNode]) -> 'TeacherDayQueue':
        """Copy holding nodes (in the given order), relinked."""
        return replace(self, nodes=link_nodes(nodes))

    def check_integrity(self) -> None:
        """
        Verify ordering invariants.

        Raises:
            ChainIntegrityError: If ids repeat, start times are not strictly
                ascending, events overlap or links disagree with the order
        """
        seen = set()
        for index, node in enumerate(self.nodes):
            if node.id in seen:
                raise ChainIntegrityError(f"Duplicate event id {node.id}", self.teacher.id)
            seen.add(node.id)

            expected = self.nodes[index + 1].id if index + 1 < len(self.nodes) else None
            if node.successor_id != expected:
                raise ChainIntegrityError(
                    f"Event {node.id} successor {node.successor_id} disagrees with chain order",
                    self.teacher.id
                )

            if index == 0:
                continue

            previous = self.nodes[index - 1]
            if node.start_time <= previous.start_time:
                raise ChainIntegrityError(
                    f"Event {node.id} at {minutes_to_time(node.start_time)} is not after "
                    f"{previous.id} at {minutes_to_time(previous.start_time)}",
                    self.teacher.id
                )
            if previous.gap_after(node) < 0:
                raise ChainIntegrityError(
                    f"Event {node.id} overlaps {previous.id}",
                    self.teacher.id
                )

    # ============ READ ACCESSORS ============

    def __len__(self) -> int:
        return len(self.nodes)

    def __iter__(self) -> Iterator[EventNode]:
        return iter(self.nodes)

    @property
    def key(self) -> Tuple[str, str]:
        """(teacher id, date) key of this queue."""
        return (self.teacher.id, self.date)

    @property
    def is_empty(self) -> bool:
        return not self.nodes

    @property
    def first(self) -> Optional[EventNode]:
        """Head of the chain."""
        return self.nodes[0] if self.nodes else None

    @property
    def last(self) -> Optional[EventNode]:
        """Tail of the chain."""
        return self.nodes[-1] if self.nodes else None

    @property
    def event_ids(self) -> List[str]:
        return [node.id for node in self.nodes]

    def index_of(self, event_id: str) -> int:
        """
        Position of an event.

        Raises:
            EventNotFoundError: If the event is not in the queue
        """
        for index, node in enumerate(self.nodes):
            if node.id == event_id:
                return index
        raise EventNotFoundError(event_id)

    def get(self, event_id: str) -> EventNode:
        """Event by id (raises EventNotFoundError)."""
        return self.nodes[self.index_of(event_id)]

    def contains(self, event_id: str) -> bool:
        return any(node.id == event_id for node in self.nodes)

    def predecessor(self, index: int) -> Optional[EventNode]:
        return self.nodes[index - 1] if index > 0 else None

    def successor(self, index: int) -> Optional[EventNode]:
        return self.nodes[index + 1] if index + 1 < len(self.nodes) else None

    def gap_before(self, index: int) -> Optional[int]:
        """Minutes between the previous event's end and this one's start (None at head)."""
        previous = self.predecessor(index)
        if previous is None:
            return None
        return previous.gap_after(self.nodes[index])

    def gaps(self) -> List[int]:
        """Gap before every non-head event, in order."""
        return [a.gap_after(b) for a, b in zip(self.nodes, self.nodes[1:])]

    def earliest_time(self) -> Optional[str]:
        """Start of the head as HH:MM, None for an empty queue."""
        return minutes_to_time(self.first.start_time) if self.first else None

    @property
    def total_minutes(self) -> int:
        return sum(node.duration for node in self.nodes)

    @property
    def active_lesson_count(self) -> int:
        """Non-rest lessons with at least one event in this queue."""
        lessons_with_events = {node.lesson_id for node in self.nodes}
        return sum(
            1 for lesson in self.lessons
            if not lesson.is_rest and lesson.id in lessons_with_events
        )

    @property
    def is_complete(self) -> bool:
        """Every active lesson has exactly one event."""
        lesson_count = self.active_lesson_count
        return lesson_count > 0 and len(self.nodes) == lesson_count

    def is_settled(self) -> bool:
        """Every event has a completed or uncompleted status."""
        return bool(self.nodes) and all(node.status.is_settled for node in self.nodes)

    # ============ SLOT QUERIES ============

    def next_available_slot(
        self,
        submit_time: str,
        duration: int,
        settings: ControllerSettings,
        pending: Sequence[EventNode] = ()
    ) -> Optional[str]:
        """
        Find a start time for a new event.

        The submit time is used when it conflicts with nothing and starts
        before 23:55; otherwise the slot right after the last event plus
        the gap, if that still starts before 23:55.

        Args:
            submit_time: Preferred start (HH:MM)
            duration: Duration of the new event
            settings: Controller settings (gap)
            pending: Events about to be added but not yet in the queue

        Returns:
            HH:MM start, or None when nothing fits
        """
        events = sorted([*self.nodes, *pending], key=lambda node: node.start_time)
        gap = settings.gap_minutes
        wanted = time_to_minutes(submit_time)
        wanted_end = wanted + duration

        conflict = any(
            wanted < node.end_time + gap and wanted_end > node.start_time
            for node in events
        )
        if not conflict and wanted < LAST_SLOT_START:
            return submit_time

        if not events:
            return None

        candidate = events[-1].end_time + gap
        if candidate < LAST_SLOT_START:
            return minutes_to_time(candidate)
        return None

    def can_move_earlier(self, event_id: str, settings: ControllerSettings) -> bool:
        """Whether the event can move one step earlier without overlapping."""
        index = self.index_of(event_id)
        target = self.nodes[index].start_time - settings.step_duration
        previous = self.predecessor(index)
        if previous is None:
            return target >= settings.min_time_minutes
        return target >= previous.end_time

    def can_move_later(self, event_id: str, settings: ControllerSettings) -> bool:
        """Whether the event can move one step later and still start in the day window."""
        node = self.get(event_id)
        return node.start_time + settings.step_duration <= settings.max_time_minutes

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to dictionary format.

        Returns:
            Teacher, date and events with the gap before each one
        """
        events = []
        for index, node in enumerate(self.nodes):
            row = node.to_dict()
            row["gap_before"] = self.gap_before(index)
            events.append(row)
        return {
            "teacher_id": self.teacher.id,
            "teacher_username": self.teacher.username,
            "date": self.date,
            "events": events,
        }


@dataclass
class QueueChanges:
    """
    Differences between two versions of a queue.

    Attributes:
        updates: Rows for new events (all fields) and changed events
            (id plus the changed fields among date, duration, location, status)
        deletions: Ids of events that are gone
    """

    updates: List[Dict[str, Any]] = field(default_factory=list)
    deletions: List[str] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return bool(self.updates or self.deletions)

    @property
    def count(self) -> int:
        return len(self.updates) + len(self.deletions)


def diff_queues(before: TeacherDayQueue, after: TeacherDayQueue) -> QueueChanges:
    """
    Compare two versions of a queue for persistence hand-off.

    Args:
        before: Snapshot taken when editing started
        after: Current queue

    Returns:
        QueueChanges with updates and deletions
    """
    changes = QueueChanges()
    old_by_id = {node.id: node for node in before.nodes}

    for node in after.nodes:
        old = old_by_id.get(node.id)
        if old is None:
            changes.updates.append(node.to_dict())
            continue

        update: Dict[str, Any] = {"id": node.id}
        if old.start_time != node.start_time or old.date != node.date:
            update["date"] = node.starts_at
        if old.duration != node.duration:
            update["duration"] = node.duration
        if old.location != node.location:
            update["location"] = node.location
        if old.status != node.status:
            update["status"] = node.status.value

        if len(update) > 1:
            changes.updates.append(update)

    current_ids = {node.id for node in after.nodes}
    changes.deletions = [node.id for node in before.nodes if node.id not in current_ids]

    logger.debug(
        f"Queue diff for {after.teacher.id}: "
        f"{len(changes.updates)} updates, {len(changes.deletions)} deletions"
    )
    return changes
