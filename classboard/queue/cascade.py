"""
Cascade mutator.

Applies interactive edits to a teacher queue under an explicit cascade
policy. Every operation builds the proposed chain, validates what it
changed and then either commits (a new queue) or rejects (the input
queue, untouched).

LOCKED: the queue must be packed (see QueueOptimizer); edits keep it
packed by moving every following event by the same amount.
RESPECTING: existing times are kept; following events move only as far
as needed to stay gap_minutes clear of the edited one.
"""

import logging
from dataclasses import replace
from typing import Iterable, List, Optional, Sequence, Union

from ..models.errors import EventNotFoundError, LockPreconditionError, StatusRequirementError
from ..models.event import EventNode, EventStatus
from ..models.policy import CascadePolicy
from ..models.result import MutationResult
from ..models.settings import ControllerSettings
from ..utils.logger import queue_logger
from ..utils.time_utils import minutes_to_time
from ..validation.placement_validator import PlacementValidator
from .optimizer import QueueOptimizer, pack
from .teacher_queue import TeacherDayQueue


logger = logging.getLogger(__name__)


def push_followers(nodes: Sequence[EventNode], index: int, gap_minutes: int) -> List[EventNode]:
    """
    Push events after position index just far enough to keep gap_minutes.

    Stops at the first event that is already clear.
    """
    pushed = list(nodes)
    for position in range(index + 1, len(pushed)):
        earliest = pushed[position - 1].end_time + gap_minutes
        if pushed[position].start_time >= earliest:
            break
        pushed[position] = pushed[position].at(earliest)
    return pushed


def shift_followers(nodes: Sequence[EventNode], index: int, delta: int) -> List[EventNode]:
    """Move every event after position index by delta minutes."""
    shifted = list(nodes)
    if delta:
        for position in range(index + 1, len(shifted)):
            shifted[position] = shifted[position].shifted(delta)
    return shifted


class CascadeMutator:
    """
    Interactive queue edits with Locked or Respecting cascades.

    Examples:
        >>> mutator = CascadeMutator(ControllerSettings(gap_minutes=15))
        >>> result = mutator.resize(queue, "evt_1", 90, CascadePolicy.RESPECTING)
        >>> if result.is_applied:
        ...     queue = result.queue
    """

    def __init__(self, settings: ControllerSettings):
        """
        Initialize mutator.

        Args:
            settings: Controller settings for gap and duration rules
        """
        self.settings = settings
        self.validator = PlacementValidator(settings)
        self.optimizer = QueueOptimizer(settings)

    # ============ CHAIN EDITS ============

    def insert(
        self,
        queue: TeacherDayQueue,
        after_id: Optional[str],
        new_event: EventNode,
        policy: CascadePolicy
    ) -> MutationResult:
        """
        Insert an event after after_id (None inserts at the head).

        Locked: the event is placed right after its predecessor (or at the
        old head's start) and every following event moves by its duration
        plus the gap. Respecting: the event keeps its own start and the
        following events are pushed only if they would overlap it.

        Raises:
            EventNotFoundError: If after_id is not in the queue
            ValueError: If an event with the same id is already queued
            LockPreconditionError: Locked policy on an unpacked queue
        """
        self._require_lock(queue, policy)
        if queue.contains(new_event.id):
            raise ValueError(f"Event {new_event.id} is already in the queue")

        index = 0 if after_id is None else queue.index_of(after_id) + 1
        gap = self.settings.gap_minutes
        candidate = replace(new_event, date=queue.date, successor_id=None)

        if policy.is_locked:
            if index > 0:
                candidate = candidate.at(queue.nodes[index - 1].end_time + gap)
            elif queue.first is not None:
                candidate = candidate.at(queue.first.start_time)
            nodes = list(queue.nodes[:index]) + [candidate] + list(queue.nodes[index:])
            nodes = shift_followers(nodes, index, candidate.duration + gap)
        else:
            nodes = list(queue.nodes[:index]) + [candidate] + list(queue.nodes[index:])
            nodes = push_followers(nodes, index, gap)

        return self._commit(
            queue, nodes, policy,
            action=f"insert {candidate.id} at {minutes_to_time(candidate.start_time)}",
        )

    def remove(self, queue: TeacherDayQueue, node_id: str, policy: CascadePolicy) -> MutationResult:
        """
        Remove an event.

        Locked: following events are re-packed from the removed event's
        start. Respecting: following events keep their times.

        Raises:
            EventNotFoundError: If node_id is not in the queue
            LockPreconditionError: Locked policy on an unpacked queue
        """
        self._require_lock(queue, policy)
        index = queue.index_of(node_id)
        removed = queue.nodes[index]
        nodes = list(queue.nodes[:index]) + list(queue.nodes[index + 1:])

        if policy.is_locked:
            nodes = nodes[:index] + pack(nodes[index:], removed.start_time, self.settings.gap_minutes)
            return self._commit(
                queue, nodes, policy, action=f"remove {node_id}", removed_ids=[node_id]
            )

        # Nothing moves, so there is nothing to validate
        new_queue = queue.with_nodes(nodes)
        queue_logger(logger, queue.teacher.id, queue.date).info(f"Applied remove {node_id}")
        return MutationResult.applied(
            new_queue,
            changed_ids=self._changed_ids(queue.nodes, new_queue.nodes),
            removed_ids=[node_id],
            message=f"Removed {node_id}",
        )

    def resize(
        self,
        queue: TeacherDayQueue,
        node_id: str,
        new_duration: int,
        policy: CascadePolicy
    ) -> MutationResult:
        """
        Change an event's duration.

        Locked: following events move by the duration change.
        Respecting: following events are pushed only if they would overlap.

        Raises:
            EventNotFoundError: If node_id is not in the queue
            LockPreconditionError: Locked policy on an unpacked queue
        """
        self._require_lock(queue, policy)
        index = queue.index_of(node_id)
        old = queue.nodes[index]
        nodes = list(queue.nodes)
        nodes[index] = replace(old, duration=new_duration)

        if policy.is_locked:
            nodes = shift_followers(nodes, index, new_duration - old.duration)
        else:
            nodes = push_followers(nodes, index, self.settings.gap_minutes)

        return self._commit(
            queue, nodes, policy, action=f"resize {node_id} to {new_duration}min"
        )

    def reposition(
        self,
        queue: TeacherDayQueue,
        node_id: str,
        new_start: int,
        policy: CascadePolicy
    ) -> MutationResult:
        """
        Move an event to a new start time (minutes after midnight).

        Locked: the whole chain moves as one block. Respecting: the event
        may not come closer than gap_minutes to its predecessor, and
        following events are pushed only if they would overlap.

        Raises:
            EventNotFoundError: If node_id is not in the queue
            LockPreconditionError: Locked policy on an unpacked queue
        """
        self._require_lock(queue, policy)
        index = queue.index_of(node_id)
        delta = new_start - queue.nodes[index].start_time

        if policy.is_locked:
            nodes = [node.shifted(delta) for node in queue.nodes] if delta else list(queue.nodes)
        else:
            nodes = list(queue.nodes)
            nodes[index] = nodes[index].at(new_start)
            nodes = push_followers(nodes, index, self.settings.gap_minutes)

        return self._commit(
            queue, nodes, policy, action=f"reposition {node_id} to {minutes_to_time(new_start)}"
        )

    def adjust_duration(
        self,
        queue: TeacherDayQueue,
        node_id: str,
        increment: bool,
        policy: CascadePolicy
    ) -> MutationResult:
        """Resize by one step_duration (longer when increment is True)."""
        step = self.settings.step_duration if increment else -self.settings.step_duration
        return self.resize(queue, node_id, queue.get(node_id).duration + step, policy)

    def adjust_time(
        self,
        queue: TeacherDayQueue,
        node_id: str,
        increment: bool,
        policy: CascadePolicy
    ) -> MutationResult:
        """Move by one step_duration (later when increment is True)."""
        step = self.settings.step_duration if increment else -self.settings.step_duration
        return self.reposition(queue, node_id, queue.get(node_id).start_time + step, policy)

    # ============ REORDER ============

    def move_up(self, queue: TeacherDayQueue, node_id: str, policy: CascadePolicy) -> MutationResult:
        """Swap an event with its predecessor, starting it at the earlier start."""
        index = queue.index_of(node_id)
        if index == 0:
            return MutationResult.applied(queue, message=f"{node_id} is already first")
        return self._swap(queue, index - 1, policy)

    def move_down(self, queue: TeacherDayQueue, node_id: str, policy: CascadePolicy) -> MutationResult:
        """Swap an event with its successor, starting the successor at the earlier start."""
        index = queue.index_of(node_id)
        if index == len(queue) - 1:
            return MutationResult.applied(queue, message=f"{node_id} is already last")
        return self._swap(queue, index, policy)

    def _swap(self, queue: TeacherDayQueue, index: int, policy: CascadePolicy) -> MutationResult:
        """
        Swap the events at index and index + 1.

        Locked re-packs the rest of the chain from the preserved start.
        Respecting pushes following events only until one is already clear.
        """
        self._require_lock(queue, policy)
        preserved_start = queue.nodes[index].start_time
        gap = self.settings.gap_minutes
        nodes = list(queue.nodes)
        nodes[index], nodes[index + 1] = nodes[index + 1], nodes[index]
        if policy.is_locked:
            nodes = nodes[:index] + pack(nodes[index:], preserved_start, gap)
        else:
            nodes[index] = nodes[index].at(preserved_start)
            nodes = push_followers(nodes, index, gap)
        return self._commit(
            queue, nodes, policy,
            action=f"swap {nodes[index].id} before {nodes[index + 1].id}",
        )

    # ============ GAP TOOLS ============

    def remove_gap(self, queue: TeacherDayQueue, node_id: str, policy: CascadePolicy) -> MutationResult:
        """
        Pull an event back so the gap before it equals gap_minutes.

        Following events that sat packed behind it move along.
        """
        self._require_lock(queue, policy)
        index = queue.index_of(node_id)
        gap = queue.gap_before(index)
        excess = 0 if gap is None else gap - self.settings.gap_minutes
        if excess <= 0:
            return MutationResult.applied(queue, message="No gap to remove")

        nodes = list(queue.nodes)
        nodes[index] = nodes[index].shifted(-excess)
        for position in range(index + 1, len(nodes)):
            if queue.nodes[position - 1].gap_after(queue.nodes[position]) > self.settings.gap_minutes:
                break
            nodes[position] = nodes[position].shifted(-excess)

        return self._commit(queue, nodes, policy, action=f"remove gap before {node_id}")

    def add_gap(self, queue: TeacherDayQueue, node_id: str, policy: CascadePolicy) -> MutationResult:
        """Push an event forward so the gap before it reaches gap_minutes."""
        self._require_lock(queue, policy)
        index = queue.index_of(node_id)
        gap = queue.gap_before(index)
        missing = 0 if gap is None else self.settings.gap_minutes - gap
        if missing <= 0:
            return MutationResult.applied(queue, message="Gap already sufficient")

        nodes = list(queue.nodes)
        nodes[index] = nodes[index].shifted(missing)
        nodes = push_followers(nodes, index, self.settings.gap_minutes)
        return self._commit(queue, nodes, policy, action=f"add gap before {node_id}")

    # ============ LABEL EDITS ============

    def set_location(self, queue: TeacherDayQueue, node_id: str, location: str) -> MutationResult:
        """Change the location of one event."""
        if not location:
            raise ValueError("Location must not be empty")
        index = queue.index_of(node_id)
        return self._relabel(queue, [index], location=location)

    def set_all_locations(self, queue: TeacherDayQueue, location: str) -> MutationResult:
        """Change the location of every event in the queue."""
        if not location:
            raise ValueError("Location must not be empty")
        return self._relabel(queue, range(len(queue)), location=location)

    def set_status(
        self,
        queue: TeacherDayQueue,
        node_id: str,
        status: Union[EventStatus, str]
    ) -> MutationResult:
        """
        Change the status label of an event.

        Raises:
            ValueError: If status is not a known label
            StatusRequirementError: completed/uncompleted on an event without
                a date or a positive duration
        """
        status = EventStatus(status)
        index = queue.index_of(node_id)
        node = queue.nodes[index]
        if status.is_settled and (not node.date or node.duration <= 0):
            raise StatusRequirementError(
                f"Event {node_id} needs a date and a positive duration to be {status.value}"
            )
        return self._relabel(queue, [index], status=status)

    def _relabel(self, queue: TeacherDayQueue, indexes: Iterable[int], **changes) -> MutationResult:
        nodes = list(queue.nodes)
        for index in indexes:
            nodes[index] = replace(nodes[index], **changes)
        new_queue = queue.with_nodes(nodes)
        changed_ids = [new.id for old, new in zip(queue.nodes, new_queue.nodes) if old != new]
        return MutationResult.applied(new_queue, changed_ids=changed_ids)

    # ============ COMMIT ============

    def _require_lock(self, queue: TeacherDayQueue, policy: CascadePolicy) -> None:
        if policy.is_locked and not self.optimizer.is_optimised(queue):
            raise LockPreconditionError(
                f"Queue of {queue.teacher.id} on {queue.date} must be optimised before locked edits"
            )

    @staticmethod
    def _changed_ids(before: Sequence[EventNode], after: Sequence[EventNode]) -> List[str]:
        old_by_id = {node.id: node for node in before}
        return [
            node.id for node in after
            if node.id not in old_by_id
            or old_by_id[node.id].start_time != node.start_time
            or old_by_id[node.id].duration != node.duration
        ]

    def _commit(
        self,
        queue: TeacherDayQueue,
        nodes: List[EventNode],
        policy: CascadePolicy,
        action: str,
        removed_ids: Optional[List[str]] = None
    ) -> MutationResult:
        log = queue_logger(logger, queue.teacher.id, queue.date)
        validation = self.validator.validate_changes(queue.nodes, nodes, policy)
        if not validation.is_valid:
            log.warning(f"Rejected {action} ({policy.value}): {validation.message}")
            return MutationResult.rejected(queue, validation.reason, validation.message)

        new_queue = queue.with_nodes(nodes)
        changed_ids = self._changed_ids(queue.nodes, new_queue.nodes)
        log.info(f"Applied {action} ({policy.value}), {len(changed_ids)} events changed")
        return MutationResult.applied(
            new_queue,
            changed_ids=changed_ids,
            removed_ids=removed_ids,
            message=f"Applied {action}",
        )
