"""
Global adjustment coordinator.

A GlobalAdjustment session applies day-wide edits (time shift, start
time, location, optimisation) to the queues of every participating
teacher at once. Teachers can opt out; their queues are then left alone.
Each queue is judged on its own: one teacher's failure never blocks the
others.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from ..models.policy import CascadePolicy
from ..models.settings import ControllerSettings
from ..queue.cascade import CascadeMutator
from ..queue.optimizer import OptimisationResult, QueueOptimizer
from ..queue.teacher_queue import QueueChanges, TeacherDayQueue, diff_queues
from ..utils.logger import queue_logger
from ..utils.time_utils import minutes_to_time, time_to_minutes
from ..validation.placement_validator import PlacementValidator
from ..validation.validators import ValidationReason


logger = logging.getLogger(__name__)


@dataclass
class GlobalShiftResult:
    """
    Outcome of a day-wide move.

    Attributes:
        shifted: Teachers whose queue moved
        failures: Teacher id to failure message (queue left unchanged)
        reasons: Teacher id to failure code
        skipped: Teachers not participating
    """

    shifted: List[str] = field(default_factory=list)
    failures: Dict[str, str] = field(default_factory=dict)
    reasons: Dict[str, ValidationReason] = field(default_factory=dict)
    skipped: List[str] = field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        """Every participating queue moved."""
        return not self.failures

    def to_dict(self) -> Dict[str, object]:
        return {
            "shifted": list(self.shifted),
            "failures": dict(self.failures),
            "reasons": {key: reason.value for key, reason in self.reasons.items()},
            "skipped": list(self.skipped),
        }


@dataclass
class LockStatus:
    """
    How many participating teachers agree on a reference value.

    Attributes:
        reference: Time or location compared against
        lock_count: Teachers (time) or events (location) matching it
        total_teachers: Participating teachers considered
        is_locked: Every participating teacher matches
    """

    reference: Optional[str]
    lock_count: int
    total_teachers: int
    is_locked: bool


class GlobalAdjustment:
    """
    Day-wide adjustment session over many teacher queues.

    Examples:
        >>> session = GlobalAdjustment(build_result.queues, settings)
        >>> session.opt_out("t2")
        >>> result = session.apply_global_shift(30)
        >>> for teacher_id, message in result.failures.items():
        ...     print(f"{teacher_id}: {message}")
        >>> changes = session.collect_changes()
    """

    def __init__(self, queues: Iterable[TeacherDayQueue], settings: ControllerSettings):
        """
        Start a session.

        Teachers with events participate; teachers without events start
        opted out.

        Args:
            queues: Current queues of the day
            settings: Controller settings
        """
        self.settings = settings
        self.validator = PlacementValidator(settings)
        self.optimizer = QueueOptimizer(settings)
        self.mutator = CascadeMutator(settings)

        self._queues: Dict[str, TeacherDayQueue] = {}
        for queue in queues:
            self._queues[queue.teacher.id] = queue
        self._snapshots: Dict[str, TeacherDayQueue] = dict(self._queues)
        self._opted_out = {
            teacher_id for teacher_id, queue in self._queues.items() if queue.is_empty
        }

    # ============ PARTICIPATION ============

    @property
    def queues(self) -> List[TeacherDayQueue]:
        """Current queues, in the order they were given."""
        return list(self._queues.values())

    def queue(self, teacher_id: str) -> TeacherDayQueue:
        """Current queue of a teacher."""
        self._require_teacher(teacher_id)
        return self._queues[teacher_id]

    @property
    def participants(self) -> List[str]:
        """Teachers whose queues follow global edits."""
        return [teacher_id for teacher_id in self._queues if teacher_id not in self._opted_out]

    def is_participating(self, teacher_id: str) -> bool:
        return teacher_id in self._queues and teacher_id not in self._opted_out

    def opt_out(self, teacher_id: str) -> None:
        """Stop applying global edits to a teacher's queue."""
        self._require_teacher(teacher_id)
        self._opted_out.add(teacher_id)
        logger.info(f"Teacher {teacher_id} opted out of global adjustment")

    def opt_in(self, teacher_id: str) -> None:
        """Apply global edits to a teacher's queue again."""
        self._require_teacher(teacher_id)
        self._opted_out.discard(teacher_id)
        logger.info(f"Teacher {teacher_id} opted in to global adjustment")

    def _require_teacher(self, teacher_id: str) -> None:
        if teacher_id not in self._queues:
            raise KeyError(f"No queue for teacher {teacher_id} in this session")

    def _policy(self, teacher_id: str, policies: Optional[Dict[str, CascadePolicy]]) -> CascadePolicy:
        if policies and teacher_id in policies:
            return policies[teacher_id]
        return CascadePolicy.RESPECTING

    # ============ TIME ============

    def apply_global_shift(
        self,
        delta_minutes: int,
        policies: Optional[Dict[str, CascadePolicy]] = None
    ) -> GlobalShiftResult:
        """
        Move every participating queue by delta_minutes.

        Each shifted chain is validated as a whole under the teacher's
        policy (Respecting when none is given). A queue that fails keeps
        its current times and is reported in failures.

        Args:
            delta_minutes: Minutes to move (negative is earlier)
            policies: Optional teacher id to policy map

        Returns:
            GlobalShiftResult
        """
        deltas = {teacher_id: delta_minutes for teacher_id in self.participants}
        return self._shift_each(deltas, policies)

    def set_global_start_time(
        self,
        target_time: str,
        policies: Optional[Dict[str, CascadePolicy]] = None
    ) -> GlobalShiftResult:
        """
        Move each participating queue so its first event starts at target_time.

        Every chain moves as a block, keeping its internal gaps.

        Args:
            target_time: HH:MM start for every first event
            policies: Optional teacher id to policy map
        """
        target = time_to_minutes(target_time)
        deltas = {}
        for teacher_id in self.participants:
            first = self._queues[teacher_id].first
            if first is not None:
                deltas[teacher_id] = target - first.start_time
        return self._shift_each(deltas, policies)

    def _shift_each(
        self,
        deltas: Dict[str, int],
        policies: Optional[Dict[str, CascadePolicy]]
    ) -> GlobalShiftResult:
        result = GlobalShiftResult(
            skipped=[teacher_id for teacher_id in self._queues if teacher_id in self._opted_out]
        )

        for teacher_id, delta in deltas.items():
            queue = self._queues[teacher_id]
            log = queue_logger(logger, teacher_id, queue.date)
            if queue.is_empty or delta == 0:
                result.shifted.append(teacher_id)
                continue

            policy = self._policy(teacher_id, policies)
            nodes = [node.shifted(delta) for node in queue.nodes]
            validation = self.validator.validate_chain(nodes, policy)
            if not validation.is_valid:
                log.warning(f"Global shift of {delta:+d}min rejected: {validation.message}")
                result.failures[teacher_id] = validation.message
                result.reasons[teacher_id] = validation.reason
                continue

            self._queues[teacher_id] = queue.with_nodes(nodes)
            result.shifted.append(teacher_id)
            log.info(f"Shifted queue by {delta:+d}min")

        return result

    def global_earliest_time(self) -> Optional[str]:
        """Earliest first-event start among participants (HH:MM)."""
        starts = [
            self._queues[teacher_id].first.start_time
            for teacher_id in self.participants
            if self._queues[teacher_id].first is not None
        ]
        return minutes_to_time(min(starts)) if starts else None

    def lock_status_time(self, target_time: Optional[str] = None) -> LockStatus:
        """
        Whether every participant's first event starts at the same time.

        Args:
            target_time: Time to compare with (default: global earliest time)
        """
        earliest = {
            teacher_id: self._queues[teacher_id].earliest_time()
            for teacher_id in self.participants
        }
        earliest = {key: value for key, value in earliest.items() if value is not None}
        total = len(self.participants)
        if not earliest or total == 0:
            return LockStatus(reference=None, lock_count=0, total_teachers=0, is_locked=False)

        reference = target_time or self.global_earliest_time()
        matching = sum(1 for value in earliest.values() if value == reference)
        return LockStatus(
            reference=reference,
            lock_count=matching,
            total_teachers=total,
            is_locked=matching == total,
        )

    # ============ LOCATION ============

    def global_location(self) -> Optional[str]:
        """Most common location across participants' events."""
        counts = Counter(
            node.location
            for teacher_id in self.participants
            for node in self._queues[teacher_id].nodes
            if node.location
        )
        if not counts:
            return None
        return counts.most_common(1)[0][0]

    def set_global_location(self, location: str) -> List[str]:
        """
        Give every participating event the same location.

        Returns:
            Teachers whose queues changed
        """
        changed = []
        for teacher_id in self.participants:
            queue = self._queues[teacher_id]
            if queue.is_empty:
                continue
            result = self.mutator.set_all_locations(queue, location)
            if result.changed_ids:
                self._queues[teacher_id] = result.queue
                changed.append(teacher_id)
        logger.info(f"Set location {location} on {len(changed)} queues")
        return changed

    def lock_status_location(self, target_location: Optional[str] = None) -> LockStatus:
        """
        Whether every participant's events all share one location.

        lock_count counts events at the reference location.
        """
        uniform: Dict[str, Optional[str]] = {}
        for teacher_id in self.participants:
            locations = [node.location for node in self._queues[teacher_id].nodes if node.location]
            same = bool(locations) and all(location == locations[0] for location in locations)
            uniform[teacher_id] = locations[0] if same else None

        total = len(uniform)
        reference = target_location or next(
            (location for location in uniform.values() if location is not None), None
        )
        if reference is None:
            return LockStatus(reference=None, lock_count=0, total_teachers=total, is_locked=False)

        event_count = sum(
            1
            for teacher_id in self.participants
            for node in self._queues[teacher_id].nodes
            if node.location == reference
        )
        teachers_matching = sum(1 for location in uniform.values() if location == reference)
        return LockStatus(
            reference=reference,
            lock_count=event_count,
            total_teachers=total,
            is_locked=teachers_matching == total,
        )

    # ============ OPTIMISATION ============

    def optimisation_stats(self) -> Dict[str, int]:
        """
        Events in already packed queues, out of all participating events.

        Returns:
            {"optimised": ..., "total": ...}
        """
        optimised = 0
        total = 0
        for teacher_id in self.participants:
            queue = self._queues[teacher_id]
            total += len(queue)
            if self.optimizer.is_optimised(queue):
                optimised += len(queue)
        return {"optimised": optimised, "total": total}

    def optimise_all(self) -> Dict[str, OptimisationResult]:
        """
        Pack every participating queue from its own first event.

        Queues whose optimisation is rejected keep their times.
        """
        results = {}
        for teacher_id in self.participants:
            result = self.optimizer.optimise(self._queues[teacher_id])
            if result.is_applied:
                self._queues[teacher_id] = result.queue
            results[teacher_id] = result
        return results

    # ============ CHANGES ============

    def collect_changes(self) -> Dict[str, QueueChanges]:
        """Pending changes per participating teacher, relative to the session start."""
        changes = {}
        for teacher_id in self.participants:
            diff = diff_queues(self._snapshots[teacher_id], self._queues[teacher_id])
            if diff.has_changes:
                changes[teacher_id] = diff
        return changes

    def start_queue(self, teacher_id: str) -> TeacherDayQueue:
        """Queue of a teacher as it was when the session started."""
        self._require_teacher(teacher_id)
        return self._snapshots[teacher_id]

    def is_changed(self, teacher_id: str) -> bool:
        """True when the session holds a different queue than it started with."""
        return self.queue(teacher_id) is not self._snapshots[teacher_id]

    def changed_events_count(self) -> int:
        return sum(len(diff.updates) for diff in self.collect_changes().values())

    def discard_changes(self) -> None:
        """Return every queue to its state at session start."""
        self._queues = dict(self._snapshots)
        logger.info("Discarded global adjustment changes")

    def replace_queue(self, fresh: TeacherDayQueue) -> bool:
        """
        Take in a queue rebuilt from a newer snapshot.

        A participating teacher keeps the edited queue unless the fresh
        one holds different events (by id and order); then the teacher is
        opted out and gets the fresh queue.

        Returns:
            True when a conflict opted the teacher out
        """
        teacher_id = fresh.teacher.id
        current = self._queues.get(teacher_id)

        if current is None:
            self._queues[teacher_id] = fresh
            self._snapshots[teacher_id] = fresh
            if fresh.is_empty:
                self._opted_out.add(teacher_id)
            return False

        if not self.is_participating(teacher_id):
            self._queues[teacher_id] = fresh
            self._snapshots[teacher_id] = fresh
            return False

        if current.event_ids != fresh.event_ids:
            queue_logger(logger, teacher_id, fresh.date).warning(
                "Queue changed upstream during adjustment, opting out"
            )
            self._opted_out.add(teacher_id)
            self._queues[teacher_id] = fresh
            self._snapshots[teacher_id] = fresh
            return True

        return False
