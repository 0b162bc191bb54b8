"""
Classboard service.

Holds the current queues of each day in memory and serialises edits per
(teacher, date) queue. Queues are rebuilt from a fresh snapshot whenever
the persistence layer reports a change.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from .adjustment.global_adjustment import GlobalAdjustment
from .models.errors import ClassboardError
from .models.records import DaySnapshot
from .models.result import MutationResult
from .models.settings import ControllerSettings
from .queue.builder import BuildResult, build_teacher_queues
from .queue.cascade import CascadeMutator
from .queue.locks import QueueLockRegistry
from .queue.optimizer import OptimisationResult, QueueOptimizer
from .queue.teacher_queue import TeacherDayQueue
from .stats.aggregator import ClassboardStats, aggregate, event_financials


logger = logging.getLogger(__name__)

Mutation = Callable[[TeacherDayQueue], MutationResult]


@dataclass
class CommitResult:
    """
    Outcome of storing a global adjustment.

    Attributes:
        stored: Teachers whose stored queue was replaced
        conflicts: Teachers skipped because their queue changed meanwhile
    """

    stored: List[str] = field(default_factory=list)
    conflicts: List[str] = field(default_factory=list)

    @property
    def has_conflicts(self) -> bool:
        return bool(self.conflicts)


class ClassboardService:
    """
    Entry point used by the surrounding application.

    Examples:
        >>> service = ClassboardService(config.controller_settings())
        >>> service.rebuild(snapshot)
        >>> result = service.apply(
        ...     "t1", "2025-06-01",
        ...     lambda queue: service.mutator.resize(queue, "evt_1", 90, CascadePolicy.RESPECTING)
        ... )
        >>> stats = service.stats("2025-06-01")
    """

    def __init__(self, settings: Optional[ControllerSettings] = None, currency: str = "EUR"):
        """
        Initialize service.

        Args:
            settings: Controller settings (defaults when None)
            currency: Currency code for ledgers
        """
        self.settings = settings or ControllerSettings.default()
        self.currency = currency
        self.mutator = CascadeMutator(self.settings)
        self.optimizer = QueueOptimizer(self.settings)
        self.locks = QueueLockRegistry()
        self._queues: Dict[Tuple[str, str], TeacherDayQueue] = {}
        self._order: Dict[str, List[str]] = {}

    def rebuild(self, snapshot: DaySnapshot) -> BuildResult:
        """
        Replace every queue of the snapshot day with freshly built ones.

        Teachers whose queue is refused keep no queue for that day.
        """
        result = build_teacher_queues(snapshot)
        date = result.date

        for key in [key for key in self._queues if key[1] == date]:
            with self.locks.hold(*key):
                del self._queues[key]

        for queue in result.queues:
            with self.locks.hold(queue.teacher.id, date):
                self._queues[queue.key] = queue
        self._order[date] = [queue.teacher.id for queue in result.queues]

        logger.info(f"Rebuilt {len(result.queues)} queues for {date}")
        return result

    def on_change_notification(self, snapshot: DaySnapshot) -> BuildResult:
        """Answer a change notification with a full rebuild."""
        logger.debug(f"Change notification for {snapshot['date']}")
        return self.rebuild(snapshot)

    def get_queue(self, teacher_id: str, date: str) -> TeacherDayQueue:
        """
        Current queue of a teacher on a date.

        Raises:
            ClassboardError: If no queue is loaded for that key
        """
        queue = self._queues.get((teacher_id, date))
        if queue is None:
            raise ClassboardError(f"No queue loaded for {teacher_id} on {date}")
        return queue

    def queues_for(self, date: str) -> List[TeacherDayQueue]:
        """Queues of a date, in the order teachers were listed."""
        return [
            self._queues[(teacher_id, date)]
            for teacher_id in self._order.get(date, [])
            if (teacher_id, date) in self._queues
        ]

    def apply(self, teacher_id: str, date: str, mutation: Mutation) -> MutationResult:
        """
        Run a mutation on a stored queue while holding its lock.

        The stored queue is replaced only when the mutation is applied.
        """
        with self.locks.hold(teacher_id, date):
            queue = self.get_queue(teacher_id, date)
            result = mutation(queue)
            if result.is_applied:
                self._queues[(teacher_id, date)] = result.queue
            return result

    def optimise(
        self,
        teacher_id: str,
        date: str,
        anchor_time: Optional[int] = None
    ) -> OptimisationResult:
        """Pack a stored queue."""
        with self.locks.hold(teacher_id, date):
            result = self.optimizer.optimise(self.get_queue(teacher_id, date), anchor_time)
            if result.is_applied:
                self._queues[(teacher_id, date)] = result.queue
            return result

    def start_adjustment(self, date: str) -> GlobalAdjustment:
        """Open a global adjustment session over a date's queues."""
        return GlobalAdjustment(self.queues_for(date), self.settings)

    def commit_adjustment(self, session: GlobalAdjustment) -> CommitResult:
        """
        Store the changed participating queues of a session.

        Each queue is stored only if the service still holds the queue the
        session started from. A teacher whose queue was edited or rebuilt
        in the meantime is skipped, reported in conflicts and opted out of
        the session.

        Returns:
            CommitResult
        """
        result = CommitResult()
        for teacher_id in session.participants:
            if not session.is_changed(teacher_id):
                continue

            queue = session.queue(teacher_id)
            with self.locks.hold(*queue.key):
                if self._queues.get(queue.key) is not session.start_queue(teacher_id):
                    result.conflicts.append(teacher_id)
                else:
                    self._queues[queue.key] = queue
                    result.stored.append(teacher_id)

        for teacher_id in result.conflicts:
            logger.warning(f"Queue of {teacher_id} changed during global adjustment, not stored")
            session.opt_out(teacher_id)

        logger.info(
            f"Committed global adjustment for {len(result.stored)} teachers "
            f"({len(result.conflicts)} conflicts)"
        )
        return result

    def stats(self, date: str, count_all_events: bool = True) -> ClassboardStats:
        """Statistics of a date."""
        return aggregate(self.queues_for(date), count_all_events)

    def ledger(self, date: str, count_all_events: bool = True) -> List[Dict[str, object]]:
        """Per-event financial rows of a date."""
        return event_financials(self.queues_for(date), self.currency, count_all_events)
