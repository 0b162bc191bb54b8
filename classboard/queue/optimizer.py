"""
Queue optimizer.

Packs a chain so every gap equals the configured gap, starting from an
anchor time. A packed chain is what Locked mode works on.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from ..models.event import EventNode
from ..models.settings import ControllerSettings
from ..utils.logger import queue_logger
from ..utils.time_utils import MINUTES_PER_DAY, minutes_to_time
from ..validation.validators import ValidationReason
from .teacher_queue import TeacherDayQueue


logger = logging.getLogger(__name__)


@dataclass
class OptimisationResult:
    """
    Outcome of an optimisation.

    Attributes:
        queue: Packed queue, or the input queue when rejected
        adjusted: Number of events whose start time changed
        total: Number of events in the chain
        changed_ids: Ids of the events that moved
        overflow_ids: Events that would have started at or after 24:00
        reason: OUT_OF_DAY_BOUNDS when rejected, None otherwise
    """

    queue: TeacherDayQueue
    adjusted: int = 0
    total: int = 0
    changed_ids: List[str] = field(default_factory=list)
    overflow_ids: List[str] = field(default_factory=list)
    reason: Optional[ValidationReason] = None

    @property
    def is_applied(self) -> bool:
        return self.reason is None

    @property
    def is_optimised(self) -> bool:
        """The input was already packed."""
        return self.is_applied and self.adjusted == 0

    @property
    def label(self) -> str:
        """Events already in place out of the total, e.g. "2/3 Optimised"."""
        return f"{self.total - self.adjusted}/{self.total} Optimised"


def pack(nodes: Sequence[EventNode], start_time: int, gap_minutes: int) -> List[EventNode]:
    """
    Lay nodes end to end from start_time with gap_minutes between them.

    Examples:
        >>> [node.start_time for node in pack(nodes, 600, 15)]
        [600, 675, 750]
    """
    packed = []
    cursor = start_time
    for node in nodes:
        packed.append(node if node.start_time == cursor else node.at(cursor))
        cursor = cursor + node.duration + gap_minutes
    return packed


class QueueOptimizer:
    """
    Re-packs teacher queues.

    Examples:
        >>> optimizer = QueueOptimizer(settings)
        >>> result = optimizer.optimise(queue)
        >>> print(result.label)
        3/3 Optimised
    """

    def __init__(self, settings: ControllerSettings):
        """
        Initialize optimizer.

        Args:
            settings: Controller settings (gap_minutes is used)
        """
        self.settings = settings

    def optimise(
        self,
        queue: TeacherDayQueue,
        anchor_time: Optional[int] = None
    ) -> OptimisationResult:
        """
        Pack the whole chain.

        Args:
            queue: Queue to pack
            anchor_time: Start of the head in minutes (default: current head start)

        Returns:
            OptimisationResult; rejected and unchanged if an event would
            start at or after 24:00
        """
        if queue.is_empty:
            return OptimisationResult(queue=queue)

        start = queue.first.start_time if anchor_time is None else anchor_time
        return self.optimise_from(queue, 0, start)

    def optimise_from(
        self,
        queue: TeacherDayQueue,
        index: int,
        start_time: int
    ) -> OptimisationResult:
        """
        Pack the chain from position index onward, starting at start_time.

        Events before index are untouched.

        Raises:
            ValueError: If index is outside the chain or start_time is negative
        """
        total = len(queue)
        if not 0 <= index < max(total, 1):
            raise ValueError(f"Index {index} outside queue of {total} events")
        if start_time < 0:
            raise ValueError(f"Start time must not be negative, got: {start_time}")

        if queue.is_empty:
            return OptimisationResult(queue=queue)

        log = queue_logger(logger, queue.teacher.id, queue.date)
        tail = pack(queue.nodes[index:], start_time, self.settings.gap_minutes)
        nodes = list(queue.nodes[:index]) + tail

        changed_ids = [
            new.id for old, new in zip(queue.nodes, nodes) if old.start_time != new.start_time
        ]
        overflow_ids = [node.id for node in tail if node.start_time >= MINUTES_PER_DAY]

        if overflow_ids:
            log.warning(
                f"Optimisation from {minutes_to_time(start_time)} rejected: "
                f"{len(overflow_ids)} events would start after midnight"
            )
            return OptimisationResult(
                queue=queue,
                adjusted=len(changed_ids),
                total=total,
                overflow_ids=overflow_ids,
                reason=ValidationReason.OUT_OF_DAY_BOUNDS,
            )

        if not changed_ids:
            return OptimisationResult(queue=queue, total=total)

        log.info(f"Optimised {len(changed_ids)}/{total} events from {minutes_to_time(start_time)}")
        return OptimisationResult(
            queue=queue.with_nodes(nodes),
            adjusted=len(changed_ids),
            total=total,
            changed_ids=changed_ids,
        )

    def is_optimised(self, queue: TeacherDayQueue) -> bool:
        """Whether every gap already equals the configured gap."""
        return self.optimise(queue).is_optimised

    def can_lock(self, queue: TeacherDayQueue) -> bool:
        """Locked mode is only available on a packed queue."""
        return self.is_optimised(queue)
