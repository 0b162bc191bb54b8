"""
Mutation result for queue operations.

Every cascade operation returns a MutationResult: either the updated
queue with the ids of the events that changed, or a rejection carrying
the untouched input queue and the ValidationReason that stopped it.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, List, Optional

from ..validation.validators import ValidationReason

if TYPE_CHECKING:
    from ..queue.teacher_queue import TeacherDayQueue


class MutationStatus(Enum):
    """Outcome of a mutation."""
    APPLIED = "applied"
    REJECTED = "rejected"


@dataclass
class MutationResult:
    """
    Outcome of a queue mutation.

    Attributes:
        status: APPLIED or REJECTED
        queue: The new queue when applied, the input queue when rejected
        changed_ids: Ids of events whose placement or labels changed
        removed_ids: Ids of events that left the queue
        reason: Failure code (None when applied)
        message: Human readable description

    Examples:
        >>> result = mutator.insert(queue, None, node, CascadePolicy.RESPECTING)
        >>> if result.is_applied:
        ...     queue = result.queue
        ... else:
        ...     print(f"Rejected: {result.message}")
    """

    status: MutationStatus
    queue: 'TeacherDayQueue'
    changed_ids: List[str] = field(default_factory=list)
    removed_ids: List[str] = field(default_factory=list)
    reason: Optional[ValidationReason] = None
    message: Optional[str] = None

    @property
    def is_applied(self) -> bool:
        """Check if the mutation was committed."""
        return self.status == MutationStatus.APPLIED

    @property
    def is_rejected(self) -> bool:
        """Check if the mutation was refused."""
        return self.status == MutationStatus.REJECTED

    @classmethod
    def applied(
        cls,
        queue: 'TeacherDayQueue',
        changed_ids: Optional[List[str]] = None,
        removed_ids: Optional[List[str]] = None,
        message: Optional[str] = None
    ) -> 'MutationResult':
        """
        Create a committed result.

        Args:
            queue: The updated queue
            changed_ids: Ids of changed events
            removed_ids: Ids of removed events
            message: Optional description
        """
        return cls(
            status=MutationStatus.APPLIED,
            queue=queue,
            changed_ids=list(changed_ids or []),
            removed_ids=list(removed_ids or []),
            message=message
        )

    @classmethod
    def rejected(
        cls,
        queue: 'TeacherDayQueue',
        reason: ValidationReason,
        message: str
    ) -> 'MutationResult':
        """
        Create a refused result.

        Args:
            queue: The input queue, returned unchanged
            reason: Failure code
            message: Description of the failure
        """
        return cls(
            status=MutationStatus.REJECTED,
            queue=queue,
            reason=reason,
            message=message
        )

    def unwrap(self) -> 'TeacherDayQueue':
        """
        Get the updated queue.

        Raises:
            ValueError: If the mutation was rejected
        """
        if self.is_rejected:
            raise ValueError(f"Cannot unwrap rejected mutation: {self.message}")
        return self.queue
