"""
Exceptions raised by the queue core.

Recoverable placement problems are not exceptions: they come back as
rejected results carrying a ValidationReason. The classes below signal
corrupt input snapshots or calls that break the caller contract.
"""

from typing import Optional


class ClassboardError(Exception):
    """Base class for classboard core errors."""
    pass


class ChainIntegrityError(ClassboardError):
    """
    Raised when a teacher-day chain cannot be trusted.

    Covers cycles, several heads, dangling successor references and
    chains whose order does not follow start times. The queue is refused
    as a whole; there is no attempt to repair it.
    """

    def __init__(self, message: str, teacher_id: Optional[str] = None):
        self.teacher_id = teacher_id
        prefix = f"[{teacher_id}] " if teacher_id else ""
        super().__init__(f"{prefix}{message}")


class EventNotFoundError(ClassboardError):
    """Raised when an operation names an event that is not in the queue."""

    def __init__(self, event_id: str):
        self.event_id = event_id
        super().__init__(f"Event not found in queue: {event_id}")


class LockPreconditionError(ClassboardError):
    """Raised when a Locked mutation is requested on a queue that is not optimised."""
    pass


class StatusRequirementError(ClassboardError):
    """Raised when an event cannot take the requested status."""
    pass
