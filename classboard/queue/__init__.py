"""
Teacher-day queues: model, builder, cascade edits, optimisation and locks.

Usage:
    >>> from classboard.queue import CascadeMutator, build_teacher_queues
    >>> build = build_teacher_queues(snapshot)
    >>> result = CascadeMutator(settings).remove(build.queues[0], "evt_1", CascadePolicy.LOCKED)
"""

from .builder import BuildResult, build_teacher_queues
from .cascade import CascadeMutator
from .locks import QueueLockRegistry
from .optimizer import OptimisationResult, QueueOptimizer
from .teacher_queue import LessonRef, QueueChanges, TeacherDayQueue, TeacherInfo, diff_queues

__all__ = [
    "BuildResult",
    "build_teacher_queues",
    "CascadeMutator",
    "QueueLockRegistry",
    "OptimisationResult",
    "QueueOptimizer",
    "LessonRef",
    "QueueChanges",
    "TeacherDayQueue",
    "TeacherInfo",
    "diff_queues",
]
