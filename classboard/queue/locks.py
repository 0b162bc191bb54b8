"""
Per-queue locks.

Each (teacher id, date) queue is an independent resource: edits to one
queue are serialised, edits to different queues run in parallel.
"""

import logging
from contextlib import contextmanager
from threading import Lock
from typing import Dict, Iterator, Tuple


logger = logging.getLogger(__name__)

QueueKey = Tuple[str, str]


class QueueLockRegistry:
    """
    Hands out one lock per (teacher id, date).

    Examples:
        >>> locks = QueueLockRegistry()
        >>> with locks.hold("t1", "2025-06-01"):
        ...     queue = store[("t1", "2025-06-01")]
        ...     store[("t1", "2025-06-01")] = mutator.resize(queue, "evt_1", 90, policy).queue
    """

    def __init__(self):
        self._locks: Dict[QueueKey, Lock] = {}
        self._waiters: Dict[QueueKey, int] = {}
        self._registry_lock = Lock()

    def lock_for(self, teacher_id: str, date: str) -> Lock:
        """
        Lock guarding the queue of teacher_id on date (created on first use).

        A lock fetched here is not protected from forget_date; use hold()
        to acquire it.
        """
        key = (teacher_id, date)
        with self._registry_lock:
            return self._get_or_create(key)

    def _get_or_create(self, key: QueueKey) -> Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = Lock()
            self._locks[key] = lock
        return lock

    @contextmanager
    def hold(self, teacher_id: str, date: str) -> Iterator[None]:
        """
        Hold the queue's lock for the duration of the block.

        The key counts as in use from the moment the lock is fetched until
        it is released, so forget_date never drops it in between.
        """
        key = (teacher_id, date)
        with self._registry_lock:
            lock = self._get_or_create(key)
            self._waiters[key] = self._waiters.get(key, 0) + 1
        try:
            with lock:
                logger.debug(f"Acquired queue lock {teacher_id}@{date}")
                yield
        finally:
            with self._registry_lock:
                self._waiters[key] -= 1
                if not self._waiters[key]:
                    del self._waiters[key]

    def holders(self, teacher_id: str, date: str) -> int:
        """Callers inside or waiting to enter hold() for a queue."""
        with self._registry_lock:
            return self._waiters.get((teacher_id, date), 0)

    def forget_date(self, date: str) -> int:
        """
        Drop the locks of a finished day.

        Locks held or awaited through hold() are kept.

        Returns:
            Number of locks dropped
        """
        with self._registry_lock:
            stale = [
                key for key in self._locks
                if key[1] == date and key not in self._waiters
            ]
            for key in stale:
                del self._locks[key]
        return len(stale)

    def __len__(self) -> int:
        with self._registry_lock:
            return len(self._locks)
