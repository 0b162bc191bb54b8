"""Cascade policy passed explicitly to every queue mutation."""

from enum import Enum


class CascadePolicy(Enum):
    """
    How a change propagates through a teacher-day chain.

    LOCKED keeps the chain at zero slack: every change is cascaded so each
    gap stays exactly at the configured gap. RESPECTING (the "unlocked"
    mode) keeps existing times and only pushes neighbours that would
    otherwise overlap.
    """
    LOCKED = "locked"
    RESPECTING = "respecting"

    @property
    def is_locked(self) -> bool:
        return self is CascadePolicy.LOCKED
