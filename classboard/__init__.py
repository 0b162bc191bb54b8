"""
Classboard queue core.

This package keeps each teacher's daily chain of lesson events ordered
and gap-consistent, applies Locked or Respecting cascade edits, packs
queues, splits earnings between teacher and school, and rolls the day up
into completion and earnings statistics.

Usage:
    >>> from classboard import ClassboardService, CascadePolicy
    >>> from classboard.utils.config import config
    >>>
    >>> service = ClassboardService(config.controller_settings())
    >>> build = service.rebuild(snapshot)
    >>> stats = service.stats(build.date)
"""

from .models.policy import CascadePolicy
from .models.settings import ControllerSettings
from .service import ClassboardService

__all__ = [
    "CascadePolicy",
    "ControllerSettings",
    "ClassboardService",
]

__version__ = "0.1.0"
