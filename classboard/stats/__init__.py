"""Per-teacher and day-wide classboard statistics."""

from .aggregator import ClassboardStats, GlobalStats, TeacherStats, aggregate, event_financials

__all__ = ["ClassboardStats", "GlobalStats", "TeacherStats", "aggregate", "event_financials"]
