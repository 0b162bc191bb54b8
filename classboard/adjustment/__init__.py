"""Day-wide adjustments across teacher queues."""

from .global_adjustment import GlobalAdjustment, GlobalShiftResult, LockStatus

__all__ = ["GlobalAdjustment", "GlobalShiftResult", "LockStatus"]
