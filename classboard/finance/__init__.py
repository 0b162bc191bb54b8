"""Teacher commission and school revenue per event."""

from .commission import Earnings, calculate, calculate_for_event, round_money

__all__ = ["Earnings", "calculate", "calculate_for_event", "round_money"]
