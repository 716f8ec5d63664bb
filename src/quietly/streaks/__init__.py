"""Reading streaks module."""

from .calculator import StreakManager, calculate_streak, longest_streak

__all__ = [
    "StreakManager",
    "calculate_streak",
    "longest_streak",
]
