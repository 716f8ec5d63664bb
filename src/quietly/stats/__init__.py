"""Reading goals and statistics."""

from .analytics import ReadingAnalytics
from .goals import (
    GoalTracker,
    goal_period,
)

__all__ = [
    "ReadingAnalytics",
    "GoalTracker",
    "goal_period",
]
