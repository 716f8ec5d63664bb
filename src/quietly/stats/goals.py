"""Reading goals tracking.

Supports daily and weekly reading-minute goals and monthly and yearly
completed-book goals. A user has at most one goal of each type; setting a
goal again replaces its target.

Progress is never stored. Each call to ``progress`` recomputes it from the
session and library history for the goal's current calendar period.
"""

import logging
from datetime import datetime, tzinfo
from typing import Callable, Optional

from pydantic import ValidationError as PydanticValidationError

from ..config import Config, get_config
from ..db.models import ReadingGoal
from ..db.schemas import GoalProgress, GoalType, ReadingGoalCreate, ReadingGoalResponse
from ..db.sqlite import Database, get_db
from ..errors import NotFoundError, ValidationError, require_user
from ..utils import day_bounds, month_bounds, to_iso, utc_now, week_bounds, year_bounds

logger = logging.getLogger(__name__)

_PERIODS = {
    GoalType.DAILY_MINUTES: day_bounds,
    GoalType.WEEKLY_MINUTES: week_bounds,
    GoalType.BOOKS_PER_MONTH: month_bounds,
    GoalType.BOOKS_PER_YEAR: year_bounds,
}


def goal_period(goal_type: GoalType, now: datetime, tz: tzinfo) -> tuple[datetime, datetime]:
    """Half-open calendar period a goal is measured over.

    Args:
        goal_type: Type of goal
        now: Reference instant
        tz: Timezone whose calendar defines days, weeks, months and years

    Returns:
        (start, end) as UTC datetimes, end exclusive
    """
    return _PERIODS[GoalType(goal_type)](now, tz)


class GoalTracker:
    """Tracks and manages reading goals."""

    def __init__(
        self,
        db: Optional[Database] = None,
        config: Optional[Config] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize goal tracker.

        Args:
            db: Database instance
            config: Configuration (timezone, target limit)
            clock: Returns the current time; defaults to UTC wall clock
        """
        self.db = db or get_db()
        self.config = config or get_config()
        self.clock = clock or utc_now

    def _validate(self, goal_type, target_value: int) -> ReadingGoalCreate:
        try:
            goal = ReadingGoalCreate(goal_type=goal_type, target_value=target_value)
        except PydanticValidationError as e:
            raise ValidationError(
                f"Invalid goal: {e.errors()[0]['msg']}", {"errors": e.errors()}
            ) from e
        if goal.target_value > self.config.max_goal_target:
            raise ValidationError(
                f"Target value is too large (max {self.config.max_goal_target})"
            )
        return goal

    def _load(self, user_id: str, goal_id: str) -> ReadingGoal:
        goal = self.db.get_goal(goal_id)
        if goal is None or goal.user_id != user_id:
            raise NotFoundError(f"Goal not found: {goal_id}")
        return goal

    # -------------------------------------------------------------------------
    # Goal management
    # -------------------------------------------------------------------------

    def set_goal(
        self, user_id: Optional[str], goal_type: GoalType, target_value: int
    ) -> ReadingGoalResponse:
        """Create or replace the user's goal of this type.

        Raises:
            ValidationError: If the target is not a positive integer within
                the configured limit
        """
        user_id = require_user(user_id)
        goal = self._validate(goal_type, target_value)
        row = self.db.upsert_goal(user_id, goal.goal_type.value, goal.target_value)
        logger.info("Set %s goal to %s for user %s", goal.goal_type.value, goal.target_value, user_id)
        return ReadingGoalResponse.model_validate(row)

    def update_target(
        self, user_id: Optional[str], goal_id: str, target_value: int
    ) -> ReadingGoalResponse:
        """Change the target of an existing goal."""
        user_id = require_user(user_id)
        existing = self._load(user_id, goal_id)
        goal = self._validate(existing.goal_type, target_value)
        row = self.db.update_goal_target(goal_id, goal.target_value)
        if row is None:
            raise NotFoundError(f"Goal not found: {goal_id}")
        return ReadingGoalResponse.model_validate(row)

    def delete_goal(self, user_id: Optional[str], goal_id: str) -> None:
        """Delete one of the user's goals."""
        user_id = require_user(user_id)
        self._load(user_id, goal_id)
        self.db.delete_goal(goal_id)
        logger.info("Deleted goal %s", goal_id)

    def get_goal(self, user_id: Optional[str], goal_id: str) -> ReadingGoalResponse:
        user_id = require_user(user_id)
        return ReadingGoalResponse.model_validate(self._load(user_id, goal_id))

    def get_goal_by_type(
        self, user_id: Optional[str], goal_type: GoalType
    ) -> Optional[ReadingGoalResponse]:
        """The user's goal of a given type, if set."""
        for goal in self.list_goals(user_id):
            if goal.goal_type == GoalType(goal_type):
                return goal
        return None

    def list_goals(self, user_id: Optional[str]) -> list[ReadingGoalResponse]:
        user_id = require_user(user_id)
        return [ReadingGoalResponse.model_validate(g) for g in self.db.get_goals(user_id)]

    def available_goal_types(self, user_id: Optional[str]) -> list[GoalType]:
        """Goal types the user has not set yet."""
        existing = {g.goal_type for g in self.list_goals(user_id)}
        return [t for t in GoalType if t not in existing]

    # -------------------------------------------------------------------------
    # Progress
    # -------------------------------------------------------------------------

    def current_value(
        self,
        user_id: Optional[str],
        goal_type: GoalType,
        now: Optional[datetime] = None,
    ) -> int:
        """Minutes read or books completed in the goal's current period."""
        user_id = require_user(user_id)
        goal_type = GoalType(goal_type)
        start, end = goal_period(goal_type, now or self.clock(), self.config.tz)

        if goal_type.is_minutes:
            sessions = self.db.get_ended_sessions_started_between(
                user_id, to_iso(start), to_iso(end)
            )
            return sum(s.duration_seconds or 0 for s in sessions) // 60

        books = self.db.get_completed_user_books(user_id, to_iso(start), to_iso(end))
        return len(books)

    def progress(
        self,
        user_id: Optional[str],
        goal: ReadingGoalResponse,
        now: Optional[datetime] = None,
    ) -> GoalProgress:
        """Compute progress toward a goal for the period containing ``now``.

        Args:
            user_id: Owner of the goal
            goal: The goal to measure
            now: Reference instant (default: clock)

        Returns:
            GoalProgress with the freshly computed current value
        """
        now = now or self.clock()
        start, end = goal_period(goal.goal_type, now, self.config.tz)
        return GoalProgress(
            goal=goal,
            current_value=self.current_value(user_id, goal.goal_type, now),
            target_value=goal.target_value,
            period_start=start,
            period_end=end,
        )

    def progress_all(
        self, user_id: Optional[str], now: Optional[datetime] = None
    ) -> list[GoalProgress]:
        """Progress for every goal the user has set."""
        now = now or self.clock()
        return [self.progress(user_id, goal, now) for goal in self.list_goals(user_id)]
