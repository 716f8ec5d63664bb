"""Reading streak calculation.

A streak is the number of consecutive calendar days, ending today or
yesterday, on which at least one reading session started. Reading yesterday
but not yet today keeps the streak alive for the rest of today.
"""

from datetime import date, datetime, timedelta
from typing import Callable, Iterable, Optional

from ..config import Config, get_config
from ..db.schemas import StreakStatus, StreakSummary
from ..db.sqlite import Database, get_db
from ..errors import require_user
from ..utils import local_date, parse_iso, utc_now

ONE_DAY = timedelta(days=1)


def calculate_streak(reading_dates: Iterable[date], today: date) -> int:
    """
    Count consecutive reading days ending today, or yesterday.

    Args:
        reading_dates: Dates with at least one session (duplicates allowed)
        today: The current date in the reference timezone

    Returns:
        Streak length, 0 if neither today nor yesterday had reading

    Example:
        >>> calculate_streak({date(2024, 1, 1), date(2024, 1, 2)}, date(2024, 1, 3))
        2
    """
    days = set(reading_dates)

    if today in days:
        current = today
    elif today - ONE_DAY in days:
        current = today - ONE_DAY
    else:
        return 0

    streak = 1
    current -= ONE_DAY
    while current in days:
        streak += 1
        current -= ONE_DAY
    return streak


def longest_streak(reading_dates: Iterable[date]) -> int:
    """Longest run of consecutive reading days in the history."""
    days = set(reading_dates)
    longest = 0

    for day in days:
        # Only count from the first day of each run
        if day - ONE_DAY in days:
            continue
        length = 1
        while day + timedelta(days=length) in days:
            length += 1
        longest = max(longest, length)

    return longest


class StreakManager:
    """Derives streaks from a user's stored reading sessions."""

    def __init__(
        self,
        db: Optional[Database] = None,
        config: Optional[Config] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.db = db or get_db()
        self.config = config or get_config()
        self.clock = clock or utc_now

    def today(self) -> date:
        """Current date in the reference timezone."""
        return local_date(self.clock(), self.config.tz)

    def reading_dates(self, user_id: Optional[str]) -> set[date]:
        """Distinct reference-timezone dates on which the user started a session."""
        user_id = require_user(user_id)
        tz = self.config.tz
        return {
            local_date(parse_iso(started_at), tz)
            for started_at in self.db.get_session_start_times(user_id)
        }

    def current_streak(self, user_id: Optional[str], today: Optional[date] = None) -> int:
        return calculate_streak(self.reading_dates(user_id), today or self.today())

    def streak_summary(
        self, user_id: Optional[str], today: Optional[date] = None
    ) -> StreakSummary:
        """Current streak, longest streak and whether today is still open."""
        today = today or self.today()
        dates = self.reading_dates(user_id)
        current = calculate_streak(dates, today)

        if today in dates:
            status = StreakStatus.ACTIVE
        elif current > 0:
            status = StreakStatus.AT_RISK
        else:
            status = StreakStatus.NONE

        return StreakSummary(
            current_streak=current,
            longest_streak=longest_streak(dates),
            total_reading_days=len(dates),
            status=status,
        )
