"""Reading statistics and analytics.

Summarises a user's library and session history for the home screen.
"""

from datetime import date, datetime
from typing import Callable, Optional

from ..config import Config, get_config
from ..db.schemas import ReadingStats, ReadingStatus
from ..db.sqlite import Database, get_db
from ..errors import require_user
from ..streaks.calculator import StreakManager
from ..utils import utc_now


class ReadingAnalytics:
    """Computes overall reading statistics."""

    def __init__(
        self,
        db: Optional[Database] = None,
        config: Optional[Config] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.db = db or get_db()
        self.config = config or get_config()
        self.clock = clock or utc_now
        self.streaks = StreakManager(self.db, self.config, self.clock)

    def reading_stats(self, user_id: Optional[str], today: Optional[date] = None) -> ReadingStats:
        """Library counts, session totals and the current streak."""
        user_id = require_user(user_id)

        library = self.db.get_user_books(user_id)
        by_status = {status: 0 for status in ReadingStatus}
        for user_book in library:
            by_status[ReadingStatus(user_book.status)] += 1

        sessions = [s for s in self.db.get_all_sessions(user_id) if s.ended_at]
        total_seconds = sum(s.duration_seconds or 0 for s in sessions)
        total_pages = sum(s.pages_read or 0 for s in sessions)

        average_speed = 0.0
        if total_seconds > 0 and total_pages > 0:
            average_speed = total_pages / (total_seconds / 60)

        return ReadingStats(
            reading_streak=self.streaks.current_streak(user_id, today),
            total_books=len(library),
            books_completed=by_status[ReadingStatus.COMPLETED],
            books_reading=by_status[ReadingStatus.READING],
            books_want_to_read=by_status[ReadingStatus.WANT_TO_READ],
            total_reading_minutes=total_seconds // 60,
            total_pages_read=total_pages,
            average_pages_per_minute=average_speed,
            total_sessions=len(sessions),
        )
