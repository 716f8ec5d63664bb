"""Reading session management.

Handles starting, pausing, resuming, ending and cancelling timed reading
sessions. Timer state lives entirely in the stored row (``started_at``,
``paused_at``, ``total_paused_seconds``), so a session survives restarts and
can be continued from any process.

Every transition reads the current row and writes one update in a single
transaction. Returned sessions are snapshots taken after the write, so a
failed write never hands back an advanced state. Two devices pausing or
resuming the same session at once are not guarded against: the last write
wins.
"""

import logging
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy.orm import Session

from ..config import Config, get_config
from ..db.models import ReadingSession
from ..db.schemas import BookReadingStats, ReadingSessionResponse, ReadingStatus
from ..db.sqlite import Database, get_db
from ..errors import InvalidTransitionError, NotFoundError, ValidationError, require_user
from ..utils import day_bounds, parse_iso, to_iso, utc_now, week_bounds
from .timer import elapsed_seconds, pause_interval_seconds

logger = logging.getLogger(__name__)


class SessionManager:
    """Manages the reading session lifecycle for any user."""

    def __init__(
        self,
        db: Optional[Database] = None,
        config: Optional[Config] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize session manager.

        Args:
            db: Database instance
            config: Configuration (timezone, page limits)
            clock: Returns the current time; defaults to UTC wall clock
        """
        self.db = db or get_db()
        self.config = config or get_config()
        self.clock = clock or utc_now

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _validate_page(self, page: Optional[int], label: str) -> None:
        if page is None:
            return
        if page < 0:
            raise ValidationError(f"{label} cannot be negative")
        if page > self.config.max_page:
            raise ValidationError(f"{label} is too large (max {self.config.max_page})")

    def _load(self, s: Session, user_id: str, session_id: str) -> ReadingSession:
        row = self.db.get_session_by_id(session_id, s)
        if row is None or row.user_id != user_id:
            raise NotFoundError(f"Reading session not found: {session_id}")
        return row

    @staticmethod
    def _snapshot(row: ReadingSession) -> ReadingSessionResponse:
        return ReadingSessionResponse.model_validate(row)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def start_session(
        self,
        user_id: Optional[str],
        book_id: str,
        start_page: Optional[int] = None,
    ) -> ReadingSessionResponse:
        """Start a new reading session.

        Args:
            user_id: Owner of the session
            book_id: ID of the book being read
            start_page: Page number starting from

        Returns:
            The new running session

        Raises:
            NotAuthenticatedError: If no user id is given
            NotFoundError: If the book does not exist
            InvalidTransitionError: If the user already has an unfinished
                session for this book
            ValidationError: If the start page is out of range
        """
        user_id = require_user(user_id)
        self._validate_page(start_page, "Start page")
        now = self.clock()

        with self.db.get_session() as s:
            if self.db.get_book(book_id, s) is None:
                raise NotFoundError(f"Book not found: {book_id}")

            if self.db.get_active_sessions(user_id, book_id, s):
                raise InvalidTransitionError(
                    "A reading session for this book is already in progress. "
                    "End or cancel it first."
                )

            row = self.db.create_session(
                user_id=user_id,
                book_id=book_id,
                started_at=to_iso(now),
                start_page=start_page,
                session=s,
            )

            # Reading a book moves it off the want-to-read shelf
            user_book = self.db.get_user_book(user_id, book_id, s)
            if user_book and user_book.status == ReadingStatus.WANT_TO_READ.value:
                self.db.update_user_book(
                    user_book.id,
                    {"status": ReadingStatus.READING.value, "started_at": to_iso(now)},
                    s,
                )

            snapshot = self._snapshot(row)

        logger.info("Started reading session %s for book %s", snapshot.id, book_id)
        return snapshot

    def pause_session(self, user_id: Optional[str], session_id: str) -> ReadingSessionResponse:
        """Pause a running session.

        Raises:
            InvalidTransitionError: If the session is paused or ended
        """
        user_id = require_user(user_id)
        now = self.clock()

        with self.db.get_session() as s:
            row = self._load(s, user_id, session_id)
            if row.ended_at is not None:
                raise InvalidTransitionError("Cannot pause a session that has ended")
            if row.paused_at is not None:
                raise InvalidTransitionError("Session is already paused")

            row = self.db.update_session(row.id, {"paused_at": to_iso(now)}, s)
            snapshot = self._snapshot(row)

        logger.info("Paused reading session %s", session_id)
        return snapshot

    def resume_session(self, user_id: Optional[str], session_id: str) -> ReadingSessionResponse:
        """Resume a paused session, folding the pause into the accumulator.

        Raises:
            InvalidTransitionError: If the session is running or ended
        """
        user_id = require_user(user_id)
        now = self.clock()

        with self.db.get_session() as s:
            row = self._load(s, user_id, session_id)
            if row.ended_at is not None:
                raise InvalidTransitionError("Cannot resume a session that has ended")
            if row.paused_at is None:
                raise InvalidTransitionError("Session is not paused")

            additional = pause_interval_seconds(parse_iso(row.paused_at), now)
            row = self.db.update_session(
                row.id,
                {
                    "paused_at": None,
                    "total_paused_seconds": row.total_paused_seconds + additional,
                },
                s,
            )
            snapshot = self._snapshot(row)

        logger.info("Resumed reading session %s after %ss paused", session_id, additional)
        return snapshot

    def end_session(
        self,
        user_id: Optional[str],
        session_id: str,
        end_page: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> ReadingSessionResponse:
        """End a running or paused session and record its results.

        An open pause is folded into ``total_paused_seconds`` first, so time
        spent paused never counts toward the duration.

        Args:
            user_id: Owner of the session
            session_id: Session to end
            end_page: Page reached
            notes: Optional notes for the session

        Returns:
            The ended session with ``duration_seconds`` and ``pages_read``

        Raises:
            InvalidTransitionError: If the session has already ended
            ValidationError: If ``end_page`` is out of range or before the
                start page
        """
        user_id = require_user(user_id)
        self._validate_page(end_page, "End page")
        now = self.clock()

        with self.db.get_session() as s:
            row = self._load(s, user_id, session_id)
            if row.ended_at is not None:
                raise InvalidTransitionError("Session has already ended")

            if end_page is not None and row.start_page is not None and end_page < row.start_page:
                raise ValidationError(
                    f"End page ({end_page}) cannot be before start page ({row.start_page})"
                )

            total_paused = row.total_paused_seconds
            if row.paused_at is not None:
                total_paused += pause_interval_seconds(parse_iso(row.paused_at), now)

            duration = elapsed_seconds(now, parse_iso(row.started_at), None, total_paused)
            pages_read = None
            if end_page is not None and row.start_page is not None:
                pages_read = end_page - row.start_page

            row = self.db.update_session(
                row.id,
                {
                    "ended_at": to_iso(now),
                    "duration_seconds": duration,
                    "end_page": end_page,
                    "pages_read": pages_read,
                    "notes": notes,
                    "paused_at": None,
                    "total_paused_seconds": total_paused,
                },
                s,
            )

            if end_page is not None:
                user_book = self.db.get_user_book(user_id, row.book_id, s)
                if user_book:
                    self.db.update_user_book(user_book.id, {"current_page": end_page}, s)

            snapshot = self._snapshot(row)

        logger.info(
            "Ended reading session %s: %ss read, %s pages",
            session_id,
            duration,
            pages_read if pages_read is not None else "-",
        )
        return snapshot

    def cancel_session(self, user_id: Optional[str], session_id: str) -> None:
        """Discard an unfinished session without recording anything.

        Raises:
            InvalidTransitionError: If the session has already ended
        """
        user_id = require_user(user_id)

        with self.db.get_session() as s:
            row = self._load(s, user_id, session_id)
            if row.ended_at is not None:
                raise InvalidTransitionError(
                    "Cannot cancel a session that has ended; delete it instead"
                )
            self.db.delete_session(row.id, s)

        logger.info("Cancelled reading session %s", session_id)

    def delete_session(self, user_id: Optional[str], session_id: str) -> None:
        """Delete a session in any state."""
        user_id = require_user(user_id)

        with self.db.get_session() as s:
            row = self._load(s, user_id, session_id)
            self.db.delete_session(row.id, s)

        logger.info("Deleted reading session %s", session_id)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get_session(self, user_id: Optional[str], session_id: str) -> ReadingSessionResponse:
        """Get one of the user's sessions."""
        user_id = require_user(user_id)
        with self.db.get_session() as s:
            return self._snapshot(self._load(s, user_id, session_id))

    def get_active_session(
        self, user_id: Optional[str], book_id: Optional[str] = None
    ) -> Optional[ReadingSessionResponse]:
        """Get the user's unfinished session, optionally for one book."""
        user_id = require_user(user_id)
        rows = self.db.get_active_sessions(user_id, book_id)
        return self._snapshot(rows[0]) if rows else None

    def get_sessions_for_book(
        self, user_id: Optional[str], book_id: str
    ) -> list[ReadingSessionResponse]:
        """All of the user's sessions for a book, newest first."""
        user_id = require_user(user_id)
        return [self._snapshot(r) for r in self.db.get_sessions_for_book(user_id, book_id)]

    def get_recent_sessions(
        self, user_id: Optional[str], limit: int = 10
    ) -> list[ReadingSessionResponse]:
        """The user's most recently ended sessions."""
        user_id = require_user(user_id)
        return [self._snapshot(r) for r in self.db.get_recent_sessions(user_id, limit)]

    def elapsed(self, session: ReadingSessionResponse, now: Optional[datetime] = None) -> int:
        """Live elapsed seconds for display; final duration once ended."""
        if session.ended_at is not None:
            return session.duration_seconds or 0
        return elapsed_seconds(
            now or self.clock(),
            session.started_at,
            session.paused_at,
            session.total_paused_seconds,
        )

    def minutes_between(self, user_id: Optional[str], start: datetime, end: datetime) -> int:
        """Whole minutes read in ended sessions started in [start, end)."""
        user_id = require_user(user_id)
        rows = self.db.get_ended_sessions_started_between(user_id, to_iso(start), to_iso(end))
        return sum(r.duration_seconds or 0 for r in rows) // 60

    def minutes_today(self, user_id: Optional[str]) -> int:
        """Minutes read today in the reference timezone."""
        return self.minutes_between(user_id, *day_bounds(self.clock(), self.config.tz))

    def minutes_this_week(self, user_id: Optional[str]) -> int:
        """Minutes read since Monday in the reference timezone."""
        return self.minutes_between(user_id, *week_bounds(self.clock(), self.config.tz))

    def book_stats(self, user_id: Optional[str], book_id: str) -> BookReadingStats:
        """Aggregate the user's ended sessions for a book."""
        user_id = require_user(user_id)
        rows = [r for r in self.db.get_sessions_for_book(user_id, book_id) if r.ended_at]

        total_seconds = sum(r.duration_seconds or 0 for r in rows)
        total_pages = sum(r.pages_read or 0 for r in rows)
        if total_seconds > 0 and total_pages > 0:
            pages_per_minute = total_pages / (total_seconds / 60)
        else:
            pages_per_minute = 0.0

        return BookReadingStats(
            total_sessions=len(rows),
            total_minutes=total_seconds // 60,
            total_pages_read=total_pages,
            average_pages_per_minute=pages_per_minute,
        )

