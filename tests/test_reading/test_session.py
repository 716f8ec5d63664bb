"""Tests for reading session management."""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch
from uuid import uuid4

import pytest
from sqlalchemy.exc import SQLAlchemyError

from quietly.db.schemas import ReadingStatus
from quietly.errors import (
    InvalidTransitionError,
    NotAuthenticatedError,
    NotFoundError,
    StoreError,
    ValidationError,
)

USER_ID = "user-1"
OTHER_USER_ID = "user-2"
T0 = datetime(2024, 3, 15, 10, 0, 0, tzinfo=timezone.utc)


class TestStartSession:
    """Tests for starting sessions."""

    def test_start_session(self, manager, book):
        """A new session is running and unpaused."""
        session = manager.start_session(USER_ID, book.id, start_page=12)

        assert session.user_id == USER_ID
        assert str(session.book_id) == book.id
        assert session.started_at == T0
        assert session.paused_at is None
        assert session.total_paused_seconds == 0
        assert session.ended_at is None
        assert session.start_page == 12
        assert session.is_active
        assert not session.is_paused

    def test_start_persists(self, manager, book):
        session = manager.start_session(USER_ID, book.id)
        stored = manager.get_session(USER_ID, str(session.id))
        assert stored == session

    def test_start_requires_user(self, manager, book):
        with pytest.raises(NotAuthenticatedError):
            manager.start_session(None, book.id)
        with pytest.raises(NotAuthenticatedError):
            manager.start_session("", book.id)

    def test_start_unknown_book(self, manager):
        with pytest.raises(NotFoundError):
            manager.start_session(USER_ID, str(uuid4()))

    def test_start_negative_page(self, manager, book):
        with pytest.raises(ValidationError):
            manager.start_session(USER_ID, book.id, start_page=-1)

    def test_start_page_over_limit(self, manager, book):
        with pytest.raises(ValidationError):
            manager.start_session(USER_ID, book.id, start_page=50001)

    def test_second_session_for_same_book_rejected(self, manager, book):
        manager.start_session(USER_ID, book.id)
        with pytest.raises(InvalidTransitionError):
            manager.start_session(USER_ID, book.id)

    def test_sessions_for_different_books_allowed(self, manager, book, other_book):
        manager.start_session(USER_ID, book.id)
        session = manager.start_session(USER_ID, other_book.id)
        assert session.is_active

    def test_other_user_can_read_same_book(self, manager, book):
        manager.start_session(USER_ID, book.id)
        session = manager.start_session(OTHER_USER_ID, book.id)
        assert session.user_id == OTHER_USER_ID

    def test_start_moves_book_to_reading(self, manager, library, book):
        library.add_to_library(USER_ID, book.id)

        manager.start_session(USER_ID, book.id)

        entry = library.get_library(USER_ID)[0]
        assert entry.status == ReadingStatus.READING
        assert entry.started_at == T0

    def test_start_failure_leaves_no_row(self, manager, db, book):
        with patch.object(db, "create_session", side_effect=SQLAlchemyError("disk I/O error")):
            with pytest.raises(StoreError):
                manager.start_session(USER_ID, book.id)

        assert manager.get_active_session(USER_ID) is None


class TestPauseResume:
    """Tests for pausing and resuming."""

    def test_pause(self, manager, clock, book):
        session = manager.start_session(USER_ID, book.id)
        clock.advance(60)

        paused = manager.pause_session(USER_ID, str(session.id))

        assert paused.is_paused
        assert paused.paused_at == T0 + timedelta(seconds=60)
        assert paused.total_paused_seconds == 0

    def test_pause_twice_rejected(self, manager, book):
        session = manager.start_session(USER_ID, book.id)
        manager.pause_session(USER_ID, str(session.id))
        with pytest.raises(InvalidTransitionError):
            manager.pause_session(USER_ID, str(session.id))

    def test_resume_running_rejected(self, manager, book):
        session = manager.start_session(USER_ID, book.id)
        with pytest.raises(InvalidTransitionError):
            manager.resume_session(USER_ID, str(session.id))

    def test_resume_accumulates_pause(self, manager, clock, book):
        """Start T0, pause +60, resume +120: 60 paused seconds, 120 elapsed at +180."""
        session = manager.start_session(USER_ID, book.id)
        clock.advance(60)
        manager.pause_session(USER_ID, str(session.id))
        clock.advance(60)
        resumed = manager.resume_session(USER_ID, str(session.id))

        assert resumed.paused_at is None
        assert resumed.total_paused_seconds == 60
        assert manager.elapsed(resumed, T0 + timedelta(seconds=180)) == 120

    def test_multiple_pauses_accumulate(self, manager, clock, book):
        session = manager.start_session(USER_ID, book.id)
        sid = str(session.id)
        for _ in range(3):
            clock.advance(100)
            manager.pause_session(USER_ID, sid)
            clock.advance(20)
            session = manager.resume_session(USER_ID, sid)

        assert session.total_paused_seconds == 60
        assert manager.elapsed(session) == 300

    def test_elapsed_frozen_while_paused(self, manager, clock, book):
        session = manager.start_session(USER_ID, book.id)
        clock.advance(60)
        paused = manager.pause_session(USER_ID, str(session.id))

        assert manager.elapsed(paused, T0 + timedelta(seconds=61)) == 60
        assert manager.elapsed(paused, T0 + timedelta(hours=5)) == 60

    def test_pause_ended_rejected(self, manager, book):
        session = manager.start_session(USER_ID, book.id)
        manager.end_session(USER_ID, str(session.id))
        with pytest.raises(InvalidTransitionError):
            manager.pause_session(USER_ID, str(session.id))
        with pytest.raises(InvalidTransitionError):
            manager.resume_session(USER_ID, str(session.id))

    def test_pause_failure_leaves_session_running(self, manager, db, clock, book):
        """A failed write leaves the stored session exactly as it was."""
        session = manager.start_session(USER_ID, book.id)
        clock.advance(30)

        with patch.object(db, "update_session", side_effect=SQLAlchemyError("connection lost")):
            with pytest.raises(StoreError):
                manager.pause_session(USER_ID, str(session.id))

        stored = manager.get_session(USER_ID, str(session.id))
        assert stored.paused_at is None
        assert stored == session

    def test_resume_failure_keeps_pause(self, manager, db, clock, book):
        session = manager.start_session(USER_ID, book.id)
        paused = manager.pause_session(USER_ID, str(session.id))
        clock.advance(30)

        with patch.object(db, "update_session", side_effect=SQLAlchemyError("connection lost")):
            with pytest.raises(StoreError):
                manager.resume_session(USER_ID, str(session.id))

        assert manager.get_session(USER_ID, str(session.id)) == paused


class TestEndSession:
    """Tests for ending sessions."""

    def test_end_records_duration(self, manager, clock, book):
        session = manager.start_session(USER_ID, book.id)
        clock.advance(1800)

        ended = manager.end_session(USER_ID, str(session.id))

        assert ended.ended_at == T0 + timedelta(seconds=1800)
        assert ended.duration_seconds == 1800
        assert not ended.is_active
        assert ended.formatted_duration == "30:00"

    def test_end_excludes_paused_time(self, manager, clock, book):
        session = manager.start_session(USER_ID, book.id)
        clock.advance(60)
        manager.pause_session(USER_ID, str(session.id))
        clock.advance(60)
        manager.resume_session(USER_ID, str(session.id))
        clock.advance(60)

        ended = manager.end_session(USER_ID, str(session.id))

        assert ended.duration_seconds == 120
        assert ended.total_paused_seconds == 60

    def test_end_while_paused_folds_open_pause(self, manager, clock, book):
        session = manager.start_session(USER_ID, book.id)
        clock.advance(100)
        manager.pause_session(USER_ID, str(session.id))
        clock.advance(300)

        ended = manager.end_session(USER_ID, str(session.id))

        assert ended.duration_seconds == 100
        assert ended.total_paused_seconds == 300
        assert ended.paused_at is None

    def test_pages_read(self, manager, book):
        session = manager.start_session(USER_ID, book.id, start_page=10)
        ended = manager.end_session(USER_ID, str(session.id), end_page=50, notes="Great chapter")

        assert ended.end_page == 50
        assert ended.pages_read == 40
        assert ended.notes == "Great chapter"

    def test_pages_read_needs_both_pages(self, manager, book, other_book):
        no_start = manager.start_session(USER_ID, book.id)
        ended = manager.end_session(USER_ID, str(no_start.id), end_page=50)
        assert ended.end_page == 50
        assert ended.pages_read is None

        no_end = manager.start_session(USER_ID, other_book.id, start_page=10)
        ended = manager.end_session(USER_ID, str(no_end.id))
        assert ended.pages_read is None

    def test_end_page_before_start_page(self, manager, book):
        session = manager.start_session(USER_ID, book.id, start_page=100)

        with pytest.raises(ValidationError):
            manager.end_session(USER_ID, str(session.id), end_page=50)

        assert manager.get_session(USER_ID, str(session.id)).is_active

    def test_end_page_over_limit(self, manager, book):
        session = manager.start_session(USER_ID, book.id)
        with pytest.raises(ValidationError):
            manager.end_session(USER_ID, str(session.id), end_page=50001)

    def test_end_twice_rejected(self, manager, book):
        session = manager.start_session(USER_ID, book.id)
        manager.end_session(USER_ID, str(session.id))
        with pytest.raises(InvalidTransitionError):
            manager.end_session(USER_ID, str(session.id))

    def test_end_updates_current_page(self, manager, library, book):
        library.add_to_library(USER_ID, book.id, ReadingStatus.READING)
        session = manager.start_session(USER_ID, book.id, start_page=0)

        manager.end_session(USER_ID, str(session.id), end_page=42)

        assert library.get_library(USER_ID)[0].current_page == 42

    def test_end_failure_leaves_session_active(self, manager, db, clock, book):
        session = manager.start_session(USER_ID, book.id)
        clock.advance(600)

        with patch.object(db, "update_session", side_effect=SQLAlchemyError("timeout")):
            with pytest.raises(StoreError):
                manager.end_session(USER_ID, str(session.id))

        stored = manager.get_session(USER_ID, str(session.id))
        assert stored.ended_at is None
        assert stored.duration_seconds is None

    def test_elapsed_after_end_is_final_duration(self, manager, clock, book):
        session = manager.start_session(USER_ID, book.id)
        clock.advance(90)
        ended = manager.end_session(USER_ID, str(session.id))

        assert manager.elapsed(ended, T0 + timedelta(days=3)) == 90


class TestCancelAndDelete:
    """Tests for cancelling and deleting sessions."""

    def test_cancel_running(self, manager, book):
        session = manager.start_session(USER_ID, book.id)

        manager.cancel_session(USER_ID, str(session.id))

        with pytest.raises(NotFoundError):
            manager.get_session(USER_ID, str(session.id))
        assert manager.get_active_session(USER_ID) is None

    def test_cancel_paused(self, manager, book):
        session = manager.start_session(USER_ID, book.id)
        manager.pause_session(USER_ID, str(session.id))

        manager.cancel_session(USER_ID, str(session.id))

        assert manager.get_sessions_for_book(USER_ID, book.id) == []

    def test_cancel_ended_rejected(self, manager, book):
        session = manager.start_session(USER_ID, book.id)
        manager.end_session(USER_ID, str(session.id))

        with pytest.raises(InvalidTransitionError):
            manager.cancel_session(USER_ID, str(session.id))

    def test_cancel_allows_new_session(self, manager, book):
        session = manager.start_session(USER_ID, book.id)
        manager.cancel_session(USER_ID, str(session.id))

        assert manager.start_session(USER_ID, book.id).is_active

    def test_delete_ended(self, manager, book):
        session = manager.start_session(USER_ID, book.id)
        manager.end_session(USER_ID, str(session.id))

        manager.delete_session(USER_ID, str(session.id))

        assert manager.get_recent_sessions(USER_ID) == []


class TestOwnership:
    """Sessions are only visible to their owner."""

    def test_unknown_session(self, manager):
        with pytest.raises(NotFoundError):
            manager.pause_session(USER_ID, str(uuid4()))

    def test_other_users_session(self, manager, book):
        session = manager.start_session(USER_ID, book.id)

        with pytest.raises(NotFoundError):
            manager.pause_session(OTHER_USER_ID, str(session.id))
        with pytest.raises(NotFoundError):
            manager.cancel_session(OTHER_USER_ID, str(session.id))
        with pytest.raises(NotFoundError):
            manager.get_session(OTHER_USER_ID, str(session.id))

    def test_operations_require_user(self, manager, book):
        session = manager.start_session(USER_ID, book.id)
        with pytest.raises(NotAuthenticatedError):
            manager.pause_session(None, str(session.id))
        with pytest.raises(NotAuthenticatedError):
            manager.end_session(None, str(session.id))
        with pytest.raises(NotAuthenticatedError):
            manager.get_recent_sessions(None)


class TestQueries:
    """Tests for session queries and aggregates."""

    def test_get_active_session(self, manager, book, other_book):
        first = manager.start_session(USER_ID, book.id)
        second = manager.start_session(USER_ID, other_book.id)

        assert manager.get_active_session(USER_ID, book.id) == first
        assert manager.get_active_session(USER_ID, other_book.id) == second
        assert manager.get_active_session(OTHER_USER_ID) is None

    def test_recent_sessions_newest_first(self, manager, book, read_for):
        read_for(book.id, T0, 60)
        read_for(book.id, T0 + timedelta(hours=2), 60)
        read_for(book.id, T0 + timedelta(hours=4), 60)

        recent = manager.get_recent_sessions(USER_ID, limit=2)

        assert len(recent) == 2
        assert recent[0].started_at == T0 + timedelta(hours=4)
        assert recent[1].started_at == T0 + timedelta(hours=2)

    def test_recent_sessions_skip_active(self, manager, book, other_book, read_for):
        read_for(book.id, T0, 60)
        manager.start_session(USER_ID, other_book.id)

        recent = manager.get_recent_sessions(USER_ID)

        assert len(recent) == 1
        assert str(recent[0].book_id) == book.id

    def test_minutes_today_and_this_week(self, manager, clock, book, read_for):
        # Thursday and Friday of the same week, plus the previous Sunday
        read_for(book.id, T0 - timedelta(days=1), 20 * 60)
        read_for(book.id, T0 - timedelta(days=5), 45 * 60)
        read_for(book.id, T0, 30 * 60)
        clock.set(T0 + timedelta(hours=1))

        assert manager.minutes_today(USER_ID) == 30
        assert manager.minutes_this_week(USER_ID) == 50

    def test_minutes_ignore_active_session(self, manager, clock, book):
        manager.start_session(USER_ID, book.id)
        clock.advance(3600)

        assert manager.minutes_today(USER_ID) == 0

    def test_book_stats(self, manager, book, read_for):
        cancelled = manager.start_session(USER_ID, book.id, start_page=10)
        manager.cancel_session(USER_ID, str(cancelled.id))
        read_for(book.id, T0, 600)

        stats = manager.book_stats(USER_ID, book.id)

        assert stats.total_sessions == 1
        assert stats.total_minutes == 10
        assert stats.total_pages_read == 0
        assert stats.average_pages_per_minute == 0.0

    def test_book_stats_speed(self, manager, clock, book):
        for start_page, end_page in ((10, 30), (30, 40)):
            session = manager.start_session(USER_ID, book.id, start_page=start_page)
            clock.advance(600)
            manager.end_session(USER_ID, str(session.id), end_page=end_page)

        stats = manager.book_stats(USER_ID, book.id)

        assert stats.total_sessions == 2
        assert stats.total_minutes == 20
        assert stats.total_pages_read == 30
        assert stats.average_pages_per_minute == pytest.approx(1.5)
        assert stats.formatted_total_time == "20m"
