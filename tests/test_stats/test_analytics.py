"""Tests for reading statistics."""

from datetime import date, datetime, timezone
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from quietly.db.schemas import ReadingStatus
from quietly.errors import NotAuthenticatedError, StoreError

USER_ID = "user-1"


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


class TestReadingStats:
    """Tests for ReadingAnalytics.reading_stats."""

    def test_empty(self, analytics):
        stats = analytics.reading_stats(USER_ID)

        assert stats.total_books == 0
        assert stats.total_sessions == 0
        assert stats.reading_streak == 0
        assert stats.average_pages_per_minute == 0.0
        assert stats.formatted_total_time == "0m"

    def test_requires_user(self, analytics):
        with pytest.raises(NotAuthenticatedError):
            analytics.reading_stats(None)

    def test_library_counts(self, analytics, library, book, other_book):
        third = library.add_book("Circe", author="Madeline Miller")
        library.add_to_library(USER_ID, book.id, ReadingStatus.COMPLETED)
        library.add_to_library(USER_ID, other_book.id, ReadingStatus.READING)
        library.add_to_library(USER_ID, str(third.id))

        stats = analytics.reading_stats(USER_ID)

        assert stats.total_books == 3
        assert stats.books_completed == 1
        assert stats.books_reading == 1
        assert stats.books_want_to_read == 1

    def test_session_totals(self, analytics, manager, clock, book, other_book):
        clock.set(utc(2024, 3, 14, 9, 0))
        first = manager.start_session(USER_ID, book.id, start_page=0)
        clock.advance(30 * 60)
        manager.end_session(USER_ID, str(first.id), end_page=30)

        clock.set(utc(2024, 3, 15, 9, 0))
        second = manager.start_session(USER_ID, other_book.id, start_page=100)
        clock.advance(30 * 60)
        manager.end_session(USER_ID, str(second.id), end_page=130)

        # Still running, left out of the totals
        manager.start_session(USER_ID, book.id)

        stats = analytics.reading_stats(USER_ID, today=date(2024, 3, 15))

        assert stats.total_sessions == 2
        assert stats.total_reading_minutes == 60
        assert stats.total_pages_read == 60
        assert stats.average_pages_per_minute == pytest.approx(1.0)
        assert stats.reading_streak == 2
        assert stats.formatted_total_time == "1h 0m"


class TestReadingStatsStoreFailures:
    """Read failures propagate instead of producing empty stats."""

    def test_reading_stats_read_fails(self, analytics, db, library, book):
        library.add_to_library(USER_ID, book.id)
        refused = OperationalError("SELECT", {}, Exception("connection refused"))

        with patch.object(db.engine, "connect", side_effect=refused):
            with pytest.raises(StoreError):
                analytics.reading_stats(USER_ID)
