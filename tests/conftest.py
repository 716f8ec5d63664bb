"""Pytest configuration and shared fixtures.

This module provides fixtures for testing quietly, including in-memory
databases, a controllable clock and sample books.
"""

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from quietly.config import Config
from quietly.db.models import Book
from quietly.db.schemas import BookCreate
from quietly.db.sqlite import Database
from quietly.library.tracker import LibraryTracker
from quietly.notes.manager import NotesManager
from quietly.reading.session import SessionManager
from quietly.stats.analytics import ReadingAnalytics
from quietly.stats.goals import GoalTracker
from quietly.streaks.calculator import StreakManager

USER_ID = "user-1"
OTHER_USER_ID = "user-2"

# Friday
T0 = datetime(2024, 3, 15, 10, 0, 0, tzinfo=timezone.utc)


class FixedClock:
    """Clock that only moves when told to."""

    def __init__(self, now: datetime = T0):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: int = 0, **kwargs) -> datetime:
        self.now = self.now + timedelta(seconds=seconds, **kwargs)
        return self.now

    def set(self, now: datetime) -> datetime:
        self.now = now
        return self.now


# ============================================================================
# Configuration & Database Fixtures
# ============================================================================


@pytest.fixture
def config() -> Config:
    """Configuration with UTC reference timezone."""
    return Config(
        db_path=Path(":memory:"),
        user_id=USER_ID,
        timezone_name="UTC",
        max_page=50000,
        max_goal_target=100000,
        log_level="WARNING",
    )


@pytest.fixture
def db() -> Database:
    """Create an in-memory database for testing."""
    database = Database(":memory:")
    database.create_tables()
    return database


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


# ============================================================================
# Manager Fixtures
# ============================================================================


@pytest.fixture
def manager(db: Database, config: Config, clock: FixedClock) -> SessionManager:
    return SessionManager(db, config, clock)


@pytest.fixture
def goals(db: Database, config: Config, clock: FixedClock) -> GoalTracker:
    return GoalTracker(db, config, clock)


@pytest.fixture
def library(db: Database, config: Config, clock: FixedClock) -> LibraryTracker:
    return LibraryTracker(db, config, clock)


@pytest.fixture
def streaks(db: Database, config: Config, clock: FixedClock) -> StreakManager:
    return StreakManager(db, config, clock)


@pytest.fixture
def analytics(db: Database, config: Config, clock: FixedClock) -> ReadingAnalytics:
    return ReadingAnalytics(db, config, clock)


@pytest.fixture
def notes(db: Database, config: Config, clock: FixedClock) -> NotesManager:
    return NotesManager(db, config, clock)


# ============================================================================
# Sample Data Fixtures
# ============================================================================


@pytest.fixture
def book(db: Database) -> Book:
    """A book in the catalogue."""
    return db.create_book(
        BookCreate(title="The Great Gatsby", author="F. Scott Fitzgerald", page_count=180)
    )


@pytest.fixture
def other_book(db: Database) -> Book:
    return db.create_book(BookCreate(title="Project Hail Mary", author="Andy Weir", page_count=496))


@pytest.fixture
def read_for(manager: SessionManager, clock: FixedClock):
    """Record one finished session of ``seconds`` starting at ``start``."""

    def _read(book_id: str, start: datetime, seconds: int, user_id: str = USER_ID, **kwargs):
        clock.set(start)
        session = manager.start_session(user_id, book_id)
        clock.advance(seconds)
        return manager.end_session(user_id, str(session.id), **kwargs)

    return _read
