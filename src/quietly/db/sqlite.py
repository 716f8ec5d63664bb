"""SQLite database operations.

Handles database connection, session management, and CRUD operations for
books, library entries, reading sessions and goals. Every SQLAlchemy failure
is rolled back and re-raised as ``StoreError``.
"""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Generator, Optional

from sqlalchemy import create_engine, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from ..errors import StoreError
from .models import Base, Book, ReadingGoal, ReadingSession, UserBook, now_iso
from .schemas import BookCreate, ReadingStatus

logger = logging.getLogger(__name__)


class Database:
    """Database connection and operations manager."""

    def __init__(self, db_path: Optional[str] = None):
        """Initialize database connection.

        Args:
            db_path: Path to SQLite database file, or ":memory:". If None,
                     uses the configured QUIETLY_DB_PATH.
        """
        if db_path is None:
            from ..config import get_config

            db_path = str(get_config().db_path)

        self.db_path = Path(db_path)
        self._is_memory = str(db_path) == ":memory:"

        if not self._is_memory:
            self._ensure_directory()

        # For in-memory databases, use StaticPool to reuse the same connection
        # so all sessions share the same in-memory database
        if self._is_memory:
            self.engine = create_engine(
                "sqlite:///:memory:",
                echo=False,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        else:
            self.engine = create_engine(
                f"sqlite:///{self.db_path}",
                echo=False,
                connect_args={"check_same_thread": False},
            )
        self.SessionLocal = sessionmaker(bind=self.engine, autocommit=False, autoflush=False)

    def _ensure_directory(self) -> None:
        """Ensure the database directory exists."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def create_tables(self) -> None:
        """Create all database tables."""
        # Import notes models to register them with Base
        from ..notes.models import Note  # noqa: F401

        try:
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as e:
            raise StoreError(f"Could not create tables: {e}") from e

    @contextmanager
    def get_session(self) -> Generator[Session, None, None]:
        """Get a database session context manager.

        Commits on success. On failure the transaction is rolled back, so the
        store is left exactly as it was before the block.
        """
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.warning("Store operation failed: %s", e)
            raise StoreError("Could not reach the data store", {"error": str(e)}) from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def _run(self, op, session: Optional[Session], detach: bool = True):
        """Run ``op`` in the given session, or in a new committed one.

        Results created in a new session are expunged so they stay readable
        after it closes.
        """
        if session:
            return op(session)
        with self.get_session() as s:
            result = op(s)
            if detach and result is not None:
                for obj in result if isinstance(result, list) else [result]:
                    if isinstance(obj, Base):
                        s.expunge(obj)
            return result

    # ========================================================================
    # Book Operations
    # ========================================================================

    def create_book(self, book: BookCreate, session: Optional[Session] = None) -> Book:
        """Create a new book record."""

        def _create(s: Session) -> Book:
            db_book = Book(
                title=book.title,
                author=book.author,
                page_count=book.page_count,
                isbn=book.isbn,
                cover_url=book.cover_url,
                created_at=now_iso(),
            )
            s.add(db_book)
            s.flush()
            return db_book

        return self._run(_create, session)

    def get_book(self, book_id: str, session: Optional[Session] = None) -> Optional[Book]:
        """Get a book by ID."""
        return self._run(lambda s: s.get(Book, book_id), session)

    def get_all_books(self, session: Optional[Session] = None) -> list[Book]:
        """Get all books ordered by title."""

        def _get(s: Session) -> list[Book]:
            stmt = select(Book).order_by(Book.title)
            return list(s.execute(stmt).scalars().all())

        return self._run(_get, session)

    def search_books(
        self, query: str, limit: int = 10, session: Optional[Session] = None
    ) -> list[Book]:
        """Search books by title or author (case-insensitive substring)."""

        def _search(s: Session) -> list[Book]:
            pattern = f"%{query}%"
            stmt = (
                select(Book)
                .where(Book.title.ilike(pattern) | Book.author.ilike(pattern))
                .order_by(Book.title)
                .limit(limit)
            )
            return list(s.execute(stmt).scalars().all())

        return self._run(_search, session)

    def delete_book(self, book_id: str, session: Optional[Session] = None) -> bool:
        """Delete a book with its library entries, sessions and notes."""

        def _delete(s: Session) -> bool:
            book = s.get(Book, book_id)
            if not book:
                return False
            s.delete(book)
            return True

        return self._run(_delete, session, detach=False)

    # ========================================================================
    # User Book Operations
    # ========================================================================

    def create_user_book(
        self,
        user_id: str,
        book_id: str,
        status: ReadingStatus = ReadingStatus.WANT_TO_READ,
        session: Optional[Session] = None,
    ) -> UserBook:
        """Add a book to a user's library."""

        def _create(s: Session) -> UserBook:
            now = now_iso()
            user_book = UserBook(
                user_id=user_id,
                book_id=book_id,
                status=status.value,
                current_page=0,
                started_at=now if status != ReadingStatus.WANT_TO_READ else None,
                completed_at=now if status == ReadingStatus.COMPLETED else None,
                created_at=now,
                updated_at=now,
            )
            s.add(user_book)
            s.flush()
            return user_book

        return self._run(_create, session)

    def get_user_book(
        self, user_id: str, book_id: str, session: Optional[Session] = None
    ) -> Optional[UserBook]:
        """Get a user's library entry for a book."""

        def _get(s: Session) -> Optional[UserBook]:
            stmt = select(UserBook).where(
                UserBook.user_id == user_id,
                UserBook.book_id == book_id,
            )
            return s.execute(stmt).scalar_one_or_none()

        return self._run(_get, session)

    def get_user_books(
        self,
        user_id: str,
        status: Optional[ReadingStatus] = None,
        session: Optional[Session] = None,
    ) -> list[UserBook]:
        """Get a user's library, optionally filtered by status."""

        def _get(s: Session) -> list[UserBook]:
            stmt = select(UserBook).where(UserBook.user_id == user_id)
            if status is not None:
                stmt = stmt.where(UserBook.status == status.value)
            stmt = stmt.order_by(UserBook.updated_at.desc())
            return list(s.execute(stmt).scalars().all())

        return self._run(_get, session)

    def get_completed_user_books(
        self,
        user_id: str,
        start: str,
        end: str,
        session: Optional[Session] = None,
    ) -> list[UserBook]:
        """Get books completed with ``start <= completed_at < end``.

        Args:
            start: Range start (stored timestamp format)
            end: Range end, exclusive
        """

        def _get(s: Session) -> list[UserBook]:
            stmt = select(UserBook).where(
                UserBook.user_id == user_id,
                UserBook.status == ReadingStatus.COMPLETED.value,
                UserBook.completed_at.is_not(None),
                UserBook.completed_at >= start,
                UserBook.completed_at < end,
            )
            return list(s.execute(stmt).scalars().all())

        return self._run(_get, session)

    def update_user_book(
        self, user_book_id: str, values: dict[str, Any], session: Optional[Session] = None
    ) -> Optional[UserBook]:
        """Update fields of a library entry."""

        def _update(s: Session) -> Optional[UserBook]:
            user_book = s.get(UserBook, user_book_id)
            if not user_book:
                return None
            for field, value in values.items():
                setattr(user_book, field, value)
            user_book.updated_at = now_iso()
            s.flush()
            return user_book

        return self._run(_update, session)

    def delete_user_book(self, user_book_id: str, session: Optional[Session] = None) -> bool:
        """Remove a library entry."""

        def _delete(s: Session) -> bool:
            user_book = s.get(UserBook, user_book_id)
            if not user_book:
                return False
            s.delete(user_book)
            return True

        return self._run(_delete, session, detach=False)

    # ========================================================================
    # Reading Session Operations
    # ========================================================================

    def create_session(
        self,
        user_id: str,
        book_id: str,
        started_at: str,
        start_page: Optional[int] = None,
        session: Optional[Session] = None,
    ) -> ReadingSession:
        """Insert a new, running reading session."""

        def _create(s: Session) -> ReadingSession:
            reading_session = ReadingSession(
                user_id=user_id,
                book_id=book_id,
                started_at=started_at,
                paused_at=None,
                total_paused_seconds=0,
                start_page=start_page,
                created_at=started_at,
            )
            s.add(reading_session)
            s.flush()
            return reading_session

        return self._run(_create, session)

    def get_session_by_id(
        self, session_id: str, session: Optional[Session] = None
    ) -> Optional[ReadingSession]:
        """Get a reading session by ID."""
        return self._run(lambda s: s.get(ReadingSession, session_id), session)

    def get_active_sessions(
        self,
        user_id: str,
        book_id: Optional[str] = None,
        session: Optional[Session] = None,
    ) -> list[ReadingSession]:
        """Get sessions with ``ended_at IS NULL``, newest first."""

        def _get(s: Session) -> list[ReadingSession]:
            stmt = select(ReadingSession).where(
                ReadingSession.user_id == user_id,
                ReadingSession.ended_at.is_(None),
            )
            if book_id is not None:
                stmt = stmt.where(ReadingSession.book_id == book_id)
            stmt = stmt.order_by(ReadingSession.started_at.desc())
            return list(s.execute(stmt).scalars().all())

        return self._run(_get, session)

    def get_sessions_for_book(
        self, user_id: str, book_id: str, session: Optional[Session] = None
    ) -> list[ReadingSession]:
        """Get all of a user's sessions for a book, newest first."""

        def _get(s: Session) -> list[ReadingSession]:
            stmt = (
                select(ReadingSession)
                .where(
                    ReadingSession.user_id == user_id,
                    ReadingSession.book_id == book_id,
                )
                .order_by(ReadingSession.started_at.desc())
            )
            return list(s.execute(stmt).scalars().all())

        return self._run(_get, session)

    def get_recent_sessions(
        self, user_id: str, limit: int = 10, session: Optional[Session] = None
    ) -> list[ReadingSession]:
        """Get a user's ended sessions, most recently ended first."""

        def _get(s: Session) -> list[ReadingSession]:
            stmt = (
                select(ReadingSession)
                .where(
                    ReadingSession.user_id == user_id,
                    ReadingSession.ended_at.is_not(None),
                )
                .order_by(ReadingSession.ended_at.desc())
                .limit(limit)
            )
            return list(s.execute(stmt).scalars().all())

        return self._run(_get, session)

    def get_all_sessions(
        self, user_id: str, session: Optional[Session] = None
    ) -> list[ReadingSession]:
        """Get every session for a user, newest first."""

        def _get(s: Session) -> list[ReadingSession]:
            stmt = (
                select(ReadingSession)
                .where(ReadingSession.user_id == user_id)
                .order_by(ReadingSession.started_at.desc())
            )
            return list(s.execute(stmt).scalars().all())

        return self._run(_get, session)

    def get_ended_sessions_started_between(
        self,
        user_id: str,
        start: str,
        end: str,
        session: Optional[Session] = None,
    ) -> list[ReadingSession]:
        """Get ended sessions with ``start <= started_at < end``."""

        def _get(s: Session) -> list[ReadingSession]:
            stmt = select(ReadingSession).where(
                ReadingSession.user_id == user_id,
                ReadingSession.ended_at.is_not(None),
                ReadingSession.started_at >= start,
                ReadingSession.started_at < end,
            )
            return list(s.execute(stmt).scalars().all())

        return self._run(_get, session)

    def get_session_start_times(
        self, user_id: str, session: Optional[Session] = None
    ) -> list[str]:
        """Get the distinct ``started_at`` values of a user's sessions."""

        def _get(s: Session) -> list[str]:
            stmt = (
                select(ReadingSession.started_at)
                .where(ReadingSession.user_id == user_id)
                .distinct()
            )
            return list(s.execute(stmt).scalars().all())

        return self._run(_get, session, detach=False)

    def update_session(
        self, session_id: str, values: dict[str, Any], session: Optional[Session] = None
    ) -> Optional[ReadingSession]:
        """Apply one targeted update to a reading session row."""

        def _update(s: Session) -> Optional[ReadingSession]:
            reading_session = s.get(ReadingSession, session_id)
            if not reading_session:
                return None
            for field, value in values.items():
                setattr(reading_session, field, value)
            s.flush()
            return reading_session

        return self._run(_update, session)

    def delete_session(self, session_id: str, session: Optional[Session] = None) -> bool:
        """Delete a reading session row."""

        def _delete(s: Session) -> bool:
            reading_session = s.get(ReadingSession, session_id)
            if not reading_session:
                return False
            s.delete(reading_session)
            return True

        return self._run(_delete, session, detach=False)

    # ========================================================================
    # Goal Operations
    # ========================================================================

    def upsert_goal(
        self,
        user_id: str,
        goal_type: str,
        target_value: int,
        session: Optional[Session] = None,
    ) -> ReadingGoal:
        """Create the goal for (user, goal_type), or update its target."""

        def _upsert(s: Session) -> ReadingGoal:
            stmt = select(ReadingGoal).where(
                ReadingGoal.user_id == user_id,
                ReadingGoal.goal_type == goal_type,
            )
            goal = s.execute(stmt).scalar_one_or_none()
            now = now_iso()

            if goal:
                goal.target_value = target_value
                goal.updated_at = now
            else:
                goal = ReadingGoal(
                    user_id=user_id,
                    goal_type=goal_type,
                    target_value=target_value,
                    created_at=now,
                    updated_at=now,
                )
                s.add(goal)

            s.flush()
            return goal

        return self._run(_upsert, session)

    def get_goal(self, goal_id: str, session: Optional[Session] = None) -> Optional[ReadingGoal]:
        """Get a goal by ID."""
        return self._run(lambda s: s.get(ReadingGoal, goal_id), session)

    def get_goals(self, user_id: str, session: Optional[Session] = None) -> list[ReadingGoal]:
        """Get a user's goals, newest first."""

        def _get(s: Session) -> list[ReadingGoal]:
            stmt = (
                select(ReadingGoal)
                .where(ReadingGoal.user_id == user_id)
                .order_by(ReadingGoal.created_at.desc(), ReadingGoal.goal_type)
            )
            return list(s.execute(stmt).scalars().all())

        return self._run(_get, session)

    def update_goal_target(
        self, goal_id: str, target_value: int, session: Optional[Session] = None
    ) -> Optional[ReadingGoal]:
        """Change a goal's target."""

        def _update(s: Session) -> Optional[ReadingGoal]:
            goal = s.get(ReadingGoal, goal_id)
            if not goal:
                return None
            goal.target_value = target_value
            goal.updated_at = now_iso()
            s.flush()
            return goal

        return self._run(_update, session)

    def delete_goal(self, goal_id: str, session: Optional[Session] = None) -> bool:
        """Delete a goal."""

        def _delete(s: Session) -> bool:
            goal = s.get(ReadingGoal, goal_id)
            if not goal:
                return False
            s.delete(goal)
            return True

        return self._run(_delete, session, detach=False)


# Global database instance
_db: Optional[Database] = None


def get_db(db_path: Optional[str] = None) -> Database:
    """Get or create the global database instance."""
    global _db
    if _db is None:
        _db = Database(db_path)
        _db.create_tables()
    return _db


def reset_db() -> None:
    """Reset the global database instance. Used for testing."""
    global _db
    _db = None
