"""SQLAlchemy ORM models for the quietly store.

Tables:
- books: Book catalogue
- user_books: A user's library entries and reading status
- reading_sessions: Timed reading sessions with pause accounting
- reading_goals: One goal per (user, goal type)

Notes live in ``quietly.notes.models`` and are registered by
``Database.create_tables``.

Timestamps are stored as fixed-width UTC ISO-8601 strings (see
``quietly.utils.to_iso``) so range filters compare chronologically.
"""

from typing import Optional
from uuid import uuid4

from sqlalchemy import (
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from ..utils import to_iso, utc_now
from .schemas import ReadingStatus


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


def generate_uuid() -> str:
    """Generate a UUID string for primary keys."""
    return str(uuid4())


def now_iso() -> str:
    """Current time as a stored timestamp."""
    return to_iso(utc_now())


class Book(Base):
    """Book model - catalogue entry shared between users."""

    __tablename__ = "books"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    title: Mapped[str] = mapped_column(String(500), nullable=False, index=True)
    author: Mapped[Optional[str]] = mapped_column(String(200), index=True)
    page_count: Mapped[Optional[int]] = mapped_column(Integer)
    isbn: Mapped[Optional[str]] = mapped_column(String(17), index=True)
    cover_url: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[str] = mapped_column(String(25), default=now_iso)

    # Relationships
    user_books: Mapped[list["UserBook"]] = relationship(
        "UserBook", back_populates="book", cascade="all, delete-orphan"
    )
    reading_sessions: Mapped[list["ReadingSession"]] = relationship(
        "ReadingSession", back_populates="book", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Book(id={self.id}, title={self.title})>"


class UserBook(Base):
    """User book model - one book on one user's shelf."""

    __tablename__ = "user_books"
    __table_args__ = (UniqueConstraint("user_id", "book_id", name="uq_user_books_user_book"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    user_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    book_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("books.id", ondelete="CASCADE"), nullable=False, index=True
    )
    status: Mapped[str] = mapped_column(
        String(20), default=ReadingStatus.WANT_TO_READ.value, index=True
    )
    current_page: Mapped[int] = mapped_column(Integer, default=0)
    rating: Mapped[Optional[int]] = mapped_column(Integer)
    started_at: Mapped[Optional[str]] = mapped_column(String(25))
    completed_at: Mapped[Optional[str]] = mapped_column(String(25), index=True)

    created_at: Mapped[str] = mapped_column(String(25), default=now_iso)
    updated_at: Mapped[str] = mapped_column(String(25), default=now_iso, onupdate=now_iso)

    book: Mapped["Book"] = relationship("Book", back_populates="user_books")

    def __repr__(self) -> str:
        return f"<UserBook(id={self.id}, book_id={self.book_id}, status={self.status})>"


class ReadingSession(Base):
    """Reading session model - one timed, possibly paused, reading interval."""

    __tablename__ = "reading_sessions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    user_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    book_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("books.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # Timer state
    started_at: Mapped[str] = mapped_column(String(25), nullable=False, index=True)
    paused_at: Mapped[Optional[str]] = mapped_column(String(25))
    total_paused_seconds: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    ended_at: Mapped[Optional[str]] = mapped_column(String(25), index=True)

    # Results, set once at end
    start_page: Mapped[Optional[int]] = mapped_column(Integer)
    end_page: Mapped[Optional[int]] = mapped_column(Integer)
    duration_seconds: Mapped[Optional[int]] = mapped_column(Integer)
    pages_read: Mapped[Optional[int]] = mapped_column(Integer)
    notes: Mapped[Optional[str]] = mapped_column(Text)

    created_at: Mapped[str] = mapped_column(String(25), default=now_iso)

    book: Mapped["Book"] = relationship("Book", back_populates="reading_sessions")

    def __repr__(self) -> str:
        return f"<ReadingSession(id={self.id}, book_id={self.book_id}, started_at={self.started_at})>"


class ReadingGoal(Base):
    """Reading goal model - target only, progress is always derived."""

    __tablename__ = "reading_goals"
    __table_args__ = (UniqueConstraint("user_id", "goal_type", name="uq_reading_goals_user_type"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    user_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    goal_type: Mapped[str] = mapped_column(String(20), nullable=False)
    target_value: Mapped[int] = mapped_column(Integer, nullable=False)

    created_at: Mapped[str] = mapped_column(String(25), default=now_iso)
    updated_at: Mapped[str] = mapped_column(String(25), default=now_iso, onupdate=now_iso)

    def __repr__(self) -> str:
        return f"<ReadingGoal(id={self.id}, type={self.goal_type}, target={self.target_value})>"
