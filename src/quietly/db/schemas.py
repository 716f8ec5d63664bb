"""Pydantic schemas for data validation.

These schemas describe the rows quietly reads from and writes to the
store. Response schemas are frozen snapshots: they are built after a write
commits and never change afterwards.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class ReadingStatus(str, Enum):
    """Status of a book in a user's library."""

    WANT_TO_READ = "want_to_read"
    READING = "reading"
    COMPLETED = "completed"


class GoalType(str, Enum):
    """Type of reading goal."""

    DAILY_MINUTES = "daily_minutes"
    WEEKLY_MINUTES = "weekly_minutes"
    BOOKS_PER_MONTH = "books_per_month"
    BOOKS_PER_YEAR = "books_per_year"

    @property
    def display_name(self) -> str:
        return {
            GoalType.DAILY_MINUTES: "Daily Reading",
            GoalType.WEEKLY_MINUTES: "Weekly Reading",
            GoalType.BOOKS_PER_MONTH: "Books per Month",
            GoalType.BOOKS_PER_YEAR: "Books per Year",
        }[self]

    @property
    def unit(self) -> str:
        return "minutes" if self.is_minutes else "books"

    @property
    def period_description(self) -> str:
        return {
            GoalType.DAILY_MINUTES: "per day",
            GoalType.WEEKLY_MINUTES: "per week",
            GoalType.BOOKS_PER_MONTH: "per month",
            GoalType.BOOKS_PER_YEAR: "per year",
        }[self]

    @property
    def is_minutes(self) -> bool:
        """Whether progress is measured in reading minutes."""
        return self in (GoalType.DAILY_MINUTES, GoalType.WEEKLY_MINUTES)


class StreakStatus(str, Enum):
    """Status of the current streak."""

    ACTIVE = "active"  # Read today
    AT_RISK = "at_risk"  # Read yesterday, not yet today
    NONE = "none"


# ============================================================================
# Book Schemas
# ============================================================================


class BookCreate(BaseModel):
    """Schema for adding a book."""

    title: str = Field(..., min_length=1, max_length=500, description="Book title")
    author: Optional[str] = Field(None, max_length=200)
    page_count: Optional[int] = Field(None, gt=0, description="Total pages")
    isbn: Optional[str] = Field(None, pattern=r"^[0-9X-]{10,17}$")
    cover_url: Optional[str] = Field(None, max_length=2048)


class BookResponse(BaseModel):
    """Schema for book responses."""

    id: UUID
    title: str
    author: Optional[str] = None
    page_count: Optional[int] = None
    isbn: Optional[str] = None
    cover_url: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True, "frozen": True}


class UserBookResponse(BaseModel):
    """Schema for a book in a user's library."""

    id: UUID
    user_id: str
    book_id: UUID
    status: ReadingStatus
    current_page: int = 0
    rating: Optional[int] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True, "frozen": True}


# ============================================================================
# Reading Session Schemas
# ============================================================================


class ReadingSessionResponse(BaseModel):
    """Snapshot of a persisted reading session."""

    id: UUID
    user_id: str
    book_id: UUID
    started_at: datetime
    paused_at: Optional[datetime] = None
    total_paused_seconds: int = Field(0, ge=0)
    ended_at: Optional[datetime] = None
    start_page: Optional[int] = None
    end_page: Optional[int] = None
    duration_seconds: Optional[int] = None
    pages_read: Optional[int] = None
    notes: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True, "frozen": True}

    @property
    def is_active(self) -> bool:
        """True until the session has ended."""
        return self.ended_at is None

    @property
    def is_paused(self) -> bool:
        return self.paused_at is not None

    @property
    def formatted_duration(self) -> str:
        """Final duration as a clock string, ``0:00`` while unfinished."""
        from ..reading.timer import format_duration

        return format_duration(self.duration_seconds or 0)

    @property
    def pages_per_minute(self) -> Optional[float]:
        if not self.pages_read or self.pages_read <= 0:
            return None
        if not self.duration_seconds or self.duration_seconds <= 0:
            return None
        return self.pages_read / (self.duration_seconds / 60)


# ============================================================================
# Goal Schemas
# ============================================================================


class ReadingGoalCreate(BaseModel):
    """Schema for creating or updating a goal."""

    goal_type: GoalType
    target_value: int = Field(..., gt=0, description="Target minutes or books")


class ReadingGoalResponse(BaseModel):
    """Schema for goal responses."""

    id: UUID
    user_id: str
    goal_type: GoalType
    target_value: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True, "frozen": True}

    @property
    def display_target(self) -> str:
        return f"{self.target_value} {self.goal_type.unit}"


class GoalProgress(BaseModel):
    """Progress toward a goal over its current period."""

    goal: ReadingGoalResponse
    current_value: int
    target_value: int
    period_start: datetime
    period_end: datetime

    model_config = {"frozen": True}

    @property
    def progress(self) -> float:
        """Fraction of the target reached, capped at 1.0."""
        if self.target_value <= 0:
            return 0.0
        return min(self.current_value / self.target_value, 1.0)

    @property
    def percentage(self) -> int:
        return int(self.progress * 100)

    @property
    def is_complete(self) -> bool:
        return self.current_value >= self.target_value

    @property
    def remaining(self) -> int:
        return max(0, self.target_value - self.current_value)

    @property
    def progress_text(self) -> str:
        return f"{self.current_value} / {self.target_value} {self.goal.goal_type.unit}"


# ============================================================================
# Statistics Schemas
# ============================================================================


class BookReadingStats(BaseModel):
    """Aggregated sessions for one book."""

    total_sessions: int
    total_minutes: int
    total_pages_read: int
    average_pages_per_minute: float

    @property
    def formatted_total_time(self) -> str:
        from ..reading.timer import format_minutes

        return format_minutes(self.total_minutes)


class StreakSummary(BaseModel):
    """Current and longest streak."""

    current_streak: int
    longest_streak: int
    total_reading_days: int
    status: StreakStatus

    @property
    def streak_label(self) -> str:
        return "day" if self.current_streak == 1 else "days"


class ReadingStats(BaseModel):
    """Overall reading statistics for a user."""

    reading_streak: int = 0
    total_books: int = 0
    books_completed: int = 0
    books_reading: int = 0
    books_want_to_read: int = 0
    total_reading_minutes: int = 0
    total_pages_read: int = 0
    average_pages_per_minute: float = 0.0
    total_sessions: int = 0

    @property
    def formatted_total_time(self) -> str:
        from ..reading.timer import format_minutes

        return format_minutes(self.total_reading_minutes)
