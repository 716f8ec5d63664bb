"""Database module for local SQLite storage."""

from .models import Book, ReadingGoal, ReadingSession, UserBook
from .schemas import (
    BookCreate,
    BookResponse,
    GoalProgress,
    GoalType,
    ReadingGoalCreate,
    ReadingGoalResponse,
    ReadingSessionResponse,
    ReadingStatus,
    UserBookResponse,
)
from .sqlite import Database, get_db

__all__ = [
    "Book",
    "ReadingGoal",
    "ReadingSession",
    "UserBook",
    "BookCreate",
    "BookResponse",
    "GoalProgress",
    "GoalType",
    "ReadingGoalCreate",
    "ReadingGoalResponse",
    "ReadingSessionResponse",
    "ReadingStatus",
    "UserBookResponse",
    "Database",
    "get_db",
]
