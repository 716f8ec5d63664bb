"""User library tracking.

Manages the books on a user's shelf and their reading status. Completing a
book stamps ``completed_at``, which is what book-count goals are measured
against.
"""

import logging
from datetime import datetime
from typing import Callable, Optional

from pydantic import ValidationError as PydanticValidationError

from ..config import Config, get_config
from ..db.models import UserBook
from ..db.schemas import BookCreate, BookResponse, ReadingStatus, UserBookResponse
from ..db.sqlite import Database, get_db
from ..errors import InvalidTransitionError, NotFoundError, ValidationError, require_user
from ..utils import to_iso, utc_now

logger = logging.getLogger(__name__)


class LibraryTracker:
    """Manages books and users' library entries."""

    def __init__(
        self,
        db: Optional[Database] = None,
        config: Optional[Config] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.db = db or get_db()
        self.config = config or get_config()
        self.clock = clock or utc_now

    def _load(self, user_id: str, book_id: str) -> UserBook:
        user_book = self.db.get_user_book(user_id, book_id)
        if user_book is None:
            raise NotFoundError(f"Book is not in your library: {book_id}")
        return user_book

    # -------------------------------------------------------------------------
    # Books
    # -------------------------------------------------------------------------

    def add_book(
        self,
        title: str,
        author: Optional[str] = None,
        page_count: Optional[int] = None,
        isbn: Optional[str] = None,
        cover_url: Optional[str] = None,
    ) -> BookResponse:
        """Add a book to the catalogue.

        Raises:
            ValidationError: If a field is invalid
        """
        try:
            data = BookCreate(
                title=title.strip(),
                author=author.strip() if author else None,
                page_count=page_count,
                isbn=isbn.strip() if isbn else None,
                cover_url=cover_url,
            )
        except PydanticValidationError as e:
            raise ValidationError(
                f"Invalid book: {e.errors()[0]['msg']}", {"errors": e.errors()}
            ) from e

        if data.page_count and data.page_count > self.config.max_page:
            raise ValidationError(f"Page count is too large (max {self.config.max_page})")

        book = self.db.create_book(data)
        logger.info("Added book %s (%s)", book.id, book.title)
        return BookResponse.model_validate(book)

    def get_book(self, book_id: str) -> BookResponse:
        book = self.db.get_book(book_id)
        if book is None:
            raise NotFoundError(f"Book not found: {book_id}")
        return BookResponse.model_validate(book)

    def find_books(self, query: str, limit: int = 10) -> list[BookResponse]:
        """Search the catalogue by title or author."""
        return [BookResponse.model_validate(b) for b in self.db.search_books(query, limit)]

    def all_books(self) -> list[BookResponse]:
        """Every catalogue book, by title."""
        return [BookResponse.model_validate(b) for b in self.db.get_all_books()]

    def delete_book(self, book_id: str) -> None:
        """Remove a book from the catalogue.

        Its library entries, reading sessions and notes go with it.

        Raises:
            NotFoundError: If the book does not exist
        """
        if not self.db.delete_book(book_id):
            raise NotFoundError(f"Book not found: {book_id}")
        logger.info("Deleted book %s", book_id)

    # -------------------------------------------------------------------------
    # Library entries
    # -------------------------------------------------------------------------

    def add_to_library(
        self,
        user_id: Optional[str],
        book_id: str,
        status: ReadingStatus = ReadingStatus.WANT_TO_READ,
    ) -> UserBookResponse:
        """Put a book on the user's shelf.

        Raises:
            NotFoundError: If the book does not exist
            InvalidTransitionError: If it is already on the shelf
        """
        user_id = require_user(user_id)
        if self.db.get_book(book_id) is None:
            raise NotFoundError(f"Book not found: {book_id}")
        if self.db.get_user_book(user_id, book_id) is not None:
            raise InvalidTransitionError("Book is already in your library")

        user_book = self.db.create_user_book(user_id, book_id, ReadingStatus(status))
        return UserBookResponse.model_validate(user_book)

    def update_status(
        self, user_id: Optional[str], book_id: str, status: ReadingStatus
    ) -> UserBookResponse:
        """Change a book's reading status.

        Moving to ``reading`` stamps ``started_at`` if unset; moving to
        ``completed`` stamps ``completed_at``; moving away from ``completed``
        clears it.
        """
        user_id = require_user(user_id)
        status = ReadingStatus(status)
        user_book = self._load(user_id, book_id)
        now = to_iso(self.clock())

        values: dict = {"status": status.value}
        if status == ReadingStatus.COMPLETED:
            values["completed_at"] = now
            if not user_book.started_at:
                values["started_at"] = now
        else:
            values["completed_at"] = None
            if status == ReadingStatus.READING and not user_book.started_at:
                values["started_at"] = now

        updated = self.db.update_user_book(user_book.id, values)
        logger.info("Book %s is now %s for user %s", book_id, status.value, user_id)
        return UserBookResponse.model_validate(updated)

    def update_page(self, user_id: Optional[str], book_id: str, page: int) -> UserBookResponse:
        """Record the page the user has reached."""
        user_id = require_user(user_id)
        if page < 0 or page > self.config.max_page:
            raise ValidationError(f"Page must be between 0 and {self.config.max_page}")
        user_book = self._load(user_id, book_id)
        updated = self.db.update_user_book(user_book.id, {"current_page": page})
        return UserBookResponse.model_validate(updated)

    def rate_book(self, user_id: Optional[str], book_id: str, rating: int) -> UserBookResponse:
        user_id = require_user(user_id)
        if not 1 <= rating <= 5:
            raise ValidationError("Rating must be between 1 and 5")
        user_book = self._load(user_id, book_id)
        updated = self.db.update_user_book(user_book.id, {"rating": rating})
        return UserBookResponse.model_validate(updated)

    def remove_from_library(self, user_id: Optional[str], book_id: str) -> None:
        user_id = require_user(user_id)
        user_book = self._load(user_id, book_id)
        self.db.delete_user_book(user_book.id)

    def get_library(
        self, user_id: Optional[str], status: Optional[ReadingStatus] = None
    ) -> list[UserBookResponse]:
        """The user's shelf, most recently updated first."""
        user_id = require_user(user_id)
        return [
            UserBookResponse.model_validate(ub)
            for ub in self.db.get_user_books(user_id, ReadingStatus(status) if status else None)
        ]
