"""Notes manager for reading notes and quotes.

Notes belong to one user and one book. Lists are returned newest first, and
search matches the note text or the book's title or author.
"""

import logging
from datetime import datetime
from typing import Any, Callable, Optional

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from ..config import Config, get_config
from ..db.models import Book
from ..db.schemas import BookResponse
from ..db.sqlite import Database, get_db
from ..errors import NotFoundError, ValidationError, require_user
from ..utils import to_iso, utc_now
from .models import Note
from .schemas import BookNotesGroup, NoteCreate, NoteResponse, NoteType, NoteUpdate

logger = logging.getLogger(__name__)


def _invalid(e: PydanticValidationError) -> ValidationError:
    return ValidationError(f"Invalid note: {e.errors()[0]['msg']}", {"errors": e.errors()})


class NotesManager:
    """Manages a user's reading notes and quotes."""

    def __init__(
        self,
        db: Optional[Database] = None,
        config: Optional[Config] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.db = db or get_db()
        self.config = config or get_config()
        self.clock = clock or utc_now

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _check_page(self, page_number: Optional[int]) -> None:
        if page_number is not None and page_number > self.config.max_page:
            raise ValidationError(f"Page is too large (max {self.config.max_page})")

    @staticmethod
    def _load(s: Session, user_id: str, note_id: str) -> Note:
        note = s.get(Note, note_id)
        if note is None or note.user_id != user_id:
            raise NotFoundError(f"Note not found: {note_id}")
        return note

    # -------------------------------------------------------------------------
    # Note CRUD
    # -------------------------------------------------------------------------

    def add_note(
        self,
        user_id: Optional[str],
        book_id: str,
        content: str,
        note_type: NoteType = NoteType.NOTE,
        page_number: Optional[int] = None,
    ) -> NoteResponse:
        """Attach a note or quote to a book.

        Args:
            user_id: Owner of the note
            book_id: Book the note is about
            content: Note text; surrounding whitespace is dropped
            note_type: ``note`` or ``quote``
            page_number: Optional page reference

        Raises:
            NotFoundError: If the book does not exist
            ValidationError: If the text is empty or too long, or the page
                is out of range
        """
        user_id = require_user(user_id)
        try:
            data = NoteCreate(
                content=content.strip(), note_type=note_type, page_number=page_number
            )
        except PydanticValidationError as e:
            raise _invalid(e) from e
        self._check_page(data.page_number)
        now = to_iso(self.clock())

        with self.db.get_session() as s:
            if self.db.get_book(book_id, s) is None:
                raise NotFoundError(f"Book not found: {book_id}")

            note = Note(
                user_id=user_id,
                book_id=book_id,
                note_type=data.note_type.value,
                content=data.content,
                page_number=data.page_number,
                created_at=now,
                updated_at=now,
            )
            s.add(note)
            s.flush()
            snapshot = NoteResponse.model_validate(note)

        logger.info("Added %s %s to book %s", data.note_type.value, snapshot.id, book_id)
        return snapshot

    def get_note(self, user_id: Optional[str], note_id: str) -> NoteResponse:
        user_id = require_user(user_id)
        with self.db.get_session() as s:
            return NoteResponse.model_validate(self._load(s, user_id, note_id))

    def update_note(self, user_id: Optional[str], note_id: str, **changes: Any) -> NoteResponse:
        """Edit a note.

        Only the keyword arguments given are changed, so
        ``update_note(user, note, page_number=None)`` clears the page.

        Raises:
            NotFoundError: If the user has no such note
            ValidationError: If a new value is invalid
        """
        user_id = require_user(user_id)
        if isinstance(changes.get("content"), str):
            changes["content"] = changes["content"].strip()
        try:
            values = NoteUpdate(**changes).model_dump(exclude_unset=True)
        except PydanticValidationError as e:
            raise _invalid(e) from e
        for field in ("content", "note_type"):
            if field in values and values[field] is None:
                label = field.replace("_", " ").capitalize()
                raise ValidationError(f"{label} cannot be empty")
        self._check_page(values.get("page_number"))

        with self.db.get_session() as s:
            note = self._load(s, user_id, note_id)
            for field, value in values.items():
                setattr(note, field, value.value if isinstance(value, NoteType) else value)
            note.updated_at = to_iso(self.clock())
            s.flush()
            return NoteResponse.model_validate(note)

    def delete_note(self, user_id: Optional[str], note_id: str) -> None:
        user_id = require_user(user_id)
        with self.db.get_session() as s:
            s.delete(self._load(s, user_id, note_id))
        logger.info("Deleted note %s", note_id)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def list_notes(
        self,
        user_id: Optional[str],
        book_id: Optional[str] = None,
        note_type: Optional[NoteType] = None,
    ) -> list[NoteResponse]:
        """The user's notes, newest first, optionally for one book or type."""
        user_id = require_user(user_id)
        with self.db.get_session() as s:
            stmt = select(Note).where(Note.user_id == user_id)
            if book_id:
                stmt = stmt.where(Note.book_id == book_id)
            if note_type:
                stmt = stmt.where(Note.note_type == NoteType(note_type).value)
            stmt = stmt.order_by(Note.created_at.desc())
            return [NoteResponse.model_validate(n) for n in s.execute(stmt).scalars()]

    def search_notes(self, user_id: Optional[str], query: str) -> list[NoteResponse]:
        """Notes whose text, book title or book author contains ``query``.

        Matching ignores case. A blank query returns every note.
        """
        user_id = require_user(user_id)
        pattern = f"%{query.strip()}%"
        with self.db.get_session() as s:
            stmt = (
                select(Note)
                .join(Book, Note.book_id == Book.id)
                .where(
                    Note.user_id == user_id,
                    or_(
                        Note.content.ilike(pattern),
                        Book.title.ilike(pattern),
                        Book.author.ilike(pattern),
                    ),
                )
                .order_by(Note.created_at.desc())
            )
            return [NoteResponse.model_validate(n) for n in s.execute(stmt).scalars()]

    def group_by_book(self, user_id: Optional[str]) -> list[BookNotesGroup]:
        """The user's notes grouped per book.

        Groups are ordered by their newest note.
        """
        user_id = require_user(user_id)
        with self.db.get_session() as s:
            stmt = (
                select(Note, Book)
                .join(Book, Note.book_id == Book.id)
                .where(Note.user_id == user_id)
                .order_by(Note.created_at.desc())
            )
            rows = s.execute(stmt).all()
            books: dict[str, BookResponse] = {}
            notes: dict[str, list[NoteResponse]] = {}
            for note, book in rows:
                books.setdefault(book.id, BookResponse.model_validate(book))
                notes.setdefault(book.id, []).append(NoteResponse.model_validate(note))

        # Rows arrive newest first, so insertion order is group order
        return [BookNotesGroup(book=books[book_id], notes=notes[book_id]) for book_id in notes]
