"""SQLAlchemy model for reading notes and quotes.

Tables:
- notes: A user's notes and saved quotes, attached to a book
"""

from typing import Optional

from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, backref, mapped_column, relationship

from ..db.models import Base, Book, generate_uuid, now_iso
from .schemas import NoteType


class Note(Base):
    """Note model - a thought or a quoted passage from a book."""

    __tablename__ = "notes"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    user_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)

    # Book this note belongs to
    book_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("books.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    note_type: Mapped[str] = mapped_column(String(10), default=NoteType.NOTE.value, index=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    page_number: Mapped[Optional[int]] = mapped_column(Integer)

    created_at: Mapped[str] = mapped_column(String(25), default=now_iso, index=True)
    updated_at: Mapped[str] = mapped_column(String(25), default=now_iso, onupdate=now_iso)

    # Deleting a book deletes its notes
    book: Mapped["Book"] = relationship(
        "Book", backref=backref("notes", cascade="all, delete-orphan")
    )

    def __repr__(self) -> str:
        return f"<Note(id={self.id}, book_id={self.book_id}, type={self.note_type})>"
