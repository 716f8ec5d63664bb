"""Pydantic schemas for notes and quotes."""

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from ..db.schemas import BookResponse


class NoteType(str, Enum):
    """Kind of note."""

    NOTE = "note"
    QUOTE = "quote"

    @property
    def display_name(self) -> str:
        return {NoteType.NOTE: "Note", NoteType.QUOTE: "Quote"}[self]


class NoteCreate(BaseModel):
    """Schema for adding a note."""

    content: str = Field(..., min_length=1, max_length=10000)
    note_type: NoteType = NoteType.NOTE
    page_number: Optional[int] = Field(None, ge=0)


class NoteUpdate(BaseModel):
    """Schema for editing a note. Only the fields that are set change."""

    content: Optional[str] = Field(None, min_length=1, max_length=10000)
    note_type: Optional[NoteType] = None
    page_number: Optional[int] = Field(None, ge=0)


class NoteResponse(BaseModel):
    """Snapshot of a stored note."""

    id: UUID
    user_id: str
    book_id: UUID
    note_type: NoteType
    content: str
    page_number: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True, "frozen": True}

    @property
    def page_label(self) -> Optional[str]:
        """Page reference such as ``p. 42``."""
        if self.page_number is None:
            return None
        return f"p. {self.page_number}"

    @property
    def short_content(self) -> str:
        """Content truncated for table display."""
        if len(self.content) <= 100:
            return self.content
        return self.content[:97] + "..."


class BookNotesGroup(BaseModel):
    """One book with the user's notes on it, newest first."""

    book: BookResponse
    notes: list[NoteResponse]

    model_config = {"frozen": True}

    @property
    def note_count(self) -> int:
        return len(self.notes)
