"""Reading notes and quotes module."""

from .manager import NotesManager
from .models import Note
from .schemas import BookNotesGroup, NoteCreate, NoteResponse, NoteType, NoteUpdate

__all__ = [
    "NotesManager",
    "Note",
    "NoteCreate",
    "NoteUpdate",
    "NoteResponse",
    "NoteType",
    "BookNotesGroup",
]
