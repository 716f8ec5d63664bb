"""Reading session tracking and elapsed-time accounting."""

from .session import (
    SessionManager,
)
from .timer import (
    elapsed_seconds,
    format_duration,
    format_minutes,
)

__all__ = [
    "SessionManager",
    "elapsed_seconds",
    "format_duration",
    "format_minutes",
]
