"""
Exception classes for quietly operations.

Every failure surfaced to a caller is a QuietlyError carrying a short
human-readable message.
"""
from typing import Any, Dict, Optional


class QuietlyError(Exception):
    """Base exception for all quietly errors"""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class NotAuthenticatedError(QuietlyError):
    """Raised when an operation needs a user id and none was given"""
    def __init__(self, message: str = "User not authenticated", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class NotFoundError(QuietlyError):
    """Raised when a referenced session, goal or book does not exist"""
    pass


class InvalidTransitionError(QuietlyError):
    """Raised when a session operation is not valid from its current state"""
    pass


class ValidationError(QuietlyError):
    """Raised when input values are out of range or inconsistent"""
    pass


class StoreError(QuietlyError):
    """Raised when the underlying data store call fails"""
    pass


def require_user(user_id: Optional[str]) -> str:
    """Return ``user_id`` or raise NotAuthenticatedError when it is missing."""
    if not user_id:
        raise NotAuthenticatedError()
    return user_id
