"""User library management."""

from .tracker import LibraryTracker

__all__ = ["LibraryTracker"]
