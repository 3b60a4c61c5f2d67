"""
Error types raised by the staging and archive components.

Callers that want to treat every pipeline failure alike can catch
``StashError``; the concrete types also derive from the matching builtin
so plain ``OSError`` handlers keep working.
"""

from typing import Optional


class StashError(Exception):
    """Base class for all pipeline errors."""

    pass


class NotFoundError(StashError, FileNotFoundError):
    """Raised when a path that must exist is missing or unreadable."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path

    def __str__(self) -> str:
        return self.args[0] if self.args else ""


class FileOperationError(StashError, OSError):
    """Raised when copying or removing a path fails."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path

    def __str__(self) -> str:
        return self.args[0] if self.args else ""


class ArchiveError(StashError):
    """Raised when an archive cannot be written or fails verification."""

    pass


class EmptyResultError(StashError):
    """Raised when a stage has nothing left to act on.

    This is a normal early exit, not a failure. ``state`` names the terminal
    pipeline state the run ends in.
    """

    def __init__(self, message: str, state: str):
        super().__init__(message)
        self.state = state
