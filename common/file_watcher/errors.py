"""Exceptions raised by the file watcher system."""

from typing import Optional


class FileWatcherError(Exception):
    """Base class for file watcher errors."""


class StatError(FileWatcherError):
    """Raised when the size of a watched file cannot be read."""

    def __init__(self, path: str, reason: Optional[str] = None) -> None:
        self.path = path
        self.reason = reason
        message = f"Cannot stat {path}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class PatternResolutionError(FileWatcherError):
    """Raised when watch patterns cannot be resolved against the watch root."""


class SessionStateError(FileWatcherError):
    """Raised when a session operation is not valid in its current state."""
