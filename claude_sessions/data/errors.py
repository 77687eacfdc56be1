"""Exceptions raised by the session data layer."""

from __future__ import annotations


class SessionsError(Exception):
    """Base class for all session-manager errors."""


class NotFound(SessionsError):
    """The data directory, a session file or the history index is missing."""


class ParseError(SessionsError, ValueError):
    """A JSONL line could not be decoded. Recovered by skipping the line."""

    def __init__(self, path, lineno: int, reason: str) -> None:
        super().__init__(f"{path}:{lineno}: {reason}")
        self.path = path
        self.lineno = lineno


class IoError(SessionsError, OSError):
    """A read, write or permission failure while deleting, exporting or persisting."""


class CacheCorrupt(SessionsError):
    """The metadata cache file has an unexpected shape. Recovered by discarding it."""
