"""Data layer for Claude Code Sessions Manager."""

from claude_sessions.data.cache import MetadataCache
from claude_sessions.data.config import Config, NameStore
from claude_sessions.data.delete import delete_paths, delete_session, delete_sessions
from claude_sessions.data.discovery import discover, find_related
from claude_sessions.data.engine import SessionEngine
from claude_sessions.data.errors import CacheCorrupt, IoError, NotFound, ParseError, SessionsError
from claude_sessions.data.export import export_session, render_transcript
from claude_sessions.data.history import load_history, prune_history, remove_from_history
from claude_sessions.data.maintenance import find_empty_sessions, find_orphans
from claude_sessions.data.models import (
    DeleteResult,
    Discovery,
    ExportResult,
    Metadata,
    PruneReport,
    PruneSelection,
    Session,
    SortMode,
)
from claude_sessions.data.parser import parse_session_file

__all__ = [
    "CacheCorrupt",
    "Config",
    "DeleteResult",
    "Discovery",
    "ExportResult",
    "IoError",
    "Metadata",
    "MetadataCache",
    "NameStore",
    "NotFound",
    "ParseError",
    "PruneReport",
    "PruneSelection",
    "Session",
    "SessionEngine",
    "SessionsError",
    "SortMode",
    "delete_paths",
    "delete_session",
    "delete_sessions",
    "discover",
    "export_session",
    "find_empty_sessions",
    "find_orphans",
    "find_related",
    "load_history",
    "parse_session_file",
    "prune_history",
    "remove_from_history",
    "render_transcript",
]
