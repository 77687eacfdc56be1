"""Data models for Claude Code sessions."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from claude_sessions.utils.formatting import format_age, format_size
from claude_sessions.utils.paths import AUX_TODOS

DISPLAY_NAME_MAX_LEN = 60
EMPTY_DISPLAY_NAME = "(empty)"


class SortMode(str, Enum):
    """Presentation order for the session list."""

    DATE = "date"
    SIZE = "size"
    MESSAGES = "messages"

    def next(self) -> "SortMode":
        modes = list(SortMode)
        return modes[(modes.index(self) + 1) % len(modes)]

    @property
    def label(self) -> str:
        return {"date": "Date", "size": "Size", "messages": "Msgs"}[self.value]


@dataclass(frozen=True)
class Metadata:
    """Fields derived by parsing a session log."""

    message_count: int
    first_message: Optional[str] = None
    custom_name: Optional[str] = None


@dataclass
class CacheEntry:
    """A cached Metadata plus the source file's mtime (integer seconds)."""

    message_count: int
    modified_ts: int
    first_message: Optional[str] = None
    custom_name: Optional[str] = None

    @property
    def metadata(self) -> Metadata:
        return Metadata(self.message_count, self.first_message, self.custom_name)

    def to_json(self) -> dict:
        return {
            "custom_name": self.custom_name,
            "message_count": self.message_count,
            "first_message": self.first_message,
            "modified_ts": self.modified_ts,
        }


@dataclass
class Session:
    """Represents a single Claude Code session discovered under projects/."""

    id: str
    path: Path
    project: str
    size_bytes: int
    message_count: int
    modified_time: datetime
    first_message: Optional[str] = None
    custom_name: Optional[str] = None
    related_files: List[Path] = field(default_factory=list)
    in_history: bool = False

    @property
    def display_name(self) -> str:
        if self.custom_name and self.custom_name.strip():
            return self.custom_name
        if not self.first_message:
            return EMPTY_DISPLAY_NAME
        clean = self.first_message.replace("\n", " ")
        if len(clean) > DISPLAY_NAME_MAX_LEN:
            return clean[:DISPLAY_NAME_MAX_LEN] + "..."
        return clean

    @property
    def size_str(self) -> str:
        return format_size(self.size_bytes)

    @property
    def formatted_age(self) -> str:
        return format_age(self.modified_time)

    @property
    def is_empty(self) -> bool:
        return self.message_count == 0

    def matches(self, query: str) -> bool:
        """Case-insensitive substring match on name, first message, id and project."""
        needle = query.lower()
        haystacks = (self.display_name, self.first_message or "", self.id, self.project)
        return any(needle in h.lower() for h in haystacks)

    def load_todos(self) -> List[str]:
        """Read titles from the session's todo files. Unreadable files are skipped."""
        todos: List[str] = []
        for path in self.related_files:
            if path.parent.name != AUX_TODOS or path.suffix != ".json":
                continue
            try:
                items = json.loads(path.read_text(encoding="utf-8"))
            except (OSError, ValueError):
                continue
            if not isinstance(items, list):
                continue
            for item in items:
                if not isinstance(item, dict):
                    continue
                text = item.get("title") or item.get("content")
                if isinstance(text, str):
                    todos.append(text)
        return todos


@dataclass
class Discovery:
    """Result of one discovery pass: sessions in stable order plus non-fatal warnings."""

    sessions: List[Session]
    warnings: List[str] = field(default_factory=list)


@dataclass
class DeleteResult:
    """Outcome of deleting one session: what went, and what could not be removed."""

    session_id: str
    deleted: List[Path] = field(default_factory=list)
    failed: List[Tuple[Path, str]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


@dataclass
class ExportResult:
    session_id: str
    path: Optional[Path] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class PruneSelection:
    """Which maintenance sweeps a prune run should apply."""

    orphans: bool = True
    empty: bool = True
    history: bool = True


@dataclass
class PruneReport:
    orphans_removed: List[Path] = field(default_factory=list)
    orphans_failed: List[Tuple[Path, str]] = field(default_factory=list)
    empty_deleted: List[DeleteResult] = field(default_factory=list)
    history_removed: int = 0

    @property
    def failures(self) -> int:
        return len(self.orphans_failed) + sum(1 for r in self.empty_deleted if not r.ok)


OrphanMap = Dict[str, List[Path]]
