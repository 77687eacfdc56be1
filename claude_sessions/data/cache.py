"""Timestamp-validated metadata cache.

Maps session id to the fields derived by parsing its log, together with
the log's mtime in whole seconds. An entry is served only while that
mtime still matches the file on disk. The file is unversioned: anything
that does not look exactly like the expected shape is discarded and the
cache starts empty.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Callable, Dict, Iterable, Optional

from claude_sessions.data.errors import CacheCorrupt
from claude_sessions.data.models import CacheEntry, Metadata
from claude_sessions.data.parser import parse_session_file
from claude_sessions.utils.fileio import atomic_write_json

logger = logging.getLogger(__name__)

Parser = Callable[[Path], Metadata]


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _optional_str(value) -> bool:
    return value is None or isinstance(value, str)


def _decode_entries(raw) -> Dict[str, CacheEntry]:
    """Validate the decoded cache document and build entries.

    Raises:
        CacheCorrupt: On any shape mismatch.
    """
    if not isinstance(raw, dict):
        raise CacheCorrupt("cache root is not an object")

    entries: Dict[str, CacheEntry] = {}
    for session_id, value in raw.items():
        if not isinstance(value, dict):
            raise CacheCorrupt(f"entry {session_id!r} is not an object")
        count = value.get("message_count")
        mtime = value.get("modified_ts")
        first = value.get("first_message")
        name = value.get("custom_name")
        if not _is_int(count) or count < 0 or not _is_int(mtime):
            raise CacheCorrupt(f"entry {session_id!r} has invalid counters")
        if not _optional_str(first) or not _optional_str(name):
            raise CacheCorrupt(f"entry {session_id!r} has invalid text fields")
        entries[session_id] = CacheEntry(
            message_count=count,
            modified_ts=mtime,
            first_message=first,
            custom_name=name,
        )
    return entries


class MetadataCache:
    """Persisted session-id -> CacheEntry map.

    Args:
        path: Location of the cache file.
        parser: Callable deriving Metadata from a log path.
    """

    def __init__(self, path: Path, parser: Parser = parse_session_file) -> None:
        self.path = path
        self._parser = parser
        self._entries: Dict[str, CacheEntry] = {}
        self._dirty = False

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, session_id: str) -> Optional[CacheEntry]:
        return self._entries.get(session_id)

    def load(self) -> "MetadataCache":
        """Replace in-memory entries with the file's. Never raises."""
        self._entries = {}
        self._dirty = False
        try:
            with open(self.path, encoding="utf-8") as file:
                raw = json.load(file)
            self._entries = _decode_entries(raw)
        except FileNotFoundError:
            pass
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable cache %s: %s", self.path, exc)
        except CacheCorrupt as exc:
            logger.warning("Discarding malformed cache %s: %s", self.path, exc)
        return self

    def persist(self) -> bool:
        """Write the cache atomically if it changed. Returns True when written.

        Raises:
            OSError: If the cache file cannot be written.
        """
        if not self._dirty:
            return False
        data = {sid: entry.to_json() for sid, entry in sorted(self._entries.items())}
        atomic_write_json(self.path, data)
        self._dirty = False
        return True

    def get_or_refresh(self, session_id: str, file_path: Path, file_mtime: int) -> Metadata:
        """Return cached metadata if `file_mtime` matches, otherwise re-parse and store.

        Raises:
            OSError: If the file needs parsing and cannot be read.
        """
        entry = self._entries.get(session_id)
        if entry is not None and entry.modified_ts == file_mtime:
            return entry.metadata

        logger.debug("Parsing %s", file_path)
        metadata = self._parser(file_path)
        self._entries[session_id] = CacheEntry(
            message_count=metadata.message_count,
            modified_ts=file_mtime,
            first_message=metadata.first_message,
            custom_name=metadata.custom_name,
        )
        self._dirty = True
        return metadata

    def invalidate(self, session_id: str) -> bool:
        """Drop one entry. Returns True if it existed."""
        if self._entries.pop(session_id, None) is None:
            return False
        self._dirty = True
        return True

    def retain(self, session_ids: Iterable[str]) -> int:
        """Drop entries for sessions not in `session_ids`. Returns the number dropped."""
        keep = set(session_ids)
        stale = [sid for sid in self._entries if sid not in keep]
        for sid in stale:
            del self._entries[sid]
        if stale:
            self._dirty = True
        return len(stale)
