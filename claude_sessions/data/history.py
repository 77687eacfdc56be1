"""Read and rewrite the global history.jsonl index."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Set

from claude_sessions.data.errors import IoError
from claude_sessions.utils.fileio import atomic_write_lines
from claude_sessions.utils.paths import StorePaths

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HistoryRecord:
    """One raw line of history.jsonl and the sessionId it names, if any."""

    line: str
    session_id: Optional[str] = None


def _parse_line(line: str) -> HistoryRecord:
    stripped = line.strip()
    if not stripped:
        return HistoryRecord(line)
    try:
        entry = json.loads(stripped)
    except json.JSONDecodeError:
        return HistoryRecord(line)
    session_id = entry.get("sessionId") if isinstance(entry, dict) else None
    return HistoryRecord(line, session_id if isinstance(session_id, str) else None)


def load_history(paths: StorePaths) -> List[HistoryRecord]:
    """Return every line of the index in file order. A missing index is empty.

    Raises:
        IoError: If the index exists but cannot be read.
    """
    try:
        file = open(paths.history, encoding="utf-8")
    except FileNotFoundError:
        return []
    except OSError as exc:
        raise IoError(f"Cannot read {paths.history}: {exc}") from exc

    with file:
        try:
            return [_parse_line(line) for line in file]
        except UnicodeDecodeError as exc:
            raise IoError(f"Cannot decode {paths.history}: {exc}") from exc


def history_session_ids(records: List[HistoryRecord]) -> Set[str]:
    return {r.session_id for r in records if r.session_id}


def filter_history(records: List[HistoryRecord], valid_ids: Set[str]) -> List[HistoryRecord]:
    """Keep records whose session id is valid, plus lines that carry no id, in order."""
    return [r for r in records if r.session_id is None or r.session_id in valid_ids]


def rewrite_history(
    paths: StorePaths, select: Callable[[List[HistoryRecord]], List[HistoryRecord]]
) -> int:
    """Replace the index with the records chosen by `select`.

    Uses an atomic temp-file-then-rename approach: writes the surviving
    lines to a temp file in the same directory, then renames it over the
    original. The file is left untouched when nothing is dropped.

    Returns:
        Number of records removed.

    Raises:
        IoError: If the index cannot be read or the write fails.
    """
    records = load_history(paths)
    kept = select(records)
    removed_count = len(records) - len(kept)
    if removed_count == 0:
        return 0

    lines = [r.line for r in kept]
    if lines and not lines[-1].endswith("\n"):
        lines[-1] += "\n"
    try:
        atomic_write_lines(paths.history, lines)
    except OSError as exc:
        raise IoError(f"Failed to write {paths.history}: {exc}") from exc

    logger.info("Removed %d record(s) from %s", removed_count, paths.history)
    return removed_count


def prune_history(paths: StorePaths, valid_ids: Set[str]) -> int:
    """Drop every index record whose session no longer exists."""
    return rewrite_history(paths, lambda records: filter_history(records, valid_ids))


def remove_from_history(paths: StorePaths, session_ids: Set[str]) -> int:
    """Drop every index record belonging to one of `session_ids`."""
    if not session_ids:
        return 0
    return rewrite_history(paths, lambda records: [r for r in records if r.session_id not in session_ids])
