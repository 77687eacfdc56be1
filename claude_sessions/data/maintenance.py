"""Read-only detection of stale data: empty sessions, orphaned artifacts, dead index records.

Nothing here deletes. Removal goes through claude_sessions.data.delete so
the caller can show what will go before confirming.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Set

from claude_sessions.data.history import HistoryRecord
from claude_sessions.data.models import OrphanMap, Session
from claude_sessions.utils.paths import AUX_DEBUG, AUX_FILE_HISTORY, AUX_ROOTS, AUX_SESSION_ENV, AUX_TODOS, StorePaths

logger = logging.getLogger(__name__)

# debug/latest points at the newest debug log and belongs to no session.
DEBUG_LATEST = "latest"


def find_empty_sessions(sessions: Iterable[Session]) -> List[Session]:
    """Sessions with no genuine user message."""
    return [s for s in sessions if s.is_empty]


def valid_session_ids(sessions: Iterable[Session]) -> Set[str]:
    return {s.id for s in sessions}


def _debug_is_orphan(name: str, valid: Set[str]) -> bool:
    stem = Path(name).stem
    return stem != DEBUG_LATEST and stem not in valid


def _dir_is_orphan(name: str, valid: Set[str]) -> bool:
    return name not in valid


def _todo_is_orphan(name: str, valid: Set[str]) -> bool:
    return not any(name.startswith(sid) for sid in valid)


_CLASSIFIERS: Dict[str, Callable[[str, Set[str]], bool]] = {
    AUX_DEBUG: _debug_is_orphan,
    AUX_SESSION_ENV: _dir_is_orphan,
    AUX_FILE_HISTORY: _dir_is_orphan,
    AUX_TODOS: _todo_is_orphan,
}


def find_orphans(paths: StorePaths, valid_ids: Set[str]) -> OrphanMap:
    """Map each auxiliary root name to its entries that belong to no valid session.

    Missing or unlistable roots yield an empty list.
    """
    orphans: OrphanMap = {}
    for root_name in AUX_ROOTS:
        root = paths.aux_root(root_name)
        is_orphan = _CLASSIFIERS[root_name]
        found: List[Path] = []
        try:
            entries = sorted(root.iterdir())
        except FileNotFoundError:
            entries = []
        except OSError as exc:
            logger.warning("Cannot list %s: %s", root, exc)
            entries = []
        for entry in entries:
            if is_orphan(entry.name, valid_ids):
                found.append(entry)
        orphans[root_name] = found
    return orphans


def orphan_count(orphans: OrphanMap) -> int:
    return sum(len(v) for v in orphans.values())


def stale_history_records(records: List[HistoryRecord], valid_ids: Set[str]) -> List[HistoryRecord]:
    """Index records whose session id has no log on disk."""
    return [r for r in records if r.session_id is not None and r.session_id not in valid_ids]
