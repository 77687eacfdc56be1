"""File operations for deleting Claude Code sessions and orphaned artifacts.

Deletion is best-effort per artifact: a path that cannot be removed is
reported and the rest are still attempted. Paths that are already gone
count as removed, so repeating a delete is harmless.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from claude_sessions.data.cache import MetadataCache
from claude_sessions.data.models import DeleteResult, Session
from claude_sessions.utils.paths import StorePaths

logger = logging.getLogger(__name__)


def remove_path(path: Path) -> bool:
    """Remove a file, symlink or directory tree. Returns False if it was already gone.

    Raises:
        OSError: If the path exists and cannot be removed.
    """
    try:
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        else:
            path.unlink()
    except FileNotFoundError:
        return False
    return True


def delete_paths(paths: StorePaths, targets: Iterable[Path]) -> Tuple[List[Path], List[Tuple[Path, str]]]:
    """Remove each target under the data directory. Already-missing targets are skipped.

    Only deletes under the Claude data directory; anything else is
    reported as failed without being touched.

    Returns:
        (removed, failed): paths actually removed, and failed pairs each path with the reason.
    """
    removed: List[Path] = []
    failed: List[Tuple[Path, str]] = []

    for target in targets:
        # Safety: only delete under the Claude data directory
        if not paths.contains(target):
            failed.append((target, "outside the Claude data directory"))
            continue
        try:
            if remove_path(target):
                removed.append(target)
        except OSError as exc:
            logger.warning("Could not delete %s: %s", target, exc)
            failed.append((target, exc.strerror or str(exc)))

    return removed, failed


def _remove_empty_project_dir(project_dir: Path) -> Optional[Path]:
    """Remove the project directory if it has no remaining .jsonl files."""
    if not project_dir.is_dir() or any(project_dir.glob("*.jsonl")):
        return None
    try:
        shutil.rmtree(project_dir)
    except OSError as exc:
        logger.warning("Could not delete %s: %s", project_dir, exc)
        return None
    return project_dir


def delete_session(paths: StorePaths, session: Session, cache: Optional[MetadataCache] = None) -> DeleteResult:
    """Delete all files and directories associated with a session.

    Removes:
    1. Every related artifact (debug log, session-env, file-history, todos, agent logs)
    2. The per-session directory beside the log, if any
    3. The per-session .jsonl file
    4. The project directory itself if no .jsonl files remain

    The cache entry is invalidated (not persisted) once the log is gone.
    """
    result = DeleteResult(session_id=session.id)
    targets = list(session.related_files)
    session_dir = session.path.with_suffix("")
    if session_dir.is_dir() and session_dir not in targets:
        targets.append(session_dir)
    targets.append(session.path)

    result.deleted, result.failed = delete_paths(paths, targets)

    if not session.path.exists():
        if cache is not None:
            cache.invalidate(session.id)
        project_dir = _remove_empty_project_dir(session.path.parent)
        if project_dir is not None:
            result.deleted.append(project_dir)

    return result


def delete_sessions(
    paths: StorePaths, sessions: Iterable[Session], cache: Optional[MetadataCache] = None
) -> List[DeleteResult]:
    """Delete each session in turn, collecting every outcome."""
    return [delete_session(paths, session, cache) for session in sessions]
