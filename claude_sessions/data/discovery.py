"""Build the session list from projects/ and the auxiliary directories.

Every ``projects/<project>/<id>.jsonl`` file (other than ``agent-*`` logs)
is one session. Message-derived fields come from the metadata cache so
unchanged logs are never re-read.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterator, List, Optional, Set, Tuple

from claude_sessions.data.cache import MetadataCache
from claude_sessions.data.config import NameStore
from claude_sessions.data.errors import IoError, NotFound
from claude_sessions.data.history import history_session_ids, load_history
from claude_sessions.data.models import Discovery, Session
from claude_sessions.utils.formatting import ts_to_datetime
from claude_sessions.utils.paths import StorePaths

logger = logging.getLogger(__name__)

SESSION_SUFFIX = ".jsonl"
AGENT_PREFIX = "agent-"


def _sorted_entries(directory: Path) -> List[os.DirEntry]:
    with os.scandir(directory) as it:
        return sorted(it, key=lambda e: e.name)


def iter_session_files(paths: StorePaths) -> Iterator[Tuple[str, str, Path]]:
    """Yield (project, session_id, path) for every session log, in name order.

    Raises:
        OSError: If projects/ exists but cannot be listed.
    """
    if not paths.projects.is_dir():
        return
    for project in _sorted_entries(paths.projects):
        if not project.is_dir():
            continue
        try:
            files = _sorted_entries(Path(project.path))
        except OSError as exc:
            logger.warning("Cannot list %s: %s", project.path, exc)
            continue
        for entry in files:
            name = entry.name
            if not name.endswith(SESSION_SUFFIX) or name.startswith(AGENT_PREFIX):
                continue
            if not entry.is_file():
                continue
            yield project.name, name[: -len(SESSION_SUFFIX)], Path(entry.path)


def session_ids_on_disk(paths: StorePaths) -> Set[str]:
    """Ids of all session logs, without touching the cache."""
    return {sid for _, sid, _ in iter_session_files(paths)}


def find_related(paths: StorePaths, session_id: str, project_dir: Path) -> List[Path]:
    """Return existing auxiliary artifacts that belong to `session_id`.

    Covers debug/<id>.txt, session-env/<id>/, file-history/<id>/, every
    todos/<id>* file and, for todos/<id>-agent-<aid>.json, the matching
    agent-<aid>.jsonl log beside the session.
    """
    candidates = [
        paths.debug / f"{session_id}.txt",
        paths.session_env / session_id,
        paths.file_history / session_id,
    ]

    agent_prefix = f"{session_id}-agent-"
    if paths.todos.is_dir():
        try:
            todo_entries = _sorted_entries(paths.todos)
        except OSError as exc:
            logger.warning("Cannot list %s: %s", paths.todos, exc)
            todo_entries = []
        for entry in todo_entries:
            name = entry.name
            if not name.startswith(session_id):
                continue
            candidates.append(Path(entry.path))
            if name.startswith(agent_prefix) and name.endswith(".json"):
                agent_id = name[len(agent_prefix):-len(".json")]
                if agent_id:
                    candidates.append(project_dir / f"{AGENT_PREFIX}{agent_id}{SESSION_SUFFIX}")

    related: List[Path] = []
    for path in candidates:
        if (path.exists() or path.is_symlink()) and path not in related:
            related.append(path)
    return related


def _load_session(
    paths: StorePaths,
    cache: MetadataCache,
    names: Optional[NameStore],
    project: str,
    session_id: str,
    path: Path,
) -> Session:
    stat = path.stat()
    mtime = int(stat.st_mtime)
    metadata = cache.get_or_refresh(session_id, path, mtime)

    custom_name = names.get(session_id) if names is not None else None
    return Session(
        id=session_id,
        path=path,
        project=project,
        size_bytes=stat.st_size,
        message_count=metadata.message_count,
        first_message=metadata.first_message,
        modified_time=ts_to_datetime(stat.st_mtime),
        custom_name=custom_name or metadata.custom_name,
        related_files=find_related(paths, session_id, path.parent),
    )


def discover(
    paths: StorePaths,
    cache: MetadataCache,
    names: Optional[NameStore] = None,
    persist_cache: bool = True,
) -> Discovery:
    """Scan the data directory and return every readable session.

    Sessions come back ordered by (id, project), one per id: when several
    projects hold the same log name the first project wins. Duplicates and
    unreadable logs are left out and described in ``Discovery.warnings``. Cache entries for logs
    that no longer exist are dropped and the cache is persisted.

    Raises:
        NotFound: If the data directory itself does not exist.
    """
    if not paths.root.is_dir():
        raise NotFound(f"{paths.root} not found. Is Claude Code installed?")

    sessions: List[Session] = []
    warnings: List[str] = []

    try:
        files = list(iter_session_files(paths))
    except OSError as exc:
        raise NotFound(f"Cannot list {paths.projects}: {exc}") from exc

    seen: Set[str] = set()
    for project, session_id, path in files:
        if session_id in seen:
            message = f"Skipping duplicate session {session_id} in {path.parent}"
            logger.warning(message)
            warnings.append(message)
            continue
        seen.add(session_id)
        try:
            sessions.append(_load_session(paths, cache, names, project, session_id, path))
        except OSError as exc:
            message = f"Skipping unreadable session {path}: {exc}"
            logger.warning(message)
            warnings.append(message)

    try:
        indexed = history_session_ids(load_history(paths))
    except IoError as exc:
        warnings.append(str(exc))
        indexed = set()
    for session in sessions:
        session.in_history = session.id in indexed

    sessions.sort(key=lambda s: (s.id, s.project))

    cache.retain(s.id for s in sessions)
    if persist_cache:
        try:
            cache.persist()
        except OSError as exc:
            message = f"Could not write cache {cache.path}: {exc}"
            logger.warning(message)
            warnings.append(message)

    return Discovery(sessions=sessions, warnings=warnings)
