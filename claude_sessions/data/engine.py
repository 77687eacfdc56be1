"""Query and command API over the session store.

SessionEngine owns the canonical session list from the last discovery
pass. Sorting and filtering never copy or reorder that list: the visible
view is a list of positions into it, rebuilt after every refresh.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Set

from claude_sessions.data.cache import MetadataCache
from claude_sessions.data.config import Config, NameStore
from claude_sessions.data.delete import delete_paths, delete_sessions
from claude_sessions.data.discovery import discover, session_ids_on_disk
from claude_sessions.data.errors import IoError
from claude_sessions.data.export import export_session, render_transcript
from claude_sessions.data.history import HistoryRecord, load_history, prune_history, remove_from_history
from claude_sessions.data.maintenance import find_empty_sessions, find_orphans, stale_history_records, valid_session_ids
from claude_sessions.data.models import (
    DeleteResult,
    ExportResult,
    OrphanMap,
    PruneReport,
    PruneSelection,
    Session,
    SortMode,
)
from claude_sessions.utils.paths import StorePaths

logger = logging.getLogger(__name__)


def _sort_key(mode: SortMode):
    if mode is SortMode.SIZE:
        return lambda s: s.size_bytes
    if mode is SortMode.MESSAGES:
        return lambda s: s.message_count
    return lambda s: s.modified_time


class SessionEngine:
    """Session list plus the operations the UI and commands run against it.

    Args:
        paths: Layout of the Claude data directory.
        cache: Metadata cache, already loaded.
        config: Persisted sort mode and filter query.
        names: User-assigned display names.
    """

    def __init__(self, paths: StorePaths, cache: MetadataCache, config: Config, names: NameStore) -> None:
        self.paths = paths
        self.cache = cache
        self.config = config
        self.names = names
        self.sessions: List[Session] = []
        self.warnings: List[str] = []
        self._view: List[int] = []

    @classmethod
    def open(cls, claude_dir: Optional[Path] = None, config_dir: Optional[Path] = None) -> "SessionEngine":
        """Build an engine from on-disk state. Call refresh() to discover sessions."""
        paths = StorePaths.resolve(claude_dir)
        return cls(
            paths,
            MetadataCache(paths.cache).load(),
            Config.load(config_dir),
            NameStore.load(config_dir),
        )

    # ---- queries -------------------------------------------------------

    def refresh(self) -> List[Session]:
        """Re-run discovery and rebuild the view.

        Raises:
            NotFound: If the data directory is missing.
        """
        result = discover(self.paths, self.cache, self.names)
        self.sessions = result.sessions
        self.warnings = result.warnings
        self._rebuild_view()
        return self.list_sessions()

    def list_sessions(self) -> List[Session]:
        """Sessions in the current sort order, restricted by the current filter."""
        return [self.sessions[i] for i in self._view]

    @property
    def sort_mode(self) -> SortMode:
        return self.config.sort_mode

    @property
    def filter_query(self) -> str:
        return self.config.filter_query

    def sort(self, mode: SortMode) -> List[Session]:
        self.config.sort_mode = mode
        self._rebuild_view()
        return self.list_sessions()

    def filter(self, query: str) -> List[Session]:
        """Restrict the view to sessions matching `query` (case-insensitive substring)."""
        self.config.filter_query = query.strip()
        self._rebuild_view()
        return self.list_sessions()

    def save_config(self) -> None:
        """Persist sort mode and filter. Failures are logged, not raised."""
        try:
            self.config.save()
        except OSError as exc:
            logger.warning("Could not save config: %s", exc)

    def _rebuild_view(self) -> None:
        order = sorted(
            range(len(self.sessions)),
            key=lambda i: _sort_key(self.config.sort_mode)(self.sessions[i]),
            reverse=True,
        )
        query = self.config.filter_query
        if query:
            order = [i for i in order if self.sessions[i].matches(query)]
        self._view = order

    def find(self, session_id: str) -> Optional[Session]:
        """Exact id match first, then the first id starting with `session_id`."""
        for session in self.sessions:
            if session.id == session_id:
                return session
        for session in self.sessions:
            if session.id.startswith(session_id):
                return session
        return None

    def by_ids(self, session_ids: Iterable[str]) -> List[Session]:
        """Sessions with the given ids, in canonical order. Unknown ids are ignored."""
        wanted = set(session_ids)
        return [s for s in self.sessions if s.id in wanted]

    def transcript(self, session: Session) -> str:
        """Full user/assistant transcript as shown in the expanded view.

        Raises:
            IoError: If the log cannot be read.
        """
        try:
            return render_transcript(session.path)
        except OSError as exc:
            raise IoError(f"Cannot read {session.path}: {exc}") from exc

    # ---- maintenance detection ----------------------------------------

    def _valid_ids(self) -> Set[str]:
        # Logs that failed to parse still own their artifacts.
        return valid_session_ids(self.sessions) | session_ids_on_disk(self.paths)

    def detect_empty(self) -> List[Session]:
        return find_empty_sessions(self.sessions)

    def detect_orphans(self) -> OrphanMap:
        return find_orphans(self.paths, self._valid_ids())

    def detect_stale_history(self) -> List[HistoryRecord]:
        try:
            records = load_history(self.paths)
        except IoError as exc:
            logger.warning("%s", exc)
            return []
        return stale_history_records(records, self._valid_ids())

    # ---- commands ------------------------------------------------------

    def delete(self, sessions: Iterable[Session]) -> List[DeleteResult]:
        """Delete sessions best-effort, drop their index records and names, then refresh."""
        targets = list(sessions)
        results = delete_sessions(self.paths, targets, self.cache)
        gone = {s.id for s in targets if not s.path.exists()}
        problems: List[str] = []

        if gone:
            try:
                remove_from_history(self.paths, gone)
            except IoError as exc:
                logger.warning("%s", exc)
                problems.append(str(exc))
            try:
                self.names.forget(gone)
            except OSError as exc:
                logger.warning("Could not update names: %s", exc)
        try:
            self.cache.persist()
        except OSError as exc:
            logger.warning("Could not write cache %s: %s", self.cache.path, exc)

        self.refresh()
        self.warnings.extend(problems)
        return results

    def export(self, sessions: Iterable[Session], destination_dir: Path) -> List[ExportResult]:
        """Export each session, collecting per-session success or failure."""
        results: List[ExportResult] = []
        for session in sessions:
            try:
                results.append(ExportResult(session.id, path=export_session(session, destination_dir)))
            except IoError as exc:
                logger.warning("%s", exc)
                results.append(ExportResult(session.id, error=str(exc)))
        return results

    def rename(self, session: Session, name: str) -> None:
        """Set or clear (blank name) a session's display name.

        Raises:
            OSError: If the name store cannot be written.
        """
        self.names.set(session.id, name)
        entry = self.cache.get(session.id)
        session.custom_name = self.names.get(session.id) or (entry.custom_name if entry else None)
        self._rebuild_view()

    def prune(self, selection: PruneSelection) -> PruneReport:
        """Apply the selected maintenance sweeps and refresh.

        Empty sessions go first so their artifacts are removed with them;
        orphans and index records are then judged against what remains.
        """
        report = PruneReport()
        problems: List[str] = []

        if selection.empty:
            empty = self.detect_empty()
            if empty:
                report.empty_deleted = self.delete(empty)

        if selection.orphans:
            targets = [p for found in self.detect_orphans().values() for p in found]
            report.orphans_removed, report.orphans_failed = delete_paths(self.paths, targets)

        if selection.history:
            try:
                report.history_removed = prune_history(self.paths, self._valid_ids())
            except IoError as exc:
                logger.warning("%s", exc)
                problems.append(str(exc))

        self.refresh()
        self.warnings.extend(problems)
        return report
