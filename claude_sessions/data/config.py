"""User preferences and custom session names, stored outside the Claude data dir."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

from claude_sessions.data.models import SortMode
from claude_sessions.utils.fileio import atomic_write_json
from claude_sessions.utils.paths import get_config_dir

logger = logging.getLogger(__name__)

CONFIG_FILE = "config.json"
NAMES_FILE = "names.json"


def _read_json_object(path: Path) -> dict:
    """Return the JSON object stored at `path`, or {} if missing or malformed."""
    try:
        with open(path, encoding="utf-8") as file:
            data = json.load(file)
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring unreadable %s: %s", path, exc)
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring %s: expected a JSON object", path)
        return {}
    return data


@dataclass
class Config:
    """Persisted sort mode and filter query."""

    sort_mode: SortMode = SortMode.DATE
    filter_query: str = ""
    path: Optional[Path] = None

    @classmethod
    def load(cls, config_dir: Optional[Path] = None) -> "Config":
        path = (config_dir or get_config_dir()) / CONFIG_FILE
        data = _read_json_object(path)

        try:
            sort_mode = SortMode(data.get("sort_mode", SortMode.DATE.value))
        except ValueError:
            sort_mode = SortMode.DATE
        query = data.get("filter_query")
        return cls(sort_mode=sort_mode, filter_query=query if isinstance(query, str) else "", path=path)

    def save(self) -> None:
        """Raises OSError if the config file cannot be written."""
        path = self.path or get_config_dir() / CONFIG_FILE
        atomic_write_json(path, {"sort_mode": self.sort_mode.value, "filter_query": self.filter_query}, indent=2)


class NameStore:
    """User-assigned display names keyed by session id."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self._names: Dict[str, str] = {}

    @classmethod
    def load(cls, config_dir: Optional[Path] = None) -> "NameStore":
        store = cls((config_dir or get_config_dir()) / NAMES_FILE)
        data = _read_json_object(store.path)
        store._names = {k: v for k, v in data.items() if isinstance(v, str) and v.strip()}
        return store

    def get(self, session_id: str) -> Optional[str]:
        return self._names.get(session_id)

    def set(self, session_id: str, name: str) -> None:
        """Assign a name; a blank name clears it. Raises OSError on write failure."""
        if name.strip():
            self._names[session_id] = name.strip()
        elif self._names.pop(session_id, None) is None:
            return
        self._save()

    def forget(self, session_ids) -> None:
        removed = [sid for sid in session_ids if self._names.pop(sid, None) is not None]
        if removed:
            self._save()

    def _save(self) -> None:
        atomic_write_json(self.path, dict(sorted(self._names.items())), indent=2)
