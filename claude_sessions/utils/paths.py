"""Path utilities for locating Claude Code data files."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

DEFAULT_CLAUDE_DIR = Path.home() / ".claude"
HISTORY_FILE = "history.jsonl"
CACHE_FILE = "sessions_cache.json"
CONFIG_DIR_NAME = "claude-sessions-tui"
DEFAULT_EXPORT_DIR = Path.home() / "claude-exports"

# Auxiliary roots holding per-session artifacts, in probe order.
AUX_DEBUG = "debug"
AUX_SESSION_ENV = "session-env"
AUX_FILE_HISTORY = "file-history"
AUX_TODOS = "todos"
AUX_ROOTS: Tuple[str, ...] = (AUX_DEBUG, AUX_SESSION_ENV, AUX_FILE_HISTORY, AUX_TODOS)


def get_claude_dir() -> Path:
    """Return Claude data dir. Honors CLAUDE_DATA_DIR env var, defaults to ~/.claude/."""
    env = os.environ.get("CLAUDE_DATA_DIR")
    if env:
        return Path(env)
    return DEFAULT_CLAUDE_DIR


def get_config_dir() -> Path:
    """Return the directory holding config.json and names.json.

    Honors CLAUDE_SESSIONS_CONFIG_DIR, then XDG_CONFIG_HOME, then ~/.config.
    """
    env = os.environ.get("CLAUDE_SESSIONS_CONFIG_DIR")
    if env:
        return Path(env)
    xdg = os.environ.get("XDG_CONFIG_HOME")
    base = Path(xdg) if xdg else Path.home() / ".config"
    return base / CONFIG_DIR_NAME


def get_export_dir() -> Path:
    """Return default export destination. Honors CLAUDE_EXPORT_DIR."""
    env = os.environ.get("CLAUDE_EXPORT_DIR")
    if env:
        return Path(env)
    return DEFAULT_EXPORT_DIR


@dataclass(frozen=True)
class StorePaths:
    """Fixed layout of the Claude data directory."""

    root: Path

    @classmethod
    def resolve(cls, claude_dir: Optional[Path] = None) -> "StorePaths":
        return cls(Path(claude_dir) if claude_dir is not None else get_claude_dir())

    @property
    def history(self) -> Path:
        return self.root / HISTORY_FILE

    @property
    def cache(self) -> Path:
        return self.root / CACHE_FILE

    @property
    def projects(self) -> Path:
        return self.root / "projects"

    @property
    def debug(self) -> Path:
        return self.root / AUX_DEBUG

    @property
    def session_env(self) -> Path:
        return self.root / AUX_SESSION_ENV

    @property
    def file_history(self) -> Path:
        return self.root / AUX_FILE_HISTORY

    @property
    def todos(self) -> Path:
        return self.root / AUX_TODOS

    def aux_root(self, name: str) -> Path:
        """Return the auxiliary root directory called `name`."""
        if name not in AUX_ROOTS:
            raise ValueError(f"Unknown auxiliary root: {name}")
        return self.root / name

    def session_log(self, project: str, session_id: str) -> Path:
        """Return path: <root>/projects/<project>/<session_id>.jsonl"""
        return self.projects / project / f"{session_id}.jsonl"

    def contains(self, path: Path) -> bool:
        """True when `path` lives under the data directory. A symlink's target is not followed."""
        try:
            (path.parent.resolve() / path.name).relative_to(self.root.resolve())
        except ValueError:
            return False
        return True
