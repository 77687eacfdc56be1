"""Atomic file writes shared by the cache, config and history rewrites."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Iterable, Optional


def atomic_write_text(path: Path, text: str) -> None:
    """Write `text` to `path` via a temp file in the same directory, then rename.

    The original file is untouched if anything fails before the rename.

    Raises:
        OSError: If the temp file cannot be written or renamed.
    """
    tmp_path = path.with_name(f".{path.name}.tmp")
    try:
        with open(tmp_path, "w", encoding="utf-8") as tmp_file:
            tmp_file.write(text)
            tmp_file.flush()
            os.fsync(tmp_file.fileno())
        os.replace(tmp_path, path)
    except OSError:
        # Clean up temp file on failure; original remains untouched
        try:
            tmp_path.unlink(missing_ok=True)
        except OSError:
            pass
        raise


def atomic_write_lines(path: Path, lines: Iterable[str]) -> None:
    """Atomically write pre-terminated lines."""
    atomic_write_text(path, "".join(lines))


def atomic_write_json(path: Path, data: Any, indent: Optional[int] = None) -> None:
    """Atomically dump `data` as JSON, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    atomic_write_text(path, json.dumps(data, indent=indent, ensure_ascii=False))
