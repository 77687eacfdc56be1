"""Builders for a throwaway Claude data directory."""

from __future__ import annotations

import json
import os
import tempfile
import unittest
from pathlib import Path
from typing import Iterable, List, Optional

from claude_sessions.utils.paths import StorePaths

BASE_MTIME = 1_700_000_000


def user(text, **extra) -> dict:
    record = {"type": "user", "message": {"role": "user", "content": text}}
    record.update(extra)
    return record


def assistant(text: str) -> dict:
    return {"type": "assistant", "message": {"role": "assistant", "content": [{"type": "text", "text": text}]}}


def write_jsonl(path: Path, records: Iterable, mtime: Optional[int] = None) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    lines = [r if isinstance(r, str) else json.dumps(r) for r in records]
    path.write_text("".join(line + "\n" for line in lines), encoding="utf-8")
    if mtime is not None:
        os.utime(path, (mtime, mtime))
    return path


class StoreTestCase(unittest.TestCase):
    """TestCase with a fresh data directory at self.paths."""

    def setUp(self) -> None:
        tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(tmpdir.cleanup)
        self.tmp = Path(tmpdir.name)
        self.paths = StorePaths(self.tmp / "claude")
        self.paths.root.mkdir()
        self.config_dir = self.tmp / "config"

    def add_session(self, session_id: str, records: List, project: str = "-home-me-proj",
                    mtime: int = BASE_MTIME) -> Path:
        return write_jsonl(self.paths.session_log(project, session_id), records, mtime=mtime)

    def add_history(self, *session_ids: str) -> None:
        records = [{"display": f"prompt {i}", "timestamp": i, "project": "/home/me/proj", "sessionId": sid}
                   for i, sid in enumerate(session_ids)]
        write_jsonl(self.paths.history, records)

    def history_ids(self) -> List[str]:
        lines = self.paths.history.read_text(encoding="utf-8").splitlines()
        return [json.loads(line)["sessionId"] for line in lines if line.strip()]

    def touch(self, relative: str, directory: bool = False) -> Path:
        path = self.paths.root / relative
        if directory:
            path.mkdir(parents=True, exist_ok=True)
            (path / "snapshot").write_text("x", encoding="utf-8")
        else:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text("x", encoding="utf-8")
        return path
