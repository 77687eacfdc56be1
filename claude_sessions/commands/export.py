"""Handler for the 'export' subcommand.

Writes a plain-text transcript of each requested session to the
export directory.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import List, Optional

from claude_sessions.commands._common import load_engine, resolve_sessions
from claude_sessions.utils.paths import get_export_dir


def run(session_ids: List[str], claude_dir: Optional[Path] = None, dest: Optional[Path] = None) -> None:
    """Export sessions as transcripts.

    Args:
        session_ids: Full or partial session UUIDs to look up.
        claude_dir: Optional override for the Claude data directory.
        dest: Destination directory; defaults to CLAUDE_EXPORT_DIR or ~/claude-exports.
    """
    engine = load_engine(claude_dir)
    matches = resolve_sessions(engine, session_ids)
    destination = dest if dest is not None else get_export_dir()

    failures = 0
    for result in engine.export(matches, destination):
        if result.ok:
            print(f"Exported '{result.session_id}' to {result.path}")
        else:
            failures += 1
            print(f"Error: {result.error}", file=sys.stderr)

    if failures:
        sys.exit(1)
