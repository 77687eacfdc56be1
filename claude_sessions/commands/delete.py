"""Handler for the 'delete' subcommand.

Looks up sessions by ID, asks for confirmation, then removes their
logs, related artifacts and history.jsonl records.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import List, Optional

from claude_sessions.commands._common import confirm, load_engine, resolve_sessions
from claude_sessions.utils.formatting import format_datetime, truncate


def run(session_ids: List[str], claude_dir: Optional[Path] = None, assume_yes: bool = False) -> None:
    """Delete Claude Code sessions and all their data.

    Args:
        session_ids: Full or partial session UUIDs to look up.
        claude_dir: Optional override for the Claude data directory.
        assume_yes: Skip the confirmation prompt.
    """
    engine = load_engine(claude_dir)
    matches = resolve_sessions(engine, session_ids)

    for match in matches:
        print(f"  Session ID:  {match.id}")
        print(f"  Project:     {match.project}")
        print(f"  Modified:    {format_datetime(match.modified_time)}")
        print(f"  Messages:    {match.message_count} ({match.size_str})")
        print(f"  Name:        {truncate(match.display_name, 60)}")
        print(f"  Related:     {len(match.related_files)} file(s)")
        print()

    if not assume_yes and not confirm(f"Delete {len(matches)} session(s)?"):
        print("Aborted.")
        sys.exit(0)

    results = engine.delete(matches)

    failures = 0
    for result in results:
        for path, reason in result.failed:
            print(f"Warning: Could not delete {path}: {reason}", file=sys.stderr)
        if result.ok:
            print(f"Session '{result.session_id}' deleted.")
        else:
            failures += 1
            print(f"Session '{result.session_id}' partially deleted.")
    for warning in engine.warnings:
        print(f"Warning: {warning}", file=sys.stderr)

    if failures:
        sys.exit(1)
