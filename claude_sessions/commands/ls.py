"""Handler for the 'ls' subcommand.

Prints a tab-separated list of sessions to stdout, in the requested (or
saved) sort order, optionally filtered by --filter or limited to empty
sessions.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

from claude_sessions.commands._common import load_engine
from claude_sessions.data import SortMode
from claude_sessions.utils.formatting import format_datetime, truncate


def run(claude_dir: Optional[Path] = None, sort: Optional[str] = None,
        query: Optional[str] = None, empty_only: bool = False) -> None:
    """Print sessions as an aligned table to stdout."""
    engine = load_engine(claude_dir)
    if sort is not None:
        engine.sort(SortMode(sort))
    # Only --filter narrows the listing; the saved TUI filter does not apply.
    engine.filter(query or "")

    sessions = engine.list_sessions()
    if empty_only:
        empty_ids = {s.id for s in engine.detect_empty()}
        sessions = [s for s in sessions if s.id in empty_ids]

    if not sessions:
        print("No sessions found.", file=sys.stderr)
        return

    headers = ["Session ID", "Project", "Msgs", "Size", "Modified", "Name"]

    rows = []
    for session in sessions:
        rows.append([
            session.id[:8],
            session.project,
            str(session.message_count),
            session.size_str,
            format_datetime(session.modified_time),
            truncate(session.display_name.strip(), 50),
        ])

    # Compute column widths from headers and data
    col_widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            col_widths[i] = max(col_widths[i], len(cell))

    fmt = "\t".join(f"{{:<{w}}}" for w in col_widths)
    print(fmt.format(*headers))
    for row in rows:
        print(fmt.format(*row))
