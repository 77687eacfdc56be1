"""Handler for the 'prune' subcommand.

Reports empty sessions, orphaned artifacts and stale history.jsonl
records, then removes the selected kinds after confirmation.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

from claude_sessions.commands._common import confirm, load_engine
from claude_sessions.data import PruneSelection
from claude_sessions.data.maintenance import orphan_count


def run(selection: PruneSelection, claude_dir: Optional[Path] = None,
        assume_yes: bool = False, dry_run: bool = False) -> None:
    """Remove stale data selected by `selection`."""
    engine = load_engine(claude_dir)

    pending = 0
    if selection.empty:
        empty = engine.detect_empty()
        pending += len(empty)
        print(f"Empty sessions: {len(empty)}")
        for session in empty:
            print(f"  {session.id}  ({session.project})")

    if selection.orphans:
        orphans = engine.detect_orphans()
        pending += orphan_count(orphans)
        for root_name, found in orphans.items():
            print(f"Orphans in {root_name}/: {len(found)}")
            for path in found:
                print(f"  {path.name}")

    if selection.history:
        stale = engine.detect_stale_history()
        pending += len(stale)
        print(f"Stale history records: {len(stale)}")

    if not pending:
        print("Nothing to prune.")
        return
    if dry_run:
        return
    if not assume_yes and not confirm("Remove all of the above?"):
        print("Aborted.")
        sys.exit(0)

    report = engine.prune(selection)

    for path, reason in report.orphans_failed:
        print(f"Warning: Could not delete {path}: {reason}", file=sys.stderr)
    for result in report.empty_deleted:
        for path, reason in result.failed:
            print(f"Warning: Could not delete {path}: {reason}", file=sys.stderr)
    for warning in engine.warnings:
        print(f"Warning: {warning}", file=sys.stderr)

    print(f"Deleted {sum(1 for r in report.empty_deleted if r.ok)} empty session(s), "
          f"{len(report.orphans_removed)} orphan(s), "
          f"{report.history_removed} history record(s).")

    if report.failures:
        sys.exit(1)
