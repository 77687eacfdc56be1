"""Command-line entry point.

With no subcommand the curses TUI starts; otherwise the matching
handler in claude_sessions.commands runs.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from claude_sessions import __version__
from claude_sessions.data import PruneSelection, SortMode

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _configure_logging(verbose: bool, log_file: Optional[Path], interactive: bool) -> None:
    """Log to stderr for commands; under curses only to --log-file, if given."""
    level = logging.DEBUG if verbose else logging.WARNING
    if log_file is not None:
        logging.basicConfig(filename=str(log_file), level=level, format=LOG_FORMAT)
    elif interactive:
        # Anything written to stderr would corrupt the curses screen
        logging.getLogger().addHandler(logging.NullHandler())
    else:
        logging.basicConfig(stream=sys.stderr, level=level, format="%(levelname)s: %(message)s")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="claude-sessions",
        description="Browse, export and clean up Claude Code sessions.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--data-dir", type=Path, default=None,
                        help="Claude data directory (default: $CLAUDE_DATA_DIR or ~/.claude)")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    parser.add_argument("--log-file", type=Path, default=None, help="write log messages to this file")

    sub = parser.add_subparsers(dest="command")

    ls = sub.add_parser("ls", help="list sessions")
    ls.add_argument("--sort", choices=[m.value for m in SortMode], default=None)
    ls.add_argument("--filter", dest="query", default=None, help="case-insensitive substring")
    ls.add_argument("--empty", action="store_true", help="only sessions without user messages")

    delete = sub.add_parser("delete", help="delete sessions and their related files")
    delete.add_argument("session_ids", nargs="+", metavar="ID")
    delete.add_argument("-y", "--yes", action="store_true", help="do not ask for confirmation")

    export = sub.add_parser("export", help="write plain-text transcripts")
    export.add_argument("session_ids", nargs="+", metavar="ID")
    export.add_argument("--dest", type=Path, default=None,
                        help="export directory (default: $CLAUDE_EXPORT_DIR or ~/claude-exports)")

    prune = sub.add_parser("prune", help="remove empty sessions, orphaned files and stale history")
    prune.add_argument("--orphans", action="store_true", help="orphaned debug/env/file-history/todo entries")
    prune.add_argument("--empty", action="store_true", help="sessions without user messages")
    prune.add_argument("--history", action="store_true", help="history.jsonl records without a session")
    prune.add_argument("-y", "--yes", action="store_true", help="do not ask for confirmation")
    prune.add_argument("--dry-run", action="store_true", help="only report what would be removed")

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    _configure_logging(args.verbose, args.log_file, interactive=args.command is None)

    if args.command is None:
        from claude_sessions.tui import app

        app.run(args.data_dir)
    elif args.command == "ls":
        from claude_sessions.commands import ls

        ls.run(args.data_dir, sort=args.sort, query=args.query, empty_only=args.empty)
    elif args.command == "delete":
        from claude_sessions.commands import delete

        delete.run(args.session_ids, args.data_dir, assume_yes=args.yes)
    elif args.command == "export":
        from claude_sessions.commands import export

        export.run(args.session_ids, args.data_dir, dest=args.dest)
    elif args.command == "prune":
        from claude_sessions.commands import prune

        # No kind given means all kinds
        if args.orphans or args.empty or args.history:
            selection = PruneSelection(orphans=args.orphans, empty=args.empty, history=args.history)
        else:
            selection = PruneSelection()
        prune.run(selection, args.data_dir, assume_yes=args.yes, dry_run=args.dry_run)


if __name__ == "__main__":
    main()
