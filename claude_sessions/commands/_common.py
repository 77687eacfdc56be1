"""Helpers shared by the command handlers."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import List, Optional

from claude_sessions.data import NotFound, Session, SessionEngine


def load_engine(claude_dir: Optional[Path] = None) -> SessionEngine:
    """Open the store and run discovery, exiting with a message if the data dir is missing."""
    engine = SessionEngine.open(claude_dir)
    try:
        engine.refresh()
    except NotFound as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)
    for warning in engine.warnings:
        print(f"Warning: {warning}", file=sys.stderr)
    return engine


def resolve_sessions(engine: SessionEngine, session_ids: List[str]) -> List[Session]:
    """Look up each full or partial id (exact or prefix match). Exits if any is unknown."""
    matches: List[Session] = []
    for session_id in session_ids:
        match = engine.find(session_id)
        if match is None:
            print(f"Error: Session '{session_id}' not found.", file=sys.stderr)
            sys.exit(1)
        if match not in matches:
            matches.append(match)
    return matches


def confirm(prompt: str) -> bool:
    """Ask a y/N question on stdin. EOF or Ctrl-C counts as no."""
    try:
        answer = input(f"{prompt} [y/N] ").strip().lower()
    except (EOFError, KeyboardInterrupt):
        print()
        return False
    return answer == "y"
