"""Plain-text transcript export."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List

from claude_sessions.data.errors import IoError
from claude_sessions.data.models import Session
from claude_sessions.data.parser import iter_turns
from claude_sessions.utils.fileio import atomic_write_text

logger = logging.getLogger(__name__)

EXPORT_SUFFIX = ".txt"


def render_transcript(session_path: Path) -> str:
    """Render every user/assistant turn as '[ROLE]' followed by its text.

    Turns are separated by a blank line.

    Raises:
        OSError: If the log cannot be read.
    """
    blocks: List[str] = [f"[{role.upper()}]\n{text}" for role, text in iter_turns(session_path)]
    if not blocks:
        return ""
    return "\n\n".join(blocks) + "\n"


def export_session(session: Session, destination_dir: Path) -> Path:
    """Write the session transcript to <destination_dir>/<id>.txt.

    The file is written to a temp file and renamed, so an earlier export
    is either fully replaced or left as it was.

    Raises:
        IoError: If the log cannot be read, or the directory or file cannot be written.
    """
    try:
        destination_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise IoError(f"Cannot create {destination_dir}: {exc}") from exc

    try:
        transcript = render_transcript(session.path)
    except OSError as exc:
        raise IoError(f"Cannot read {session.path}: {exc}") from exc

    target = destination_dir / f"{session.id}{EXPORT_SUFFIX}"
    try:
        atomic_write_text(target, transcript)
    except OSError as exc:
        raise IoError(f"Cannot write {target}: {exc}") from exc

    logger.info("Exported %s to %s", session.id, target)
    return target
