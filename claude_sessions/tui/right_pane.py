"""Right pane renderer for the TUI.

Draws session details: id, project, size, message count, age, the
first prompt, related files and todos. Updates reactively when the
cursor moves.
"""

from __future__ import annotations

import curses
import textwrap
from typing import List, Optional

from claude_sessions.data.models import Session
from claude_sessions.utils.formatting import format_datetime


def _draw_line(stdscr: curses.window, row: int, col: int, text: str,
               width: int, attr: int) -> int:
    """Draw a single line, truncating to fit. Returns next row."""
    text = text[:width]
    try:
        stdscr.addstr(row, col, text.ljust(width), attr)
    except curses.error:
        pass
    return row + 1


def draw(stdscr: curses.window, session: Optional[Session], todos: List[str], pair: int,
         x: int, y: int, width: int, height: int) -> None:
    """Render the detail view for the highlighted session.

    Args:
        stdscr: The curses window to draw on.
        session: The session to display details for, if any.
        todos: Todo titles already read for this session.
        pair: Color pair for normal text.
        x: Starting column of the pane.
        y: Starting row of the pane.
        width: Width of the pane in columns.
        height: Height of the pane in rows.
    """
    attr = curses.color_pair(pair)
    content_width = max(1, width - 2)  # 1-char padding on each side
    col = x + 1
    row = y
    max_row = y + height

    def _line(text: str = "") -> None:
        """Draw one line and advance the row counter."""
        nonlocal row
        if row >= max_row:
            return
        row = _draw_line(stdscr, row, col, text, content_width, attr)

    if session is None:
        _line("No session selected")
        while row < max_row:
            _line()
        return

    _line("Session ID:")
    _line(f"  {session.id}")
    _line()
    _line(f"Project:  {session.project}")
    _line(f"Size:     {session.size_str}")
    _line(f"Messages: {session.message_count}")
    _line(f"Modified: {format_datetime(session.modified_time)} ({session.formatted_age})")
    if not session.in_history:
        _line("          (not in history.jsonl)")
    _line()

    if session.custom_name:
        _line("Name:")
        _line(f"  {session.custom_name}")
        _line()

    _line("Prompt:")
    for wrapped in textwrap.wrap(session.first_message or "(empty)", max(1, content_width - 2))[:6]:
        _line(f"  {wrapped}")
    _line()

    _line(f"Related files: {len(session.related_files)}")
    for path in session.related_files:
        _line(f"  {path.parent.name}/{path.name}")
    _line()

    _line("Todos:")
    if todos:
        for todo in todos:
            max_todo = content_width - 4
            if len(todo) > max_todo > 0:
                todo = todo[:max_todo - 1] + "…"
            _line(f"  - {todo}")
    else:
        _line("  (none)")

    # Clear any unused rows in the pane
    while row < max_row:
        _line()
