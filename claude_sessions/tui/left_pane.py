"""Left pane renderer for the TUI.

Draws a flat, scrollable session list occupying the left ~60% of the
terminal. Each row shows a selection marker, message count, size, age,
project and display name. The highlighted row uses the mode accent color.
"""

from __future__ import annotations

import curses
from typing import List, Set

from claude_sessions.data.models import Session
from claude_sessions.utils.formatting import truncate


def draw(stdscr: curses.window, sessions: List[Session], cursor: int,
         scroll_offset: int, selected: Set[str], title: str,
         accent_pair: int, normal_pair: int, marker_pair: int,
         x: int, y: int, width: int, height: int) -> None:
    """Render the session list in the left pane area.

    Args:
        stdscr: The curses window to draw on.
        sessions: Sessions in display order.
        cursor: Index of the currently highlighted session.
        scroll_offset: First visible row index.
        selected: Set of selected session IDs.
        title: Text for the header row (count, sort mode, filter).
        accent_pair: Color pair for the header and the cursor row.
        normal_pair: Color pair for normal rows.
        marker_pair: Color pair for the [x] marker of selected rows.
        x: Starting column of the pane.
        y: Starting row of the pane.
        width: Width of the pane in columns.
        height: Height of the pane in rows.
    """
    marker_width = 4
    content_width = width - marker_width

    # Header takes 1 row; data rows fill the rest
    data_height = height - 1

    # Pre-compute column values for all visible rows
    visible: List[tuple] = []  # (session_idx, msgs, size, age, project, name)
    for row_idx in range(data_height):
        session_idx = scroll_offset + row_idx
        if session_idx >= len(sessions):
            break
        s = sessions[session_idx]
        visible.append((
            session_idx,
            str(s.message_count),
            s.size_str,
            s.formatted_age,
            s.project.rsplit("-", 1)[-1] or s.project,
            s.display_name,
        ))

    gap = 2  # spaces between columns
    col_widths = [4, 7, 9, 0]  # msgs, size, age, project
    for _, msgs, size, age, project, _ in visible:
        col_widths[0] = max(col_widths[0], len(msgs))
        col_widths[1] = max(col_widths[1], len(size))
        col_widths[2] = max(col_widths[2], len(age))
        col_widths[3] = max(col_widths[3], len(project))
    col_widths[3] = min(col_widths[3], 20)

    fixed_used = sum(col_widths) + gap * 4
    name_max = max(10, content_width - fixed_used)

    header_attr = curses.color_pair(accent_pair) | curses.A_BOLD
    try:
        stdscr.addstr(y, x, title[:width].ljust(width), header_attr)
    except curses.error:
        pass

    # Draw data rows
    for row_idx in range(data_height):
        screen_y = y + 1 + row_idx

        if row_idx >= len(visible):
            # Clear remaining rows
            try:
                stdscr.addstr(screen_y, x, " " * width, curses.color_pair(normal_pair))
            except curses.error:
                pass
            continue

        session_idx, msgs, size, age, project, name = visible[row_idx]
        is_cursor = session_idx == cursor
        attr = curses.color_pair(accent_pair) if is_cursor else curses.color_pair(normal_pair)

        line = (f"{msgs:>{col_widths[0]}}"
                f"  {size:>{col_widths[1]}}"
                f"  {age:>{col_widths[2]}}"
                f"  {truncate(project, col_widths[3]):<{col_widths[3]}}"
                f"  {truncate(name, name_max)}")

        # Pad or truncate to content_width
        line = line[:content_width].ljust(content_width)

        is_selected = sessions[session_idx].id in selected
        marker = "[x] " if is_selected else "[ ] "
        marker_attr = curses.color_pair(marker_pair) if is_selected and not is_cursor else attr
        try:
            stdscr.addstr(screen_y, x, marker, marker_attr)
            stdscr.addstr(screen_y, x + marker_width, line, attr)
        except curses.error:
            pass
