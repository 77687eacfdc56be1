"""Status bar renderer for the TUI.

Draws a single line at the bottom showing the current mode,
available keybindings, and contextual messages. Uses mode-dependent
accent color as background.
"""

from __future__ import annotations

import curses
from typing import Optional


# Key hint strings per mode
_HINTS = {
    "NORMAL": (" ↑/↓ Nav  |  Space: Select  |  d: Delete  |  e: Export  |  r: Rename  |  "
               "/: Filter  |  s: Sort  |  p: Prune  |  Enter: View  |  q: Quit"),
    "PRUNE": " MODE: PRUNE  |  ↑/↓ Nav  |  Space: Toggle  |  Enter: Prune selected  |  Esc: Back",
    "EXPANDED": " ↑/↓ Scroll  |  PgUp/PgDn: Page  |  Esc/q: Back",
    "CONFIRM": " y: Confirm  |  any other key: Cancel",
    "FILTER": " Enter: Apply  |  Esc: Cancel",
    "RENAME": " Enter: Save (empty clears)  |  Esc: Cancel",
}


def draw(stdscr: curses.window, mode: str, accent_pair: int, width: int, y: int,
         message: Optional[str] = None) -> None:
    """Render the status bar at the given row.

    Args:
        stdscr: The curses window to draw on.
        mode: Current mode name.
        accent_pair: Curses color pair number for the accent background.
        width: Terminal width in columns.
        y: Row number where the status bar should be drawn.
        message: Optional override message (e.g. confirmation prompt).
    """
    if message is not None:
        text = " " + message
    else:
        text = _HINTS.get(mode, _HINTS["NORMAL"])

    # Pad or truncate to fill the full width
    text = text[:width].ljust(width)

    try:
        stdscr.addstr(y, 0, text, curses.color_pair(accent_pair) | curses.A_BOLD)
    except curses.error:
        # Writing to the very last cell can raise on some terminals
        pass
