"""Full-screen transcript renderer for the expanded view."""

from __future__ import annotations

import curses
import textwrap
from typing import List


def _wrap(lines: List[str], width: int) -> List[str]:
    wrapped: List[str] = []
    for line in lines:
        wrapped.extend(textwrap.wrap(line, width) or [""])
    return wrapped


def draw(stdscr: curses.window, lines: List[str], offset: int, accent_pair: int,
         normal_pair: int, x: int, y: int, width: int, height: int) -> int:
    """Render transcript lines from `offset`, wrapped to the width.

    Returns the offset clamped to the scrollable range, which the caller
    stores so scrolling past either end does not accumulate.
    """
    content_width = max(1, width - 2)
    wrapped = _wrap(lines, content_width)
    viewport = max(1, height - 1)
    offset = max(0, min(offset, len(wrapped) - viewport))

    title = f" Full Conversation (line {offset + 1}/{max(1, len(wrapped))}) "
    try:
        stdscr.addstr(y, x, title[:width].ljust(width), curses.color_pair(accent_pair) | curses.A_BOLD)
    except curses.error:
        pass

    for row in range(viewport):
        index = offset + row
        text = wrapped[index] if index < len(wrapped) else ""
        try:
            stdscr.addstr(y + 1 + row, x + 1, text.ljust(content_width), curses.color_pair(normal_pair))
        except curses.error:
            pass
    return offset
