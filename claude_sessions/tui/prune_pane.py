"""Prune view renderer for the TUI.

Lists the three maintenance sweeps with what each would remove. Space
toggles the highlighted sweep; the app confirms before anything is
deleted.
"""

from __future__ import annotations

import curses
from dataclasses import dataclass, field
from typing import Dict, List, Set

from claude_sessions.data import SessionEngine
from claude_sessions.utils.formatting import truncate

# Detail lines shown under each sweep before "... and N more"
_MAX_DETAILS = 5


@dataclass
class PruneItem:
    key: str
    label: str
    details: List[str]


@dataclass
class PrunePlan:
    """Detected prune candidates plus which sweeps the user has ticked."""

    items: List[PruneItem]
    cursor: int = 0
    chosen: Set[str] = field(default_factory=set)

    @classmethod
    def detect(cls, engine: SessionEngine) -> "PrunePlan":
        empty = engine.detect_empty()
        orphans: Dict[str, list] = engine.detect_orphans()
        stale = engine.detect_stale_history()

        orphan_details = [f"{root}/{path.name}" for root, found in orphans.items() for path in found]
        items = [
            PruneItem("empty", "Empty sessions", [f"{s.id}  ({s.project})" for s in empty]),
            PruneItem("orphans", "Orphaned files", orphan_details),
            PruneItem("history", "Stale history records", [r.session_id or "" for r in stale]),
        ]
        # Pre-tick every sweep that has something to do
        return cls(items=items, chosen={i.key for i in items if i.details})

    def move(self, delta: int) -> None:
        self.cursor = (self.cursor + delta) % len(self.items)

    def toggle(self) -> None:
        key = self.items[self.cursor].key
        if key in self.chosen:
            self.chosen.discard(key)
        else:
            self.chosen.add(key)

    def selected(self, key: str) -> bool:
        return key in self.chosen

    @property
    def pending(self) -> int:
        return sum(len(i.details) for i in self.items if i.key in self.chosen)


def draw(stdscr: curses.window, plan: PrunePlan, accent_pair: int, normal_pair: int,
         marker_pair: int, x: int, y: int, width: int, height: int) -> None:
    """Render the prune plan filling the given area."""
    lines = []  # (text, attr)
    header_attr = curses.color_pair(accent_pair) | curses.A_BOLD
    lines.append((" Prune", header_attr))
    lines.append(("", curses.color_pair(normal_pair)))

    for index, item in enumerate(plan.items):
        marker = "[x]" if item.key in plan.chosen else "[ ]"
        attr = curses.color_pair(accent_pair) if index == plan.cursor else curses.color_pair(normal_pair)
        lines.append((f" {marker} {item.label} ({len(item.details)})", attr))
        for detail in item.details[:_MAX_DETAILS]:
            lines.append((f"       {detail}", curses.color_pair(marker_pair)))
        if len(item.details) > _MAX_DETAILS:
            lines.append((f"       ... and {len(item.details) - _MAX_DETAILS} more", curses.color_pair(normal_pair)))
        lines.append(("", curses.color_pair(normal_pair)))

    for row in range(height):
        text, attr = lines[row] if row < len(lines) else ("", curses.color_pair(normal_pair))
        try:
            stdscr.addstr(y + row, x, truncate(text, width).ljust(width)[:width], attr)
        except curses.error:
            pass
