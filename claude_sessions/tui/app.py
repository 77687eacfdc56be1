"""Main TUI application loop.

Manages curses setup/teardown, state (mode, cursor, selection),
input dispatch, and the render loop. Coordinates the session list,
preview, prune and transcript renderers and the status bar. All
session data comes from SessionEngine; this module only decides which
engine command a key runs.
"""

from __future__ import annotations

import curses
import os
from pathlib import Path
from typing import List, Optional, Set

from claude_sessions.data import NotFound, PruneSelection, Session, SessionEngine, SessionsError
from claude_sessions.tui import left_pane, prune_pane, right_pane, status_bar, transcript_view
from claude_sessions.utils.paths import get_export_dir

# Mode constants
MODE_NORMAL = "NORMAL"
MODE_FILTER = "FILTER"
MODE_RENAME = "RENAME"
MODE_CONFIRM = "CONFIRM"
MODE_PRUNE = "PRUNE"
MODE_EXPANDED = "EXPANDED"

_INPUT_MODES = (MODE_FILTER, MODE_RENAME)
_DESTRUCTIVE_MODES = (MODE_CONFIRM, MODE_PRUNE)

# Accent colors (R, G, B)
_SELECT_COLOR = (202, 124, 94)
_DELETE_COLOR = (55, 6, 3)

# Color pair IDs
_PAIR_SELECT_ACCENT = 1
_PAIR_DELETE_ACCENT = 2
_PAIR_NORMAL = 3
_PAIR_DIVIDER_SELECT = 4
_PAIR_DIVIDER_DELETE = 5
_PAIR_MARKER = 6

_KEY_ESC = 27
_KEYS_ENTER = (curses.KEY_ENTER, ord("\n"), ord("\r"))
_KEYS_BACKSPACE = (curses.KEY_BACKSPACE, 127, 8)


class _State:
    """Mutable state container for the TUI."""

    def __init__(self, engine: SessionEngine, export_dir: Path) -> None:
        self.engine = engine
        self.export_dir = export_dir
        self.view: List[Session] = engine.list_sessions()
        self.mode = MODE_NORMAL
        self.cursor = 0
        self.scroll_offset = 0
        # Selection is held by id so it survives re-sorting and refreshes
        self.selected: Set[str] = set()
        self.message: Optional[str] = None
        self.input_buffer = ""
        self.confirm_targets: List[str] = []
        self.prune_plan: Optional[prune_pane.PrunePlan] = None
        self.transcript: List[str] = []
        self.transcript_offset = 0
        # Track which session's todos were last read to avoid re-reading
        self._todos_id: Optional[str] = None
        self.todos: List[str] = []

    def current(self) -> Optional[Session]:
        if not self.view:
            return None
        return self.view[min(self.cursor, len(self.view) - 1)]

    def sync(self) -> None:
        """Re-read the engine's view after any sort, filter or mutation."""
        current = self.current()
        self.view = self.engine.list_sessions()
        ids = [s.id for s in self.view]
        self.selected &= {s.id for s in self.engine.sessions}
        if current is not None and current.id in ids:
            self.cursor = ids.index(current.id)
        self.cursor = max(0, min(self.cursor, len(self.view) - 1))
        self._todos_id = None

    def load_todos(self) -> None:
        session = self.current()
        sid = session.id if session else None
        if sid != self._todos_id:
            self.todos = session.load_todos() if session else []
            self._todos_id = sid


def _init_colors() -> None:
    """Initialize curses color pairs using true-color if available."""
    curses.start_color()
    curses.use_default_colors()

    # True-color support via init_color (requires can_change_color)
    if curses.can_change_color():
        # curses uses 0-1000 scale
        def _set(color_id: int, r: int, g: int, b: int) -> None:
            curses.init_color(color_id, r * 1000 // 255, g * 1000 // 255, b * 1000 // 255)

        _set(20, *_SELECT_COLOR)
        _set(21, *_DELETE_COLOR)
        _set(22, 255, 255, 255)  # white

        curses.init_pair(_PAIR_SELECT_ACCENT, 22, 20)
        curses.init_pair(_PAIR_DELETE_ACCENT, 22, 21)
        curses.init_pair(_PAIR_NORMAL, -1, -1)
        curses.init_pair(_PAIR_DIVIDER_SELECT, 20, -1)
        curses.init_pair(_PAIR_DIVIDER_DELETE, 21, -1)
        curses.init_pair(_PAIR_MARKER, 21, -1)
    else:
        # Fallback: use built-in colors
        curses.init_pair(_PAIR_SELECT_ACCENT, curses.COLOR_WHITE, curses.COLOR_BLUE)
        curses.init_pair(_PAIR_DELETE_ACCENT, curses.COLOR_WHITE, curses.COLOR_RED)
        curses.init_pair(_PAIR_NORMAL, -1, -1)
        curses.init_pair(_PAIR_DIVIDER_SELECT, curses.COLOR_BLUE, -1)
        curses.init_pair(_PAIR_DIVIDER_DELETE, curses.COLOR_RED, -1)
        curses.init_pair(_PAIR_MARKER, curses.COLOR_RED, -1)


def _accent_pair(mode: str) -> int:
    """Return the color pair ID for the current mode's accent."""
    return _PAIR_DELETE_ACCENT if mode in _DESTRUCTIVE_MODES else _PAIR_SELECT_ACCENT


def _divider_pair(mode: str) -> int:
    """Return the color pair ID for the pane divider in the current mode."""
    return _PAIR_DIVIDER_DELETE if mode in _DESTRUCTIVE_MODES else _PAIR_DIVIDER_SELECT


def _ensure_cursor_visible(state: _State, pane_height: int) -> None:
    """Adjust scroll_offset so the cursor is visible in the pane."""
    # Header row takes 1 line, so data rows = pane_height - 1
    data_height = max(1, pane_height - 1)
    if state.cursor < state.scroll_offset:
        state.scroll_offset = state.cursor
    elif state.cursor >= state.scroll_offset + data_height:
        state.scroll_offset = state.cursor - data_height + 1


def _draw_divider(stdscr: curses.window, col: int, y: int, height: int, pair: int) -> None:
    """Draw a vertical divider line between the two panes."""
    for row in range(height):
        try:
            stdscr.addstr(y + row, col, "│", curses.color_pair(pair))
        except curses.error:
            pass


def _list_title(state: _State) -> str:
    engine = state.engine
    label = engine.sort_mode.label
    if engine.filter_query:
        return (f" Sessions ({len(state.view)}/{len(engine.sessions)}) [{label}]"
                f" [Filter: {engine.filter_query}]")
    return f" Sessions ({len(state.view)}) [{label}]"


def _status_text(state: _State) -> Optional[str]:
    if state.mode in _INPUT_MODES:
        label = "Filter" if state.mode == MODE_FILTER else "Rename"
        return f"{label}: {state.input_buffer}_"
    return state.message


def _render(stdscr: curses.window, state: _State) -> None:
    """Perform a full render of the TUI."""
    stdscr.erase()
    max_y, max_x = stdscr.getmaxyx()

    if max_y < 3 or max_x < 20:
        # Terminal too small
        try:
            stdscr.addstr(0, 0, "Terminal too small")
        except curses.error:
            pass
        stdscr.noutrefresh()
        curses.doupdate()
        return

    status_y = max_y - 1
    pane_height = max_y - 1
    accent = _accent_pair(state.mode)

    if state.mode == MODE_EXPANDED:
        state.transcript_offset = transcript_view.draw(
            stdscr, state.transcript, state.transcript_offset, accent, _PAIR_NORMAL,
            x=0, y=0, width=max_x, height=pane_height,
        )
    elif state.mode == MODE_PRUNE and state.prune_plan is not None:
        prune_pane.draw(stdscr, state.prune_plan, accent, _PAIR_NORMAL, _PAIR_MARKER,
                        x=0, y=0, width=max_x, height=pane_height)
    elif not state.view:
        msg = "No sessions match the filter." if state.engine.filter_query else "No Claude Code sessions found."
        try:
            stdscr.addstr(pane_height // 2, max(0, (max_x - len(msg)) // 2), msg)
        except curses.error:
            pass
    else:
        # Pane widths: left ~60%, divider 1 col, right ~40%
        left_width = max(20, int(max_x * 0.6))
        divider_col = left_width
        right_x = left_width + 1
        right_width = max_x - right_x

        # Hide right pane on narrow terminals
        show_right = max_x >= 60
        if not show_right:
            left_width = max_x

        _ensure_cursor_visible(state, pane_height)

        left_pane.draw(
            stdscr, state.view, state.cursor, state.scroll_offset, state.selected,
            title=_list_title(state),
            accent_pair=_accent_pair(state.mode),
            normal_pair=_PAIR_NORMAL,
            marker_pair=_PAIR_MARKER,
            x=0, y=0, width=left_width, height=pane_height,
        )

        if show_right:
            _draw_divider(stdscr, divider_col, 0, pane_height, _divider_pair(state.mode))
            state.load_todos()
            right_pane.draw(
                stdscr, state.current(), state.todos, _PAIR_NORMAL,
                x=right_x, y=0, width=right_width, height=pane_height,
            )

    status_bar.draw(stdscr, state.mode, accent, max_x, status_y, message=_status_text(state))

    if state.mode in _INPUT_MODES:
        curses.curs_set(1)
        try:
            stdscr.move(status_y, min(max_x - 1, len(_status_text(state) or "")))
        except curses.error:
            pass
    else:
        curses.curs_set(0)

    stdscr.noutrefresh()
    curses.doupdate()


def _move(state: _State, delta: int) -> None:
    """Move the cursor, wrapping at either end."""
    if state.view:
        state.cursor = (state.cursor + delta) % len(state.view)


def _targets(state: _State) -> List[Session]:
    """Selected sessions, or the highlighted one when nothing is selected."""
    if state.selected:
        return state.engine.by_ids(state.selected)
    current = state.current()
    return [current] if current else []


def _handle_normal_key(key: int, state: _State) -> Optional[str]:
    """Handle keypress in NORMAL mode. Returns 'quit' or None."""
    if key in (curses.KEY_UP, ord("k")):
        _move(state, -1)
    elif key in (curses.KEY_DOWN, ord("j")):
        _move(state, 1)
    elif key == ord(" "):
        session = state.current()
        if session is not None:
            if session.id in state.selected:
                state.selected.discard(session.id)
            else:
                state.selected.add(session.id)
    elif key == ord("d"):
        targets = _targets(state)
        if targets:
            state.confirm_targets = [s.id for s in targets]
            state.mode = MODE_CONFIRM
            state.message = f"Delete {len(targets)} session(s)? [y/N]"
    elif key == ord("e"):
        _do_export(state)
    elif key == ord("r"):
        session = state.current()
        if session is not None:
            state.input_buffer = session.custom_name or ""
            state.mode = MODE_RENAME
    elif key == ord("/"):
        state.input_buffer = state.engine.filter_query
        state.mode = MODE_FILTER
    elif key == ord("s"):
        state.engine.sort(state.engine.sort_mode.next())
        state.engine.save_config()
        state.sync()
    elif key == ord("p"):
        state.prune_plan = prune_pane.PrunePlan.detect(state.engine)
        state.mode = MODE_PRUNE
    elif key in _KEYS_ENTER:
        session = state.current()
        if session is not None:
            try:
                state.transcript = state.engine.transcript(session).splitlines()
            except SessionsError as exc:
                state.message = f"Error: {exc}"
                return None
            # Start at the bottom; the renderer clamps it
            state.transcript_offset = len(state.transcript)
            state.mode = MODE_EXPANDED
    elif key in (ord("q"), ord("Q")):
        return "quit"
    return None


def _handle_input_key(key: int, state: _State) -> None:
    """Line editing for FILTER and RENAME modes."""
    if key == _KEY_ESC:
        state.input_buffer = ""
        state.mode = MODE_NORMAL
    elif key in _KEYS_ENTER:
        if state.mode == MODE_FILTER:
            state.engine.filter(state.input_buffer)
            state.engine.save_config()
            state.sync()
            state.cursor = 0
        else:
            _do_rename(state)
        state.input_buffer = ""
        state.mode = MODE_NORMAL
    elif key in _KEYS_BACKSPACE:
        state.input_buffer = state.input_buffer[:-1]
    elif 32 <= key < 127:
        state.input_buffer += chr(key)


def _handle_prune_key(key: int, state: _State) -> None:
    plan = state.prune_plan
    if key in (_KEY_ESC, ord("q")):
        state.prune_plan = None
        state.mode = MODE_NORMAL
    elif key in (curses.KEY_UP, ord("k")):
        plan.move(-1)
    elif key in (curses.KEY_DOWN, ord("j")):
        plan.move(1)
    elif key == ord(" "):
        plan.toggle()
    elif key in _KEYS_ENTER:
        if plan.pending == 0:
            state.message = "Nothing selected to prune."
        else:
            state.mode = MODE_CONFIRM
            state.message = f"Prune {plan.pending} item(s)? [y/N]"


def _handle_expanded_key(key: int, state: _State, page_size: int) -> None:
    if key in (_KEY_ESC, ord("q")):
        state.transcript = []
        state.mode = MODE_NORMAL
    elif key in (curses.KEY_DOWN, ord("j")):
        state.transcript_offset += 1
    elif key in (curses.KEY_UP, ord("k")):
        state.transcript_offset = max(0, state.transcript_offset - 1)
    elif key == curses.KEY_NPAGE:
        state.transcript_offset += page_size
    elif key == curses.KEY_PPAGE:
        state.transcript_offset = max(0, state.transcript_offset - page_size)


def _do_delete(state: _State) -> None:
    """Delete the confirmed sessions and refresh the list."""
    targets = state.engine.by_ids(state.confirm_targets)
    results = state.engine.delete(targets)
    failed = [r for r in results if not r.ok]

    state.selected.clear()
    state.confirm_targets = []
    state.sync()
    state.scroll_offset = 0

    if failed:
        state.message = f"Deleted {len(results) - len(failed)} session(s); {len(failed)} had files that could not be removed."
    elif state.engine.warnings:
        state.message = f"Deleted {len(results)} session(s). Warning: {state.engine.warnings[0]}"
    else:
        state.message = f"Deleted {len(results)} session(s)."


def _do_prune(state: _State) -> None:
    plan = state.prune_plan
    selection = PruneSelection(orphans=plan.selected("orphans"), empty=plan.selected("empty"),
                               history=plan.selected("history"))
    report = state.engine.prune(selection)
    state.prune_plan = None
    state.sync()
    state.scroll_offset = 0
    state.message = (f"Pruned {len(report.empty_deleted)} empty session(s), "
                     f"{len(report.orphans_removed)} orphan(s), {report.history_removed} history record(s).")
    if report.failures:
        state.message += f" {report.failures} failure(s)."


def _do_export(state: _State) -> None:
    targets = _targets(state)
    if not targets:
        return
    results = state.engine.export(targets, state.export_dir)
    failed = [r for r in results if not r.ok]
    if failed:
        state.message = f"Export failed: {failed[0].error}"
    elif len(results) == 1:
        state.message = f"Exported to {results[0].path}"
    else:
        state.message = f"Exported {len(results)} session(s) to {state.export_dir}"


def _do_rename(state: _State) -> None:
    session = state.current()
    if session is None:
        return
    try:
        state.engine.rename(session, state.input_buffer)
    except OSError as exc:
        state.message = f"Error: Could not save name: {exc}"
        return
    state.sync()


def _handle_confirm_key(key: int, state: _State) -> None:
    state.message = None
    if key in (ord("y"), ord("Y")):
        if state.prune_plan is not None:
            _do_prune(state)
        else:
            _do_delete(state)
        state.mode = MODE_NORMAL
    else:
        # Back to wherever the confirmation came from
        state.confirm_targets = []
        state.mode = MODE_PRUNE if state.prune_plan is not None else MODE_NORMAL


def _main(stdscr: curses.window, state: _State) -> None:
    """Curses main function, run inside curses.wrapper."""
    curses.curs_set(0)  # hide cursor
    stdscr.keypad(True)
    stdscr.timeout(100)  # 100ms timeout for responsive resize handling
    _init_colors()

    if state.engine.warnings:
        state.message = f"{len(state.engine.warnings)} session(s) could not be read: {state.engine.warnings[0]}"

    while True:
        _render(stdscr, state)

        try:
            key = stdscr.getch()
        except curses.error:
            continue

        if key == -1:
            # Timeout with no input: re-render to pick up resizes
            continue

        if key == curses.KEY_RESIZE:
            stdscr.clear()
            continue

        if state.mode == MODE_CONFIRM:
            _handle_confirm_key(key, state)
            continue
        if state.mode in _INPUT_MODES:
            _handle_input_key(key, state)
            continue
        if state.mode == MODE_EXPANDED:
            _handle_expanded_key(key, state, max(1, stdscr.getmaxyx()[0] - 3))
            continue

        # Clear transient messages on any keypress
        state.message = None

        if state.mode == MODE_PRUNE:
            _handle_prune_key(key, state)
        elif _handle_normal_key(key, state) == "quit":
            break


def run(claude_dir: Optional[Path] = None) -> None:
    """Entry point for the TUI. Loads sessions, then sets up curses and runs the main loop."""
    engine = SessionEngine.open(claude_dir)
    try:
        engine.refresh()
    except NotFound as exc:
        raise SystemExit(f"Error: {exc}")

    state = _State(engine, get_export_dir())
    # Short Esc delay so cancelling input feels immediate
    os.environ.setdefault("ESCDELAY", "25")
    curses.wrapper(_main, state)


if __name__ == "__main__":
    run()
