import unittest

from claude_sessions.data.config import Config
from claude_sessions.data.engine import SessionEngine
from claude_sessions.data.models import SortMode
from claude_sessions.tui import app
from claude_sessions.tui.prune_pane import PrunePlan
from store_fixtures import BASE_MTIME, StoreTestCase, assistant, user


def _keys(state, text: str) -> None:
    for char in text:
        if state.mode in app._INPUT_MODES:
            app._handle_input_key(ord(char), state)
        elif state.mode == app.MODE_CONFIRM:
            app._handle_confirm_key(ord(char), state)
        elif state.mode == app.MODE_PRUNE:
            app._handle_prune_key(ord(char), state)
        else:
            app._handle_normal_key(ord(char), state)


class TuiStateTests(StoreTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.add_session("aaa", [user("alpha"), assistant("ok")], mtime=BASE_MTIME + 2)
        self.add_session("bbb", [user("beta"), user("beta again")], mtime=BASE_MTIME + 1)
        self.add_session("ccc", [], mtime=BASE_MTIME)
        engine = SessionEngine.open(self.paths.root, self.config_dir)
        engine.refresh()
        self.state = app._State(engine, self.tmp / "exports")

    def test_space_toggles_selection_by_id(self) -> None:
        _keys(self.state, " j ")
        self.assertEqual(self.state.selected, {"aaa", "bbb"})

        _keys(self.state, " ")
        self.assertEqual(self.state.selected, {"aaa"})

    def test_cursor_follows_session_across_resort(self) -> None:
        _keys(self.state, "j")
        self.assertEqual(self.state.current().id, "bbb")

        _keys(self.state, "s")  # size
        _keys(self.state, "s")  # messages

        self.assertEqual(self.state.engine.sort_mode, SortMode.MESSAGES)
        self.assertEqual(self.state.current().id, "bbb")
        self.assertEqual(Config.load(self.config_dir).sort_mode, SortMode.MESSAGES)

    def test_filter_input(self) -> None:
        _keys(self.state, "/bet\n")

        self.assertEqual(self.state.mode, app.MODE_NORMAL)
        self.assertEqual([s.id for s in self.state.view], ["bbb"])
        self.assertEqual(Config.load(self.config_dir).filter_query, "bet")

    def test_escape_cancels_filter(self) -> None:
        _keys(self.state, "/bet")
        app._handle_input_key(app._KEY_ESC, self.state)

        self.assertEqual(len(self.state.view), 3)

    def test_delete_selection_after_confirmation(self) -> None:
        _keys(self.state, " j ")
        _keys(self.state, "d")
        self.assertEqual(self.state.mode, app.MODE_CONFIRM)

        _keys(self.state, "y")

        self.assertEqual([s.id for s in self.state.view], ["ccc"])
        self.assertEqual(self.state.selected, set())
        self.assertEqual(self.state.message, "Deleted 2 session(s).")

    def test_declined_delete_keeps_everything(self) -> None:
        _keys(self.state, "dn")

        self.assertEqual(self.state.mode, app.MODE_NORMAL)
        self.assertEqual(len(self.state.view), 3)

    def test_rename(self) -> None:
        _keys(self.state, "rMine\n")

        self.assertEqual(self.state.current().display_name, "Mine")

    def test_export_current(self) -> None:
        _keys(self.state, "e")

        self.assertTrue((self.tmp / "exports" / "aaa.txt").exists())
        self.assertIn("Exported to", self.state.message)

    def test_expanded_view_loads_transcript(self) -> None:
        app._handle_normal_key(ord("\n"), self.state)

        self.assertEqual(self.state.mode, app.MODE_EXPANDED)
        self.assertEqual(self.state.transcript, ["[USER]", "alpha", "", "[ASSISTANT]", "ok"])

    def test_prune_flow(self) -> None:
        orphan = self.touch("debug/dead.txt")
        _keys(self.state, "p")
        plan = self.state.prune_plan
        self.assertEqual(plan.chosen, {"empty", "orphans"})
        self.assertEqual(plan.pending, 2)

        _keys(self.state, " ")  # untick empty sessions
        app._handle_prune_key(ord("\n"), self.state)
        _keys(self.state, "y")

        self.assertFalse(orphan.exists())
        self.assertIsNotNone(self.state.engine.find("ccc"))
        self.assertEqual(self.state.mode, app.MODE_NORMAL)


class PrunePlanTests(StoreTestCase):
    def test_nothing_to_do_ticks_nothing(self) -> None:
        self.add_session("aaa", [user("alpha")])
        engine = SessionEngine.open(self.paths.root, self.config_dir)
        engine.refresh()

        plan = PrunePlan.detect(engine)

        self.assertEqual(plan.chosen, set())
        self.assertEqual(plan.pending, 0)


if __name__ == "__main__":
    unittest.main()
