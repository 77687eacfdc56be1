import os
import unittest

from claude_sessions.data.config import Config
from claude_sessions.data.engine import SessionEngine
from claude_sessions.data.models import PruneSelection, SortMode
from store_fixtures import BASE_MTIME, StoreTestCase, user


class EngineTestCase(StoreTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.add_session("aaa", [user("alpha task")], mtime=BASE_MTIME + 10)
        self.add_session("bbb", [user("beta"), user("beta 2"), user("beta 3")], mtime=BASE_MTIME + 30)
        self.add_session("ccc", [], mtime=BASE_MTIME + 20)
        self.add_history("aaa", "bbb", "ccc", "ghost")

    def open_engine(self) -> SessionEngine:
        engine = SessionEngine.open(self.paths.root, self.config_dir)
        engine.refresh()
        return engine


class QueryTests(EngineTestCase):
    def test_default_sort_is_newest_first(self) -> None:
        engine = self.open_engine()

        self.assertEqual([s.id for s in engine.list_sessions()], ["bbb", "ccc", "aaa"])

    def test_sort_modes_do_not_reorder_canonical_list(self) -> None:
        engine = self.open_engine()

        by_messages = engine.sort(SortMode.MESSAGES)

        self.assertEqual([s.id for s in by_messages], ["bbb", "aaa", "ccc"])
        self.assertEqual([s.id for s in engine.sessions], ["aaa", "bbb", "ccc"])

    def test_filter_is_case_insensitive_substring(self) -> None:
        engine = self.open_engine()

        self.assertEqual([s.id for s in engine.filter("ALPHA")], ["aaa"])
        self.assertEqual([s.id for s in engine.filter("cc")], ["ccc"])
        self.assertEqual(len(engine.filter("")), 3)

    def test_filter_survives_refresh(self) -> None:
        engine = self.open_engine()
        engine.filter("beta")

        engine.refresh()

        self.assertEqual([s.id for s in engine.list_sessions()], ["bbb"])

    def test_sort_and_filter_persist_through_config(self) -> None:
        engine = self.open_engine()
        engine.sort(SortMode.SIZE)
        engine.filter("beta")
        engine.save_config()

        config = Config.load(self.config_dir)

        self.assertEqual((config.sort_mode, config.filter_query), (SortMode.SIZE, "beta"))

    def test_find_by_prefix(self) -> None:
        engine = self.open_engine()

        self.assertEqual(engine.find("bb").id, "bbb")
        self.assertIsNone(engine.find("zzz"))

    def test_detect_empty(self) -> None:
        engine = self.open_engine()

        self.assertEqual([s.id for s in engine.detect_empty()], ["ccc"])

    def test_detect_stale_history(self) -> None:
        engine = self.open_engine()

        self.assertEqual([r.session_id for r in engine.detect_stale_history()], ["ghost"])


class CommandTests(EngineTestCase):
    def test_delete_cleans_history_cache_and_list(self) -> None:
        engine = self.open_engine()
        self.touch("debug/aaa.txt")

        results = engine.delete(engine.by_ids(["aaa"]))

        self.assertTrue(results[0].ok)
        self.assertEqual([s.id for s in engine.sessions], ["bbb", "ccc"])
        self.assertEqual(self.history_ids(), ["bbb", "ccc", "ghost"])
        self.assertNotIn("aaa", engine.cache)
        self.assertFalse((self.paths.debug / "aaa.txt").exists())

    def test_rename_overrides_first_message(self) -> None:
        engine = self.open_engine()
        session = engine.find("aaa")

        engine.rename(session, "  My task  ")
        self.assertEqual(session.display_name, "My task")

        reopened = self.open_engine()
        self.assertEqual(reopened.find("aaa").display_name, "My task")

        reopened.rename(reopened.find("aaa"), "")
        self.assertEqual(reopened.find("aaa").display_name, "alpha task")

    def test_export_reports_per_session(self) -> None:
        engine = self.open_engine()
        dest = self.tmp / "out"

        results = engine.export(engine.by_ids(["aaa", "bbb"]), dest)

        self.assertTrue(all(r.ok for r in results))
        self.assertEqual(sorted(os.listdir(dest)), ["aaa.txt", "bbb.txt"])

    def test_prune_everything(self) -> None:
        self.touch("debug/aaa.txt")
        orphan = self.touch("debug/dead.txt")
        env_orphan = self.touch("session-env/dead", directory=True)
        ccc_todo = self.touch("todos/ccc-agent-ccc.json")
        engine = self.open_engine()

        report = engine.prune(PruneSelection())

        self.assertEqual([r.session_id for r in report.empty_deleted], ["ccc"])
        self.assertEqual(sorted(report.orphans_removed), sorted([orphan, env_orphan]))
        self.assertEqual(report.history_removed, 1)
        self.assertEqual(report.failures, 0)
        self.assertFalse(ccc_todo.exists())
        self.assertTrue((self.paths.debug / "aaa.txt").exists())
        self.assertEqual([s.id for s in engine.sessions], ["aaa", "bbb"])
        self.assertEqual(self.history_ids(), ["aaa", "bbb"])

    def test_prune_selection_limits_sweeps(self) -> None:
        orphan = self.touch("debug/dead.txt")
        engine = self.open_engine()

        report = engine.prune(PruneSelection(orphans=True, empty=False, history=False))

        self.assertEqual(report.orphans_removed, [orphan])
        self.assertEqual(report.empty_deleted, [])
        self.assertEqual(report.history_removed, 0)
        self.assertIn("ghost", self.history_ids())
        self.assertIsNotNone(engine.find("ccc"))


if __name__ == "__main__":
    unittest.main()
