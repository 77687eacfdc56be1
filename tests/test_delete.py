import unittest
from unittest import mock

from claude_sessions.data import delete as delete_module
from claude_sessions.data.cache import MetadataCache
from claude_sessions.data.delete import delete_paths, delete_session, delete_sessions
from claude_sessions.data.discovery import discover
from store_fixtures import StoreTestCase, user, write_jsonl


class DeleteSessionTests(StoreTestCase):
    def _discover(self, cache=None):
        if cache is None:
            cache = MetadataCache(self.paths.cache)
        return discover(self.paths, cache).sessions

    def test_removes_log_and_related_files(self) -> None:
        self.add_session("a", [user("one")])
        keep = self.add_session("b", [user("two")])
        debug = self.touch("debug/a.txt")
        env = self.touch("session-env/a", directory=True)
        todo = self.touch("todos/a-agent-1.json")
        cache = MetadataCache(self.paths.cache)
        session = self._discover(cache)[0]

        result = delete_session(self.paths, session, cache)

        self.assertTrue(result.ok)
        for path in (session.path, debug, env, todo):
            self.assertFalse(path.exists(), path)
        self.assertTrue(keep.exists())
        self.assertNotIn("a", cache)
        self.assertIn("b", cache)

    def test_deleting_already_absent_files_succeeds(self) -> None:
        self.add_session("a", [user("one")])
        self.touch("debug/a.txt")
        cache = MetadataCache(self.paths.cache)
        session = self._discover(cache)[0]
        delete_session(self.paths, session, cache)
        stand_in = write_jsonl(self.tmp / "stand-in.jsonl", [user("x")])
        cache.get_or_refresh("a", stand_in, 0)

        result = delete_session(self.paths, session, cache)

        self.assertTrue(result.ok)
        self.assertEqual(result.deleted, [])
        self.assertNotIn("a", cache)

    def test_removes_project_dir_when_last_session_goes(self) -> None:
        self.add_session("a", [user("one")], project="-lonely")
        session = self._discover()[0]

        result = delete_session(self.paths, session)

        self.assertFalse((self.paths.projects / "-lonely").exists())
        self.assertIn(self.paths.projects / "-lonely", result.deleted)

    def test_failed_artifact_does_not_block_the_rest(self) -> None:
        self.add_session("a", [user("one")])
        debug = self.touch("debug/a.txt")
        env = self.touch("session-env/a", directory=True)
        session = self._discover()[0]
        real_remove = delete_module.remove_path

        def flaky_remove(path):
            if path == debug:
                raise PermissionError(13, "Permission denied")
            return real_remove(path)

        with mock.patch.object(delete_module, "remove_path", side_effect=flaky_remove):
            result = delete_session(self.paths, session)

        self.assertFalse(result.ok)
        self.assertEqual(result.failed, [(debug, "Permission denied")])
        self.assertFalse(env.exists())
        self.assertFalse(session.path.exists())

    def test_batch_reports_every_session(self) -> None:
        self.add_session("a", [user("one")])
        self.add_session("b", [user("two")])
        sessions = self._discover()

        results = delete_sessions(self.paths, sessions)

        self.assertEqual([r.session_id for r in results], ["a", "b"])
        self.assertTrue(all(r.ok for r in results))


class DeletePathsTests(StoreTestCase):
    def test_refuses_paths_outside_the_data_dir(self) -> None:
        outside = self.tmp / "precious.txt"
        outside.write_text("keep", encoding="utf-8")

        removed, failed = delete_paths(self.paths, [outside])

        self.assertEqual(removed, [])
        self.assertEqual([p for p, _ in failed], [outside])
        self.assertTrue(outside.exists())

    def test_symlink_is_removed_not_its_target(self) -> None:
        target = self.tmp / "target.txt"
        target.write_text("keep", encoding="utf-8")
        self.paths.debug.mkdir()
        link = self.paths.debug / "latest"
        link.symlink_to(target)

        removed, failed = delete_paths(self.paths, [link])

        self.assertEqual((removed, failed), ([link], []))
        self.assertFalse(link.is_symlink())
        self.assertTrue(target.exists())


if __name__ == "__main__":
    unittest.main()
