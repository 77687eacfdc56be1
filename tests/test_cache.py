import json
import os
import unittest

from claude_sessions.data.cache import MetadataCache
from claude_sessions.data.discovery import discover
from claude_sessions.data.parser import parse_session_file
from store_fixtures import BASE_MTIME, StoreTestCase, user, write_jsonl


class CountingParser:
    def __init__(self) -> None:
        self.calls = []

    def __call__(self, path):
        self.calls.append(path)
        return parse_session_file(path)


class MetadataCacheTests(StoreTestCase):
    def test_unchanged_sessions_are_never_reparsed(self) -> None:
        self.add_session("a", [user("alpha")])
        self.add_session("b", [user("beta"), user("again")])
        discover(self.paths, MetadataCache(self.paths.cache).load())

        parser = CountingParser()
        result = discover(self.paths, MetadataCache(self.paths.cache, parser=parser).load())

        self.assertEqual(parser.calls, [])
        self.assertEqual([s.message_count for s in result.sessions], [1, 2])
        self.assertEqual(result.sessions[1].first_message, "beta")

    def test_changed_timestamp_forces_exactly_one_reparse(self) -> None:
        path = self.add_session("a", [user("alpha")])
        self.add_session("b", [user("beta")])
        discover(self.paths, MetadataCache(self.paths.cache).load())

        write_jsonl(path, [user("rewritten"), user("more")], mtime=BASE_MTIME + 60)
        parser = CountingParser()
        result = discover(self.paths, MetadataCache(self.paths.cache, parser=parser).load())

        self.assertEqual(parser.calls, [path])
        session = result.sessions[0]
        self.assertEqual(session.message_count, 2)
        self.assertEqual(session.first_message, "rewritten")

    def test_results_match_with_and_without_cache(self) -> None:
        self.add_session("a", [user("alpha")])
        self.add_session("b", [])
        cold = discover(self.paths, MetadataCache(self.paths.cache), persist_cache=False)
        discover(self.paths, MetadataCache(self.paths.cache))
        warm = discover(self.paths, MetadataCache(self.paths.cache).load())

        self.assertEqual(cold.sessions, warm.sessions)

    def test_get_or_refresh_stores_mtime(self) -> None:
        path = self.add_session("a", [user("alpha")])
        cache = MetadataCache(self.paths.cache)

        metadata = cache.get_or_refresh("a", path, BASE_MTIME)

        self.assertEqual(metadata.message_count, 1)
        self.assertEqual(cache.get("a").modified_ts, BASE_MTIME)

    def test_persist_writes_expected_schema(self) -> None:
        path = self.add_session("a", [user("alpha")])
        cache = MetadataCache(self.paths.cache)
        cache.get_or_refresh("a", path, BASE_MTIME)

        self.assertTrue(cache.persist())
        self.assertFalse(cache.persist())

        data = json.loads(self.paths.cache.read_text(encoding="utf-8"))
        self.assertEqual(data, {"a": {
            "custom_name": None,
            "message_count": 1,
            "first_message": "alpha",
            "modified_ts": BASE_MTIME,
        }})
        self.assertEqual([p.name for p in self.paths.root.iterdir() if p.name.endswith(".tmp")], [])

    def test_invalidate_removes_entry(self) -> None:
        path = self.add_session("a", [user("alpha")])
        cache = MetadataCache(self.paths.cache)
        cache.get_or_refresh("a", path, BASE_MTIME)

        self.assertTrue(cache.invalidate("a"))
        self.assertFalse(cache.invalidate("a"))
        self.assertNotIn("a", cache)


class CacheLoadTests(StoreTestCase):
    def _load(self, content: str) -> MetadataCache:
        self.paths.cache.write_text(content, encoding="utf-8")
        return MetadataCache(self.paths.cache).load()

    def test_missing_file_is_empty(self) -> None:
        self.assertEqual(len(MetadataCache(self.paths.cache).load()), 0)

    def test_truncated_file_is_empty(self) -> None:
        self.assertEqual(len(self._load('{"a": {"message_count": 1,')), 0)

    def test_wrong_root_type_is_empty(self) -> None:
        self.assertEqual(len(self._load("[1, 2, 3]")), 0)

    def test_one_bad_entry_discards_the_whole_cache(self) -> None:
        cache = self._load(json.dumps({
            "a": {"message_count": 1, "first_message": "x", "modified_ts": 5},
            "b": {"message_count": "many", "modified_ts": 5},
        }))
        self.assertEqual(len(cache), 0)

    def test_boolean_counts_are_rejected(self) -> None:
        cache = self._load(json.dumps({"a": {"message_count": True, "modified_ts": 5}}))
        self.assertEqual(len(cache), 0)

    def test_absent_optional_fields_are_accepted(self) -> None:
        cache = self._load(json.dumps({"a": {"message_count": 0, "modified_ts": 5}}))

        entry = cache.get("a")
        self.assertIsNone(entry.first_message)
        self.assertIsNone(entry.custom_name)

    def test_corrupt_cache_is_rebuilt_by_discovery(self) -> None:
        self.add_session("a", [user("alpha")])
        cache = self._load("garbage")

        result = discover(self.paths, cache)

        self.assertEqual(result.sessions[0].message_count, 1)
        data = json.loads(self.paths.cache.read_text(encoding="utf-8"))
        self.assertEqual(data["a"]["modified_ts"], int(os.stat(result.sessions[0].path).st_mtime))


if __name__ == "__main__":
    unittest.main()
