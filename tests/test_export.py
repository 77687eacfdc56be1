import unittest
from unittest import mock

from claude_sessions.data.cache import MetadataCache
from claude_sessions.data.discovery import discover
from claude_sessions.data.errors import IoError
from claude_sessions.data.export import export_session
from store_fixtures import StoreTestCase, assistant, user


class ExportTests(StoreTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.add_session("abc", [
            user("Caveat: generated"),
            user("How do I sort a list?"),
            assistant("Use sorted()."),
            user([{"type": "tool_result", "content": "done"}]),
            user("Thanks"),
            assistant("You're welcome."),
        ])
        self.session = discover(self.paths, MetadataCache(self.paths.cache)).sessions[0]
        self.dest = self.tmp / "exports" / "nested"

    def test_writes_alternating_turns(self) -> None:
        written = export_session(self.session, self.dest)

        self.assertEqual(written, self.dest / "abc.txt")
        self.assertEqual(written.read_text(encoding="utf-8"), (
            "[USER]\nHow do I sort a list?\n\n"
            "[ASSISTANT]\nUse sorted().\n\n"
            "[USER]\nThanks\n\n"
            "[ASSISTANT]\nYou're welcome.\n"
        ))

    def test_exporting_twice_is_byte_identical(self) -> None:
        first = export_session(self.session, self.dest).read_bytes()
        second = export_session(self.session, self.dest).read_bytes()

        self.assertEqual(first, second)
        self.assertEqual(sorted(p.name for p in self.dest.iterdir()), ["abc.txt"])

    def test_uncreatable_directory_raises_io_error(self) -> None:
        blocker = self.tmp / "file"
        blocker.write_text("x", encoding="utf-8")

        with self.assertRaises(IoError):
            export_session(self.session, blocker / "sub")

    def test_failed_write_keeps_previous_export(self) -> None:
        written = export_session(self.session, self.dest)
        before = written.read_bytes()

        with mock.patch("claude_sessions.utils.fileio.os.replace", side_effect=OSError(28, "No space left")):
            with self.assertRaises(IoError):
                export_session(self.session, self.dest)

        self.assertEqual(written.read_bytes(), before)
        self.assertEqual(sorted(p.name for p in self.dest.iterdir()), ["abc.txt"])


if __name__ == "__main__":
    unittest.main()
