import sys
import unittest
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1] / "src"))
sys.path.append(str(Path(__file__).resolve().parent))

from upstream import FakeClock

from workflow_gallery.catalog.cache import ContentCache
from workflow_gallery.catalog.schema import WorkflowSummary


def _summary(filename: str) -> WorkflowSummary:
    return WorkflowSummary(name=filename, filename=filename)


class ContentCacheTests(unittest.TestCase):
    def setUp(self) -> None:
        self.clock = FakeClock()
        self.cache = ContentCache(ttl_seconds=300, clock=self.clock)

    def test_starts_empty_and_stale(self):
        self.assertIsNone(self.cache.get())
        self.assertFalse(self.cache.is_fresh())
        self.assertIsNone(self.cache.age_ms())

    def test_fresh_immediately_after_replace(self):
        self.cache.replace([_summary("a.json")], {"root": 1}, {"Uncategorized": 1})

        self.assertTrue(self.cache.is_fresh())
        snapshot = self.cache.get()
        self.assertEqual([w.filename for w in snapshot.workflows], ["a.json"])
        self.assertEqual(snapshot.structure, {"root": 1})
        self.assertEqual(snapshot.categories, {"Uncategorized": 1})

    def test_goes_stale_after_ttl(self):
        self.cache.replace([_summary("a.json")])
        self.clock.advance(299)
        self.assertTrue(self.cache.is_fresh())
        self.clock.advance(1)
        self.assertFalse(self.cache.is_fresh())
        # stale data is still readable
        self.assertIsNotNone(self.cache.get())

    def test_replace_is_wholesale(self):
        self.cache.replace([_summary("a.json"), _summary("b.json")], {"root": 2})
        self.cache.replace([_summary("c.json")])

        snapshot = self.cache.get()
        self.assertEqual([w.filename for w in snapshot.workflows], ["c.json"])
        self.assertEqual(snapshot.structure, {})

    def test_clear_is_idempotent(self):
        self.cache.replace([_summary("a.json")])
        self.cache.clear()
        self.cache.clear()
        self.assertIsNone(self.cache.get())
        self.assertFalse(self.cache.is_fresh())

    def test_age_in_milliseconds(self):
        self.cache.replace([])
        self.clock.advance(1.5)
        self.assertEqual(self.cache.age_ms(), 1500)

    def test_failed_refresh_is_counted_but_keeps_snapshot(self):
        self.cache.replace([_summary("a.json")])
        self.cache.record_failure("upstream down")

        self.assertEqual(self.cache.attempts, 2)
        self.assertEqual(self.cache.last_error, "upstream down")
        self.assertEqual(self.cache.get().workflows[0].filename, "a.json")

        self.cache.replace([])
        self.assertIsNone(self.cache.last_error)

    def test_find_by_filename(self):
        snapshot = self.cache.replace([_summary("a.json"), _summary("b.json")])
        self.assertEqual(snapshot.find("b.json").filename, "b.json")
        self.assertIsNone(snapshot.find("missing.json"))


if __name__ == "__main__":
    unittest.main()
