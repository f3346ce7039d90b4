import sys
import unittest
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1] / "src"))

from workflow_gallery.catalog.shapes import MIN_DATA_ARRAY_LENGTH, decode_aggregate


class AggregateShapeTests(unittest.TestCase):
    def test_plain_list(self):
        decoded = decode_aggregate([{"id": 1}, {"id": 2}, {"id": 3}])
        self.assertEqual(decoded.kind, "list")
        self.assertEqual(len(decoded.items), 3)

    def test_workflows_property(self):
        decoded = decode_aggregate({"version": 2, "workflows": [{"name": "a"}, {"name": "b"}]})
        self.assertEqual(decoded.kind, "workflows_property")
        self.assertEqual(len(decoded.items), 2)

    def test_workflows_property_wins_over_long_arrays(self):
        decoded = decode_aggregate({"workflows": [{"name": "a"}], "other": list(range(50))})
        self.assertEqual(decoded.kind, "workflows_property")
        self.assertEqual(decoded.items, [{"name": "a"}])

    def test_numeric_keyed_object(self):
        document = {f"{i:04d}": {"name": f"flow {i}"} for i in range(1, 121)}
        decoded = decode_aggregate(document)

        self.assertEqual(decoded.kind, "keyed_object")
        self.assertEqual(len(decoded.items), 120)
        self.assertEqual(decoded.items[0], {"id": "0001", "name": "flow 1"})

    def test_numeric_keyed_object_keeps_existing_id(self):
        decoded = decode_aggregate({"1": {"id": "abc", "name": "x"}})
        self.assertEqual(decoded.items, [{"id": "abc", "name": "x"}])

    def test_single_long_data_array(self):
        records = [{"name": f"flow {i}"} for i in range(MIN_DATA_ARRAY_LENGTH + 1)]
        decoded = decode_aggregate({"generated": "2024-01-01", "items": records, "tags": ["a"]})

        self.assertEqual(decoded.kind, "data_array")
        self.assertEqual(decoded.source_key, "items")
        self.assertEqual(len(decoded.items), MIN_DATA_ARRAY_LENGTH + 1)

    def test_short_array_is_not_treated_as_data(self):
        decoded = decode_aggregate({"items": [{"name": "only"}]})
        self.assertFalse(decoded.recognized)
        self.assertEqual(decoded.items, [])

    def test_two_long_arrays_are_ambiguous(self):
        long = [{}] * (MIN_DATA_ARRAY_LENGTH + 5)
        decoded = decode_aggregate({"a": long, "b": long})
        self.assertEqual(decoded.kind, "unrecognized")

    def test_scalars_and_mixed_keys_are_unrecognized(self):
        for document in ("text", 42, None, {}, {"1": {}, "name": "x"}):
            with self.subTest(document=document):
                self.assertEqual(decode_aggregate(document).kind, "unrecognized")


if __name__ == "__main__":
    unittest.main()
