import json
import os
import tempfile
import unittest
from src.models import PauseEvent
from src.state import PauseEventStore
from src.config import settings

class TestPauseEventStore(unittest.TestCase):
    def setUp(self):
        self.store = PauseEventStore()

    def timestamps(self):
        return [e.timestamp for e in self.store.events]

    def test_add_keeps_order(self):
        for t in (5.0, 1.0, 3.0, 1.0):
            self.store.add(PauseEvent(timestamp=t, duration=1.0))
        self.assertEqual(self.timestamps(), [1.0, 1.0, 3.0, 5.0])

    def test_rejects_malformed(self):
        self.assertIsNone(self.store.add({"timestamp": -1, "duration": 2}))
        self.assertIsNone(self.store.add({"timestamp": 1, "duration": 0}))
        self.assertIsNone(self.store.add({"timestamp": float("nan"), "duration": 1}))
        self.assertIsNone(self.store.add(PauseEvent.model_construct(timestamp=-1.0, duration=2.0)))
        self.assertEqual(len(self.store), 0)

    def test_replace_sorts(self):
        ok = self.store.replace([{"timestamp": 9, "duration": 1}, {"timestamp": 2.5, "duration": 0.4}])
        self.assertTrue(ok)
        self.assertEqual(self.timestamps(), [2.5, 9.0])

    def test_integer_json_values_accepted(self):
        self.assertTrue(self.store.import_json('[{"timestamp": 3, "duration": 2}]'))
        self.assertEqual(self.timestamps(), [3.0])

    def test_non_numeric_fields_rejected(self):
        self.assertIsNone(self.store.add({"timestamp": "5", "duration": 1.0}))
        self.assertIsNone(self.store.add({"timestamp": 1.0, "duration": True}))
        self.assertFalse(self.store.replace([{"timestamp": False, "duration": 1.0}]))
        self.assertEqual(len(self.store), 0)

    def test_replace_is_all_or_nothing(self):
        self.store.add(PauseEvent(timestamp=4.0, duration=1.0))
        ok = self.store.replace([{"timestamp": 1, "duration": 1}, {"timestamp": -1, "duration": 2}])
        self.assertFalse(ok)
        self.assertEqual(self.timestamps(), [4.0])

    def test_import_rejects_garbage(self):
        self.store.add(PauseEvent(timestamp=4.0, duration=1.0))
        for payload in ("not json", '{"timestamp": 1, "duration": 1}', '[{"timestamp": 1}]',
                        '[{"timestamp": -1, "duration": 2}]',
                        '[{"timestamp": false, "duration": true}]',
                        '[{"timestamp": "5", "duration": "1.5"}]'):
            self.assertFalse(self.store.import_json(payload))
        self.assertEqual(self.timestamps(), [4.0])

    def test_export_layout(self):
        self.store.import_json('[{"timestamp": 3, "duration": 1.5}, {"timestamp": 1.2, "duration": 0.5}]')
        exported = self.store.export_json()
        self.assertEqual(json.loads(exported), [
            {"timestamp": 1.2, "duration": 0.5},
            {"timestamp": 3.0, "duration": 1.5},
        ])
        self.assertIn("\n  ", exported)

    def test_events_returned_by_value(self):
        self.store.add(PauseEvent(timestamp=1.0, duration=1.0))
        self.store.events.clear()
        self.assertEqual(len(self.store), 1)

    def test_persistence(self):
        settings.PERSIST_ENABLED = True
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "pause_map.json")
            store = PauseEventStore(path)
            store.add(PauseEvent(timestamp=8.0, duration=2.0))
            store.add(PauseEvent(timestamp=2.0, duration=1.0))
            store.save()

            reloaded = PauseEventStore(path)
            self.assertEqual([e.timestamp for e in reloaded.events], [2.0, 8.0])

    def test_corrupt_file_starts_empty(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "pause_map.json")
            with open(path, "w") as f:
                f.write("{broken")
            self.assertEqual(len(PauseEventStore(path)), 0)

if __name__ == '__main__':
    unittest.main()
