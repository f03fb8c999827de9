"""
Unit tests for the JSON-file document store.
"""

import json
import tempfile
import unittest
from datetime import datetime, timezone
from pathlib import Path
from unittest import mock

from weather_api.errors import StoreFailure
from weather_api.services.criteria import ClauseKind, Predicate
from weather_api.services.document_store import DocumentStore

T0 = datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc)


def named(name):
    return Predicate.where("name", ClauseKind.EQUALS, name)


class TestCollectionInMemory(unittest.TestCase):

    def setUp(self):
        self.store = DocumentStore()
        self.things = self.store.collection("things")

    def test_insert_assigns_ids_and_keeps_order(self):
        ids = self.things.insert_many([{"name": "a"}, {"name": "b"}, {"name": "c"}])
        self.assertEqual(len(set(ids)), 3)
        self.assertEqual([d["name"] for d in self.things.find()], ["a", "b", "c"])
        self.assertEqual([d["_id"] for d in self.things.find()], ids)

    def test_find_returns_copies(self):
        self.things.insert_one({"name": "a", "tags": ["x"]})
        found = self.things.find_one(named("a"))
        found["tags"].append("y")
        self.assertEqual(self.things.find_one(named("a"))["tags"], ["x"])

    def test_find_one_missing(self):
        self.assertIsNone(self.things.find_one(named("nope")))

    def test_same_collection_object_for_same_name(self):
        self.assertIs(self.store.collection("things"), self.things)

    def test_update_many_counts_only_changed(self):
        self.things.insert_many([{"name": "a", "v": 1}, {"name": "b", "v": 2}, {"name": "c", "v": 1}])
        modified = self.things.update_many(None, {"v": 1})
        self.assertEqual(modified, 1)
        self.assertEqual([d["v"] for d in self.things.find()], [1, 1, 1])

    def test_update_one_touches_first_match_only(self):
        self.things.insert_many([{"name": "a", "v": 1}, {"name": "a", "v": 1}])
        self.assertEqual(self.things.update_one(named("a"), {"v": 5}), 1)
        self.assertEqual([d["v"] for d in self.things.find()], [5, 1])

    def test_replace_one(self):
        doc_id = self.things.insert_one({"name": "a", "v": 1})
        self.assertEqual(self.things.replace_one(doc_id, {"name": "b"}), 1)
        self.assertEqual(self.things.find(), [{"name": "b", "_id": doc_id}])
        self.assertEqual(self.things.replace_one(doc_id, {"name": "b"}), 0)
        self.assertEqual(self.things.replace_one("missing", {"name": "b"}), 0)

    def test_delete(self):
        self.things.insert_many([{"name": "a"}, {"name": "a"}, {"name": "b"}])
        self.assertEqual(self.things.delete_one(named("a")), 1)
        self.assertEqual(self.things.count(), 2)
        self.assertEqual(self.things.delete_many(None), 2)
        self.assertEqual(self.things.find(), [])

    def test_duplicate_id_is_rejected_and_nothing_is_inserted(self):
        self.things.insert_one({"_id": "fixed", "name": "a"})
        with self.assertRaises(StoreFailure):
            self.things.insert_many([{"name": "b"}, {"_id": "fixed", "name": "c"}])
        self.assertEqual(self.things.count(), 1)


class TestPersistence(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.db_file = Path(self.tmp.name) / "weather_db.json"

    def tearDown(self):
        self.tmp.cleanup()

    def test_documents_survive_a_restart(self):
        store = DocumentStore(self.db_file)
        doc_id = store.collection("readings").insert_one({"device_name": "S1", "time": T0})

        reopened = DocumentStore(self.db_file)
        doc = reopened.collection("readings").find_one()
        self.assertEqual(doc["_id"], doc_id)
        self.assertEqual(doc["time"], T0)
        self.assertEqual(doc["time"].tzinfo, timezone.utc)

    def test_dates_are_tagged_in_the_file(self):
        DocumentStore(self.db_file).collection("readings").insert_one({"time": T0})
        raw = json.loads(self.db_file.read_text(encoding="utf-8"))
        self.assertEqual(raw["readings"][0]["time"], {"$date": T0.isoformat()})

    def test_failed_write_leaves_state_unchanged(self):
        store = DocumentStore(self.db_file)
        things = store.collection("things")
        things.insert_many([{"name": "a", "v": 1}, {"name": "b", "v": 1}])

        with mock.patch("weather_api.services.document_store.json.dump", side_effect=OSError("disk full")):
            with self.assertRaises(StoreFailure):
                things.update_many(None, {"v": 2})

        self.assertEqual([d["v"] for d in things.find()], [1, 1])
        self.assertEqual([d["v"] for d in DocumentStore(self.db_file).collection("things").find()], [1, 1])

    def test_corrupt_file_raises(self):
        self.db_file.write_text("{not json", encoding="utf-8")
        with self.assertRaises(StoreFailure):
            DocumentStore(self.db_file)

    def test_missing_file_starts_empty(self):
        store = DocumentStore(self.db_file)
        self.assertEqual(store.collection("things").find(), [])
        self.assertFalse(self.db_file.exists())


if __name__ == "__main__":
    unittest.main()
