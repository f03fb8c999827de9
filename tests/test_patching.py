"""
Unit tests for the patch dispatcher.
"""

import unittest
from datetime import datetime, timezone

from weather_api.errors import InvalidValue, UnknownProperty
from weather_api.models import AccountCriteria, ReadingCriteria
from weather_api.services.criteria import ACCOUNT_CRITERIA, READING_CRITERIA
from weather_api.services.document_store import DocumentStore
from weather_api.services.patching import ACCOUNT_PATCH_FIELDS, READING_PATCH_FIELDS, PatchDispatcher
from weather_api.utils.security import verify_secret

T0 = datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc)


class TestReadingPatches(unittest.TestCase):

    def setUp(self):
        self.readings = DocumentStore().collection("readings")
        self.readings.insert_many([
            {"device_name": "Woodford_Sensor", "time": T0, "temperature_c": 10.0},
            {"device_name": "Woodford_Sensor", "time": T0, "temperature_c": 12.0},
            {"device_name": "Hill_Sensor", "time": T0, "temperature_c": 12.0},
        ])
        self.dispatcher = PatchDispatcher(self.readings, READING_PATCH_FIELDS, READING_CRITERIA, "readings")

    def test_sets_property_on_every_match(self):
        result = self.dispatcher.patch("temperatureC", "27.84", ReadingCriteria(device_name_partial="Woodford"))
        self.assertTrue(result.success)
        self.assertEqual(result.records_affected, 2)
        self.assertEqual([d["temperature_c"] for d in self.readings.find()], [27.84, 27.84, 12.0])

    def test_no_criteria_patches_everything(self):
        result = self.dispatcher.patch("deviceName", "Renamed")
        self.assertEqual(result.records_affected, 3)
        self.assertEqual({d["device_name"] for d in self.readings.find()}, {"Renamed"})

    def test_records_already_holding_the_value_are_not_counted(self):
        result = self.dispatcher.patch("temperatureC", "12")
        self.assertEqual(result.records_affected, 1)

    def test_nothing_matched_is_not_a_success(self):
        result = self.dispatcher.patch("temperatureC", "1", ReadingCriteria(device_name_partial="Nope"))
        self.assertFalse(result.success)
        self.assertEqual(result.records_affected, 0)

    def test_time_is_parsed_to_utc(self):
        self.dispatcher.patch("time", "2024-02-01T08:30:00Z")
        expected = datetime(2024, 2, 1, 8, 30, tzinfo=timezone.utc)
        self.assertEqual({d["time"] for d in self.readings.find()}, {expected})

    def test_unknown_property_leaves_store_unchanged(self):
        before = self.readings.find()
        with self.assertRaises(UnknownProperty):
            self.dispatcher.patch("temperatureF", "80")
        with self.assertRaises(UnknownProperty):
            self.dispatcher.patch(None, "80")
        self.assertEqual(self.readings.find(), before)

    def test_unparseable_value_leaves_store_unchanged(self):
        before = self.readings.find()
        for prop, raw in (("temperatureC", "warm"), ("temperatureC", "nan"), ("latitude", "inf"),
                          ("time", "yesterday"), ("windDirection", None)):
            with self.assertRaises(InvalidValue, msg=f"{prop}={raw!r}"):
                self.dispatcher.patch(prop, raw)
        self.assertEqual(self.readings.find(), before)

    def test_property_names_are_listed(self):
        self.assertIn("humidityPercetage", self.dispatcher.property_names)
        self.assertEqual(len(self.dispatcher.property_names), 12)


class TestAccountPatches(unittest.TestCase):

    def setUp(self):
        self.accounts = DocumentStore().collection("accounts")
        self.accounts.insert_many([
            {"username": "alice", "role": "Student", "password_hash": "x", "created": T0},
            {"username": "bob", "role": "Student", "password_hash": "x", "created": T0},
        ])
        self.dispatcher = PatchDispatcher(self.accounts, ACCOUNT_PATCH_FIELDS, ACCOUNT_CRITERIA, "accounts")

    def test_role_must_be_known(self):
        with self.assertRaises(InvalidValue):
            self.dispatcher.patch("userRole", "Superuser")
        result = self.dispatcher.patch("userRole", "Teacher", AccountCriteria(created_from=T0))
        self.assertEqual(result.records_affected, 2)

    def test_password_is_stored_hashed(self):
        self.dispatcher.patch("passwordHash", "s3cret")
        for doc in self.accounts.find():
            self.assertNotEqual(doc["password_hash"], "s3cret")
            self.assertTrue(verify_secret("s3cret", doc["password_hash"]))

    def test_blank_username_is_rejected(self):
        with self.assertRaises(InvalidValue):
            self.dispatcher.patch("userName", "   ")


if __name__ == "__main__":
    unittest.main()
