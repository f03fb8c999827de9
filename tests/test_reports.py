"""
Unit tests for ReadingService: CRUD and the three reports.
"""

import unittest
from datetime import datetime, timedelta, timezone

from weather_api.errors import InvalidValue, NotFound
from weather_api.models import ReadingCreateRequest, ReadingCriteria, ReadingNameTimeCriteria
from weather_api.services import DocumentStore, ReadingService

T0 = datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc)
NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


def at(minutes=0, **fields):
    return ReadingCreateRequest(time=T0 + timedelta(minutes=minutes), **fields)


class ReadingServiceTestCase(unittest.TestCase):

    def setUp(self):
        self.service = ReadingService(DocumentStore(), precipitation_window_months=5, clock=lambda: NOW)


class TestReadingCrud(ReadingServiceTestCase):

    def test_create_and_get(self):
        created = self.service.create_reading(at(device_name="S1", latitude=41.29, longitude=-82.22))
        fetched = self.service.get_reading(created.id)
        self.assertEqual(fetched.device_name, "S1")
        self.assertEqual(fetched.location, "41.29, -82.22")

    def test_location_needs_both_coordinates(self):
        created = self.service.create_reading(at(device_name="S1", latitude=41.29))
        self.assertIsNone(created.location)

    def test_get_bad_or_missing_id(self):
        with self.assertRaises(InvalidValue):
            self.service.get_reading("123")
        with self.assertRaises(NotFound):
            self.service.get_reading("00000000-0000-0000-0000-000000000000")

    def test_list_by_name_and_time(self):
        self.service.create_many([
            at(0, device_name="A.1"),
            at(10, device_name="AB1"),
            at(20, device_name="A.1"),
        ])
        found = self.service.list_readings(ReadingNameTimeCriteria(device_name_partial="A.1", time_to=T0 + timedelta(minutes=10)))
        self.assertEqual([(r.device_name, r.time) for r in found], [("A.1", T0)])
        self.assertEqual(len(self.service.list_readings()), 3)

    def test_replace(self):
        created = self.service.create_reading(at(device_name="S1", temperature_c=1.0))
        result = self.service.replace_reading(created.id, at(device_name="S2"))
        self.assertTrue(result.success)
        replaced = self.service.get_reading(created.id)
        self.assertEqual(replaced.device_name, "S2")
        self.assertIsNone(replaced.temperature_c)

    def test_patch_precipitation(self):
        created = self.service.create_reading(at(device_name="S1"))
        self.assertTrue(self.service.patch_precipitation(created.id, "1.25").success)
        self.assertEqual(self.service.get_reading(created.id).precipitation_mmh, 1.25)
        with self.assertRaises(InvalidValue):
            self.service.patch_precipitation(created.id, "lots")
        with self.assertRaises(NotFound):
            self.service.patch_precipitation("00000000-0000-0000-0000-000000000000", "1")

    def test_delete_matching(self):
        self.service.create_many([
            at(device_name="S1", temperature_c=5.0),
            at(device_name="S1", temperature_c=25.0),
            at(device_name="S2", temperature_c=30.0),
        ])
        result = self.service.delete_matching(ReadingCriteria(device_name_partial="S1", temperature_c_min=20.0))
        self.assertEqual(result.records_affected, 1)
        self.assertEqual(len(self.service.find_readings()), 2)

    def test_delete_one(self):
        created = self.service.create_reading(at(device_name="S1"))
        self.assertTrue(self.service.delete_reading(created.id).success)
        self.assertFalse(self.service.delete_reading(created.id).success)


class TestMaxTemperature(ReadingServiceTestCase):

    def test_max_per_device_with_its_time(self):
        self.service.create_many([
            at(0, device_name="S1", temperature_c=10.0),
            at(10, device_name="S1", temperature_c=20.0),
            at(20, device_name="S1", temperature_c=15.0),
        ])
        report = self.service.max_temperature_per_device(T0, T0 + timedelta(hours=1))
        self.assertEqual(len(report), 1)
        self.assertEqual(report[0].device_name, "S1")
        self.assertEqual(report[0].temperature_c, 20.0)
        self.assertEqual(report[0].time, T0 + timedelta(minutes=10))

    def test_range_is_inclusive_and_limits_readings(self):
        self.service.create_many([
            at(-1, device_name="S1", temperature_c=99.0),
            at(0, device_name="S1", temperature_c=10.0),
            at(60, device_name="S1", temperature_c=12.0),
            at(61, device_name="S1", temperature_c=98.0),
        ])
        report = self.service.max_temperature_per_device(T0, T0 + timedelta(hours=1))
        self.assertEqual((report[0].temperature_c, report[0].time), (12.0, T0 + timedelta(hours=1)))

    def test_tie_reports_first_in_store_order(self):
        self.service.create_many([
            at(30, device_name="S1", temperature_c=20.0),
            at(10, device_name="S1", temperature_c=20.0),
        ])
        report = self.service.max_temperature_per_device(T0, T0 + timedelta(hours=1))
        self.assertEqual(report[0].time, T0 + timedelta(minutes=30))

    def test_devices_without_temperatures_are_left_out(self):
        self.service.create_many([
            at(0, device_name="S1", temperature_c=10.0),
            at(0, device_name="S2"),
        ])
        report = self.service.max_temperature_per_device(T0, T0 + timedelta(hours=1))
        self.assertEqual([r.device_name for r in report], ["S1"])


class TestHourBucket(ReadingServiceTestCase):

    def test_hour_bucket_bounds(self):
        self.service.create_many([
            at(-1, device_name="before"),
            at(59, device_name="end"),
            at(60, device_name="next_hour"),
            at(0, device_name="start", temperature_c=3.0, atmospheric_pressure_kpa=101.2,
               solar_radiation_wm2=250.0, precipitation_mmh=0.4),
            at(45, device_name="middle"),
        ])
        report = self.service.readings_for_hour(T0 + timedelta(minutes=45))
        self.assertEqual([r.device_name for r in report], ["start", "middle", "end"])

        first = report[0]
        self.assertEqual(first.time, T0)
        self.assertEqual(first.temperature_c, 3.0)
        self.assertEqual(first.atmospheric_pressure, 101.2)
        self.assertEqual(first.radiation, 250.0)
        self.assertEqual(first.precipitation, 0.4)

    def test_empty_hour(self):
        self.assertEqual(self.service.readings_for_hour(T0), [])


class TestMaxPrecipitation(ReadingServiceTestCase):

    def setUp(self):
        super().setUp()
        self.service.create_many([
            ReadingCreateRequest(device_name="Woodford_Sensor", time=datetime(2024, 3, 1, tzinfo=timezone.utc), precipitation_mmh=1.0),
            ReadingCreateRequest(device_name="Woodford_Sensor", time=datetime(2024, 5, 1, tzinfo=timezone.utc), precipitation_mmh=4.2),
            ReadingCreateRequest(device_name="Woodford_Sensor", time=datetime(2024, 5, 2, tzinfo=timezone.utc)),
            ReadingCreateRequest(device_name="Woodford_Sensor", time=datetime(2023, 12, 1, tzinfo=timezone.utc), precipitation_mmh=9.9),
            ReadingCreateRequest(device_name="Hill_Sensor", time=datetime(2024, 4, 1, tzinfo=timezone.utc), precipitation_mmh=7.0),
        ])

    def test_highest_in_window_any_case(self):
        result = self.service.max_precipitation("woodford")
        self.assertEqual(result.device_name, "Woodford_Sensor")
        self.assertEqual(result.precipitation_mmh, 4.2)
        self.assertEqual(result.time, datetime(2024, 5, 1, tzinfo=timezone.utc))

    def test_only_nulls_still_returns_a_reading(self):
        self.service.create_reading(ReadingCreateRequest(device_name="Dry", time=datetime(2024, 6, 1, tzinfo=timezone.utc)))
        result = self.service.max_precipitation("dry")
        self.assertIsNone(result.precipitation_mmh)

    def test_no_candidates(self):
        with self.assertRaises(NotFound):
            self.service.max_precipitation("Nobody")


if __name__ == "__main__":
    unittest.main()
