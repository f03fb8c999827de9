"""
Reading Service
===============

Storing, selecting, patching and reporting on weather readings.

REPORTS:
-------
- Max temperature per device in a time range
- Every reading in the hour an instant falls in
- Highest precipitation for a device over the trailing months

Readings come back in store order (insertion order) unless a report says
otherwise. Where a report picks "the first" among equal values it is the
first in that order.
"""

import logging
from datetime import datetime
from typing import Callable, Optional

from weather_api.errors import InvalidValue, NotFound
from weather_api.models import (
    DevicePrecipitation,
    DeviceTemperature,
    EnvironmentalReading,
    OperationResult,
    Reading,
    ReadingCreateRequest,
    ReadingCriteria,
    ReadingNameTimeCriteria,
    ReadingPatchRequest,
)
from weather_api.services.criteria import (
    READING_CRITERIA,
    READING_NAME_TIME_CRITERIA,
    ClauseKind,
    Predicate,
    build,
)
from weather_api.services.document_store import DocumentStore
from weather_api.services.patching import READING_PATCH_FIELDS, PatchDispatcher
from weather_api.utils.timeutils import ensure_utc, months_before, truncate_to_hour, utc_now
from weather_api.utils.validation import validate_document_id

logger = logging.getLogger(__name__)


class ReadingService:
    """Reading operations over the "readings" collection."""

    COLLECTION = "readings"

    # How many candidates the precipitation report looks at before taking the first
    PRECIPITATION_CANDIDATES = 5

    def __init__(
        self,
        store: DocumentStore,
        precipitation_window_months: int = 5,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.readings = store.collection(self.COLLECTION)
        self.precipitation_window_months = precipitation_window_months
        self.clock = clock
        self.patcher = PatchDispatcher(self.readings, READING_PATCH_FIELDS, READING_CRITERIA, "readings")

    @staticmethod
    def _to_reading(document: dict) -> Reading:
        data = {k: v for k, v in document.items() if k != "_id"}
        return Reading(id=document["_id"], **data)

    @staticmethod
    def _by_id(reading_id: str) -> Predicate:
        if not validate_document_id(reading_id):
            raise InvalidValue(f"Invalid reading id: {reading_id}")
        return Predicate.where("_id", ClauseKind.EQUALS, reading_id)

    # =========================================================================
    # CREATE
    # =========================================================================

    def create_reading(self, request: ReadingCreateRequest) -> Reading:
        document = request.model_dump()
        document["_id"] = self.readings.insert_one(document)
        return self._to_reading(document)

    def create_many(self, requests: list[ReadingCreateRequest]) -> OperationResult:
        ids = self.readings.insert_many([r.model_dump() for r in requests])
        logger.info(f"Inserted {len(ids)} readings")
        return OperationResult.from_count(
            len(ids),
            success_message=f"Inserted {len(ids)} readings.",
            failure_message="No readings inserted.",
        )

    # =========================================================================
    # READ
    # =========================================================================

    def list_readings(self, criteria: Optional[ReadingNameTimeCriteria] = None) -> list[Reading]:
        predicate = build(criteria, READING_NAME_TIME_CRITERIA)
        return [self._to_reading(doc) for doc in self.readings.find(predicate)]

    def find_readings(self, criteria: Optional[ReadingCriteria] = None) -> list[Reading]:
        """Readings matching the full criteria set (any measurement bounds)."""
        predicate = build(criteria, READING_CRITERIA)
        return [self._to_reading(doc) for doc in self.readings.find(predicate)]

    def get_reading(self, reading_id: str) -> Reading:
        document = self.readings.find_one(self._by_id(reading_id))
        if document is None:
            raise NotFound(f"Reading {reading_id} not found")
        return self._to_reading(document)

    # =========================================================================
    # UPDATE
    # =========================================================================

    def replace_reading(self, reading_id: str, request: ReadingCreateRequest) -> OperationResult:
        """
        Replace every field of a reading.

        Raises:
            NotFound: no reading with that id
        """
        self.get_reading(reading_id)
        modified = self.readings.replace_one(reading_id, request.model_dump())
        return OperationResult.from_count(
            modified,
            success_message="Weather Record Successfully Updated",
            failure_message="Weather Record Not Updated",
        )

    def patch_readings(self, request: ReadingPatchRequest) -> OperationResult:
        return self.patcher.patch(request.property_name, request.property_value, request.filter)

    def patch_precipitation(self, reading_id: str, raw_value: str) -> OperationResult:
        """
        Set precipitation on one reading.

        Raises:
            NotFound: no reading with that id
        """
        self.get_reading(reading_id)
        return self.patcher.patch("precipitationMMH", raw_value, ReadingCriteria(id=reading_id))

    # =========================================================================
    # DELETE
    # =========================================================================

    def delete_reading(self, reading_id: str) -> OperationResult:
        deleted = self.readings.delete_one(self._by_id(reading_id))
        return OperationResult.from_count(
            deleted,
            success_message="Weather Record Successfully Deleted",
            failure_message="Weather Record Not Deleted",
        )

    def delete_matching(self, criteria: Optional[ReadingCriteria]) -> OperationResult:
        """Delete every reading matching the criteria. Empty criteria deletes everything."""
        deleted = self.readings.delete_many(build(criteria, READING_CRITERIA))
        logger.info(f"Deleted {deleted} readings by criteria")
        return OperationResult.from_count(
            deleted,
            success_message=f"Deleted {deleted} readings.",
            failure_message="No readings deleted.",
        )

    # =========================================================================
    # REPORTS
    # =========================================================================

    def max_temperature_per_device(self, time_from: datetime, time_to: datetime) -> list[DeviceTemperature]:
        """
        Highest temperature per device between two times (inclusive).

        For each device the time reported is that of the first reading (in
        store order) that hit the maximum. Devices with no temperature in
        the range are left out.
        """
        in_range = (
            Predicate.where("time", ClauseKind.GTE, time_from)
            & Predicate.where("time", ClauseKind.LTE, time_to)
        )

        best: dict[Optional[str], dict] = {}
        for doc in self.readings.find(in_range):
            temperature = doc.get("temperature_c")
            if temperature is None:
                continue
            device = doc.get("device_name")
            current = best.get(device)
            # Strictly greater keeps the first reading on ties
            if current is None or temperature > current["temperature_c"]:
                best[device] = doc

        return [
            DeviceTemperature(
                device_name=device,
                temperature_c=doc["temperature_c"],
                time=doc["time"],
            )
            for device, doc in best.items()
        ]

    def readings_for_hour(self, instant: datetime) -> list[EnvironmentalReading]:
        """Readings whose time truncates to the same hour as `instant`, oldest first."""
        bucket = truncate_to_hour(instant)
        matches = [
            doc for doc in self.readings.find()
            if isinstance(doc.get("time"), datetime) and truncate_to_hour(doc["time"]) == bucket
        ]
        matches.sort(key=lambda doc: doc["time"])

        return [
            EnvironmentalReading(
                device_name=doc.get("device_name"),
                temperature_c=doc.get("temperature_c"),
                atmospheric_pressure=doc.get("atmospheric_pressure_kpa"),
                radiation=doc.get("solar_radiation_wm2"),
                precipitation=doc.get("precipitation_mmh"),
                time=doc["time"],
            )
            for doc in matches
        ]

    def max_precipitation(self, device_name_partial: str) -> DevicePrecipitation:
        """
        Highest precipitation for devices whose name contains the partial
        (any case) over the trailing window.

        Raises:
            NotFound: no reading in the window for a matching device
        """
        now = ensure_utc(self.clock())
        window_start = months_before(now, self.precipitation_window_months)
        predicate = (
            Predicate.where("time", ClauseKind.GTE, window_start)
            & Predicate.where("time", ClauseKind.LTE, now)
            & Predicate.where("device_name", ClauseKind.ICONTAINS, device_name_partial)
        )

        candidates = self.readings.find(predicate)
        # Stable sort, highest first, readings with no value last
        candidates.sort(
            key=lambda doc: (doc.get("precipitation_mmh") is None, -(doc.get("precipitation_mmh") or 0.0))
        )
        top = candidates[:self.PRECIPITATION_CANDIDATES]
        if not top:
            raise NotFound(f"No readings for '{device_name_partial}' since {window_start.isoformat()}")

        first = top[0]
        return DevicePrecipitation(
            device_name=first.get("device_name"),
            precipitation_mmh=first.get("precipitation_mmh"),
            time=first["time"],
        )
