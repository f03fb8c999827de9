"""
Readings API Router
===================

Weather readings: add, select, change, delete, and three reports.

Every endpoint needs an ApiKey header. Students can read and bulk insert;
changing or deleting readings takes a Teacher (or Admin).

ALL ENDPOINTS:
-------------
GET    /api/readings/                       - Readings by device name / time range (Student)
GET    /api/readings/max-temperature        - Max temperature per device in a range (Student)
GET    /api/readings/hour?hour=             - Every reading in that hour            (Student)
GET    /api/readings/max-precipitation      - Wettest recent reading for a device   (Student)
GET    /api/readings/{id}                   - One reading                           (Student)
POST   /api/readings/create-many            - Insert many readings                  (Student)
POST   /api/readings/                       - Insert one reading                    (Teacher)
POST   /api/readings/delete-matching        - Delete by criteria                    (Teacher)
PUT    /api/readings/{id}                   - Replace a reading                     (Teacher)
PATCH  /api/readings/{id}/precipitation     - Set precipitation on one reading      (Teacher)
PATCH  /api/readings/                       - Set one property on many              (Teacher)
DELETE /api/readings/{id}                   - Delete one reading                    (Teacher)

Report and fixed paths are declared before /{id} so they are not swallowed
by it.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query

from weather_api.models import (
    DevicePrecipitation,
    DeviceTemperature,
    EnvironmentalReading,
    OperationResult,
    PrecipitationPatchRequest,
    Reading,
    ReadingCreateRequest,
    ReadingCriteria,
    ReadingNameTimeCriteria,
    ReadingPatchRequest,
    Role,
)
from weather_api.routers.dependencies import get_reading_service, require_role
from weather_api.services import ReadingService


router = APIRouter(prefix="/api/readings", tags=["readings"])

student = [Depends(require_role(Role.STUDENT))]
teacher = [Depends(require_role(Role.TEACHER))]


# =============================================================================
# LISTING
# =============================================================================

@router.get("/", response_model=list[Reading], dependencies=student)
async def list_readings(
    device_name: Optional[str] = Query(None, description="Full or partial device name (case-sensitive)"),
    time_from: Optional[datetime] = Query(None, description="At or after (ISO-8601)"),
    time_to: Optional[datetime] = Query(None, description="At or before (ISO-8601)"),
    service: ReadingService = Depends(get_reading_service)
):
    """
    Get readings, optionally narrowed by device name and time range.

    Leave everything out to get every reading.
    """
    criteria = ReadingNameTimeCriteria(
        device_name_partial=device_name,
        time_from=time_from,
        time_to=time_to,
    )
    return service.list_readings(criteria)


# =============================================================================
# REPORTS
# =============================================================================

@router.get("/max-temperature", response_model=list[DeviceTemperature], dependencies=student)
async def max_temperature(
    time_from: datetime = Query(..., description="Range start, inclusive"),
    time_to: datetime = Query(..., description="Range end, inclusive"),
    service: ReadingService = Depends(get_reading_service)
):
    """Each device's highest temperature in the range, with when it happened."""
    return service.max_temperature_per_device(time_from, time_to)


@router.get("/hour", response_model=list[EnvironmentalReading], dependencies=student)
async def readings_for_hour(
    hour: datetime = Query(..., description="Any instant in the hour wanted"),
    service: ReadingService = Depends(get_reading_service)
):
    """
    Every reading taken in the same hour as `hour`.

    e.g. hour=2024-01-01T10:45:00Z returns readings from 10:00:00 up to but
    not including 11:00:00.
    """
    return service.readings_for_hour(hour)


@router.get("/max-precipitation", response_model=DevicePrecipitation, dependencies=student)
async def max_precipitation(
    device_name: str = Query(..., min_length=1, description="Full or partial device name (any case)"),
    service: ReadingService = Depends(get_reading_service)
):
    """Highest precipitation for a device over the trailing months (404 if none)."""
    return service.max_precipitation(device_name)


# =============================================================================
# CREATE / BULK
# =============================================================================

@router.post("/create-many", response_model=OperationResult, dependencies=student)
async def create_many_readings(
    requests: list[ReadingCreateRequest],
    service: ReadingService = Depends(get_reading_service)
):
    return service.create_many(requests)


@router.post("/", response_model=Reading, status_code=201, dependencies=teacher)
async def create_reading(
    request: ReadingCreateRequest,
    service: ReadingService = Depends(get_reading_service)
):
    return service.create_reading(request)


@router.post("/delete-matching", response_model=OperationResult, dependencies=teacher)
async def delete_matching_readings(
    criteria: Optional[ReadingCriteria] = None,
    service: ReadingService = Depends(get_reading_service)
):
    """
    Delete every reading matching the criteria.

    An empty body (or {}) matches, and deletes, every reading.
    """
    return service.delete_matching(criteria)


@router.patch("/", response_model=OperationResult, dependencies=teacher)
async def patch_readings(
    request: ReadingPatchRequest,
    service: ReadingService = Depends(get_reading_service)
):
    """
    Set one property on every reading matching the filter.

    e.g. {"filter": {"device_name_partial": "Woodford"},
          "property_name": "temperatureC", "property_value": "27.84"}
    """
    return service.patch_readings(request)


# =============================================================================
# SINGLE READING
# =============================================================================

@router.get("/{id}", response_model=Reading, dependencies=student)
async def get_reading(
    id: str,
    service: ReadingService = Depends(get_reading_service)
):
    return service.get_reading(id)


@router.put("/{id}", response_model=OperationResult, dependencies=teacher)
async def replace_reading(
    id: str,
    request: ReadingCreateRequest,
    service: ReadingService = Depends(get_reading_service)
):
    return service.replace_reading(id, request)


@router.patch("/{id}/precipitation", response_model=OperationResult, dependencies=teacher)
async def patch_precipitation(
    id: str,
    request: PrecipitationPatchRequest,
    service: ReadingService = Depends(get_reading_service)
):
    return service.patch_precipitation(id, request.value)


@router.delete("/{id}", response_model=OperationResult, dependencies=teacher)
async def delete_reading(
    id: str,
    service: ReadingService = Depends(get_reading_service)
):
    return service.delete_reading(id)
