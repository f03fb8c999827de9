"""
Reading Models
==============
Pydantic models for weather station readings.

- Reading: one stored measurement set from a device
- ReadingCreateRequest: what clients send to add or replace a reading
- ReadingCriteria / ReadingNameTimeCriteria: filter fields for selecting readings
- ReadingPatchRequest: set one property on all matching readings
- Report models: shapes returned by the aggregation endpoints

All measurement fields are optional; a station that has no rain gauge simply
leaves precipitation empty.
"""

from typing import Optional

from pydantic import BaseModel, Field, computed_field

from weather_api.models.common import OptionalUtcDatetime, UtcDatetime


# =============================================================================
# MEASUREMENTS
# =============================================================================

class Measurements(BaseModel):
    """
    The measurement fields every reading carries.

    Units:
        precipitation_mmh: mm/h
        temperature_c: °C
        atmospheric_pressure_kpa / vapor_pressure_kpa: kPa
        max_wind_speed_ms: m/s
        solar_radiation_wm2: W/m²
        humidity_percentage: %
        wind_direction: degrees
    """
    device_name: Optional[str] = Field(None, description="Station/device name", examples=["Woodford_Sensor"])
    precipitation_mmh: Optional[float] = None
    time: UtcDatetime = Field(..., description="When the reading was taken")
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    temperature_c: Optional[float] = None
    atmospheric_pressure_kpa: Optional[float] = None
    max_wind_speed_ms: Optional[float] = None
    solar_radiation_wm2: Optional[float] = None
    vapor_pressure_kpa: Optional[float] = None
    humidity_percentage: Optional[float] = None
    wind_direction: Optional[float] = None


class ReadingCreateRequest(Measurements):
    """
    Request body for adding (or fully replacing) a reading.

    Example Request:
        POST /api/readings
        {
            "device_name": "Woodford_Sensor",
            "time": "2024-01-01T10:45:00Z",
            "temperature_c": 21.4,
            "precipitation_mmh": 0.2
        }
    """


class Reading(Measurements):
    id: str = Field(..., description="Unique identifier (UUID)")

    @computed_field
    @property
    def location(self) -> Optional[str]:
        """Latitude and longitude as "<lat>, <lon>" when both are known."""
        if self.latitude is None or self.longitude is None:
            return None
        return f"{self.latitude}, {self.longitude}"


# =============================================================================
# CRITERIA
# =============================================================================

class ReadingNameTimeCriteria(BaseModel):
    """Device name (full or partial) and/or a time range."""
    device_name_partial: Optional[str] = Field(None, description="Case-sensitive substring of the device name")
    time_from: OptionalUtcDatetime = None
    time_to: OptionalUtcDatetime = None


class ReadingCriteria(ReadingNameTimeCriteria):
    """
    Full set of reading filters.

    Every numeric field has an inclusive `_min` and `_max` bound. Fields that
    are left out are ignored; a reading with no value for a bounded field
    does not match.
    """
    id: Optional[str] = Field(None, description="Exact reading id")
    precipitation_mmh_min: Optional[float] = None
    precipitation_mmh_max: Optional[float] = None
    latitude_min: Optional[float] = None
    latitude_max: Optional[float] = None
    longitude_min: Optional[float] = None
    longitude_max: Optional[float] = None
    temperature_c_min: Optional[float] = None
    temperature_c_max: Optional[float] = None
    atmospheric_pressure_kpa_min: Optional[float] = None
    atmospheric_pressure_kpa_max: Optional[float] = None
    max_wind_speed_ms_min: Optional[float] = None
    max_wind_speed_ms_max: Optional[float] = None
    solar_radiation_wm2_min: Optional[float] = None
    solar_radiation_wm2_max: Optional[float] = None
    vapor_pressure_kpa_min: Optional[float] = None
    vapor_pressure_kpa_max: Optional[float] = None
    humidity_percentage_min: Optional[float] = None
    humidity_percentage_max: Optional[float] = None
    wind_direction_min: Optional[float] = None
    wind_direction_max: Optional[float] = None


class ReadingPatchRequest(BaseModel):
    """
    Set one property on every reading matching a filter.

    Property names: deviceName, precipitationMMH, time, latitude, longitude,
    temperatureC, atmosphericPressureKPA, maxWindSpeedMS, solarRadiationWM2,
    vaporPressureKPA, humidityPercetage, windDirection.

    Values are always sent as strings and converted to the property's type,
    e.g. property_name "temperatureC" with property_value "27.84".
    """
    filter: Optional[ReadingCriteria] = None
    property_name: str
    property_value: str


class PrecipitationPatchRequest(BaseModel):
    value: str = Field(..., description="New precipitation in mm/h, as a string", examples=["1.25"])


# =============================================================================
# REPORTS
# =============================================================================

class DeviceTemperature(BaseModel):
    """Highest temperature a device recorded in a range, and when."""
    device_name: Optional[str]
    temperature_c: float
    time: UtcDatetime


class EnvironmentalReading(BaseModel):
    """Cut-down reading returned by the hour report."""
    device_name: Optional[str]
    temperature_c: Optional[float] = None
    atmospheric_pressure: Optional[float] = None
    radiation: Optional[float] = None
    precipitation: Optional[float] = None
    time: UtcDatetime


class DevicePrecipitation(BaseModel):
    device_name: Optional[str]
    precipitation_mmh: Optional[float]
    time: UtcDatetime
