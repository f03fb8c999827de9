"""
Patch Dispatcher
================

"Set property X to value V on every record matching filter F", for any
property in a fixed table.

Clients send the property name and the new value as strings. The table maps
each property name to the stored field and a parser that turns the string
into the field's type. One dispatcher per collection:

    dispatcher = PatchDispatcher(collection, READING_PATCH_FIELDS, READING_CRITERIA, "readings")
    dispatcher.patch("temperatureC", "27.84", criteria)

ORDER OF CHECKS:
---------------
1. Unknown property name -> UnknownProperty
2. Value does not parse -> InvalidValue
3. One update_many over all matching records

Steps 1 and 2 happen before the store is touched, so a rejected patch
changes nothing.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping, Optional

from weather_api.errors import InvalidValue, UnknownProperty
from weather_api.models import OperationResult, parse_role
from weather_api.services.criteria import Criterion, build
from weather_api.services.document_store import Collection
from weather_api.utils.security import hash_secret
from weather_api.utils.timeutils import parse_timestamp
from weather_api.utils.validation import parse_finite_float, validate_username

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PatchField:
    """Stored field name plus the parser for its raw string value."""
    field: str
    parse: Callable[[str], Any]


# =============================================================================
# PARSERS
# =============================================================================
# Each raises ValueError (or TypeError) when the raw value is unusable.

def parse_text(raw: str) -> str:
    return raw


def parse_username(raw: str) -> str:
    if not validate_username(raw):
        raise ValueError("username must be non-blank and at most 100 characters")
    return raw.strip()


def parse_password(raw: str) -> str:
    if not raw:
        raise ValueError("password must not be empty")
    return hash_secret(raw)


def parse_role_name(raw: str) -> str:
    role = parse_role(raw)
    if role is None:
        raise ValueError(f"{raw!r} is not a known role")
    return role.value


# =============================================================================
# TABLES
# =============================================================================

READING_PATCH_FIELDS = {
    "deviceName": PatchField("device_name", parse_text),
    "precipitationMMH": PatchField("precipitation_mmh", parse_finite_float),
    "time": PatchField("time", parse_timestamp),
    "latitude": PatchField("latitude", parse_finite_float),
    "longitude": PatchField("longitude", parse_finite_float),
    "temperatureC": PatchField("temperature_c", parse_finite_float),
    "atmosphericPressureKPA": PatchField("atmospheric_pressure_kpa", parse_finite_float),
    "maxWindSpeedMS": PatchField("max_wind_speed_ms", parse_finite_float),
    "solarRadiationWM2": PatchField("solar_radiation_wm2", parse_finite_float),
    "vaporPressureKPA": PatchField("vapor_pressure_kpa", parse_finite_float),
    "humidityPercetage": PatchField("humidity_percentage", parse_finite_float),
    "windDirection": PatchField("wind_direction", parse_finite_float),
}

ACCOUNT_PATCH_FIELDS = {
    "userName": PatchField("username", parse_username),
    "passwordHash": PatchField("password_hash", parse_password),
    "userRole": PatchField("role", parse_role_name),
}


class PatchDispatcher:
    """Applies single-property patches to one collection."""

    def __init__(
        self,
        collection: Collection,
        fields: Mapping[str, PatchField],
        criteria_table: Iterable[Criterion],
        label: str,
    ):
        """
        Args:
            collection: Where the records live
            fields: Property name -> PatchField
            criteria_table: How to turn the request filter into a predicate
            label: Plural noun for messages ("readings", "accounts")
        """
        self.collection = collection
        self.fields = dict(fields)
        self.criteria_table = tuple(criteria_table)
        self.label = label

    @property
    def property_names(self) -> list[str]:
        return sorted(self.fields)

    def patch(self, property_name: Optional[str], raw_value: Optional[str], criteria: Any = None) -> OperationResult:
        """
        Set one property on every record matching `criteria`.

        Raises:
            UnknownProperty: property_name is not in the table
            InvalidValue: raw_value does not parse for that property
        """
        target = self.fields.get(property_name or "")
        if target is None:
            raise UnknownProperty(
                f"No Properties Matched: {property_name!r}. "
                f"Expected one of: {', '.join(self.property_names)}"
            )

        if raw_value is None:
            raise InvalidValue(f"A value is required for {property_name}")
        try:
            value = target.parse(raw_value)
        except (ValueError, TypeError) as e:
            raise InvalidValue(f"Invalid value for {property_name}: {e}") from e

        predicate = build(criteria, self.criteria_table)
        modified = self.collection.update_many(predicate, {target.field: value})
        logger.info(f"Patched {property_name} on {modified} {self.label}")

        return OperationResult.from_count(
            modified,
            success_message=f"{property_name} successfully updated for {modified} {self.label}.",
            failure_message=f"No {self.label} were updated.",
        )
