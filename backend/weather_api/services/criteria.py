"""
Criteria Filters
================

Turns a sparse criteria object (every field optional) into a Predicate the
document store can evaluate.

HOW IT WORKS:
------------
Each entity kind has a table of Criterion entries. An entry says "attribute X
of the criteria object, when present, adds clause KIND on document field Y".
build() walks the table and ANDs a clause for every attribute that is set.
Nothing set means the predicate matches every document.

CLAUSE KINDS:
------------
    eq         - field equals the value exactly
    contains   - field contains the value as a literal substring (case-sensitive)
    icontains  - same, ignoring case
    gte / lte  - inclusive lower / upper bound

A document whose field is missing, null, or not comparable with the operand
never matches a contains/gte/lte clause.
"""

import re
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Iterable, Optional

from weather_api.utils.timeutils import ensure_utc


class ClauseKind(str, Enum):
    EQUALS = "eq"
    CONTAINS = "contains"
    ICONTAINS = "icontains"
    GTE = "gte"
    LTE = "lte"


@dataclass(frozen=True)
class Clause:
    """One condition on one document field."""
    field: str
    kind: ClauseKind
    operand: Any

    def matches(self, document: dict) -> bool:
        value = document.get(self.field)

        if self.kind is ClauseKind.EQUALS:
            return value == self.operand

        if value is None:
            return False

        if self.kind in (ClauseKind.CONTAINS, ClauseKind.ICONTAINS):
            if not isinstance(value, str):
                return False
            flags = re.IGNORECASE if self.kind is ClauseKind.ICONTAINS else 0
            # The partial is a literal: "A.1" must not match "AB1"
            return re.search(re.escape(str(self.operand)), value, flags) is not None

        try:
            if self.kind is ClauseKind.GTE:
                return value >= self.operand
            return value <= self.operand
        except TypeError:
            return False


@dataclass(frozen=True)
class Predicate:
    """
    AND of clauses. The empty predicate matches everything.

    Predicates are immutable; `a & b` returns a new predicate holding the
    clauses of both.
    """
    clauses: tuple = ()

    @classmethod
    def everything(cls) -> "Predicate":
        return cls()

    @classmethod
    def where(cls, field: str, kind: ClauseKind, operand: Any) -> "Predicate":
        if isinstance(operand, datetime):
            operand = ensure_utc(operand)
        return cls((Clause(field, kind, operand),))

    def __and__(self, other: "Predicate") -> "Predicate":
        return Predicate(self.clauses + other.clauses)

    def matches(self, document: dict) -> bool:
        return all(clause.matches(document) for clause in self.clauses)

    __call__ = matches


@dataclass(frozen=True)
class Criterion:
    """Maps one criteria attribute to one clause on a document field."""
    attribute: str
    field: str
    kind: ClauseKind


def ranged(field: str) -> tuple:
    """`<field>_min` / `<field>_max` inclusive bounds on a field."""
    return (
        Criterion(f"{field}_min", field, ClauseKind.GTE),
        Criterion(f"{field}_max", field, ClauseKind.LTE),
    )


def build(criteria: Optional[Any], table: Iterable[Criterion]) -> Predicate:
    """
    Build a predicate from a criteria object.

    Args:
        criteria: Any object (usually a pydantic model) with the attributes
                  named in the table. None means "no criteria".
        table: Criterion entries for this entity kind

    Returns:
        AND of one clause per present attribute. Blank strings count as absent.
    """
    predicate = Predicate.everything()
    if criteria is None:
        return predicate

    for criterion in table:
        value = getattr(criteria, criterion.attribute, None)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        predicate &= Predicate.where(criterion.field, criterion.kind, value)

    return predicate


# =============================================================================
# TABLES
# =============================================================================

READING_MEASUREMENT_FIELDS = (
    "precipitation_mmh",
    "latitude",
    "longitude",
    "temperature_c",
    "atmospheric_pressure_kpa",
    "max_wind_speed_ms",
    "solar_radiation_wm2",
    "vapor_pressure_kpa",
    "humidity_percentage",
    "wind_direction",
)

READING_NAME_TIME_CRITERIA = (
    Criterion("device_name_partial", "device_name", ClauseKind.CONTAINS),
    Criterion("time_from", "time", ClauseKind.GTE),
    Criterion("time_to", "time", ClauseKind.LTE),
)

READING_CRITERIA = (
    Criterion("id", "_id", ClauseKind.EQUALS),
    *READING_NAME_TIME_CRITERIA,
    *(criterion for field in READING_MEASUREMENT_FIELDS for criterion in ranged(field)),
)

ACCOUNT_CRITERIA = (
    Criterion("id", "_id", ClauseKind.EQUALS),
    Criterion("created_from", "created", ClauseKind.GTE),
    Criterion("created_to", "created", ClauseKind.LTE),
)
