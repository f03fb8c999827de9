"""
Models Package
==============

All data models live here.
Import from here instead of the individual files.

Example:
    from weather_api.models import Role, ReadingCriteria
"""

from .roles import Role, parse_role, satisfies
from .operations import OperationResult
from .account import (
    Account,
    AccountCreateRequest,
    AccountReplaceRequest,
    AccountPatchRequest,
    AccountCriteria,
    LoginRequest,
    AccountProfile,
    AccountResponse,
    LoginResponse,
)
from .reading import (
    Reading,
    ReadingCreateRequest,
    ReadingCriteria,
    ReadingNameTimeCriteria,
    ReadingPatchRequest,
    PrecipitationPatchRequest,
    DeviceTemperature,
    EnvironmentalReading,
    DevicePrecipitation,
)

__all__ = [
    "Role",
    "parse_role",
    "satisfies",
    "OperationResult",
    "Account",
    "AccountCreateRequest",
    "AccountReplaceRequest",
    "AccountPatchRequest",
    "AccountCriteria",
    "LoginRequest",
    "AccountProfile",
    "AccountResponse",
    "LoginResponse",
    "Reading",
    "ReadingCreateRequest",
    "ReadingCriteria",
    "ReadingNameTimeCriteria",
    "ReadingPatchRequest",
    "PrecipitationPatchRequest",
    "DeviceTemperature",
    "EnvironmentalReading",
    "DevicePrecipitation",
]
