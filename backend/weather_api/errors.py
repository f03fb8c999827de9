"""
Errors
======

Every failure the services can report to a caller.

Each error carries the HTTP status code it maps to, so the exception handler
in main.py can turn it into a response without a lookup table. Services raise
these; routers let them bubble up.
"""

from typing import Optional


class WeatherApiError(Exception):
    """Base class for all errors that end a request."""

    status_code: int = 500
    default_message: str = "Internal error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class MissingCredential(WeatherApiError):
    """No ApiKey header on a protected request."""
    status_code = 401
    default_message = "No API Key provided"


class Unauthorized(WeatherApiError):
    """
    Credential unknown, or known but the role is not high enough.

    Both cases use the same message so callers can't probe for valid keys.
    """
    status_code = 403
    default_message = "User does not exist or is not authorized."


class UnknownProperty(WeatherApiError):
    status_code = 400
    default_message = "No Properties Matched"


class InvalidValue(WeatherApiError):
    status_code = 400
    default_message = "Invalid value"


class NotFound(WeatherApiError):
    status_code = 404
    default_message = "Not found"


class Conflict(WeatherApiError):
    status_code = 409
    default_message = "Username is taken."


class StoreFailure(WeatherApiError):
    """The document store could not complete an operation."""
    status_code = 500
    default_message = "Document store failure"
