"""
Input Validation Utilities
===========================

Common validation functions for ids, credentials and user inputs.
"""

import math
import re
from typing import Optional


_UUID_PATTERN = re.compile(
    r'^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$',
    re.IGNORECASE
)

# Matched delimiter pairs that clients sometimes wrap an API key in
_CREDENTIAL_DELIMITERS = (("{", "}"),)


def validate_document_id(document_id: Optional[str]) -> bool:
    """
    Validate a document ID (UUID format).

    Args:
        document_id: Document ID string (UUID)

    Returns:
        True if valid UUID format, False otherwise
    """
    if not document_id:
        return False
    return bool(_UUID_PATTERN.match(document_id))


def normalize_credential(raw: Optional[str]) -> Optional[str]:
    """
    Clean up an ApiKey header value.

    Strips surrounding whitespace and one matched pair of braces, so
    "{abc}" and "abc" name the same key. "{abc" is left alone.

    Returns:
        The bare credential, or None if nothing usable is left
    """
    if raw is None:
        return None
    value = raw.strip()
    for opening, closing in _CREDENTIAL_DELIMITERS:
        if len(value) >= 2 and value.startswith(opening) and value.endswith(closing):
            value = value[1:-1].strip()
            break
    return value or None


def validate_username(username: Optional[str]) -> bool:
    """Usernames must be non-blank and reasonably short."""
    if not username or not username.strip():
        return False
    return len(username) <= 100


def parse_finite_float(raw: str) -> float:
    """
    Parse a measurement value.

    Raises:
        ValueError: if the text is not a number, or is NaN/infinite
    """
    value = float(raw.strip())
    if not math.isfinite(value):
        raise ValueError(f"{raw!r} is not a finite number")
    return value


def validate_inactive_days(days: int) -> bool:
    """
    Validate the age threshold for deleting inactive accounts.

    Returns:
        True if between 1 day and 10 years
    """
    return 1 <= days <= 3650
