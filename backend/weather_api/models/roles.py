"""
Roles
=====

The access levels an account can hold, and the check that decides whether an
account may call an endpoint.

ORDER:
    Admin (0) -> Teacher (1) -> Student (2)

Every protected endpoint declares a required role. An account passes when its
role's ordinal is less than or equal to the required role's ordinal. So a
Student endpoint admits everybody, a Teacher endpoint admits Teachers and
Admins, and an Admin endpoint admits only Admins.
"""

from enum import Enum
from typing import Optional, Union


class Role(str, Enum):
    """
    Access level stored on an account.

    The value is what gets written to the document store and shown in the API.
    """
    ADMIN = "Admin"
    TEACHER = "Teacher"
    STUDENT = "Student"

    @property
    def ordinal(self) -> int:
        return _ORDINALS[self]


_ORDINALS = {
    Role.ADMIN: 0,
    Role.TEACHER: 1,
    Role.STUDENT: 2,
}


def parse_role(value: Union[str, Role, None]) -> Optional[Role]:
    """
    Turn a stored role string into a Role.

    Args:
        value: Role name exactly as stored (e.g. "Teacher")

    Returns:
        The Role, or None if the string is not a known role
    """
    if isinstance(value, Role):
        return value
    if not isinstance(value, str):
        return None
    try:
        return Role(value.strip())
    except ValueError:
        return None


def satisfies(actual: Union[str, Role, None], required: Role) -> bool:
    """
    Ceiling check: does an account holding `actual` pass an endpoint requiring `required`?

    Unknown role strings never pass.
    """
    role = parse_role(actual)
    if role is None:
        return False
    return role.ordinal <= required.ordinal
