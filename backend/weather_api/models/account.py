"""
Account Models
==============
Pydantic models for API accounts.

- Request models: What clients send when creating, replacing, patching or
  logging in
- Response models: What we send back (never the password hash)
- Criteria: Optional filter fields for bulk account operations
"""

from typing import Optional

from pydantic import BaseModel, Field

from weather_api.models.common import OptionalUtcDatetime, UtcDatetime
from weather_api.models.roles import Role


# =============================================================================
# STORED ACCOUNT
# =============================================================================

class Account(BaseModel):
    """
    An account as held in the store.

    Fields:
        id: Unique identifier (UUID)
        username: Login name, unique at creation time
        password_hash: Salted hash of the password
        role: Role name. Kept as a plain string so a corrupted value loads
              and then simply fails every role check.
        created: When the account was created. Never changes.
        last_seen: Last request that authenticated with this account
        credential: The API key. Assigned at creation, never changes.
        expiry: Reserved, not enforced
    """
    id: str
    username: str
    password_hash: str
    role: str = Role.STUDENT.value
    created: UtcDatetime
    last_seen: UtcDatetime
    credential: str
    expiry: OptionalUtcDatetime = None


# =============================================================================
# REQUEST MODELS
# =============================================================================

class AccountCreateRequest(BaseModel):
    """
    Request body for creating an account.

    Example Request:
        POST /api/accounts
        {
            "username": "alice",
            "password": "correct horse",
            "role": "Teacher"
        }
    """
    username: str = Field(..., min_length=1, max_length=100, examples=["alice"])
    password: str = Field(..., min_length=1, description="Plaintext, hashed before storage")
    role: Role = Field(default=Role.STUDENT, description="Admin, Teacher or Student")


class AccountReplaceRequest(BaseModel):
    """
    Request body for replacing an account's editable fields.

    Created time, last seen, credential and expiry are carried over from the
    stored account.
    """
    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1)
    role: Role


class LoginRequest(BaseModel):
    username: str
    password: str


class AccountCriteria(BaseModel):
    """
    Selects accounts for bulk operations. Every field is optional; the
    ones given are ANDed together. No fields means every account.
    """
    id: Optional[str] = Field(None, description="Exact account id")
    created_from: OptionalUtcDatetime = Field(None, description="Created at or after")
    created_to: OptionalUtcDatetime = Field(None, description="Created at or before")


class AccountPatchRequest(BaseModel):
    """
    Set one property on every account matching a filter.

    Property names: userName, passwordHash (send the plaintext password),
    userRole.

    Example Request:
        PATCH /api/accounts/patch-many
        {
            "filter": {"created_from": "2024-01-01T00:00:00Z"},
            "property_name": "userRole",
            "property_value": "Teacher"
        }
    """
    filter: Optional[AccountCriteria] = None
    property_name: str = Field(..., description="Which property to change")
    property_value: str = Field(..., description="New value, as a string")


# =============================================================================
# RESPONSE MODELS
# =============================================================================

class AccountProfile(BaseModel):
    """Username and role for the caller's own API key."""
    username: str
    role: str


class AccountResponse(BaseModel):
    id: str = Field(..., description="Unique identifier (UUID)")
    username: str
    role: str
    created: UtcDatetime
    last_seen: UtcDatetime

    @classmethod
    def from_account(cls, account: Account) -> "AccountResponse":
        return cls(**account.model_dump(include=set(cls.model_fields)))


class LoginResponse(AccountResponse):
    """Returned by login only: includes the API key to send as the ApiKey header."""
    credential: str
