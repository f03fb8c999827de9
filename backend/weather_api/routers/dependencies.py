"""
Router Dependencies
===================

Shared plumbing for the routers:

- Service injection: main.py builds the services at startup and hands them
  over with set_services(); endpoints get them back through Depends().
- The role gate: require_role(Role.X) gives a dependency that checks the
  ApiKey header and returns the caller's account.

Example:
    @router.get("/", dependencies=[Depends(require_role(Role.STUDENT))])
    async def list_readings(service: ReadingService = Depends(get_reading_service)):
        ...
"""

from typing import Optional

from fastapi import Header, HTTPException

from weather_api.models import Account, Role
from weather_api.services import AccountService, AuthenticationGate, ReadingService


# =============================================================================
# DEPENDENCY INJECTION
# =============================================================================

_account_service: Optional[AccountService] = None
_reading_service: Optional[ReadingService] = None
_gate: Optional[AuthenticationGate] = None


def set_services(accounts: AccountService, readings: ReadingService, gate: AuthenticationGate):
    """Called when the app starts to give the routers their services."""
    global _account_service, _reading_service, _gate
    _account_service = accounts
    _reading_service = readings
    _gate = gate


def get_account_service() -> AccountService:
    if _account_service is None:
        raise HTTPException(status_code=500, detail="Server not fully started yet")
    return _account_service


def get_reading_service() -> ReadingService:
    if _reading_service is None:
        raise HTTPException(status_code=500, detail="Server not fully started yet")
    return _reading_service


def get_gate() -> AuthenticationGate:
    if _gate is None:
        raise HTTPException(status_code=500, detail="Server not fully started yet")
    return _gate


# =============================================================================
# ROLE GATE
# =============================================================================

def require_role(required: Role):
    """
    Build the dependency that guards an endpoint.

    The role is checked here, when the endpoint is declared, so a typo in a
    role name fails at import time instead of letting requests through.

    The returned dependency:
        1. Authenticates the ApiKey header against `required`
        2. Hands the caller's account to the endpoint
        3. Records the caller as seen once the endpoint is done, whether it
           succeeded or raised

    Raises:
        TypeError: if `required` is not a Role
    """
    if not isinstance(required, Role):
        raise TypeError(f"require_role() needs a Role, got {required!r}")

    def verify_api_key(api_key: Optional[str] = Header(None, alias="ApiKey")):
        gate = get_gate()
        account: Account = gate.authenticate(api_key, required)
        try:
            yield account
        finally:
            gate.record_activity(account)

    return verify_api_key
