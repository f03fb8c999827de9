"""
Accounts API Router
===================

Creating, looking up, changing and removing API accounts, plus login.

Every endpoint except login needs an ApiKey header. The role next to each
endpoint is the lowest role allowed to call it (Admin > Teacher > Student).

ALL ENDPOINTS:
-------------
POST   /api/accounts/              - Create an account              (Teacher)
POST   /api/accounts/create-many   - Create many accounts           (Teacher, only if enabled)
POST   /api/accounts/login         - Username + password -> API key (open)
GET    /api/accounts/              - Who am I? (username, role)     (Student)
GET    /api/accounts/by-id?id=     - One account by id              (Teacher)
PUT    /api/accounts/{id}          - Replace an account             (Teacher)
PATCH  /api/accounts/patch-many    - Set one property on many       (Teacher)
DELETE /api/accounts/inactive      - Delete stale Student accounts  (Teacher)
DELETE /api/accounts/{id}          - Delete one account             (Teacher)
"""

from fastapi import APIRouter, Depends, Query

from weather_api.config import Config
from weather_api.errors import InvalidValue, NotFound
from weather_api.models import (
    Account,
    AccountCreateRequest,
    AccountPatchRequest,
    AccountProfile,
    AccountReplaceRequest,
    AccountResponse,
    LoginRequest,
    LoginResponse,
    OperationResult,
    Role,
)
from weather_api.routers.dependencies import get_account_service, require_role
from weather_api.services import AccountService
from weather_api.utils.validation import validate_inactive_days

router = APIRouter(prefix="/api/accounts", tags=["accounts"])


# =============================================================================
# CREATE
# =============================================================================

@router.post(
    "/",
    response_model=AccountResponse,
    status_code=201,
    dependencies=[Depends(require_role(Role.TEACHER))],
)
async def create_account(
    request: AccountCreateRequest,
    service: AccountService = Depends(get_account_service)
):
    """
    Create an account.

    The username must not already be in use (409 if it is). The new
    account's API key is handed out by /login.
    """
    return AccountResponse.from_account(service.create_account(request))


@router.post(
    "/create-many",
    response_model=OperationResult,
    dependencies=[Depends(require_role(Role.TEACHER))],
)
async def create_many_accounts(
    requests: list[AccountCreateRequest],
    service: AccountService = Depends(get_account_service)
):
    """
    Create a batch of accounts without checking usernames.

    Only available when ENABLE_BULK_ACCOUNT_CREATE is set.
    """
    if not Config.ENABLE_BULK_ACCOUNT_CREATE:
        raise NotFound("Bulk account creation is disabled")
    return service.create_many(requests)


@router.post("/login", response_model=LoginResponse)
async def login(
    request: LoginRequest,
    service: AccountService = Depends(get_account_service)
):
    """
    Swap a username and password for the account details and API key.

    Send the key back as the `ApiKey` header on every other request.
    """
    account = service.login(request.username, request.password)
    return LoginResponse(
        **AccountResponse.from_account(account).model_dump(),
        credential=account.credential,
    )


# =============================================================================
# READ
# =============================================================================

@router.get("/", response_model=AccountProfile)
async def get_my_account(
    account: Account = Depends(require_role(Role.STUDENT)),
    service: AccountService = Depends(get_account_service)
):
    """Username and role of the account that owns the ApiKey."""
    return service.get_profile(account.credential)


@router.get(
    "/by-id",
    response_model=AccountResponse,
    dependencies=[Depends(require_role(Role.TEACHER))],
)
async def get_account_by_id(
    id: str = Query(..., description="Account id (UUID)"),
    service: AccountService = Depends(get_account_service)
):
    return AccountResponse.from_account(service.get_account(id))


# =============================================================================
# UPDATE
# =============================================================================

@router.put(
    "/{id}",
    response_model=OperationResult,
    dependencies=[Depends(require_role(Role.TEACHER))],
)
async def replace_account(
    id: str,
    request: AccountReplaceRequest,
    service: AccountService = Depends(get_account_service)
):
    """
    Replace username, password and role.

    Created time, last seen, API key and expiry are kept.
    """
    return service.replace_account(id, request)


@router.patch(
    "/patch-many",
    response_model=OperationResult,
    dependencies=[Depends(require_role(Role.TEACHER))],
)
async def patch_accounts(
    request: AccountPatchRequest,
    service: AccountService = Depends(get_account_service)
):
    """
    Set one property on every account matching the filter.

    Properties: userName, passwordHash (send the plaintext), userRole.
    """
    return service.patch_accounts(request)


# =============================================================================
# DELETE (fixed paths before /{id})
# =============================================================================

@router.delete(
    "/inactive",
    response_model=OperationResult,
    dependencies=[Depends(require_role(Role.TEACHER))],
)
async def delete_inactive_accounts(
    days: int = Query(Config.INACTIVE_ACCOUNT_DAYS, description="Delete Students not seen for this many days"),
    service: AccountService = Depends(get_account_service)
):
    if not validate_inactive_days(days):
        raise InvalidValue("days must be between 1 and 3650")
    return service.delete_inactive(days)


@router.delete(
    "/{id}",
    response_model=OperationResult,
    dependencies=[Depends(require_role(Role.TEACHER))],
)
async def delete_account(
    id: str,
    service: AccountService = Depends(get_account_service)
):
    return service.delete_account(id)
