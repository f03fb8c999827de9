"""
Authentication Gate
===================

Decides, per request, whether the caller may use an endpoint.

FLOW:
----
    ApiKey header
        |-- missing/blank ------------------> MissingCredential (401)
        v
    normalize ("{key}" -> "key")
        v
    look up account by credential
        |-- not found ----------------------> Unauthorized (403)
        v
    ceiling check against the endpoint's required role
        |-- fails --------------------------> Unauthorized (403)
        v
    VERIFIED: the endpoint runs, then last seen is recorded

"Not found" and "role too low" give the same 403 so a caller can't tell
which keys exist.
"""

import logging
from typing import Optional

from weather_api.errors import MissingCredential, Unauthorized
from weather_api.models import Account, Role, satisfies
from weather_api.services.account_service import AccountService
from weather_api.utils.validation import normalize_credential

logger = logging.getLogger(__name__)


class AuthenticationGate:
    """Checks an ApiKey header against the account store."""

    def __init__(self, accounts: AccountService):
        self.accounts = accounts

    def authenticate(self, raw_credential: Optional[str], required_role: Role) -> Account:
        """
        Resolve the caller's account and check their role.

        Args:
            raw_credential: ApiKey header value, exactly as received
            required_role: Role the endpoint was registered with

        Returns:
            The caller's account

        Raises:
            MissingCredential: no usable header value
            Unauthorized: unknown key or role above the endpoint's ceiling
        """
        credential = normalize_credential(raw_credential)
        if credential is None:
            raise MissingCredential()

        account = self.accounts.find_by_credential(credential)
        if account is None:
            logger.warning("Rejected request: unknown API key")
            raise Unauthorized()

        if not satisfies(account.role, required_role):
            logger.warning(
                f"Rejected request: '{account.username}' ({account.role}) "
                f"on a {required_role.value} endpoint"
            )
            raise Unauthorized()

        return account

    def record_activity(self, account: Account):
        """Stamp last seen for a verified caller. Never raises on store errors."""
        self.accounts.record_activity(account.credential)
