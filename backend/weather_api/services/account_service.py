"""
Account Service
===============

Everything to do with API accounts:

1. Creating accounts (username must be free) and bulk creation
2. Looking accounts up by credential, id, or username + password
3. Replacing, patching and deleting accounts
4. Recording when an account was last seen

USERNAME UNIQUENESS:
-------------------
Checked by looking for an existing account before inserting. Two requests
creating the same username at the same moment can both pass the check.
"""

import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from weather_api.errors import Conflict, InvalidValue, NotFound, StoreFailure, Unauthorized
from weather_api.models import (
    Account,
    AccountCreateRequest,
    AccountPatchRequest,
    AccountProfile,
    AccountReplaceRequest,
    OperationResult,
    Role,
)
from weather_api.services.criteria import ACCOUNT_CRITERIA, ClauseKind, Predicate
from weather_api.services.document_store import DocumentStore
from weather_api.services.patching import ACCOUNT_PATCH_FIELDS, PatchDispatcher
from weather_api.utils.security import hash_secret, new_credential, verify_secret
from weather_api.utils.timeutils import utc_now
from weather_api.utils.validation import validate_document_id

logger = logging.getLogger(__name__)


class AccountService:
    """Account operations over the "accounts" collection."""

    COLLECTION = "accounts"

    def __init__(self, store: DocumentStore, clock: Callable[[], datetime] = utc_now):
        """
        Args:
            store: Document store holding the accounts collection
            clock: Source of "now", replaceable in tests
        """
        self.accounts = store.collection(self.COLLECTION)
        self.clock = clock
        self.patcher = PatchDispatcher(self.accounts, ACCOUNT_PATCH_FIELDS, ACCOUNT_CRITERIA, "accounts")

    @staticmethod
    def _to_account(document: dict) -> Account:
        data = {k: v for k, v in document.items() if k != "_id"}
        return Account(id=document["_id"], **data)

    def _new_document(self, username: str, password: str, role: Role) -> dict:
        now = self.clock()
        return {
            "username": username,
            "password_hash": hash_secret(password),
            "role": role.value,
            "created": now,
            "last_seen": now,
            "credential": new_credential(),
            "expiry": None,
        }

    # =========================================================================
    # CREATING ACCOUNTS
    # =========================================================================

    def create_account(self, request: AccountCreateRequest) -> Account:
        """
        Register a new account.

        Raises:
            Conflict: the username is already taken
        """
        username = request.username.strip()
        if self.find_by_username(username) is not None:
            raise Conflict(f"Username is taken: {username}")

        document = self._new_document(username, request.password, request.role)
        document["_id"] = self.accounts.insert_one(document)
        logger.info(f"Created {request.role.value} account '{username}'")
        return self._to_account(document)

    def create_many(self, requests: list[AccountCreateRequest]) -> OperationResult:
        """
        Insert a batch of accounts in one go.

        No username check is made, so this is only exposed when
        ENABLE_BULK_ACCOUNT_CREATE is on.
        """
        documents = [self._new_document(r.username.strip(), r.password, r.role) for r in requests]
        ids = self.accounts.insert_many(documents)
        logger.info(f"Bulk created {len(ids)} accounts")
        return OperationResult.from_count(
            len(ids),
            success_message=f"Created {len(ids)} accounts.",
            failure_message="No accounts created.",
        )

    def ensure_bootstrap_admin(self, username: str, password: str) -> Optional[Account]:
        """Seed an Admin account when no accounts exist yet."""
        if not username or not password:
            return None
        if self.accounts.count() > 0:
            return None
        account = self.create_account(AccountCreateRequest(username=username, password=password, role=Role.ADMIN))
        logger.warning(f"No accounts found, created bootstrap admin '{username}'")
        return account

    # =========================================================================
    # LOOKUPS
    # =========================================================================

    def find_by_credential(self, credential: str) -> Optional[Account]:
        """The credential store lookup. Always goes to the store, nothing is cached."""
        document = self.accounts.find_one(Predicate.where("credential", ClauseKind.EQUALS, credential))
        return self._to_account(document) if document else None

    def find_by_username(self, username: str) -> Optional[Account]:
        document = self.accounts.find_one(Predicate.where("username", ClauseKind.EQUALS, username))
        return self._to_account(document) if document else None

    def get_account(self, account_id: str) -> Account:
        if not validate_document_id(account_id):
            raise InvalidValue(f"Invalid account id: {account_id}")
        document = self.accounts.find_one(Predicate.where("_id", ClauseKind.EQUALS, account_id))
        if document is None:
            raise NotFound("No user found.")
        return self._to_account(document)

    def get_profile(self, credential: str) -> AccountProfile:
        """Username and role for the caller's own key."""
        account = self.find_by_credential(credential)
        if account is None:
            raise NotFound("No user found.")
        return AccountProfile(username=account.username, role=account.role)

    def login(self, username: str, password: str) -> Account:
        """
        Check a username and password.

        Raises:
            Unauthorized: unknown username or wrong password (same message for both)
        """
        account = self.find_by_username(username)
        if account is None or not verify_secret(password, account.password_hash):
            logger.warning(f"Failed login for '{username}'")
            raise Unauthorized()
        self.record_activity(account.credential)
        return account

    # =========================================================================
    # UPDATES
    # =========================================================================

    def replace_account(self, account_id: str, request: AccountReplaceRequest) -> OperationResult:
        """
        Replace username, password and role.

        Created, last seen, credential and expiry come from the stored account.
        This reads then writes with no version check, so two concurrent
        replaces of the same account can lose one of them.
        """
        current = self.get_account(account_id)

        username = request.username.strip()
        holder = self.find_by_username(username)
        if holder is not None and holder.id != account_id:
            raise Conflict(f"Username is taken: {username}")

        replacement = {
            "username": username,
            "password_hash": hash_secret(request.password),
            "role": request.role.value,
            "created": current.created,
            "last_seen": current.last_seen,
            "credential": current.credential,
            "expiry": current.expiry,
        }
        modified = self.accounts.replace_one(account_id, replacement)
        return OperationResult.from_count(
            modified,
            success_message="API User Successfully Updated",
            failure_message="API User Not Updated",
        )

    def patch_accounts(self, request: AccountPatchRequest) -> OperationResult:
        return self.patcher.patch(request.property_name, request.property_value, request.filter)

    def touch_last_seen(self, credential: str) -> int:
        """Stamp the account holding this credential as seen now."""
        return self.accounts.update_one(
            Predicate.where("credential", ClauseKind.EQUALS, credential),
            {"last_seen": self.clock()},
        )

    def record_activity(self, credential: str):
        """
        Best-effort last-seen update.

        Runs after the caller's real work; a store failure here is logged
        and dropped so it can never fail that work.
        """
        try:
            self.touch_last_seen(credential)
        except StoreFailure as e:
            logger.warning(f"Could not record last seen time: {e}")

    # =========================================================================
    # DELETES
    # =========================================================================

    def delete_account(self, account_id: str) -> OperationResult:
        if not validate_document_id(account_id):
            raise InvalidValue(f"Invalid account id: {account_id}")
        deleted = self.accounts.delete_one(Predicate.where("_id", ClauseKind.EQUALS, account_id))
        if deleted:
            logger.info(f"Deleted account {account_id}")
        return OperationResult.from_count(
            deleted,
            success_message="API User Successfully Deleted",
            failure_message="API User Not Deleted",
        )

    def delete_inactive(self, days: int) -> OperationResult:
        """Delete Student accounts not seen in the last `days` days."""
        cutoff = self.clock() - timedelta(days=days)
        predicate = (
            Predicate.where("last_seen", ClauseKind.LTE, cutoff)
            & Predicate.where("role", ClauseKind.EQUALS, Role.STUDENT.value)
        )
        deleted = self.accounts.delete_many(predicate)
        logger.info(f"Deleted {deleted} inactive student accounts (not seen since {cutoff.isoformat()})")
        return OperationResult.from_count(
            deleted,
            success_message="API Users Successfully Deleted",
            failure_message="No API Users Deleted",
        )
