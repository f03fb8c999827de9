"""
Services Package
================

These are the "workers" that do the actual work.

- DocumentStore: Named JSON document collections, saved to one file
- AccountService: Accounts, logins and last-seen tracking
- ReadingService: Weather readings and their reports
- AuthenticationGate: ApiKey + role check for every protected endpoint
- PatchDispatcher: "Set property X to V on everything matching F"
"""

from .document_store import DocumentStore, Collection
from .criteria import ClauseKind, Predicate, build
from .patching import PatchDispatcher
from .account_service import AccountService
from .reading_service import ReadingService
from .auth import AuthenticationGate

__all__ = [
    "DocumentStore",
    "Collection",
    "ClauseKind",
    "Predicate",
    "build",
    "PatchDispatcher",
    "AccountService",
    "ReadingService",
    "AuthenticationGate",
]
