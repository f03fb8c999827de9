"""
Password Hashing
================

Thin wrapper over werkzeug's salted adaptive hashes so the rest of the code
only knows about hash/verify.
"""

import uuid

from werkzeug.security import check_password_hash, generate_password_hash


def hash_secret(plaintext: str) -> str:
    """Hash a password for storage."""
    return generate_password_hash(plaintext)


def verify_secret(plaintext: str, digest: str) -> bool:
    """Check a password against a stored hash. Never raises on a bad digest."""
    if not plaintext or not digest:
        return False
    try:
        return check_password_hash(digest, plaintext)
    except ValueError:
        return False


def new_credential() -> str:
    """A fresh opaque API key."""
    return str(uuid.uuid4())
