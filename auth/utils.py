"""
Utility functions for the auth module.
"""

import hashlib
import hmac


def normalize_username(username: str) -> str:
    """Trim and lower-case; "Bob " and "bob" are the same account."""
    return (username or "").strip().lower()


def hash_password(password: str) -> str:
    """
    Return a SHA256 hex digest of the given password.

    Note:
        Unsalted and fast, kept for compatibility with existing users.json
        files. A new deployment should move to a salted, slow hash, which
        changes the stored format.
    """
    return hashlib.sha256(password.encode()).hexdigest()


def verify_password(password: str, stored_hash: str) -> bool:
    return hmac.compare_digest(hash_password(password), stored_hash or "")
