"""
Core authentication logic: the Credential Store.

Credentials live in one document mapping normalized usernames to password
hashes. Like the link document it is reloaded and rewritten whole on every
call. Registering a user also gives them a namespace in the link document,
migrating a legacy flat document on the way.
"""

import logging
from typing import Optional

from splashlink.errors import InvalidCredentials, InvalidInput, UsernameTaken
from splashlink.manager.link_store import LinkStore
from splashlink.storage.base import BaseDocumentBackend

from .config import RESERVED_USERNAMES
from .utils import hash_password, normalize_username, verify_password

log = logging.getLogger("splashlink.auth")


class CredentialStore:
    def __init__(self, document: BaseDocumentBackend, link_store: Optional[LinkStore] = None):
        """
        Args:
            document (BaseDocumentBackend): Backend holding users.json.
            link_store (Optional[LinkStore]): Link Store to prepare a namespace
                in on registration.
        """
        self.document = document
        self.link_store = link_store

    def register(self, username: str, password: str) -> str:
        """
        Create an account.

        Returns:
            str: The normalized username the session should carry.

        Raises:
            InvalidInput: Empty username/password, or a reserved name.
            UsernameTaken: The normalized name already has a credential.
        """
        if not isinstance(username, str) or not isinstance(password, str) or not username or not password:
            raise InvalidInput("Invalid request")
        normalized = normalize_username(username)
        if not normalized:
            raise InvalidInput("Invalid username")
        if normalized in RESERVED_USERNAMES:
            raise InvalidInput("Username is reserved")

        with self.document.lock:
            users = self.document.load()
            if users.get(normalized):
                raise UsernameTaken()
            users[normalized] = hash_password(password)
            self.document.save(users)
        log.info("Registered user %s", normalized)

        if self.link_store is not None:
            self.link_store.ensure_namespace(normalized)
        return normalized

    def authenticate(self, username: str, password: str) -> str:
        """
        Check a username/password pair.

        Unknown users and wrong passwords raise the same error so callers
        cannot probe which usernames exist.

        Returns:
            str: The normalized username.

        Raises:
            InvalidInput: Missing fields.
            InvalidCredentials: On any mismatch.
        """
        if not isinstance(username, str) or not isinstance(password, str) or not username or not password:
            raise InvalidInput("Invalid request")
        normalized = normalize_username(username)
        stored_hash = self.document.load().get(normalized)
        if not isinstance(stored_hash, str) or not verify_password(password, stored_hash):
            log.info("Failed login for %r", normalized)
            raise InvalidCredentials()
        return normalized
