"""
Configuration for the auth module.

The session is a bare cookie holding the normalized username. Its name comes
from the global settings so that the API and tests agree on it.
"""

from splashlink.config import settings

COOKIE_PATH = "/"

# Usernames that would collide with structural keys of the link document.
RESERVED_USERNAMES = frozenset({"global", "_schema"})


def cookie_name() -> str:
    return settings.COOKIE_NAME
