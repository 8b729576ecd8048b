"""
FastAPI dependency functions for authentication.

These can be used in routes with Depends() to identify the caller from the
session cookie.
"""

from typing import Optional

from fastapi import HTTPException, Request, status

from .config import cookie_name


def get_optional_user(request: Request) -> Optional[str]:
    """
    Username from the session cookie, or None for anonymous callers.

    Used where the need for a user depends on the document layout
    (deleting legacy flat entries is allowed anonymously).
    """
    return request.cookies.get(cookie_name()) or None


def get_current_user(request: Request) -> str:
    """
    Dependency that requires a session cookie.

    Raises:
        HTTPException: 401 when no username cookie is present.
    """
    username = get_optional_user(request)
    if not username:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return username
