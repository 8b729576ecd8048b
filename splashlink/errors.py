"""
Error kinds raised by the Link Store and Credential Store.

The request layer (main.py) maps each kind onto an HTTP status via the
`status_code` attribute. Components never build HTTP responses themselves.
"""


class SplashlinkError(Exception):
    """Base class for every domain error."""

    status_code = 500
    default_detail = "Internal Server Error"

    def __init__(self, detail: str = ""):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class NotFound(SplashlinkError):
    status_code = 404
    default_detail = "Not Found"


class DuplicateId(SplashlinkError):
    status_code = 400
    default_detail = "ID already exists"


class Forbidden(SplashlinkError):
    status_code = 403
    default_detail = "Forbidden"


class Unauthorized(SplashlinkError):
    status_code = 401
    default_detail = "Unauthorized"


class UsernameTaken(SplashlinkError):
    status_code = 400
    default_detail = "Username already exists"


class InvalidCredentials(SplashlinkError):
    status_code = 401
    default_detail = "Invalid username or password"


class InvalidInput(SplashlinkError, ValueError):
    status_code = 400
    default_detail = "Invalid request"


class StorageFailure(SplashlinkError):
    """Document could not be written (or read for a reason other than absence/corruption)."""
