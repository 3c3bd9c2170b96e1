"""
Error kinds raised by the account service.

Each kind carries the HTTP status it maps to, so route handlers never have
to translate errors themselves:

    AccountError (base, 500)
    ├── BadRequest      400
    ├── Unauthorized    401
    │   └── InvalidToken
    ├── NotFound        404
    ├── Conflict        409
    └── InternalError   500
"""

from typing import Optional


class AccountError(Exception):
    """Base class for every error surfaced to API callers."""

    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"error": self.message}


class BadRequest(AccountError):
    status_code = 400


class Unauthorized(AccountError):
    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class InvalidToken(Unauthorized):
    """The bearer token is malformed, badly signed or expired."""


class NotFound(AccountError):
    status_code = 404

    def __init__(self, entity: str):
        self.entity = entity
        super().__init__(f"{entity} not found")


class Conflict(AccountError):
    status_code = 409

    def __init__(self, operation: str, entity: str, reason: Optional[str] = None):
        self.operation = operation
        self.entity = entity
        message = f"{operation} {entity}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class InternalError(AccountError):
    status_code = 500
