"""Typed API errors.

Handlers and services raise these; the exception handlers registered in
``main.py`` are the only place that turns them into a response envelope.
"""

from typing import Any


class ApiError(Exception):
    """Base error carrying an HTTP status code and a client-facing message."""

    status_code: int = 500
    default_message: str = "Something went wrong"

    def __init__(self, message: str | None = None, errors: list[Any] | None = None) -> None:
        self.message = message or self.default_message
        self.errors = errors or []
        super().__init__(self.message)


class ValidationError(ApiError):
    status_code = 400
    default_message = "Bad request"


class AuthError(ApiError):
    status_code = 401
    default_message = "Unauthorized"


class InvalidTokenError(AuthError):
    """Expired, malformed or badly signed token. The cause is never exposed."""

    default_message = "Invalid or expired token"


class NotFoundError(ApiError):
    status_code = 404
    default_message = "Not found"


class ConflictError(ApiError):
    status_code = 409
    default_message = "Conflict"


class UnexpectedError(ApiError):
    status_code = 500
    default_message = "Internal server error"
