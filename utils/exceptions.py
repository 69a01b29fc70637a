"""
Domain errors raised by the authentication flow.

Each error carries the HTTP status and error code the API layer renders
(see api.errors.register_error_handlers).
"""
from __future__ import annotations


class AuthError(Exception):
    status = 400
    error = "BAD_REQUEST"

    def __init__(self, message: str | None = None, status: int | None = None):
        super().__init__(message or self.__class__.__doc__ or self.error)
        if status is not None:
            self.status = status

    @property
    def message(self) -> str:
        return str(self)


class DuplicateUserError(AuthError):
    """Email already registered"""
    status = 409
    error = "CONFLICT"


class InvalidCredentialsError(AuthError):
    """Invalid credentials"""
    status = 401
    error = "UNAUTHORIZED"


class UserNotFoundError(AuthError):
    """User not found"""
    status = 404
    error = "NOT_FOUND"


class InvalidTokenError(AuthError):
    """Invalid token"""
    status = 401
    error = "UNAUTHORIZED"
