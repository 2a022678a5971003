from __future__ import annotations

from typing import Optional

from .enums import ErrorCode


class DomainError(Exception):
    """Base exception for business rule violations."""

    status_code = 400
    default_code = ErrorCode.VALIDATION_ERROR

    def __init__(self, message: str, code: Optional[ErrorCode] = None):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code


class ValidationError(DomainError):
    """Raised when input data is invalid or the entity is in the wrong state."""


class NotFoundError(DomainError):
    status_code = 404


class ConflictError(DomainError):
    status_code = 409


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""

    status_code = 401
    default_code = ErrorCode.UNAUTHENTICATED


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    status_code = 403
    default_code = ErrorCode.FORBIDDEN


class UpstreamError(DomainError):
    """Raised when an external collaborator (email/SMS provider) fails."""

    status_code = 500
    default_code = ErrorCode.INTERNAL_ERROR
