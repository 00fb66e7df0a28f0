"""
auth/errors.py -- Error kinds raised by the auth core.

Outward-facing kinds (AuthError subclasses) carry the HTTP status and the
machine-readable code used in the API error envelope. api/main.py registers
one exception handler for AuthError, so workflows never import fastapi.

Lower-level kinds:
  DuplicateKeyError      -- raised by CredentialStore on a UNIQUE violation.
                            Workflows translate it to ConflictError.
  CorruptCredentialError -- raised by the password hasher when a stored hash
                            cannot be parsed. Fatal to that verification only.

Layer rule: no imports from api/.
"""

from __future__ import annotations


class AuthError(Exception):
    """Base class for errors that map to a client-visible response."""

    status_code: int = 500
    code: str = "internal_error"
    default_message: str = "An unexpected error occurred."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class BadRequestError(AuthError):
    status_code = 400
    code = "bad_request"
    default_message = "Malformed request."


class UnauthenticatedError(AuthError):
    status_code = 401
    code = "unauthorized"
    default_message = "Authentication required."


class ForbiddenError(AuthError):
    status_code = 403
    code = "forbidden"
    default_message = "Access denied."


class ConflictError(AuthError):
    status_code = 409
    code = "conflict"
    default_message = "Resource already exists."


class InternalError(AuthError):
    pass


class DuplicateKeyError(Exception):
    """A create collided with an existing unique key (email)."""


class CorruptCredentialError(Exception):
    """A stored password hash is malformed and cannot be verified."""
