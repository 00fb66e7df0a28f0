"""
auth/validation.py -- Input checks shared by the HTTP workflows and the CLI.

Every check raises BadRequestError and runs before any store call, so a
rejected request never produces a partial write.

Email syntax is delegated to email-validator. Deliverability (DNS) checks are
off: whitelisting happens before the mailbox necessarily exists, and a DNS
round trip per request is not worth it. The address is validated but stored
exactly as supplied -- login keys are case-sensitive.
"""

from __future__ import annotations

from email_validator import EmailNotValidError, validate_email

from auth.errors import BadRequestError
from auth.models import WHITELIST_ROLES, Role

MIN_CREDENTIAL_LENGTH = 3


def require_fields(message: str, *values: object) -> None:
    """Raise BadRequestError if any value is None."""
    if any(v is None for v in values):
        raise BadRequestError(message)


def require_min_length(message: str, *values: str) -> None:
    if any(len(v) < MIN_CREDENTIAL_LENGTH for v in values):
        raise BadRequestError(message)


def validate_email_address(email: str) -> str:
    """Return email unchanged if it is syntactically valid, else raise BadRequestError."""
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError as exc:
        raise BadRequestError(f"Invalid email address: {email}") from exc
    return email


def parse_whitelist_role(value: object) -> Role:
    """Coerce value to a Role the whitelist may grant (ADMIN or EMPLOYEE).

    VISITOR is a valid Role but not a grantable one, so it is rejected too.
    """
    try:
        role = Role(value)
    except ValueError:
        role = None
    if role not in WHITELIST_ROLES:
        allowed = ", ".join(sorted(r.value for r in WHITELIST_ROLES))
        raise BadRequestError(f"Invalid role: {value!r}. Expected one of: {allowed}")
    return role
