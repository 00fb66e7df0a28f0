"""
auth/whitelist.py -- Registration-time whitelist check.

An email may self-register only after an ADMIN has added it to the
authorized_emails table. The role the new account receives is exactly the
role on that record; there is no default and no implicit elevation.
"""

from __future__ import annotations

from auth.errors import ForbiddenError
from auth.models import Role
from auth.store import CredentialStore


def authorize_registration(store: CredentialStore, email: str) -> Role:
    """Return the role granted to email, or raise ForbiddenError if it is not whitelisted."""
    record = store.find_authorized_email(email)
    if record is None:
        raise ForbiddenError(f"Email {email} is not authorized to register.")
    return record.role
