"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Dataclasses own domain
shape; the store and the workflows do the work.

Layer rule: no imports from api/.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class Role(str, Enum):
    VISITOR = "VISITOR"
    EMPLOYEE = "EMPLOYEE"
    ADMIN = "ADMIN"


# Roles an ADMIN may grant through the whitelist. VISITOR is only ever the
# store-side default for accounts created without a whitelist record.
WHITELIST_ROLES: frozenset[Role] = frozenset({Role.ADMIN, Role.EMPLOYEE})


@dataclass
class User:
    """An account that may hold a session.

    email is the natural login key and is stored exactly as supplied
    (case-sensitive). password_hash is an argon2 encoded string; it is kept
    out of repr() so a logged User never carries it.
    """

    email: str
    password_hash: str = field(repr=False)
    role: Role = Role.VISITOR
    id: int | None = None
    created_at: str | None = None


@dataclass
class AuthorizedEmail:
    """A whitelist entry: this email may self-register and will receive role."""

    email: str
    role: Role
    created_at: str | None = None
