"""
auth/credentials.py -- Email/password authentication with timing equalization.

verify_credentials() is the only place that turns an (email, password) pair
into a User. Do NOT inline find_user_by_email() + verify_password() in a
route: that re-introduces the account-enumeration timing leak.

Every failure mode -- unknown email, wrong password, missing field, corrupt
stored hash -- collapses to None so the caller can only ever answer with one
generic "invalid credentials" response.
"""

from __future__ import annotations

import logging

from auth.errors import CorruptCredentialError
from auth.models import User
from auth.passwords import burn_verification, verify_password
from auth.store import CredentialStore

logger = logging.getLogger("gatehouse.auth")


def check_password(user: User, password: str) -> bool:
    """Return True if password matches user's stored hash.

    A corrupt stored hash counts as a mismatch; it is logged because it means
    the users row needs operator attention.
    """
    try:
        return verify_password(user.password_hash, password)
    except CorruptCredentialError:
        logger.warning("Corrupt password hash for user id=%s", user.id)
        return False


def verify_credentials(store: CredentialStore, email: str | None, password: str | None) -> User | None:
    """Authenticate an email/password login.

    Always runs one argon2 verification, whether or not the account exists:
    - Unknown email: verification runs against a dummy hash (same cost)
    - Known email: verification runs against the real hash

    Returns the User on success, None on any failure.
    """
    if not isinstance(email, str) or not isinstance(password, str):
        burn_verification(password if isinstance(password, str) else "")
        return None
    user = store.find_user_by_email(email)
    if user is None:
        # Equalize timing -- do NOT return before running argon2.
        burn_verification(password)
        return None
    if not check_password(user, password):
        return None
    return user
