"""
auth/passwords.py -- One-way password hashing with argon2id.

Security design decisions:
  argon2-cffi PasswordHasher (argon2id). Memory-hard, so GPU/ASIC brute force
  of a leaked users table is expensive. Each hash embeds its own random salt
  and the cost parameters, so hashing the same password twice yields two
  different strings and verify() needs nothing but the stored value.

  Cost parameters come from core.config.get_settings() so tests can run with
  a cheap configuration while production keeps the library defaults.

  _DUMMY_HASH enables timing equalization in verify_credentials(): when an
  email is unknown we still pay for one argon2 verification, so response time
  does not reveal whether an account exists.

Layer rule: no imports from api/. Import from core/ is allowed.
"""

from __future__ import annotations

import logging

from argon2 import PasswordHasher
from argon2.exceptions import HashingError, InvalidHashError, VerificationError, VerifyMismatchError

from auth.errors import CorruptCredentialError, InternalError
from core.config import get_settings

logger = logging.getLogger("gatehouse.auth")

_settings = get_settings()

_hasher = PasswordHasher(
    time_cost=_settings.argon2_time_cost,
    memory_cost=_settings.argon2_memory_cost,
    parallelism=_settings.argon2_parallelism,
)


def hash_password(plain: str) -> str:
    """Return an argon2id encoded hash of the plaintext password."""
    try:
        return _hasher.hash(plain)
    except HashingError as exc:
        logger.error("argon2 hashing failed: %s", exc)
        raise InternalError("Unable to hash password.") from exc


def verify_password(hashed: str, plain: str) -> bool:
    """Return True if plain matches the stored argon2 hash, False on mismatch.

    Raises CorruptCredentialError when the stored value is not a parseable
    argon2 hash. The caller decides how to collapse that; the process carries on.
    """
    try:
        return _hasher.verify(hashed, plain)
    except VerifyMismatchError:
        return False
    except (InvalidHashError, VerificationError) as exc:
        raise CorruptCredentialError("stored password hash is malformed") from exc


# Computed once at module load so the first unknown-email login is not
# measurably faster than later ones.
_DUMMY_HASH: str = hash_password("gatehouse_timing_dummy")


def burn_verification(plain: str) -> None:
    """Run one verification against _DUMMY_HASH and discard the result."""
    verify_password(_DUMMY_HASH, plain)
