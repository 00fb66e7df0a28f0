"""Unit tests for auth/passwords.py -- argon2 hashing and verification.

Covers:
- hash_password() never returns the plaintext and salts every call
- verify_password() accepts the right password and rejects a wrong one
- verify_password() raises CorruptCredentialError for a malformed stored hash
- burn_verification() completes without raising (timing equalization helper)
"""

import pytest

from auth.errors import CorruptCredentialError
from auth.passwords import burn_verification, hash_password, verify_password


def test_hash_is_not_plaintext():
    hashed = hash_password("abcdef")
    assert hashed != "abcdef"
    assert hashed.startswith("$argon2id$")


def test_same_password_hashes_differently():
    """Embedded random salt: two hashes of identical input must differ."""
    assert hash_password("abcdef") != hash_password("abcdef")


def test_verify_roundtrip_and_mismatch():
    hashed = hash_password("correct horse")
    assert verify_password(hashed, "correct horse") is True
    assert verify_password(hashed, "wrong horse") is False


def test_verify_is_case_sensitive():
    hashed = hash_password("Secret")
    assert verify_password(hashed, "secret") is False


@pytest.mark.parametrize("stored", ["", "plaintext", "$argon2id$v=19$garbage"])
def test_malformed_hash_raises_corrupt_credential(stored):
    with pytest.raises(CorruptCredentialError):
        verify_password(stored, "whatever")


def test_burn_verification_does_not_raise():
    burn_verification("any password at all")
