"""
Cryptographic helpers — password hashing and one-time token digests.

Passwords use argon2id (via argon2-cffi): slow and salted, because user-chosen
passwords are low-entropy and must resist offline guessing.

One-time tokens (email verification, password reset) use a single unsalted
SHA-256 pass: the token is already 32 random bytes, so the digest only has to
be one-way and deterministic to be looked up by value.
"""

from __future__ import annotations

import hashlib

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

_password_hasher = PasswordHasher()

# Verified against when the account does not exist, so an unknown email costs
# the same argon2 work as a wrong password.
_DUMMY_PASSWORD_HASH = _password_hasher.hash("idj-dummy-password")


def hash_password(plain_password: str) -> str:
    """Hash *plain_password* with argon2id.

    Returns:
        Argon2 hash string (includes algorithm parameters and salt).
    """
    return _password_hasher.hash(plain_password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    """Verify *plain_password* against an argon2 *password_hash*.

    Returns:
        ``True`` if the password matches, ``False`` for a wrong password or
        an unparseable hash.
    """
    try:
        return _password_hasher.verify(password_hash, plain_password)
    except (VerificationError, InvalidHashError):
        return False


def burn_password_check(plain_password: str) -> None:
    """Run a throwaway argon2 verification to equalise login timing."""
    verify_password(plain_password, _DUMMY_PASSWORD_HASH)


def hash_token(token: str) -> str:
    """Return the hex-encoded SHA-256 digest of *token*.

    Returns:
        64-character lowercase hex string.
    """
    return hashlib.sha256(token.encode("utf-8")).hexdigest()
