"""Salted HMAC-SHA512 password hashing.

Every derivation draws a fresh 128-byte random key (the salt) and hashes the
UTF-8 password with it, so a password change always produces a new salt.
"""

from __future__ import annotations

import hashlib
import hmac
import secrets
from typing import NamedTuple

from .errors import InvalidArgument

HASH_LENGTH = 64
SALT_LENGTH = 128


class PasswordCredentials(NamedTuple):
    hash: bytes
    salt: bytes


def _require_password(password: str | None) -> str:
    if password is None:
        raise InvalidArgument("Password is required.", param="password")
    if not password.strip():
        raise InvalidArgument(
            "Value cannot be empty or whitespace only string.", param="password"
        )
    return password


def _keyed_hash(password: str, key: bytes) -> bytes:
    return hmac.new(key, password.encode("utf-8"), hashlib.sha512).digest()


def derive_password_hash(password: str | None) -> PasswordCredentials:
    """Return ``(hash, salt)`` for ``password`` using a freshly generated salt."""

    pw = _require_password(password)
    salt = secrets.token_bytes(SALT_LENGTH)
    return PasswordCredentials(hash=_keyed_hash(pw, salt), salt=salt)


def verify_password_hash(
    password: str | None, stored_hash: bytes | None, stored_salt: bytes | None
) -> bool:
    """Return ``True`` when ``password`` hashes to ``stored_hash`` under ``stored_salt``.

    Raises :class:`InvalidArgument` before any comparison when the password is
    empty or the stored record has the wrong shape (corrupted or mismatched
    credentials).
    """

    pw = _require_password(password)
    if stored_hash is None or len(stored_hash) != HASH_LENGTH:
        raise InvalidArgument(
            f"Invalid length of password hash ({HASH_LENGTH} bytes expected).",
            param="password_hash",
        )
    if stored_salt is None or len(stored_salt) != SALT_LENGTH:
        raise InvalidArgument(
            f"Invalid length of password salt ({SALT_LENGTH} bytes expected).",
            param="password_salt",
        )

    computed = _keyed_hash(pw, bytes(stored_salt))
    return hmac.compare_digest(computed, bytes(stored_hash))


__all__ = [
    "HASH_LENGTH",
    "SALT_LENGTH",
    "PasswordCredentials",
    "derive_password_hash",
    "verify_password_hash",
]
