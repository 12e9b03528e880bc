from __future__ import annotations

import pytest

from split_ledger.errors import InvalidArgument
from split_ledger.passwords import (
    HASH_LENGTH,
    SALT_LENGTH,
    derive_password_hash,
    verify_password_hash,
)


@pytest.mark.parametrize("password", ["hunter2", "  padded  ", "päßwörd ✓", "x" * 500])
def test_derived_credentials_verify(password: str):
    creds = derive_password_hash(password)

    assert len(creds.hash) == HASH_LENGTH
    assert len(creds.salt) == SALT_LENGTH
    assert verify_password_hash(password, *creds) is True


def test_other_password_does_not_verify():
    creds = derive_password_hash("first secret")

    assert verify_password_hash("second secret", *creds) is False
    assert verify_password_hash("first secreT", *creds) is False


def test_each_derivation_draws_a_fresh_salt():
    a = derive_password_hash("same password")
    b = derive_password_hash("same password")

    assert a.salt != b.salt
    assert a.hash != b.hash
    # Each pair is still self-consistent.
    assert verify_password_hash("same password", *a)
    assert verify_password_hash("same password", *b)
    assert not verify_password_hash("same password", a.hash, b.salt)


@pytest.mark.parametrize("password", [None, "", "   ", "\t\n"])
def test_derive_rejects_missing_or_blank_password(password):
    with pytest.raises(InvalidArgument) as exc:
        derive_password_hash(password)
    assert exc.value.param == "password"


@pytest.mark.parametrize("password", ["valid password", "", None])
@pytest.mark.parametrize(
    "hash_len,salt_len",
    [(63, SALT_LENGTH), (65, SALT_LENGTH), (HASH_LENGTH, 127), (HASH_LENGTH, 0), (0, 0)],
)
def test_verify_rejects_bad_record_shapes(password, hash_len: int, salt_len: int):
    with pytest.raises(InvalidArgument):
        verify_password_hash(password, b"\x00" * hash_len, b"\x00" * salt_len)


def test_verify_checks_record_shape_before_comparing():
    creds = derive_password_hash("pw")

    with pytest.raises(InvalidArgument) as exc:
        verify_password_hash("pw", creds.hash + b"\x00", creds.salt)
    assert exc.value.param == "password_hash"

    with pytest.raises(InvalidArgument) as exc:
        verify_password_hash("pw", creds.hash, creds.salt[:-1])
    assert exc.value.param == "password_salt"


def test_verify_accepts_memoryview_like_storage_values():
    creds = derive_password_hash("pw")

    assert verify_password_hash("pw", bytearray(creds.hash), memoryview(creds.salt))
