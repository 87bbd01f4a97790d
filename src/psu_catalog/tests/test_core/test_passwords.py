import pytest

from psu_catalog.auth.passwords import PasswordHasher
from psu_catalog.exceptions.base import InvalidParamError


@pytest.fixture
def hasher() -> PasswordHasher:
    return PasswordHasher(rounds=4)


def test_hash_is_salted_bcrypt(hasher):
    first = hasher.hash("secret123")
    second = hasher.hash("secret123")

    assert first.startswith("$2b$04$")
    assert first != second


def test_verify_accepts_correct_and_rejects_wrong_password(hasher):
    hashed = hasher.hash("secret123")

    assert hasher.verify("secret123", hashed) is True
    assert hasher.verify("secret124", hashed) is False


def test_verify_with_malformed_hash_is_false(hasher):
    assert hasher.verify("secret123", "not-a-bcrypt-hash") is False


def test_default_rounds():
    assert PasswordHasher().rounds == 12


def test_hash_rejects_password_over_72_bytes(hasher):
    # 40 characters, 80 bytes in UTF-8
    with pytest.raises(InvalidParamError) as exc_info:
        hasher.hash("é" * 40)

    assert exc_info.value.fields == ["password"]
    assert exc_info.value.http_status() == 400


def test_hash_accepts_exactly_72_bytes(hasher):
    password = "é" * 36

    assert hasher.verify(password, hasher.hash(password)) is True
