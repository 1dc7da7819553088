from datetime import timedelta

import jwt
import pytest

from atsboost.config import settings
from atsboost.libs.exceptions import AuthenticationException
from atsboost.libs.security import (
    create_access_token,
    create_admin_token,
    create_user_token,
    decode_access_token,
    hash_password,
    verify_password,
)


def test_hash_and_verify_password():
    hashed = hash_password("correct horse")

    assert hashed != "correct horse"
    assert verify_password("correct horse", hashed) is True
    assert verify_password("wrong horse", hashed) is False
    assert verify_password("anything", None) is False
    assert verify_password("anything", "not-a-bcrypt-hash") is False


def test_user_token_claims():
    payload = decode_access_token(create_user_token(7, "a@example.com", "user"))

    assert payload["sub"] == "7"
    assert payload["email"] == "a@example.com"
    assert payload["is_admin"] is False


def test_admin_token_claims():
    payload = decode_access_token(create_admin_token(0, "admin@example.com"))

    assert payload["is_admin"] is True
    assert payload["role"] == "admin"


def test_expired_token_is_rejected():
    token = create_access_token({"sub": "1"}, timedelta(seconds=-5))

    with pytest.raises(AuthenticationException, match="expired"):
        decode_access_token(token)


def test_token_signed_with_other_secret_is_rejected():
    token = jwt.encode({"sub": "1"}, "other-secret", algorithm=settings.jwt_algorithm)

    with pytest.raises(AuthenticationException, match="Invalid"):
        decode_access_token(token)
