"""Password hashing and access tokens."""

from __future__ import annotations

from datetime import timedelta
from typing import Any

import bcrypt
import jwt

from atsboost.config import settings
from atsboost.libs.exceptions import AuthenticationException
from atsboost.schemas import utcnow


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str | None) -> bool:
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # malformed stored hash
        return False


def create_access_token(claims: dict[str, Any], expires_in: timedelta) -> str:
    now = utcnow()
    payload = {**claims, "iat": now, "exp": now + expires_in}
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def create_user_token(user_id: int, email: str, role: str) -> str:
    return create_access_token(
        {"sub": str(user_id), "email": email, "role": role, "is_admin": role == "admin"},
        timedelta(hours=settings.user_token_expiry_hours),
    )


def create_admin_token(admin_id: int, email: str) -> str:
    return create_access_token(
        {"sub": str(admin_id), "email": email, "role": "admin", "is_admin": True},
        timedelta(hours=settings.admin_token_expiry_hours),
    )


def decode_access_token(token: str) -> dict[str, Any]:
    """Decode and verify a token; raises ``AuthenticationException`` when invalid or expired."""
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError as exc:
        raise AuthenticationException("Authentication token has expired") from exc
    except jwt.InvalidTokenError as exc:
        raise AuthenticationException("Invalid authentication token") from exc
