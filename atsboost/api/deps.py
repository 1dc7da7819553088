"""Request dependencies: bearer-token authentication."""

from __future__ import annotations

import logging

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from atsboost.config import settings
from atsboost.libs.database import get_database
from atsboost.libs.exceptions import (
    AppException,
    AuthenticationException,
    AuthorizationException,
    NotFoundException,
)
from atsboost.libs.security import decode_access_token
from atsboost.schemas import CV, AdminUser, User

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def _user_from_token(token: str) -> User:
    payload = decode_access_token(token)
    try:
        user_id = int(payload.get("sub", ""))
    except (TypeError, ValueError) as exc:
        raise AuthenticationException("Invalid authentication token") from exc
    user = get_database().get_user(user_id)
    if user is None or not user.is_active:
        raise AuthenticationException("Invalid authentication token")
    return user


def get_optional_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> User | None:
    """The signed-in user, or ``None`` for guests and unusable tokens."""
    if credentials is None:
        return None
    try:
        return _user_from_token(credentials.credentials)
    except AppException as exc:
        logger.debug("Ignoring bearer token on optional-auth route: %s", exc.message)
        return None


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> User:
    if credentials is None:
        raise AuthenticationException("Access token required")
    return _user_from_token(credentials.credentials)


def get_accessible_cv(cv_id: int, user: User | None, owner_only: bool = False) -> CV:
    """
    Load a CV the caller may use.

    Signed-in users reach their own and guest CVs; admins reach every CV.
    With ``owner_only`` a CV that belongs to a user also needs that user's token.
    """
    cv = get_database().get_cv(cv_id)
    if cv is None:
        raise NotFoundException(f"CV {cv_id} not found", error="CV not found")
    if cv.user_id is None or (user is not None and user.role == "admin"):
        return cv
    if user is None:
        if owner_only:
            raise AuthenticationException("Access token required")
        return cv
    if cv.user_id != user.id:
        raise AuthorizationException("You do not have access to this CV")
    return cv


def require_admin(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> AdminUser:
    if credentials is None:
        raise AuthenticationException("Access token required")
    payload = decode_access_token(credentials.credentials)
    if not payload.get("is_admin"):
        raise AuthorizationException("Admin access required")

    try:
        admin_id = int(payload.get("sub") or 0)
    except (TypeError, ValueError) as exc:
        raise AuthenticationException("Invalid authentication token") from exc
    if admin_id:
        user = get_database().get_user(admin_id)
        if user is None or user.role != "admin" or not user.is_active:
            raise AuthorizationException("Admin access required")
        return AdminUser(id=user.id, email=user.email, name=user.name or user.username)
    return AdminUser(id=0, email=payload.get("email") or settings.admin_email, name=settings.admin_name)
