"""
Auth Service - user accounts and admin sign-in
"""

from __future__ import annotations

import logging

from atsboost.config import settings
from atsboost.libs.database import Database, get_database
from atsboost.libs.exceptions import (
    AuthenticationException,
    BadRequestException,
    NotFoundException,
)
from atsboost.libs.security import (
    create_admin_token,
    create_user_token,
    hash_password,
    verify_password,
)
from atsboost.schemas import (
    AdminLoginResponse,
    AdminUser,
    AuthResponse,
    SignUpRequest,
    User,
    UserPublic,
    utcnow,
)
from atsboost.utils.util import is_valid_email

logger = logging.getLogger(__name__)

# id reported for the configured (non-database) admin account
CONFIGURED_ADMIN_ID = 0


class AuthService:
    def __init__(self, db: Database | None = None) -> None:
        self._db = db
        self._admin_password_hash: str | None = None

    @property
    def db(self) -> Database:
        return self._db or get_database()

    def _issue_user_token(self, user: User) -> AuthResponse:
        token = create_user_token(user.id, user.email, user.role)
        return AuthResponse(token=token, user=UserPublic.from_user(user))

    def signup(self, request: SignUpRequest) -> AuthResponse:
        if not is_valid_email(request.email):
            raise BadRequestException("Please enter a valid email address", error="Invalid email")
        user = self.db.create_user(
            username=request.username,
            email=request.email,
            password_hash=hash_password(request.password),
            name=request.name,
        )
        logger.info("New user registered: %s", user.id)
        return self._issue_user_token(user)

    def signin(self, email: str, password: str) -> AuthResponse:
        user = self.db.get_user_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            raise AuthenticationException("Invalid email or password")
        if not user.is_active:
            raise AuthenticationException("This account has been deactivated")
        user = self.db.update_user(user.id, last_login=utcnow())
        return self._issue_user_token(user)

    def get_user(self, user_id: int) -> User:
        user = self.db.get_user(user_id)
        if user is None:
            raise NotFoundException(f"User {user_id} not found", error="User not found")
        return user

    def _configured_admin_hash(self) -> str | None:
        if not settings.admin_password:
            return None
        if self._admin_password_hash is None:
            self._admin_password_hash = hash_password(settings.admin_password)
        return self._admin_password_hash

    def admin_login(self, email: str, password: str) -> AdminLoginResponse:
        """
        Authenticate the configured admin account, or a stored user with the admin role.

        Raises:
            AuthenticationException: Unknown admin or wrong password.
        """
        email = email.strip().lower()
        admin_hash = self._configured_admin_hash()
        if admin_hash and email == settings.admin_email.lower():
            if not verify_password(password, admin_hash):
                raise AuthenticationException("Invalid credentials")
            admin = AdminUser(id=CONFIGURED_ADMIN_ID, email=settings.admin_email, name=settings.admin_name)
            logger.info("Configured admin signed in")
            return AdminLoginResponse(token=create_admin_token(admin.id, admin.email), user=admin)

        user = self.db.get_user_by_email(email)
        if (
            user is None
            or user.role != "admin"
            or not user.is_active
            or not verify_password(password, user.password_hash)
        ):
            raise AuthenticationException("Invalid credentials")
        self.db.update_user(user.id, last_login=utcnow())
        admin = AdminUser(id=user.id, email=user.email, name=user.name or user.username)
        return AdminLoginResponse(token=create_admin_token(admin.id, admin.email), user=admin)


_auth_service: AuthService | None = None


def get_auth_service() -> AuthService:
    """Get auth service instance (singleton)."""
    global _auth_service
    if _auth_service is None:
        _auth_service = AuthService()
    return _auth_service
