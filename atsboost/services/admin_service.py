"""Admin dashboard queries and user management."""

from __future__ import annotations

import logging
import math
from datetime import timedelta
from typing import Any

from atsboost.libs.database import Database, get_database
from atsboost.libs.exceptions import AuthorizationException, NotFoundException
from atsboost.schemas import AdminUserUpdate, CVSummary, Pagination, User, UserPublic, utcnow

logger = logging.getLogger(__name__)

ACTIVE_USER_WINDOW = timedelta(days=30)
RECENT_ITEMS = 5
MAX_PAGE_SIZE = 100


def paginate(total: int, page: int, limit: int) -> Pagination:
    return Pagination(
        total=total,
        page=page,
        limit=limit,
        total_pages=math.ceil(total / limit) if limit else 0,
    )


def _page_bounds(page: int, limit: int) -> tuple[int, int, int]:
    page = max(1, page)
    limit = max(1, min(MAX_PAGE_SIZE, limit))
    return page, limit, (page - 1) * limit


class AdminService:
    def __init__(self, db: Database | None = None) -> None:
        self._db = db

    @property
    def db(self) -> Database:
        return self._db or get_database()

    def get_stats(self) -> dict[str, Any]:
        db = self.db
        return {
            "total_users": db.count_users(),
            "active_users": db.count_users(active_since=utcnow() - ACTIVE_USER_WINDOW),
            "total_cvs": db.count_cvs(),
            "total_ats_scores": db.count_ats_scores(),
            "average_ats_score": round(db.average_ats_score(), 1),
            "active_subscriptions": db.count_subscriptions("active"),
            "newsletter_subscribers": db.count_newsletter_subscriptions(),
            "recent_users": [
                UserPublic.from_user(user).model_dump(mode="json")
                for user in db.list_users(limit=RECENT_ITEMS)
            ],
            "recent_cvs": [
                CVSummary.from_cv(cv).model_dump(mode="json") for cv in db.list_cvs(limit=RECENT_ITEMS)
            ],
        }

    def list_users(self, page: int = 1, limit: int = 10) -> dict[str, Any]:
        page, limit, offset = _page_bounds(page, limit)
        users = self.db.list_users(limit=limit, offset=offset)
        return {
            "users": [UserPublic.from_user(user).model_dump(mode="json") for user in users],
            "pagination": paginate(self.db.count_users(), page, limit).model_dump(),
        }

    def list_cvs(self, page: int = 1, limit: int = 10) -> dict[str, Any]:
        page, limit, offset = _page_bounds(page, limit)
        cvs = self.db.list_cvs(limit=limit, offset=offset)
        return {
            "cvs": [CVSummary.from_cv(cv).model_dump(mode="json") for cv in cvs],
            "pagination": paginate(self.db.count_cvs(), page, limit).model_dump(),
        }

    def update_user(self, user_id: int, update: AdminUserUpdate, acting_admin_id: int) -> User:
        user = self.db.get_user(user_id)
        if user is None:
            raise NotFoundException(f"User {user_id} not found", error="User not found")
        changes = update.model_dump(exclude_none=True)
        if user_id == acting_admin_id and (
            changes.get("role", "admin") != "admin" or changes.get("is_active") is False
        ):
            raise AuthorizationException("Admins cannot demote or deactivate themselves")
        if not changes:
            return user
        logger.info("Admin %s updated user %s: %s", acting_admin_id, user_id, sorted(changes))
        return self.db.update_user(user_id, **changes)


_admin_service: AdminService | None = None


def get_admin_service() -> AdminService:
    """Get admin service instance (singleton)."""
    global _admin_service
    if _admin_service is None:
        _admin_service = AdminService()
    return _admin_service
