# database.py
"""
Relational storage for users, CVs, ATS scores, plans, subscriptions,
newsletter signups, SA profiles, employers and job postings.

Entity operations live on the ``Database`` base class and are written against
four table primitives (select, count, insert, update). ``MemoryDatabase``
implements the primitives with dictionaries; ``SupabaseDatabase`` implements
them with the supabase-py query builder.
"""

from __future__ import annotations

import itertools
import logging
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable

from supabase import Client, create_client

from atsboost.config import settings
from atsboost.libs.exceptions import ConflictException, NotFoundException
from atsboost.schemas import (
    ATSScore,
    CV,
    Employer,
    JobPosting,
    NewsletterSubscription,
    Plan,
    SaProfile,
    Subscription,
    User,
    utcnow,
)

logger = logging.getLogger(__name__)

Row = dict[str, Any]

USERS = "users"
CVS = "cvs"
ATS_SCORES = "ats_scores"
PLANS = "plans"
SUBSCRIPTIONS = "subscriptions"
NEWSLETTER = "newsletter_subscriptions"
SA_PROFILES = "sa_profiles"
EMPLOYERS = "employers"
JOB_POSTINGS = "job_postings"

TABLES = (
    USERS,
    CVS,
    ATS_SCORES,
    PLANS,
    SUBSCRIPTIONS,
    NEWSLETTER,
    SA_PROFILES,
    EMPLOYERS,
    JOB_POSTINGS,
)

DEFAULT_PLANS: list[Row] = [
    {
        "name": "Free",
        "description": "One CV scan with headline feedback",
        "price": 0,
        "interval": "month",
        "scan_limit": 1,
    },
    {
        "name": "Essential",
        "description": "Five scans a month with full recommendations",
        "price": 9900,
        "interval": "month",
        "scan_limit": 5,
    },
    {
        "name": "Premium",
        "description": "Unlimited scans, job matching and deep analysis",
        "price": 19900,
        "interval": "month",
        "scan_limit": None,
    },
    {
        "name": "Professional",
        "description": "Everything in Premium plus interview practice and skill gap analysis",
        "price": 34900,
        "interval": "month",
        "scan_limit": None,
    },
]


class Database(ABC):
    """Storage interface for the application's relational entities."""

    # ========================================================================
    # TABLE PRIMITIVES
    # ========================================================================

    @abstractmethod
    def _select(
        self,
        table: str,
        eq: dict[str, Any] | None = None,
        gte: dict[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Row]:
        """Return rows matching all equality and lower-bound filters."""
        raise NotImplementedError

    @abstractmethod
    def _count(
        self,
        table: str,
        eq: dict[str, Any] | None = None,
        gte: dict[str, Any] | None = None,
    ) -> int:
        raise NotImplementedError

    @abstractmethod
    def _insert(self, table: str, data: Row) -> Row:
        """Insert a row and return it with its assigned id and created_at."""
        raise NotImplementedError

    @abstractmethod
    def _update(self, table: str, row_id: int, data: Row) -> Row | None:
        raise NotImplementedError

    @abstractmethod
    def check_connection(self) -> bool:
        raise NotImplementedError

    def _first(self, table: str, **eq: Any) -> Row | None:
        rows = self._select(table, eq=eq, limit=1)
        return rows[0] if rows else None

    # ========================================================================
    # USERS
    # ========================================================================

    def get_user(self, user_id: int) -> User | None:
        row = self._first(USERS, id=user_id)
        return User.model_validate(row) if row else None

    def get_user_by_email(self, email: str) -> User | None:
        row = self._first(USERS, email=email.strip().lower())
        return User.model_validate(row) if row else None

    def get_user_by_username(self, username: str) -> User | None:
        row = self._first(USERS, username=username.strip())
        return User.model_validate(row) if row else None

    def create_user(
        self,
        username: str,
        email: str,
        password_hash: str,
        name: str | None = None,
        role: str = "user",
    ) -> User:
        email = email.strip().lower()
        username = username.strip()
        if self.get_user_by_email(email):
            raise ConflictException("A user with this email already exists")
        if self.get_user_by_username(username):
            raise ConflictException("This username is already taken")
        row = self._insert(
            USERS,
            {
                "username": username,
                "email": email,
                "password_hash": password_hash,
                "name": name,
                "role": role,
                "is_active": True,
            },
        )
        return User.model_validate(row)

    def update_user(self, user_id: int, **updates: Any) -> User:
        row = self._update(USERS, user_id, updates)
        if row is None:
            raise NotFoundException(f"User {user_id} not found", error="User not found")
        return User.model_validate(row)

    def list_users(self, limit: int = 10, offset: int = 0) -> list[User]:
        rows = self._select(
            USERS, order_by="created_at", descending=True, limit=limit, offset=offset
        )
        return [User.model_validate(row) for row in rows]

    def count_users(self, active_since: datetime | None = None) -> int:
        if active_since is None:
            return self._count(USERS)
        return self._count(USERS, gte={"last_login": active_since})

    # ========================================================================
    # CVS
    # ========================================================================

    def get_cv(self, cv_id: int) -> CV | None:
        row = self._first(CVS, id=cv_id)
        return CV.model_validate(row) if row else None

    def get_cvs_by_user(self, user_id: int) -> list[CV]:
        rows = self._select(CVS, eq={"user_id": user_id}, order_by="created_at", descending=True)
        return [CV.model_validate(row) for row in rows]

    def get_latest_cv_by_user(self, user_id: int) -> CV | None:
        rows = self._select(
            CVS, eq={"user_id": user_id}, order_by="created_at", descending=True, limit=1
        )
        return CV.model_validate(rows[0]) if rows else None

    def create_cv(
        self,
        file_name: str,
        file_type: str,
        file_size: int,
        content: str,
        user_id: int | None = None,
        title: str | None = None,
        description: str | None = None,
        target_position: str | None = None,
        target_industry: str | None = None,
        job_description: str | None = None,
    ) -> CV:
        if user_id is not None and self.get_user(user_id) is None:
            raise NotFoundException(f"User {user_id} not found", error="User not found")
        row = self._insert(
            CVS,
            {
                "user_id": user_id,
                "file_name": file_name,
                "file_type": file_type,
                "file_size": file_size,
                "content": content,
                "title": title or "My CV",
                "description": description,
                "target_position": target_position,
                "target_industry": target_industry,
                "job_description": job_description,
                "is_guest": user_id is None,
            },
        )
        return CV.model_validate(row)

    def list_cvs(self, limit: int = 10, offset: int = 0) -> list[CV]:
        rows = self._select(CVS, order_by="created_at", descending=True, limit=limit, offset=offset)
        return [CV.model_validate(row) for row in rows]

    def count_cvs(self) -> int:
        return self._count(CVS)

    # ========================================================================
    # ATS SCORES
    # ========================================================================

    def get_ats_score_by_cv(self, cv_id: int) -> ATSScore | None:
        rows = self._select(
            ATS_SCORES, eq={"cv_id": cv_id}, order_by="created_at", descending=True, limit=1
        )
        return ATSScore.model_validate(rows[0]) if rows else None

    def create_ats_score(self, cv_id: int, **fields: Any) -> ATSScore:
        if self.get_cv(cv_id) is None:
            raise NotFoundException(f"CV {cv_id} not found", error="CV not found")
        row = self._insert(ATS_SCORES, {"cv_id": cv_id, **fields})
        return ATSScore.model_validate(row)

    def count_ats_scores(self) -> int:
        return self._count(ATS_SCORES)

    def average_ats_score(self, page_size: int = 1000) -> float:
        """Mean of all stored scores, read page by page (PostgREST caps rows per response)."""
        total = 0
        count = 0
        offset = 0
        while True:
            rows = self._select(ATS_SCORES, order_by="id", limit=page_size, offset=offset)
            total += sum(row.get("score") or 0 for row in rows)
            count += len(rows)
            if len(rows) < page_size:
                break
            offset += page_size
        return total / count if count else 0.0

    # ========================================================================
    # PLANS & SUBSCRIPTIONS
    # ========================================================================

    def list_plans(self, active_only: bool = True) -> list[Plan]:
        eq = {"is_active": True} if active_only else None
        rows = self._select(PLANS, eq=eq, order_by="price")
        return [Plan.model_validate(row) for row in rows]

    def get_plan(self, plan_id: int) -> Plan | None:
        row = self._first(PLANS, id=plan_id)
        return Plan.model_validate(row) if row else None

    def seed_plans(self, plans: Iterable[Row] = DEFAULT_PLANS) -> int:
        """Insert the default plans when the plans table is empty."""
        if self._count(PLANS) > 0:
            return 0
        inserted = 0
        for plan in plans:
            self._insert(PLANS, {**plan, "is_active": True})
            inserted += 1
        logger.info("Seeded %s subscription plans", inserted)
        return inserted

    def get_active_subscription(self, user_id: int) -> Subscription | None:
        now = utcnow()
        rows = self._select(
            SUBSCRIPTIONS,
            eq={"user_id": user_id, "status": "active"},
            gte={"current_period_end": now},
            order_by="created_at",
            descending=True,
            limit=1,
        )
        return Subscription.model_validate(rows[0]) if rows else None

    def create_subscription(
        self,
        user_id: int,
        plan_id: int,
        period_days: int = 30,
    ) -> Subscription:
        if self.get_user(user_id) is None:
            raise NotFoundException(f"User {user_id} not found", error="User not found")
        if self.get_plan(plan_id) is None:
            raise NotFoundException(f"Plan {plan_id} not found", error="Plan not found")
        start = utcnow()
        row = self._insert(
            SUBSCRIPTIONS,
            {
                "user_id": user_id,
                "plan_id": plan_id,
                "status": "active",
                "current_period_start": start,
                "current_period_end": start + timedelta(days=period_days),
                "scans_used": 0,
            },
        )
        return Subscription.model_validate(row)

    def update_subscription(self, subscription_id: int, **updates: Any) -> Subscription:
        row = self._update(SUBSCRIPTIONS, subscription_id, updates)
        if row is None:
            raise NotFoundException(
                f"Subscription {subscription_id} not found", error="Subscription not found"
            )
        return Subscription.model_validate(row)

    def count_subscriptions(self, status: str | None = "active") -> int:
        eq = {"status": status} if status else None
        return self._count(SUBSCRIPTIONS, eq=eq)

    # ========================================================================
    # NEWSLETTER
    # ========================================================================

    def get_newsletter_subscription(self, email: str) -> NewsletterSubscription | None:
        row = self._first(NEWSLETTER, email=email.strip().lower())
        return NewsletterSubscription.model_validate(row) if row else None

    def create_newsletter_subscription(self, email: str) -> NewsletterSubscription:
        email = email.strip().lower()
        if self.get_newsletter_subscription(email):
            raise ConflictException("This email is already subscribed")
        row = self._insert(NEWSLETTER, {"email": email})
        return NewsletterSubscription.model_validate(row)

    def count_newsletter_subscriptions(self) -> int:
        return self._count(NEWSLETTER)

    # ========================================================================
    # SA PROFILES
    # ========================================================================

    def get_sa_profile(self, user_id: int) -> SaProfile | None:
        row = self._first(SA_PROFILES, user_id=user_id)
        return SaProfile.model_validate(row) if row else None

    def upsert_sa_profile(self, user_id: int, **updates: Any) -> SaProfile:
        existing = self.get_sa_profile(user_id)
        if existing is None:
            if self.get_user(user_id) is None:
                raise NotFoundException(f"User {user_id} not found", error="User not found")
            row = self._insert(SA_PROFILES, {"user_id": user_id, **updates})
        else:
            row = self._update(SA_PROFILES, existing.id, updates)
        return SaProfile.model_validate(row)

    # ========================================================================
    # EMPLOYERS & JOB POSTINGS
    # ========================================================================

    def get_employer(self, employer_id: int) -> Employer | None:
        row = self._first(EMPLOYERS, id=employer_id)
        return Employer.model_validate(row) if row else None

    def get_employer_by_user(self, user_id: int) -> Employer | None:
        row = self._first(EMPLOYERS, user_id=user_id)
        return Employer.model_validate(row) if row else None

    def create_employer(self, user_id: int, company_name: str, **fields: Any) -> Employer:
        if self.get_user(user_id) is None:
            raise NotFoundException(f"User {user_id} not found", error="User not found")
        if self.get_employer_by_user(user_id):
            raise ConflictException("An employer profile already exists for this user")
        row = self._insert(
            EMPLOYERS,
            {"user_id": user_id, "company_name": company_name, "is_verified": False, **fields},
        )
        return Employer.model_validate(row)

    def list_employers(
        self,
        industry: str | None = None,
        location: str | None = None,
        is_verified: bool | None = None,
        limit: int = 50,
    ) -> list[Employer]:
        eq: dict[str, Any] = {}
        if industry:
            eq["industry"] = industry
        if location:
            eq["location"] = location
        if is_verified is not None:
            eq["is_verified"] = is_verified
        rows = self._select(EMPLOYERS, eq=eq, order_by="created_at", descending=True, limit=limit)
        return [Employer.model_validate(row) for row in rows]

    def get_job_posting(self, posting_id: int) -> JobPosting | None:
        row = self._first(JOB_POSTINGS, id=posting_id)
        return JobPosting.model_validate(row) if row else None

    def create_job_posting(self, employer_id: int, title: str, description: str, **fields: Any) -> JobPosting:
        if self.get_employer(employer_id) is None:
            raise NotFoundException(f"Employer {employer_id} not found", error="Employer not found")
        row = self._insert(
            JOB_POSTINGS,
            {
                "employer_id": employer_id,
                "title": title,
                "description": description,
                "is_active": True,
                **fields,
            },
        )
        return JobPosting.model_validate(row)

    def list_job_postings(
        self,
        employer_id: int | None = None,
        location: str | None = None,
        is_active: bool | None = True,
        limit: int = 50,
    ) -> list[JobPosting]:
        eq: dict[str, Any] = {}
        if employer_id is not None:
            eq["employer_id"] = employer_id
        if location:
            eq["location"] = location
        if is_active is not None:
            eq["is_active"] = is_active
        rows = self._select(JOB_POSTINGS, eq=eq, order_by="created_at", descending=True, limit=limit)
        return [JobPosting.model_validate(row) for row in rows]


def _sort_key(value: Any) -> tuple[bool, Any]:
    # sort missing values to the end
    return (value is None, value if value is not None else 0)


class MemoryDatabase(Database):
    """Dictionary-backed store used for development and tests."""

    def __init__(self, seed: bool = True) -> None:
        self._tables: dict[str, dict[int, Row]] = {name: {} for name in TABLES}
        self._ids = {name: itertools.count(1) for name in TABLES}
        self._lock = threading.Lock()
        if seed:
            self.seed_plans()

    @staticmethod
    def _matches(row: Row, eq: dict[str, Any] | None, gte: dict[str, Any] | None) -> bool:
        for key, value in (eq or {}).items():
            if row.get(key) != value:
                return False
        for key, value in (gte or {}).items():
            current = row.get(key)
            if current is None or current < value:
                return False
        return True

    def _select(
        self,
        table: str,
        eq: dict[str, Any] | None = None,
        gte: dict[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Row]:
        with self._lock:
            rows = [dict(row) for row in self._tables[table].values() if self._matches(row, eq, gte)]
        if order_by:
            # id breaks ties between rows created within the same clock tick
            rows.sort(key=lambda r: (_sort_key(r.get(order_by)), r["id"]), reverse=descending)
        if limit is not None:
            return rows[offset : offset + limit]
        return rows[offset:]

    def _count(
        self,
        table: str,
        eq: dict[str, Any] | None = None,
        gte: dict[str, Any] | None = None,
    ) -> int:
        with self._lock:
            return sum(1 for row in self._tables[table].values() if self._matches(row, eq, gte))

    def _insert(self, table: str, data: Row) -> Row:
        with self._lock:
            row = dict(data)
            row["id"] = next(self._ids[table])
            row.setdefault("created_at", utcnow())
            self._tables[table][row["id"]] = row
            return dict(row)

    def _update(self, table: str, row_id: int, data: Row) -> Row | None:
        with self._lock:
            row = self._tables[table].get(row_id)
            if row is None:
                return None
            row.update(data)
            return dict(row)

    def check_connection(self) -> bool:
        return True


def _to_db_value(value: Any) -> Any:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.isoformat()
    return value


class SupabaseDatabase(Database):
    """Postgres-backed store accessed through the Supabase REST client."""

    def __init__(self, supabase_url: str, supabase_key: str) -> None:
        self.supabase: Client = create_client(supabase_url, supabase_key)

    def _apply_filters(self, query: Any, eq: dict[str, Any] | None, gte: dict[str, Any] | None) -> Any:
        for key, value in (eq or {}).items():
            if value is None:
                query = query.is_(key, "null")
            else:
                query = query.eq(key, _to_db_value(value))
        for key, value in (gte or {}).items():
            query = query.gte(key, _to_db_value(value))
        return query

    def _select(
        self,
        table: str,
        eq: dict[str, Any] | None = None,
        gte: dict[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Row]:
        query = self._apply_filters(self.supabase.table(table).select("*"), eq, gte)
        if order_by:
            query = query.order(order_by, desc=descending)
        if limit is not None:
            query = query.range(offset, offset + limit - 1)
        result = query.execute()
        return [row for row in result.data or [] if isinstance(row, dict)]

    def _count(
        self,
        table: str,
        eq: dict[str, Any] | None = None,
        gte: dict[str, Any] | None = None,
    ) -> int:
        query = self._apply_filters(
            self.supabase.table(table).select("id", count="exact"), eq, gte
        )
        result = query.execute()
        return int(result.count or 0)

    def _insert(self, table: str, data: Row) -> Row:
        payload = {key: _to_db_value(value) for key, value in data.items()}
        result = self.supabase.table(table).insert(payload).execute()
        rows = result.data or []
        if not rows:
            raise RuntimeError(f"Insert into {table} returned no rows")
        return rows[0]

    def _update(self, table: str, row_id: int, data: Row) -> Row | None:
        payload = {key: _to_db_value(value) for key, value in data.items()}
        result = self.supabase.table(table).update(payload).eq("id", row_id).execute()
        rows = result.data or []
        return rows[0] if rows else None

    def check_connection(self) -> bool:
        try:
            self.supabase.table(PLANS).select("id").limit(1).execute()
        except Exception as exc:
            logger.error("Database connection check failed: %s", exc)
            return False
        return True


_database: Database | None = None


def create_database() -> Database:
    """Create the store selected by ``settings.storage_backend``."""
    backend = settings.storage_backend.strip().lower()
    if backend == "memory":
        return MemoryDatabase()
    if backend == "supabase":
        if not settings.supabase_url or not settings.supabase_key:
            raise ValueError("Supabase credentials are required")
        return SupabaseDatabase(settings.supabase_url, settings.supabase_key)
    raise ValueError(f"Unsupported storage backend: {backend}. Supported: memory, supabase")


def get_database() -> Database:
    """Get the database instance (singleton)."""
    global _database
    if _database is None:
        _database = create_database()
    return _database
