"""Plan tiers, feature gating and scan quotas."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any

from atsboost.libs.database import Database, get_database
from atsboost.libs.exceptions import NotFoundException, ScanLimitException
from atsboost.schemas import AnalysisReport, Subscription

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlanFeatures:
    name: str
    scan_limit: int | None
    max_strengths: int | None
    max_improvements: int | None
    full_recommendations: bool
    before_after_comparison: bool
    keyword_optimization: bool
    unlimited_uploads: bool
    bbbee_guidance: bool
    nqf_guidance: bool
    interview_practice: bool
    skill_gap_analysis: bool
    job_matching: bool
    deep_analysis: bool
    email_support: bool

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


PLAN_FEATURES: dict[str, PlanFeatures] = {
    "FREE": PlanFeatures(
        name="Free",
        scan_limit=1,
        max_strengths=2,
        max_improvements=1,
        full_recommendations=False,
        before_after_comparison=False,
        keyword_optimization=False,
        unlimited_uploads=False,
        bbbee_guidance=False,
        nqf_guidance=False,
        interview_practice=False,
        skill_gap_analysis=False,
        job_matching=False,
        deep_analysis=False,
        email_support=False,
    ),
    "ESSENTIAL": PlanFeatures(
        name="Essential",
        scan_limit=5,
        max_strengths=None,
        max_improvements=None,
        full_recommendations=True,
        before_after_comparison=False,
        keyword_optimization=True,
        unlimited_uploads=False,
        bbbee_guidance=True,
        nqf_guidance=True,
        interview_practice=False,
        skill_gap_analysis=False,
        job_matching=False,
        deep_analysis=False,
        email_support=False,
    ),
    "PREMIUM": PlanFeatures(
        name="Premium",
        scan_limit=None,
        max_strengths=None,
        max_improvements=None,
        full_recommendations=True,
        before_after_comparison=True,
        keyword_optimization=True,
        unlimited_uploads=True,
        bbbee_guidance=True,
        nqf_guidance=True,
        interview_practice=False,
        skill_gap_analysis=False,
        job_matching=True,
        deep_analysis=True,
        email_support=False,
    ),
    "PROFESSIONAL": PlanFeatures(
        name="Professional",
        scan_limit=None,
        max_strengths=None,
        max_improvements=None,
        full_recommendations=True,
        before_after_comparison=True,
        keyword_optimization=True,
        unlimited_uploads=True,
        bbbee_guidance=True,
        nqf_guidance=True,
        interview_practice=True,
        skill_gap_analysis=True,
        job_matching=True,
        deep_analysis=True,
        email_support=True,
    ),
}

FREE_PLAN = PLAN_FEATURES["FREE"]
SUBSCRIPTION_PERIOD_DAYS = 30


def tier_for_plan_name(plan_name: str) -> str:
    """Map a stored plan name onto a feature tier key; unknown names are FREE."""
    upper = plan_name.upper()
    for tier in ("PROFESSIONAL", "PREMIUM", "ESSENTIAL"):
        if tier in upper:
            return tier
    return "FREE"


class PlanService:
    def __init__(self, db: Database | None = None) -> None:
        self._db = db

    @property
    def db(self) -> Database:
        return self._db or get_database()

    def _active_subscription(self, user_id: int | None) -> Subscription | None:
        if not user_id:
            return None
        return self.db.get_active_subscription(user_id)

    def get_user_plan_features(self, user_id: int | None) -> PlanFeatures:
        subscription = self._active_subscription(user_id)
        if subscription is None:
            return FREE_PLAN
        plan = self.db.get_plan(subscription.plan_id)
        if plan is None:
            logger.warning("Subscription %s references missing plan %s", subscription.id, subscription.plan_id)
            return FREE_PLAN
        return PLAN_FEATURES[tier_for_plan_name(plan.name)]

    def get_user_plan_name(self, user_id: int | None) -> str:
        return self.get_user_plan_features(user_id).name

    def can_access_feature(self, user_id: int | None, feature: str) -> bool:
        features = self.get_user_plan_features(user_id)
        if not hasattr(features, feature) or feature == "name":
            raise ValueError(f"Unknown plan feature: {feature}")
        value = getattr(features, feature)
        if isinstance(value, bool):
            return value
        # numeric limits: None means unlimited
        return value is None or value > 0

    def get_scans_remaining(self, user_id: int | None) -> int | None:
        """Remaining scans in the current period, or ``None`` when unlimited."""
        features = self.get_user_plan_features(user_id)
        if features.scan_limit is None:
            return None
        subscription = self._active_subscription(user_id)
        if subscription is None:
            return FREE_PLAN.scan_limit
        return max(0, features.scan_limit - subscription.scans_used)

    def ensure_can_scan(self, user_id: int | None) -> None:
        remaining = self.get_scans_remaining(user_id)
        if remaining is not None and remaining <= 0:
            raise ScanLimitException(
                "You have used all scans included in your plan. Upgrade to continue analysing CVs."
            )

    def _free_plan_id(self) -> int | None:
        for plan in self.db.list_plans():
            if tier_for_plan_name(plan.name) == "FREE":
                return plan.id
        return None

    def record_scan(self, user_id: int | None) -> bool:
        """
        Count one scan against the user's current period.

        Users without a subscription start a Free plan period on their first
        scan. Returns False for guests or when no Free plan is stored.
        """
        if not user_id:
            return False
        subscription = self._active_subscription(user_id)
        if subscription is None:
            free_plan_id = self._free_plan_id()
            if free_plan_id is None:
                return False
            subscription = self.db.create_subscription(
                user_id, free_plan_id, period_days=SUBSCRIPTION_PERIOD_DAYS
            )
        self.db.update_subscription(subscription.id, scans_used=subscription.scans_used + 1)
        return True

    def subscribe(self, user_id: int, plan_id: int) -> Subscription:
        plan = self.db.get_plan(plan_id)
        if plan is None or not plan.is_active:
            raise NotFoundException(f"Plan {plan_id} not found", error="Plan not found")
        current = self._active_subscription(user_id)
        if current is not None:
            self.db.update_subscription(current.id, status="cancelled")
        subscription = self.db.create_subscription(user_id, plan_id, period_days=SUBSCRIPTION_PERIOD_DAYS)
        logger.info("User %s subscribed to plan %s", user_id, plan.name)
        return subscription

    def apply_report_limits(self, report: AnalysisReport, user_id: int | None) -> dict[str, Any]:
        """Serialise a report, trimming the parts the user's plan does not include."""
        features = self.get_user_plan_features(user_id)
        data = report.model_dump()
        if features.max_strengths is not None:
            data["strengths"] = data["strengths"][: features.max_strengths]
        if features.max_improvements is not None:
            data["improvements"] = data["improvements"][: features.max_improvements]
        if not features.keyword_optimization:
            data["keyword_recommendations"] = []
        if not features.job_matching:
            data["job_match"] = None
        data["plan"] = features.name
        data["limited"] = not features.full_recommendations
        return data


_plan_service: PlanService | None = None


def get_plan_service() -> PlanService:
    """Get plan service instance (singleton)."""
    global _plan_service
    if _plan_service is None:
        _plan_service = PlanService()
    return _plan_service
