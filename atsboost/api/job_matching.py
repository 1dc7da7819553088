import asyncio
import logging
from typing import Any

from fastapi import APIRouter, Depends, Query

from atsboost.api.deps import get_accessible_cv, get_current_user
from atsboost.libs.exceptions import AuthorizationException
from atsboost.schemas import JobPostingMatch, User
from atsboost.services.job_matching_service import get_job_matching_service
from atsboost.services.plan_service import get_plan_service
from atsboost.services.whatsapp_service import get_whatsapp_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["job-matching"])

# top match score that triggers a WhatsApp job alert
NOTIFY_MATCH_SCORE = 70


def _find_matches(cv_id: int, user: User, location: str | None, limit: int) -> list[JobPostingMatch]:
    cv = get_accessible_cv(cv_id, user)
    if not get_plan_service().can_access_feature(user.id, "job_matching"):
        raise AuthorizationException(
            "Job matching is available on the Premium and Professional plans",
            error="Upgrade required",
        )
    return get_job_matching_service().find_matches(cv, location=location, limit=limit)


@router.get("/job-matches/{cv_id}")
async def job_matches(
    cv_id: int,
    location: str | None = None,
    limit: int = Query(10, ge=1, le=50),
    user: User = Depends(get_current_user),
) -> dict[str, Any]:
    """Rank active job postings against one of the caller's CVs."""
    loop = asyncio.get_running_loop()
    matches = await loop.run_in_executor(None, _find_matches, cv_id, user, location, limit)

    notified = False
    if matches and matches[0].match_score >= NOTIFY_MATCH_SCORE:
        best = matches[0]
        notified = await get_whatsapp_service().notify_job_match(
            user.id, best.job_posting_id, best.title, best.company, best.location
        )

    return {
        "success": True,
        "cv_id": cv_id,
        "matches": [match.model_dump() for match in matches],
        "total": len(matches),
        "notified": notified,
    }
