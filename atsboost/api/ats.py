import asyncio
import logging
from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from atsboost.api.deps import get_accessible_cv, get_current_user, get_optional_user
from atsboost.libs.exceptions import AuthorizationException, BadRequestException
from atsboost.libs.pdf_generator import generate_ats_report_pdf
from atsboost.schemas import AnalysisReport, AnalyzeTextRequest, CV, DeepAnalysisRequest, User
from atsboost.services.analysis_service import get_analysis_service
from atsboost.services.ats_analyzer import get_ats_analyzer, rating_for
from atsboost.services.plan_service import get_plan_service
from atsboost.services.whatsapp_service import get_whatsapp_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["ats"])


def _start_scan(cv_id: int, user: User | None) -> CV:
    cv = get_accessible_cv(cv_id, user)
    if user is not None:
        get_plan_service().ensure_can_scan(user.id)
    return cv


def _finish_scan(report: AnalysisReport, user_id: int | None) -> tuple[dict[str, Any], int | None]:
    plans = get_plan_service()
    plans.record_scan(user_id)
    return plans.apply_report_limits(report, user_id), plans.get_scans_remaining(user_id)


def _start_deep_analysis(cv_id: int, user: User) -> CV:
    cv = get_accessible_cv(cv_id, user)
    if not get_plan_service().can_access_feature(user.id, "deep_analysis"):
        raise AuthorizationException(
            "Deep analysis is available on the Premium and Professional plans",
            error="Upgrade required",
        )
    return cv


@router.get("/ats-score/{cv_id}")
def get_ats_score(cv_id: int) -> dict[str, Any]:
    score = get_analysis_service().get_or_create_score(cv_id)
    return {**score.model_dump(mode="json"), "rating": rating_for(score.score)}


@router.post("/analyze-cv/{cv_id}")
async def analyze_cv(cv_id: int, user: User | None = Depends(get_optional_user)) -> dict[str, Any]:
    loop = asyncio.get_running_loop()
    user_id = user.id if user else None
    cv = await loop.run_in_executor(None, _start_scan, cv_id, user)

    report = await get_analysis_service().analyze(cv)

    analysis, scans_remaining = await loop.run_in_executor(None, _finish_scan, report, user_id)
    if user_id is not None:
        await get_whatsapp_service().notify_analysis_complete(user_id, cv.title, report.score)

    return {
        "success": True,
        "cv_id": cv.id,
        "analysis": analysis,
        "scans_remaining": scans_remaining,
    }


@router.post("/analyze-resume-text")
def analyze_resume_text(request: AnalyzeTextRequest) -> dict[str, Any]:
    if not request.resume_content or not request.resume_content.strip():
        raise BadRequestException("Resume content is required")
    return get_ats_analyzer().analyze_resume_text(request.resume_content, request.job_description)


@router.post("/deep-analysis")
async def deep_analysis(request: DeepAnalysisRequest, user: User = Depends(get_current_user)) -> dict[str, Any]:
    loop = asyncio.get_running_loop()
    cv = await loop.run_in_executor(None, _start_deep_analysis, request.cv_id, user)
    report = await get_analysis_service().deep_analysis(cv)
    return {
        "success": True,
        "cv_id": cv.id,
        "report_url": f"/api/reports/{cv.id}.pdf",
        "analysis": report.model_dump(),
    }


@router.get("/reports/{cv_id}.pdf")
def download_report(cv_id: int, user: User | None = Depends(get_optional_user)) -> Response:
    get_accessible_cv(cv_id, user, owner_only=True)
    cv, report = get_analysis_service().get_report(cv_id)
    pdf = generate_ats_report_pdf(cv, report)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="ats-report-{cv.id}.pdf"'},
    )
