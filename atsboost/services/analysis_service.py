"""
Analysis Service - CV analysis with AI providers, local fallback and caching
"""

from __future__ import annotations

import asyncio
import logging
import math
from typing import Any

from atsboost.config import settings
from atsboost.libs.analysis_cache import AnalysisCache, get_analysis_cache
from atsboost.libs.database import Database, get_database
from atsboost.libs.exceptions import LLMServiceException, NotFoundException
from atsboost.libs.llm import generate_json_with_fallback
from atsboost.prompts import ATS_SYSTEM_PROMPT, build_ats_analysis_prompt, build_deep_analysis_prompt
from atsboost.schemas import ATSScore, AnalysisReport, CV
from atsboost.services.ats_analyzer import ATSAnalyzer, get_ats_analyzer, rating_for

logger = logging.getLogger(__name__)

_LIST_FIELDS = (
    "strengths",
    "improvements",
    "issues",
    "skills_identified",
    "sa_keywords_found",
    "keyword_recommendations",
)
_SCORE_FIELDS = {"skills_score": 50, "context_score": 30, "format_score": 20}
_PERSISTED_FIELDS = {
    "score",
    "skills_score",
    "context_score",
    "format_score",
    "strengths",
    "improvements",
    "issues",
    "sa_keywords_found",
    "bbbee_detected",
    "nqf_detected",
    "keyword_recommendations",
    "source",
}


def _clamp(value: Any, upper: int) -> int:
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"score is not a finite number: {value!r}")
    return max(0, min(upper, int(round(number))))


def _ensure_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, list):
        return [str(item).strip() for item in value if item and str(item).strip()]
    return [str(value).strip()] if str(value).strip() else []


def normalize_ai_report(data: dict[str, Any], baseline: AnalysisReport, provider: str) -> AnalysisReport:
    """
    Merge a provider's JSON answer over the local report.

    Scores are clamped to their ranges and list fields coerced to lists of
    strings; anything the provider left out keeps the local value.

    Raises:
        ValueError: The answer has no usable overall score.
    """
    if "score" not in data:
        raise ValueError("AI response is missing a score")
    try:
        score = _clamp(data["score"], 100)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"AI response score is not numeric: {data['score']!r}") from exc

    merged = baseline.model_dump()
    merged["score"] = score
    merged["rating"] = rating_for(score)
    merged["source"] = provider
    for field, upper in _SCORE_FIELDS.items():
        if field in data:
            try:
                merged[field] = _clamp(data[field], upper)
            except (TypeError, ValueError):
                logger.debug("Ignoring non-numeric %s from %s", field, provider)
    for field in _LIST_FIELDS:
        values = _ensure_list(data.get(field))
        if values:
            merged[field] = values
    for field in ("bbbee_detected", "nqf_detected"):
        if isinstance(data.get(field), bool):
            merged[field] = data[field]
    return AnalysisReport.model_validate(merged)


def report_from_score(score: ATSScore) -> AnalysisReport:
    return AnalysisReport(
        rating=rating_for(score.score),
        **score.model_dump(include=_PERSISTED_FIELDS),
    )


class AnalysisService:
    """Service for CV analysis operations"""

    def __init__(
        self,
        db: Database | None = None,
        cache: AnalysisCache | None = None,
        analyzer: ATSAnalyzer | None = None,
    ) -> None:
        self._db = db
        self.cache = cache or get_analysis_cache()
        self.analyzer = analyzer or get_ats_analyzer()

    @property
    def db(self) -> Database:
        return self._db or get_database()

    def _get_cv(self, cv_id: int) -> CV:
        cv = self.db.get_cv(cv_id)
        if cv is None:
            raise NotFoundException(f"CV {cv_id} not found", error="CV not found")
        return cv

    async def _ai_report(self, prompt: str, baseline: AnalysisReport) -> AnalysisReport:
        try:
            provider, data = await generate_json_with_fallback(prompt, ATS_SYSTEM_PROMPT)
            return normalize_ai_report(data, baseline, provider)
        except (LLMServiceException, ValueError) as exc:
            logger.warning("AI analysis unavailable, using local analyzer: %s", exc)
            return baseline

    def _persist(self, cv: CV, report: AnalysisReport) -> ATSScore:
        return self.db.create_ats_score(cv.id, **report.model_dump(include=_PERSISTED_FIELDS))

    async def _persist_async(self, cv: CV, report: AnalysisReport) -> ATSScore:
        # storage clients are synchronous
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._persist, cv, report)

    async def analyze(self, cv: CV, use_ai: bool = True) -> AnalysisReport:
        """
        Analyse a CV, reusing a cached report when the content is unchanged.

        Args:
            cv: The CV to analyse.
            use_ai: Try the configured LLM providers before the local analyzer.

        Returns:
            The analysis report; a new ATS score row is stored for fresh reports.
        """
        cached = self.cache.get(cv.id, cv.content)
        if cached is not None:
            logger.debug("Analysis cache hit for CV %s", cv.id)
            return cached

        report = self.analyzer.analyze(cv.content, cv.job_description)
        if use_ai and settings.ai_analysis_enabled:
            prompt = build_ats_analysis_prompt(cv.content, cv.job_description)
            report = await self._ai_report(prompt, report)

        await self._persist_async(cv, report)
        self.cache.set(cv.id, cv.content, report)
        return report

    async def deep_analysis(self, cv: CV) -> AnalysisReport:
        report = self.analyzer.analyze(cv.content, cv.job_description)
        if settings.ai_analysis_enabled:
            prompt = build_deep_analysis_prompt(cv.content, cv.target_position, cv.target_industry)
            report = await self._ai_report(prompt, report)
        await self._persist_async(cv, report)
        self.cache.set(cv.id, cv.content, report)
        return report

    def get_or_create_score(self, cv_id: int) -> ATSScore:
        """Return the stored score for a CV, scoring it locally first if needed."""
        cv = self._get_cv(cv_id)
        existing = self.db.get_ats_score_by_cv(cv.id)
        if existing is not None:
            return existing
        report = self.analyzer.analyze(cv.content, cv.job_description)
        self.cache.set(cv.id, cv.content, report)
        return self._persist(cv, report)

    def get_report(self, cv_id: int) -> tuple[CV, AnalysisReport]:
        cv = self._get_cv(cv_id)
        cached = self.cache.get(cv.id, cv.content)
        if cached is not None:
            return cv, cached
        return cv, report_from_score(self.get_or_create_score(cv.id))


_analysis_service: AnalysisService | None = None


def get_analysis_service() -> AnalysisService:
    """Get analysis service instance (singleton)."""
    global _analysis_service
    if _analysis_service is None:
        _analysis_service = AnalysisService()
    return _analysis_service
