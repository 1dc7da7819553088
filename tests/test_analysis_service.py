import pytest

from atsboost.config import settings
from atsboost.libs.analysis_cache import AnalysisCache
from atsboost.libs.database import MemoryDatabase
from atsboost.libs.exceptions import LLMServiceException
from atsboost.services import analysis_service
from atsboost.services.analysis_service import AnalysisService, normalize_ai_report
from atsboost.services.ats_analyzer import ATSAnalyzer


CV_TEXT = "Python SQL Excel leadership communication teamwork in Johannesburg, Gauteng. NQF level 7."


@pytest.fixture
def memory_db():
    return MemoryDatabase()


@pytest.fixture
def cv(memory_db):
    return memory_db.create_cv(file_name="cv.txt", file_type="text/plain", file_size=len(CV_TEXT), content=CV_TEXT)


@pytest.fixture
def service(memory_db):
    return AnalysisService(db=memory_db, cache=AnalysisCache(ttl_seconds=60), analyzer=ATSAnalyzer())


def test_normalize_ai_report_clamps_and_merges():
    baseline = ATSAnalyzer().analyze(CV_TEXT)
    data = {
        "score": 140,
        "skills_score": "45",
        "context_score": -3,
        "strengths": "Strong SQL skills",
        "improvements": [],
        "bbbee_detected": True,
    }

    report = normalize_ai_report(data, baseline, "openai")

    assert report.score == 100
    assert report.rating == "Excellent"
    assert report.skills_score == 45
    assert report.context_score == 0
    assert report.strengths == ["Strong SQL skills"]
    assert report.improvements == baseline.improvements
    assert report.bbbee_detected is True
    assert report.source == "openai"


def test_normalize_ai_report_requires_score():
    baseline = ATSAnalyzer().analyze(CV_TEXT)
    with pytest.raises(ValueError):
        normalize_ai_report({"strengths": ["x"]}, baseline, "openai")


@pytest.mark.asyncio
async def test_analyze_uses_ai_provider(monkeypatch, service, memory_db, cv):
    async def fake_generate(prompt, system_prompt=None, providers=None, operation="AI analysis"):
        assert "Johannesburg" in prompt
        return "xai", {"score": 77, "strengths": ["Clear structure"]}

    monkeypatch.setattr(settings, "ai_analysis_enabled", True)
    monkeypatch.setattr(analysis_service, "generate_json_with_fallback", fake_generate)

    report = await service.analyze(cv)

    assert report.score == 77
    assert report.source == "xai"
    stored = memory_db.get_ats_score_by_cv(cv.id)
    assert stored.score == 77
    assert stored.source == "xai"


@pytest.mark.asyncio
async def test_analyze_falls_back_to_local(monkeypatch, service, cv):
    async def failing_generate(prompt, system_prompt=None, providers=None, operation="AI analysis"):
        raise LLMServiceException("AI analysis", "all providers down")

    monkeypatch.setattr(settings, "ai_analysis_enabled", True)
    monkeypatch.setattr(analysis_service, "generate_json_with_fallback", failing_generate)

    report = await service.analyze(cv)

    assert report.source == "local"
    assert report.score == ATSAnalyzer().analyze(CV_TEXT).score


@pytest.mark.asyncio
async def test_analyze_reuses_cached_report(service, memory_db, cv):
    first = await service.analyze(cv, use_ai=False)
    second = await service.analyze(cv, use_ai=False)

    assert first == second
    assert memory_db.count_ats_scores() == 1


def test_get_or_create_score_persists_once(service, memory_db, cv):
    first = service.get_or_create_score(cv.id)
    second = service.get_or_create_score(cv.id)

    assert first.id == second.id
    assert memory_db.count_ats_scores() == 1


def test_get_report_rebuilds_from_stored_score(memory_db, cv):
    service = AnalysisService(db=memory_db, cache=AnalysisCache(ttl_seconds=60), analyzer=ATSAnalyzer())
    stored = service.get_or_create_score(cv.id)
    service.cache.clear()

    _, report = service.get_report(cv.id)

    assert report.score == stored.score
    assert report.strengths == stored.strengths


def test_normalize_ai_report_rejects_non_finite_score():
    baseline = ATSAnalyzer().analyze(CV_TEXT)
    with pytest.raises(ValueError):
        normalize_ai_report({"score": float("inf")}, baseline, "openai")


@pytest.mark.asyncio
async def test_analyze_falls_back_to_local_on_non_finite_score(monkeypatch, service, memory_db, cv):
    async def overflowing_generate(prompt, system_prompt=None, providers=None, operation="AI analysis"):
        return "openai", {"score": float("inf")}

    monkeypatch.setattr(settings, "ai_analysis_enabled", True)
    monkeypatch.setattr(analysis_service, "generate_json_with_fallback", overflowing_generate)

    report = await service.analyze(cv)

    assert report.source == "local"
    assert memory_db.get_ats_score_by_cv(cv.id).source == "local"
