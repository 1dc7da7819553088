import pytest

from atsboost.services.ats_analyzer import ATSAnalyzer, find_keywords, rating_for, relevance_for


@pytest.fixture
def analyzer():
    return ATSAnalyzer()


def test_scores_keyword_components(analyzer):
    content = (
        "Python SQL Excel leadership communication teamwork in Johannesburg, Gauteng. "
        "NQF level 7. B-BBEE level 1."
    )
    report = analyzer.analyze(content)

    assert report.skills_score == 20  # 6 skills
    assert report.context_score == 24  # 4 context keywords
    assert report.format_score == 20
    assert report.score == 64
    assert report.rating == "Average"
    assert report.bbbee_detected is True
    assert report.nqf_detected is True
    assert set(report.sa_keywords_found) == {"b-bbee", "nqf", "johannesburg", "gauteng"}
    assert report.issues == []
    assert "Your CV format is clean and ATS-friendly" in report.strengths
    assert any("too brief" in item for item in report.improvements)
    assert report.source == "local"


def test_sparse_cv_gets_keyword_issues(analyzer):
    report = analyzer.analyze("Hello world")

    assert report.score == 20
    assert report.rating == "Needs Improvement"
    assert len(report.issues) == 2
    assert report.strengths == ["Your CV format is clean and ATS-friendly"]
    assert report.keyword_recommendations[:2] == ["B-BBEE status", "NQF level"]


def test_format_issues_reduce_score_and_are_capped(analyzer):
    report = analyzer.analyze("<b>Python</b> [draft] {name} and more...")

    # four format problems found, three reported, plus two keyword issues
    assert report.format_score == 0
    assert len(report.issues) == 5
    assert all(issue.endswith("may disrupt ATS parsing.") for issue in report.issues[:3])


def test_keywords_match_whole_words_only():
    assert find_keywords("syntax highlighting", ["tax"]) == []
    assert find_keywords("Tax returns", ["tax"]) == ["tax"]
    assert find_keywords("b-bbee level 2", ["bee", "b-bbee"]) == ["b-bbee"]


def test_job_match(analyzer):
    match = analyzer.match_job(
        "Python Django PostgreSQL developer",
        "Python developer with Django and Kubernetes",
    )

    assert match.matched_keywords == ["python", "developer", "django"]
    assert match.missing_keywords == ["kubernetes"]
    assert match.match_score == 75
    assert match.job_relevance == "High"


def test_report_includes_job_match_only_with_description(analyzer):
    assert analyzer.analyze("Python developer").job_match is None
    assert analyzer.analyze("Python developer", "Python developer").job_match is not None


def test_analyze_resume_text_shape(analyzer):
    result = analyzer.analyze_resume_text("Hello world", "Python developer")

    assert set(result) == {
        "score",
        "rating",
        "strengths",
        "weaknesses",
        "suggestions",
        "sa_score",
        "sa_relevance",
        "skills",
        "job_match",
    }
    assert len(result["strengths"]) <= 3
    assert len(result["weaknesses"]) <= 3
    assert len(result["suggestions"]) == 2
    assert result["sa_score"] == 0
    assert result["sa_relevance"] == "Low"
    assert result["job_match"]["job_relevance"] == "Low"


@pytest.mark.parametrize(
    "score,rating",
    [(100, "Excellent"), (80, "Excellent"), (79, "Good"), (65, "Good"), (50, "Average"), (49, "Needs Improvement")],
)
def test_rating_thresholds(score, rating):
    assert rating_for(score) == rating


def test_relevance_thresholds():
    assert relevance_for(70) == "High"
    assert relevance_for(40) == "Medium"
    assert relevance_for(39) == "Low"
