import pytest

from atsboost.libs.database import MemoryDatabase
from atsboost.services.ats_analyzer import ATSAnalyzer
from atsboost.services.job_matching_service import JobMatchingService, location_score


CV_TEXT = """Thandi Nkosi
Johannesburg, Gauteng
Data analyst skilled in Python, SQL and Excel. Previously at Standard Bank.
BCom, University of Johannesburg, NQF level 7. Speaks isiZulu.
"""


@pytest.fixture
def memory_db():
    return MemoryDatabase()


@pytest.fixture
def employer(memory_db):
    user = memory_db.create_user("acme", "hr@acme.co.za", "hash")
    return memory_db.create_employer(user.id, "Acme Analytics", location="Johannesburg")


@pytest.fixture
def cv(memory_db):
    return memory_db.create_cv(file_name="cv.txt", file_type="text/plain", file_size=len(CV_TEXT), content=CV_TEXT)


@pytest.fixture
def service(memory_db):
    return JobMatchingService(db=memory_db, analyzer=ATSAnalyzer())


@pytest.mark.parametrize(
    "candidate,job,expected",
    [
        (None, "Durban", 50),
        ("Durban", "durban", 100),
        ("Durban", "Remote", 90),
        ("Sandton", "Sandton, Johannesburg", 80),
        ("Pretoria", "Cape Town", 60),
        ("Pretoria", "London", 30),
    ],
)
def test_location_score(candidate, job, expected):
    assert location_score(candidate, job) == expected


def test_skills_match_uses_required_skills(service, memory_db, employer):
    posting = memory_db.create_job_posting(
        employer.id, "Data Analyst", "Reporting", required_skills=["Python", "SQL", "Excel", "Power BI"]
    )

    assert service.skills_match(CV_TEXT, posting) == (75, ["Python", "SQL", "Excel"], ["Power BI"])


def test_skills_match_without_required_skills_compares_keywords(service, memory_db, employer):
    posting = memory_db.create_job_posting(employer.id, "Data Analyst", "Python and SQL reporting in Excel")

    score, matching, _ = service.skills_match(CV_TEXT, posting)

    expected = ATSAnalyzer().match_job(CV_TEXT, "Data Analyst\nPython and SQL reporting in Excel")
    assert score == expected.match_score
    assert matching == expected.matched_keywords


def test_find_matches_ranks_and_filters(service, memory_db, employer, cv):
    analyst = memory_db.create_job_posting(
        employer.id,
        "Data Analyst",
        "Reporting role. B-BBEE employer.",
        location="Johannesburg",
        required_skills=["Python", "SQL", "Excel", "Power BI"],
        salary_range="R30k - R40k",
    )
    memory_db.create_job_posting(
        employer.id, "Mining Engineer", "Underground operations", location="London", required_skills=["AutoCAD"]
    )
    memory_db.create_job_posting(
        employer.id, "Closed Analyst", "Python SQL Excel", location="Johannesburg", is_active=False
    )

    matches = service.find_matches(cv)

    assert [match.job_posting_id for match in matches] == [analyst.id]
    best = matches[0]
    assert best.company == "Acme Analytics"
    assert best.salary_range == "R30k - R40k"
    assert best.skills_match_score == 75
    assert best.location_score == 100
    assert best.sa_context_score == 100
    assert best.match_score == 86
    assert best.missing_skills == ["Power BI"]
    assert best.match_reasons == [
        "Strong skills match (75%)",
        "Excellent location match",
        "Strong South African market fit",
        "Matching skills: Python, SQL, Excel",
    ]


def test_find_matches_prefers_requested_location(service, memory_db, employer, cv):
    memory_db.create_job_posting(
        employer.id, "Data Analyst", "Reporting", location="Johannesburg", required_skills=["Python"]
    )

    [match] = service.find_matches(cv, location="Cape Town")

    assert match.location_score == 60


def test_find_matches_respects_limit(service, memory_db, employer, cv):
    for index in range(3):
        memory_db.create_job_posting(
            employer.id, f"Analyst {index}", "Reporting", location="Johannesburg", required_skills=["SQL"]
        )

    assert len(service.find_matches(cv, limit=2)) == 2
