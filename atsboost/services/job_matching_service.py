"""
Job Matching Service - rank active job postings against a CV

The overall match is a weighted blend of three 0-100 scores:
skills (required skills found in the CV, or keyword overlap with the posting
text when it lists none), location, and South African market fit.
"""

from __future__ import annotations

import logging

from atsboost.libs.database import Database, get_database
from atsboost.schemas import CV, JobPosting, JobPostingMatch
from atsboost.services.ats_analyzer import ATSAnalyzer, find_keywords, get_ats_analyzer

logger = logging.getLogger(__name__)

MIN_MATCH_SCORE = 30
CANDIDATE_POSTINGS = 50
SKILLS_WEIGHT = 0.55
LOCATION_WEIGHT = 0.2
SA_CONTEXT_WEIGHT = 0.25

SA_CITIES = [
    "johannesburg", "cape town", "durban", "pretoria", "port elizabeth", "gqeberha",
    "bloemfontein", "east london", "polokwane", "nelspruit", "mbombela", "kimberley",
    "pietermaritzburg", "soweto", "sandton", "centurion", "stellenbosch",
]
SA_QUALIFICATIONS = [
    "matric", "grade 12", "nqf", "saqa", "university of cape town", "wits",
    "stellenbosch", "ukzn", "unisa", "university of johannesburg", "university of pretoria",
]
SA_EMPLOYERS = [
    "absa", "fnb", "standard bank", "nedbank", "capitec", "mtn", "vodacom",
    "sasol", "anglo american", "shoprite", "discovery", "eskom", "transnet",
]
SA_LANGUAGES = ["afrikaans", "zulu", "isizulu", "xhosa", "isixhosa", "sotho", "sesotho", "tswana", "setswana"]
TRANSFORMATION_TERMS = ["bee", "b-bbee", "bbbee", "employment equity", "equity", "transformation"]


def _round_half_up(value: float) -> int:
    return int(value + 0.5)


def location_score(candidate_location: str | None, job_location: str | None) -> int:
    if not candidate_location or not job_location:
        return 50
    candidate = candidate_location.strip().lower()
    job = job_location.strip().lower()
    if candidate == job:
        return 100
    if "remote" in job or "anywhere" in job:
        return 90
    if candidate in job or job in candidate:
        return 80
    candidate_in_sa = any(city in candidate for city in SA_CITIES)
    job_in_sa = any(city in job for city in SA_CITIES)
    if candidate_in_sa and job_in_sa:
        return 60
    return 30


def sa_context_score(content: str, posting: JobPosting) -> int:
    score = 50
    if find_keywords(content, SA_QUALIFICATIONS):
        score += 10
    if find_keywords(content, SA_EMPLOYERS):
        score += 15
    if find_keywords(content, SA_LANGUAGES):
        score += 10
    if find_keywords(f"{posting.title} {posting.description}", TRANSFORMATION_TERMS):
        score += 15
    return min(score, 100)


def match_reasons(
    skills_score: int, matching_skills: list[str], location: int, sa_context: int
) -> list[str]:
    reasons: list[str] = []
    if skills_score >= 70:
        reasons.append(f"Strong skills match ({skills_score}%)")
    elif skills_score >= 50:
        reasons.append(f"Good skills match ({skills_score}%)")
    if location >= 80:
        reasons.append("Excellent location match")
    elif location >= 60:
        reasons.append("Good location match")
    if sa_context >= 70:
        reasons.append("Strong South African market fit")
    if matching_skills:
        reasons.append(f"Matching skills: {', '.join(matching_skills[:3])}")
    return reasons


class JobMatchingService:
    def __init__(self, db: Database | None = None, analyzer: ATSAnalyzer | None = None) -> None:
        self._db = db
        self.analyzer = analyzer or get_ats_analyzer()

    @property
    def db(self) -> Database:
        return self._db or get_database()

    def skills_match(self, content: str, posting: JobPosting) -> tuple[int, list[str], list[str]]:
        """Return ``(score, matching, missing)`` for a posting's skills."""
        required = [skill.strip() for skill in posting.required_skills if skill.strip()]
        if not required:
            job_match = self.analyzer.match_job(content, f"{posting.title}\n{posting.description}")
            return job_match.match_score, job_match.matched_keywords, job_match.missing_keywords
        found = set(find_keywords(content, [skill.lower() for skill in required]))
        matching = [skill for skill in required if skill.lower() in found]
        missing = [skill for skill in required if skill.lower() not in found]
        return _round_half_up(len(matching) / len(required) * 100), matching, missing

    def candidate_location(self, cv: CV) -> str | None:
        cities = find_keywords(cv.content, SA_CITIES)
        return cities[0] if cities else None

    def score_posting(self, cv: CV, posting: JobPosting, location: str | None = None) -> JobPostingMatch:
        skills, matching, missing = self.skills_match(cv.content, posting)
        location_match = location_score(location or self.candidate_location(cv), posting.location)
        sa_context = sa_context_score(cv.content, posting)
        overall = _round_half_up(
            skills * SKILLS_WEIGHT + location_match * LOCATION_WEIGHT + sa_context * SA_CONTEXT_WEIGHT
        )
        employer = self.db.get_employer(posting.employer_id)
        return JobPostingMatch(
            job_posting_id=posting.id,
            title=posting.title,
            company=employer.company_name if employer else "Company",
            location=posting.location,
            employment_type=posting.employment_type,
            salary_range=posting.salary_range,
            match_score=min(100, overall),
            skills_match_score=skills,
            location_score=location_match,
            sa_context_score=sa_context,
            matching_skills=matching,
            missing_skills=missing,
            match_reasons=match_reasons(skills, matching, location_match, sa_context),
        )

    def find_matches(self, cv: CV, location: str | None = None, limit: int = 10) -> list[JobPostingMatch]:
        """
        Rank the most recent active postings against a CV.

        Args:
            cv: The CV to match.
            location: Preferred location; defaults to the first South African city in the CV.
            limit: Maximum number of matches returned.

        Returns:
            Matches scoring at least ``MIN_MATCH_SCORE``, best first.
        """
        postings = self.db.list_job_postings(is_active=True, limit=CANDIDATE_POSTINGS)
        matches = [self.score_posting(cv, posting, location) for posting in postings]
        ranked = sorted(
            (match for match in matches if match.match_score >= MIN_MATCH_SCORE),
            key=lambda match: match.match_score,
            reverse=True,
        )
        logger.info("CV %s matched %s of %s active postings", cv.id, len(ranked), len(postings))
        return ranked[:limit]


_job_matching_service: JobMatchingService | None = None


def get_job_matching_service() -> JobMatchingService:
    """Get job matching service instance (singleton)."""
    global _job_matching_service
    if _job_matching_service is None:
        _job_matching_service = JobMatchingService()
    return _job_matching_service
