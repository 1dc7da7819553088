"""
Keyword-based ATS scoring for the South African job market.

The score is out of 100: up to 50 for skill keywords, up to 30 for South
African context and up to 20 for an ATS-friendly format.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

from atsboost.schemas import AnalysisReport, JobMatch
from atsboost.utils.util import extract_keywords

SKILL_KEYWORDS = [
    "management", "leadership", "communication", "project management", "teamwork",
    "problem solving", "customer service", "sales", "marketing", "research",
    "analysis", "reporting", "presentation", "microsoft office", "excel",
    "powerpoint", "word", "outlook", "database", "crm", "erp", "sap",
    "programming", "coding", "software development", "web development",
    "java", "python", "javascript", "html", "css", "react", "angular", "vue",
    "nodejs", "php", "sql", "nosql", "mongodb", "mysql", "postgresql",
    "accounting", "finance", "budgeting", "forecasting", "audit", "tax",
    "legal", "compliance", "regulatory", "governance", "risk management",
    "human resources", "recruitment", "training", "development", "performance management",
    "operations", "logistics", "supply chain", "procurement", "inventory management",
    "quality control", "quality assurance", "business analysis", "business development",
    "strategy", "planning", "execution", "implementation", "stakeholder management",
]

SA_CONTEXT_KEYWORDS = [
    "b-bbee", "bbbee", "bee", "broad-based black economic empowerment",
    "nqf", "national qualifications framework",
    "saqa", "south african qualifications authority",
    "seta", "sector education and training authority",
    "employment equity", "affirmative action", "skills development", "diversity", "transformation",
    "johannesburg", "cape town", "durban", "pretoria", "bloemfontein", "port elizabeth",
    "gqeberha", "east london",
    "gauteng", "western cape", "kwazulu-natal", "eastern cape", "free state", "mpumalanga",
    "limpopo", "north west", "northern cape", "south africa",
    "bilingual", "multilingual", "afrikaans", "zulu", "xhosa", "sotho", "tswana", "venda",
    "tsonga", "swati", "ndebele",
    "popi", "popia", "protection of personal information",
    "bcom", "bsc", "llb", "ca(sa)", "saica", "saipa", "cima", "acca", "matric", "unisa", "wits",
]

BBBEE_KEYWORDS = {"b-bbee", "bbbee", "bee", "broad-based black economic empowerment"}
NQF_KEYWORDS = {"nqf", "national qualifications framework"}

RECOMMENDED_KEYWORDS = [
    "communication", "leadership", "project management", "problem solving", "teamwork",
    "stakeholder management", "microsoft office", "excel", "reporting", "customer service",
]

FORMAT_CHECKS = [
    (re.compile(r"<[^>]*>"), "HTML tags found in CV. These may disrupt ATS parsing."),
    (re.compile(r"\[\w+\]"), "Square brackets found in CV. These may disrupt ATS parsing."),
    (re.compile(r"\{[^}]*\}"), "Curly braces found in CV. These may disrupt ATS parsing."),
    (re.compile(r"(?:[^\s\d]*\d){10,}"), "Too many numbers/codes in CV may confuse ATS systems."),
    (re.compile(r"//[^\n]*"), "Comments or unusual formatting may not be readable by ATS."),
    (re.compile(r"\.{2,}"), "Multiple periods or unusual punctuation may confuse ATS systems."),
]

MAX_FORMAT_ISSUES_REPORTED = 3
MAX_KEYWORD_RECOMMENDATIONS = 5
MAX_MISSING_JOB_KEYWORDS = 10


@lru_cache(maxsize=None)
def _keyword_pattern(keyword: str) -> re.Pattern[str]:
    return re.compile(r"(?<![a-z0-9])" + re.escape(keyword) + r"(?![a-z0-9])")


def find_keywords(content: str, keywords: list[str]) -> list[str]:
    """Return the keywords that occur in ``content`` as whole words, in list order."""
    normalized = content.lower()
    return [keyword for keyword in keywords if _keyword_pattern(keyword).search(normalized)]


def _round_half_up(value: float) -> int:
    return int(value + 0.5)


def rating_for(score: int) -> str:
    if score >= 80:
        return "Excellent"
    if score >= 65:
        return "Good"
    if score >= 50:
        return "Average"
    return "Needs Improvement"


def relevance_for(match_score: int) -> str:
    if match_score >= 70:
        return "High"
    if match_score >= 40:
        return "Medium"
    return "Low"


@dataclass
class _KeywordFindings:
    skills: list[str]
    context: list[str]
    format_issues: list[str]


class ATSAnalyzer:
    """Deterministic CV scorer; no network access."""

    def _collect(self, content: str) -> _KeywordFindings:
        return _KeywordFindings(
            skills=find_keywords(content, SKILL_KEYWORDS),
            context=find_keywords(content, SA_CONTEXT_KEYWORDS),
            format_issues=[issue for pattern, issue in FORMAT_CHECKS if pattern.search(content)],
        )

    def analyze(self, content: str, job_description: str | None = None) -> AnalysisReport:
        findings = self._collect(content)
        skill_count = len(findings.skills)
        context_count = len(findings.context)
        issue_count = len(findings.format_issues)
        length = len(content.strip())

        skills_score = min(50, _round_half_up(skill_count / 15 * 50))
        context_score = min(30, _round_half_up(context_count / 5 * 30))
        format_score = max(0, 20 - issue_count * 5)
        score = skills_score + context_score + format_score

        strengths: list[str] = []
        if skill_count > 5:
            strengths.append("You've included key skills that match many job descriptions")
        if context_count > 2:
            strengths.append(
                "Your CV contains South African specific terminology that employers look for"
            )
        if issue_count == 0:
            strengths.append("Your CV format is clean and ATS-friendly")
        if length > 1500:
            strengths.append("Your CV has good content length with sufficient detail")

        improvements: list[str] = []
        if skill_count <= 10:
            improvements.append("Add more industry-specific keywords found in CareerJunction job ads")
        if context_count <= 3:
            improvements.append(
                "Include South African qualifications (NQF levels) and B-BBEE status if applicable"
            )
        if length < 1000:
            improvements.append(
                "Your CV may be too brief. Consider adding more relevant experience and skills"
            )

        issues = findings.format_issues[:MAX_FORMAT_ISSUES_REPORTED]
        if skill_count < 3:
            issues.append(
                "Very few relevant skills detected. Your CV needs significant keyword optimization"
            )
        if context_count == 0:
            issues.append(
                "No South African context found. Add location, qualifications, and local terminology"
            )

        found = set(findings.context)
        bbbee_detected = bool(found & BBBEE_KEYWORDS)
        nqf_detected = bool(found & NQF_KEYWORDS)

        return AnalysisReport(
            score=score,
            rating=rating_for(score),
            skills_score=skills_score,
            context_score=context_score,
            format_score=format_score,
            strengths=strengths or ["You've started creating your CV"],
            improvements=improvements or ["Continue improving your CV with more relevant content"],
            issues=issues,
            skills_identified=findings.skills,
            sa_keywords_found=findings.context,
            bbbee_detected=bbbee_detected,
            nqf_detected=nqf_detected,
            keyword_recommendations=self._recommend_keywords(findings.skills, bbbee_detected, nqf_detected),
            job_match=self.match_job(content, job_description) if job_description else None,
            source="local",
        )

    def _recommend_keywords(self, skills: list[str], bbbee: bool, nqf: bool) -> list[str]:
        present = set(skills)
        recommendations = [kw for kw in RECOMMENDED_KEYWORDS if kw not in present]
        if not nqf:
            recommendations.insert(0, "NQF level")
        if not bbbee:
            recommendations.insert(0, "B-BBEE status")
        return recommendations[:MAX_KEYWORD_RECOMMENDATIONS]

    def match_job(self, content: str, job_description: str) -> JobMatch:
        """Score the overlap between CV words and the job description's keywords."""
        job_keywords = extract_keywords(job_description, limit=40)
        if not job_keywords:
            return JobMatch(match_score=0, job_relevance="Low")
        cv_words = set(extract_keywords(content))
        matched = [kw for kw in job_keywords if kw in cv_words]
        missing = [kw for kw in job_keywords if kw not in cv_words]
        match_score = _round_half_up(len(matched) / len(job_keywords) * 100)
        return JobMatch(
            match_score=match_score,
            job_relevance=relevance_for(match_score),
            matched_keywords=matched,
            missing_keywords=missing[:MAX_MISSING_JOB_KEYWORDS],
        )

    def analyze_resume_text(self, content: str, job_description: str | None = None) -> dict[str, Any]:
        """Short analysis used by the text analysis endpoint."""
        report = self.analyze(content, job_description)
        sa_score = _round_half_up(report.context_score / 30 * 100)
        suggestions = report.issues + [
            f"Consider adding: {keyword}" for keyword in report.keyword_recommendations
        ]
        return {
            "score": report.score,
            "rating": report.rating,
            "strengths": report.strengths[:3],
            "weaknesses": report.improvements[:3],
            "suggestions": suggestions[:2],
            "sa_score": sa_score,
            "sa_relevance": relevance_for(sa_score),
            "skills": report.skills_identified,
            "job_match": report.job_match.model_dump() if report.job_match else None,
        }


_ats_analyzer: ATSAnalyzer | None = None


def get_ats_analyzer() -> ATSAnalyzer:
    global _ats_analyzer
    if _ats_analyzer is None:
        _ats_analyzer = ATSAnalyzer()
    return _ats_analyzer
