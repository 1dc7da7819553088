from __future__ import annotations

ATS_SYSTEM_PROMPT = (
    "You are an expert CV analyzer for the South African job market. "
    "You evaluate how well a CV will perform with Applicant Tracking Systems "
    "and give concrete, honest feedback."
)

# max characters of CV text sent to a provider
MAX_CV_CHARS = 12000


def _truncate(text: str, limit: int = MAX_CV_CHARS) -> str:
    text = text.strip()
    if len(text) <= limit:
        return text
    return text[:limit] + "\n[truncated]"


def build_ats_analysis_prompt(cv_text: str, job_description: str | None = None) -> str:
    job_section = ""
    if job_description:
        job_section = f"""
Job Description:
{_truncate(job_description, 4000)}

Also compare the CV against this job description.
"""

    return f"""Analyze this CV for ATS compatibility in the South African job market.

CV:
{_truncate(cv_text)}
{job_section}
Score the CV out of 100 using three components:
- skills_score (0-50): relevant skill keywords
- context_score (0-30): South African context such as B-BBEE, NQF levels, SAQA, SETA,
  provinces, cities, official languages and local qualifications
- format_score (0-20): ATS-friendly formatting

Return JSON with these keys:
- score: integer 0-100
- skills_score, context_score, format_score: integers
- strengths: list of strings
- improvements: list of strings
- issues: list of strings (serious problems only)
- skills_identified: list of strings
- sa_keywords_found: list of strings
- bbbee_detected: boolean
- nqf_detected: boolean
- keyword_recommendations: list of missing keywords worth adding

Rules:
- Do not invent experience that is not in the CV.
- Keep each list entry to one sentence.
"""


def build_deep_analysis_prompt(cv_text: str, target_position: str | None = None,
                               target_industry: str | None = None) -> str:
    target = ", ".join(part for part in [target_position, target_industry] if part) or "not specified"
    return f"""Perform a deep review of this CV for a South African job seeker.

Target role / industry: {target}

CV:
{_truncate(cv_text)}

Return JSON with these keys:
- score: integer 0-100
- strengths: list of strings
- improvements: list of strings, ordered by impact
- issues: list of strings
- skills_identified: list of strings
- keyword_recommendations: list of strings
- bbbee_detected: boolean
- nqf_detected: boolean
"""
