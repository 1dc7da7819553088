# atsboost/schemas/domain_schema.py
"""
Domain-specific data schema with Pydantic models.
Field names match the storage column names, so rows from the store
validate directly into these models.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import BaseModel, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


UserRole = Literal["user", "employer", "admin"]
SubscriptionStatus = Literal["active", "cancelled", "expired"]


class User(BaseModel):
    """Registered job seeker, employer or admin."""
    id: int
    username: str
    email: str
    password_hash: str
    name: Optional[str] = None
    role: UserRole = "user"
    is_active: bool = True
    last_login: Optional[datetime] = None
    created_at: datetime = Field(default_factory=utcnow)


class CV(BaseModel):
    """Uploaded CV with its extracted text content."""
    id: int
    user_id: Optional[int] = None
    file_name: str
    file_type: str
    file_size: int
    content: str
    title: str = "My CV"
    description: Optional[str] = None
    target_position: Optional[str] = None
    target_industry: Optional[str] = None
    job_description: Optional[str] = None
    is_guest: bool = True
    created_at: datetime = Field(default_factory=utcnow)


class ATSScore(BaseModel):
    """Persisted result of one CV analysis."""
    id: int
    cv_id: int
    score: int = Field(ge=0, le=100)
    skills_score: int = 0
    context_score: int = 0
    format_score: int = 0
    strengths: List[str] = Field(default_factory=list)
    improvements: List[str] = Field(default_factory=list)
    issues: List[str] = Field(default_factory=list)
    sa_keywords_found: List[str] = Field(default_factory=list)
    bbbee_detected: bool = False
    nqf_detected: bool = False
    keyword_recommendations: List[str] = Field(default_factory=list)
    source: str = "local"
    created_at: datetime = Field(default_factory=utcnow)


class Plan(BaseModel):
    id: int
    name: str
    description: str = ""
    price: int = 0  # ZAR cents
    interval: str = "month"
    scan_limit: Optional[int] = None
    is_active: bool = True


class Subscription(BaseModel):
    id: int
    user_id: int
    plan_id: int
    status: SubscriptionStatus = "active"
    current_period_start: datetime = Field(default_factory=utcnow)
    current_period_end: datetime
    scans_used: int = 0
    created_at: datetime = Field(default_factory=utcnow)


class NewsletterSubscription(BaseModel):
    id: int
    email: str
    created_at: datetime = Field(default_factory=utcnow)


class SaProfile(BaseModel):
    """South African profile details, including WhatsApp notification settings."""
    id: int
    user_id: int
    whatsapp_number: Optional[str] = None
    whatsapp_enabled: bool = False
    whatsapp_verified: bool = False
    verification_code_hash: Optional[str] = None
    verification_expires_at: Optional[datetime] = None
    bbbee_status: Optional[str] = None
    nqf_level: Optional[int] = None
    province: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)


class Employer(BaseModel):
    id: int
    user_id: int
    company_name: str
    industry: Optional[str] = None
    size: Optional[str] = None
    location: Optional[str] = None
    website: Optional[str] = None
    description: Optional[str] = None
    is_verified: bool = False
    created_at: datetime = Field(default_factory=utcnow)


class JobPosting(BaseModel):
    id: int
    employer_id: int
    title: str
    description: str
    location: Optional[str] = None
    employment_type: str = "full-time"
    required_skills: List[str] = Field(default_factory=list)
    salary_range: Optional[str] = None
    is_active: bool = True
    created_at: datetime = Field(default_factory=utcnow)


class JobMatch(BaseModel):
    """Keyword overlap between a CV and a job description."""
    match_score: int = Field(ge=0, le=100)
    job_relevance: Literal["High", "Medium", "Low"]
    matched_keywords: List[str] = Field(default_factory=list)
    missing_keywords: List[str] = Field(default_factory=list)


class JobPostingMatch(BaseModel):
    """A job posting ranked against a CV."""
    job_posting_id: int
    title: str
    company: str
    location: Optional[str] = None
    employment_type: str = "full-time"
    salary_range: Optional[str] = None
    match_score: int = Field(ge=0, le=100)
    skills_match_score: int = Field(ge=0, le=100)
    location_score: int = Field(ge=0, le=100)
    sa_context_score: int = Field(ge=0, le=100)
    matching_skills: List[str] = Field(default_factory=list)
    missing_skills: List[str] = Field(default_factory=list)
    match_reasons: List[str] = Field(default_factory=list)


class AnalysisReport(BaseModel):
    """Analysis result returned to clients and kept in the analysis cache."""
    score: int = Field(ge=0, le=100)
    rating: str
    skills_score: int = 0
    context_score: int = 0
    format_score: int = 0
    strengths: List[str] = Field(default_factory=list)
    improvements: List[str] = Field(default_factory=list)
    issues: List[str] = Field(default_factory=list)
    skills_identified: List[str] = Field(default_factory=list)
    sa_keywords_found: List[str] = Field(default_factory=list)
    bbbee_detected: bool = False
    nqf_detected: bool = False
    keyword_recommendations: List[str] = Field(default_factory=list)
    job_match: Optional[JobMatch] = None
    source: str = "local"
