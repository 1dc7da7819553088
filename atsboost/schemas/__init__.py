# atsboost/schemas/__init__.py
"""Data models module"""

from .domain_schema import (
    ATSScore,
    AnalysisReport,
    CV,
    Employer,
    JobMatch,
    JobPostingMatch,
    JobPosting,
    NewsletterSubscription,
    Plan,
    SaProfile,
    Subscription,
    User,
    utcnow,
)
from .api_schema import (
    AdminLoginRequest,
    AdminLoginResponse,
    AdminUser,
    AdminUserUpdate,
    AnalyzeTextRequest,
    AuthResponse,
    CVSummary,
    DeepAnalysisRequest,
    EmployerCreate,
    JobPostingCreate,
    MessageResponse,
    NewsletterRequest,
    Pagination,
    SignInRequest,
    SignUpRequest,
    SubscribeRequest,
    UserPublic,
    WhatsAppConfirmRequest,
    WhatsAppSettingsResponse,
    WhatsAppSettingsUpdate,
    WhatsAppVerifyRequest,
)

__all__ = [
    # Domain Schemas
    "ATSScore",
    "AnalysisReport",
    "CV",
    "Employer",
    "JobMatch",
    "JobPostingMatch",
    "JobPosting",
    "NewsletterSubscription",
    "Plan",
    "SaProfile",
    "Subscription",
    "User",
    "utcnow",
    # API Schemas
    "AdminLoginRequest",
    "AdminLoginResponse",
    "AdminUser",
    "AdminUserUpdate",
    "AnalyzeTextRequest",
    "AuthResponse",
    "CVSummary",
    "DeepAnalysisRequest",
    "EmployerCreate",
    "JobPostingCreate",
    "MessageResponse",
    "NewsletterRequest",
    "Pagination",
    "SignInRequest",
    "SignUpRequest",
    "SubscribeRequest",
    "UserPublic",
    "WhatsAppConfirmRequest",
    "WhatsAppSettingsResponse",
    "WhatsAppSettingsUpdate",
    "WhatsAppVerifyRequest",
]
