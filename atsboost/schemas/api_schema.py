"""
Request and response payloads for the REST API.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, Field

from .domain_schema import CV, User, UserRole


class SignUpRequest(BaseModel):
    username: str = Field(min_length=3, max_length=50)
    email: str
    password: str = Field(min_length=8)
    name: Optional[str] = None


class SignInRequest(BaseModel):
    email: str
    password: str


class UserPublic(BaseModel):
    id: int
    username: str
    email: str
    name: Optional[str] = None
    role: UserRole
    is_active: bool
    last_login: Optional[datetime] = None
    created_at: datetime

    @classmethod
    def from_user(cls, user: User) -> "UserPublic":
        return cls.model_validate(user.model_dump(exclude={"password_hash"}))


class AuthResponse(BaseModel):
    token: str
    user: UserPublic


class AdminLoginRequest(BaseModel):
    email: str
    password: str


class AdminUser(BaseModel):
    id: int
    email: str
    name: str
    role: str = "admin"
    is_admin: bool = True


class AdminLoginResponse(BaseModel):
    token: str
    user: AdminUser


class AdminUserUpdate(BaseModel):
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None


class Pagination(BaseModel):
    total: int
    page: int
    limit: int
    total_pages: int


class CVSummary(BaseModel):
    id: int
    user_id: Optional[int] = None
    file_name: str
    file_type: str
    file_size: int
    title: str
    is_guest: bool
    created_at: datetime

    @classmethod
    def from_cv(cls, cv: CV) -> "CVSummary":
        return cls.model_validate(cv.model_dump(exclude={"content"}))


class AnalyzeTextRequest(BaseModel):
    resume_content: Optional[str] = None
    job_description: Optional[str] = None


class DeepAnalysisRequest(BaseModel):
    cv_id: int


class NewsletterRequest(BaseModel):
    email: Optional[str] = None


class WhatsAppSettingsUpdate(BaseModel):
    enabled: bool
    phone_number: Optional[str] = None


class WhatsAppSettingsResponse(BaseModel):
    enabled: bool = False
    verified: bool = False
    phone_number: Optional[str] = None


class WhatsAppVerifyRequest(BaseModel):
    phone_number: Optional[str] = None


class WhatsAppConfirmRequest(BaseModel):
    code: str = Field(min_length=6, max_length=6)


class SubscribeRequest(BaseModel):
    plan_id: int


class EmployerCreate(BaseModel):
    company_name: str = Field(min_length=1)
    industry: Optional[str] = None
    size: Optional[str] = None
    location: Optional[str] = None
    website: Optional[str] = None
    description: Optional[str] = None


class JobPostingCreate(BaseModel):
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    location: Optional[str] = None
    employment_type: str = "full-time"
    required_skills: List[str] = Field(default_factory=list)
    salary_range: Optional[str] = None


class MessageResponse(BaseModel):
    success: bool = True
    message: str
    data: Optional[dict[str, Any]] = None
