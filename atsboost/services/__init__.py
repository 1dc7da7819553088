"""Services module"""

from .admin_service import AdminService, get_admin_service
from .analysis_service import AnalysisService, get_analysis_service
from .ats_analyzer import ATSAnalyzer, get_ats_analyzer
from .job_matching_service import JobMatchingService, get_job_matching_service
from .auth_service import AuthService, get_auth_service
from .plan_service import PLAN_FEATURES, PlanFeatures, PlanService, get_plan_service
from .whatsapp_service import WhatsAppService, get_whatsapp_service

__all__ = [
    "AdminService",
    "get_admin_service",
    "AnalysisService",
    "get_analysis_service",
    "ATSAnalyzer",
    "get_ats_analyzer",
    "JobMatchingService",
    "get_job_matching_service",
    "AuthService",
    "get_auth_service",
    "PLAN_FEATURES",
    "PlanFeatures",
    "PlanService",
    "get_plan_service",
    "WhatsAppService",
    "get_whatsapp_service",
]
