"""Libs module - Infrastructure and utility libraries"""

from .analysis_cache import AnalysisCache, get_analysis_cache
from .database import Database, MemoryDatabase, SupabaseDatabase, get_database
from .document_parser import DocumentParser, get_document_parser
from .exceptions import (
    AppException,
    AuthenticationException,
    AuthorizationException,
    BadRequestException,
    ConflictException,
    FileUploadException,
    LLMServiceException,
    NotFoundException,
    ScanLimitException,
)
from .llm import LLMServiceFactory, available_llm_providers, generate_json_with_fallback

__all__ = [
    "AnalysisCache",
    "get_analysis_cache",
    "Database",
    "MemoryDatabase",
    "SupabaseDatabase",
    "get_database",
    "DocumentParser",
    "get_document_parser",
    "AppException",
    "AuthenticationException",
    "AuthorizationException",
    "BadRequestException",
    "ConflictException",
    "FileUploadException",
    "LLMServiceException",
    "NotFoundException",
    "ScanLimitException",
    "LLMServiceFactory",
    "available_llm_providers",
    "generate_json_with_fallback",
]
