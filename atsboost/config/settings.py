# atsboost/config/settings.py
"""
Application configuration and settings.

Values come from, in order of precedence:
1. OS environment variables (case-insensitive)
2. the .env file
3. the defaults below
APP_ENV picks the settings class (development, test, production).
"""

from functools import lru_cache
import os

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Base application settings loaded from environment variables."""

    app_env: str = "development"

    # Application
    app_name: str = "atsboost-api"
    app_version: str = "1.0.0"
    debug: bool = False
    public_base_url: str = "https://atsboost.co.za"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # CORS
    cors_origins: list[str] = ["*"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    # Storage: memory, supabase
    storage_backend: str = "memory"
    supabase_url: str | None = None
    supabase_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("SUPABASE_KEY", "SUPABASE_ANON_KEY"),
    )

    # Auth
    jwt_secret: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    user_token_expiry_hours: int = 24 * 7
    admin_token_expiry_hours: int = 24
    bcrypt_rounds: int = 12
    admin_email: str = "admin@atsboost.co.za"
    admin_name: str = "ATSBoost Admin"
    admin_password: str | None = None

    # LLM providers, tried in order until one answers
    llm_provider_chain: list[str] = ["openai", "xai"]
    llm_timeout_seconds: float = 60.0
    openai_api_key: str | None = None
    openai_model: str = "gpt-4o-mini"
    xai_api_key: str | None = None
    xai_base_url: str = "https://api.x.ai/v1"
    xai_model: str = "grok-2-1212"
    abacus_api_key: str | None = None
    abacus_api_url: str = "https://api.abacus.ai/api/v0"
    abacus_model: str = "claude-3-sonnet"
    google_api_key: str | None = None
    google_model: str = "gemini-1.5-flash"
    ollama_model: str = "llama3.1:8b"
    ollama_url: str = "http://127.0.0.1:11434"

    # Analysis
    ai_analysis_enabled: bool = True
    analysis_cache_ttl_seconds: int = 24 * 60 * 60

    # Rate Limiting
    rate_limit_enabled: bool = True
    rate_limit_requests: int = 30
    rate_limit_period: int = 60 * 60
    rate_limit_paths: list[str] = ["/api/upload", "/api/analyze"]

    # Logging
    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # File Upload & Document Parsing
    max_upload_size: int = 10 * 1024 * 1024  # 10MB
    allowed_mime_types: list[str] = [
        "application/pdf",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "text/plain",
    ]
    pdf_max_pages: int = 20

    # WhatsApp (Twilio)
    twilio_account_sid: str | None = None
    twilio_auth_token: str | None = None
    twilio_phone_number: str | None = None
    twilio_api_url: str = "https://api.twilio.com/2010-04-01"
    whatsapp_code_ttl_minutes: int = 10

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


class DevSettings(AppSettings):
    """Development defaults."""
    app_env: str = "development"
    debug: bool = True
    log_level: str = "DEBUG"
    rate_limit_enabled: bool = False
    admin_password: str | None = "admin-dev-password"


class TestSettings(AppSettings):
    """Test defaults: in-memory storage, no outbound AI calls, cheap hashing."""

    app_env: str = "test"
    debug: bool = True
    rate_limit_enabled: bool = False
    ai_analysis_enabled: bool = False
    storage_backend: str = "memory"
    bcrypt_rounds: int = 4
    jwt_secret: str = "atsboost-test-secret-key-0123456789abcdef"
    admin_email: str = "admin@example.com"
    admin_password: str | None = "admin-test-password"
    llm_provider_chain: list[str] = []


class ProdSettings(AppSettings):
    """Production defaults."""

    app_env: str = "production"
    debug: bool = False
    log_level: str = "INFO"
    storage_backend: str = "supabase"


@lru_cache()
def get_settings() -> AppSettings:
    """Get cached settings instance."""
    app_env = os.environ.get("APP_ENV", "development").strip().lower()
    if app_env == "production":
        return ProdSettings()
    if app_env == "test":
        return TestSettings()
    return DevSettings()


# Convenience function to get settings
settings = get_settings()
