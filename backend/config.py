"""Production configuration and environment settings"""

import os
from typing import Dict, List


class Config:
    """Application configuration from environment variables"""

    # Environment
    ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
    IS_PRODUCTION = ENVIRONMENT == "production"

    # CORS Configuration - the edge handlers answered every origin
    ALLOWED_ORIGINS: List[str] = ["*"]
    allowed_origins_env = os.getenv("ALLOWED_ORIGINS")
    if allowed_origins_env:
        ALLOWED_ORIGINS = [origin.strip() for origin in allowed_origins_env.split(",")]
    CORS_ALLOWED_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
    CORS_ALLOWED_HEADERS = ["Content-Type", "Authorization", "X-Client-Info", "Apikey"]

    # Storage Configuration
    USE_SUPABASE = os.getenv("USE_SUPABASE", "true").lower() == "true"
    SUPABASE_URL = os.getenv("SUPABASE_URL")
    SUPABASE_SERVICE_ROLE_KEY = os.getenv("SUPABASE_SERVICE_ROLE_KEY")
    SQLITE_PATH = os.getenv("SQLITE_PATH", "puzzle2profit.db")
    STORAGE_MAX_RETRIES = int(os.getenv("STORAGE_MAX_RETRIES", "0"))

    # LLM provider
    ANTHROPIC_API_KEY = os.getenv("ANTHROPIC_API_KEY")
    LLM_MODEL = os.getenv("LLM_MODEL", "claude-sonnet-4-20250514")
    LLM_MAX_TOKENS = int(os.getenv("LLM_MAX_TOKENS", "4000"))

    # Upstream retry policy (one attempt unless tuned)
    LLM_MAX_ATTEMPTS = int(os.getenv("LLM_MAX_ATTEMPTS", "1"))
    LLM_BACKOFF_SECONDS = float(os.getenv("LLM_BACKOFF_SECONDS", "0"))

    # Rate Limiting
    RATE_LIMIT_ENABLED = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
    DEFAULT_RATE_LIMIT = os.getenv("DEFAULT_RATE_LIMIT", "60/minute")
    RESEARCH_RATE_LIMIT = os.getenv("RESEARCH_RATE_LIMIT", "10/minute")
    CONTENT_RATE_LIMIT = os.getenv("CONTENT_RATE_LIMIT", "20/minute")

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    STRUCTURED_LOGGING = os.getenv("STRUCTURED_LOGGING", "true").lower() == "true"

    @classmethod
    def validate(cls):
        """Validate critical configuration at startup"""
        errors = []

        if cls.IS_PRODUCTION and cls.ALLOWED_ORIGINS == ["*"]:
            errors.append("ALLOWED_ORIGINS should be set in production")

        if cls.USE_SUPABASE and not cls.SUPABASE_URL:
            errors.append("SUPABASE_URL must be set when USE_SUPABASE=true")

        if cls.USE_SUPABASE and not cls.SUPABASE_SERVICE_ROLE_KEY:
            errors.append("SUPABASE_SERVICE_ROLE_KEY must be set when USE_SUPABASE=true")

        if not cls.ANTHROPIC_API_KEY:
            errors.append("ANTHROPIC_API_KEY is required")

        if cls.LLM_MAX_ATTEMPTS < 1:
            errors.append("LLM_MAX_ATTEMPTS must be at least 1")

        return errors

    @classmethod
    def credential_status(cls, require_llm: bool = True) -> Dict[str, bool]:
        """
        Presence map of the secrets a handler needs.

        Storage credentials only count when Supabase is the backing store;
        the local SQLite store needs none.
        """
        status = {}
        if require_llm:
            status["has_llm_key"] = bool(cls.ANTHROPIC_API_KEY)
        if cls.USE_SUPABASE:
            status["has_supabase_url"] = bool(cls.SUPABASE_URL)
            status["has_service_key"] = bool(cls.SUPABASE_SERVICE_ROLE_KEY)
        return status

    @classmethod
    def get_summary(cls) -> dict:
        """Get configuration summary for logging (without secrets)"""
        return {
            "environment": cls.ENVIRONMENT,
            "use_supabase": cls.USE_SUPABASE,
            "llm_model": cls.LLM_MODEL,
            "llm_max_attempts": cls.LLM_MAX_ATTEMPTS,
            "rate_limit_enabled": cls.RATE_LIMIT_ENABLED,
            "cors_origins_count": len(cls.ALLOWED_ORIGINS),
            "structured_logging": cls.STRUCTURED_LOGGING,
        }


config = Config()
