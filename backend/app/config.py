"""Configuration settings for the Tradeline backend."""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # Storage: "supabase" for deployments, "memory" for local runs and demos
    storage_backend: Literal["supabase", "memory"] = "supabase"

    # Supabase
    supabase_url: str | None = None
    # New key system (preferred)
    supabase_secret_key: str | None = None  # Backend/admin access
    # Legacy key (deprecated)
    supabase_service_role_key: str | None = None
    supabase_timeout: float = 10.0  # seconds, per PostgREST request

    # JWT issued by Supabase Auth
    jwt_secret_key: str  # Required - no default for security
    jwt_algorithm: str = "HS256"
    jwt_audience: str = "authenticated"
    jwt_expire_minutes: int = 60  # only used by create_access_token

    # Classifier
    classifier_strategy: Literal["local", "openai", "anthropic"] = "local"
    classifier_fallback: bool = False  # answer with keyword rules if the model fails
    classifier_timeout: float = 20.0
    openai_api_key: str | None = None
    openai_model: str = "gpt-4o-mini"
    anthropic_api_key: str | None = None
    anthropic_model: str = "claude-3-5-haiku-latest"

    # Marketplace limits
    match_page_size: int = 200
    max_page_size: int = 200
    default_currency: str = "EUR"

    # App
    debug: bool = False
    log_level: str = "INFO"
    # CORS: Allowed origins for cross-origin requests
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
    ]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"  # Ignore extra env vars not in model


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
