# File: app/core/config.py

import os
from functools import lru_cache
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator  # BaseSettings not needed


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


class Settings(BaseModel):
    PROJECT_NAME: str = "Zetruc Pulse API"
    VERSION: str = "0.1.0"

    api_v1_prefix: str = "/api/v1"
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # CORS (dashboard front end)
    backend_cors_origins: List[str] = Field(
        default=os.getenv("BACKEND_CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000"),
        validate_default=True,
    )

    # Database
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./pulse.db")

    # Sessions
    secret_key: str = os.getenv("SECRET_KEY", "CHANGE_ME_IN_PRODUCTION")
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 24))  # 24h
    algorithm: str = "HS256"
    session_cookie_name: str = os.getenv("SESSION_COOKIE_NAME", "pulse_session")
    session_cookie_secure: bool = _env_bool("SESSION_COOKIE_SECURE", False)

    # Provider API keys are stored AES-256-GCM encrypted with this key
    encryption_key_base64: Optional[str] = os.getenv("ENCRYPTION_KEY_BASE64") or None

    # OpenAI
    openai_base_url: Optional[str] = os.getenv("OPENAI_BASE_URL") or None
    analysis_model: str = "gpt-4o"
    suggest_model: str = "gpt-4o-mini"
    fallback_model: str = "gpt-4o-mini"
    reasoning_model: str = "o3"
    analysis_timeout_seconds: float = 60.0
    analysis_max_output_tokens: int = 2048
    analysis_history_limit: int = 20

    # First administrator, created on startup when both are set
    seed_admin_email: Optional[str] = os.getenv("SEED_ADMIN_EMAIL") or None
    seed_admin_password: Optional[str] = os.getenv("SEED_ADMIN_PASSWORD") or None

    @field_validator("backend_cors_origins", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v):
        if isinstance(v, str):
            return [i.strip() for i in v.split(",") if i.strip()]
        if isinstance(v, list):
            return v
        return []


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
