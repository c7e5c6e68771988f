"""
Configuration and settings for the MirroSocial backend.

Each field reads the environment variable of the same name, upper-cased.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_prefix: str = "/api"

    # Database (Postgres expected, any SQLAlchemy URL works)
    database_url: Optional[str] = None

    # Cloudflare R2 (S3-compatible)
    r2_endpoint: Optional[str] = None
    r2_access_key_id: Optional[str] = None
    r2_secret_access_key: Optional[str] = None
    r2_bucket_name: Optional[str] = None
    r2_public_url: Optional[str] = None

    # Development toggles
    use_in_memory_backends: bool = False

    # Queue (Redis)
    redis_url: Optional[str] = None
    redis_queue_key: str = "mirro:jobs"

    # Sessions and links
    public_base_url: str = "http://localhost:3000"
    session_ttl_seconds: int = 30 * 24 * 3600
    session_cookie_name: str = "session_token"

    # Media host that was retired in favour of the R2 public bucket URL.
    legacy_media_base_url: str = "https://media.mirro2.com"

    # Location autocomplete providers
    google_places_api_key: Optional[str] = None
    mapbox_access_token: Optional[str] = None

    http_timeout_seconds: float = 10.0


R2_ENV_VARS = (
    ("R2_ENDPOINT", "r2_endpoint"),
    ("R2_ACCESS_KEY_ID", "r2_access_key_id"),
    ("R2_SECRET_ACCESS_KEY", "r2_secret_access_key"),
    ("R2_BUCKET_NAME", "r2_bucket_name"),
    ("R2_PUBLIC_URL", "r2_public_url"),
)


def r2_missing_settings(settings: Settings) -> list[str]:
    """Names of the R2 environment variables that are not configured."""
    return [env for env, attr in R2_ENV_VARS if not getattr(settings, attr)]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
