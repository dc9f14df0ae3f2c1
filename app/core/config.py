# app/core/config.py
from __future__ import annotations

"""
# Lesson Video API • Centralized Configuration (Pydantic v2)

Single `settings` object with strongly-typed, environment-driven config.

## Goals
- Safe defaults for local/dev; explicit where prod needs secrets.
- Object storage is optional at import time so the app never crashes in dev.
- Bounded TTLs and upstream timeouts for the streaming proxy.

## Usage
    from app.core.config import settings
"""

import logging
from typing import List, Optional, Literal

from dotenv import load_dotenv
from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

log = logging.getLogger(__name__)
load_dotenv()  # harmless in prod; convenient in dev


# ─────────────────────────────────────────────────────────────
# Small helpers
# ─────────────────────────────────────────────────────────────
def _split_csv(v: str | None) -> list[str]:
    """Split a comma-separated string into a trimmed list (empty-safe)."""
    if not v:
        return []
    return [s.strip() for s in str(v).split(",") if s and s.strip()]


def _normalize_url_like(v: str | None, *, require_scheme: bool = True) -> str:
    """Normalize to a string URL without trailing slash."""
    s = (v or "").strip()
    if not s:
        return ""
    if require_scheme and not (s.startswith("http://") or s.startswith("https://")):
        s = "https://" + s
    return s.rstrip("/")


# ─────────────────────────────────────────────────────────────
# Settings
# ─────────────────────────────────────────────────────────────
class Settings(BaseSettings):
    """
    Global application settings sourced from environment.

    Storage:
        - Signing goes through the storage service's S3-compatible endpoint
          (`AWS_S3_ENDPOINT_URL`, e.g. ``https://<ref>.supabase.co/storage/v1/s3``).
        - `STORAGE_PUBLIC_BASE_URL` is the origin used to build public object URLs.

    Streaming:
        - Upstream timeouts are always applied; the pool is process-wide.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # don't crash on unknown keys
    )

    # ── App meta ──────────────────────────────────────────────
    PROJECT_NAME: str = "Lesson Video API"
    VERSION: str = "1.0.0"
    API_PREFIX: str = ""
    ENV: Literal["development", "staging", "production"] = "development"
    ENABLE_DOCS: bool = True

    # ── Auth (external collaborator tokens) ───────────────────
    JWT_SECRET_KEY: SecretStr = Field(...)
    JWT_ALGORITHM: Literal["HS256", "HS384", "HS512"] = "HS256"
    JWT_ISSUER: Optional[str] = None
    JWT_AUDIENCE: Optional[str] = None

    # ── Database (PostgreSQL) ─────────────────────────────────
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: SecretStr = Field(...)
    POSTGRES_DB: str = "postgres"

    # ── CORS ─────────────────────────────────────────────────
    FRONTEND_ORIGINS: Optional[str] = None  # CSV
    ALLOW_ORIGINS_REGEX: Optional[str] = None

    # ── Object storage (S3-compatible) ────────────────────────
    AWS_ACCESS_KEY_ID: Optional[str] = None
    AWS_SECRET_ACCESS_KEY: Optional[SecretStr] = None
    AWS_SESSION_TOKEN: Optional[SecretStr] = None
    AWS_REGION: str = "us-east-1"
    AWS_S3_ENDPOINT_URL: Optional[str] = None
    AWS_S3_ADDRESSING_STYLE: Literal["path", "virtual", "auto"] = "path"
    STORAGE_PUBLIC_BASE_URL: Optional[str] = None  # e.g. https://<ref>.supabase.co
    STORAGE_DEFAULT_BUCKET: str = "videos"
    STORAGE_UPLOAD_PREFIX: str = "lesson-videos"

    # ── Signed URL TTLs ───────────────────────────────────────
    SIGNED_URL_TTL_SECONDS: int = Field(3600, ge=60, le=7 * 24 * 60 * 60)
    PROXY_SIGNED_URL_TTL_SECONDS: int = Field(60, ge=10, le=3600)
    UPLOAD_URL_TTL_SECONDS: int = Field(900, ge=60, le=24 * 60 * 60)
    SIGNED_URL_VERIFY_OBJECT: bool = True  # HEAD before issuing standalone grants

    # ── Upstream proxy ────────────────────────────────────────
    UPSTREAM_CONNECT_TIMEOUT: float = Field(5.0, gt=0)
    UPSTREAM_READ_TIMEOUT: float = Field(30.0, gt=0)
    UPSTREAM_WRITE_TIMEOUT: float = Field(10.0, gt=0)
    UPSTREAM_POOL_TIMEOUT: float = Field(5.0, gt=0)
    UPSTREAM_MAX_CONNECTIONS: int = Field(100, ge=1, le=2000)
    UPSTREAM_MAX_KEEPALIVE: int = Field(20, ge=0, le=2000)
    PROXY_CHUNK_SIZE: int = Field(64 * 1024, ge=4 * 1024, le=8 * 1024 * 1024)

    # ── Validators / normalizers ──────────────────────────────
    @field_validator("FRONTEND_ORIGINS", mode="before")
    @classmethod
    def _normalize_frontend_csv(cls, v):
        return None if v is None else ",".join(_split_csv(str(v)))

    @field_validator("STORAGE_PUBLIC_BASE_URL", "AWS_S3_ENDPOINT_URL", mode="before")
    @classmethod
    def _normalize_storage_urls(cls, v: str | None) -> str | None:
        """Accept host-only or full URLs; normalize without trailing slash."""
        s = (v or "").strip()
        if not s:
            return None
        return _normalize_url_like(s)

    @field_validator("STORAGE_UPLOAD_PREFIX", mode="before")
    @classmethod
    def _normalize_upload_prefix(cls, v: str | None) -> str:
        return (v or "lesson-videos").strip().strip("/") or "lesson-videos"

    @field_validator("API_PREFIX", mode="before")
    @classmethod
    def _normalize_api_prefix(cls, v: str | None) -> str:
        s = (v or "").strip().rstrip("/")
        if s and not s.startswith("/"):
            s = "/" + s
        return s

    # ── Derived / convenience properties ─────────────────────
    @property
    def DATABASE_URL(self) -> str:
        """Sync DSN."""
        return (
            f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD.get_secret_value()}"
            f"@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    @property
    def ASYNC_DATABASE_URL(self) -> str:
        """Async SQLAlchemy DSN."""
        return self.DATABASE_URL.replace("postgresql://", "postgresql+asyncpg://")

    @property
    def frontend_origins_list(self) -> List[str]:
        return _split_csv(self.FRONTEND_ORIGINS)


# Singleton instance
settings = Settings()
