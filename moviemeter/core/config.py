# moviemeter/core/config.py
from __future__ import annotations

"""
# MovieMeter: Centralized Configuration (Pydantic v2)

Single `settings` object with strongly-typed, environment-driven config.

## Goals
- Safe defaults for local/dev; explicit where prod needs secrets.
- The JWT secret is *optional at import*: a missing secret surfaces as a
  `ConfigurationFault` when a token is issued or verified, never as an
  import-time crash.
- CSV → list helpers for CORS origins (plus the legacy `CLIENT_ORIGIN` /
  `LOCAL_ORIGIN` pair).

## Usage
    from moviemeter.core.config import settings
"""

import logging
from typing import List, Literal, Optional

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


# ─────────────────────────────────────────────────────────────
# Settings
# ─────────────────────────────────────────────────────────────
class Settings(BaseSettings):
    """
    Global application settings sourced from environment.

    Security:
        - `JWT_SECRET_KEY` signs identity tokens (HS* only).
        - Tokens live `ACCESS_TOKEN_EXPIRE_DAYS` days; there is no server-side
          revocation list.

    Persistence:
        - `DATABASE_URL` wins when set (any async SQLAlchemy URL, e.g.
          `sqlite+aiosqlite:///./moviemeter.db`); otherwise a PostgreSQL DSN
          is assembled from the `POSTGRES_*` parts.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # don't crash on unknown keys
    )

    # ── App meta ──────────────────────────────────────────────
    PROJECT_NAME: str = "MovieMeter API"
    VERSION: str = "1.0.0"
    API_PREFIX: str = "/api"
    ENV: Literal["development", "staging", "production"] = "development"
    ENABLE_DOCS: bool = True

    # ── Security / JWT ────────────────────────────────────────
    JWT_SECRET_KEY: Optional[SecretStr] = None
    JWT_ALGORITHM: Literal["HS256", "HS384", "HS512"] = "HS256"
    ACCESS_TOKEN_EXPIRE_DAYS: int = Field(7, ge=1, le=365)
    BCRYPT_ROUNDS: int = Field(12, ge=4, le=31)
    MIN_PASSWORD_LENGTH: int = Field(6, ge=1, le=128)

    # ── Database ──────────────────────────────────────────────
    DATABASE_URL: Optional[str] = None
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: SecretStr = SecretStr("postgres")
    POSTGRES_DB: str = "moviemeter"
    DB_CREATE_ALL: bool = True
    DB_ECHO: bool = False

    # ── CORS ──────────────────────────────────────────────────
    FRONTEND_ORIGINS: Optional[str] = None  # CSV
    CLIENT_ORIGIN: Optional[str] = None     # deployed web client
    LOCAL_ORIGIN: str = "http://localhost:3000"

    # ── Payload bounds ────────────────────────────────────────
    MAX_BODY_BYTES: int = Field(10 * 1024 * 1024, ge=1024)
    # ~1MB image once base64-encoded (4/3 overhead + data-URL prefix)
    PROFILE_IMAGE_MAX_CHARS: int = Field(1_400_000, ge=1)

    # ── Validators / normalizers ──────────────────────────────
    @field_validator("JWT_SECRET_KEY", mode="before")
    @classmethod
    def _blank_secret_is_missing(cls, v):
        if v is None:
            return None
        raw = v.get_secret_value() if isinstance(v, SecretStr) else str(v)
        return raw if raw.strip() else None

    @field_validator("FRONTEND_ORIGINS", mode="before")
    @classmethod
    def _normalize_frontend_csv(cls, v):
        return None if v is None else ",".join(_split_csv(str(v)))

    @field_validator("API_PREFIX", mode="before")
    @classmethod
    def _normalize_prefix(cls, v) -> str:
        s = str(v or "").strip().rstrip("/")
        if s and not s.startswith("/"):
            s = "/" + s
        return s

    # ── Derived / convenience properties ─────────────────────
    @property
    def is_production(self) -> bool:
        return self.ENV.lower() == "production"

    @property
    def is_development(self) -> bool:
        return self.ENV.lower() == "development"

    @property
    def jwt_secret(self) -> Optional[str]:
        """Plain secret value, or None when unset."""
        return self.JWT_SECRET_KEY.get_secret_value() if self.JWT_SECRET_KEY else None

    @property
    def async_database_url(self) -> str:
        """Async SQLAlchemy DSN."""
        if self.DATABASE_URL:
            url = self.DATABASE_URL.strip()
            if url.startswith("postgresql://"):
                return url.replace("postgresql://", "postgresql+asyncpg://", 1)
            return url
        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD.get_secret_value()}"
            f"@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    @property
    def frontend_origins_list(self) -> List[str]:
        """
        CORS allowlist.
        Priority → FRONTEND_ORIGINS (CSV) → CLIENT_ORIGIN + LOCAL_ORIGIN.
        """
        if self.FRONTEND_ORIGINS:
            return _split_csv(self.FRONTEND_ORIGINS)
        return [o for o in (self.CLIENT_ORIGIN, self.LOCAL_ORIGIN) if o]


# Singleton instance
settings = Settings()

if settings.JWT_SECRET_KEY is None:
    log.warning("JWT_SECRET_KEY is not set; authenticated routes will fail with a configuration error")
