"""Application configuration helpers."""

from __future__ import annotations

from functools import lru_cache
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

PROJECT_ROOT = Path(__file__).resolve().parents[3]
DEFAULT_STORAGE_BASE = PROJECT_ROOT / "data"


class AppConfig(BaseModel):
    """Runtime configuration loaded from environment variables."""

    model_config = ConfigDict(frozen=True)

    jwt_secret_key: Optional[str] = Field(
        default=None,
        description="HMAC secret for JWT signing (required outside development)",
    )
    jwt_issuer: str = Field(
        default="student-records-api", description="Expected `iss` claim"
    )
    jwt_audience: str = Field(
        default="student-records-portal", description="Expected `aud` claim"
    )
    token_ttl_minutes: int = Field(
        default=60, gt=0, description="Lifetime of issued access tokens"
    )
    admin_username: str = Field(default="admin", min_length=1)
    admin_password: str = Field(default="password", min_length=1)
    storage_base_path: Path = Field(
        default=DEFAULT_STORAGE_BASE, description="Root directory for uploaded images"
    )
    api_base_url: str = Field(
        default="http://localhost:8000",
        description="Base URL of the records API, used by the portal",
    )
    api_timeout_seconds: float = Field(default=10.0, gt=0)
    api_retries: int = Field(default=2, ge=0)
    session_secret_key: Optional[str] = Field(
        default=None, description="Signing key for portal session cookies"
    )

    @field_validator("storage_base_path", mode="before")
    @classmethod
    def _normalize_storage_path(cls, value: str | Path | None) -> Path:
        if value is None or value == "":
            raise ValueError("STORAGE_BASE_PATH cannot be empty")
        if isinstance(value, Path):
            path = value
        else:
            path = Path(value)
        return path.expanduser().resolve()

    @field_validator("jwt_secret_key", mode="before")
    @classmethod
    def _ensure_secret(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        cleaned = value.strip()
        if not cleaned:
            raise ValueError(
                "JWT_SECRET_KEY cannot be empty; unset the variable to use the development secret"
            )
        if len(cleaned) < 16:
            raise ValueError("JWT_SECRET_KEY must be at least 16 characters")
        return cleaned

    @field_validator("api_base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @property
    def image_dir(self) -> Path:
        return self.storage_base_path / "images"


def _read_env(key: str, default: Optional[str] = None) -> Optional[str]:
    return os.getenv(key, default)


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    """Load and cache application configuration."""
    config = AppConfig(
        jwt_secret_key=_read_env("JWT_SECRET_KEY"),
        jwt_issuer=_read_env("JWT_ISSUER", "student-records-api"),
        jwt_audience=_read_env("JWT_AUDIENCE", "student-records-portal"),
        token_ttl_minutes=_read_env("TOKEN_TTL_MINUTES", "60"),
        admin_username=_read_env("ADMIN_USERNAME", "admin"),
        admin_password=_read_env("ADMIN_PASSWORD", "password"),
        storage_base_path=_read_env("STORAGE_BASE_PATH", str(DEFAULT_STORAGE_BASE)),
        api_base_url=_read_env("API_BASE_URL", "http://localhost:8000"),
        api_timeout_seconds=_read_env("API_TIMEOUT_SECONDS", "10.0"),
        api_retries=_read_env("API_RETRIES", "2"),
        session_secret_key=_read_env("SESSION_SECRET_KEY"),
    )
    # Ensure the storage directory exists for downstream services.
    config.storage_base_path.mkdir(parents=True, exist_ok=True)
    return config


def reload_config() -> AppConfig:
    """Clear cached config (useful for tests) and reload."""
    get_config.cache_clear()
    return get_config()


__all__ = ["AppConfig", "get_config", "reload_config", "PROJECT_ROOT", "DEFAULT_STORAGE_BASE"]
