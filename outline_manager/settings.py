# outline_manager/settings.py
import re
from functools import lru_cache
from typing import Annotated, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_FINGERPRINT_RE = re.compile(r"^[0-9A-F]{64}$")


class Settings(BaseSettings):
    """Client settings with environment variable support and validation."""

    model_config = SettingsConfigDict(
        env_prefix="OUTLINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,  # Immutable settings for thread safety
    )

    # Management API root, including the server's secret path prefix
    api_url: str = ""

    # SHA-256 fingerprint of the server's self-signed certificate
    cert_sha256: Optional[str] = None

    # HTTP Client settings
    http_timeout: Annotated[float, Field(gt=0.0, le=120.0)] = 5.0
    http_max_connections: Annotated[int, Field(ge=1, le=500)] = 10
    http_max_keepalive_connections: Annotated[int, Field(ge=1, le=100)] = 5

    # TLS verification when no fingerprint is pinned
    verify_tls: bool = True

    # Logging
    log_level: str = "INFO"
    log_format: str = "text"

    # Application settings
    app_name: str = "outline-manager"
    app_version: str = "1.0.0"

    @field_validator("api_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Endpoint paths are appended with a leading slash."""
        return v.strip().rstrip("/")

    @field_validator("cert_sha256")
    @classmethod
    def normalize_fingerprint(cls, v: Optional[str]) -> Optional[str]:
        """Accept 'AB:CD:...' or plain hex, store as 64 upper-case hex digits."""
        if v is None:
            return None
        cleaned = re.sub(r"[\s:]", "", v).upper()
        if not cleaned:
            return None
        if not _FINGERPRINT_RE.match(cleaned):
            raise ValueError("cert_sha256 must be a SHA-256 hex digest")
        return cleaned

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level. Must be one of: {valid_levels}")
        return v.upper()

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        if v.lower() not in {"text", "json"}:
            raise ValueError("log_format must be 'text' or 'json'")
        return v.lower()


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance for performance."""
    return Settings()


settings = get_settings()
