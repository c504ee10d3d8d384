"""Centralized configuration for enrollgate.

Uses Pydantic BaseSettings with environment variable loading and validation.
All EG_* environment variables are validated at import time.
"""

from __future__ import annotations

import os

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

#: Secret used when EG_JWT_SECRET is unset. Only suitable for local development.
DEV_JWT_SECRET = "eg-dev-secret-do-not-use-in-production"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Tokens
    jwt_secret: str = Field(default="", description="HMAC secret for signing access tokens")
    token_ttl_seconds: int = Field(
        default=300, ge=1, description="Access token validity window in seconds"
    )

    # Hardening switches
    redact_user_passwords: bool = Field(
        default=True, description="Strip passwords from GET /users responses"
    )
    protect_user_reset: bool = Field(
        default=True, description="Require the ADMIN role for POST /users/reset"
    )

    # Logging
    log_format: str = Field(default="text", description="Log format: text or json")
    log_level: str = Field(default="INFO", description="Python log level")

    # Server
    host: str = Field(default="0.0.0.0", description="Server bind host")  # noqa: S104
    port: int = Field(default=3000, ge=1, le=65535, description="Server bind port")

    # CORS
    cors_origins: str = Field(default="*", description="Comma-separated CORS origins")

    model_config = {"env_prefix": "EG_", "case_sensitive": False, "extra": "ignore"}

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        v = v.lower()
        if v not in ("text", "json"):
            msg = f"EG_LOG_FORMAT must be 'text' or 'json', got '{v}'"
            raise ValueError(msg)
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        import logging

        v = v.upper()
        if not hasattr(logging, v):
            msg = f"EG_LOG_LEVEL must be a valid Python log level, got '{v}'"
            raise ValueError(msg)
        return v

    @property
    def cors_origin_list(self) -> list[str]:
        """Return parsed list of CORS origins."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


_TRUTHY = frozenset({"1", "true", "yes", "on"})
_FALSY = frozenset({"0", "false", "no", "off"})


def env_flag(name: str, default: bool) -> bool:
    """Read a boolean switch from os.environ at call time, falling back to *default*."""
    raw = os.environ.get(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    return default


# Singleton, validated at import time.
settings = Settings()
