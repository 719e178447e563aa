"""Service configuration, read from the environment and an optional .env file."""

from __future__ import annotations

from enum import Enum
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    development = "development"
    staging = "staging"
    production = "production"


class Settings(BaseSettings):
    # .env may also carry HUBSPOT_TOKEN for the CLI, which is not a setting
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    ENVIRONMENT: Environment = Environment.development
    LOG_LEVEL: str = "INFO"
    CORS_ALLOWED_ORIGINS: str = "*"

    # HubSpot schema API
    HUBSPOT_API_BASE_URL: str = "https://api.hubapi.com"
    HUBSPOT_TIMEOUT: float = Field(default=30.0, gt=0)

    # Token header checked on /api/v1/hubspot routes
    HUBSPOT_TOKEN_HEADER: str = "x-hubspot-api-key"
    HUBSPOT_TOKEN_PREFIX: str = "pat-"
    HUBSPOT_TOKEN_MIN_LENGTH: int = Field(default=30, ge=1)

    # One JSON array artifact per sync run lands here
    AUDIT_LOG_DIR: str = "src/temp/logs"

    SENTRY_DSN: str = ""

    @field_validator("HUBSPOT_API_BASE_URL")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("HUBSPOT_TOKEN_HEADER")
    @classmethod
    def _lowercase_header(cls, value: str) -> str:
        return value.strip().lower()


@lru_cache
def get_settings() -> Settings:
    return Settings()
