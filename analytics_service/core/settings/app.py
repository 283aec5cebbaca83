"""Application (HTTP surface) settings.

Environment variables use APP_ prefix.
Example: APP_API_PREFIX=/api/v1, APP_DEBUG=true
"""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """FastAPI application settings."""

    title: str = Field(default="Analytics Service", description="API title")
    version: str = Field(default="0.1.0", description="API version")
    api_prefix: str = Field(default="/api/v1", description="Prefix for feature routers")
    debug: bool = Field(default=False, description="Enable debug mode")
    check_database_on_startup: bool = Field(
        default=True,
        description="Fail startup when the analytics store is unreachable",
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )

    @field_validator("api_prefix")
    @classmethod
    def normalize_prefix(cls, v: str) -> str:
        """Ensure a leading slash and no trailing slash."""
        v = "/" + v.strip("/")
        return "" if v == "/" else v
