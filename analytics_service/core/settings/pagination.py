"""Pagination settings for list endpoints.

This module provides configurable defaults for cursor pagination across all
list endpoints. Having centralized pagination settings keeps page sizes
consistent and allows tuning against the analytics store's capacity.

Environment variables use PAGINATION_ prefix.
Example: PAGINATION_DEFAULT_LIMIT=50, PAGINATION_MAX_LIMIT=500
"""

from __future__ import annotations

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class PaginationSettings(BaseSettings):
    """Pagination configuration settings.

    Attributes:
        default_limit: Page size used when first/last is absent, zero or negative.
        max_limit: Hard upper bound for a requested page size.
        include_total: Run the concurrent count query for list endpoints.
        detect_cursor_collisions: Log a warning when two rows of one page
            encode to the same cursor (insufficient tie-break columns).

    Example:
        settings = PaginationSettings()
        limit = min(requested_limit, settings.max_limit)
    """

    default_limit: int = Field(
        default=50,
        ge=1,
        le=10000,
        description="Default page size when no limit is requested",
    )
    max_limit: int = Field(
        default=500,
        ge=1,
        le=10000,
        description="Maximum allowed page size (hard limit)",
    )
    include_total: bool = Field(
        default=True,
        description="Run the total-count query alongside the page query",
    )
    detect_cursor_collisions: bool = Field(
        default=True,
        description="Warn when rows of one page share a cursor",
    )

    model_config = SettingsConfigDict(
        env_prefix="PAGINATION_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
    )

    @model_validator(mode="after")
    def check_default_within_max(self) -> PaginationSettings:
        """Ensure the default page size never exceeds the maximum."""
        if self.default_limit > self.max_limit:
            msg = (
                f"default_limit ({self.default_limit}) must not exceed "
                f"max_limit ({self.max_limit})"
            )
            raise ValueError(msg)
        return self
