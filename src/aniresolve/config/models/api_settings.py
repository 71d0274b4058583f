"""API configuration models.

This module contains configuration models for the AniList GraphQL
catalogue: endpoint, timeouts, retries, rate limiting and query-cost
limits.
"""

from __future__ import annotations

import math

from pydantic import BaseModel, Field, model_validator

from aniresolve.shared.constants import AniListConfig


class AniListSettings(BaseModel):
    """AniList API configuration."""

    endpoint: str = Field(default=AniListConfig.ENDPOINT, description="GraphQL endpoint URL")

    # Request settings
    timeout: float = Field(
        default=AniListConfig.TIMEOUT_SECONDS,
        gt=0,
        description="Request timeout in seconds",
    )

    # Retry settings
    retry_attempts: int = Field(
        default=AniListConfig.RETRY_ATTEMPTS,
        ge=0,
        description="Number of retry attempts on 429 and 5xx responses",
    )
    retry_delay: float = Field(
        default=AniListConfig.RETRY_DELAY_SECONDS,
        ge=0,
        description="Initial delay between retries in seconds",
    )

    # Rate limiting settings
    rate_limit_per_minute: int = Field(
        default=AniListConfig.RATE_LIMIT_PER_MINUTE,
        gt=0,
        description="Requests allowed per minute",
    )

    # Query cost settings
    complexity_limit: int = Field(
        default=AniListConfig.COMPLEXITY_LIMIT,
        gt=0,
        description="Maximum query complexity accepted by AniList",
    )
    title_query_complexity: float = Field(
        default=AniListConfig.TITLE_QUERY_COMPLEXITY,
        gt=0,
        description="Complexity of one aliased title search",
    )
    compound_chunk_size: int = Field(
        default=AniListConfig.COMPOUND_CHUNK_SIZE,
        gt=0,
        description="Title searches per compound request",
    )
    search_page_size: int = Field(
        default=AniListConfig.SEARCH_PAGE_SIZE,
        gt=0,
        le=50,
        description="Results per manual search page",
    )

    @model_validator(mode="after")
    def _check_chunk_budget(self) -> AniListSettings:
        # A full chunk has to stay below the complexity limit
        max_chunk = math.floor(self.complexity_limit / self.title_query_complexity)
        if self.compound_chunk_size >= max_chunk:
            msg = (
                f"compound_chunk_size {self.compound_chunk_size} must stay below "
                f"{max_chunk} titles for complexity limit {self.complexity_limit}"
            )
            raise ValueError(msg)
        return self


class APISettings(BaseModel):
    """External API configuration."""

    anilist: AniListSettings = Field(default_factory=AniListSettings)


__all__ = ["APISettings", "AniListSettings"]
