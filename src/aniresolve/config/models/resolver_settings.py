"""Resolver tuning configuration.

Verification thresholds and franchise corrections are empirically tuned;
they are exposed here so they can be adjusted against a corpus of real
release names.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from aniresolve.shared.constants import SeasonWalkConfig, VerificationThresholds


class ResolverSettings(BaseModel):
    """Season/episode resolution configuration."""

    long_title_length: int = Field(
        default=VerificationThresholds.LONG_TITLE_LENGTH,
        ge=0,
        description="Titles longer than this use long_title_threshold",
    )
    medium_title_length: int = Field(
        default=VerificationThresholds.MEDIUM_TITLE_LENGTH,
        ge=0,
        description="Titles longer than this use medium_title_threshold",
    )
    long_title_threshold: float = Field(default=VerificationThresholds.LONG, ge=0, le=1)
    medium_title_threshold: float = Field(default=VerificationThresholds.MEDIUM, ge=0, le=1)
    short_title_threshold: float = Field(default=VerificationThresholds.SHORT, ge=0, le=1)
    season_retry_threshold: float = Field(
        default=VerificationThresholds.SEASON_RETRY,
        ge=0,
        le=1,
        description="Threshold for the explicit 'Season N' retry",
    )
    location_distance: int = Field(
        default=VerificationThresholds.LOCATION_DISTANCE,
        gt=0,
        description="Characters of match offset that cost a full distance point",
    )
    max_walk_depth: int = Field(
        default=SeasonWalkConfig.MAX_DEPTH,
        gt=0,
        description="Relation hops followed before a season walk gives up",
    )
    manual_search_enabled: bool = Field(default=True, description="Fall back to a catalogue title search")
    title_corrections_enabled: bool = Field(
        default=True,
        description="Apply franchise-specific title corrections",
    )


__all__ = ["ResolverSettings"]
