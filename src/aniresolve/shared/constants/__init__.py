"""
AniResolve Constants Module

This module provides centralized constants for AniResolve. Values that are
empirically tuned (thresholds, franchise corrections) live here so they can
be adjusted against a test corpus without touching the algorithms.
"""

from .anilist import AniListConfig, GraphQLFields
from .application import Application
from .logging import LoggingDefaults
from .matching import (
    EdgeFormats,
    ManualSearchConfig,
    SeasonWalkConfig,
    VerificationThresholds,
)
from .normalization import NormalizationConfig, TitleCorrections

__all__ = [
    "AniListConfig",
    "Application",
    "EdgeFormats",
    "GraphQLFields",
    "LoggingDefaults",
    "ManualSearchConfig",
    "NormalizationConfig",
    "SeasonWalkConfig",
    "TitleCorrections",
    "VerificationThresholds",
]
