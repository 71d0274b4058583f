"""Resolution service layer.

This module contains the service classes the resolver delegates to:
catalogue search with caching, and the manual search fallback.
"""

from __future__ import annotations

from .cache_adapter import ResolutionCache, ResolutionCacheProtocol
from .fallback_service import ManualSearchService
from .search_service import CatalogueSearchService

__all__ = [
    "CatalogueSearchService",
    "ManualSearchService",
    "ResolutionCache",
    "ResolutionCacheProtocol",
]
