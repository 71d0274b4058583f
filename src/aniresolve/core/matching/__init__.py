"""Season and episode resolution for AniResolve.

This module maps parsed release names to AniList entities, walking
prequel/sequel relations to turn absolute episode numbers into
season-relative ones.
"""

from .engine import AnimeResolver
from .models import ResolutionResult, SeasonWalkResult
from .season_walker import SeasonWalker, find_edge, parent_for_special
from .verification import TitleVerifier, is_verified, title_distance

__all__ = [
    "AnimeResolver",
    "ResolutionResult",
    "SeasonWalkResult",
    "SeasonWalker",
    "TitleVerifier",
    "find_edge",
    "is_verified",
    "parent_for_special",
    "title_distance",
]
