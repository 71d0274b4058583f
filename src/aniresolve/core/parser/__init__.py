"""Filename tokenization for AniResolve."""

from .anitopy_parser import AnitopyParser
from .models import EpisodeNumber, ParsedName

__all__ = [
    "AnitopyParser",
    "EpisodeNumber",
    "ParsedName",
]
