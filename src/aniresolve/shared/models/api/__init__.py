"""API-facing shared models."""

from .anilist import (
    MediaEntity,
    MediaFormat,
    MediaTitle,
    NextAiringEpisode,
    RelationEdge,
    RelationNode,
    RelationType,
    TitleQuery,
)

__all__ = [
    "MediaEntity",
    "MediaFormat",
    "MediaTitle",
    "NextAiringEpisode",
    "RelationEdge",
    "RelationNode",
    "RelationType",
    "TitleQuery",
]
