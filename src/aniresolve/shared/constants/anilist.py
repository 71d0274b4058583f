"""
AniList API Constants

Limits and field names for the AniList GraphQL catalogue.
"""

from typing import ClassVar


class AniListConfig:
    """AniList endpoint and query-cost configuration."""

    ENDPOINT = "https://graphql.anilist.co"

    # AniList rejects documents above this complexity
    COMPLEXITY_LIMIT = 500
    # Cost of one aliased title search selection
    TITLE_QUERY_COMPLEXITY = 8.1
    # 500 / 8.1 allows 61 aliases; stay under it since every parsed name also
    # queues an isAdult duplicate
    COMPOUND_CHUNK_SIZE = 60
    # Page size for the manual fallback search
    SEARCH_PAGE_SIZE = 50

    # AniList allows 90 requests per minute
    RATE_LIMIT_PER_MINUTE = 90
    TIMEOUT_SECONDS = 30.0
    RETRY_ATTEMPTS = 3
    RETRY_DELAY_SECONDS = 1.0
    RETRY_STATUS: ClassVar[frozenset[int]] = frozenset({429, 500, 502, 503, 504})


class GraphQLFields:
    """GraphQL selection sets shared by every query."""

    MEDIA = """
    id
    title { userPreferred english romaji native }
    synonyms
    format
    status
    season
    seasonYear
    episodes
    isAdult
    nextAiringEpisode { episode airingAt }
    relations {
      edges {
        relationType(version: 2)
        node { id type format }
      }
    }
    """
