"""GraphQL documents for the AniList catalogue."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from aniresolve.shared.constants import GraphQLFields
from aniresolve.shared.models.api.anilist import TitleQuery

MEDIA_FRAGMENT = f"fragment med on Media {{{GraphQLFields.MEDIA}}}"


def compound_search_query(queries: Sequence[TitleQuery]) -> tuple[str, dict[str, Any]]:
    """Build one document with an aliased one-result page per title query.

    Alias ``v{i}`` holds the result for ``queries[i]``.

    Returns:
        (document, variables)
    """
    declarations: list[str] = []
    selections: list[str] = []
    variables: dict[str, Any] = {}

    for index, query in enumerate(queries):
        declarations.append(f"$s{index}: String, $y{index}: Int, $a{index}: Boolean")
        selections.append(
            f"v{index}: Page(perPage: 1) {{ media(type: ANIME, search: $s{index}, "
            f"seasonYear: $y{index}, isAdult: $a{index}) {{ ...med }} }}",
        )
        variables[f"s{index}"] = query.title
        variables[f"y{index}"] = query.year
        variables[f"a{index}"] = query.is_adult

    document = f"query ({', '.join(declarations)}) {{\n  " + "\n  ".join(selections) + "\n}\n" + MEDIA_FRAGMENT
    return document, variables


def media_by_id_query(media_id: int) -> tuple[str, dict[str, Any]]:
    """Build the single-entity lookup document."""
    document = "query ($id: Int) { Media(id: $id, type: ANIME) { ...med } }\n" + MEDIA_FRAGMENT
    return document, {"id": media_id}


def search_query(
    title: str,
    per_page: int,
    exclude_id: int | None = None,
    format_not_in: Sequence[str] | None = None,
) -> tuple[str, dict[str, Any]]:
    """Build the paginated title search document used by the manual fallback."""
    document = (
        "query ($search: String, $perPage: Int, $idNot: Int, $formatNot: [MediaFormat]) "
        "{ Page(perPage: $perPage) { media(type: ANIME, search: $search, id_not: $idNot, "
        "format_not_in: $formatNot, sort: SEARCH_MATCH) { ...med } } }\n" + MEDIA_FRAGMENT
    )
    variables: dict[str, Any] = {
        "search": title,
        "perPage": per_page,
        "idNot": exclude_id,
        "formatNot": list(format_not_in) if format_not_in else None,
    }
    return document, variables
