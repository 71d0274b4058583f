"""Tests for AniListClient using httpx.MockTransport."""

from __future__ import annotations

import json
from collections.abc import Callable
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from aniresolve.config import AniListSettings
from aniresolve.services.anilist import AniListClient
from aniresolve.shared.errors import AniResolveNetworkError, AniResolveParsingError, ErrorCode
from aniresolve.shared.models.api.anilist import TitleQuery

MEDIA_PAYLOAD = {
    "id": 16498,
    "title": {"userPreferred": "Shingeki no Kyojin", "english": "Attack on Titan", "romaji": "Shingeki no Kyojin"},
    "synonyms": ["AoT"],
    "format": "TV",
    "status": "FINISHED",
    "seasonYear": 2013,
    "episodes": 25,
    "isAdult": False,
    "nextAiringEpisode": None,
    "relations": {
        "edges": [
            {"relationType": "SEQUEL", "node": {"id": 20958, "type": "ANIME", "format": "TV"}},
        ]
    },
}


def _client(handler: Callable[[httpx.Request], httpx.Response], **overrides) -> AniListClient:
    settings = AniListSettings(retry_delay=0.5, **overrides)
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return AniListClient(settings, http_client=http_client)


class TestQueries:
    """Request and response handling."""

    @pytest.mark.asyncio
    async def test_get_by_id(self) -> None:
        seen: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(json.loads(request.content))
            return httpx.Response(200, json={"data": {"Media": MEDIA_PAYLOAD}})

        async with _client(handler) as client:
            media = await client.get_by_id(16498)

        assert media.id == 16498
        assert media.display_title == "Shingeki no Kyojin"
        assert media.edges[0].node.id == 20958
        assert seen[0]["variables"] == {"id": 16498}

    @pytest.mark.asyncio
    async def test_get_by_id_not_found(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                404,
                json={"data": {"Media": None}, "errors": [{"message": "Not Found.", "status": 404}]},
            )

        async with _client(handler) as client:
            assert await client.get_by_id(1) is None

    @pytest.mark.asyncio
    async def test_search_compound_maps_aliases_to_keys(self) -> None:
        seen: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(json.loads(request.content))
            return httpx.Response(200, json={"data": {"v0": {"media": [MEDIA_PAYLOAD]}, "v1": {"media": []}}})

        queries = [
            TitleQuery(title="Attack on Titan", key="Attack on Titan"),
            TitleQuery(title="Unknown", key="Unknown", year=2020, is_adult=True),
        ]
        async with _client(handler) as client:
            results = await client.search_compound(queries)

        assert [(key, media.id if media else None) for key, media in results] == [
            ("Attack on Titan", 16498),
            ("Unknown", None),
        ]
        variables = seen[0]["variables"]
        assert variables["s0"] == "Attack on Titan"
        assert variables["y1"] == 2020
        assert variables["a1"] is True
        assert "v1: Page(perPage: 1)" in seen[0]["query"]

    @pytest.mark.asyncio
    async def test_search_compound_without_queries_sends_nothing(self) -> None:
        handler = AsyncMock()

        async with _client(handler) as client:
            assert await client.search_compound([]) == []

        handler.assert_not_called()

    @pytest.mark.asyncio
    async def test_search_passes_filters(self) -> None:
        seen: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(json.loads(request.content))
            return httpx.Response(200, json={"data": {"Page": {"media": [MEDIA_PAYLOAD]}}})

        async with _client(handler) as client:
            results = await client.search("Attack on Titan", exclude_id=5, format_not_in=("OVA", "MOVIE"))

        assert [media.id for media in results] == [16498]
        assert seen[0]["variables"]["idNot"] == 5
        assert seen[0]["variables"]["formatNot"] == ["OVA", "MOVIE"]

    @pytest.mark.asyncio
    async def test_graphql_errors_without_data_raise(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"data": None, "errors": [{"message": "Syntax Error"}]})

        async with _client(handler) as client:
            with pytest.raises(AniResolveParsingError):
                await client.get_by_id(1)

    @pytest.mark.asyncio
    async def test_non_json_body_raises(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>gateway</html>")

        async with _client(handler) as client:
            with pytest.raises(AniResolveParsingError) as exc_info:
                await client.get_by_id(1)

        assert exc_info.value.code == ErrorCode.API_INVALID_RESPONSE

    @pytest.mark.asyncio
    async def test_malformed_media_raises(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"data": {"Media": {"title": {}}}})

        async with _client(handler) as client:
            with pytest.raises(AniResolveParsingError):
                await client.get_by_id(1)


class TestRetries:
    """Backoff on rate limiting and server errors."""

    @pytest.mark.asyncio
    async def test_429_honours_retry_after(self) -> None:
        responses = [
            httpx.Response(429, headers={"Retry-After": "2"}),
            httpx.Response(200, json={"data": {"Media": MEDIA_PAYLOAD}}),
        ]

        def handler(request: httpx.Request) -> httpx.Response:
            return responses.pop(0)

        with patch("aniresolve.services.anilist.anilist_client.asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
            async with _client(handler) as client:
                media = await client.get_by_id(16498)

        assert media.id == 16498
        mock_sleep.assert_awaited_once_with(2.0)

    @pytest.mark.asyncio
    async def test_server_errors_back_off_exponentially(self) -> None:
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            return httpx.Response(503)

        with patch("aniresolve.services.anilist.anilist_client.asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
            async with _client(handler, retry_attempts=2) as client:
                with pytest.raises(AniResolveNetworkError) as exc_info:
                    await client.get_by_id(1)

        assert calls == 3
        assert exc_info.value.code == ErrorCode.API_SERVER_ERROR
        assert [call.args[0] for call in mock_sleep.await_args_list] == [0.5, 1.0]

    @pytest.mark.asyncio
    async def test_client_errors_are_not_retried(self) -> None:
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            return httpx.Response(400, json={"errors": [{"message": "Bad Request"}]})

        async with _client(handler) as client:
            with pytest.raises(AniResolveNetworkError) as exc_info:
                await client.get_by_id(1)

        assert calls == 1
        assert exc_info.value.code == ErrorCode.API_REQUEST_FAILED

    @pytest.mark.asyncio
    async def test_connection_errors_become_network_errors(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with _client(handler, retry_attempts=0) as client:
            with pytest.raises(AniResolveNetworkError) as exc_info:
                await client.get_by_id(1)

        assert exc_info.value.code == ErrorCode.NETWORK_ERROR
        assert isinstance(exc_info.value.original_error, httpx.ConnectError)
