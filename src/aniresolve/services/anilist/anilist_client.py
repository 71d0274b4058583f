"""AniList GraphQL client for AniResolve.

This module provides the async catalogue client used by the resolver:
batched title searches, id lookups and the paginated manual search. Every
request passes through a token bucket rate limiter and is retried with
backoff on 429 and 5xx responses, honouring ``Retry-After``.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Sequence
from types import TracebackType
from typing import Any

import httpx
from pydantic import ValidationError

from aniresolve.config.models.api_settings import AniListSettings
from aniresolve.services.anilist.queries import (
    compound_search_query,
    media_by_id_query,
    search_query,
)
from aniresolve.services.rate_limiter import TokenBucketRateLimiter
from aniresolve.shared.constants import AniListConfig
from aniresolve.shared.errors import (
    AniResolveNetworkError,
    ErrorCode,
    ErrorContext,
    create_api_error,
    create_parsing_error,
)
from aniresolve.shared.logging import log_operation_success
from aniresolve.shared.models.api.anilist import MediaEntity, TitleQuery

logger = logging.getLogger(__name__)

MAX_BACKOFF_SECONDS = 60.0


class AniListClient:
    """Async AniList GraphQL client.

    The client owns its ``httpx.AsyncClient`` unless one is passed in, in
    which case the caller is responsible for closing it.

    Example:
        >>> async with AniListClient() as client:
        ...     media = await client.get_by_id(16498)
    """

    def __init__(
        self,
        settings: AniListSettings | None = None,
        http_client: httpx.AsyncClient | None = None,
        rate_limiter: TokenBucketRateLimiter | None = None,
    ) -> None:
        self.settings = settings or AniListSettings()
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(self.settings.timeout),
            headers={"Content-Type": "application/json", "Accept": "application/json"},
        )
        self.rate_limiter = rate_limiter or TokenBucketRateLimiter(
            capacity=self.settings.rate_limit_per_minute,
            refill_rate=self.settings.rate_limit_per_minute / 60.0,
        )

    async def __aenter__(self) -> AniListClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    async def search_compound(
        self,
        queries: Sequence[TitleQuery],
    ) -> list[tuple[str, MediaEntity | None]]:
        """Run many title searches in a single aliased request.

        Args:
            queries: Title searches; callers keep a request under the
                complexity limit by chunking

        Returns:
            (cache key, first hit or None) pairs in query order

        Raises:
            AniResolveNetworkError: If the request fails
            AniResolveParsingError: If the response is malformed
        """
        if not queries:
            return []

        document, variables = compound_search_query(queries)
        data = await self._post(document, variables, operation="search_compound")

        results: list[tuple[str, MediaEntity | None]] = []
        for index, query in enumerate(queries):
            page = data.get(f"v{index}") or {}
            media_list = page.get("media") or []
            media = self._parse_media(media_list[0], "search_compound") if media_list else None
            results.append((query.key, media))
        return results

    async def get_by_id(self, media_id: int) -> MediaEntity | None:
        """Fetch a single entity by id.

        Raises:
            AniResolveNetworkError: If the request fails
            AniResolveParsingError: If the response is malformed
        """
        document, variables = media_by_id_query(media_id)
        data = await self._post(document, variables, operation="get_by_id")
        payload = data.get("Media")
        return self._parse_media(payload, "get_by_id") if payload else None

    async def search(
        self,
        title: str,
        exclude_id: int | None = None,
        format_not_in: Sequence[str] | None = None,
    ) -> list[MediaEntity]:
        """Search the catalogue by title, best match first.

        Raises:
            AniResolveNetworkError: If the request fails
            AniResolveParsingError: If the response is malformed
        """
        document, variables = search_query(
            title,
            per_page=self.settings.search_page_size,
            exclude_id=exclude_id,
            format_not_in=format_not_in,
        )
        data = await self._post(document, variables, operation="search")
        page = data.get("Page") or {}
        return [self._parse_media(item, "search") for item in page.get("media") or []]

    async def _post(self, document: str, variables: dict[str, Any], operation: str) -> dict[str, Any]:
        """POST a GraphQL document and return its ``data`` object."""
        response = await self._send_with_backoff(document, variables, operation)

        try:
            body = response.json()
        except ValueError as e:
            raise create_parsing_error(
                "AniList returned a non-JSON response",
                operation=operation,
                original_error=e,
            ) from e

        if not isinstance(body, dict):
            raise create_parsing_error("AniList response is not a JSON object", operation=operation)

        errors = body.get("errors")
        data = body.get("data")
        if errors:
            messages = "; ".join(str(error.get("message", error)) for error in errors if isinstance(error, dict))
            if not isinstance(data, dict):
                raise create_parsing_error(f"AniList query failed: {messages}", operation=operation)
            logger.warning("AniList returned partial data for %s: %s", operation, messages)

        if not isinstance(data, dict):
            raise create_parsing_error("AniList response has no data object", operation=operation)
        return data

    async def _send_with_backoff(
        self,
        document: str,
        variables: dict[str, Any],
        operation: str,
    ) -> httpx.Response:
        backoff = max(0.1, self.settings.retry_delay)
        max_attempts = self.settings.retry_attempts + 1
        last_error: Exception | None = None
        start = time.perf_counter()

        for attempt in range(max_attempts):
            await self.rate_limiter.acquire()
            try:
                response = await self._client.post(
                    self.settings.endpoint,
                    json={"query": document, "variables": variables},
                )
            except httpx.TimeoutException as e:
                last_error = e
                delay = backoff
                code = ErrorCode.API_TIMEOUT
            except httpx.RequestError as e:
                last_error = e
                delay = backoff
                code = ErrorCode.NETWORK_ERROR
            else:
                if response.status_code not in AniListConfig.RETRY_STATUS:
                    if response.status_code >= 400 and response.status_code != 404:
                        raise self._status_error(response, operation)
                    log_operation_success(
                        logger=logger,
                        operation=operation,
                        duration_ms=(time.perf_counter() - start) * 1000,
                        result_info={"status": response.status_code, "attempts": attempt + 1},
                    )
                    return response
                last_error = self._status_error(response, operation)
                delay = _retry_delay_from_response(response, backoff)
                code = last_error.code

            if attempt >= max_attempts - 1:
                break

            logger.info(
                "AniList %s retry #%d scheduled in %.2fs (%s)",
                operation,
                attempt + 1,
                delay,
                code.value,
            )
            await asyncio.sleep(delay)
            backoff = min(backoff * 2, MAX_BACKOFF_SECONDS)

        if isinstance(last_error, AniResolveNetworkError):
            raise last_error
        raise create_api_error(
            f"AniList request failed after {max_attempts} attempt(s): {last_error}",
            operation=operation,
            original_error=last_error,
            code=code,
        ) from last_error

    @staticmethod
    def _status_error(response: httpx.Response, operation: str) -> AniResolveNetworkError:
        status = response.status_code
        if status == 429:
            code = ErrorCode.API_RATE_LIMIT
        elif status >= 500:
            code = ErrorCode.API_SERVER_ERROR
        else:
            code = ErrorCode.API_REQUEST_FAILED
        return AniResolveNetworkError(
            code,
            f"AniList responded with HTTP {status}",
            ErrorContext(operation=operation, additional_data={"status_code": status}),
        )

    @staticmethod
    def _parse_media(payload: Any, operation: str) -> MediaEntity:
        try:
            return MediaEntity.model_validate(payload)
        except ValidationError as e:
            raise create_parsing_error(
                f"Malformed media payload: {e.error_count()} error(s)",
                operation=operation,
                original_error=e,
            ) from e


def _retry_delay_from_response(response: httpx.Response, fallback: float) -> float:
    """Compute the delay for the next retry using Retry-After when available."""
    retry_after = response.headers.get("Retry-After")
    if retry_after:
        try:
            delay = float(retry_after)
        except ValueError:
            delay = fallback
    else:
        delay = fallback
    return max(0.1, min(delay, MAX_BACKOFF_SECONDS))
