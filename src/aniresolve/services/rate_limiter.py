"""Token Bucket Rate Limiter implementation.

This module provides a token bucket rate limiter for controlling request
rates to the AniList API. Token accounting is thread-safe; ``acquire``
waits cooperatively on the event loop until a token is free.
"""

from __future__ import annotations

import asyncio
import logging
import threading
import time

from aniresolve.shared.constants import AniListConfig
from aniresolve.shared.errors import ApplicationError, ErrorCode, ErrorContext
from aniresolve.shared.logging import log_operation_error

logger = logging.getLogger(__name__)


class TokenBucketRateLimiter:
    """Token bucket rate limiter.

    The bucket holds at most ``capacity`` tokens and refills at
    ``refill_rate`` tokens per second. Each request consumes one token.

    Args:
        capacity: Maximum number of tokens the bucket can hold
        refill_rate: Number of tokens to add per second
    """

    def __init__(
        self,
        capacity: int = AniListConfig.RATE_LIMIT_PER_MINUTE,
        refill_rate: float = AniListConfig.RATE_LIMIT_PER_MINUTE / 60.0,
    ) -> None:
        """Initialize the token bucket rate limiter.

        Raises:
            ApplicationError: If capacity or refill_rate are invalid
        """
        context = ErrorContext(
            operation="rate_limiter_init",
            additional_data={"capacity": capacity, "refill_rate": refill_rate},
        )

        if capacity <= 0:
            error = ApplicationError(
                code=ErrorCode.VALIDATION_ERROR,
                message=f"Capacity must be positive, got: {capacity}",
                context=context,
            )
            log_operation_error(logger=logger, error=error, operation="rate_limiter_init")
            raise error

        if refill_rate <= 0:
            error = ApplicationError(
                code=ErrorCode.VALIDATION_ERROR,
                message=f"Refill rate must be positive, got: {refill_rate}",
                context=context,
            )
            log_operation_error(logger=logger, error=error, operation="rate_limiter_init")
            raise error

        self.capacity = capacity
        self.refill_rate = refill_rate
        self.tokens = float(capacity)
        self.last_refill = time.monotonic()
        self._lock = threading.Lock()

    def _refill(self) -> None:
        """Add the tokens earned since the last refill, capped at capacity."""
        now = time.monotonic()
        elapsed = now - self.last_refill
        tokens_to_add = elapsed * self.refill_rate

        if tokens_to_add > 0:
            self.tokens = min(self.capacity, self.tokens + tokens_to_add)
            self.last_refill = now

    def _validate_request(self, tokens: int) -> None:
        if tokens <= 0 or tokens > self.capacity:
            raise ApplicationError(
                code=ErrorCode.VALIDATION_ERROR,
                message=f"Tokens to acquire must be in 1..{self.capacity}, got: {tokens}",
                context=ErrorContext(
                    operation="rate_limiter_acquire",
                    additional_data={"requested_tokens": tokens, "capacity": self.capacity},
                ),
            )

    def try_acquire(self, tokens: int = 1) -> bool:
        """Try to acquire tokens without waiting.

        Args:
            tokens: Number of tokens to acquire (default: 1)

        Returns:
            True if tokens were acquired, False otherwise

        Raises:
            ApplicationError: If the request is outside 1..capacity
        """
        self._validate_request(tokens)

        with self._lock:
            self._refill()
            if self.tokens >= tokens:
                self.tokens -= tokens
                return True
            return False

    def seconds_until_available(self, tokens: int = 1) -> float:
        """Time until ``tokens`` tokens will be in the bucket."""
        with self._lock:
            self._refill()
            missing = tokens - self.tokens
        return max(0.0, missing / self.refill_rate)

    async def acquire(self, tokens: int = 1) -> None:
        """Wait until tokens are available, then consume them.

        Raises:
            ApplicationError: If the request is outside 1..capacity
        """
        while not self.try_acquire(tokens):
            delay = self.seconds_until_available(tokens)
            logger.debug("Rate limit reached, waiting %.2fs", delay)
            await asyncio.sleep(delay)

    def get_tokens_available(self) -> int:
        """Get the current number of tokens available in the bucket."""
        with self._lock:
            self._refill()
            return int(self.tokens)

    def reset(self) -> None:
        """Reset the bucket to its full capacity."""
        with self._lock:
            self.tokens = float(self.capacity)
            self.last_refill = time.monotonic()
