"""Async rate limiter: concurrency slot plus token bucket.

Gates every Polygon request. The scan loop is already sequential, so the
default is a single concurrency slot; the token bucket enforces the
provider's request-rate ceiling across metadata, bar, and news calls.
"""

from __future__ import annotations

import asyncio
import logging
import time
from types import TracebackType
from typing import Final

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

POLYGON_REQUESTS_PER_SECOND: Final[float] = 5.0
POLYGON_MAX_CONCURRENT: Final[int] = 1


class RateLimiter:
    """Async rate limiter combining concurrency control and token bucket.

    Usage::

        limiter = RateLimiter(requests_per_second=5.0)

        await limiter.acquire()
        try:
            response = await client.get(url)
        finally:
            limiter.release()

        # or
        async with limiter:
            response = await client.get(url)
    """

    def __init__(
        self,
        max_concurrent: int = POLYGON_MAX_CONCURRENT,
        requests_per_second: float = POLYGON_REQUESTS_PER_SECOND,
    ) -> None:
        if requests_per_second <= 0:
            msg = f"requests_per_second must be positive, got {requests_per_second}"
            raise ValueError(msg)

        self._semaphore = asyncio.Semaphore(max_concurrent)
        self._requests_per_second = requests_per_second

        # Token bucket state; burst capacity is at least one request
        self._token_interval = 1.0 / requests_per_second
        self._max_tokens = max(1.0, float(max_concurrent))
        self._tokens = self._max_tokens
        self._last_refill_time = time.monotonic()
        self._bucket_lock = asyncio.Lock()

        logger.info(
            "RateLimiter initialized: max_concurrent=%d, rate=%.1f req/s",
            max_concurrent,
            requests_per_second,
        )

    async def acquire(self) -> None:
        """Block until both concurrency and rate limits allow a request."""
        await self._semaphore.acquire()
        await self._wait_for_token()

    def release(self) -> None:
        """Release a concurrency slot back to the semaphore."""
        self._semaphore.release()

    async def __aenter__(self) -> RateLimiter:
        await self.acquire()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.release()

    # ------------------------------------------------------------------
    # Token bucket internals
    # ------------------------------------------------------------------

    async def _wait_for_token(self) -> None:
        """Wait until a token is available in the bucket."""
        while True:
            async with self._bucket_lock:
                self._refill_tokens()
                if self._tokens >= 1.0:
                    self._tokens -= 1.0
                    return

            await asyncio.sleep(self._token_interval)

    def _refill_tokens(self) -> None:
        """Add tokens based on elapsed time since the last refill."""
        now = time.monotonic()
        elapsed = now - self._last_refill_time
        new_tokens = elapsed * self._requests_per_second
        self._tokens = min(self._max_tokens, self._tokens + new_tokens)
        self._last_refill_time = now
