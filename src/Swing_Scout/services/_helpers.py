"""Shared helpers for Polygon-backed service modules.

Consolidates safe type conversions for loosely-typed provider JSON and the
retry-with-backoff pattern used by the market data and news services.
"""

from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Callable, Coroutine
from typing import Any, Final

from Swing_Scout.services.rate_limiter import RateLimiter
from Swing_Scout.utils.exceptions import (
    DataSourceUnavailableError,
    RateLimitExceededError,
    TickerNotFoundError,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Shared constants
# ---------------------------------------------------------------------------

POLYGON_SOURCE: Final[str] = "polygon"
EXTERNAL_CALL_TIMEOUT_SECONDS: Final[float] = 30.0

# Retry configuration for provider calls
MAX_RETRIES: Final[int] = 3
BACKOFF_DELAYS: Final[list[float]] = [1.0, 2.0, 4.0]


# ---------------------------------------------------------------------------
# Safe type conversions
# ---------------------------------------------------------------------------


def safe_optional_float(value: object) -> float | None:
    """Convert a JSON value to float, returning None for missing/NaN/unparseable."""
    if value is None or isinstance(value, bool):
        return None
    try:
        float_val = float(str(value))
    except (ValueError, TypeError):
        return None
    if math.isnan(float_val) or math.isinf(float_val):
        return None
    return float_val


def safe_optional_str(value: object) -> str | None:
    """Convert a JSON value to a stripped string, returning None when blank."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


# ---------------------------------------------------------------------------
# Retry wrapper
# ---------------------------------------------------------------------------


async def fetch_with_retry[T](
    fetch_fn: Callable[[], Coroutine[Any, Any, T]],
    *,
    rate_limiter: RateLimiter,
    ticker: str,
    source: str,
    label: str,
    max_retries: int = MAX_RETRIES,
    backoff_delays: list[float] | None = None,
) -> T:
    """Retry a fetch coroutine with exponential backoff and rate limiting.

    ``TickerNotFoundError`` is re-raised immediately: retrying cannot make a
    symbol exist. Rate-limit responses honour ``retry_after`` when the
    provider sends one. Anything else is retried and, after the last attempt,
    re-raised as ``DataSourceUnavailableError`` (or the final
    ``RateLimitExceededError`` if the provider kept throttling).

    Args:
        fetch_fn: Zero-argument callable returning a coroutine.
        rate_limiter: RateLimiter instance for acquire/release.
        ticker: Ticker symbol for error context.
        source: Data source name for error context.
        label: Human-readable label for log messages.
        max_retries: Maximum number of attempts (default 3).
        backoff_delays: Delay schedule in seconds (default [1.0, 2.0, 4.0]).

    Returns:
        Whatever *fetch_fn* returns.

    Raises:
        TickerNotFoundError: Re-raised immediately.
        RateLimitExceededError: If every attempt was throttled.
        DataSourceUnavailableError: After exhausting all retries.
    """
    delays = backoff_delays if backoff_delays is not None else BACKOFF_DELAYS
    last_exc: Exception | None = None

    for attempt in range(max_retries):
        retry_after: float | None = None
        await rate_limiter.acquire()
        try:
            return await fetch_fn()
        except TickerNotFoundError:
            raise
        except RateLimitExceededError as exc:
            last_exc = exc
            retry_after = exc.retry_after
            logger.warning(
                "%s rate limited (attempt %d/%d)",
                label,
                attempt + 1,
                max_retries,
            )
        except TimeoutError as exc:
            last_exc = exc
            logger.warning(
                "%s timed out (attempt %d/%d)",
                label,
                attempt + 1,
                max_retries,
            )
        except Exception as exc:  # noqa: BLE001
            last_exc = exc
            logger.warning(
                "%s failed (attempt %d/%d): %s",
                label,
                attempt + 1,
                max_retries,
                exc,
            )
        finally:
            rate_limiter.release()

        # Backoff before next retry (not after the last attempt)
        if attempt < max_retries - 1:
            delay = delays[attempt] if attempt < len(delays) else delays[-1]
            if retry_after is not None and retry_after > 0:
                delay = retry_after
            await asyncio.sleep(delay)

    assert last_exc is not None  # noqa: S101
    if isinstance(last_exc, RateLimitExceededError):
        raise last_exc
    raise DataSourceUnavailableError(
        f"Failed to fetch {label} after {max_retries} retries: {last_exc}",
        ticker=ticker,
        source=source,
    ) from last_exc
