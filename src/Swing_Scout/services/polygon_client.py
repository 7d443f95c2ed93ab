"""Thin async HTTP client for the Polygon.io REST API.

Owns the httpx client, the API key, and the mapping from HTTP status codes
to the domain exception hierarchy. Every request goes through
:func:`fetch_with_retry`, so callers only ever see ``DataFetchError``
subclasses. Response bodies are returned as raw JSON dicts; the services
that call this client validate them into typed models.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Final

import httpx

from Swing_Scout.services._helpers import (
    EXTERNAL_CALL_TIMEOUT_SECONDS,
    POLYGON_SOURCE,
    fetch_with_retry,
    safe_optional_float,
)
from Swing_Scout.services.rate_limiter import RateLimiter
from Swing_Scout.utils.exceptions import (
    DataSourceUnavailableError,
    RateLimitExceededError,
    TickerNotFoundError,
)

logger = logging.getLogger(__name__)

POLYGON_BASE_URL: Final[str] = "https://api.polygon.io"

_HTTP_NOT_FOUND: Final[int] = 404
_HTTP_TOO_MANY_REQUESTS: Final[int] = 429


class PolygonClient:
    """Rate-limited, retrying JSON client for Polygon.

    Usage::

        client = PolygonClient(api_key=settings.require_polygon_api_key(),
                               rate_limiter=RateLimiter())
        payload = await client.get_json("/v3/reference/tickers/AAPL", ticker="AAPL")
        await client.aclose()

    ``transport`` exists so tests can plug in ``httpx.MockTransport``.
    """

    def __init__(
        self,
        api_key: str,
        rate_limiter: RateLimiter,
        *,
        base_url: str = POLYGON_BASE_URL,
        transport: httpx.AsyncBaseTransport | None = None,
        backoff_delays: list[float] | None = None,
    ) -> None:
        self._api_key = api_key
        self._rate_limiter = rate_limiter
        self._backoff_delays = backoff_delays
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=httpx.Timeout(connect=5.0, read=30.0, write=10.0, pool=5.0),
            limits=httpx.Limits(max_connections=5, max_keepalive_connections=2),
            transport=transport,
        )

    async def aclose(self) -> None:
        """Close the shared httpx client."""
        await self._client.aclose()

    async def __aenter__(self) -> PolygonClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def get_json(
        self,
        path: str,
        params: dict[str, str | int | bool] | None = None,
        *,
        ticker: str,
    ) -> dict[str, Any]:
        """GET *path* (relative or an absolute ``next_url``) and return the JSON body.

        Raises:
            TickerNotFoundError: On HTTP 404.
            RateLimitExceededError: If Polygon keeps answering HTTP 429.
            DataSourceUnavailableError: On other errors after retries.
        """
        query: dict[str, str | int | bool] = dict(params or {})
        query["apiKey"] = self._api_key

        return await fetch_with_retry(
            lambda: self._get_once(path, query, ticker),
            rate_limiter=self._rate_limiter,
            ticker=ticker,
            source=POLYGON_SOURCE,
            label=f"GET {path.split('?', 1)[0]}",
            backoff_delays=self._backoff_delays,
        )

    async def _get_once(
        self,
        path: str,
        query: dict[str, str | int | bool],
        ticker: str,
    ) -> dict[str, Any]:
        try:
            response = await asyncio.wait_for(
                self._client.get(path, params=_encode_params(query)),
                timeout=EXTERNAL_CALL_TIMEOUT_SECONDS,
            )
        except httpx.HTTPError as exc:
            raise DataSourceUnavailableError(
                f"Polygon request failed: {exc}",
                ticker=ticker,
                source=POLYGON_SOURCE,
            ) from exc

        status = response.status_code
        if status == _HTTP_NOT_FOUND:
            raise TickerNotFoundError(
                f"Polygon has no data for '{ticker}'",
                ticker=ticker,
                source=POLYGON_SOURCE,
                http_status=status,
            )
        if status == _HTTP_TOO_MANY_REQUESTS:
            raise RateLimitExceededError(
                "Polygon rate limit exceeded",
                ticker=ticker,
                source=POLYGON_SOURCE,
                http_status=status,
                retry_after=safe_optional_float(response.headers.get("Retry-After")),
            )
        if not response.is_success:
            raise DataSourceUnavailableError(
                f"Polygon {status}: {response.text[:200]}",
                ticker=ticker,
                source=POLYGON_SOURCE,
                http_status=status,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise DataSourceUnavailableError(
                "Polygon returned a non-JSON body",
                ticker=ticker,
                source=POLYGON_SOURCE,
                http_status=status,
            ) from exc

        if not isinstance(payload, dict):
            raise DataSourceUnavailableError(
                "Polygon returned an unexpected JSON shape",
                ticker=ticker,
                source=POLYGON_SOURCE,
                http_status=status,
            )
        return payload


def _encode_params(params: dict[str, str | int | bool]) -> dict[str, str]:
    """Render query values the way Polygon expects (lowercase booleans)."""
    encoded: dict[str, str] = {}
    for key, value in params.items():
        if isinstance(value, bool):
            encoded[key] = "true" if value else "false"
        else:
            encoded[key] = str(value)
    return encoded
