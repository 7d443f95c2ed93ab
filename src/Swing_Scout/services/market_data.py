"""Market data provider backed by Polygon.io reference and aggregates endpoints.

``DataProvider`` is the protocol the scan pipeline consumes; the Polygon
implementation validates loosely typed JSON into :class:`Candle` and
:class:`TickerMeta` here, at the boundary, so the core never inspects raw
payloads. All provider failures surface as ``DataFetchError`` subclasses.
"""

from __future__ import annotations

import datetime
import logging
from typing import Any, Final, Protocol

from pydantic import ValidationError

from Swing_Scout.config import Settings
from Swing_Scout.models.market_data import Candle, TickerMeta
from Swing_Scout.services._helpers import safe_optional_float, safe_optional_str
from Swing_Scout.services.polygon_client import PolygonClient
from Swing_Scout.services.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

TICKERS_PATH: Final[str] = "/v3/reference/tickers"
AGGS_PATH_TEMPLATE: Final[str] = "/v2/aggs/ticker/{symbol}/range/1/day/{start}/{end}"

# Polygon caps a reference page at 1000 rows
MAX_PAGE_SIZE: Final[int] = 1000
AGGS_LIMIT: Final[int] = 50_000

_UNIVERSE_LABEL: Final[str] = "UNIVERSE"


class DataProvider(Protocol):
    """Per-symbol market data used by the scan pipeline."""

    async def list_universe(self, limit: int) -> list[str]: ...

    async def fetch_metadata(self, symbol: str) -> TickerMeta: ...

    async def fetch_daily_bars(
        self, symbol: str, start: datetime.date, end: datetime.date
    ) -> list[Candle]: ...


class PolygonDataProvider:
    """Polygon-backed :class:`DataProvider`.

    Usage::

        client = PolygonClient(api_key, RateLimiter())
        provider = PolygonDataProvider(client)

        symbols = await provider.list_universe(200)
        meta = await provider.fetch_metadata("AAPL")
        bars = await provider.fetch_daily_bars("AAPL", start, end)
    """

    def __init__(self, client: PolygonClient) -> None:
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> PolygonDataProvider:
        """Build a provider and its client from settings.

        Raises:
            ConfigurationError: If ``POLYGON_API_KEY`` is not set.
        """
        api_key = settings.require_polygon_api_key()
        limiter = RateLimiter(requests_per_second=settings.polygon_requests_per_second)
        return cls(PolygonClient(api_key, limiter))

    @property
    def client(self) -> PolygonClient:
        """The underlying HTTP client, shared with the news service."""
        return self._client

    async def aclose(self) -> None:
        await self._client.aclose()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def list_universe(self, limit: int) -> list[str]:
        """Return up to *limit* active US stock symbols, following ``next_url`` pages."""
        if limit <= 0:
            return []

        symbols: list[str] = []
        path: str | None = TICKERS_PATH
        params: dict[str, str | int | bool] | None = {
            "market": "stocks",
            "active": True,
            "limit": min(limit, MAX_PAGE_SIZE),
        }

        while path is not None and len(symbols) < limit:
            payload = await self._client.get_json(path, params, ticker=_UNIVERSE_LABEL)
            for row in _results_list(payload):
                symbol = safe_optional_str(row.get("ticker"))
                if symbol is not None:
                    symbols.append(symbol.upper())
            path = safe_optional_str(payload.get("next_url"))
            # next_url already carries the cursor and filters
            params = None

        logger.info("Universe listed: %d symbols", min(len(symbols), limit))
        return symbols[:limit]

    async def fetch_metadata(self, symbol: str) -> TickerMeta:
        """Fetch name, market cap, and sector for *symbol*.

        Raises:
            TickerNotFoundError: If Polygon does not know the symbol.
            DataSourceUnavailableError: If Polygon is unreachable.
        """
        symbol = symbol.upper().strip()
        payload = await self._client.get_json(f"{TICKERS_PATH}/{symbol}", ticker=symbol)
        results = payload.get("results")
        details: dict[str, Any] = results if isinstance(results, dict) else {}
        return TickerMeta(
            symbol=symbol,
            name=safe_optional_str(details.get("name")),
            market_cap=safe_optional_float(details.get("market_cap")),
            sector=safe_optional_str(details.get("sic_description")),
        )

    async def fetch_daily_bars(
        self,
        symbol: str,
        start: datetime.date,
        end: datetime.date,
    ) -> list[Candle]:
        """Fetch adjusted daily bars in ``[start, end]``, oldest first.

        Rows missing a required field are skipped with a warning rather than
        failing the whole series.
        """
        symbol = symbol.upper().strip()
        path = AGGS_PATH_TEMPLATE.format(
            symbol=symbol, start=start.isoformat(), end=end.isoformat()
        )
        payload = await self._client.get_json(
            path,
            {"adjusted": True, "sort": "asc", "limit": AGGS_LIMIT},
            ticker=symbol,
        )

        bars: list[Candle] = []
        skipped = 0
        for row in _results_list(payload):
            candle = _row_to_candle(row)
            if candle is None:
                skipped += 1
                continue
            bars.append(candle)

        if skipped:
            logger.warning("%s: skipped %d malformed bar(s)", symbol, skipped)
        logger.debug("Fetched %d daily bars for %s", len(bars), symbol)
        return bars


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _results_list(payload: dict[str, Any]) -> list[dict[str, Any]]:
    results = payload.get("results")
    if not isinstance(results, list):
        return []
    return [row for row in results if isinstance(row, dict)]


def _row_to_candle(row: dict[str, Any]) -> Candle | None:
    """Convert one aggregates row (``t`` in epoch ms) to a Candle, or None if malformed.

    Non-positive prices fail Candle validation and drop the row.
    """
    epoch_ms = safe_optional_float(row.get("t"))
    o = safe_optional_float(row.get("o"))
    h = safe_optional_float(row.get("h"))
    low = safe_optional_float(row.get("l"))
    c = safe_optional_float(row.get("c"))
    v = safe_optional_float(row.get("v"))
    if epoch_ms is None or o is None or h is None or low is None or c is None or v is None:
        return None
    vwap = safe_optional_float(row.get("vw"))
    # A zero vwap is unreported, not free: dollar volume falls back to close
    if vwap is not None and vwap <= 0.0:
        vwap = None

    try:
        return Candle(
            timestamp=datetime.datetime.fromtimestamp(epoch_ms / 1000.0, tz=datetime.UTC),
            open=o,
            high=h,
            low=low,
            close=c,
            volume=v,
            vwap=vwap,
        )
    except (ValidationError, OverflowError, OSError, ValueError):
        return None
