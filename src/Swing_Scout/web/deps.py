"""Dependency injection providers for FastAPI route handlers.

All shared resources (settings, Database, Repository, provider, news service)
are provided via FastAPI's ``Depends()`` mechanism. Route handlers never
construct these directly; they declare dependencies and FastAPI injects them.
"""

import asyncio
import logging
import re
from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, HTTPException, Path, Request

from Swing_Scout.config import Settings
from Swing_Scout.data.database import Database
from Swing_Scout.data.repository import Repository
from Swing_Scout.services.market_data import PolygonDataProvider
from Swing_Scout.services.news import NewsService
from Swing_Scout.services.polygon_client import PolygonClient

logger = logging.getLogger(__name__)

# Polygon symbols: letters/digits with optional class suffix (BRK.B)
_TICKER_PATTERN = re.compile(r"^[A-Z0-9][A-Z0-9.\-]{0,9}$")


def get_settings(request: Request) -> Settings:
    """Return the Settings the app was created with."""
    settings: Settings = request.app.state.settings
    return settings


async def get_database(request: Request) -> AsyncGenerator[Database]:
    """Yield the Database instance from application state.

    The Database is created during application lifespan startup and stored
    in ``app.state.database``. This dependency yields it for the duration
    of the request.
    """
    db: Database = request.app.state.database
    yield db


async def get_repository(
    db: Annotated[Database, Depends(get_database)],
) -> Repository:
    """Return a Repository backed by the request-scoped Database."""
    return Repository(db)


async def get_provider(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings)],
) -> AsyncGenerator[PolygonDataProvider]:
    """Yield a Polygon provider sharing the app-wide rate limiter.

    Raises ``ConfigurationError`` (mapped to HTTP 503) when no API key is set.
    """
    api_key = settings.require_polygon_api_key()
    client = PolygonClient(api_key, request.app.state.rate_limiter)
    try:
        yield PolygonDataProvider(client)
    finally:
        await client.aclose()


async def get_news_service(
    provider: Annotated[PolygonDataProvider, Depends(get_provider)],
    repo: Annotated[Repository, Depends(get_repository)],
) -> NewsService:
    """Return a NewsService reusing the provider's HTTP client."""
    return NewsService(provider.client, repo)


def get_scan_lock(request: Request) -> asyncio.Lock:
    """Return the lock that serializes scan and refresh runs."""
    lock: asyncio.Lock = request.app.state.scan_lock
    return lock


async def validate_ticker_symbol(
    symbol: Annotated[str, Path(description="Ticker symbol (e.g. AAPL, BRK.B)")],
) -> str:
    """Validate and normalize a ticker symbol path parameter.

    Converts to uppercase and validates against ``_TICKER_PATTERN``.
    Raises HTTP 422 if the symbol is invalid.

    Returns:
        The validated uppercase ticker symbol.
    """
    normalized = symbol.strip().upper()
    if not _TICKER_PATTERN.match(normalized):
        raise HTTPException(
            status_code=422,
            detail=f"Invalid ticker symbol: '{symbol}'.",
        )
    return normalized
