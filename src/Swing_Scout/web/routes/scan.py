"""Scan and refresh API routes.

POST /api/scan             Run a scan and return the strong matches.
POST /api/refresh-tracked  Re-evaluate every watchlist item.

Both run inline and share one lock; a second request while a run is in
progress gets 409.
"""

import asyncio
import logging
from typing import Annotated

from fastapi import APIRouter, Body, Depends, HTTPException, status
from pydantic import BaseModel, ConfigDict, Field

from Swing_Scout.config import Settings
from Swing_Scout.data.repository import Repository
from Swing_Scout.models.scan import MatchRow
from Swing_Scout.scanner.pipeline import ScanParams, refresh_tracked, run_scan
from Swing_Scout.services.market_data import PolygonDataProvider
from Swing_Scout.services.news import NewsService
from Swing_Scout.web.deps import (
    get_news_service,
    get_provider,
    get_repository,
    get_scan_lock,
    get_settings,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["scan"])

# ---------------------------------------------------------------------------
# Request / response models (web-layer input schemas)
# ---------------------------------------------------------------------------


class ScanRequest(BaseModel):
    """Input schema for a scan. Omitted fields fall back to settings."""

    model_config = ConfigDict(frozen=True)

    score_threshold: float | None = Field(default=None, ge=0.0, le=100.0)
    min_dollar_vol_20d: float | None = Field(default=None, ge=0.0)
    max_tickers: int | None = Field(default=None, ge=1)


class RefreshRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    score_threshold: float | None = Field(default=None, ge=0.0, le=100.0)


class ScanResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    ok: bool = True
    matches: list[MatchRow]


class RefreshResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    ok: bool = True
    refreshed_tickers: int


def _resolve_params(request: ScanRequest | None, settings: Settings) -> ScanParams:
    defaults = ScanParams.from_settings(settings)
    if request is None:
        return defaults
    return ScanParams(
        score_threshold=(
            request.score_threshold
            if request.score_threshold is not None
            else defaults.score_threshold
        ),
        min_dollar_vol_20d=(
            request.min_dollar_vol_20d
            if request.min_dollar_vol_20d is not None
            else defaults.min_dollar_vol_20d
        ),
        max_tickers=request.max_tickers if request.max_tickers is not None else defaults.max_tickers,
    )


def _reject_if_busy(lock: asyncio.Lock) -> None:
    if lock.locked():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A scan or refresh is already in progress.",
        )


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@router.post("/scan", response_model=ScanResponse)
async def start_scan(
    settings: Annotated[Settings, Depends(get_settings)],
    provider: Annotated[PolygonDataProvider, Depends(get_provider)],
    repo: Annotated[Repository, Depends(get_repository)],
    news: Annotated[NewsService, Depends(get_news_service)],
    lock: Annotated[asyncio.Lock, Depends(get_scan_lock)],
    body: Annotated[ScanRequest | None, Body()] = None,
) -> ScanResponse:
    """Scan the universe and return strong matches, best first."""
    _reject_if_busy(lock)
    params = _resolve_params(body, settings)
    async with lock:
        logger.info(
            "Scan requested: threshold=%.1f min_dollar_vol=%.0f max_tickers=%d",
            params.score_threshold,
            params.min_dollar_vol_20d,
            params.max_tickers,
        )
        matches = await run_scan(provider, repo, params=params, news=news)
    return ScanResponse(matches=matches)


@router.post("/refresh-tracked", response_model=RefreshResponse)
async def refresh_tracked_symbols(
    settings: Annotated[Settings, Depends(get_settings)],
    provider: Annotated[PolygonDataProvider, Depends(get_provider)],
    repo: Annotated[Repository, Depends(get_repository)],
    news: Annotated[NewsService, Depends(get_news_service)],
    lock: Annotated[asyncio.Lock, Depends(get_scan_lock)],
    body: Annotated[RefreshRequest | None, Body()] = None,
) -> RefreshResponse:
    """Refresh every tracked symbol and report how many were processed."""
    _reject_if_busy(lock)
    threshold = (
        body.score_threshold
        if body is not None and body.score_threshold is not None
        else settings.score_threshold
    )
    async with lock:
        processed = await refresh_tracked(
            provider,
            repo,
            threshold=threshold,
            min_dollar_vol_20d=settings.min_dollar_vol_20d,
            news=news,
        )
    return RefreshResponse(refreshed_tickers=processed)
