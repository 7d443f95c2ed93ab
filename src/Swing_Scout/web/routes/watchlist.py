"""Watchlist endpoints.

GET  /api/watchlist                      List tracked symbols.
POST /api/watchlist                      Track a previously scanned symbol.
GET  /api/watchlist/{symbol}/snapshots   Recent evaluation history.

Delegates all persistence to the Repository layer via dependency injection.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, ConfigDict, Field

from Swing_Scout.data.repository import Repository
from Swing_Scout.models.scan import MetricsSnapshot, WatchlistItem
from Swing_Scout.web.deps import get_repository, validate_ticker_symbol

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/watchlist", tags=["watchlist"])

UNSCANNED_TICKER_DETAIL = "Run a scan first so the ticker exists in DB."
MAX_SNAPSHOTS = 30


# ---------------------------------------------------------------------------
# Request / response models
# ---------------------------------------------------------------------------


class WatchlistAddRequest(BaseModel):
    """Request body for tracking a symbol."""

    model_config = ConfigDict(frozen=True)

    symbol: str = Field(min_length=1)
    notes: str | None = None


class WatchlistItemResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    ok: bool = True
    item: WatchlistItem


class WatchlistResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    ok: bool = True
    items: list[WatchlistItem]


class SnapshotsResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    ok: bool = True
    symbol: str
    snapshots: list[MetricsSnapshot]


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@router.get("", response_model=WatchlistResponse)
async def list_watchlist(
    repo: Annotated[Repository, Depends(get_repository)],
) -> WatchlistResponse:
    """Return all tracked symbols, most recently added first."""
    items = await repo.list_watchlist()
    logger.info("Watchlist retrieved: %d items", len(items))
    return WatchlistResponse(items=items)


@router.post("", response_model=WatchlistItemResponse)
async def add_to_watchlist(
    body: WatchlistAddRequest,
    repo: Annotated[Repository, Depends(get_repository)],
) -> WatchlistItemResponse:
    """Track a symbol. Re-adding a tracked symbol returns the existing item.

    Only symbols that have been scanned at least once can be tracked.
    """
    symbol = await validate_ticker_symbol(body.symbol)
    if await repo.get_ticker(symbol) is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=UNSCANNED_TICKER_DETAIL)

    item = await repo.create_watchlist_item(symbol, body.notes)
    logger.info("Tracking %s (%s)", item.symbol, item.status.value)
    return WatchlistItemResponse(item=item)


@router.get("/{symbol}/snapshots", response_model=SnapshotsResponse)
async def list_snapshots(
    symbol: Annotated[str, Depends(validate_ticker_symbol)],
    repo: Annotated[Repository, Depends(get_repository)],
    limit: Annotated[int, Query(ge=1, le=MAX_SNAPSHOTS)] = MAX_SNAPSHOTS,
) -> SnapshotsResponse:
    """Return up to 30 snapshots for *symbol*, newest first."""
    if await repo.get_ticker(symbol) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Ticker not found")
    snapshots = await repo.list_snapshots(symbol, limit=limit)
    return SnapshotsResponse(symbol=symbol, snapshots=snapshots)
