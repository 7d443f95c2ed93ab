"""Scan and refresh pipelines as async generators yielding progress events.

Both the CLI and the web layer consume the same per-symbol pipeline:

    metadata -> daily bars -> history check -> indicators + score
    -> news (strong matches only) -> persist

Symbols are processed strictly one after another because the data provider
enforces a request-rate ceiling. A ``DataFetchError`` skips the symbol; a
news or persistence failure is logged and the batch continues.
"""

from __future__ import annotations

import datetime
import logging
import time
from collections.abc import AsyncGenerator, Callable
from dataclasses import dataclass, field
from typing import Final

from pydantic import BaseModel, ConfigDict, Field

from Swing_Scout.analysis.scoring import ScoringConfig, score_upside_swing
from Swing_Scout.analysis.snapshot import compute_indicators
from Swing_Scout.config import (
    DEFAULT_MAX_TICKERS,
    DEFAULT_MIN_DOLLAR_VOL,
    DEFAULT_SCORE_THRESHOLD,
    Settings,
)
from Swing_Scout.data.repository import Repository
from Swing_Scout.models.enums import ScanStage, StageOutcome, WatchlistStatus
from Swing_Scout.models.news import NewsSummary
from Swing_Scout.models.scan import MatchRow
from Swing_Scout.services.market_data import DataProvider
from Swing_Scout.services.news import NewsProvider
from Swing_Scout.utils.exceptions import DataFetchError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

MIN_BARS: Final[int] = 60
LOOKBACK_DAYS: Final[int] = 260


# ---------------------------------------------------------------------------
# Parameters and events
# ---------------------------------------------------------------------------


class ScanParams(BaseModel):
    """Caller-tunable knobs for one scan run.

    ``max_tickers`` is a throttle against provider rate limits, not a
    property of the universe.
    """

    model_config = ConfigDict(frozen=True)

    score_threshold: float = Field(default=DEFAULT_SCORE_THRESHOLD, ge=0.0, le=100.0)
    min_dollar_vol_20d: float = Field(default=DEFAULT_MIN_DOLLAR_VOL, ge=0.0)
    max_tickers: int = Field(default=DEFAULT_MAX_TICKERS, ge=1)

    @classmethod
    def from_settings(cls, settings: Settings) -> ScanParams:
        return cls(
            score_threshold=settings.score_threshold,
            min_dollar_vol_20d=settings.min_dollar_vol_20d,
            max_tickers=settings.max_tickers,
        )


@dataclass(frozen=True)
class ScanEvent:
    """Outcome of one pipeline stage for one symbol."""

    symbol: str
    stage: ScanStage
    outcome: StageOutcome
    detail: str = ""


@dataclass(frozen=True)
class ScanComplete:
    """Terminal event emitted when a scan finishes."""

    matches: list[MatchRow]
    evaluated: int
    skipped: int
    elapsed_seconds: float


@dataclass(frozen=True)
class RefreshComplete:
    """Terminal event emitted when a watchlist refresh finishes."""

    processed: int
    triggered: list[str]
    elapsed_seconds: float


type EventCallback = Callable[[ScanEvent], None]


@dataclass
class _Evaluation:
    """Events and (when scoring was reached) the row for one symbol."""

    events: list[ScanEvent] = field(default_factory=list)
    row: MatchRow | None = None

    def emit(
        self, symbol: str, stage: ScanStage, outcome: StageOutcome, detail: str = ""
    ) -> None:
        event = ScanEvent(symbol=symbol, stage=stage, outcome=outcome, detail=detail)
        logger.debug("%s %s %s %s", symbol, stage.value, outcome.value, detail)
        self.events.append(event)


# ---------------------------------------------------------------------------
# Per-symbol pipeline
# ---------------------------------------------------------------------------


async def _evaluate_symbol(
    symbol: str,
    provider: DataProvider,
    repository: Repository,
    *,
    threshold: float,
    config: ScoringConfig,
    news: NewsProvider | None,
    today: datetime.date,
) -> _Evaluation:
    """Run one symbol through fetch, score, enrich, and persist."""
    ev = _Evaluation()

    try:
        meta = await provider.fetch_metadata(symbol)
    except DataFetchError as exc:
        ev.emit(symbol, ScanStage.META, StageOutcome.FAILED, str(exc))
        return ev
    ev.emit(symbol, ScanStage.META, StageOutcome.OK)

    start = today - datetime.timedelta(days=LOOKBACK_DAYS)
    end = today - datetime.timedelta(days=1)
    try:
        bars = await provider.fetch_daily_bars(symbol, start, end)
    except DataFetchError as exc:
        ev.emit(symbol, ScanStage.BARS, StageOutcome.FAILED, str(exc))
        return ev
    ev.emit(symbol, ScanStage.BARS, StageOutcome.OK, f"{len(bars)} bars")

    if len(bars) < MIN_BARS:
        ev.emit(
            symbol,
            ScanStage.HISTORY,
            StageOutcome.SKIPPED,
            f"{len(bars)} bars < {MIN_BARS} required",
        )
        return ev

    indicators = compute_indicators(bars)
    result = score_upside_swing(meta, indicators, threshold=threshold, config=config)
    ev.emit(
        symbol,
        ScanStage.SCORE,
        StageOutcome.MATCHED if result.strong_match else StageOutcome.REJECTED,
        f"{result.score:.1f}",
    )

    summary: NewsSummary | None = None
    if result.strong_match and news is not None:
        try:
            summary = await news.summarize(symbol)
        except Exception as exc:  # noqa: BLE001
            logger.warning("News enrichment failed for %s: %s", symbol, exc)
            ev.emit(symbol, ScanStage.NEWS, StageOutcome.FAILED, str(exc))
        else:
            ev.emit(
                symbol,
                ScanStage.NEWS,
                StageOutcome.OK if summary is not None else StageOutcome.SKIPPED,
                summary.label.value if summary is not None else "no recent news",
            )

    ev.row = MatchRow(meta=meta, indicators=indicators, result=result, news=summary)

    try:
        await repository.upsert_ticker(meta)
        await repository.append_snapshot(symbol, indicators, result, summary)
    except Exception as exc:  # noqa: BLE001
        logger.error("Failed to persist snapshot for %s: %s", symbol, exc)
        ev.emit(symbol, ScanStage.PERSIST, StageOutcome.FAILED, str(exc))
    else:
        ev.emit(symbol, ScanStage.PERSIST, StageOutcome.OK)

    return ev


# ---------------------------------------------------------------------------
# Scan
# ---------------------------------------------------------------------------


async def iter_scan(
    provider: DataProvider,
    repository: Repository,
    *,
    params: ScanParams | None = None,
    news: NewsProvider | None = None,
) -> AsyncGenerator[ScanEvent | ScanComplete]:
    """Scan the universe, yielding per-stage events and a final ScanComplete.

    Listing the universe is the only step whose failure propagates: without
    symbols there is no batch to protect.

    Yields:
        ScanEvent for each stage of each symbol, then one ScanComplete whose
        matches are sorted by score descending, ties by symbol ascending.
    """
    params = params or ScanParams()
    config = ScoringConfig(min_dollar_volume=params.min_dollar_vol_20d)
    today = datetime.date.today()
    started = time.monotonic()

    symbols = await provider.list_universe(params.max_tickers)
    symbols = symbols[: params.max_tickers]
    logger.info("Scan started: %d symbols, threshold=%.1f", len(symbols), params.score_threshold)

    matches: list[MatchRow] = []
    evaluated = 0
    skipped = 0
    for symbol in symbols:
        ev = await _evaluate_symbol(
            symbol,
            provider,
            repository,
            threshold=params.score_threshold,
            config=config,
            news=news,
            today=today,
        )
        for event in ev.events:
            yield event

        if ev.row is None:
            skipped += 1
            continue
        evaluated += 1
        if ev.row.result.strong_match:
            matches.append(ev.row)

    matches.sort(key=lambda row: (-row.score, row.symbol))
    elapsed = time.monotonic() - started
    logger.info(
        "Scan complete: %d matches, %d evaluated, %d skipped in %.1fs",
        len(matches),
        evaluated,
        skipped,
        elapsed,
    )
    yield ScanComplete(
        matches=matches, evaluated=evaluated, skipped=skipped, elapsed_seconds=elapsed
    )


async def run_scan(
    provider: DataProvider,
    repository: Repository,
    *,
    params: ScanParams | None = None,
    news: NewsProvider | None = None,
    on_event: EventCallback | None = None,
) -> list[MatchRow]:
    """Run a full scan and return the strong matches, best first."""
    matches: list[MatchRow] = []
    async for item in iter_scan(provider, repository, params=params, news=news):
        if isinstance(item, ScanComplete):
            matches = item.matches
        elif on_event is not None:
            on_event(item)
    return matches


# ---------------------------------------------------------------------------
# Watchlist refresh
# ---------------------------------------------------------------------------


async def iter_refresh(
    provider: DataProvider,
    repository: Repository,
    *,
    threshold: float = DEFAULT_SCORE_THRESHOLD,
    min_dollar_vol_20d: float = DEFAULT_MIN_DOLLAR_VOL,
    news: NewsProvider | None = None,
) -> AsyncGenerator[ScanEvent | RefreshComplete]:
    """Re-evaluate every watchlist item and promote fresh strong matches.

    Status only moves ON_WATCH -> TRIGGERED. A triggered item stays
    triggered whatever later refreshes score. Items whose data could not be
    fetched still count as processed.
    """
    config = ScoringConfig(min_dollar_volume=min_dollar_vol_20d)
    today = datetime.date.today()
    started = time.monotonic()

    items = await repository.list_watchlist()
    logger.info("Refresh started: %d tracked symbols", len(items))

    triggered: list[str] = []
    for item in items:
        ev = await _evaluate_symbol(
            item.symbol,
            provider,
            repository,
            threshold=threshold,
            config=config,
            news=news,
            today=today,
        )
        for event in ev.events:
            yield event

        if (
            ev.row is not None
            and ev.row.result.strong_match
            and item.status == WatchlistStatus.ON_WATCH
        ):
            try:
                await repository.update_watchlist_status(item.id, WatchlistStatus.TRIGGERED)
            except Exception as exc:  # noqa: BLE001
                logger.error("Failed to mark %s triggered: %s", item.symbol, exc)
                continue
            triggered.append(item.symbol)
            logger.info("%s triggered (score %.1f)", item.symbol, ev.row.score)

    elapsed = time.monotonic() - started
    logger.info(
        "Refresh complete: %d processed, %d triggered in %.1fs",
        len(items),
        len(triggered),
        elapsed,
    )
    yield RefreshComplete(processed=len(items), triggered=triggered, elapsed_seconds=elapsed)


async def refresh_tracked(
    provider: DataProvider,
    repository: Repository,
    *,
    threshold: float = DEFAULT_SCORE_THRESHOLD,
    min_dollar_vol_20d: float = DEFAULT_MIN_DOLLAR_VOL,
    news: NewsProvider | None = None,
    on_event: EventCallback | None = None,
) -> int:
    """Refresh all watchlist items and return how many were processed."""
    processed = 0
    async for item in iter_refresh(
        provider,
        repository,
        threshold=threshold,
        min_dollar_vol_20d=min_dollar_vol_20d,
        news=news,
    ):
        if isinstance(item, RefreshComplete):
            processed = item.processed
        elif on_event is not None:
            on_event(item)
    return processed
