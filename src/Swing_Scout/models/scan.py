"""Scan models: indicator snapshots, score results, matches, and tracking state."""

import datetime

from pydantic import BaseModel, ConfigDict, Field, computed_field

from Swing_Scout.models.enums import WatchlistStatus
from Swing_Scout.models.market_data import TickerMeta
from Swing_Scout.models.news import NewsSummary


class IndicatorSet(BaseModel):
    """Latest-bar technical indicators for one symbol.

    ``None`` means the series was too short for that indicator. It is never
    replaced by zero. ``avg_dollar_vol_20d`` and the breakout flags are always
    defined: a short series is simply illiquid / not breaking out.
    """

    model_config = ConfigDict(frozen=True)

    close: float
    sma50: float | None = None
    sma200: float | None = None
    rsi14: float | None = None
    atr_pct: float | None = None
    bb_width: float | None = None
    rvol: float | None = None
    avg_dollar_vol_20d: float = 0.0
    breakout20: bool = False
    breakout55: bool = False

    @computed_field  # type: ignore[prop-decorator]
    @property
    def above_sma50(self) -> bool:
        """Latest close above SMA50; False when SMA50 is unavailable."""
        return self.sma50 is not None and self.close > self.sma50

    @computed_field  # type: ignore[prop-decorator]
    @property
    def sma50_above_sma200(self) -> bool:
        """Golden-cross alignment; False when either SMA is unavailable."""
        return self.sma50 is not None and self.sma200 is not None and self.sma50 > self.sma200


class CriteriaHit(BaseModel):
    """One explanatory line for a nonzero scoring contributor."""

    model_config = ConfigDict(frozen=True)

    label: str
    value: str


class ScoreResult(BaseModel):
    """Output of the scoring engine for one symbol."""

    model_config = ConfigDict(frozen=True)

    score: float = Field(ge=0.0, le=100.0)
    strong_match: bool
    why: list[CriteriaHit] = Field(default_factory=list)
    notes: list[str] = Field(default_factory=list)


class MatchRow(BaseModel):
    """Per-symbol scan output: metadata, indicators, score, and optional news."""

    model_config = ConfigDict(frozen=True)

    meta: TickerMeta
    indicators: IndicatorSet
    result: ScoreResult
    news: NewsSummary | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def symbol(self) -> str:
        """Ticker symbol, lifted from ``meta`` for sorting and display."""
        return self.meta.symbol

    @computed_field  # type: ignore[prop-decorator]
    @property
    def score(self) -> float:
        """Upside score, lifted from ``result``."""
        return self.result.score


class WatchlistItem(BaseModel):
    """A user-tracked symbol. One item per symbol."""

    model_config = ConfigDict(frozen=True)

    id: int
    symbol: str
    status: WatchlistStatus = WatchlistStatus.ON_WATCH
    notes: str | None = None
    added_at: datetime.datetime


class MetricsSnapshot(BaseModel):
    """Immutable record of one point-in-time evaluation.

    Snapshots are append-only; trend over time is read from the ordered
    sequence of snapshots for a symbol.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    symbol: str
    timestamp: datetime.datetime
    indicators: IndicatorSet
    result: ScoreResult
    news: NewsSummary | None = None
