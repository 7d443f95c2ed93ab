"""Upside-swing composite scoring with hard gates and per-factor explanations.

Turns a :class:`TickerMeta` and an :class:`IndicatorSet` into a bounded
0-100 score, a strong-match decision, and the ``why`` lines shown next to
each match. Six factors contribute, each clamped to its own cap before the
total is clamped:

    trend (20) + compression (20) + breakout (25) + volume (25)
    + momentum (10) + liquidity bonus (10)

Market-cap and liquidity gates run first and short-circuit to zero.
"""

import logging
from typing import Final

from pydantic import BaseModel, ConfigDict, Field

from Swing_Scout.models.market_data import TickerMeta
from Swing_Scout.models.scan import CriteriaHit, IndicatorSet, ScoreResult

logger = logging.getLogger(__name__)

# --- Gates ---

MIN_MARKET_CAP: Final[float] = 500_000_000.0
MIN_DOLLAR_VOLUME: Final[float] = 5_000_000.0

# --- Factor caps and credits ---

# Trend
TREND_CAP: Final[float] = 20.0
TREND_STEP: Final[float] = 10.0

# Compression: Bollinger width ramps 12 -> 0 over [0, 0.12];
# ATR% ramps 8 -> 0 over [0.02, 0.06]
COMPRESSION_CAP: Final[float] = 20.0
BB_CREDIT: Final[float] = 12.0
BB_ZERO_CREDIT_WIDTH: Final[float] = 0.12
ATR_CREDIT: Final[float] = 8.0
ATR_FULL_CREDIT_PCT: Final[float] = 0.02
ATR_ZERO_CREDIT_PCT: Final[float] = 0.06

# Breakout
BREAKOUT_CAP: Final[float] = 25.0
BREAKOUT_55_CREDIT: Final[float] = 25.0
BREAKOUT_20_CREDIT: Final[float] = 18.0

# Volume: RVOL ramps 0 -> 25 over [1.0, 2.5]
VOLUME_CAP: Final[float] = 25.0
RVOL_ZERO_CREDIT: Final[float] = 1.0
RVOL_FULL_CREDIT: Final[float] = 2.5

# Momentum (RSI14 bands)
MOMENTUM_CAP: Final[float] = 10.0
RSI_SWEET_LOW: Final[float] = 55.0
RSI_SWEET_HIGH: Final[float] = 70.0
RSI_WARM_LOW: Final[float] = 50.0
RSI_HOT_HIGH: Final[float] = 80.0
RSI_SWEET_CREDIT: Final[float] = 10.0
RSI_SHOULDER_CREDIT: Final[float] = 6.0
RSI_OVERHEATED_CREDIT: Final[float] = 2.0

# Liquidity bonus: 0 -> 10 over [$0, $10M/day]
LIQUIDITY_CAP: Final[float] = 10.0
LIQUIDITY_FULL_CREDIT: Final[float] = 10_000_000.0

# Strong-match structure (absent a 55-day breakout)
STRONG_TREND_MIN: Final[float] = 16.0
STRONG_COMPRESSION_MIN: Final[float] = 14.0
STRONG_RVOL_MIN: Final[float] = 1.2

DEFAULT_THRESHOLD: Final[float] = 75.0
SCORE_MIN: Final[float] = 0.0
SCORE_MAX: Final[float] = 100.0

STRUCTURE_NOTE: Final[str] = (
    "Did not meet strong-match structure (55D breakout OR trend + compression + volume)"
)


class ScoringConfig(BaseModel):
    """Gate floors for the scoring engine.

    ``min_dollar_volume`` may be raised per scan request; the factor weights
    are fixed module constants.
    """

    model_config = ConfigDict(frozen=True)

    min_market_cap: float = Field(default=MIN_MARKET_CAP, ge=0.0)
    min_dollar_volume: float = Field(default=MIN_DOLLAR_VOLUME, ge=0.0)


def clamp(value: float, low: float, high: float) -> float:
    """Clamp *value* into ``[low, high]``."""
    return max(low, min(high, value))


def linear_ramp(value: float, zero_at: float, full_at: float, credit: float) -> float:
    """Linear credit from 0 at ``zero_at`` to ``credit`` at ``full_at``, clamped.

    Works in either direction: ``zero_at > full_at`` rewards smaller values.
    """
    if zero_at == full_at:
        return credit if value >= full_at else 0.0
    fraction = (value - zero_at) / (full_at - zero_at)
    return clamp(fraction * credit, 0.0, credit)


def _fmt_money(value: float) -> str:
    """Format a dollar amount with magnitude suffix: 12_500_000 -> '$12.50M'."""
    if value >= 1e9:
        return f"${value / 1e9:.2f}B"
    if value >= 1e6:
        return f"${value / 1e6:.2f}M"
    return f"${value:,.0f}"


# ---------------------------------------------------------------------------
# Factor scorers: each returns (points, why-value or None) and appends notes
# ---------------------------------------------------------------------------


def _trend_score(ind: IndicatorSet, notes: list[str]) -> tuple[float, str | None]:
    if ind.sma50 is None:
        notes.append("SMA50 unavailable (not enough candles)")
    if ind.sma200 is None:
        notes.append("SMA200 unavailable (not enough candles)")

    points = 0.0
    parts: list[str] = []
    if ind.above_sma50:
        points += TREND_STEP
        parts.append("close > SMA50")
    if ind.sma50_above_sma200:
        points += TREND_STEP
        parts.append("SMA50 > SMA200")
    points = clamp(points, 0.0, TREND_CAP)
    return points, ", ".join(parts) if parts else None


def _compression_score(ind: IndicatorSet, notes: list[str]) -> tuple[float, str | None]:
    parts: list[str] = []
    bb_points = 0.0
    if ind.bb_width is None:
        notes.append("Bollinger width unavailable (not enough candles)")
    else:
        bb_points = linear_ramp(ind.bb_width, BB_ZERO_CREDIT_WIDTH, 0.0, BB_CREDIT)
        parts.append(f"BB width {ind.bb_width * 100:.2f}%")

    atr_points = 0.0
    if ind.atr_pct is None:
        notes.append("ATR unavailable (not enough candles)")
    else:
        atr_points = linear_ramp(ind.atr_pct, ATR_ZERO_CREDIT_PCT, ATR_FULL_CREDIT_PCT, ATR_CREDIT)
        parts.append(f"ATR {ind.atr_pct * 100:.2f}%")

    points = clamp(bb_points + atr_points, 0.0, COMPRESSION_CAP)
    return points, ", ".join(parts) if points > 0 else None


def _breakout_score(ind: IndicatorSet) -> tuple[float, str | None]:
    if ind.breakout55:
        return clamp(BREAKOUT_55_CREDIT, 0.0, BREAKOUT_CAP), "Close above prior 55D high"
    if ind.breakout20:
        return clamp(BREAKOUT_20_CREDIT, 0.0, BREAKOUT_CAP), "Close above prior 20D high"
    return 0.0, None


def _volume_score(ind: IndicatorSet, notes: list[str]) -> tuple[float, str | None]:
    if ind.rvol is None:
        notes.append("RVOL unavailable (not enough candles)")
        return 0.0, None
    points = linear_ramp(ind.rvol, RVOL_ZERO_CREDIT, RVOL_FULL_CREDIT, VOLUME_CAP)
    return points, f"{ind.rvol:.2f}x vs 20D average"


def _momentum_score(ind: IndicatorSet, notes: list[str]) -> tuple[float, str | None]:
    value = ind.rsi14
    if value is None:
        notes.append("RSI unavailable (not enough candles)")
        return 0.0, None

    if RSI_SWEET_LOW <= value <= RSI_SWEET_HIGH:
        points = RSI_SWEET_CREDIT
    elif RSI_WARM_LOW <= value < RSI_SWEET_LOW or RSI_SWEET_HIGH < value <= RSI_HOT_HIGH:
        points = RSI_SHOULDER_CREDIT
    elif value > RSI_HOT_HIGH:
        points = RSI_OVERHEATED_CREDIT
    else:
        points = 0.0
    return clamp(points, 0.0, MOMENTUM_CAP), f"{value:.1f}"


def _liquidity_score(ind: IndicatorSet) -> tuple[float, str | None]:
    points = linear_ramp(ind.avg_dollar_vol_20d, 0.0, LIQUIDITY_FULL_CREDIT, LIQUIDITY_CAP)
    return points, f"{_fmt_money(ind.avg_dollar_vol_20d)}/day"


def _gate(meta: TickerMeta, ind: IndicatorSet, config: ScoringConfig) -> str | None:
    """Return the disqualifying gate note, or None if the symbol passes."""
    if meta.market_cap is not None and meta.market_cap < config.min_market_cap:
        return f"Market cap below {_fmt_money(config.min_market_cap)} gate"
    if ind.avg_dollar_vol_20d < config.min_dollar_volume:
        return f"Liquidity below {_fmt_money(config.min_dollar_volume)}/day gate"
    return None


def score_upside_swing(
    meta: TickerMeta,
    indicators: IndicatorSet,
    threshold: float = DEFAULT_THRESHOLD,
    config: ScoringConfig | None = None,
) -> ScoreResult:
    """Score a symbol for an upside swing setup.

    Gates are checked first: a known market cap below the floor, or 20-day
    average dollar volume below the liquidity floor, returns score 0 with
    a single note and no ``why`` lines.

    Otherwise each factor is scored and clamped to its cap, and every
    nonzero factor adds one :class:`CriteriaHit`. Missing indicators score
    0 and add a note rather than failing.

    A strong match needs ``score >= threshold`` and either a 55-day breakout
    or a coiled setup: trend >= 16, compression >= 14 and RVOL >= 1.2.

    Args:
        meta: Ticker metadata (market cap drives the first gate).
        indicators: Latest-bar indicator snapshot.
        threshold: Minimum score for a strong match.
        config: Gate floors; defaults to $500M cap / $5M per day.

    Returns:
        A :class:`ScoreResult` with score clamped to [0, 100].
    """
    cfg = config or ScoringConfig()

    gate_note = _gate(meta, indicators, cfg)
    if gate_note is not None:
        logger.debug("%s gated: %s", meta.symbol, gate_note)
        return ScoreResult(score=0.0, strong_match=False, why=[], notes=[gate_note])

    notes: list[str] = []
    why: list[CriteriaHit] = []

    trend, trend_why = _trend_score(indicators, notes)
    compression, compression_why = _compression_score(indicators, notes)
    breakout, breakout_why = _breakout_score(indicators)
    volume, volume_why = _volume_score(indicators, notes)
    momentum, momentum_why = _momentum_score(indicators, notes)
    liquidity, liquidity_why = _liquidity_score(indicators)

    factors: list[tuple[str, float, str | None]] = [
        ("Trend (SMA50/SMA200)", trend, trend_why),
        ("Compression (BB/ATR)", compression, compression_why),
        ("Breakout", breakout, breakout_why),
        ("Relative volume", volume, volume_why),
        ("RSI (14)", momentum, momentum_why),
        ("Avg $ vol (20D)", liquidity, liquidity_why),
    ]
    for label, points, value in factors:
        if points > 0 and value is not None:
            why.append(CriteriaHit(label=label, value=value))

    score = clamp(trend + compression + breakout + volume + momentum + liquidity, SCORE_MIN, SCORE_MAX)

    coiled = (
        trend >= STRONG_TREND_MIN
        and compression >= STRONG_COMPRESSION_MIN
        and indicators.rvol is not None
        and indicators.rvol >= STRONG_RVOL_MIN
    )
    strong_match = score >= threshold and (indicators.breakout55 or coiled)
    if not strong_match:
        notes.append(STRUCTURE_NOTE)

    logger.debug(
        "%s scored %.1f (trend=%.1f comp=%.1f brk=%.1f vol=%.1f mom=%.1f liq=%.1f) strong=%s",
        meta.symbol,
        score,
        trend,
        compression,
        breakout,
        volume,
        momentum,
        liquidity,
        strong_match,
    )
    return ScoreResult(score=score, strong_match=strong_match, why=why, notes=notes)
