"""Build an :class:`IndicatorSet` from a chronologically ordered candle series.

Bridges the typed model layer and the pandas-only indicator library: candles
are projected into Series once, then every indicator reads from them.
"""

import logging
from typing import Final

import numpy as np
import pandas as pd

from Swing_Scout.indicators import (
    atr_percent,
    avg_dollar_volume,
    bb_width,
    breakout_high,
    relative_volume,
    rsi,
    sma,
)
from Swing_Scout.models.market_data import Candle
from Swing_Scout.models.scan import IndicatorSet

logger = logging.getLogger(__name__)

SMA_FAST: Final[int] = 50
SMA_SLOW: Final[int] = 200
RSI_PERIOD: Final[int] = 14
ATR_PERIOD: Final[int] = 14
BB_PERIOD: Final[int] = 20
BB_NUM_STD: Final[float] = 2.0
VOLUME_LOOKBACK: Final[int] = 20
BREAKOUT_SHORT: Final[int] = 20
BREAKOUT_LONG: Final[int] = 55


def candles_to_frame(bars: list[Candle]) -> pd.DataFrame:
    """Project candles into a DataFrame with float columns.

    Missing vwap values become NaN so that dollar volume can fall back to
    the close on a per-bar basis.
    """
    return pd.DataFrame(
        {
            "high": [bar.high for bar in bars],
            "low": [bar.low for bar in bars],
            "close": [bar.close for bar in bars],
            "volume": [bar.volume for bar in bars],
            "vwap": [bar.vwap if bar.vwap is not None else np.nan for bar in bars],
        },
        index=pd.DatetimeIndex([bar.timestamp for bar in bars], name="timestamp"),
        dtype=float,
    )


def compute_indicators(bars: list[Candle]) -> IndicatorSet:
    """Compute every screening indicator for the latest bar.

    Indicators whose window exceeds the history come back as ``None``.

    Raises:
        ValueError: If *bars* is empty (there is no latest close).
    """
    if not bars:
        msg = "Cannot compute indicators for an empty bar series"
        raise ValueError(msg)

    frame = candles_to_frame(bars)
    close = frame["close"]
    high = frame["high"]
    low = frame["low"]
    volume = frame["volume"]

    return IndicatorSet(
        close=float(close.iloc[-1]),
        sma50=sma(close, SMA_FAST),
        sma200=sma(close, SMA_SLOW),
        rsi14=rsi(close, RSI_PERIOD),
        atr_pct=atr_percent(high, low, close, ATR_PERIOD),
        bb_width=bb_width(close, BB_PERIOD, BB_NUM_STD),
        rvol=relative_volume(volume, VOLUME_LOOKBACK),
        avg_dollar_vol_20d=avg_dollar_volume(close, volume, frame["vwap"], VOLUME_LOOKBACK),
        breakout20=breakout_high(high, close, BREAKOUT_SHORT),
        breakout55=breakout_high(high, close, BREAKOUT_LONG),
    )
