"""Volatility indicators: Bollinger Band Width, ATR%.

All functions take pandas Series in and return the latest value as a float.
``None`` when the series is shorter than the window; never filled.
"""

import pandas as pd


def bb_width(
    close: pd.Series,
    period: int = 20,
    num_std: float = 2.0,
) -> float | None:
    """Bollinger Band width over the trailing ``period`` closes.

    Uses population stddev (ddof=0).

    Formula:
        middle = mean(close[-period:])
        upper  = middle + num_std * stddev(close[-period:], ddof=0)
        lower  = middle - num_std * stddev(close[-period:], ddof=0)
        width  = (upper - lower) / middle

    Reference: John Bollinger, "Bollinger on Bollinger Bands" (2001).

    Returns:
        Width as a fraction of the middle band, or ``None`` if
        ``len(close) < period`` or the middle band is not positive.
    """
    if period <= 0 or len(close) < period:
        return None

    window = close.iloc[-period:]
    middle = float(window.mean())
    if middle <= 0.0:
        return None

    std = float(window.std(ddof=0))
    upper = middle + num_std * std
    lower = middle - num_std * std
    return (upper - lower) / middle


def atr_percent(
    high: pd.Series,
    low: pd.Series,
    close: pd.Series,
    period: int = 14,
) -> float | None:
    """Average True Range as a fraction of the latest close.

    True Range = max(high - low, |high - prev_close|, |low - prev_close|).
    ATR is the simple mean of the last ``period`` true ranges, each of which
    needs the prior bar's close.

    Reference: Wilder (1978) "New Concepts in Technical Trading Systems".

    Returns:
        ATR / close (e.g. 0.025 for 2.5%), or ``None`` if
        ``len(close) < period + 1`` or the latest close is not positive.
    """
    if period <= 0 or len(close) < period + 1:
        return None

    last_close = float(close.iloc[-1])
    if last_close <= 0.0:
        return None

    prev_close = close.shift(1)
    tr1 = high - low
    tr2 = (high - prev_close).abs()
    tr3 = (low - prev_close).abs()
    true_range = pd.concat([tr1, tr2, tr3], axis=1).max(axis=1)

    atr = float(true_range.iloc[-period:].mean())
    return atr / last_close
