"""Volume indicators: Average Dollar Volume, Relative Volume.

All functions take pandas Series in and return the latest value as a float.
"""

import pandas as pd


def avg_dollar_volume(
    close: pd.Series,
    volume: pd.Series,
    vwap: pd.Series | None = None,
    lookback: int = 20,
) -> float:
    """Mean traded dollar value over the last ``lookback`` bars.

    Each bar's dollar volume is ``volume * vwap``, falling back to
    ``volume * close`` where vwap is missing or not positive. Shorter
    histories average whatever bars exist.

    Returns:
        Average dollar volume; ``0.0`` for an empty series. Never ``None``:
        this is a liquidity floor, not a readiness gate.
    """
    if len(close) == 0 or lookback <= 0:
        return 0.0

    price = close if vwap is None else vwap.where(vwap > 0.0, close)
    dollar_volume = (volume * price).iloc[-lookback:]
    return float(dollar_volume.mean())


def relative_volume(
    volume: pd.Series,
    lookback: int = 20,
) -> float | None:
    """Latest bar's volume relative to the average of the preceding bars.

    Result = volume[-1] / mean(volume[-lookback-1:-1]). The latest bar is
    excluded from its own baseline.

    Returns:
        RVOL (1.0 = average), or ``None`` if ``len(volume) < lookback + 1``
        or the baseline average is not positive.
    """
    if lookback <= 0 or len(volume) < lookback + 1:
        return None

    baseline = float(volume.iloc[-(lookback + 1) : -1].mean())
    if baseline <= 0.0:
        return None

    return float(volume.iloc[-1]) / baseline
