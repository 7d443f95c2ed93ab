"""Moving average indicators: trailing Simple Moving Average.

All functions take pandas Series in and return the latest value as a float.
``None`` when the series is shorter than the window; never filled.
"""

import pandas as pd


def sma(
    values: pd.Series,
    period: int,
) -> float | None:
    """Simple moving average of the last ``period`` values.

    Formula:
        SMA = sum(values[-period:]) / period

    Returns:
        The mean, or ``None`` if ``len(values) < period``.
    """
    if period <= 0 or len(values) < period:
        return None

    window = values.iloc[-period:]
    return float(window.mean())
