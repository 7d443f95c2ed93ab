"""Oscillator indicators: RSI.

All functions take pandas Series in and return the latest value as a float.
``None`` when the series is shorter than the window; never filled.
"""

import pandas as pd

RSI_MAX: float = 100.0


def rsi(
    close: pd.Series,
    period: int = 14,
) -> float | None:
    """Relative Strength Index over the trailing ``period`` deltas.

    Uses simple averages of the window (not Wilder's smoothing), so the
    value depends only on the last ``period + 1`` closes.

    Formula:
        avg_gain = sum(positive deltas) / period
        avg_loss = sum(|negative deltas|) / period
        RSI = 100 - 100 / (1 + avg_gain / avg_loss)

    When avg_loss = 0 (non-decreasing window): RSI = 100.

    Reference: Wilder (1978) "New Concepts in Technical Trading Systems".

    Returns:
        RSI in [0, 100], or ``None`` if ``len(close) < period + 1``.
    """
    if period <= 0 or len(close) < period + 1:
        return None

    delta = close.iloc[-(period + 1) :].diff().iloc[1:]
    gains = float(delta.clip(lower=0.0).sum())
    losses = float((-delta).clip(lower=0.0).sum())

    avg_gain = gains / period
    avg_loss = losses / period
    # Division-by-zero guard: a window with no down days is maximally strong
    if avg_loss == 0.0:
        return RSI_MAX

    rs = avg_gain / avg_loss
    return RSI_MAX - RSI_MAX / (1.0 + rs)
