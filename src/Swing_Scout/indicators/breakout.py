"""Breakout flags: close above a trailing high-water mark.

Breakout absence is a valid answer, so short series return ``False``
rather than ``None``.
"""

import pandas as pd


def breakout_high(
    high: pd.Series,
    close: pd.Series,
    lookback: int,
) -> bool:
    """True if the latest close exceeds the highest high of the prior ``lookback`` bars.

    Today's own high is excluded from the reference window.

    Returns:
        ``False`` if ``len(close) < lookback + 1``.
    """
    if lookback <= 0 or len(close) < lookback + 1:
        return False

    prior_high = float(high.iloc[-(lookback + 1) : -1].max())
    return float(close.iloc[-1]) > prior_high
