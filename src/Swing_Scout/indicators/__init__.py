"""Technical indicators for swing-setup screening.

Pure math module: pandas Series in, latest scalar value out.
No API calls, no Pydantic models, no I/O.
"""

from Swing_Scout.indicators.breakout import breakout_high
from Swing_Scout.indicators.moving_averages import sma
from Swing_Scout.indicators.oscillators import rsi
from Swing_Scout.indicators.volatility import atr_percent, bb_width
from Swing_Scout.indicators.volume import avg_dollar_volume, relative_volume

__all__ = [
    "atr_percent",
    "avg_dollar_volume",
    "bb_width",
    "breakout_high",
    "relative_volume",
    "rsi",
    "sma",
]
