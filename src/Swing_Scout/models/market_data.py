"""Market data models: daily candles and slow-changing ticker metadata.

Prices are floats: every consumer of a candle is a pandas computation, and
the provider reports floats to begin with. Both models are validated at the
provider boundary, so the core never re-parses provider JSON.
"""

import datetime

from pydantic import BaseModel, ConfigDict, Field


class Candle(BaseModel):
    """A single daily OHLCV bar.

    Frozen because historical price data should never be mutated after creation.
    ``vwap`` is the provider's volume-weighted average price, when reported.
    Prices must be positive; the provider boundary drops rows that are not.
    """

    model_config = ConfigDict(frozen=True)

    timestamp: datetime.datetime
    open: float = Field(gt=0.0)
    high: float = Field(gt=0.0)
    low: float = Field(gt=0.0)
    close: float = Field(gt=0.0)
    volume: float = Field(ge=0.0)
    vwap: float | None = None


class TickerMeta(BaseModel):
    """Reference data for a symbol, upserted on every scan."""

    model_config = ConfigDict(frozen=True)

    symbol: str
    name: str | None = None
    market_cap: float | None = None
    sector: str | None = None
