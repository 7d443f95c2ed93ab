"""Shared test fixtures for the Swing Scout test suite.

Provides candle-series builders for the flat and tight-base breakout series so
tests don't need to inline long bar lists.
"""

import datetime
from collections.abc import AsyncGenerator, Callable

import pytest
import pytest_asyncio

from Swing_Scout.data import Database, Repository
from Swing_Scout.models import Candle, IndicatorSet, ScoreResult, TickerMeta

START = datetime.datetime(2024, 1, 2, 21, 0, 0, tzinfo=datetime.UTC)


def make_bars(
    closes: list[float],
    *,
    volumes: list[float] | None = None,
    spread: float = 0.0,
) -> list[Candle]:
    """Daily candles with ``high = close + spread`` and ``low = close - spread``."""
    vols = volumes if volumes is not None else [1_000_000.0] * len(closes)
    return [
        Candle(
            timestamp=START + datetime.timedelta(days=i),
            open=close,
            high=close + spread,
            low=close - spread,
            close=close,
            volume=vol,
        )
        for i, (close, vol) in enumerate(zip(closes, vols, strict=True))
    ]


def flat_bars(n: int = 300, *, close: float = 50.0, volume: float = 1_000_000.0) -> list[Candle]:
    """A perfectly flat series with constant volume."""
    return make_bars([close] * n, volumes=[volume] * n)


def breakout_bars(base_volume: float = 1_000_000.0, n: int = 240) -> list[Candle]:
    """A tight 1% base at $50, then a close above the 55-day high on 3x volume.

    The breakout bar closes at 51 with high 51.2 / low 50.4, so ATR% stays
    just under 2% and Bollinger width near 1.7%.
    """
    bars = make_bars([50.0] * (n - 1), volumes=[base_volume] * (n - 1), spread=0.5)
    last = Candle(
        timestamp=START + datetime.timedelta(days=n - 1),
        open=50.2,
        high=51.2,
        low=50.4,
        close=51.0,
        volume=base_volume * 3,
    )
    return [*bars, last]


@pytest.fixture()
def large_cap_meta() -> TickerMeta:
    """A $2B company that clears the market-cap gate."""
    return TickerMeta(symbol="ACME", name="Acme Corp", market_cap=2_000_000_000.0, sector="Tools")


@pytest.fixture()
def sample_indicators() -> IndicatorSet:
    """A fully populated, liquid indicator set with a 20-day breakout."""
    return IndicatorSet(
        close=50.0,
        sma50=48.0,
        sma200=45.0,
        rsi14=62.0,
        atr_pct=0.025,
        bb_width=0.04,
        rvol=1.8,
        avg_dollar_vol_20d=25_000_000.0,
        breakout20=True,
        breakout55=False,
    )


@pytest.fixture()
def sample_result() -> ScoreResult:
    """A strong-match score result."""
    return ScoreResult(score=82.5, strong_match=True, why=[], notes=[])


@pytest.fixture()
def bars_builder() -> Callable[..., list[Candle]]:
    """The :func:`make_bars` builder, for tests that shape their own series."""
    return make_bars


@pytest.fixture()
def flat_series() -> Callable[..., list[Candle]]:
    """Builder for perfectly flat series."""
    return flat_bars


@pytest.fixture()
def breakout_series() -> Callable[..., list[Candle]]:
    """Builder for tight-base breakout series."""
    return breakout_bars


@pytest_asyncio.fixture()
async def db() -> AsyncGenerator[Database]:
    """Provide a connected in-memory Database for each test, with cleanup."""
    database = Database(db_path=":memory:")
    await database.connect()
    yield database
    await database.close()


@pytest_asyncio.fixture()
async def repo(db: Database) -> Repository:
    """Provide a Repository backed by the in-memory Database."""
    return Repository(db)
