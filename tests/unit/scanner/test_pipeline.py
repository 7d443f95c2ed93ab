"""Tests for the scan and watchlist-refresh pipelines.

Uses an in-memory fake provider against a real in-memory repository, so the
persistence side effects are checked through the same queries the CLI and
web layer use.
"""

from __future__ import annotations

import datetime
import sqlite3
from collections.abc import Callable
from unittest.mock import AsyncMock, MagicMock

import pytest

from Swing_Scout.data.repository import Repository
from Swing_Scout.models import (
    Candle,
    NewsLabel,
    NewsSummary,
    NewsTrend,
    ScanStage,
    StageOutcome,
    TickerMeta,
    WatchlistStatus,
)
from Swing_Scout.scanner import (
    LOOKBACK_DAYS,
    RefreshComplete,
    ScanComplete,
    ScanEvent,
    ScanParams,
    iter_refresh,
    iter_scan,
    refresh_tracked,
    run_scan,
)
from Swing_Scout.utils.exceptions import DataSourceUnavailableError, TickerNotFoundError

Series = Callable[..., list[Candle]]

BIG_CAP = 2_000_000_000.0
POSITIVE_NEWS = NewsSummary(
    label=NewsLabel.POSITIVE, trend=NewsTrend.IMPROVING, score_3d=0.5, score_7d=0.26
)


class FakeProvider:
    """In-memory DataProvider. Symbols in ``bad_meta``/``bad_bars`` raise."""

    def __init__(
        self,
        bars: dict[str, list[Candle]],
        *,
        universe: list[str] | None = None,
        bad_meta: frozenset[str] = frozenset(),
        bad_bars: frozenset[str] = frozenset(),
    ) -> None:
        self.bars = bars
        self.universe = universe if universe is not None else list(bars)
        self.bad_meta = bad_meta
        self.bad_bars = bad_bars
        self.universe_limits: list[int] = []
        self.windows: list[tuple[datetime.date, datetime.date]] = []

    async def list_universe(self, limit: int) -> list[str]:
        self.universe_limits.append(limit)
        return list(self.universe)

    async def fetch_metadata(self, symbol: str) -> TickerMeta:
        if symbol in self.bad_meta:
            raise TickerNotFoundError("unknown", ticker=symbol, source="fake")
        return TickerMeta(symbol=symbol, name=f"{symbol} Inc", market_cap=BIG_CAP)

    async def fetch_daily_bars(
        self, symbol: str, start: datetime.date, end: datetime.date
    ) -> list[Candle]:
        self.windows.append((start, end))
        if symbol in self.bad_bars:
            raise DataSourceUnavailableError("down", ticker=symbol, source="fake")
        return self.bars.get(symbol, [])


class FakeNews:
    """NewsProvider that records which symbols it was asked about."""

    def __init__(self, summary: NewsSummary | None = POSITIVE_NEWS, *, fail: bool = False) -> None:
        self.summary = summary
        self.fail = fail
        self.calls: list[str] = []

    async def summarize(self, symbol: str) -> NewsSummary | None:
        self.calls.append(symbol)
        if self.fail:
            raise DataSourceUnavailableError("news down", ticker=symbol, source="fake")
        return self.summary


@pytest.fixture()
def mixed_provider(breakout_series: Series, flat_series: Series) -> FakeProvider:
    """Six symbols: two matches, two fetch failures, one non-match, one short history."""
    return FakeProvider(
        {
            "A": breakout_series(),
            "B": breakout_series(),
            "C": breakout_series(),
            "D": breakout_series(base_volume=120_000.0),
            "E": flat_series(),
            "F": flat_series(30),
        },
        bad_meta=frozenset({"B"}),
        bad_bars=frozenset({"C"}),
    )


async def _collect_scan(
    provider: FakeProvider,
    repo: Repository,
    **kwargs: object,
) -> tuple[list[ScanEvent], ScanComplete]:
    events: list[ScanEvent] = []
    complete: ScanComplete | None = None
    async for item in iter_scan(provider, repo, **kwargs):  # type: ignore[arg-type]
        if isinstance(item, ScanComplete):
            complete = item
        else:
            events.append(item)
    assert complete is not None
    return events, complete


# ---------------------------------------------------------------------------
# Scan
# ---------------------------------------------------------------------------


class TestIterScan:
    """Tests for iter_scan() over a mixed universe."""

    @pytest.mark.asyncio()
    async def test_failures_isolated_per_symbol(
        self, mixed_provider: FakeProvider, repo: Repository
    ) -> None:
        """Failing symbols are skipped; the batch still completes."""
        events, complete = await _collect_scan(mixed_provider, repo)

        assert [row.symbol for row in complete.matches] == ["A", "D"]
        assert complete.evaluated == 3
        assert complete.skipped == 3

        failures = {
            (e.symbol, e.stage) for e in events if e.outcome is StageOutcome.FAILED
        }
        assert failures == {("B", ScanStage.META), ("C", ScanStage.BARS)}
        skips = [e for e in events if e.stage is ScanStage.HISTORY]
        assert [(e.symbol, e.outcome) for e in skips] == [("F", StageOutcome.SKIPPED)]

    @pytest.mark.asyncio()
    async def test_matches_sorted_best_first(
        self, mixed_provider: FakeProvider, repo: Repository
    ) -> None:
        _, complete = await _collect_scan(mixed_provider, repo)
        scores = [row.score for row in complete.matches]
        assert scores == sorted(scores, reverse=True)
        assert scores[0] > scores[1]

    @pytest.mark.asyncio()
    async def test_ties_broken_by_symbol(
        self, repo: Repository, breakout_series: Series
    ) -> None:
        provider = FakeProvider({"ZED": breakout_series(), "ABC": breakout_series()})
        _, complete = await _collect_scan(provider, repo)
        assert [row.symbol for row in complete.matches] == ["ABC", "ZED"]

    @pytest.mark.asyncio()
    async def test_every_scored_symbol_persisted(
        self, mixed_provider: FakeProvider, repo: Repository
    ) -> None:
        """Non-matches get a snapshot too; skipped symbols get nothing."""
        await _collect_scan(mixed_provider, repo)

        for symbol in ("A", "D", "E"):
            assert await repo.get_ticker(symbol) is not None
            assert len(await repo.list_snapshots(symbol)) == 1
        for symbol in ("B", "C", "F"):
            assert await repo.get_ticker(symbol) is None

        [flat] = await repo.list_snapshots("E")
        assert flat.result.strong_match is False
        assert flat.result.score == pytest.approx(32.0)

    @pytest.mark.asyncio()
    async def test_repeat_scans_append_history(
        self, repo: Repository, breakout_series: Series
    ) -> None:
        provider = FakeProvider({"A": breakout_series()})
        await _collect_scan(provider, repo)
        await _collect_scan(provider, repo)
        assert len(await repo.list_snapshots("A")) == 2

    @pytest.mark.asyncio()
    async def test_bar_window_ends_yesterday(
        self, repo: Repository, breakout_series: Series
    ) -> None:
        provider = FakeProvider({"A": breakout_series()})
        await _collect_scan(provider, repo)
        today = datetime.date.today()
        assert provider.windows == [
            (
                today - datetime.timedelta(days=LOOKBACK_DAYS),
                today - datetime.timedelta(days=1),
            )
        ]

    @pytest.mark.asyncio()
    async def test_max_tickers_caps_universe(
        self, repo: Repository, flat_series: Series
    ) -> None:
        """Even if the provider over-returns, only max_tickers symbols are evaluated."""
        provider = FakeProvider({s: flat_series() for s in ("A", "B", "C", "D")})
        _, complete = await _collect_scan(
            provider, repo, params=ScanParams(max_tickers=2)
        )
        assert provider.universe_limits == [2]
        assert complete.evaluated == 2
        assert len(provider.windows) == 2

    @pytest.mark.asyncio()
    async def test_threshold_and_liquidity_params(
        self, repo: Repository, breakout_series: Series
    ) -> None:
        """A $10M/day floor gates the low-volume breakout D."""
        provider = FakeProvider(
            {"A": breakout_series(), "D": breakout_series(base_volume=120_000.0)}
        )
        _, complete = await _collect_scan(
            provider, repo, params=ScanParams(min_dollar_vol_20d=10_000_000.0)
        )
        assert [row.symbol for row in complete.matches] == ["A"]
        [gated] = await repo.list_snapshots("D")
        assert gated.result.score == 0.0
        assert gated.result.notes == ["Liquidity below $10.00M/day gate"]

    @pytest.mark.asyncio()
    async def test_universe_failure_propagates(self, repo: Repository) -> None:
        provider = MagicMock()
        provider.list_universe = AsyncMock(
            side_effect=DataSourceUnavailableError("down", ticker="UNIVERSE", source="fake")
        )
        with pytest.raises(DataSourceUnavailableError):
            await _collect_scan(provider, repo)


class TestNewsEnrichment:
    """News is fetched for strong matches only and never blocks a match."""

    @pytest.mark.asyncio()
    async def test_only_strong_matches_enriched(
        self, mixed_provider: FakeProvider, repo: Repository
    ) -> None:
        news = FakeNews()
        _, complete = await _collect_scan(mixed_provider, repo, news=news)
        assert news.calls == ["A", "D"]
        assert all(row.news == POSITIVE_NEWS for row in complete.matches)
        [snapshot] = await repo.list_snapshots("A")
        assert snapshot.news == POSITIVE_NEWS
        [flat] = await repo.list_snapshots("E")
        assert flat.news is None

    @pytest.mark.asyncio()
    async def test_news_failure_keeps_match(
        self, repo: Repository, breakout_series: Series
    ) -> None:
        provider = FakeProvider({"A": breakout_series()})
        events, complete = await _collect_scan(provider, repo, news=FakeNews(fail=True))
        [row] = complete.matches
        assert row.news is None
        assert any(
            e.stage is ScanStage.NEWS and e.outcome is StageOutcome.FAILED for e in events
        )

    @pytest.mark.asyncio()
    async def test_no_recent_news_reported_as_skipped(
        self, repo: Repository, breakout_series: Series
    ) -> None:
        provider = FakeProvider({"A": breakout_series()})
        events, _ = await _collect_scan(provider, repo, news=FakeNews(summary=None))
        [news_event] = [e for e in events if e.stage is ScanStage.NEWS]
        assert news_event.outcome is StageOutcome.SKIPPED


class TestPersistenceFailure:
    @pytest.mark.asyncio()
    async def test_write_failure_does_not_drop_match(self, breakout_series: Series) -> None:
        """A failed snapshot write is logged and the result still returned."""
        repo = MagicMock()
        repo.upsert_ticker = AsyncMock(side_effect=sqlite3.OperationalError("disk I/O error"))
        repo.append_snapshot = AsyncMock()
        provider = FakeProvider({"A": breakout_series()})

        events, complete = await _collect_scan(provider, repo)

        assert [row.symbol for row in complete.matches] == ["A"]
        assert complete.evaluated == 1
        [persist] = [e for e in events if e.stage is ScanStage.PERSIST]
        assert persist.outcome is StageOutcome.FAILED
        repo.append_snapshot.assert_not_awaited()


class TestRunScan:
    @pytest.mark.asyncio()
    async def test_returns_matches_and_streams_events(
        self, mixed_provider: FakeProvider, repo: Repository
    ) -> None:
        seen: list[ScanEvent] = []
        matches = await run_scan(mixed_provider, repo, on_event=seen.append)
        assert [row.symbol for row in matches] == ["A", "D"]
        scored = [e for e in seen if e.stage is ScanStage.SCORE]
        assert [(e.symbol, e.outcome) for e in scored] == [
            ("A", StageOutcome.MATCHED),
            ("D", StageOutcome.MATCHED),
            ("E", StageOutcome.REJECTED),
        ]
        assert scored[2].detail == "32.0"


# ---------------------------------------------------------------------------
# Watchlist refresh
# ---------------------------------------------------------------------------


async def _track(repo: Repository, *symbols: str) -> None:
    for symbol in symbols:
        await repo.upsert_ticker(TickerMeta(symbol=symbol, market_cap=BIG_CAP))
        await repo.create_watchlist_item(symbol)


async def _status(repo: Repository, symbol: str) -> WatchlistStatus:
    item = await repo.get_watchlist_item(symbol)
    assert item is not None
    return item.status


class TestRefreshTracked:
    """Tests for refresh_tracked() and the one-way status rule."""

    @pytest.mark.asyncio()
    async def test_strong_match_triggers(
        self, repo: Repository, breakout_series: Series, flat_series: Series
    ) -> None:
        await _track(repo, "A", "E")
        provider = FakeProvider({"A": breakout_series(), "E": flat_series()})

        assert await refresh_tracked(provider, repo) == 2

        assert await _status(repo, "A") is WatchlistStatus.TRIGGERED
        assert await _status(repo, "E") is WatchlistStatus.ON_WATCH
        assert len(await repo.list_snapshots("A")) == 1
        assert len(await repo.list_snapshots("E")) == 1

    @pytest.mark.asyncio()
    async def test_triggered_never_reverts(
        self, repo: Repository, breakout_series: Series, flat_series: Series
    ) -> None:
        """Once triggered, a later weak score leaves the status alone."""
        await _track(repo, "A")
        provider = FakeProvider({"A": breakout_series()})
        await refresh_tracked(provider, repo)
        assert await _status(repo, "A") is WatchlistStatus.TRIGGERED

        provider.bars["A"] = flat_series()
        await refresh_tracked(provider, repo)
        assert await _status(repo, "A") is WatchlistStatus.TRIGGERED

        history = await repo.list_snapshots("A")
        assert [s.result.strong_match for s in history] == [False, True]

    @pytest.mark.asyncio()
    async def test_failures_still_counted(
        self, repo: Repository, breakout_series: Series, flat_series: Series
    ) -> None:
        await _track(repo, "A", "B", "C")
        provider = FakeProvider(
            {"A": breakout_series(), "C": flat_series()},
            bad_meta=frozenset({"B"}),
            bad_bars=frozenset({"C"}),
        )
        assert await refresh_tracked(provider, repo) == 3
        assert await _status(repo, "B") is WatchlistStatus.ON_WATCH

    @pytest.mark.asyncio()
    async def test_empty_watchlist(self, repo: Repository) -> None:
        assert await refresh_tracked(FakeProvider({}), repo) == 0

    @pytest.mark.asyncio()
    async def test_threshold_respected(
        self, repo: Repository, breakout_series: Series
    ) -> None:
        """At threshold 100 the low-volume breakout D no longer triggers."""
        await _track(repo, "D")
        provider = FakeProvider({"D": breakout_series(base_volume=120_000.0)})
        await refresh_tracked(provider, repo, threshold=100.0)
        assert await _status(repo, "D") is WatchlistStatus.ON_WATCH

    @pytest.mark.asyncio()
    async def test_refresh_complete_lists_triggered(
        self, repo: Repository, breakout_series: Series, flat_series: Series
    ) -> None:
        await _track(repo, "A", "E")
        provider = FakeProvider({"A": breakout_series(), "E": flat_series()})
        final = None
        async for item in iter_refresh(provider, repo):
            if isinstance(item, RefreshComplete):
                final = item
        assert final is not None
        assert final.processed == 2
        assert final.triggered == ["A"]
