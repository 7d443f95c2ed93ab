"""Tests for Repository: all query operations against an in-memory SQLite database."""

import datetime
import sqlite3

import pytest

from Swing_Scout.data.repository import Repository
from Swing_Scout.models import (
    CriteriaHit,
    IndicatorSet,
    NewsArticle,
    NewsLabel,
    NewsSummary,
    NewsTrend,
    ScoreResult,
    TickerMeta,
    WatchlistStatus,
)

T0 = datetime.datetime(2024, 6, 10, 14, 0, tzinfo=datetime.UTC)


@pytest.fixture()
def scored() -> ScoreResult:
    return ScoreResult(
        score=81.0,
        strong_match=True,
        why=[CriteriaHit(label="Breakout", value="Close above prior 55D high")],
        notes=["RSI unavailable (not enough candles)"],
    )


def _article(url: str, days_ago: int, score: float = 0.3) -> NewsArticle:
    return NewsArticle(
        url=url,
        symbol="ACME",
        published_at=T0 - datetime.timedelta(days=days_ago),
        title=f"Story {url}",
        source="Wire",
        sentiment_score=score,
        sentiment_label=NewsLabel.POSITIVE,
    )


class TestTickers:
    @pytest.mark.asyncio()
    async def test_upsert_then_get(self, repo: Repository, large_cap_meta: TickerMeta) -> None:
        await repo.upsert_ticker(large_cap_meta)
        assert await repo.get_ticker("ACME") == large_cap_meta

    @pytest.mark.asyncio()
    async def test_upsert_refreshes_fields(
        self, repo: Repository, large_cap_meta: TickerMeta
    ) -> None:
        """A second upsert overwrites reference data instead of duplicating it."""
        await repo.upsert_ticker(large_cap_meta)
        await repo.upsert_ticker(large_cap_meta.model_copy(update={"market_cap": 3e9}))
        stored = await repo.get_ticker("ACME")
        assert stored is not None
        assert stored.market_cap == 3e9

    @pytest.mark.asyncio()
    async def test_unknown_ticker_is_none(self, repo: Repository) -> None:
        assert await repo.get_ticker("NOPE") is None


class TestSnapshots:
    """Tests for the append-only metrics history."""

    @pytest.mark.asyncio()
    async def test_round_trip_with_news(
        self,
        repo: Repository,
        large_cap_meta: TickerMeta,
        sample_indicators: IndicatorSet,
        scored: ScoreResult,
    ) -> None:
        await repo.upsert_ticker(large_cap_meta)
        news = NewsSummary(
            label=NewsLabel.POSITIVE, trend=NewsTrend.IMPROVING, score_3d=0.5, score_7d=0.26
        )
        snapshot_id = await repo.append_snapshot(
            "ACME", sample_indicators, scored, news, timestamp=T0
        )

        [snapshot] = await repo.list_snapshots("ACME")
        assert snapshot.id == snapshot_id
        assert snapshot.timestamp == T0
        assert snapshot.indicators == sample_indicators
        assert snapshot.result == scored
        assert snapshot.news == news

    @pytest.mark.asyncio()
    async def test_no_news_stored_as_none(
        self,
        repo: Repository,
        large_cap_meta: TickerMeta,
        sample_indicators: IndicatorSet,
        scored: ScoreResult,
    ) -> None:
        await repo.upsert_ticker(large_cap_meta)
        await repo.append_snapshot("ACME", sample_indicators, scored)
        [snapshot] = await repo.list_snapshots("ACME")
        assert snapshot.news is None

    @pytest.mark.asyncio()
    async def test_newest_first_and_limited(
        self,
        repo: Repository,
        large_cap_meta: TickerMeta,
        sample_indicators: IndicatorSet,
        scored: ScoreResult,
    ) -> None:
        """Snapshots accumulate; the listing is newest first and capped by limit."""
        await repo.upsert_ticker(large_cap_meta)
        for day in range(5):
            await repo.append_snapshot(
                "ACME", sample_indicators, scored, timestamp=T0 + datetime.timedelta(days=day)
            )

        snapshots = await repo.list_snapshots("ACME", limit=3)
        assert [s.timestamp.day for s in snapshots] == [14, 13, 12]
        assert len(await repo.list_snapshots("ACME")) == 5

    @pytest.mark.asyncio()
    async def test_unknown_symbol_rejected(
        self, repo: Repository, sample_indicators: IndicatorSet, scored: ScoreResult
    ) -> None:
        with pytest.raises(sqlite3.IntegrityError):
            await repo.append_snapshot("GHOST", sample_indicators, scored)


class TestWatchlist:
    """Tests for watchlist creation, listing, and status updates."""

    @pytest.mark.asyncio()
    async def test_create_requires_existing_ticker(self, repo: Repository) -> None:
        """Tracking a never-scanned symbol violates the foreign key."""
        with pytest.raises(sqlite3.IntegrityError):
            await repo.create_watchlist_item("GHOST")

    @pytest.mark.asyncio()
    async def test_create_defaults_to_on_watch(
        self, repo: Repository, large_cap_meta: TickerMeta
    ) -> None:
        await repo.upsert_ticker(large_cap_meta)
        item = await repo.create_watchlist_item("ACME", notes="base forming")
        assert item.symbol == "ACME"
        assert item.status is WatchlistStatus.ON_WATCH
        assert item.notes == "base forming"

    @pytest.mark.asyncio()
    async def test_create_is_idempotent(
        self, repo: Repository, large_cap_meta: TickerMeta
    ) -> None:
        """Re-adding returns the existing item unchanged, notes included."""
        await repo.upsert_ticker(large_cap_meta)
        first = await repo.create_watchlist_item("ACME", notes="first")
        second = await repo.create_watchlist_item("ACME", notes="second")
        assert second == first
        assert len(await repo.list_watchlist()) == 1

    @pytest.mark.asyncio()
    async def test_update_status(self, repo: Repository, large_cap_meta: TickerMeta) -> None:
        await repo.upsert_ticker(large_cap_meta)
        item = await repo.create_watchlist_item("ACME")
        await repo.update_watchlist_status(item.id, WatchlistStatus.TRIGGERED)
        updated = await repo.get_watchlist_item("ACME")
        assert updated is not None
        assert updated.status is WatchlistStatus.TRIGGERED

    @pytest.mark.asyncio()
    async def test_get_untracked_is_none(self, repo: Repository) -> None:
        assert await repo.get_watchlist_item("ACME") is None


class TestNews:
    """Tests for news article storage."""

    @pytest.mark.asyncio()
    async def test_duplicate_url_stored_once(self, repo: Repository) -> None:
        assert await repo.save_news_article(_article("https://n/1", 1)) is True
        assert await repo.save_news_article(_article("https://n/1", 1, score=-0.9)) is False
        articles = await repo.list_news_articles("ACME", T0 - datetime.timedelta(days=7))
        assert len(articles) == 1
        assert articles[0].sentiment_score == 0.3

    @pytest.mark.asyncio()
    async def test_list_filters_by_since_and_orders_newest_first(
        self, repo: Repository
    ) -> None:
        for url, days in (("https://n/a", 2), ("https://n/b", 1), ("https://n/c", 10)):
            await repo.save_news_article(_article(url, days))

        articles = await repo.list_news_articles("ACME", T0 - datetime.timedelta(days=7))
        assert [a.url for a in articles] == ["https://n/b", "https://n/a"]

    @pytest.mark.asyncio()
    async def test_other_symbols_excluded(self, repo: Repository) -> None:
        await repo.save_news_article(_article("https://n/x", 1))
        since = T0 - datetime.timedelta(days=7)
        assert await repo.list_news_articles("OTHER", since) == []

    @pytest.mark.asyncio()
    async def test_offsets_normalized_to_utc(self, repo: Repository) -> None:
        """Non-UTC timestamps are stored and compared as the same instant in UTC."""
        plus_five = datetime.timezone(datetime.timedelta(hours=5))
        # 2024-06-10 16:00+05:00 is 11:00 UTC, three hours before T0
        early = NewsArticle(
            url="https://n/tz",
            symbol="ACME",
            published_at=datetime.datetime(2024, 6, 10, 16, 0, tzinfo=plus_five),
            title="Offset story",
            sentiment_score=0.1,
            sentiment_label=NewsLabel.NEUTRAL,
        )
        await repo.save_news_article(early)

        assert await repo.list_news_articles("ACME", T0) == []
        since = T0.astimezone(plus_five) - datetime.timedelta(hours=4)
        [article] = await repo.list_news_articles("ACME", since)
        assert article.published_at == datetime.datetime(2024, 6, 10, 11, 0, tzinfo=datetime.UTC)
        assert article.published_at.utcoffset() == datetime.timedelta(0)
