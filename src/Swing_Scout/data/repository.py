"""Repository layer for all database query operations.

Provides typed CRUD operations backed by a Database instance. All queries use
parameterized SQL (no string interpolation). Indicator and criteria columns
are stored as JSON produced by the Pydantic models themselves.

Metrics snapshots are append-only: there is deliberately no update or delete
method for them.
"""

import datetime
import json
import logging
import sqlite3

from pydantic import TypeAdapter

from Swing_Scout.data.database import Database
from Swing_Scout.models.enums import NewsLabel, NewsTrend, WatchlistStatus
from Swing_Scout.models.market_data import TickerMeta
from Swing_Scout.models.news import NewsArticle, NewsSummary
from Swing_Scout.models.scan import (
    CriteriaHit,
    IndicatorSet,
    MetricsSnapshot,
    ScoreResult,
    WatchlistItem,
)

logger = logging.getLogger(__name__)

_CRITERIA_ADAPTER: TypeAdapter[list[CriteriaHit]] = TypeAdapter(list[CriteriaHit])

_SNAPSHOT_COLUMNS = (
    "id, symbol, timestamp, upside_score, strong_match, indicators, met_criteria, notes, "
    "news_label, news_trend, news_score_3d, news_score_7d"
)


class Repository:
    """Query interface for the Swing Scout persistence layer.

    All methods operate through the provided Database instance's connection.
    """

    def __init__(self, db: Database) -> None:
        self._db = db

    # ------------------------------------------------------------------
    # Tickers
    # ------------------------------------------------------------------

    async def upsert_ticker(self, meta: TickerMeta) -> None:
        """Insert or refresh reference data for a symbol."""
        conn = self._db.connection
        updated_at = datetime.datetime.now(datetime.UTC).isoformat()
        await conn.execute(
            "INSERT INTO tickers (symbol, name, market_cap, sector, updated_at) "
            "VALUES (?, ?, ?, ?, ?) "
            "ON CONFLICT(symbol) DO UPDATE SET "
            "name = excluded.name, market_cap = excluded.market_cap, "
            "sector = excluded.sector, updated_at = excluded.updated_at",
            (meta.symbol, meta.name, meta.market_cap, meta.sector, updated_at),
        )
        await conn.commit()

    async def get_ticker(self, symbol: str) -> TickerMeta | None:
        """Return stored metadata for *symbol*, or None if never scanned."""
        conn = self._db.connection
        cursor = await conn.execute(
            "SELECT symbol, name, market_cap, sector FROM tickers WHERE symbol = ?",
            (symbol,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return TickerMeta(
            symbol=row["symbol"],
            name=row["name"],
            market_cap=row["market_cap"],
            sector=row["sector"],
        )

    # ------------------------------------------------------------------
    # Metrics snapshots (append-only)
    # ------------------------------------------------------------------

    async def append_snapshot(
        self,
        symbol: str,
        indicators: IndicatorSet,
        result: ScoreResult,
        news: NewsSummary | None = None,
        *,
        timestamp: datetime.datetime | None = None,
    ) -> int:
        """Record one evaluation and return its row ID."""
        conn = self._db.connection
        ts = timestamp or datetime.datetime.now(datetime.UTC)
        cursor = await conn.execute(
            "INSERT INTO metrics_snapshots "
            "(symbol, timestamp, upside_score, strong_match, indicators, met_criteria, notes, "
            "news_label, news_trend, news_score_3d, news_score_7d) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (
                symbol,
                ts.isoformat(),
                result.score,
                int(result.strong_match),
                indicators.model_dump_json(),
                _CRITERIA_ADAPTER.dump_json(result.why).decode("utf-8"),
                json.dumps(result.notes),
                news.label.value if news else None,
                news.trend.value if news else None,
                news.score_3d if news else None,
                news.score_7d if news else None,
            ),
        )
        await conn.commit()
        snapshot_id = cursor.lastrowid
        if snapshot_id is None:
            msg = "Failed to retrieve lastrowid after snapshot insert."
            raise RuntimeError(msg)
        return snapshot_id

    async def list_snapshots(self, symbol: str, limit: int = 30) -> list[MetricsSnapshot]:
        """Return the most recent snapshots for *symbol*, newest first."""
        conn = self._db.connection
        cursor = await conn.execute(
            f"SELECT {_SNAPSHOT_COLUMNS} FROM metrics_snapshots "  # noqa: S608
            "WHERE symbol = ? ORDER BY timestamp DESC, id DESC LIMIT ?",
            (symbol, limit),
        )
        rows = await cursor.fetchall()
        return [_row_to_snapshot(row) for row in rows]

    # ------------------------------------------------------------------
    # Watchlist
    # ------------------------------------------------------------------

    async def list_watchlist(self) -> list[WatchlistItem]:
        """Return all tracked items, most recently added first."""
        conn = self._db.connection
        cursor = await conn.execute(
            "SELECT id, symbol, status, notes, added_at FROM watchlist_items "
            "ORDER BY added_at DESC, id DESC"
        )
        rows = await cursor.fetchall()
        return [_row_to_watchlist_item(row) for row in rows]

    async def get_watchlist_item(self, symbol: str) -> WatchlistItem | None:
        """Return the watchlist item for *symbol*, or None if not tracked."""
        conn = self._db.connection
        cursor = await conn.execute(
            "SELECT id, symbol, status, notes, added_at FROM watchlist_items WHERE symbol = ?",
            (symbol,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return _row_to_watchlist_item(row)

    async def create_watchlist_item(self, symbol: str, notes: str | None = None) -> WatchlistItem:
        """Start tracking *symbol*. Idempotent: an existing item is returned unchanged.

        The ticker must already exist (i.e. have been scanned at least once);
        otherwise SQLite raises ``IntegrityError`` on the foreign key.
        """
        conn = self._db.connection
        added_at = datetime.datetime.now(datetime.UTC).isoformat()
        await conn.execute(
            "INSERT OR IGNORE INTO watchlist_items (symbol, status, notes, added_at) "
            "VALUES (?, ?, ?, ?)",
            (symbol, WatchlistStatus.ON_WATCH.value, notes, added_at),
        )
        await conn.commit()
        item = await self.get_watchlist_item(symbol)
        if item is None:
            msg = f"Failed to read back watchlist item for {symbol}."
            raise RuntimeError(msg)
        return item

    async def update_watchlist_status(self, item_id: int, status: WatchlistStatus) -> None:
        """Set the status of a watchlist item. Callers enforce the one-way rule."""
        conn = self._db.connection
        await conn.execute(
            "UPDATE watchlist_items SET status = ? WHERE id = ?",
            (status.value, item_id),
        )
        await conn.commit()

    # ------------------------------------------------------------------
    # News
    # ------------------------------------------------------------------

    async def save_news_article(self, article: NewsArticle) -> bool:
        """Store a scored headline. Returns False if the URL was already stored."""
        conn = self._db.connection
        cursor = await conn.execute(
            "INSERT OR IGNORE INTO news_articles "
            "(url, symbol, published_at, title, source, sentiment_score, sentiment_label) "
            "VALUES (?, ?, ?, ?, ?, ?, ?)",
            (
                article.url,
                article.symbol,
                article.published_at.astimezone(datetime.UTC).isoformat(),
                article.title,
                article.source,
                article.sentiment_score,
                article.sentiment_label.value,
            ),
        )
        await conn.commit()
        return cursor.rowcount > 0

    async def list_news_articles(
        self, symbol: str, since: datetime.datetime
    ) -> list[NewsArticle]:
        """Return articles for *symbol* published at or after *since*, newest first."""
        conn = self._db.connection
        cursor = await conn.execute(
            "SELECT url, symbol, published_at, title, source, sentiment_score, sentiment_label "
            "FROM news_articles WHERE symbol = ? AND published_at >= ? "
            "ORDER BY published_at DESC",
            (symbol, since.astimezone(datetime.UTC).isoformat()),
        )
        rows = await cursor.fetchall()
        return [
            NewsArticle(
                url=row["url"],
                symbol=row["symbol"],
                published_at=datetime.datetime.fromisoformat(row["published_at"]),
                title=row["title"],
                source=row["source"],
                sentiment_score=row["sentiment_score"],
                sentiment_label=NewsLabel(row["sentiment_label"]),
            )
            for row in rows
        ]


# ------------------------------------------------------------------
# Internal helpers
# ------------------------------------------------------------------


def _row_to_watchlist_item(row: sqlite3.Row) -> WatchlistItem:
    """Convert a database row to a WatchlistItem model."""
    return WatchlistItem(
        id=row["id"],
        symbol=row["symbol"],
        status=WatchlistStatus(row["status"]),
        notes=row["notes"],
        added_at=datetime.datetime.fromisoformat(row["added_at"]),
    )


def _row_to_snapshot(row: sqlite3.Row) -> MetricsSnapshot:
    """Convert a database row to a MetricsSnapshot model."""
    news: NewsSummary | None = None
    if row["news_label"] is not None:
        news = NewsSummary(
            label=NewsLabel(row["news_label"]),
            trend=NewsTrend(row["news_trend"]),
            score_3d=row["news_score_3d"],
            score_7d=row["news_score_7d"],
        )
    return MetricsSnapshot(
        id=row["id"],
        symbol=row["symbol"],
        timestamp=datetime.datetime.fromisoformat(row["timestamp"]),
        indicators=IndicatorSet.model_validate_json(row["indicators"]),
        result=ScoreResult(
            score=row["upside_score"],
            strong_match=bool(row["strong_match"]),
            why=_CRITERIA_ADAPTER.validate_json(row["met_criteria"]),
            notes=json.loads(row["notes"]),
        ),
        news=news,
    )
