"""Headline ingestion and VADER sentiment for strong-match enrichment.

``NewsService`` pulls recent Polygon headlines for a symbol, scores each
title with VADER, stores every article once per URL, and summarizes the
stored window. The pipeline only calls it for strong matches and treats
any failure as "no news"; the summary never feeds the score.
"""

from __future__ import annotations

import datetime
import logging
from typing import Any, Final, Protocol

from vaderSentiment.vaderSentiment import SentimentIntensityAnalyzer

from Swing_Scout.analysis.sentiment import LONG_WINDOW_DAYS, classify_label, summarize_articles
from Swing_Scout.data.repository import Repository
from Swing_Scout.models.news import NewsArticle, NewsSummary
from Swing_Scout.services._helpers import safe_optional_str
from Swing_Scout.services.polygon_client import PolygonClient

logger = logging.getLogger(__name__)

NEWS_PATH: Final[str] = "/v2/reference/news"
NEWS_FETCH_LIMIT: Final[int] = 50


class NewsProvider(Protocol):
    """Anything that can summarize recent news for a symbol."""

    async def summarize(self, symbol: str) -> NewsSummary | None: ...


class VaderHeadlineScorer:
    """Scores a headline with the VADER compound polarity in [-1, 1]."""

    def __init__(self) -> None:
        self._analyzer = SentimentIntensityAnalyzer()

    def score(self, text: str) -> float:
        if not text.strip():
            return 0.0
        compound = float(self._analyzer.polarity_scores(text)["compound"])
        return max(-1.0, min(1.0, compound))


class NewsService:
    """Polygon-backed :class:`NewsProvider`.

    Usage::

        news = NewsService(client, repository)
        summary = await news.summarize("AAPL")
    """

    def __init__(
        self,
        client: PolygonClient,
        repository: Repository,
        scorer: VaderHeadlineScorer | None = None,
    ) -> None:
        self._client = client
        self._repository = repository
        self._scorer = scorer or VaderHeadlineScorer()

    async def ingest(self, symbol: str) -> int:
        """Fetch up to 50 recent headlines and store the new ones.

        Returns:
            Number of articles that were not already stored.
        """
        symbol = symbol.upper().strip()
        payload = await self._client.get_json(
            NEWS_PATH,
            {"ticker": symbol, "limit": NEWS_FETCH_LIMIT, "order": "desc"},
            ticker=symbol,
        )
        results = payload.get("results")
        rows: list[Any] = results if isinstance(results, list) else []

        stored = 0
        for row in rows:
            if not isinstance(row, dict):
                continue
            article = self._row_to_article(symbol, row)
            if article is None:
                continue
            if await self._repository.save_news_article(article):
                stored += 1

        logger.debug("%s: %d new headline(s) stored of %d fetched", symbol, stored, len(rows))
        return stored

    async def summarize(self, symbol: str) -> NewsSummary | None:
        """Ingest fresh headlines, then summarize the last 7 days of stored news."""
        symbol = symbol.upper().strip()
        await self.ingest(symbol)
        now = datetime.datetime.now(datetime.UTC)
        since = now - datetime.timedelta(days=LONG_WINDOW_DAYS)
        articles = await self._repository.list_news_articles(symbol, since)
        return summarize_articles(articles, now=now)

    def _row_to_article(self, symbol: str, row: dict[str, Any]) -> NewsArticle | None:
        url = safe_optional_str(row.get("article_url"))
        if url is None:
            return None

        title = safe_optional_str(row.get("title")) or ""
        publisher = row.get("publisher")
        source = safe_optional_str(publisher.get("name")) if isinstance(publisher, dict) else None
        published_at = _parse_published(row.get("published_utc"))

        score = self._scorer.score(title)
        return NewsArticle(
            url=url,
            symbol=symbol,
            published_at=published_at,
            title=title,
            source=source,
            sentiment_score=score,
            sentiment_label=classify_label(score),
        )


def _parse_published(value: object) -> datetime.datetime:
    """Parse Polygon's ``published_utc``; an absent or bad value means "now"."""
    text = safe_optional_str(value)
    if text is not None:
        try:
            parsed = datetime.datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            logger.debug("Unparseable published_utc: %r", text)
        else:
            if parsed.tzinfo is None:
                return parsed.replace(tzinfo=datetime.UTC)
            # Stored as ISO text and compared as strings, so every row must share one offset
            return parsed.astimezone(datetime.UTC)
    return datetime.datetime.now(datetime.UTC)
