"""Headline sentiment classification and recent-news summarization.

Per-headline scores come from the VADER compound score in [-1, 1]. The
summary compares the last 3 days with the last 7 to label both level and
direction. News is informational only and never feeds the upside score.
"""

import datetime
import logging
from collections.abc import Sequence
from typing import Final

from Swing_Scout.models.enums import NewsLabel, NewsTrend
from Swing_Scout.models.news import NewsArticle, NewsSummary

logger = logging.getLogger(__name__)

POSITIVE_THRESHOLD: Final[float] = 0.2
NEGATIVE_THRESHOLD: Final[float] = -0.2
TREND_THRESHOLD: Final[float] = 0.08

SHORT_WINDOW_DAYS: Final[int] = 3
LONG_WINDOW_DAYS: Final[int] = 7


def classify_label(score: float) -> NewsLabel:
    """Map an average compound score to a sentiment label."""
    if score >= POSITIVE_THRESHOLD:
        return NewsLabel.POSITIVE
    if score <= NEGATIVE_THRESHOLD:
        return NewsLabel.NEGATIVE
    return NewsLabel.NEUTRAL


def classify_trend(score_3d: float, score_7d: float) -> NewsTrend:
    """Compare short- and long-window averages to get the sentiment direction."""
    diff = score_3d - score_7d
    if diff > TREND_THRESHOLD:
        return NewsTrend.IMPROVING
    if diff < -TREND_THRESHOLD:
        return NewsTrend.WORSENING
    return NewsTrend.STABLE


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def summarize_articles(
    articles: Sequence[NewsArticle],
    *,
    now: datetime.datetime | None = None,
) -> NewsSummary | None:
    """Summarize stored articles into label, trend, and window averages.

    Only articles from the last 7 days count. When none fall inside the last
    3 days the short average equals the long one (trend is then Stable).

    Returns:
        A :class:`NewsSummary`, or ``None`` if there is no news in 7 days.
    """
    reference = now or datetime.datetime.now(datetime.UTC)
    since_7d = reference - datetime.timedelta(days=LONG_WINDOW_DAYS)
    since_3d = reference - datetime.timedelta(days=SHORT_WINDOW_DAYS)

    last_7d = [a.sentiment_score for a in articles if a.published_at >= since_7d]
    if not last_7d:
        return None

    score_7d = _mean(last_7d)
    last_3d = [a.sentiment_score for a in articles if a.published_at >= since_3d]
    score_3d = _mean(last_3d) if last_3d else score_7d

    return NewsSummary(
        label=classify_label(score_3d),
        trend=classify_trend(score_3d, score_7d),
        score_3d=score_3d,
        score_7d=score_7d,
    )
