"""Pydantic v2 models, enums, and type definitions.

Re-exports all public models so consumers can import directly:
    from Swing_Scout.models import Candle, IndicatorSet, ScoreResult
"""

from Swing_Scout.models.enums import (
    NewsLabel,
    NewsTrend,
    ScanStage,
    StageOutcome,
    WatchlistStatus,
)
from Swing_Scout.models.market_data import Candle, TickerMeta
from Swing_Scout.models.news import NewsArticle, NewsSummary
from Swing_Scout.models.scan import (
    CriteriaHit,
    IndicatorSet,
    MatchRow,
    MetricsSnapshot,
    ScoreResult,
    WatchlistItem,
)

__all__ = [
    # Enums
    "NewsLabel",
    "NewsTrend",
    "ScanStage",
    "StageOutcome",
    "WatchlistStatus",
    # Market data
    "Candle",
    "TickerMeta",
    # News
    "NewsArticle",
    "NewsSummary",
    # Scan
    "CriteriaHit",
    "IndicatorSet",
    "MatchRow",
    "MetricsSnapshot",
    "ScoreResult",
    "WatchlistItem",
]
