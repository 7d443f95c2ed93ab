"""StrEnum types for the swing-screening domain.

All enums use Python 3.11+ StrEnum. Values are lowercase strings.
Use enum members in business logic, never raw strings.
"""

from enum import StrEnum


class WatchlistStatus(StrEnum):
    """Lifecycle of a tracked symbol. Only ever moves ON_WATCH -> TRIGGERED."""

    ON_WATCH = "on_watch"
    TRIGGERED = "triggered"


class NewsLabel(StrEnum):
    """Headline sentiment classification over the last 3 days."""

    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"


class NewsTrend(StrEnum):
    """Direction of sentiment: 3-day average relative to 7-day average."""

    IMPROVING = "improving"
    STABLE = "stable"
    WORSENING = "worsening"


class ScanStage(StrEnum):
    """Per-symbol step of the scan/refresh pipeline."""

    META = "meta"
    BARS = "bars"
    HISTORY = "history"
    SCORE = "score"
    NEWS = "news"
    PERSIST = "persist"


class StageOutcome(StrEnum):
    """Result of a single pipeline stage for one symbol."""

    OK = "ok"
    SKIPPED = "skipped"
    FAILED = "failed"
    MATCHED = "matched"
    REJECTED = "rejected"
