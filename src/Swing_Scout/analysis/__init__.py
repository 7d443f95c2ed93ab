"""Analysis layer: indicator snapshots, upside-swing scoring, and news sentiment.

Re-exports all public functions so consumers can import directly:
    from Swing_Scout.analysis import compute_indicators, score_upside_swing
"""

from Swing_Scout.analysis.scoring import ScoringConfig, score_upside_swing
from Swing_Scout.analysis.sentiment import classify_label, classify_trend, summarize_articles
from Swing_Scout.analysis.snapshot import candles_to_frame, compute_indicators

__all__ = [
    # Scoring
    "ScoringConfig",
    "score_upside_swing",
    # Sentiment
    "classify_label",
    "classify_trend",
    "summarize_articles",
    # Snapshot
    "candles_to_frame",
    "compute_indicators",
]
