"""Scan and watchlist-refresh orchestration shared by the CLI and web layer."""

from Swing_Scout.scanner.pipeline import (
    LOOKBACK_DAYS,
    MIN_BARS,
    RefreshComplete,
    ScanComplete,
    ScanEvent,
    ScanParams,
    iter_refresh,
    iter_scan,
    refresh_tracked,
    run_scan,
)

__all__ = [
    "LOOKBACK_DAYS",
    "MIN_BARS",
    "RefreshComplete",
    "ScanComplete",
    "ScanEvent",
    "ScanParams",
    "iter_refresh",
    "iter_scan",
    "refresh_tracked",
    "run_scan",
]
