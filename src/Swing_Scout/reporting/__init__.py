"""Reporting module: rich terminal tables for matches, the watchlist, and history.

Re-exports all public functions so consumers can import directly:
    from Swing_Scout.reporting import render_matches, render_watchlist
"""

from Swing_Scout.reporting.terminal import (
    format_money,
    format_news,
    format_number,
    format_pct,
    render_matches,
    render_snapshots,
    render_watchlist,
)

__all__ = [
    # Formatters
    "format_money",
    "format_news",
    "format_number",
    "format_pct",
    # Terminal
    "render_matches",
    "render_snapshots",
    "render_watchlist",
]
