"""Rich-based terminal output for scan matches, the watchlist, and snapshot history.

Uses ``rich.console.Console`` for all output. Color scheme:
green = strong / triggered, yellow = on watch, red = negative news.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from rich.console import Console
from rich.table import Table

from Swing_Scout.models.enums import NewsLabel, WatchlistStatus
from Swing_Scout.models.news import NewsSummary
from Swing_Scout.models.scan import MatchRow, MetricsSnapshot, WatchlistItem

logger = logging.getLogger(__name__)

# Shared console instance for terminal output
console = Console()

# --- Color scheme ---
COLOR_POSITIVE: str = "green"
COLOR_NEGATIVE: str = "red"
COLOR_CAUTION: str = "yellow"
COLOR_HEADER: str = "bold cyan"
COLOR_MUTED: str = "dim"

_DASH: str = "-"


def format_money(value: float | None) -> str:
    """Compact dollar amount: 12_500_000 -> '$12.5M'."""
    if value is None:
        return _DASH
    if value >= 1e12:
        return f"${value / 1e12:.2f}T"
    if value >= 1e9:
        return f"${value / 1e9:.1f}B"
    if value >= 1e6:
        return f"${value / 1e6:.1f}M"
    return f"${value:,.0f}"


def format_pct(value: float | None) -> str:
    """Fraction as percentage: 0.0234 -> '2.34%'."""
    if value is None:
        return _DASH
    return f"{value * 100:.2f}%"


def format_number(value: float | None, digits: int = 1) -> str:
    if value is None:
        return _DASH
    return f"{value:.{digits}f}"


def format_news(news: NewsSummary | None) -> str:
    """Colored '<label> / <trend>' or a muted dash when there is no news."""
    if news is None:
        return f"[{COLOR_MUTED}]{_DASH}[/{COLOR_MUTED}]"
    color = {
        NewsLabel.POSITIVE: COLOR_POSITIVE,
        NewsLabel.NEGATIVE: COLOR_NEGATIVE,
    }.get(news.label, COLOR_MUTED)
    return f"[{color}]{news.label.value}[/{color}] / {news.trend.value}"


def _status_color(status: WatchlistStatus) -> str:
    if status == WatchlistStatus.TRIGGERED:
        return COLOR_POSITIVE
    return COLOR_CAUTION


def render_matches(matches: Sequence[MatchRow], *, threshold: float) -> None:
    """Render strong matches as a table followed by their ``why`` lines."""
    if not matches:
        console.print(
            f"\n[{COLOR_CAUTION}]No strong matches at threshold {threshold:.0f}.[/{COLOR_CAUTION}]"
        )
        return

    table = Table(title=f"Strong Matches (threshold {threshold:.0f})")
    table.add_column("#", justify="right", width=4)
    table.add_column("Symbol", style="bold", width=8)
    table.add_column("Name", width=28, overflow="ellipsis")
    table.add_column("Score", justify="right", width=6)
    table.add_column("Mkt Cap", justify="right", width=9)
    table.add_column("$Vol 20D", justify="right", width=9)
    table.add_column("RVOL", justify="right", width=6)
    table.add_column("RSI", justify="right", width=6)
    table.add_column("BB W", justify="right", width=7)
    table.add_column("Brk", width=5)
    table.add_column("News", width=22)

    for rank, row in enumerate(matches, start=1):
        ind = row.indicators
        breakout = "55D" if ind.breakout55 else "20D" if ind.breakout20 else _DASH
        table.add_row(
            str(rank),
            row.symbol,
            row.meta.name or _DASH,
            f"[{COLOR_POSITIVE}]{row.score:.1f}[/{COLOR_POSITIVE}]",
            format_money(row.meta.market_cap),
            format_money(ind.avg_dollar_vol_20d),
            format_number(ind.rvol, 2),
            format_number(ind.rsi14),
            format_pct(ind.bb_width),
            breakout,
            format_news(row.news),
        )

    console.print(table)

    for row in matches:
        console.print(f"\n[bold]{row.symbol}[/bold] [{COLOR_MUTED}]{row.score:.1f}[/{COLOR_MUTED}]")
        for hit in row.result.why:
            console.print(f"  - {hit.label}: {hit.value}")


def render_watchlist(items: Sequence[WatchlistItem]) -> None:
    """Render tracked symbols with their status."""
    if not items:
        console.print(f"[{COLOR_CAUTION}]Watchlist is empty.[/{COLOR_CAUTION}]")
        return

    table = Table(title="Watchlist")
    table.add_column("ID", justify="right", width=4)
    table.add_column("Symbol", style="bold", width=8)
    table.add_column("Status", width=10)
    table.add_column("Added", width=16)
    table.add_column("Notes", width=24, overflow="ellipsis")

    for item in items:
        color = _status_color(item.status)
        table.add_row(
            str(item.id),
            item.symbol,
            f"[{color}]{item.status.value}[/{color}]",
            item.added_at.strftime("%Y-%m-%d %H:%M"),
            item.notes or "",
        )

    console.print(table)


def render_snapshots(symbol: str, snapshots: Sequence[MetricsSnapshot]) -> None:
    """Render the evaluation history for one symbol, newest first."""
    if not snapshots:
        console.print(f"[{COLOR_CAUTION}]No snapshots recorded for {symbol}.[/{COLOR_CAUTION}]")
        return

    table = Table(title=f"{symbol} History")
    table.add_column("Timestamp", width=17)
    table.add_column("Score", justify="right", width=6)
    table.add_column("Strong", width=6)
    table.add_column("RVOL", justify="right", width=6)
    table.add_column("RSI", justify="right", width=6)
    table.add_column("News", width=18)

    for snap in snapshots:
        strong = (
            f"[{COLOR_POSITIVE}]yes[/{COLOR_POSITIVE}]" if snap.result.strong_match else "no"
        )
        table.add_row(
            snap.timestamp.strftime("%Y-%m-%d %H:%M"),
            f"{snap.result.score:.1f}",
            strong,
            format_number(snap.indicators.rvol, 2),
            format_number(snap.indicators.rsi14),
            format_news(snap.news),
        )

    console.print(table)
