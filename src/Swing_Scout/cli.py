"""CLI entry point for Swing Scout, an upside-swing equity screener.

Provides the ``swing-scout`` command with subcommands for scanning the
universe, refreshing tracked symbols, managing the watchlist, and serving
the JSON API.

This is the ONLY module where printing is allowed. All other modules use
``logging``. Async internals are bridged to typer's synchronous interface via
``asyncio.run()``.
"""

from __future__ import annotations

import asyncio
import sqlite3
from typing import Annotated

import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn

from Swing_Scout.config import Settings
from Swing_Scout.logging_config import configure_logging
from Swing_Scout.utils.exceptions import ConfigurationError

# ---------------------------------------------------------------------------
# Typer app and sub-apps
# ---------------------------------------------------------------------------

app = typer.Typer(name="swing-scout", help="Upside-swing equity screener")
watchlist_app = typer.Typer(help="Track symbols and review their history")
app.add_typer(watchlist_app, name="watchlist")

# Rich console for formatted output
console = Console()

# Exit codes
EXIT_FAILURE: int = 1
EXIT_CONFIG: int = 2

DEFAULT_HISTORY_LIMIT: int = 30
DEFAULT_HOST: str = "127.0.0.1"
DEFAULT_PORT: int = 8000


def _load_settings() -> Settings:
    return Settings.from_env()


def _config_exit(exc: ConfigurationError) -> typer.Exit:
    console.print(f"[red]Configuration error:[/red] {exc}")
    return typer.Exit(code=EXIT_CONFIG)


# ---------------------------------------------------------------------------
# scan command
# ---------------------------------------------------------------------------


@app.command()
def scan(
    threshold: Annotated[
        float | None, typer.Option(help="Minimum score for a strong match (0-100)")
    ] = None,
    min_dollar_vol: Annotated[
        float | None, typer.Option(help="Liquidity gate: 20-day average dollar volume")
    ] = None,
    max_tickers: Annotated[
        int | None, typer.Option(help="Maximum number of universe symbols to evaluate")
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")] = False,
    quiet: Annotated[bool, typer.Option("--quiet", "-q", help="Suppress info logging")] = False,
) -> None:
    """Scan the universe for upside-swing setups and print strong matches."""
    configure_logging(verbose=verbose, quiet=quiet)
    settings = _load_settings()
    try:
        asyncio.run(
            _scan_async(
                settings,
                threshold=threshold,
                min_dollar_vol=min_dollar_vol,
                max_tickers=max_tickers,
            )
        )
    except ConfigurationError as exc:
        raise _config_exit(exc) from exc


async def _scan_async(
    settings: Settings,
    *,
    threshold: float | None,
    min_dollar_vol: float | None,
    max_tickers: int | None,
) -> None:
    """Consume ``iter_scan()`` events, updating a spinner, then render matches."""
    from Swing_Scout.data import Database, Repository
    from Swing_Scout.reporting import render_matches
    from Swing_Scout.scanner import ScanComplete, ScanParams, iter_scan
    from Swing_Scout.services import NewsService, PolygonDataProvider

    defaults = ScanParams.from_settings(settings)
    params = ScanParams(
        score_threshold=threshold if threshold is not None else defaults.score_threshold,
        min_dollar_vol_20d=(
            min_dollar_vol if min_dollar_vol is not None else defaults.min_dollar_vol_20d
        ),
        max_tickers=max_tickers if max_tickers is not None else defaults.max_tickers,
    )

    provider = PolygonDataProvider.from_settings(settings)
    try:
        async with Database(settings.db_path) as db:
            repo = Repository(db)
            news = NewsService(provider.client, repo)
            complete: ScanComplete | None = None

            with Progress(
                SpinnerColumn(spinner_name="line"),
                TextColumn("[progress.description]{task.description}"),
                console=console,
            ) as progress:
                task = progress.add_task("Listing universe...", total=None)
                async for event in iter_scan(provider, repo, params=params, news=news):
                    if isinstance(event, ScanComplete):
                        progress.update(task, description="Scan complete", completed=1)
                        complete = event
                    else:
                        progress.update(
                            task,
                            description=f"{event.symbol}: {event.stage.value} {event.outcome.value}",
                        )

            if complete is None:
                return
            render_matches(complete.matches, threshold=params.score_threshold)
            console.print(
                f"\n[green]Scan complete: {len(complete.matches)} match(es), "
                f"{complete.evaluated} evaluated, {complete.skipped} skipped "
                f"in {complete.elapsed_seconds:.1f}s[/green]"
            )
    finally:
        await provider.aclose()


# ---------------------------------------------------------------------------
# refresh command
# ---------------------------------------------------------------------------


@app.command()
def refresh(
    threshold: Annotated[
        float | None, typer.Option(help="Minimum score for a strong match (0-100)")
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")] = False,
    quiet: Annotated[bool, typer.Option("--quiet", "-q", help="Suppress info logging")] = False,
) -> None:
    """Re-evaluate tracked symbols and promote new strong matches to triggered."""
    configure_logging(verbose=verbose, quiet=quiet)
    settings = _load_settings()
    try:
        asyncio.run(_refresh_async(settings, threshold=threshold))
    except ConfigurationError as exc:
        raise _config_exit(exc) from exc


async def _refresh_async(settings: Settings, *, threshold: float | None) -> None:
    from Swing_Scout.data import Database, Repository
    from Swing_Scout.scanner import RefreshComplete, iter_refresh
    from Swing_Scout.services import NewsService, PolygonDataProvider

    effective = threshold if threshold is not None else settings.score_threshold
    provider = PolygonDataProvider.from_settings(settings)
    try:
        async with Database(settings.db_path) as db:
            repo = Repository(db)
            news = NewsService(provider.client, repo)
            async for event in iter_refresh(
                provider,
                repo,
                threshold=effective,
                min_dollar_vol_20d=settings.min_dollar_vol_20d,
                news=news,
            ):
                if isinstance(event, RefreshComplete):
                    console.print(f"[green]Refreshed {event.processed} tracked symbol(s)[/green]")
                    for symbol in event.triggered:
                        console.print(f"  [bold green]{symbol}[/bold green] triggered")
    finally:
        await provider.aclose()


# ---------------------------------------------------------------------------
# watchlist sub-commands
# ---------------------------------------------------------------------------


@watchlist_app.command("add")
def watchlist_add(
    symbol: Annotated[str, typer.Argument(help="Ticker symbol to track")],
    notes: Annotated[str | None, typer.Option(help="Free-form notes")] = None,
) -> None:
    """Start tracking a symbol that has been scanned at least once."""
    configure_logging(quiet=True)
    asyncio.run(_watchlist_add_async(_load_settings(), symbol=symbol.upper().strip(), notes=notes))


async def _watchlist_add_async(settings: Settings, *, symbol: str, notes: str | None) -> None:
    from Swing_Scout.data import Database, Repository

    async with Database(settings.db_path) as db:
        repo = Repository(db)
        if await repo.get_ticker(symbol) is None:
            console.print(f"[red]{symbol} has not been scanned yet. Run a scan first.[/red]")
            raise typer.Exit(code=EXIT_FAILURE)
        try:
            item = await repo.create_watchlist_item(symbol, notes)
        except sqlite3.IntegrityError as exc:
            console.print(f"[red]Could not add {symbol}: {exc}[/red]")
            raise typer.Exit(code=EXIT_FAILURE) from exc
        console.print(f"[green]Tracking {item.symbol} ({item.status.value})[/green]")


@watchlist_app.command("list")
def watchlist_list() -> None:
    """List tracked symbols and their status."""
    configure_logging(quiet=True)
    asyncio.run(_watchlist_list_async(_load_settings()))


async def _watchlist_list_async(settings: Settings) -> None:
    from Swing_Scout.data import Database, Repository
    from Swing_Scout.reporting import render_watchlist

    async with Database(settings.db_path) as db:
        items = await Repository(db).list_watchlist()
    render_watchlist(items)


@watchlist_app.command("history")
def watchlist_history(
    symbol: Annotated[str, typer.Argument(help="Ticker symbol")],
    limit: Annotated[int, typer.Option(help="Number of snapshots to show")] = DEFAULT_HISTORY_LIMIT,
) -> None:
    """Show recent evaluation snapshots for a symbol, newest first."""
    configure_logging(quiet=True)
    asyncio.run(_watchlist_history_async(_load_settings(), symbol=symbol.upper().strip(), limit=limit))


async def _watchlist_history_async(settings: Settings, *, symbol: str, limit: int) -> None:
    from Swing_Scout.data import Database, Repository
    from Swing_Scout.reporting import render_snapshots

    async with Database(settings.db_path) as db:
        snapshots = await Repository(db).list_snapshots(symbol, limit=limit)
    render_snapshots(symbol, snapshots)


# ---------------------------------------------------------------------------
# serve command
# ---------------------------------------------------------------------------


@app.command()
def serve(
    host: Annotated[str, typer.Option(help="Bind address")] = DEFAULT_HOST,
    port: Annotated[int, typer.Option(help="Bind port")] = DEFAULT_PORT,
) -> None:
    """Serve the JSON API with uvicorn."""
    import uvicorn

    configure_logging()
    uvicorn.run("Swing_Scout.web.app:create_app", host=host, port=port, factory=True)
