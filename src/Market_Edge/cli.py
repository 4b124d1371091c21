"""CLI entry point for Market Edge: multi-vendor quotes and Stacked Edge scoring.

Provides the ``market-edge`` command with subcommands for running the web
server and for one-off quote, history, and consensus lookups.

This is the ONLY module where console output is allowed. All other modules
use ``logging``. Async internals are bridged to typer's synchronous interface
via ``asyncio.run()``.
"""

from __future__ import annotations

import asyncio
import datetime
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from Market_Edge.analysis import calculate_stacked_edge
from Market_Edge.config import get_settings
from Market_Edge.logging_config import configure_logging
from Market_Edge.models import AssetClass, Bar, ConsensusResult, Quote, SignalDirection
from Market_Edge.services import MarketDataAggregator, ServiceCache

# ---------------------------------------------------------------------------
# Typer app
# ---------------------------------------------------------------------------

app = typer.Typer(name="market-edge", help="Multi-vendor market data and Stacked Edge scoring")

# Rich console for formatted output
console = Console()

# ---------------------------------------------------------------------------
# Default constants
# ---------------------------------------------------------------------------

DEFAULT_HISTORY_LIMIT: int = 30
EDGE_HISTORY_LIMIT: int = 250

_DIRECTION_STYLE: dict[SignalDirection, str] = {
    SignalDirection.BULLISH: "[green]Bullish[/green]",
    SignalDirection.BEARISH: "[red]Bearish[/red]",
    SignalDirection.NEUTRAL: "[yellow]Neutral[/yellow]",
}

VerboseOption = Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")]
QuietOption = Annotated[bool, typer.Option("--quiet", "-q", help="Suppress info logging")]
AssetClassOption = Annotated[AssetClass, typer.Option("--asset-class", "-a", help="Asset class")]
CountryOption = Annotated[
    str | None, typer.Option("--country", "-c", help="ISO country code for exchange suffixing")
]


def _build_aggregator() -> MarketDataAggregator:
    settings = get_settings()
    cache = ServiceCache.from_url(settings.redis_url)
    return MarketDataAggregator.from_settings(settings, cache)


async def _shutdown(aggregator: MarketDataAggregator) -> None:
    await aggregator.aclose()
    await aggregator.cache.aclose()


def _format_time(epoch_ms: int) -> str:
    moment = datetime.datetime.fromtimestamp(epoch_ms / 1000, tz=datetime.UTC)
    return moment.strftime("%Y-%m-%d %H:%M")


# ---------------------------------------------------------------------------
# serve command
# ---------------------------------------------------------------------------


@app.command()
def serve(
    host: Annotated[str | None, typer.Option(help="Bind address (default from settings)")] = None,
    port: Annotated[int | None, typer.Option(help="Port (default from settings)")] = None,
    reload: Annotated[bool, typer.Option(help="Reload on code changes")] = False,
) -> None:
    """Run the REST + WebSocket server with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "Market_Edge.web.app:create_app",
        factory=True,
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
        log_config=None,
    )


# ---------------------------------------------------------------------------
# quote command
# ---------------------------------------------------------------------------


@app.command()
def quote(
    symbol: Annotated[str, typer.Argument(help="Symbol, e.g. AAPL, BTC/USD, EUR/USD")],
    asset_class: AssetClassOption = AssetClass.STOCK,
    country: CountryOption = None,
    verbose: VerboseOption = False,
    quiet: QuietOption = False,
) -> None:
    """Fetch the latest quote through the vendor fallback chain."""
    configure_logging(verbose=verbose, quiet=quiet)
    result = asyncio.run(_quote_async(symbol, asset_class, country))
    _render_quote(result)


async def _quote_async(symbol: str, asset_class: AssetClass, country: str | None) -> Quote:
    aggregator = _build_aggregator()
    try:
        return await aggregator.get_quote(symbol, asset_class, country_code=country)
    finally:
        await _shutdown(aggregator)


def _render_quote(result: Quote) -> None:
    table = Table(title=f"{result.symbol} ({result.provider})")
    table.add_column("Field", style="bold", width=16)
    table.add_column("Value", justify="right", width=16)

    change_color = "green" if result.change >= 0 else "red"
    table.add_row("Price", f"{result.price:,.4f}")
    table.add_row(
        "Change",
        f"[{change_color}]{result.change:+,.4f} ({result.change_percent:+.2f}%)[/{change_color}]",
    )
    table.add_row("Open", f"{result.open:,.4f}")
    table.add_row("High", f"{result.high:,.4f}")
    table.add_row("Low", f"{result.low:,.4f}")
    table.add_row("Prev close", f"{result.previous_close:,.4f}")
    table.add_row("Time (UTC)", _format_time(result.timestamp))

    console.print(table)


# ---------------------------------------------------------------------------
# history command
# ---------------------------------------------------------------------------


@app.command()
def history(
    symbol: Annotated[str, typer.Argument(help="Symbol, e.g. AAPL")],
    interval: Annotated[str, typer.Option("--interval", "-i", help="Bar interval")] = "1d",
    limit: Annotated[int, typer.Option("--limit", "-n", help="Number of bars")] = (
        DEFAULT_HISTORY_LIMIT
    ),
    asset_class: AssetClassOption = AssetClass.STOCK,
    country: CountryOption = None,
    verbose: VerboseOption = False,
    quiet: QuietOption = False,
) -> None:
    """Fetch bar history, oldest first."""
    configure_logging(verbose=verbose, quiet=quiet)
    bars = asyncio.run(_history_async(symbol, asset_class, interval, limit, country))
    _render_history(symbol, bars)


async def _history_async(
    symbol: str,
    asset_class: AssetClass,
    interval: str,
    limit: int,
    country: str | None,
) -> list[Bar]:
    aggregator = _build_aggregator()
    try:
        return await aggregator.get_history(
            symbol, asset_class, interval=interval, limit=limit, country_code=country
        )
    finally:
        await _shutdown(aggregator)


def _render_history(symbol: str, bars: list[Bar]) -> None:
    if not bars:
        console.print("[yellow]No bars to display.[/yellow]")
        return

    table = Table(title=f"{symbol}: {len(bars)} bars")
    table.add_column("Time (UTC)", style="dim", width=17)
    for column in ("Open", "High", "Low", "Close"):
        table.add_column(column, justify="right", width=12)
    table.add_column("Volume", justify="right", width=14)

    for bar in bars:
        table.add_row(
            _format_time(bar.time),
            f"{bar.open:,.2f}",
            f"{bar.high:,.2f}",
            f"{bar.low:,.2f}",
            f"{bar.close:,.2f}",
            f"{bar.volume:,.0f}",
        )

    console.print(table)


# ---------------------------------------------------------------------------
# edge command
# ---------------------------------------------------------------------------


@app.command()
def edge(
    symbol: Annotated[str, typer.Argument(help="Symbol, e.g. AAPL")],
    asset_class: AssetClassOption = AssetClass.STOCK,
    country: CountryOption = None,
    verbose: VerboseOption = False,
    quiet: QuietOption = False,
) -> None:
    """Score the last 250 daily bars with the Stacked Edge consensus."""
    configure_logging(verbose=verbose, quiet=quiet)
    result = asyncio.run(_edge_async(symbol, asset_class, country))
    _render_edge(symbol, result)


async def _edge_async(
    symbol: str, asset_class: AssetClass, country: str | None
) -> ConsensusResult:
    aggregator = _build_aggregator()
    try:
        bars = await aggregator.get_history(
            symbol, asset_class, interval="1d", limit=EDGE_HISTORY_LIMIT, country_code=country
        )
    finally:
        await _shutdown(aggregator)
    return calculate_stacked_edge(bars)


def _render_edge(symbol: str, result: ConsensusResult) -> None:
    if not result.indicators:
        console.print(f"[yellow]Not enough history to score {symbol}.[/yellow]")
        return

    table = Table(title=f"Stacked Edge: {symbol}")
    table.add_column("Indicator", style="bold", width=16)
    table.add_column("Category", width=16)
    table.add_column("Vote", width=10)
    table.add_column("Value", justify="right", width=14)

    for vote in result.indicators:
        table.add_row(
            vote.name,
            vote.category,
            _DIRECTION_STYLE.get(vote.side, "[dim]---[/dim]"),
            vote.value,
        )

    console.print(table)
    console.print(
        f"\nBullish {result.bullish_score}/{result.max_score}  "
        f"Bearish {result.bearish_score}/{result.max_score}  "
        f"Bias {_DIRECTION_STYLE[result.net_bias]}  "
        f"Phase [bold]{result.phase}[/bold]"
    )


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    app()
