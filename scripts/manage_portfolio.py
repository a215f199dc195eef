#!/usr/bin/env python3
"""Command-line portfolio tracker.

Records holdings and shows valuation, sector allocation against targets,
and rebalancing recommendations.

Usage:
    python scripts/manage_portfolio.py add "Infosys" INFY -q 10 -b 1450 -c 1520 \\
        --sector "Indian Equities"
    python scripts/manage_portfolio.py list
    python scripts/manage_portfolio.py edit <holding-id> -q 12 -b 1450 -c 1600
    python scripts/manage_portfolio.py delete <holding-id> --yes
    python scripts/manage_portfolio.py summary
    python scripts/manage_portfolio.py rebalance
    python scripts/manage_portfolio.py sector "Indian Equities"
    python scripts/manage_portfolio.py targets
"""

import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from src.api.portfolio_api import PortfolioAPI
from src.portfolio.base import AdvisoryKind, SectorStatus
from src.utils.config import load_config
from src.utils.exceptions import PortfolioTrackerError
from src.utils.logging import setup_logging_from_config

console = Console()

STATUS_STYLES = {
    SectorStatus.BALANCED: ("green", "Balanced"),
    SectorStatus.OVERWEIGHT: ("red", "Overweight"),
    SectorStatus.UNDERWEIGHT: ("yellow", "Underweight"),
}

ADVISORY_STYLES = {
    AdvisoryKind.SECTOR_OVERWEIGHT: "red",
    AdvisoryKind.SECTOR_UNDERWEIGHT: "yellow",
    AdvisoryKind.SECTOR_BALANCED: "green",
    AdvisoryKind.STOCK_CONCENTRATION: "bold red",
}


def money(value: float) -> str:
    return f"{value:,.2f}"


def gain_style(value: float) -> str:
    return "green" if value >= 0 else "red"


def get_api(ctx: click.Context) -> PortfolioAPI:
    return ctx.obj["api"]


@click.group()
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Path to YAML config (default: config/default.yaml)",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[str]):
    """Portfolio Tracker"""
    config = load_config(config_path)
    setup_logging_from_config(config)
    ctx.ensure_object(dict)
    try:
        ctx.obj["api"] = PortfolioAPI.from_config(config)
    except PortfolioTrackerError as e:
        raise click.ClickException(str(e)) from e


@cli.command("list")
@click.pass_context
def list_holdings(ctx: click.Context):
    """Show all holdings."""
    api = get_api(ctx)
    holdings = api.holdings

    if not holdings:
        console.print("[dim]No holdings yet. Use 'add' to record one.[/dim]")
        return

    table = Table(title="Holdings", show_header=True, header_style="bold magenta")
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Name", style="cyan")
    table.add_column("Ticker")
    table.add_column("Sector")
    table.add_column("Qty", justify="right")
    table.add_column("Avg Buy", justify="right")
    table.add_column("Current", justify="right")
    table.add_column("Value", justify="right")
    table.add_column("Gain/Loss", justify="right")

    for h in holdings:
        style = gain_style(h.gain_loss)
        table.add_row(
            h.id[:8],
            h.name,
            h.ticker,
            h.sector,
            f"{h.quantity:g}",
            money(h.avg_buy_price),
            money(h.current_price),
            money(h.current_value),
            f"[{style}]{money(h.gain_loss)} ({h.gain_loss_percent:.2f}%)[/{style}]",
        )

    console.print(table)


def resolve_holding_id(api: PortfolioAPI, prefix: str) -> str:
    """Expand a (possibly shortened) holding id to the full id."""
    matches = [h.id for h in api.holdings if h.id.startswith(prefix)]
    if len(matches) == 1:
        return matches[0]
    if not matches:
        raise click.ClickException(f"No holding matches id '{prefix}'")
    raise click.ClickException(f"Id '{prefix}' is ambiguous ({len(matches)} matches)")


@cli.command()
@click.argument("name")
@click.argument("ticker")
@click.option("--quantity", "-q", default="", help="Quantity held")
@click.option("--avg-price", "-b", default="", help="Average buy price")
@click.option("--current-price", "-c", default="", help="Current price")
@click.option("--sector", "-s", required=True, help="Sector from the target table")
@click.pass_context
def add(
    ctx: click.Context,
    name: str,
    ticker: str,
    quantity: str,
    avg_price: str,
    current_price: str,
    sector: str,
):
    """Add a holding (merges with an existing ticker in the same sector)."""
    api = get_api(ctx)
    if sector not in api.sector_names:
        raise click.BadParameter(
            f"'{sector}' is not one of: {', '.join(api.sector_names)}",
            param_hint="--sector",
        )

    try:
        holding = api.add_holding(name, ticker, quantity, avg_price, current_price, sector)
    except PortfolioTrackerError as e:
        raise click.ClickException(str(e)) from e

    console.print(
        f"[green]Saved[/green] {holding.name} ({holding.ticker}): "
        f"{holding.quantity:g} @ {money(holding.avg_buy_price)} [dim]{holding.id}[/dim]"
    )


@cli.command()
@click.argument("holding_id")
@click.option("--quantity", "-q", default=None, help="New quantity (default: unchanged)")
@click.option("--avg-price", "-b", default=None, help="New average buy price (default: unchanged)")
@click.option("--current-price", "-c", default=None, help="New current price (default: unchanged)")
@click.option("--name", default=None, help="Accepted, but name is not editable")
@click.option("--ticker", default=None, help="Accepted, but ticker is not editable")
@click.option("--sector", default=None, help="Accepted, but sector is not editable")
@click.pass_context
def edit(
    ctx: click.Context,
    holding_id: str,
    quantity: Optional[str],
    avg_price: Optional[str],
    current_price: Optional[str],
    name: Optional[str],
    ticker: Optional[str],
    sector: Optional[str],
):
    """Overwrite quantity and prices of a holding."""
    api = get_api(ctx)
    full_id = resolve_holding_id(api, holding_id)
    current = next(h for h in api.holdings if h.id == full_id)

    try:
        holding = api.edit_holding(
            full_id,
            current.quantity if quantity is None else quantity,
            current.avg_buy_price if avg_price is None else avg_price,
            current.current_price if current_price is None else current_price,
            name=name,
            ticker=ticker,
            sector=sector,
        )
    except PortfolioTrackerError as e:
        raise click.ClickException(str(e)) from e

    console.print(
        f"[green]Updated[/green] {holding.name} ({holding.ticker}): "
        f"{holding.quantity:g} @ {money(holding.avg_buy_price)}, "
        f"now {money(holding.current_price)}"
    )


@cli.command()
@click.argument("holding_id")
@click.option("--yes", is_flag=True, help="Skip confirmation")
@click.pass_context
def delete(ctx: click.Context, holding_id: str, yes: bool):
    """Delete a holding."""
    api = get_api(ctx)
    full_id = resolve_holding_id(api, holding_id)

    if not yes:
        click.confirm(f"Delete holding {full_id}?", abort=True)

    try:
        removed = api.delete_holding(full_id)
    except PortfolioTrackerError as e:
        raise click.ClickException(str(e)) from e

    console.print(f"[yellow]Deleted[/yellow] {removed.name} ({removed.ticker})")


@cli.command()
@click.pass_context
def summary(ctx: click.Context):
    """Show totals and sector allocation."""
    api = get_api(ctx)
    snapshot = api.get_snapshot()

    style = gain_style(snapshot.total_gain_loss)
    console.print(
        Panel(
            f"Total Invested: [blue]{money(snapshot.total_invested)}[/blue]\n"
            f"Current Value:  [green]{money(snapshot.total_current_value)}[/green]\n"
            f"Gain/Loss:      [{style}]{money(snapshot.total_gain_loss)} "
            f"({snapshot.total_gain_loss_percent:.2f}%)[/{style}]\n"
            f"Holdings:       {snapshot.holding_count} stocks in "
            f"{snapshot.distinct_sector_count} sectors",
            title="Portfolio",
        )
    )

    table = Table(title="Sector Allocation", show_header=True, header_style="bold magenta")
    table.add_column("Sector", style="cyan")
    table.add_column("Value", justify="right")
    table.add_column("Current %", justify="right")
    table.add_column("Target %", justify="right")
    table.add_column("Status")

    for allocation in snapshot.sector_breakdown.values():
        status = api.engine.status_for(allocation.current_percent, allocation.target_percent)
        color, label = STATUS_STYLES[status]
        if status != SectorStatus.BALANCED:
            label = f"{label} ({allocation.deviation:+.2f}%)"
        table.add_row(
            allocation.sector,
            money(allocation.current_value),
            f"{allocation.current_percent:.2f}",
            f"{allocation.target_percent:.2f}",
            f"[{color}]{label}[/{color}]",
        )

    console.print(table)


@cli.command()
@click.pass_context
def rebalance(ctx: click.Context):
    """Show rebalancing recommendations."""
    api = get_api(ctx)
    advisories = api.get_advisories()

    if not advisories:
        console.print("[green]Portfolio is within target allocation.[/green]")
        return

    for advisory in advisories:
        style = ADVISORY_STYLES[advisory.kind]
        console.print(f"[{style}]{advisory.message}[/{style}]")


@cli.command()
@click.argument("sector")
@click.pass_context
def sector(ctx: click.Context, sector: str):
    """Show holdings and recommendations for one sector."""
    api = get_api(ctx)
    try:
        detail = api.get_sector_detail(sector)
    except PortfolioTrackerError as e:
        raise click.ClickException(str(e)) from e

    allocation = detail["allocation"]
    console.print(
        f"[bold]{sector}[/bold]  Sector: {allocation.current_percent:.2f}% | "
        f"Target: {allocation.target_percent:.2f}%"
    )

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Holding", style="cyan")
    table.add_column("Value", justify="right")
    table.add_column("% of portfolio", justify="right")
    for holding, percent in detail["holding_percents"]:
        table.add_row(
            f"{holding.name} ({holding.ticker})",
            money(holding.current_value),
            f"{percent:.2f}",
        )
    console.print(table)

    for advisory in detail["advisories"]:
        style = ADVISORY_STYLES[advisory.kind]
        console.print(f"[{style}]{advisory.message}[/{style}]")


@cli.command()
@click.pass_context
def targets(ctx: click.Context):
    """Show the target allocation table."""
    api = get_api(ctx)
    table = Table(title="Target Portfolio Allocation", header_style="bold magenta")
    table.add_column("Sector", style="cyan")
    table.add_column("Target %", justify="right")
    for target in api.targets:
        table.add_row(target.sector, f"{target.target_percent:g}")
    console.print(table)


if __name__ == "__main__":
    cli()
