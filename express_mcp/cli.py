"""
Command-line interface for the Express MCP server.
Provides commands for serving the tools and running one-off queries.
"""

import asyncio

import click
import orjson
from rich.console import Console
from rich.table import Table
from rich.panel import Panel

from express_mcp import __version__
from express_mcp.carriers import CARRIERS, carrier_name
from express_mcp.config import load_config
from express_mcp.express_client import ExpressClient
from express_mcp.server import prepare_runtime, serve as run_serve

console = Console()


def _mask(secret: str) -> str:
    if not secret:
        return "[dim]Not set[/dim]"
    return f"{secret[:2]}{'*' * 6}"


@click.group()
@click.version_option(version=__version__, prog_name="Express MCP")
@click.option("--auth_key", default=None, help="Upstream auth key (EXPRESS_AUTH_KEY)")
@click.option("--customer", default=None, help="Upstream customer id (EXPRESS_CUSTOMER)")
@click.option(
    "--config", "-c", "config_file",
    type=click.Path(exists=True),
    help="Path to configuration file"
)
@click.pass_context
def cli(ctx, auth_key, customer, config_file):
    """Express MCP - package tracking and shipping price comparison"""
    ctx.obj = load_config(config_file, auth_key=auth_key, customer=customer)


@cli.command()
@click.pass_obj
def serve(config):
    """Run the MCP server on stdio."""
    run_serve(config)


@cli.command()
@click.argument("com")
@click.argument("num")
@click.option("--phone", default="", help="Phone number (required by some carriers)")
@click.pass_obj
def track(config, com, num, phone):
    """Query tracking for tracking number NUM with carrier COM."""
    prepare_runtime(config)

    async def run():
        async with ExpressClient(config) as client:
            return await client.query(com, num, phone=phone)

    outcome = asyncio.run(run())

    if not outcome.success:
        console.print(f"[red]✗ {outcome.error_kind.value}: {outcome.error}[/red]")
        raise SystemExit(1)

    console.print_json(orjson.dumps(outcome.value).decode("utf-8"))


@cli.command()
@click.option("--from", "origin", required=True, help="Departure city/address")
@click.option("--to", "destination", required=True, help="Destination city/address")
@click.option("--weight", type=float, default=None, help="Weight in kg (default 1)")
@click.option("--length", type=float, default=None, help="Length in cm")
@click.option("--width", type=float, default=None, help="Width in cm")
@click.option("--height", type=float, default=None, help="Height in cm")
@click.pass_obj
def compare(config, origin, destination, weight, length, width, height):
    """Compare shipping prices across the configured carriers."""
    prepare_runtime(config)

    async def run():
        async with ExpressClient(config) as client:
            return await client.compare_price(
                weight, length, width, height,
                origin=origin,
                destination=destination,
            )

    outcome = asyncio.run(run())

    if not outcome.success:
        console.print(f"[red]✗ {outcome.error_kind.value}: {outcome.error}[/red]")
        raise SystemExit(1)

    table = Table(title=f"{origin} → {destination}")
    table.add_column("#", style="dim")
    table.add_column("Carrier", style="cyan")
    table.add_column("Price", justify="right", style="green")
    table.add_column("Days", justify="right")
    table.add_column("Error", style="red")

    for rank, quote in enumerate(outcome.value.quotes, start=1):
        name = carrier_name(quote.carrier_id) or quote.carrier_id
        if quote.succeeded:
            days = f"{quote.estimated_days:g}" if quote.estimated_days is not None else "-"
            table.add_row(str(rank), name, f"{quote.price:.2f} {quote.currency}", days, "")
        else:
            table.add_row("-", name, "-", "-", f"{quote.error.value}: {quote.error_message}")

    console.print(table)


@cli.command()
@click.pass_obj
def status(config):
    """Show configuration."""
    console.print(Panel.fit(
        f"[bold]Express MCP v{__version__}[/bold]",
        title="Status"
    ))

    table = Table(title="Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Customer", config.customer or "[dim]Not set[/dim]")
    table.add_row("Auth Key", _mask(config.auth_key))
    table.add_row("Query URL", config.query_url)
    table.add_row("Price URL", config.price_url)
    table.add_row("Sign Method", config.sign_method)
    table.add_row("Price Carriers", ", ".join(config.price_carriers))
    table.add_row("Request Timeout", f"{config.request_timeout:g}s")
    table.add_row("Carrier Timeout", f"{config.carrier_timeout:g}s")
    table.add_row("Log File", config.log_file or "[dim]stderr only[/dim]")

    console.print(table)

    for problem in config.validate():
        color = "yellow" if problem.startswith("Warning:") else "red"
        console.print(f"[{color}]{problem}[/{color}]")


@cli.command()
def carriers():
    """List known carrier codes and aliases."""
    table = Table(title="Carriers")
    table.add_column("Code", style="cyan")
    table.add_column("Name", style="green")
    table.add_column("Aliases")

    for code, (name, aliases) in CARRIERS.items():
        table.add_row(code, name, ", ".join(aliases))

    console.print(table)


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
