"""SolMind CLI application."""

import asyncio

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from solmind import __version__
from solmind.config.settings import load_settings
from solmind.core.execution.trade import TradeResult

app = typer.Typer(
    name="solmind",
    help="AI-driven Solana wallet auto-trader",
    no_args_is_help=True,
)

console = Console()

SECRET_FIELDS = {"private_key"}


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        console.print(f"SolMind v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """SolMind - AI-driven Solana wallet auto-trader."""
    pass


@app.command()
def config() -> None:
    """Show effective settings (secrets masked)."""
    settings = load_settings()

    table = Table(title="SolMind Settings")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("app_name", settings.app_name)
    table.add_row("log_level", settings.log_level)
    for group in ("model", "jupiter", "solana", "trading"):
        for key, value in getattr(settings, group).model_dump().items():
            if key in SECRET_FIELDS and value:
                value = "********"
            table.add_row(f"{group}.{key}", str(value))

    console.print(table)


def _print_result(result: TradeResult) -> None:
    table = Table(title="Trade Result")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    for key, value in result.to_dict().items():
        table.add_row(key, str(value))
    console.print(table)


@app.command()
def trade() -> None:
    """Run a single strategy invocation."""
    from solmind.runner import StrategyRunner

    async def _trade() -> TradeResult:
        runner = StrategyRunner()
        try:
            await runner.start()
            return await runner.tick()
        finally:
            await runner.stop()

    try:
        result = asyncio.run(_trade())
    except Exception as e:
        console.print(f"[bold red]Error: {e}[/bold red]")
        raise typer.Exit(1)

    _print_result(result)
    if not result.success:
        raise typer.Exit(1)


@app.command()
def run() -> None:
    """Start the scheduled strategy loop."""
    from solmind.runner import run_strategy

    console.print(
        Panel.fit(
            "[bold green]Starting SolMind...[/bold green]\n"
            "Press Ctrl+C to stop",
            title="SolMind",
        )
    )

    try:
        run_strategy()
    except KeyboardInterrupt:
        console.print("[yellow]Shutting down...[/yellow]")
    except Exception as e:
        console.print(f"[bold red]Error: {e}[/bold red]")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
