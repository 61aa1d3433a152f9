#!/usr/bin/env python3
"""
Main CLI entry point for rankbar
"""

import asyncio
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from rankbar import __version__
from rankbar.config.constants import DEFAULT_IDEA_COUNT
from rankbar.config.settings import get_env_info, get_log_level, get_log_path
from rankbar.exceptions import ConfigurationError
from rankbar.services.site_api import SiteApiClient
from rankbar.services.site_registry import SiteRegistry
from rankbar.ui.command_palette.input_classifier import InputMode, classify
from rankbar.ui.command_palette.palette_commands import (
    CommandCatalogue,
    CommandCategory,
    filter_commands,
)
from rankbar.ui.command_palette.streaming_runner import (
    OperationRunner,
    ResultKind,
    RunStatus,
    StreamingResult,
)
from rankbar.utils.error_handling import handle_cli_error
from rankbar.utils.logging import setup_logging

app = typer.Typer(help="Command palette for site analysis and content ideas")
console = Console()

RESULT_STYLES = {
    ResultKind.PROGRESS: ("…", "dim"),
    ResultKind.SCORE: ("▲", "blue"),
    ResultKind.ISSUE: ("⚠", "yellow"),
    ResultKind.CONTENT: ("💡", "bold"),
    ResultKind.SUCCESS: ("✔", "bold green"),
    ResultKind.ERROR: ("✖", "bold red"),
}


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-error output"),
):
    """
    rankbar - paste a URL, ask for content ideas, or run a command.

    [bold]Examples:[/bold]

    Analyze a site:
        [cyan]rankbar analyze example.com[/cyan]

    Get content ideas:
        [cyan]rankbar ideas "email marketing for small agencies"[/cyan]

    Open the interactive palette:
        [cyan]rankbar palette[/cyan]
    """
    if verbose and quiet:
        typer.echo("Error: --verbose and --quiet are mutually exclusive", err=True)
        raise typer.Exit(1)

    try:
        level = "DEBUG" if verbose else "ERROR" if quiet else get_log_level()
    except ConfigurationError as e:
        typer.echo(f"Error: {e.message}", err=True)
        raise typer.Exit(1) from e
    setup_logging(level)


def _print_result(result: StreamingResult) -> None:
    icon, style = RESULT_STYLES[result.kind]
    console.print(f"[{style}]{icon} {result.message}[/{style}]")
    if result.subtitle:
        console.print(f"   [dim]{result.subtitle}[/dim]")
    keyword = result.payload.get("keyword")
    if result.kind is ResultKind.CONTENT and keyword:
        console.print(f"   [dim]keyword: {keyword}[/dim]")


def _stream(mode: InputMode, text: str, count: int = DEFAULT_IDEA_COUNT) -> RunStatus:
    api = SiteApiClient()
    runner = OperationRunner(
        api,
        registry=SiteRegistry(source=api),
        on_result=_print_result,
        idea_count=count,
    )
    asyncio.run(runner.run(mode, text))
    return runner.status


@app.command()
def version():
    """Show rankbar version"""
    typer.echo(f"rankbar version {__version__}")


@app.command("classify")
def classify_text(text: str = typer.Argument(..., help="Palette input to classify")):
    """Show how the palette reads TEXT (search, url or ai)."""
    typer.echo(classify(text).value)


@app.command()
def commands(
    query: Optional[str] = typer.Argument(None, help="Filter text"),
):
    """List palette commands, grouped, optionally filtered by QUERY."""
    catalogue = CommandCatalogue(navigate=lambda route: None, prime_input=lambda text: None)
    groups = filter_commands(catalogue.commands(), catalogue.site_commands(), query or "")

    if not any(groups.values()):
        console.print(f"[yellow]No commands match '{query}'[/yellow]")
        return

    table = Table(title="Palette commands")
    table.add_column("Group", style="dim")
    table.add_column("ID", style="cyan")
    table.add_column("Title")
    table.add_column("Description", style="dim")
    table.add_column("Key")
    for category in CommandCategory:
        for command in groups[category]:
            table.add_row(
                category.label,
                command.id,
                command.title,
                command.description or "",
                command.shortcut or "",
            )
    console.print(table)


@app.command()
@handle_cli_error("analyzing site")
def analyze(url: str = typer.Argument(..., help="URL or domain to analyze")):
    """Analyze a site and stream scores, issues and quick wins."""
    if classify(url) is not InputMode.URL:
        console.print(f"[yellow]'{url}' does not look like a URL[/yellow]")
        raise typer.Exit(1)
    if _stream(InputMode.URL, url) is not RunStatus.SUCCEEDED:
        raise typer.Exit(1)


@app.command()
@handle_cli_error("generating ideas")
def ideas(
    topic: str = typer.Argument(..., help="Topic to generate content ideas for"),
    count: int = typer.Option(DEFAULT_IDEA_COUNT, "--count", "-n", min=1, max=20,
                              help="Ideas to request"),
):
    """Generate content ideas for TOPIC."""
    if _stream(InputMode.AI, topic, count=count) is not RunStatus.SUCCEEDED:
        raise typer.Exit(1)


@app.command()
@handle_cli_error("opening palette")
def palette():
    """Open the interactive command palette."""
    from rankbar.ui.app import RankbarApp

    # Log to a file so output does not draw over the TUI
    setup_logging(get_log_level(), log_file=get_log_path())
    try:
        RankbarApp(open_palette=True).run()
    except KeyboardInterrupt:
        pass


@app.command()
def env():
    """Show rankbar environment variables."""
    table = Table(title="Environment")
    table.add_column("Variable", style="cyan")
    table.add_column("Value")
    table.add_column("Default", style="dim")
    table.add_column("Description", style="dim")
    for name, info in get_env_info().items():
        value = info["value"] if info["is_set"] else "[dim]unset[/dim]"
        if not info["valid"]:
            value = f"[red]{value} (invalid)[/red]"
        table.add_row(name, value, str(info["default"] or ""), info["description"])
    console.print(table)


def run():
    app()


if __name__ == "__main__":
    run()
