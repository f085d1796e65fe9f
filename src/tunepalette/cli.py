"""CLI entry point for tunepalette.

Provides commands:
  - tui: Launch the interactive palette host app
  - search: One-shot catalog search, classified like the palette does it
  - commands: List the built-in command catalog
  - recents: List persisted recent items
  - config: Manage catalog API credentials
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.table import Table

from tunepalette.commands import CommandCatalog
from tunepalette.config import (
    get_catalog_credentials,
    load_palette_config,
    remove_catalog_credentials,
    set_catalog_credentials,
)
from tunepalette.exceptions import ConfigError, CredentialsError, GatewayError
from tunepalette.models import SearchResult

logger = logging.getLogger(__name__)

app = typer.Typer(
    help="tunepalette - Keyboard-driven search over music and commands",
    rich_markup_mode="rich",
)
console = Console()

config_app = typer.Typer(help="Manage configuration (catalog API credentials)")
app.add_typer(config_app, name="config")

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to palette config JSON"),
]


def _load_config(config_path: Path | None):
    try:
        return load_palette_config(config_path)
    except ConfigError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)


def _results_table(title: str, results: list[SearchResult]) -> Table:
    table = Table(title=title, show_lines=False)
    table.add_column("#", style="dim", width=3)
    table.add_column("Type", style="cyan")
    table.add_column("Title", style="bold")
    table.add_column("Subtitle", style="dim")
    for i, result in enumerate(results, 1):
        table.add_row(str(i), result.type.value, result.title, result.subtitle)
    return table


@app.command()
def tui(config_path: ConfigOption = None) -> None:
    """Launch the interactive palette (ctrl+k to search)."""
    from tunepalette.tui import run_tui

    run_tui(config_path)


@app.command()
def search(
    query: Annotated[str, typer.Argument(help="Search text")],
    config_path: ConfigOption = None,
    commands_only: Annotated[
        bool,
        typer.Option("--commands-only", help="Skip the catalog and match commands only"),
    ] = False,
) -> None:
    """Search the catalog and commands, showing Top Results and Recommendations."""
    from tunepalette.search.classifier import classify

    config = _load_config(config_path)
    catalog = CommandCatalog()

    raw = []
    if not commands_only:
        try:
            client_id, client_secret = get_catalog_credentials()
        except CredentialsError as e:
            console.print(f"[red]Error:[/red] {e}")
            raise typer.Exit(code=1)

        from tunepalette.services import SearchService

        async def _run():
            service = SearchService(client_id, client_secret, config=config)
            try:
                return await service.search(query)
            finally:
                await service.close()

        try:
            with console.status(f"Searching for [bold]{query}[/bold]..."):
                raw = asyncio.run(_run())
        except GatewayError as e:
            console.print(f"[red]Search failed:[/red] {e}")
            raise typer.Exit(code=1)

    buckets = classify(
        query,
        raw,
        catalog.match(query),
        [],
        max_exact=config.max_exact,
        max_recommendations=config.max_recommendations,
        max_results=config.max_results,
        recent_limit=config.recent_display_limit,
    )

    if not buckets.exact_matches and not buckets.recommendations:
        console.print(f'[yellow]No results found for "{query.strip()}"[/yellow]')
        return

    if buckets.exact_matches:
        console.print(_results_table("Top Results", buckets.exact_matches))
    if buckets.recommendations:
        title = "Recommendations" if buckets.exact_matches else "Search Results"
        console.print(_results_table(title, buckets.recommendations))


@app.command()
def commands() -> None:
    """List built-in palette commands."""
    table = Table(title="Commands")
    table.add_column("ID", style="dim")
    table.add_column("Label", style="bold")
    table.add_column("Category", style="cyan")
    table.add_column("Shortcut")
    for command in CommandCatalog():
        table.add_row(command.id, command.label, command.category, command.shortcut or "")
    console.print(table)


@app.command()
def recents(config_path: ConfigOption = None) -> None:
    """List recently activated items, most recent first."""
    from tunepalette.recency import RecencyStore, SqliteRecentsBackend

    config = _load_config(config_path)
    if not Path(config.db_path).exists():
        console.print("[yellow]No recent items yet.[/yellow]")
        return

    store = RecencyStore(
        SqliteRecentsBackend(config.db_path), capacity=config.recent_capacity
    )
    entries = store.entries
    if not entries:
        console.print("[yellow]No recent items yet.[/yellow]")
        return

    table = Table(title=f"Recent Items ({len(entries)})")
    table.add_column("Type", style="cyan")
    table.add_column("Title", style="bold")
    table.add_column("Subtitle", style="dim")
    table.add_column("Last Used")
    for entry in entries:
        used = datetime.fromtimestamp(entry.last_used_at).strftime("%Y-%m-%d %H:%M")
        table.add_row(entry.type.value, entry.title, entry.subtitle, used)
    console.print(table)


@config_app.command("set-credentials")
def set_credentials(
    client_id: Annotated[str, typer.Argument(help="Catalog API client id")],
    client_secret: Annotated[str, typer.Argument(help="Catalog API client secret")],
) -> None:
    """Store catalog API credentials in the system keyring."""
    if not client_id.strip() or not client_secret.strip():
        console.print("[red]Error:[/red] Client id and secret cannot be empty")
        raise typer.Exit(code=1)

    try:
        set_catalog_credentials(client_id.strip(), client_secret.strip())
    except Exception as e:
        console.print(f"[red]Error:[/red] Failed to store credentials: {e}")
        raise typer.Exit(code=1)
    console.print("[green]✓[/green] Credentials stored in system keyring")


@config_app.command("show-credentials")
def show_credentials() -> None:
    """Display the configured client id and a masked secret."""
    try:
        client_id, client_secret = get_catalog_credentials()
    except CredentialsError as e:
        console.print(f"[yellow]{e}[/yellow]")
        raise typer.Exit(code=1)

    masked = client_secret[:4] + "*" * max(1, len(client_secret) - 4)
    console.print(f"[green]Client id:[/green] {client_id}")
    console.print(f"[green]Client secret:[/green] {masked}")


@config_app.command("remove-credentials")
def remove_credentials() -> None:
    """Delete stored catalog API credentials from the system keyring."""
    try:
        removed = remove_catalog_credentials()
    except Exception as e:
        console.print(f"[red]Error:[/red] Failed to remove credentials: {e}")
        raise typer.Exit(code=1)

    if not removed:
        console.print("[yellow]Warning:[/yellow] No credentials found in keyring.")
        return
    console.print("[green]✓[/green] Credentials removed from system keyring")


if __name__ == "__main__":
    app()
