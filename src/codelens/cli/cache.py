"""Cache management commands."""

from pathlib import Path
from typing import Optional

import typer

from ..cache import ResultCache
from ..exceptions import CodeLensError
from . import app
from ._common import console, resolve_config


def _open_cache(config: Optional[Path]) -> ResultCache:
    try:
        settings = resolve_config(config=config)
    except CodeLensError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    return ResultCache(
        cache_dir=settings.cache_dir,
        max_entries=settings.cache_max_entries,
        ttl_seconds=settings.cache_ttl_seconds,
        enabled=settings.cache_enabled,
    )


_CONFIG_OPTION = typer.Option(
    None,
    "-c",
    "--config",
    help="Configuration file (TOML)",
    exists=True,
    file_okay=True,
    dir_okay=False,
    readable=True,
)


@app.command()
def cache_info(config: Optional[Path] = _CONFIG_OPTION):
    """Show cache information and statistics."""
    cache = _open_cache(config)
    stats = cache.stats()

    console.print("[bold cyan]codelens Cache Info[/bold cyan]")
    console.print()

    if stats.get("enabled"):
        console.print("Status: [green]Enabled[/green]")
        console.print(f"Directory: [blue]{stats.get('directory', 'N/A')}[/blue]")
        console.print(f"Entries: [yellow]{stats.get('size', 0)}[/yellow] / {cache.max_entries}")
        console.print(f"TTL: [yellow]{cache.ttl_seconds}s[/yellow]")
        console.print(f"Size: [yellow]{stats.get('volume', 0)} bytes[/yellow]")
    else:
        console.print("Status: [red]Disabled[/red]")
    cache.close()


@app.command()
def cache_clear(config: Optional[Path] = _CONFIG_OPTION):
    """Clear the analysis result cache."""
    cache = _open_cache(config)

    if not cache.enabled:
        console.print("[yellow]Cache is disabled[/yellow]")
        raise typer.Exit(0)

    cache.clear()
    cache.close()
    console.print("[green]Cache cleared successfully[/green]")
