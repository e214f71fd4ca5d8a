"""Language detection command."""

from pathlib import Path

import typer
from rich.table import Table

from ..classifier import LanguageClassifier
from ..exceptions import CodeLensError
from ..scanning import PatternRegistry
from . import app
from ._common import console, read_source


@app.command()
def detect(
    file: Path = typer.Argument(
        ...,
        help="Source file to classify",
        exists=True,
        file_okay=True,
        dir_okay=False,
    ),
):
    """Detect the programming language of a source file."""
    try:
        source = read_source(file)
    except CodeLensError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    result = LanguageClassifier(PatternRegistry()).detect(source, file.name)

    console.print(
        f"[bold]{file}[/bold]: [cyan]{result.language}[/cyan] "
        f"([yellow]{result.confidence}%[/yellow])"
    )
    if result.reason:
        console.print(f"[dim]{result.reason}[/dim]")

    if result.alternatives:
        table = Table(title="Alternatives")
        table.add_column("Language", style="cyan")
        table.add_column("Confidence", justify="right")
        for match in result.alternatives:
            table.add_row(match.language, f"{match.confidence}%")
        console.print(table)
