"""Single-file analysis command."""

from pathlib import Path
from typing import Optional

import click
import typer

from ..api import Analyzer
from ..exceptions import CodeLensError
from ..formatters import get_formatter
from ..logging_config import setup_logging
from ..models import AnalysisResult
from . import app
from ._common import console, read_source, resolve_config

BLOCKING_SECURITY = ("critical", "high")


def should_fail(fail_on: str, result: AnalysisResult) -> bool:
    """Whether ``result`` meets the ``--fail-on`` threshold.

    ``major`` trips on major violations, blocking security findings or
    syntax errors; ``any`` trips on any violation or finding at all.
    """
    if fail_on == "major":
        return (
            result.violations.major_count > 0
            or any(f.severity in BLOCKING_SECURITY for f in result.security.findings)
            or result.syntax.has_errors
        )
    return (
        result.violations.total > 0
        or bool(result.security.findings)
        or result.syntax.has_errors
    )


@app.command()
def analyze(
    file: Path = typer.Argument(
        ...,
        help="Source file to analyze",
        exists=True,
        file_okay=True,
        dir_okay=False,
    ),
    language: Optional[str] = typer.Option(
        None,
        "--language",
        "-l",
        help="Language id or alias (default: detect from file name and content)",
    ),
    fmt: str = typer.Option(
        "rich",
        "--format",
        "-f",
        help="Output format: rich | json | markdown",
        click_type=click.Choice(["rich", "json", "markdown"], case_sensitive=False),
    ),
    no_gateway: bool = typer.Option(
        False,
        "--no-gateway",
        help="Skip the remote enrichment service",
    ),
    no_cache: bool = typer.Option(
        False,
        "--no-cache",
        help="Do not read or write the result cache",
    ),
    config: Optional[Path] = typer.Option(
        None,
        "-c",
        "--config",
        help="Configuration file (TOML)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Only log errors",
    ),
    fail_on: Optional[str] = typer.Option(
        None,
        "--fail-on",
        help="Exit 1 if findings meet threshold: major | any",
        click_type=click.Choice(["major", "any"], case_sensitive=False),
    ),
):
    """
    Analyze one source file.

    Reports metrics, time and space complexity, deduplicated violations,
    security findings, syntax issues and test case skeletons.

    [bold]Examples:[/bold]

      codelens analyze app.js

      codelens analyze script.py --format json --no-gateway

      codelens analyze Main.java --fail-on major
    """
    logger = setup_logging(verbose=verbose, quiet=quiet)

    try:
        settings = resolve_config(
            config=config,
            no_gateway=no_gateway,
            no_cache=no_cache,
            verbose=verbose,
            quiet=quiet,
        )
        source = read_source(file)

        with Analyzer(settings) as analyzer:
            result = analyzer.analyze(source, language, filename=file.name)

        get_formatter(fmt.lower()).render(result, str(file))

        if fail_on is not None and should_fail(fail_on.lower(), result):
            raise typer.Exit(1)

    except typer.Exit:
        raise

    except CodeLensError as e:
        logger.error(f"{e.__class__.__name__}: {e}")
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    except KeyboardInterrupt:
        logger.info("Analysis interrupted by user")
        console.print("\n[yellow]Analysis interrupted[/yellow]")
        raise typer.Exit(130)

    except Exception as e:
        logger.exception("Unexpected error during analysis")
        console.print(f"[red]Unexpected error:[/red] {e}")
        if verbose:
            console.print_exception()
        raise typer.Exit(1)
