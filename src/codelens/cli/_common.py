"""Shared CLI helpers."""

from pathlib import Path
from typing import Optional

from rich.console import Console

from ..config import AnalysisConfig, load_config
from ..exceptions import FileAccessError

console = Console()


def resolve_config(
    config: Optional[Path] = None,
    no_gateway: bool = False,
    no_cache: bool = False,
    verbose: bool = False,
    quiet: bool = False,
) -> AnalysisConfig:
    """Build configuration from CLI options."""
    overrides = {}
    if no_gateway:
        overrides["gateway"] = {"enabled": False}
    if no_cache:
        overrides["cache_enabled"] = False
    if verbose:
        overrides["verbose"] = True
    if quiet:
        overrides["quiet"] = True
    return load_config(config_file=config, **overrides)


def read_source(path: Path) -> str:
    """Read a source file as text, replacing undecodable bytes."""
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise FileAccessError(path, e.strerror or str(e))
