"""Configuration loading and management for codelens.

Configuration sources are merged in priority order:
    1. Defaults (defined in AnalysisConfig)
    2. Global config (~/.codelens.toml)
    3. Project config (./codelens.toml)
    4. Explicit config file
    5. Environment variables (CODELENS_* prefix)
    6. Direct overrides (passed as kwargs)

Example:
    >>> config = load_config(verbose=True, cache_enabled=False)
    >>> config.verbosity
    'verbose'
    >>> config.cache_enabled
    False
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, Optional, Tuple, get_type_hints

from .exceptions import ConfigurationError, InvalidConfigError

Verbosity = Literal["quiet", "normal", "verbose"]

ENV_PREFIX = "CODELENS_"


@dataclass(frozen=True)
class ThresholdConfig:
    """Detector thresholds.

    Defaults follow common lint conventions for readability limits. Lower
    values produce more findings, higher values fewer.

    Attributes:
        Cyclomatic complexity:
            cyclomatic_warn: Complexity above which code is "complex"
            cyclomatic_fail: Complexity above which code is "very complex"

        Function length (lines):
            function_length_warn: Minor violation above this length
            function_length_fail: Major violation above this length

        Nesting:
            nesting_warn: Deep-nesting issues are raised above this depth
            nesting_fail: Depth treated as a structural failure

        Comments:
            comment_density_warn_pct: Comment percentage considered thin
            comment_density_fail_pct: Comment percentage that raises an issue
            comment_density_min_lines: Units shorter than this are not checked

        Duplication:
            duplicate_window: Lines per hashed block
            duplicate_min_chars: Blocks shorter than this are ignored

        Misc:
            magic_number_exemptions: Literals never reported as magic numbers
            max_risky_lines: Lines reported per risky-operation kind
            error_handling_min_chars: Minimum source length before missing
                error handling is reported
    """

    cyclomatic_warn: int = 10
    cyclomatic_fail: int = 15

    function_length_warn: int = 25
    function_length_fail: int = 40

    nesting_warn: int = 4
    nesting_fail: int = 6

    comment_density_warn_pct: float = 10.0
    comment_density_fail_pct: float = 5.0
    comment_density_min_lines: int = 20

    duplicate_window: int = 3
    duplicate_min_chars: int = 20

    magic_number_exemptions: Tuple[int, ...] = (0, 1, 2, 10, 100, 1000)
    max_risky_lines: int = 3
    error_handling_min_chars: int = 100

    def __post_init__(self) -> None:
        """Validate threshold configuration."""
        # TOML arrays arrive as lists
        if not isinstance(self.magic_number_exemptions, tuple):
            object.__setattr__(
                self, "magic_number_exemptions", tuple(self.magic_number_exemptions)
            )

        pairs = [
            ("cyclomatic_warn", "cyclomatic_fail"),
            ("function_length_warn", "function_length_fail"),
            ("nesting_warn", "nesting_fail"),
        ]
        for warn_name, fail_name in pairs:
            warn, fail = getattr(self, warn_name), getattr(self, fail_name)
            if warn < 1:
                raise ValueError(f"{warn_name} must be at least 1")
            if fail < warn:
                raise ValueError(f"{fail_name} must be >= {warn_name}")

        # For comment density the fail threshold is the lower one
        if not 0.0 <= self.comment_density_fail_pct <= self.comment_density_warn_pct <= 100.0:
            raise ValueError(
                "comment density thresholds must satisfy 0 <= fail <= warn <= 100"
            )
        if self.duplicate_window < 2:
            raise ValueError("duplicate_window must be at least 2")
        if self.max_risky_lines < 1:
            raise ValueError("max_risky_lines must be at least 1")


DEFAULT_THRESHOLDS = ThresholdConfig()


@dataclass(frozen=True)
class GatewayConfig:
    """External enrichment service settings.

    The gateway is off unless both ``enabled`` and ``url`` are set.
    """

    enabled: bool = False
    url: str = ""
    timeout_seconds: float = 10.0
    api_key: Optional[str] = None

    def __post_init__(self) -> None:
        if self.timeout_seconds <= 0:
            raise ValueError("gateway timeout_seconds must be positive")
        if self.enabled and not self.url:
            raise ValueError("gateway url is required when the gateway is enabled")

    @property
    def active(self) -> bool:
        return self.enabled and bool(self.url)


@dataclass(frozen=True)
class AnalysisConfig:
    """Configuration for analysis execution.

    Attributes:
        default_language: Language reported when classification finds nothing
        verbosity: Logging verbosity level

        Performance tuning:
            parallel_detectors: Run complexity, detectors and security scan
                concurrently within one request
            workers: Thread pool size (None = number of stages)

        Caching:
            cache_enabled: Keep analysis results in the bounded result cache
            cache_dir: Directory for cache storage (None = private temp dir)
            cache_max_entries: Oldest entries are evicted above this count
            cache_ttl_seconds: Entries expire after this many seconds

        Output:
            max_test_cases: Maximum test skeletons per analysis

        Nested:
            thresholds: Detector thresholds
            gateway: Enrichment service settings
    """

    default_language: str = "javascript"
    verbosity: Verbosity = "normal"

    parallel_detectors: bool = True
    workers: Optional[int] = None

    cache_enabled: bool = True
    cache_dir: Optional[str] = None
    cache_max_entries: int = 100
    cache_ttl_seconds: int = 300

    max_test_cases: int = 10

    thresholds: ThresholdConfig = field(default_factory=ThresholdConfig)
    gateway: GatewayConfig = field(default_factory=GatewayConfig)

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.workers is not None and self.workers < 1:
            raise ValueError("workers must be at least 1")
        if self.cache_max_entries < 1:
            raise ValueError("cache_max_entries must be at least 1")
        if self.cache_ttl_seconds < 0:
            raise ValueError("cache_ttl_seconds must be non-negative")
        if self.max_test_cases < 1:
            raise ValueError("max_test_cases must be at least 1")


DEFAULT_CONFIG = AnalysisConfig()

_NESTED = {"thresholds": ThresholdConfig, "gateway": GatewayConfig}


def load_config(config_file: Optional[Path] = None, **overrides) -> AnalysisConfig:
    """Load configuration with auto-discovery and merging.

    Configuration sources are merged in priority order (lowest to highest):
        1. Defaults (AnalysisConfig field defaults)
        2. Global config (~/.codelens.toml)
        3. Project config (./codelens.toml)
        4. Explicit config file (if config_file provided)
        5. Environment variables (CODELENS_* prefix; nested sections use
           CODELENS_GATEWAY_* and CODELENS_THRESHOLDS_*)
        6. Overrides (kwargs)

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags)

    Returns:
        Validated AnalysisConfig instance

    Raises:
        ConfigurationError: If a config file is invalid or missing
    """
    merged: dict = {}

    global_config = Path.home() / ".codelens.toml"
    if global_config.exists():
        _merge(merged, _read_config_file(global_config, "global config"))

    project_config = Path.cwd() / "codelens.toml"
    if project_config.exists():
        _merge(merged, _read_config_file(project_config, "project config"))

    if config_file is not None:
        if not config_file.exists():
            raise ConfigurationError(f"Config file not found: {config_file}")
        _merge(merged, _read_config_file(config_file, "config file"))

    _merge(merged, _load_env_vars())

    # Verbosity boolean flags
    if "verbose" in overrides:
        if overrides["verbose"]:
            overrides["verbosity"] = "verbose"
        del overrides["verbose"]
    if "quiet" in overrides:
        if overrides["quiet"]:
            overrides["verbosity"] = "quiet"
        del overrides["quiet"]

    _merge(merged, overrides)

    for section, cls in _NESTED.items():
        value = merged.pop(section, None)
        if value is None:
            continue
        if isinstance(value, dict):
            try:
                merged[section] = cls(**value)
            except (TypeError, ValueError) as e:
                raise ConfigurationError(f"Invalid [{section}] config: {e}")
        elif isinstance(value, cls):
            merged[section] = value
        else:
            raise ConfigurationError(f"Invalid [{section}] config: expected a table")

    try:
        return AnalysisConfig(**merged)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid configuration: {e}")


def _merge(target: dict, source: dict) -> None:
    """Shallow merge that merges nested section tables key by key."""
    for key, value in source.items():
        if key in _NESTED and isinstance(value, dict) and isinstance(target.get(key), dict):
            target[key] = {**target[key], **value}
        else:
            target[key] = value


def _read_config_file(path: Path, label: str) -> dict:
    try:
        return _load_toml_file(path)
    except ConfigurationError:
        raise
    except Exception as e:
        raise ConfigurationError(f"Invalid {label} '{path}': {e}")


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from CODELENS_* environment variables.

    Top-level fields map directly (CODELENS_CACHE_ENABLED,
    CODELENS_DEFAULT_LANGUAGE, ...). Nested sections are addressed with the
    section name as infix, e.g. CODELENS_GATEWAY_URL or
    CODELENS_THRESHOLDS_NESTING_WARN.

    Returns:
        Dict of field_name -> parsed_value, with nested dicts for sections.
    """
    result = _env_fields(AnalysisConfig, ENV_PREFIX, skip=set(_NESTED))
    for section, cls in _NESTED.items():
        nested = _env_fields(cls, f"{ENV_PREFIX}{section.upper()}_")
        if nested:
            result[section] = nested
    return result


def _env_fields(cls: type, prefix: str, skip: Optional[set] = None) -> dict[str, Any]:
    type_hints = get_type_hints(cls)
    result: dict[str, Any] = {}

    for field_name in cls.__dataclass_fields__:
        if skip and field_name in skip:
            continue
        env_key = f"{prefix}{field_name.upper()}"
        env_value = os.environ.get(env_key)
        if env_value is None:
            continue

        type_hint = type_hints.get(field_name)
        if type_hint is None:
            continue

        try:
            parsed = _parse_env_value(env_value, type_hint)
        except ValueError as e:
            raise InvalidConfigError(env_key, env_value, str(e))
        if parsed is not None:
            result[field_name] = parsed

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse environment variable string to the correct type.

    Args:
        value: Raw string from environment
        type_hint: Type annotation from dataclass

    Returns:
        Parsed value or None if the type is not settable from the environment

    Raises:
        ValueError: If value can't be parsed to expected type
    """
    origin = getattr(type_hint, "__origin__", None)

    # Optional[X] is Union[X, None]
    args = getattr(type_hint, "__args__", ())
    if type(None) in args:
        non_none_types = [t for t in args if t is not type(None)]
        if non_none_types:
            type_hint = non_none_types[0]
            origin = getattr(type_hint, "__origin__", None)

    # Tuples are comma-separated integers (magic_number_exemptions)
    if origin is tuple:
        return tuple(int(part) for part in value.split(",") if part.strip())

    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        elif lower in ("false", "0", "no", "off"):
            return False
        else:
            raise ValueError(f"expected true/false, got '{value}'")

    if type_hint is int:
        return int(value)

    if type_hint is float:
        return float(value)

    if type_hint is str or origin is Literal:
        return value

    return None


def _load_toml_file(path: Path) -> dict:
    """Load TOML file and return parsed dict.

    Raises:
        ConfigurationError: If tomllib/tomli not available
    """
    try:
        import tomllib
    except ModuleNotFoundError:
        try:
            import tomli as tomllib  # type: ignore
        except ImportError:
            raise ConfigurationError(
                "TOML support requires Python 3.11+ or 'tomli' package. "
                "Install with: pip install tomli"
            )

    with open(path, "rb") as f:
        return tomllib.load(f)
