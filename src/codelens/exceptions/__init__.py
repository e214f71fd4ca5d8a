"""Exception hierarchy for codelens."""

from .analysis import (
    AnalysisError,
    DetectorError,
    FileAccessError,
    UnsupportedLanguageError,
)
from .base import CodeLensError
from .config import ConfigurationError, InvalidConfigError
from .gateway import (
    GatewayError,
    GatewayTimeoutError,
    GatewayUnavailableError,
    MalformedResponseError,
)

__all__ = [
    "CodeLensError",
    "AnalysisError",
    "DetectorError",
    "FileAccessError",
    "UnsupportedLanguageError",
    "ConfigurationError",
    "InvalidConfigError",
    "GatewayError",
    "GatewayUnavailableError",
    "GatewayTimeoutError",
    "MalformedResponseError",
]
