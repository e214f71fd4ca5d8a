"""Language tables and line-oriented scanning."""

from .context import ContextExtractor, ScanContext, TryBlock
from .languages import ALIASES, DEFAULT_LANGUAGE, LANGUAGES, LanguagePatternTable
from .metrics import MetricsExtractor
from .registry import CompiledTable, PatternRegistry, compile_table
from .source import PreparedSource, prepare
from .text import LineIndex, mask_source, strip_comments

__all__ = [
    # Pattern tables
    "LanguagePatternTable",
    "LANGUAGES",
    "ALIASES",
    "DEFAULT_LANGUAGE",
    "CompiledTable",
    "PatternRegistry",
    "compile_table",
    # Prepared source
    "PreparedSource",
    "prepare",
    "mask_source",
    "strip_comments",
    "LineIndex",
    # Passes
    "MetricsExtractor",
    "ContextExtractor",
    "ScanContext",
    "TryBlock",
]
