"""
codelens - Heuristic Multi-Language Code Quality Analyzer

Lexical analysis without a parser: language detection, metrics, Big-O
estimates, deduplicated violations and code smells, security signatures and
test-case skeletons, with optional remote enrichment.
"""

__version__ = "0.1.0"

from .api import Analyzer, analyze, detect_language
from .config import AnalysisConfig, load_config
from .models import AnalysisResult, DetectionResult

__all__ = [
    "analyze",  # Main entry point
    "detect_language",
    "Analyzer",  # Advanced usage (injected configuration and collaborators)
    "AnalysisConfig",
    "load_config",
    "AnalysisResult",
    "DetectionResult",
]
