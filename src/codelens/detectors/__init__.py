"""Detector battery.

Every detector is independent: it reads a PreparedSource and the shared
ScanContext and returns RawIssues. The Aggregator merges their output.
"""

from typing import List, Optional

from ..config import ThresholdConfig
from ..scanning import MetricsExtractor
from .base import Detector, RawIssue
from .comments import CommentDensityDetector
from .dead_code import DeadCodeDetector
from .duplicates import DuplicateCodeDetector
from .error_handling import MissingErrorHandlingDetector
from .functions import LongFunctionDetector
from .magic_numbers import MagicNumberDetector
from .nesting import DeepNestingDetector
from .risky_operations import RISKY_OPERATIONS, RiskyOperation, RiskyOperationDetector
from .smells import DebugStatementDetector, ShortVariableNameDetector, TodoCommentDetector
from .unused import UnusedVariableDetector


def get_default_detectors(
    thresholds: Optional[ThresholdConfig] = None,
    metrics: Optional[MetricsExtractor] = None,
) -> List[Detector]:
    """Instantiate the full battery with shared thresholds."""
    thresholds = thresholds or ThresholdConfig()
    metrics = metrics or MetricsExtractor()
    return [
        DeepNestingDetector(thresholds),
        LongFunctionDetector(thresholds, metrics=metrics),
        MissingErrorHandlingDetector(thresholds, metrics=metrics),
        CommentDensityDetector(thresholds),
        ShortVariableNameDetector(thresholds),
        MagicNumberDetector(thresholds),
        UnusedVariableDetector(thresholds),
        DuplicateCodeDetector(thresholds),
        DeadCodeDetector(thresholds),
        RiskyOperationDetector(thresholds),
        DebugStatementDetector(thresholds),
        TodoCommentDetector(thresholds),
    ]


__all__ = [
    "Detector",
    "RawIssue",
    "get_default_detectors",
    "DeepNestingDetector",
    "LongFunctionDetector",
    "MissingErrorHandlingDetector",
    "CommentDensityDetector",
    "ShortVariableNameDetector",
    "MagicNumberDetector",
    "UnusedVariableDetector",
    "DuplicateCodeDetector",
    "DeadCodeDetector",
    "RiskyOperationDetector",
    "RiskyOperation",
    "RISKY_OPERATIONS",
    "DebugStatementDetector",
    "TodoCommentDetector",
]
