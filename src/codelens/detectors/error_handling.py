"""Missing error handling in code with control flow and no try construct."""

import re
from typing import List

from ..scanning import MetricsExtractor, PreparedSource, ScanContext
from .base import Detector, RawIssue

_CONTROL_FLOW = re.compile(r"\b(?:if|for|while)\b")
_COMPUTE_NAME = re.compile(r"^(?:compute|calculate)", re.IGNORECASE)


class MissingErrorHandlingDetector(Detector):
    """One major issue when non-trivial code has no protected block at all.

    Languages without exceptions (no try keyword in their table) are
    skipped. The issue is anchored at the first compute/calculate function,
    else at line 1.
    """

    name = "missing_error_handling"

    def __init__(self, thresholds=None, metrics=None):
        super().__init__(thresholds)
        self.metrics = metrics or MetricsExtractor()

    def detect(self, source: PreparedSource, context: ScanContext) -> List[RawIssue]:
        table = source.table.table
        if not table.try_keyword:
            return []
        if len(source.unit.text) <= self.thresholds.error_handling_min_chars:
            return []
        if not _CONTROL_FLOW.search(source.masked) or context.try_blocks:
            return []

        handler = table.handler_keywords[0] if table.handler_keywords else "catch"
        return [
            RawIssue(
                line=self._anchor(source),
                message=(
                    f"Missing error handling - consider adding {table.try_keyword}-{handler} "
                    "blocks for robust code"
                ),
                severity="major",
                kind="missing-error-handling",
            )
        ]

    def _anchor(self, source: PreparedSource) -> int:
        for span in self.metrics.find_functions(source):
            if _COMPUTE_NAME.match(span.name):
                return span.start_line
        return 1
