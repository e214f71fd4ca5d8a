"""Long functions, measured on the boundaries found by the metrics scan."""

from typing import List, Optional

from ..scanning import MetricsExtractor, PreparedSource, ScanContext
from .base import Detector, RawIssue


class LongFunctionDetector(Detector):
    """Minor above ``function_length_warn`` lines, major above ``function_length_fail``."""

    name = "long_function"

    def __init__(self, thresholds=None, metrics: Optional[MetricsExtractor] = None):
        super().__init__(thresholds)
        self.metrics = metrics or MetricsExtractor()

    def detect(self, source: PreparedSource, context: ScanContext) -> List[RawIssue]:
        warn = self.thresholds.function_length_warn
        fail = self.thresholds.function_length_fail
        issues = []
        for span in self.metrics.find_functions(source):
            if span.length <= warn:
                continue
            issues.append(
                RawIssue(
                    line=span.start_line,
                    message=f"Long function ({span.length} lines)",
                    severity="major" if span.length > fail else "minor",
                    kind="long-method",
                )
            )
        return issues
