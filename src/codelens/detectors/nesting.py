"""Deep nesting: blocks opened beyond the configured depth."""

from typing import List

from ..scanning import PreparedSource, ScanContext
from .base import Detector, RawIssue


class DeepNestingDetector(Detector):
    """Flags every line that opens a block deeper than ``nesting_warn``."""

    name = "deep_nesting"

    def detect(self, source: PreparedSource, context: ScanContext) -> List[RawIssue]:
        limit = self.thresholds.nesting_warn
        issues = []
        for index, peak in enumerate(source.peaks):
            if peak > limit:
                issues.append(
                    RawIssue(
                        line=index + 1,
                        message=(
                            f"Deep nesting (level {peak}) - consider extracting "
                            "nested blocks into helper methods"
                        ),
                        severity="major",
                        kind="deep-nesting",
                    )
                )
        return issues
