"""Comment density over the whole unit."""

from typing import List

from ..scanning import PreparedSource, ScanContext
from .base import Detector, RawIssue


class CommentDensityDetector(Detector):
    name = "comment_density"

    def detect(self, source: PreparedSource, context: ScanContext) -> List[RawIssue]:
        total = len(source.lines)
        if total <= self.thresholds.comment_density_min_lines:
            return []
        comments = sum(1 for i in range(total) if source.is_comment_line(i))
        if comments / total * 100 >= self.thresholds.comment_density_fail_pct:
            return []
        return [
            RawIssue(
                line=1,
                message="Insufficient comments - add documentation for better maintainability",
                severity="minor",
                kind="comment-density",
            )
        ]
