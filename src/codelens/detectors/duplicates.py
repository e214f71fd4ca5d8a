"""Duplicate code: sliding-window block hashing over trimmed lines."""

from typing import Dict, List, Tuple

from ..scanning import PreparedSource, ScanContext
from .base import Detector, RawIssue


class DuplicateCodeDetector(Detector):
    """Flags every block of ``duplicate_window`` non-empty lines seen twice or more.

    Comments are ignored. A longer duplicated region produces one issue
    rather than one per overlapping window.
    """

    name = "duplicate_code"

    def detect(self, source: PreparedSource, context: ScanContext) -> List[RawIssue]:
        window = self.thresholds.duplicate_window
        rows: List[Tuple[int, str]] = [
            (index + 1, line.strip())
            for index, line in enumerate(source.code_lines)
            if line.strip()
        ]
        if len(rows) < window * 2:
            return []

        blocks: Dict[str, List[int]] = {}
        order: List[str] = []
        for start in range(len(rows) - window + 1):
            block = "\n".join(text for _, text in rows[start : start + window])
            if len(block) <= self.thresholds.duplicate_min_chars:
                continue
            if block not in blocks:
                blocks[block] = []
                order.append(block)
            blocks[block].append(start)

        issues = []
        previous: List[int] = []
        for block in order:
            starts = blocks[block]
            if len(starts) < 2:
                continue
            # Same region shifted by one window step
            if previous and len(previous) == len(starts) and all(
                s == p + 1 for s, p in zip(starts, previous)
            ):
                previous = starts
                continue
            previous = starts
            lines = [rows[s][0] for s in starts]
            issues.append(
                RawIssue(
                    line=lines[0],
                    message=(
                        "Duplicate code block found at lines: "
                        + ", ".join(str(n) for n in lines)
                    ),
                    severity="major",
                    kind="duplicate-code",
                )
            )
        return issues
