"""Magic numbers: multi-digit literals outside named-constant declarations."""

import re
from typing import Dict, List

from ..scanning import PreparedSource, ScanContext
from .base import Detector, RawIssue

_NUMBER = re.compile(r"(?<![\w.])(\d{2,})(?![\w.])")
_NAMED_CONSTANT = re.compile(
    r"^\s*(?:#define\b|(?:export\s+)?(?:(?:const|let|var|readonly|static|final|public|private)\s+)*"
    r"[A-Z][A-Z0-9_]*\s*(?::[^=]+)?=(?!=))"
)
_SKIPPED_PREFIXES = ("else", "}", "{", "case", "default")


class MagicNumberDetector(Detector):
    """Reports each distinct literal once, at its first occurrence."""

    name = "magic_numbers"

    def detect(self, source: PreparedSource, context: ScanContext) -> List[RawIssue]:
        exempt = {str(n) for n in self.thresholds.magic_number_exemptions}
        markers = source.table.table.constant_markers
        marker_re = (
            re.compile(r"\b(?:" + "|".join(map(re.escape, markers)) + r")\b")
            if markers
            else None
        )

        first_seen: Dict[str, int] = {}
        for index, line in enumerate(source.masked_lines):
            stripped = line.strip()
            if not stripped or stripped.startswith(_SKIPPED_PREFIXES):
                continue
            if _NAMED_CONSTANT.match(line):
                continue
            if marker_re is not None and marker_re.search(line):
                continue
            for match in _NUMBER.finditer(line):
                value = match.group(1).lstrip("0") or "0"
                if value in exempt or value in first_seen:
                    continue
                first_seen[value] = index + 1

        return [
            RawIssue(
                line=line,
                message=f"Magic number {value} - replace with named constant",
                severity="minor",
                kind="magic-numbers",
            )
            for value, line in sorted(first_seen.items(), key=lambda item: item[1])
        ]
