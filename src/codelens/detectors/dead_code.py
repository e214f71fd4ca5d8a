"""Dead code: statements directly after return, break or continue."""

import re
from typing import List

from ..scanning import PreparedSource, ScanContext
from ..scanning.text import indent_width
from .base import Detector, RawIssue

_JUMP = re.compile(r"^\s*(?:return|break|continue)\b")
# Lines that start a new reachable region or close the current one
_REACHABLE_PREFIXES = ("}", ")", "]", "case", "default", "else", "elif", "except", "finally", "catch")
# A jump line ending with one of these continues on the next line
_CONTINUATION_ENDINGS = ("(", "[", "{", ",", "+", "-", "*", "/", "&&", "||", "?", ":", "=", "\\")


class DeadCodeDetector(Detector):
    """Flags the line after a jump statement unless it closes or relabels the block."""

    name = "dead_code"

    def detect(self, source: PreparedSource, context: ScanContext) -> List[RawIssue]:
        lines = source.masked_lines
        issues = []
        for index in range(len(lines) - 1):
            line = lines[index]
            if not _JUMP.match(line):
                continue
            if line.rstrip().endswith(_CONTINUATION_ENDINGS):
                continue
            if self._same_line_block(source, index):
                continue

            following = index + 1
            if source.is_blank(following) or source.is_comment_line(following):
                continue
            nxt = lines[following]
            if nxt.strip().startswith(_REACHABLE_PREFIXES):
                continue
            if not source.table.uses_braces and indent_width(nxt) < indent_width(line):
                continue

            issues.append(
                RawIssue(
                    line=following + 1,
                    message="Unreachable code after control flow statement",
                    severity="minor",
                    kind="dead-code",
                )
            )
        return issues

    @staticmethod
    def _same_line_block(source: PreparedSource, index: int) -> bool:
        """True when the jump line also closes the block it lives in."""
        return source.table.uses_braces and source.depths[index] < source.depth_before(index)
