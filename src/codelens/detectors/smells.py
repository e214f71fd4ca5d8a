"""Custom smells, each reported once at its first line.

    - debug output left in (console.log, print, System.out.println, ...)
    - single-letter variable names outside loops
    - TODO / FIXME / XXX comments
"""

import re
from typing import List, Set

from ..scanning import PreparedSource, ScanContext
from .base import Detector, RawIssue

# Conventional counters and dimensions
EXEMPT_SHORT_NAMES = frozenset({"i", "j", "k", "n", "m"})

_TASK_MARKER = re.compile(r"\b(?:TODO|FIXME|XXX)\b")
_FOR = re.compile(r"\bfor\b")


class DebugStatementDetector(Detector):
    name = "debug_statements"

    def detect(self, source: PreparedSource, context: ScanContext) -> List[RawIssue]:
        patterns = source.table.debug_res
        for index, line in enumerate(source.masked_lines):
            if any(p.search(line) for p in patterns):
                return [
                    RawIssue(
                        line=index + 1,
                        message="Debug statement found - remove debug output from production code",
                        severity="minor",
                        kind="debug-statement",
                    )
                ]
        return []


class ShortVariableNameDetector(Detector):
    """Single-letter declarations, one issue per distinct name."""

    name = "short_variable_names"

    def detect(self, source: PreparedSource, context: ScanContext) -> List[RawIssue]:
        reported: Set[str] = set()
        issues = []
        for index, line in enumerate(source.masked_lines):
            if _FOR.search(line):
                continue
            for pattern in source.table.declaration_res:
                for match in pattern.finditer(line):
                    name = match.group(1)
                    if len(name) != 1 or not name.isalpha():
                        continue
                    if name in reported or name in EXEMPT_SHORT_NAMES or name in context.bounded:
                        continue
                    reported.add(name)
                    issues.append(
                        RawIssue(
                            line=index + 1,
                            message=f'Short variable name "{name}" - use descriptive names',
                            severity="minor",
                            kind="short-variable-name",
                        )
                    )
        return issues


class TodoCommentDetector(Detector):
    name = "todo_comments"

    def detect(self, source: PreparedSource, context: ScanContext) -> List[RawIssue]:
        for index, line in enumerate(source.lines):
            match = _TASK_MARKER.search(line)
            # Only markers that were blanked with the comment count
            if match and not _TASK_MARKER.search(source.code_lines[index]):
                return [
                    RawIssue(
                        line=index + 1,
                        message="TODO/FIXME comments found - resolve before production",
                        severity="minor",
                        kind="todo-comment",
                    )
                ]
        return []
