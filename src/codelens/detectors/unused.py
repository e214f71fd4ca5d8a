"""Unused variables: declarations whose name never appears anywhere else."""

import re
from typing import Dict, List, Set, Tuple

from ..scanning import PreparedSource, ScanContext
from .base import Detector, RawIssue


class UnusedVariableDetector(Detector):
    """Builds a declaration map and a usage set over the masked source.

    A name is used when it occurs at any position that is not one of its own
    declarations. Names starting with an underscore are treated as
    intentionally unused.
    """

    name = "unused_variables"

    def detect(self, source: PreparedSource, context: ScanContext) -> List[RawIssue]:
        declarations = self._declarations(source)
        if not declarations:
            return []

        issues = []
        for name, sites in declarations.items():
            if self._is_used(source, name, sites):
                continue
            first_line = min(line for line, _ in sites)
            issues.append(
                RawIssue(
                    line=first_line,
                    message=f"Unused variable '{name}'",
                    severity="minor",
                    kind="unused-variables",
                )
            )
        issues.sort(key=lambda issue: issue.line)
        return issues

    def _declarations(self, source: PreparedSource) -> Dict[str, Set[Tuple[int, int]]]:
        """Map each declared name to its (line, column) declaration sites."""
        found: Dict[str, Set[Tuple[int, int]]] = {}
        for index, line in enumerate(source.masked_lines):
            for pattern in source.table.declaration_res:
                for match in pattern.finditer(line):
                    name = match.group(1)
                    if not name or name.startswith("_"):
                        continue
                    found.setdefault(name, set()).add((index + 1, match.start(1)))
        return found

    @staticmethod
    def _is_used(source: PreparedSource, name: str, sites: Set[Tuple[int, int]]) -> bool:
        occurrence = re.compile(rf"(?<![\w$]){re.escape(name)}(?![\w$])")
        for index, line in enumerate(source.masked_lines):
            for match in occurrence.finditer(line):
                if (index + 1, match.start()) not in sites:
                    return True
        return False
