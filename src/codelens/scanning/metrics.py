"""Metrics extractor: one forward scan producing size and structure counts."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from ..logging_config import get_logger
from ..models import FunctionSpan, Metrics
from .source import PreparedSource
from .text import indent_width

logger = get_logger(__name__)

# Words a loose function regex can capture that are never function names
_NOT_FUNCTION_NAMES = frozenset(
    {"if", "for", "while", "switch", "catch", "return", "else", "do", "new", "sizeof", "elif"}
)


@dataclass
class MetricsExtractor:
    """Computes Metrics from a PreparedSource.

    Function boundaries come from the language's function patterns. A
    brace-style function ends on the line where the depth falls back to the
    depth at its declaration; an indent-style function ends before the next
    non-blank line indented no deeper than its ``def``.
    """

    # Lines after the declaration allowed to carry the opening brace
    brace_lookahead: int = 1

    def extract(self, source: PreparedSource) -> Metrics:
        lines = source.lines
        if source.unit.is_blank:
            return Metrics(lines_of_code=0, cyclomatic_complexity=1)

        code_lines = sum(1 for line in lines if line.strip())
        comment_lines = sum(1 for i in range(len(lines)) if source.is_comment_line(i))
        comment_pct = comment_lines / code_lines * 100 if code_lines else 0.0

        functions = self.find_functions(source)
        avg_length = (
            sum(f.length for f in functions) / len(functions) if functions else 0.0
        )

        max_depth = max(max(source.depths, default=0), max(source.peaks, default=0))

        metrics = Metrics(
            lines_of_code=len(lines),
            code_lines=code_lines,
            comment_lines=comment_lines,
            comment_percentage=round(comment_pct, 2),
            function_count=len(functions),
            average_function_length=round(avg_length, 2),
            max_nesting_depth=max_depth,
            cyclomatic_complexity=self.cyclomatic_complexity(source),
            functions=functions,
        )
        logger.debug(
            f"Metrics for {source.language}: {metrics.lines_of_code} lines, "
            f"{metrics.function_count} functions, cc={metrics.cyclomatic_complexity}"
        )
        return metrics

    def cyclomatic_complexity(self, source: PreparedSource) -> int:
        decision_re = source.table.decision_re
        if decision_re is None:
            return 1
        return 1 + sum(1 for _ in decision_re.finditer(source.masked))

    def find_functions(self, source: PreparedSource) -> List[FunctionSpan]:
        spans: List[FunctionSpan] = []
        for index, line in enumerate(source.masked_lines):
            name = self.function_name(source, line)
            if name is None:
                continue
            if source.table.uses_braces:
                end = self._brace_end(source, index)
            else:
                end = self._indent_end(source, index)
            spans.append(FunctionSpan(name=name, start_line=index + 1, end_line=end + 1))
        return spans

    def function_name(self, source: PreparedSource, line: str) -> Optional[str]:
        for pattern in source.table.function_res:
            match = pattern.search(line)
            if match and match.group(1) not in _NOT_FUNCTION_NAMES:
                return match.group(1)
        return None

    def _brace_end(self, source: PreparedSource, start: int) -> int:
        base = source.depth_before(start)
        opened = False
        for j in range(start, len(source.masked_lines)):
            if source.peaks[j] > base:
                opened = True
            if opened and source.depths[j] <= base:
                return j
            if not opened and j - start >= self.brace_lookahead:
                # Expression-bodied or declaration-only
                return start
        return len(source.masked_lines) - 1 if opened else start

    def _indent_end(self, source: PreparedSource, start: int) -> int:
        lines = source.masked_lines
        base = indent_width(lines[start])
        end = start
        for j in range(start + 1, len(lines)):
            if not lines[j].strip():
                continue
            if indent_width(lines[j]) <= base:
                break
            end = j
        return end
