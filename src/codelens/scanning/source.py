"""Per-analysis view of a source unit: masked text and block depths.

Everything here is computed once per analysis and shared read-only by the
metrics scan, the context passes and every detector.
"""

from dataclasses import dataclass
from typing import Tuple

from ..models import SourceUnit
from .registry import CompiledTable
from .text import indent_width, mask_source, strip_comments


@dataclass(frozen=True)
class PreparedSource:
    """A SourceUnit plus the derived views the scanners work on.

    Attributes:
        masked_lines: Lines with comments and string contents blanked
        code_lines: Lines with comments blanked, strings kept
        depths: Block depth after each line
        peaks: Depth of the deepest block opened on each line, 0 if none
    """

    unit: SourceUnit
    table: CompiledTable
    masked: str
    masked_lines: Tuple[str, ...]
    code_lines: Tuple[str, ...]
    depths: Tuple[int, ...]
    peaks: Tuple[int, ...]

    @property
    def lines(self) -> Tuple[str, ...]:
        return self.unit.lines

    @property
    def language(self) -> str:
        return self.table.name

    def depth_before(self, index: int) -> int:
        """Depth at the start of the 0-based line ``index``."""
        return self.depths[index - 1] if index > 0 else 0

    def is_comment_line(self, index: int) -> bool:
        return bool(self.lines[index].strip()) and not self.code_lines[index].strip()

    def is_blank(self, index: int) -> bool:
        return not self.lines[index].strip()


def _brace_depths(lines: Tuple[str, ...]) -> Tuple[Tuple[int, ...], Tuple[int, ...]]:
    depths, peaks = [], []
    depth = 0
    for line in lines:
        peak = 0
        for ch in line:
            if ch == "{":
                depth += 1
                peak = max(peak, depth)
            elif ch == "}":
                # Unbalanced closers clamp at zero
                depth = max(0, depth - 1)
        depths.append(depth)
        peaks.append(peak)
    return tuple(depths), tuple(peaks)


def _indent_depths(lines: Tuple[str, ...]) -> Tuple[Tuple[int, ...], Tuple[int, ...]]:
    depths, peaks = [], []
    stack = [0]
    depth = 0
    for line in lines:
        if not line.strip():
            depths.append(depth)
            peaks.append(0)
            continue
        width = indent_width(line)
        while len(stack) > 1 and stack[-1] > width:
            stack.pop()
        if width > stack[-1]:
            stack.append(width)
        level = len(stack) - 1
        if line.rstrip().endswith(":"):
            depth = level + 1
            peaks.append(depth)
        else:
            depth = level
            peaks.append(0)
        depths.append(depth)
    return tuple(depths), tuple(peaks)


def prepare(unit: SourceUnit, table: CompiledTable) -> PreparedSource:
    masked = mask_source(unit.text, table)
    masked_lines = tuple(masked.split("\n"))
    code_lines = tuple(strip_comments(unit.text, table).split("\n"))
    if table.uses_braces:
        depths, peaks = _brace_depths(masked_lines)
    else:
        depths, peaks = _indent_depths(masked_lines)
    return PreparedSource(
        unit=unit,
        table=table,
        masked=masked,
        masked_lines=masked_lines,
        code_lines=code_lines,
        depths=depths,
        peaks=peaks,
    )
