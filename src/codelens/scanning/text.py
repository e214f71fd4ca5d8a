"""Comment and string masking.

Masking replaces characters with spaces but keeps every newline, so offsets,
line numbers and columns in the masked text match the original exactly.
"""

import re
from bisect import bisect_right
from typing import List

from .registry import CompiledTable

_NON_NEWLINE = re.compile(r"[^\n]")
_IDENTIFIER = re.compile(r"[A-Za-z_$][\w$]*")


def _blank(text: str) -> str:
    return _NON_NEWLINE.sub(" ", text)


def mask_source(text: str, table: CompiledTable, strings: bool = True) -> str:
    """Blank out comments and, unless ``strings`` is False, string contents.

    String delimiters are kept so code such as ``x = ""`` still reads as an
    assignment of something.
    """
    if table.mask_re is None:
        return text

    def _replace(match: "re.Match[str]") -> str:
        value = match.group(0)
        if match.lastgroup == "string":
            if not strings or len(value) < 2:
                return value
            return value[0] + _blank(value[1:-1]) + value[-1]
        return _blank(value)

    return table.mask_re.sub(_replace, text)


def strip_comments(text: str, table: CompiledTable) -> str:
    return mask_source(text, table, strings=False)


def identifiers(text: str) -> List[str]:
    return _IDENTIFIER.findall(text)


def indent_width(line: str) -> int:
    expanded = line.expandtabs(4)
    return len(expanded) - len(expanded.lstrip(" "))


class LineIndex:
    """Maps character offsets to 1-based line numbers."""

    def __init__(self, text: str):
        self._starts = [0]
        for match in re.finditer(r"\n", text):
            self._starts.append(match.end())

    def line_of(self, offset: int) -> int:
        return bisect_right(self._starts, offset)

    def column_of(self, offset: int) -> int:
        line = self.line_of(offset)
        return offset - self._starts[line - 1] + 1
