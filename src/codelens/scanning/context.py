"""Context extraction: variable provenance used to suppress false positives.

One pass over a PreparedSource yields four facts:
    - loop-bounded variables (for / for-each / array callback bindings)
    - null-checked variables (null comparisons, optional chaining, type guards)
    - zero-checked variables (comparisons against zero)
    - protected (try) blocks with the variables captured in their scope
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, List, Optional, Set, Tuple

from ..logging_config import get_logger
from .source import PreparedSource
from .text import identifiers, indent_width

logger = get_logger(__name__)

_NULLS = r"(?:null|undefined|NULL|nullptr|nil|None)"

_BOUNDED_PATTERNS = (
    # for (let i = 0; ...), for (int i = 0; ...), for (i = 0; ...)
    re.compile(
        r"\bfor\s*\(\s*(?:let\s+|var\s+|const\s+|int\s+|long\s+|short\s+|byte\s+"
        r"|size_t\s+|unsigned\s+|auto\s+)?(\w+)\s*="
    ),
    # for (const item of items), for (key in obj)
    re.compile(r"\bfor\s*\(\s*(?:const\s+|let\s+|var\s+)?(\w+)\s+(?:of|in)\b"),
    # for (Type item : items), for (const auto& item : items)
    re.compile(r"\bfor\s*\(\s*(?:final\s+|const\s+)?[\w:<>\[\]]+\s*[&*]?\s+(\w+)\s*:(?!:)"),
    # Go: for i := 0; ... / for i, v := range xs
    re.compile(r"\bfor\s+(\w+)(?:\s*,\s*\w+)?\s*:="),
    re.compile(r"\bfor\s+\w+\s*,\s*(\w+)\s*:=\s*range\b"),
)
# Python and Rust: for a, b in ...
_FOR_IN = re.compile(r"\bfor\s+\(?\s*(\w+(?:\s*,\s*\w+)*)\s*\)?\s+in\b")
_CALLBACK = re.compile(
    r"\.(?:forEach|map|filter|reduce|some|every|find|findIndex|flatMap)\s*\(\s*"
    r"(?:function\s*\(\s*([^)]*)\)|\(\s*([^)]*)\)\s*=>|(\w+)\s*=>)"
)

_NULL_CHECK_PATTERNS = (
    re.compile(rf"\b(\w+)\s*(?:!=|!==)\s*{_NULLS}\b"),
    re.compile(rf"\b{_NULLS}\s*(?:!=|!==)\s*(\w+)\b"),
    # if (x == null) return ... guards the rest of the function too
    re.compile(rf"\bif\s*\(\s*(\w+)\s*(?:==|===)\s*{_NULLS}\s*\)"),
    re.compile(r"\bObjects\.nonNull\s*\(\s*(\w+)\s*\)"),
    re.compile(r"\b(\w+)\.isPresent\s*\(\s*\)"),
    re.compile(r"\b(\w+)\?\."),
    re.compile(r"\b(\w+)\s*\?\?"),
    re.compile(r"\b(\w+)\s+is\s+not\s+None\b"),
    re.compile(r"\bif\s+(?:not\s+)?(\w+)\s*:"),
    re.compile(r"\bif\s*\(\s*!?\s*(\w+)\s*\)"),
    # Type guards
    re.compile(r"\btypeof\s+(\w+)\s*[!=]=="),
    re.compile(r"\bisinstance\s*\(\s*(\w+)\s*,"),
    re.compile(r"\b(\w+)\s+instanceof\b"),
    # Initialised from a literal or constructor
    re.compile(r"\b(?:const|let|var)\s+(\w+)\s*=\s*(?:\[|\{|new\b|[\"'`]|\d)"),
)

_ZERO_CHECK_PATTERNS = (
    re.compile(r"\b(\w+)\s*(?:!=|!==|>|==|===)\s*0(?![\w.])"),
    re.compile(r"(?<![\w.])0\s*(?:!=|!==|<|==|===)\s*(\w+)\b"),
)

_DECLARED = re.compile(r"\b(?:const|let|var)\s+(\w+)")
_FUNCTION_PARAMS = re.compile(r"\bfunction\s*\w*\s*\(\s*([^)]*)\)")
_ARROW_PARAMS = re.compile(r"\(\s*([^)]*)\)\s*=>")
_PY_ASSIGNED = re.compile(r"^\s*(\w+)\s*(?::[^=]+)?=(?!=)")

# Lines after the try keyword whose variables form the block's scope
SCOPE_LOOKAHEAD = 10

_COMMON_WORDS = frozenset(
    {
        "if", "else", "for", "while", "do", "return", "new", "this", "self", "try", "catch",
        "except", "finally", "throw", "raise", "function", "const", "let", "var", "await",
        "async", "true", "false", "null", "undefined", "None", "True", "False", "in", "of",
        "and", "or", "not", "is", "def", "int", "long", "double", "float", "char", "void",
        "String", "boolean", "typeof", "instanceof", "with", "as",
    }
)


def _split_params(raw: str) -> List[str]:
    names = []
    for param in raw.split(","):
        param = param.strip()
        if not param or param.startswith(("{", "[")):
            continue
        # "x: number = 1", "int x", "...rest"
        head = param.split("=")[0].split(":")[0].strip().lstrip(".")
        parts = head.split()
        if parts:
            names.append(parts[-1])
    return [n for n in names if n.isidentifier()]


@dataclass(frozen=True)
class TryBlock:
    """A protected block. Lines are 1-based and inclusive.

    ``body_end`` is the last line of the protected body; handler lines
    (catch/except/finally) run from there to ``end``.
    """

    start: int
    body_end: int
    end: int
    scope: FrozenSet[str] = frozenset()

    def covers(self, line: int) -> bool:
        return self.start <= line <= self.body_end


@dataclass(frozen=True)
class ScanContext:
    bounded: FrozenSet[str] = frozenset()
    null_checked: FrozenSet[str] = frozenset()
    zero_checked: FrozenSet[str] = frozenset()
    try_blocks: Tuple[TryBlock, ...] = ()
    keywords: FrozenSet[str] = field(default=frozenset(), repr=False)

    def line_names(self, text: str) -> List[str]:
        """Identifiers on a line, language keywords removed."""
        return [
            name for name in identifiers(text)
            if name not in _COMMON_WORDS and name.lower() not in self.keywords
        ]

    def enclosing_try(self, line: int) -> Optional[TryBlock]:
        for block in self.try_blocks:
            if block.covers(line):
                return block
        return None

    def is_protected(self, line: int, text: str) -> bool:
        """True when the line sits in a try body that captures one of its names."""
        names = self.line_names(text)
        for block in self.try_blocks:
            if block.covers(line) and any(name in block.scope for name in names):
                return True
        return False


class ContextExtractor:
    """Builds a ScanContext from a PreparedSource."""

    def extract(self, source: PreparedSource) -> ScanContext:
        lines = source.masked_lines
        context = ScanContext(
            bounded=frozenset(self._bounded(lines)),
            null_checked=frozenset(self._matches(lines, _NULL_CHECK_PATTERNS)),
            zero_checked=frozenset(self._matches(lines, _ZERO_CHECK_PATTERNS)),
            try_blocks=tuple(self._try_blocks(source)),
            keywords=frozenset(kw.lower() for kw in source.table.table.keywords),
        )
        logger.debug(
            f"Context: {len(context.bounded)} bounded, {len(context.null_checked)} null-checked, "
            f"{len(context.zero_checked)} zero-checked, {len(context.try_blocks)} try blocks"
        )
        return context

    def _bounded(self, lines: Iterable[str]) -> Set[str]:
        bounded: Set[str] = set()
        for line in lines:
            for pattern in _BOUNDED_PATTERNS:
                bounded.update(pattern.findall(line))
            for match in _FOR_IN.finditer(line):
                bounded.update(n.strip() for n in match.group(1).split(","))
            for match in _CALLBACK.finditer(line):
                if match.group(1) is not None:
                    bounded.update(_split_params(match.group(1)))
                elif match.group(2) is not None:
                    bounded.update(_split_params(match.group(2)))
                elif match.group(3):
                    bounded.add(match.group(3))
        return bounded

    def _matches(self, lines: Iterable[str], patterns) -> Set[str]:
        found: Set[str] = set()
        for line in lines:
            for pattern in patterns:
                found.update(pattern.findall(line))
        return found

    # ── Protected blocks ─────────────────────────────────────────────

    def _try_blocks(self, source: PreparedSource) -> List[TryBlock]:
        table = source.table.table
        if not table.try_keyword:
            return []
        try_re = re.compile(rf"\b{re.escape(table.try_keyword)}\b")
        handlers = tuple(table.handler_keywords) + ("finally",)
        handler_re = re.compile(r"\b(?:" + "|".join(map(re.escape, handlers)) + r")\b")

        blocks = []
        for index, line in enumerate(source.masked_lines):
            match = try_re.search(line)
            if not match:
                continue
            if source.table.uses_braces:
                bounds = self._brace_block(source, index, match.end(), handler_re)
            else:
                bounds = self._indent_block(source, index, handler_re)
            body_end, end = bounds
            scope = self._scope(source, index, body_end)
            blocks.append(
                TryBlock(start=index + 1, body_end=body_end + 1, end=end + 1, scope=scope)
            )
        return blocks

    def _brace_block(
        self, source: PreparedSource, start: int, offset: int, handler_re: re.Pattern
    ) -> Tuple[int, int]:
        lines = source.masked_lines
        counter = 0
        opened = False
        body_end: Optional[int] = None
        for j in range(start, len(lines)):
            text = lines[j][offset:] if j == start else lines[j]
            if j > start and body_end is None and handler_re.search(text):
                body_end = j - 1 if text.lstrip().startswith(("catch", "finally", "except")) else j
                body_end = max(body_end, start)
            for ch in text:
                if ch == "{":
                    counter += 1
                    opened = True
                elif ch == "}":
                    counter -= 1
            if opened and counter <= 0:
                # A handler on the following line keeps the block open
                nxt = self._next_code_line(lines, j)
                if nxt is not None and handler_re.match(lines[nxt].lstrip()):
                    continue
                if body_end is None:
                    body_end = j
                return body_end, j
        last = len(lines) - 1
        return (body_end if body_end is not None else last), last

    def _indent_block(
        self, source: PreparedSource, start: int, handler_re: re.Pattern
    ) -> Tuple[int, int]:
        lines = source.masked_lines
        base = indent_width(lines[start])
        body_end: Optional[int] = None
        end = start
        for j in range(start + 1, len(lines)):
            if not lines[j].strip():
                continue
            width = indent_width(lines[j])
            stripped = lines[j].lstrip()
            if width > base:
                end = j
                continue
            if width == base and (handler_re.match(stripped) or stripped.startswith("else")):
                if body_end is None:
                    body_end = end
                end = j
                continue
            break
        if body_end is None:
            body_end = end
        return body_end, end

    @staticmethod
    def _next_code_line(lines, index: int) -> Optional[int]:
        for j in range(index + 1, len(lines)):
            if lines[j].strip():
                return j
        return None

    def _scope(self, source: PreparedSource, start: int, body_end: int) -> FrozenSet[str]:
        """Variables captured by a try block.

        Declarations and parameters within SCOPE_LOOKAHEAD lines of the try,
        plus every name referenced in the protected body inside that window.
        """
        lines = source.masked_lines
        stop = min(start + SCOPE_LOOKAHEAD, len(lines))
        scope: Set[str] = set()
        for j in range(start, stop):
            line = lines[j]
            scope.update(_DECLARED.findall(line))
            for pattern in (_FUNCTION_PARAMS, _ARROW_PARAMS):
                for raw in pattern.findall(line):
                    scope.update(_split_params(raw))
            if not source.table.uses_braces:
                scope.update(_PY_ASSIGNED.findall(line))
            if j <= body_end:
                scope.update(identifiers(line))
        return frozenset(n for n in scope if n and n not in _COMMON_WORDS and n != "function")
