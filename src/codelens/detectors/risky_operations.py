"""Unhandled-exception risk: risky operations outside protected code.

Each RiskyOperation names the languages it applies to and, through its
``guard``, which context facts make a match safe:

    null     the subject is null-checked (or initialised from a literal)
    receiver as null, and globals or capitalised class names are always safe
    bounds   the index or the collection is loop-bounded or null-checked
    zero     the divisor is zero-checked or a non-zero literal
    type     the subject passed an instanceof / isinstance guard
    declared the enclosing method declares ``throws``

A match inside a try body whose scope captures a name on the line is always
safe. Statement-level operations (throw / raise) are also safe anywhere in
a try statement, handlers included.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Optional, Tuple

from ..logging_config import get_logger
from ..scanning import PreparedSource, ScanContext
from .base import Detector, RawIssue

logger = get_logger(__name__)

_JS = frozenset({"javascript", "typescript"})

# Receivers that are globals, namespaces or the current instance
_SAFE_RECEIVERS = frozenset(
    {
        "this", "self", "super", "console", "window", "document", "process", "module",
        "exports", "require", "fs", "path", "os", "sys", "json", "math", "re", "std", "fmt",
    }
)

_RECEIVER_CALL = r"(?<![\w$.?])(?P<subject>[A-Za-z_$][\w$]*)\s*\.\s*[A-Za-z_$][\w$]*\s*\("
_INDEXED = r"\b(?P<subject>\w+)\[\s*(?P<index>\w+)\s*\]"
_DIVISION = r"[\w)\]]\s*(?<![/*])/{1,2}(?![/=*])\s*(?P<subject>[A-Za-z_]\w*|\d+(?:\.\d+)?)"
_THROW = r"\bthrow\s+new\s+\w+"


@dataclass(frozen=True)
class RiskyOperation:
    id: str
    pattern: str
    message: str
    languages: FrozenSet[str]
    guard: Optional[str] = None
    statement: bool = False
    # Lines matching this are never flagged for the operation
    exempt: Optional[str] = None
    regex: re.Pattern = field(init=False, repr=False, compare=False)
    exempt_regex: Optional[re.Pattern] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "regex", re.compile(self.pattern))
        object.__setattr__(
            self, "exempt_regex", re.compile(self.exempt) if self.exempt else None
        )

    def applies_to(self, language: str) -> bool:
        return language in self.languages


RISKY_OPERATIONS: Tuple[RiskyOperation, ...] = (
    RiskyOperation(
        id="json-parse",
        pattern=r"\bJSON\.parse\s*\(\s*(?P<subject>[A-Za-z_$][\w$]*)?",
        message="Unhandled JSON.parse could throw on invalid JSON",
        languages=_JS,
        guard="null",
    ),
    RiskyOperation(
        id="file-system",
        pattern=r"\bfs\.\w+Sync\s*\(",
        message="Unhandled synchronous file operations may throw exceptions",
        languages=_JS,
    ),
    RiskyOperation(
        id="null-unsafe",
        pattern=_RECEIVER_CALL,
        message="Potential null/undefined property access without checks",
        languages=_JS,
        guard="receiver",
    ),
    RiskyOperation(
        id="array-unsafe",
        pattern=_INDEXED,
        message="Array access without bounds checking",
        languages=_JS | {"python", "c", "cpp"},
        guard="bounds",
    ),
    RiskyOperation(
        id="explicit-throw",
        pattern=_THROW,
        message="Explicit throw statement not within try-catch",
        languages=_JS,
        statement=True,
    ),
    RiskyOperation(
        id="await-without-catch",
        pattern=r"\bawait\s+[A-Za-z_$][\w$.]*",
        message="Awaited promise without error handling",
        languages=_JS,
        exempt=r"\.catch\s*\(",
    ),
    RiskyOperation(
        id="java-arithmetic",
        pattern=_DIVISION,
        message="Division operation may cause ArithmeticException if divisor is zero",
        languages=frozenset({"java"}),
        guard="zero",
    ),
    RiskyOperation(
        id="division",
        pattern=_DIVISION,
        message="Division operation may fail if divisor is zero",
        languages=frozenset({"python", "c", "cpp", "go"}),
        guard="zero",
        exempt=r"^\s*#",
    ),
    RiskyOperation(
        id="java-null-pointer",
        pattern=_RECEIVER_CALL,
        message="Potential NullPointerException without null check",
        languages=frozenset({"java"}),
        guard="receiver",
    ),
    RiskyOperation(
        id="java-array-index",
        pattern=_INDEXED,
        message="Potential ArrayIndexOutOfBoundsException without bounds check",
        languages=frozenset({"java"}),
        guard="bounds",
    ),
    RiskyOperation(
        id="java-cast",
        pattern=r"\(\s*(?P<type>[A-Z]\w*)\s*\)\s*(?P<subject>[a-z_]\w*)",
        message="Type casting may cause ClassCastException",
        languages=frozenset({"java"}),
        guard="type",
    ),
    RiskyOperation(
        id="java-throw",
        pattern=_THROW,
        message="Exception thrown without being caught or declared",
        languages=frozenset({"java"}),
        guard="declared",
        statement=True,
    ),
    RiskyOperation(
        id="json-loads",
        pattern=r"\bjson\.loads?\s*\(\s*(?P<subject>[A-Za-z_]\w*)?",
        message="Unhandled json.loads could raise on invalid JSON",
        languages=frozenset({"python"}),
        guard="null",
    ),
    RiskyOperation(
        id="bare-open",
        pattern=r"(?<![\w.])open\s*\(",
        message="File opened outside a with statement may leak or raise",
        languages=frozenset({"python"}),
        exempt=r"^\s*(?:async\s+)?with\b",
    ),
    RiskyOperation(
        id="explicit-raise",
        pattern=r"^\s*raise\b",
        message="Explicit raise statement not within try-except",
        languages=frozenset({"python"}),
        statement=True,
    ),
)


class RiskyOperationDetector(Detector):
    """Reports up to ``max_risky_lines`` unguarded lines per risky operation."""

    name = "risky_operations"

    def __init__(self, thresholds=None, operations: Optional[Tuple[RiskyOperation, ...]] = None):
        super().__init__(thresholds)
        self.operations = RISKY_OPERATIONS if operations is None else operations

    def detect(self, source: PreparedSource, context: ScanContext) -> List[RawIssue]:
        applicable = [op for op in self.operations if op.applies_to(source.language)]
        flagged: Dict[str, List[int]] = {}

        for index, line in enumerate(source.masked_lines):
            if not line.strip():
                continue
            for op in applicable:
                if op.exempt_regex is not None and op.exempt_regex.search(line):
                    continue
                if self._is_unguarded(op, source, context, index, line):
                    flagged.setdefault(op.id, []).append(index + 1)

        issues = []
        limit = self.thresholds.max_risky_lines
        for op in applicable:
            lines = flagged.get(op.id, [])
            if len(lines) > limit:
                logger.debug(f"{op.id}: {len(lines)} risky lines, reporting first {limit}")
            for line_number in lines[:limit]:
                issues.append(
                    RawIssue(line=line_number, message=op.message, severity="major", kind=op.id)
                )
        return issues

    def _is_unguarded(
        self,
        op: RiskyOperation,
        source: PreparedSource,
        context: ScanContext,
        index: int,
        line: str,
    ) -> bool:
        matches = list(op.regex.finditer(line))
        if not matches:
            return False

        line_number = index + 1
        if op.statement and any(
            block.start <= line_number <= block.end for block in context.try_blocks
        ):
            return False
        if context.is_protected(line_number, line):
            return False
        if op.guard == "declared" and self._declares_throws(source, index):
            return False

        return any(not self._guarded(op, match, context) for match in matches)

    @staticmethod
    def _guarded(op: RiskyOperation, match: re.Match, context: ScanContext) -> bool:
        groups = match.groupdict()
        subject = groups.get("subject")

        if op.guard == "null":
            return subject is not None and subject in context.null_checked
        if op.guard == "receiver":
            if subject in _SAFE_RECEIVERS or subject[0].isupper():
                return True
            return subject in context.null_checked
        if op.guard == "bounds":
            index = groups.get("index")
            return (
                index in context.bounded
                or subject in context.bounded
                or index in context.null_checked
                or subject in context.null_checked
            )
        if op.guard == "zero":
            if subject is None:
                return False
            if subject[0].isdigit():
                return float(subject) != 0
            return subject in context.zero_checked
        if op.guard == "type":
            return subject in context.null_checked
        return False

    @staticmethod
    def _declares_throws(source: PreparedSource, index: int) -> bool:
        """True when the nearest method declaration above ``index`` has a throws clause."""
        for j in range(index, -1, -1):
            line = source.masked_lines[j]
            if any(pattern.search(line) for pattern in source.table.function_res):
                return re.search(r"\bthrows\b", line) is not None
        return False
