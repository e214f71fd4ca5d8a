"""Complexity estimator: structural signals to Big-O classes.

Rules fire in a fixed order and each appends a human-readable factor:

    Time:  loop nesting depth -> recursion -> sorting -> known algorithm
           signatures (binary search, divide and conquer, merge sort, matrix)
    Space: dynamic collections -> 2-D allocation -> recursion stack
           -> memoization floor

Exponential recursion is a heuristic: any function whose own body calls
itself more than once is reported as O(2^n) with medium confidence, even
when the two branches only add work (e.g. a tree walk).
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Tuple

from .logging_config import get_logger
from .models import ComplexityAnalysis, ComplexityEstimate, FunctionSpan, Notation
from .scanning import MetricsExtractor, PreparedSource
from .scanning.text import indent_width

logger = get_logger(__name__)

TIME_DESCRIPTIONS = {
    Notation.CONSTANT: "Constant time - excellent performance",
    Notation.LOGARITHMIC: "Logarithmic time - very efficient for large inputs",
    Notation.LINEAR: "Linear time - performance scales with input size",
    Notation.LINEARITHMIC: "Linearithmic time - typical for efficient sorting algorithms",
    Notation.QUADRATIC: "Quadratic time - may become slow for large inputs",
    Notation.CUBIC: "Cubic time - performance degrades quickly with input size",
    Notation.QUARTIC: "Quartic time - impractical beyond small inputs",
    Notation.EXPONENTIAL: "Exponential time - avoid for large inputs",
    Notation.FACTORIAL: "Factorial time - only suitable for very small inputs",
}

SPACE_DESCRIPTIONS = {
    Notation.CONSTANT: "Constant space - minimal memory usage",
    Notation.LOGARITHMIC: "Logarithmic space - efficient memory usage",
    Notation.LINEAR: "Linear space - memory scales with input size",
    Notation.LINEARITHMIC: "Linearithmic space - moderate memory usage",
    Notation.QUADRATIC: "Quadratic space - significant memory requirements",
    Notation.CUBIC: "Cubic space - high memory usage",
    Notation.QUARTIC: "Quartic space - very high memory usage",
    Notation.EXPONENTIAL: "Exponential space - very high memory requirements",
    Notation.FACTORIAL: "Factorial space - extreme memory usage",
}

_LOOP_CALLBACK = re.compile(r"\.(?:forEach|map|filter|reduce|flatMap|some|every)\s*\(")
_LOOP_VARIABLE_PATTERNS = (
    re.compile(r"\bfor\s*\(\s*(?:let\s+|var\s+|const\s+|int\s+|long\s+|auto\s+|size_t\s+)?(\w+)"),
    re.compile(r"\bfor\s+(\w+)\s+in\b"),
    re.compile(r"\bfor\s+(\w+)(?:\s*,\s*\w+)?\s*:="),
)
_COMPREHENSION_FOR = re.compile(r"\bfor\b[^\n]*?\bin\b")
_BODY_START = re.compile(r"[={]|\breturn\b")

_SORT_PATTERNS = (
    re.compile(r"\.sort\s*\("),
    re.compile(r"\bArrays\.sort\b"),
    re.compile(r"\bCollections\.sort\b"),
    re.compile(r"\bsorted\s*\("),
    re.compile(r"\bsort\s*\("),
    re.compile(r"quicksort|mergesort|heapsort|bubblesort", re.IGNORECASE),
)
_BINARY_SEARCH_PATTERNS = (
    # A bounded while loop that computes a midpoint within the next lines
    re.compile(r"\bwhile\b[^\n]*<[^\n]*\n(?:[^\n]*\n){0,2}[^\n]*\b(?:mid|middle)\b"),
    re.compile(r"\b(?:mid|middle)\s*=[^\n]*\b(?:left|low|lo|start)\b[^\n]*\b(?:right|high|hi|end)\b"),
    re.compile(r"binary_?search", re.IGNORECASE),
)
_DIVIDE_CONQUER_PATTERNS = (
    re.compile(r"divide.*conquer|conquer.*divide", re.IGNORECASE),
    re.compile(r"\bmid\b[^\n]*(?:/\s*2|>>\s*1)"),
)
_MERGE_SORT_PATTERNS = (
    re.compile(r"merge_?sort", re.IGNORECASE),
    re.compile(r"\bmerge\s*\([^\n]*\b(?:left|l)\b[^\n]*\b(?:right|r)\b", re.IGNORECASE),
)
_MATRIX_PATTERNS = (
    re.compile(r"matrix_?multipl", re.IGNORECASE),
    re.compile(r"\w\s*\[[^\]\n]+\]\s*\[[^\]\n]+\]\s*\[[^\]\n]+\]"),
)

_DYNAMIC_COLLECTION_PATTERNS = (
    re.compile(r"\bnew\s+(?:Array|ArrayList|Vector|List|LinkedList)\b"),
    re.compile(r"=\s*\[\s*\]"),
    re.compile(r"\.(?:push|append)\s*\("),
    re.compile(r"\b(?:list|array)\s*\("),
    re.compile(r"\bstd::vector\b|\bVec::new\b|\bmake\s*\(\s*\["),
)
_TWO_D_PATTERNS = (
    re.compile(r"\[\s*\]\s*\[\s*\]"),
    re.compile(r"\bnew\s+\w+\s*\[\s*\w*\s*\]\s*\[\s*\w*\s*\]"),
    re.compile(r"\[\s*\[[^\]\n]*\]\s*for\b"),
    re.compile(r"\b(?:matrix|grid)\b", re.IGNORECASE),
)
_MEMO_PATTERNS = (
    re.compile(r"\b(?:memo\w*|cache\w*|dp)\s*\[", re.IGNORECASE),
    re.compile(r"\bmemo(?:ize|ization)?\b", re.IGNORECASE),
    re.compile(r"\b(?:HashMap|Map|Dictionary)\b"),
    re.compile(r"@(?:functools\.)?(?:lru_cache|cache)\b"),
)


@dataclass
class RecursionInfo:
    recursive: List[str] = field(default_factory=list)
    exponential: List[str] = field(default_factory=list)

    @property
    def is_recursive(self) -> bool:
        return bool(self.recursive)

    @property
    def is_exponential(self) -> bool:
        return bool(self.exponential)


def _any(patterns, text: str) -> bool:
    return any(p.search(text) for p in patterns)


def _raise_to(estimate: ComplexityEstimate, notation: Notation) -> bool:
    if estimate.notation.rank < notation.rank:
        estimate.notation = notation
        return True
    return False


class ComplexityEstimator:
    """Estimates time and space complexity of a prepared source unit."""

    def __init__(self, metrics_extractor: MetricsExtractor | None = None):
        self.metrics_extractor = metrics_extractor or MetricsExtractor()

    def estimate(self, source: PreparedSource) -> ComplexityAnalysis:
        if source.unit.is_blank:
            return ComplexityAnalysis(
                time=ComplexityEstimate(description=TIME_DESCRIPTIONS[Notation.CONSTANT]),
                space=ComplexityEstimate(description=SPACE_DESCRIPTIONS[Notation.CONSTANT]),
            )
        recursion = self.analyze_recursion(source)
        time = self.time_complexity(source, recursion)
        space = self.space_complexity(source, recursion)
        logger.debug(f"Complexity: time {time.notation}, space {space.notation}")
        return ComplexityAnalysis(time=time, space=space)

    # ── Time ─────────────────────────────────────────────────────────

    def time_complexity(
        self, source: PreparedSource, recursion: RecursionInfo
    ) -> ComplexityEstimate:
        text = source.masked
        est = ComplexityEstimate()
        factors = est.factors

        depth = self.loop_depth(source)
        variables = self.loop_variables(text)
        if depth >= 4:
            est.notation = Notation.QUARTIC
            factors.append(f"Quartic complexity detected ({depth}-level nested loops)")
        elif depth == 3:
            est.notation = Notation.CUBIC
            factors.append(f"Cubic complexity from {depth}-level nested loops")
            factors.append(f"Loop variables: {', '.join(variables)}")
        elif depth == 2:
            est.notation = Notation.QUADRATIC
            factors.append("Quadratic complexity from nested loops")
            if variables:
                factors.append(f"Independent variables: {', '.join(variables)}")
        elif depth == 1:
            est.notation = Notation.LINEAR
            factors.append("Linear complexity from single loops")

        if recursion.is_exponential:
            est.notation = Notation.EXPONENTIAL
            est.confidence = "medium"
            factors.append("Exponential recursion detected (e.g., naive Fibonacci)")
            factors.append(
                "Heuristic: more than one self-call per body; additive branches may be O(n)"
            )
        elif recursion.is_recursive:
            _raise_to(est, Notation.LINEAR)
            factors.append("Recursive calls detected")

        if _any(_SORT_PATTERNS, text) and est.notation in (Notation.CONSTANT, Notation.LINEAR):
            est.notation = Notation.LINEARITHMIC
            factors.append("Sorting operations detected")

        # Known signatures refine the loop and recursion estimate
        loose = est.notation in (Notation.CONSTANT, Notation.LINEAR) or recursion.is_exponential
        if _any(_BINARY_SEARCH_PATTERNS, text) and loose:
            est.notation = Notation.LOGARITHMIC
            est.confidence = "high"
            factors.append("Binary search pattern detected")
        elif _any(_DIVIDE_CONQUER_PATTERNS, text) and est.notation == Notation.CONSTANT:
            est.notation = Notation.LOGARITHMIC
            factors.append("Binary search or divide-and-conquer pattern detected")

        if _any(_MERGE_SORT_PATTERNS, text) and (
            recursion.is_exponential or est.notation.rank < Notation.LINEARITHMIC.rank
        ):
            est.notation = Notation.LINEARITHMIC
            est.confidence = "medium"
            factors.append("Merge sort or divide-and-conquer pattern detected")

        if _any(_MATRIX_PATTERNS, text) and _raise_to(est, Notation.CUBIC):
            est.confidence = "medium"
            factors.append("Matrix multiplication or 3D operations detected")

        est.description = TIME_DESCRIPTIONS[est.notation]
        return est

    def loop_depth(self, source: PreparedSource) -> int:
        """Deepest syntactic nesting of loop constructs."""
        if source.table.uses_braces:
            return self._brace_loop_depth(source)
        return self._indent_loop_depth(source)

    def _brace_loop_depth(self, source: PreparedSource) -> int:
        keywords = "|".join(re.escape(k) for k in source.table.table.loop_keywords)
        token_re = re.compile(
            rf"\b(?:{keywords})\b|{_LOOP_CALLBACK.pattern}|[{{}}();]"
        )
        braces: List[int] = []  # loops opened by each open brace
        # Loop headers seen but not yet given a body: (paren depth, is callback)
        pending: List[Tuple[int, bool]] = []
        paren_depth = 0
        current = 0
        deepest = 0

        for match in token_re.finditer(source.masked):
            token = match.group(0)
            if token == "(":
                paren_depth += 1
            elif token == ")":
                paren_depth = max(0, paren_depth - 1)
                if pending and pending[-1][1] and paren_depth == pending[-1][0]:
                    # Callback closed with an expression body
                    deepest = max(deepest, current + len(pending))
                    pending.pop()
            elif token == "{":
                braces.append(len(pending))
                current += len(pending)
                deepest = max(deepest, current)
                pending.clear()
            elif token == "}":
                if braces:
                    current -= braces.pop()
            elif token == ";":
                if pending and paren_depth <= pending[0][0]:
                    # Braceless body ends here
                    deepest = max(deepest, current + len(pending))
                    pending.clear()
            elif token.startswith("."):
                # The callback's own "(" is part of the token
                if not pending or pending[-1][1] or paren_depth <= pending[-1][0]:
                    pending.append((paren_depth, True))
                paren_depth += 1
            else:
                pending.append((paren_depth, False))

        # Headers never followed by a body still count
        return max(deepest, current + len(pending))

    def _indent_loop_depth(self, source: PreparedSource) -> int:
        keywords = "|".join(re.escape(k) for k in source.table.table.loop_keywords)
        loop_re = re.compile(rf"^\s*(?:async\s+)?(?:{keywords})\b")
        stack: List[int] = []
        deepest = 0
        for line in source.masked_lines:
            if not line.strip():
                continue
            width = indent_width(line)
            while stack and stack[-1] >= width:
                stack.pop()
            if loop_re.match(line):
                stack.append(width)
                inline = max(0, len(_COMPREHENSION_FOR.findall(line)) - 1)
                deepest = max(deepest, len(stack) + inline)
            else:
                inline = len(_COMPREHENSION_FOR.findall(line))
                if inline:
                    deepest = max(deepest, len(stack) + inline)
        return deepest

    @staticmethod
    def loop_variables(text: str) -> List[str]:
        seen: List[str] = []
        for pattern in _LOOP_VARIABLE_PATTERNS:
            for name in pattern.findall(text):
                if name not in seen:
                    seen.append(name)
        return seen

    # ── Recursion ────────────────────────────────────────────────────

    def analyze_recursion(self, source: PreparedSource) -> RecursionInfo:
        info = RecursionInfo()
        for span in self.metrics_extractor.find_functions(source):
            calls = self._self_calls(source, span)
            if calls:
                info.recursive.append(span.name)
            if calls > 1:
                info.exponential.append(span.name)
        return info

    @staticmethod
    def _self_calls(source: PreparedSource, span: FunctionSpan) -> int:
        """Count calls to ``span.name`` inside its own body.

        On the declaration line, a name that appears before any ``=``,
        ``{`` or ``return`` is the declaration itself, not a call.
        """
        call_re = re.compile(rf"\b{re.escape(span.name)}\s*\(")
        body_lines = source.masked_lines[span.start_line - 1 : span.end_line]
        if not body_lines:
            return 0
        head, rest = body_lines[0], body_lines[1:]
        first = call_re.search(head)
        if first and not _BODY_START.search(head[: first.start()]):
            head = head[first.end() :]
        return len(call_re.findall("\n".join([head, *rest])))

    # ── Space ────────────────────────────────────────────────────────

    def space_complexity(
        self, source: PreparedSource, recursion: RecursionInfo
    ) -> ComplexityEstimate:
        text = source.masked
        est = ComplexityEstimate()
        factors = est.factors

        if _any(_DYNAMIC_COLLECTION_PATTERNS, text):
            est.notation = Notation.LINEAR
            factors.append("Dynamic arrays or lists allocated")

        if _any(_TWO_D_PATTERNS, text):
            est.notation = Notation.QUADRATIC
            factors.append("2D arrays or matrices allocated")

        if recursion.is_exponential:
            est.notation = Notation.EXPONENTIAL
            est.confidence = "medium"
            factors.append("Exponential recursive calls (high stack usage)")
        elif recursion.is_recursive and _raise_to(est, Notation.LINEAR):
            factors.append("Recursive calls (linear stack usage)")

        if _any(_MEMO_PATTERNS, text):
            _raise_to(est, Notation.LINEAR)
            factors.append("Memoization detected (additional space for caching)")

        est.description = SPACE_DESCRIPTIONS[est.notation]
        return est
