"""Aggregation: raw detector output -> one Issue per line -> ViolationReport.

The pipeline is a chain of pure functions:

    deduplicate(raw)      group by line, merge similar messages, escalate severity
    categorize(message)   keyword table -> human-readable category
    build_report(issues)  counts, category map, summary and Markdown report
    to_code_smells(raw)   smell inventory with suggestions and impact

``aggregate(raw)`` runs the first three.
"""

from __future__ import annotations

import re
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .detectors import RawIssue
from .logging_config import get_logger
from .models import CodeSmell, CodeSmellsAnalysis, Issue, ViolationReport

logger = get_logger(__name__)

# Two messages sharing one of these groups describe the same problem
CANONICAL_GROUPS = ("nesting", "array", "null", "division")

# Concepts for which a much shorter message is a less specific duplicate
SUBSET_KEYWORDS = (
    "nesting", "error handling", "array", "null", "division", "magic number",
    "variable name", "redundant", "inefficient",
)
SUBSET_RATIO = 0.7

# Highest priority first; a line showing several keeps the first listed
PRIORITY_KEYWORDS = ("nesting", "error handling", "division", "null")

# Order matters: first match wins
CATEGORY_RULES: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("nesting",), "Deep nesting"),
    (("long function", "function length"), "Long functions"),
    (("await", "promise"), "Unhandled promises"),
    (("error handling",), "Missing error handling"),
    (("comment", "documentation"), "Insufficient comments"),
    (("magic number", "constant"), "Magic numbers"),
    (("unused variable",), "Unused variables"),
    (("variable name", "naming"), "Non-descriptive variable names"),
    (("duplicate",), "Duplicate code"),
    (("unreachable",), "Dead code"),
    (("array", "bounds"), "Unsafe array access"),
    (("null",), "Null reference risk"),
    (("division", "arithmeticexception"), "Division by zero risk"),
    (("json",), "Unhandled parsing"),
    (("file",), "Unsafe file operations"),
    (("cast",), "Unsafe type casts"),
    (("throw", "raise"), "Uncaught exceptions"),
    (("redundant", "inefficient", "performance"), "Performance concerns"),
    (("debug", "console.log"), "Debug code in production"),
    (("todo", "fixme"), "Unresolved TODOs"),
)

SMELL_GUIDANCE: Dict[str, Tuple[str, str]] = {
    "deep-nesting": (
        "Extract nested logic into separate methods",
        "Reduces code readability and maintainability",
    ),
    "long-method": (
        "Break down into smaller, focused methods",
        "Large methods are harder to understand and test",
    ),
    "magic-numbers": ("Replace with named constant", "Magic numbers reduce code readability"),
    "unused-variables": (
        "Remove unused variable declaration",
        "Unused variables create code clutter",
    ),
    "duplicate-code": (
        "Extract duplicated code into a reusable method",
        "Code duplication increases maintenance burden",
    ),
    "dead-code": ("Remove unreachable code", "Dead code confuses readers and increases file size"),
    "short-variable-name": (
        "Rename to a descriptive identifier",
        "Short names hide the intent of the value",
    ),
    "debug-statement": (
        "Remove debug output or route it through a logger",
        "Debug output clutters production logs",
    ),
    "todo-comment": (
        "Resolve the pending work or track it in an issue",
        "Unresolved TODOs mark incomplete code",
    ),
}

SMELL_CATEGORIES: Dict[str, str] = {
    "deep-nesting": "Structural Issues",
    "long-method": "Structural Issues",
    "large-class": "Structural Issues",
    "duplicate-code": "Code Quality",
    "dead-code": "Code Quality",
    "magic-numbers": "Maintainability",
    "unused-variables": "Maintainability",
    "short-variable-name": "Maintainability",
}

_NON_ALNUM = re.compile(r"[^a-z0-9]")


# ── Similarity ───────────────────────────────────────────────────────


def normalize(message: str) -> str:
    return _NON_ALNUM.sub("", message.lower())


def is_similar(first: str, second: str) -> bool:
    """Equal or contained after normalisation, or in the same canonical group."""
    a, b = normalize(first), normalize(second)
    if a == b or a in b or b in a:
        return True
    low_a, low_b = first.lower(), second.lower()
    return any(group in low_a and group in low_b for group in CANONICAL_GROUPS)


def is_subset(first: str, second: str) -> bool:
    """Same concept, one message much shorter than the other."""
    low_a, low_b = first.lower(), second.lower()
    for keyword in SUBSET_KEYWORDS:
        if keyword in low_a and keyword in low_b:
            if len(first) < len(second) * SUBSET_RATIO or len(second) < len(first) * SUBSET_RATIO:
                return True
    return False


def _priority(message: str) -> int:
    low = message.lower()
    for rank, keyword in enumerate(PRIORITY_KEYWORDS):
        if keyword in low:
            return rank
    return len(PRIORITY_KEYWORDS)


def choose(candidates: Sequence[RawIssue]) -> RawIssue:
    """Pick the representative: priority keyword first, then the longer message."""
    return min(candidates, key=lambda issue: (_priority(issue.message), -len(issue.message)))


def categorize(message: str) -> str:
    low = message.lower()
    for keywords, category in CATEGORY_RULES:
        if any(keyword in low for keyword in keywords):
            return category
    return " ".join(message.split()[:3])


# ── Pipeline ─────────────────────────────────────────────────────────


def deduplicate(raw: Iterable[RawIssue]) -> List[Issue]:
    """Collapse raw findings to at most one Issue per line, sorted by line."""
    by_line: Dict[int, List[RawIssue]] = defaultdict(list)
    for issue in raw:
        by_line[issue.line].append(issue)

    merged: List[Issue] = []
    for line in sorted(by_line):
        group = by_line[line]
        distinct: List[RawIssue] = []
        for issue in group:
            for position, kept in enumerate(distinct):
                if is_similar(kept.message, issue.message) or is_subset(kept.message, issue.message):
                    # The more specific (longer) message survives
                    if len(issue.message) > len(kept.message):
                        distinct[position] = issue
                    break
            else:
                distinct.append(issue)

        chosen = choose(distinct)
        severity = "major" if any(i.severity == "major" for i in group) else "minor"
        merged.append(
            Issue(
                line=line,
                message=chosen.message,
                severity=severity,
                category=categorize(chosen.message),
                type=chosen.kind,
            )
        )
    return merged


def _instances(count: int) -> str:
    return f"{count} {'instance' if count == 1 else 'instances'}"


def render_report_markdown(issues: Sequence[Issue]) -> str:
    counts: Dict[Tuple[str, str], int] = defaultdict(int)
    major_categories: List[str] = []
    minor_categories: List[str] = []
    for issue in issues:
        counts[(issue.severity, issue.category)] += 1
        target = major_categories if issue.severity == "major" else minor_categories
        if issue.category not in target:
            target.append(issue.category)

    lines = [f"### Major Violations ({len(major_categories)})"]
    lines.extend(
        f"- **{c}** ({_instances(counts[('major', c)])})" for c in major_categories
    )
    lines.append("")
    lines.append(f"### Minor Violations ({len(minor_categories)})")
    lines.extend(
        f"- **{c}** ({_instances(counts[('minor', c)])})" for c in minor_categories
    )
    return "\n".join(lines)


def build_report(issues: Sequence[Issue]) -> ViolationReport:
    categories: Dict[str, List[Issue]] = {}
    for issue in issues:
        categories.setdefault(issue.category, []).append(issue)

    major = {i.category for i in issues if i.severity == "major"}
    minor = {i.category for i in issues if i.severity == "minor"}

    if issues:
        summary = (
            f"{len(major)} major and {len(minor)} minor violation "
            f"{'category' if len(major) + len(minor) == 1 else 'categories'} "
            f"across {len(issues)} {'line' if len(issues) == 1 else 'lines'}"
        )
    else:
        summary = "No violations found"

    return ViolationReport(
        major_count=len(major),
        minor_count=len(minor),
        line_references=list(issues),
        categories=categories,
        summary=summary,
        report_markdown=render_report_markdown(issues),
    )


def aggregate(raw: Iterable[RawIssue]) -> ViolationReport:
    issues = deduplicate(raw)
    report = build_report(issues)
    logger.debug(f"Aggregated {len(issues)} line issues: {report.summary}")
    return report


# ── Smells ───────────────────────────────────────────────────────────


def smell_category(kind: str) -> str:
    return SMELL_CATEGORIES.get(kind, "General")


def to_code_smells(raw: Iterable[RawIssue]) -> CodeSmellsAnalysis:
    """Smell inventory from the raw findings whose kind is a known smell.

    Identical (kind, line) pairs are reported once.
    """
    seen = set()
    smells: List[CodeSmell] = []
    for issue in sorted(raw, key=lambda i: i.line):
        guidance: Optional[Tuple[str, str]] = SMELL_GUIDANCE.get(issue.kind)
        if guidance is None or (issue.kind, issue.line) in seen:
            continue
        seen.add((issue.kind, issue.line))
        suggestion, impact = guidance
        smells.append(
            CodeSmell(
                type=issue.kind,
                severity=issue.severity,
                description=issue.message,
                line=issue.line,
                suggestion=suggestion,
                impact=impact,
            )
        )

    categories: Dict[str, List[CodeSmell]] = {}
    for smell in smells:
        categories.setdefault(smell_category(smell.type), []).append(smell)

    return CodeSmellsAnalysis(
        smells=smells,
        summary={
            "total": len(smells),
            "major": sum(1 for s in smells if s.severity == "major"),
            "minor": sum(1 for s in smells if s.severity == "minor"),
        },
        categories=categories,
    )
