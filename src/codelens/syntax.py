"""Local syntax checker.

Runs on the masked source so brackets inside strings and comments never
count. It catches the cheap, high-signal mistakes only:

    UNEXPECTED_BRACKET   closer with nothing open
    MISMATCHED_BRACKET   closer of the wrong kind
    UNCLOSED_BRACKET     opener still open at end of input
    MISSING_SEMICOLON    JavaScript/TypeScript declarations and returns
    MISSING_COLON        Python block headers

Remote findings replace these when the enrichment service answers.
"""

import re
from typing import List, Optional, Tuple

from .logging_config import get_logger
from .models import SyntaxFinding, SyntaxReport
from .scanning import PreparedSource

logger = get_logger(__name__)

BRACKETS = {"(": ")", "[": "]", "{": "}"}
CLOSERS = {closer: opener for opener, closer in BRACKETS.items()}

SEMICOLON_LANGUAGES = frozenset({"javascript", "typescript"})
COLON_LANGUAGES = frozenset({"python"})

_STATEMENT = re.compile(r"^\s*(?:return|var|let|const)\b\s+[^;{}\n]+$")
_BLOCK_HEADER = re.compile(
    r"^\s*(if|elif|else|for|while|def|class|try|except|finally|with)\b[^:]*$"
)
# A statement ending in one of these carries on on the next line
_CONTINUATIONS = (",", "(", "[", "+", "-", "*", "/", "=", "&", "|", "?", ":", ".", "\\", "=>")


def _finding(
    line: int,
    column: int,
    message: str,
    code: str,
    severity: str = "error",
    quick_fix: Optional[str] = None,
) -> SyntaxFinding:
    return SyntaxFinding(
        line=line,
        column=column,
        message=message,
        severity=severity,
        type="syntax",
        quick_fix=quick_fix,
        code=code,
    )


class SyntaxChecker:
    """Bracket matching plus per-language statement checks."""

    def check(self, source: PreparedSource) -> SyntaxReport:
        report = SyntaxReport()
        if source.unit.is_blank:
            return report

        stack: List[Tuple[str, int, int]] = []
        language = source.language
        for index, line in enumerate(source.masked_lines):
            number = index + 1
            open_before = len(stack)
            self._match_brackets(line, number, stack, report)
            open_after = len(stack)

            if language in SEMICOLON_LANGUAGES:
                finding = self._missing_semicolon(line, number, open_after > open_before)
                if finding:
                    report.warnings.append(finding)
            elif language in COLON_LANGUAGES and open_before == 0:
                finding = self._missing_colon(line, number, open_after > open_before)
                if finding:
                    report.errors.append(finding)

        for opener, line, column in stack:
            report.errors.append(
                _finding(
                    line,
                    column,
                    f"Unclosed bracket '{opener}'",
                    "UNCLOSED_BRACKET",
                    quick_fix=f"Add closing '{BRACKETS[opener]}'",
                )
            )

        report.errors.sort(key=lambda f: (f.line, f.column))
        logger.debug(
            f"Syntax check ({language}): {len(report.errors)} errors, "
            f"{len(report.warnings)} warnings"
        )
        return report

    @staticmethod
    def _match_brackets(
        line: str, number: int, stack: List[Tuple[str, int, int]], report: SyntaxReport
    ) -> None:
        for column, char in enumerate(line, start=1):
            if char in BRACKETS:
                stack.append((char, number, column))
            elif char in CLOSERS:
                if not stack:
                    report.errors.append(
                        _finding(
                            number, column, f"Unexpected closing bracket '{char}'",
                            "UNEXPECTED_BRACKET",
                        )
                    )
                    continue
                opener, _, _ = stack.pop()
                if BRACKETS[opener] != char:
                    report.errors.append(
                        _finding(
                            number,
                            column,
                            f"Mismatched bracket: expected '{BRACKETS[opener]}' but found '{char}'",
                            "MISMATCHED_BRACKET",
                        )
                    )

    @staticmethod
    def _missing_semicolon(line: str, number: int, opens: bool) -> Optional[SyntaxFinding]:
        stripped = line.rstrip()
        if opens or not _STATEMENT.match(stripped) or stripped.endswith(_CONTINUATIONS):
            return None
        return _finding(
            number,
            len(stripped),
            "Missing semicolon",
            "MISSING_SEMICOLON",
            severity="warning",
            quick_fix="Add semicolon at end of statement",
        )

    @staticmethod
    def _missing_colon(line: str, number: int, opens: bool) -> Optional[SyntaxFinding]:
        stripped = line.rstrip()
        if opens or stripped.endswith("\\") or not _BLOCK_HEADER.match(stripped):
            return None
        return _finding(
            number,
            len(stripped),
            "Missing colon",
            "MISSING_COLON",
            quick_fix="Add colon at end of statement",
        )


# ── Presentation helpers ─────────────────────────────────────────────


def format_syntax_errors(report: SyntaxReport) -> List[str]:
    formatted = [f"Line {e.line}:{e.column} - Error: {e.message}" for e in report.errors]
    formatted.extend(
        f"Line {w.line}:{w.column} - Warning: {w.message}" for w in report.warnings
    )
    return formatted


def get_quick_fixes(report: SyntaxReport) -> List[str]:
    return [f"Line {f.line}: {f.quick_fix}" for f in report.findings if f.quick_fix]


def syntax_summary(report: SyntaxReport, remote: bool = False) -> str:
    errors, warnings = len(report.errors), len(report.warnings)
    mode = "remote" if remote else "local"
    lines = [
        f"Syntax check complete ({mode})",
        f"Found: {errors} errors, {warnings} warnings, {len(report.suggestions)} suggestions",
    ]
    if not errors and not warnings:
        lines.append("No syntax issues detected")
    elif errors:
        lines.append(f"{errors} syntax error{'s' if errors > 1 else ''} found")
    else:
        lines.append(f"{warnings} warning{'s' if warnings > 1 else ''} found")
    return "\n".join(lines)
