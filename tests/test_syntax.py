"""Tests for the local syntax checker."""

import pytest

from codelens.models import SyntaxFinding, SyntaxReport
from codelens.syntax import SyntaxChecker, format_syntax_errors, get_quick_fixes, syntax_summary


@pytest.fixture
def check(prepared):
    def _check(code, language="javascript"):
        return SyntaxChecker().check(prepared(code, language))

    return _check


def _codes(findings):
    return [f.code for f in findings]


class TestBrackets:
    def test_unclosed(self, check):
        report = check("function f() {\n  return 1;")
        (error,) = report.errors
        assert error.code == "UNCLOSED_BRACKET"
        assert (error.line, error.column) == (1, 14)
        assert error.quick_fix == "Add closing '}'"
        assert report.has_errors

    def test_unexpected(self, check):
        report = check("}")
        assert _codes(report.errors) == ["UNEXPECTED_BRACKET"]

    def test_mismatched(self, check):
        report = check("foo(1];")
        assert _codes(report.errors) == ["MISMATCHED_BRACKET"]
        assert report.errors[0].message == "Mismatched bracket: expected ')' but found ']'"

    def test_brackets_in_strings_and_comments(self, check):
        report = check('const s = "(((";\n// }}}\nconst t = 1;')
        assert report.errors == []

    def test_balanced(self, check):
        assert not check("function f(a) {\n  return [a, {b: 1}];\n}").has_errors


class TestStatements:
    def test_missing_semicolon_warning(self, check):
        report = check("let x = 5")
        (warning,) = report.warnings
        assert warning.code == "MISSING_SEMICOLON"
        assert warning.severity == "warning"
        assert not report.has_errors
        assert report.has_warnings

    def test_continued_statement(self, check):
        assert check("const total = a +\n  b;").warnings == []

    def test_opening_statement(self, check):
        assert check("const a = [\n  1,\n];").warnings == []

    def test_python_missing_colon(self, check):
        report = check("def f()\n    return 1", "python")
        (error,) = report.errors
        assert error.code == "MISSING_COLON"
        assert get_quick_fixes(report) == ["Line 1: Add colon at end of statement"]

    def test_python_block_headers(self, check):
        code = "for item in items:\n    if item:\n        print(item)\n    else:\n        pass"
        assert check(code, "python").findings == []

    def test_no_semicolon_rule_for_python(self, check):
        assert check("x = 5", "python").warnings == []

    def test_blank_source(self, check):
        report = check("  \n ")
        assert report.findings == []


class TestPresentation:
    def test_format(self):
        report = SyntaxReport(
            errors=[
                SyntaxFinding(
                    line=2,
                    column=3,
                    message="Unclosed bracket '('",
                    severity="error",
                    type="syntax",
                    code="UNCLOSED_BRACKET",
                )
            ],
            warnings=[
                SyntaxFinding(
                    line=4,
                    column=9,
                    message="Missing semicolon",
                    severity="warning",
                    type="syntax",
                    code="MISSING_SEMICOLON",
                )
            ],
        )
        assert format_syntax_errors(report) == [
            "Line 2:3 - Error: Unclosed bracket '('",
            "Line 4:9 - Warning: Missing semicolon",
        ]
        summary = syntax_summary(report)
        assert "Syntax check complete (local)" in summary
        assert "1 syntax error found" in summary

    def test_summary_clean(self):
        summary = syntax_summary(SyntaxReport(), remote=True)
        assert "(remote)" in summary
        assert "No syntax issues detected" in summary
