"""Tests for the aggregation pipeline."""

from codelens.aggregation import (
    aggregate,
    build_report,
    categorize,
    choose,
    deduplicate,
    is_similar,
    is_subset,
    to_code_smells,
)
from codelens.detectors import RawIssue

JSON_PARSE = RawIssue(
    line=1,
    message="Unhandled JSON.parse could throw on invalid JSON",
    severity="major",
    kind="json-parse",
)
UNUSED = RawIssue(line=1, message="Unused variable 'data'", severity="minor", kind="unused-variables")
NESTING = RawIssue(
    line=4,
    message="Deep nesting (level 5) - consider extracting nested blocks into helper methods",
    severity="major",
    kind="deep-nesting",
)
ERROR_HANDLING = RawIssue(
    line=4,
    message="Missing error handling - consider adding try-catch blocks for robust code",
    severity="major",
    kind="missing-error-handling",
)


class TestSimilarity:
    def test_containment(self):
        assert is_similar("Magic number", "Magic number 42 - replace with named constant")

    def test_canonical_group(self):
        assert is_similar(
            "Array access without bounds checking",
            "Potential ArrayIndexOutOfBoundsException without bounds check",
        )

    def test_unrelated(self):
        assert not is_similar(JSON_PARSE.message, UNUSED.message)

    def test_subset_requires_much_shorter_message(self):
        assert is_subset("Deep nesting", NESTING.message)
        assert not is_subset("Deep nesting level 5", "Deep nesting (level 5)")


class TestChoose:
    def test_priority_keyword_beats_length(self):
        assert choose([ERROR_HANDLING, NESTING]) is NESTING

    def test_longer_message_without_priority(self):
        assert choose([UNUSED, JSON_PARSE]) is JSON_PARSE


class TestDeduplicate:
    def test_one_issue_per_line(self):
        issues = deduplicate([NESTING, UNUSED, ERROR_HANDLING, JSON_PARSE])
        assert [i.line for i in issues] == [1, 4]

    def test_merge_keeps_specific_message_and_escalates(self):
        (issue,) = deduplicate([UNUSED, JSON_PARSE])
        assert issue.message == JSON_PARSE.message
        assert issue.severity == "major"
        assert issue.type == "json-parse"
        assert issue.category == "Unhandled parsing"

    def test_similar_messages_collapse(self):
        short = RawIssue(line=2, message="Magic number", severity="minor", kind="magic-numbers")
        long = RawIssue(
            line=2,
            message="Magic number 42 - replace with named constant",
            severity="minor",
            kind="magic-numbers",
        )
        (issue,) = deduplicate([short, long])
        assert issue.message == long.message
        assert issue.severity == "minor"

    def test_empty(self):
        assert deduplicate([]) == []


class TestCategorize:
    def test_known_categories(self):
        assert categorize(NESTING.message) == "Deep nesting"
        assert categorize("Long function (31 lines)") == "Long functions"
        assert categorize(UNUSED.message) == "Unused variables"
        assert categorize("Awaited promise without error handling") == "Unhandled promises"

    def test_fallback_uses_leading_words(self):
        assert categorize("Something odd happened here") == "Something odd happened"


class TestReport:
    def test_counts_categories_not_lines(self):
        report = aggregate([JSON_PARSE, UNUSED, NESTING, ERROR_HANDLING])
        assert report.major_count == 2
        assert report.minor_count == 0
        assert report.total == 2
        assert set(report.categories) == {"Unhandled parsing", "Deep nesting"}

    def test_summary_and_markdown(self):
        unused = RawIssue(line=2, message="Unused variable 'x'", severity="minor", kind="unused-variables")
        report = build_report(deduplicate([JSON_PARSE, unused]))
        assert report.summary == "1 major and 1 minor violation categories across 2 lines"
        assert report.report_markdown == (
            "### Major Violations (1)\n"
            "- **Unhandled parsing** (1 instance)\n"
            "\n"
            "### Minor Violations (1)\n"
            "- **Unused variables** (1 instance)"
        )

    def test_empty_report(self):
        report = build_report([])
        assert report.total == 0
        assert report.summary == "No violations found"
        assert report.line_references == []


class TestCodeSmells:
    def test_known_smells_only(self):
        analysis = to_code_smells([JSON_PARSE, NESTING, NESTING, UNUSED])
        assert [s.type for s in analysis.smells] == ["unused-variables", "deep-nesting"]
        assert analysis.summary == {"total": 2, "major": 1, "minor": 1}
        assert set(analysis.categories) == {"Maintainability", "Structural Issues"}
        assert analysis.smells[1].suggestion == "Extract nested logic into separate methods"

    def test_unlisted_smell_category(self):
        todo = RawIssue(line=3, message="TODO/FIXME comments found", severity="minor", kind="todo-comment")
        assert set(to_code_smells([todo]).categories) == {"General"}
