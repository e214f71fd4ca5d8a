"""Tests for ratings, summary, insights and recommendations."""

import pytest

from codelens.models import (
    AnalysisResult,
    Issue,
    Metrics,
    SyntaxFinding,
    SyntaxReport,
    TestCaseSkeleton,
)
from codelens.scoring import (
    apply_scores,
    build_insights,
    cyclomatic_grade,
    maintainability_index,
    overall_score,
    recommend,
)


def _syntax_error(line=1):
    return SyntaxFinding(
        line=line,
        column=1,
        message="Unclosed bracket '{'",
        severity="error",
        type="syntax",
        quick_fix="Add closing '}'",
        code="UNCLOSED_BRACKET",
    )


class TestScores:
    def test_maintainability_of_trivial_code(self):
        assert maintainability_index(Metrics()) == 100

    def test_maintainability_penalties(self):
        assert maintainability_index(Metrics(cyclomatic_complexity=20)) == 80
        assert maintainability_index(Metrics(max_nesting_depth=5)) == 90
        thin = Metrics(lines_of_code=30, comment_percentage=4.0)
        assert maintainability_index(thin) == 94

    def test_maintainability_clamped(self):
        assert maintainability_index(Metrics(cyclomatic_complexity=200)) == 0

    def test_overall_weights(self):
        assert overall_score(100, 1, 100) == pytest.approx(98.5)

    @pytest.mark.parametrize("cc, grade", [(5, "A"), (12, "B"), (17, "C"), (25, "D")])
    def test_cyclomatic_grade(self, cc, grade):
        assert cyclomatic_grade(cc) == grade


class TestApplyScores:
    def test_empty_result(self):
        result = apply_scores(AnalysisResult(language="javascript"))
        assert result.reliability_rating.score == 95
        assert result.maintainability_rating.grade == "A"
        assert result.overall_grade == "A"
        assert result.summary.overall_score == 97
        assert result.summary.priority_level == "low"
        assert "No syntax errors detected" in result.summary.strengths
        assert result.summary.long_term_goals == ["Add comprehensive test coverage"]

    def test_syntax_error_is_critical(self):
        result = apply_scores(
            AnalysisResult(language="javascript", syntax=SyntaxReport(errors=[_syntax_error()]))
        )
        assert result.summary.priority_level == "critical"
        assert result.summary.quick_fixes == ["Line 1: Add closing '}'"]
        assert result.insights.technical_debt == "very-high"
        assert result.insights.readability_score == 80
        assert result.reliability_rating.score == 87

    def test_returns_new_result(self):
        original = AnalysisResult(language="python")
        scored = apply_scores(original)
        assert scored is not original
        assert original.summary.strengths == []


class TestInsights:
    def test_levels(self):
        result = AnalysisResult(
            language="python",
            metrics=Metrics(cyclomatic_complexity=12),
            test_cases=[
                TestCaseSkeleton(
                    name=f"t{i}", description="", input="", expected_output="", category="normal"
                )
                for i in range(5)
            ],
        )
        insights = build_insights(result, maintainability=60)
        assert insights.complexity_level == "moderate"
        assert insights.maintenance_effort == "medium"
        assert insights.test_coverage == "good"


class TestRecommendations:
    def test_rule_lookup(self):
        issues = [
            Issue(
                line=1,
                message="Unhandled JSON.parse could throw on invalid JSON",
                severity="major",
                category="Unhandled parsing",
            ),
            Issue(
                line=4,
                message="Magic number 42 - replace with named constant",
                severity="minor",
                category="Magic numbers",
            ),
        ]
        advice = recommend(issues)
        assert [a.line for a in advice] == [1, 4]
        assert advice[0].suggestion.startswith("Wrap parsing calls")
        assert advice[1].category == "Magic numbers"

    def test_fallback(self):
        (advice,) = recommend([Issue(line=2, message="Odd thing", severity="minor", category="")])
        assert advice.suggestion == 'Review and improve this "Odd thing" issue for better code quality.'
        assert advice.category == "General"
