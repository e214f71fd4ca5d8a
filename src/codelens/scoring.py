"""Quality ratings, summary, insights and recommendations.

Everything here reads a finished AnalysisResult and derives presentation
level judgements from it:

    maintainability  100, minus penalties for complexity, long functions,
                     deep nesting and thin comments (clamped to 0..100)
    reliability      100, minus per-finding and structural penalties (floor 0)
    overall          maintainability * 0.4 + (100 - cc * 5) * 0.3
                     + reliability * 0.3
"""

from dataclasses import replace
from typing import List, Sequence, Tuple

from .logging_config import get_logger
from .models import (
    AnalysisResult,
    Grade,
    Insights,
    Issue,
    Metrics,
    QualityRating,
    Recommendation,
    Summary,
)
from .syntax import get_quick_fixes

logger = get_logger(__name__)

# (threshold, grade): score strictly above threshold earns the grade
SCORE_BANDS: Tuple[Tuple[int, Grade], ...] = ((85, "A"), (70, "B"), (50, "C"))
MAINTAINABILITY_BANDS: Tuple[Tuple[int, Grade], ...] = ((80, "A"), (60, "B"), (40, "C"))
# (limit, grade): complexity strictly below limit earns the grade
CYCLOMATIC_BANDS: Tuple[Tuple[int, Grade], ...] = ((10, "A"), (15, "B"), (20, "C"))

RELIABILITY_PENALTIES = {
    "major_category": 10,
    "minor_category": 2,
    "major_smell": 5,
    "minor_smell": 2,
    "syntax_error": 8,
    "security": 12,
    "performance": 4,
}

# Order matters: first key contained in the lower-cased message wins
RECOMMENDATION_RULES: Tuple[Tuple[str, str], ...] = (
    # Runtime safety
    ("null", "Ensure the variable is checked for null before use."),
    ("array", "Verify the array index is within valid bounds."),
    ("division", "Add a check to prevent division by zero."),
    ("json", "Wrap parsing calls in error handling to survive invalid input."),
    ("file", "Handle file system errors and release file handles deterministically."),
    ("cast", "Check the runtime type before casting."),
    ("throw", "Catch the exception or declare it so callers can handle it."),
    ("raise", "Catch the exception or document it so callers can handle it."),
    ("promise", "Attach error handling to awaited promises."),
    ("error handling", "Wrap risky code with try-catch blocks to prevent runtime crashes."),
    # Maintainability
    ("magic number", "Replace magic numbers with named constants for better code clarity."),
    ("unused variable", "Remove unused variables to reduce clutter and improve readability."),
    ("duplicate code", "Refactor duplicated logic into reusable functions."),
    ("long function", "Break large functions into smaller, focused units."),
    ("nesting", "Consider refactoring nested blocks into separate functions to improve readability."),
    # Style and readability
    ("comment", "Add function or class-level documentation to improve code understanding."),
    ("variable name", "Rename variables or functions to be more descriptive and intuitive."),
    ("unreachable", "Remove unreachable or obsolete code to keep the codebase clean."),
    ("debug", "Remove debug output before shipping or route it through a logger."),
    ("todo", "Resolve outstanding TODO items or move them to the issue tracker."),
)


def _band(score: float, bands: Sequence[Tuple[int, Grade]]) -> Grade:
    for threshold, grade in bands:
        if score > threshold:
            return grade
    return "D"


def cyclomatic_grade(complexity: int) -> Grade:
    for limit, grade in CYCLOMATIC_BANDS:
        if complexity < limit:
            return grade
    return "D"


# ── Scores ───────────────────────────────────────────────────────────


def maintainability_index(metrics: Metrics) -> int:
    score = 100.0
    score -= max(0, metrics.cyclomatic_complexity - 10) * 2
    score -= max(0.0, metrics.average_function_length - 20) * 0.5
    score -= max(0, metrics.max_nesting_depth - 3) * 5
    if metrics.lines_of_code > 20 and metrics.comment_percentage < 10:
        score -= 10 - metrics.comment_percentage
    return int(round(min(100.0, max(0.0, score))))


def reliability_score(result: AnalysisResult) -> int:
    metrics = result.metrics
    smells = result.code_smells.smells
    cc = metrics.cyclomatic_complexity
    p = RELIABILITY_PENALTIES

    score = 100
    score -= result.violations.major_count * p["major_category"]
    score -= result.violations.minor_count * p["minor_category"]
    score -= sum(1 for s in smells if s.severity == "major") * p["major_smell"]
    score -= sum(1 for s in smells if s.severity == "minor") * p["minor_smell"]
    score -= len(result.syntax.errors) * p["syntax_error"]
    score -= len(result.security.findings) * p["security"]
    score -= len(result.performance) * p["performance"]

    # Structural
    if metrics.max_nesting_depth > 6:
        score -= 5
    if metrics.max_nesting_depth > 8:
        score -= 10
    if metrics.average_function_length > 40:
        score -= 5
    if metrics.average_function_length > 60:
        score -= 10
    if metrics.comment_percentage < 5:
        score -= 5
    if cc > 15:
        score -= 8
    if cc > 25:
        score -= 15
    return max(0, score)


def overall_score(maintainability: int, complexity: int, reliability: int) -> float:
    return maintainability * 0.4 + (100 - complexity * 5) * 0.3 + reliability * 0.3


# ── Ratings ──────────────────────────────────────────────────────────


def rate_cyclomatic(metrics: Metrics) -> QualityRating:
    cc = metrics.cyclomatic_complexity
    issues, improvements = [], []
    if cc >= 10:
        issues.append(f"{cc} independent paths through the code")
        improvements.append("Split branching logic into smaller functions")
    return QualityRating(
        grade=cyclomatic_grade(cc),
        description=f"Cyclomatic Complexity: {cc}",
        score=cc,
        issues=issues,
        improvements=improvements,
    )


def rate_maintainability(metrics: Metrics, index: int) -> QualityRating:
    issues, improvements = [], []
    if metrics.average_function_length > 20:
        issues.append(f"Average function length {metrics.average_function_length:.0f} lines")
        improvements.append("Keep functions short and focused")
    if metrics.max_nesting_depth > 3:
        issues.append(f"Nesting depth {metrics.max_nesting_depth}")
        improvements.append("Flatten nested blocks with early returns")
    if metrics.lines_of_code > 20 and metrics.comment_percentage < 10:
        issues.append(f"Comment density {metrics.comment_percentage:.1f}%")
        improvements.append("Document intent of non-obvious code")
    return QualityRating(
        grade=_band(index, MAINTAINABILITY_BANDS),
        description=f"Maintainability Index: {index}",
        score=index,
        issues=issues,
        improvements=improvements,
    )


def rate_reliability(result: AnalysisResult, score: int) -> QualityRating:
    issues = []
    if result.syntax.errors:
        issues.append(f"{len(result.syntax.errors)} syntax error(s)")
    if result.security.findings:
        issues.append(f"{len(result.security.findings)} security finding(s)")
    if result.violations.major_count:
        issues.append(f"{result.violations.major_count} major violation categories")
    return QualityRating(
        grade=_band(score, SCORE_BANDS),
        description=f"Reliability Score: {score}",
        score=score,
        issues=issues,
    )


# ── Summary and insights ─────────────────────────────────────────────


def build_summary(result: AnalysisResult, maintainability: int, score: float) -> Summary:
    syntax = result.syntax
    cc = result.metrics.cyclomatic_complexity
    major = result.violations.major_count

    strengths = []
    if not syntax.errors:
        strengths.append("No syntax errors detected")
    if cc < 10:
        strengths.append("Low complexity")
    if maintainability > 70:
        strengths.append("Good maintainability")
    if not result.security.findings:
        strengths.append("No known vulnerability patterns")

    weaknesses = []
    if syntax.errors:
        weaknesses.append(f"{len(syntax.errors)} syntax error(s) found")
    if syntax.warnings:
        weaknesses.append(f"{len(syntax.warnings)} warning(s) found")
    if cc > 15:
        weaknesses.append("High complexity")
    if maintainability < 50:
        weaknesses.append("Poor maintainability")

    quick_fixes = get_quick_fixes(syntax)[:3]
    if cc > 15:
        quick_fixes.append("Reduce function complexity")
    if major > 0:
        quick_fixes.append("Fix major violations")

    long_term = []
    if syntax.suggestions:
        long_term.append("Address style suggestions")
    if maintainability < 70:
        long_term.append("Improve code maintainability")
    long_term.append("Add comprehensive test coverage")

    if syntax.errors:
        priority = "critical"
    elif syntax.warnings:
        priority = "high"
    elif major > 0:
        priority = "medium"
    else:
        priority = "low"

    return Summary(
        overall_score=int(round(min(100.0, max(0.0, score)))),
        strengths=strengths,
        weaknesses=weaknesses,
        quick_fixes=quick_fixes,
        long_term_goals=long_term,
        priority_level=priority,
    )


def build_insights(result: AnalysisResult, maintainability: int) -> Insights:
    cc = result.metrics.cyclomatic_complexity
    errors, warnings = len(result.syntax.errors), len(result.syntax.warnings)
    tests = len(result.test_cases)

    if cc < 5:
        complexity = "simple"
    elif cc < 15:
        complexity = "moderate"
    elif cc < 25:
        complexity = "complex"
    else:
        complexity = "very-complex"

    if maintainability > 70:
        effort = "low"
    elif maintainability > 50:
        effort = "medium"
    else:
        effort = "high"

    if tests > 6:
        coverage = "excellent"
    elif tests > 4:
        coverage = "good"
    elif tests > 2:
        coverage = "fair"
    else:
        coverage = "poor"

    if errors:
        debt = "very-high"
    elif warnings > 5:
        debt = "high"
    elif warnings:
        debt = "medium"
    else:
        debt = "low"

    return Insights(
        complexity_level=complexity,
        maintenance_effort=effort,
        test_coverage=coverage,
        readability_score=max(0, 100 - errors * 20 - warnings * 5),
        technical_debt=debt,
    )


def recommend(issues: Sequence[Issue]) -> List[Recommendation]:
    """One recommendation per line reference, from the first matching rule."""
    recommendations = []
    for issue in issues:
        low = issue.message.lower()
        suggestion = next(
            (advice for key, advice in RECOMMENDATION_RULES if key in low),
            f'Review and improve this "{issue.message}" issue for better code quality.',
        )
        recommendations.append(
            Recommendation(
                rule=issue.message,
                suggestion=suggestion,
                category=issue.category or "General",
                line=issue.line,
            )
        )
    return recommendations


def apply_scores(result: AnalysisResult) -> AnalysisResult:
    """Return ``result`` with ratings, grade, summary, insights and advice filled in."""
    metrics = result.metrics
    maintainability = maintainability_index(metrics)
    reliability = reliability_score(result)
    score = overall_score(maintainability, metrics.cyclomatic_complexity, reliability)
    grade = _band(score, SCORE_BANDS)
    logger.debug(
        f"Scores: maintainability={maintainability} reliability={reliability} "
        f"overall={score:.1f} ({grade})"
    )
    return replace(
        result,
        cyclomatic_rating=rate_cyclomatic(metrics),
        maintainability_rating=rate_maintainability(metrics, maintainability),
        reliability_rating=rate_reliability(result, reliability),
        overall_grade=grade,
        summary=build_summary(result, maintainability, score),
        insights=build_insights(result, maintainability),
        recommendations=recommend(result.violations.line_references),
    )
