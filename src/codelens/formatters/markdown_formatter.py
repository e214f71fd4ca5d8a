"""Markdown formatter for codelens."""

from typing import List

from ..models import AnalysisResult
from ..syntax import format_syntax_errors
from .base import BaseFormatter


def _table(header: List[str], rows: List[List[str]]) -> List[str]:
    lines = ["| " + " | ".join(header) + " |", "|" + "---|" * len(header)]
    lines.extend("| " + " | ".join(row) + " |" for row in rows)
    return lines


class MarkdownFormatter(BaseFormatter):
    """Render an analysis result as a Markdown document."""

    def render(self, result: AnalysisResult, source_name: str = "<stdin>") -> None:
        print(self.format(result, source_name))

    def format(self, result: AnalysisResult, source_name: str = "<stdin>") -> str:
        m = result.metrics
        out = [
            f"# codelens report: {source_name}",
            "",
            f"**Language:** {result.language} (confidence {result.detection.confidence})  ",
            f"**Overall grade:** {result.overall_grade} "
            f"(score {result.summary.overall_score}, priority {result.summary.priority_level})",
            "",
            "## Metrics",
            "",
        ]
        out.extend(
            _table(
                ["Metric", "Value"],
                [
                    ["Lines of code", str(m.lines_of_code)],
                    ["Code lines", str(m.code_lines)],
                    ["Comment lines", f"{m.comment_lines} ({m.comment_percentage:.1f}%)"],
                    ["Functions", str(m.function_count)],
                    ["Average function length", f"{m.average_function_length:.1f}"],
                    ["Max nesting depth", str(m.max_nesting_depth)],
                    ["Cyclomatic complexity", str(m.cyclomatic_complexity)],
                ],
            )
        )

        time_, space = result.complexity.time, result.complexity.space
        out += ["", "## Complexity", ""]
        out.append(f"- **Time:** {time_.notation} ({time_.confidence}) - {time_.description}")
        out.extend(f"  - {factor}" for factor in time_.factors)
        out.append(f"- **Space:** {space.notation} ({space.confidence}) - {space.description}")
        out.extend(f"  - {factor}" for factor in space.factors)

        out += ["", "## Violations", "", result.violations.summary, ""]
        out.append(result.violations.report_markdown)
        if result.violations.line_references:
            out.append("")
            out.extend(
                _table(
                    ["Line", "Severity", "Category", "Message"],
                    [
                        [str(i.line), i.severity, i.category, i.message]
                        for i in result.violations.line_references
                    ],
                )
            )

        syntax = format_syntax_errors(result.syntax)
        if syntax:
            out += ["", "## Syntax", ""]
            out.extend(f"- {line}" for line in syntax)

        out += ["", "## Security", "", f"Score {result.security.score} ({result.security.grade}): "
                f"{result.security.summary}"]
        for finding in result.security.findings:
            where = f" (line {finding.line})" if finding.line else ""
            out.append(
                f"- **{finding.severity.upper()}** {finding.title}{where} "
                f"[{finding.cwe_id}] - {finding.suggestion}"
            )

        if result.test_cases:
            out += ["", "## Test Case Skeletons", ""]
            out.extend(
                _table(
                    ["Name", "Category", "Priority", "Input", "Expected"],
                    [
                        [t.name, t.category, t.priority, f"`{t.input}`", t.expected_output]
                        for t in result.test_cases
                    ],
                )
            )

        if result.recommendations:
            out += ["", "## Recommendations", ""]
            out.extend(f"- Line {r.line}: {r.suggestion}" for r in result.recommendations)

        if result.remote is not None:
            r = result.remote
            out += [
                "",
                "## Remote Assessment",
                "",
                f"- Time {r.time_complexity}, space {r.space_complexity}, "
                f"cyclomatic {r.cyclomatic_complexity}",
                f"- Maintainability {r.maintainability}, readability {r.readability}, "
                f"overall {r.overall_score}",
            ]
        return "\n".join(out) + "\n"
