"""Rich terminal formatter for codelens."""

import io
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ..models import AnalysisResult
from ..syntax import format_syntax_errors
from .base import BaseFormatter

console = Console(stderr=True)

_GRADE_STYLES = {"A": "green", "B": "cyan", "C": "yellow", "D": "red", "F": "red bold"}
_SECURITY_STYLES = {
    "critical": "red bold",
    "high": "red",
    "medium": "yellow",
    "low": "blue",
    "info": "dim",
}


def _grade_label(grade: str) -> str:
    style = _GRADE_STYLES.get(grade, "white")
    return f"[{style}]{grade}[/{style}]"


def _severity_label(severity: str) -> str:
    if severity == "major":
        return "[red]major[/red]"
    if severity == "minor":
        return "[yellow]minor[/yellow]"
    style = _SECURITY_STYLES.get(severity, "white")
    return f"[{style}]{severity}[/{style}]"


class RichFormatter(BaseFormatter):
    """Rich terminal output with summary panel, violation table, and details."""

    def __init__(self, output: Optional[Console] = None):
        self.console = output or console

    def render(self, result: AnalysisResult, source_name: str = "<stdin>") -> None:
        self._print(self.console, result, source_name)

    def format(self, result: AnalysisResult, source_name: str = "<stdin>") -> str:
        recorder = Console(record=True, width=120, file=io.StringIO())
        self._print(recorder, result, source_name)
        return recorder.export_text()

    # -- private helpers --

    def _print(self, out: Console, result: AnalysisResult, source_name: str) -> None:
        self._print_summary(out, result, source_name)
        self._print_violations(out, result)
        self._print_security(out, result)
        self._print_syntax(out, result)
        self._print_tests(out, result)
        self._print_recommendations(out, result)

    def _print_summary(self, out: Console, result: AnalysisResult, source_name: str) -> None:
        m = result.metrics
        time_, space = result.complexity.time, result.complexity.space
        source = "remote + local" if result.ai_analysis_used else "local"
        summary_text = (
            f"[bold]{escape(source_name)}[/bold]  |  [cyan]{result.language}[/cyan] "
            f"({result.detection.confidence}%)  |  {m.lines_of_code} lines, "
            f"{m.function_count} functions\n"
            f"Grade {_grade_label(result.overall_grade)} "
            f"(score {result.summary.overall_score})  |  "
            f"Time [bold]{time_.notation}[/bold] ({time_.confidence})  |  "
            f"Space [bold]{space.notation}[/bold] ({space.confidence})  |  "
            f"Cyclomatic {m.cyclomatic_complexity}  |  [dim]{source} analysis[/dim]"
        )
        out.print(Panel(summary_text, title="[bold cyan]codelens[/bold cyan]", expand=False))
        out.print()

        for label, rating in (
            ("Cyclomatic", result.cyclomatic_rating),
            ("Maintainability", result.maintainability_rating),
            ("Reliability", result.reliability_rating),
        ):
            if rating is not None:
                out.print(f"  {label:16s} {_grade_label(rating.grade)}  [dim]{rating.description}[/dim]")
        out.print()

    def _print_violations(self, out: Console, result: AnalysisResult) -> None:
        violations = result.violations
        out.print(f"[bold]Violations:[/bold] {violations.summary}")
        if not violations.line_references:
            out.print()
            return

        table = Table(expand=True)
        table.add_column("Line", style="dim", width=6, justify="right")
        table.add_column("Severity", width=9)
        table.add_column("Category", style="cyan", ratio=1)
        table.add_column("Message", ratio=3)
        for issue in violations.line_references:
            table.add_row(
                str(issue.line),
                _severity_label(issue.severity),
                issue.category,
                escape(issue.message),
            )
        out.print(table)
        out.print()

    def _print_security(self, out: Console, result: AnalysisResult) -> None:
        security = result.security
        out.print(
            f"[bold]Security:[/bold] score {security.score} "
            f"({_grade_label(security.grade)})  {security.summary}"
        )
        for finding in security.findings:
            where = f"line {finding.line}" if finding.line else "-"
            out.print(
                f"  {_severity_label(finding.severity)} {escape(finding.title)} "
                f"[dim]({finding.cwe_id}, {where})[/dim]"
            )
            if finding.suggestion:
                out.print(f"    [green]->[/green] {escape(finding.suggestion)}")
        out.print()

    def _print_syntax(self, out: Console, result: AnalysisResult) -> None:
        formatted = format_syntax_errors(result.syntax)
        if not formatted:
            return
        out.print("[bold]Syntax:[/bold]")
        for line in formatted:
            out.print(f"  [red]![/red] {escape(line)}")
        out.print()

    def _print_tests(self, out: Console, result: AnalysisResult) -> None:
        if not result.test_cases:
            return
        table = Table(title="Test Case Skeletons", expand=True)
        table.add_column("Name", style="yellow", ratio=2)
        table.add_column("Category", width=12)
        table.add_column("Priority", width=8)
        table.add_column("Input", ratio=2)
        table.add_column("Expected", ratio=3)
        for case in result.test_cases:
            table.add_row(
                escape(case.name), case.category, case.priority,
                escape(case.input), escape(case.expected_output),
            )
        out.print(table)
        out.print()

    def _print_recommendations(self, out: Console, result: AnalysisResult) -> None:
        if not result.recommendations:
            return
        out.print("[bold]Recommendations:[/bold]")
        for rec in result.recommendations:
            out.print(f"  [green]->[/green] Line {rec.line}: {escape(rec.suggestion)}")
        out.print()

