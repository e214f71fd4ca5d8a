"""Data models for codelens"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Tuple


# Severity vocabularies are kept apart per subsystem
ViolationSeverity = Literal["major", "minor"]
SecuritySeverity = Literal["critical", "high", "medium", "low", "info"]
SyntaxSeverity = Literal["error", "warning", "info"]

Grade = Literal["A", "B", "C", "D"]
ConfidenceLevel = Literal["high", "medium", "low"]
CodeSize = Literal["small", "medium", "large"]


class Notation(str, Enum):
    """Big-O classes, declared from cheapest to most expensive."""

    CONSTANT = "O(1)"
    LOGARITHMIC = "O(log n)"
    LINEAR = "O(n)"
    LINEARITHMIC = "O(n log n)"
    QUADRATIC = "O(n²)"
    CUBIC = "O(n³)"
    QUARTIC = "O(n⁴)"
    EXPONENTIAL = "O(2^n)"
    FACTORIAL = "O(n!)"

    @property
    def rank(self) -> int:
        return _NOTATION_ORDER.index(self)

    def __str__(self) -> str:
        return self.value


_NOTATION_ORDER = list(Notation)


@dataclass(frozen=True)
class SourceUnit:
    """Source text plus its language tag. Immutable analysis input."""

    text: str
    language: str
    lines: Tuple[str, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "lines", tuple(self.text.split("\n")))

    @property
    def is_blank(self) -> bool:
        return not self.text.strip()


@dataclass
class LanguageMatch:
    language: str
    confidence: int


@dataclass
class DetectionResult:
    """Outcome of language classification"""

    language: str
    confidence: int
    alternatives: List[LanguageMatch] = field(default_factory=list)
    reason: str = ""


@dataclass
class FunctionSpan:
    """A function located by the metrics scan (1-based inclusive lines)."""

    name: str
    start_line: int
    end_line: int

    @property
    def length(self) -> int:
        return self.end_line - self.start_line + 1


@dataclass
class Metrics:
    """Line-oriented size and structure measurements"""

    lines_of_code: int = 0
    code_lines: int = 0
    comment_lines: int = 0
    comment_percentage: float = 0.0
    function_count: int = 0
    average_function_length: float = 0.0
    max_nesting_depth: int = 0
    cyclomatic_complexity: int = 1
    functions: List[FunctionSpan] = field(default_factory=list)


@dataclass
class ComplexityEstimate:
    notation: Notation = Notation.CONSTANT
    confidence: ConfidenceLevel = "high"
    description: str = ""
    factors: List[str] = field(default_factory=list)


@dataclass
class ComplexityAnalysis:
    time: ComplexityEstimate = field(default_factory=ComplexityEstimate)
    space: ComplexityEstimate = field(default_factory=ComplexityEstimate)


@dataclass
class Issue:
    """A single violation anchored to a line."""

    line: int
    message: str
    severity: ViolationSeverity
    category: str = ""
    type: str = ""
    column: Optional[int] = None


@dataclass
class ViolationReport:
    """Deduplicated violations: at most one entry per line."""

    major_count: int = 0
    minor_count: int = 0
    line_references: List[Issue] = field(default_factory=list)
    categories: Dict[str, List[Issue]] = field(default_factory=dict)
    summary: str = ""
    report_markdown: str = ""

    @property
    def total(self) -> int:
        return self.major_count + self.minor_count


@dataclass
class CodeSmell:
    type: str
    severity: ViolationSeverity
    description: str
    line: int
    suggestion: str = ""
    impact: str = ""


@dataclass
class CodeSmellsAnalysis:
    smells: List[CodeSmell] = field(default_factory=list)
    summary: Dict[str, int] = field(default_factory=dict)
    categories: Dict[str, List[CodeSmell]] = field(default_factory=dict)


@dataclass
class SecurityFinding:
    """A matched vulnerability signature"""

    id: str
    title: str
    severity: SecuritySeverity
    category: str
    cwe_id: str
    pattern: str
    suggestion: str
    example: str = ""
    description: str = ""
    owasp_category: str = ""
    line: Optional[int] = None


@dataclass
class SecurityReport:
    findings: List[SecurityFinding] = field(default_factory=list)
    score: int = 100
    grade: str = "A"
    summary: str = ""


@dataclass
class AdvisoryFinding:
    """Performance or quality remark, usually from the enrichment service."""

    message: str
    severity: SecuritySeverity = "info"
    line: Optional[int] = None
    suggestion: str = ""
    impact: str = ""


@dataclass
class SyntaxFinding:
    line: int
    column: int
    message: str
    severity: SyntaxSeverity
    type: str
    quick_fix: Optional[str] = None
    code: str = "SYNTAX_ISSUE"


@dataclass
class SyntaxReport:
    """Syntax findings split by severity"""

    errors: List[SyntaxFinding] = field(default_factory=list)
    warnings: List[SyntaxFinding] = field(default_factory=list)
    suggestions: List[SyntaxFinding] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)

    @property
    def findings(self) -> List[SyntaxFinding]:
        return [*self.errors, *self.warnings, *self.suggestions]


@dataclass
class TestCaseSkeleton:
    """A generated test case stub. Expected outputs are descriptions."""

    __test__ = False  # not a pytest class

    name: str
    description: str
    input: str
    expected_output: str
    category: str
    priority: Literal["high", "medium", "low"] = "medium"


@dataclass
class QualityRating:
    grade: Grade
    description: str
    score: int = 0
    reason: str = ""
    issues: List[str] = field(default_factory=list)
    improvements: List[str] = field(default_factory=list)


@dataclass
class Summary:
    overall_score: int = 100
    strengths: List[str] = field(default_factory=list)
    weaknesses: List[str] = field(default_factory=list)
    quick_fixes: List[str] = field(default_factory=list)
    long_term_goals: List[str] = field(default_factory=list)
    priority_level: Literal["low", "medium", "high", "critical"] = "low"


@dataclass
class Insights:
    complexity_level: Literal["simple", "moderate", "complex", "very-complex"] = "simple"
    maintenance_effort: Literal["low", "medium", "high"] = "low"
    test_coverage: Literal["poor", "fair", "good", "excellent"] = "poor"
    readability_score: int = 100
    technical_debt: Literal["low", "medium", "high", "very-high"] = "low"


@dataclass
class Recommendation:
    """Advice attached to one line reference."""

    rule: str
    suggestion: str
    category: str = "General"
    line: Optional[int] = None


@dataclass
class RemoteAssessment:
    """Complexity and quality figures reported by the enrichment service."""

    cyclomatic_complexity: int = 5
    time_complexity: str = "O(n)"
    space_complexity: str = "O(1)"
    maintainability: int = 70
    readability: int = 75
    overall_score: int = 70


@dataclass
class AnalysisResult:
    """Top-level report returned by ``analyze``."""

    language: str
    detection: Optional[DetectionResult] = None
    metrics: Metrics = field(default_factory=Metrics)
    complexity: ComplexityAnalysis = field(default_factory=ComplexityAnalysis)
    violations: ViolationReport = field(default_factory=ViolationReport)
    code_smells: CodeSmellsAnalysis = field(default_factory=CodeSmellsAnalysis)
    security: SecurityReport = field(default_factory=SecurityReport)
    test_cases: List[TestCaseSkeleton] = field(default_factory=list)
    syntax: SyntaxReport = field(default_factory=SyntaxReport)
    performance: List[AdvisoryFinding] = field(default_factory=list)

    cyclomatic_rating: Optional[QualityRating] = None
    maintainability_rating: Optional[QualityRating] = None
    reliability_rating: Optional[QualityRating] = None
    overall_grade: Grade = "A"
    summary: Summary = field(default_factory=Summary)
    insights: Insights = field(default_factory=Insights)
    recommendations: List[Recommendation] = field(default_factory=list)
    remote: Optional[RemoteAssessment] = None

    # Metadata
    timestamp: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
    code_size: CodeSize = "small"
    ai_analysis_used: bool = False
    analysis_time_ms: float = 0.0

    def __post_init__(self) -> None:
        if self.detection is None:
            self.detection = DetectionResult(language=self.language, confidence=0)

    @property
    def issue_count(self) -> int:
        return self.violations.total

    def to_dict(self) -> Dict[str, Any]:
        from dataclasses import asdict

        return asdict(self)
