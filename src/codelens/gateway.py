"""External enrichment gateway.

POSTs ``{"code", "language"}`` to a remote analyzer and folds its answer
into a local AnalysisResult. The gateway never raises to its callers:

    transport error, timeout, non-2xx, no JSON object   -> unavailable
    JSON object that fails validation                  -> Unparsed(raw)
    JSON object that validates                         -> Parsed(payload)

``Unparsed`` responses go through text salvage, which recovers syntax
findings from lines that mention errors, warnings or suggestions. A salvage
that finds nothing counts as unavailable.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, replace
from typing import List, Optional, Union

import httpx
from pydantic import AliasChoices, BaseModel, Field, ValidationError, field_validator

from .config import GatewayConfig
from .exceptions import (
    GatewayError,
    GatewayTimeoutError,
    GatewayUnavailableError,
    MalformedResponseError,
)
from .logging_config import get_logger
from .models import (
    AdvisoryFinding,
    AnalysisResult,
    RemoteAssessment,
    SecurityFinding,
    SyntaxFinding,
    SyntaxReport,
)
from .security import build_security_report

logger = get_logger(__name__)

_FENCE = re.compile(r"```[\w-]*")
_LINE_REF = re.compile(r"line\s*(\d+)", re.IGNORECASE)

_SECURITY_SEVERITIES = ("critical", "high", "medium", "low", "info")
_SEVERITY_ALIASES = {"major": "high", "minor": "low", "error": "high", "warning": "medium"}


def _coerce_severity(value: object) -> str:
    text = str(value or "info").strip().lower()
    text = _SEVERITY_ALIASES.get(text, text)
    return text if text in _SECURITY_SEVERITIES else "info"


# ── Response schema ──────────────────────────────────────────────────


class RemoteSyntaxIssue(BaseModel):
    line: int = 1
    column: int = 1
    message: str = Field(default="", validation_alias=AliasChoices("message", "description"))
    type: str = "syntax"
    code: str = "SYNTAX_ISSUE"
    quick_fix: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("quickFix", "quick_fix")
    )


class RemoteSecurityFinding(BaseModel):
    title: str = Field(default="", validation_alias=AliasChoices("issue", "title"))
    severity: str = "medium"
    description: str = ""
    recommendation: str = Field(
        default="", validation_alias=AliasChoices("recommendation", "suggestion")
    )
    line: Optional[int] = None

    @field_validator("severity", mode="before")
    @classmethod
    def _severity(cls, value: object) -> str:
        return _coerce_severity(value)


class RemotePerformanceFinding(BaseModel):
    issue: str = Field(default="", validation_alias=AliasChoices("issue", "title", "message"))
    impact: str = Field(default="info", validation_alias=AliasChoices("impact", "severity"))
    description: str = ""
    optimization: str = Field(
        default="", validation_alias=AliasChoices("optimization", "suggestion")
    )
    line: Optional[int] = None

    @field_validator("impact", mode="before")
    @classmethod
    def _impact(cls, value: object) -> str:
        return _coerce_severity(value)


class RemoteComplexity(BaseModel):
    cyclomatic_complexity: int = Field(
        default=5, validation_alias=AliasChoices("cyclomaticComplexity", "cyclomatic_complexity")
    )
    time_complexity: str = Field(
        default="O(n)", validation_alias=AliasChoices("timeComplexity", "time_complexity")
    )
    space_complexity: str = Field(
        default="O(1)", validation_alias=AliasChoices("spaceComplexity", "space_complexity")
    )
    maintainability_index: int = Field(
        default=70, validation_alias=AliasChoices("maintainabilityIndex", "maintainability_index")
    )
    readability_score: int = Field(
        default=75, validation_alias=AliasChoices("readabilityScore", "readability_score")
    )


class RemoteQuality(BaseModel):
    overall_score: int = Field(
        default=70, validation_alias=AliasChoices("overallScore", "overall_score")
    )


class GatewayPayload(BaseModel):
    """A validated enrichment response. Missing sections take defaults."""

    errors: List[RemoteSyntaxIssue] = Field(default_factory=list)
    warnings: List[RemoteSyntaxIssue] = Field(default_factory=list)
    suggestions: List[RemoteSyntaxIssue] = Field(default_factory=list)
    security: List[RemoteSecurityFinding] = Field(default_factory=list)
    performance: List[RemotePerformanceFinding] = Field(default_factory=list)
    complexity: RemoteComplexity = Field(default_factory=RemoteComplexity)
    quality: RemoteQuality = Field(default_factory=RemoteQuality)

    @property
    def has_syntax(self) -> bool:
        return bool(self.errors or self.warnings or self.suggestions)


# ── Tagged results ───────────────────────────────────────────────────


@dataclass(frozen=True)
class Parsed:
    payload: GatewayPayload


@dataclass(frozen=True)
class Unparsed:
    raw: str


Decoded = Union[Parsed, Unparsed]


@dataclass(frozen=True)
class GatewayResult:
    """Outcome of one enrichment call. ``decoded`` is None when unavailable."""

    decoded: Optional[Decoded] = None
    reason: str = ""

    @classmethod
    def unavailable(cls, reason: str) -> "GatewayResult":
        return cls(decoded=None, reason=reason)

    @property
    def available(self) -> bool:
        return self.decoded is not None


# ── Decoding ─────────────────────────────────────────────────────────


def extract_json_object(text: str) -> Optional[str]:
    """The outermost ``{...}`` span after removing Markdown code fences."""
    cleaned = _FENCE.sub("", text)
    start, end = cleaned.find("{"), cleaned.rfind("}")
    if start == -1 or end <= start:
        return None
    return cleaned[start : end + 1]


def decode_response(text: str, url: str = "") -> Decoded:
    """Decode a response body.

    Raises:
        MalformedResponseError: No JSON object could be decoded
    """
    candidate = extract_json_object(text)
    if candidate is None:
        raise MalformedResponseError(url, "no JSON object in response")
    try:
        data = json.loads(candidate)
    except json.JSONDecodeError as e:
        raise MalformedResponseError(url, str(e)) from e

    # The service may wrap the payload as {"analysis": {...}}
    if isinstance(data.get("analysis"), dict):
        data = data["analysis"]
    try:
        return Parsed(GatewayPayload.model_validate(data))
    except ValidationError as e:
        logger.debug(f"Enrichment payload failed validation: {e.error_count()} errors")
        return Unparsed(text)


def salvage(raw: str) -> SyntaxReport:
    """Best-effort syntax findings from free text.

    The most recent ``line N`` mention anchors each finding. A line that
    mentions "error" is an error; "warning" or "potential" a warning;
    "suggest" or "recommend" a suggestion.
    """
    report = SyntaxReport()
    current = 1
    for text in raw.split("\n"):
        trimmed = text.strip()
        match = _LINE_REF.search(trimmed)
        if match:
            current = int(match.group(1))
        low = trimmed.lower()
        if "error" in low:
            report.errors.append(
                SyntaxFinding(current, 1, trimmed, "error", "syntax", code="SYNTAX_ERROR")
            )
        elif "warning" in low or "potential" in low:
            report.warnings.append(
                SyntaxFinding(current, 1, trimmed, "warning", "syntax", code="SYNTAX_WARNING")
            )
        elif "suggest" in low or "recommend" in low:
            report.suggestions.append(
                SyntaxFinding(current, 1, trimmed, "info", "style", code="STYLE_SUGGESTION")
            )
    return report


# ── Client ───────────────────────────────────────────────────────────


class EnrichmentGateway:
    """Calls the remote analyzer. ``request`` never raises.

    Args:
        config: Service URL, timeout and credentials
        transport: Optional httpx transport, used by tests
    """

    def __init__(self, config: GatewayConfig, transport: Optional[httpx.BaseTransport] = None):
        self.config = config
        self._transport = transport

    @property
    def active(self) -> bool:
        return self.config.active

    def request(self, code: str, language: str) -> GatewayResult:
        if not self.active:
            return GatewayResult.unavailable("gateway disabled")
        try:
            body = self._post(code, language)
            decoded = decode_response(body, self.config.url)
        except GatewayError as e:
            logger.info(f"Enrichment unavailable, using local analysis: {e}")
            return GatewayResult.unavailable(e.reason or e.message)
        return GatewayResult(decoded=decoded)

    def _post(self, code: str, language: str) -> str:
        url = self.config.url
        headers = {"Content-Type": "application/json"}
        if self.config.api_key:
            headers["Authorization"] = f"Bearer {self.config.api_key}"

        timeout = httpx.Timeout(self.config.timeout_seconds)
        try:
            with httpx.Client(timeout=timeout, transport=self._transport) as client:
                response = client.post(
                    url, json={"code": code, "language": language}, headers=headers
                )
                response.raise_for_status()
                return response.text
        except httpx.TimeoutException as e:
            raise GatewayTimeoutError(url, self.config.timeout_seconds) from e
        except httpx.HTTPStatusError as e:
            raise GatewayUnavailableError(
                url, f"HTTP {e.response.status_code}", status_code=e.response.status_code
            ) from e
        except httpx.HTTPError as e:
            raise GatewayUnavailableError(url, str(e) or type(e).__name__) from e


# ── Merge ────────────────────────────────────────────────────────────


def _syntax_from_payload(payload: GatewayPayload) -> SyntaxReport:
    def convert(items: List[RemoteSyntaxIssue], severity: str) -> List[SyntaxFinding]:
        return [
            SyntaxFinding(
                line=item.line,
                column=item.column,
                message=item.message,
                severity=severity,
                type=item.type,
                quick_fix=item.quick_fix,
                code=item.code,
            )
            for item in items
        ]

    return SyntaxReport(
        errors=convert(payload.errors, "error"),
        warnings=convert(payload.warnings, "warning"),
        suggestions=convert(payload.suggestions, "info"),
    )


def _security_findings(payload: GatewayPayload) -> List[SecurityFinding]:
    return [
        SecurityFinding(
            id=f"remote-{position}",
            title=item.title or "Remote security finding",
            severity=item.severity,
            category="Remote Analysis",
            cwe_id="",
            pattern="",
            suggestion=item.recommendation,
            description=item.description,
            line=item.line,
        )
        for position, item in enumerate(payload.security, start=1)
    ]


def _performance_findings(payload: GatewayPayload) -> List[AdvisoryFinding]:
    return [
        AdvisoryFinding(
            message=item.issue or item.description,
            severity=item.impact,
            line=item.line,
            suggestion=item.optimization,
            impact=item.description,
        )
        for item in payload.performance
    ]


def _assessment(payload: GatewayPayload) -> RemoteAssessment:
    return RemoteAssessment(
        cyclomatic_complexity=payload.complexity.cyclomatic_complexity,
        time_complexity=payload.complexity.time_complexity,
        space_complexity=payload.complexity.space_complexity,
        maintainability=payload.complexity.maintainability_index,
        readability=payload.complexity.readability_score,
        overall_score=payload.quality.overall_score,
    )


def merge(result: AnalysisResult, outcome: GatewayResult) -> AnalysisResult:
    """Fold a gateway outcome into a local result, returning a new result.

    Local values stay wherever the remote side is silent. An unavailable
    outcome returns ``result`` unchanged.
    """
    decoded = outcome.decoded
    if isinstance(decoded, Unparsed):
        salvaged = salvage(decoded.raw)
        if not salvaged.findings:
            logger.info("Enrichment response unusable, using local analysis")
            return result
        return replace(result, syntax=salvaged, ai_analysis_used=True)

    if not isinstance(decoded, Parsed):
        return result

    payload = decoded.payload
    syntax = _syntax_from_payload(payload) if payload.has_syntax else result.syntax
    security = result.security
    if payload.security:
        security = build_security_report([*security.findings, *_security_findings(payload)])
    return replace(
        result,
        syntax=syntax,
        security=security,
        performance=[*result.performance, *_performance_findings(payload)],
        remote=_assessment(payload),
        ai_analysis_used=True,
    )
