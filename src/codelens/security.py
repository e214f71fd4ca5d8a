"""Security pattern scanner.

Matches raw source text against a fixed table of vulnerability signatures
grouped by OWASP Top 10 (2021) category. There is no context suppression:
any match anywhere in the text records a finding, at its first matching line.

Score starts at 100 and loses a severity-weighted penalty per finding:

    critical -25, high -15, medium -8, low -3, info -1   (floor 0)

Grades: >= 90 A, >= 80 B, >= 70 C, >= 60 D, else F.
"""

from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from .logging_config import get_logger
from .models import SecurityFinding, SecurityReport, SecuritySeverity
from .scanning import LineIndex

logger = get_logger(__name__)

SEVERITY_PENALTIES: Dict[str, int] = {
    "critical": 25,
    "high": 15,
    "medium": 8,
    "low": 3,
    "info": 1,
}

SEVERITY_ORDER: Dict[str, int] = {"critical": 4, "high": 3, "medium": 2, "low": 1, "info": 0}

GRADE_BANDS: Tuple[Tuple[int, str], ...] = ((90, "A"), (80, "B"), (70, "C"), (60, "D"))

COMPLIANCE_RECOMMENDATIONS: Tuple[str, ...] = (
    "Implement automated security testing in CI/CD pipeline",
    "Regular security code reviews and penetration testing",
    "Keep dependencies updated and monitor for vulnerabilities",
    "Implement proper logging and monitoring for security events",
    "Use static application security testing (SAST) tools",
    "Implement dynamic application security testing (DAST)",
    "Follow secure coding guidelines and standards",
    "Implement security training for development team",
)

_USER_INPUT = r"(?:\$_GET|\$_POST|request\.|params\.|query\.|input\()"


@dataclass(frozen=True)
class SecuritySignature:
    id: str
    title: str
    description: str
    severity: SecuritySeverity
    category: str
    cwe_id: str
    owasp_category: str
    pattern: str
    suggestion: str
    example: str = ""
    flags: int = 0
    regex: re.Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "regex", re.compile(self.pattern, self.flags))

    def to_finding(self, line: Optional[int]) -> SecurityFinding:
        return SecurityFinding(
            id=self.id,
            title=self.title,
            severity=self.severity,
            category=self.category,
            cwe_id=self.cwe_id,
            pattern=self.pattern,
            suggestion=self.suggestion,
            example=self.example,
            description=self.description,
            owasp_category=self.owasp_category,
            line=line,
        )


SIGNATURES: Tuple[SecuritySignature, ...] = (
    # A01: Broken Access Control
    SecuritySignature(
        id="broken-access-control-1",
        title="Missing Authorization Check",
        description="Functions or endpoints without proper authorization checks",
        severity="critical",
        category="access-control",
        cwe_id="CWE-862",
        owasp_category="A01:2021 - Broken Access Control",
        pattern=r"@app\.route[^\n]*\n\s*(?:async\s+)?def\b",
        suggestion="Implement proper authorization checks using decorators or middleware",
        example="@app.route('/admin')\n@login_required\ndef admin_panel():\n    ...",
    ),
    SecuritySignature(
        id="path-traversal",
        title="Path Traversal Vulnerability",
        description="File operations using user input without validation",
        severity="high",
        category="access-control",
        cwe_id="CWE-22",
        owasp_category="A01:2021 - Broken Access Control",
        pattern=(
            r"(?:open|readFile|writeFile|createReadStream|createWriteStream)\s*\([^)]*"
            r"(?:\$_GET|\$_POST|request\.|params\.|query\.)"
        ),
        suggestion="Validate and sanitize file paths, use whitelist of allowed paths",
        example="safe_path = os.path.join('files', os.path.basename(user_filename))",
    ),
    # A02: Cryptographic Failures
    SecuritySignature(
        id="weak-crypto-algorithm",
        title="Weak Cryptographic Algorithm",
        description="Usage of weak or deprecated cryptographic algorithms",
        severity="high",
        category="sensitive-data",
        cwe_id="CWE-327",
        owasp_category="A02:2021 - Cryptographic Failures",
        pattern=r"(?:MD5|SHA1|DES|3DES|RC4|ECB)\s*\(",
        suggestion="Use strong cryptographic algorithms like AES-256, SHA-256, or bcrypt",
        example="bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt())",
    ),
    SecuritySignature(
        id="hardcoded-secrets",
        title="Hardcoded Secrets",
        description="API keys, passwords, or secrets hardcoded in source code",
        severity="critical",
        category="sensitive-data",
        cwe_id="CWE-798",
        owasp_category="A02:2021 - Cryptographic Failures",
        pattern=r"(?:password|secret|key|token|api_key)\s*=\s*[\"'][^\"']{8,}[\"']",
        flags=re.IGNORECASE,
        suggestion="Store secrets in environment variables or secure vault services",
        example="API_KEY = os.environ.get('API_KEY')",
    ),
    SecuritySignature(
        id="insecure-random",
        title="Insecure Random Number Generation",
        description="Using predictable random number generators for security purposes",
        severity="medium",
        category="sensitive-data",
        cwe_id="CWE-338",
        owasp_category="A02:2021 - Cryptographic Failures",
        pattern=r"(?:Math\.random|random\.randint|rand\(\))",
        suggestion="Use cryptographically secure random number generators",
        example="token = secrets.token_urlsafe(32)",
    ),
    # A03: Injection
    SecuritySignature(
        id="sql-injection-basic",
        title="SQL Injection Vulnerability",
        description="SQL queries constructed with string concatenation or formatting",
        severity="critical",
        category="injection",
        cwe_id="CWE-89",
        owasp_category="A03:2021 - Injection",
        pattern=r"(?:SELECT|INSERT|UPDATE|DELETE).*(?:\+|%s|%d|f[\"'].*\{.*\}[\"']|\$\{|#\{)",
        flags=re.IGNORECASE,
        suggestion="Use parameterized queries or prepared statements",
        example='cursor.execute("SELECT * FROM users WHERE id = %s", (user_id,))',
    ),
    SecuritySignature(
        id="command-injection",
        title="Command Injection Vulnerability",
        description="System commands executed with user input",
        severity="critical",
        category="injection",
        cwe_id="CWE-78",
        owasp_category="A03:2021 - Injection",
        pattern=(
            r"(?:system|exec|shell_exec|passthru|eval|os\.system|subprocess\.call).*"
            + _USER_INPUT
        ),
        suggestion="Validate input and use safe alternatives like subprocess with shell=False",
        example="subprocess.run(['ping', '-c', '1', user_host], capture_output=True, timeout=5)",
    ),
    SecuritySignature(
        id="ldap-injection",
        title="LDAP Injection Vulnerability",
        description="LDAP queries constructed with unsanitized user input",
        severity="high",
        category="injection",
        cwe_id="CWE-90",
        owasp_category="A03:2021 - Injection",
        pattern=r"ldap.*search.*(?:\+|f[\"'].*\{.*\}[\"']|\$\{)",
        flags=re.IGNORECASE,
        suggestion="Escape LDAP special characters and use parameterized LDAP queries",
    ),
    SecuritySignature(
        id="xss-reflected",
        title="Cross-Site Scripting (XSS)",
        description="User input rendered without proper escaping",
        severity="high",
        category="xss",
        cwe_id="CWE-79",
        owasp_category="A03:2021 - Injection",
        pattern=r"(?:innerHTML|outerHTML|document\.write).*(?:\$_GET|\$_POST|request\.|params\.|echo)",
        suggestion="Escape HTML entities and use textContent instead of innerHTML",
        example="element.textContent = userInput;",
    ),
    # A04: Insecure Design
    SecuritySignature(
        id="missing-rate-limiting",
        title="Missing Rate Limiting",
        description="API endpoints without rate limiting protection",
        severity="medium",
        category="security-config",
        cwe_id="CWE-770",
        owasp_category="A04:2021 - Insecure Design",
        pattern=r"@app\.route[^\n]*\n(?![^\n]*(?:rate_limit|limiter|throttle))[^\n]*\bdef\b",
        suggestion="Implement rate limiting to prevent abuse and DoS attacks",
        example='@app.route("/api/login")\n@limiter.limit("5 per minute")\ndef login():',
    ),
    # A05: Security Misconfiguration
    SecuritySignature(
        id="debug-mode-production",
        title="Debug Mode Enabled in Production",
        description="Debug mode or verbose error reporting enabled",
        severity="high",
        category="security-config",
        cwe_id="CWE-489",
        owasp_category="A05:2021 - Security Misconfiguration",
        pattern=r"(?:DEBUG\s*=\s*True|debug\s*=\s*true|app\.run.*debug\s*=\s*True)",
        flags=re.IGNORECASE,
        suggestion="Disable debug mode in production and configure proper error handling",
        example="DEBUG = os.environ.get('DEBUG', 'False').lower() == 'true'",
    ),
    SecuritySignature(
        id="default-credentials",
        title="Default or Weak Credentials",
        description="Usage of default or weak credentials",
        severity="critical",
        category="authentication",
        cwe_id="CWE-521",
        owasp_category="A05:2021 - Security Misconfiguration",
        pattern=r"(?:password|passwd|pwd)\s*[:=]\s*[\"'](?:admin|password|123456|root|test|guest|user)[\"']",
        flags=re.IGNORECASE,
        suggestion="Use strong, unique credentials and enforce password policies",
        example="DB_PASSWORD = os.environ.get('DB_PASSWORD')",
    ),
    # A06: Vulnerable and Outdated Components
    SecuritySignature(
        id="outdated-dependencies",
        title="Potentially Outdated Dependencies",
        description="Import statements that may indicate outdated libraries",
        severity="medium",
        category="security-config",
        cwe_id="CWE-1104",
        owasp_category="A06:2021 - Vulnerable and Outdated Components",
        pattern=r"(?:import|require|from).*(?:jquery.*1\.|flask.*0\.|django.*[12]\.|express.*3\.)",
        flags=re.IGNORECASE,
        suggestion="Regularly update dependencies and use dependency vulnerability scanners",
        example="pip-audit\nnpm audit",
    ),
    # A07: Identification and Authentication Failures
    SecuritySignature(
        id="weak-session-config",
        title="Weak Session Configuration",
        description="Insecure session configuration",
        severity="high",
        category="authentication",
        cwe_id="CWE-384",
        owasp_category="A07:2021 - Identification and Authentication Failures",
        pattern=r"session.*(?:httponly\s*=\s*false|secure\s*=\s*false|samesite\s*=\s*none)",
        flags=re.IGNORECASE,
        suggestion="Configure secure session settings with HttpOnly, Secure, and SameSite flags",
        example="app.config['SESSION_COOKIE_SECURE'] = True",
    ),
    SecuritySignature(
        id="missing-mfa",
        title="Missing Multi-Factor Authentication",
        description="Authentication without multi-factor authentication for sensitive operations",
        severity="medium",
        category="authentication",
        cwe_id="CWE-308",
        owasp_category="A07:2021 - Identification and Authentication Failures",
        pattern=r"^(?!.*(?:mfa|2fa|totp|otp)).*(?:login|authenticate|signin)",
        flags=re.IGNORECASE | re.MULTILINE,
        suggestion="Implement multi-factor authentication for sensitive operations",
        example="pyotp.TOTP(user.secret_key).verify(token)",
    ),
    # A08: Software and Data Integrity Failures
    SecuritySignature(
        id="insecure-deserialization",
        title="Insecure Deserialization",
        description="Deserializing untrusted data without validation",
        severity="critical",
        category="deserialization",
        cwe_id="CWE-502",
        owasp_category="A08:2021 - Software and Data Integrity Failures",
        pattern=r"(?:pickle\.loads?|yaml\.load\b|unserialize|ObjectInputStream)",
        suggestion="Avoid deserializing untrusted data or use safe serialization formats",
        example="data = json.loads(user_input)",
    ),
    # A09: Security Logging and Monitoring Failures
    SecuritySignature(
        id="insufficient-logging",
        title="Insufficient Security Logging",
        description="Missing security event logging",
        severity="medium",
        category="logging",
        cwe_id="CWE-778",
        owasp_category="A09:2021 - Security Logging and Monitoring Failures",
        pattern=r"^(?!.*(?:log|audit)).*(?:login|authentication|authorization|access)",
        flags=re.IGNORECASE | re.MULTILINE,
        suggestion="Implement comprehensive security logging for audit trails",
        example='security_logger.info("Successful login for user: %s", username)',
    ),
    SecuritySignature(
        id="log-injection",
        title="Log Injection Vulnerability",
        description="User input logged without sanitization",
        severity="medium",
        category="logging",
        cwe_id="CWE-117",
        owasp_category="A09:2021 - Security Logging and Monitoring Failures",
        pattern=r"log.*(?:\+|f[\"'].*\{.*\}[\"']).*(?:request\.|params\.|input)",
        suggestion="Sanitize user input before logging to prevent log injection",
        example='logger.info("User input: %s", safe_input)',
    ),
    # A10: Server-Side Request Forgery
    SecuritySignature(
        id="ssrf-vulnerability",
        title="Server-Side Request Forgery (SSRF)",
        description="HTTP requests to URLs controlled by user input",
        severity="high",
        category="injection",
        cwe_id="CWE-918",
        owasp_category="A10:2021 - Server-Side Request Forgery (SSRF)",
        pattern=r"(?:requests\.get|urllib\.request|fetch|axios\.get).*(?:request\.|params\.|input)",
        suggestion="Validate and whitelist allowed URLs, use URL parsing to prevent SSRF",
        example="if is_safe_url(user_url):\n    response = requests.get(user_url, timeout=5)",
    ),
)


@dataclass
class ComplianceReport:
    owasp: Dict[str, int] = field(default_factory=dict)
    cwe: Dict[str, int] = field(default_factory=dict)
    recommendations: List[str] = field(default_factory=list)


def security_score(findings: Sequence[SecurityFinding]) -> int:
    total = 100 - sum(SEVERITY_PENALTIES.get(f.severity, 0) for f in findings)
    return max(0, total)


def security_grade(score: int) -> str:
    for floor, grade in GRADE_BANDS:
        if score >= floor:
            return grade
    return "F"


def security_summary(findings: Sequence[SecurityFinding]) -> str:
    counts = Counter(f.severity for f in findings)
    if counts["critical"]:
        return f"{counts['critical']} critical vulnerabilities require immediate attention"
    if counts["high"]:
        return f"{counts['high']} high-severity issues need to be addressed"
    if counts["medium"]:
        return f"{counts['medium']} medium-severity issues found"
    if findings:
        return f"{len(findings)} minor security issues detected"
    return "No major security vulnerabilities detected"


def build_security_report(findings: Sequence[SecurityFinding]) -> SecurityReport:
    score = security_score(findings)
    return SecurityReport(
        findings=list(findings),
        score=score,
        grade=security_grade(score),
        summary=security_summary(findings),
    )


class SecurityScanner:
    """Signature matching over raw source text."""

    def __init__(self, signatures: Optional[Sequence[SecuritySignature]] = None):
        self.signatures = tuple(SIGNATURES if signatures is None else signatures)

    def scan(self, code: str) -> List[SecurityFinding]:
        if not code or not code.strip():
            return []
        index = LineIndex(code)
        findings = []
        for signature in self.signatures:
            match = signature.regex.search(code)
            if match:
                findings.append(signature.to_finding(index.line_of(match.start())))
        if findings:
            logger.debug(f"Security scan matched {len(findings)} signatures")
        return findings

    def report(self, code: str) -> SecurityReport:
        return build_security_report(self.scan(code))

    @staticmethod
    def compliance_report(findings: Sequence[SecurityFinding]) -> ComplianceReport:
        owasp = Counter(f.owasp_category for f in findings if f.owasp_category)
        cwe = Counter(f.cwe_id for f in findings)
        return ComplianceReport(
            owasp=dict(owasp),
            cwe=dict(cwe),
            recommendations=list(COMPLIANCE_RECOMMENDATIONS),
        )

    @staticmethod
    def priority_findings(findings: Sequence[SecurityFinding]) -> List[SecurityFinding]:
        """Critical and high findings, most severe first."""
        urgent = [f for f in findings if f.severity in ("critical", "high")]
        return sorted(urgent, key=lambda f: SEVERITY_ORDER[f.severity], reverse=True)


def signatures_by_category(category: str) -> List[SecuritySignature]:
    return [s for s in SIGNATURES if s.category == category]


def signatures_by_severity(severity: str) -> List[SecuritySignature]:
    return [s for s in SIGNATURES if s.severity == severity]
