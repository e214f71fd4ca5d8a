"""Enrichment gateway exceptions.

All of these are coalesced into an "unavailable" gateway result before they
reach callers of the public API.
"""

from typing import Optional

from .base import CodeLensError


class GatewayError(CodeLensError):
    """Base class for enrichment gateway failures."""

    def __init__(self, message: str, url: str, reason: Optional[str] = None):
        details = {"url": url}
        if reason:
            details["reason"] = reason
        super().__init__(message, details=details)
        self.url = url
        self.reason = reason


class GatewayUnavailableError(GatewayError):
    """Raised on transport errors and non-2xx responses."""

    def __init__(self, url: str, reason: str, status_code: Optional[int] = None):
        super().__init__(f"Enrichment service unavailable: {url}", url, reason)
        self.status_code = status_code
        if status_code is not None:
            self.details["status"] = str(status_code)


class GatewayTimeoutError(GatewayError):
    """Raised when the enrichment call exceeds its timeout."""

    def __init__(self, url: str, timeout: float):
        super().__init__(f"Enrichment request timed out after {timeout}s", url, "timeout")
        self.timeout = timeout


class MalformedResponseError(GatewayError):
    """Raised when the response body cannot be decoded as JSON."""

    def __init__(self, url: str, reason: str):
        super().__init__("Malformed enrichment response", url, reason)
