"""Analysis-related exceptions: unsupported input, detector faults, file access."""

from pathlib import Path
from typing import List

from .base import CodeLensError


class AnalysisError(CodeLensError):
    """Base class for analysis-related errors."""
    pass


class FileAccessError(AnalysisError):
    """Raised when a source file cannot be read."""

    def __init__(self, filepath: Path, reason: str):
        super().__init__(
            f"Cannot access file: {filepath}",
            details={"filepath": str(filepath), "reason": reason},
        )
        self.filepath = filepath
        self.reason = reason


class UnsupportedLanguageError(AnalysisError):
    """Raised when a language id has no pattern table."""

    def __init__(self, language: str, supported_languages: List[str]):
        super().__init__(
            f"Unsupported language: {language}",
            details={"language": language, "supported": ", ".join(supported_languages)},
        )
        self.language = language
        self.supported_languages = supported_languages


class DetectorError(AnalysisError):
    """Raised when a single detector fails on a source unit."""

    def __init__(self, detector: str, language: str, reason: str):
        super().__init__(
            f"Detector '{detector}' failed",
            details={"detector": detector, "language": language, "reason": reason},
        )
        self.detector = detector
        self.language = language
        self.reason = reason
