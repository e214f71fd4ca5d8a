"""Base formatter interface for codelens output rendering."""

from abc import ABC, abstractmethod

from ..models import AnalysisResult


class BaseFormatter(ABC):
    """Abstract base class for output formatters."""

    @abstractmethod
    def render(self, result: AnalysisResult, source_name: str = "<stdin>") -> None:
        """Write the formatted report to the terminal."""

    @abstractmethod
    def format(self, result: AnalysisResult, source_name: str = "<stdin>") -> str:
        """Return formatted string representation of the report."""
