"""JSON formatter for codelens."""

import json
from dataclasses import asdict

from ..models import AnalysisResult
from .base import BaseFormatter


class JsonFormatter(BaseFormatter):
    """Render an analysis result as JSON."""

    def render(self, result: AnalysisResult, source_name: str = "<stdin>") -> None:
        print(self.format(result, source_name))

    def format(self, result: AnalysisResult, source_name: str = "<stdin>") -> str:
        data = {"source": source_name, **asdict(result)}
        return json.dumps(data, indent=2, default=str)
