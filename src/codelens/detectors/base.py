"""Detector protocol and the raw finding every detector emits."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List

from ..config import ThresholdConfig
from ..models import ViolationSeverity
from ..scanning import PreparedSource, ScanContext


@dataclass(frozen=True)
class RawIssue:
    """A single (line, message, severity) finding before aggregation.

    ``kind`` names the smell or risk the detector found, e.g.
    ``deep-nesting`` or ``json-parse``.
    """

    line: int
    message: str
    severity: ViolationSeverity
    kind: str = ""


class Detector(ABC):
    """One independent check over a prepared source.

    Detectors never see each other's output. Any exception a detector raises
    is caught by the analyzer and logged; the remaining detectors still run.
    """

    name: str = "detector"

    def __init__(self, thresholds: ThresholdConfig | None = None):
        self.thresholds = thresholds or ThresholdConfig()

    @abstractmethod
    def detect(self, source: PreparedSource, context: ScanContext) -> List[RawIssue]:
        """Return raw findings for ``source``."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
