"""Language classifier.

Scores source text against every pattern table and picks the best match:

    score = (2 * keyword hits + 3 * import hits + 4 * syntax hits
             + 5 * specific hits) * table weight

    confidence = min(100, round(score / max(20, lines * 10) * 100))
                 + 20 if score > 20, + 30 if score > 50 (capped at 100)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .logging_config import get_logger
from .models import DetectionResult, LanguageMatch
from .scanning import CompiledTable, PatternRegistry

logger = get_logger(__name__)

KEYWORD_WEIGHT = 2
IMPORT_WEIGHT = 3
SYNTAX_WEIGHT = 4
SPECIFIC_WEIGHT = 5

EXTENSION_CONFIDENCE = 95
MAX_ALTERNATIVES = 3
MAX_REASONS = 3


@dataclass
class LanguageScore:
    language: str
    score: float = 0.0
    reasons: List[str] = field(default_factory=list)


class LanguageClassifier:
    """Weighted lexical language detection over a PatternRegistry."""

    def __init__(self, registry: PatternRegistry):
        self.registry = registry

    def detect(self, code: str, filename: Optional[str] = None) -> DetectionResult:
        """Detect the language of ``code``.

        A filename whose extension belongs to exactly one table short-circuits
        content scoring. Never raises for empty or unrecognised input.
        """
        if filename:
            by_extension = self.registry.language_for_filename(filename)
            if by_extension is not None:
                suffix = filename[filename.rfind("."):]
                logger.debug(f"Language from extension: {filename} -> {by_extension}")
                return DetectionResult(
                    language=by_extension,
                    confidence=EXTENSION_CONFIDENCE,
                    alternatives=[],
                    reason=f"Detected from file extension: {suffix}",
                )

        if not code or not code.strip():
            return self._default("No code provided")

        ranked = [s for s in self.score_all(code) if s.score > 0]
        ranked.sort(key=lambda s: s.score, reverse=True)
        if not ranked:
            return self._default("No language patterns matched")

        line_count = len(code.split("\n"))
        max_possible = max(20, line_count * 10)

        top = ranked[0]
        confidence = self._base_confidence(top.score, max_possible)
        # Boost for strong indicators
        if top.score > 20:
            confidence = min(100, confidence + 20)
        if top.score > 50:
            confidence = min(100, confidence + 30)

        alternatives = [
            LanguageMatch(s.language, self._base_confidence(s.score, max_possible))
            for s in ranked[1 : 1 + MAX_ALTERNATIVES]
        ]
        logger.debug(
            f"Detected {top.language} (score {top.score:.0f}, confidence {confidence})"
        )
        return DetectionResult(
            language=top.language,
            confidence=confidence,
            alternatives=alternatives,
            reason=f"Detected based on: {', '.join(top.reasons[:MAX_REASONS])}",
        )

    def score_all(self, code: str) -> List[LanguageScore]:
        return [self.score(table, code) for table in self.registry]

    def score(self, table: CompiledTable, code: str) -> LanguageScore:
        result = LanguageScore(language=table.name)
        raw = 0

        for keyword, pattern in table.keyword_res:
            count = len(pattern.findall(code))
            if count:
                raw += count * KEYWORD_WEIGHT
                result.reasons.append(f'Found "{keyword}" keyword ({count} times)')

        for marker, pattern in table.import_res:
            count = len(pattern.findall(code))
            if count:
                raw += count * IMPORT_WEIGHT
                result.reasons.append(f'Found "{marker}" import ({count} times)')

        for label, patterns, weight in self._pattern_groups(table):
            for index, pattern in enumerate(patterns, start=1):
                count = sum(1 for _ in pattern.finditer(code))
                if count:
                    raw += count * weight
                    result.reasons.append(f"Matched {label} pattern {index} ({count} times)")

        result.score = raw * table.table.weight
        return result

    @staticmethod
    def _pattern_groups(table: CompiledTable) -> Tuple[tuple, ...]:
        return (
            ("syntax", table.syntax_res, SYNTAX_WEIGHT),
            ("specific", table.specific_res, SPECIFIC_WEIGHT),
        )

    @staticmethod
    def _base_confidence(score: float, max_possible: int) -> int:
        # Round half up
        return min(100, int(score / max_possible * 100 + 0.5))

    def _default(self, reason: str) -> DetectionResult:
        return DetectionResult(
            language=self.registry.default_language,
            confidence=0,
            alternatives=[],
            reason=reason,
        )
