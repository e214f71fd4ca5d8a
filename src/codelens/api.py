"""Public API for codelens.

This module provides the two entry points, ``analyze`` and
``detect_language``, plus the ``Analyzer`` that wires every component
together. Neither entry point raises: failures degrade to a valid,
possibly empty result.

Example:
    >>> from codelens import analyze
    >>>
    >>> result = analyze("const data = JSON.parse(x);", "javascript")
    >>> [issue.type for issue in result.violations.line_references]
    ['json-parse']
    >>>
    >>> # Language detected from content
    >>> result = analyze("def add(a, b):\\n    return a + b\\n")
    >>> result.language
    'python'

Pipeline for one call:
    1. Resolve the language (declared id, else classification)
    2. Prepare the source (masking, block depths), metrics, context
    3. Run complexity, detectors, security and the gateway call concurrently
    4. Aggregate detector output, convert smells, synthesize test skeletons
    5. Fold in the gateway result, then score
"""

from __future__ import annotations

import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import asdict, replace
from typing import Any, Callable, Dict, List, Optional, Sequence

from .aggregation import aggregate, to_code_smells
from .cache import ResultCache, compute_config_hash
from .classifier import LanguageClassifier
from .complexity import ComplexityEstimator
from .config import AnalysisConfig
from .detectors import Detector, RawIssue, get_default_detectors
from .exceptions import DetectorError
from .gateway import EnrichmentGateway, GatewayResult, merge
from .logging_config import get_logger
from .models import (
    AnalysisResult,
    CodeSize,
    ComplexityAnalysis,
    DetectionResult,
    SourceUnit,
    SyntaxReport,
)
from .scanning import (
    DEFAULT_LANGUAGE,
    ContextExtractor,
    MetricsExtractor,
    PatternRegistry,
    PreparedSource,
    ScanContext,
    prepare,
)
from .scoring import apply_scores
from .security import SecurityScanner, build_security_report
from .syntax import SyntaxChecker
from .testgen import TestSkeletonSynthesizer

logger = get_logger(__name__)

# Line counts below which a unit is "small" / "medium"
SMALL_UNIT_LINES = 50
MEDIUM_UNIT_LINES = 200


def code_size(line_count: int) -> CodeSize:
    if line_count < SMALL_UNIT_LINES:
        return "small"
    if line_count < MEDIUM_UNIT_LINES:
        return "medium"
    return "large"


class Analyzer:
    """Runs the full analysis pipeline over one source unit at a time.

    Every collaborator is injectable; the defaults are built from ``config``.
    One Analyzer can serve concurrent callers: its components hold no
    per-call state.

    Args:
        config: Analysis configuration (defaults if None)
        registry: Compiled pattern tables shared by all components
        gateway: Enrichment gateway (built from ``config.gateway`` if None)
        cache: Result cache (built from ``config`` if None and enabled)
        detectors: Detector battery (``get_default_detectors`` if None)
    """

    def __init__(
        self,
        config: Optional[AnalysisConfig] = None,
        registry: Optional[PatternRegistry] = None,
        gateway: Optional[EnrichmentGateway] = None,
        cache: Optional[ResultCache] = None,
        detectors: Optional[Sequence[Detector]] = None,
    ):
        self.config = config or AnalysisConfig()
        self.registry = registry or PatternRegistry(
            default_language=self.config.default_language
        )
        self.classifier = LanguageClassifier(self.registry)
        self.metrics = MetricsExtractor()
        self.context_extractor = ContextExtractor()
        self.complexity = ComplexityEstimator(self.metrics)
        self.detectors: List[Detector] = list(
            detectors
            if detectors is not None
            else get_default_detectors(self.config.thresholds, self.metrics)
        )
        self.security = SecurityScanner()
        self.syntax = SyntaxChecker()
        self.testgen = TestSkeletonSynthesizer(self.config.max_test_cases)
        self.gateway = gateway or EnrichmentGateway(self.config.gateway)

        if cache is not None:
            self.cache: Optional[ResultCache] = cache
        elif self.config.cache_enabled:
            self.cache = ResultCache(
                cache_dir=self.config.cache_dir,
                max_entries=self.config.cache_max_entries,
                ttl_seconds=self.config.cache_ttl_seconds,
                salt=self._config_hash(),
            )
        else:
            self.cache = None

    def _config_hash(self) -> str:
        return compute_config_hash(
            {
                "thresholds": asdict(self.config.thresholds),
                "max_test_cases": self.config.max_test_cases,
                "gateway": self.gateway.active,
                "detectors": [d.name for d in self.detectors],
            }
        )

    # ── Entry points ─────────────────────────────────────────────────

    def detect_language(self, source: str, filename: Optional[str] = None) -> DetectionResult:
        try:
            return self.classifier.detect(source or "", filename)
        except Exception as e:
            logger.warning(f"Language detection failed: {e}")
            return DetectionResult(
                language=self.registry.default_language,
                confidence=0,
                reason=f"Detection failed: {e}",
            )

    def analyze(
        self,
        source: str,
        language: Optional[str] = None,
        filename: Optional[str] = None,
    ) -> AnalysisResult:
        """Analyze ``source``. Never raises.

        Args:
            source: Code text
            language: Language id or alias; detected from content when
                missing or unknown
            filename: Optional file name used for extension-based detection

        Returns:
            A complete AnalysisResult, or an empty one if analysis failed
        """
        started = time.perf_counter()
        source = source or ""
        try:
            language, detection = self._resolve_language(source, language, filename)
        except Exception as e:
            logger.warning(f"Language resolution failed: {e}")
            language = self.registry.default_language
            detection = DetectionResult(language=language, confidence=0, reason=str(e))

        try:
            result = self._analyze(source, language, detection)
        except Exception as e:
            logger.error(f"Analysis failed for {language} source: {e}")
            result = self._empty(language, detection, source)
        result.analysis_time_ms = (time.perf_counter() - started) * 1000
        return result

    # ── Pipeline ─────────────────────────────────────────────────────

    def _resolve_language(
        self, source: str, language: Optional[str], filename: Optional[str]
    ) -> tuple:
        resolved = self.registry.resolve(language)
        if not source.strip():
            lang = resolved or self.registry.default_language
            return lang, DetectionResult(language=lang, confidence=0, reason="No code provided")
        if resolved is not None:
            return resolved, DetectionResult(
                language=resolved, confidence=100, reason="Language declared by caller"
            )
        if language:
            logger.info(f"Unknown language '{language}', detecting from content")
        detection = self.detect_language(source, filename)
        return detection.language, detection

    def _empty(self, language: str, detection: DetectionResult, source: str) -> AnalysisResult:
        return AnalysisResult(
            language=language,
            detection=detection,
            violations=aggregate([]),
            security=build_security_report([]),
            code_size=code_size(len(source.split("\n"))) if source else "small",
        )

    def _analyze(self, source: str, language: str, detection: DetectionResult) -> AnalysisResult:
        if not source.strip():
            return self._empty(language, detection, source)

        if self.cache is not None:
            cached = self.cache.get(language, source)
            if isinstance(cached, AnalysisResult):
                logger.debug(f"Using cached result for {language} source")
                # Detection depends on how this call resolved the language
                return replace(cached, detection=detection)

        unit = SourceUnit(text=source, language=language)
        prepared = prepare(unit, self.registry.get(language))
        metrics = self.metrics.extract(prepared)
        context = self.context_extractor.extract(prepared)

        stages: Dict[str, Callable[[], Any]] = {
            "complexity": lambda: self.complexity.estimate(prepared),
            "detectors": lambda: self._run_detectors(prepared, context),
            "security": lambda: self.security.report(source),
        }
        if self.gateway.active:
            stages["gateway"] = lambda: self.gateway.request(source, language)
        outputs = self._run_stages(stages)

        raw: List[RawIssue] = outputs.get("detectors") or []
        result = AnalysisResult(
            language=language,
            detection=detection,
            metrics=metrics,
            complexity=outputs.get("complexity") or ComplexityAnalysis(),
            violations=aggregate(raw),
            code_smells=to_code_smells(raw),
            security=outputs.get("security") or build_security_report([]),
            test_cases=self._guarded("test synthesis", lambda: self.testgen.synthesize(prepared), []),
            syntax=self._guarded("syntax check", lambda: self.syntax.check(prepared), SyntaxReport()),
            code_size=code_size(len(unit.lines)),
        )

        outcome: Optional[GatewayResult] = outputs.get("gateway")
        if outcome is not None:
            result = merge(result, outcome)
        result = apply_scores(result)

        if self.cache is not None and (result.ai_analysis_used or not self.gateway.active):
            self.cache.set(language, source, result)
        logger.info(
            f"Analyzed {len(unit.lines)} lines of {language}: "
            f"{result.violations.total} violation categories, grade {result.overall_grade}"
        )
        return result

    def _run_stages(self, stages: Dict[str, Callable[[], Any]]) -> Dict[str, Any]:
        """Run independent stages, in parallel when configured.

        A failing stage logs a warning and yields None; the others still run.
        """
        outputs: Dict[str, Any] = {}
        if not self.config.parallel_detectors:
            for name, stage in stages.items():
                outputs[name] = self._guarded(name, stage, None)
            return outputs

        workers = self.config.workers or len(stages)
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {executor.submit(stage): name for name, stage in stages.items()}
            for future in as_completed(futures):
                name = futures[future]
                try:
                    outputs[name] = future.result()
                except Exception as e:
                    logger.warning(f"Stage '{name}' failed: {e}")
                    outputs[name] = None
        return outputs

    @staticmethod
    def _guarded(name: str, stage: Callable[[], Any], default: Any) -> Any:
        try:
            return stage()
        except Exception as e:
            logger.warning(f"Stage '{name}' failed: {e}")
            return default

    def _run_detectors(self, source: PreparedSource, context: ScanContext) -> List[RawIssue]:
        raw: List[RawIssue] = []
        for detector in self.detectors:
            try:
                raw.extend(detector.detect(source, context))
            except Exception as e:
                error = DetectorError(detector.name, source.language, str(e))
                logger.warning(str(error))
        return raw

    def close(self) -> None:
        if self.cache is not None:
            self.cache.close()

    def __enter__(self) -> "Analyzer":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


# ── Module-level convenience ─────────────────────────────────────────

_default_analyzer: Optional[Analyzer] = None
_default_lock = threading.Lock()


def get_default_analyzer() -> Analyzer:
    """The lazily built Analyzer behind ``analyze`` and ``detect_language``."""
    global _default_analyzer
    with _default_lock:
        if _default_analyzer is None:
            _default_analyzer = Analyzer()
        return _default_analyzer


def analyze(
    source: str,
    language: Optional[str] = None,
    filename: Optional[str] = None,
) -> AnalysisResult:
    """Analyze source text with the default Analyzer. Never raises."""
    try:
        analyzer = get_default_analyzer()
    except Exception as e:
        logger.error(f"Could not build analyzer: {e}")
        language = language or DEFAULT_LANGUAGE
        return AnalysisResult(
            language=language,
            detection=DetectionResult(language=language, confidence=0, reason=str(e)),
        )
    return analyzer.analyze(source, language, filename)


def detect_language(source: str, filename: Optional[str] = None) -> DetectionResult:
    """Detect the language of ``source``. Never raises."""
    try:
        return get_default_analyzer().detect_language(source, filename)
    except Exception as e:
        logger.error(f"Could not build analyzer: {e}")
        return DetectionResult(language=DEFAULT_LANGUAGE, confidence=0, reason=str(e))
