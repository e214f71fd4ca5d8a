"""Shared test fixtures for codelens."""

import pytest

from codelens.config import AnalysisConfig
from codelens.api import Analyzer
from codelens.models import SourceUnit
from codelens.scanning import ContextExtractor, PatternRegistry, prepare


def pytest_addoption(parser):
    """Add --run-slow option for slow tests."""
    parser.addoption(
        "--run-slow",
        action="store_true",
        default=False,
        help="run slow tests",
    )


def pytest_configure(config):
    """Configure slow marker."""
    config.addinivalue_line("markers", "slow: mark test as slow to run")


def pytest_collection_modifyitems(config, items):
    """Skip slow tests unless --run-slow is given."""
    if config.getoption("--run-slow"):
        return
    skip_slow = pytest.mark.skip(reason="need --run-slow option to run")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


@pytest.fixture(scope="session")
def registry():
    """Compiled pattern tables for every built-in language."""
    return PatternRegistry()


@pytest.fixture
def prepared(registry):
    """Factory: (code, language) -> PreparedSource."""

    def _prepare(code, language="javascript"):
        return prepare(SourceUnit(text=code, language=language), registry.get(language))

    return _prepare


@pytest.fixture
def scan(prepared):
    """Factory: (code, language) -> (PreparedSource, ScanContext)."""

    def _scan(code, language="javascript"):
        source = prepared(code, language)
        return source, ContextExtractor().extract(source)

    return _scan


@pytest.fixture
def analyzer():
    """Analyzer without cache or gateway."""
    with Analyzer(AnalysisConfig(cache_enabled=False)) as instance:
        yield instance
