from __future__ import annotations

import pytest

from playtpl.config import EngineConfig
from playtpl.template import PageCompiler, TemplateRecord

from tests.infrastructure import FakeEvaluator


@pytest.fixture
def evaluator() -> FakeEvaluator:
    return FakeEvaluator()


@pytest.fixture
def compiler(evaluator: FakeEvaluator) -> PageCompiler:
    """Base engine over the fake evaluator."""
    return PageCompiler(evaluator)


@pytest.fixture
def make_compiler(evaluator: FakeEvaluator):
    """Factory for engines with a custom scope or config."""
    def _make(scope=None, **config) -> PageCompiler:
        return PageCompiler(evaluator, scope=scope, config=EngineConfig(**config))
    return _make


@pytest.fixture
def record():
    """Factory for named template records."""
    def _make(source: str, name: str = "test.tpl") -> TemplateRecord:
        return TemplateRecord(name, name=name, source=source)
    return _make
