"""
Entry points wiring the template core with the default Python evaluator.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from .config import EngineConfig
from .evaluators import PythonScriptEvaluator
from .template import OutputSink, PageCompiler, ScriptEvaluator, TemplateRecord
from .template.types import ErrorCallback


def create_page_compiler(
    scope: Optional[Mapping[str, Any]] = None,
    config: Optional[EngineConfig] = None,
    evaluator: Optional[ScriptEvaluator] = None,
    extra_globals: Optional[Mapping[str, Any]] = None,
) -> PageCompiler:
    """
    Creates an engine ready to run templates with Python scripts.

    Args:
        scope: Variables visible to scripts
        config: Engine settings
        evaluator: Replaces the Python evaluator when given
        extra_globals: Helpers for the Python evaluator (modules, functions);
            scope variables of the same name take precedence

    Returns:
        Configured engine
    """
    config = config or EngineConfig()
    if evaluator is None:
        evaluator = PythonScriptEvaluator(
            await_spawned_tasks=config.await_spawned_tasks,
            extra_globals=extra_globals,
        )
    elif extra_globals:
        raise ValueError("extra_globals only applies to the default Python evaluator")
    return PageCompiler(evaluator, scope=scope, config=config)


async def render_template(
    template: TemplateRecord,
    scope: Optional[Mapping[str, Any]] = None,
    config: Optional[EngineConfig] = None,
    on_error: Optional[ErrorCallback] = None,
    output: Optional[OutputSink] = None,
) -> str:
    """One-shot rendering of a record with a fresh engine."""
    compiler = create_page_compiler(scope, config)
    return await compiler.execute(template, output=output, on_error=on_error)


__all__ = ["create_page_compiler", "render_template"]
