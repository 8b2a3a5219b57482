"""
Protocols for the collaborators of the execution engine.

The engine never interprets script code itself; it hands SCRIPT spans
to a ScriptEvaluator and pushes the final text to an OutputSink.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from .types import ScriptContext


@runtime_checkable
class ScriptEvaluator(Protocol):
    """
    Evaluates the text of one SCRIPT directive.

    Output is produced through ``context.append``; the return value is
    ignored by the engine. Any exception raised is an evaluation fault.
    """

    async def evaluate(self, code: str, context: ScriptContext) -> Any:
        ...


@runtime_checkable
class OutputSink(Protocol):
    """
    Destination of the rendered text.

    Sinks exposing ``end()`` are ended after the single write;
    otherwise ``flush()`` is called when available.
    """

    def write(self, text: str) -> Any:
        ...


__all__ = ["ScriptEvaluator", "OutputSink"]
