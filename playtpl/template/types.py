"""
Value types shared by the execution engine and script evaluators.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Mapping, Optional, Union


class EnginePhase(enum.Enum):
    """Coarse state of an execution pass."""
    SCANNING = "SCANNING"
    DISPATCHING = "DISPATCHING"
    HALTED = "HALTED"        # output frozen, scanning goes on
    DONE = "DONE"


def _no_exit() -> None:
    pass


@dataclass(frozen=True)
class ScriptContext:
    """
    What a script evaluator may see and do.

    ``scope`` is a read-only view of the caller's variables.
    """
    append: Callable[[str], None]
    scope: Mapping[str, Any]
    input: Any = None
    output: Any = None
    exit: Callable[[], None] = _no_exit
    template_name: str = ""
    line: int = 1


@dataclass
class TagFrame:
    """Private buffer of a tag body while the engine is inside START_TAG/END_TAG."""
    name: str = ""
    script_source: str = ""
    line: int = 0
    parent: Optional["TagFrame"] = field(default=None, repr=False)


ErrorCallback = Callable[[BaseException], Union[None, Awaitable[None]]]


__all__ = ["EnginePhase", "ScriptContext", "TagFrame", "ErrorCallback"]
