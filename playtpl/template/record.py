"""
Template record: source, identity and everything an execution pass leaves behind.

A record is created by the caller, mutated only by the execution engine
during a single pass and never shared between two concurrent passes.
Running two ``execute()`` calls against the same record at once is a
precondition violation with undefined results.
"""

from __future__ import annotations

import time
import uuid
from typing import Any, Dict, List, Optional

from ..errors import TemplateStateError


def _now_ms() -> int:
    # wall-clock epoch milliseconds, comparable across processes and restarts
    return time.time_ns() // 1_000_000


class TemplateRecord:
    """
    Holds a template source and the output of its rendering.

    When only ``path`` is given it is taken as the source text itself,
    which keeps ``TemplateRecord("Hello ${name}")`` short in tests and REPL.
    """

    def __init__(self, path: str = "", name: Optional[str] = None, source: str = ""):
        if not name and not source:
            source = path
        self.path = path
        self.name: str = name or str(uuid.uuid4())
        self._source = source
        self._sealed = False

        self.compiled_output: str = ""
        # index: 0-based output line, value: 1-based source line (0 = unknown)
        self.line_map: List[int] = []
        self.created_at: int = _now_ms()

    @property
    def source(self) -> str:
        return self._source

    def get_source(self) -> str:
        return self._source

    def set_source(self, source: str) -> None:
        """
        Replaces the source.

        Raises:
            TemplateStateError: If lexing has already started on this record
        """
        if self._sealed:
            raise TemplateStateError(f"Template '{self.name}' source is immutable once lexing began")
        self._source = source

    def seal(self) -> None:
        """Freezes the source; called by the engine before the first token is read."""
        self._sealed = True

    @property
    def sealed(self) -> bool:
        return self._sealed

    def finalize(self) -> None:
        """Drops the source text once the rendered output is all that is needed."""
        self._source = ""

    def get_compiled_output(self) -> str:
        return self.compiled_output

    def get_compiled_bytes(self, encoding: str = "utf-8") -> bytes:
        return self.compiled_output.encode(encoding)

    def to_dict(self) -> Dict[str, Any]:
        """Inspection shape of the record."""
        return {
            "name": self.name,
            "source": self._source,
            "compiled_output": self.compiled_output,
            "line_map": list(self.line_map),
            "created_at": self.created_at,
        }

    def __repr__(self) -> str:
        return f"TemplateRecord(name={self.name!r}, source={len(self._source)} chars)"


__all__ = ["TemplateRecord"]
