"""
Script evaluator running SCRIPT directives as Python code.

The code is compiled with top-level ``await`` allowed, so a directive can
await coroutines directly:

    %{
    rows = await load_rows()
    for row in rows:
        writeln(row)
    }%

Indentation: a code that fits on one line is stripped; in multi-line code
the first line is stripped and the following lines are dedented together,
so blocks should start on the line after the opening marker.
"""

from __future__ import annotations

import ast
import asyncio
import builtins
import inspect
import logging
import textwrap
from contextvars import ContextVar
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from ..template.types import ScriptContext

logger = logging.getLogger(__name__)

_SCRIPT_OPEN = "<script>"
_SCRIPT_CLOSE = "</script>"


class Document:
    """The ``document`` object of a script: everything written goes to the output."""

    def __init__(self, append: Callable[[str], None]):
        self._append = append

    def write(self, *values: Any) -> None:
        for value in values:
            self._append(value if isinstance(value, str) else str(value))

    def writeln(self, *values: Any) -> None:
        self.write(*values)
        self._append("\n")


def _normalize(code: str) -> Tuple[str, int]:
    # returns the code and the number of leading lines dropped from it
    stripped = code.lstrip()
    dropped = code[:len(code) - len(stripped)].count("\n")
    code = stripped.rstrip()
    if code.startswith(_SCRIPT_OPEN):
        code = code[len(_SCRIPT_OPEN):]
    if code.endswith(_SCRIPT_CLOSE):
        code = code[:-len(_SCRIPT_CLOSE)]

    first, sep, rest = code.partition("\n")
    if not sep:
        return first.strip(), dropped
    rest = textwrap.dedent(rest)
    first = first.strip()
    if not first:
        return rest, dropped + 1
    return f"{first}\n{rest}", dropped


def normalize_code(code: str) -> str:
    """Strips an optional <script> wrapper and the indentation of the template."""
    return _normalize(code)[0]


# collects the tasks created while a script (or a task it spawned) runs
_spawned_tasks: ContextVar[Optional[List[asyncio.Task]]] = ContextVar("playtpl_spawned_tasks", default=None)


def _install_task_factory(loop: asyncio.AbstractEventLoop) -> None:
    """
    Wraps the loop's task factory so tasks created under a collecting
    context are recorded. Installed once per loop; other tasks are untouched.
    """
    previous = loop.get_task_factory()
    if getattr(previous, "_playtpl_tracking", False):
        return

    def factory(loop, coro, **kwargs):
        if previous is None:
            task = asyncio.Task(coro, loop=loop, **kwargs)
        else:
            task = previous(loop, coro, **kwargs)
        spawned = _spawned_tasks.get()
        if spawned is not None:
            spawned.append(task)
        return task

    factory._playtpl_tracking = True
    loop.set_task_factory(factory)


class PythonScriptEvaluator:
    """
    Evaluates directive code in a fresh namespace per directive.

    Names visible to the code: the builtins, ``document``, ``write``,
    ``writeln``, ``request``, ``response``, ``exit``, ``log``, ``scope``
    and every scope variable (scope variables win on name clashes).
    """

    def __init__(
        self,
        await_spawned_tasks: bool = True,
        extra_globals: Optional[Mapping[str, Any]] = None,
    ):
        """
        Args:
            await_spawned_tasks: Also wait for tasks the code created and left running
            extra_globals: Additional names injected before the scope
        """
        self.await_spawned_tasks = await_spawned_tasks
        self.extra_globals = dict(extra_globals or {})

    def _namespace(self, context: ScriptContext) -> Dict[str, Any]:
        document = Document(context.append)
        namespace: Dict[str, Any] = {
            "__name__": "__playtpl__",
            "__builtins__": builtins,
            "document": document,
            "write": document.write,
            "writeln": document.writeln,
            "request": context.input,
            "response": context.output,
            "exit": context.exit,
            "log": logging.getLogger(f"playtpl.script.{context.template_name or 'template'}"),
            "scope": context.scope,
        }
        namespace.update(self.extra_globals)
        namespace.update(context.scope)
        return namespace

    async def evaluate(self, code: str, context: ScriptContext) -> Any:
        """
        Runs one directive.

        Returns:
            None; output goes through ``context.append``

        Raises:
            SyntaxError: If the code does not compile
            Exception: Whatever the code or a task it spawned raises
        """
        filename = context.template_name or "<template>"
        source, dropped = _normalize(code)
        tree = compile(
            source, filename, "exec",
            flags=ast.PyCF_ONLY_AST | ast.PyCF_ALLOW_TOP_LEVEL_AWAIT,
        )
        # tracebacks point at template lines
        ast.increment_lineno(tree, max(context.line - 1, 0) + dropped)
        compiled = compile(tree, filename, "exec", flags=ast.PyCF_ALLOW_TOP_LEVEL_AWAIT)

        namespace = self._namespace(context)
        if not self.await_spawned_tasks:
            result = eval(compiled, namespace)
            if inspect.isawaitable(result):
                await result
            return None

        _install_task_factory(asyncio.get_running_loop())
        spawned: List[asyncio.Task] = []
        token = _spawned_tasks.set(spawned)
        try:
            result = eval(compiled, namespace)
            if inspect.isawaitable(result):
                await result
        finally:
            _spawned_tasks.reset(token)
        await _settle_spawned(spawned)
        return None


async def _settle_spawned(spawned: List[asyncio.Task]) -> None:
    # tasks already finished when the script returned are not inspected
    error: Optional[BaseException] = None
    settled = 0
    while True:
        pending = [t for t in spawned[settled:] if not t.done()]
        settled = len(spawned)
        if not pending:
            break
        logger.debug("Waiting for %d task(s) spawned by script", len(pending))
        results = await asyncio.gather(*pending, return_exceptions=True)
        for r in results:
            if error is None and isinstance(r, Exception):
                error = r
    if error is not None:
        raise error


__all__ = ["PythonScriptEvaluator", "Document", "normalize_code"]
