"""
Execution engine for play templates.

Pulls tokens from the lexer, dispatches each one to its hook, owns the
output buffer and awaits SCRIPT evaluations strictly in document order.

Early termination is split in two flags: ``exiting`` is raised by a
directive (``request_exit()``), ``exited`` is set by the first print
operation that sees it. After that every append is a no-op, but the scan
loop still runs to EOF and still awaits later scripts, so their side
effects happen while their text is dropped. ``strict_abort`` stops the
scan loop instead.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from types import MappingProxyType
from typing import Any, Mapping, Optional

from ..config import EngineConfig
from ..errors import TemplateCompilerError, UnimplementedDirectiveError
from .compiler import TemplateCompiler
from .lexer import TemplateLexer
from .protocols import OutputSink, ScriptEvaluator
from .record import TemplateRecord
from .tokens import Token
from .types import EnginePhase, ErrorCallback, ScriptContext, TagFrame

logger = logging.getLogger(__name__)


def _ignore_error(_e: BaseException) -> None:
    pass


def _strip_leading_break(text: str) -> str:
    if text.startswith("\r\n"):
        return text[2:]
    if text.startswith("\n"):
        return text[1:]
    return text


class PageCompiler(TemplateCompiler):
    """
    Base engine: renders PLAIN text, runs SCRIPT directives, drops comments.

    EXPR, MESSAGE, ACTION, ABS_ACTION, START_TAG and END_TAG are extension
    points; this engine raises UnimplementedDirectiveError for them.
    """

    def __init__(
        self,
        evaluator: ScriptEvaluator,
        scope: Optional[Mapping[str, Any]] = None,
        config: Optional[EngineConfig] = None,
    ):
        """
        Args:
            evaluator: Runs the code of SCRIPT directives
            scope: Variables visible to scripts; never mutated by the engine
            config: Engine settings, defaults when omitted
        """
        self.evaluator = evaluator
        self.scope: Mapping[str, Any] = scope if scope is not None else {}
        self.config = config or EngineConfig()
        self.strict_abort = self.config.strict_abort
        self._reset()

    def _reset(self) -> None:
        self.input: Any = None
        self.output: Optional[OutputSink] = None
        self.next: ErrorCallback = _ignore_error

        self.tag: Optional[TagFrame] = None
        self.level = 0
        self.current_line = 0          # completed output lines
        self.compiled_source = ""
        self.skip_line_break = False

        self.exiting = False
        self.exited = False
        self.do_next_scan = True

        self.state: Optional[Token] = None
        self.parser: Optional[TemplateLexer] = None
        self.template: Optional[TemplateRecord] = None
        self.phase = EnginePhase.SCANNING
        self.error_count = 0

        self._marking = False
        self._last_mark = 0

    # ======= Execution =======

    async def execute(
        self,
        template: TemplateRecord,
        input: Any = None,
        output: Optional[OutputSink] = None,
        on_error: Optional[ErrorCallback] = None,
    ) -> str:
        """
        Renders a template record.

        Args:
            template: Record to render; receives compiled_output and line_map
            input: Request-like handle passed through to scripts
            output: Sink receiving the final text (``write`` + ``end``/``flush``)
            on_error: Called once per failed SCRIPT evaluation, may be async

        Returns:
            The rendered text, equal to ``template.compiled_output``

        Raises:
            UnimplementedDirectiveError: For a directive this engine has no handler for
        """
        self._reset()
        self.input = input
        self.output = output
        if on_error is not None:
            self.next = on_error
        self.template = template
        template.line_map.clear()
        template.seal()
        self.parser = TemplateLexer(self.source())

        self.head()
        try:
            await self._scan()
        except Exception:
            template.compiled_output = self.compiled_source
            raise
        self.end()

        self.phase = EnginePhase.DONE
        template.compiled_output = self.compiled_source
        logger.debug(
            "Rendered '%s': %d chars, %d script faults",
            template.name, len(self.compiled_source), self.error_count,
        )
        return self.compiled_source

    async def _scan(self) -> None:
        assert self.parser is not None
        while not (self.strict_abort and self.exiting):
            self.phase = EnginePhase.HALTED if self.exited else EnginePhase.SCANNING
            if self.do_next_scan:
                self.state = self.parser.next_token()
            else:
                self.do_next_scan = True

            if self.state is Token.EOF:
                break

            self.phase = EnginePhase.DISPATCHING
            await self._dispatch(self.state)

    async def _dispatch(self, token: Optional[Token]) -> None:
        if token is Token.PLAIN:
            self.plain()
        elif token is Token.SCRIPT:
            try:
                await self.script()
            except Exception as e:
                await self._report(e)
        elif token is Token.EXPR:
            self.expr()
        elif token is Token.MESSAGE:
            self.message()
        elif token is Token.ACTION:
            self.action(False)
        elif token is Token.ABS_ACTION:
            self.action(True)
        elif token is Token.COMMENT:
            self.skip_line_break = True
        elif token is Token.START_TAG:
            self.start_tag()
        elif token is Token.END_TAG:
            self.end_tag()

    async def _report(self, e: Exception) -> None:
        self.error_count += 1
        name = self.template.name if self.template else ""
        line = self.parser.current_line() if self.parser else 0
        logger.warning(
            "Script error in %s:%d: %s: %s", name, line, type(e).__name__, e,
            exc_info=logger.isEnabledFor(logging.DEBUG),
        )
        try:
            result = self.next(e)
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.exception("Error callback failed for script error in %s:%d", name, line)

    def _unimplemented(self, token: Token) -> UnimplementedDirectiveError:
        name = self.template.name if self.template else ""
        line = self.parser.current_line() if self.parser else None
        return UnimplementedDirectiveError(token, name, line)

    # ======= Hooks =======

    def source(self) -> str:
        return self.template.get_source() if self.template else ""

    def head(self) -> None:
        logger.debug("Executing '%s'", self.template.name if self.template else "")

    def end(self) -> None:
        sink = self.output
        if sink is None:
            return
        sink.write(self.compiled_source)
        if hasattr(sink, "end"):
            sink.end()
        elif hasattr(sink, "flush"):
            sink.flush()

    def plain(self) -> None:
        assert self.parser is not None
        text = self.parser.current_text()
        if self.skip_line_break:
            self.skip_line_break = False
            if self.config.swallow_comment_newline:
                text = _strip_leading_break(text)
        self._append(text)

    async def script(self) -> Any:
        """Evaluates the current SCRIPT span; exceptions are evaluation faults."""
        assert self.parser is not None
        context = ScriptContext(
            append=self._append,
            scope=MappingProxyType(self.scope),
            input=self.input,
            output=self.output,
            exit=self.request_exit,
            template_name=self.template.name if self.template else "",
            line=self.parser.current_line(),
        )
        evaluation = self.evaluator.evaluate(self.parser.current_text(), context)
        if self.config.script_timeout is not None:
            return await asyncio.wait_for(evaluation, self.config.script_timeout)
        return await evaluation

    def expr(self) -> None:
        raise self._unimplemented(Token.EXPR)

    def message(self) -> None:
        raise self._unimplemented(Token.MESSAGE)

    def action(self, absolute: bool) -> None:
        raise self._unimplemented(Token.ABS_ACTION if absolute else Token.ACTION)

    def start_tag(self) -> None:
        raise self._unimplemented(Token.START_TAG)

    def end_tag(self) -> None:
        raise self._unimplemented(Token.END_TAG)

    # ======= Tags =======

    def push_tag(self, name: str) -> TagFrame:
        """Opens a tag body: following PLAIN text goes to the frame's buffer."""
        line = self.parser.current_line() if self.parser else 0
        self.tag = TagFrame(name=name, line=line, parent=self.tag)
        self.level += 1
        return self.tag

    def pop_tag(self) -> TagFrame:
        """Closes the innermost tag body and returns it."""
        if self.tag is None:
            raise TemplateCompilerError(
                "end of tag without a matching start",
                self.template.name if self.template else "",
                self.parser.current_line() if self.parser else None,
            )
        frame = self.tag
        self.tag = frame.parent
        self.level -= 1
        return frame

    def tag_print(self, text: str) -> None:
        if self.tag is None:
            raise TemplateCompilerError("tag body text outside of a tag")
        if not self.exiting:
            self.tag.script_source += text

    # ======= Output =======

    def request_exit(self) -> None:
        """Asks the engine to stop producing output."""
        self.exiting = True

    def _check_exit(self) -> None:
        if self.exiting:
            self.exited = True

    def _append(self, text: Any) -> None:
        if not isinstance(text, str):
            text = str(text)
        if self.level == 0:
            self.print(text)
        else:
            self.tag_print(text)

    def _emit(self, text: str) -> None:
        self.compiled_source += text
        completed = text.count("\n")
        if completed:
            self.current_line += completed
            self._commit_lines()

    def _commit_lines(self) -> None:
        if not self._marking or self.template is None:
            return
        line_map = self.template.line_map
        while len(line_map) < self.current_line:
            line_map.append(self._last_mark)

    def mark_line(self, line: int) -> None:
        """
        Writes a line marker and maps the current output line to ``line``.

        The entry lands in ``template.line_map`` once the output line is
        completed; lines finished before the first mark map to 0.
        """
        self._check_exit()
        if self.exited:
            return
        if not self._marking and self.template is not None:
            self._marking = True
            line_map = self.template.line_map
            line_map.extend([0] * (self.current_line - len(line_map)))
        self._last_mark = line
        self._emit(self.config.line_marker.format(line=line))

    def print(self, text: str) -> None:
        self._check_exit()
        if not self.exited:
            self._emit(text)

    def print_forced(self, text: str) -> None:
        """Appends even after the output was frozen."""
        self._check_exit()
        self._emit(text)

    def println(self, text: str = "") -> None:
        self._check_exit()
        if not self.exited:
            self._emit(text + "\n")

    def write(self, text: str) -> None:
        self.print(text)

    def writeln(self, text: str = "") -> None:
        self.println(text)

    def clear(self) -> None:
        """Discards the output produced so far, line map included."""
        self._check_exit()
        if not self.exited:
            self.compiled_source = ""
            self.current_line = 0
            if self.template is not None:
                self.template.line_map.clear()


__all__ = ["PageCompiler"]
