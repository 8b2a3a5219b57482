"""
Character-level lexer for play templates.

Scans the raw source one character at a time and classifies it into
a stream of (Token, span) pairs. The lexer never fails: an unterminated
directive simply extends to the end of input.

The value returned by ``next_token()`` describes the span that has just
been *completed*, not the directive whose delimiter triggered the
transition. For ``"a%{x}%b"`` the sequence is:

    PLAIN  "a"      (closed by the "%{" opening)
    SCRIPT "x"      (closed by "}%")
    PLAIN  "b"      (closed by end of input)
    EOF    ""
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

from .tokens import MARKERS, MARKERS_BY_TOKEN, Token

logger = logging.getLogger(__name__)

_PAD = "\0"


@dataclass(frozen=True)
class LexerState:
    """Current lexical mode plus the brace depth inside EXPR/START_TAG bodies."""
    mode: Token = Token.PLAIN
    depth: int = 0


@dataclass(frozen=True)
class Transition:
    """Result of recognizing a delimiter: the mode to enter and how much to skip."""
    target: Token
    skip: int


@dataclass(frozen=True)
class TokenSpan:
    """
    A completed span with its classification.

    ``delimiter`` is the literal text the lexer skipped right after the span
    (the closing marker of a directive or the opening marker of the next one).
    """
    token: Token
    text: str
    line: int
    begin: int
    end: int
    delimiter: str = ""

    def __repr__(self) -> str:
        return f"TokenSpan({self.token.name}, {self.text!r}, line={self.line})"


def scan_step(state: LexerState, c: str, c1: str, c2: str) -> Tuple[LexerState, Optional[Transition]]:
    """
    Single step of the scanning state machine.

    Args:
        state: State before reading ``c``
        c: Character under the cursor
        c1: Next character or NUL when past the end
        c2: Character after ``c1`` or NUL when past the end

    Returns:
        The state after ``c`` and the transition it triggered, if any
    """
    mode = state.mode

    if mode is Token.PLAIN:
        head = c + c1 + c2
        for marker in MARKERS:
            for opening in marker.openings:
                if head.startswith(opening):
                    return LexerState(marker.token), Transition(marker.token, len(opening))
        return state, None

    if mode is Token.EXPR or mode is Token.START_TAG:
        if c == "}" and state.depth == 0:
            return LexerState(Token.PLAIN), Transition(Token.PLAIN, 1)
        if mode is Token.START_TAG and c == "/" and c1 == "}":
            # Self-closing tag: the "}" left behind closes an empty END_TAG.
            return LexerState(Token.END_TAG), Transition(Token.END_TAG, 1)
        if c == "{":
            return LexerState(mode, state.depth + 1), None
        if c == "}":
            return LexerState(mode, state.depth - 1), None
        return state, None

    if mode is Token.EOF:
        return state, None

    head = c + c1
    for closing in MARKERS_BY_TOKEN[mode].closings:
        if head.startswith(closing):
            return LexerState(Token.PLAIN), Transition(Token.PLAIN, len(closing))
    return state, None


class TemplateLexer:
    """
    Pull-based lexer over an immutable template source.

    Keeps two spans: ``begin..end`` accumulating since the last transition
    and ``begin2..end2`` holding the span most recently handed to the caller.
    """

    def __init__(self, source: str):
        self.source = source
        self.length = len(source)
        self.reset()

    def reset(self) -> None:
        """Rewinds the lexer to the start of the source."""
        self.begin = self.end = 0
        self.begin2 = self.end2 = 0
        self.state = LexerState()
        self._delimiter = ""

    def _found(self, last_mode: Token, skip: int) -> Token:
        # self.end points one past the character that triggered the transition
        self.begin2 = self.begin
        self.end -= 1
        self.end2 = self.end
        self._delimiter = self.source[self.end:self.end + skip]
        self.end += skip
        self.begin = self.end
        return last_mode

    def next_token(self) -> Token:
        """
        Scans up to the next transition.

        Returns:
            The mode the completed span belongs to; ``Token.EOF`` once the
            input is exhausted (and on every call after that)
        """
        source = self.source
        while True:
            left = self.length - self.end
            if left <= 0:
                self.end += 1
                last_mode = self.state.mode
                self.state = LexerState(Token.EOF)
                return self._found(last_mode, 0)

            c = source[self.end]
            self.end += 1
            c1 = source[self.end] if left > 1 else _PAD
            c2 = source[self.end + 1] if left > 2 else _PAD

            last_mode = self.state.mode
            self.state, transition = scan_step(self.state, c, c1, c2)
            if transition is not None:
                return self._found(last_mode, transition.skip)

    def current_text(self) -> str:
        """Exact source text of the span returned by the last ``next_token()``."""
        return self.source[self.begin2:self.end2]

    def current_line(self) -> int:
        """1-based source line on which the current span starts."""
        return self.source.count("\n", 0, self.begin2) + 1

    def peek_next_char(self) -> str:
        """Character right after the current span, or an empty string at the end."""
        if self.end2 < self.length:
            return self.source[self.end2]
        return ""

    def iter_spans(self) -> Iterator[TokenSpan]:
        """Yields completed spans from the current position up to (excluding) EOF."""
        while True:
            token = self.next_token()
            if token is Token.EOF:
                return
            span = TokenSpan(
                token=token,
                text=self.current_text(),
                line=self.current_line(),
                begin=self.begin2,
                end=self.end2,
                delimiter=self._delimiter,
            )
            logger.debug("lexed %r", span)
            yield span


def tokenize_template(text: str) -> List[TokenSpan]:
    """
    Convenience wrapper returning the whole span list of a template.

    Args:
        text: Template source

    Returns:
        Spans in document order, EOF not included
    """
    return list(TemplateLexer(text).iter_spans())


__all__ = [
    "LexerState",
    "Transition",
    "TokenSpan",
    "TemplateLexer",
    "scan_step",
    "tokenize_template",
]
