"""
Token vocabulary shared by the lexer and the execution engine.

A token is a pure classification of a span of template source:
either literal text or one of the directive kinds delimited by
fixed marker pairs.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Dict, Tuple


class Token(enum.Enum):
    """Directive kinds plus the end-of-input marker."""
    EOF = "EOF"
    PLAIN = "PLAIN"
    SCRIPT = "SCRIPT"            # %{...}% or {%...%}
    EXPR = "EXPR"                # ${...}
    START_TAG = "START_TAG"      # #{...}
    END_TAG = "END_TAG"          # #{/...}
    MESSAGE = "MESSAGE"          # &{...}
    ACTION = "ACTION"            # @{...}
    ABS_ACTION = "ABS_ACTION"    # @@{...}
    COMMENT = "COMMENT"          # *{...}*


@dataclass(frozen=True)
class Marker:
    """One row of the marker table: how a directive opens and closes."""
    token: Token
    openings: Tuple[str, ...]
    closings: Tuple[str, ...]
    nested: bool = False         # counts { and } inside the body


# Normative grammar. Openings are recognized only in PLAIN mode,
# the most specific spelling first (#{/ before #{, @@{ before @{).
MARKERS: Tuple[Marker, ...] = (
    Marker(Token.SCRIPT, ("%{", "{%"), ("}%", "%}")),
    Marker(Token.EXPR, ("${",), ("}",), nested=True),
    Marker(Token.END_TAG, ("#{/",), ("}",)),
    Marker(Token.START_TAG, ("#{",), ("}", "/}"), nested=True),
    Marker(Token.MESSAGE, ("&{",), ("}",)),
    Marker(Token.ABS_ACTION, ("@@{",), ("}",)),
    Marker(Token.ACTION, ("@{",), ("}",)),
    Marker(Token.COMMENT, ("*{",), ("}*",)),
)

MARKERS_BY_TOKEN: Dict[Token, Marker] = {m.token: m for m in MARKERS}

# Tokens whose handling is left to dialect engines.
EXTENSION_TOKENS = frozenset({
    Token.EXPR,
    Token.MESSAGE,
    Token.ACTION,
    Token.ABS_ACTION,
    Token.START_TAG,
    Token.END_TAG,
})


__all__ = ["Token", "Marker", "MARKERS", "MARKERS_BY_TOKEN", "EXTENSION_TOKENS"]
