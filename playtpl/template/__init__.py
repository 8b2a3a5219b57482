"""
Template core: token model, lexer, template record and execution engine.

The core knows nothing about any scripting language; SCRIPT directives
are handed to a ScriptEvaluator supplied by the caller.
"""

from __future__ import annotations

from .compiler import TemplateCompiler
from .engine import PageCompiler
from .lexer import LexerState, TemplateLexer, TokenSpan, Transition, scan_step, tokenize_template
from .protocols import OutputSink, ScriptEvaluator
from .record import TemplateRecord
from .tokens import EXTENSION_TOKENS, MARKERS, Marker, Token
from .types import EnginePhase, ScriptContext, TagFrame

__all__ = [
    "Token",
    "Marker",
    "MARKERS",
    "EXTENSION_TOKENS",
    "LexerState",
    "Transition",
    "TokenSpan",
    "TemplateLexer",
    "scan_step",
    "tokenize_template",
    "TemplateRecord",
    "TemplateCompiler",
    "PageCompiler",
    "ScriptEvaluator",
    "OutputSink",
    "ScriptContext",
    "EnginePhase",
    "TagFrame",
]
