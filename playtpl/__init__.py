"""
playtpl: renders templates that mix text with script, expression,
tag, message, action and comment directives.
"""

from __future__ import annotations

from .config import EngineConfig, load_config
from .errors import (
    PlaytplUserError,
    TemplateCompilerError,
    TemplateNotFoundError,
    TemplateStateError,
    UnimplementedDirectiveError,
)
from .evaluators import PythonScriptEvaluator
from .render import create_page_compiler, render_template
from .template import (
    PageCompiler,
    ScriptContext,
    TemplateCompiler,
    TemplateLexer,
    TemplateRecord,
    Token,
    tokenize_template,
)
from .util import StringResponse

__all__ = [
    "Token",
    "TemplateLexer",
    "tokenize_template",
    "TemplateRecord",
    "TemplateCompiler",
    "PageCompiler",
    "ScriptContext",
    "PythonScriptEvaluator",
    "StringResponse",
    "EngineConfig",
    "load_config",
    "create_page_compiler",
    "render_template",
    "PlaytplUserError",
    "TemplateCompilerError",
    "UnimplementedDirectiveError",
    "TemplateStateError",
    "TemplateNotFoundError",
]
