"""
Concrete script evaluators.

The engine only depends on the ScriptEvaluator protocol;
this package provides the implementation used by default.
"""

from .python import PythonScriptEvaluator, Document, normalize_code

__all__ = ["PythonScriptEvaluator", "Document", "normalize_code"]
