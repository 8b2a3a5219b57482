"""
Shared test infrastructure for playtpl.

Modules:
- file_utils: creating template and config files
- evaluators: fake script evaluators with scripted behavior
"""

from .evaluators import FakeEvaluator, delayed_write
from .file_utils import write

__all__ = ["FakeEvaluator", "delayed_write", "write"]
