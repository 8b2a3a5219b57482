"""
Helpers for loading templates from disk.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from ..errors import TemplateNotFoundError
from .record import TemplateRecord

# Suffixes tried when a template is addressed without one
TPL_SUFFIXES = (".tpl", ".tpl.html", ".html")


def resolve_template_path(path: Path) -> Path:
    """
    Locates a template file.

    Tries the path as given, then with each known suffix appended.

    Raises:
        TemplateNotFoundError: If nothing matches
    """
    if path.is_file():
        return path
    for suffix in TPL_SUFFIXES:
        candidate = path.with_name(path.name + suffix)
        if candidate.is_file():
            return candidate
    raise TemplateNotFoundError(f"Template not found: {path}")


def load_template(path: Path, name: Optional[str] = None) -> TemplateRecord:
    """
    Reads a template file into a new record.

    Args:
        path: File path, suffix optional
        name: Record name; defaults to the file path as given

    Returns:
        Fresh record with the file contents as its source
    """
    resolved = resolve_template_path(path)
    source = resolved.read_text(encoding="utf-8")
    return TemplateRecord(str(resolved), name=name or path.as_posix(), source=source)


__all__ = ["TPL_SUFFIXES", "resolve_template_path", "load_template"]
