"""
Exception taxonomy of playtpl.

All expected errors that should be displayed to the user
as clean messages (without stack traces) must inherit from PlaytplUserError.

Programming errors and bugs should NOT inherit from PlaytplUserError:
they will propagate with full tracebacks.

Script evaluation faults are not wrapped here: they are reported through
the engine's error callback with the exception the script raised.
"""

from __future__ import annotations

from typing import Optional


class PlaytplUserError(Exception):
    """
    Base class for all user-facing errors in playtpl.

    These errors indicate problems that the user can fix:
    a template written for another dialect, a broken config file,
    a missing template, etc.
    """
    pass


class TemplateCompilerError(PlaytplUserError):
    """Fatal fault of an execution pass, located by template name and line."""

    def __init__(
        self,
        message: str,
        template_name: str = "",
        line: Optional[int] = None,
    ):
        super().__init__(message)
        self.template_name = template_name
        self.line = line

    def __str__(self) -> str:
        where = self.template_name or "<template>"
        if self.line is not None:
            where = f"{where}:{self.line}"
        return f"{where}: {self.args[0]}"


class UnimplementedDirectiveError(TemplateCompilerError):
    """A directive kind the engine's dialect has no handler for."""

    def __init__(self, token, template_name: str = "", line: Optional[int] = None):
        super().__init__(f"{token.name} directive is not implemented by this engine", template_name, line)
        self.token = token


class TemplateStateError(PlaytplUserError):
    """Mutation of a template record that no longer allows it."""
    pass


class TemplateNotFoundError(PlaytplUserError):
    """Template file could not be located."""
    pass


class ConfigLoadError(PlaytplUserError, ValueError):
    """Invalid configuration file, with the offending key in the message."""
    pass


__all__ = [
    "PlaytplUserError",
    "TemplateCompilerError",
    "UnimplementedDirectiveError",
    "TemplateStateError",
    "TemplateNotFoundError",
    "ConfigLoadError",
]
