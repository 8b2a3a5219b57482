"""
Base interface for template engines.

Lists the dispatch hooks an engine provides, one per token kind.
Dialect engines subclass a concrete engine and override only the
hooks their templates use.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class TemplateCompiler(ABC):

    @abstractmethod
    def source(self) -> str:
        """Source of the template being executed."""
        pass

    @abstractmethod
    def head(self) -> None:
        """Called once before the first token."""
        pass

    @abstractmethod
    def end(self) -> None:
        """Called once after EOF."""
        pass

    @abstractmethod
    def plain(self) -> None:
        pass

    # %{...}% or {%...%}
    @abstractmethod
    async def script(self) -> Any:
        pass

    # ${...}
    @abstractmethod
    def expr(self) -> None:
        pass

    # &{...}
    @abstractmethod
    def message(self) -> None:
        pass

    # @{...}, absolute => @@{...}
    @abstractmethod
    def action(self, absolute: bool) -> None:
        pass

    # #{...}
    @abstractmethod
    def start_tag(self) -> None:
        pass

    # #{/...}
    @abstractmethod
    def end_tag(self) -> None:
        pass


__all__ = ["TemplateCompiler"]
