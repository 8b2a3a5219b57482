from __future__ import annotations

from importlib import metadata


def tool_version() -> str:
    """
    Installed package version.
    Imports nothing else from the package to stay cycle-free.
    """
    try:
        return metadata.version("playtpl")
    except metadata.PackageNotFoundError:
        return "0.0.0"


__all__ = ["tool_version"]
