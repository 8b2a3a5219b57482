from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .errors import ConfigLoadError

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1
DEFAULT_CFG_FILE = "playtpl.yaml"

# --------------------------------------------------------------------------- #
# DEFAULTS
# --------------------------------------------------------------------------- #
_DEFAULT_CFG: Dict[str, Any] = {
    "schema_version": SCHEMA_VERSION,
    # stop scanning as soon as a directive requests exit
    # (by default only the output is frozen and scanning runs to EOF)
    "strict_abort": False,
    # drop the line break that follows a *{comment}*
    "swallow_comment_newline": True,
    "line_marker": "// line {line}",
    # seconds; None = wait for scripts forever
    "script_timeout": None,
    "await_spawned_tasks": True,
}

# --------------------------------------------------------------------------- #
# YAML loader
# --------------------------------------------------------------------------- #
_yaml = YAML(typ="safe")


@dataclass(frozen=True)
class EngineConfig:
    strict_abort: bool = False
    swallow_comment_newline: bool = True
    line_marker: str = "// line {line}"
    script_timeout: Optional[float] = None
    await_spawned_tasks: bool = True

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "EngineConfig":
        """
        Builds a validated config from a mapping of known keys.

        Raises:
            ConfigLoadError: On unknown keys or values of the wrong type
        """
        unknown = set(raw) - set(_DEFAULT_CFG)
        if unknown:
            raise ConfigLoadError(f"unknown config keys: {', '.join(sorted(unknown))}")

        for key in ("strict_abort", "swallow_comment_newline", "await_spawned_tasks"):
            if key in raw and not isinstance(raw[key], bool):
                raise ConfigLoadError(f"{key}: expected bool, got {raw[key]!r}")

        marker = raw.get("line_marker", _DEFAULT_CFG["line_marker"])
        if not isinstance(marker, str) or "{line}" not in marker:
            raise ConfigLoadError(f"line_marker: expected a string with '{{line}}', got {marker!r}")

        timeout = raw.get("script_timeout")
        if timeout is not None:
            if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
                raise ConfigLoadError(f"script_timeout: expected a positive number, got {timeout!r}")
            timeout = float(timeout)

        return cls(
            strict_abort=raw.get("strict_abort", _DEFAULT_CFG["strict_abort"]),
            swallow_comment_newline=raw.get("swallow_comment_newline", _DEFAULT_CFG["swallow_comment_newline"]),
            line_marker=marker,
            script_timeout=timeout,
            await_spawned_tasks=raw.get("await_spawned_tasks", _DEFAULT_CFG["await_spawned_tasks"]),
        )


# --------------------------------------------------------------------------- #
# HELPERS
# --------------------------------------------------------------------------- #
def _merge_defaults(raw: Dict[str, Any]) -> Dict[str, Any]:
    """User values on top of the defaults."""
    cfg = _DEFAULT_CFG.copy()
    cfg.update(raw)
    return cfg


def read_yaml_map(path: Path) -> Dict[str, Any]:
    """
    Reads a YAML file that must hold a mapping.

    Raises:
        ConfigLoadError: If the file is not valid YAML or not a mapping
    """
    try:
        raw = _yaml.load(path.read_text(encoding="utf-8")) or {}
    except YAMLError as e:
        raise ConfigLoadError(f"{path}: invalid YAML: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigLoadError(f"{path}: YAML must be a mapping")
    return raw


# --------------------------------------------------------------------------- #
# PUBLIC API
# --------------------------------------------------------------------------- #
def load_config(path: Path) -> EngineConfig:
    """
    Loads playtpl.yaml.

    • Missing file → defaults.
    • Missing schema_version → current version assumed.
    • Incompatible schema_version → ConfigLoadError.
    """
    if not path.exists():
        logger.debug("No config at %s, using defaults", path)
        return EngineConfig()

    raw = read_yaml_map(path)

    if raw.get("schema_version", SCHEMA_VERSION) != SCHEMA_VERSION:
        raise ConfigLoadError(
            f"Unsupported config schema {raw.get('schema_version')} "
            f"(tool expects {SCHEMA_VERSION})"
        )

    cfg = _merge_defaults(raw)
    cfg.pop("schema_version")
    return EngineConfig.from_dict(cfg)


__all__ = ["EngineConfig", "load_config", "read_yaml_map", "DEFAULT_CFG_FILE", "SCHEMA_VERSION"]
