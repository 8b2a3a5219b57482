from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import DEFAULT_CFG_FILE, load_config, read_yaml_map
from .errors import PlaytplUserError
from .render import create_page_compiler
from .template.common import load_template
from .template.lexer import TemplateLexer
from .version import tool_version


def _setup_logging() -> None:
    root = logging.getLogger("playtpl")
    if root.handlers:
        return
    level = logging.DEBUG if os.environ.get("PLAYTPL_DEBUG") else logging.WARNING
    root.setLevel(level)
    h = logging.StreamHandler()
    h.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
    root.addHandler(h)


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="playtpl",
        description="Render templates with embedded script directives",
        add_help=True,
    )
    p.add_argument("-v", "--version", action="version", version=f"%(prog)s {tool_version()}")
    sub = p.add_subparsers(dest="cmd", required=True)

    sp_render = sub.add_parser("render", help="render a template to stdout")
    sp_render.add_argument("template", help="template file (suffix .tpl/.html may be omitted)")
    sp_render.add_argument(
        "--scope",
        metavar="FILE.yaml",
        help="YAML mapping with variables visible to scripts",
    )
    sp_render.add_argument(
        "--var",
        action="append",
        metavar="NAME=VALUE",
        help="string variable for scripts (repeatable, overrides --scope)",
    )
    sp_render.add_argument(
        "--config",
        metavar="FILE",
        help=f"engine config (default: ./{DEFAULT_CFG_FILE} when present)",
    )
    sp_render.add_argument(
        "--strict-abort",
        action="store_true",
        help="stop scanning as soon as a script requests exit",
    )

    sp_tokens = sub.add_parser("tokens", help="dump the token stream as JSON lines")
    sp_tokens.add_argument("template", help="template file")

    return p


def _parse_vars(items: Optional[List[str]]) -> Dict[str, str]:
    """Parses NAME=VALUE pairs."""
    result: Dict[str, str] = {}
    for item in items or []:
        if "=" not in item:
            raise ValueError(f"Invalid variable '{item}'. Expected 'NAME=VALUE'")
        name, value = item.split("=", 1)
        name = name.strip()
        if not name.isidentifier():
            raise ValueError(f"Invalid variable name '{name}'")
        result[name] = value
    return result


def _build_scope(ns: argparse.Namespace) -> Dict[str, Any]:
    scope: Dict[str, Any] = {}
    if ns.scope:
        scope.update(read_yaml_map(Path(ns.scope)))
    scope.update(_parse_vars(ns.var))
    return scope


def _run_render(ns: argparse.Namespace) -> int:
    cfg_path = Path(ns.config) if ns.config else Path.cwd() / DEFAULT_CFG_FILE
    if ns.config and not cfg_path.is_file():
        raise PlaytplUserError(f"Config file not found: {cfg_path}")
    config = load_config(cfg_path)
    if ns.strict_abort:
        config = replace(config, strict_abort=True)

    template = load_template(Path(ns.template))
    compiler = create_page_compiler(_build_scope(ns), config)

    faults: List[BaseException] = []

    def on_error(e: BaseException) -> None:
        faults.append(e)
        sys.stderr.write(f"{template.name}: script error: {type(e).__name__}: {e}\n")

    text = asyncio.run(compiler.execute(template, output=sys.stdout, on_error=on_error))
    logging.getLogger(__name__).debug("render finished: %d chars", len(text))
    return 2 if faults else 0


def _run_tokens(ns: argparse.Namespace) -> int:
    template = load_template(Path(ns.template))
    lexer = TemplateLexer(template.source)
    for span in lexer.iter_spans():
        sys.stdout.write(json.dumps({
            "token": span.token.name,
            "text": span.text,
            "line": span.line,
            "begin": span.begin,
            "end": span.end,
        }, ensure_ascii=False) + "\n")
    return 0


def main(argv: list[str] | None = None) -> int:
    _setup_logging()
    ns = _build_parser().parse_args(argv)

    try:
        if ns.cmd == "render":
            return _run_render(ns)
        if ns.cmd == "tokens":
            return _run_tokens(ns)
    except PlaytplUserError as e:
        sys.stderr.write(str(e).rstrip() + "\n")
        return 1
    except ValueError as e:
        sys.stderr.write(str(e).rstrip() + "\n")
        return 1

    return 2


if __name__ == "__main__":
    raise SystemExit(main())
