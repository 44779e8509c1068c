"""
Command line interface: render views or inline templates, inspect the cache.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Optional

from .config import load_config
from .engine import ViewEngine
from .errors import BreezeUserError
from .version import tool_version


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="breeze",
        description="Breeze view templates: render and cache inspection",
        add_help=True,
    )
    p.add_argument("-v", "--version", action="version", version=f"%(prog)s {tool_version()}")
    p.add_argument(
        "--config",
        metavar="FILE",
        help="YAML config file (view.paths, view.cache_max_items, ...)",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    sp_render = sub.add_parser("render", help="Render a view, a template file or inline text")
    sp_render.add_argument(
        "target",
        help="view name | path to a template file | template text (with --inline)",
    )
    sp_render.add_argument(
        "--data",
        metavar="JSON|@FILE|-",
        help="template data: JSON text, @file to read from a file, or - to read stdin",
    )
    sp_render.add_argument(
        "--inline",
        action="store_true",
        help="treat TARGET as template text",
    )

    sp_cache = sub.add_parser("cache", help="Template cache maintenance (JSON)")
    sp_cache.add_argument("action", choices=["stats", "clear"], help="what to do")

    return p


def _parse_data(data_arg: Optional[str]) -> Any:
    """
    Parses the --data argument.

    Supports three forms:
    - JSON text: '{"a": 1}'
    - From file: @path/to/data.json
    - From stdin: -
    """
    if not data_arg:
        return {}

    if data_arg == "-":
        raw = sys.stdin.read()
    elif data_arg.startswith("@"):
        file_path = Path(data_arg[1:])
        try:
            raw = file_path.read_text(encoding="utf-8")
        except OSError as e:
            raise ValueError(f"Failed to read data file {file_path}: {e}")
    else:
        raw = data_arg

    if not raw.strip():
        return {}
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON data: {e}")


def _setup_logging() -> None:
    if not os.environ.get("BREEZE_DEBUG"):
        return
    h = logging.StreamHandler()
    h.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
    root = logging.getLogger("breeze")
    root.setLevel(logging.DEBUG)
    root.addHandler(h)


def main(argv: list[str] | None = None) -> int:
    ns = _build_parser().parse_args(argv)
    _setup_logging()

    try:
        config = load_config(Path(ns.config) if ns.config else None)
        engine = ViewEngine(config)

        if ns.cmd == "render":
            data = _parse_data(ns.data)
            if ns.inline:
                out = engine.render_string(ns.target, data)
            elif Path(ns.target).is_file():
                out = engine.render_file(ns.target, data)
            else:
                out = engine.render(ns.target, data)
            sys.stdout.write(out)
            return 0

        if ns.cmd == "cache":
            if ns.action == "clear":
                engine.clear_cache(disk=True)
            sys.stdout.write(json.dumps(engine.cache_stats().model_dump(mode="json"), ensure_ascii=False))
            return 0

    except BreezeUserError as e:
        sys.stderr.write(str(e).rstrip() + "\n")
        return 2
    except ValueError as e:
        sys.stderr.write(str(e).rstrip() + "\n")
        return 2

    return 2


if __name__ == "__main__":
    raise SystemExit(main())
