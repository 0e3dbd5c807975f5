"""Plains CLI: boot the pipeline and run one task by name."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Sequence

from plains_core.app import Plains
from plains_core.config import ConfigLoader
from plains_core.errors import PlainsError, UnknownTaskError
from plains_core.log import configure_logging

CLI_VERSION = "0.1.0"

# Bare ``key=value`` tokens are rewritten into regular options.
_ASSIGNMENT_OPTIONS = {
    "src": "--src",
    "dist": "--dist",
    "config": "--config",
    "environment": "--environment",
}
_FLAG_OPTIONS = {"verbose": "--verbose", "silent": "--silent"}

logger = logging.getLogger("plains_cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="plains",
        description="Plains: compile source entries into a mirrored destination tree.",
    )
    parser.add_argument("--version", action="version", version=f"plains v{CLI_VERSION}")
    parser.add_argument("task", nargs="?", help="task to run, e.g. sass or clean")
    parser.add_argument("--src", help="source root containing the entry files")
    parser.add_argument("--dist", help="destination root for processed resources")
    parser.add_argument("--config", help="path to a plains.toml or plains.yml file")
    parser.add_argument("--environment", help="build environment (default: production)")
    parser.add_argument("--list", action="store_true", help="list the available tasks")
    parser.add_argument("--status", action="store_true", help="show roots, stacks and tasks")
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("--verbose", action="store_true", help="enable debug logging")
    verbosity.add_argument("--silent", action="store_true", help="only log warnings and errors")
    return parser


def normalize_tokens(tokens: Sequence[str]) -> list[str]:
    """Translate ``task=sass`` style tokens into regular CLI arguments."""

    normalized: list[str] = []
    for token in tokens:
        if token.startswith("-") or "=" not in token:
            normalized.append(_FLAG_OPTIONS.get(token, token))
            continue
        key, value = token.split("=", 1)
        if key == "task":
            normalized.append(value)
        elif key in _ASSIGNMENT_OPTIONS:
            normalized.extend([_ASSIGNMENT_OPTIONS[key], value])
        elif key in _FLAG_OPTIONS:
            if value.lower() == "true":
                normalized.append(_FLAG_OPTIONS[key])
        else:
            normalized.append(token)
    return normalized


def main(
    argv: Sequence[str] | None = None,
    *,
    start_dir: Path | str | None = None,
) -> int:
    """Boot plains and run the requested task."""

    tokens = list(argv) if argv is not None else list(sys.argv[1:])
    parser = build_parser()
    try:
        args = parser.parse_args(normalize_tokens(tokens))
    except SystemExit as exc:
        return exc.code or 0

    configure_logging(verbose=args.verbose, silent=args.silent)

    loader = ConfigLoader(
        start_dir=Path(start_dir) if start_dir else None,
        config_path=Path(args.config) if args.config else None,
        cli_overrides={
            "src": args.src,
            "dist": args.dist,
            "environment": args.environment,
        },
    )
    app = Plains(loader=loader)

    try:
        app.boot()
        if args.list:
            return _print_tasks(app)
        if args.status:
            return _print_status(app)
        if not args.task:
            parser.print_help()
            return 0
        asyncio.run(app.run(args.task))
    except UnknownTaskError as exc:
        available = ", ".join(app.contractor.tasks()) or "none"
        logger.error("%s (available tasks: %s)", exc, available)
        return 1
    except PlainsError as exc:
        logger.error("%s", exc)
        return 1
    return 0


def _print_tasks(app: Plains) -> int:
    for name in app.contractor.tasks():
        print(name)
    return 0


def _print_status(app: Plains) -> int:
    status = app.status()
    print(f"environment: {status.environment}")
    print(f"src:         {status.src}")
    print(f"dist:        {status.dist}")
    print(f"workers:     {', '.join(status.workers) or 'none'}")
    print(f"tasks:       {', '.join(status.tasks) or 'none'}")
    print("stacks:")
    for name, count in status.stacks.items():
        print(f"  {name:<20} {count} entr{'y' if count == 1 else 'ies'}")
    return 0
