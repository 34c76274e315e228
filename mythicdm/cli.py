"""Mythic narrator: replay/inspection CLI dispatcher.

All subcommands live in ``mythicdm/commands/*.py`` and expose a
``register(subparsers)`` function that adds themselves to argparse.
"""
from __future__ import annotations

import argparse
import logging
import sys

from mythic.app.config import LOG_LEVEL
from mythicdm.commands.registry import register_all


def main(argv: list[str] | None = None) -> None:
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    parser = argparse.ArgumentParser(
        prog="mythicdm",
        description="Mythic narrator: deterministic narration engine CLI",
    )
    sub = parser.add_subparsers(dest="command")
    register_all(sub)

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(0)

    # Each command stores a ``func`` on the namespace
    rc = args.func(args)
    sys.exit(rc or 0)
