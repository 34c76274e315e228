"""``mythicdm mode``: show which narrator mode a request would get."""
from __future__ import annotations

from mythic.app.core.narration_mode import resolve_narrator_mode
from mythicdm.commands.output import print_json


def register(subparsers) -> None:
    p = subparsers.add_parser("mode", help="Resolve narrator mode (query > header > env > default)")
    p.add_argument("--env", dest="env_mode", default=None, help="Env mode (default: MYTHIC_DM_NARRATOR_MODE)")
    p.add_argument("--header", dest="header_mode", default=None, help="Header-supplied mode")
    p.add_argument("--query", dest="query_mode", default=None, help="Query-string mode")
    p.add_argument(
        "--allow-query-override",
        action="store_true",
        default=None,
        help="Honor --query (default: MYTHIC_ALLOW_NARRATOR_QUERY_OVERRIDE)",
    )
    p.set_defaults(func=run)


def run(args) -> int:
    resolution = resolve_narrator_mode(
        env_mode=args.env_mode,
        header_mode=args.header_mode,
        query_mode=args.query_mode,
        allow_query_override=args.allow_query_override,
    )
    print_json(resolution.model_dump())
    return 0
