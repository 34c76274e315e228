"""``mythicdm board``: compose a board intro."""
from __future__ import annotations

from mythic.app.constants import BOARD_TYPES
from mythic.app.presentation.board_narration import build_board_narration
from mythicdm.commands.output import print_json


def register(subparsers) -> None:
    p = subparsers.add_parser("board", help="Compose board narration (opener + lead line)")
    p.add_argument("--seed", required=True, help="Seed key")
    p.add_argument("--type", dest="board_type", choices=BOARD_TYPES, default="town", help="Board type")
    p.add_argument("--hook", action="append", default=[], help="Active hook (repeatable)")
    p.add_argument("--time-pressure", help="Clock text")
    p.add_argument("--faction-tension", help="Faction pressure text")
    p.add_argument("--resource-window", help="Dungeon resource window text")
    p.add_argument("--region", help="Region / district name")
    p.add_argument("--last-opener", help="Opener used last time (never repeated)")
    p.set_defaults(func=run)


def run(args) -> int:
    result = build_board_narration(
        {
            "seed_key": args.seed,
            "board_type": args.board_type,
            "hooks": args.hook,
            "time_pressure": args.time_pressure,
            "faction_tension": args.faction_tension,
            "resource_window": args.resource_window,
            "region_name": args.region,
            "last_opener_id": args.last_opener,
        }
    )
    print_json(result.model_dump())
    return 0
