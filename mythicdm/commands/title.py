"""``mythicdm title``: reputation tier and title for a character."""
from __future__ import annotations

from mythic.app.presentation.reputation import build_reputation_title
from mythicdm.commands.output import print_json


def _parse_standing(entries: list[str]) -> dict[str, str] | None:
    standing: dict[str, str] = {}
    for entry in entries:
        name, sep, score = entry.partition("=")
        if not sep or not name.strip():
            return None
        standing[name.strip()] = score.strip()
    return standing


def register(subparsers) -> None:
    p = subparsers.add_parser("title", help="Derive reputation tier, display name and title")
    p.add_argument("--name", default="", help="Base character name")
    p.add_argument("--score", type=float, default=0, help="Reputation score")
    p.add_argument("--flag", action="append", default=[], help="Behavior flag (repeatable)")
    p.add_argument("--kill", action="append", default=[], help="Notable kill tag (repeatable)")
    p.add_argument("--faction", action="append", default=[], help="Faction standing as NAME=SCORE (repeatable)")
    p.add_argument("--seed", default="reputation", help="Seed key")
    p.set_defaults(func=run)


def run(args) -> int:
    standing = _parse_standing(args.faction)
    if standing is None:
        print("  ERROR: --faction expects NAME=SCORE")
        return 1
    result = build_reputation_title(
        {
            "base_name": args.name,
            "reputation_score": args.score,
            "behavior_flags": args.flag,
            "notable_kills": args.kill,
            "faction_standing": standing,
            "seed_key": args.seed,
        }
    )
    print_json(result.model_dump())
    return 0
