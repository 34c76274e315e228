"""``mythicdm spectacle``: spectacle line for a cast."""
from __future__ import annotations

from mythic.app.presentation.spectacle import build_spectacle_line
from mythicdm.commands.output import print_json


def register(subparsers) -> None:
    p = subparsers.add_parser("spectacle", help="Build a spectacle line for a spell cast")
    p.add_argument("spell", help="Displayed spell name")
    p.add_argument("--escalation", type=int, default=0, help="Escalation level")
    p.add_argument("--target", default="", help="Target name")
    p.add_argument("--element", default="", help="Style tag: element")
    p.add_argument("--mood", default="", help="Style tag: mood")
    p.add_argument("--visual", default="", help="Style tag: visual signature")
    p.add_argument("--impact", default="", help="Style tag: impact verb")
    p.add_argument("--seed", default="spectacle", help="Seed key")
    p.set_defaults(func=run)


def run(args) -> int:
    line = build_spectacle_line(
        args.seed,
        args.spell,
        args.escalation,
        {
            "element": args.element,
            "mood": args.mood,
            "visual_signature": args.visual,
            "impact_verb": args.impact,
        },
        args.target,
    )
    print_json({"line": line})
    return 0
