"""``mythicdm spell-name``: escalated spell name for a cast."""
from __future__ import annotations

from mythic.app.models.presentation import SPELL_RARITIES
from mythic.app.presentation.spell_names import build_spell_name, spell_name_band, spell_tier_score
from mythicdm.commands.output import print_json


def register(subparsers) -> None:
    p = subparsers.add_parser("spell-name", help="Build an escalated spell name")
    p.add_argument("base", nargs="?", default="", help="Base spell name (blank uses a classic fallback)")
    p.add_argument("--rank", type=int, default=1, help="Spell rank (min 1)")
    p.add_argument("--rarity", choices=SPELL_RARITIES, default="magical", help="Spell rarity")
    p.add_argument("--escalation", type=int, default=0, help="Escalation level (min 0)")
    p.add_argument("--seed", default="spell-name", help="Seed key")
    p.set_defaults(func=run)


def run(args) -> int:
    score = spell_tier_score(args.rank, args.rarity, args.escalation)
    name = build_spell_name(args.base, args.rank, args.rarity, args.escalation, args.seed)
    print_json({"name": name, "score": score, "band": spell_name_band(score)})
    return 0
