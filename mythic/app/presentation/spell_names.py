"""Spell name escalation: the same spell reads bigger as rank, rarity and escalation climb.

Bands by score (rank*2 + rarity + escalation):
  <=3   classic      "Fireball", "Grand Fireball"
  <=7   enhanced     "Surge Fireball"
  <=11  heroic       "Tempest Fireball Nova"
  <=15  mythic       "Omega Fireball Cascade"
  >15   absurd       "Hyper Zappy Supernova Turbo Fireball Deluxe"
"""
from __future__ import annotations

import logging
from typing import Any

from mythic.app.constants import (
    SPELL_ABSURD_SUFFIX_CHANCE,
    SPELL_BASE_FALLBACK_SEED,
    SPELL_HEROIC_TAIL_CHANCE,
    SPELL_MYTHIC_BRIDGE_CHANCE,
    SPELL_WHIMSY_CHANCE,
    SPELL_WHIMSY_MIN_SCORE,
)
from mythic.app.core.rng import stable_float
from mythic.app.core.selection import pick_deterministic
from mythic.app.core.text_utils import safe_int
from mythic.app.models.presentation import coerce_rarity
from mythic.app.presentation.word_banks import load_word_banks

logger = logging.getLogger(__name__)

RARITY_SCORE: dict[str, int] = {
    "common": 0,
    "magical": 1,
    "unique": 2,
    "legendary": 3,
    "mythic": 4,
    "unhinged": 5,
}

SPELL_BANDS: tuple[str, ...] = ("classic", "enhanced", "heroic", "mythic", "absurd")


def clean_spell_base(spell_base: str) -> str:
    """Collapse whitespace; blank names get a classic spell.

    The fallback is drawn with a fixed seed, not the caller's, so every unnamed
    spell gets the same classic name.
    """
    trimmed = " ".join(str(spell_base or "").split())
    if trimmed:
        return trimmed
    return pick_deterministic(load_word_banks().spell_classic, SPELL_BASE_FALLBACK_SEED)


def spell_tier_score(rank: Any, rarity: Any, escalation_level: Any) -> int:
    safe_rank = safe_int(rank, default=1, minimum=1)
    safe_escalation = safe_int(escalation_level, default=0, minimum=0)
    return safe_rank * 2 + RARITY_SCORE[coerce_rarity(rarity)] + safe_escalation


def spell_name_band(score: int) -> str:
    if score <= 3:
        return "classic"
    if score <= 7:
        return "enhanced"
    if score <= 11:
        return "heroic"
    if score <= 15:
        return "mythic"
    return "absurd"


def _join(*parts: str | None) -> str:
    return " ".join(p for p in parts if p).strip()


def build_spell_name(
    spell_base: str,
    rank: Any,
    rarity: Any,
    escalation_level: Any,
    seed_key: str = "spell-name",
) -> str:
    """Escalated display name for a spell; identical arguments give identical names."""
    banks = load_word_banks()
    base = clean_spell_base(spell_base)
    score = spell_tier_score(rank, rarity, escalation_level)
    band = spell_name_band(score)

    whimsical = None
    if score >= SPELL_WHIMSY_MIN_SCORE and stable_float(seed_key, "whimsy") < SPELL_WHIMSY_CHANCE:
        whimsical = pick_deterministic(banks.spell_whimsy, seed_key, "whimsy-word")

    if band == "classic":
        lead = pick_deterministic(banks.spell_classic_leads, seed_key, "classic-lead") if score > 1 else ""
        return _join(lead, base)

    if band == "enhanced":
        lead = pick_deterministic(banks.spell_enhanced, seed_key, "enhanced")
        return _join(lead, whimsical, base)

    if band == "heroic":
        lead = pick_deterministic(banks.spell_heroic, seed_key, "heroic")
        tail = None
        if stable_float(seed_key, "heroic-tail") < SPELL_HEROIC_TAIL_CHANCE:
            tail = pick_deterministic(banks.spell_heroic_tails, seed_key, "heroic-tail-word")
        return _join(lead, whimsical, base, tail)

    if band == "mythic":
        lead = pick_deterministic(banks.spell_mythic, seed_key, "mythic")
        bridge = None
        if stable_float(seed_key, "mythic-bridge") < SPELL_MYTHIC_BRIDGE_CHANCE:
            bridge = pick_deterministic(banks.spell_mythic_bridges, seed_key, "mythic-bridge-word")
        return _join(lead, whimsical, base, bridge)

    absurd_a = pick_deterministic(banks.spell_absurd, seed_key, "absurd-a")
    absurd_b = pick_deterministic(banks.spell_absurd, seed_key, "absurd-b")
    core = pick_deterministic(banks.spell_mythic + banks.spell_heroic, seed_key, "absurd-core")
    suffix = None
    if stable_float(seed_key, "absurd-suffix") < SPELL_ABSURD_SUFFIX_CHANCE:
        suffix = pick_deterministic(banks.spell_absurd_suffixes, seed_key, "absurd-suffix-word")
    name = _join(absurd_a, whimsical, core, absurd_b, base, suffix)
    logger.debug("Absurd spell name (score=%d, seed=%s): %s", score, seed_key, name)
    return name
