"""Reputation titles: score tiers plus behavior overrides that always win."""
from __future__ import annotations

import logging
import re
from typing import Any, Mapping, Optional

from mythic.app.constants import (
    REPUTATION_DEFAULT_NAME,
    REPUTATION_FACTION_BANNER_MIN,
    REPUTATION_TIER_THRESHOLDS,
)
from mythic.app.core.selection import pick_deterministic_without_immediate_repeat
from mythic.app.core.text_utils import safe_float
from mythic.app.models.presentation import ReputationInput, ReputationResult
from mythic.app.presentation.word_banks import load_word_banks

logger = logging.getLogger(__name__)

# (patterns matched as substrings of lowercased flags, override title)
_FLAG_OVERRIDES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("sparkle_50", "sparkle_only"), "Glitterstorm"),
    (("low_hp_win", "one_hp_clutch"), "Barely Alive Legend"),
    (("fire_only", "wildfire_chain"), "The Walking Wildfire"),
)
_KILL_OVERRIDES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("slime_100", "slime_hunter"), "Slimebreaker"),
)

_SEPARATOR_RX = re.compile(r"[_-]+")
_WORD_START_RX = re.compile(r"\b\w")


def derive_reputation_tier(score: Any) -> int:
    """
    Map a reputation score to tier 1..5. Non-decreasing in ``score``.

    Examples:
        >>> derive_reputation_tier(20)
        1
        >>> derive_reputation_tier(140)
        3
    """
    value = safe_float(score)
    value = 0.0 if value is None else value
    for minimum, tier in REPUTATION_TIER_THRESHOLDS:
        if value >= minimum:
            return tier
    return 1


def _clean_flags(values: list[str]) -> list[str]:
    return [v.strip().lower() for v in values if v and v.strip()]


def _faction_title(key: str) -> str:
    spaced = _SEPARATOR_RX.sub(" ", key)
    return _WORD_START_RX.sub(lambda m: m.group(0).upper(), spaced)


def _strongest_faction(standing: Mapping[str, Any]) -> Optional[tuple[str, float]]:
    scored = []
    for key, raw in standing.items():
        value = safe_float(raw)
        if value is not None:
            scored.append((str(key), value))
    if not scored:
        return None
    # max() keeps the first of equal scores
    return max(scored, key=lambda item: item[1])


def behavior_override(data: ReputationInput) -> Optional[str]:
    """Themed title forced by play style, or None."""
    flags = _clean_flags(data.behavior_flags)
    kills = _clean_flags(data.notable_kills)

    for patterns, title in _FLAG_OVERRIDES:
        if any(p in flag for flag in flags for p in patterns):
            return title
    for patterns, title in _KILL_OVERRIDES:
        if any(p in kill for kill in kills for p in patterns):
            return title

    strongest = _strongest_faction(data.faction_standing)
    if strongest and strongest[1] >= REPUTATION_FACTION_BANNER_MIN:
        return f"Banner of {_faction_title(strongest[0])}"
    return None


def build_reputation_title(data: ReputationInput | Mapping[str, Any]) -> ReputationResult:
    if not isinstance(data, ReputationInput):
        data = ReputationInput.model_validate(data)

    base = data.base_name.strip() or REPUTATION_DEFAULT_NAME
    tier = derive_reputation_tier(data.reputation_score)

    override = behavior_override(data)
    if override:
        logger.debug("Reputation override for %s: %s (tier %d)", base, override, tier)
        if tier < 3 or override.lower() == base.lower():
            display = f"{base} {override}"
        else:
            display = override
        return ReputationResult(tier=tier, display_name=display, title=override)

    if tier == 1:
        return ReputationResult(tier=1, display_name=base, title=None)
    if tier == 2:
        return ReputationResult(tier=2, display_name=f"{base} the Sparkling", title="the Sparkling")

    banks = load_word_banks()
    if tier == 3:
        pool = banks.title_tier3_epithets + banks.title_standard_classes + banks.title_whimsical_classes
    elif tier == 4:
        pool = banks.title_tier4
    else:
        pool = banks.title_tier5
    # a title equal to the character name would leave display_name unchanged
    clash = next((t for t in pool if t.lower() == base.lower()), None)
    title = pick_deterministic_without_immediate_repeat(pool, data.seed_key, clash, f"rep:tier{tier}")
    return ReputationResult(tier=tier, display_name=title, title=title)
