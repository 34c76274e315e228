"""Spectacle lines: how a cast looks, scaled by escalation level."""
from __future__ import annotations

from typing import Any, Mapping, Optional

from mythic.app.constants import SPECTACLE_FINISHERS
from mythic.app.core.grammar import third_person
from mythic.app.core.selection import pick_deterministic
from mythic.app.core.text_utils import as_text, safe_int
from mythic.app.models.presentation import SpellStyleTags

_STYLE_DEFAULTS = {
    "element": "arcane",
    "mood": "volatile",
    "visual_signature": "shockwave",
    "impact_verb": "strike",
}


def _style_value(style_tags: Any, field: str) -> str:
    if isinstance(style_tags, SpellStyleTags):
        raw = getattr(style_tags, field)
    elif isinstance(style_tags, Mapping):
        raw = style_tags.get(field)
    else:
        raw = None
    return as_text(raw, _STYLE_DEFAULTS[field])


def build_spectacle_line(
    seed_key: str,
    spell_name: str,
    escalation_level: Any,
    style_tags: Optional[SpellStyleTags | Mapping[str, Any]] = None,
    target_name: str = "",
) -> str:
    level = safe_int(escalation_level, default=0, minimum=0)
    element = _style_value(style_tags, "element")
    mood = _style_value(style_tags, "mood")
    visual = _style_value(style_tags, "visual_signature")
    impact = _style_value(style_tags, "impact_verb")
    target = as_text(target_name, "the target")

    if level <= 1:
        return f"{spell_name} {third_person(impact)} {target}. {element} light snaps over the tile."
    if level <= 3:
        return f"{spell_name} detonates in {visual}. {target} reels under {element} force."
    if level <= 5:
        return f"{spell_name} tears the lane open. {element} thunder drops {target} into chaos."
    finisher = pick_deterministic(SPECTACLE_FINISHERS, seed_key, "spectacle:finisher")
    return f"{spell_name} erupts in {visual}. {target} takes the full {mood} {element} {impact}. {finisher}"
