"""Enemy voice lines picked from combat traits."""
from __future__ import annotations

from typing import Any, Mapping, Optional

from mythic.app.core.selection import pick_deterministic
from mythic.app.models.presentation import INSTINCT_TYPES, EnemyPersonalityTraits
from mythic.app.presentation.word_banks import load_word_banks

_AGGRESSION_STEPS = (38, 46, 55, 64, 72, 81)
_DISCIPLINE_STEPS = (34, 42, 51, 63, 74)
_INTELLIGENCE_STEPS = (30, 40, 49, 58, 67, 76)


def normalize_enemy_traits(traits: Optional[EnemyPersonalityTraits | Mapping[str, Any]]) -> EnemyPersonalityTraits:
    if isinstance(traits, EnemyPersonalityTraits):
        return traits
    return EnemyPersonalityTraits.model_validate(dict(traits) if isinstance(traits, Mapping) else {})


def personality_mode(traits: EnemyPersonalityTraits, tone: str) -> str:
    if traits.instinct_type == "pack":
        return "pack"
    if traits.instinct_type == "chaotic":
        return "chaotic"
    if tone == "whimsical":
        return "whimsical"
    if traits.aggression >= 70 and traits.intelligence < 45:
        return "aggressive"
    if traits.intelligence >= 65 or traits.discipline >= 68:
        return "cunning"
    if traits.aggression >= 65:
        return "brutal"
    return "aggressive"


def personality_line(
    seed_key: str,
    traits: Optional[EnemyPersonalityTraits | Mapping[str, Any]],
    tone: str,
) -> str:
    mode = personality_mode(normalize_enemy_traits(traits), tone)
    voice = load_word_banks().enemy_voice
    pool = voice.get(mode) or voice["aggressive"]
    return pick_deterministic(pool, seed_key, f"enemy-personality:{mode}")


def default_enemy_traits(seed_key: str) -> EnemyPersonalityTraits:
    """Stable traits for enemies that ship without any."""
    return EnemyPersonalityTraits(
        aggression=pick_deterministic(_AGGRESSION_STEPS, seed_key, "enemy:aggression"),
        discipline=pick_deterministic(_DISCIPLINE_STEPS, seed_key, "enemy:discipline"),
        intelligence=pick_deterministic(_INTELLIGENCE_STEPS, seed_key, "enemy:intelligence"),
        instinct_type=pick_deterministic(INSTINCT_TYPES, seed_key, "enemy:instinct"),
    )
