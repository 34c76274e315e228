"""Tone rotation: weight narration tones by fight state and never repeat the last one."""
from __future__ import annotations

from typing import Any, Mapping

from mythic.app.core.selection import pick_deterministic, weighted_pick_without_immediate_repeat
from mythic.app.models.presentation import ToneSelectionInput, ToneSelectionResult
from mythic.app.presentation.word_banks import load_word_banks

BASE_TONE_WEIGHTS: dict[str, float] = {
    "tactical": 1.6,
    "mythic": 1.3,
    "whimsical": 0.8,
    "brutal": 0.9,
    "minimalist": 0.7,
}

HIGH_TENSION = 65
LOW_HP_PCT = 0.35

_TOWN_THEMES = ("town", "market", "festival")
_GRAVE_THEMES = ("dungeon", "crypt", "grave")


def tone_weights(data: ToneSelectionInput) -> dict[str, float]:
    weights = dict(BASE_TONE_WEIGHTS)
    theme = data.region_theme.strip().lower()

    if data.tension >= HIGH_TENSION:
        weights["tactical"] += 0.7
        weights["brutal"] += 0.8
        weights["minimalist"] += 0.4
    if data.boss_present:
        weights["mythic"] += 1.2
        weights["brutal"] += 0.6
    if data.player_hp_pct <= LOW_HP_PCT:
        weights["brutal"] += 1.0
        weights["minimalist"] += 0.6
        weights["whimsical"] -= 0.2
    if any(t in theme for t in _TOWN_THEMES):
        weights["whimsical"] += 0.8
        weights["tactical"] += 0.2
    if any(t in theme for t in _GRAVE_THEMES):
        weights["brutal"] += 0.4
        weights["mythic"] += 0.5
    return weights


def select_tone_mode(data: ToneSelectionInput | Mapping[str, Any]) -> ToneSelectionResult:
    """Pick this turn's tone. ``reason`` is ``tone:tension:hp%:boss`` for telemetry."""
    if not isinstance(data, ToneSelectionInput):
        data = ToneSelectionInput.model_validate(data)
    tone = weighted_pick_without_immediate_repeat(tone_weights(data), data.seed_key, data.last_tone, "tone-mode")
    reason = f"{tone}:{data.tension}:{round(data.player_hp_pct * 100)}:{1 if data.boss_present else 0}"
    return ToneSelectionResult(tone=tone, reason=reason)


def tone_seed_line(tone: str, seed_key: str) -> str:
    tone_lines = load_word_banks().tone_lines
    pool = tone_lines.get(tone) or tone_lines["tactical"]
    return pick_deterministic(pool, seed_key, f"tone-line:{tone}")
