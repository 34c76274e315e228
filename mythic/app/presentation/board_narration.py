"""Board narration composer: a rotating opener plus one board-specific lead line."""
from __future__ import annotations

from typing import Any, Mapping

from mythic.app.constants import (
    BOARD_CLOCK_MAX_CHARS,
    BOARD_FACTION_MAX_CHARS,
    BOARD_HOOK_MAX_CHARS,
    BOARD_HOOK_MAX_COUNT,
    BOARD_REGION_MAX_CHARS,
)
from mythic.app.core.grammar import compact_text
from mythic.app.core.selection import pick_deterministic_without_immediate_repeat
from mythic.app.models.presentation import BoardNarrationInput, BoardNarrationResult
from mythic.app.presentation.word_banks import load_word_banks

TRAVEL_FALLBACK_LINE = "The route window is open, briefly."
DUNGEON_FALLBACK_LINE = "Every room keeps score."


def town_tag(seed_key: str) -> str:
    """Two-syllable district name, e.g. 'Honeyhollow'. Stable for a seed key."""
    banks = load_word_banks()
    a = pick_deterministic_without_immediate_repeat(banks.town_syllable_a, seed_key, None, "town-tag-a")
    b = pick_deterministic_without_immediate_repeat(banks.town_syllable_b, seed_key, None, "town-tag-b")
    return f"{a}{b}"


def _town_line(data: BoardNarrationInput, hook: str | None) -> str:
    if hook:
        return f"Lead: {hook}."
    faction = compact_text(data.faction_tension or "", BOARD_FACTION_MAX_CHARS)
    if faction:
        return f"Faction pressure: {faction}."
    clock = compact_text(data.time_pressure or "", BOARD_CLOCK_MAX_CHARS)
    if clock:
        return f"Clock: {clock}."
    district = compact_text(data.region_name or "", BOARD_REGION_MAX_CHARS) or town_tag(data.seed_key)
    return f"District: {district}."


def _travel_line(data: BoardNarrationInput, hook: str | None) -> str:
    if hook:
        return f"Route lead: {hook}."
    clock = compact_text(data.time_pressure or "", BOARD_CLOCK_MAX_CHARS)
    if clock:
        return f"Clock: {clock}."
    return TRAVEL_FALLBACK_LINE


def _dungeon_line(data: BoardNarrationInput, hook: str | None) -> str:
    if hook:
        return f"Stone hook: {hook}."
    window = compact_text(data.resource_window or "", BOARD_CLOCK_MAX_CHARS)
    if window:
        return f"Resources: {window}."
    return DUNGEON_FALLBACK_LINE


_SECOND_LINE_BUILDERS = {
    "town": _town_line,
    "travel": _travel_line,
    "dungeon": _dungeon_line,
}


def build_board_narration(data: BoardNarrationInput | Mapping[str, Any]) -> BoardNarrationResult:
    """Compose the board intro. Persist ``opener_id`` as the next call's ``last_opener_id``."""
    if not isinstance(data, BoardNarrationInput):
        data = BoardNarrationInput.model_validate(data)
    banks = load_word_banks()

    opener = pick_deterministic_without_immediate_repeat(
        banks.board_openers,
        data.seed_key,
        data.last_opener_id,
        f"{data.board_type}:opener",
    )

    hooks = [compact_text(h, BOARD_HOOK_MAX_CHARS) for h in data.hooks]
    hooks = [h for h in hooks if h][:BOARD_HOOK_MAX_COUNT]
    lead_hook = hooks[0] if hooks else None

    parts = [opener]
    builder = _SECOND_LINE_BUILDERS.get(data.board_type)
    if builder is not None:
        parts.append(builder(data, lead_hook))

    text = " ".join(p for p in parts[:2] if p.strip())
    return BoardNarrationResult(opener_id=opener, text=" ".join(text.split()))
