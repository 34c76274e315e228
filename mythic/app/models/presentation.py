"""Pydantic models for the presentation engines (board, spells, titles, combat lines).

Numeric and enum fields coerce malformed input (NaN, inf, unknown strings) to
safe defaults instead of failing validation.
"""
from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from mythic.app.constants import (
    VOICE_HISTORY_MAX,
    VOICE_HISTORY_MIN,
    VOICE_HISTORY_SIZE,
    VOICE_SIMILARITY_MAX,
    VOICE_SIMILARITY_MIN,
    VOICE_SIMILARITY_THRESHOLD,
)
from mythic.app.core.text_utils import clamp01, normalize_identifier, safe_float, safe_int

ToneMode = Literal["tactical", "mythic", "whimsical", "brutal", "minimalist"]
SpellRarity = Literal["common", "magical", "unique", "legendary", "mythic", "unhinged"]
BoardType = Literal["town", "travel", "dungeon", "combat"]
InstinctType = Literal["pack", "duelist", "predator", "ambush", "guardian", "chaotic"]
VoiceMode = Literal[
    "tactical", "brutal", "mischievous", "dark", "whimsical", "blessing", "punishment", "mythic", "minimalist"
]

TONE_MODES: tuple[str, ...] = ("tactical", "mythic", "whimsical", "brutal", "minimalist")
SPELL_RARITIES: tuple[str, ...] = ("common", "magical", "unique", "legendary", "mythic", "unhinged")
INSTINCT_TYPES: tuple[str, ...] = ("pack", "duelist", "predator", "ambush", "guardian", "chaotic")
VOICE_MODES: tuple[str, ...] = (
    "tactical", "brutal", "mischievous", "dark", "whimsical", "blessing", "punishment", "mythic", "minimalist",
)


def _clean_str_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        return []
    return [str(v).strip() for v in value if str(v).strip()]


def coerce_tone_mode(value: Any) -> Optional[str]:
    key = normalize_identifier(value) if isinstance(value, str) else ""
    return key if key in TONE_MODES else None


def coerce_rarity(value: Any) -> str:
    key = normalize_identifier(value) if isinstance(value, str) else ""
    return key if key in SPELL_RARITIES else "common"


def coerce_voice_mode(value: Any) -> Optional[str]:
    key = normalize_identifier(value) if isinstance(value, str) else ""
    return key if key in VOICE_MODES else None


def coerce_tone_vector(value: Any) -> dict[str, float]:
    """Lowercased keys with finite float weights; anything else is dropped."""
    if not isinstance(value, dict):
        return {}
    out: dict[str, float] = {}
    for key, raw in value.items():
        parsed = safe_float(raw)
        if parsed is not None:
            out[str(key).strip().lower()] = parsed
    return out


class PresentationState(BaseModel):
    """Cross-call presentation memory owned and persisted by the caller.

    The engine only reads it; functions that advance it return a new instance.
    """
    last_tone: Optional[ToneMode] = None
    last_board_opener_id: Optional[str] = None
    recent_line_hashes: list[str] = Field(default_factory=list)
    last_verb_keys: list[str] = Field(default_factory=list)
    last_voice_mode: Optional[VoiceMode] = None
    recent_lines: list[str] = Field(default_factory=list)
    recent_fragments: list[str] = Field(default_factory=list)

    @field_validator("last_tone", mode="before")
    @classmethod
    def _coerce_tone(cls, v: Any) -> Optional[str]:
        return coerce_tone_mode(v)

    @field_validator("last_voice_mode", mode="before")
    @classmethod
    def _coerce_voice_mode(cls, v: Any) -> Optional[str]:
        return coerce_voice_mode(v)

    @field_validator("recent_line_hashes", "last_verb_keys", "recent_lines", "recent_fragments", mode="before")
    @classmethod
    def _coerce_lists(cls, v: Any) -> list[str]:
        return _clean_str_list(v)


class SpellStyleTags(BaseModel):
    element: str = ""
    mood: str = ""
    visual_signature: str = ""
    impact_verb: str = ""

    @field_validator("element", "mood", "visual_signature", "impact_verb", mode="before")
    @classmethod
    def _coerce_text(cls, v: Any) -> str:
        return v if isinstance(v, str) else ""


class SpellPresentationMeta(BaseModel):
    """Presentation hints attached to a skill cast. A missing escalation follows the rank."""
    spell_base: str = ""
    rank: int = 1
    rarity: SpellRarity = "magical"
    escalation_level: Optional[int] = None

    @field_validator("spell_base", mode="before")
    @classmethod
    def _coerce_base(cls, v: Any) -> str:
        return str(v).strip() if v else ""

    @field_validator("rank", mode="before")
    @classmethod
    def _coerce_rank(cls, v: Any) -> int:
        return safe_int(v, default=1, minimum=1)

    @field_validator("escalation_level", mode="before")
    @classmethod
    def _coerce_escalation(cls, v: Any) -> Optional[int]:
        if safe_float(v) is None:
            return None
        return safe_int(v, minimum=0)

    @field_validator("rarity", mode="before")
    @classmethod
    def _coerce_rarity(cls, v: Any) -> str:
        return coerce_rarity(v)

    @property
    def effective_escalation(self) -> int:
        return self.rank if self.escalation_level is None else self.escalation_level


class EnemyPersonalityTraits(BaseModel):
    aggression: int = 50
    discipline: int = 50
    intelligence: int = 50
    instinct_type: InstinctType = "predator"

    @field_validator("aggression", "discipline", "intelligence", mode="before")
    @classmethod
    def _clamp_trait(cls, v: Any) -> int:
        return min(100, safe_int(50 if v is None else v, default=50, minimum=0))

    @field_validator("instinct_type", mode="before")
    @classmethod
    def _coerce_instinct(cls, v: Any) -> str:
        return v if isinstance(v, str) and v in INSTINCT_TYPES else "predator"


class ToneSelectionInput(BaseModel):
    seed_key: str
    last_tone: Optional[ToneMode] = None
    tension: int = 0
    boss_present: bool = False
    player_hp_pct: float = 0.65
    region_theme: str = ""

    @field_validator("last_tone", mode="before")
    @classmethod
    def _coerce_tone(cls, v: Any) -> Optional[str]:
        return coerce_tone_mode(v)

    @field_validator("tension", mode="before")
    @classmethod
    def _coerce_tension(cls, v: Any) -> int:
        return min(100, safe_int(v, default=0, minimum=0))

    @field_validator("player_hp_pct", mode="before")
    @classmethod
    def _coerce_hp(cls, v: Any) -> float:
        return clamp01(v, 0.65)


class ToneSelectionResult(BaseModel):
    tone: ToneMode
    reason: str


class BoardNarrationInput(BaseModel):
    seed_key: str
    board_type: BoardType = "town"
    hooks: list[str] = Field(default_factory=list)
    time_pressure: Optional[str] = None
    faction_tension: Optional[str] = None
    resource_window: Optional[str] = None
    region_name: Optional[str] = None
    last_opener_id: Optional[str] = None

    @field_validator("board_type", mode="before")
    @classmethod
    def _coerce_board_type(cls, v: Any) -> str:
        key = normalize_identifier(v) if isinstance(v, str) else ""
        return key if key in ("town", "travel", "dungeon", "combat") else "combat"

    @field_validator("hooks", mode="before")
    @classmethod
    def _coerce_hooks(cls, v: Any) -> list[str]:
        return _clean_str_list(v)


class BoardNarrationResult(BaseModel):
    opener_id: str
    text: str


class ReputationInput(BaseModel):
    base_name: str = ""
    reputation_score: float = 0
    behavior_flags: list[str] = Field(default_factory=list)
    notable_kills: list[str] = Field(default_factory=list)
    faction_standing: dict[str, Any] = Field(default_factory=dict)
    seed_key: str = "reputation"

    @field_validator("reputation_score", mode="before")
    @classmethod
    def _coerce_score(cls, v: Any) -> float:
        parsed = safe_float(v)
        return 0.0 if parsed is None else parsed

    @field_validator("behavior_flags", "notable_kills", mode="before")
    @classmethod
    def _coerce_lists(cls, v: Any) -> list[str]:
        return _clean_str_list(v)

    @field_validator("faction_standing", mode="before")
    @classmethod
    def _coerce_standing(cls, v: Any) -> dict[str, Any]:
        return dict(v) if isinstance(v, dict) else {}


class ReputationResult(BaseModel):
    tier: int = Field(..., ge=1, le=5)
    display_name: str
    title: Optional[str] = None


class CombatPresentationEvent(BaseModel):
    """One combat log row as persisted by the combat engine."""
    id: Optional[str] = None
    turn_index: int = 0
    event_type: str = ""
    actor_combatant_id: Optional[str] = None
    payload: dict[str, Any] = Field(default_factory=dict)
    created_at: str = ""

    @field_validator("turn_index", mode="before")
    @classmethod
    def _coerce_turn(cls, v: Any) -> int:
        return safe_int(v, default=0)

    @field_validator("payload", mode="before")
    @classmethod
    def _coerce_payload(cls, v: Any) -> dict[str, Any]:
        return dict(v) if isinstance(v, dict) else {}

    @field_validator("id", "actor_combatant_id", mode="before")
    @classmethod
    def _coerce_optional_id(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        return str(v)

    @field_validator("event_type", "created_at", mode="before")
    @classmethod
    def _coerce_text(cls, v: Any) -> str:
        return v if isinstance(v, str) else ""


class NarrativeLinesResult(BaseModel):
    lines: list[str]
    line_hashes: list[str]
    verb_keys: list[str]
    template_ids: list[str]
    last_event_cursor: Optional[str] = None
    presentation: PresentationState


class DmVoiceProfile(BaseModel):
    """Seeded personality of the narrating DM; every level is in [0, 1]."""
    sarcasm_level: float = 0.5
    cruelty_level: float = 0.5
    humor_level: float = 0.5
    verbosity_level: float = 0.5
    mythic_intensity: float = 0.5
    absurdity_level: float = 0.5
    favoritism_bias: float = 0.5
    memory_recall_bias: float = 0.5

    @field_validator("*", mode="before")
    @classmethod
    def _clamp_level(cls, v: Any) -> float:
        return clamp01(v, 0.0)


class LineHistoryBuffer(BaseModel):
    """Recent DM lines and their word fragments, used to reject near-duplicates.

    Mutated in place by ``push_line_history``; copy it before speculative use.
    """
    max_lines: int = VOICE_HISTORY_SIZE
    similarity_threshold: float = VOICE_SIMILARITY_THRESHOLD
    lines: list[str] = Field(default_factory=list)
    fragments: list[str] = Field(default_factory=list)

    @field_validator("max_lines", mode="before")
    @classmethod
    def _coerce_max_lines(cls, v: Any) -> int:
        size = safe_int(v, default=VOICE_HISTORY_SIZE)
        return max(VOICE_HISTORY_MIN, min(VOICE_HISTORY_MAX, size))

    @field_validator("similarity_threshold", mode="before")
    @classmethod
    def _coerce_threshold(cls, v: Any) -> float:
        parsed = safe_float(v)
        parsed = VOICE_SIMILARITY_THRESHOLD if parsed is None else parsed
        return max(VOICE_SIMILARITY_MIN, min(VOICE_SIMILARITY_MAX, parsed))


class VoiceBundle(BaseModel):
    mode: VoiceMode
    lines: list[str] = Field(default_factory=list)
