"""Procedural narrator input/output: classified events, turn input, decision trace."""
from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from mythic.app.core.text_utils import clamp01, safe_float
from mythic.app.models.presentation import (
    DmVoiceProfile,
    PresentationState,
    VoiceMode,
    _clean_str_list,
    coerce_tone_vector,
)

NarrationEventType = Literal[
    "COMBAT_ATTACK_RESOLVED",
    "LOOT_DROPPED",
    "TRAVEL_STEP",
    "DUNGEON_ROOM_ENTERED",
    "NPC_DIALOGUE",
    "LEVEL_UP",
    "STATUS_TICK",
    "QUEST_UPDATE",
    "BOARD_TRANSITION",
]
ProceduralTone = Literal["dark", "comic", "heroic", "grim", "mischievous", "tactical"]
ProceduralIntensity = Literal["low", "med", "high"]


class NarrationEvent(BaseModel):
    """A classified game occurrence ready for template selection."""
    type: NarrationEventType
    timestamp: int
    seed: str
    id: str
    context: dict[str, Any] = Field(default_factory=dict)


class ProceduralNarratorInput(BaseModel):
    """One turn of narration as delivered by the turn orchestrator.

    ``tone``, ``intensity`` and ``biome`` are free-form here and normalized by
    the narrator; unknown values fall back to tactical / med / default.
    """
    campaign_seed: str
    session_id: str
    event_id: str
    board_type: str = "combat"
    biome: Optional[str] = None
    tone: str = "tactical"
    intensity: str = "med"
    action_summary: str = ""
    recovery_beat: str = ""
    board_anchor: str = "the board"
    summary_objective: Optional[str] = None
    summary_rumor: Optional[str] = None
    board_narration: str = ""
    intro_opening: bool = False
    suppress_narration_on_error: bool = False
    execution_error: Optional[str] = None
    state_changes: list[str] = Field(default_factory=list)
    events: list[Any] = Field(default_factory=list)
    hooks: list[str] = Field(default_factory=list)
    time_pressure: Optional[str] = None
    faction_tension: Optional[str] = None
    resource_window: Optional[str] = None
    region_name: Optional[str] = None
    player_hp_pct: Optional[float] = None
    enemy_threat_level: Optional[float] = None
    player_reputation_tags: list[str] = Field(default_factory=list)
    world_tone_vector: dict[str, float] = Field(default_factory=dict)
    presentation_state: PresentationState = Field(default_factory=PresentationState)

    @field_validator("campaign_seed", "session_id", "event_id", mode="before")
    @classmethod
    def _coerce_id(cls, v: Any) -> Any:
        # JSON turn payloads carry numeric ids
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("state_changes", "hooks", "player_reputation_tags", mode="before")
    @classmethod
    def _coerce_lists(cls, v: Any) -> list[str]:
        return _clean_str_list(v)

    @field_validator("events", mode="before")
    @classmethod
    def _coerce_events(cls, v: Any) -> list[Any]:
        if v is None:
            return []
        return list(v) if isinstance(v, (list, tuple)) else []

    @field_validator(
        "action_summary", "recovery_beat", "board_narration", "tone", "intensity", "board_type", mode="before"
    )
    @classmethod
    def _coerce_text(cls, v: Any) -> str:
        return v.strip() if isinstance(v, str) else ""

    @field_validator("board_anchor", mode="before")
    @classmethod
    def _coerce_anchor(cls, v: Any) -> str:
        return v.strip() if isinstance(v, str) and v.strip() else "the board"

    @field_validator("player_hp_pct", "enemy_threat_level", mode="before")
    @classmethod
    def _coerce_level(cls, v: Any) -> Optional[float]:
        return safe_float(v)

    @field_validator("world_tone_vector", mode="before")
    @classmethod
    def _coerce_tone_vector(cls, v: Any) -> dict[str, float]:
        return coerce_tone_vector(v)

    @field_validator("presentation_state", mode="before")
    @classmethod
    def _coerce_presentation(cls, v: Any) -> Any:
        return PresentationState() if v is None else v


class DmNarrationContext(BaseModel):
    """What the DM voice may anchor its lines on for one turn."""
    board_type: str = "combat"
    biome: str = "default"
    active_hooks: list[str] = Field(default_factory=list)
    faction_tension: str = "moderate"
    player_hp_pct: float = 0.65
    enemy_threat_level: float = 0.52
    recent_events: list[NarrationEvent] = Field(default_factory=list)
    player_reputation_tags: list[str] = Field(default_factory=list)
    world_tone_vector: dict[str, float] = Field(default_factory=dict)
    dm_voice_profile: DmVoiceProfile = Field(default_factory=DmVoiceProfile)

    @field_validator("player_hp_pct", mode="before")
    @classmethod
    def _coerce_hp(cls, v: Any) -> float:
        return clamp01(v, 0.65)

    @field_validator("enemy_threat_level", mode="before")
    @classmethod
    def _coerce_threat(cls, v: Any) -> float:
        return clamp01(v, 0.52)

    @field_validator("active_hooks", "player_reputation_tags", mode="before")
    @classmethod
    def _coerce_lists(cls, v: Any) -> list[str]:
        return _clean_str_list(v)

    @field_validator("world_tone_vector", mode="before")
    @classmethod
    def _coerce_tone_vector(cls, v: Any) -> dict[str, float]:
        return coerce_tone_vector(v)


class NarratorDebug(BaseModel):
    """Every decision the narrator made, enough to replay and assert on a turn."""
    seed: str
    rng_picks: list[float] = Field(default_factory=list)
    picks: dict[str, str] = Field(default_factory=dict)
    template_id: str
    template_tags: list[str] = Field(default_factory=list)
    tone: ProceduralTone
    biome: str
    intensity: ProceduralIntensity
    aside_used: bool = False
    default_pool_used: bool = False
    guardrail_retries: int = 0
    suppressed: bool = False
    event_count: int = 0
    event_ids: list[str] = Field(default_factory=list)
    event_types: list[str] = Field(default_factory=list)
    mapped_events: list[NarrationEvent] = Field(default_factory=list)
    voice_mode: Optional[VoiceMode] = None
    voice_profile: Optional[DmVoiceProfile] = None
    voice_lines: list[str] = Field(default_factory=list)
    line_history_before: list[str] = Field(default_factory=list)
    line_history_after: list[str] = Field(default_factory=list)


class ProceduralNarratorResult(BaseModel):
    text: str
    template_id: str
    template_ids: list[str] = Field(default_factory=list)
    line_hashes: list[str] = Field(default_factory=list)
    opener_id: Optional[str] = None
    debug: NarratorDebug
    presentation: PresentationState
