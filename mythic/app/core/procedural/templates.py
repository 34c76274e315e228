"""Procedural narration template registry.

Each template belongs to one event type. ``weight`` is its base share among
same-type templates; ``tags`` name the tone, board and intensity it suits, and
the narrator adds a bonus to templates whose tags match the turn.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from mythic.app.constants import BIOME_HINTS
from mythic.app.core.grammar import article_for, compact_sentence, third_person
from mythic.app.models.narration import NarrationEvent


@dataclass(frozen=True)
class TemplateRenderContext:
    actor: str
    target: str
    amount: Optional[float]
    status: Optional[str]
    action_summary: str
    board_anchor: str
    objective: Optional[str]
    rumor: Optional[str]
    recovery_beat: str
    board_narration: str
    attack_verb: str
    motion_verb: str
    flavor_noun: str
    event: Optional[NarrationEvent] = None


@dataclass(frozen=True)
class Template:
    id: str
    event_type: Optional[str]
    weight: float
    tags: tuple[str, ...]
    render: Callable[[TemplateRenderContext], str]


def _amount(value: Optional[float]) -> str:
    clean = max(0.0, value or 0.0)
    return str(int(clean)) if clean == int(clean) else str(clean)


def _objective_or(ctx: TemplateRenderContext, fallback: str) -> str:
    return f"Objective: {ctx.objective}." if ctx.objective else fallback


PROCEDURAL_TEMPLATES: tuple[Template, ...] = (
    Template(
        id="combat_hit_01",
        event_type="COMBAT_ATTACK_RESOLVED",
        weight=4,
        tags=("combat", "grim", "high"),
        render=lambda c: compact_sentence(
            f"{c.actor} {third_person(c.attack_verb)} {c.target} for {_amount(c.amount)}. {c.recovery_beat}"
        ),
    ),
    Template(
        id="combat_hit_02",
        event_type="COMBAT_ATTACK_RESOLVED",
        weight=3,
        tags=("combat", "dark", "med"),
        render=lambda c: compact_sentence(
            f"{c.actor} drives {article_for(c.flavor_noun)} {c.flavor_noun} into {c.target}. "
            f"Pressure stays on: {c.action_summary}"
        ),
    ),
    Template(
        id="combat_hit_03",
        event_type="COMBAT_ATTACK_RESOLVED",
        weight=2,
        tags=("combat", "heroic", "high"),
        render=lambda c: compact_sentence(
            f"{c.actor} lands the turn and rips momentum away from {c.target}. {c.recovery_beat}"
        ),
    ),
    Template(
        id="combat_status_01",
        event_type="STATUS_TICK",
        weight=3,
        tags=("combat", "grim", "med"),
        render=lambda c: compact_sentence(
            f"{c.target} eats another tick of {c.status or 'pressure'} while {c.actor} keeps the lane sealed."
        ),
    ),
    Template(
        id="combat_status_02",
        event_type="STATUS_TICK",
        weight=2,
        tags=("combat", "dark", "high"),
        render=lambda c: compact_sentence(f"{c.status or 'The effect'} keeps chewing through {c.target}. {c.recovery_beat}"),
    ),
    Template(
        id="loot_drop_01",
        event_type="LOOT_DROPPED",
        weight=3,
        tags=("loot", "mischievous", "med"),
        render=lambda c: compact_sentence(
            f"The dust settles and a prize drops out of the noise. {c.board_anchor} just paid up."
        ),
    ),
    Template(
        id="loot_drop_02",
        event_type="LOOT_DROPPED",
        weight=2,
        tags=("loot", "heroic", "low"),
        render=lambda c: compact_sentence(
            f"{c.actor} pulls spoils from the wreckage. {_objective_or(c, c.recovery_beat)}"
        ),
    ),
    Template(
        id="travel_step_01",
        event_type="TRAVEL_STEP",
        weight=3,
        tags=("travel", "tactical", "med"),
        render=lambda c: compact_sentence(
            f"Boots hit the road and {c.motion_verb} toward {c.board_anchor}. {c.recovery_beat}"
        ),
    ),
    Template(
        id="travel_step_02",
        event_type="TRAVEL_STEP",
        weight=2,
        tags=("travel", "dark", "low"),
        render=lambda c: compact_sentence(
            f"The route narrows. {f'Rumor bite: {c.rumor}.' if c.rumor else c.board_narration}"
        ),
    ),
    Template(
        id="dungeon_enter_01",
        event_type="DUNGEON_ROOM_ENTERED",
        weight=3,
        tags=("dungeon", "grim", "high"),
        render=lambda c: compact_sentence(
            f"You cross the threshold and the room answers immediately. {c.action_summary}"
        ),
    ),
    Template(
        id="dungeon_enter_02",
        event_type="DUNGEON_ROOM_ENTERED",
        weight=2,
        tags=("dungeon", "dark", "med"),
        render=lambda c: compact_sentence(f"Stone, stale air, and one clean decision point: {c.recovery_beat}"),
    ),
    Template(
        id="npc_dialogue_01",
        event_type="NPC_DIALOGUE",
        weight=3,
        tags=("town", "comic", "low"),
        render=lambda c: compact_sentence(
            f"A local cuts through the noise with a live lead. {c.rumor or c.action_summary}"
        ),
    ),
    Template(
        id="npc_dialogue_02",
        event_type="NPC_DIALOGUE",
        weight=2,
        tags=("town", "mischievous", "med"),
        render=lambda c: compact_sentence(
            f"The conversation turns sharp, then useful. {c.objective or c.recovery_beat}"
        ),
    ),
    Template(
        id="level_up_01",
        event_type="LEVEL_UP",
        weight=2,
        tags=("progression", "heroic", "med"),
        render=lambda c: compact_sentence(
            f"Power spikes and the board notices. {c.actor} now has {article_for('edge')} edge to spend."
        ),
    ),
    Template(
        id="quest_update_01",
        event_type="QUEST_UPDATE",
        weight=3,
        tags=("quest", "tactical", "med"),
        render=lambda c: compact_sentence(
            f"Quest pressure updates in real time. {c.objective or c.action_summary}"
        ),
    ),
    Template(
        id="quest_update_02",
        event_type="QUEST_UPDATE",
        weight=2,
        tags=("quest", "dark", "low"),
        render=lambda c: compact_sentence(f"Threads tighten around {c.board_anchor}. {c.rumor or c.recovery_beat}"),
    ),
    Template(
        id="board_transition_01",
        event_type="BOARD_TRANSITION",
        weight=2,
        tags=("transition", "tactical", "low"),
        render=lambda c: compact_sentence(
            f"State shifts cleanly. {c.actor} {third_person(c.motion_verb)} into the next pressure window."
        ),
    ),
)

# Used when no registered template fits an event type. Never empty.
DEFAULT_TEMPLATES: tuple[Template, ...] = (
    Template(
        id="default_01",
        event_type=None,
        weight=2,
        tags=("default", "tactical", "med"),
        render=lambda c: compact_sentence(f"{c.actor} keeps pressure on {c.board_anchor}. {c.recovery_beat}"),
    ),
    Template(
        id="default_02",
        event_type=None,
        weight=1,
        tags=("default", "dark", "low"),
        render=lambda c: compact_sentence(
            f"The board tilts and {c.target} feels it. {c.action_summary or c.recovery_beat}"
        ),
    ),
)


def templates_for(event_type: str, excluded_ids: frozenset[str] | set[str] = frozenset()) -> list[Template]:
    return [t for t in PROCEDURAL_TEMPLATES if t.event_type == event_type and t.id not in excluded_ids]


def describe_context_clue(biome: str, amount: int) -> str:
    """Biome texture word picked by ``amount`` (wraps around the hint list)."""
    pool = BIOME_HINTS.get(biome) or BIOME_HINTS["default"]
    return pool[max(0, amount % len(pool))]
