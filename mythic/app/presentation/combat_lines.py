"""Combat log -> short narration lines.

Raw combat events arrive noisy: duplicates from retries, one row per hit of a
multi-hit attack, follow-up rows for units that already died. This module
collapses them into a handful of readable lines, routes skill casts through
the spell name and spectacle engines, and filters lines the player saw
recently.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Sequence

from mythic.app.config import LINE_HISTORY_LIMIT
from mythic.app.constants import COMBAT_FALLBACK_LINE, VERB_HISTORY_LIMIT
from mythic.app.core.grammar import third_person
from mythic.app.core.selection import dedupe_keep_order, hash_line, pick_deterministic
from mythic.app.core.text_utils import safe_float, safe_int
from mythic.app.models.presentation import (
    CombatPresentationEvent,
    EnemyPersonalityTraits,
    NarrativeLinesResult,
    PresentationState,
    SpellPresentationMeta,
    coerce_tone_mode,
)
from mythic.app.presentation.enemy_personality import personality_line
from mythic.app.presentation.spectacle import build_spectacle_line
from mythic.app.presentation.spell_names import build_spell_name
from mythic.app.presentation.word_banks import load_word_banks

logger = logging.getLogger(__name__)

MAX_LINES_CAP = 8
DEFAULT_MAX_LINES = 4
MAX_MERGED_STATUSES = 3

_TONE_PREFIX = {
    "minimalist": "",
    "brutal": "Hard.",
    "whimsical": "Wildly,",
    "mythic": "Mythic pulse:",
}


@dataclass
class _CombatEvent:
    id: str
    turn_index: int
    event_type: str
    actor_id: Optional[str]
    actor_name: str
    target_id: Optional[str]
    target_name: str
    amount: Optional[int]
    status_id: Optional[str]
    created_at: str
    to: Optional[tuple[int, int]]
    actor_alive: bool
    payload: dict[str, Any] = field(default_factory=dict)
    style_tags: Optional[dict[str, Any]] = None
    presentation: Optional[dict[str, Any]] = None
    skill_name: Optional[str] = None


def _as_dict(value: Any) -> dict[str, Any]:
    return dict(value) if isinstance(value, Mapping) else {}


def _to_int(value: Any) -> Optional[int]:
    parsed = safe_float(value)
    return None if parsed is None else int(parsed // 1)


def _as_point(value: Any) -> Optional[tuple[int, int]]:
    row = _as_dict(value)
    x, y = _to_int(row.get("x")), _to_int(row.get("y"))
    if x is None or y is None:
        return None
    return x, y


def _name(value: Any, fallback: str) -> str:
    text = value.strip() if isinstance(value, str) else ""
    return text or fallback


def _first_str(*values: Any) -> Optional[str]:
    for value in values:
        if isinstance(value, str):
            return value
    return None


def _first_present(*values: Any) -> Any:
    for value in values:
        if value is not None:
            return value
    return None


def _normalize_event(event: CombatPresentationEvent, index: int) -> _CombatEvent:
    payload = event.payload
    actor_id = _first_str(payload.get("source_combatant_id"), payload.get("actor_combatant_id"), event.actor_combatant_id)
    target_id = _first_str(payload.get("target_combatant_id"))
    actor_name = _name(
        _first_present(payload.get("source_name"), payload.get("actor_name")),
        f"Unit {actor_id[:4]}" if actor_id else "Unknown",
    )
    target_name = _name(payload.get("target_name"), f"Unit {target_id[:4]}" if target_id else "target")
    amount = _to_int(
        _first_present(
            payload.get("damage_to_hp"), payload.get("amount"), payload.get("final_damage"), payload.get("tiles_used")
        )
    )
    status_id = _name(_first_present(_as_dict(payload.get("status")).get("id"), payload.get("status_id")), "")
    skill_name = _name(payload.get("skill_name"), "") or _name(payload.get("skill_id"), "")
    style_tags = _as_dict(payload.get("style_tags"))
    presentation = _as_dict(payload.get("presentation"))

    return _CombatEvent(
        id=event.id if event.id is not None else f"{event.event_type}:{index}",
        turn_index=event.turn_index,
        event_type=event.event_type.strip().lower(),
        actor_id=actor_id,
        actor_name=actor_name,
        target_id=target_id,
        target_name=target_name,
        amount=amount,
        status_id=status_id or None,
        created_at=event.created_at,
        to=_as_point(payload.get("to")),
        actor_alive=payload.get("actor_alive") is not False and payload.get("source_alive") is not False,
        payload=payload,
        style_tags=style_tags or None,
        presentation=presentation or None,
        skill_name=skill_name or None,
    )


def _signature(event: _CombatEvent) -> str:
    to = f"{event.to[0]},{event.to[1]}" if event.to else "na"
    amount = "na" if event.amount is None else str(event.amount)
    return "|".join(
        [
            str(event.turn_index),
            event.event_type,
            event.actor_id or "na",
            event.target_id or "na",
            amount,
            event.status_id or "na",
            to,
        ]
    )


def _pair_key(event: _CombatEvent) -> str:
    return f"{event.turn_index}|{event.actor_id or 'na'}|{event.target_id or 'na'}"


def _choose_verb(seed_key: str, used: Sequence[str]) -> str:
    verbs = load_word_banks().narration_verbs
    available = [v for v in verbs if v not in used]
    if not available:
        return pick_deterministic(verbs, seed_key, "verb-fallback")
    return pick_deterministic(available, seed_key, "verb")


def _status_label(status_id: str) -> str:
    return status_id.replace("_", " ").strip()


def _tone_lead(tone: str) -> str:
    prefix = _TONE_PREFIX.get(tone, "Tactical read:")
    return f"{prefix} " if prefix else ""


def _passthrough_line(event: _CombatEvent, seed_key: str) -> Optional[tuple[str, str]]:
    """(text, template_id) for a single ungrouped event, or None when it has nothing to say."""
    actor, target = event.actor_name, event.target_name
    amount = max(0, event.amount or 0)
    kind = event.event_type

    if kind == "moved":
        if event.to is None:
            return None
        return f"{actor} shifts to ({event.to[0]}, {event.to[1]}).", "moved"
    if kind == "miss":
        roll = _to_int(event.payload.get("roll_d20"))
        required = _to_int(event.payload.get("required_roll"))
        if roll is not None and required is not None:
            return f"{actor} misses {target} ({roll} vs {required}).", "miss_roll"
        return f"{actor} misses {target}.", "miss"
    if kind == "healed":
        return f"{actor} restores {amount} to {target}.", "healed"
    if kind == "power_gain":
        return f"{actor} recovers {amount} MP.", "power_gain"
    if kind == "power_drain":
        return f"{actor} drains {amount} MP from {target}.", "power_drain"
    if kind == "status_tick":
        status = _status_label(event.status_id) if event.status_id else "status"
        return f"{target} takes {amount} from {status}.", "status_tick"
    if kind == "status_expired":
        status = _status_label(event.status_id) if event.status_id else "effect"
        return f"{target}'s {status} fades.", "status_expired"
    if kind == "armor_shred":
        return f"{actor} shreds {amount} armor from {target}.", "armor_shred"
    if kind == "death":
        return f"{target} drops and is out.", "death"
    if kind == "skill_used" and event.skill_name:
        meta = SpellPresentationMeta.model_validate(event.presentation or {})
        escalation = meta.effective_escalation
        spell = build_spell_name(
            meta.spell_base or event.skill_name, meta.rank, meta.rarity, escalation, f"{seed_key}:{event.id}:spell"
        )
        text = build_spectacle_line(
            f"{seed_key}:{event.id}:spectacle", spell, escalation, event.style_tags, event.target_name
        )
        return text, "skill_spectacle"
    return None


def build_narrative_lines_from_events(
    seed_key: str,
    tone: str,
    events: Sequence[CombatPresentationEvent | Mapping[str, Any]],
    presentation_state: Optional[PresentationState] = None,
    enemy_traits_by_combatant_id: Optional[Mapping[str, EnemyPersonalityTraits | Mapping[str, Any]]] = None,
    max_lines: Any = DEFAULT_MAX_LINES,
) -> NarrativeLinesResult:
    """
    Turn one batch of combat events into at most ``max_lines`` narration lines.

    Args:
        seed_key: Per-combat seed; every verb, spell and voice pick derives from it
        tone: Narration tone (tactical, mythic, whimsical, brutal, minimalist)
        events: Combat log rows in any order; duplicates are dropped by signature
        presentation_state: Caller-owned history (recent line hashes and verbs); never mutated
        enemy_traits_by_combatant_id: Traits used for one enemy voice line per batch
        max_lines: Clamped to 1..8

    Returns:
        NarrativeLinesResult with the lines and the next presentation state to persist
    """
    state = presentation_state or PresentationState()
    traits_by_id = enemy_traits_by_combatant_id or {}
    limit = max(1, min(MAX_LINES_CAP, safe_int(max_lines, default=DEFAULT_MAX_LINES)))

    by_signature: dict[str, _CombatEvent] = {}
    for index, raw in enumerate(events):
        model = raw if isinstance(raw, CombatPresentationEvent) else CombatPresentationEvent.model_validate(_as_dict(raw))
        event = _normalize_event(model, index)
        if not event.event_type:
            continue
        by_signature.setdefault(_signature(event), event)
    ordered = sorted(by_signature.values(), key=lambda e: (e.turn_index, e.created_at))

    used_verbs: list[str] = dedupe_keep_order(v.lower() for v in state.last_verb_keys)
    lines: list[str] = []
    template_by_line: dict[str, str] = {}

    def push(text: str, template_id: str) -> None:
        clean = " ".join(text.split())
        if not clean:
            return
        lines.append(clean)
        template_by_line.setdefault(clean, template_id)

    dead: set[str] = set()
    damage: dict[str, dict[str, Any]] = {}
    statuses: dict[str, dict[str, Any]] = {}
    passthrough: list[_CombatEvent] = []

    for event in ordered:
        is_death = event.event_type == "death"
        if not is_death and not event.actor_alive:
            continue
        if not is_death and event.actor_id and event.actor_id in dead:
            continue
        if is_death and event.target_id:
            dead.add(event.target_id)
            passthrough.append(event)
            continue
        if event.event_type == "damage":
            row = damage.setdefault(_pair_key(event), {"event": event, "hits": 0, "total": 0})
            row["hits"] += 1
            row["total"] += max(0, event.amount or 0)
            continue
        if event.event_type == "status_applied":
            row = statuses.setdefault(_pair_key(event), {"event": event, "statuses": []})
            if event.status_id and event.status_id not in row["statuses"]:
                row["statuses"].append(event.status_id)
            continue
        passthrough.append(event)

    lead = _tone_lead(tone)
    for row in damage.values():
        event = row["event"]
        verb = _choose_verb(f"{seed_key}:{event.id}:damage", used_verbs)
        if verb not in used_verbs:
            used_verbs.append(verb)
        if row["hits"] > 1:
            push(
                f"{lead}{event.actor_name} {third_person(verb)} {event.target_name} {row['hits']} times, {row['total']} total damage.",
                "damage_grouped_multi",
            )
        else:
            push(f"{lead}{event.actor_name} {third_person(verb)} {event.target_name} for {row['total']}.", "damage_grouped_single")

    for row in statuses.values():
        event = row["event"]
        labels = [label for label in (_status_label(s) for s in row["statuses"]) if label][:MAX_MERGED_STATUSES]
        if labels:
            push(f"{event.actor_name} braces: {', '.join(labels)} locked on {event.target_name}.", "status_merge")

    for event in passthrough:
        rendered = _passthrough_line(event, seed_key)
        if rendered:
            push(*rendered)

    voiced = next((e for e in passthrough if e.actor_id and e.actor_id in traits_by_id), None)
    if voiced is not None:
        push(
            personality_line(f"{seed_key}:{voiced.actor_id}:persona", traits_by_id[voiced.actor_id], tone),
            "enemy_personality",
        )

    recent = {h.strip() for h in state.recent_line_hashes if h.strip()}
    kept: list[str] = []
    template_ids: list[str] = []
    for line in dedupe_keep_order(lines)[: limit * 2]:
        if hash_line(line) in recent:
            continue
        kept.append(line)
        template_ids.append(template_by_line.get(line, "generic_line"))
        if len(kept) >= limit:
            break

    if not kept:
        logger.debug("No fresh combat lines for seed %s; using fallback line", seed_key)
        kept = [COMBAT_FALLBACK_LINE]
        template_ids = ["fallback_combat_line"]

    line_hashes = [hash_line(line) for line in kept]
    verb_keys = used_verbs[-VERB_HISTORY_LIMIT:]
    last = ordered[-1] if ordered else None
    cursor = f"{last.turn_index}:{last.id}:{last.created_at or 'na'}" if last else None

    next_state = state.model_copy(
        update={
            "last_tone": coerce_tone_mode(tone) or state.last_tone,
            "recent_line_hashes": (list(state.recent_line_hashes) + line_hashes)[-LINE_HISTORY_LIMIT:],
            "last_verb_keys": verb_keys,
        },
        deep=True,
    )
    return NarrativeLinesResult(
        lines=kept,
        line_hashes=line_hashes,
        verb_keys=verb_keys,
        template_ids=template_ids,
        last_event_cursor=cursor,
        presentation=next_state,
    )
