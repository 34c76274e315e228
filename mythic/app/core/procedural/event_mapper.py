"""Raw game events -> classified NarrationEvent list for the procedural narrator."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Mapping, Sequence

from mythic.app.constants import NARRATOR_MAX_STATE_CHANGE_EVENTS
from mythic.app.core.text_utils import normalize_identifier, safe_float
from mythic.app.models.narration import NarrationEvent

logger = logging.getLogger(__name__)

_RAW_TYPE_MAP: dict[str, str] = {
    "damage": "COMBAT_ATTACK_RESOLVED",
    "miss": "COMBAT_ATTACK_RESOLVED",
    "healed": "COMBAT_ATTACK_RESOLVED",
    "death": "COMBAT_ATTACK_RESOLVED",
    "combat_end": "COMBAT_ATTACK_RESOLVED",
    "status_tick": "STATUS_TICK",
    "status_applied": "STATUS_TICK",
    "status_expired": "STATUS_TICK",
    "loot_drop": "LOOT_DROPPED",
    "xp_gain": "LEVEL_UP",
    "dialogue": "NPC_DIALOGUE",
    "npc_dialogue": "NPC_DIALOGUE",
    "room_entered": "DUNGEON_ROOM_ENTERED",
    "room_transition": "DUNGEON_ROOM_ENTERED",
    "travel_step": "TRAVEL_STEP",
    "quest_update": "QUEST_UPDATE",
    "objective": "QUEST_UPDATE",
    "board_transition": "BOARD_TRANSITION",
    "runtime_transition": "BOARD_TRANSITION",
}

_BOARD_DEFAULT_TYPE: dict[str, str] = {
    "dungeon": "DUNGEON_ROOM_ENTERED",
    "travel": "TRAVEL_STEP",
    "combat": "COMBAT_ATTACK_RESOLVED",
}


def classify_event_type(raw_type: str, board_type: str) -> str:
    """
    Map a raw engine event type to a narration event type.

    Examples:
        >>> classify_event_type("damage", "town")
        'COMBAT_ATTACK_RESOLVED'
        >>> classify_event_type("moved", "travel")
        'TRAVEL_STEP'
        >>> classify_event_type("something_new", "dungeon")
        'DUNGEON_ROOM_ENTERED'
    """
    key = str(raw_type or "").strip().lower()
    board = str(board_type or "").strip().lower()
    if key == "moved":
        return "TRAVEL_STEP" if board == "travel" else "BOARD_TRANSITION"
    if key in _RAW_TYPE_MAP:
        return _RAW_TYPE_MAP[key]
    return _BOARD_DEFAULT_TYPE.get(board, "QUEST_UPDATE")


def _to_timestamp(value: Any, fallback: int) -> int:
    """Epoch milliseconds from a number or ISO string; ``fallback`` otherwise."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        parsed = safe_float(value)
        return int(parsed // 1) if parsed is not None else fallback
    if isinstance(value, str) and value.strip():
        try:
            moment = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return fallback
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        return int(moment.timestamp() * 1000)
    return fallback


def _first_text(*values: Any) -> str | None:
    for value in values:
        if isinstance(value, str):
            return value
    return None


def _amount(payload: Mapping[str, Any]) -> float | None:
    for key in ("damage_to_hp", "amount", "final_damage"):
        if payload.get(key) is not None:
            return safe_float(payload.get(key))
    return None


def map_procedural_events(
    seed: str,
    board_type: str,
    events: Sequence[Any],
    state_changes: Sequence[str] = (),
    fallback_event_id: str = "",
) -> list[NarrationEvent]:
    """
    Classify raw events into NarrationEvent entries. Never returns an empty list.

    Raw events win; without them, up to six state-change strings become
    QUEST_UPDATE-style events; without either, one fallback event is emitted.
    Missing timestamps use the event index so mapping stays deterministic.
    """
    board = normalize_identifier(board_type or "")
    mapped: list[NarrationEvent] = []

    for index, raw in enumerate(events):
        if not isinstance(raw, Mapping):
            continue
        payload = raw.get("payload") if isinstance(raw.get("payload"), Mapping) else {}
        raw_type = _first_text(raw.get("event_type"), payload.get("event_type")) or "quest_update"
        event_type = classify_event_type(raw_type, board)
        raw_id = raw.get("id")
        event_id = raw_id.strip() if isinstance(raw_id, str) and raw_id.strip() else f"{event_type.lower()}_{index}"
        timestamp_raw = next(
            (v for v in (raw.get("created_at"), raw.get("ts"), payload.get("ts")) if v is not None), None
        )
        status = payload.get("status") if isinstance(payload.get("status"), Mapping) else {}
        mapped.append(
            NarrationEvent(
                type=event_type,
                timestamp=_to_timestamp(timestamp_raw, index),
                seed=seed,
                id=event_id,
                context={
                    "actor": _first_text(payload.get("source_name"), payload.get("actor_name")) or "You",
                    "target": _first_text(payload.get("target_name")) or "the line",
                    "amount": _amount(payload),
                    "status": _first_text(status.get("id"), payload.get("status_id")),
                    "raw_event_type": raw_type,
                    "payload": dict(payload),
                },
            )
        )

    if not mapped:
        for index, change in enumerate(state_changes):
            summary = str(change or "").strip()
            if not summary:
                continue
            mapped.append(
                NarrationEvent(
                    type=classify_event_type("quest_update", board),
                    timestamp=index,
                    seed=seed,
                    id=f"state_change_{index}",
                    context={"summary": summary, "source": "state_change"},
                )
            )
            if len(mapped) >= NARRATOR_MAX_STATE_CHANGE_EVENTS:
                break

    if not mapped:
        logger.debug("No events or state changes for seed %s; emitting fallback event", seed)
        mapped.append(
            NarrationEvent(
                type=classify_event_type("quest_update", board),
                timestamp=0,
                seed=seed,
                id=(fallback_event_id or "").strip() or "event_fallback",
                context={
                    "actor": "You",
                    "target": "hostiles" if board == "combat" else "the board",
                    "amount": None,
                    "status": None,
                },
            )
        )
    return mapped
