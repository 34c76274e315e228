"""DM voice: a seeded personality, a voice mode per turn, and lines that never echo recent ones.

Lines are rejected when they are exact repeats, when word-trigram Jaccard or
character-bigram Dice similarity against any remembered line reaches the
buffer threshold, or when they reuse several remembered word trigrams.
"""
from __future__ import annotations

import logging
import math
import re
from collections import Counter
from typing import Any, Mapping, Optional, Sequence

from mythic.app.constants import (
    VOICE_FRAGMENT_LIMIT,
    VOICE_FRAGMENT_OVERLAP_REJECT,
    VOICE_FRAGMENT_WINDOW,
    VOICE_MAX_BUNDLE_LINES,
)
from mythic.app.core.grammar import compact_sentence
from mythic.app.core.rng import SeededRng, create_rng
from mythic.app.core.text_utils import clamp01, safe_float
from mythic.app.models.narration import DmNarrationContext, NarrationEvent
from mythic.app.models.presentation import (
    DmVoiceProfile,
    LineHistoryBuffer,
    VoiceBundle,
    coerce_tone_vector,
)
from mythic.app.presentation.word_banks import load_word_banks

logger = logging.getLogger(__name__)

_NON_WORD_RX = re.compile(r"[^a-z0-9\s]")
_SPACE_RX = re.compile(r"\s+")
_HIGH_TENSION_RX = re.compile(r"\b(?:high|critical|war|feud|fracture)\b", re.IGNORECASE)

_BASE_MODE_WEIGHTS: dict[str, float] = {
    "tactical": 1.4,
    "brutal": 0.8,
    "mischievous": 0.7,
    "dark": 0.7,
    "whimsical": 0.5,
    "blessing": 0.4,
    "punishment": 0.6,
    "mythic": 0.8,
    "minimalist": 0.4,
}
_MIN_MODE_WEIGHT = 0.05
_LAST_MODE_DAMPING = 0.08


# --- text similarity ---

def normalize_text(value: str) -> str:
    lowered = (value or "").strip().lower()
    return _SPACE_RX.sub(" ", _NON_WORD_RX.sub(" ", lowered)).strip()


def tokenize(value: str) -> list[str]:
    return normalize_text(value).split()


def build_fragments(line: str) -> list[str]:
    """Unique word trigrams of ``line``; shorter lines yield themselves as one fragment."""
    tokens = tokenize(line)
    if len(tokens) < VOICE_FRAGMENT_WINDOW:
        return [" ".join(tokens)] if tokens else []
    windows = (
        " ".join(tokens[i:i + VOICE_FRAGMENT_WINDOW])
        for i in range(len(tokens) - VOICE_FRAGMENT_WINDOW + 1)
    )
    return list(dict.fromkeys(windows))


def jaccard_similarity(left: Sequence[str], right: Sequence[str]) -> float:
    left_set, right_set = set(left), set(right)
    if not left_set or not right_set:
        return 0.0
    shared = len(left_set & right_set)
    return shared / (len(left_set) + len(right_set) - shared)


def _bigrams(text: str) -> list[str]:
    return [text[i:i + 2] for i in range(len(text) - 1)]


def bigram_dice(left: str, right: str) -> float:
    left_pairs = _bigrams(normalize_text(left))
    right_pairs = _bigrams(normalize_text(right))
    if not left_pairs or not right_pairs:
        return 0.0
    remaining = Counter(left_pairs)
    overlap = 0
    for pair in right_pairs:
        if remaining[pair] > 0:
            remaining[pair] -= 1
            overlap += 1
    return (2 * overlap) / (len(left_pairs) + len(right_pairs))


def line_similarity(left: str, right: str) -> float:
    return max(jaccard_similarity(tokenize(left), tokenize(right)), bigram_dice(left, right))


# --- history buffer ---

def create_line_history(
    lines: Optional[Sequence[str]] = None,
    fragments: Optional[Sequence[str]] = None,
    max_lines: Optional[int] = None,
    similarity_threshold: Optional[float] = None,
) -> LineHistoryBuffer:
    """
    Build a history buffer from persisted lines and fragments.

    Without stored fragments they are rebuilt from ``lines``. Size and
    threshold are clamped by the model.
    """
    buffer = LineHistoryBuffer(max_lines=max_lines, similarity_threshold=similarity_threshold)
    clean_lines = [compact_sentence(str(entry)) for entry in (lines or [])]
    buffer.lines = [entry for entry in clean_lines if entry][-buffer.max_lines:]
    if fragments is not None:
        clean_fragments = [compact_sentence(str(entry).lower()) for entry in fragments]
        buffer.fragments = [entry for entry in clean_fragments if entry][-VOICE_FRAGMENT_LIMIT:]
    else:
        rebuilt = dict.fromkeys(f for entry in buffer.lines for f in build_fragments(entry))
        buffer.fragments = list(rebuilt)[-VOICE_FRAGMENT_LIMIT:]
    return buffer


def should_reject_line(buffer: LineHistoryBuffer, candidate: str) -> bool:
    clean = compact_sentence(candidate)
    if not clean:
        return True
    clean_norm = normalize_text(clean)
    if any(normalize_text(entry) == clean_norm for entry in buffer.lines):
        return True
    if any(line_similarity(entry, clean) >= buffer.similarity_threshold for entry in buffer.lines):
        return True
    known = {entry.lower() for entry in buffer.fragments}
    overlap = sum(1 for fragment in build_fragments(clean) if fragment in known)
    return overlap >= VOICE_FRAGMENT_OVERLAP_REJECT


def push_line_history(buffer: LineHistoryBuffer, line: str) -> None:
    clean = compact_sentence(line)
    if not clean:
        return
    buffer.lines = (buffer.lines + [clean])[-buffer.max_lines:]
    merged = dict.fromkeys(buffer.fragments + build_fragments(clean))
    buffer.fragments = list(merged)[-VOICE_FRAGMENT_LIMIT:]


# --- profile and mode ---

def _tone_value(vector: Mapping[str, float], keys: Sequence[str]) -> float:
    for key in keys:
        if key in vector:
            return vector[key]
    return 0.0


def build_dm_voice_profile(
    seed_key: str,
    world_tone_vector: Optional[Mapping[str, Any]] = None,
) -> DmVoiceProfile:
    """Seeded DM personality, nudged by the world's tone weights."""
    rng = create_rng(f"{seed_key}:profile")
    vector = coerce_tone_vector(dict(world_tone_vector or {}))
    dark = _tone_value(vector, ("dark", "grim", "danger"))
    whimsy = _tone_value(vector, ("whimsical", "comic", "bright"))
    mythic = _tone_value(vector, ("mythic", "epic", "legendary"))
    tactical = _tone_value(vector, ("tactical", "strategy", "discipline"))

    return DmVoiceProfile(
        sarcasm_level=0.28 + rng.next01() * 0.52 + whimsy * 0.07,
        cruelty_level=0.2 + rng.next01() * 0.58 + dark * 0.08,
        humor_level=0.18 + rng.next01() * 0.6 + whimsy * 0.09,
        verbosity_level=0.26 + rng.next01() * 0.5 + tactical * 0.05,
        mythic_intensity=0.24 + rng.next01() * 0.58 + mythic * 0.1,
        absurdity_level=0.12 + rng.next01() * 0.62 + whimsy * 0.08,
        favoritism_bias=0.1 + rng.next01() * 0.55,
        memory_recall_bias=0.2 + rng.next01() * 0.62 + tactical * 0.05,
    )


def voice_mode_weights(context: DmNarrationContext) -> dict[str, float]:
    weights = dict(_BASE_MODE_WEIGHTS)
    profile = context.dm_voice_profile

    if context.board_type == "combat":
        weights["tactical"] += 0.9
        weights["brutal"] += 0.7
        weights["punishment"] += 0.4
    else:
        weights["whimsical"] += 0.4
        weights["mischievous"] += 0.4
        weights["mythic"] += 0.3
    if context.player_hp_pct <= 0.35:
        weights["brutal"] += 0.8
        weights["punishment"] += 0.7
        weights["minimalist"] += 0.4
    elif context.player_hp_pct >= 0.82:
        weights["blessing"] += 0.2
        weights["mischievous"] += 0.2
    if context.enemy_threat_level >= 0.7:
        weights["tactical"] += 0.6
        weights["brutal"] += 0.5
        weights["dark"] += 0.4

    weights["mischievous"] += profile.sarcasm_level * 0.65
    weights["whimsical"] += profile.humor_level * 0.8 + profile.absurdity_level * 0.7
    weights["dark"] += profile.cruelty_level * 0.7
    weights["punishment"] += profile.cruelty_level * 0.75
    weights["blessing"] += profile.favoritism_bias * 0.8
    weights["mythic"] += profile.mythic_intensity * 0.95
    weights["minimalist"] += max(0.0, 0.65 - profile.verbosity_level) * 0.7
    weights["tactical"] += profile.verbosity_level * 0.35

    if _HIGH_TENSION_RX.search(context.faction_tension):
        weights["tactical"] += 0.35
        weights["dark"] += 0.35
    return weights


def select_voice_mode(
    seed_key: str,
    context: DmNarrationContext,
    last_voice_mode: Optional[str] = None,
) -> str:
    """Weighted mode pick; the previous mode is heavily damped but not forbidden."""
    rng = create_rng(f"{seed_key}:voice-mode")
    entries = []
    for mode, weight in voice_mode_weights(context).items():
        if mode == last_voice_mode:
            adjusted = weight * _LAST_MODE_DAMPING
        else:
            adjusted = weight + rng.next01() * 0.06
        entries.append({"mode": mode, "weight": max(_MIN_MODE_WEIGHT, adjusted)})
    return rng.weighted_pick(entries)["mode"]


# --- lines ---

def _percent(value: float) -> int:
    return int(math.floor(value * 100 + 0.5))


def contextual_anchor(context: DmNarrationContext, seed_key: str) -> str:
    """One short clause tying a voice line to this turn's board."""
    rng = create_rng(f"{seed_key}:anchor")
    anchors: list[str] = []
    if context.active_hooks:
        hooks = context.active_hooks
        anchors.append(f"Hook: {hooks[math.floor(rng.next01() * len(hooks))]}.")
    anchors.append(f"Board: {context.board_type} in {context.biome}.")
    if context.faction_tension.strip():
        anchors.append(f"Faction friction: {context.faction_tension}.")
    anchors.append(
        f"HP {_percent(context.player_hp_pct)}%, threat {_percent(context.enemy_threat_level)}%."
    )
    if context.player_reputation_tags:
        tags = context.player_reputation_tags
        anchors.append(f"Reputation echo: {tags[math.floor(rng.next01() * len(tags))]}.")
    if context.recent_events:
        latest = context.recent_events[-1].context
        actor = latest.get("actor").strip() if isinstance(latest.get("actor"), str) else ""
        target = latest.get("target").strip() if isinstance(latest.get("target"), str) else ""
        if actor and target:
            anchors.append(f"Latest exchange: {actor} pressured {target}.")
    return compact_sentence(anchors[math.floor(rng.next01() * len(anchors))])


def _event_traits(event: NarrationEvent) -> Optional[Mapping[str, Any]]:
    payload = event.context.get("payload")
    sources = [event.context, payload if isinstance(payload, Mapping) else {}]
    for source in sources:
        for key in ("enemy_traits", "actor_traits"):
            traits = source.get(key)
            if isinstance(traits, Mapping):
                return traits
    return None


def _persona_mode(traits: Mapping[str, Any], rng: SeededRng) -> str:
    aggression = safe_float(traits.get("aggression"))
    intelligence = safe_float(traits.get("intelligence"))
    instinct = traits.get("instinct_type")
    instinct = instinct.strip().lower() if isinstance(instinct, str) else ""

    mode = "aggressive"
    if (intelligence is not None and intelligence >= 0.66) or instinct in ("ambush", "duelist"):
        mode = "cunning"
    elif instinct == "chaotic":
        mode = "chaotic"
    elif (aggression is not None and aggression >= 0.72) or instinct == "predator":
        mode = "brutal"
    if instinct == "pack" and rng.next01() > 0.4:
        mode = "cunning"
    if rng.next01() <= 0.12:
        mode = "whimsical"
    return mode


def build_enemy_persona_line(
    seed_key: str,
    recent_events: Sequence[NarrationEvent],
    history: LineHistoryBuffer,
) -> Optional[str]:
    """Aside about the latest enemy that carries traits (0..1 scale), or None."""
    event = next((e for e in reversed(recent_events) if _event_traits(e) is not None), None)
    if event is None:
        return None
    rng = create_rng(f"{seed_key}:enemy-persona")
    pool = load_word_banks().dm_persona[_persona_mode(_event_traits(event), rng)]
    actor = event.context.get("actor")
    actor = actor.strip() if isinstance(actor, str) and actor.strip() else "The enemy"
    for attempt in range(len(pool)):
        phrase = pool[(attempt + math.floor(rng.next01() * len(pool))) % len(pool)]
        line = compact_sentence(f"{actor}: {phrase}")
        if should_reject_line(history, line):
            continue
        push_line_history(history, line)
        return line
    return None


def build_voice_line(
    seed_key: str,
    context: DmNarrationContext,
    mode: str,
    history: LineHistoryBuffer,
) -> str:
    """A phrase from the mode's pool plus an anchor; the first pool entry when all are too familiar."""
    rng = create_rng(f"{seed_key}:voice-line:{mode}")
    voice = load_word_banks().dm_voice
    pool = voice.get(mode) or voice["tactical"]
    anchor = contextual_anchor(context, f"{seed_key}:{mode}")
    for attempt in range(len(pool)):
        phrase = pool[(attempt + math.floor(rng.next01() * len(pool))) % len(pool)]
        line = compact_sentence(f"{phrase} {anchor}")
        if should_reject_line(history, line):
            continue
        push_line_history(history, line)
        return line
    logger.debug("Every %s voice line is too close to history; reusing the first", mode)
    fallback = compact_sentence(f"{pool[0]} {anchor}")
    push_line_history(history, fallback)
    return fallback


def _secondary_mode(context: DmNarrationContext, mode: str) -> str:
    profile = context.dm_voice_profile
    if context.player_hp_pct <= 0.28 and profile.favoritism_bias >= 0.45:
        return "blessing"
    if context.player_hp_pct <= 0.45 and profile.cruelty_level >= 0.5:
        return "punishment"
    if context.enemy_threat_level >= 0.72:
        return "tactical"
    if profile.humor_level >= 0.62:
        return "mischievous"
    if profile.mythic_intensity >= 0.68:
        return "mythic"
    return "dark" if mode == "tactical" else "tactical"


def build_voice_narration_bundle(
    seed_key: str,
    context: DmNarrationContext,
    history: LineHistoryBuffer,
    last_voice_mode: Optional[str] = None,
) -> VoiceBundle:
    """
    Up to three DM lines for one turn: a primary voice line, a line in a
    contrasting mode, and an enemy persona aside when an event carries traits.

    Accepted lines are pushed into ``history``.
    """
    mode = select_voice_mode(seed_key, context, last_voice_mode)
    lines = [build_voice_line(f"{seed_key}:primary", context, mode, history)]

    secondary = _secondary_mode(context, mode)
    if secondary != mode:
        lines.append(build_voice_line(f"{seed_key}:secondary", context, secondary, history))

    persona = build_enemy_persona_line(f"{seed_key}:persona", context.recent_events, history)
    if persona:
        lines.append(persona)

    return VoiceBundle(mode=mode, lines=[line for line in lines if line.strip()][:VOICE_MAX_BUNDLE_LINES])


def infer_enemy_threat(events: Sequence[NarrationEvent]) -> float:
    """Threat estimate from the turn's events when the caller does not supply one."""
    if not events:
        return 0.45
    score = 0.0
    for event in events:
        if event.type == "COMBAT_ATTACK_RESOLVED":
            score += 0.12
        elif event.type == "STATUS_TICK":
            score += 0.08
        elif event.type == "BOARD_TRANSITION":
            score += 0.04
        amount = safe_float(event.context.get("amount"))
        if amount is not None and amount > 0:
            score += min(0.18, amount / 200)
    return clamp01(0.3 + score, 0.52)

