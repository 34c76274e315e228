"""Procedural narrator: seeded, template-driven turn narration with a full decision trace.

Same input, same text. Every random decision comes from the turn seed
(``campaign_seed::session_id::event_id``) and lands in ``result.debug`` so a
turn can be replayed and asserted on without rerunning the game.
"""
from __future__ import annotations

import logging
import re
from typing import Any, Mapping, Optional

from mythic.app.config import LINE_HISTORY_LIMIT
from mythic.app.constants import (
    ASIDE_LINES,
    ATTACK_VERBS,
    BOARD_TYPES,
    FLAVOR_NOUNS,
    MOTION_VERBS,
    NARRATOR_ASIDE_KEEP_CHANCE,
    NARRATOR_ASIDE_PICK_CHANCE,
    NARRATOR_LINES_BY_INTENSITY,
    NARRATOR_MAX_GUARDRAIL_RETRIES,
    NARRATOR_SECONDARY_LINE_CHANCE,
    NARRATOR_TAG_BONUS_BIOME,
    NARRATOR_TAG_BONUS_INTENSITY,
    NARRATOR_TAG_BONUS_TONE,
    VERB_HISTORY_LIMIT,
    VOICE_RECENT_EVENTS,
)
from mythic.app.core.error_handling import log_error_with_context
from mythic.app.core.grammar import compact_sentence, concise_count_label
from mythic.app.core.procedural.event_mapper import map_procedural_events
from mythic.app.core.procedural.guardrails import has_forbidden_narration_content
from mythic.app.core.procedural.templates import (
    DEFAULT_TEMPLATES,
    Template,
    TemplateRenderContext,
    describe_context_clue,
    templates_for,
)
from mythic.app.core.rng import EmptyPoolError, SeededRng, build_narration_seed, create_rng
from mythic.app.core.selection import hash_line, pick_deterministic
from mythic.app.core.text_utils import as_text, clamp01, safe_float
from mythic.app.models.narration import (
    DmNarrationContext,
    NarrationEvent,
    NarratorDebug,
    ProceduralNarratorInput,
    ProceduralNarratorResult,
)
from mythic.app.models.presentation import DmVoiceProfile, LineHistoryBuffer, PresentationState, VoiceBundle
from mythic.app.presentation.board_narration import build_board_narration
from mythic.app.presentation.voice_engine import (
    build_dm_voice_profile,
    build_voice_narration_bundle,
    create_line_history,
    infer_enemy_threat,
    push_line_history,
    should_reject_line,
)

logger = logging.getLogger(__name__)

PROCEDURAL_TONES: tuple[str, ...] = ("dark", "comic", "heroic", "grim", "mischievous", "tactical")
SUPPRESSED_TEMPLATE_ID = "suppressed_error"
FALLBACK_TEMPLATE_ID = "fallback_safe_line"

# procedural tone -> presentation tone carried in PresentationState.last_tone
TONE_MODE_BY_PROCEDURAL_TONE: dict[str, str] = {
    "tactical": "tactical",
    "heroic": "mythic",
    "comic": "whimsical",
    "mischievous": "whimsical",
    "grim": "brutal",
    "dark": "brutal",
}

_DOTS_RX = re.compile(r"\.{2,}")

# (substrings, biome) checked in order
_BIOME_KEYWORDS: tuple[tuple[tuple[str, ...], str], ...] = (
    (("forest",), "forest"),
    (("desert",), "desert"),
    (("swamp",), "swamp"),
    (("arctic", "ice", "snow"), "arctic"),
    (("city", "town", "market"), "city"),
    (("dungeon", "crypt", "cave"), "dungeon"),
)


def normalize_tone(value: Optional[str]) -> str:
    key = (value or "").strip().lower()
    if key in PROCEDURAL_TONES:
        return key
    if "whim" in key:
        return "comic"
    if "brutal" in key:
        return "grim"
    if "mythic" in key:
        return "heroic"
    if "dark" in key:
        return "dark"
    return "tactical"


def normalize_intensity(value: Optional[str]) -> str:
    key = (value or "").strip().lower()
    return key if key in NARRATOR_LINES_BY_INTENSITY else "med"


def normalize_biome(value: Optional[str]) -> str:
    key = (value or "").strip().lower()
    if not key:
        return "default"
    for needles, biome in _BIOME_KEYWORDS:
        if any(n in key for n in needles):
            return biome
    return "default"


def _cleanup(text: str) -> str:
    return _DOTS_RX.sub(".", compact_sentence(text)).strip()


def template_score(template: Template, tone: str, biome: str, intensity: str) -> float:
    score = max(1.0, float(template.weight))
    if tone in template.tags:
        score += NARRATOR_TAG_BONUS_TONE
    if biome in template.tags:
        score += NARRATOR_TAG_BONUS_BIOME
    if intensity in template.tags:
        score += NARRATOR_TAG_BONUS_INTENSITY
    return score


def choose_template(
    event: NarrationEvent,
    tone: str,
    biome: str,
    intensity: str,
    rng: SeededRng,
    excluded_ids: set[str],
) -> tuple[Template, bool]:
    """Weighted pick among the event type's templates. Returns (template, default_pool_used)."""
    pool = templates_for(event.type, excluded_ids)
    default_used = not pool
    if default_used:
        logger.debug("No template for %s (excluded=%s); using default pool", event.type, sorted(excluded_ids))
        pool = [t for t in DEFAULT_TEMPLATES if t.id not in excluded_ids] or list(DEFAULT_TEMPLATES)
    weighted = [{"template": t, "weight": template_score(t, tone, biome, intensity)} for t in pool]
    return rng.weighted_pick(weighted)["template"], default_used


def _safe_render(template: Template, ctx: TemplateRenderContext, seed: str, event_id: str) -> str:
    try:
        return template.render(ctx)
    except EmptyPoolError:
        raise
    except Exception as e:
        log_error_with_context(e, "procedural_narrator", seed=seed, event_id=event_id, template_id=template.id)
        return f"Board state shifts around {ctx.board_anchor}. {ctx.recovery_beat}"


def _status_text(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip().replace("_", " ")
    return None


def _next_presentation(
    state: PresentationState,
    tone: str,
    line_hashes: list[str],
    verb: Optional[str],
    opener_id: Optional[str],
    history: Optional[LineHistoryBuffer] = None,
    voice_mode: Optional[str] = None,
) -> PresentationState:
    verbs = list(state.last_verb_keys)
    if verb:
        verbs = [v for v in verbs if v != verb] + [verb]
    return PresentationState(
        last_tone=TONE_MODE_BY_PROCEDURAL_TONE.get(tone, state.last_tone),
        last_board_opener_id=opener_id or state.last_board_opener_id,
        recent_line_hashes=(list(state.recent_line_hashes) + line_hashes)[-LINE_HISTORY_LIMIT:],
        last_verb_keys=verbs[-VERB_HISTORY_LIMIT:],
        last_voice_mode=voice_mode or state.last_voice_mode,
        recent_lines=history.lines if history is not None else list(state.recent_lines),
        recent_fragments=history.fragments if history is not None else list(state.recent_fragments),
    )


def _narration_context(
    data: ProceduralNarratorInput,
    mapped: list[NarrationEvent],
    biome: str,
    profile: DmVoiceProfile,
) -> DmNarrationContext:
    hooks = [*data.hooks, data.summary_objective, data.summary_rumor, data.action_summary, data.board_anchor]
    return DmNarrationContext(
        board_type=data.board_type or "combat",
        biome=as_text(data.biome, biome),
        active_hooks=[h.strip() for h in hooks if isinstance(h, str) and h.strip()][:5],
        faction_tension=as_text(data.faction_tension, "moderate"),
        player_hp_pct=clamp01(data.player_hp_pct, 0.65),
        enemy_threat_level=clamp01(data.enemy_threat_level, infer_enemy_threat(mapped)),
        recent_events=mapped[-VOICE_RECENT_EVENTS:],
        player_reputation_tags=data.player_reputation_tags[:8],
        world_tone_vector=data.world_tone_vector,
        dm_voice_profile=profile,
    )


def _voice_line_budget(profile: DmVoiceProfile) -> int:
    """Voice lines allowed after the template line; chattier DMs get more."""
    if profile.verbosity_level >= 0.68:
        return 2
    if profile.verbosity_level >= 0.35:
        return 1
    return 0


def _retry_bundle(
    seed: str,
    attempt: int,
    context: DmNarrationContext,
    history: LineHistoryBuffer,
    first: VoiceBundle,
) -> VoiceBundle:
    return build_voice_narration_bundle(
        f"{seed}:voice-retry:{attempt}", context, history.model_copy(deep=True), first.mode
    )


def _compose_board_narration(data: ProceduralNarratorInput, seed: str) -> tuple[str, Optional[str]]:
    if data.board_narration or data.board_type not in BOARD_TYPES:
        return data.board_narration, None
    board = build_board_narration(
        {
            "seed_key": f"{seed}::board",
            "board_type": data.board_type,
            "hooks": data.hooks,
            "time_pressure": data.time_pressure,
            "faction_tension": data.faction_tension,
            "resource_window": data.resource_window,
            "region_name": data.region_name,
            "last_opener_id": data.presentation_state.last_board_opener_id,
        }
    )
    return board.text, board.opener_id


def _suppressed_result(
    data: ProceduralNarratorInput,
    seed: str,
    tone: str,
    biome: str,
    intensity: str,
    mapped: list[NarrationEvent],
) -> ProceduralNarratorResult:
    error = (data.execution_error or "").strip()
    text = _cleanup(f"Action blocked: {error}. {data.recovery_beat or 'Hold position.'}")
    logger.info("Narration suppressed for seed %s: %s", seed, error)
    hashes = [hash_line(text)]
    debug = NarratorDebug(
        seed=seed,
        template_id=SUPPRESSED_TEMPLATE_ID,
        tone=tone,
        biome=biome,
        intensity=intensity,
        suppressed=True,
        event_count=len(mapped),
        event_ids=[e.id for e in mapped],
        event_types=[e.type for e in mapped],
        mapped_events=mapped,
    )
    return ProceduralNarratorResult(
        text=text,
        template_id=SUPPRESSED_TEMPLATE_ID,
        template_ids=[SUPPRESSED_TEMPLATE_ID],
        line_hashes=hashes,
        debug=debug,
        presentation=_next_presentation(data.presentation_state, tone, hashes, None, None),
    )


def generate_procedural_narration(
    data: ProceduralNarratorInput | Mapping[str, Any],
) -> ProceduralNarratorResult:
    """
    Narrate one turn.

    Never returns empty text: missing templates fall back to the default pool,
    guardrail failures retry with other templates and end in a fixed safe line.
    ``EmptyPoolError`` (bad static data) propagates.
    """
    if not isinstance(data, ProceduralNarratorInput):
        data = ProceduralNarratorInput.model_validate(data)

    seed = build_narration_seed(data.campaign_seed, data.session_id, data.event_id)
    tone = normalize_tone(data.tone)
    intensity = normalize_intensity(data.intensity)
    biome = normalize_biome(data.biome)
    state = data.presentation_state

    mapped = map_procedural_events(
        seed=data.campaign_seed,
        board_type=data.board_type,
        events=data.events,
        state_changes=data.state_changes,
        fallback_event_id=data.event_id,
    )

    if data.suppress_narration_on_error and data.execution_error:
        return _suppressed_result(data, seed, tone, biome, intensity, mapped)

    primary = mapped[-1]
    secondary = mapped[-2] if len(mapped) > 1 else None
    rng = create_rng(seed)
    excluded: set[str] = set()
    template, default_used = choose_template(primary, tone, biome, intensity, rng, excluded)

    recent_verbs = set(state.last_verb_keys)
    attack_pool = [v for v in ATTACK_VERBS if v not in recent_verbs] or list(ATTACK_VERBS)
    attack_verb = pick_deterministic(attack_pool, seed, "attack-verb")
    motion_verb = pick_deterministic(MOTION_VERBS, seed, "motion-verb")
    clue = describe_context_clue(biome, int(rng.next01() * 1000))
    flavor_noun = f"{clue} {pick_deterministic(FLAVOR_NOUNS, seed, 'flavor-noun')}"

    board_narration, opener_id = _compose_board_narration(data, seed)
    context = primary.context
    ctx = TemplateRenderContext(
        actor=as_text(context.get("actor"), "You"),
        target=as_text(context.get("target"), "the line"),
        amount=safe_float(context.get("amount")),
        status=_status_text(context.get("status")),
        action_summary=data.action_summary or as_text(context.get("summary"), ""),
        board_anchor=data.board_anchor,
        objective=data.summary_objective,
        rumor=data.summary_rumor,
        recovery_beat=data.recovery_beat,
        board_narration=board_narration,
        attack_verb=attack_verb,
        motion_verb=motion_verb,
        flavor_noun=flavor_noun,
        event=primary,
    )

    profile = build_dm_voice_profile(f"{seed}:voice-profile", data.world_tone_vector)
    voice_context = _narration_context(data, mapped, biome, profile)
    history = create_line_history(state.recent_lines, state.recent_fragments or None)
    voice_budget = _voice_line_budget(profile)
    bundle = build_voice_narration_bundle(
        f"{seed}:voice-bundle", voice_context, history.model_copy(deep=True), state.last_voice_mode
    )
    voice_lines = bundle.lines[:voice_budget]

    recent = set(state.recent_line_hashes)
    intro = f"The board opens around {data.board_anchor}." if data.intro_opening else ""
    max_lines = NARRATOR_LINES_BY_INTENSITY[intensity] + (1 if intro else 0)

    if secondary is not None:
        secondary_line = (
            f"{concise_count_label('event', len(mapped))} unfolding. "
            f"{as_text(secondary.context.get('actor'), 'The board')} pressures "
            f"{as_text(secondary.context.get('target'), 'the seam')}."
        )
    else:
        secondary_line = f"{board_narration} {data.summary_objective or data.summary_rumor or data.recovery_beat}"

    def assemble(template_line: str, extra: list[str]) -> list[str]:
        seen = history.model_copy(deep=True)
        lines: list[str] = []
        for candidate in [intro, template_line, *extra]:
            clean = _cleanup(candidate)
            if not clean or clean in lines or hash_line(clean) in recent or should_reject_line(seen, clean):
                continue
            lines.append(clean)
            push_line_history(seen, clean)
        return lines[:max_lines]

    extras: list[str] = list(voice_lines)
    if rng.next01() <= NARRATOR_SECONDARY_LINE_CHANCE:
        extras.append(secondary_line)
    aside = rng.pick(ASIDE_LINES) if rng.next01() <= NARRATOR_ASIDE_PICK_CHANCE else ""
    aside_used = bool(aside) and rng.next01() <= NARRATOR_ASIDE_KEEP_CHANCE
    if aside_used:
        extras.append(aside)

    lines = assemble(_safe_render(template, ctx, seed, primary.id), extras)
    text = _cleanup(" ".join(lines))

    retries = 0
    while has_forbidden_narration_content(text) and retries < NARRATOR_MAX_GUARDRAIL_RETRIES:
        logger.debug("Guardrail rejected template %s for seed %s; retrying", template.id, seed)
        excluded.add(template.id)
        template, retry_default = choose_template(primary, tone, biome, intensity, rng, excluded)
        default_used = default_used or retry_default
        retry_bundle = _retry_bundle(seed, retries, voice_context, history, bundle)
        lines = assemble(
            _safe_render(template, ctx, seed, primary.id), [*retry_bundle.lines[:voice_budget], data.recovery_beat]
        )
        text = _cleanup(" ".join(lines))
        retries += 1

    template_id = template.id
    if not text or has_forbidden_narration_content(text):
        logger.debug("Falling back to safe line for seed %s", seed)
        text = _cleanup(f"Board state shifts around {data.board_anchor}. {data.recovery_beat}")
        lines = [text]
        template_id = FALLBACK_TEMPLATE_ID

    history_after = history.model_copy(deep=True)
    for line in lines:
        push_line_history(history_after, line)
    line_hashes = [hash_line(line) for line in lines]
    debug = NarratorDebug(
        seed=seed,
        rng_picks=list(rng.draws),
        picks={
            "template": template_id,
            "attack_verb": attack_verb,
            "motion_verb": motion_verb,
            "flavor_noun": flavor_noun,
            **({"aside": aside} if aside_used else {}),
            **({"board_opener": opener_id} if opener_id else {}),
        },
        template_id=template_id,
        template_tags=list(template.tags) if template_id == template.id else [],
        tone=tone,
        biome=biome,
        intensity=intensity,
        aside_used=aside_used,
        default_pool_used=default_used,
        guardrail_retries=retries,
        event_count=len(mapped),
        event_ids=[e.id for e in mapped],
        event_types=[e.type for e in mapped],
        mapped_events=mapped,
        voice_mode=bundle.mode,
        voice_profile=profile,
        voice_lines=voice_lines,
        line_history_before=list(history.lines),
        line_history_after=list(history_after.lines),
    )
    return ProceduralNarratorResult(
        text=text,
        template_id=template_id,
        template_ids=[template_id],
        line_hashes=line_hashes,
        opener_id=opener_id,
        debug=debug,
        presentation=_next_presentation(
            state, tone, line_hashes, attack_verb, opener_id, history=history_after, voice_mode=bundle.mode
        ),
    )
