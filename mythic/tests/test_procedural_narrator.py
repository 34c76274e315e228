"""Tests for the procedural narrator."""
from __future__ import annotations

import logging

import pytest
from pydantic import ValidationError

from mythic.app.config import LINE_HISTORY_LIMIT
from mythic.app.constants import ATTACK_VERBS, NARRATOR_LINES_BY_INTENSITY
from mythic.app.core.procedural import narrator
from mythic.app.core.procedural.guardrails import has_forbidden_narration_content
from mythic.app.core.procedural.narrator import (
    FALLBACK_TEMPLATE_ID,
    SUPPRESSED_TEMPLATE_ID,
    generate_procedural_narration,
    normalize_biome,
    normalize_intensity,
    normalize_tone,
)
from mythic.app.core.procedural.templates import DEFAULT_TEMPLATES, PROCEDURAL_TEMPLATES, Template
from mythic.app.core.rng import EmptyPoolError
from mythic.app.core.selection import hash_line
from mythic.app.models.narration import ProceduralNarratorInput
from mythic.app.models.presentation import VOICE_MODES, PresentationState
from mythic.app.presentation.voice_engine import line_similarity
from mythic.app.presentation.word_banks import load_word_banks

KNOWN_TEMPLATE_IDS = {t.id for t in PROCEDURAL_TEMPLATES + DEFAULT_TEMPLATES} | {FALLBACK_TEMPLATE_ID}


def _input(**overrides) -> ProceduralNarratorInput:
    data = {
        "campaign_seed": "camp",
        "session_id": "sess",
        "event_id": "evt-1",
        "board_type": "combat",
        "tone": "grim",
        "intensity": "high",
        "action_summary": "Kael pushes the flank.",
        "recovery_beat": "Hold the line.",
        "board_anchor": "the gate",
        "events": [
            {
                "id": "hit-1",
                "event_type": "damage",
                "payload": {"source_name": "Kael", "target_name": "the goblin", "damage_to_hp": 6},
            }
        ],
    }
    data.update(overrides)
    return ProceduralNarratorInput(**data)


def _fake_templates(*templates: Template, honor_exclusions: bool = True):
    def fake(event_type, excluded_ids=frozenset()):
        if not honor_exclusions:
            return list(templates)
        return [t for t in templates if t.id not in excluded_ids]
    return fake


def _template(template_id: str, render) -> Template:
    return Template(id=template_id, event_type=None, weight=1, tags=("grim",), render=render)


# --- determinism and trace ---

def test_same_input_same_output():
    assert generate_procedural_narration(_input()) == generate_procedural_narration(_input())


def test_different_event_ids_reseed():
    a = generate_procedural_narration(_input(event_id="evt-1"))
    b = generate_procedural_narration(_input(event_id="evt-2"))
    assert a.debug.seed != b.debug.seed
    assert a.debug.rng_picks != b.debug.rng_picks


def test_debug_trace():
    result = generate_procedural_narration(_input())
    debug = result.debug
    assert debug.seed == "camp::sess::evt-1"
    assert debug.rng_picks and all(0 <= p < 1 for p in debug.rng_picks)
    assert debug.picks["template"] == result.template_id
    assert debug.picks["attack_verb"] in ATTACK_VERBS
    assert debug.event_ids == ["hit-1"]
    assert debug.event_types == ["COMBAT_ATTACK_RESOLVED"]
    assert debug.event_count == 1
    assert (debug.tone, debug.intensity, debug.biome) == ("grim", "high", "default")


def test_text_is_clean():
    for i in range(20):
        result = generate_procedural_narration(_input(event_id=f"evt-{i}"))
        assert result.text
        assert not has_forbidden_narration_content(result.text)
        assert "  " not in result.text
        assert ".." not in result.text
        assert result.template_id in KNOWN_TEMPLATE_IDS
        assert result.template_ids == [result.template_id]


def test_accepts_mapping_input():
    data = _input().model_dump()
    assert generate_procedural_narration(data) == generate_procedural_narration(_input())


# --- normalization ---

@pytest.mark.parametrize(
    "raw,tone",
    [("grim", "grim"), ("Whimsical", "comic"), ("BRUTAL", "grim"), ("mythic", "heroic"),
     ("darkest", "dark"), ("", "tactical"), ("operatic", "tactical"), (None, "tactical")],
)
def test_normalize_tone(raw, tone):
    assert normalize_tone(raw) == tone


def test_normalize_intensity():
    assert normalize_intensity(" LOW ") == "low"
    assert normalize_intensity("extreme") == "med"


@pytest.mark.parametrize(
    "raw,biome",
    [("Snowy peaks", "arctic"), ("Market square", "city"), ("old crypt", "dungeon"),
     ("Deep Forest", "forest"), ("moon", "default"), (None, "default")],
)
def test_normalize_biome(raw, biome):
    assert normalize_biome(raw) == biome


# --- line caps ---

@pytest.mark.parametrize("intensity", ["low", "med", "high"])
def test_line_count_capped_by_intensity(intensity):
    for i in range(15):
        result = generate_procedural_narration(_input(event_id=f"e{i}", intensity=intensity))
        assert 1 <= len(result.line_hashes) <= NARRATOR_LINES_BY_INTENSITY[intensity]


def test_intro_line_leads_and_is_extra():
    result = generate_procedural_narration(_input(intro_opening=True, intensity="low"))
    assert result.text.startswith("The board opens around the gate.")
    assert "opening move" not in result.text.lower()
    assert len(result.line_hashes) <= NARRATOR_LINES_BY_INTENSITY["low"] + 1


# --- suppression ---

def test_suppressed_turn():
    result = generate_procedural_narration(
        _input(suppress_narration_on_error=True, execution_error="target out of range")
    )
    assert result.text == "Action blocked: target out of range. Hold the line."
    assert result.template_id == SUPPRESSED_TEMPLATE_ID
    assert result.debug.suppressed is True


def test_suppressed_turn_default_recovery():
    result = generate_procedural_narration(
        _input(suppress_narration_on_error=True, execution_error="stunned", recovery_beat="")
    )
    assert result.text == "Action blocked: stunned. Hold position."


def test_error_without_suppression_narrates_normally():
    result = generate_procedural_narration(_input(execution_error="stunned"))
    assert result.template_id != SUPPRESSED_TEMPLATE_ID
    assert not result.debug.suppressed


# --- presentation memory ---

def test_presentation_state_not_mutated():
    state = PresentationState(last_verb_keys=["carve", "slam"], recent_line_hashes=["abc"])
    before = state.model_dump()
    result = generate_procedural_narration(_input(presentation_state=state))
    assert state.model_dump() == before
    assert result.debug.picks["attack_verb"] not in {"carve", "slam"}
    assert result.presentation.last_verb_keys[-1] == result.debug.picks["attack_verb"]
    assert result.presentation.recent_line_hashes[0] == "abc"


def test_replay_with_returned_state_avoids_repeated_lines():
    for i in range(10):
        first = generate_procedural_narration(_input(event_id=f"r{i}"))
        second = generate_procedural_narration(_input(event_id=f"r{i}", presentation_state=first.presentation))
        assert not set(first.line_hashes) & set(second.line_hashes)


def test_line_history_is_capped():
    state = PresentationState(recent_line_hashes=[f"h{i}" for i in range(LINE_HISTORY_LIMIT)])
    result = generate_procedural_narration(_input(presentation_state=state))
    assert len(result.presentation.recent_line_hashes) == LINE_HISTORY_LIMIT
    assert result.presentation.recent_line_hashes[-len(result.line_hashes):] == result.line_hashes


# --- board opener ---

def test_board_narration_composed_when_missing():
    result = generate_procedural_narration(_input(board_type="town", hooks=["Find the bell"]))
    assert result.opener_id in load_word_banks().board_openers
    assert result.debug.picks["board_opener"] == result.opener_id
    assert result.presentation.last_board_opener_id == result.opener_id


def test_board_opener_avoids_last():
    state = PresentationState()
    for i in range(8):
        result = generate_procedural_narration(_input(event_id=f"b{i}", board_type="town", presentation_state=state))
        assert result.opener_id != state.last_board_opener_id
        state = result.presentation


def test_supplied_board_narration_is_kept():
    result = generate_procedural_narration(_input(board_narration="The pier creaks."))
    assert result.opener_id is None
    assert "board_opener" not in result.debug.picks


def test_unknown_board_type_skips_board_narration():
    assert generate_procedural_narration(_input(board_type="arena")).opener_id is None


# --- events ---

def test_state_changes_become_events():
    result = generate_procedural_narration(_input(events=[], state_changes=["Gate breached", "Ally down"]))
    assert result.debug.event_ids == ["state_change_0", "state_change_1"]
    assert result.debug.event_count == 2


def test_no_events_uses_turn_event_id():
    result = generate_procedural_narration(_input(events=[]))
    assert result.debug.event_ids == ["evt-1"]


# --- guardrails and failures ---

def test_guardrail_retries_with_other_template(monkeypatch):
    bad = _template("leaky_01", lambda c: "Your opening move lands.")
    monkeypatch.setattr(narrator, "templates_for", _fake_templates(bad))
    result = generate_procedural_narration(_input())
    assert result.debug.guardrail_retries == 1
    assert result.debug.default_pool_used is True
    assert result.template_id in {t.id for t in DEFAULT_TEMPLATES}
    assert not has_forbidden_narration_content(result.text)


def test_guardrail_exhaustion_uses_safe_line(monkeypatch):
    bad = _template("leaky_01", lambda c: "{actor} hits.")
    monkeypatch.setattr(narrator, "templates_for", _fake_templates(bad, honor_exclusions=False))
    result = generate_procedural_narration(_input())
    assert result.template_id == FALLBACK_TEMPLATE_ID
    assert result.text == "Board state shifts around the gate. Hold the line."
    assert result.debug.guardrail_retries == 4
    assert result.debug.template_tags == []
    assert len(result.line_hashes) == 1


def test_default_pool_when_no_templates(monkeypatch):
    monkeypatch.setattr(narrator, "templates_for", _fake_templates())
    result = generate_procedural_narration(_input())
    assert result.debug.default_pool_used is True
    assert result.template_id.startswith("default_")


def test_render_error_is_logged_and_replaced(monkeypatch, caplog):
    def boom(ctx):
        raise KeyError("actor")

    monkeypatch.setattr(narrator, "templates_for", _fake_templates(_template("broken_01", boom)))
    with caplog.at_level(logging.ERROR, logger="mythic.app.core.error_handling"):
        result = generate_procedural_narration(_input(intensity="low"))
    assert result.text == "Board state shifts around the gate. Hold the line."
    record = caplog.records[-1]
    assert record.component == "procedural_narrator"
    assert record.template_id == "broken_01"
    assert record.narration_seed == "camp::sess::evt-1"


def test_empty_pool_error_propagates(monkeypatch):
    def empty(ctx):
        raise EmptyPoolError("no verbs")

    monkeypatch.setattr(narrator, "templates_for", _fake_templates(_template("empty_01", empty)))
    with pytest.raises(EmptyPoolError):
        generate_procedural_narration(_input())


# --- numeric ids ---

def test_numeric_ids_are_stringified():
    result = generate_procedural_narration({"campaign_seed": "c", "session_id": 7, "event_id": 42})
    assert result.debug.seed == "c::7::42"


def test_missing_ids_still_fail_validation():
    with pytest.raises(ValidationError):
        ProceduralNarratorInput(campaign_seed="c", session_id=None, event_id="e")


# --- tone carried into presentation state ---

@pytest.mark.parametrize(
    "tone,last_tone",
    [("tactical", "tactical"), ("heroic", "mythic"), ("comic", "whimsical"), ("mischievous", "whimsical"),
     ("grim", "brutal"), ("dark", "brutal"), ("Whimsical", "whimsical")],
)
def test_presentation_carries_tone(tone, last_tone):
    result = generate_procedural_narration({"campaign_seed": "c", "session_id": "s", "event_id": "e", "tone": tone})
    assert result.presentation.last_tone == last_tone


def test_suppressed_turn_carries_tone():
    result = generate_procedural_narration(
        _input(tone="heroic", suppress_narration_on_error=True, execution_error="stunned")
    )
    assert result.presentation.last_tone == "mythic"


# --- DM voice ---

def test_voice_trace_and_state():
    result = generate_procedural_narration(_input())
    assert result.debug.voice_mode in VOICE_MODES
    assert result.debug.voice_profile is not None
    assert result.presentation.last_voice_mode == result.debug.voice_mode
    assert result.debug.line_history_before == []
    assert result.presentation.recent_lines == result.debug.line_history_after
    tail = result.presentation.recent_lines[-len(result.line_hashes):]
    assert [hash_line(line) for line in tail] == result.line_hashes


def test_voice_lines_reach_the_text():
    hits = 0
    for i in range(20):
        result = generate_procedural_narration(_input(event_id=f"v{i}"))
        hits += any(narrator._cleanup(line) in result.text for line in result.debug.voice_lines)
    assert hits > 0


def test_next_turn_skips_near_duplicate_lines():
    for i in range(10):
        first = generate_procedural_narration(_input(event_id=f"n{i}"))
        second = generate_procedural_narration(_input(event_id=f"n{i}b", presentation_state=first.presentation))
        if second.template_id == FALLBACK_TEMPLATE_ID:
            continue
        fresh = second.presentation.recent_lines[-len(second.line_hashes):]
        for line in fresh:
            for old in first.presentation.recent_lines:
                assert line_similarity(line, old) < 0.76


def test_voice_history_is_capped():
    state = PresentationState()
    for i in range(15):
        state = generate_procedural_narration(_input(event_id=f"h{i}", presentation_state=state)).presentation
    assert len(state.recent_lines) <= 20
    assert len(state.recent_fragments) <= 64


def test_world_tone_and_player_state_feed_the_voice():
    plain = generate_procedural_narration(_input())
    dark = generate_procedural_narration(
        _input(world_tone_vector={"dark": 4, "bad": "x"}, player_hp_pct="3", enemy_threat_level="nan")
    )
    assert dark.debug.voice_profile.cruelty_level >= plain.debug.voice_profile.cruelty_level
    assert dark.debug.seed == plain.debug.seed


def test_input_coerces_voice_fields():
    data = _input(
        world_tone_vector={"Dark": "2", "bad": "x"}, player_hp_pct="nan", player_reputation_tags=" slime bane "
    )
    assert data.world_tone_vector == {"dark": 2.0}
    assert data.player_hp_pct is None
    assert data.player_reputation_tags == ["slime bane"]
