"""Tests for tone rotation."""
from __future__ import annotations

import pytest

from mythic.app.models.presentation import TONE_MODES, ToneSelectionInput
from mythic.app.presentation.tone_rotation import (
    BASE_TONE_WEIGHTS,
    select_tone_mode,
    tone_seed_line,
    tone_weights,
)
from mythic.app.presentation.word_banks import load_word_banks


def _input(**overrides) -> ToneSelectionInput:
    data = {"seed_key": "turn-1"}
    data.update(overrides)
    return ToneSelectionInput(**data)


def test_base_weights_when_calm():
    assert tone_weights(_input()) == BASE_TONE_WEIGHTS


def test_high_tension_favors_brutal_and_tactical():
    weights = tone_weights(_input(tension=80))
    assert weights["brutal"] == pytest.approx(BASE_TONE_WEIGHTS["brutal"] + 0.8)
    assert weights["tactical"] == pytest.approx(BASE_TONE_WEIGHTS["tactical"] + 0.7)
    assert weights["whimsical"] == BASE_TONE_WEIGHTS["whimsical"]


def test_boss_favors_mythic():
    weights = tone_weights(_input(boss_present=True))
    assert weights["mythic"] == pytest.approx(BASE_TONE_WEIGHTS["mythic"] + 1.2)


def test_low_hp_dampens_whimsy():
    weights = tone_weights(_input(player_hp_pct=0.2))
    assert weights["whimsical"] < BASE_TONE_WEIGHTS["whimsical"]
    assert weights["brutal"] == pytest.approx(BASE_TONE_WEIGHTS["brutal"] + 1.0)


def test_region_themes():
    town = tone_weights(_input(region_theme="Harvest Festival"))
    crypt = tone_weights(_input(region_theme="crypt"))
    assert town["whimsical"] > BASE_TONE_WEIGHTS["whimsical"]
    assert crypt["mythic"] > BASE_TONE_WEIGHTS["mythic"]


def test_never_repeats_last_tone():
    for last in TONE_MODES:
        for i in range(25):
            result = select_tone_mode(_input(seed_key=f"seed-{i}", last_tone=last))
            assert result.tone != last


def test_deterministic():
    data = _input(seed_key="stable", tension=70, boss_present=True)
    assert select_tone_mode(data) == select_tone_mode(data)


def test_reason_format():
    result = select_tone_mode(_input(tension=80, player_hp_pct=0.2, boss_present=True))
    assert result.reason == f"{result.tone}:80:20:1"


def test_malformed_input_is_coerced():
    result = select_tone_mode({"seed_key": "x", "tension": "nan", "player_hp_pct": None, "last_tone": "loud"})
    assert result.tone in TONE_MODES
    assert result.reason.endswith(":0:65:0")


def test_tone_seed_line_from_pool():
    banks = load_word_banks()
    for tone in TONE_MODES:
        assert tone_seed_line(tone, "seed") in banks.tone_lines[tone]


def test_unknown_tone_uses_tactical_lines():
    assert tone_seed_line("operatic", "seed") in load_word_banks().tone_lines["tactical"]


@pytest.mark.parametrize("raw,expected", [(1.7, 1.0), (-0.2, 0.0), ("0.3", 0.3), ("inf", 0.65), (True, 0.65)])
def test_player_hp_is_clamped(raw, expected):
    assert _input(player_hp_pct=raw).player_hp_pct == expected
